import numpy as np
import pytest

from confetti_maker.core.config import normalize
from confetti_maker.core.palette import (
    NEUTRAL_GRAY,
    RAINBOW_PALETTE,
    Gradient,
    GradientKind,
    SolidColor,
    hex_to_rgb,
    hsl_to_rgb,
    parse_fill,
    resolve_color_spec,
    resolve_palette,
)


def test_hex_full_and_shorthand():
    assert hex_to_rgb("#FF0000") == (1.0, 0.0, 0.0)
    assert hex_to_rgb("#f80") == pytest.approx((1.0, 0x88 / 255, 0.0))
    assert hex_to_rgb("00ff00") == (0.0, 1.0, 0.0)


def test_invalid_hex_is_gray():
    assert hex_to_rgb("#GGGGGG") == (0.5, 0.5, 0.5)
    assert hex_to_rgb("#12345") == (0.5, 0.5, 0.5)


def test_hsl_conversion():
    assert hsl_to_rgb(0, 100, 50) == pytest.approx((1.0, 0.0, 0.0))
    assert hsl_to_rgb(120, 100, 50) == pytest.approx((0.0, 1.0, 0.0))
    assert hsl_to_rgb(480, 100, 50) == pytest.approx((0.0, 1.0, 0.0))
    assert hsl_to_rgb(0, 0, 100) == pytest.approx((1.0, 1.0, 1.0))


def test_parse_hsla_entry():
    fill = parse_fill({'h': 240, 's': 100, 'l': 50, 'a': 0.5})
    assert isinstance(fill, SolidColor)
    assert fill.rgba == pytest.approx((0.0, 0.0, 1.0, 0.5))


def test_parse_unusable_entry():
    assert parse_fill({'foo': 1}) is None
    assert parse_fill(None) is None


def test_parse_gradient_sorts_and_clamps():
    fill = parse_fill({
        'type': 'radial',
        'stops': [
            {'position': 1.5, 'color': '#000000'},
            {'position': 0.0, 'color': '#ffffff'},
        ],
    })
    assert isinstance(fill, Gradient)
    assert fill.kind is GradientKind.RADIAL
    assert [s.position for s in fill.stops] == [0.0, 1.0]
    assert fill.stops[0].color == (1.0, 1.0, 1.0, 1.0)


def test_gradient_without_stops_is_dropped():
    assert parse_fill({'type': 'linear', 'stops': []}) is None


def test_gradient_kind_aliases():
    assert GradientKind.parse('horizontal') is GradientKind.LINEAR_HORIZONTAL
    assert GradientKind.parse('conic') is GradientKind.ANGULAR
    assert GradientKind.parse('unknown') is GradientKind.LINEAR_VERTICAL


def test_gradient_sampling():
    gradient = parse_fill({
        'type': 'linear',
        'stops': [
            {'position': 0.0, 'color': '#000000'},
            {'position': 1.0, 'color': '#ffffff'},
        ],
    })
    assert gradient.sample(0.5) == pytest.approx((0.5, 0.5, 0.5, 1.0))
    assert gradient.sample(-1) == (0.0, 0.0, 0.0, 1.0)
    assert gradient.sample_array(np.array([0.0, 0.5, 1.0])).shape == (3, 4)


def test_multi_resolves_to_rainbow():
    assert resolve_palette(normalize({})) == list(RAINBOW_PALETTE)


def test_empty_custom_list_is_single_gray():
    palette = resolve_palette(normalize({'colorData': {'isMultiColor': False, 'customColors': []}}))
    assert palette == [NEUTRAL_GRAY]


def test_unusable_entries_are_dropped():
    palette = resolve_color_spec(['#ff0000', {'foo': 1}, 7])
    assert palette == [SolidColor(1.0, 0.0, 0.0, 1.0)]


def test_emoji_and_flag_modes_have_no_palette():
    assert resolve_palette(normalize({'shape_mode': 'emoji', 'colors': ['#ff0000']})) == []
    assert resolve_palette(normalize({'shape_mode': 'flag'})) == []


def test_solid_to_rgba8():
    assert SolidColor(1.0, 0.5, 0.0).to_rgba8() == (255, 128, 0, 255)
