import pytest

from confetti_maker.core.config import ShapeMode
from confetti_maker.core.shapes import (
    REFERENCE_SIZE,
    Circle,
    Custom,
    CustomPath,
    Emoji,
    Flag,
    Rectangle,
    Star,
    base_size,
    flatten_path,
    make_shape,
    parse_viewbox,
    shape_type,
    star_points,
    takes_fill,
    wave_polygon,
)


def test_make_standard_shapes():
    assert make_shape('circle', ShapeMode.STANDARD) == Circle()
    assert make_shape('RECTANGLE', ShapeMode.STANDARD) == Rectangle()
    assert make_shape('hexagon', ShapeMode.STANDARD) is None


def test_make_custom_needs_path():
    assert make_shape('custom', ShapeMode.STANDARD) is None
    path = CustomPath('M0 0 L1 0 L1 1 Z')
    assert make_shape('custom', ShapeMode.STANDARD, path) == Custom(path)


def test_emoji_and_flag_modes_wrap_identifier():
    assert make_shape('🎉', ShapeMode.EMOJI) == Emoji('🎉')
    assert make_shape('fr', ShapeMode.FLAG) == Flag('fr')


def test_shape_type_and_fill():
    assert shape_type(Star()) == 'star'
    assert shape_type(Emoji('✨')) == 'emoji'
    assert takes_fill(Circle())
    assert not takes_fill(Emoji('✨'))
    assert not takes_fill(Flag('de'))


def test_base_sizes():
    assert base_size(Circle()) == (REFERENCE_SIZE, REFERENCE_SIZE)
    assert base_size(Rectangle()) == pytest.approx((30.0, 18.0))
    assert base_size(Flag('jp')) == pytest.approx((24.0, 24.0))


def test_star_points():
    points = star_points(10, 10, 10, 10)
    assert len(points) == 10
    # First vertex straight up, outer radius
    assert points[0] == pytest.approx((10.0, 0.0))


def test_wave_polygon_stays_in_box():
    polygon = wave_polygon(20, 28)
    assert all(0.0 <= x <= 20.0 and 0.0 <= y <= 28.0 for x, y in polygon)


def test_flatten_lines():
    polygons = flatten_path('M0 0 L10 0 L10 10 Z')
    assert polygons == [[(0.0, 0.0), (10.0, 0.0), (10.0, 10.0)]]


def test_flatten_relative_and_hv():
    polygons = flatten_path('m2 2 h5 v5 h-5 z')
    assert polygons == [[(2.0, 2.0), (7.0, 2.0), (7.0, 7.0), (2.0, 7.0)]]


def test_flatten_implicit_lineto_after_move():
    polygons = flatten_path('M0 0 10 0 10 10')
    assert polygons == [[(0.0, 0.0), (10.0, 0.0), (10.0, 10.0)]]


def test_flatten_curves_end_on_endpoint():
    polygons = flatten_path('M0 0 C0 10 10 10 10 0 Q15 -5 20 0 Z', curve_steps=8)
    assert len(polygons) == 1
    points = polygons[0]
    assert len(points) == 1 + 8 + 8
    assert points[8] == pytest.approx((10.0, 0.0))
    assert points[-1] == pytest.approx((20.0, 0.0))


def test_flatten_multiple_subpaths():
    polygons = flatten_path('M0 0 L1 0 L1 1 Z M5 5 L6 5 L6 6 Z')
    assert len(polygons) == 2


@pytest.mark.parametrize("data", [
    '10 10 L5 5',                # coordinates before any command
    'M0 0 L10',                  # missing coordinate
    'M0 0 A5 5 0 0 1 10 10',     # arcs unsupported
    'M0 0 L1 1 Z 5',             # number after closepath
])
def test_flatten_rejects_malformed(data):
    with pytest.raises(ValueError):
        flatten_path(data)


def test_parse_viewbox():
    assert parse_viewbox('0 0 24 24') == (0.0, 0.0, 24.0, 24.0)
    assert parse_viewbox([0, 0, 10, 5]) == (0.0, 0.0, 10.0, 5.0)
    assert parse_viewbox('0 0 0 24') is None
    assert parse_viewbox('a b c d') is None


def test_custom_path_from_raw():
    assert CustomPath.from_raw('  ') is None
    assert CustomPath.from_raw({'d': 'M0 0 L1 1'}) == CustomPath('M0 0 L1 1')
    assert CustomPath.from_raw(None) is None
