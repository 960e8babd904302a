import numpy as np
import pytest
from PIL import Image

from confetti_maker.core.palette import parse_fill, SolidColor
from confetti_maker.core.renderer import (
    MissingResourceError,
    RasterRenderer,
    RenderedSequence,
    RenderError,
    gradient_field,
)
from confetti_maker.core.palette import GradientKind
from confetti_maker.core.shapes import (
    Circle, Custom, CustomPath, Emoji, Flag, Rectangle, Square, Star, Wave, base_size,
)
from confetti_maker.procedural.base import Bounds
from confetti_maker.procedural.particles import Particle
from confetti_maker.procedural.sampler import FrameState, sample_at
from confetti_maker.procedural.sequence import render_sequence

RED = SolidColor(1.0, 0.0, 0.0)
BOUNDS = Bounds(100, 80)


def make_particle(shape, color=RED, x=30.0, y=20.0, scale=1.0):
    width, height = base_size(shape)
    return Particle(
        shape=shape, base_width=width, base_height=height, color=color, scale=scale,
        start_x=x, start_y=y, pixels_per_frame=5.0,
        initial_rotation=0.0, rotation_speed=0.0,
        drift_amplitude=0.0, drift_speed=0.1, drift_phase=0.0,
        flip_speed=0.0, flip_phase=0.0,
    )


def draw(renderer, particle, state=None):
    frame = renderer.create_frame(0, BOUNDS, (0.0, 0.0))
    renderer.draw_particle(frame, particle, state or sample_at(particle, 0))
    return frame.pixels


def test_frame_background(quiet_renderer):
    pixels = quiet_renderer.create_frame(0, BOUNDS, (0.0, 0.0)).pixels
    assert pixels.shape == (80, 100, 4)
    assert tuple(pixels[0, 0]) == (250, 250, 250, 255)


def test_empty_frame_has_no_particles(quiet_renderer):
    pixels = quiet_renderer.create_empty_frame(BOUNDS)
    assert (pixels == pixels[0, 0]).all()


def test_circle_is_filled_at_its_center(quiet_renderer):
    pixels = draw(quiet_renderer, make_particle(Circle()))
    # 20x20 circle at (30, 20) -> center (40, 30)
    assert tuple(pixels[30, 40]) == (255, 0, 0, 255)
    # Corner of its bounding box stays background
    assert tuple(pixels[20, 30]) == (250, 250, 250, 255)


@pytest.mark.parametrize("shape", [Rectangle(), Square(), Star(), Wave()])
def test_standard_shapes_draw(quiet_renderer, shape):
    pixels = draw(quiet_renderer, make_particle(shape))
    red = (pixels[:, :, 0] == 255) & (pixels[:, :, 1] < 50)
    assert red.any()


def test_rotation_and_flip(quiet_renderer):
    particle = make_particle(Rectangle())
    pixels = draw(quiet_renderer, particle, FrameState(30.0, 20.0, 45.0, 0.0))
    assert (pixels != pixels[0, 0]).any()


def test_particle_partly_off_frame(quiet_renderer):
    pixels = draw(quiet_renderer, make_particle(Square(), x=-10.0, y=-10.0))
    assert tuple(pixels[0, 0])[:3] == (255, 0, 0)


def test_particle_fully_off_frame(quiet_renderer):
    pixels = draw(quiet_renderer, make_particle(Circle(), y=-500.0))
    assert (pixels == pixels[0, 0]).all()


def test_gradient_fill(quiet_renderer):
    gradient = parse_fill({
        'type': 'linear',
        'stops': [{'position': 0, 'color': '#000000'}, {'position': 1, 'color': '#ffffff'}],
    })
    pixels = draw(quiet_renderer, make_particle(Square(), color=gradient, scale=2.0))
    # 40x40 square at (30, 20): darker at the top than at the bottom
    assert pixels[24, 50, 0] < pixels[56, 50, 0]


def test_gradient_field_ranges():
    for kind in GradientKind:
        field = gradient_field(kind, 8, 6)
        assert field.shape == (6, 8)
        assert field.min() >= 0.0 and field.max() <= 1.0


def test_builtin_flag(quiet_renderer):
    pixels = draw(quiet_renderer, make_particle(Flag('fr'), scale=2.0))
    # 48x48 tricolour at (30, 20)
    assert tuple(pixels[44, 34])[:3] == (0, 85, 164)
    assert tuple(pixels[44, 74])[:3] == (239, 65, 53)


def test_flag_artwork_from_directory(tmp_path):
    Image.new('RGBA', (8, 8), (0, 200, 0, 255)).save(tmp_path / "xx.png")
    renderer = RasterRenderer(flag_dir=tmp_path, quiet=True)
    pixels = draw(renderer, make_particle(Flag('xx')))
    assert tuple(pixels[32, 42])[:3] == (0, 200, 0)


def test_missing_flag_artwork(quiet_renderer):
    with pytest.raises(MissingResourceError):
        draw(quiet_renderer, make_particle(Flag('zz')))


def test_unreadable_flag_artwork(tmp_path):
    (tmp_path / "xx.png").write_bytes(b"not a png")
    renderer = RasterRenderer(flag_dir=tmp_path, quiet=True)
    with pytest.raises(MissingResourceError, match="Could not load flag artwork"):
        draw(renderer, make_particle(Flag('xx')))


def test_missing_emoji_font(tmp_path):
    renderer = RasterRenderer(emoji_font=tmp_path / "missing.ttf", quiet=True)
    with pytest.raises(MissingResourceError):
        draw(renderer, make_particle(Emoji('🎉'), color=None))


def test_custom_shape(quiet_renderer):
    triangle = Custom(CustomPath('M0 24 L12 0 L24 24 Z'))
    pixels = draw(quiet_renderer, make_particle(triangle, scale=2.0))
    # 48x48 box at (30, 20): the bottom middle is inside, the top corners are not
    assert tuple(pixels[62, 54])[:3] == (255, 0, 0)
    assert tuple(pixels[22, 32]) == (250, 250, 250, 255)


def test_invalid_custom_shape_is_a_render_error(quiet_renderer):
    bad = Custom(CustomPath('M0 0 A5 5 0 0 1 10 10'))
    with pytest.raises(RenderError):
        draw(quiet_renderer, make_particle(bad))


def test_missing_resource_is_a_render_error():
    assert issubclass(MissingResourceError, RenderError)


def test_notify_records_messages(quiet_renderer, capsys):
    quiet_renderer.notify("hello")
    assert quiet_renderer.messages == ["hello"]
    assert capsys.readouterr().out == ""

    loud = RasterRenderer()
    loud.notify("shown")
    assert "shown" in capsys.readouterr().out


def test_render_frame_convenience(quiet_renderer):
    particle = make_particle(Circle())
    frame = quiet_renderer.render_frame(BOUNDS, [(particle, sample_at(particle, 0))])
    assert frame.drawn == 1


def test_render_sequence_output(quiet_renderer):
    sequence = render_sequence({'frame_count': 3, 'frame_delay': 80}, Bounds(120, 80), quiet_renderer, seed=1)
    assert isinstance(sequence, RenderedSequence)
    assert len(sequence) == 3
    assert sequence.delay_ms == 80
    assert all(f.shape == (80, 120, 4) and f.dtype == np.uint8 for f in sequence.frames)
    assert sequence.positions == [(0.0, 0.0), (160.0, 0.0), (320.0, 0.0)]
    assert quiet_renderer.messages[0].startswith("Generating ")
