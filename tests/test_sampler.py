import pytest

from confetti_maker.procedural.particles import init_pool
from confetti_maker.procedural.sampler import (
    FrameState,
    sample_at,
    sample_pool,
    to_record,
)


@pytest.fixture
def pool(small_bounds):
    return init_pool({'randomize_rotation': True, 'randomness': 80}, small_bounds, seed=11)


def test_fall_is_linear(pool):
    for p in pool:
        for f1, f2 in [(0, 1), (0, 9), (3, 7), (2, 50)]:
            dy = sample_at(p, f2).y - sample_at(p, f1).y
            assert dy == pytest.approx(p.pixels_per_frame * (f2 - f1))


def test_frame_zero_is_start(pool):
    p = pool[0]
    state = sample_at(p, 0)
    assert state.y == p.start_y
    assert state.rotation == p.initial_rotation


def test_rotation_is_linear(pool):
    p = pool[0]
    assert sample_at(p, 4).rotation == pytest.approx(p.initial_rotation + 4 * p.rotation_speed)


def test_sampling_is_pure(pool):
    p = pool[0]
    assert sample_at(p, 5) == sample_at(p, 5)
    # Order of sampling does not matter
    later = sample_at(p, 8)
    sample_at(p, 2)
    assert sample_at(p, 8) == later


def test_drift_stays_within_amplitude(pool):
    for p in pool:
        for i in range(10):
            assert abs(sample_at(p, i).x - p.start_x) <= p.drift_amplitude + 1e-9


def test_flip_factor_and_vertical_scale(pool):
    for p in pool:
        state = sample_at(p, 3)
        assert -1.0 <= state.flip_factor <= 1.0
        assert 0.01 <= state.vertical_scale <= 1.0


def test_vertical_scale_never_collapses():
    assert FrameState(0.0, 0.0, 0.0, 0.0).vertical_scale == 0.01
    assert FrameState(0.0, 0.0, 0.0, -0.5).vertical_scale == 0.5


def test_frames_past_the_sequence_are_defined(pool):
    state = sample_at(pool[0], 1000)
    assert state.y > sample_at(pool[0], 999).y


def test_sample_pool_keeps_order(pool):
    sampled = sample_pool(pool, 2)
    assert [p for p, _ in sampled] == pool


def test_record_fields(pool):
    p = pool[0]
    record = to_record(p, sample_at(p, 0))
    assert set(record) == {
        'x', 'y', 'rotation', 'flipFactor', 'shapeType', 'shape',
        'color', 'scale', 'baseWidth', 'baseHeight',
    }
    assert record['shapeType'] in ('rectangle', 'square', 'circle', 'star')
    assert record['color']['type'] == 'solid'
    assert record['shape'] is None


def test_emoji_record(small_bounds):
    p = init_pool({'shape_mode': 'emoji', 'shapes': ['🥳']}, small_bounds, seed=1)[0]
    record = to_record(p, sample_at(p, 0))
    assert record['shapeType'] == 'emoji'
    assert record['shape'] == '🥳'
    assert record['color'] is None
