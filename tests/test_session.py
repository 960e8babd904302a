import pytest

from confetti_maker.procedural.particles import particle_count
from confetti_maker.core.config import normalize
from confetti_maker.core.renderer import RasterRenderer
from confetti_maker.session import ConfettiSession, GenerationResult, SessionClosed


@pytest.fixture
def session(recording_renderer, small_bounds):
    return ConfettiSession(renderer=recording_renderer, bounds=small_bounds, seed=1)


def positions(records):
    return [(r['x'], r['y']) for r in records]


def test_preview_scatters_inside_bounds(session, small_bounds):
    records = session.preview({})
    assert len(records) == particle_count(normalize({}), small_bounds)
    assert all(0.0 <= r['y'] <= small_bounds.height for r in records)


def test_style_change_keeps_positions(session):
    first = session.preview({'colors': ['#ff0000']})
    second = session.preview({'colors': ['#0000ff']}, keep_positions=True, change_kind='color')
    assert positions(first) == positions(second)
    assert {r['color']['b'] for r in second} == {1.0}


def test_zoom_change_keeps_positions(session):
    first = session.preview({'zoom': 10})
    second = session.preview({'zoom': 30}, keep_positions=True, change_kind='scale')
    assert positions(first) == positions(second)
    assert {r['scale'] for r in second} == {3.0}


def test_layout_change_forces_new_pool(session, small_bounds):
    session.preview({'amount': 20})
    records = session.preview({'amount': 80}, keep_positions=True, change_kind='color')
    assert len(records) == particle_count(normalize({'amount': 80}), small_bounds)


def test_keep_positions_without_cache(session):
    assert session.preview({}, keep_positions=True, change_kind='color')


def test_without_keep_positions_layout_is_new(session):
    first = session.preview({})
    second = session.preview({})
    assert positions(first) != positions(second)


def test_config_seed_reproduces_preview(session):
    assert session.preview({'seed': 3}) == session.preview({'seed': 3})


def test_sessions_with_same_seed_agree(recording_renderer, small_bounds):
    a = ConfettiSession(renderer=recording_renderer, bounds=small_bounds, seed=9)
    b = ConfettiSession(renderer=recording_renderer, bounds=small_bounds, seed=9)
    assert a.preview({}) == b.preview({})


def test_generate(session, recording_renderer):
    session.preview({})
    result = session.generate({'frame_count': 4, 'frame_delay': 70})
    assert isinstance(result, GenerationResult)
    assert result.frame_count == 4
    assert result.frame_delay == 70
    assert result.skipped == 0
    assert len(recording_renderer.frames) == 4
    # Generation clears the cached preview pool
    assert session.pool is None


def test_empty_frame(session, small_bounds):
    assert session.generate_empty_frame()['bounds'] == small_bounds


def test_closed_session_rejects_requests(session):
    session.close()
    with pytest.raises(SessionClosed):
        session.preview({})


def test_message_preview(session):
    reply = session.handle_message({'type': 'preview-confetti', 'settings': {'amount': 30}})
    assert reply['type'] == 'preview-data'
    assert reply['particles']

    kept = session.handle_message({
        'type': 'preview-confetti',
        'settings': {'amount': 30, 'colors': ['#00ff00']},
        'keepPositions': True,
        'changeKind': 'color',
    })
    assert positions(kept['particles']) == positions(reply['particles'])


def test_message_generate(session):
    reply = session.handle_message({'type': 'generate-confetti', 'settings': {'frameCount': 2}})
    assert reply['type'] == 'generation-complete'
    assert reply['frameCount'] == 2
    assert reply['particleCount'] > 0


def test_message_empty_frame_and_close(session):
    assert session.handle_message({'type': 'generate-empty-frame'}) == {'type': 'empty-frame-complete'}
    assert session.handle_message({'type': 'close-plugin'}) == {'type': 'closed'}
    reply = session.handle_message({'type': 'preview-confetti', 'settings': {}})
    assert reply == {'type': 'error', 'message': "Session is closed"}


def test_message_unknown_type(session):
    reply = session.handle_message({'type': 'dance'})
    assert reply['type'] == 'error'


def test_message_generation_failure(renderer_factory, small_bounds):
    session = ConfettiSession(renderer=renderer_factory(missing_on=lambda p: True), bounds=small_bounds)
    reply = session.handle_message({'type': 'generate-confetti', 'settings': {}})
    assert reply == {'type': 'error', 'message': "font not found"}


def test_message_unreadable_flag_aborts_generation(tmp_path, small_bounds):
    artwork = tmp_path / "broken.png"
    artwork.write_bytes(b"not a png")
    renderer = RasterRenderer(quiet=True)
    session = ConfettiSession(renderer=renderer, bounds=small_bounds, seed=2)

    reply = session.handle_message({
        'type': 'generate-confetti',
        'settings': {'shapeMode': 'flag', 'shapeSelection': [str(artwork)]},
    })

    assert reply['type'] == 'error'
    assert "Could not load flag artwork" in reply['message']
    # One notice, then the sequence stops
    assert len(renderer.messages) == 2
    assert renderer.messages[-1].startswith("Error: Could not load flag artwork")


@pytest.mark.parametrize("msg", [None, "preview-confetti", ['generate-confetti']])
def test_message_must_be_a_mapping(session, msg):
    reply = session.handle_message(msg)
    assert reply['type'] == 'error'
    assert reply['message'].startswith("Malformed message")
