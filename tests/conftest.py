import os
import sys
from pathlib import Path

import pytest

# Ensure repository root is on sys.path for module imports (confetti_maker, main)
ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Headless pygame for preview tests
os.environ.setdefault("SDL_VIDEODRIVER", "dummy")

from confetti_maker.core.renderer import RasterRenderer, Renderer  # noqa: E402
from confetti_maker.procedural.base import Bounds  # noqa: E402


class RecordingRenderer(Renderer):
    """Renderer that keeps every call instead of drawing pixels"""

    def __init__(self, fail_on=None, missing_on=None):
        self.messages = []
        self.frames = []
        self.positions = []
        self.linked = None
        self.fail_on = fail_on
        self.missing_on = missing_on

    def notify(self, message):
        self.messages.append(message)

    def create_frame(self, index, bounds, position):
        self.positions.append(position)
        return {'index': index, 'states': []}

    def draw_particle(self, frame, particle, state):
        from confetti_maker.core.renderer import MissingResourceError, RenderError

        if self.missing_on is not None and self.missing_on(particle):
            raise MissingResourceError("font not found")
        if self.fail_on is not None and self.fail_on(particle):
            raise RenderError("cannot draw")
        frame['states'].append((particle, state))

    def finish_frame(self, frame):
        self.frames.append(frame)

    def link_frames(self, frames, delay_ms, is_preview=False):
        self.linked = (list(frames), delay_ms, is_preview)
        return self.linked

    def create_empty_frame(self, bounds, position=(0.0, 0.0)):
        return {'index': 0, 'states': [], 'bounds': bounds}


@pytest.fixture
def recording_renderer():
    return RecordingRenderer()


@pytest.fixture
def quiet_renderer():
    return RasterRenderer(quiet=True)


@pytest.fixture
def small_bounds():
    # 300x200 -> 20 particles per density unit
    return Bounds(300, 200)


@pytest.fixture
def reference_bounds():
    return Bounds(1440, 1024)


@pytest.fixture
def renderer_factory():
    """Build RecordingRenderers with failure hooks"""
    return RecordingRenderer
