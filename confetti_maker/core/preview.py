"""
Live Confetti Preview Window

Interactive preview of a confetti layout without exporting anything.

Features:
- Representative preview frame, rendered from the session's preview pool
- Style tweaks that keep particle positions (colors, size, flutter)
- Full re-layout on demand
- Playback of the preview pool falling, frame by frame
- Playback of an already rendered sequence

Controls:
    SPACE       - Play/pause
    LEFT/RIGHT  - Previous/next frame
    HOME        - First frame
    C           - Re-roll colors (positions kept)
    Z/X         - Zoom (particle size) down/up (positions kept)
    F/G         - Flutter down/up (positions kept)
    R           - New layout
    +/-         - View scale in/out
    S           - Save current frame as PNG
    E           - Export (callback)
    H           - Show/hide help
    ESC/Q       - Quit

Requires: pygame (pip install pygame)
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

import numpy as np

try:
    import pygame
    from pygame.locals import *
    PYGAME_AVAILABLE = True
except ImportError:
    PYGAME_AVAILABLE = False
    pygame = None

from .config import NUMERIC_FIELDS, ConfettiConfig, normalize
from .renderer import RasterRenderer, RenderError
from ..procedural.restyle import ChangeKind
from ..procedural.sampler import sample_pool


# =============================================================================
# Preview Configuration
# =============================================================================

@dataclass
class PreviewConfig:
    """Configuration for the preview window"""
    # Window settings
    window_width: int = 960
    window_height: int = 720
    window_title: str = "Confetti Preview"
    background_color: Tuple[int, int, int] = (40, 40, 40)

    # Playback settings
    fps: int = 60
    loop: bool = True

    # View settings
    initial_scale: float = 0.6
    min_scale: float = 0.1
    max_scale: float = 4.0
    scale_step: float = 1.25

    # Setting steps for the restyle keys
    zoom_step: float = 5.0
    flutter_step: float = 10.0

    # Display settings
    show_info: bool = True
    show_help: bool = False


def step_setting(settings: Dict[str, Any], name: str, delta: float) -> Dict[str, Any]:
    """
    Return settings with one numeric field moved by delta, kept in range.

    The current value is read through normalize() so aliases and invalid
    values behave exactly as they would for the engine.
    """
    min_val, max_val, _ = NUMERIC_FIELDS[name]
    current = getattr(normalize(settings), name)
    updated = dict(settings)
    updated[name] = min(max_val, max(min_val, current + delta))
    return updated


# =============================================================================
# Preview Window
# =============================================================================

class PreviewWindow:
    """
    Live preview bound to a ConfettiSession.

    Example:
        session = ConfettiSession(bounds=Bounds(1440, 1024))
        window = PreviewWindow(session, {'amount': 60})
        window.run()

    Args:
        session: Session whose preview pool is displayed
        settings: Raw settings the preview starts from
        config: Window configuration
        on_export: Callback receiving the current raw settings
    """

    def __init__(
        self,
        session,
        settings: Optional[Dict[str, Any]] = None,
        config: Optional[PreviewConfig] = None,
        on_export: Optional[Callable[[Dict[str, Any]], None]] = None
    ):
        if not PYGAME_AVAILABLE:
            raise ImportError(
                "pygame is required for preview. Install with: pip install pygame"
            )

        self.session = session
        self.settings: Dict[str, Any] = dict(settings or {})
        self.config = config or PreviewConfig()
        self.on_export = on_export
        self.renderer = RasterRenderer(quiet=True)

        # State
        self.current_frame = 0
        self.playing = False
        self.scale = self.config.initial_scale
        self.frame_time = 0.0
        self.surfaces: Dict[int, Any] = {}
        self.skipped = 0
        self.last_error: Optional[str] = None

        self.apply(keep_positions=False)
        self._init_pygame()

    @property
    def confetti_config(self) -> ConfettiConfig:
        return normalize(self.settings)

    @property
    def frame_count(self) -> int:
        return self.confetti_config.frame_count

    def apply(self, keep_positions: bool = True, change_kind: ChangeKind = ChangeKind.ALL) -> List[Dict[str, Any]]:
        """Refresh the session preview and drop cached surfaces"""
        records = self.session.preview(self.settings, keep_positions=keep_positions, change_kind=change_kind)
        self.surfaces.clear()
        self.skipped = 0
        self.last_error = None
        return records

    def tweak(self, name: str, delta: float, change_kind: ChangeKind) -> None:
        self.settings = step_setting(self.settings, name, delta)
        self.apply(keep_positions=True, change_kind=change_kind)

    def frame_pixels(self, index: int) -> np.ndarray:
        """Render the preview pool at one frame index, skipping undrawable particles"""
        frame = self.renderer.create_frame(index, self.session.bounds, (0.0, 0.0))
        for particle, state in sample_pool(self.session.pool or [], index):
            try:
                self.renderer.draw_particle(frame, particle, state)
            except RenderError as e:
                self.skipped += 1
                self.last_error = str(e)
        self.renderer.finish_frame(frame)
        return frame.pixels

    def _init_pygame(self):
        pygame.init()
        pygame.display.set_caption(self.config.window_title)

        self.screen = pygame.display.set_mode(
            (self.config.window_width, self.config.window_height),
            pygame.RESIZABLE
        )
        self.clock = pygame.time.Clock()
        self.font = pygame.font.Font(None, 20)

    def _surface(self, index: int):
        surf = self.surfaces.get(index)
        if surf is None:
            surf = array_to_surface(self.frame_pixels(index))
            self.surfaces[index] = surf
        return surf

    def run(self):
        """Run the preview window main loop"""
        running = True

        while running:
            dt = self.clock.tick(self.config.fps) / 1000.0

            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN:
                    running = self._handle_key(event.key)
                elif event.type == pygame.VIDEORESIZE:
                    self.config.window_width = event.w
                    self.config.window_height = event.h
                    self.screen = pygame.display.set_mode((event.w, event.h), pygame.RESIZABLE)

            if self.playing:
                self.frame_time += dt * 1000.0
                if self.frame_time >= self.confetti_config.frame_delay:
                    self.frame_time = 0.0
                    self._advance()

            self._render()
            pygame.display.flip()

        pygame.quit()

    def _advance(self):
        self.current_frame += 1
        if self.current_frame >= self.frame_count:
            if self.config.loop:
                self.current_frame = 0
            else:
                self.current_frame = self.frame_count - 1
                self.playing = False

    def _handle_key(self, key: int) -> bool:
        """Handle keyboard input. Returns False to quit."""
        if key in (K_ESCAPE, K_q):
            return False

        elif key == K_SPACE:
            self.playing = not self.playing
        elif key == K_LEFT:
            self.current_frame = max(0, self.current_frame - 1)
            self.playing = False
        elif key == K_RIGHT:
            self.current_frame = min(self.frame_count - 1, self.current_frame + 1)
            self.playing = False
        elif key == K_HOME:
            self.current_frame = 0

        # Style tweaks keep the layout
        elif key == K_c:
            self.apply(keep_positions=True, change_kind=ChangeKind.COLOR)
        elif key == K_z:
            self.tweak('zoom', -self.config.zoom_step, ChangeKind.SCALE)
        elif key == K_x:
            self.tweak('zoom', self.config.zoom_step, ChangeKind.SCALE)
        elif key == K_f:
            self.tweak('flutter', -self.config.flutter_step, ChangeKind.ROTATION_OR_FLUTTER)
        elif key == K_g:
            self.tweak('flutter', self.config.flutter_step, ChangeKind.ROTATION_OR_FLUTTER)
        elif key == K_r:
            self.apply(keep_positions=False)
            self.current_frame = 0

        # View scale
        elif key in (K_PLUS, K_EQUALS, K_KP_PLUS):
            self.scale = min(self.config.max_scale, self.scale * self.config.scale_step)
        elif key in (K_MINUS, K_KP_MINUS):
            self.scale = max(self.config.min_scale, self.scale / self.config.scale_step)

        elif key == K_h:
            self.config.show_help = not self.config.show_help
        elif key == K_i:
            self.config.show_info = not self.config.show_info
        elif key == K_s:
            self._save_frame()
        elif key == K_e:
            self._export()

        return True

    def _render(self):
        self.screen.fill(self.config.background_color)
        self._blit_centered(self._surface(self.current_frame))

        if self.config.show_info:
            self._render_info()
        if self.config.show_help:
            self._render_help()
        self._render_timeline()

    def _blit_centered(self, surf):
        scaled_w = max(1, int(surf.get_width() * self.scale))
        scaled_h = max(1, int(surf.get_height() * self.scale))
        scaled = pygame.transform.smoothscale(surf, (scaled_w, scaled_h))
        x = (self.config.window_width - scaled_w) // 2
        y = (self.config.window_height - scaled_h) // 2
        self.screen.blit(scaled, (x, y))

    def _render_info(self):
        cfg = self.confetti_config
        lines = [
            f"Frame: {self.current_frame + 1}/{cfg.frame_count}",
            f"Particles: {len(self.session.pool or [])}",
            f"Zoom: {cfg.zoom:.0f}  Flutter: {cfg.flutter:.0f}",
            "PLAYING" if self.playing else "PAUSED",
        ]
        if self.last_error:
            lines.append(f"Skipped {self.skipped}: {self.last_error}")
        y = 10
        for line in lines:
            self._render_text(line, (10, y))
            y += 20

    def _render_help(self):
        help_text = [
            "CONTROLS:",
            "",
            "SPACE      Play/Pause",
            "LEFT/RIGHT Prev/Next frame",
            "C          New colors",
            "Z/X        Smaller/Bigger",
            "F/G        Less/More flutter",
            "R          New layout",
            "+/-        View scale",
            "",
            "S          Save frame",
            "E          Export",
            "H          Hide this help",
            "ESC/Q      Quit",
        ]

        overlay = pygame.Surface((280, len(help_text) * 20 + 20), pygame.SRCALPHA)
        overlay.fill((0, 0, 0, 180))

        x = (self.config.window_width - 280) // 2
        y = (self.config.window_height - len(help_text) * 20) // 2
        self.screen.blit(overlay, (x, y))

        for i, line in enumerate(help_text):
            self._render_text(line, (x + 20, y + 10 + i * 20), color=(255, 255, 255))

    def _render_timeline(self):
        h = 30
        y = self.config.window_height - h
        w = self.config.window_width

        pygame.draw.rect(self.screen, (30, 30, 30), (0, y, w, h))

        progress = (self.current_frame + 1) / max(1, self.frame_count)
        pygame.draw.rect(self.screen, (80, 80, 80), (10, y + 10, w - 20, 10))
        pygame.draw.rect(self.screen, (100, 180, 255), (10, y + 10, int((w - 20) * progress), 10))

    def _render_text(self, text: str, pos: Tuple[int, int], color: Tuple[int, int, int] = (200, 200, 200)):
        shadow = self.font.render(text, True, (0, 0, 0))
        self.screen.blit(shadow, (pos[0] + 1, pos[1] + 1))
        self.screen.blit(self.font.render(text, True, color), pos)

    def _save_frame(self):
        filename = f"confetti_preview_{self.current_frame:04d}.png"
        pygame.image.save(self._surface(self.current_frame), filename)
        print(f"Saved: {filename}")

    def _export(self):
        if self.on_export:
            self.on_export(dict(self.settings))
            print("Export triggered")
        else:
            print("No export handler configured")


# =============================================================================
# Sequence Player
# =============================================================================

class SequencePlayer:
    """
    Plays back already rendered frames (e.g. a RenderedSequence).
    """

    def __init__(self, frames: List[np.ndarray], delay_ms: int = 50, config: Optional[PreviewConfig] = None):
        if not PYGAME_AVAILABLE:
            raise ImportError(
                "pygame is required for preview. Install with: pip install pygame"
            )
        if not frames:
            raise ValueError("No frames to play")

        self.frames = frames
        self.delay_ms = max(1, int(delay_ms))
        self.config = config or PreviewConfig()
        self.current_frame = 0
        self.playing = True

        pygame.init()
        pygame.display.set_caption(self.config.window_title)
        self.screen = pygame.display.set_mode((self.config.window_width, self.config.window_height))
        self.clock = pygame.time.Clock()
        self.surfaces = [array_to_surface(f) for f in frames]

    def run(self):
        running = True
        elapsed = 0.0

        while running:
            elapsed += self.clock.tick(self.config.fps)

            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN:
                    if event.key in (K_ESCAPE, K_q):
                        running = False
                    elif event.key == K_SPACE:
                        self.playing = not self.playing

            if self.playing and elapsed >= self.delay_ms:
                elapsed = 0.0
                self.current_frame = (self.current_frame + 1) % len(self.surfaces)

            self.screen.fill(self.config.background_color)
            surf = self.surfaces[self.current_frame]
            scale = min(
                self.config.window_width / surf.get_width(),
                self.config.window_height / surf.get_height(),
            )
            size = (max(1, int(surf.get_width() * scale)), max(1, int(surf.get_height() * scale)))
            scaled = pygame.transform.smoothscale(surf, size)
            self.screen.blit(scaled, ((self.config.window_width - size[0]) // 2, (self.config.window_height - size[1]) // 2))
            pygame.display.flip()

        pygame.quit()


# =============================================================================
# Helpers
# =============================================================================

def array_to_surface(array: np.ndarray):
    """Convert an RGBA numpy array to a pygame surface"""
    if array.shape[2] == 3:
        rgba = np.zeros((*array.shape[:2], 4), dtype=np.uint8)
        rgba[:, :, :3] = array
        rgba[:, :, 3] = 255
        array = rgba

    h, w = array.shape[:2]
    surf = pygame.Surface((w, h), pygame.SRCALPHA)
    pygame.surfarray.pixels3d(surf)[:] = array[:, :, :3].swapaxes(0, 1)
    pygame.surfarray.pixels_alpha(surf)[:] = array[:, :, 3].swapaxes(0, 1)
    return surf


def preview_settings(session, settings: Optional[Dict[str, Any]] = None, title: str = "Confetti Preview") -> None:
    """Open a live preview window for settings"""
    if not PYGAME_AVAILABLE:
        print("Preview requires pygame. Install with: pip install pygame")
        print("Alternatively, export to GIF and view in external program.")
        return

    PreviewWindow(session, settings, PreviewConfig(window_title=title)).run()


def preview_sequence(frames: List[np.ndarray], delay_ms: int = 50, title: str = "Confetti Sequence") -> None:
    """Play back rendered frames in a window"""
    if not PYGAME_AVAILABLE:
        print("Preview requires pygame. Install with: pip install pygame")
        print("Alternatively, export to GIF and view in external program.")
        return

    SequencePlayer(frames, delay_ms, PreviewConfig(window_title=title)).run()


def check_pygame_available() -> bool:
    """Check if pygame is available for preview"""
    return PYGAME_AVAILABLE
