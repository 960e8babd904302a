"""
Confetti Renderer - turns sampled particle states into frames.

The engine only talks to the abstract Renderer. RasterRenderer is the
bundled implementation: it draws every particle with Pillow into RGBA
frames (numpy arrays), ready for the exporter or the preview window.

Drawing pipeline per particle:
1. Rasterize the shape mask at the particle's scaled size (supersampled)
2. Fill it (solid color, gradient, glyph or flag artwork)
3. Squash vertically by the flip factor
4. Rotate around the center
5. Composite onto the frame
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

import numpy as np
from PIL import Image, ImageDraw, ImageFont

from .palette import Gradient, GradientKind, SolidColor
from .shapes import (
    Circle, Custom, Emoji, Flag, Rectangle, Square, Star, Wave,
    flatten_path, star_points, wave_polygon,
)


class RenderError(Exception):
    """A single particle could not be drawn"""


class MissingResourceError(RenderError):
    """An external resource (font, flag artwork, ...) is unavailable"""


BACKGROUND = (0.98, 0.98, 0.98, 1.0)
SUPERSAMPLE = 2


# Built-in flag artwork: orientation + stripe colors (RGB 0-255)
BUILTIN_FLAGS: Dict[str, Tuple[str, Tuple[Tuple[int, int, int], ...]]] = {
    'fr': ('vertical', ((0, 85, 164), (255, 255, 255), (239, 65, 53))),
    'it': ('vertical', ((0, 146, 70), (255, 255, 255), (206, 43, 55))),
    'ie': ('vertical', ((22, 155, 98), (255, 255, 255), (255, 136, 62))),
    'be': ('vertical', ((0, 0, 0), (253, 218, 36), (239, 51, 64))),
    'de': ('horizontal', ((0, 0, 0), (221, 0, 0), (255, 206, 0))),
    'nl': ('horizontal', ((174, 28, 40), (255, 255, 255), (33, 70, 139))),
    'ru': ('horizontal', ((255, 255, 255), (0, 57, 166), (213, 43, 30))),
    'at': ('horizontal', ((200, 16, 46), (255, 255, 255), (200, 16, 46))),
    'ua': ('horizontal', ((0, 87, 183), (255, 215, 0))),
    'pl': ('horizontal', ((255, 255, 255), (220, 20, 60))),
    'id': ('horizontal', ((206, 17, 38), (255, 255, 255))),
    'jp': ('disc', ((255, 255, 255), (188, 0, 45))),
}


# =============================================================================
# Renderer contract
# =============================================================================

@dataclass
class RasterFrame:
    """A frame being populated by RasterRenderer"""
    index: int
    position: Tuple[float, float]
    image: Image.Image
    drawn: int = 0
    skipped: int = 0

    @property
    def pixels(self) -> np.ndarray:
        return np.array(self.image, dtype=np.uint8)


@dataclass
class RenderedSequence:
    """Frames in playback order, with their side-by-side layout and delay"""
    frames: List[np.ndarray]
    delay_ms: int
    positions: List[Tuple[float, float]] = field(default_factory=list)
    is_preview: bool = False

    def __len__(self):
        return len(self.frames)


class Renderer(ABC):
    """
    Collaborator that materializes frames.

    The orchestrator calls, in order: begin_sequence, then per frame
    create_frame / draw_particle (many) / finish_frame, then link_frames.
    """

    def notify(self, message: str) -> None:
        """Show a one-line, user-visible notice"""
        print(message)

    def begin_sequence(self, bounds, frame_count: int, is_preview: bool = False) -> None:
        pass

    @abstractmethod
    def create_frame(self, index: int, bounds, position: Tuple[float, float]) -> Any:
        """Create an empty frame; returns a handle passed to draw_particle"""

    @abstractmethod
    def draw_particle(self, frame: Any, particle, state) -> None:
        """Materialize one particle state. Raises RenderError on failure."""

    def finish_frame(self, frame: Any) -> None:
        pass

    @abstractmethod
    def link_frames(self, frames: List[Any], delay_ms: int, is_preview: bool = False) -> Any:
        """Chain finished frames in playback order; returns the output"""

    @abstractmethod
    def create_empty_frame(self, bounds, position: Tuple[float, float] = (0.0, 0.0)) -> Any:
        """A bounded region with no particles"""

    def render_frame(self, bounds, items: Sequence[Tuple[Any, Any]], index: int = 0) -> Any:
        """Convenience: create, populate and finish a single frame"""
        frame = self.create_frame(index, bounds, (0.0, 0.0))
        for particle, state in items:
            self.draw_particle(frame, particle, state)
        self.finish_frame(frame)
        return frame


# =============================================================================
# Raster implementation
# =============================================================================

class RasterRenderer(Renderer):
    """
    Draws particles into RGBA images with Pillow.

    Args:
        background: Frame fill as 0-1 RGBA
        emoji_font: Path to a TrueType/OpenType font used for emoji glyphs
                    (Pillow's default font when None)
        flag_dir: Directory searched for "<ref>.png" flag artwork
        quiet: Record notifications without printing them
    """

    def __init__(
        self,
        background: Tuple[float, float, float, float] = BACKGROUND,
        emoji_font: Optional[Union[str, Path]] = None,
        flag_dir: Optional[Union[str, Path]] = None,
        quiet: bool = False
    ):
        self.background = tuple(int(round(c * 255)) for c in background)
        self.emoji_font = Path(emoji_font) if emoji_font else None
        self.flag_dir = Path(flag_dir) if flag_dir else None
        self.quiet = quiet
        self.messages: List[str] = []

        self._tiles: Dict[tuple, Image.Image] = {}
        self._fonts: Dict[int, Any] = {}
        self._polygons: Dict[Any, list] = {}

    # ---- Renderer contract ----

    def notify(self, message: str) -> None:
        self.messages.append(message)
        if not self.quiet:
            print(message)

    def begin_sequence(self, bounds, frame_count: int, is_preview: bool = False) -> None:
        self._tiles.clear()

    def create_frame(self, index: int, bounds, position: Tuple[float, float]) -> RasterFrame:
        image = Image.new('RGBA', bounds.size, self.background)
        return RasterFrame(index=index, position=position, image=image)

    def draw_particle(self, frame: RasterFrame, particle, state) -> None:
        width = max(1, int(round(particle.width)))
        height = max(1, int(round(particle.height)))

        tile = self._tile(particle, width, height)

        # Flip: squash vertically around the center
        squashed_h = max(1, int(round(height * state.vertical_scale)))
        if squashed_h != height:
            tile = tile.resize((width, squashed_h), Image.Resampling.BILINEAR)

        if state.rotation % 360:
            tile = tile.rotate(-state.rotation, resample=Image.Resampling.BICUBIC, expand=True)

        # Keep the particle's center where the unrotated box center would be
        cx = state.x + width / 2
        cy = state.y + height / 2
        left = int(round(cx - tile.width / 2))
        top = int(round(cy - tile.height / 2))

        _composite(frame.image, tile, left, top)
        frame.drawn += 1

    def link_frames(self, frames: List[RasterFrame], delay_ms: int, is_preview: bool = False) -> RenderedSequence:
        return RenderedSequence(
            frames=[f.pixels for f in frames],
            delay_ms=int(delay_ms),
            positions=[f.position for f in frames],
            is_preview=is_preview,
        )

    def create_empty_frame(self, bounds, position: Tuple[float, float] = (0.0, 0.0)) -> np.ndarray:
        return self.create_frame(0, bounds, position).pixels

    # ---- Tiles ----

    def _tile(self, particle, width: int, height: int) -> Image.Image:
        key = (particle.shape, particle.color, width, height)
        tile = self._tiles.get(key)
        if tile is None:
            tile = self._draw_shape(particle.shape, particle.color, width, height)
            self._tiles[key] = tile
        return tile

    def _draw_shape(self, shape, color, width: int, height: int) -> Image.Image:
        if isinstance(shape, Emoji):
            return self._draw_emoji(shape.glyph, width, height)
        if isinstance(shape, Flag):
            return self._draw_flag(shape.ref, width, height)

        mask = self._shape_mask(shape, width, height)
        return _apply_fill(mask, color)

    def _shape_mask(self, shape, width: int, height: int) -> Image.Image:
        """Anti-aliased coverage mask ("L") of a filled shape"""
        ss_w, ss_h = width * SUPERSAMPLE, height * SUPERSAMPLE
        mask = Image.new('L', (ss_w, ss_h), 0)
        draw = ImageDraw.Draw(mask)
        box = (0, 0, ss_w - 1, ss_h - 1)

        if isinstance(shape, (Rectangle, Square)):
            radius = int(min(ss_w, ss_h) * shape.corner_ratio)
            draw.rounded_rectangle(box, radius=radius, fill=255)
        elif isinstance(shape, Circle):
            draw.ellipse(box, fill=255)
        elif isinstance(shape, Star):
            draw.polygon(
                star_points(ss_w / 2, ss_h / 2, ss_w / 2, ss_h / 2, shape.points, shape.inner_radius),
                fill=255,
            )
        elif isinstance(shape, Wave):
            draw.polygon(wave_polygon(ss_w, ss_h, shape.periods), fill=255)
        elif isinstance(shape, Custom):
            for polygon in self._custom_polygons(shape, ss_w, ss_h):
                draw.polygon(polygon, fill=255)
        else:
            raise RenderError(f"Unsupported shape: {shape!r}")

        return mask.resize((width, height), Image.Resampling.LANCZOS)

    def _custom_polygons(self, shape: Custom, width: int, height: int) -> list:
        path = shape.path
        if path not in self._polygons:
            try:
                self._polygons[path] = flatten_path(path.data)
            except ValueError as e:
                raise RenderError(f"Invalid custom shape path: {e}")

        vx, vy, vw, vh = path.viewbox
        return [
            [((x - vx) / vw * width, (y - vy) / vh * height) for x, y in polygon]
            for polygon in self._polygons[path]
        ]

    def _font(self, size: int):
        font = self._fonts.get(size)
        if font is not None:
            return font

        if self.emoji_font is not None:
            if not self.emoji_font.exists():
                raise MissingResourceError(f"Emoji font not found: {self.emoji_font}")
            try:
                font = ImageFont.truetype(str(self.emoji_font), size)
            except OSError as e:
                raise MissingResourceError(f"Could not load emoji font {self.emoji_font}: {e}")
        else:
            font = ImageFont.load_default(size=size)

        self._fonts[size] = font
        return font

    def _draw_emoji(self, glyph: str, width: int, height: int) -> Image.Image:
        tile = Image.new('RGBA', (width, height), (0, 0, 0, 0))
        draw = ImageDraw.Draw(tile)
        font = self._font(max(1, min(width, height)))
        try:
            draw.text(
                (width / 2, height / 2), glyph, font=font, anchor='mm',
                fill=(40, 40, 40, 255), embedded_color=True,
            )
        except ValueError:
            # Bitmap fonts support neither anchors nor embedded color
            try:
                draw.text((0, 0), glyph, font=font, fill=(40, 40, 40, 255))
            except UnicodeEncodeError:
                raise MissingResourceError(
                    f"No font can draw {glyph!r}; pass an emoji font file"
                )
        return tile

    def _draw_flag(self, ref: str, width: int, height: int) -> Image.Image:
        design = BUILTIN_FLAGS.get(ref.lower())
        if design is not None:
            return _stripe_flag(design, width, height)

        artwork = self._flag_path(ref)
        if artwork is None:
            raise MissingResourceError(f"Flag artwork not available: {ref}")
        try:
            with Image.open(artwork) as img:
                return img.convert('RGBA').resize((width, height), Image.Resampling.LANCZOS)
        except OSError as e:
            raise MissingResourceError(f"Could not load flag artwork {artwork}: {e}")

    def _flag_path(self, ref: str) -> Optional[Path]:
        candidates = [Path(ref)]
        if self.flag_dir is not None:
            candidates.insert(0, self.flag_dir / f"{ref}.png")
        for candidate in candidates:
            if candidate.suffix and candidate.is_file():
                return candidate
        return None


# =============================================================================
# Pixel helpers
# =============================================================================

def gradient_field(kind: GradientKind, width: int, height: int) -> np.ndarray:
    """Per-pixel gradient position t in [0, 1] for a width x height tile"""
    ys, xs = np.mgrid[0:height, 0:width].astype(np.float32)
    u = (xs + 0.5) / width
    v = (ys + 0.5) / height

    if kind is GradientKind.LINEAR_HORIZONTAL:
        t = u
    elif kind is GradientKind.RADIAL:
        t = np.sqrt((u - 0.5) ** 2 + (v - 0.5) ** 2) / 0.5
    elif kind is GradientKind.ANGULAR:
        t = (np.arctan2(v - 0.5, u - 0.5) + np.pi) / (2 * np.pi)
    elif kind is GradientKind.DIAMOND:
        t = (np.abs(u - 0.5) + np.abs(v - 0.5)) / 0.5
    else:
        t = v
    return np.clip(t, 0.0, 1.0)


def _apply_fill(mask: Image.Image, color) -> Image.Image:
    width, height = mask.size
    coverage = np.asarray(mask, dtype=np.float32) / 255.0

    if isinstance(color, Gradient):
        rgba = color.sample_array(gradient_field(color.kind, width, height))
    else:
        fill = color if isinstance(color, SolidColor) else SolidColor(0.5, 0.5, 0.5)
        rgba = np.empty((height, width, 4), dtype=np.float32)
        rgba[:] = fill.rgba

    rgba[:, :, 3] *= coverage
    return Image.fromarray((np.clip(rgba, 0, 1) * 255 + 0.5).astype(np.uint8), 'RGBA')


def _stripe_flag(design, width: int, height: int) -> Image.Image:
    orientation, colors = design
    pixels = np.zeros((height, width, 4), dtype=np.uint8)
    pixels[:, :, 3] = 255

    if orientation == 'disc':
        pixels[:, :, :3] = colors[0]
        ys, xs = np.mgrid[0:height, 0:width]
        radius = min(width, height) * 0.3
        disc = (xs + 0.5 - width / 2) ** 2 + (ys + 0.5 - height / 2) ** 2 <= radius ** 2
        pixels[disc, :3] = colors[1]
    else:
        count = len(colors)
        for i, rgb in enumerate(colors):
            if orientation == 'vertical':
                pixels[:, i * width // count:(i + 1) * width // count, :3] = rgb
            else:
                pixels[i * height // count:(i + 1) * height // count, :, :3] = rgb

    return Image.fromarray(pixels, 'RGBA')


def _composite(base: Image.Image, tile: Image.Image, left: int, top: int) -> None:
    """Alpha-composite tile onto base at (left, top), clipping at the edges"""
    src_left = max(0, -left)
    src_top = max(0, -top)
    dst_left = max(0, left)
    dst_top = max(0, top)
    w = min(tile.width - src_left, base.width - dst_left)
    h = min(tile.height - src_top, base.height - dst_top)
    if w <= 0 or h <= 0:
        return
    base.alpha_composite(tile, dest=(dst_left, dst_top), source=(src_left, src_top, src_left + w, src_top + h))
