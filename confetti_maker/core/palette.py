"""
Confetti Palettes & Color Resolution

Turns a color specification into a concrete, indexable palette of
renderer-ready fills.

Color forms accepted in a custom color list:
1. Hex strings      - "#F80", "#FF8800"
2. Solid HSLA       - {"h": 30, "s": 100, "l": 50, "a": 1.0}
3. Gradients        - {"type": "radial", "stops": [{"position": 0, "color": "#fff"}, ...]}

Gradient kinds:
- linear            - top to bottom
- linear-horizontal - left to right
- radial            - center outwards
- angular           - sweep around the center
- diamond           - manhattan distance from the center
"""

import colorsys
import math
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional, Sequence, Tuple, Union

import numpy as np


# =============================================================================
# Color Types & Constants
# =============================================================================

RGBA = Tuple[float, float, float, float]   # 0-1 floats
RGBA8 = Tuple[int, int, int, int]          # 0-255 ints


@dataclass(frozen=True)
class SolidColor:
    """A flat fill. Channels are 0-1 floats."""
    r: float
    g: float
    b: float
    a: float = 1.0

    @property
    def rgba(self) -> RGBA:
        return (self.r, self.g, self.b, self.a)

    def to_rgba8(self) -> RGBA8:
        """Convert to 0-255 integer channels"""
        return tuple(int(round(np.clip(c, 0.0, 1.0) * 255)) for c in self.rgba)

    def to_dict(self) -> dict:
        return {'type': 'solid', 'r': self.r, 'g': self.g, 'b': self.b, 'a': self.a}


class GradientKind(Enum):
    """Orientation/shape tag of a gradient fill"""
    LINEAR_VERTICAL = "linear"
    LINEAR_HORIZONTAL = "linear-horizontal"
    RADIAL = "radial"
    ANGULAR = "angular"
    DIAMOND = "diamond"

    @classmethod
    def parse(cls, value: Any) -> 'GradientKind':
        """Parse a gradient tag, tolerating a few common spellings"""
        text = str(value or '').strip().lower().replace('_', '-')
        aliases = {
            'linear-vertical': cls.LINEAR_VERTICAL,
            'vertical': cls.LINEAR_VERTICAL,
            'horizontal': cls.LINEAR_HORIZONTAL,
            'conic': cls.ANGULAR,
        }
        if text in aliases:
            return aliases[text]
        for kind in cls:
            if kind.value == text:
                return kind
        return cls.LINEAR_VERTICAL


@dataclass(frozen=True)
class GradientStop:
    """A gradient color stop; position in [0, 1]"""
    position: float
    color: RGBA


@dataclass(frozen=True)
class Gradient:
    """
    A multi-stop gradient fill.

    Stops are kept sorted by position.
    """
    kind: GradientKind
    stops: Tuple[GradientStop, ...] = field(default_factory=tuple)

    def sample(self, t: float) -> RGBA:
        """
        Sample the gradient at position t (0-1).

        Uses linear interpolation between neighbouring stops; positions
        outside the first/last stop take the end colors.
        """
        t = float(np.clip(t, 0.0, 1.0))
        stops = self.stops
        if len(stops) == 1 or t <= stops[0].position:
            return stops[0].color
        if t >= stops[-1].position:
            return stops[-1].color

        for left, right in zip(stops, stops[1:]):
            if left.position <= t <= right.position:
                span = right.position - left.position
                local_t = 0.0 if span <= 0 else (t - left.position) / span
                return tuple(
                    a + (b - a) * local_t for a, b in zip(left.color, right.color)
                )
        return stops[-1].color

    def sample_array(self, t: np.ndarray) -> np.ndarray:
        """Vectorized sample; returns an (..., 4) float array of 0-1 RGBA"""
        t = np.clip(t, 0.0, 1.0)
        positions = np.array([s.position for s in self.stops], dtype=np.float32)
        colors = np.array([s.color for s in self.stops], dtype=np.float32)
        channels = [np.interp(t, positions, colors[:, c]) for c in range(4)]
        return np.stack(channels, axis=-1).astype(np.float32)

    def to_dict(self) -> dict:
        return {
            'type': self.kind.value,
            'stops': [{'position': s.position, 'color': list(s.color)} for s in self.stops],
        }


Fill = Union[SolidColor, Gradient]


# Multi-color mode: fixed hue-spread rainbow at full opacity
RAINBOW_PALETTE: Tuple[SolidColor, ...] = (
    SolidColor(1.0, 0.2, 0.2),
    SolidColor(1.0, 0.6, 0.0),
    SolidColor(1.0, 0.9, 0.0),
    SolidColor(0.2, 0.8, 0.2),
    SolidColor(0.2, 0.6, 1.0),
    SolidColor(0.6, 0.2, 0.8),
)

NEUTRAL_GRAY = SolidColor(0.5, 0.5, 0.5, 1.0)

_HEX_SHORT = re.compile(r'^#?([a-f\d])([a-f\d])([a-f\d])$', re.IGNORECASE)
_HEX_FULL = re.compile(r'^#?([a-f\d]{2})([a-f\d]{2})([a-f\d]{2})$', re.IGNORECASE)


# =============================================================================
# Color Space Conversions
# =============================================================================

def hsl_to_rgb(h: float, s: float, l: float) -> Tuple[float, float, float]:
    """
    Convert HSL to a 0-1 RGB triple.

    Args:
        h: Hue in degrees (wraps around 360)
        s: Saturation in percent (0-100)
        l: Lightness in percent (0-100)
    """
    s = float(np.clip(s / 100.0, 0.0, 1.0))
    l = float(np.clip(l / 100.0, 0.0, 1.0))
    return colorsys.hls_to_rgb((h % 360.0) / 360.0, l, s)


def hex_to_rgb(value: str) -> Tuple[float, float, float]:
    """Convert "#RGB" / "#RRGGBB" to a 0-1 RGB triple (gray when invalid)"""
    text = str(value).strip()
    short = _HEX_SHORT.match(text)
    if short:
        text = ''.join(c * 2 for c in short.groups())

    match = _HEX_FULL.match(text)
    if not match:
        return NEUTRAL_GRAY.r, NEUTRAL_GRAY.g, NEUTRAL_GRAY.b
    return tuple(int(part, 16) / 255 for part in match.groups())


def _number(value: Any, default: float) -> float:
    try:
        num = float(value)
    except (TypeError, ValueError, OverflowError):
        return default
    return num if math.isfinite(num) else default


def parse_rgba(entry: Any) -> Optional[RGBA]:
    """
    Parse a single color value (hex string, HSLA mapping or RGB(A) mapping /
    sequence of 0-1 floats) into 0-1 RGBA. Returns None when unusable.
    """
    if isinstance(entry, str):
        return (*hex_to_rgb(entry), 1.0)

    if isinstance(entry, dict):
        alpha = float(np.clip(_number(entry.get('a', 1.0), 1.0), 0.0, 1.0))
        if 'h' in entry:
            r, g, b = hsl_to_rgb(
                _number(entry.get('h'), 0.0),
                _number(entry.get('s'), 100.0),
                _number(entry.get('l'), 50.0),
            )
            return (r, g, b, alpha)
        if 'r' in entry:
            r, g, b = (float(np.clip(_number(entry.get(k), 0.5), 0.0, 1.0)) for k in 'rgb')
            return (r, g, b, alpha)
        if 'hex' in entry:
            return (*hex_to_rgb(entry['hex']), alpha)
        return None

    if isinstance(entry, (list, tuple)) and len(entry) in (3, 4):
        channels = [float(np.clip(_number(c, 0.5), 0.0, 1.0)) for c in entry]
        if len(channels) == 3:
            channels.append(1.0)
        return tuple(channels)

    return None


def parse_fill(entry: Any) -> Optional[Fill]:
    """Map one user color entry to a concrete fill, or None if unusable"""
    if isinstance(entry, dict) and 'stops' in entry:
        return parse_gradient(entry)

    rgba = parse_rgba(entry)
    if rgba is None:
        return None
    return SolidColor(*rgba)


def parse_gradient(entry: dict) -> Optional[Gradient]:
    """Build a Gradient from {type, stops}; None when no stop is usable"""
    stops = []
    raw_stops = entry.get('stops') or []
    if not isinstance(raw_stops, (list, tuple)):
        return None
    for index, raw in enumerate(raw_stops):
        if not isinstance(raw, dict):
            continue
        color = parse_rgba(raw.get('color'))
        if color is None:
            continue
        default_pos = index / max(1, len(raw_stops) - 1)
        position = float(np.clip(_number(raw.get('position'), default_pos), 0.0, 1.0))
        stops.append(GradientStop(position, color))

    if not stops:
        return None

    stops.sort(key=lambda s: s.position)
    return Gradient(GradientKind.parse(entry.get('type')), tuple(stops))


# =============================================================================
# Palette Resolution
# =============================================================================

def resolve_palette(config) -> List[Fill]:
    """
    Expand a config's color specification into a concrete palette.

    Returns an empty list for shape modes that carry no intrinsic color
    (emoji, flag). Otherwise the list is never empty.
    """
    from .config import ShapeMode

    if config.shape_mode is not ShapeMode.STANDARD:
        return []
    return resolve_color_spec(config.color_spec)


def resolve_color_spec(color_spec: Union[str, Sequence[Any]]) -> List[Fill]:
    """Resolve "multi" or a list of color entries into fills"""
    if color_spec == 'multi':
        return list(RAINBOW_PALETTE)

    palette = []
    for entry in color_spec or ():
        fill = parse_fill(entry)
        if fill is not None:
            palette.append(fill)

    if not palette:
        palette = [NEUTRAL_GRAY]
    return palette
