"""
Confetti Shapes - the catalogue of particle shapes.

Every particle carries one Shape value. Shapes are renderer-agnostic: they
describe WHAT a particle is (and its reference footprint), never how it is
drawn. Renderers dispatch on the concrete class.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence, Tuple, Union

import numpy as np


REFERENCE_SIZE = 20.0

# (width, height) multipliers of the reference size
_ASPECT = {
    'rectangle': (1.5, 0.9),
    'wave': (1.0, 1.4),
    'emoji': (1.2, 1.2),
    'flag': (1.2, 1.2),
    'custom': (1.2, 1.2),
}

STANDARD_TAGS = ('rectangle', 'square', 'circle', 'star', 'wave', 'custom')


class ShapeKind(Enum):
    RECTANGLE = "rectangle"
    SQUARE = "square"
    CIRCLE = "circle"
    STAR = "star"
    WAVE = "wave"
    EMOJI = "emoji"
    FLAG = "flag"
    CUSTOM = "custom"


@dataclass(frozen=True)
class CustomPath:
    """SVG path data plus the viewbox it is drawn in"""
    data: str
    viewbox: Tuple[float, float, float, float] = (0.0, 0.0, 24.0, 24.0)

    @classmethod
    def from_raw(cls, raw) -> Optional['CustomPath']:
        """
        Build from a mapping {"path"|"d"|"data", "viewbox"|"viewBox"} or a bare
        path string. Returns None when there is no path data.
        """
        if isinstance(raw, CustomPath):
            return raw
        if isinstance(raw, str):
            return cls(raw) if raw.strip() else None
        if not isinstance(raw, dict):
            return None

        data = raw.get('path') or raw.get('d') or raw.get('data')
        if not isinstance(data, str) or not data.strip():
            return None
        viewbox = parse_viewbox(raw.get('viewbox', raw.get('viewBox')))
        return cls(data, viewbox) if viewbox else cls(data)


@dataclass(frozen=True)
class Rectangle:
    kind = ShapeKind.RECTANGLE
    corner_ratio: float = 0.1


@dataclass(frozen=True)
class Square:
    kind = ShapeKind.SQUARE
    corner_ratio: float = 0.1


@dataclass(frozen=True)
class Circle:
    kind = ShapeKind.CIRCLE


@dataclass(frozen=True)
class Star:
    kind = ShapeKind.STAR
    points: int = 5
    inner_radius: float = 0.4


@dataclass(frozen=True)
class Wave:
    kind = ShapeKind.WAVE
    periods: float = 1.5


@dataclass(frozen=True)
class Emoji:
    kind = ShapeKind.EMOJI
    glyph: str = "🎉"


@dataclass(frozen=True)
class Flag:
    kind = ShapeKind.FLAG
    ref: str = "fr"


@dataclass(frozen=True)
class Custom:
    kind = ShapeKind.CUSTOM
    path: CustomPath = CustomPath("M0 0 H24 V24 H0 Z")


Shape = Union[Rectangle, Square, Circle, Star, Wave, Emoji, Flag, Custom]

_STANDARD_FACTORIES = {
    'rectangle': Rectangle,
    'square': Square,
    'circle': Circle,
    'star': Star,
    'wave': Wave,
}


def shape_type(shape: Shape) -> str:
    """Identifier string used in preview records"""
    return shape.kind.value


def takes_fill(shape: Shape) -> bool:
    """Emoji and flags carry their own colors; everything else is filled"""
    return shape.kind not in (ShapeKind.EMOJI, ShapeKind.FLAG)


def base_size(shape: Shape) -> Tuple[float, float]:
    """Unscaled (width, height) for a shape"""
    aspect_w, aspect_h = _ASPECT.get(shape.kind.value, (1.0, 1.0))
    return REFERENCE_SIZE * aspect_w, REFERENCE_SIZE * aspect_h


def make_shape(identifier: str, mode, custom_path: Optional[CustomPath] = None) -> Optional[Shape]:
    """
    Resolve a selection identifier into a Shape for the given mode.

    Returns None for identifiers that cannot be honoured (unknown standard
    tag, "custom" without path data).
    """
    from .config import ShapeMode

    if mode is ShapeMode.EMOJI:
        return Emoji(identifier)
    if mode is ShapeMode.FLAG:
        return Flag(identifier)

    tag = str(identifier).strip().lower()
    if tag == 'custom':
        return Custom(custom_path) if custom_path is not None else None
    factory = _STANDARD_FACTORIES.get(tag)
    return factory() if factory else None


# =============================================================================
# Geometry helpers (shared by renderers)
# =============================================================================

def star_points(
    cx: float, cy: float, radius_x: float, radius_y: float,
    points: int = 5, inner_radius: float = 0.4
) -> List[Tuple[float, float]]:
    """Vertices of a star polygon, first point straight up"""
    vertices = []
    for i in range(points * 2):
        angle = -np.pi / 2 + i * np.pi / points
        k = 1.0 if i % 2 == 0 else inner_radius
        vertices.append((cx + np.cos(angle) * radius_x * k, cy + np.sin(angle) * radius_y * k))
    return vertices


def wave_polygon(
    width: float, height: float, periods: float = 1.5, samples: int = 24
) -> List[Tuple[float, float]]:
    """A vertical ribbon whose center line follows a sine wave"""
    band = width * 0.35
    amplitude = (width - band) / 2
    ys = np.linspace(0.0, height, samples)
    centers = width / 2 + amplitude * np.sin(ys / max(height, 1e-6) * periods * 2 * np.pi)
    left = [(float(c - band / 2), float(y)) for c, y in zip(centers, ys)]
    right = [(float(c + band / 2), float(y)) for c, y in zip(centers, ys)]
    return left + right[::-1]


# =============================================================================
# SVG path flattening
# =============================================================================

_TOKEN = re.compile(r'[MmLlHhVvCcSsQqTtZz]|[-+]?(?:\d*\.\d+|\d+\.?)(?:[eE][-+]?\d+)?')
_ARITY = {'M': 2, 'L': 2, 'H': 1, 'V': 1, 'C': 6, 'S': 4, 'Q': 4, 'T': 2, 'Z': 0}


def parse_viewbox(raw) -> Optional[Tuple[float, float, float, float]]:
    """Parse "x y w h" (string or sequence); None when malformed"""
    if raw is None:
        return None
    try:
        parts = raw.replace(',', ' ').split() if isinstance(raw, str) else list(raw)
        values = tuple(float(p) for p in parts)
    except (TypeError, ValueError, OverflowError):
        return None
    if len(values) != 4 or not np.all(np.isfinite(values)):
        return None
    if values[2] <= 0 or values[3] <= 0:
        return None
    return values


def _bezier(points: Sequence[Tuple[float, float]], steps: int) -> List[Tuple[float, float]]:
    pts = np.array(points, dtype=np.float64)
    t = np.linspace(0.0, 1.0, steps + 1)[1:, None]
    if len(pts) == 3:
        curve = (1 - t) ** 2 * pts[0] + 2 * (1 - t) * t * pts[1] + t ** 2 * pts[2]
    else:
        curve = ((1 - t) ** 3 * pts[0] + 3 * (1 - t) ** 2 * t * pts[1]
                 + 3 * (1 - t) * t ** 2 * pts[2] + t ** 3 * pts[3])
    return [tuple(p) for p in curve]


def flatten_path(data: str, curve_steps: int = 12) -> List[List[Tuple[float, float]]]:
    """
    Flatten SVG path data into polygons (one per subpath).

    Supports M/L/H/V/C/S/Q/T/Z in absolute and relative form. Arcs are not
    supported and raise ValueError, as do malformed commands.
    """
    tokens = _TOKEN.findall(data)
    if re.search(r'[Aa]', data):
        raise ValueError("Arc commands are not supported in custom shape paths")

    polygons: List[List[Tuple[float, float]]] = []
    current: List[Tuple[float, float]] = []
    x = y = start_x = start_y = 0.0
    last_control = None
    command = None
    i = 0

    def number(idx: int) -> float:
        try:
            return float(tokens[idx])
        except (IndexError, ValueError):
            raise ValueError(f"Malformed path data near token {idx}: {data!r}")

    while i < len(tokens):
        token = tokens[i]
        if token.isalpha():
            command = token
            i += 1
            if command in 'Zz':
                if current:
                    polygons.append(current)
                current = []
                x, y = start_x, start_y
                last_control = None
                continue
        elif command is None:
            raise ValueError(f"Path data must start with a command: {data!r}")

        upper = command.upper()
        if upper == 'Z':
            raise ValueError(f"Unexpected number after closepath: {data!r}")
        relative = command.islower()
        args = [number(i + k) for k in range(_ARITY[upper])]
        i += _ARITY[upper]
        ox, oy = (x, y) if relative else (0.0, 0.0)

        if upper == 'M':
            if current:
                polygons.append(current)
            x, y = ox + args[0], oy + args[1]
            start_x, start_y = x, y
            current = [(x, y)]
            # Subsequent pairs after a moveto are linetos
            command = 'l' if relative else 'L'
            last_control = None
        elif upper == 'L':
            x, y = ox + args[0], oy + args[1]
            current.append((x, y))
            last_control = None
        elif upper == 'H':
            x = (x if relative else 0.0) + args[0]
            current.append((x, y))
            last_control = None
        elif upper == 'V':
            y = (y if relative else 0.0) + args[0]
            current.append((x, y))
            last_control = None
        elif upper in ('C', 'S'):
            if upper == 'C':
                c1 = (ox + args[0], oy + args[1])
                c2 = (ox + args[2], oy + args[3])
                end = (ox + args[4], oy + args[5])
            else:
                c1 = (2 * x - last_control[0], 2 * y - last_control[1]) if last_control else (x, y)
                c2 = (ox + args[0], oy + args[1])
                end = (ox + args[2], oy + args[3])
            current.extend(_bezier([(x, y), c1, c2, end], curve_steps))
            last_control = c2
            x, y = end
        elif upper in ('Q', 'T'):
            if upper == 'Q':
                c1 = (ox + args[0], oy + args[1])
                end = (ox + args[2], oy + args[3])
            else:
                c1 = (2 * x - last_control[0], 2 * y - last_control[1]) if last_control else (x, y)
                end = (ox + args[0], oy + args[1])
            current.extend(_bezier([(x, y), c1, end], curve_steps))
            last_control = c1
            x, y = end

    if current:
        polygons.append(current)
    return [poly for poly in polygons if len(poly) >= 3]
