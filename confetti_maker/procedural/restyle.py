"""
Style Updater - re-roll appearance without touching layout.

Used by live preview: when only a style slider moves, the existing pool is
kept and only style-dependent fields are re-drawn, so particles stay where
they are. Positions, fall velocity, shape and pool size are never changed.
"""

from dataclasses import replace
from enum import Enum
from typing import Any, List

from .base import SeedLike, make_rng
from .particles import (
    Particle,
    sample_color,
    sample_drift_amplitude,
    sample_flip_speed,
    sample_rotation,
    sample_rotation_speed,
    sample_scale,
)
from ..core.config import ShapeMode, normalize
from ..core.palette import resolve_palette
from ..core.shapes import takes_fill


class ChangeKind(Enum):
    """Which family of style attributes a restyle re-draws"""
    COLOR = "color"
    SCALE = "scale"
    ROTATION_OR_FLUTTER = "rotation-or-flutter"
    ALL = "all"

    @classmethod
    def parse(cls, value: Any) -> 'ChangeKind':
        if isinstance(value, cls):
            return value
        text = str(value or '').strip().lower().replace('_', '-')
        if text in ('rotation', 'flutter', 'rotation-or-flutter'):
            return cls.ROTATION_OR_FLUTTER
        for kind in cls:
            if kind.value == text:
                return kind
        return cls.ALL


def restyle(
    pool: List[Particle],
    config,
    change_kind: Any = ChangeKind.ALL,
    seed: SeedLike = None
) -> List[Particle]:
    """
    Return a new pool with the style fields implied by change_kind re-drawn.

    Args:
        pool: Existing particles (left untouched)
        config: ConfettiConfig or raw settings mapping
        change_kind: color / scale / rotation-or-flutter / all
        seed: int seed or numpy Generator for the re-draw

    Returns:
        A list of the same length and order
    """
    config = normalize(config)
    kind = ChangeKind.parse(change_kind)
    rng = make_rng(seed)

    recolor = kind in (ChangeKind.COLOR, ChangeKind.ALL)
    rescale = kind in (ChangeKind.SCALE, ChangeKind.ALL)
    respin = kind in (ChangeKind.ROTATION_OR_FLUTTER, ChangeKind.ALL)

    palette = resolve_palette(config) if recolor else []
    if recolor and not palette and any(takes_fill(p.shape) for p in pool):
        # Pool was laid out in standard mode; keep filling its shapes
        palette = resolve_palette(replace(config, shape_mode=ShapeMode.STANDARD))

    restyled = []
    for particle in pool:
        changes = {}
        if recolor:
            changes['color'] = sample_color(particle.shape, palette, rng)
        if rescale:
            changes['scale'] = sample_scale(config, rng)
        if respin:
            changes['initial_rotation'] = sample_rotation(config, rng)
            changes['rotation_speed'] = sample_rotation_speed(config, rng)
            changes['flip_speed'] = sample_flip_speed(config, rng)
        if kind is ChangeKind.ALL:
            changes['drift_amplitude'] = sample_drift_amplitude(config, rng)
        restyled.append(replace(particle, **changes))

    return restyled
