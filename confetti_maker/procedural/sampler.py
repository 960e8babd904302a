"""
Frame State Sampler - instantaneous particle state at a discrete frame.

Sampling is a pure function of (particle, frame index): linear and
sinusoidal terms only, so any non-negative index is well defined, including
indices past the last generated frame.
"""

import math
from dataclasses import dataclass
from typing import Any, Dict, List, Tuple

from .particles import Particle
from ..core.shapes import shape_type

MIN_VERTICAL_SCALE = 0.01


@dataclass(frozen=True)
class FrameState:
    """Where a particle is, and how it is turned, at one frame"""
    x: float
    y: float
    rotation: float
    flip_factor: float

    @property
    def vertical_scale(self) -> float:
        """Flip as a vertical scale multiplier; never collapses to zero"""
        return max(MIN_VERTICAL_SCALE, abs(self.flip_factor))


def sample_at(particle: Particle, frame_index: int) -> FrameState:
    i = frame_index
    return FrameState(
        x=particle.start_x + particle.drift_amplitude * math.sin(particle.drift_phase + particle.drift_speed * i),
        y=particle.start_y + particle.pixels_per_frame * i,
        rotation=particle.initial_rotation + particle.rotation_speed * i,
        flip_factor=math.cos(particle.flip_phase + particle.flip_speed * i),
    )


def sample_pool(pool: List[Particle], frame_index: int) -> List[Tuple[Particle, FrameState]]:
    """Sample every particle of a pool at one frame, preserving pool order"""
    return [(particle, sample_at(particle, frame_index)) for particle in pool]


def to_record(particle: Particle, state: FrameState) -> Dict[str, Any]:
    """Preview record sent back to the UI"""
    return {
        'x': state.x,
        'y': state.y,
        'rotation': state.rotation,
        'flipFactor': state.flip_factor,
        'shapeType': shape_type(particle.shape),
        'shape': _shape_detail(particle),
        'color': particle.color.to_dict() if particle.color is not None else None,
        'scale': particle.scale,
        'baseWidth': particle.base_width,
        'baseHeight': particle.base_height,
    }


def _shape_detail(particle: Particle) -> Any:
    shape = particle.shape
    if hasattr(shape, 'glyph'):
        return shape.glyph
    if hasattr(shape, 'ref'):
        return shape.ref
    return None
