"""
Confetti Particle Pool - stochastic generation of the particle set.

A pool is the fixed-size list of particles for one layout request. Each
particle is an immutable descriptor: its shape, its style and the seeds of
its trajectory. Positions at any frame are derived later by the sampler;
nothing here ever advances a simulation.

Trajectory model:
- Linear fall from start_y at pixels_per_frame
- Sinusoidal horizontal drift around start_x
- Linear spin around initial_rotation
- Sinusoidal flip (simulated 3D tumble via vertical scale)
"""

import math
from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np

from .base import Bounds, SeedLike, make_rng
from ..core.config import ConfettiConfig, normalize
from ..core.palette import Fill, resolve_palette
from ..core.shapes import Shape, base_size, make_shape, takes_fill


# =============================================================================
# Constants
# =============================================================================

DENSITY_DIVISOR = 3000.0        # canvas units^2 per particle at multiplier 1
MIN_SCALE = 0.1

START_OFFSET_FACTOR = 1.5       # launch up to 1.5 frame heights above the top
OVERSHOOT_FACTOR = 1.2          # fall 1.2 frame heights past the bottom
VELOCITY_VARIANCE = 0.3         # up to +30% speed, scaled by randomness

MAX_SPIN = 12.0                 # degrees per frame at randomness 100, flutter 50
MAX_DRIFT = 40.0                # pixels at randomness 100
DRIFT_SPEED_RANGE = (0.05, 0.25)
FLIP_SPEED_RANGE = (0.1, 0.4)


@dataclass(frozen=True)
class Particle:
    """One confetti piece: identity, style and trajectory seeds"""
    shape: Shape
    base_width: float
    base_height: float

    color: Optional[Fill]
    scale: float

    start_x: float
    start_y: float
    pixels_per_frame: float
    initial_rotation: float
    rotation_speed: float
    drift_amplitude: float
    drift_speed: float
    drift_phase: float
    flip_speed: float
    flip_phase: float

    @property
    def width(self) -> float:
        return self.base_width * self.scale

    @property
    def height(self) -> float:
        return self.base_height * self.scale


# =============================================================================
# Density
# =============================================================================

def density_multiplier(amount: float) -> float:
    """0 -> 0.1, 50 -> 1.55, 100 -> 3.0"""
    return 0.1 + (amount / 100.0) * 2.9


def particle_count(config: ConfettiConfig, bounds: Bounds) -> int:
    """
    Number of particles a pool holds for these settings.

    Ties density to both the layout area and the amount slider. An amount of
    zero means "no confetti", as does an empty shape selection.
    """
    if bounds.area <= 0 or config.amount <= 0 or not config.shape_selection:
        return 0
    return int(math.floor((bounds.width * bounds.height / DENSITY_DIVISOR)
                          * density_multiplier(config.amount)))


# =============================================================================
# Per-attribute samplers (shared with the style updater)
# =============================================================================

def flutter_multiplier(config: ConfettiConfig) -> float:
    """0 -> no spin/flip, 50 -> 1.0, 100 -> 2.0"""
    return config.flutter / 50.0


def sample_scale(config: ConfettiConfig, rng: np.random.Generator) -> float:
    scale = config.zoom / 10.0
    if config.randomize_size:
        scale *= rng.uniform(0.5, 1.5)
    return max(MIN_SCALE, float(scale))


def sample_color(shape: Shape, palette: List[Fill], rng: np.random.Generator) -> Optional[Fill]:
    if not takes_fill(shape) or not palette:
        return None
    return palette[int(rng.integers(len(palette)))]


def sample_rotation(config: ConfettiConfig, rng: np.random.Generator) -> float:
    if not config.randomize_rotation:
        return 0.0
    return float(rng.uniform(0.0, 360.0))


def sample_rotation_speed(config: ConfettiConfig, rng: np.random.Generator) -> float:
    randomness = max(0.1, config.randomness / 100.0)
    return float(rng.uniform(-1.0, 1.0) * MAX_SPIN * randomness * flutter_multiplier(config))


def sample_flip_speed(config: ConfettiConfig, rng: np.random.Generator) -> float:
    return float(rng.uniform(*FLIP_SPEED_RANGE) * flutter_multiplier(config))


def sample_drift_amplitude(config: ConfettiConfig, rng: np.random.Generator) -> float:
    return float(rng.uniform(0.0, 1.0) * MAX_DRIFT * config.randomness / 100.0)


def fall_velocity(
    start_y: float, bounds: Bounds, frame_count: int,
    randomness: float, rng: np.random.Generator
) -> float:
    """
    Pixels per frame needed to travel from start_y to the overshoot target
    within frame_count sampled steps, plus an individual speed-up.

    The variance only ever adds speed, so the target is always reached by
    the last frame.
    """
    target_y = bounds.height + OVERSHOOT_FACTOR * bounds.height
    distance = target_y - start_y
    base = distance / max(1, frame_count - 1)
    variance = 1.0 + rng.uniform(0.0, VELOCITY_VARIANCE) * (randomness / 100.0)
    return float(base * variance)


# =============================================================================
# Pool initialization
# =============================================================================

def resolve_shapes(config: ConfettiConfig) -> List[Shape]:
    """Shapes the selection can actually produce (unusable entries dropped)"""
    shapes = []
    for identifier in config.shape_selection:
        shape = make_shape(identifier, config.shape_mode, config.custom_shape)
        if shape is not None:
            shapes.append(shape)
    return shapes


def _start_position(
    width: float, height: float, bounds: Bounds, is_preview: bool, rng: np.random.Generator
) -> Tuple[float, float]:
    start_x = rng.uniform(0.0, max(0.0, bounds.width - width))
    if is_preview:
        # Static scatter across the whole frame
        start_y = rng.uniform(0.0, max(0.0, bounds.height - height))
    else:
        # Off-screen launch, always at least one particle height above the top
        start_y = -(height + rng.uniform(0.0, START_OFFSET_FACTOR * bounds.height))
    return float(start_x), float(start_y)


def init_pool(
    config,
    bounds: Bounds,
    is_preview: bool = False,
    seed: SeedLike = None
) -> List[Particle]:
    """
    Generate the particle pool for one layout request.

    Args:
        config: ConfettiConfig or raw settings mapping
        bounds: Layout area of one frame
        is_preview: Scatter particles across the frame instead of launching
                    them from above it
        seed: int seed or numpy Generator; defaults to config.seed

    Returns:
        List of particles, in creation order
    """
    config = normalize(config)
    rng = make_rng(config.seed if seed is None else seed)

    count = particle_count(config, bounds)
    shapes = resolve_shapes(config)
    if count == 0 or not shapes:
        return []

    palette = resolve_palette(config)
    pool = []

    for _ in range(count):
        shape = shapes[int(rng.integers(len(shapes)))]
        color = sample_color(shape, palette, rng)
        base_w, base_h = base_size(shape)
        scale = sample_scale(config, rng)

        start_x, start_y = _start_position(base_w * scale, base_h * scale, bounds, is_preview, rng)
        velocity = fall_velocity(start_y, bounds, config.frame_count, config.randomness, rng)

        pool.append(Particle(
            shape=shape,
            base_width=base_w,
            base_height=base_h,
            color=color,
            scale=scale,
            start_x=start_x,
            start_y=start_y,
            pixels_per_frame=velocity,
            initial_rotation=sample_rotation(config, rng),
            rotation_speed=sample_rotation_speed(config, rng),
            drift_amplitude=sample_drift_amplitude(config, rng),
            drift_speed=float(rng.uniform(*DRIFT_SPEED_RANGE)),
            drift_phase=float(rng.uniform(0.0, 2 * np.pi)),
            flip_speed=sample_flip_speed(config, rng),
            flip_phase=float(rng.uniform(0.0, 2 * np.pi)),
        ))

    return pool
