"""
Procedural Confetti - particle pools, frame sampling and sequence generation
"""

from .base import (
    Bounds, CancelToken, SequenceCancelled, SeedLike,
    DEFAULT_BATCH_SIZE, make_rng, iter_batches,
)
from .particles import Particle, init_pool, particle_count, fall_velocity
from .sampler import FrameState, sample_at, sample_pool, to_record
from .restyle import ChangeKind, restyle
from .sequence import (
    SequenceOrchestrator, SequenceProgress, GenerationError,
    FRAME_GAP, render_sequence,
)

__all__ = [
    'Bounds', 'CancelToken', 'SequenceCancelled', 'SeedLike',
    'DEFAULT_BATCH_SIZE', 'make_rng', 'iter_batches',
    'Particle', 'init_pool', 'particle_count', 'fall_velocity',
    'FrameState', 'sample_at', 'sample_pool', 'to_record',
    'ChangeKind', 'restyle',
    'SequenceOrchestrator', 'SequenceProgress', 'GenerationError',
    'FRAME_GAP', 'render_sequence',
]
