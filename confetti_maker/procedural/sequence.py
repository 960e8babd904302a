"""
Sequence Orchestrator - drives the sampler across all frames and hands
each frame's particle states to a Renderer.

Work is cooperative: iter_sequence() is a generator that yields a progress
event after every batch of particles and after every finished frame, so a
host can interleave its own work (UI events, progress bars) and abort with a
CancelToken. Frames are always produced one at a time, in increasing index
order.
"""

from dataclasses import dataclass
from typing import Any, Iterator, List, Optional

from .base import (
    Bounds, CancelToken, DEFAULT_BATCH_SIZE, SeedLike, SequenceCancelled, iter_batches,
)
from .particles import Particle, init_pool
from .sampler import sample_at
from ..core.config import normalize
from ..core.renderer import MissingResourceError, RenderError, Renderer

FRAME_GAP = 40.0


class GenerationError(Exception):
    """Sequence generation aborted; the message is user-facing"""


@dataclass
class SequenceProgress:
    """One cooperative step of sequence generation"""
    frame_index: int
    frame_count: int
    particles_done: int
    particle_count: int
    frame_done: bool = False
    done: bool = False
    skipped: int = 0
    output: Any = None

    @property
    def fraction(self) -> float:
        """Overall progress 0-1"""
        if self.done:
            return 1.0
        per_frame = self.particles_done / self.particle_count if self.particle_count else 1.0
        return (self.frame_index + per_frame) / max(1, self.frame_count)


class SequenceOrchestrator:
    """
    Builds one pool and renders it frame by frame.

    Example:
        orchestrator = SequenceOrchestrator(RasterRenderer())
        sequence = orchestrator.render_sequence(settings, Bounds(1440, 1024))
    """

    def __init__(
        self,
        renderer: Renderer,
        batch_size: int = DEFAULT_BATCH_SIZE,
        frame_gap: float = FRAME_GAP
    ):
        self.renderer = renderer
        self.batch_size = batch_size
        self.frame_gap = frame_gap

    def frame_position(self, index: int, bounds: Bounds) -> tuple:
        """Frames are laid out side by side, left to right"""
        return (index * (bounds.width + self.frame_gap), 0.0)

    def iter_sequence(
        self,
        config,
        bounds: Bounds,
        is_preview: bool = False,
        seed: SeedLike = None,
        pool: Optional[List[Particle]] = None,
        token: Optional[CancelToken] = None
    ) -> Iterator[SequenceProgress]:
        """
        Generate the sequence step by step.

        The last event has done=True and carries the renderer's linked
        output. Raises GenerationError when a required resource is
        missing and SequenceCancelled when the token is cancelled.
        """
        config = normalize(config)
        if pool is None:
            pool = init_pool(config, bounds, is_preview=is_preview, seed=seed)

        renderer = self.renderer
        frame_count = config.frame_count
        renderer.notify("Generating preview..." if is_preview else f"Generating {len(pool)} particles...")
        renderer.begin_sequence(bounds, frame_count, is_preview)

        frames = []
        skipped = 0
        for index in range(frame_count):
            frame = renderer.create_frame(index, bounds, self.frame_position(index, bounds))
            done = 0

            for batch in iter_batches(pool, self.batch_size, token):
                for particle in batch:
                    skipped += self._draw(frame, particle, sample_at(particle, index))
                done += len(batch)
                yield SequenceProgress(index, frame_count, done, len(pool), skipped=skipped)

            if token is not None and token.cancelled:
                raise SequenceCancelled(token.reason or "cancelled")

            renderer.finish_frame(frame)
            frames.append(frame)
            yield SequenceProgress(index, frame_count, done, len(pool), frame_done=True, skipped=skipped)

        output = renderer.link_frames(frames, config.frame_delay, is_preview)
        yield SequenceProgress(
            frame_count - 1, frame_count, len(pool), len(pool),
            frame_done=True, done=True, skipped=skipped, output=output,
        )

    def render_sequence(
        self,
        config,
        bounds: Bounds,
        is_preview: bool = False,
        seed: SeedLike = None,
        pool: Optional[List[Particle]] = None,
        token: Optional[CancelToken] = None
    ) -> Any:
        """Run iter_sequence to completion and return the linked output"""
        progress = None
        for progress in self.iter_sequence(config, bounds, is_preview, seed, pool, token):
            pass
        return progress.output

    def _draw(self, frame, particle: Particle, state) -> int:
        """Draw one particle; returns 1 if it had to be skipped"""
        try:
            self.renderer.draw_particle(frame, particle, state)
        except MissingResourceError as e:
            self.renderer.notify(f"Error: {e}")
            raise GenerationError(str(e)) from e
        except RenderError as e:
            self.renderer.notify(f"Warning: skipped particle: {e}")
            return 1
        return 0


def render_sequence(
    config,
    bounds: Bounds,
    renderer: Renderer,
    is_preview: bool = False,
    seed: SeedLike = None,
    token: Optional[CancelToken] = None
) -> Any:
    """Build a pool and render all of its frames through renderer"""
    return SequenceOrchestrator(renderer).render_sequence(
        config, bounds, is_preview=is_preview, seed=seed, token=token
    )
