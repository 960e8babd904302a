"""
Confetti Session - the engine side of the UI message contract.

A session owns the only long-lived mutable state of the engine: the pool
behind the current live preview. It is kept until the next full preview or
generation replaces it, and is never persisted.

Messages (transport-agnostic):
    preview-confetti      {settings, keepPositions, changeKind} -> records
    generate-confetti     {settings}                            -> ack
    generate-empty-frame  {}                                    -> ack
    close-plugin          {}                                    -> ack
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .core.config import ConfettiConfig, normalize
from .core.renderer import RasterRenderer, Renderer
from .procedural.base import Bounds, CancelToken, SeedLike, SequenceCancelled, make_rng
from .procedural.particles import Particle, init_pool
from .procedural.restyle import ChangeKind, restyle
from .procedural.sampler import sample_pool, to_record
from .procedural.sequence import GenerationError, SequenceOrchestrator

# Preview pools are a full-frame scatter; frame 0 is the representative moment
PREVIEW_FRAME_INDEX = 0


class SessionClosed(Exception):
    """Raised when a closed session receives a request"""


@dataclass
class GenerationResult:
    """Completion acknowledgment of a full generation"""
    frame_count: int
    particle_count: int
    frame_delay: int
    skipped: int
    output: Any = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'frameCount': self.frame_count,
            'particleCount': self.particle_count,
            'frameDelay': self.frame_delay,
            'skipped': self.skipped,
        }


class ConfettiSession:
    """
    Live engine session.

    Args:
        renderer: Renderer collaborator (RasterRenderer by default)
        bounds: Layout area of one frame
        seed: Base seed; each request draws from one generator seeded with it
    """

    def __init__(
        self,
        renderer: Optional[Renderer] = None,
        bounds: Optional[Bounds] = None,
        seed: SeedLike = None
    ):
        self.renderer = renderer or RasterRenderer()
        self.bounds = bounds or Bounds()
        self.rng = make_rng(seed)
        self.closed = False

        self.pool: Optional[List[Particle]] = None
        self.pool_config: Optional[ConfettiConfig] = None
        self.pool_bounds: Optional[Bounds] = None

    # ---- Requests ----

    def preview(
        self,
        settings: Any = None,
        keep_positions: bool = False,
        change_kind: Any = ChangeKind.ALL
    ) -> List[Dict[str, Any]]:
        """
        Records for a single representative preview frame.

        With keep_positions and a compatible cached pool, only style fields
        are re-drawn; otherwise a fresh pool is laid out. The resulting pool
        becomes the cached one.
        """
        self._ensure_open()
        config = normalize(settings)

        if keep_positions and self._can_restyle(config):
            self.pool = restyle(self.pool, config, change_kind, seed=self._draw_seed(config))
        else:
            self.pool = init_pool(config, self.bounds, is_preview=True, seed=self._draw_seed(config))
            self.pool_bounds = self.bounds
        self.pool_config = config

        return [to_record(p, s) for p, s in sample_pool(self.pool, PREVIEW_FRAME_INDEX)]

    def generate(self, settings: Any = None, token: Optional[CancelToken] = None) -> GenerationResult:
        """Materialize the full sequence through the renderer"""
        self._ensure_open()
        config = normalize(settings)
        self.clear_preview()

        pool = init_pool(config, self.bounds, is_preview=False, seed=self._draw_seed(config))
        orchestrator = SequenceOrchestrator(self.renderer)

        progress = None
        for progress in orchestrator.iter_sequence(config, self.bounds, pool=pool, token=token):
            pass

        return GenerationResult(
            frame_count=config.frame_count,
            particle_count=len(pool),
            frame_delay=config.frame_delay,
            skipped=progress.skipped,
            output=progress.output,
        )

    def generate_empty_frame(self) -> Any:
        self._ensure_open()
        return self.renderer.create_empty_frame(self.bounds)

    def close(self) -> None:
        self.clear_preview()
        self.closed = True

    def clear_preview(self) -> None:
        self.pool = None
        self.pool_config = None
        self.pool_bounds = None

    # ---- Message contract ----

    def handle_message(self, msg: Dict[str, Any]) -> Dict[str, Any]:
        """
        Dispatch one UI message and build the reply.

        Engine failures are reported in the reply ({"type": "error"})
        rather than raised, so a UI loop never dies on a bad request.
        """
        if not isinstance(msg, dict):
            return {'type': 'error', 'message': f"Malformed message: {msg!r}"}

        kind = msg.get('type')
        try:
            if kind == 'preview-confetti':
                records = self.preview(
                    msg.get('settings'),
                    keep_positions=msg.get('keepPositions') is True,
                    change_kind=msg.get('changeKind', 'all'),
                )
                return {'type': 'preview-data', 'particles': records}
            if kind == 'generate-confetti':
                result = self.generate(msg.get('settings'))
                return {'type': 'generation-complete', **result.to_dict()}
            if kind == 'generate-empty-frame':
                self.generate_empty_frame()
                return {'type': 'empty-frame-complete'}
            if kind == 'close-plugin':
                self.close()
                return {'type': 'closed'}
        except (GenerationError, SequenceCancelled, SessionClosed) as e:
            return {'type': 'error', 'message': str(e)}

        return {'type': 'error', 'message': f"Unknown message type: {kind}"}

    # ---- Internals ----

    def _can_restyle(self, config: ConfettiConfig) -> bool:
        return (
            self.pool is not None
            and self.pool_config is not None
            and self.pool_bounds == self.bounds
            and self.pool_config.layout_key() == config.layout_key()
        )

    def _draw_seed(self, config: ConfettiConfig) -> SeedLike:
        """A config seed makes a request reproducible on its own"""
        return config.seed if config.seed is not None else self.rng

    def _ensure_open(self) -> None:
        if self.closed:
            raise SessionClosed("Session is closed")
