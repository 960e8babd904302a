"""
Procedural Base - shared building blocks for the confetti engine:
layout bounds, seeded random generators, and cooperative batching with
cancellation.
"""

from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional, TypeVar, Union

import numpy as np


T = TypeVar('T')

DEFAULT_BATCH_SIZE = 150

SeedLike = Union[None, int, np.random.Generator]


@dataclass(frozen=True)
class Bounds:
    """Layout area of one frame, in canvas coordinates"""
    width: float = 1440.0
    height: float = 1024.0

    @property
    def area(self) -> float:
        if self.width <= 0 or self.height <= 0:
            return 0.0
        return self.width * self.height

    @property
    def size(self) -> tuple:
        """Integer pixel size (width, height), never below 1x1"""
        return max(1, int(round(self.width))), max(1, int(round(self.height)))


def make_rng(seed: SeedLike = None) -> np.random.Generator:
    """Return a Generator; an existing Generator is passed through unchanged"""
    if isinstance(seed, np.random.Generator):
        return seed
    if isinstance(seed, int) and seed < 0:
        # numpy only accepts non-negative seeds
        seed %= 1 << 64
    return np.random.default_rng(seed)


class CancelToken:
    """
    Cooperative cancellation flag.

    The holder calls cancel(); long-running loops check `cancelled` at their
    yield points and stop.
    """

    def __init__(self):
        self._cancelled = False
        self.reason: Optional[str] = None

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self, reason: str = "cancelled") -> None:
        self._cancelled = True
        self.reason = reason


class SequenceCancelled(Exception):
    """Raised when a batched run notices its CancelToken was cancelled"""


def iter_batches(
    items: Iterable[T],
    batch_size: int = DEFAULT_BATCH_SIZE,
    token: Optional[CancelToken] = None
) -> Iterator[List[T]]:
    """
    Split items into lists of at most batch_size.

    The token is checked before every batch is handed out, so a consumer that
    yields control between batches can be aborted at any batch boundary.
    """
    batch_size = max(1, int(batch_size))
    batch: List[T] = []

    for item in items:
        batch.append(item)
        if len(batch) >= batch_size:
            _check(token)
            yield batch
            batch = []

    if batch:
        _check(token)
        yield batch


def _check(token: Optional[CancelToken]) -> None:
    if token is not None and token.cancelled:
        raise SequenceCancelled(token.reason or "cancelled")
