"""Clock and random source collaborators, injected so tests can pin them."""
from datetime import datetime, timezone
from typing import Optional, Protocol

import numpy as np


def utc_now() -> datetime:
    # Stored timestamps are naive UTC
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Clock(Protocol):
    def now(self) -> datetime: ...


class RandomSource(Protocol):
    def randint(self, low: int, high: int) -> int:
        """Uniform integer over the inclusive range [low, high]."""
        ...


class SystemClock:
    def now(self) -> datetime:
        return utc_now()


class NumpyRandomSource:
    def __init__(self, seed: Optional[int] = None):
        self._rng = np.random.default_rng(seed)

    def randint(self, low: int, high: int) -> int:
        return int(self._rng.integers(low, high, endpoint=True))
