"""Random number sources used for mine placement."""
import random
from typing import Optional, Protocol


class RandomSource(Protocol):
    """Anything that can draw an integer in ``[low, high)``."""

    def next_int(self, low: int, high: int) -> int:
        ...


class PythonRandom:
    """RandomSource backed by :class:`random.Random`."""

    def __init__(self, seed: Optional[int] = None) -> None:
        self._random = random.Random(seed)

    def next_int(self, low: int, high: int) -> int:
        """Draw an integer in ``[low, high)``."""
        return self._random.randrange(low, high)
