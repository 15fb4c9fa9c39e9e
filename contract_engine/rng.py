from __future__ import annotations

"""Random sources for contract generation.

Every random draw in the engine goes through a ``RandomSource`` passed in by the
caller. Two sources built on the same seed and driven with the same call order
produce identical contracts.
"""

import hashlib
import random
from typing import Protocol, runtime_checkable


@runtime_checkable
class RandomSource(Protocol):
    def range_float(self, min_value: float, max_value: float) -> float:
        """Uniform float in [min_value, max_value)."""
        ...

    def range_int(self, min_inclusive: int, max_exclusive: int) -> int:
        """Integer in [min_inclusive, max_exclusive); min_inclusive if empty."""
        ...


class SeededRandom:
    """RandomSource backed by ``random.Random(seed)``."""

    def __init__(self, seed: int) -> None:
        self.seed = int(seed)
        self._rng = random.Random(self.seed)

    def range_float(self, min_value: float, max_value: float) -> float:
        lo = float(min_value)
        hi = float(max_value)
        return lo + (hi - lo) * self._rng.random()

    def range_int(self, min_inclusive: int, max_exclusive: int) -> int:
        lo = int(min_inclusive)
        hi = int(max_exclusive)
        if hi <= lo:
            return lo
        return self._rng.randrange(lo, hi)


class DefaultRandom(SeededRandom):
    """OS-seeded source for interactive play."""

    def __init__(self) -> None:
        super().__init__(random.SystemRandom().randrange(1 << 62))


def stable_seed(*parts: object) -> int:
    """Deterministic integer seed from arbitrary parts (python hash() is salted)."""
    raw = "|".join(str(p) for p in parts)
    h = hashlib.sha256(raw.encode("utf-8")).digest()
    return int.from_bytes(h[:8], "big", signed=False)
