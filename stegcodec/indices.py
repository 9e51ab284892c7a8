"""
Deterministic carrier position selection.

A string seed drives a 32-bit linear congruential generator; a partial
Fisher-Yates shuffle over an implicit identity array then yields distinct
positions. Positions come out in draw order, so for a fixed seed and universe
the first ``n`` positions never depend on how many are requested in total.
"""

import hashlib
from typing import Dict, Iterator, List, Optional

from .config import DEFAULT_SEED
from .errors import CapacityExceeded

_MASK32 = 0xFFFFFFFF


def derive_seed(password: Optional[str]) -> str:
    if not password:
        return DEFAULT_SEED
    return hashlib.sha256(password.encode("utf-8")).hexdigest()


class SeededPRNG:
    """LCG returning floats in [0, 1)."""

    def __init__(self, seed: str):
        state = 0
        for ch in seed:
            state = (state * 31 + ord(ch)) & _MASK32
        self._state = state

    def __call__(self) -> float:
        self._state = (self._state * 1664525 + 1013904223) & _MASK32
        return self._state / 0x100000000


def iter_indices(seed: str, universe_size: int, count: int) -> Iterator[int]:
    """Lazily yield ``count`` distinct positions in ``[0, universe_size)``.

    Raises:
        ValueError: on negative sizes
        CapacityExceeded: if ``count > universe_size``
    """
    if universe_size < 0 or count < 0:
        raise ValueError("universe_size and count must be non-negative")
    if count > universe_size:
        raise CapacityExceeded(count, universe_size, unit="positions")
    return _draw(SeededPRNG(seed), universe_size, count)


def _draw(prng: SeededPRNG, universe_size: int, count: int) -> Iterator[int]:
    # Only displaced slots are stored; any other slot i still holds i.
    displaced: Dict[int, int] = {}
    for i in range(universe_size - 1, universe_size - count - 1, -1):
        j = int(prng() * (i + 1))
        at_i = displaced.pop(i, i)
        if j == i:
            yield at_i
            continue
        at_j = displaced.get(j, j)
        displaced[j] = at_i
        yield at_j


def generate_indices(seed: str, universe_size: int, count: int) -> List[int]:
    return list(iter_indices(seed, universe_size, count))
