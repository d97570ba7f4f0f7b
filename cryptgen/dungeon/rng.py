"""Seeded pseudo-random streams.

``SeededRng`` is the canonical generator: the seed (string or int) is hashed
to a 32-bit unsigned integer with FNV-1a, which then drives a 32-bit
mix-and-output step. Same seed gives a bit-identical float stream on every
run and platform because all arithmetic is masked to 32 bits.

``LcgRng`` reproduces the older linear-congruential stream that the fixed
room/corridor layout was built around.

Both are plain objects holding their own state; nothing here is module-global,
so concurrent generation runs never share a stream.
"""

from __future__ import annotations

import math
from typing import Iterator, Sequence, TypeVar

T = TypeVar("T")

MASK32 = 0xFFFFFFFF
FNV_OFFSET_BASIS = 0x811C9DC5
FNV_PRIME = 16777619
_GOLDEN_GAMMA = 0x6D2B79F5
_TWO_POW_32 = 4294967296.0

LCG_MULTIPLIER = 1103515245
LCG_INCREMENT = 12345
LCG_MASK = 0x7FFFFFFF


class GenerationPrecondition(ValueError):
    """Raised when generation inputs (dimensions, seed) cannot produce a grid."""

    def __init__(self, field: str, message: str, code: str = "precondition"):
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message
        self.code = code

    def to_dict(self) -> dict:
        return {"field": self.field, "error": self.message, "code": self.code}


def _imul(a: int, b: int) -> int:
    """32-bit multiply keeping the low 32 bits, unsigned."""
    return (a * b) & MASK32


def normalize_seed(seed) -> str:
    """Return the canonical string form of ``seed``.

    Accepts non-empty strings and ints (bools are rejected; ``True`` is not a seed).
    """
    if isinstance(seed, bool) or seed is None:
        raise GenerationPrecondition("seed", "seed must be a string or integer", "type")
    if isinstance(seed, int):
        return str(seed)
    if isinstance(seed, str):
        if not seed.strip():
            raise GenerationPrecondition("seed", "seed must not be empty", "empty")
        return seed
    raise GenerationPrecondition("seed", f"unsupported seed type {type(seed).__name__}", "type")


def seed_to_int(seed) -> int:
    """FNV-1a 32-bit hash of the UTF-8 bytes of the seed string."""
    h = FNV_OFFSET_BASIS
    for b in normalize_seed(seed).encode("utf-8"):
        h = ((h ^ b) * FNV_PRIME) & MASK32
    return h


class SeededRng:
    """Deterministic float stream in ``[0, 1)`` from a string or integer seed."""

    __slots__ = ("seed", "_origin", "_state")

    def __init__(self, seed):
        self.seed = normalize_seed(seed)
        self._origin = seed_to_int(self.seed)
        self._state = self._origin

    @property
    def state(self) -> int:
        return self._state

    def reset(self) -> None:
        """Restart the stream from the first value."""
        self._state = self._origin

    def next_uint32(self) -> int:
        self._state = (self._state + _GOLDEN_GAMMA) & MASK32
        t = self._state
        t = _imul(t ^ (t >> 15), t | 1)
        t ^= (t + _imul(t ^ (t >> 7), t | 61)) & MASK32
        return (t ^ (t >> 14)) & MASK32

    def next_float(self) -> float:
        return self.next_uint32() / _TWO_POW_32

    __call__ = next_float

    def next_int(self, lo: int, hi: int) -> int:
        """Uniform integer in ``[lo, hi]`` (inclusive)."""
        if hi < lo:
            raise ValueError(f"empty range [{lo}, {hi}]")
        return lo + int(self.next_float() * (hi - lo + 1))

    def choice(self, seq: Sequence[T]) -> T:
        if not seq:
            raise IndexError("choice from empty sequence")
        return seq[int(self.next_float() * len(seq))]

    def __iter__(self) -> Iterator[float]:
        while True:
            yield self.next_float()


class LcgRng:
    """Linear-congruential stream: ``state = (state * 1103515245 + 12345) & 0x7fffffff``."""

    __slots__ = ("seed", "_state")

    def __init__(self, seed: int):
        if isinstance(seed, bool) or not isinstance(seed, int):
            raise GenerationPrecondition("seed", "seed must be an integer", "type")
        self.seed = seed
        self._state = seed

    def reset(self) -> None:
        self._state = self.seed

    def next_float(self) -> float:
        # The legacy stream multiplies in double precision; keep that rounding.
        try:
            product = float(self._state) * LCG_MULTIPLIER + LCG_INCREMENT
        except OverflowError:
            product = math.inf
        # A non-finite product truncates to 0, as a 32-bit integer conversion does
        self._state = int(product) & LCG_MASK if math.isfinite(product) else 0
        return self._state / LCG_MASK

    __call__ = next_float

    def __iter__(self) -> Iterator[float]:
        while True:
            yield self.next_float()


def make_rng(seed) -> SeededRng:
    return SeededRng(seed)


__all__ = [
    "GenerationPrecondition",
    "SeededRng",
    "LcgRng",
    "make_rng",
    "normalize_seed",
    "seed_to_int",
]
