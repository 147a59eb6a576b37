"""
Forkable xoshiro128** pseudo-random generator.

Every stochastic decision in the engine flows through a ``Xoshiro128``
instance created by :func:`create_prng`. Streams are derived with
:meth:`Xoshiro128.fork`, which mixes a text label into a copy of the current
state. Forking never advances the parent, so a feature that forks its own
stream cannot shift the draws of any sibling feature.

Seeding:
  - integers (and finite floats, truncated toward zero) are reduced
    modulo 2**32
  - strings are hashed with 32-bit FNV-1a over their UTF-16 code units
  - the 32-bit seed is expanded to 128 bits of state with SplitMix32
"""

from __future__ import annotations

import math
from typing import List, Sequence, TypeVar, Union

from orrery.generation.errors import ConfigurationError

MASK32 = 0xFFFFFFFF
FNV_OFFSET_BASIS = 2166136261
FNV_PRIME = 16777619
GOLDEN_GAMMA = 0x9E3779B9
TWO_POW_53 = 9007199254740992.0

Seed = Union[int, float, str]
T = TypeVar("T")


def _imul(a: int, b: int) -> int:
    return (a * b) & MASK32


def _rotl(x: int, k: int) -> int:
    x &= MASK32
    return ((x << k) | (x >> (32 - k))) & MASK32


def hash_string(value: str) -> int:
    """32-bit FNV-1a over the UTF-16 code units of ``value``."""
    h = FNV_OFFSET_BASIS
    data = value.encode("utf-16-le", "surrogatepass")
    for i in range(0, len(data), 2):
        code = data[i] | (data[i + 1] << 8)
        h = _imul(h ^ code, FNV_PRIME)
    return h


def normalize_seed(seed: Seed) -> int:
    """Reduce a numeric or string seed to an unsigned 32-bit integer."""
    if isinstance(seed, bool):
        raise ConfigurationError("seed", "seed must be a number or a string, not a boolean")
    if isinstance(seed, str):
        return hash_string(seed)
    if isinstance(seed, float):
        if not math.isfinite(seed):
            raise ConfigurationError("seed", f"seed must be finite, got {seed!r}")
        return int(seed) & MASK32
    if isinstance(seed, int):
        return seed & MASK32
    raise ConfigurationError("seed", f"unsupported seed type {type(seed).__name__}")


def _splitmix32(seed: int, count: int) -> List[int]:
    state = seed & MASK32
    words = []
    for _ in range(count):
        state = (state + GOLDEN_GAMMA) & MASK32
        z = state
        z = _imul(z ^ (z >> 16), 0x85EBCA6B)
        z = _imul(z ^ (z >> 13), 0xC2B2AE35)
        words.append((z ^ (z >> 16)) & MASK32)
    return words


class Xoshiro128:
    """xoshiro128** over four 32-bit words of state."""

    __slots__ = ("_s",)

    def __init__(self, state: Sequence[int]):
        if len(state) != 4:
            raise ValueError("xoshiro128** needs exactly four state words")
        words = [w & MASK32 for w in state]
        if not any(words):
            # The all-zero state is a fixed point of the generator
            words[0] = 1
        self._s = words

    @property
    def state(self) -> tuple:
        return tuple(self._s)

    def clone(self) -> "Xoshiro128":
        return Xoshiro128(self._s)

    def next_uint32(self) -> int:
        s0, s1, s2, s3 = self._s
        result = _imul(_rotl(_imul(s1, 5), 7), 9)
        t = (s1 << 9) & MASK32
        s2 ^= s0
        s3 ^= s1
        s1 ^= s2
        s0 ^= s3
        s2 ^= t
        s3 = _rotl(s3, 11)
        self._s = [s0, s1, s2, s3]
        return result

    def random(self) -> float:
        """Return a float in [0, 1) with 53 bits of precision."""
        high = self.next_uint32() >> 5
        low = self.next_uint32() >> 6
        return (high * 67108864 + low) / TWO_POW_53

    def randint(self, low: float, high: float) -> int:
        """Return an integer in [low, high], both ends inclusive.

        Bounds are floored and swapped when reversed. Rejection sampling
        keeps the result unbiased.
        """
        lo = math.floor(low)
        hi = math.floor(high)
        if hi < lo:
            lo, hi = hi, lo
        span = hi - lo + 1
        if span > 0x100000000:
            raise ValueError(f"range too wide for a 32-bit generator: [{lo}, {hi}]")
        limit = (0x100000000 // span) * span
        while True:
            r = self.next_uint32()
            if r < limit:
                return lo + r % span

    def chance(self, probability: float) -> bool:
        return self.random() < probability

    def choice(self, items: Sequence[T]) -> T:
        if not items:
            raise IndexError("cannot choose from an empty sequence")
        return items[self.randint(0, len(items) - 1)]

    def fork(self, label: str) -> "Xoshiro128":
        """Derive an independent child stream without advancing this one."""
        temp = self.clone()
        h = hash_string(str(label))
        return Xoshiro128(
            [
                temp.next_uint32() ^ h,
                temp.next_uint32() ^ _rotl(h, 8),
                temp.next_uint32() ^ _rotl(h, 16),
                temp.next_uint32() ^ _rotl(h, 24),
            ]
        )


def create_prng(seed: Seed) -> Xoshiro128:
    """Seed a new generator from a numeric or string seed."""
    return Xoshiro128(_splitmix32(normalize_seed(seed), 4))
