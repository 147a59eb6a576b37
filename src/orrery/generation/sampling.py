"""Distribution helpers layered over the xoshiro128** stream.

Feature generators take a ``RandomGenerator`` as an explicit argument and
hand it back alongside their results, so every call site shows where
randomness is consumed.
"""

from __future__ import annotations

import math
from typing import List, Sequence, Tuple, TypeVar

from orrery.generation.prng import Seed, Xoshiro128, create_prng

T = TypeVar("T")

# Above this mean Knuth's product method underflows; use a normal approximation
POISSON_NORMAL_THRESHOLD = 30.0
GEOMETRIC_MAX_FAILURES = float(2**53)


class RandomGenerator:
    """Stateful sampler wrapping a single xoshiro128** stream."""

    __slots__ = ("_prng",)

    def __init__(self, prng: Xoshiro128):
        self._prng = prng

    @classmethod
    def from_seed(cls, seed: Seed) -> "RandomGenerator":
        return cls(create_prng(seed))

    @property
    def state(self) -> tuple:
        return self._prng.state

    def fork(self, label: str) -> "RandomGenerator":
        return RandomGenerator(self._prng.fork(label))

    # ------------------------------------------------------------------
    # Uniform primitives
    # ------------------------------------------------------------------
    def random(self) -> float:
        return self._prng.random()

    def uniform(self, low: float, high: float) -> float:
        return low + (high - low) * self._prng.random()

    def randint(self, low: float, high: float) -> int:
        return self._prng.randint(low, high)

    def chance(self, probability: float) -> bool:
        return self._prng.chance(probability)

    def choice(self, items: Sequence[T]) -> T:
        return self._prng.choice(items)

    def shuffle(self, items: Sequence[T]) -> List[T]:
        """Return a Fisher-Yates shuffled copy of ``items``."""
        result = list(items)
        for i in range(len(result) - 1, 0, -1):
            j = self._prng.randint(0, i)
            result[i], result[j] = result[j], result[i]
        return result

    def weighted_index(self, weights: Sequence[float]) -> int:
        total = sum(weights)
        if total <= 0:
            raise ValueError("weights must sum to a positive value")
        r = self._prng.random() * total
        last = 0
        for i, weight in enumerate(weights):
            if weight <= 0:
                continue
            if r < weight:
                return i
            r -= weight
            last = i
        return last

    def weighted_choice(self, items: Sequence[T], weights: Sequence[float]) -> T:
        if len(items) != len(weights):
            raise ValueError("items and weights must have the same length")
        return items[self.weighted_index(weights)]

    # ------------------------------------------------------------------
    # Continuous and discrete distributions
    # ------------------------------------------------------------------
    def normal(self, mean: float = 0.0, stddev: float = 1.0) -> float:
        """Box-Muller transform; consumes two uniforms per call."""
        u1 = 1.0 - self._prng.random()
        u2 = self._prng.random()
        z = math.sqrt(-2.0 * math.log(u1)) * math.cos(2.0 * math.pi * u2)
        return mean + stddev * z

    def log_normal(self, mu: float, sigma: float) -> float:
        return math.exp(self.normal(mu, sigma))

    def geometric(self, p: float) -> int:
        """Number of failures before the first success with probability ``p``."""
        if p <= 0.0 or p >= 1.0:
            return 0
        u = 1.0 - self._prng.random()
        # log1p keeps the denominator nonzero for p below float epsilon
        failures = math.log(u) / math.log1p(-p)
        return int(math.floor(min(failures, GEOMETRIC_MAX_FAILURES)))

    def poisson(self, lam: float) -> int:
        if lam <= 0.0:
            return 0
        if lam > POISSON_NORMAL_THRESHOLD:
            return max(0, int(round(self.normal(lam, math.sqrt(lam)))))
        limit = math.exp(-lam)
        k = 0
        product = 1.0
        while True:
            product *= self._prng.random()
            if product <= limit:
                return k
            k += 1

    def unit_vector(self, max_inclination: float = 90.0) -> Tuple[float, float, float]:
        """Direction uniform on the sphere band within ``max_inclination`` degrees
        of the XZ plane. Y is the vertical axis."""
        max_inclination = max(0.0, min(90.0, max_inclination))
        azimuth = self._prng.random() * 2.0 * math.pi
        limit = math.sin(math.radians(max_inclination))
        y = self.uniform(-limit, limit)
        horizontal = math.sqrt(max(0.0, 1.0 - y * y))
        return (horizontal * math.cos(azimuth), y, horizontal * math.sin(azimuth))
