"""Domain-separated deterministic RNG using xxhash.

A run is reproducible from (seed, sequence of tick deltas): every random
draw is a pure function of the seed, a domain, a key and a counter.

Formula: RNG_Value = Hash(Seed, Domain, Key, Counter)
"""

from __future__ import annotations

import struct
from typing import Sequence, TypeVar

import xxhash

from horde.core.enums import Domain

T = TypeVar("T")


class DeterministicRNG:
    """Stateless domain-separated pseudo-random number generator.

    Each call is a pure function of (seed, domain, key, counter) with
    no internal mutable state.
    """

    __slots__ = ("_seed",)

    _MAX_UINT64 = (1 << 64) - 1

    def __init__(self, seed: int) -> None:
        self._seed = seed

    @property
    def seed(self) -> int:
        return self._seed

    def _hash(self, domain: Domain, key: int, counter: int) -> int:
        payload = struct.pack("<qiqq", self._seed, domain.value, key, counter)
        return xxhash.xxh64(payload).intdigest()

    def next_float(self, domain: Domain, key: int, counter: int) -> float:
        """Return a deterministic float in [0.0, 1.0)."""
        return self._hash(domain, key, counter) / (self._MAX_UINT64 + 1)

    def next_int(self, domain: Domain, key: int, counter: int, low: int, high: int) -> int:
        """Return a deterministic integer in [low, high] inclusive."""
        f = self.next_float(domain, key, counter)
        return low + int(f * (high - low + 1))

    def next_bool(self, domain: Domain, key: int, counter: int, probability: float = 0.5) -> bool:
        """Return True with the given probability."""
        return self.next_float(domain, key, counter) < probability

    def stream(self, domain: Domain, key: int = 0) -> RandomStream:
        return RandomStream(self, domain, key)


class RandomStream:
    """Sequential view over one (domain, key) of a DeterministicRNG.

    Components that draw many values in order (spawn selection, wander
    targets) hold a stream; the internal counter makes successive draws
    distinct while staying reproducible.
    """

    __slots__ = ("_rng", "_domain", "_key", "_counter")

    def __init__(self, rng: DeterministicRNG, domain: Domain, key: int = 0) -> None:
        self._rng = rng
        self._domain = domain
        self._key = key
        self._counter = 0

    def random(self) -> float:
        value = self._rng.next_float(self._domain, self._key, self._counter)
        self._counter += 1
        return value

    def uniform(self, low: float, high: float) -> float:
        return low + (high - low) * self.random()

    def randint(self, low: int, high: int) -> int:
        """Integer in [low, high] inclusive."""
        value = self._rng.next_int(self._domain, self._key, self._counter, low, high)
        self._counter += 1
        return value

    def chance(self, probability: float) -> bool:
        return self.random() < probability

    def weighted_choice(self, items: Sequence[T], weights: Sequence[float]) -> T:
        """Pick one item with probability proportional to its weight."""
        if not items or len(items) != len(weights):
            raise ValueError("weighted_choice needs matching, non-empty items and weights")
        total = sum(weights)
        if total <= 0:
            raise ValueError("weighted_choice needs a positive total weight")
        roll = self.random() * total
        for item, weight in zip(items, weights):
            roll -= weight
            if roll < 0:
                return item
        return items[-1]
