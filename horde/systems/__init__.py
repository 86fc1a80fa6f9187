"""Shared systems: deterministic RNG and spatial indexing."""

from horde.systems.rng import DeterministicRNG, RandomStream
from horde.systems.spatial_hash import SpatialHash

__all__ = ["DeterministicRNG", "RandomStream", "SpatialHash"]
