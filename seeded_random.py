"""
seeded_random.py

Seedable random source shared by every stage of the MFA sign-in generator.

A single SeededRandom instance is created per run and passed by reference to
the population builder, the sign-in synthesizer and the correction engine.
The same seed reproduces the same sequence of draws, so the order in which
stages consume the source is part of the reproducibility contract.
"""

import logging
import time
from typing import Any, Optional, Sequence

import numpy as np
from numpy.random import Generator, PCG64


class InvalidArgumentError(ValueError):
    """Raised when a draw is requested from malformed input."""


class SeededRandom:
    """Reproducible uniform, integer, choice and weighted-choice draws."""

    def __init__(self, seed: Optional[int] = None):
        if seed is None:
            seed = int(time.time() * 1000)
        if seed < 0:
            raise InvalidArgumentError(f"Seed must be non-negative, got {seed}")

        self.seed = int(seed)
        self.rng: Generator = Generator(PCG64(self.seed))
        self.logger = logging.getLogger(self.__class__.__name__)
        self.logger.debug(f"Random source initialised with seed {self.seed}")

    def uniform(self) -> float:
        """Return a float in [0, 1)."""
        return float(self.rng.random())

    def int_range(self, low: int, high: int) -> int:
        """Return an integer in [low, high], both ends inclusive."""
        if high < low:
            raise InvalidArgumentError(f"Empty integer range [{low}, {high}]")
        return int(self.rng.integers(low, high, endpoint=True))

    def bernoulli(self, p: float) -> bool:
        """Draw True with probability p, clamped to [0, 1]."""
        p = float(np.clip(p, 0.0, 1.0))
        return self.uniform() < p

    def choice(self, items: Sequence[Any]) -> Any:
        """Uniformly select one element."""
        if len(items) == 0:
            raise InvalidArgumentError("Cannot choose from an empty sequence")
        return items[self.int_range(0, len(items) - 1)]

    def weighted_choice(self, items: Sequence[Any], weights: Sequence[float]) -> Any:
        """
        Select an element with probability proportional to its weight.

        A point is drawn in [0, total) and the weights are subtracted in
        order; the first item whose cumulative weight crosses the point wins.
        """
        if len(items) == 0:
            raise InvalidArgumentError("Cannot choose from an empty sequence")
        if len(items) != len(weights):
            raise InvalidArgumentError(
                f"Got {len(items)} items but {len(weights)} weights"
            )
        if any(w < 0 for w in weights):
            raise InvalidArgumentError(f"Weights must be non-negative: {list(weights)}")

        total = float(sum(weights))
        if total <= 0:
            raise InvalidArgumentError(f"Weight sum must be positive, got {total}")

        point = self.uniform() * total
        last_positive = None
        for item, weight in zip(items, weights):
            if weight > 0:
                last_positive = item
            point -= weight
            if point < 0:
                return item
        # Float residue can leave point at ~0 after the last subtraction
        return last_positive

    def sample_without_replacement(self, items: Sequence[Any], k: int) -> list:
        """
        Pick up to k distinct elements.

        Each pick removes the chosen element from the working list before the
        next draw, so no element can be returned twice.
        """
        pool = list(items)
        picked = []
        for _ in range(min(k, len(pool))):
            idx = self.int_range(0, len(pool) - 1)
            picked.append(pool.pop(idx))
        return picked

    def derive_seed(self) -> int:
        """Draw a seed for a dependent generator (e.g. a Faker instance)."""
        return self.int_range(0, 2 ** 32 - 1)
