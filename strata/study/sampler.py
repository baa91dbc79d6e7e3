"""
Weighted Sampler.

Single draw from a candidate pool by cumulative-weight walk. Callers
drawing several items remove each pick from the pool before the next
draw. Pass a seeded random.Random for reproducible selection.
"""

from __future__ import annotations

import random
from collections.abc import Callable, Sequence
from typing import TypeVar

T = TypeVar("T")

MIN_WEIGHT = 0.05


class WeightedSampler:
    """Draws one candidate with probability proportional to its weight."""

    def __init__(self, rng: random.Random | None = None, min_weight: float = MIN_WEIGHT):
        self.rng = rng or random.Random()
        self.min_weight = min_weight

    def sample(self, candidates: Sequence[T], weight_fn: Callable[[T], float]) -> T | None:
        """
        Draw one candidate.

        Args:
            candidates: Pool to draw from (not modified)
            weight_fn: Weight for a candidate; floored at min_weight

        Returns:
            The chosen candidate, or None for an empty pool
        """
        if not candidates:
            return None

        weights = [max(self.min_weight, weight_fn(c)) for c in candidates]
        total = sum(weights)
        if total <= 0:
            return self.rng.choice(candidates)

        r = self.rng.random() * total
        for candidate, weight in zip(candidates, weights):
            r -= weight
            if r <= 0:
                return candidate
        # Float rounding can leave r marginally above zero
        return candidates[-1]

    def choice(self, candidates: Sequence[T]) -> T | None:
        """Uniform draw; None for an empty pool."""
        if not candidates:
            return None
        return self.rng.choice(candidates)
