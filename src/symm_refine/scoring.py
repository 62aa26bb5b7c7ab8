"""Per-position periodicity scores."""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from symm_refine.core import apply_mapping


@dataclass(frozen=True)
class Score:
    """Distance of a position from being exactly periodic.

    Attributes:
        position: Scored position x.
        deviation: |x - f^k(x)|, or ``math.inf`` if f^k(x) is undefined.
        bias: Tie-breaker in [0, 1), increasing with position. Zero for
            perfect positions.
    """

    position: int
    deviation: float
    bias: float = 0.0

    @property
    def value(self) -> float:
        return self.deviation + self.bias

    @property
    def is_defined(self) -> bool:
        return not math.isinf(self.deviation)

    @property
    def is_perfect(self) -> bool:
        return self.deviation == 0

    @property
    def sort_key(self) -> tuple[float, int]:
        """Ordering equivalent to ``value`` that avoids comparing floats.

        Within one scoring pass the bias is strictly increasing in position,
        so comparing positions gives the same order as comparing biases.
        """
        return (self.deviation, self.position)


def score_position(
    position: int,
    image: int | None,
    min_position: int,
    max_position: int,
) -> Score:
    """Score a single position from its k-fold image.

    Args:
        position: Position x.
        image: f^k(x), or None if undefined.
        min_position: Smallest key in the mapping.
        max_position: Largest key in the mapping.

    Returns:
        Score with the absolute error |x - f^k(x)| plus a positional bias.
    """
    if image is None:
        deviation: float = math.inf
    else:
        deviation = abs(position - image)

    bias = 0.0
    if deviation > 0:
        bias = (position - min_position) / (1 + max_position - min_position)
    return Score(position=position, deviation=deviation, bias=bias)


def score_mapping(mapping: Mapping[int, int], order: int) -> dict[int, Score]:
    """Score every key of the mapping under ``order``-fold application.

    Args:
        mapping: Current correspondence.
        order: Symmetry order k.

    Returns:
        Mapping from each key to its Score.
    """
    if not mapping:
        return {}

    images = apply_mapping(mapping, order)
    min_position = min(mapping)
    max_position = max(mapping)

    return {
        pos: score_position(pos, images.get(pos), min_position, max_position)
        for pos in mapping
    }


def total_deviation(scores: Iterable[Score]) -> int:
    """Sum of finite deviations, used to track refinement progress."""
    return sum(int(s.deviation) for s in scores if s.is_defined)
