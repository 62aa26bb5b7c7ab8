"""Selection of positions that may be rewired next."""

from __future__ import annotations

from collections.abc import Mapping

from symm_refine.core import apply_mapping
from symm_refine.scoring import Score


def _is_imperfect(score: Score | None) -> bool:
    return score is not None and score.is_defined and not score.is_perfect


def find_eligible(
    mapping: Mapping[int, int],
    scores: Mapping[int, Score],
    order: int,
) -> list[int]:
    """Find positions eligible as the target of the next edit.

    A position x is eligible if all of:

    1. score(x) is defined and > 0,
    2. f^(k-1)(x) is defined,
    3. score(f^(k-1)(x)) is defined and > 0.

    The third rule keeps edits away from edges on cycles that already
    close correctly.

    Args:
        mapping: Current correspondence.
        scores: Up-to-date scores for every key of ``mapping``.
        order: Symmetry order k.

    Returns:
        Sorted list of eligible positions.
    """
    chain_ends = apply_mapping(mapping, order - 1)

    eligible: list[int] = []
    for pos in sorted(mapping):
        if not _is_imperfect(scores.get(pos)):
            continue
        end = chain_ends.get(pos)
        if end is None:
            continue
        if not _is_imperfect(scores.get(end)):
            continue
        eligible.append(pos)
    return eligible
