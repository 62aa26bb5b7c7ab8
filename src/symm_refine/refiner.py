"""Greedy refinement of a correspondence towards exact k-fold periodicity.

Each iteration picks the eligible position ``best`` with the lowest score,
walks k-1 edges forward from it to ``pivot`` and redirects the edge of
``pivot`` to ``best``. Together with the existing chain this closes a cycle
of length k through ``best``. Scores and eligibility are then recomputed
from scratch. Once nothing is eligible, every position that is not exactly
periodic is dropped.

No bound on the number of edits is known in general, so the loop is capped
at ``ITERATION_CAP_FACTOR`` times the size of the mapping.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from symm_refine.core import (
    follow_strict,
    redirect_edge,
    validate_mapping,
    validate_order,
)
from symm_refine.eligibility import find_eligible
from symm_refine.exceptions import ConvergenceError
from symm_refine.models import RefinementEdit, RefinementOutcome
from symm_refine.scoring import Score, score_mapping, total_deviation

logger = logging.getLogger(__name__)

ITERATION_CAP_FACTOR = 4


def finalize_mapping(
    mapping: Mapping[int, int],
    scores: Mapping[int, Score],
) -> dict[int, int]:
    """Keep only the exactly periodic positions of a mapping.

    Args:
        mapping: Correspondence after the refinement loop.
        scores: Scores computed for ``mapping``.

    Returns:
        New mapping restricted to positions with a perfect score.
    """
    return {
        pos: image
        for pos, image in mapping.items()
        if pos in scores and scores[pos].is_perfect
    }


def refine_mapping(
    mapping: Mapping[int, int],
    order: int,
    max_iterations: int | None = None,
) -> RefinementOutcome:
    """Refine a correspondence so that it becomes exactly ``order``-periodic.

    The input mapping is copied and never modified.

    Args:
        mapping: Noisy correspondence; every key must have an image.
        order: Symmetry order k (>= 2).
        max_iterations: Maximum number of edits. Defaults to
            ``ITERATION_CAP_FACTOR * len(mapping)``.

    Returns:
        RefinementOutcome with the finalized mapping and the edit history.

    Raises:
        IncompleteMappingError: If a key has no image.
        InvalidSymmetryOrderError: If ``order`` is not an integer >= 2.
        ConvergenceError: If positions are still eligible after
            ``max_iterations`` edits.
    """
    validate_order(order)
    validate_mapping(mapping)

    alignment = dict(mapping)
    if max_iterations is None:
        max_iterations = ITERATION_CAP_FACTOR * len(alignment)

    scores = score_mapping(alignment, order)
    eligible = find_eligible(alignment, scores, order)
    potential = total_deviation(scores.values())

    outcome = RefinementOutcome(order=order, mapping={}, potentials=[potential])
    logger.debug(
        "Refining %d positions with order %d: %d eligible, potential %d",
        len(alignment),
        order,
        len(eligible),
        potential,
    )

    while eligible:
        if outcome.iterations >= max_iterations:
            raise ConvergenceError(max_iterations)

        best = min(eligible, key=lambda pos: scores[pos].sort_key)
        pivot = follow_strict(alignment, best, order - 1)
        previous = redirect_edge(alignment, pivot, best)
        outcome.edits.append(
            RefinementEdit(
                pivot=pivot,
                best=best,
                previous=previous,
                score=scores[best].value,
            )
        )

        scores = score_mapping(alignment, order)
        eligible = find_eligible(alignment, scores, order)

        new_potential = total_deviation(scores.values())
        if new_potential > potential:
            logger.debug(
                "Potential increased from %d to %d at iteration %d",
                potential,
                new_potential,
                outcome.iterations,
            )
        potential = new_potential
        outcome.potentials.append(potential)

        logger.debug(
            "Iteration %d: %d -> %d (was %d), %d eligible",
            outcome.iterations,
            pivot,
            best,
            previous,
            len(eligible),
        )

    outcome.mapping = finalize_mapping(alignment, scores)
    outcome.pruned = sorted(set(alignment) - set(outcome.mapping))

    logger.debug(
        "Refinement finished after %d iterations: kept %d, pruned %d",
        outcome.iterations,
        len(outcome.mapping),
        len(outcome.pruned),
    )
    return outcome


def refine_symmetry(
    mapping: Mapping[int, int],
    order: int,
    max_iterations: int | None = None,
) -> dict[int, int]:
    """Return only the refined mapping of :func:`refine_mapping`."""
    return refine_mapping(mapping, order, max_iterations=max_iterations).mapping
