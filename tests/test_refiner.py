"""Tests for refiner module."""

import logging
import random

import pytest

from symm_refine.core import follow
from symm_refine.eligibility import find_eligible
from symm_refine.exceptions import (
    ConvergenceError,
    IncompleteMappingError,
    InvalidSymmetryOrderError,
)
from symm_refine.models import RefinementEdit
from symm_refine.refiner import finalize_mapping, refine_mapping, refine_symmetry
from symm_refine.scoring import score_mapping


def _random_mapping(rng: random.Random, size: int = 30) -> dict[int, int]:
    return {x: rng.randrange(0, size + 5) for x in range(size)}


class TestRefineMapping:
    """Tests for refine_mapping function."""

    def test_perfect_input_unchanged(self, perfect_c3: dict[int, int]) -> None:
        """Test that an already periodic mapping needs no edits."""
        outcome = refine_mapping(perfect_c3, 3)

        assert outcome.mapping == perfect_c3
        assert outcome.iterations == 0
        assert outcome.pruned == []
        assert outcome.potentials == [0]

    def test_two_fold_swap_unchanged(self) -> None:
        """Test the smallest periodic mapping under k=2."""
        assert refine_symmetry({0: 1, 1: 0}, 2) == {0: 1, 1: 0}

    def test_noisy_c3(
        self, noisy_c3: dict[int, int], refined_c3: dict[int, int]
    ) -> None:
        """Test that one edit repairs the misaligned position."""
        outcome = refine_mapping(noisy_c3, 3)

        assert outcome.mapping == refined_c3
        assert outcome.edits == [RefinementEdit(pivot=6, best=0, previous=1, score=1.0)]
        assert outcome.potentials == [3, 0]
        assert outcome.pruned == [9, 10]
        assert outcome.order == 3

    def test_input_not_modified(self, noisy_c3: dict[int, int]) -> None:
        """Test that the caller's mapping is left untouched."""
        original = dict(noisy_c3)
        refine_mapping(noisy_c3, 3)
        assert noisy_c3 == original

    def test_ties_broken_by_position(self) -> None:
        """Test that equal deviations are resolved towards lower positions."""
        outcome = refine_mapping({0: 1, 1: 2, 2: 3, 3: 0}, 2)

        assert outcome.mapping == {0: 1, 1: 0, 2: 3, 3: 2}
        assert [(e.pivot, e.best, e.previous) for e in outcome.edits] == [
            (1, 0, 2),
            (3, 2, 0),
        ]
        assert outcome.edits[0].score == pytest.approx(2.0)
        assert outcome.edits[1].score == pytest.approx(2.5)
        assert outcome.potentials == [8, 4, 0]

    def test_converged_cycle_is_kept(self) -> None:
        """Test that a position pointing into a correct cycle is pruned."""
        outcome = refine_mapping({0: 1, 1: 2, 2: 1}, 2)

        assert outcome.mapping == {1: 2, 2: 1}
        assert outcome.iterations == 0
        assert outcome.pruned == [0]

    def test_empty_mapping(self) -> None:
        """Test that an empty mapping refines to an empty mapping."""
        outcome = refine_mapping({}, 3)
        assert outcome.mapping == {}
        assert outcome.iterations == 0

    def test_deterministic(self) -> None:
        """Test that repeated runs make the same edits."""
        mapping = _random_mapping(random.Random(3))
        first = refine_mapping(mapping, 3, max_iterations=1000)
        second = refine_mapping(mapping, 3, max_iterations=1000)
        assert first.edits == second.edits
        assert first.mapping == second.mapping


class TestRefineErrors:
    """Tests for refinement failures."""

    def test_iteration_cap(self, noisy_c3: dict[int, int]) -> None:
        """Test that hitting the iteration cap raises ConvergenceError."""
        with pytest.raises(ConvergenceError, match="within 0 iterations") as exc_info:
            refine_mapping(noisy_c3, 3, max_iterations=0)
        assert exc_info.value.iterations == 0

    def test_incomplete_mapping(self) -> None:
        """Test that a key without image fails the call."""
        with pytest.raises(IncompleteMappingError):
            refine_mapping({0: 1, 1: None}, 2)  # type: ignore[dict-item]

    def test_invalid_order(self, perfect_c3: dict[int, int]) -> None:
        """Test that k=1 is rejected."""
        with pytest.raises(InvalidSymmetryOrderError):
            refine_mapping(perfect_c3, 1)


class TestRefinementProperties:
    """Properties checked on random mappings."""

    @pytest.mark.parametrize("k", [2, 3, 4])
    def test_survivors_are_periodic(self, k: int) -> None:
        """Test that every surviving position returns to itself after k steps."""
        rng = random.Random(k)
        for _ in range(25):
            mapping = _random_mapping(rng)
            outcome = refine_mapping(mapping, k)

            # For k <= 4 every edit makes ``best`` periodic
            assert outcome.iterations <= len(mapping)
            assert set(outcome.mapping) <= set(mapping)
            for pos in outcome.mapping:
                assert follow(outcome.mapping, pos, k) == pos
            for pos in outcome.pruned:
                assert pos not in outcome.mapping

    @pytest.mark.parametrize("k", [2, 3, 5])
    def test_perfect_positions_stay_perfect(self, k: int) -> None:
        """Test that an edit never breaks a position that was already periodic."""
        rng = random.Random(100 + k)
        for _ in range(25):
            mapping = _random_mapping(rng)
            try:
                outcome = refine_mapping(mapping, k, max_iterations=1000)
            except ConvergenceError:
                continue

            current = dict(mapping)
            perfect = {p for p, s in score_mapping(current, k).items() if s.is_perfect}
            for edit in outcome.edits:
                assert edit.best not in perfect
                assert edit.pivot not in perfect
                current[edit.pivot] = edit.best
                now = {p for p, s in score_mapping(current, k).items() if s.is_perfect}
                assert perfect <= now
                perfect = now

    def test_undefined_images_pruned(self) -> None:
        """Test that positions whose chain leaves the domain are removed."""
        outcome = refine_mapping({0: 1, 1: 0, 2: 50, 3: 2}, 2)
        assert outcome.mapping == {0: 1, 1: 0}
        assert outcome.pruned == [2, 3]


class TestRefinementDiagnostics:
    """Tests for non-convergence and potential tracking on real inputs."""

    def test_oscillation_hits_default_cap(self) -> None:
        """Test that a k=5 chain into a 2-cycle fails under the default cap."""
        # Edits alternate between 3 -> 1 and 3 -> 2, so the mapping flips
        # between two states and never becomes 5-periodic.
        mapping = {0: 1, 1: 2, 2: 3, 3: 2}
        with pytest.raises(ConvergenceError) as exc_info:
            refine_mapping(mapping, 5)
        assert exc_info.value.iterations == 16

    def test_oscillation_edits(self) -> None:
        """Test the first edits of the oscillating k=5 input."""
        # The second edit restores the input mapping.
        mapping = {0: 1, 1: 2, 2: 3, 3: 2}
        current = dict(mapping)
        for pivot, best in [(3, 1), (3, 2)]:
            scores = score_mapping(current, 5)
            eligible = find_eligible(current, scores, 5)
            assert min(eligible, key=lambda p: scores[p].sort_key) == best
            assert follow(current, best, 4) == pivot
            current[pivot] = best
        assert current == mapping

    def test_potential_increase_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test that a rise in total deviation is logged, not raised."""
        # Redirecting 10 -> 0 closes 0 <-> 10 but moves the 2-fold images of
        # 2, 3 and 4 one step further away.
        mapping = {0: 10, 10: 1, 2: 10, 3: 10, 4: 10, 1: 11, 11: 1}
        with caplog.at_level(logging.DEBUG, logger="symm_refine.refiner"):
            outcome = refine_mapping(mapping, 2)

        assert outcome.edits == [RefinementEdit(pivot=10, best=0, previous=1, score=1.0)]
        assert outcome.potentials == [8, 9]
        assert outcome.mapping == {0: 10, 10: 0, 1: 11, 11: 1}
        assert outcome.pruned == [2, 3, 4]
        assert "Potential increased from 8 to 9" in caplog.text


class TestFinalizeMapping:
    """Tests for finalize_mapping function."""

    def test_keeps_only_perfect(self) -> None:
        """Test that imperfect and undefined positions are dropped."""
        mapping = {0: 1, 1: 0, 2: 0, 3: 9}
        scores = score_mapping(mapping, 2)
        assert finalize_mapping(mapping, scores) == {0: 1, 1: 0}

    def test_does_not_modify_input(self) -> None:
        """Test that finalization returns a new mapping."""
        mapping = {0: 1, 1: 0, 2: 0}
        finalize_mapping(mapping, score_mapping(mapping, 2))
        assert mapping == {0: 1, 1: 0, 2: 0}
