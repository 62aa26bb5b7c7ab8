"""Exceptions raised by symmetry refinement."""

from __future__ import annotations


class SymmRefineError(Exception):
    """Base class for refinement errors."""


class IncompleteMappingError(SymmRefineError, ValueError):
    """A position that must have an image in the mapping does not."""


class InvalidSymmetryOrderError(SymmRefineError, ValueError):
    """The symmetry order is missing or smaller than 2."""


class AlignmentFormatError(SymmRefineError, ValueError):
    """An external alignment could not be converted to a mapping."""


class ConvergenceError(SymmRefineError, RuntimeError):
    """Refinement hit its iteration cap with eligible positions left."""

    def __init__(self, iterations: int) -> None:
        super().__init__(
            f"Refinement did not converge within {iterations} iterations"
        )
        self.iterations = iterations
