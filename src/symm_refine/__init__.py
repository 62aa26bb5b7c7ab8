"""Refine symmetry alignments to exact k-fold periodicity.

This package takes the noisy residue correspondence produced by an internal
symmetry detector and edits it until every retained residue returns to
itself after k applications of the correspondence.
"""

from symm_refine.adapter import (
    alignment_as_map,
    alignment_from_dict,
    alignment_to_dict,
    blocks_from_map,
    refine_alignment,
)
from symm_refine.exceptions import (
    AlignmentFormatError,
    ConvergenceError,
    IncompleteMappingError,
    InvalidSymmetryOrderError,
    SymmRefineError,
)
from symm_refine.models import (
    AlignmentBlock,
    RefinementEdit,
    RefinementOutcome,
    RefinementResult,
    SymmetryAlignment,
)
from symm_refine.process import refine_alignment_file
from symm_refine.refiner import finalize_mapping, refine_mapping, refine_symmetry

__all__ = [
    "refine_mapping",
    "refine_symmetry",
    "finalize_mapping",
    "refine_alignment",
    "refine_alignment_file",
    "alignment_as_map",
    "alignment_from_dict",
    "alignment_to_dict",
    "blocks_from_map",
    "AlignmentBlock",
    "SymmetryAlignment",
    "RefinementEdit",
    "RefinementOutcome",
    "RefinementResult",
    "SymmRefineError",
    "IncompleteMappingError",
    "InvalidSymmetryOrderError",
    "AlignmentFormatError",
    "ConvergenceError",
]
