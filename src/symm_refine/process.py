"""Refinement of alignments stored as JSON files."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from symm_refine.adapter import (
    alignment_from_dict,
    alignment_to_dict,
    refine_alignment,
)
from symm_refine.exceptions import SymmRefineError
from symm_refine.models import RefinementResult

logger = logging.getLogger(__name__)


def refine_alignment_file(
    alignment_path: str | Path,
    output_path: str | Path | None = None,
    order: int | None = None,
    max_iterations: int | None = None,
) -> RefinementResult:
    """Refine the alignment stored in a JSON file.

    Args:
        alignment_path: Path to the alignment JSON file.
        output_path: If given, the refined alignment is written here.
        order: Symmetry order. Overrides the order stored in the file.
        max_iterations: Iteration cap passed on to the refiner.

    Returns:
        RefinementResult with details of the refinement.
    """
    alignment_path = Path(alignment_path)
    input_path_str = str(alignment_path)
    output_path_str = str(output_path) if output_path is not None else None
    name = alignment_path.name.split(".json")[0]

    # Read alignment
    try:
        data = json.loads(alignment_path.read_text())
    except (OSError, ValueError) as e:
        return RefinementResult(
            name=name,
            input_path=input_path_str,
            output_path=output_path_str,
            success=False,
            error=f"Error reading file: {e}",
        )

    try:
        alignment = alignment_from_dict(data, name=name)
    except SymmRefineError as e:
        return RefinementResult(
            name=name,
            input_path=input_path_str,
            output_path=output_path_str,
            success=False,
            error=f"Invalid alignment: {e}",
        )

    # Refine
    try:
        refined, outcome = refine_alignment(
            alignment, order=order, max_iterations=max_iterations
        )
    except SymmRefineError as e:
        logger.debug("Refinement of %s failed: %s", alignment.name, e)
        return RefinementResult(
            name=alignment.name,
            input_path=input_path_str,
            output_path=output_path_str,
            success=False,
            order=order if order is not None else alignment.order,
            aligned_before=alignment.length,
            error=str(e),
        )

    # Write output
    if output_path is not None:
        try:
            Path(output_path).write_text(
                json.dumps(alignment_to_dict(refined), indent=2)
            )
        except OSError as e:
            return RefinementResult(
                name=alignment.name,
                input_path=input_path_str,
                output_path=output_path_str,
                success=False,
                order=refined.order,
                aligned_before=alignment.length,
                error=f"Error writing file: {e}",
            )

    return RefinementResult(
        name=alignment.name,
        input_path=input_path_str,
        output_path=output_path_str,
        success=True,
        order=refined.order,
        aligned_before=alignment.length,
        aligned_after=refined.length,
        iterations=outcome.iterations,
        blocks=refined.blocks,
    )


def result_to_dict(result: RefinementResult) -> dict:
    """Convert RefinementResult to a JSON-serializable dictionary."""
    return {
        "name": result.name,
        "input_path": result.input_path,
        "output_path": result.output_path,
        "success": result.success,
        "order": result.order,
        "aligned_before": result.aligned_before,
        "aligned_after": result.aligned_after,
        "iterations": result.iterations,
        "blocks": [
            [list(block.residues1), list(block.residues2)] for block in result.blocks
        ],
        "error": result.error,
    }
