"""Conversion between blocked alignments and correspondence mappings."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import replace
from typing import Any

from symm_refine.core import validate_order
from symm_refine.exceptions import AlignmentFormatError
from symm_refine.models import AlignmentBlock, RefinementOutcome, SymmetryAlignment
from symm_refine.refiner import refine_mapping


def alignment_as_map(alignment: SymmetryAlignment) -> dict[int, int]:
    """Convert a blocked alignment into a position mapping.

    Args:
        alignment: Alignment of a structure against itself.

    Returns:
        Mapping from each first-row residue to its aligned residue.

    Raises:
        AlignmentFormatError: If the rows of a block differ in length or a
            residue is aligned twice.
    """
    mapping: dict[int, int] = {}
    for i, block in enumerate(alignment.blocks):
        if len(block.residues1) != len(block.residues2):
            raise AlignmentFormatError(
                f"Block {i} has rows of different length "
                f"({len(block.residues1)} != {len(block.residues2)})"
            )
        for res1, res2 in block.pairs:
            if res1 in mapping:
                raise AlignmentFormatError(f"Residue {res1} is aligned twice")
            mapping[res1] = res2
    return mapping


def blocks_from_map(mapping: Mapping[int, int]) -> list[AlignmentBlock]:
    """Split a mapping into ascending alignment blocks.

    Keys are sorted; a new block starts whenever the image does not increase,
    which is how a circular permutation shows up in the alignment.

    Args:
        mapping: Refined correspondence.

    Returns:
        List of blocks, empty for an empty mapping.
    """
    blocks: list[AlignmentBlock] = []
    current: AlignmentBlock | None = None
    last_image: int | None = None

    for pos in sorted(mapping):
        image = mapping[pos]
        if current is None or last_image is None or image <= last_image:
            current = AlignmentBlock(residues1=[], residues2=[])
            blocks.append(current)
        current.residues1.append(pos)
        current.residues2.append(image)
        last_image = image

    return blocks


def replace_alignment(
    alignment: SymmetryAlignment, mapping: Mapping[int, int]
) -> SymmetryAlignment:
    """Return a copy of ``alignment`` whose blocks are rebuilt from ``mapping``."""
    return replace(alignment, blocks=blocks_from_map(mapping))


def refine_alignment(
    alignment: SymmetryAlignment,
    order: int | None = None,
    max_iterations: int | None = None,
) -> tuple[SymmetryAlignment, RefinementOutcome]:
    """Refine a symmetry alignment so that it is exactly periodic.

    Args:
        alignment: Alignment from the symmetry detector.
        order: Symmetry order. Falls back to ``alignment.order``.
        max_iterations: Passed on to :func:`refine_mapping`.

    Returns:
        Tuple of (refined alignment, refinement outcome).

    Raises:
        InvalidSymmetryOrderError: If no valid order is available.
    """
    k = validate_order(order if order is not None else alignment.order)
    outcome = refine_mapping(alignment_as_map(alignment), k, max_iterations)
    refined = replace_alignment(alignment, outcome.mapping)
    refined.order = k
    return refined, outcome


def _parse_row(row: Any, where: str) -> list[int]:
    if not isinstance(row, list):
        raise AlignmentFormatError(f"{where} is not a list")
    for value in row:
        if isinstance(value, bool) or not isinstance(value, int):
            raise AlignmentFormatError(f"{where} contains non-integer {value!r}")
    return list(row)


def alignment_from_dict(data: Any, name: str | None = None) -> SymmetryAlignment:
    """Build an alignment from its JSON form.

    The expected form is::

        {"name": "1itb.A", "order": 3,
         "blocks": [[[0, 1, 2], [40, 41, 42]], ...]}

    Args:
        data: Decoded JSON document.
        name: Name used when the document has none.

    Returns:
        The parsed alignment.

    Raises:
        AlignmentFormatError: If the document does not have this form.
    """
    if not isinstance(data, dict):
        raise AlignmentFormatError("Alignment must be a JSON object")

    raw_blocks = data.get("blocks")
    if not isinstance(raw_blocks, list):
        raise AlignmentFormatError("Alignment has no 'blocks' list")

    blocks: list[AlignmentBlock] = []
    for i, raw in enumerate(raw_blocks):
        if not isinstance(raw, list) or len(raw) != 2:
            raise AlignmentFormatError(f"Block {i} must contain exactly two rows")
        residues1 = _parse_row(raw[0], f"Block {i} row 1")
        residues2 = _parse_row(raw[1], f"Block {i} row 2")
        if len(residues1) != len(residues2):
            raise AlignmentFormatError(f"Block {i} has rows of different length")
        blocks.append(AlignmentBlock(residues1=residues1, residues2=residues2))

    order = data.get("order")
    if order is not None and (isinstance(order, bool) or not isinstance(order, int)):
        raise AlignmentFormatError(f"Order must be an integer, got {order!r}")

    return SymmetryAlignment(
        name=str(data.get("name") or name or ""),
        blocks=blocks,
        order=order,
    )


def alignment_to_dict(alignment: SymmetryAlignment) -> dict:
    """Convert an alignment to its JSON form."""
    return {
        "name": alignment.name,
        "order": alignment.order,
        "blocks": [
            [list(block.residues1), list(block.residues2)]
            for block in alignment.blocks
        ],
    }
