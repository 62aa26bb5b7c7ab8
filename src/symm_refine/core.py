"""Core correspondence-graph utilities.

A correspondence is a ``dict[int, int]`` read as a functional directed graph:
every key has exactly one outgoing edge, pointing at its image.
"""

from __future__ import annotations

from collections.abc import Mapping, MutableMapping

from symm_refine.exceptions import IncompleteMappingError, InvalidSymmetryOrderError


def validate_mapping(mapping: Mapping[int, int | None]) -> None:
    """Check that every key of the mapping has a defined image.

    Args:
        mapping: Correspondence to check.

    Raises:
        IncompleteMappingError: If any key maps to None.
    """
    missing = sorted(pos for pos, image in mapping.items() if image is None)
    if missing:
        raise IncompleteMappingError(
            f"Positions without a defined image: {missing[:10]}"
            + (f" (and {len(missing) - 10} more)" if len(missing) > 10 else "")
        )


def validate_order(order: int | None) -> int:
    """Check a symmetry order.

    Args:
        order: Number of repeated units, must be at least 2.

    Returns:
        The order, unchanged.

    Raises:
        InvalidSymmetryOrderError: If the order is missing or below 2.
    """
    if order is None:
        raise InvalidSymmetryOrderError("No symmetry order given")
    if isinstance(order, bool) or not isinstance(order, int) or order < 2:
        raise InvalidSymmetryOrderError(
            f"Symmetry order must be an integer >= 2, got {order!r}"
        )
    return order


def follow(mapping: Mapping[int, int], start: int, steps: int) -> int | None:
    """Apply the mapping ``steps`` times starting from ``start``.

    Args:
        mapping: Correspondence to follow.
        start: Starting position.
        steps: Number of edges to follow.

    Returns:
        The position reached, or None if the chain leaves the domain.
    """
    pos = start
    for _ in range(steps):
        pos = mapping.get(pos)
        if pos is None:
            return None
    return pos


def follow_strict(mapping: Mapping[int, int], start: int, steps: int) -> int:
    """Like :func:`follow`, but a broken chain is an error.

    Raises:
        IncompleteMappingError: If some position on the chain has no image.
    """
    pos = start
    for step in range(steps):
        if pos not in mapping:
            raise IncompleteMappingError(
                f"Chain from {start} broken at {pos} after {step} of {steps} steps"
            )
        pos = mapping[pos]
    return pos


def apply_mapping(mapping: Mapping[int, int], steps: int) -> dict[int, int]:
    """Compose the mapping with itself ``steps`` times.

    Args:
        mapping: Correspondence to compose.
        steps: Number of applications (>= 1).

    Returns:
        Mapping from each key to its ``steps``-fold image. Keys whose image
        is undefined are left out.
    """
    images = dict(mapping)
    for _ in range(steps - 1):
        images = {pos: mapping[img] for pos, img in images.items() if img in mapping}
    return images


def redirect_edge(mapping: MutableMapping[int, int], source: int, target: int) -> int:
    """Point the outgoing edge of ``source`` at ``target``.

    This is the only way the refiner modifies a correspondence.

    Args:
        mapping: Correspondence to edit in place.
        source: Position whose edge is redirected. Must already be a key.
        target: New image of ``source``.

    Returns:
        The previous image of ``source``.

    Raises:
        IncompleteMappingError: If ``source`` has no outgoing edge.
    """
    if source not in mapping:
        raise IncompleteMappingError(f"Position {source} has no edge to redirect")
    previous = mapping[source]
    mapping[source] = target
    return previous


def is_periodic(mapping: Mapping[int, int], position: int, order: int) -> bool:
    """Return True if the ``order``-fold image of ``position`` is itself."""
    return follow(mapping, position, order) == position
