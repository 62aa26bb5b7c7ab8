"""Data models for symm_refine."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class AlignmentBlock:
    """One ascending run of a blocked two-row alignment."""

    residues1: list[int]
    residues2: list[int]

    @property
    def pairs(self) -> list[tuple[int, int]]:
        return list(zip(self.residues1, self.residues2))

    def __len__(self) -> int:
        return len(self.residues1)


@dataclass
class SymmetryAlignment:
    """A structure aligned against itself by a symmetry detector."""

    name: str
    blocks: list[AlignmentBlock]
    order: int | None = None

    @property
    def length(self) -> int:
        return sum(len(block) for block in self.blocks)

    @property
    def block_count(self) -> int:
        return len(self.blocks)


@dataclass(frozen=True)
class RefinementEdit:
    """A single edge redirection made by the refiner."""

    pivot: int
    best: int
    previous: int
    score: float


@dataclass
class RefinementOutcome:
    """Result of refining one correspondence."""

    order: int
    mapping: dict[int, int]
    edits: list[RefinementEdit] = field(default_factory=list)
    potentials: list[int] = field(default_factory=list)
    pruned: list[int] = field(default_factory=list)

    @property
    def iterations(self) -> int:
        return len(self.edits)


@dataclass
class RefinementResult:
    """Result of refining the alignment stored in a single file."""

    name: str
    input_path: str
    output_path: str | None
    success: bool
    order: int | None = None
    aligned_before: int = 0
    aligned_after: int = 0
    iterations: int = 0
    blocks: list[AlignmentBlock] = field(default_factory=list)
    error: str | None = None
