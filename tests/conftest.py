"""Pytest fixtures for symm_refine tests."""

import json
from pathlib import Path

import pytest

# C3 correspondence with every position already on a 3-cycle.
PERFECT_C3 = {0: 2, 2: 4, 4: 0, 1: 3, 3: 5, 5: 1}

# Ideal C3 (0->3->6->0, 1->4->7->1, 2->5->8->2) with 6 misaligned onto 1,
# plus 9 and 10 whose chains leave the domain.
NOISY_C3 = {
    0: 3,
    1: 4,
    2: 5,
    3: 6,
    4: 7,
    5: 8,
    6: 1,
    7: 1,
    8: 2,
    9: 12,
    10: 9,
}

REFINED_C3 = {0: 3, 1: 4, 2: 5, 3: 6, 4: 7, 5: 8, 6: 0, 7: 1, 8: 2}


@pytest.fixture
def perfect_c3() -> dict[int, int]:
    """A mapping that is already exactly 3-periodic."""
    return dict(PERFECT_C3)


@pytest.fixture
def noisy_c3() -> dict[int, int]:
    """A nearly 3-periodic mapping needing one edit and two prunes."""
    return dict(NOISY_C3)


@pytest.fixture
def refined_c3() -> dict[int, int]:
    """Expected refinement of ``noisy_c3``."""
    return dict(REFINED_C3)


@pytest.fixture
def temp_json_dir(tmp_path: Path) -> Path:
    """Create a temporary directory for alignment files."""
    return tmp_path


@pytest.fixture
def noisy_alignment_json(temp_json_dir: Path) -> Path:
    """Create an alignment file holding the noisy C3 mapping."""
    data = {
        "name": "noisy",
        "order": 3,
        "blocks": [
            [[0, 1, 2, 3, 4, 5], [3, 4, 5, 6, 7, 8]],
            [[6], [1]],
            [[7, 8, 9], [1, 2, 12]],
            [[10], [9]],
        ],
    }
    path = temp_json_dir / "noisy.json"
    path.write_text(json.dumps(data))
    return path


@pytest.fixture
def no_order_json(temp_json_dir: Path) -> Path:
    """Create an alignment file without a symmetry order."""
    data = {"name": "unordered", "blocks": [[[0, 1], [1, 0]]]}
    path = temp_json_dir / "unordered.json"
    path.write_text(json.dumps(data))
    return path


@pytest.fixture
def invalid_json(temp_json_dir: Path) -> Path:
    """Create a file that is not valid JSON."""
    path = temp_json_dir / "broken.json"
    path.write_text("{not json")
    return path


@pytest.fixture
def malformed_alignment_json(temp_json_dir: Path) -> Path:
    """Create an alignment file whose block rows differ in length."""
    data = {"name": "malformed", "order": 2, "blocks": [[[0, 1, 2], [1, 0]]]}
    path = temp_json_dir / "malformed.json"
    path.write_text(json.dumps(data))
    return path
