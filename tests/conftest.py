"""
Pytest configuration for the gadget tests.

Puts the repository root on sys.path so the top-level packages import without
installation, and provides constraint-system factories for both modes.
"""

import random
import sys
from pathlib import Path

import pytest

# tests/ is inside the repository root, so parent is the root
repo_root = Path(__file__).parent.parent
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))

from constraints import ConstraintSystem  # noqa: E402
from primitives.field import BN254_FR  # noqa: E402


@pytest.fixture
def cs() -> ConstraintSystem:
    """Fresh proving-mode constraint system over BN254's scalar field."""
    return ConstraintSystem.proving(BN254_FR)


@pytest.fixture
def setup_cs() -> ConstraintSystem:
    """Fresh setup-mode constraint system over BN254's scalar field."""
    return ConstraintSystem.setup(BN254_FR)


@pytest.fixture
def rng() -> random.Random:
    """Deterministic RNG so failures reproduce."""
    return random.Random(0x5EED)
