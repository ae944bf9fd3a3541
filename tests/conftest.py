"""Shared test fixtures for polyprism."""

from pathlib import Path

import numpy as np
import pytest

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture
def fixtures_dir():
    """Return the path to the test fixtures directory."""
    return FIXTURES_DIR


@pytest.fixture
def config_path():
    """Return the path to the sample extrusion configuration."""
    return FIXTURES_DIR / "extrusion.json"


@pytest.fixture
def unit_square():
    """Counter-clockwise unit square ``[(0,0), (1,0), (1,1), (0,1)]``."""
    return np.array([[0.0, 0.0], [1.0, 0.0], [1.0, 1.0], [0.0, 1.0]])


@pytest.fixture
def l_shape():
    """Counter-clockwise L-shaped hexagon with area 3."""
    return np.array([
        [0.0, 0.0], [2.0, 0.0], [2.0, 1.0],
        [1.0, 1.0], [1.0, 2.0], [0.0, 2.0],
    ])


@pytest.fixture
def star_ring():
    """Concave eight-vertex ring with two deep notches."""
    return np.array([
        [0.5, 0.677], [0.104, 0.933], [-0.41, 0.052], [0.277, -0.567],
        [0.427, -0.353], [0.911, -0.251], [0.229, -0.04], [0.78, -0.093],
    ])
