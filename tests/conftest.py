"""
Pytest configuration and shared fixtures for T-NURCC tests.
"""

import pytest
import numpy as np
import sys
from pathlib import Path

# Add the parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from watfTNURCC.discretization.tnurcc import Tnurcc
from watfTNURCC.geometry.primitives import make_tnurcc_cube


# Cube corners and faces (anticlockwise from outside), shared with primitives
CUBE_POINTS = np.array([
    [0.0, 0.0, 0.0], [0.0, 0.0, 1.0], [1.0, 0.0, 1.0], [1.0, 0.0, 0.0],
    [0.0, 1.0, 0.0], [0.0, 1.0, 1.0], [1.0, 1.0, 1.0], [1.0, 1.0, 0.0],
])

CUBE_QUADS = [
    [0, 3, 2, 1],
    [0, 1, 5, 4],
    [1, 2, 6, 5],
    [4, 5, 6, 7],
    [2, 3, 7, 6],
    [0, 4, 7, 3],
]


def split_cube_faces():
    """Cube whose front face is cut in two, giving T-junctions at 8 and 9."""
    points = np.vstack([CUBE_POINTS, [[0.5, 0.0, 0.0], [0.5, 0.0, 1.0]]])
    faces = [
        [(0, [(8, 0.5)]), (8, [(9, 1.0)]), (9, [(1, 0.5)]), (1, [(0, 1.0)])],
        [(8, [(3, 0.5)]), (3, [(2, 1.0)]), (2, [(9, 0.5)]), (9, [(8, 1.0)])],
        [(0, [(1, 1.0)]), (1, [(5, 1.0)]), (5, [(4, 1.0)]), (4, [(0, 1.0)])],
        [(1, [(9, 0.5), (2, 0.5)]), (2, [(6, 1.0)]), (6, [(5, 1.0)]), (5, [(1, 1.0)])],
        [(4, [(5, 1.0)]), (5, [(6, 1.0)]), (6, [(7, 1.0)]), (7, [(4, 1.0)])],
        [(2, [(3, 1.0)]), (3, [(7, 1.0)]), (7, [(6, 1.0)]), (6, [(2, 1.0)])],
        [(0, [(4, 1.0)]), (4, [(7, 1.0)]), (7, [(3, 1.0)]), (3, [(8, 0.5), (0, 0.5)])],
    ]
    return points, faces


@pytest.fixture
def tolerance():
    """Default tolerance for floating point comparisons."""
    return 1e-12


@pytest.fixture
def loose_tolerance():
    """Looser tolerance for refined geometry."""
    return 1e-8


@pytest.fixture
def cube():
    """Unit cube T-NURCC, every knot interval 1."""
    return make_tnurcc_cube()


@pytest.fixture
def split_cube():
    """Unit cube with a T-junction split of its front face (V=10, E=15, F=7)."""
    points, faces = split_cube_faces()
    return Tnurcc.try_new(points, faces)
