"""Shared fixtures: small meshes with hand-checkable fields."""

import numpy as np
import pytest

from odysis.core import Data, PolyMesh, TetraMesh, update_cycle


@pytest.fixture(autouse=True)
def clean_update_cycle():
    """Make sure no test leaks pending recomputes into the next."""
    yield
    assert not update_cycle.active
    update_cycle.flush()


@pytest.fixture
def tetra():
    """One unit tetrahedron with field t = [0, 1, 2, 3] and a velocity vector."""
    vertices = np.array(
        [[0, 0, 0], [1, 0, 0], [0, 1, 0], [0, 0, 1]],
        dtype=np.float32,
    )
    data = [
        Data.scalar("t", [0.0, 1.0, 2.0, 3.0]),
        Data.vector("velocity", [[3, 4, 0], [0, 0, 0], [1, 0, 0], [0, 0, 2]]),
    ]
    return TetraMesh.from_tetrahedra(vertices, [0, 1, 2, 3], data)


@pytest.fixture
def two_tetra():
    """Two tetrahedra sharing the face (1, 2, 3); only vertex 4 is hot."""
    vertices = np.array(
        [[0, 0, 0], [1, 0, 0], [0, 1, 0], [0, 0, 1], [1, 1, 1]],
        dtype=np.float32,
    )
    data = [Data.scalar("t", [0.0, 0.0, 0.0, 0.0, 5.0])]
    return TetraMesh.from_tetrahedra(vertices, [0, 1, 2, 3, 1, 2, 3, 4], data)


@pytest.fixture
def square():
    """Unit square made of triangles (0, 1, 2) and (0, 2, 3), field t = [0, 1, 2, 3]."""
    vertices = np.array(
        [[0, 0, 0], [1, 0, 0], [1, 1, 0], [0, 1, 0]],
        dtype=np.float32,
    )
    return PolyMesh(vertices, [0, 1, 2, 0, 2, 3], [Data.scalar("t", [0.0, 1.0, 2.0, 3.0])])


class Recorder:
    """Collects values passed to an observer callback."""

    def __init__(self):
        self.calls = []

    def __call__(self, value):
        self.calls.append(value)

    @property
    def count(self):
        return len(self.calls)


@pytest.fixture
def recorder():
    return Recorder()
