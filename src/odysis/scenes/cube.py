"""Tetrahedral cube carrying a radial temperature and a swirling velocity."""

from itertools import permutations

import numpy as np

from ..core.data import Data
from ..core.mesh import TetraMesh
from ..core.scene import Scene


def create_cube_mesh(resolution: int = 8) -> TetraMesh:
    """Create a [-1, 1]^3 cube split into ``resolution``^3 cells of 6 tetrahedra.

    Every cell is cut along its main diagonal (Kuhn subdivision) so faces
    shared by neighbouring cells are triangulated identically.

    Data:
        temperature: distance from the origin
        velocity: (-y, x, z / 5) as components x, y, z
    """
    n = resolution
    axis = np.linspace(-1.0, 1.0, n + 1)
    x, y, z = np.meshgrid(axis, axis, axis, indexing="ij")
    vertices = np.column_stack([x.ravel(), y.ravel(), z.ravel()]).astype(np.float32)

    i, j, k = (a.ravel() for a in np.meshgrid(np.arange(n), np.arange(n), np.arange(n), indexing="ij"))

    def corner(offset: np.ndarray) -> np.ndarray:
        return ((i + offset[0]) * (n + 1) + (j + offset[1])) * (n + 1) + (k + offset[2])

    unit = np.eye(3, dtype=np.intp)
    tetrahedra = []
    for first, second, _ in permutations(range(3)):
        path = [np.zeros(3, dtype=np.intp), unit[first], unit[first] + unit[second], np.ones(3, dtype=np.intp)]
        tetrahedra.append(np.column_stack([corner(offset) for offset in path]))
    tetrahedra = np.vstack(tetrahedra).astype(np.uint32)

    temperature = Data.scalar("temperature", np.linalg.norm(vertices, axis=1))
    velocity = Data.vector("velocity", np.column_stack([-vertices[:, 1], vertices[:, 0], vertices[:, 2] / 5]))
    return TetraMesh.from_tetrahedra(vertices, tetrahedra, [temperature, velocity])


def create_cube_scene(resolution: int = 8) -> Scene:
    """Create a scene containing just the tetrahedral cube."""
    return Scene([create_cube_mesh(resolution)])
