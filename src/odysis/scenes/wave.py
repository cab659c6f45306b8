"""Triangulated height field shaped like a standing wave."""

import numpy as np

from ..core.data import Data
from ..core.mesh import PolyMesh
from ..core.scene import Scene


def create_wave_mesh(resolution: int = 32) -> PolyMesh:
    """Create a surface over [-1, 1]^2 with two triangles per grid cell.

    Data:
        height: the surface's y coordinate
    """
    n = resolution
    axis = np.linspace(-1.0, 1.0, n + 1)
    x, z = np.meshgrid(axis, axis, indexing="ij")
    y = 0.3 * np.sin(np.pi * x) * np.cos(np.pi * z)
    vertices = np.column_stack([x.ravel(), y.ravel(), z.ravel()]).astype(np.float32)

    i, j = (a.ravel() for a in np.meshgrid(np.arange(n), np.arange(n), indexing="ij"))
    v00 = i * (n + 1) + j
    v01 = v00 + 1
    v10 = v00 + n + 1
    v11 = v10 + 1
    triangles = np.vstack([
        np.column_stack([v00, v01, v11]),
        np.column_stack([v00, v11, v10]),
    ]).astype(np.uint32)

    return PolyMesh(vertices, triangles, [Data.scalar("height", vertices[:, 1])])


def create_wave_scene(resolution: int = 32) -> Scene:
    """Create a scene containing just the wave surface."""
    return Scene([create_wave_mesh(resolution)])
