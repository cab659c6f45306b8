"""Array helpers for mesh geometry and connectivity.

Conventions used throughout the package:

- Vertices are (N, 3) float32 arrays
- Cells are (K, arity) uint32 arrays; arity 3 for triangles, 4 for tetrahedra
- Flat inputs are reshaped, copying only when the dtype differs
"""

from __future__ import annotations

import numpy as np
from numpy.typing import ArrayLike, NDArray

from .errors import DimensionMismatch, IndexOutOfRange

# Faces of a tetrahedron (v0, v1, v2, v3) as local vertex indices
TETRAHEDRON_FACES = np.array([[0, 2, 1], [0, 1, 3], [0, 3, 2], [1, 2, 3]], dtype=np.intp)


def as_vertices(array: ArrayLike) -> NDArray[np.float32]:
    """Interpret ``array`` as a list of 3D points.

    Raises:
        DimensionMismatch: If the number of values is not divisible by 3
    """
    flat = np.asarray(array, dtype=np.float32)
    if flat.size % 3:
        raise DimensionMismatch(f"Vertex array of length {flat.size} is not divisible by 3")
    return flat.reshape(-1, 3)


def as_cells(array: ArrayLike, arity: int, name: str = "indices") -> NDArray[np.uint32]:
    """Interpret ``array`` as cells of ``arity`` vertex indices each.

    Raises:
        DimensionMismatch: If the length is not divisible by ``arity``
        IndexOutOfRange: If an index is negative
    """
    raw = np.asarray(array)
    if raw.size == 0:
        return np.empty((0, arity), dtype=np.uint32)
    if raw.size % arity:
        raise DimensionMismatch(f"{name} of length {raw.size} is not divisible by {arity}")
    if np.issubdtype(raw.dtype, np.signedinteger) and raw.min() < 0:
        raise IndexOutOfRange(f"{name} contains a negative index")
    return raw.astype(np.uint32, copy=False).reshape(-1, arity)


def check_indices(cells: NDArray[np.uint32], vertex_count: int, name: str = "indices") -> None:
    """Ensure every index in ``cells`` refers to one of ``vertex_count`` vertices.

    Raises:
        IndexOutOfRange: On the first offending index
    """
    if cells.size and int(cells.max()) >= vertex_count:
        raise IndexOutOfRange(
            f"{name} references vertex {int(cells.max())} but only {vertex_count} exist"
        )


def bounding_sphere(vertices: NDArray[np.float32]) -> tuple[NDArray[np.float64], float]:
    """Sphere around the bounding-box center enclosing all vertices.

    Returns:
        Tuple of (center, radius); an empty vertex set gives the origin and 0
    """
    if len(vertices) == 0:
        return np.zeros(3), 0.0
    points = vertices.astype(np.float64)
    center = (points.min(axis=0) + points.max(axis=0)) / 2
    radius = float(np.sqrt(((points - center) ** 2).sum(axis=1).max()))
    return center, radius


def boundary_triangles(tetrahedra: NDArray[np.uint32]) -> NDArray[np.uint32]:
    """Triangles of a tetrahedral mesh that belong to exactly one tetrahedron.

    Winding follows the owning tetrahedron's face order. Output order is
    deterministic for a given input.
    """
    if len(tetrahedra) == 0:
        return np.empty((0, 3), dtype=np.uint32)
    faces = tetrahedra[:, TETRAHEDRON_FACES].reshape(-1, 3)
    keys = np.sort(faces, axis=1)
    _, first, counts = np.unique(keys, axis=0, return_index=True, return_counts=True)
    boundary = np.sort(first[counts == 1])
    return faces[boundary].astype(np.uint32)


def compact(cells: NDArray[np.uint32]) -> tuple[NDArray[np.intp], NDArray[np.uint32]]:
    """Drop unreferenced vertices from a cell list.

    Returns:
        Tuple of (kept vertex indices in ascending order, cells remapped
        to index into the kept vertices)
    """
    if cells.size == 0:
        return np.empty(0, dtype=np.intp), np.empty(cells.shape, dtype=np.uint32)
    kept, inverse = np.unique(cells, return_inverse=True)
    return kept.astype(np.intp), inverse.reshape(cells.shape).astype(np.uint32)
