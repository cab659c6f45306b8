"""Mesh blocks carrying triangle and tetrahedron connectivity."""

from __future__ import annotations

from typing import Any, Sequence

import numpy as np
from numpy.typing import ArrayLike, NDArray

from .block import DEFAULT_ALPHA, DEFAULT_COLOR, Block
from .data import Data
from .geometry import as_cells, as_vertices, boundary_triangles, check_indices


class Connectivity:
    """Fixed-arity cell indices checked against a mesh's vertex count.

    PolyMesh and TetraMesh compose one of these per cell kind instead of
    inheriting geometry behaviour from each other.
    """

    def __init__(self, indices: ArrayLike, arity: int, name: str) -> None:
        self.arity = arity
        self.name = name
        self.cells = as_cells(indices, arity, name)

    def check(self, vertex_count: int) -> None:
        """Raise IndexOutOfRange if a cell refers past ``vertex_count``."""
        check_indices(self.cells, vertex_count, self.name)

    def __len__(self) -> int:
        return len(self.cells)


class PolyMesh(Block):
    """A triangulated surface mesh.

    Example:
        mesh = PolyMesh(
            vertices=[0, 0, 0, 1, 0, 0, 0, 1, 0],
            triangle_indices=[0, 1, 2],
            data=[Data.scalar("height", [0.0, 0.5, 1.0])],
        )
    """

    def __init__(
        self,
        vertices: ArrayLike,
        triangle_indices: ArrayLike,
        data: Sequence[Data] = (),
        environment_meshes: Sequence[Any] = (),
        default_color: str | tuple[float, float, float] = DEFAULT_COLOR,
        default_alpha: float = DEFAULT_ALPHA,
    ) -> None:
        self._triangles = Connectivity(triangle_indices, 3, "triangle_indices")
        super().__init__(vertices, data, environment_meshes, default_color, default_alpha)

    @property
    def triangle_indices(self) -> NDArray[np.uint32]:
        return self._triangles.cells

    def _validate_topology(self, vertex_count: int) -> None:
        self._triangles.check(vertex_count)


class TetraMesh(Block):
    """A volumetric mesh of tetrahedra plus the triangles drawn for its surface.

    The surface triangulation is whatever the caller supplies; it is never
    derived implicitly. Use ``from_tetrahedra`` to compute the boundary
    explicitly.
    """

    def __init__(
        self,
        vertices: ArrayLike,
        triangle_indices: ArrayLike,
        tetrahedron_indices: ArrayLike,
        data: Sequence[Data] = (),
        environment_meshes: Sequence[Any] = (),
        default_color: str | tuple[float, float, float] = DEFAULT_COLOR,
        default_alpha: float = DEFAULT_ALPHA,
    ) -> None:
        self._triangles = Connectivity(triangle_indices, 3, "triangle_indices")
        self._tetrahedra = Connectivity(tetrahedron_indices, 4, "tetrahedron_indices")
        super().__init__(vertices, data, environment_meshes, default_color, default_alpha)

    @classmethod
    def from_tetrahedra(
        cls,
        vertices: ArrayLike,
        tetrahedron_indices: ArrayLike,
        data: Sequence[Data] = (),
        **kwargs: Any,
    ) -> TetraMesh:
        """Build a TetraMesh whose surface is the boundary of its tetrahedra."""
        tetrahedra = as_cells(tetrahedron_indices, 4, "tetrahedron_indices")
        check_indices(tetrahedra, len(as_vertices(vertices)), "tetrahedron_indices")
        return cls(vertices, boundary_triangles(tetrahedra), tetrahedra, data, **kwargs)

    @property
    def triangle_indices(self) -> NDArray[np.uint32]:
        return self._triangles.cells

    @property
    def tetrahedron_indices(self) -> NDArray[np.uint32]:
        return self._tetrahedra.cells

    def _validate_topology(self, vertex_count: int) -> None:
        self._triangles.check(vertex_count)
        self._tetrahedra.check(vertex_count)
