"""IsoSurface: extract the surface where a scalar field equals a value.

Uses marching tetrahedra over the parent's tetrahedra. Each tetrahedron is
classified by which of its vertices lie above the iso-value (16 cases); the
surface crosses every edge joining an above vertex to a below one. Crossing
points are created once per parent edge, so neighbouring tetrahedra share
output vertices and the result is a connected indexed mesh.
"""

from __future__ import annotations

import logging

import numpy as np
from numpy.typing import NDArray

from ..core.block import Block
from .base import Effect, EffectOutput, Selector

logger = logging.getLogger(__name__)

# Local vertex pairs of the six tetrahedron edges
TETRAHEDRON_EDGES = np.array([[0, 1], [0, 2], [0, 3], [1, 2], [1, 3], [2, 3]], dtype=np.intp)

# For each case (bit i set when vertex i is above the value), up to two
# triangles given as local edge indices; -1 marks an unused slot
_ONE_CORNER = {
    0: [0, 1, 2],
    1: [0, 3, 4],
    2: [1, 3, 5],
    3: [2, 4, 5],
}
_TWO_CORNERS = {
    (0, 1): [[1, 3, 4], [1, 4, 2]],
    (0, 2): [[0, 3, 5], [0, 5, 2]],
    (0, 3): [[0, 4, 5], [0, 5, 1]],
}


def _build_case_table() -> NDArray[np.intp]:
    table = np.full((16, 2, 3), -1, dtype=np.intp)
    for case in range(1, 15):
        above = [i for i in range(4) if case >> i & 1]
        below = [i for i in range(4) if not case >> i & 1]
        if len(above) == 1:
            table[case, 0] = _ONE_CORNER[above[0]]
        elif len(below) == 1:
            table[case, 0] = _ONE_CORNER[below[0]]
        else:
            pair = tuple(above) if 0 in above else tuple(below)
            table[case] = _TWO_CORNERS[pair]
    return table


CASE_TABLE = _build_case_table()


def marching_tetrahedra(
    vertices: NDArray[np.float32],
    tetrahedra: NDArray[np.uint32],
    field: NDArray[np.float32],
    value: float,
) -> tuple[NDArray[np.float32], NDArray[np.uint32]]:
    """Polygonize the level set ``field == value`` over a tetrahedral mesh.

    Returns:
        Tuple of (vertices, triangle indices); both empty when the surface
        does not cross any tetrahedron
    """
    if len(tetrahedra) == 0:
        return np.empty((0, 3), dtype=np.float32), np.empty((0, 3), dtype=np.uint32)

    tets = tetrahedra.astype(np.intp)
    above = field[tets] > value
    cases = (above * np.array([1, 2, 4, 8])).sum(axis=1)
    active = (cases != 0) & (cases != 15)
    if not active.any():
        return np.empty((0, 3), dtype=np.float32), np.empty((0, 3), dtype=np.uint32)
    tets, above, cases = tets[active], above[active], cases[active]

    # Parent edges crossed by the surface, one output vertex per unique edge
    edges = np.sort(tets[:, TETRAHEDRON_EDGES], axis=2)
    crossing = above[:, TETRAHEDRON_EDGES[:, 0]] != above[:, TETRAHEDRON_EDGES[:, 1]]
    unique_edges, inverse = np.unique(edges[crossing], axis=0, return_inverse=True)
    edge_vertex = np.full(crossing.shape, -1, dtype=np.intp)
    edge_vertex[crossing] = inverse.reshape(-1)

    a, b = unique_edges[:, 0], unique_edges[:, 1]
    fa = field[a].astype(np.float64)
    fb = field[b].astype(np.float64)
    t = (value - fa) / (fb - fa)
    points = vertices[a] + t[:, None] * (vertices[b].astype(np.float64) - vertices[a])

    local = CASE_TABLE[cases]
    used = local[:, :, 0] >= 0
    rows = np.broadcast_to(np.arange(len(cases))[:, None, None], local.shape)
    triangles = edge_vertex[rows, np.where(local >= 0, local, 0)][used]
    return points.astype(np.float32), triangles.astype(np.uint32)


class IsoSurface(Effect):
    """Surface where the bound scalar equals ``value``.

    The output mesh is independent of the parent's topology. A value
    outside the field's range gives an empty mesh. Parents without
    tetrahedra have no volume to cut and also give an empty mesh.
    """

    _parameters = ("value",)

    def __init__(self, parent: Block, input: Selector | None = None, value: float = 0.0, **kwargs) -> None:
        self._value = float(value)
        super().__init__(parent, input, **kwargs)

    @property
    def value(self) -> float:
        return self._value

    @value.setter
    def value(self, value: float) -> None:
        self._set_parameter("value", value)

    def generate(self, parent: Block, field: NDArray[np.float32]) -> EffectOutput:
        tetrahedra = parent.tetrahedron_indices
        if tetrahedra is None:
            logger.warning("IsoSurface parent %r has no tetrahedra, output is empty", parent)
            return EffectOutput.empty()
        vertices, triangles = marching_tetrahedra(parent.vertices, tetrahedra, field, self._value)
        return EffectOutput(vertices=vertices, triangles=triangles)
