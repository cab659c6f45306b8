"""Threshold: keep the part of the parent where a scalar lies in a range."""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray

from ..core.block import Block
from ..core.data import Component, Data
from ..core.geometry import boundary_triangles, compact
from .base import Effect, EffectOutput, Selector


def slice_data(data: tuple[Data, ...], kept: NDArray[np.intp]) -> tuple[Data, ...]:
    """Copy of ``data`` restricted to the vertices listed in ``kept``."""
    sliced = []
    for item in data:
        components = [
            Component(component.name, component.values[kept], arity=component.arity)
            for component in item.components
        ]
        sliced.append(Data(item.name, components))
    return tuple(sliced)


class Threshold(Effect):
    """Cells of the parent whose vertices all have values within [min, max].

    Volumetric parents are filtered by tetrahedron and drawn by the boundary
    of the retained tetrahedra; surface parents are filtered by triangle.
    Vertices not used by a retained cell are dropped and indices remapped.
    The parent's Data is carried over for the retained vertices. An empty
    range (min > max) gives an empty mesh.
    """

    _parameters = ("min", "max")

    def __init__(
        self,
        parent: Block,
        input: Selector | None = None,
        min: float = 0.0,
        max: float = 0.0,
        **kwargs,
    ) -> None:
        self._min = float(min)
        self._max = float(max)
        super().__init__(parent, input, **kwargs)

    @property
    def min(self) -> float:
        return self._min

    @min.setter
    def min(self, value: float) -> None:
        self._set_parameter("min", value)

    @property
    def max(self) -> float:
        return self._max

    @max.setter
    def max(self, value: float) -> None:
        self._set_parameter("max", value)

    def generate(self, parent: Block, field: NDArray[np.float32]) -> EffectOutput:
        inside = (field >= self._min) & (field <= self._max)
        tetrahedra = parent.tetrahedron_indices
        volumetric = tetrahedra is not None

        cells = tetrahedra if volumetric else parent.triangle_indices
        cells = cells[inside[cells.astype(np.intp)].all(axis=1)] if len(cells) else cells
        if len(cells) == 0:
            return EffectOutput.empty(volumetric=volumetric)

        kept, remapped = compact(cells)
        if volumetric:
            triangles, tets = boundary_triangles(remapped), remapped
        else:
            triangles, tets = remapped, None
        return EffectOutput(
            vertices=parent.vertices[kept],
            triangles=triangles,
            tetrahedra=tets,
            data=slice_data(parent.data, kept),
        )
