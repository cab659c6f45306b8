"""IsoColor: color the parent's vertices by a scalar field."""

from __future__ import annotations

from typing import Any

import numpy as np
from numpy.typing import NDArray

from ..core.block import Block
from ..core.colormap import Colormap
from .base import Effect, EffectOutput, Selector


class IsoColor(Effect):
    """Maps the bound field linearly from [min, max] onto a color ramp.

    Values outside the range are clamped to the ramp ends. The geometry is
    the parent's own (shared, not copied); only per-vertex colors are
    produced. Vector inputs are colored by magnitude.
    """

    _parameters = ("min", "max")

    def __init__(
        self,
        parent: Block,
        input: Selector | None = None,
        min: float = 0.0,
        max: float = 0.0,
        colormap: str = "viridis",
        **kwargs,
    ) -> None:
        self._min = float(min)
        self._max = float(max)
        self._colormap = Colormap.get(colormap)
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

    @property
    def colormap(self) -> str:
        return self._colormap.name

    @colormap.setter
    def colormap(self, name: str) -> None:
        self._colormap = Colormap.get(name)
        self._notify("colormap", name)
        self.invalidate()

    def _check_changes(self, changes: dict[str, Any]) -> dict[str, Any]:
        checked = super()._check_changes(changes)
        if "colormap" in checked:
            Colormap.get(checked["colormap"])
        return checked

    def ramp_positions(self, field: NDArray[np.float32]) -> NDArray[np.float64]:
        """Position of each value along the ramp, clamped to [0, 1]."""
        values = field.astype(np.float64)
        span = self._max - self._min
        if span == 0:
            return (values >= self._max).astype(np.float64)
        return np.clip((values - self._min) / span, 0.0, 1.0)

    def generate(self, parent: Block, field: NDArray[np.float32]) -> EffectOutput:
        return EffectOutput(
            vertices=parent.vertices,
            triangles=parent.triangle_indices,
            tetrahedra=parent.tetrahedron_indices,
            colors=self._colormap(self.ramp_positions(field)),
            data=parent.data,
        )
