"""Block: renderable geometry owning vertex data."""

from __future__ import annotations

import logging
import weakref
from typing import TYPE_CHECKING, Any, Sequence

import numpy as np
from numpy.typing import ArrayLike, NDArray

from .colormap import parse_color
from .data import Data
from .errors import DimensionMismatch, UnknownField
from .events import Observable, batch_updates
from .geometry import as_vertices, bounding_sphere

if TYPE_CHECKING:
    import trimesh
    from ..effects.base import Effect
    from .scene import Scene

logger = logging.getLogger(__name__)

DEFAULT_COLOR = "#6395b0"
DEFAULT_ALPHA = 1.0


def validate_data(data: Sequence[Data], vertex_count: int) -> tuple[Data, ...]:
    """Check Data names are unique and every component matches ``vertex_count``.

    Raises:
        ValueError: On duplicate names
        DimensionMismatch: On a component of the wrong length
    """
    names = [item.name for item in data]
    if len(set(names)) != len(names):
        raise ValueError(f"Data names must be unique, got {names}")
    for item in data:
        for component in item.components:
            if component.value_count != vertex_count:
                raise DimensionMismatch(
                    f"Component '{item.name}.{component.name}' has {component.value_count} "
                    f"values per vertex slot, mesh has {vertex_count} vertices"
                )
    return tuple(data)


class Block(Observable):
    """Base renderable entity: vertices, Data, and a default appearance.

    Effects whose parent is this block are tracked without owning them and
    are invalidated whenever the vertices or the Data list change.

    Attributes:
        owner: The Scene holding this block as a child, if any
    """

    def __init__(
        self,
        vertices: ArrayLike | None = None,
        data: Sequence[Data] = (),
        environment_meshes: Sequence[Any] = (),
        default_color: str | tuple[float, float, float] = DEFAULT_COLOR,
        default_alpha: float = DEFAULT_ALPHA,
    ) -> None:
        super().__init__()
        vertices = as_vertices(np.empty(0) if vertices is None else vertices)
        self._validate_topology(len(vertices))
        data = validate_data(data, len(vertices))
        parse_color(default_color)
        self._check_alpha(default_alpha)

        self._vertices = vertices
        self._data: tuple[Data, ...] = ()
        self._attach_data(data)
        self._environment_meshes = list(environment_meshes)
        self._default_color = default_color
        self._default_alpha = float(default_alpha)
        self._scale = 1.0
        self._bounding_sphere: tuple[NDArray[np.float64], float] | None = None
        self._effects: weakref.WeakSet[Effect] = weakref.WeakSet()
        self.owner: Scene | None = None

    # Geometry

    @property
    def vertices(self) -> NDArray[np.float32]:
        """(N, 3) vertex positions. The live array, not a copy."""
        return self._vertices

    @vertices.setter
    def vertices(self, new_vertices: ArrayLike) -> None:
        self.set_vertices(new_vertices)

    def set_vertices(self, new_vertices: ArrayLike) -> None:
        """Replace the geometry wholesale.

        Data lengths are not checked here, so the vertex count can change
        ahead of the Data that follows it.

        Raises:
            DimensionMismatch: If the length is not divisible by 3
            IndexOutOfRange: If connectivity refers past the new vertex count
        """
        vertices = as_vertices(new_vertices)
        self._validate_topology(len(vertices))
        self._vertices = vertices
        self._bounding_sphere = None
        self._notify("vertices", vertices)
        self._invalidate_dependents()

    @property
    def vertex_count(self) -> int:
        return len(self._vertices)

    @property
    def is_empty(self) -> bool:
        """True when the block has no vertices, e.g. an effect with no matches."""
        return self.vertex_count == 0

    @property
    def triangle_indices(self) -> NDArray[np.uint32]:
        """(M, 3) surface triangles to draw; a bare block draws none."""
        return np.empty((0, 3), dtype=np.uint32)

    @property
    def tetrahedron_indices(self) -> NDArray[np.uint32] | None:
        """(T, 4) volumetric connectivity, or None for surface-only blocks."""
        return None

    @property
    def vertex_colors(self) -> NDArray[np.float32] | None:
        """(N, 3) per-vertex RGB, or None to use the default color."""
        return None

    @property
    def bounding_sphere(self) -> tuple[NDArray[np.float64], float]:
        """(center, radius), recomputed only after the vertices change."""
        if self._bounding_sphere is None:
            self._bounding_sphere = bounding_sphere(self.vertices)
        return self._bounding_sphere

    @property
    def bounding_sphere_radius(self) -> float:
        return self.bounding_sphere[1]

    def _validate_topology(self, vertex_count: int) -> None:
        """Hook for subclasses holding connectivity."""

    # Data

    @property
    def data(self) -> tuple[Data, ...]:
        return self._data

    @data.setter
    def data(self, new_data: Sequence[Data]) -> None:
        self.set_data(new_data)

    def set_data(self, new_data: Sequence[Data]) -> None:
        """Replace the Data list.

        Raises:
            ValueError: On duplicate Data names
            DimensionMismatch: If a component does not match the vertex count
        """
        data = validate_data(new_data, self.vertex_count)
        for item in self._data:
            item._blocks.discard(self)
        self._attach_data(data)
        self._notify("data", self._data)
        for effect in list(self._effects):
            effect._parent_data_changed()

    def _attach_data(self, data: tuple[Data, ...]) -> None:
        self._data = data
        for item in data:
            item._blocks.add(self)

    def get_data(self, name: str) -> Data:
        """Look up a Data by name.

        Raises:
            UnknownField: If no Data has that name
        """
        for item in self._data:
            if item.name == name:
                return item
        raise UnknownField(f"Block has no data named '{name}' (available: {self.data_names})")

    @property
    def data_names(self) -> list[str]:
        return [item.name for item in self._data]

    @property
    def environment_meshes(self) -> list[Any]:
        """Opaque meshes used as context for distance and occlusion queries."""
        return self._environment_meshes

    # Appearance

    @property
    def default_color(self) -> str | tuple[float, float, float]:
        return self._default_color

    @default_color.setter
    def default_color(self, color: str | tuple[float, float, float]) -> None:
        self.set_default_color(color)

    def set_default_color(self, color: str | tuple[float, float, float]) -> None:
        parse_color(color)
        self._default_color = color
        self._notify("default_color", color)

    @property
    def default_rgb(self) -> tuple[float, float, float]:
        return parse_color(self._default_color)

    @property
    def default_alpha(self) -> float:
        return self._default_alpha

    @default_alpha.setter
    def default_alpha(self, alpha: float) -> None:
        self.set_default_alpha(alpha)

    def set_default_alpha(self, alpha: float) -> None:
        self._check_alpha(alpha)
        self._default_alpha = float(alpha)
        self._notify("default_alpha", self._default_alpha)

    @staticmethod
    def _check_alpha(alpha: float) -> None:
        if not 0.0 <= float(alpha) <= 1.0:
            raise ValueError(f"Alpha must be within [0, 1], got {alpha}")

    @property
    def scale(self) -> float:
        """Uniform scale applied when drawing, set by the owning Scene."""
        return self._scale

    @scale.setter
    def scale(self, scale: float) -> None:
        self._scale = float(scale)
        self._notify("scale", self._scale)

    @property
    def transform_matrix(self) -> NDArray[np.float64]:
        """4x4 model matrix applied by the renderer."""
        return np.diag([self._scale, self._scale, self._scale, 1.0])

    # Updates

    def apply(self, **changes: Any) -> None:
        """Set several properties as one update cycle.

        Every change is validated against the combined result before any is
        committed, so a failure leaves the block untouched. Dependent effects
        recompute once after all changes are committed.

        Example:
            mesh.apply(vertices=new_vertices, data=[Data.scalar("t", new_values)])

        Raises:
            AttributeError: If a name is not a settable property
            DimensionMismatch: If the new vertices and Data disagree
            IndexOutOfRange: If connectivity refers past the new vertex count
            ValueError: On an invalid color or alpha
        """
        for name in changes:
            prop = getattr(type(self), name, None)
            if not isinstance(prop, property) or prop.fset is None:
                raise AttributeError(f"{type(self).__name__} has no settable property '{name}'")
        changes = self._check_changes(changes)
        with batch_updates():
            for name, value in changes.items():
                setattr(self, name, value)

    def _check_changes(self, changes: dict[str, Any]) -> dict[str, Any]:
        """Validate ``changes`` as a whole and return them normalized."""
        checked = dict(changes)
        vertex_count = self.vertex_count
        if "vertices" in checked:
            checked["vertices"] = as_vertices(checked["vertices"])
            vertex_count = len(checked["vertices"])
            self._validate_topology(vertex_count)
        if "vertices" in checked or "data" in checked:
            data = validate_data(checked.get("data", self._data), vertex_count)
            if "data" in checked:
                checked["data"] = data
        if "default_color" in checked:
            parse_color(checked["default_color"])
        if "default_alpha" in checked:
            self._check_alpha(checked["default_alpha"])
        if "scale" in checked:
            checked["scale"] = float(checked["scale"])
        if "vertices" in checked:
            # Geometry goes first so new Data is checked against the new count
            checked = {"vertices": checked.pop("vertices"), **checked}
        return checked

    def _invalidate_dependents(self) -> None:
        for effect in list(self._effects):
            effect.invalidate()

    @property
    def effects(self) -> list[Effect]:
        """Effects currently using this block as their parent."""
        return list(self._effects)

    # Rendering

    def to_trimesh(self) -> trimesh.Trimesh:
        """Convert the current state to a trimesh.Trimesh with vertex colors.

        The block's scale is not applied; the renderer passes
        ``transform_matrix`` alongside the geometry.
        """
        import trimesh as tm

        mesh = tm.Trimesh(
            vertices=self.vertices,
            faces=self.triangle_indices.astype(np.int64),
            process=False,  # Don't modify our geometry
        )
        if self.vertex_count:
            colors = self.vertex_colors
            if colors is None:
                colors = np.tile(np.asarray(self.default_rgb, dtype=np.float32), (self.vertex_count, 1))
            alpha = np.full((self.vertex_count, 1), self.default_alpha, dtype=np.float32)
            rgba = np.hstack([colors, alpha])
            mesh.visual.vertex_colors = np.round(rgba * 255).astype(np.uint8)
        return mesh

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(vertices={self.vertex_count}, "
            f"triangles={len(self.triangle_indices)}, data={self.data_names})"
        )
