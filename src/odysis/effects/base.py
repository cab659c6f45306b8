"""Base class for effects: blocks derived from a parent block's field."""

from __future__ import annotations

import logging
import weakref
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Sequence, Union

import numpy as np
from numpy.typing import ArrayLike, NDArray

from ..core.block import DEFAULT_ALPHA, DEFAULT_COLOR, Block
from ..core.data import Component, Data
from ..core.errors import DimensionMismatch, UnknownField
from ..core.events import update_cycle

logger = logging.getLogger(__name__)

# "temperature" or ("velocity", "x")
FieldRef = Union[str, tuple[str, str]]
# A single reference, or a list of one or three references
Selector = Union[FieldRef, Sequence[FieldRef]]


@dataclass
class EffectOutput:
    """Geometry and appearance produced by one recompute."""

    vertices: NDArray[np.float32]
    triangles: NDArray[np.uint32]
    tetrahedra: NDArray[np.uint32] | None = None
    colors: NDArray[np.float32] | None = None
    data: tuple[Data, ...] = field(default_factory=tuple)

    @classmethod
    def empty(cls, volumetric: bool = False) -> EffectOutput:
        return cls(
            vertices=np.empty((0, 3), dtype=np.float32),
            triangles=np.empty((0, 3), dtype=np.uint32),
            tetrahedra=np.empty((0, 4), dtype=np.uint32) if volumetric else None,
        )


def _is_field_ref(entry: Any) -> bool:
    return isinstance(entry, str) or (
        isinstance(entry, tuple) and len(entry) == 2 and all(isinstance(part, str) for part in entry)
    )


class Effect(Block, ABC):
    """A block whose geometry or appearance is computed from a parent block.

    The effect starts Unbound (``input_dimension == 0``) and becomes Bound
    through ``bind_input``. While Bound, any change to the parent's vertices,
    the bound components, or the effect's own parameters schedules one
    ``recompute()`` through the shared update cycle.

    Subclasses implement ``generate()`` and expose their parameters through
    ``_set_parameter``.
    """

    # Float parameters settable through _set_parameter
    _parameters: tuple[str, ...] = ()

    def __init__(
        self,
        parent: Block,
        input: Selector | None = None,
        default_color: str | tuple[float, float, float] = DEFAULT_COLOR,
        default_alpha: float = DEFAULT_ALPHA,
    ) -> None:
        super().__init__(default_color=default_color, default_alpha=default_alpha)
        self._parent: Block | None = parent
        self._input: Selector | None = None
        self._components: tuple[Component, ...] = ()
        self._input_dimension = 0
        self._subscriptions: list[Callable[[], None]] = []
        self._triangles = np.empty((0, 3), dtype=np.uint32)
        self._tetrahedra: NDArray[np.uint32] | None = None
        self._colors: NDArray[np.float32] | None = None
        parent._effects.add(self)
        if input is not None:
            self.bind_input(input)

    @property
    def parent(self) -> Block | None:
        """The block this effect reads from; None once detached."""
        return self._parent

    @property
    def input(self) -> Selector | None:
        return self._input

    @input.setter
    def input(self, selector: Selector) -> None:
        self.set_input(selector)

    @property
    def input_dimension(self) -> int:
        """0 while unbound, 1 for a scalar input, 3 for a vector input."""
        return self._input_dimension

    @property
    def is_bound(self) -> bool:
        return self._input_dimension != 0

    # Input binding

    def bind_input(self, selector: Selector) -> None:
        """Resolve ``selector`` against the parent's Data and bind it.

        Raises:
            UnknownField: If a Data or component name is not on the parent
            DimensionMismatch: If the selector does not describe a 1D or 3D input
        """
        components, dimension = self._resolve(selector)
        self._subscribe(components)
        self._input = selector
        self._input_dimension = dimension
        logger.debug("%s bound to %r (dimension %d)", type(self).__name__, selector, dimension)
        self._notify("input", selector)
        self.invalidate()

    def set_input(self, selector: Selector) -> None:
        """Rebind to a new selector; a no-op while the effect is still unbound."""
        if not self.is_bound:
            logger.debug("%s ignoring input %r before bind_input()", type(self).__name__, selector)
            return
        self.bind_input(selector)

    def _resolve(self, selector: Selector) -> tuple[tuple[Component, ...], int]:
        if self._parent is None:
            raise UnknownField(f"Detached {type(self).__name__} has no parent to resolve {selector!r}")
        if _is_field_ref(selector):
            entries = [selector]
        elif isinstance(selector, (list, tuple)) and all(_is_field_ref(entry) for entry in selector):
            entries = list(selector)
        else:
            raise TypeError(f"Invalid input selector: {selector!r}")

        components = tuple(self._lookup(entry) for entry in entries)
        if len(components) == 1:
            return components, components[0].arity
        if len(components) == 3:
            if any(component.arity != 1 for component in components):
                raise DimensionMismatch("A three-part input must name three scalar components")
            return components, 3
        raise DimensionMismatch(f"Input selector must name 1 or 3 components, got {len(components)}")

    def _lookup(self, entry: FieldRef) -> Component:
        if isinstance(entry, str):
            data = self._parent.get_data(entry)
            if not data.components:
                raise UnknownField(f"Data '{entry}' has no components")
            return data.components[0]
        data_name, component_name = entry
        return self._parent.get_data(data_name).component(component_name)

    def _subscribe(self, components: tuple[Component, ...]) -> None:
        self._unsubscribe()
        self._components = components
        # Components must not keep the effect alive
        method = weakref.WeakMethod(self._component_changed)

        def callback(value: Any) -> None:
            bound = method()
            if bound is not None:
                bound(value)

        self._subscriptions = [component.observe("array", callback) for component in components]

    def _unsubscribe(self) -> None:
        for unsubscribe in self._subscriptions:
            unsubscribe()
        self._subscriptions = []

    def _component_changed(self, _array: Any) -> None:
        self.invalidate()

    def _parent_data_changed(self) -> None:
        if not self.is_bound:
            return
        try:
            components, dimension = self._resolve(self._input)
        except (UnknownField, DimensionMismatch) as e:
            logger.warning("%s keeps its previous output: %s", type(self).__name__, e)
            return
        self._subscribe(components)
        self._input_dimension = dimension
        self.invalidate()

    # Field access

    def input_values(self) -> NDArray[np.float32]:
        """The bound field: (N,) for scalar input, (N, 3) for vector input."""
        if not self.is_bound:
            raise UnknownField(f"{type(self).__name__} has no bound input")
        if len(self._components) == 1:
            return self._components[0].values
        return np.column_stack([component.array for component in self._components])

    def scalar_field(self) -> NDArray[np.float32]:
        """Per-vertex scalar: the input itself, or its magnitude for vectors."""
        values = self.input_values()
        if values.ndim == 1:
            return values
        return np.linalg.norm(values, axis=1).astype(np.float32)

    # Recompute

    def invalidate(self) -> None:
        """Schedule a recompute in the current update cycle."""
        update_cycle.schedule(self)

    def recompute(self) -> None:
        """Rebuild this effect's geometry and appearance from the bound input.

        Does nothing while unbound or detached. If the bound field no longer
        matches the parent's vertex count the previous output is kept.
        """
        update_cycle.discard(self)
        if not self.is_bound or self._parent is None:
            return
        counts = [component.value_count for component in self._components]
        if any(count != self._parent.vertex_count for count in counts):
            logger.warning(
                "%s keeps its previous output: input has %s values, parent has %d vertices",
                type(self).__name__, "/".join(map(str, counts)), self._parent.vertex_count,
            )
            return
        field = self.scalar_field()

        output = self.generate(self._parent, field)
        # Derived Data is not registered with the components it came from
        self._data = tuple(output.data)
        self._vertices = output.vertices
        self._triangles = output.triangles
        self._tetrahedra = output.tetrahedra
        self._colors = output.colors
        self._bounding_sphere = None
        logger.debug(
            "%s recomputed: %d vertices, %d triangles",
            type(self).__name__, len(output.vertices), len(output.triangles),
        )
        self._notify("output", self)
        # Output Data objects are new, so chained effects re-resolve their input
        for effect in list(self._effects):
            effect._parent_data_changed()

    @abstractmethod
    def generate(self, parent: Block, field: NDArray[np.float32]) -> EffectOutput:
        """Compute the output for the parent's current state.

        Must not modify ``parent`` or anything other than the returned value.

        Args:
            parent: The parent block
            field: Per-vertex scalar values of the bound input

        Returns:
            The new geometry and appearance
        """
        pass

    def _set_parameter(self, name: str, value: float) -> None:
        value = float(value)
        setattr(self, f"_{name}", value)
        self._notify(name, value)
        self.invalidate()

    def _check_changes(self, changes: dict[str, Any]) -> dict[str, Any]:
        for name in ("vertices", "data"):
            if name in changes:
                raise AttributeError(f"{type(self).__name__} {name} are derived from its parent")
        checked = super()._check_changes(changes)
        for name in self._parameters:
            if name in checked:
                checked[name] = float(checked[name])
        if "input" in checked and self.is_bound:
            self._resolve(checked["input"])
        return checked

    def detach(self) -> None:
        """Stop following the parent; the current output stays as it is."""
        self._unsubscribe()
        update_cycle.discard(self)
        if self._parent is not None:
            self._parent._effects.discard(self)
            self._parent = None

    # Block interface

    def set_vertices(self, new_vertices: ArrayLike) -> None:
        raise AttributeError(f"{type(self).__name__} vertices are derived from its parent")

    def set_data(self, new_data: Sequence[Data]) -> None:
        raise AttributeError(f"{type(self).__name__} data is derived from its parent")

    @property
    def triangle_indices(self) -> NDArray[np.uint32]:
        return self._triangles

    @property
    def tetrahedron_indices(self) -> NDArray[np.uint32] | None:
        return self._tetrahedra

    @property
    def vertex_colors(self) -> NDArray[np.float32] | None:
        return self._colors
