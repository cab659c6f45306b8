"""Named numeric fields attached to mesh vertices."""

from __future__ import annotations

import weakref
from typing import TYPE_CHECKING, Iterator, Sequence

import numpy as np
from numpy.typing import ArrayLike, NDArray

from .errors import DimensionMismatch, UnknownField
from .events import Observable

if TYPE_CHECKING:
    from .block import Block


def as_float32(array: ArrayLike) -> NDArray[np.float32]:
    """Flatten ``array`` to float32, reusing the buffer when it already is one."""
    return np.asarray(array, dtype=np.float32).reshape(-1)


class Component(Observable):
    """One named numeric array, e.g. the ``x`` part of a velocity field.

    ``arity`` is the number of values stored per vertex (1 for a scalar,
    3 for a packed vector).
    """

    def __init__(self, name: str, array: ArrayLike, arity: int = 1) -> None:
        super().__init__()
        if arity not in (1, 3):
            raise ValueError(f"Component arity must be 1 or 3, got {arity}")
        array = as_float32(array)
        if array.size % arity:
            raise DimensionMismatch(
                f"Component '{name}' has {array.size} values, not a multiple of arity {arity}"
            )
        self.name = name
        self.arity = arity
        self._array = array
        self._data: weakref.ReferenceType[Data] | None = None

    @property
    def array(self) -> NDArray[np.float32]:
        """The live backing array. Do not keep it across replace_array()."""
        return self._array

    @array.setter
    def array(self, new_array: ArrayLike) -> None:
        self.replace_array(new_array)

    @property
    def value_count(self) -> int:
        """Number of vertices this component carries values for."""
        return self._array.size // self.arity

    @property
    def values(self) -> NDArray[np.float32]:
        """The array shaped (N,) for scalars or (N, 3) for packed vectors."""
        if self.arity == 1:
            return self._array
        return self._array.reshape(-1, self.arity)

    def replace_array(self, new_array: ArrayLike) -> None:
        """Install a new backing array.

        Raises:
            DimensionMismatch: If the length is not a multiple of the arity, or
                does not match the vertex count of a block holding this
                component's Data. The previous array is kept in that case.
        """
        new_array = as_float32(new_array)
        if new_array.size % self.arity:
            raise DimensionMismatch(
                f"Component '{self.name}': {new_array.size} values is not a multiple "
                f"of arity {self.arity}"
            )
        data = self.data
        if data is not None:
            for block in data.blocks:
                expected = block.vertex_count * self.arity
                if new_array.size != expected:
                    raise DimensionMismatch(
                        f"Component '{self.name}': {new_array.size} values, block "
                        f"with {block.vertex_count} vertices needs {expected}"
                    )
        self._array = new_array
        self._notify("array", new_array)

    @property
    def data(self) -> Data | None:
        """The Data grouping this component, if any."""
        return self._data() if self._data is not None else None

    def __repr__(self) -> str:
        return f"Component({self.name!r}, n={self.value_count}, arity={self.arity})"


class Data:
    """A logical field grouping one or more components.

    The component set is fixed at construction; individual component arrays
    may be replaced afterwards.
    """

    def __init__(self, name: str, components: Sequence[Component]) -> None:
        names = [component.name for component in components]
        if len(set(names)) != len(names):
            raise ValueError(f"Data '{name}' has duplicate component names: {names}")
        counts = {component.value_count for component in components}
        if len(counts) > 1:
            raise DimensionMismatch(
                f"Data '{name}' components disagree on vertex count: {sorted(counts)}"
            )
        self.name = name
        self._components = tuple(components)
        self._blocks: weakref.WeakSet[Block] = weakref.WeakSet()
        for component in self._components:
            component._data = weakref.ref(self)

    @classmethod
    def scalar(cls, name: str, array: ArrayLike) -> Data:
        """Data holding a single scalar component with the same name."""
        return cls(name, [Component(name, array)])

    @classmethod
    def vector(cls, name: str, array: ArrayLike, labels: Sequence[str] = ("x", "y", "z")) -> Data:
        """Data holding one scalar component per column of an (N, 3) array."""
        columns = np.asarray(array, dtype=np.float32).reshape(-1, 3)
        return cls(name, [Component(label, columns[:, i]) for i, label in enumerate(labels)])

    @property
    def components(self) -> tuple[Component, ...]:
        return self._components

    @property
    def blocks(self) -> list[Block]:
        """Blocks currently holding this Data."""
        return list(self._blocks)

    @property
    def value_count(self) -> int:
        """Vertex count the components agree on (0 with no components)."""
        return self._components[0].value_count if self._components else 0

    def component(self, name: str) -> Component:
        """Look up a component by name.

        Raises:
            UnknownField: If no component has that name
        """
        for component in self._components:
            if component.name == name:
                return component
        raise UnknownField(f"Data '{self.name}' has no component '{name}'")

    def __iter__(self) -> Iterator[Component]:
        return iter(self._components)

    def __len__(self) -> int:
        return len(self._components)

    def __repr__(self) -> str:
        names = ", ".join(component.name for component in self._components)
        return f"Data({self.name!r}, [{names}])"
