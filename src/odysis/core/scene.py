"""Scene: the collection of top-level blocks drawn together."""

from __future__ import annotations

import logging
from typing import Iterator, Sequence

from .block import Block
from .colormap import parse_color
from .events import Observable

logger = logging.getLogger(__name__)


class Scene(Observable):
    """Ordered top-level blocks sharing one uniform scale.

    The shared scale is ``1 / max(bounding sphere radius)`` over the children,
    so the whole collection fits in a unit sphere. It is recomputed whenever
    the child list changes, never when a child's own geometry changes.

    Example:
        scene = Scene([mesh])
        scene.add_child(IsoSurface(mesh, "temperature", value=0.5))
    """

    def __init__(self, children: Sequence[Block] = (), background_color: str = "#ffffff") -> None:
        super().__init__()
        parse_color(background_color)
        self._background_color = background_color
        self._children: list[Block] = []
        self.scale = 1.0
        if children:
            self.set_children(children)

    @property
    def children(self) -> list[Block]:
        return list(self._children)

    @children.setter
    def children(self, blocks: Sequence[Block]) -> None:
        self.set_children(blocks)

    def set_children(self, blocks: Sequence[Block]) -> None:
        """Replace the whole child list and rebuild the shared scale.

        Previous children are released first: their owner is cleared and
        their scale reset to 1.

        Raises:
            ValueError: If a block is listed twice or owned by another scene
        """
        blocks = list(blocks)
        if len({id(block) for block in blocks}) != len(blocks):
            raise ValueError("A block can only appear once in a scene")
        for block in blocks:
            if block.owner is not self:
                self._check_unowned(block)

        for block in self._children:
            self._release(block)
        self._children = []
        for block in blocks:
            block.owner = self
            self._children.append(block)
        self.update_children()
        self._notify("children", self.children)

    def add_child(self, block: Block) -> Block:
        """Append a block and reapply the shared scale.

        Returns:
            The added block (for chaining)

        Raises:
            ValueError: If the block already belongs to a scene
        """
        self._check_unowned(block)
        block.owner = self
        self._children.append(block)
        self.update_children()
        self._notify("children", self.children)
        return block

    def remove_child(self, block: Block) -> bool:
        """Remove a child block.

        Returns:
            True if the block was found and removed
        """
        if block not in self._children:
            return False
        self._children.remove(block)
        self._release(block)
        self.update_children()
        self._notify("children", self.children)
        return True

    def clear(self) -> None:
        """Release every child."""
        self.set_children([])

    def update_children(self) -> float:
        """Recompute the shared scale from the children's bounding spheres.

        Returns:
            The scale applied to every child
        """
        radius = max((block.bounding_sphere_radius for block in self._children), default=0.0)
        self.scale = 1.0 / radius if radius > 0 else 1.0
        for block in self._children:
            block.scale = self.scale
        logger.debug("Scene scale %.6g over %d children", self.scale, len(self._children))
        return self.scale

    def _check_unowned(self, block: Block) -> None:
        if block.owner is not None:
            raise ValueError(f"{block!r} already belongs to a scene")

    @staticmethod
    def _release(block: Block) -> None:
        block.owner = None
        block.scale = 1.0

    @property
    def background_color(self) -> str:
        return self._background_color

    @background_color.setter
    def background_color(self, color: str) -> None:
        parse_color(color)
        self._background_color = color
        self._notify("background_color", color)

    def iter_blocks(self) -> Iterator[Block]:
        """Iterate over the children in drawing order."""
        yield from self._children

    def __len__(self) -> int:
        return len(self._children)

    def __repr__(self) -> str:
        return f"Scene(children={len(self._children)}, scale={self.scale:.6g})"
