"""Change notification and recompute batching.

Mutable entities inherit from Observable and call ``_notify`` after a new
value has been committed. Effects never recompute directly from a setter:
they go through ``UpdateCycle.schedule`` which either runs the recompute
immediately or, inside ``batch_updates()``, defers it until the outermost
cycle closes so that a burst of changes yields one recompute per effect.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Callable, Iterator

if TYPE_CHECKING:
    from ..effects.base import Effect

logger = logging.getLogger(__name__)

Callback = Callable[[Any], None]


class Observable:
    """Per-entity registry of single-argument change callbacks."""

    def __init__(self) -> None:
        self._observers: dict[str, list[Callback]] = {}

    def observe(self, name: str, callback: Callback) -> Callable[[], None]:
        """Call ``callback(new_value)`` whenever property ``name`` changes.

        Returns:
            A callable that removes the callback again.
        """
        self._observers.setdefault(name, []).append(callback)
        return lambda: self.unobserve(name, callback)

    def unobserve(self, name: str, callback: Callback) -> None:
        """Remove a callback registered with observe(); unknown ones are ignored."""
        callbacks = self._observers.get(name)
        if callbacks and callback in callbacks:
            callbacks.remove(callback)

    def _notify(self, name: str, value: Any) -> None:
        for callback in list(self._observers.get(name, ())):
            callback(value)


class UpdateCycle:
    """Coalesces effect recomputes within one update tick.

    Each closed outermost cycle advances ``epoch``. Pending effects are kept
    in invalidation order and each appears at most once while pending.
    """

    def __init__(self) -> None:
        self.epoch = 0
        self._depth = 0
        self._pending: dict[int, Effect] = {}
        self._flushing = False

    @property
    def active(self) -> bool:
        return self._depth > 0

    def schedule(self, effect: Effect) -> None:
        """Recompute ``effect`` now, or once at the end of the open cycle."""
        if self._depth == 0 and not self._flushing:
            effect.recompute()
            return
        self._pending.setdefault(id(effect), effect)

    def discard(self, effect: Effect) -> None:
        self._pending.pop(id(effect), None)

    def begin(self) -> None:
        self._depth += 1

    def end(self) -> None:
        self._depth -= 1
        if self._depth == 0:
            self.flush()

    def flush(self) -> None:
        """Run every pending recompute, including ones scheduled while flushing."""
        if self._flushing:
            return
        self._flushing = True
        count = 0
        try:
            while self._pending:
                key = next(iter(self._pending))
                effect = self._pending.pop(key)
                effect.recompute()
                count += 1
        finally:
            self._flushing = False
            self.epoch += 1
        if count:
            logger.debug("Update cycle %d ran %d recompute(s)", self.epoch, count)


update_cycle = UpdateCycle()


@contextmanager
def batch_updates() -> Iterator[UpdateCycle]:
    """Group property changes so each affected effect recomputes once.

    Example:
        with batch_updates():
            mesh.vertices = new_vertices
            iso.min = 0.0
            iso.max = 2.0
    """
    update_cycle.begin()
    try:
        yield update_cycle
    finally:
        update_cycle.end()
