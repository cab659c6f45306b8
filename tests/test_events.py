"""Tests for change notification and update batching."""

import pytest

from odysis.core import Observable, batch_updates, update_cycle
from odysis.effects import IsoColor


class Counter(Observable):
    def __init__(self):
        super().__init__()
        self.value = 0

    def bump(self):
        self.value += 1
        self._notify("value", self.value)


def test_observe_and_unsubscribe(recorder):
    counter = Counter()
    unsubscribe = counter.observe("value", recorder)

    counter.bump()
    unsubscribe()
    counter.bump()

    assert recorder.calls == [1]


def test_unobserve_unknown_callback_is_ignored(recorder):
    counter = Counter()
    counter.unobserve("value", recorder)
    counter.unobserve("missing", recorder)


def test_callbacks_run_in_registration_order():
    counter = Counter()
    order = []
    counter.observe("value", lambda value: order.append("first"))
    counter.observe("value", lambda value: order.append("second"))

    counter.bump()

    assert order == ["first", "second"]


def test_nested_batches_flush_once(square, recorder):
    effect = IsoColor(square, "t", min=0.0, max=3.0)
    effect.observe("output", recorder)

    with batch_updates():
        effect.min = 1.0
        with batch_updates():
            effect.max = 2.0
            square.vertices = square.vertices * 2
        assert recorder.count == 0
        assert update_cycle.active

    assert recorder.count == 1
    assert not update_cycle.active


def test_epoch_advances_per_cycle():
    start = update_cycle.epoch
    with batch_updates():
        pass
    with batch_updates():
        with batch_updates():
            pass

    assert update_cycle.epoch == start + 2


def test_batch_flushes_when_body_raises(square, recorder):
    effect = IsoColor(square, "t", min=0.0, max=3.0)
    effect.observe("output", recorder)

    with pytest.raises(RuntimeError):
        with batch_updates():
            effect.max = 6.0
            raise RuntimeError("boom")

    assert not update_cycle.active
    assert recorder.count == 1
    assert effect.max == 6.0
