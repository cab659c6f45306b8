"""Tests for Component and Data."""

import numpy as np
import pytest

from odysis.core import Block, Component, Data, DimensionMismatch, UnknownField


def test_component_rejects_length_not_multiple_of_arity():
    with pytest.raises(DimensionMismatch):
        Component("v", [1.0, 2.0, 3.0, 4.0], arity=3)


def test_component_array_is_live_buffer():
    array = np.arange(4, dtype=np.float32)
    component = Component("t", array)

    assert np.shares_memory(component.array, array)
    assert component.array is component.array


def test_component_values_shape_follows_arity():
    scalar = Component("t", [1.0, 2.0])
    packed = Component("v", np.arange(6), arity=3)

    assert scalar.values.shape == (2,)
    assert packed.values.shape == (2, 3)
    assert packed.value_count == 2


def test_replace_array_checks_holding_block(recorder):
    data = Data.scalar("t", [0.0, 1.0, 2.0])
    block = Block(vertices=np.zeros(9), data=[data])
    assert data.blocks == [block]
    component = data.components[0]
    component.observe("array", recorder)

    with pytest.raises(DimensionMismatch):
        component.replace_array([1.0, 2.0, 3.0, 4.0])
    np.testing.assert_array_equal(component.array, [0.0, 1.0, 2.0])
    assert recorder.count == 0

    component.array = [5.0, 6.0, 7.0]
    np.testing.assert_array_equal(component.array, [5.0, 6.0, 7.0])
    assert recorder.count == 1


def test_replace_array_without_block_only_checks_arity():
    component = Component("t", [0.0, 1.0])
    component.replace_array([1.0, 2.0, 3.0])
    assert component.value_count == 3


def test_vector_data_splits_columns():
    data = Data.vector("velocity", [[1, 2, 3], [4, 5, 6]])

    assert [c.name for c in data] == ["x", "y", "z"]
    np.testing.assert_array_equal(data.component("y").array, [2.0, 5.0])
    assert data.value_count == 2


def test_data_rejects_duplicate_component_names():
    with pytest.raises(ValueError):
        Data("bad", [Component("x", [0.0]), Component("x", [1.0])])


def test_data_rejects_components_of_different_lengths():
    with pytest.raises(DimensionMismatch):
        Data("bad", [Component("x", [0.0]), Component("y", [1.0, 2.0])])


def test_unknown_component_raises_unknown_field():
    data = Data.scalar("t", [0.0])
    with pytest.raises(UnknownField):
        data.component("missing")
    with pytest.raises(KeyError):
        data.component("missing")


def test_data_tracks_holding_blocks():
    data = Data.scalar("t", [0.0])
    block = Block(vertices=[0.0, 0.0, 0.0], data=[data])
    assert data.blocks == [block]

    block.set_data([])
    assert data.blocks == []
