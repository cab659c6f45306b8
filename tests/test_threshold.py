"""Tests for Threshold."""

import numpy as np
import pytest

from odysis.effects import Threshold


def test_surface_parent_keeps_triangles_in_range(square):
    effect = Threshold(square, "t", min=0.0, max=2.0)

    np.testing.assert_array_equal(effect.vertices, square.vertices[:3])
    np.testing.assert_array_equal(effect.triangle_indices, [[0, 1, 2]])
    assert effect.tetrahedron_indices is None
    np.testing.assert_array_equal(effect.get_data("t").components[0].array, [0.0, 1.0, 2.0])


def test_indices_are_remapped(square):
    effect = Threshold(square, "t", min=0.0, max=0.0)
    assert effect.is_empty

    square.get_data("t").components[0].array = [1.0, 5.0, 1.0, 1.0]
    effect.max = 1.0

    # Only triangle (0, 2, 3) survives; vertex 1 is dropped
    np.testing.assert_array_equal(effect.vertices, square.vertices[[0, 2, 3]])
    np.testing.assert_array_equal(effect.triangle_indices, [[0, 1, 2]])


@pytest.mark.parametrize("bounds", [(2.0, 1.0), (10.0, 20.0)])
def test_empty_range_gives_empty_mesh(square, bounds):
    low, high = bounds
    effect = Threshold(square, "t", min=low, max=high)

    assert effect.vertex_count == 0
    assert effect.vertices.shape == (0, 3)
    assert effect.triangle_indices.shape == (0, 3)
    assert effect.data == ()


def test_empty_range_on_volume(two_tetra):
    effect = Threshold(two_tetra, "t", min=1.0, max=0.0)

    assert effect.vertex_count == 0
    assert effect.triangle_indices.shape == (0, 3)
    assert effect.tetrahedron_indices.shape == (0, 4)


def test_volume_parent_keeps_whole_tetrahedra(two_tetra):
    effect = Threshold(two_tetra, "t", min=0.0, max=1.0)

    assert effect.vertex_count == 4
    np.testing.assert_array_equal(effect.tetrahedron_indices, [[0, 1, 2, 3]])
    assert effect.triangle_indices.shape == (4, 3)

    effect.max = 5.0
    assert effect.vertex_count == 5
    assert effect.tetrahedron_indices.shape == (2, 4)
    assert effect.triangle_indices.shape == (6, 3)


def test_bounds_are_inclusive(tetra):
    effect = Threshold(tetra, "t", min=0.0, max=3.0)
    assert effect.vertex_count == 4

    effect.max = 2.999
    assert effect.is_empty


def test_parent_vertices_follow(square):
    effect = Threshold(square, "t", min=0.0, max=3.0)
    square.vertices = square.vertices + 10

    assert effect.vertices.min() >= 10
