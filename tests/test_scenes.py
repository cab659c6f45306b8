"""Tests for the demo datasets."""

import numpy as np
import pytest

from odysis.core import PolyMesh, Scene, TetraMesh
from odysis.effects import IsoColor, IsoSurface, Threshold
from odysis.scenes import create_cube_mesh, create_cube_scene, create_wave_mesh, create_wave_scene


@pytest.mark.parametrize("resolution", [1, 2, 4])
def test_cube_counts(resolution):
    """Kuhn split: 6 tets per cell, 2 boundary triangles per face square."""
    n = resolution
    mesh = create_cube_mesh(n)

    assert isinstance(mesh, TetraMesh)
    assert mesh.vertex_count == (n + 1) ** 3
    assert mesh.tetrahedron_indices.shape == (6 * n**3, 4)
    assert mesh.triangle_indices.shape == (12 * n**2, 3)


def test_cube_fields():
    mesh = create_cube_mesh(2)
    temperature = mesh.get_data("temperature").components[0].array
    np.testing.assert_allclose(temperature, np.linalg.norm(mesh.vertices, axis=1), rtol=1e-6)

    velocity = mesh.get_data("velocity")
    assert [component.name for component in velocity] == ["x", "y", "z"]
    np.testing.assert_allclose(velocity.component("x").array, -mesh.vertices[:, 1])


def test_cube_tetrahedra_have_volume():
    mesh = create_cube_mesh(2)
    corners = mesh.vertices[mesh.tetrahedron_indices.astype(np.intp)].astype(np.float64)
    edges = corners[:, 1:] - corners[:, :1]
    volumes = np.abs(np.linalg.det(edges)) / 6

    assert np.all(volumes > 0)
    assert volumes.sum() == pytest.approx(8.0)


@pytest.mark.parametrize("resolution", [2, 8])
def test_wave_counts(resolution):
    n = resolution
    mesh = create_wave_mesh(n)

    assert isinstance(mesh, PolyMesh)
    assert mesh.vertex_count == (n + 1) ** 2
    assert mesh.triangle_indices.shape == (2 * n**2, 3)
    np.testing.assert_array_equal(mesh.get_data("height").components[0].array, mesh.vertices[:, 1])


@pytest.mark.parametrize("factory", [create_cube_scene, create_wave_scene])
def test_scenes_fit_unit_sphere(factory):
    scene = factory()

    assert isinstance(scene, Scene)
    (block,) = scene.children
    assert block.bounding_sphere_radius * block.scale == pytest.approx(1.0)


@pytest.mark.parametrize("effect_cls,params", [
    (IsoColor, {"min": 0.0, "max": 1.7}),
    (IsoSurface, {"value": 0.8}),
    (Threshold, {"min": 0.0, "max": 0.9}),
])
def test_effects_on_cube(effect_cls, params):
    mesh = create_cube_mesh(4)
    effect = effect_cls(mesh, "temperature", **params)

    assert not effect.is_empty
    assert len(effect.triangle_indices) > 0
    assert effect.triangle_indices.max() < effect.vertex_count
