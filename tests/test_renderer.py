"""Tests for the Renderer: scene assembly always, GL rendering when available."""

import os

import numpy as np
import pytest
import trimesh
from PIL import Image

from odysis.core import Block, PolyMesh, Scene
from odysis.effects import IsoColor, Threshold
from odysis.scenes import create_cube_mesh
from odysis.viewer import Renderer, look_at

requires_gl = pytest.mark.skipif(
    not (os.environ.get("PYOPENGL_PLATFORM") or os.environ.get("DISPLAY")),
    reason="Needs an OpenGL context (set PYOPENGL_PLATFORM=egl or osmesa)",
)


def test_build_scene_skips_empty_blocks(square):
    empty = Threshold(square, "t", min=5.0, max=6.0)
    renderer = Renderer(Scene([square, empty]))

    tm_scene = renderer.build_scene()

    assert len(tm_scene.geometry) == 1
    assert set(tm_scene.graph.nodes_geometry) == {"0:PolyMesh"}


def test_build_scene_applies_block_scale(square):
    scene = Scene([square])
    tm_scene = Renderer(scene).build_scene()

    transform, _ = tm_scene.graph["0:PolyMesh"]
    np.testing.assert_allclose(transform, square.transform_matrix)


def test_build_scene_uses_effect_colors(square):
    effect = IsoColor(square, "t", min=0.0, max=3.0, colormap="grayscale")
    tm_scene = Renderer(Scene([effect])).build_scene()

    (mesh,) = tm_scene.geometry.values()
    colors = mesh.visual.vertex_colors
    np.testing.assert_array_equal(colors[0], [0, 0, 0, 255])
    np.testing.assert_array_equal(colors[3], [255, 255, 255, 255])


def test_environment_meshes_are_added():
    box = trimesh.creation.box(extents=(1.0, 1.0, 1.0))
    block = PolyMesh([0, 0, 0, 1, 0, 0, 0, 1, 0], [0, 1, 2], environment_meshes=[box, "not a mesh"])
    tm_scene = Renderer(Scene([block])).build_scene()

    assert len(tm_scene.geometry) == 2
    assert "0:PolyMesh/environment_0" in tm_scene.graph.nodes_geometry


def test_background_color_defaults_to_scene():
    scene = Scene(background_color="#202020")
    assert Renderer(scene).background_color == "#202020"
    assert Renderer(scene, background_color="black").background_color == "black"
    with pytest.raises(ValueError):
        Renderer(scene, background_color="nope")


def test_background_color_follows_scene_changes():
    scene = Scene(background_color="#202020")
    renderer = Renderer(scene)

    scene.background_color = "#ff0000"
    assert renderer.background_color == "#ff0000"

    renderer.background_color = "black"
    scene.background_color = "#00ff00"
    assert renderer.background_color == "black"

    renderer.background_color = None
    assert renderer.background_color == "#00ff00"


def test_dispose_before_initialize_is_safe():
    renderer = Renderer(Scene())
    assert not renderer.initialized
    renderer.dispose()
    renderer.dispose()
    renderer.resize(320, 200)
    assert (renderer.width, renderer.height) == (320, 200)


def test_show_with_nothing_to_draw_warns(caplog):
    renderer = Renderer(Scene([Block()]))
    renderer.show()
    assert "No geometry to display" in caplog.text


def test_look_at_faces_target():
    pose = look_at(np.array([0.0, 0.0, 5.0]), np.zeros(3))

    np.testing.assert_allclose(pose[:3, 2], [0, 0, 1])
    np.testing.assert_allclose(pose[:3, 1], [0, 1, 0])
    np.testing.assert_allclose(pose[:3, 3], [0, 0, 5])


@requires_gl
def test_render_and_save(tmp_path):
    mesh = create_cube_mesh(4)
    scene = Scene([IsoColor(mesh, "temperature", min=0.0, max=1.7)], background_color="#000000")
    renderer = Renderer(scene, width=320, height=240)
    try:
        color = renderer.render()
        assert color.shape == (240, 320, 3)
        assert color.dtype == np.uint8
        assert color.max() > 0

        output_path = renderer.save(tmp_path / "cube.png")
        assert Image.open(output_path).size == (320, 240)
    finally:
        renderer.dispose()
    assert not renderer.initialized
