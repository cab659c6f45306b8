"""Renderer drawing a Scene's current state with trimesh and pyrender."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

import numpy as np
import trimesh
from PIL import Image

from ..core.colormap import parse_color
from ..core.scene import Scene

if TYPE_CHECKING:
    from numpy.typing import NDArray

logger = logging.getLogger(__name__)


def look_at(cam_pos: NDArray[np.float64], target: NDArray[np.float64]) -> NDArray[np.float64]:
    """Camera pose looking from ``cam_pos`` at ``target`` with +Y up."""
    up = np.array([0.0, 1.0, 0.0])
    forward = target - cam_pos
    forward = forward / np.linalg.norm(forward)
    right = np.cross(forward, up)
    right = right / np.linalg.norm(right)
    up = np.cross(right, forward)

    pose = np.eye(4)
    pose[:3, 0] = right
    pose[:3, 1] = up
    pose[:3, 2] = -forward  # Camera looks down -Z
    pose[:3, 3] = cam_pos
    return pose


class Renderer:
    """Draws a Scene. Reads block state every frame and owns none of it.

    The scene is normalized to a unit sphere, so a fixed camera two and a
    half units away frames it.
    """

    def __init__(
        self,
        scene: Scene,
        width: int = 640,
        height: int = 480,
        background_color: str | None = None,
    ) -> None:
        self.scene = scene
        self.width = width
        self.height = height
        if background_color is not None:
            parse_color(background_color)
        # None follows the scene's background_color
        self._background_color = background_color
        self._offscreen: Any = None

    @property
    def background_color(self) -> str:
        """The override color, or the scene's current one when none is set."""
        return self._background_color or self.scene.background_color

    @background_color.setter
    def background_color(self, color: str | None) -> None:
        if color is not None:
            parse_color(color)
        self._background_color = color

    @property
    def initialized(self) -> bool:
        return self._offscreen is not None

    def initialize(self) -> None:
        """Create the offscreen GL context."""
        import pyrender

        if self._offscreen is None:
            self._offscreen = pyrender.OffscreenRenderer(self.width, self.height)
            logger.debug("Renderer initialized at %dx%d", self.width, self.height)

    def resize(self, width: int | None = None, height: int | None = None) -> None:
        """Change the viewport size, recreating the context if one exists."""
        self.width = width or self.width
        self.height = height or self.height
        if self._offscreen is not None:
            self._offscreen.viewport_width = self.width
            self._offscreen.viewport_height = self.height

    def dispose(self) -> None:
        """Release the GL context; safe to call more than once."""
        if self._offscreen is not None:
            self._offscreen.delete()
            self._offscreen = None

    def build_scene(self) -> trimesh.Scene:
        """Assemble a trimesh Scene from the blocks' current geometry.

        Empty blocks are skipped. Environment meshes are added with their
        block's transform.
        """
        tm_scene = trimesh.Scene()
        for index, block in enumerate(self.scene.iter_blocks()):
            name = f"{index}:{type(block).__name__}"
            if not block.is_empty:
                tm_scene.add_geometry(block.to_trimesh(), node_name=name, transform=block.transform_matrix)
            for env_index, env_mesh in enumerate(block.environment_meshes):
                if isinstance(env_mesh, trimesh.Trimesh):
                    tm_scene.add_geometry(
                        env_mesh,
                        node_name=f"{name}/environment_{env_index}",
                        transform=block.transform_matrix,
                    )
        return tm_scene

    def render(self) -> NDArray[np.uint8]:
        """Draw one frame.

        Returns:
            (height, width, 3) uint8 RGB image
        """
        import pyrender

        self.initialize()
        background = [*parse_color(self.background_color), 1.0]
        pr_scene = pyrender.Scene(ambient_light=[0.3, 0.3, 0.3], bg_color=background)

        for geom in self.build_scene().dump():
            # smooth=False keeps the per-vertex effect colors unblended
            pr_scene.add(pyrender.Mesh.from_trimesh(geom, smooth=False))

        angle = np.radians(30)
        distance = 2.5
        cam_pos = np.array([np.sin(angle) * distance, distance * 0.5, np.cos(angle) * distance])
        camera_pose = look_at(cam_pos, np.zeros(3))
        pr_scene.add(pyrender.PerspectiveCamera(yfov=np.pi / 4.0), pose=camera_pose)
        pr_scene.add(pyrender.DirectionalLight(color=np.ones(3), intensity=3.0), pose=camera_pose)

        color, _ = self._offscreen.render(pr_scene)
        return color

    def save(self, path: str | Path) -> Path:
        """Render a frame and write it as an image file."""
        output_path = Path(path)
        Image.fromarray(self.render()).save(str(output_path))
        logger.info("Saved render to %s", output_path)
        return output_path

    def show(self, **kwargs) -> None:
        """Open trimesh's interactive window on the current state.

        Args:
            **kwargs: Additional arguments passed to trimesh.Scene.show()
        """
        tm_scene = self.build_scene()
        if len(tm_scene.geometry) == 0:
            logger.warning("No geometry to display")
            return
        tm_scene.show(background=[int(c * 255) for c in parse_color(self.background_color)] + [255], **kwargs)
