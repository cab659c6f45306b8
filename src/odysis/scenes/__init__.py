"""Demo datasets for odysis."""

from .cube import create_cube_mesh, create_cube_scene
from .wave import create_wave_mesh, create_wave_scene

__all__ = ["create_cube_mesh", "create_cube_scene", "create_wave_mesh", "create_wave_scene"]
