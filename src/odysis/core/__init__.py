"""Core data model: fields, blocks, meshes and scenes."""

from .block import Block
from .buffers import float32_view, uint32_view
from .colormap import Colormap, parse_color
from .data import Component, Data
from .errors import DimensionMismatch, IndexOutOfRange, OdysisError, UnknownField
from .events import Observable, batch_updates, update_cycle
from .mesh import Connectivity, PolyMesh, TetraMesh
from .scene import Scene
from . import geometry

__all__ = [
    "Block",
    "Colormap",
    "Component",
    "Connectivity",
    "Data",
    "DimensionMismatch",
    "IndexOutOfRange",
    "Observable",
    "OdysisError",
    "PolyMesh",
    "Scene",
    "TetraMesh",
    "UnknownField",
    "batch_updates",
    "float32_view",
    "geometry",
    "parse_color",
    "uint32_view",
    "update_cycle",
]
