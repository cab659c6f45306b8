"""Effects derived from a parent block's field data."""

from .base import Effect, EffectOutput, Selector
from .isocolor import IsoColor
from .isosurface import IsoSurface, marching_tetrahedra
from .threshold import Threshold

__all__ = [
    "Effect",
    "EffectOutput",
    "IsoColor",
    "IsoSurface",
    "Selector",
    "Threshold",
    "marching_tetrahedra",
]
