"""Color ramps and color parsing."""

from __future__ import annotations

from dataclasses import dataclass

import matplotlib
import numpy as np
from matplotlib.colors import Colormap as MplColormap
from numpy.typing import ArrayLike, NDArray
from PIL import ImageColor

# Ramp names accepted by IsoColor, mapped to matplotlib's registered colormaps
COLORMAPS: dict[str, str] = {
    "viridis": "viridis",
    "coolwarm": "coolwarm",
    "grayscale": "gray",
}


@dataclass(frozen=True)
class Colormap:
    """A color ramp over [0, 1] backed by a matplotlib colormap."""

    name: str
    cmap: MplColormap

    @classmethod
    def get(cls, name: str) -> Colormap:
        """Look up a registered colormap by name.

        Raises:
            ValueError: If the name is not registered
        """
        if name not in COLORMAPS:
            raise ValueError(f"Unknown colormap '{name}', expected one of {sorted(COLORMAPS)}")
        return cls(name, matplotlib.colormaps[COLORMAPS[name]])

    @property
    def first(self) -> NDArray[np.float32]:
        return self(0.0)[0]

    @property
    def last(self) -> NDArray[np.float32]:
        return self(1.0)[0]

    def __call__(self, positions: ArrayLike) -> NDArray[np.float32]:
        """Map ramp positions (clamped to [0, 1]) to an (N, 3) RGB array."""
        t = np.clip(np.asarray(positions, dtype=np.float64).reshape(-1), 0.0, 1.0)
        return self.cmap(t)[:, :3].astype(np.float32)


def parse_color(color: str | tuple[float, ...] | list[float]) -> tuple[float, float, float]:
    """Convert a color string ('#6395b0', '#fff', 'red') or 0-1 RGB tuple to floats.

    Raises:
        ValueError: If the color cannot be interpreted
    """
    if isinstance(color, str):
        rgb = ImageColor.getrgb(color)
        return tuple(channel / 255.0 for channel in rgb[:3])
    values = tuple(float(channel) for channel in color)
    if len(values) != 3 or not all(0.0 <= channel <= 1.0 for channel in values):
        raise ValueError(f"Expected an RGB tuple with values in [0, 1], got {color!r}")
    return values
