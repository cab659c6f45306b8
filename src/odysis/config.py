"""Viewer settings loaded from YAML files."""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any

import yaml

from .core.block import DEFAULT_ALPHA, DEFAULT_COLOR
from .core.colormap import Colormap, parse_color


@dataclass
class ViewerConfig:
    """Defaults applied by the command line viewer.

    YAML format:
    ```yaml
    default_color: "#6395b0"
    default_alpha: 1.0
    background_color: "#ffffff"
    colormap: viridis
    width: 800
    height: 600
    log_level: INFO
    ```
    """

    default_color: str = DEFAULT_COLOR
    default_alpha: float = DEFAULT_ALPHA
    background_color: str = "#ffffff"
    colormap: str = "viridis"
    width: int = 800
    height: int = 600
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        parse_color(self.default_color)
        parse_color(self.background_color)
        Colormap.get(self.colormap)
        if not 0.0 <= float(self.default_alpha) <= 1.0:
            raise ValueError(f"default_alpha must be within [0, 1], got {self.default_alpha}")
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Viewport must be positive, got {self.width}x{self.height}")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ViewerConfig:
        """Build a config from parsed YAML.

        Raises:
            ValueError: On unknown keys or invalid values
        """
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown config keys: {sorted(unknown)}")
        return cls(**data)

    @classmethod
    def load(cls, path: str | Path) -> ViewerConfig:
        """Load a config from a YAML file.

        Raises:
            FileNotFoundError: If the file does not exist
            ValueError: If the YAML format is invalid
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Config file {path} must contain a mapping")
        return cls.from_dict(data)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def load_config(path: str | Path | None = None) -> ViewerConfig:
    """Load a config file, or return the defaults when no path is given."""
    if path is None:
        return ViewerConfig()
    return ViewerConfig.load(path)
