"""Viewer module for drawing scenes."""

from .renderer import Renderer, look_at

__all__ = ["Renderer", "look_at"]
