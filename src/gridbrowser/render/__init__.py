"""Grid preview rendering."""

from .renderer import GridRenderer

__all__ = ["GridRenderer"]
