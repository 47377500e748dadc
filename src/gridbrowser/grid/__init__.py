"""Grid coordination module."""

from .manager import GridManager, OnUpdateCallback, SurfaceFactory

__all__ = ["GridManager", "OnUpdateCallback", "SurfaceFactory"]
