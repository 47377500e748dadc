"""Grid layout module."""

from .engine import GridLayout, GridLayoutEngine, Slot, Viewport
from .settings import (
    GridSettings,
    LayoutConfiguration,
    LayoutMode,
    NamedLayout,
    SideMenuVisibility,
    clamp_zoom,
)

__all__ = [
    "GridLayout",
    "GridLayoutEngine",
    "Slot",
    "Viewport",
    "GridSettings",
    "LayoutConfiguration",
    "LayoutMode",
    "NamedLayout",
    "SideMenuVisibility",
    "clamp_zoom",
]
