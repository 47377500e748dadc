"""Navigable surface module."""

from .base import NavigableSurface, SurfaceListener, next_surface_id
from .memory import InFlight, InMemorySurface
from .remote import SURFACE_EVENT_TYPES, RemoteSurface

__all__ = [
    "NavigableSurface",
    "SurfaceListener",
    "next_surface_id",
    "InFlight",
    "InMemorySurface",
    "SURFACE_EVENT_TYPES",
    "RemoteSurface",
]
