"""Persistence module."""

from . import persistence
from .store import KeyValueStore

__all__ = ["persistence", "KeyValueStore"]
