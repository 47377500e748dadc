"""Navigable Surface abstract interface

A surface is the embedded browser view of one pane. It renders a URL, keeps
its own back/forward stack, and accepts programmatic commands. Commands are
non-blocking: their effect is reported later through `NavigationEvent`s
(source="surface") delivered to the listener on the event loop.

Implementations:
- InMemorySurface: simulated engine for tests and the console demo
- RemoteSurface: proxy for an iframe in the dashboard page

Design rules:
1. Minimal interface: only what a pane controller needs
2. Callbacks for one surface are serialized on the event loop
3. A released surface never emits again
4. Commands that start a load carry an optional navigation_id; the result
   events of that load must report it back unchanged
"""

import itertools
from abc import ABC, abstractmethod
from typing import Any, Callable

from ..pane.types import NavigationEvent
from ..telemetry import get_logger

logger = get_logger(__name__)

SurfaceListener = Callable[[NavigationEvent], Any]

_surface_id_counter = itertools.count(1)


def next_surface_id() -> str:
    """Get a new process-unique surface ID (e.g. "s1")."""
    return f"s{next(_surface_id_counter)}"


class NavigableSurface(ABC):
    """Embedded browser view consumed by a pane controller.

    Example:
        surface = InMemorySurface()
        surface.set_listener(controller.handle_surface_event)
        surface.navigate("https://example.com")
        # ... later the engine reports:
        # NavigationEvent(source="surface", event_type="finished", url=...)
    """

    def __init__(self, surface_id: str | None = None):
        self.surface_id = surface_id or next_surface_id()
        self._listener: SurfaceListener | None = None
        self._zoom_factor = 1.0
        self._released = False

    # === Capability ===

    @property
    @abstractmethod
    def url(self) -> str | None:
        """URL currently shown, None when blank"""
        pass

    @property
    @abstractmethod
    def can_go_back(self) -> bool:
        pass

    @property
    @abstractmethod
    def can_go_forward(self) -> bool:
        pass

    @property
    def zoom_factor(self) -> float:
        return self._zoom_factor

    @property
    def released(self) -> bool:
        return self._released

    # === Commands ===

    @abstractmethod
    def navigate(self, url: str, navigation_id: int | None = None) -> None:
        """Start loading url."""
        pass

    @abstractmethod
    def reload(self, navigation_id: int | None = None) -> None:
        """Reload the current page."""
        pass

    @abstractmethod
    def go_back(self, navigation_id: int | None = None) -> None:
        pass

    @abstractmethod
    def go_forward(self, navigation_id: int | None = None) -> None:
        pass

    def clear(self) -> None:
        """Show the blank placeholder (optional)."""
        pass

    def set_zoom(self, factor: float) -> None:
        """Set page zoom (1.0 = 100%)."""
        self._zoom_factor = factor

    def release(self) -> None:
        """Tear down the surface; no further events are delivered."""
        self._released = True
        self._listener = None
        logger.debug(f"[Surface:{self.surface_id}] Released")

    # === Events ===

    def set_listener(self, listener: SurfaceListener | None) -> None:
        self._listener = listener

    def emit(self, event: NavigationEvent) -> bool:
        """Deliver an event to the listener.

        Returns:
            Whether the event was delivered
        """
        if self._released or self._listener is None:
            logger.debug(f"[Surface:{self.surface_id}] Dropped {event.signal}: no listener")
            return False
        self._listener(event)
        return True
