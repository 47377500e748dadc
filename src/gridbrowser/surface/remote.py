"""Remote navigable surface.

Proxy for an iframe rendered by the dashboard page. Commands are serialized
to JSON messages and handed to a non-blocking `send` callable (the server
queues them for WebSocket broadcast). Load commands carry a navigation_id that
the page echoes in its reports. The page reports navigation results
back through `receive`, which mirrors the reported capabilities and forwards
the event to the pane controller.
"""

from typing import Any, Callable

from ..pane.types import NavigationEvent
from ..telemetry import get_logger
from .base import NavigableSurface

logger = get_logger(__name__)

SendCallable = Callable[[dict], Any]

# Event types accepted from the page
SURFACE_EVENT_TYPES = {"finished", "navigated", "failed"}


class RemoteSurface(NavigableSurface):
    """Surface backed by an iframe in a connected browser.

    Attributes:
        send: Non-blocking callable receiving outgoing command dicts
    """

    def __init__(self, send: SendCallable, surface_id: str | None = None):
        super().__init__(surface_id)
        self.send = send
        self._url: str | None = None
        self._can_go_back = False
        self._can_go_forward = False

    @property
    def url(self) -> str | None:
        return self._url

    @property
    def can_go_back(self) -> bool:
        return self._can_go_back

    @property
    def can_go_forward(self) -> bool:
        return self._can_go_forward

    # === Commands ===

    def navigate(self, url: str, navigation_id: int | None = None) -> None:
        self._command("navigate", url=url, navigation_id=navigation_id)

    def reload(self, navigation_id: int | None = None) -> None:
        self._command("reload", navigation_id=navigation_id)

    def go_back(self, navigation_id: int | None = None) -> None:
        self._command("go_back", navigation_id=navigation_id)

    def go_forward(self, navigation_id: int | None = None) -> None:
        self._command("go_forward", navigation_id=navigation_id)

    def clear(self) -> None:
        self._url = None
        self._can_go_back = False
        self._can_go_forward = False
        self._command("clear")

    def set_zoom(self, factor: float) -> None:
        super().set_zoom(factor)
        self._command("zoom", factor=factor)

    def release(self) -> None:
        if self.released:
            return
        self._command("release")
        super().release()

    def _command(self, command: str, **payload: Any) -> None:
        if self.released:
            logger.debug(f"[Surface:{self.surface_id}] Dropped {command}: released")
            return
        self.send(
            {
                "type": "surface_command",
                "surface_id": self.surface_id,
                "command": command,
                **payload,
            }
        )

    # === Events from the page ===

    def receive(self, event: NavigationEvent) -> bool:
        """Apply a navigation report from the page.

        Returns:
            Whether the event reached the pane controller
        """
        if event.event_type not in SURFACE_EVENT_TYPES:
            logger.warning(f"[Surface:{self.surface_id}] Unknown event type: {event.event_type}")
            return False
        if event.can_go_back is not None:
            self._can_go_back = event.can_go_back
        if event.can_go_forward is not None:
            self._can_go_forward = event.can_go_forward
        if event.event_type in ("finished", "navigated") and event.url:
            self._url = event.url
        return self.emit(event)
