"""In-memory navigable surface.

Simulates a browser engine without rendering anything: it keeps a back/forward
stack, applies configured redirects, and reports results only when the test
(or the console demo) completes an in-flight navigation. Commands never emit
synchronously, matching a real engine's asynchronous callbacks.
"""

from dataclasses import dataclass

from ..pane.types import NavigationEvent
from ..telemetry import get_logger
from .base import NavigableSurface

logger = get_logger(__name__)


@dataclass
class InFlight:
    """A navigation the engine has started but not finished.

    Attributes:
        kind: "load", "reload", "back" or "forward"
        requested_url: URL the navigation is attempting
        navigation_id: id passed with the command, echoed in the result event
    """

    kind: str
    requested_url: str
    navigation_id: int | None = None


class InMemorySurface(NavigableSurface):
    """Simulated surface with a back/forward stack.

    Attributes:
        commands: Log of received commands as (name, arg) tuples
        redirects: requested URL -> final URL applied on completion
    """

    def __init__(
        self,
        surface_id: str | None = None,
        redirects: dict[str, str] | None = None,
    ):
        super().__init__(surface_id)
        self.redirects: dict[str, str] = dict(redirects or {})
        self.commands: list[tuple[str, str | None]] = []
        self._stack: list[str] = []
        self._position = -1
        self._blank = True
        self._in_flight: list[InFlight] = []

    # === Capability ===

    @property
    def url(self) -> str | None:
        if self._blank or self._position < 0:
            return None
        return self._stack[self._position]

    @property
    def can_go_back(self) -> bool:
        return not self._blank and self._position > 0

    @property
    def can_go_forward(self) -> bool:
        return not self._blank and 0 <= self._position < len(self._stack) - 1

    @property
    def in_flight(self) -> list[InFlight]:
        return list(self._in_flight)

    # === Commands ===

    def navigate(self, url: str, navigation_id: int | None = None) -> None:
        self.commands.append(("navigate", url))
        self._in_flight.append(InFlight("load", url, navigation_id))

    def reload(self, navigation_id: int | None = None) -> None:
        self.commands.append(("reload", self.url))
        if self.url:
            self._in_flight.append(InFlight("reload", self.url, navigation_id))

    def go_back(self, navigation_id: int | None = None) -> None:
        self.commands.append(("go_back", None))
        if self.can_go_back:
            target = self._stack[self._position - 1]
            self._in_flight.append(InFlight("back", target, navigation_id))

    def go_forward(self, navigation_id: int | None = None) -> None:
        self.commands.append(("go_forward", None))
        if self.can_go_forward:
            target = self._stack[self._position + 1]
            self._in_flight.append(InFlight("forward", target, navigation_id))

    def clear(self) -> None:
        self.commands.append(("clear", None))
        self._in_flight.clear()
        self._blank = True

    def set_zoom(self, factor: float) -> None:
        super().set_zoom(factor)
        self.commands.append(("zoom", f"{factor:.2f}"))

    def release(self) -> None:
        self.commands.append(("release", None))
        self._in_flight.clear()
        super().release()

    # === Engine simulation ===

    def complete(self, requested_url: str | None = None, final_url: str | None = None) -> bool:
        """Finish an in-flight navigation and report it.

        Args:
            requested_url: Which navigation to finish, default the most recent
            final_url: Loaded URL, default the configured redirect or requested URL

        Returns:
            Whether a matching navigation was in flight
        """
        nav = self._take(requested_url)
        if nav is None:
            return False

        if nav.kind == "back":
            self._position -= 1
            loaded = nav.requested_url
        elif nav.kind == "forward":
            self._position += 1
            loaded = nav.requested_url
        elif nav.kind == "reload":
            loaded = nav.requested_url
        else:
            loaded = final_url or self.redirects.get(nav.requested_url, nav.requested_url)
            self._stack = self._stack[: self._position + 1] + [loaded]
            self._position = len(self._stack) - 1
        self._blank = False

        self.emit(
            NavigationEvent.surface(
                "finished",
                url=loaded,
                requested_url=nav.requested_url,
                can_go_back=self.can_go_back,
                can_go_forward=self.can_go_forward,
                navigation_id=nav.navigation_id,
            )
        )
        return True

    def fail(self, requested_url: str | None = None, error: str = "net::ERR_NAME_NOT_RESOLVED") -> bool:
        """Fail an in-flight navigation (DNS, TLS, timeout...)."""
        nav = self._take(requested_url)
        if nav is None:
            return False
        self.emit(
            NavigationEvent.surface(
                "failed",
                requested_url=nav.requested_url,
                can_go_back=self.can_go_back,
                can_go_forward=self.can_go_forward,
                error=error,
                navigation_id=nav.navigation_id,
            )
        )
        return True

    def click_link(self, url: str) -> None:
        """Navigation started from inside the page (link, script, redirect)."""
        self._stack = self._stack[: self._position + 1] + [url]
        self._position = len(self._stack) - 1
        self._blank = False
        self.emit(
            NavigationEvent.surface(
                "navigated",
                url=url,
                requested_url=url,
                can_go_back=self.can_go_back,
                can_go_forward=self.can_go_forward,
            )
        )

    def settle(self) -> int:
        """Complete every in-flight navigation in start order."""
        count = 0
        while self._in_flight:
            self.complete(self._in_flight[0].requested_url)
            count += 1
        return count

    def _take(self, requested_url: str | None) -> InFlight | None:
        if not self._in_flight:
            logger.debug(f"[Surface:{self.surface_id}] Nothing in flight")
            return None
        if requested_url is None:
            return self._in_flight.pop()
        for i, nav in enumerate(self._in_flight):
            if nav.requested_url == requested_url:
                return self._in_flight.pop(i)
        return None
