"""Shared grid settings.

One settings object is shared by the layout engine and every pane controller.
All mutation goes through `GridSettings.update`, which validates the new
values and then notifies every listener synchronously in the same call, so no
pane can observe a half-applied change.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable

from ..config import (
    DEFAULT_COLUMNS,
    DEFAULT_LAYOUT_MODE,
    DEFAULT_NAMED_LAYOUT,
    DEFAULT_ROWS,
    DEFAULT_SIDE_MENU,
    DEFAULT_ZOOM,
    KEY_COLUMNS,
    KEY_LAYOUT_MODE,
    KEY_NAMED_LAYOUT,
    KEY_ROWS,
    KEY_SIDE_MENU,
    KEY_ZOOM,
    MIN_COLUMNS,
    MIN_ROWS,
    ZOOM_MAX,
    ZOOM_MIN,
    ZOOM_STEP,
)
from ..telemetry import get_logger

logger = get_logger(__name__)


class LayoutMode(Enum):
    """Grid layout policy.

    - FREE: columns x rows steppers, one slot per pane
    - NAMED: fixed named layout (e.g. 3x2), placeholders fill empty slots
    """

    FREE = "free"
    NAMED = "named"


class NamedLayout(Enum):
    """Discrete named layouts: value is "<columns>x<rows>"."""

    L2X1 = "2x1"
    L2X2 = "2x2"
    L3X2 = "3x2"
    L3X3 = "3x3"
    L4X2 = "4x2"
    L4X3 = "4x3"

    @property
    def columns(self) -> int:
        return int(self.value.split("x")[0])

    @property
    def rows(self) -> int:
        return int(self.value.split("x")[1])

    @property
    def capacity(self) -> int:
        return self.columns * self.rows

    @classmethod
    def from_key(cls, key: "str | NamedLayout") -> "NamedLayout":
        """Parse "3x2" (or "3X2") into a NamedLayout.

        Raises:
            ValueError: If key is not a known layout
        """
        if isinstance(key, NamedLayout):
            return key
        return cls(str(key).strip().lower())


class SideMenuVisibility(Enum):
    EXPANDED = "expanded"
    COLLAPSED = "collapsed"

    def toggled(self) -> "SideMenuVisibility":
        if self == SideMenuVisibility.EXPANDED:
            return SideMenuVisibility.COLLAPSED
        return SideMenuVisibility.EXPANDED


def clamp_zoom(value: float) -> int:
    """Snap zoom to ZOOM_STEP and clamp to [ZOOM_MIN, ZOOM_MAX]."""
    snapped = int(round(float(value) / ZOOM_STEP)) * ZOOM_STEP
    return max(ZOOM_MIN, min(ZOOM_MAX, snapped))


@dataclass(frozen=True)
class LayoutConfiguration:
    """Immutable view of the values the layout engine needs."""

    columns: int
    rows: int
    zoom: int = DEFAULT_ZOOM
    mode: LayoutMode = LayoutMode.FREE
    named_layout: NamedLayout = NamedLayout.L3X2

    @property
    def effective_columns(self) -> int:
        if self.mode == LayoutMode.NAMED:
            return self.named_layout.columns
        return self.columns

    @property
    def effective_rows(self) -> int:
        if self.mode == LayoutMode.NAMED:
            return self.named_layout.rows
        return self.rows


# Listener receives the settings and the set of changed field names
SettingsListener = Callable[["GridSettings", set[str]], Any]


class GridSettings:
    """Process-wide grid configuration.

    Attributes:
        columns, rows: free-mode grid shape (>= 1)
        zoom: shared zoom percentage, ZOOM_MIN..ZOOM_MAX step ZOOM_STEP
        layout_mode: FREE or NAMED
        named_layout: layout used in NAMED mode
        side_menu: chrome side menu visibility
    """

    def __init__(
        self,
        columns: int = DEFAULT_COLUMNS,
        rows: int = DEFAULT_ROWS,
        zoom: int = DEFAULT_ZOOM,
        layout_mode: LayoutMode | str = DEFAULT_LAYOUT_MODE,
        named_layout: NamedLayout | str = DEFAULT_NAMED_LAYOUT,
        side_menu: SideMenuVisibility | str = DEFAULT_SIDE_MENU,
    ):
        self._listeners: list[SettingsListener] = []
        self.columns = max(MIN_COLUMNS, int(columns))
        self.rows = max(MIN_ROWS, int(rows))
        self.zoom = clamp_zoom(zoom)
        self.layout_mode = LayoutMode(layout_mode)
        self.named_layout = NamedLayout.from_key(named_layout)
        self.side_menu = SideMenuVisibility(side_menu)

    # === Listeners ===

    def on_change(self, listener: SettingsListener) -> None:
        self._listeners.append(listener)

    # === Mutation ===

    def update(self, **changes: Any) -> set[str]:
        """Apply changes and fan out to listeners.

        Accepted keys: columns, rows, zoom, layout_mode, named_layout, side_menu.

        Returns:
            Names of the fields that actually changed

        Raises:
            ValueError: On unknown keys or values that cannot be parsed
        """
        parsed: dict[str, Any] = {}
        for key, value in changes.items():
            try:
                parsed[key] = self._parse(key, value)
            except (TypeError, OverflowError) as e:
                raise ValueError(f"Invalid {key}: {value!r}") from e

        changed = {key for key, value in parsed.items() if getattr(self, key) != value}
        if not changed:
            return changed

        for key in changed:
            setattr(self, key, parsed[key])

        logger.info(
            "[Settings] "
            + ", ".join(f"{key}={self._format(getattr(self, key))}" for key in sorted(changed))
        )

        for listener in self._listeners:
            listener(self, changed)
        return changed

    def set_columns(self, columns: int) -> set[str]:
        return self.update(columns=columns)

    def set_rows(self, rows: int) -> set[str]:
        return self.update(rows=rows)

    def set_zoom(self, zoom: float) -> set[str]:
        return self.update(zoom=zoom)

    def step_columns(self, delta: int) -> set[str]:
        return self.update(columns=self.columns + delta)

    def step_rows(self, delta: int) -> set[str]:
        return self.update(rows=self.rows + delta)

    def toggle_side_menu(self) -> set[str]:
        return self.update(side_menu=self.side_menu.toggled())

    # === Views ===

    def layout_configuration(self) -> LayoutConfiguration:
        return LayoutConfiguration(
            columns=self.columns,
            rows=self.rows,
            zoom=self.zoom,
            mode=self.layout_mode,
            named_layout=self.named_layout,
        )

    def to_dict(self) -> dict:
        """Serialize to the dashboard form."""
        config = self.layout_configuration()
        return {
            "columns": self.columns,
            "rows": self.rows,
            "zoom": self.zoom,
            "layout_mode": self.layout_mode.value,
            "named_layout": self.named_layout.value,
            "side_menu": self.side_menu.value,
            "effective_columns": config.effective_columns,
            "effective_rows": config.effective_rows,
            "named_layouts": [layout.value for layout in NamedLayout],
        }

    def to_values(self) -> dict[str, Any]:
        """Serialize to persisted key -> value entries."""
        return {
            KEY_COLUMNS: self.columns,
            KEY_ROWS: self.rows,
            KEY_ZOOM: self.zoom,
            KEY_SIDE_MENU: self.side_menu.value,
            KEY_LAYOUT_MODE: self.layout_mode.value,
            KEY_NAMED_LAYOUT: self.named_layout.value,
        }

    @classmethod
    def from_values(cls, values: dict[str, Any]) -> "GridSettings":
        """Build settings from persisted entries.

        Malformed values fall back to defaults field by field.
        """
        settings = cls()
        settings.apply_values(values)
        return settings

    def apply_values(self, values: dict[str, Any]) -> set[str]:
        """Apply persisted entries in place, skipping malformed ones.

        Returns:
            Names of the fields that changed
        """
        changed: set[str] = set()
        for key, field_name in (
            (KEY_COLUMNS, "columns"),
            (KEY_ROWS, "rows"),
            (KEY_ZOOM, "zoom"),
            (KEY_SIDE_MENU, "side_menu"),
            (KEY_LAYOUT_MODE, "layout_mode"),
            (KEY_NAMED_LAYOUT, "named_layout"),
        ):
            if key not in values:
                continue
            try:
                changed |= self.update(**{field_name: values[key]})
            except ValueError as e:
                logger.warning(f"[Settings] Ignored persisted {key}={values[key]!r}: {e}")
        return changed

    @staticmethod
    def _parse(key: str, value: Any) -> Any:
        if key == "columns":
            return max(MIN_COLUMNS, int(value))
        if key == "rows":
            return max(MIN_ROWS, int(value))
        if key == "zoom":
            return clamp_zoom(value)
        if key == "layout_mode":
            return LayoutMode(value)
        if key == "named_layout":
            return NamedLayout.from_key(value)
        if key == "side_menu":
            return SideMenuVisibility(value)
        raise ValueError(f"Unknown setting: {key}")

    @staticmethod
    def _format(value: Any) -> str:
        return value.value if isinstance(value, Enum) else str(value)

    def __repr__(self) -> str:
        return "GridSettings(" + ", ".join(
            f"{name}={self._format(getattr(self, name))}"
            for name in ("columns", "rows", "zoom", "layout_mode", "named_layout", "side_menu")
        ) + ")"
