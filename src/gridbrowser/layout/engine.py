"""Grid layout engine.

Maps a pane count and a layout configuration to an ordered list of slots.
Reflow is pure: the same (pane_count, configuration, viewport) always yields
the same slots, and slot i always renders collection entry i.

Policies:
- FREE: exactly pane_count slots in `columns` columns; row height is
  viewport height / rows; rows beyond `rows` continue below (scroll)
- NAMED: columns x rows slots from the named layout; unfilled trailing slots
  are placeholders with full geometry; extra full rows are appended when
  there are more panes than the layout holds, so no pane is dropped
"""

import math
from dataclasses import asdict, dataclass, field

from ..config import DEFAULT_VIEWPORT_HEIGHT, DEFAULT_VIEWPORT_WIDTH
from .settings import GridSettings, LayoutConfiguration, LayoutMode


@dataclass(frozen=True)
class Viewport:
    """Available drawing area (pixels)."""

    width: float = DEFAULT_VIEWPORT_WIDTH
    height: float = DEFAULT_VIEWPORT_HEIGHT

    def __post_init__(self):
        finite = math.isfinite(self.width) and math.isfinite(self.height)
        if not finite or self.width <= 0 or self.height <= 0:
            raise ValueError(f"Invalid viewport: {self.width}x{self.height}")


@dataclass
class Slot:
    """One grid cell.

    Attributes:
        index: slot position (row-major)
        column, row: grid coordinates
        x, y, width, height: geometry in viewport pixels
        entry_index: collection entry rendered here, None for a placeholder
    """

    index: int
    column: int
    row: int
    x: float
    y: float
    width: float
    height: float
    entry_index: int | None = None

    @property
    def is_placeholder(self) -> bool:
        return self.entry_index is None


@dataclass
class GridLayout:
    """Result of a reflow."""

    columns: int
    rows: int
    mode: LayoutMode
    viewport: Viewport
    slots: list[Slot] = field(default_factory=list)

    @property
    def pane_slots(self) -> list[Slot]:
        return [slot for slot in self.slots if not slot.is_placeholder]

    @property
    def row_count(self) -> int:
        """Rows actually used (may exceed `rows` when panes overflow)."""
        if not self.slots:
            return 0
        return self.slots[-1].row + 1

    def slot_for_entry(self, entry_index: int) -> Slot | None:
        for slot in self.slots:
            if slot.entry_index == entry_index:
                return slot
        return None

    def to_dict(self) -> dict:
        return {
            "columns": self.columns,
            "rows": self.rows,
            "mode": self.mode.value,
            "viewport": asdict(self.viewport),
            "row_count": self.row_count,
            "slots": [
                {**asdict(slot), "placeholder": slot.is_placeholder} for slot in self.slots
            ],
        }


class GridLayoutEngine:
    """Computes slot geometry for the pane grid."""

    def compute(
        self,
        pane_count: int,
        config: LayoutConfiguration | GridSettings,
        viewport: Viewport | None = None,
    ) -> GridLayout:
        """Compute the grid layout.

        Args:
            pane_count: Number of entries in the pane collection
            config: Layout configuration (or the shared settings)
            viewport: Drawing area, defaults to the configured viewport

        Returns:
            GridLayout with one slot per pane (plus placeholders in NAMED mode)

        Raises:
            ValueError: If pane_count is negative
        """
        if pane_count < 0:
            raise ValueError(f"Invalid pane count: {pane_count}")
        if isinstance(config, GridSettings):
            config = config.layout_configuration()
        viewport = viewport or Viewport()

        columns = config.effective_columns
        rows = config.effective_rows

        if config.mode == LayoutMode.NAMED:
            used_rows = max(rows, math.ceil(pane_count / columns))
            slot_count = columns * used_rows
        else:
            slot_count = pane_count

        width = viewport.width / columns
        height = viewport.height / rows

        slots = []
        for index in range(slot_count):
            column = index % columns
            row = index // columns
            slots.append(
                Slot(
                    index=index,
                    column=column,
                    row=row,
                    x=column * width,
                    y=row * height,
                    width=width,
                    height=height,
                    entry_index=index if index < pane_count else None,
                )
            )

        return GridLayout(
            columns=columns,
            rows=rows,
            mode=config.mode,
            viewport=viewport,
            slots=slots,
        )
