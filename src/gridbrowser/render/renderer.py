"""Grid preview renderer using Rich library."""

import io
import logging
import re

from rich.console import Console
from rich.table import Table
from rich.text import Text

from ..core.urls import format_url_label
from ..layout import GridLayout

logger = logging.getLogger(__name__)

# XML 1.0 允许的字符范围
_INVALID_XML_CHARS_RE = re.compile(
    r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f\ud800-\udfff\ufffe\uffff]"
)

# pane 状态到 Rich 样式
STATUS_STYLES = {
    "blank": "dim",
    "loading": "yellow",
    "loaded": "green",
    "closed": "red",
}

PLACEHOLDER_TEXT = "Enter URL"


def _sanitize_for_xml(text: str) -> str:
    """移除 XML 中不允许的字符。"""
    return _INVALID_XML_CHARS_RE.sub("", text)


class GridRenderer:
    """网格预览渲染器，把布局和条目画成 Rich 表格。"""

    def __init__(self, width: int = 100):
        """
        Args:
            width: 控制台宽度（字符数）
        """
        self.width = width

    def build_table(
        self,
        layout: GridLayout,
        entries: list[str],
        statuses: list[str] | None = None,
    ) -> Table:
        """构建一个 slot 一格的表格。

        Args:
            layout: reflow 结果
            entries: 集合条目（"" 为空白 pane）
            statuses: 每个条目的 pane 状态值，可选
        """
        table = Table(show_header=False, show_lines=True, expand=True)
        for _ in range(layout.columns):
            table.add_column(ratio=1, overflow="fold")

        cells: list[Text] = []
        for slot in layout.slots:
            cells.append(self._cell(slot.entry_index, entries, statuses))

        for start in range(0, len(cells), layout.columns):
            row = cells[start : start + layout.columns]
            row += [Text("")] * (layout.columns - len(row))
            table.add_row(*row)
        return table

    def _cell(
        self,
        entry_index: int | None,
        entries: list[str],
        statuses: list[str] | None,
    ) -> Text:
        if entry_index is None or entry_index >= len(entries):
            return Text("·", style="dim")

        url = entries[entry_index]
        status = statuses[entry_index] if statuses and entry_index < len(statuses) else ""
        text = Text(f"#{entry_index} ", style="bold")
        if url:
            text.append(_sanitize_for_xml(format_url_label(url)))
        else:
            text.append(PLACEHOLDER_TEXT, style="italic dim")
        if status:
            text.append(f"\n{status}", style=STATUS_STYLES.get(status, ""))
        return text

    def _console(self) -> Console:
        return Console(
            record=True,
            width=self.width,
            force_terminal=True,
            color_system="truecolor",
            file=io.StringIO(),
        )

    def render_text(
        self,
        layout: GridLayout,
        entries: list[str],
        statuses: list[str] | None = None,
    ) -> str:
        """渲染为纯文本（控制台 demo 和日志用）。"""
        console = self._console()
        console.print(self.build_table(layout, entries, statuses))
        return console.export_text()

    def render_svg(
        self,
        layout: GridLayout,
        entries: list[str],
        statuses: list[str] | None = None,
        title: str = "GridBrowser",
    ) -> str:
        """渲染为 SVG。"""
        console = self._console()
        console.print(self.build_table(layout, entries, statuses))
        return console.export_svg(title=title)

