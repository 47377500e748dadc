"""GridManager - 网格管理器

职责：
- 持有共享设置、pane 集合、布局引擎、持久化存储
- 执行 chrome 命令（新建/关闭/全部关闭/全部刷新/地址栏提交/前进后退）
- reflow：为每个条目绑定 controller（通过工厂创建 surface），重新计算布局
- 设置变化时同一调用内把 zoom 广播给所有 controller
- 集合与设置的每次变化写回存储
- 按 surface_id 路由 surface 事件
"""

from collections.abc import Callable
from typing import Any

from ..config import KEY_URLS
from ..core.urls import format_url_label, is_blank, short_url
from ..layout import GridLayout, GridLayoutEngine, GridSettings, Viewport
from ..pane import NavigationEvent, PaneCollection, PaneController
from ..storage import KeyValueStore
from ..surface import InMemorySurface, NavigableSurface, RemoteSurface
from ..telemetry import get_logger, metrics

logger = get_logger(__name__)

# 回调类型
SurfaceFactory = Callable[[], NavigableSurface]
OnUpdateCallback = Callable[["GridManager"], Any]

# 影响布局的设置字段
_LAYOUT_FIELDS = {"columns", "rows", "layout_mode", "named_layout"}


class GridManager:
    """网格管理器

    Attributes:
        settings: 共享设置（唯一 setter: update）
        collection: 有序 pane 集合
        engine: 布局引擎
        store: 持久化存储
    """

    def __init__(
        self,
        store: KeyValueStore | None = None,
        settings: GridSettings | None = None,
        surface_factory: SurfaceFactory | None = None,
        engine: GridLayoutEngine | None = None,
    ):
        """初始化

        Args:
            store: 持久化存储，默认使用配置路径
            settings: 共享设置
            surface_factory: 为新 pane 创建 surface，默认 InMemorySurface
            engine: 布局引擎
        """
        self.store = store or KeyValueStore()
        self.settings = settings or GridSettings()
        self.collection = PaneCollection()
        self.engine = engine or GridLayoutEngine()
        self._surface_factory: SurfaceFactory = surface_factory or InMemorySurface

        self._viewport = Viewport()
        self._layout = self.engine.compute(0, self.settings, self._viewport)
        self._by_surface: dict[str, PaneController] = {}
        self._listeners: list[OnUpdateCallback] = []

        # 恢复期间不写回存储、不 reflow
        self._loading = False

        self.settings.on_change(self._on_settings_change)
        self.collection.on_change(self._on_collection_change)

    # === 属性 ===

    @property
    def layout(self) -> GridLayout:
        return self._layout

    @property
    def viewport(self) -> Viewport:
        return self._viewport

    @property
    def controllers(self) -> list[PaneController]:
        return self.collection.controllers

    def get_pane(self, index: int) -> PaneController | None:
        return self.collection.controller_at(index)

    def find_by_surface(self, surface_id: str) -> PaneController | None:
        return self._by_surface.get(surface_id)

    # === 回调 ===

    def on_update(self, callback: OnUpdateCallback) -> None:
        """注册状态更新回调（布局、pane 状态、设置变化）"""
        self._listeners.append(callback)

    def _notify(self) -> None:
        for callback in self._listeners:
            callback(self)

    # === 启动恢复 ===

    def load(self) -> int:
        """从存储恢复条目和设置

        已持久化的 URL 通过 controller.restore 重新加载，加载成功前不改写存储。

        Returns:
            恢复的 pane 数
        """
        self._loading = True
        try:
            self.store.load()
            self.settings.apply_values(self.store.to_dict())
            self.collection.reset(self._read_urls())
            self._by_surface.clear()
        finally:
            self._loading = False

        self.reflow()
        logger.info(
            f"[GridManager] Loaded {len(self.collection)} panes, settings={self.settings!r}"
        )
        return len(self.collection)

    def _read_urls(self) -> list[str]:
        raw = self.store.get(KEY_URLS, [])
        if not isinstance(raw, list) or not all(isinstance(url, str) for url in raw):
            logger.warning(f"[GridManager] Ignored malformed persisted urls: {raw!r}")
            metrics.inc("persist.error", {"op": "load", "reason": "urls"})
            return []
        return raw

    # === Reflow ===

    def reflow(self) -> GridLayout:
        """为未绑定条目创建 controller，重新计算布局并通知"""
        if self._loading:
            return self._layout

        for index in self.collection.unbound_indices():
            self._create_controller(index)

        # 清理已关闭 pane 的路由
        for surface_id in [
            sid for sid, controller in self._by_surface.items() if controller.is_closed
        ]:
            del self._by_surface[surface_id]

        self._layout = self.engine.compute(len(self.collection), self.settings, self._viewport)
        metrics.gauge("grid.panes", len(self.collection))
        logger.debug(
            f"[GridManager] Reflow: {len(self.collection)} panes, "
            f"{self._layout.columns}x{self._layout.row_count} slots={len(self._layout.slots)}"
        )
        self._notify()
        return self._layout

    def _create_controller(self, index: int) -> PaneController:
        surface = self._surface_factory()
        controller = PaneController(index, surface, zoom=self.settings.zoom)
        controller.set_on_state_change(self._on_pane_state_change)
        self.collection.bind(index, controller)
        self._by_surface[surface.surface_id] = controller

        entry = self.collection.get(index)
        if entry:
            controller.restore(entry)
        return controller

    # === Chrome 命令 ===

    def open_new_window(self) -> int:
        """追加空白 pane

        Returns:
            新 pane 的 index
        """
        index = self.collection.append("")
        self.reflow()
        return index

    def close_window(self, url: str) -> int | None:
        """关闭第一个 URL 匹配的 pane（"" 关闭第一个空白 pane）"""
        index = self.collection.remove_by_url(url)
        if index is not None:
            self.reflow()
        return index

    def close_window_at(self, index: int) -> bool:
        if not self.collection.remove_by_index(index):
            return False
        self.reflow()
        return True

    def close_all_windows(self) -> int:
        count = self.collection.close_all()
        self.reflow()
        return count

    def reload_all_windows(self, hard: bool = False) -> int:
        return self.collection.reload_all(hard=hard)

    def submit(self, index: int, text: str | None) -> bool:
        """地址栏提交

        空白输入清空 pane，条目同步写为 ""。
        """
        controller = self._controller_or_none(index, "submit")
        if controller is None:
            return False
        change = controller.submit(text)
        if is_blank(text):
            self.collection.set_url(index, "")
        logger.debug(f"[GridManager] Submit #{index}: {short_url((text or '').strip())}")
        return change is not None

    def go_back(self, index: int) -> bool:
        controller = self._controller_or_none(index, "back")
        return controller.go_back() if controller else False

    def go_forward(self, index: int) -> bool:
        controller = self._controller_or_none(index, "forward")
        return controller.go_forward() if controller else False

    def reload(self, index: int, hard: bool = False) -> bool:
        controller = self._controller_or_none(index, "reload")
        return controller.reload(hard=hard) if controller else False

    def update_settings(self, **changes: Any) -> set[str]:
        """修改共享设置（列数、行数、zoom、布局模式、侧边栏）"""
        return self.settings.update(**changes)

    def set_viewport(self, width: float, height: float) -> GridLayout:
        """前端上报可用绘制区域

        Raises:
            ValueError: 尺寸非正数
        """
        viewport = Viewport(float(width), float(height))
        if viewport == self._viewport:
            return self._layout
        self._viewport = viewport
        return self.reflow()

    def _controller_or_none(self, index: int, op: str) -> PaneController | None:
        controller = self.collection.controller_at(index)
        if controller is None:
            logger.debug(f"[GridManager] {op}: no pane at #{index}")
            metrics.inc("collection.out_of_range", {"op": op})
        return controller

    # === Surface 事件 ===

    def handle_surface_event(self, surface_id: str, event: NavigationEvent) -> bool:
        """把页面上报的 surface 事件路由到对应 controller

        Returns:
            是否送达（未知 surface_id 忽略）
        """
        controller = self._by_surface.get(surface_id)
        if controller is None or controller.surface is None:
            logger.debug(f"[GridManager] Unknown surface: {surface_id}")
            metrics.inc("surface.unknown")
            return False

        surface = controller.surface
        if isinstance(surface, RemoteSurface):
            return surface.receive(event)
        return surface.emit(event)

    # === 内部回调 ===

    def _on_collection_change(self, entries: list[str]) -> None:
        if self._loading:
            return
        self.store.set(KEY_URLS, entries)

    def _on_settings_change(self, settings: GridSettings, changed: set[str]) -> None:
        if "zoom" in changed:
            for controller in self.controllers:
                controller.apply_zoom(settings.zoom)

        if self._loading:
            return

        self.store.update(settings.to_values())

        if changed & _LAYOUT_FIELDS:
            self.reflow()
        else:
            self._notify()

    def _on_pane_state_change(self, controller: PaneController) -> None:
        self._notify()

    # === 序列化 ===

    def get_state_dict(self) -> dict:
        """Dashboard 快照"""
        entries = self.collection.entries
        return {
            "entries": entries,
            "labels": [format_url_label(url) for url in entries],
            "panes": [controller.to_dict() for controller in self.controllers],
            "layout": self._layout.to_dict(),
            "settings": self.settings.to_dict(),
        }
