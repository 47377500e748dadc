"""PaneCollection - 有序 pane 集合

职责：
- 维护 URL 条目（插入顺序 = 显示顺序 = 网格 slot 顺序）
- 绑定每个条目对应的 PaneController
- 删除后压缩并重新编号后续 pane，销毁被删除 pane 的 controller
- 接收 controller 的 URL 变化并持久化（唯一的持久化来源）
- 向所有存活 controller 广播 reload
"""

from typing import Any, Callable, Iterator, TYPE_CHECKING

from ..core.urls import short_url
from ..telemetry import get_logger, metrics

if TYPE_CHECKING:
    from .controller import PaneController

logger = get_logger(__name__)

# 回调类型：新的条目列表
OnCollectionChangeCallback = Callable[[list[str]], Any]


class PaneCollection:
    """有序 pane 集合

    Attributes:
        entries: URL 条目副本，"" 表示空白 pane
    """

    def __init__(self, entries: list[str] | None = None):
        self._entries: list[str] = list(entries or [])
        self._controllers: list["PaneController | None"] = [None] * len(self._entries)
        self._callbacks: list[OnCollectionChangeCallback] = []

    # === 属性 ===

    @property
    def entries(self) -> list[str]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._entries))

    def get(self, index: int) -> str | None:
        """安全下标访问，越界返回 None"""
        if 0 <= index < len(self._entries):
            return self._entries[index]
        return None

    def index_of(self, url: str) -> int | None:
        """第一个匹配条目的位置"""
        try:
            return self._entries.index(url)
        except ValueError:
            return None

    # === 回调 ===

    def on_change(self, callback: OnCollectionChangeCallback) -> None:
        """注册条目变化回调"""
        self._callbacks.append(callback)

    def _notify(self) -> None:
        entries = self.entries
        for callback in self._callbacks:
            callback(entries)

    # === Controller 绑定 ===

    def bind(self, index: int, controller: "PaneController") -> bool:
        """绑定 controller 到条目

        controller 的 URL 变化通过 set_url 写回。
        """
        if not self._in_range(index, "bind"):
            return False
        old = self._controllers[index]
        if old is not None and old is not controller:
            old.close()
        controller.index = index
        controller.set_on_url_change(self.set_url)
        self._controllers[index] = controller
        return True

    def controller_at(self, index: int) -> "PaneController | None":
        if 0 <= index < len(self._controllers):
            return self._controllers[index]
        return None

    @property
    def controllers(self) -> list["PaneController"]:
        """所有已绑定的 controller（按顺序）"""
        return [c for c in self._controllers if c is not None]

    def unbound_indices(self) -> list[int]:
        return [i for i, c in enumerate(self._controllers) if c is None]

    # === 操作 ===

    def append(self, url: str = "") -> int:
        """在末尾追加 pane

        Returns:
            新 pane 的 index
        """
        self._entries.append(url)
        self._controllers.append(None)
        index = len(self._entries) - 1
        logger.info(f"[Collection] Append #{index}: {short_url(url)}")
        self._notify()
        return index

    def remove_by_url(self, url: str) -> int | None:
        """删除第一个匹配的条目

        Returns:
            被删除的 index，未找到返回 None
        """
        index = self.index_of(url)
        if index is None:
            logger.debug(f"[Collection] Remove: no entry {short_url(url)}")
            return None
        self._remove(index)
        return index

    def remove_by_index(self, index: int) -> bool:
        """删除指定位置的条目，越界为 no-op"""
        if not self._in_range(index, "remove"):
            return False
        self._remove(index)
        return True

    def _remove(self, index: int) -> None:
        url = self._entries.pop(index)
        controller = self._controllers.pop(index)
        if controller is not None:
            controller.close()

        # 重新编号后续 pane
        for i in range(index, len(self._controllers)):
            remaining = self._controllers[i]
            if remaining is not None:
                remaining.index = i

        logger.info(f"[Collection] Remove #{index}: {short_url(url)} ({len(self._entries)} left)")
        self._notify()

    def close_all(self) -> int:
        """清空集合，销毁所有 controller

        Returns:
            关闭的 pane 数
        """
        count = len(self._entries)
        for controller in self._controllers:
            if controller is not None:
                controller.close()
        self._entries = []
        self._controllers = []
        logger.info(f"[Collection] Closed all ({count})")
        self._notify()
        return count

    def reset(self, entries: list[str]) -> None:
        """替换全部条目（启动恢复用），已有 controller 全部销毁"""
        for controller in self._controllers:
            if controller is not None:
                controller.close()
        self._entries = list(entries)
        self._controllers = [None] * len(self._entries)
        logger.info(f"[Collection] Reset with {len(self._entries)} entries")
        self._notify()

    def set_url(self, index: int, url: str) -> bool:
        """controller 的 current_url 变化时写回

        pane 在回调途中被删除时越界，为 no-op。
        """
        if not self._in_range(index, "set_url"):
            return False
        if self._entries[index] == url:
            return False
        self._entries[index] = url
        logger.debug(f"[Collection] #{index} ← {short_url(url)}")
        self._notify()
        return True

    def reload_all(self, hard: bool = False) -> int:
        """向所有存活 controller 广播 reload（不等待完成）

        Returns:
            接受 reload 的 pane 数
        """
        count = 0
        for controller in self.controllers:
            if controller.is_closed:
                continue
            if controller.reload(hard=hard):
                count += 1
        logger.info(f"[Collection] Reload all: {count}/{len(self._entries)}")
        return count

    def _in_range(self, index: int, op: str) -> bool:
        if 0 <= index < len(self._entries):
            return True
        logger.debug(f"[Collection] {op}: index {index} out of range ({len(self._entries)})")
        metrics.inc("collection.out_of_range", {"op": op})
        return False
