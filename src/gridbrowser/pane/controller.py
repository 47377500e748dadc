"""PaneController - 每个 pane 的导航状态

职责：
- 维护 status/current_url/target_url/history
- 协调三个 URL 来源：用户输入、surface 自身导航、启动时恢复的持久化配置
- 根据流转表匹配规则，成功后向 surface 发出命令
- 每次发起导航分配编号，识别被取代的导航结果（按编号匹配，而非到达顺序）
- current_url 变化时回调 PaneCollection 持久化

防反馈环：surface 事件只写回 pane 状态，不会触发 submit/navigate。
"""

from collections import deque
from typing import Any, Callable, TYPE_CHECKING

from ..config import DEFAULT_ZOOM, NAVIGATION_HISTORY_MAX_LENGTH, SUPERSEDED_HISTORY_LENGTH
from ..core.urls import normalize_url, short_url
from ..telemetry import get_logger, metrics
from .transitions import find_matching_rules
from .types import (
    NavigationChange,
    NavigationEvent,
    NavigationHistoryEntry,
    PaneSnapshot,
    PaneStatus,
    SurfaceCommand,
    TransitionRule,
)

if TYPE_CHECKING:
    from ..surface.base import NavigableSurface

logger = get_logger(__name__)

# 回调类型
OnUrlChangeCallback = Callable[[int, str], Any]
OnStateChangeCallback = Callable[["PaneController"], Any]

# 终态事件：被拒绝时消费对应的 superseded 记录
_TERMINAL_SURFACE_EVENTS = {"finished", "failed"}

# 会让 surface 开始一次加载的命令
_LOAD_COMMANDS = {
    SurfaceCommand.NAVIGATE,
    SurfaceCommand.RELOAD,
    SurfaceCommand.RESET,
    SurfaceCommand.GO_BACK,
    SurfaceCommand.GO_FORWARD,
}


class PaneController:
    """单个 pane 的导航状态机

    Attributes:
        index: 在 PaneCollection 中的位置（删除其他 pane 后会被重新编号）
        status: 当前状态
        current_url: surface 最后一次成功加载的 URL
        target_url: 尚未完成的导航目标
        navigation_id: 最近一次发起、尚未完成的导航编号
        zoom: 共享缩放百分比
    """

    def __init__(
        self,
        index: int,
        surface: "NavigableSurface | None" = None,
        zoom: int = DEFAULT_ZOOM,
    ):
        self.index = index
        self._surface = surface
        self._status = PaneStatus.BLANK
        self._current_url: str | None = None
        self._target_url: str | None = None
        self._zoom = zoom

        # 导航编号，surface 在结果事件中带回
        self._navigation_id: int | None = None
        self._navigation_seq = 0

        # 被取代的导航编号（有界）
        self._superseded: deque[int] = deque(maxlen=SUPERSEDED_HISTORY_LENGTH)
        self._history: deque[NavigationHistoryEntry] = deque(
            maxlen=NAVIGATION_HISTORY_MAX_LENGTH
        )

        # 回调
        self._on_url_change: OnUrlChangeCallback | None = None
        self._on_state_change: OnStateChangeCallback | None = None

        if surface is not None:
            surface.set_listener(self.handle_surface_event)
            surface.set_zoom(zoom / 100)

    # === 属性 ===

    @property
    def status(self) -> PaneStatus:
        return self._status

    @property
    def current_url(self) -> str | None:
        return self._current_url

    @property
    def target_url(self) -> str | None:
        return self._target_url

    @property
    def navigation_id(self) -> int | None:
        return self._navigation_id

    @property
    def zoom(self) -> int:
        return self._zoom

    @property
    def surface(self) -> "NavigableSurface | None":
        return self._surface

    @property
    def is_closed(self) -> bool:
        return self._status.is_closed

    @property
    def can_go_back(self) -> bool:
        if self._surface is None or self.is_closed:
            return False
        return self._surface.can_go_back

    @property
    def can_go_forward(self) -> bool:
        if self._surface is None or self.is_closed:
            return False
        return self._surface.can_go_forward

    @property
    def superseded(self) -> list[int]:
        return list(self._superseded)

    @property
    def history(self) -> list[NavigationHistoryEntry]:
        return list(self._history)

    # === 配置 ===

    def set_on_url_change(self, callback: OnUrlChangeCallback | None) -> None:
        """设置 current_url 变化回调 (index, url) -> None，空白时 url 为 ""."""
        self._on_url_change = callback

    def set_on_state_change(self, callback: OnStateChangeCallback | None) -> None:
        self._on_state_change = callback

    def apply_zoom(self, zoom: int) -> None:
        """应用共享缩放（百分比）"""
        self._zoom = zoom
        if self._surface is not None and not self.is_closed:
            self._surface.set_zoom(zoom / 100)

    # === 用户意图 ===

    def submit(self, raw_text: str | None) -> NavigationChange | None:
        """提交地址栏输入

        规范化为空时清空 pane（显示占位），否则命令 surface 导航。
        """
        return self.process(NavigationEvent.user("submit", normalize_url(raw_text)))

    def restore(self, persisted_url: str | None) -> NavigationChange | None:
        """启动时恢复持久化的 URL

        与 submit 相同的流转；加载成功前不改写持久化值。
        """
        if not normalize_url(persisted_url):
            return None
        logger.debug(f"[Pane:{self.index}] Restore {short_url(persisted_url)}")
        return self.submit(persisted_url)

    def go_back(self) -> bool:
        """后退；surface 不支持时为 no-op"""
        return self.process(NavigationEvent.user("back")) is not None

    def go_forward(self) -> bool:
        """前进；surface 不支持时为 no-op"""
        return self.process(NavigationEvent.user("forward")) is not None

    def reload(self, hard: bool = False) -> bool:
        """重新加载 current_url

        Args:
            hard: True 时先清空 surface 再重新导航
        """
        event_type = "reset" if hard else "reload"
        return self.process(NavigationEvent.user(event_type)) is not None

    def close(self) -> None:
        """关闭 pane，释放 surface，之后不再同步"""
        if self.is_closed:
            return
        self.process(NavigationEvent.user("close"))
        self._on_url_change = None
        self._on_state_change = None

    # === Surface 事实 ===

    def observe_surface_url(
        self, url: str, requested_url: str | None = None
    ) -> NavigationChange | None:
        """surface 自身导航（页内跳转、重定向、点击链接、前进后退）

        只更新 current_url，不会触发 submit。
        """
        return self.process(NavigationEvent.surface("navigated", url, requested_url))

    def surface_did_finish(
        self, url: str | None, requested_url: str | None = None
    ) -> NavigationChange | None:
        return self.process(NavigationEvent.surface("finished", url, requested_url))

    def surface_did_fail(
        self, requested_url: str | None, error: str = ""
    ) -> NavigationChange | None:
        return self.process(
            NavigationEvent.surface("failed", requested_url=requested_url, error=error)
        )

    def handle_surface_event(self, event: NavigationEvent) -> NavigationChange | None:
        """surface listener 入口"""
        return self.process(event)

    # === 核心方法 ===

    def process(self, event: NavigationEvent) -> NavigationChange | None:
        """处理事件

        Args:
            event: 导航事件

        Returns:
            NavigationChange（发生流转时），或 None（被拒绝 / no-op）
        """
        signal = event.signal
        logger.debug(f"[Pane:{self.index}] {event.format_log()}")

        if self.is_closed:
            logger.debug(f"[Pane:{self.index}] Ignored {signal}: closed")
            metrics.inc("navigation.after_close")
            return None

        rules = find_matching_rules(signal, self._status)
        snapshot = self.get_snapshot()
        rule = next((r for r in rules if r.check_predicates(event, snapshot)), None)
        if rule is None:
            if event.is_from_surface and event.navigation_id in self._superseded:
                reason = "superseded"
            elif not rules:
                reason = "no_rule_matched"
            else:
                reason = "predicate_failed"
            self._reject(event, reason)
            return None

        return self._apply(rule, event)

    def _apply(self, rule: TransitionRule, event: NavigationEvent) -> NavigationChange:
        old_status = self._status
        old_url = self._current_url
        command = rule.command

        # 1. 导航目标
        if command == SurfaceCommand.NAVIGATE:
            self._retarget(event.url)
        elif command in (SurfaceCommand.RELOAD, SurfaceCommand.RESET):
            self._retarget(self._target_url or self._current_url)
        elif command is not None:
            self._retarget(None)
        if command in _LOAD_COMMANDS:
            self._navigation_seq += 1
            self._navigation_id = self._navigation_seq

        # 2. surface 事实写回
        if event.is_from_surface:
            terminal = event.event_type in _TERMINAL_SURFACE_EVENTS
            if terminal and event.navigation_id in (None, self._navigation_id):
                self._navigation_id = None
            if event.event_type == "finished":
                self._current_url = event.url or event.requested_url or self._target_url
                self._target_url = None
            elif event.event_type == "navigated":
                if event.url:
                    self._current_url = event.url
            elif event.event_type == "failed":
                self._target_url = None
                logger.warning(
                    f"[Pane:{self.index}] Navigation failed: "
                    f"{short_url(event.requested_url)} | {event.error or 'unknown error'}"
                )
                metrics.inc("navigation.failed", {"pane": str(self.index)})

        if command == SurfaceCommand.CLEAR:
            self._current_url = None

        self._status = rule.get_target_status(old_status)

        self._add_history(event.signal, old_status, self._status, True, rule.name)
        metrics.inc("navigation.ok", {"pane": str(self.index)})
        logger.info(
            f"[Pane:{self.index}] {old_status.value} → {self._status.value} | "
            f"rule={rule.name} | signal={event.signal} | url={short_url(self._current_url)}"
        )

        change = NavigationChange(
            signal=event.signal,
            old_status=old_status,
            new_status=self._status,
            old_url=old_url,
            new_url=self._current_url,
            target_url=self._target_url,
            command=command,
        )

        # 3. 命令 surface（仅用户意图）
        if command is not None:
            self._execute(command, old_status)

        # 4. 回调
        if change.url_changed and self._on_url_change:
            self._on_url_change(self.index, self._current_url or "")
        if self._on_state_change:
            self._on_state_change(self)

        return change

    def _retarget(self, new_target: str | None) -> None:
        """切换导航目标

        目标改变时，尚未完成的导航编号记为被取代。重新提交同一 URL 不算取代，
        旧导航的结果仍按 URL 接受。前进后退没有目标，之后的任何导航都会取代它。
        """
        old_target = self._target_url
        pending = self._navigation_id
        if pending is not None and (old_target is None or old_target != new_target):
            self._superseded.append(pending)
            self._navigation_id = None
            logger.debug(
                f"[Pane:{self.index}] Superseded navigation #{pending} ({short_url(old_target)})"
            )
        self._target_url = new_target

    def _execute(self, command: SurfaceCommand, old_status: PaneStatus) -> None:
        surface = self._surface
        if surface is None:
            return

        nav_id = self._navigation_id
        if command == SurfaceCommand.NAVIGATE:
            surface.navigate(self._target_url, nav_id)
        elif command == SurfaceCommand.RELOAD:
            # 加载中的目标尚未成为 surface 的当前页，需要重新发起
            if old_status == PaneStatus.LOADING:
                surface.navigate(self._target_url, nav_id)
            else:
                surface.reload(nav_id)
        elif command == SurfaceCommand.RESET:
            surface.clear()
            surface.navigate(self._target_url, nav_id)
        elif command == SurfaceCommand.GO_BACK:
            surface.go_back(nav_id)
        elif command == SurfaceCommand.GO_FORWARD:
            surface.go_forward(nav_id)
        elif command == SurfaceCommand.CLEAR:
            surface.clear()
        elif command == SurfaceCommand.RELEASE:
            surface.release()

    def _reject(self, event: NavigationEvent, reason: str) -> None:
        logger.debug(f"[Pane:{self.index}] Rejected {event.signal}: {reason}")
        self._add_history(event.signal, self._status, self._status, False, reason)

        if reason == "superseded":
            metrics.inc("navigation.superseded", {"pane": str(self.index)})
            if event.event_type in _TERMINAL_SURFACE_EVENTS:
                self._superseded.remove(event.navigation_id)
        else:
            metrics.inc("navigation.rejected", {"pane": str(self.index)})

    # === 历史 ===

    def _add_history(
        self,
        signal: str,
        from_status: PaneStatus,
        to_status: PaneStatus,
        success: bool,
        description: str = "",
    ) -> None:
        self._history.append(
            NavigationHistoryEntry(
                signal=signal,
                from_status=from_status,
                to_status=to_status,
                success=success,
                description=description,
            )
        )

    def get_history_log(self) -> str:
        """获取历史日志（调试用）"""
        if not self._history:
            return "  (no history)"
        return "\n".join(f"  {entry}" for entry in self._history)

    # === 快照 / 序列化 ===

    def get_snapshot(self) -> PaneSnapshot:
        return PaneSnapshot(
            status=self._status,
            current_url=self._current_url,
            target_url=self._target_url,
            navigation_id=self._navigation_id,
            superseded=tuple(self._superseded),
            can_go_back=self.can_go_back,
            can_go_forward=self.can_go_forward,
        )

    def to_dict(self) -> dict:
        """序列化为字典（用于 WebSocket）"""
        return {
            "index": self.index,
            "surface_id": self._surface.surface_id if self._surface else None,
            "status": self._status.value,
            "url": self._current_url or "",
            "target_url": self._target_url or "",
            "navigation_id": self._navigation_id,
            "placeholder": self._status.shows_placeholder,
            "can_go_back": self.can_go_back,
            "can_go_forward": self.can_go_forward,
            "zoom": self._zoom,
        }
