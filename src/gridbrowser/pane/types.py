"""Pane 模块数据类型定义

包含：
- PaneStatus: pane 导航状态
- SurfaceCommand: 状态流转后对 surface 发出的命令
- NavigationEvent: 统一事件 DTO（用户意图 / surface 事实）
- NavigationChange: 状态变更记录
- NavigationHistoryEntry: 历史记录条目
- PaneSnapshot: 供谓词读取的状态快照
- TransitionRule: 流转规则
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Callable

from ..core.urls import short_url


class PaneStatus(Enum):
    """Pane 导航状态

    状态设计（4 个）：
    - BLANK: 空白，显示占位提示
    - LOADING: 已发出导航，等待 surface 完成
    - LOADED: surface 已加载 current_url
    - CLOSED: 已关闭（终态）
    """
    BLANK = "blank"
    LOADING = "loading"
    LOADED = "loaded"
    CLOSED = "closed"

    @property
    def is_closed(self) -> bool:
        return self == PaneStatus.CLOSED

    @property
    def shows_placeholder(self) -> bool:
        """是否显示空白占位（"Enter URL"）"""
        return self == PaneStatus.BLANK

    @property
    def is_live(self) -> bool:
        """是否可以接收命令"""
        return self != PaneStatus.CLOSED


# 常用状态集合
OPEN_STATES = {PaneStatus.BLANK, PaneStatus.LOADING, PaneStatus.LOADED}
ACTIVE_STATES = {PaneStatus.LOADING, PaneStatus.LOADED}


class SurfaceCommand(Enum):
    """流转成功后发给 Navigable Surface 的命令"""
    NAVIGATE = "navigate"
    RELOAD = "reload"
    RESET = "reset"  # 先清空再重新导航
    GO_BACK = "go_back"
    GO_FORWARD = "go_forward"
    CLEAR = "clear"
    RELEASE = "release"


@dataclass
class NavigationEvent:
    """导航事件 - 统一事件 DTO

    用户意图（source="user"）与 surface 事实（source="surface"）统一为此格式，
    两者通过 source 区分，surface 事实永远不会触发新的导航。

    Attributes:
        source: 来源 (user, surface)
        event_type: 事件类型 (submit, reload, finished, navigated, failed, ...)
        signal: 完整信号 source.event_type
        url: 目标 URL（user）或 surface 当前 URL（surface）
        requested_url: surface 事件对应的导航目标 URL
        can_go_back / can_go_forward: surface 上报的能力，None 表示未上报
        error: 失败原因
        navigation_id: 发起导航时分配的编号，surface 原样带回，用于识别被取代的导航
        timestamp: 事件时间
    """
    source: str
    event_type: str
    url: str | None = None
    requested_url: str | None = None
    can_go_back: bool | None = None
    can_go_forward: bool | None = None
    error: str = ""
    navigation_id: int | None = None
    signal: str = ""
    timestamp: float = 0.0

    def __post_init__(self):
        if not self.signal:
            self.signal = f"{self.source}.{self.event_type}"
        if self.timestamp == 0.0:
            self.timestamp = datetime.now().timestamp()

    @classmethod
    def user(cls, event_type: str, url: str | None = None) -> "NavigationEvent":
        """构造用户意图事件"""
        return cls(source="user", event_type=event_type, url=url)

    @classmethod
    def surface(
        cls,
        event_type: str,
        url: str | None = None,
        requested_url: str | None = None,
        can_go_back: bool | None = None,
        can_go_forward: bool | None = None,
        error: str = "",
        navigation_id: int | None = None,
    ) -> "NavigationEvent":
        """构造 surface 事实事件"""
        return cls(
            source="surface",
            event_type=event_type,
            url=url,
            requested_url=requested_url,
            can_go_back=can_go_back,
            can_go_forward=can_go_forward,
            error=error,
            navigation_id=navigation_id,
        )

    @property
    def is_from_surface(self) -> bool:
        return self.source == "surface"

    def format_log(self) -> str:
        ts = datetime.fromtimestamp(self.timestamp).strftime("%H:%M:%S.%f")[:-3]
        nav = f" | nav={self.navigation_id}" if self.navigation_id is not None else ""
        return f"[NavigationEvent] {ts} | {self.signal:18} | {short_url(self.url)}{nav}"


@dataclass
class NavigationHistoryEntry:
    """状态变化历史条目，便于排查问题"""
    signal: str
    from_status: PaneStatus
    to_status: PaneStatus
    success: bool = True
    description: str = ""
    timestamp: float = field(default_factory=lambda: datetime.now().timestamp())

    def __str__(self) -> str:
        ts = datetime.fromtimestamp(self.timestamp).strftime("%H:%M:%S")
        mark = "✓" if self.success else "✗"
        return f"{ts} | {mark} {self.signal} → {self.to_status.value} {self.description}".rstrip()

    def to_dict(self) -> dict:
        return {
            "signal": self.signal,
            "from_status": self.from_status.value,
            "to_status": self.to_status.value,
            "success": self.success,
            "description": self.description,
            "timestamp": self.timestamp,
        }


@dataclass
class NavigationChange:
    """状态变更记录

    Attributes:
        signal: 触发信号
        old_status / new_status: 状态
        old_url / new_url: current_url 变化
        target_url: 流转后的待完成导航目标
        command: 需要发给 surface 的命令
    """
    signal: str
    old_status: PaneStatus
    new_status: PaneStatus
    old_url: str | None
    new_url: str | None
    target_url: str | None = None
    command: SurfaceCommand | None = None

    @property
    def url_changed(self) -> bool:
        return self.old_url != self.new_url


@dataclass
class PaneSnapshot:
    """状态快照，提供给谓词函数"""
    status: PaneStatus
    current_url: str | None
    target_url: str | None
    navigation_id: int | None = None
    superseded: tuple[int, ...] = ()
    can_go_back: bool = False
    can_go_forward: bool = False


# 谓词函数类型
Predicate = Callable[[NavigationEvent, PaneSnapshot], bool]


@dataclass
class TransitionRule:
    """状态流转规则

    Attributes:
        name: 规则编号（用于日志）
        from_status: 原状态集合，None 表示任意非终态
        signal_pattern: 信号（如 "surface.finished"）
        to_status: 目标状态，None 表示保持当前状态
        command: 流转后对 surface 发出的命令，surface 来源的规则必须为 None
        predicates: 谓词列表，全部满足才匹配
    """
    name: str
    from_status: set[PaneStatus] | None
    signal_pattern: str
    to_status: PaneStatus | None
    command: SurfaceCommand | None = None
    predicates: list[Predicate] = field(default_factory=list)

    def matches_signal(self, signal: str) -> bool:
        return signal == self.signal_pattern

    def matches_from_status(self, status: PaneStatus) -> bool:
        if self.from_status is None:
            return status.is_live
        return status in self.from_status

    def check_predicates(self, event: NavigationEvent, snapshot: PaneSnapshot) -> bool:
        for predicate in self.predicates:
            if not predicate(event, snapshot):
                return False
        return True

    def get_target_status(self, current: PaneStatus) -> PaneStatus:
        if self.to_status is None:
            return current
        return self.to_status
