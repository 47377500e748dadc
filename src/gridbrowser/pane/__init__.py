"""Pane 模块

提供导航状态同步的核心组件：
- types: 数据类型定义（NavigationEvent, NavigationChange, PaneStatus 等）
- predicates: 流转规则谓词库
- transitions: 状态流转规则表
- controller: PaneController
- collection: PaneCollection
"""

from .types import (
    PaneStatus,
    SurfaceCommand,
    NavigationEvent,
    NavigationChange,
    NavigationHistoryEntry,
    PaneSnapshot,
    TransitionRule,
)
from .predicates import (
    reject_superseded,
    require_blank_target,
    require_can_go_back,
    require_can_go_forward,
    require_has_url,
    require_matches_target,
    require_no_url,
    require_reloadable,
    require_target_url,
)
from .controller import PaneController
from .collection import PaneCollection

__all__ = [
    # Types
    "PaneStatus",
    "SurfaceCommand",
    "NavigationEvent",
    "NavigationChange",
    "NavigationHistoryEntry",
    "PaneSnapshot",
    "TransitionRule",
    # Predicates
    "reject_superseded",
    "require_blank_target",
    "require_can_go_back",
    "require_can_go_forward",
    "require_has_url",
    "require_matches_target",
    "require_no_url",
    "require_reloadable",
    "require_target_url",
    # Controller
    "PaneController",
    # Collection
    "PaneCollection",
]
