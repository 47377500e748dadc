"""状态流转规则表

规则表：
| # | from_status | signal | 条件 | to_status | surface 命令 |
|---|-------------|--------|------|-----------|--------------|
| U1 | BLANK|LOADING|LOADED | user.submit | 目标非空 | LOADING | navigate |
| U2 | BLANK|LOADING|LOADED | user.submit | 目标为空 | BLANK | clear |
| U3 | LOADING|LOADED | user.reload | 可重新加载 | LOADING | reload |
| U4 | LOADING|LOADED | user.reset | 可重新加载 | LOADING | reset |
| U5 | LOADING|LOADED | user.back | can_go_back + 有 URL | LOADED | go_back |
| U6 | LOADING|LOADED | user.forward | can_go_forward + 有 URL | LOADED | go_forward |
| U7 | BLANK|LOADING|LOADED | user.close | - | CLOSED | release |
| S1 | LOADING | surface.finished | 属于当前目标 + 未被取代 | LOADED | - |
| S2 | LOADED | surface.finished | 未被取代 | LOADED | - |
| S3 | LOADED | surface.navigated | 未被取代 | = | - |
| S4 | LOADING | surface.navigated | 属于当前目标 + 未被取代 | = | - |
| S5 | LOADING | surface.failed | 属于当前目标 + 未被取代 + 有 URL | LOADED | - |
| S6 | LOADING | surface.failed | 属于当前目标 + 未被取代 + 无 URL | BLANK | - |
| S7 | LOADED | surface.failed | 未被取代 | = | - |

surface 来源的规则没有命令：观察到的 URL 只写回 pane 状态，不会再次导航。
"""

from .types import ACTIVE_STATES, OPEN_STATES, PaneStatus, SurfaceCommand, TransitionRule
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


# === User 规则 ===

U1_USER_SUBMIT = TransitionRule(
    name="U1",
    from_status=OPEN_STATES,
    signal_pattern="user.submit",
    to_status=PaneStatus.LOADING,
    command=SurfaceCommand.NAVIGATE,
    predicates=[require_target_url()],
)

U2_USER_SUBMIT_BLANK = TransitionRule(
    name="U2",
    from_status=OPEN_STATES,
    signal_pattern="user.submit",
    to_status=PaneStatus.BLANK,
    command=SurfaceCommand.CLEAR,
    predicates=[require_blank_target()],
)

U3_USER_RELOAD = TransitionRule(
    name="U3",
    from_status=ACTIVE_STATES,
    signal_pattern="user.reload",
    to_status=PaneStatus.LOADING,
    command=SurfaceCommand.RELOAD,
    predicates=[require_reloadable()],
)

U4_USER_RESET = TransitionRule(
    name="U4",
    from_status=ACTIVE_STATES,
    signal_pattern="user.reset",
    to_status=PaneStatus.LOADING,
    command=SurfaceCommand.RESET,
    predicates=[require_reloadable()],
)

U5_USER_BACK = TransitionRule(
    name="U5",
    from_status=ACTIVE_STATES,
    signal_pattern="user.back",
    to_status=PaneStatus.LOADED,
    command=SurfaceCommand.GO_BACK,
    predicates=[require_can_go_back(), require_has_url()],
)

U6_USER_FORWARD = TransitionRule(
    name="U6",
    from_status=ACTIVE_STATES,
    signal_pattern="user.forward",
    to_status=PaneStatus.LOADED,
    command=SurfaceCommand.GO_FORWARD,
    predicates=[require_can_go_forward(), require_has_url()],
)

U7_USER_CLOSE = TransitionRule(
    name="U7",
    from_status=OPEN_STATES,
    signal_pattern="user.close",
    to_status=PaneStatus.CLOSED,
    command=SurfaceCommand.RELEASE,
)


# === Surface 规则 ===

S1_SURFACE_FINISHED = TransitionRule(
    name="S1",
    from_status={PaneStatus.LOADING},
    signal_pattern="surface.finished",
    to_status=PaneStatus.LOADED,
    predicates=[reject_superseded(), require_matches_target()],
)

S2_SURFACE_FINISHED_SILENT = TransitionRule(
    name="S2",
    from_status={PaneStatus.LOADED},
    signal_pattern="surface.finished",
    to_status=PaneStatus.LOADED,
    predicates=[reject_superseded()],
)

S3_SURFACE_NAVIGATED = TransitionRule(
    name="S3",
    from_status={PaneStatus.LOADED},
    signal_pattern="surface.navigated",
    to_status=None,
    predicates=[reject_superseded()],
)

S4_SURFACE_NAVIGATED_LOADING = TransitionRule(
    name="S4",
    from_status={PaneStatus.LOADING},
    signal_pattern="surface.navigated",
    to_status=None,
    predicates=[reject_superseded(), require_matches_target()],
)

S5_SURFACE_FAILED_KEEP = TransitionRule(
    name="S5",
    from_status={PaneStatus.LOADING},
    signal_pattern="surface.failed",
    to_status=PaneStatus.LOADED,
    predicates=[reject_superseded(), require_matches_target(), require_has_url()],
)

S6_SURFACE_FAILED_BLANK = TransitionRule(
    name="S6",
    from_status={PaneStatus.LOADING},
    signal_pattern="surface.failed",
    to_status=PaneStatus.BLANK,
    predicates=[reject_superseded(), require_matches_target(), require_no_url()],
)

S7_SURFACE_FAILED_LOADED = TransitionRule(
    name="S7",
    from_status={PaneStatus.LOADED},
    signal_pattern="surface.failed",
    to_status=None,
    predicates=[reject_superseded()],
)


# === 规则表（按优先级排序）===

TRANSITION_RULES: list[TransitionRule] = [
    # User 规则
    U1_USER_SUBMIT,
    U2_USER_SUBMIT_BLANK,
    U3_USER_RELOAD,
    U4_USER_RESET,
    U5_USER_BACK,
    U6_USER_FORWARD,
    U7_USER_CLOSE,

    # Surface 规则
    S1_SURFACE_FINISHED,
    S2_SURFACE_FINISHED_SILENT,
    S3_SURFACE_NAVIGATED,
    S4_SURFACE_NAVIGATED_LOADING,
    S5_SURFACE_FAILED_KEEP,
    S6_SURFACE_FAILED_BLANK,
    S7_SURFACE_FAILED_LOADED,
]


def find_matching_rules(signal: str, current_status: PaneStatus) -> list[TransitionRule]:
    """查找所有可能匹配的规则（不检查谓词）

    Args:
        signal: 事件信号
        current_status: 当前状态

    Returns:
        匹配的规则列表，由调用者检查谓词
    """
    return [
        rule
        for rule in TRANSITION_RULES
        if rule.matches_signal(signal) and rule.matches_from_status(current_status)
    ]
