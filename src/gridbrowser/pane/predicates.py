"""内置谓词库

提供 TransitionRule 可用的谓词函数。
谓词函数签名: (event: NavigationEvent, snapshot: PaneSnapshot) -> bool

可用谓词：
- require_target_url(): submit 规范化后非空
- require_blank_target(): submit 规范化后为空
- require_reloadable(): pane 有可重新加载的 URL
- require_matches_target(): surface 事件属于当前导航目标
- reject_superseded(): surface 事件不属于已被取代的导航
- require_can_go_back() / require_can_go_forward(): surface 能力
- require_has_url() / require_no_url(): pane 是否已加载过 URL
"""

from .types import NavigationEvent, PaneSnapshot, Predicate


def require_target_url() -> Predicate:
    """创建检查 submit 目标非空的谓词"""
    def predicate(event: NavigationEvent, snapshot: PaneSnapshot) -> bool:
        return bool(event.url)

    return predicate


def require_blank_target() -> Predicate:
    """创建检查 submit 目标为空的谓词"""
    def predicate(event: NavigationEvent, snapshot: PaneSnapshot) -> bool:
        return not event.url

    return predicate


def require_reloadable() -> Predicate:
    """创建检查可重新加载的谓词

    有已加载的 URL 或仍在加载的目标即可。
    """
    def predicate(event: NavigationEvent, snapshot: PaneSnapshot) -> bool:
        return bool(snapshot.current_url or snapshot.target_url)

    return predicate


def require_matches_target() -> Predicate:
    """创建检查 surface 事件属于当前目标的谓词

    带回当前导航编号时直接匹配，否则按导航目标 URL 匹配，而不是按到达顺序。
    surface 未上报 requested_url 时视为匹配（后到者生效）。
    """
    def predicate(event: NavigationEvent, snapshot: PaneSnapshot) -> bool:
        if event.navigation_id is not None and event.navigation_id == snapshot.navigation_id:
            return True
        if event.requested_url is None:
            return True
        return event.requested_url == snapshot.target_url

    return predicate


def reject_superseded() -> Predicate:
    """创建拒绝被取代导航结果的谓词

    按导航编号识别：同一 URL 之后再次访问会分配新编号，不受旧记录影响。
    没有编号的事件（页内跳转、引擎自发导航）不会被拒绝。
    """
    def predicate(event: NavigationEvent, snapshot: PaneSnapshot) -> bool:
        if event.navigation_id is None:
            return True
        return event.navigation_id not in snapshot.superseded

    return predicate


def require_can_go_back() -> Predicate:
    def predicate(event: NavigationEvent, snapshot: PaneSnapshot) -> bool:
        return snapshot.can_go_back

    return predicate


def require_can_go_forward() -> Predicate:
    def predicate(event: NavigationEvent, snapshot: PaneSnapshot) -> bool:
        return snapshot.can_go_forward

    return predicate


def require_has_url() -> Predicate:
    """创建检查 pane 已有加载过的 URL 的谓词"""
    def predicate(event: NavigationEvent, snapshot: PaneSnapshot) -> bool:
        return bool(snapshot.current_url)

    return predicate


def require_no_url() -> Predicate:
    def predicate(event: NavigationEvent, snapshot: PaneSnapshot) -> bool:
        return not snapshot.current_url

    return predicate
