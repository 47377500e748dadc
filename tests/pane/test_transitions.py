"""流转规则表与谓词测试"""

import pytest

from gridbrowser.pane import (
    NavigationEvent,
    PaneSnapshot,
    PaneStatus,
    reject_superseded,
    require_matches_target,
    require_reloadable,
)
from gridbrowser.pane.transitions import (
    TRANSITION_RULES,
    find_matching_rules,
)


def snapshot(**kwargs) -> PaneSnapshot:
    values = {"status": PaneStatus.LOADING, "current_url": None, "target_url": None}
    values.update(kwargs)
    return PaneSnapshot(**values)


class TestRuleTable:
    """规则表结构"""

    def test_rule_names_unique(self):
        names = [rule.name for rule in TRANSITION_RULES]
        assert len(names) == len(set(names))

    def test_surface_rules_never_command(self):
        """surface 事实不会反向触发导航"""
        for rule in TRANSITION_RULES:
            if rule.signal_pattern.startswith("surface."):
                assert rule.command is None, rule.name

    def test_user_rules_always_command(self):
        for rule in TRANSITION_RULES:
            if rule.signal_pattern.startswith("user."):
                assert rule.command is not None, rule.name

    def test_no_rule_leaves_closed(self):
        for rule in TRANSITION_RULES:
            assert not rule.matches_from_status(PaneStatus.CLOSED), rule.name

    @pytest.mark.parametrize(
        "signal,status,expected",
        [
            ("user.submit", PaneStatus.BLANK, "U1"),
            ("user.submit", PaneStatus.LOADED, "U1"),
            ("user.reload", PaneStatus.LOADED, "U3"),
            ("user.reset", PaneStatus.LOADING, "U4"),
            ("user.back", PaneStatus.LOADED, "U5"),
            ("user.close", PaneStatus.BLANK, "U7"),
            ("surface.finished", PaneStatus.LOADING, "S1"),
            ("surface.finished", PaneStatus.LOADED, "S2"),
            ("surface.navigated", PaneStatus.LOADED, "S3"),
            ("surface.navigated", PaneStatus.LOADING, "S4"),
            ("surface.failed", PaneStatus.LOADING, "S5"),
            ("surface.failed", PaneStatus.LOADED, "S7"),
        ],
    )
    def test_first_matching_rule(self, signal, status, expected):
        rules = find_matching_rules(signal, status)
        assert rules
        assert rules[0].name == expected

    def test_submit_has_blank_alternative(self):
        names = [rule.name for rule in find_matching_rules("user.submit", PaneStatus.LOADED)]
        assert names == ["U1", "U2"]

    @pytest.mark.parametrize(
        "signal,status",
        [
            ("user.reload", PaneStatus.BLANK),
            ("user.back", PaneStatus.BLANK),
            ("surface.finished", PaneStatus.BLANK),
            ("surface.failed", PaneStatus.BLANK),
            ("user.unknown", PaneStatus.LOADED),
        ],
    )
    def test_no_rule(self, signal, status):
        assert find_matching_rules(signal, status) == []


class TestPredicates:
    """谓词"""

    def test_matches_target_by_url(self):
        predicate = require_matches_target()
        snap = snapshot(target_url="https://b.com")
        assert predicate(NavigationEvent.surface("finished", requested_url="https://b.com"), snap)
        assert not predicate(
            NavigationEvent.surface("finished", requested_url="https://a.com"), snap
        )

    def test_matches_target_without_requested_url(self):
        """未上报 requested_url 时后到者生效"""
        predicate = require_matches_target()
        assert predicate(NavigationEvent.surface("finished", url="https://x.com"), snapshot())

    def test_matches_target_by_navigation_id(self):
        predicate = require_matches_target()
        snap = snapshot(target_url="https://b.com", navigation_id=3)
        event = NavigationEvent.surface(
            "finished", requested_url="https://b.com/login", navigation_id=3
        )
        assert predicate(event, snap)

    def test_reject_superseded_by_navigation_id(self):
        predicate = reject_superseded()
        snap = snapshot(status=PaneStatus.LOADED, superseded=(1,))
        assert not predicate(
            NavigationEvent.surface("finished", requested_url="https://a.com", navigation_id=1),
            snap,
        )
        assert predicate(
            NavigationEvent.surface("finished", requested_url="https://a.com", navigation_id=2),
            snap,
        )

    def test_events_without_navigation_id_not_superseded(self):
        """页内导航没有编号，即使 URL 曾被取代也接受"""
        predicate = reject_superseded()
        snap = snapshot(status=PaneStatus.LOADED, superseded=(1,))
        event = NavigationEvent.surface(
            "navigated", url="https://a.com", requested_url="https://a.com"
        )
        assert predicate(event, snap)

    def test_reloadable(self):
        predicate = require_reloadable()
        event = NavigationEvent.user("reload")
        assert not predicate(event, snapshot())
        assert predicate(event, snapshot(current_url="https://a.com"))
        assert predicate(event, snapshot(target_url="https://a.com"))


class TestNavigationEvent:
    def test_signal_built_from_source(self):
        assert NavigationEvent.user("submit", "https://a.com").signal == "user.submit"
        event = NavigationEvent.surface("failed", requested_url="https://a.com", error="dns")
        assert event.signal == "surface.failed"
        assert event.is_from_surface
        assert event.error == "dns"
        assert event.timestamp > 0

    def test_format_log(self):
        event = NavigationEvent.user("submit", "https://a.com")
        assert "user.submit" in event.format_log()
        assert "https://a.com" in event.format_log()

    def test_format_log_with_navigation_id(self):
        event = NavigationEvent.surface("finished", url="https://a.com", navigation_id=7)
        assert "nav=7" in event.format_log()
