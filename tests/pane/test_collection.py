"""PaneCollection 测试"""

from unittest.mock import MagicMock

import pytest

from gridbrowser.pane import PaneCollection, PaneController, PaneStatus
from gridbrowser.surface import InMemorySurface
from gridbrowser.telemetry import metrics


@pytest.fixture(autouse=True)
def reset_metrics():
    """每次测试前重置指标"""
    metrics.reset()
    yield
    metrics.reset()


@pytest.fixture
def collection():
    return PaneCollection(["https://a.com", "https://b.com", "https://c.com"])


def bind_all(collection: PaneCollection) -> list[PaneController]:
    """为每个条目绑定 controller 并恢复 URL"""
    controllers = []
    for index, url in enumerate(collection.entries):
        controller = PaneController(index, InMemorySurface())
        collection.bind(index, controller)
        controller.restore(url)
        controllers.append(controller)
    return controllers


class TestAppendRemove:
    """追加 / 删除"""

    def test_append_returns_new_index(self):
        collection = PaneCollection()

        assert collection.append() == 0
        assert collection.append("https://a.com") == 1
        assert collection.entries == ["", "https://a.com"]

    def test_remove_by_url_shifts_following(self, collection):
        assert collection.remove_by_url("https://b.com") == 1
        assert collection.entries == ["https://a.com", "https://c.com"]

    def test_remove_by_url_first_match_only(self):
        collection = PaneCollection(["", "https://a.com", ""])

        assert collection.remove_by_url("") == 0
        assert collection.entries == ["https://a.com", ""]

    def test_remove_missing_url(self, collection):
        callback = MagicMock()
        collection.on_change(callback)

        assert collection.remove_by_url("https://zzz.com") is None
        assert len(collection) == 3
        callback.assert_not_called()

    def test_remove_by_index_out_of_range(self, collection):
        assert collection.remove_by_index(5) is False
        assert collection.remove_by_index(-1) is False
        assert len(collection) == 3
        assert metrics.get_counter("collection.out_of_range", {"op": "remove"}) == 2

    def test_close_all_then_append(self, collection):
        controllers = bind_all(collection)

        assert collection.close_all() == 3
        assert all(c.status == PaneStatus.CLOSED for c in controllers)
        assert collection.append() == 0
        assert collection.entries == [""]

    def test_on_change_receives_entries(self):
        collection = PaneCollection()
        callback = MagicMock()
        collection.on_change(callback)

        collection.append("https://a.com")

        callback.assert_called_once_with(["https://a.com"])

    def test_entries_is_copy(self, collection):
        entries = collection.entries
        entries.append("x")
        assert len(collection) == 3

    def test_get_and_index_of(self, collection):
        assert collection.get(1) == "https://b.com"
        assert collection.get(9) is None
        assert collection.index_of("https://c.com") == 2
        assert collection.index_of("nope") is None


class TestControllerBinding:
    """controller 绑定与重新编号"""

    def test_remove_closes_controller_and_reindexes(self, collection):
        controllers = bind_all(collection)

        collection.remove_by_index(1)

        assert controllers[1].is_closed
        assert controllers[1].surface.released
        assert controllers[2].index == 1
        assert collection.controller_at(1) is controllers[2]

    def test_url_change_after_shift_writes_new_index(self, collection):
        """删除前面的 pane 后，后续 pane 的 URL 写回新位置"""
        controllers = bind_all(collection)
        collection.remove_by_index(0)

        controllers[2].surface.complete(final_url="https://c.com/home")

        assert collection.entries == ["https://b.com", "https://c.com/home"]

    def test_removed_pane_late_result_ignored(self, collection):
        controllers = bind_all(collection)
        surface = controllers[1].surface
        collection.remove_by_index(1)

        assert surface.complete() is False
        assert collection.entries == ["https://a.com", "https://c.com"]

    def test_set_url_out_of_range_is_noop(self, collection):
        assert collection.set_url(7, "https://x.com") is False
        assert metrics.get_counter("collection.out_of_range", {"op": "set_url"}) == 1

    def test_set_url_unchanged(self, collection):
        callback = MagicMock()
        collection.on_change(callback)

        assert collection.set_url(0, "https://a.com") is False
        callback.assert_not_called()

    def test_bind_replaces_and_closes_previous(self, collection):
        first = PaneController(0, InMemorySurface())
        second = PaneController(0, InMemorySurface())

        collection.bind(0, first)
        collection.bind(0, second)

        assert first.is_closed
        assert collection.controller_at(0) is second

    def test_unbound_indices(self, collection):
        collection.bind(1, PaneController(1))
        assert collection.unbound_indices() == [0, 2]

    def test_reset_replaces_entries(self, collection):
        controllers = bind_all(collection)

        collection.reset(["https://z.com"])

        assert all(c.is_closed for c in controllers)
        assert collection.entries == ["https://z.com"]
        assert collection.unbound_indices() == [0]


class TestReloadAll:
    """全部刷新"""

    def test_reload_all_only_reloadable(self):
        collection = PaneCollection(["https://a.com", ""])
        controllers = bind_all(collection)
        controllers[0].surface.complete()

        assert collection.reload_all() == 1
        assert controllers[0].status == PaneStatus.LOADING
        assert controllers[1].status == PaneStatus.BLANK

    def test_reload_all_hard(self):
        collection = PaneCollection(["https://a.com"])
        controllers = bind_all(collection)
        controllers[0].surface.complete()

        collection.reload_all(hard=True)

        assert controllers[0].surface.commands[-2:] == [
            ("clear", None),
            ("navigate", "https://a.com"),
        ]
