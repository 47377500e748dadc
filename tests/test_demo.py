"""控制台 demo 测试"""

from unittest.mock import patch

from gridbrowser import demo
from gridbrowser.grid import GridManager
from gridbrowser.storage import KeyValueStore
from gridbrowser.surface import InMemorySurface


def test_menu_session(state_file, capsys):
    """新建窗口、输入 URL、完成加载、调整设置后退出"""
    inputs = ["1", "2", "0", "example.com", "3", "7", "2 2 85", "0"]

    with patch("builtins.input", side_effect=inputs):
        demo.main(state_file)

    output = capsys.readouterr().out
    assert "已新建 pane #0" in output
    assert "完成 1 个导航" in output

    restarted = GridManager(store=KeyValueStore(state_file), surface_factory=InMemorySurface)
    restarted.load()
    assert restarted.collection.entries == ["https://example.com"]
    assert restarted.settings.columns == 2
    assert restarted.settings.zoom == 85


def test_invalid_choices(state_file, capsys):
    inputs = ["2", "x", "7", "a b", "0"]

    with patch("builtins.input", side_effect=inputs):
        demo.main(state_file)

    output = capsys.readouterr().out
    assert "没有任何 pane" in output
    assert "无效选择" in output
    assert "请输入三个数字" in output
