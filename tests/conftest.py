"""Pytest 配置"""

import pytest

from gridbrowser.storage import KeyValueStore


@pytest.fixture
def state_file(tmp_path):
    """测试用持久化文件路径"""
    return tmp_path / "state.json"


@pytest.fixture
def store(state_file):
    """指向临时目录的存储"""
    return KeyValueStore(state_file)
