"""KeyValueStore - 字符串 key 的持久化存储

其余模块只通过 get/set 访问持久化数据；autosave 开启时每次 set 立即写盘。
"""

import copy
from pathlib import Path
from typing import Any

from ..config import PERSIST_FILE, PERSIST_VERSION
from ..telemetry import get_logger
from . import persistence

logger = get_logger(__name__)


class KeyValueStore:
    """JSON 文件支持的 key → value 存储

    Attributes:
        path: 持久化文件路径
        autosave: set 后是否立即写盘
    """

    def __init__(
        self,
        path: Path | str | None = None,
        autosave: bool = True,
        version: int = PERSIST_VERSION,
    ):
        self.path = Path(path) if path is not None else PERSIST_FILE
        self.autosave = autosave
        self.version = version
        self._values: dict[str, Any] = {}
        self._dirty = False

    def __contains__(self, key: str) -> bool:
        return key in self._values

    @property
    def dirty(self) -> bool:
        return self._dirty

    def load(self) -> bool:
        """从文件加载，文件缺失或损坏时保持为空

        Returns:
            是否加载到数据
        """
        values = persistence.load(self.path, self.version)
        if values is None:
            self._values = {}
            self._dirty = False
            return False
        self._values = values
        self._dirty = False
        return True

    def get(self, key: str, default: Any = None) -> Any:
        if key not in self._values:
            return default
        return copy.deepcopy(self._values[key])

    def set(self, key: str, value: Any) -> None:
        if key in self._values and self._values[key] == value:
            return
        self._values[key] = copy.deepcopy(value)
        self._dirty = True
        if self.autosave:
            self.flush()

    def update(self, values: dict[str, Any]) -> None:
        """批量写入，只写一次盘"""
        changed = False
        for key, value in values.items():
            if key in self._values and self._values[key] == value:
                continue
            self._values[key] = copy.deepcopy(value)
            changed = True
        if changed:
            self._dirty = True
            if self.autosave:
                self.flush()

    def flush(self) -> bool:
        """写盘（失败只记录日志）"""
        if persistence.save(self._values, self.path, self.version):
            self._dirty = False
            return True
        return False

    def to_dict(self) -> dict[str, Any]:
        return copy.deepcopy(self._values)
