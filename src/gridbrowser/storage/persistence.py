"""持久化模块

保存 pane URL 列表与网格设置：
- 原子写入（temp + rename）
- checksum 校验（sha256）
- version 版本控制
- 损坏文件跳过告警，不抛异常
"""

import hashlib
import json
import os
import tempfile
import time
from pathlib import Path
from typing import Any

from ..config import PERSIST_FILE, PERSIST_VERSION
from ..telemetry import get_logger, metrics

logger = get_logger(__name__)


def _checksum(values: dict[str, Any]) -> str:
    """对 values 的规范化 JSON 计算 SHA256"""
    payload = json.dumps(values, ensure_ascii=False, sort_keys=True).encode("utf-8")
    return hashlib.sha256(payload).hexdigest()


def save(
    values: dict[str, Any],
    path: Path | None = None,
    version: int = PERSIST_VERSION,
) -> bool:
    """保存 key → value 到文件

    Args:
        values: 持久化条目（urls, columnsCount, ...）
        path: 保存路径，默认使用配置
        version: 版本号

    Returns:
        是否成功
    """
    path = Path(path or PERSIST_FILE)

    try:
        data = {
            "version": version,
            "saved_at": time.time(),
            "values": values,
            "checksum": _checksum(values),
        }
        json_bytes = json.dumps(data, ensure_ascii=False, indent=2).encode("utf-8")

        path.parent.mkdir(parents=True, exist_ok=True)

        fd, temp_path = tempfile.mkstemp(
            prefix="gridbrowser_state_",
            suffix=".tmp",
            dir=path.parent,
        )
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(json_bytes)
            os.replace(temp_path, path)
        except OSError:
            if os.path.exists(temp_path):
                os.unlink(temp_path)
            raise

        logger.debug(f"[Persist] Saved {len(values)} keys → {path}")
        return True

    except (OSError, TypeError, ValueError) as e:
        logger.error(f"[Persist] Save failed: {e}")
        metrics.inc("persist.error", {"op": "save"})
        return False


def load(
    path: Path | None = None,
    version: int = PERSIST_VERSION,
) -> dict[str, Any] | None:
    """加载持久化文件

    校验 version 和 checksum，失败时返回 None。

    Args:
        path: 文件路径，默认使用配置
        version: 期望的版本号

    Returns:
        values 字典，文件不存在或损坏返回 None
    """
    path = Path(path or PERSIST_FILE)

    if not path.exists():
        logger.debug(f"[Persist] File not found: {path}")
        return None

    try:
        data = json.loads(path.read_bytes().decode("utf-8"))
    except json.JSONDecodeError as e:
        logger.warning(f"[Persist] Invalid JSON: {e}")
        metrics.inc("persist.error", {"op": "load", "reason": "json"})
        return None
    except (OSError, UnicodeDecodeError) as e:
        logger.error(f"[Persist] Load failed: {e}")
        metrics.inc("persist.error", {"op": "load", "reason": "io"})
        return None

    if not isinstance(data, dict) or not isinstance(data.get("values"), dict):
        logger.warning(f"[Persist] Unexpected layout in {path}")
        metrics.inc("persist.error", {"op": "load", "reason": "format"})
        return None

    file_version = data.get("version", 1)
    if file_version != version:
        logger.warning(f"[Persist] Version mismatch: file={file_version}, expected={version}")
        metrics.inc("persist.error", {"op": "load", "reason": "version"})
        return None

    values = data["values"]
    stored_checksum = data.get("checksum")
    if stored_checksum and stored_checksum != _checksum(values):
        logger.warning("[Persist] Checksum mismatch")
        metrics.inc("persist.error", {"op": "load", "reason": "checksum"})
        return None

    logger.info(f"[Persist] Loaded {len(values)} keys from {path}")
    return values


def delete(path: Path | None = None) -> bool:
    """删除持久化文件"""
    path = Path(path or PERSIST_FILE)

    try:
        if path.exists():
            os.unlink(path)
            logger.info(f"[Persist] Deleted: {path}")
        return True
    except OSError as e:
        logger.error(f"[Persist] Delete failed: {e}")
        return False
