"""Telemetry - 统一日志和指标入口

提供统一的日志工厂和指标 facade。

日志格式: [Component:pane] msg
指标示例: navigation.ok, navigation.superseded, navigation.failed,
          collection.out_of_range, persist.error
"""

import logging

from .config import LOG_LEVEL, METRICS_ENABLED

_LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def get_logger(name: str) -> logging.Logger:
    """获取带模块前缀的 logger

    Args:
        name: 模块名（通常使用 __name__）
    """
    return logging.getLogger(name)


def configure_logging(level: str | None = None) -> None:
    """启动时配置根 logger

    Args:
        level: 日志级别，None 使用 GRIDBROWSER_LOG_LEVEL
    """
    logging.basicConfig(
        level=(level or LOG_LEVEL).upper(),
        format=_LOG_FORMAT,
    )


class Metrics:
    """指标收集 facade

    内存计数器和 gauge，测试中通过 get_counter 断言。
    """

    def __init__(self, enabled: bool = METRICS_ENABLED):
        self.enabled = enabled
        self._counters: dict[str, int] = {}
        self._gauges: dict[str, float] = {}

    def inc(self, name: str, labels: dict[str, str] | None = None, value: int = 1) -> None:
        """递增计数器

        Args:
            name: 指标名（如 "navigation.superseded"）
            labels: 可选标签（如 {"pane": "0"}）
            value: 递增值，默认 1
        """
        if not self.enabled:
            return
        key = self._make_key(name, labels)
        self._counters[key] = self._counters.get(key, 0) + value

    def gauge(self, name: str, value: float, labels: dict[str, str] | None = None) -> None:
        """设置 gauge 值"""
        if not self.enabled:
            return
        key = self._make_key(name, labels)
        self._gauges[key] = value

    def get_counter(self, name: str, labels: dict[str, str] | None = None) -> int:
        return self._counters.get(self._make_key(name, labels), 0)

    def get_gauge(self, name: str, labels: dict[str, str] | None = None) -> float:
        return self._gauges.get(self._make_key(name, labels), 0.0)

    def total(self, name: str) -> int:
        """某指标在所有标签下的合计"""
        return sum(
            value
            for key, value in self._counters.items()
            if key == name or key.startswith(name + "{")
        )

    def reset(self) -> None:
        """重置所有指标（用于测试）"""
        self._counters.clear()
        self._gauges.clear()

    def _make_key(self, name: str, labels: dict[str, str] | None) -> str:
        if not labels:
            return name
        label_str = ",".join(f"{k}={v}" for k, v in sorted(labels.items()))
        return f"{name}{{{label_str}}}"


# 全局指标实例
metrics = Metrics()
