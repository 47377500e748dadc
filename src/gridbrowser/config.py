"""GridBrowser 配置

配置分为以下几类：
- 网格配置：默认列数/行数、命名布局
- 缩放配置：范围与步长
- URL 配置：默认 scheme
- 导航配置：被取代目标与历史长度
- 持久化配置：存储路径、版本、键名
- Web 配置：监听地址与端口
"""

import os
from pathlib import Path

# === 网格配置 ===
DEFAULT_COLUMNS = 3  # 默认列数
DEFAULT_ROWS = 2  # 默认行数
MIN_COLUMNS = 1
MIN_ROWS = 1
DEFAULT_LAYOUT_MODE = "free"  # free = 自由列×行，named = 命名布局
DEFAULT_NAMED_LAYOUT = "3x2"

# 视口默认尺寸（前端上报真实尺寸前使用）
DEFAULT_VIEWPORT_WIDTH = 1920.0
DEFAULT_VIEWPORT_HEIGHT = 1080.0

# === 缩放配置 ===
DEFAULT_ZOOM = 70  # 百分比，所有 pane 共享
ZOOM_MIN = 50
ZOOM_MAX = 100
ZOOM_STEP = 5

# === 侧边栏 ===
DEFAULT_SIDE_MENU = "collapsed"  # expanded / collapsed

# === URL 配置 ===
DEFAULT_SCHEME = "https"  # 无 scheme 输入时补全
URL_LOG_MAX_LEN = 60  # 日志中 URL 截断长度

# === 导航配置 ===
SUPERSEDED_HISTORY_LENGTH = 16  # 记住的被取代导航编号数
NAVIGATION_HISTORY_MAX_LENGTH = 30  # 内存中转换历史最大长度

# === 持久化配置 ===
PERSIST_DIR = Path(
    os.environ.get("GRIDBROWSER_HOME", Path.home() / ".config" / "gridbrowser")
)
PERSIST_FILE = PERSIST_DIR / "state.json"
PERSIST_VERSION = 1

# 持久化键名（沿用已有存储文件的键）
KEY_URLS = "urls"
KEY_COLUMNS = "columnsCount"
KEY_ROWS = "rowsCount"
KEY_ZOOM = "zoom"
KEY_SIDE_MENU = "sideMenuVisibility"
KEY_LAYOUT_MODE = "layoutMode"
KEY_NAMED_LAYOUT = "namedLayout"

# === Web 配置 ===
WEB_HOST = os.environ.get("GRIDBROWSER_HOST", "127.0.0.1")
WEB_PORT = int(os.environ.get("GRIDBROWSER_PORT", "8766"))
OUTBOX_MAX_SIZE = 1024  # 待发送的 surface 命令队列上限

# === 日志配置 ===
LOG_LEVEL = os.environ.get("GRIDBROWSER_LOG_LEVEL", "INFO")  # 日志级别

# === 指标配置 ===
METRICS_ENABLED = True  # 是否启用指标收集
