"""FastAPI 应用初始化"""

import asyncio
import logging
from pathlib import Path

import uvicorn

from gridbrowser import config
from gridbrowser.storage import KeyValueStore
from gridbrowser.telemetry import configure_logging
from gridbrowser.web.server import WebServer

logger = logging.getLogger(__name__)


def create_app(store: KeyValueStore | None = None) -> WebServer:
    """创建 Web 应用

    Args:
        store: 持久化存储，默认使用 GRIDBROWSER_HOME 下的 state.json
    """
    return WebServer(store=store)


async def start_server(
    host: str = config.WEB_HOST,
    port: int = config.WEB_PORT,
    state_file: Path | None = None,
):
    """启动服务器"""
    server = create_app(KeyValueStore(state_file or config.PERSIST_FILE))
    restored = server.manager.load()
    logger.info(f"[WebServer] Restored {restored} panes")

    uvicorn_config = uvicorn.Config(
        server.app, host=host, port=port, log_level=config.LOG_LEVEL.lower()
    )
    uvicorn_server = uvicorn.Server(uvicorn_config)

    print(f"GridBrowser Web Server starting at http://{host}:{port}")
    await uvicorn_server.serve()


def main():
    """入口函数"""
    configure_logging()
    try:
        asyncio.run(start_server())
    except KeyboardInterrupt:
        print("\nServer stopped")
