"""Web 服务器"""

import asyncio
import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request, WebSocket, WebSocketDisconnect
from fastapi.responses import HTMLResponse, Response
from fastapi.templating import Jinja2Templates

from gridbrowser.config import OUTBOX_MAX_SIZE
from gridbrowser.grid import GridManager
from gridbrowser.render import GridRenderer
from gridbrowser.storage import KeyValueStore
from gridbrowser.surface import RemoteSurface
from gridbrowser.telemetry import metrics
from gridbrowser.web.handlers import CommandMessage, CommandResult, MessageHandler

logger = logging.getLogger(__name__)

# outbox 中的状态广播占位，出队时再生成最新快照
_STATE_MARKER = {"type": "state"}


class WebServer:
    """Dashboard 服务器

    页面中的每个 iframe 对应一个 RemoteSurface；surface 命令和状态快照通过
    outbox 队列按顺序广播给所有客户端。
    """

    def __init__(self, manager: GridManager | None = None, store: KeyValueStore | None = None):
        self.manager = manager or GridManager(store=store, surface_factory=self.create_surface)
        self.clients: list[WebSocket] = []
        self.outbox: asyncio.Queue[dict] = asyncio.Queue(maxsize=OUTBOX_MAX_SIZE)
        self._state_pending = False
        self._renderer = GridRenderer()

        self.app = FastAPI(title="GridBrowser", lifespan=self._lifespan)

        templates_dir = Path(__file__).parent.parent / "templates"
        self.templates = Jinja2Templates(directory=str(templates_dir))

        self._handler = MessageHandler(manager=self.manager)

        self._setup_routes()
        self.manager.on_update(self._on_grid_update)

    # === Surface ===

    def create_surface(self) -> RemoteSurface:
        """为新 pane 创建 iframe 代理"""
        return RemoteSurface(self.send)

    def send(self, message: dict) -> bool:
        """非阻塞入队，队列满时丢弃并计数"""
        try:
            self.outbox.put_nowait(message)
            return True
        except asyncio.QueueFull:
            logger.warning(f"[WebServer] Outbox full, dropped {message.get('type')}")
            metrics.inc("web.outbox_dropped")
            return False

    def _on_grid_update(self, manager: GridManager) -> None:
        """合并连续的状态更新为一次广播"""
        if self._state_pending:
            return
        if self.send(_STATE_MARKER):
            self._state_pending = True

    # === 生命周期 ===

    @asynccontextmanager
    async def _lifespan(self, app: FastAPI):
        task = asyncio.create_task(self._broadcast_loop())
        try:
            yield
        finally:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
            self.manager.store.flush()

    async def _broadcast_loop(self) -> None:
        while True:
            message = await self.outbox.get()
            if message is _STATE_MARKER:
                self._state_pending = False
                message = self.get_state_message()
            await self.broadcast(message)

    def get_state_message(self) -> dict:
        return {"type": "state", **self.manager.get_state_dict()}

    # === 路由 ===

    def _setup_routes(self):
        @self.app.get("/", response_class=HTMLResponse)
        async def index(request: Request):
            return self.templates.TemplateResponse(
                request, "index.html", {"title": "GridBrowser"}
            )

        @self.app.get("/api/state")
        async def get_state():
            return self.manager.get_state_dict()

        @self.app.get("/api/pane/{index}/history")
        async def get_pane_history(index: int):
            """获取 pane 的状态流转历史（调试用）"""
            controller = self.manager.get_pane(index)
            if controller is None:
                return Response(
                    content="Pane not found", status_code=404, media_type="text/plain"
                )
            return {
                "pane": controller.to_dict(),
                "history": [entry.to_dict() for entry in controller.history],
                "log": controller.get_history_log(),
            }

        @self.app.get("/api/grid/svg")
        async def get_grid_svg():
            """获取网格预览 SVG"""
            svg = self._renderer.render_svg(
                self.manager.layout,
                self.manager.collection.entries,
                [c.status.value for c in self.manager.controllers],
            )
            return Response(
                content=svg,
                media_type="image/svg+xml",
                headers={"Cache-Control": "no-cache"},
            )

        @self.app.post("/api/command", response_model=CommandResult)
        async def post_command(msg: CommandMessage):
            return self._handler.execute(msg)

        @self.app.websocket("/ws")
        async def websocket_endpoint(websocket: WebSocket):
            await websocket.accept()
            self.clients.append(websocket)
            logger.info(f"[WebServer] Client connected ({len(self.clients)})")
            try:
                await websocket.send_json(self.get_state_message())
                while True:
                    data = await websocket.receive_text()
                    await self._handler.handle(websocket, data)
            except WebSocketDisconnect:
                logger.info("[WebServer] Client disconnected")
            finally:
                if websocket in self.clients:
                    self.clients.remove(websocket)

    async def broadcast(self, data: dict):
        """广播消息给所有客户端"""
        for client in list(self.clients):
            try:
                await client.send_json(data)
            except (WebSocketDisconnect, RuntimeError) as e:
                logger.debug(f"[WebServer] Drop client: {e}")
                if client in self.clients:
                    self.clients.remove(client)
