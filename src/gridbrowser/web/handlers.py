"""WebSocket / HTTP 命令处理器"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Callable

from fastapi import WebSocket
from pydantic import BaseModel, ValidationError

from gridbrowser.grid import GridManager
from gridbrowser.pane import NavigationEvent

logger = logging.getLogger(__name__)


class SurfaceEventPayload(BaseModel):
    """页面上报的 iframe 导航结果"""

    type: str  # finished, navigated, failed
    url: str | None = None
    requested_url: str | None = None
    can_go_back: bool | None = None
    can_go_forward: bool | None = None
    error: str = ""
    navigation_id: int | None = None

    def to_event(self) -> NavigationEvent:
        return NavigationEvent.surface(
            self.type,
            url=self.url,
            requested_url=self.requested_url,
            can_go_back=self.can_go_back,
            can_go_forward=self.can_go_forward,
            error=self.error,
            navigation_id=self.navigation_id,
        )


class CommandMessage(BaseModel):
    """chrome 命令请求体"""

    action: str
    index: int | None = None
    url: str | None = None
    text: str | None = None
    hard: bool = False
    settings: dict[str, Any] = {}
    width: float | None = None
    height: float | None = None
    surface_id: str | None = None
    event: SurfaceEventPayload | None = None


class CommandResult(BaseModel):
    """命令执行结果"""

    type: str = "command_result"
    action: str
    success: bool
    result: Any = None
    message: str = ""


class CommandError(ValueError):
    """请求缺少必需字段"""


@dataclass
class MessageHandler:
    """按 action 分发命令到 GridManager"""

    manager: GridManager

    def __post_init__(self):
        self._actions: dict[str, Callable[[CommandMessage], Any]] = {
            "new_window": self._new_window,
            "close_window": self._close_window,
            "close_window_at": self._close_window_at,
            "close_all": self._close_all,
            "reload_all": self._reload_all,
            "submit": self._submit,
            "back": self._back,
            "forward": self._forward,
            "reload": self._reload,
            "settings": self._settings,
            "viewport": self._viewport,
            "surface_event": self._surface_event,
        }

    @property
    def actions(self) -> list[str]:
        return list(self._actions)

    async def handle(self, websocket: WebSocket, data: str) -> None:
        """处理 WebSocket 消息，格式错误时回复 error，不断开连接"""
        try:
            msg = CommandMessage.model_validate(json.loads(data))
        except (json.JSONDecodeError, ValidationError) as e:
            logger.warning(f"[MessageHandler] Malformed message: {e}")
            await websocket.send_json({"type": "error", "message": "malformed message"})
            return

        result = self.execute(msg)
        # surface 事件频繁且页面不需要回执
        if msg.action != "surface_event" or not result.success:
            await websocket.send_json(result.model_dump())

    def execute(self, msg: CommandMessage) -> CommandResult:
        """执行命令

        Returns:
            CommandResult，未知 action / 缺少字段 / 非法设置时 success=False
        """
        action = self._actions.get(msg.action)
        if action is None:
            logger.warning(f"[MessageHandler] Unknown action: {msg.action}")
            return CommandResult(
                action=msg.action, success=False, message=f"Unknown action: {msg.action}"
            )

        try:
            result = action(msg)
        except (CommandError, ValueError) as e:
            logger.warning(f"[MessageHandler] {msg.action} rejected: {e}")
            return CommandResult(action=msg.action, success=False, message=str(e))

        success = result is not False and result is not None
        return CommandResult(action=msg.action, success=success, result=result)

    # === Actions ===

    def _new_window(self, msg: CommandMessage) -> int:
        return self.manager.open_new_window()

    def _close_window(self, msg: CommandMessage) -> int | None:
        if msg.url is None:
            raise CommandError("url required")
        return self.manager.close_window(msg.url)

    def _close_window_at(self, msg: CommandMessage) -> bool:
        return self.manager.close_window_at(self._require_index(msg))

    def _close_all(self, msg: CommandMessage) -> int:
        return self.manager.close_all_windows()

    def _reload_all(self, msg: CommandMessage) -> int:
        return self.manager.reload_all_windows(hard=msg.hard)

    def _submit(self, msg: CommandMessage) -> bool:
        return self.manager.submit(self._require_index(msg), msg.text)

    def _back(self, msg: CommandMessage) -> bool:
        return self.manager.go_back(self._require_index(msg))

    def _forward(self, msg: CommandMessage) -> bool:
        return self.manager.go_forward(self._require_index(msg))

    def _reload(self, msg: CommandMessage) -> bool:
        return self.manager.reload(self._require_index(msg), hard=msg.hard)

    def _settings(self, msg: CommandMessage) -> list[str]:
        if not msg.settings:
            raise CommandError("settings required")
        return sorted(self.manager.update_settings(**msg.settings))

    def _viewport(self, msg: CommandMessage) -> dict:
        if msg.width is None or msg.height is None:
            raise CommandError("width and height required")
        return self.manager.set_viewport(msg.width, msg.height).to_dict()

    def _surface_event(self, msg: CommandMessage) -> bool:
        if msg.surface_id is None or msg.event is None:
            raise CommandError("surface_id and event required")
        return self.manager.handle_surface_event(msg.surface_id, msg.event.to_event())

    @staticmethod
    def _require_index(msg: CommandMessage) -> int:
        if msg.index is None:
            raise CommandError("index required")
        return msg.index
