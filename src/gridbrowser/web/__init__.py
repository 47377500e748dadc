"""Web 服务模块"""

from gridbrowser.web.app import create_app
from gridbrowser.web.handlers import CommandMessage, CommandResult, MessageHandler
from gridbrowser.web.server import WebServer

__all__ = ["create_app", "CommandMessage", "CommandResult", "MessageHandler", "WebServer"]
