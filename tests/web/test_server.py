"""Web 服务器测试"""

import asyncio
import json

import pytest
from fastapi.testclient import TestClient

from gridbrowser.telemetry import metrics
from gridbrowser.web import WebServer, create_app


@pytest.fixture(autouse=True)
def reset_metrics():
    """每次测试前重置指标"""
    metrics.reset()
    yield
    metrics.reset()


@pytest.fixture
def server(store):
    return create_app(store)


@pytest.fixture
def client(server):
    """不启动 lifespan 的 HTTP 客户端"""
    return TestClient(server.app)


def receive_until(ws, predicate, limit: int = 20) -> dict:
    """读取消息直到满足条件（广播与回执的顺序不固定）"""
    for _ in range(limit):
        message = ws.receive_json()
        if predicate(message):
            return message
    raise AssertionError("expected message not received")


def drain(server: WebServer) -> list[dict]:
    messages = []
    while not server.outbox.empty():
        messages.append(server.outbox.get_nowait())
    return messages


class TestHttpRoutes:
    """HTTP 路由"""

    def test_index_page(self, client):
        response = client.get("/")

        assert response.status_code == 200
        assert "<title>GridBrowser</title>" in response.text
        assert "/ws" in response.text

    def test_state(self, client):
        data = client.get("/api/state").json()

        assert data["entries"] == []
        assert data["settings"]["columns"] == 3
        assert data["layout"]["slots"] == []

    def test_command_new_window(self, client):
        result = client.post("/api/command", json={"action": "new_window"}).json()

        assert result == {
            "type": "command_result",
            "action": "new_window",
            "success": True,
            "result": 0,
            "message": "",
        }
        assert client.get("/api/state").json()["entries"] == [""]

    def test_command_submit_and_settings(self, client, server):
        client.post("/api/command", json={"action": "new_window"})

        result = client.post(
            "/api/command", json={"action": "submit", "index": 0, "text": "example.com"}
        ).json()
        assert result["success"] is True
        assert server.manager.get_pane(0).target_url == "https://example.com"

        result = client.post(
            "/api/command", json={"action": "settings", "settings": {"zoom": 87}}
        ).json()
        assert result["result"] == ["zoom"]
        assert client.get("/api/state").json()["panes"][0]["zoom"] == 85

    def test_command_missing_index(self, client):
        result = client.post("/api/command", json={"action": "submit", "text": "a.com"}).json()

        assert result["success"] is False
        assert result["message"] == "index required"

    def test_unknown_action(self, client):
        result = client.post("/api/command", json={"action": "dance"}).json()

        assert result["success"] is False
        assert "Unknown action" in result["message"]

    def test_non_numeric_setting_rejected(self, client):
        response = client.post(
            "/api/command", json={"action": "settings", "settings": {"zoom": None}}
        )

        assert response.status_code == 200
        assert response.json()["success"] is False
        assert client.get("/api/state").json()["settings"]["zoom"] == 70

    def test_invalid_body_rejected(self, client):
        response = client.post("/api/command", json={"index": 0})
        assert response.status_code == 422

    def test_grid_svg(self, client):
        client.post("/api/command", json={"action": "new_window"})

        response = client.get("/api/grid/svg")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("image/svg+xml")
        assert "<svg" in response.text

    def test_pane_history(self, client):
        assert client.get("/api/pane/0/history").status_code == 404

        client.post("/api/command", json={"action": "new_window"})
        client.post("/api/command", json={"action": "submit", "index": 0, "text": "a.com"})

        data = client.get("/api/pane/0/history").json()
        assert data["pane"]["status"] == "loading"
        assert data["history"][0]["signal"] == "user.submit"
        assert "user.submit" in data["log"]


class TestOutbox:
    """surface 命令队列"""

    def test_surface_commands_queued(self, server):
        server.manager.open_new_window()
        server.manager.submit(0, "a.com")

        commands = [m for m in drain(server) if m["type"] == "surface_command"]

        assert [m["command"] for m in commands] == ["zoom", "navigate"]
        assert commands[1]["url"] == "https://a.com"
        assert commands[1]["surface_id"] == server.manager.get_pane(0).surface.surface_id

    def test_state_updates_coalesced(self, server):
        server.manager.open_new_window()
        server.manager.open_new_window()

        states = [m for m in drain(server) if m["type"] == "state"]
        assert len(states) == 1

    def test_full_outbox_drops(self, server):
        server.outbox = asyncio.Queue(maxsize=1)

        assert server.send({"type": "x"}) is True
        assert server.send({"type": "y"}) is False
        assert metrics.get_counter("web.outbox_dropped") == 1


class TestWebSocket:
    """WebSocket 协议"""

    def test_initial_state(self, server):
        with TestClient(server.app) as client:
            with client.websocket_connect("/ws") as ws:
                message = ws.receive_json()

        assert message["type"] == "state"
        assert message["entries"] == []

    def test_navigation_round_trip(self, server, store):
        with TestClient(server.app) as client:
            with client.websocket_connect("/ws") as ws:
                ws.receive_json()

                ws.send_text(json.dumps({"action": "new_window"}))
                receive_until(ws, lambda m: m["type"] == "command_result")

                ws.send_text(json.dumps({"action": "submit", "index": 0, "text": "a.com"}))
                command = receive_until(
                    ws,
                    lambda m: m["type"] == "surface_command" and m["command"] == "navigate",
                )
                assert command["url"] == "https://a.com"

                ws.send_text(
                    json.dumps(
                        {
                            "action": "surface_event",
                            "surface_id": command["surface_id"],
                            "event": {
                                "type": "finished",
                                "url": "https://a.com/",
                                "requested_url": "https://a.com",
                                "can_go_back": False,
                                "can_go_forward": False,
                            },
                        }
                    )
                )
                state = receive_until(
                    ws,
                    lambda m: m["type"] == "state" and m["entries"] == ["https://a.com/"],
                )

        assert state["panes"][0]["status"] == "loaded"
        assert state["labels"] == ["a.com"]
        assert store.get("urls") == ["https://a.com/"]

    def test_malformed_message(self, server):
        with TestClient(server.app) as client:
            with client.websocket_connect("/ws") as ws:
                ws.receive_json()
                ws.send_text("not json")

                error = receive_until(ws, lambda m: m["type"] == "error")
                assert error["message"] == "malformed message"

                # 连接仍然可用
                ws.send_text(json.dumps({"action": "new_window"}))
                result = receive_until(ws, lambda m: m["type"] == "command_result")
                assert result["success"] is True

    def test_malformed_settings_keep_socket_open(self, server):
        with TestClient(server.app) as client:
            with client.websocket_connect("/ws") as ws:
                ws.receive_json()
                ws.send_text(json.dumps({"action": "settings", "settings": {"columns": [2]}}))

                result = receive_until(ws, lambda m: m["type"] == "command_result")
                assert result["success"] is False

                ws.send_text(json.dumps({"action": "new_window"}))
                result = receive_until(ws, lambda m: m["type"] == "command_result")
                assert result["success"] is True

    def test_unknown_surface_reported(self, server):
        with TestClient(server.app) as client:
            with client.websocket_connect("/ws") as ws:
                ws.receive_json()
                ws.send_text(
                    json.dumps(
                        {
                            "action": "surface_event",
                            "surface_id": "s-missing",
                            "event": {"type": "finished", "url": "https://a.com"},
                        }
                    )
                )

                result = receive_until(ws, lambda m: m["type"] == "command_result")
                assert result["action"] == "surface_event"
                assert result["success"] is False
