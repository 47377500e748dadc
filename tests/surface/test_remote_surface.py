"""RemoteSurface tests"""

from unittest.mock import MagicMock

import pytest

from gridbrowser.pane import NavigationEvent
from gridbrowser.surface import RemoteSurface


@pytest.fixture
def send():
    return MagicMock()


@pytest.fixture
def surface(send):
    return RemoteSurface(send, surface_id="s-test")


class TestCommands:
    def test_navigate_message(self, surface, send):
        surface.navigate("https://a.com", 4)

        send.assert_called_once_with(
            {
                "type": "surface_command",
                "surface_id": "s-test",
                "command": "navigate",
                "url": "https://a.com",
                "navigation_id": 4,
            }
        )

    @pytest.mark.parametrize("method", ["reload", "go_back", "go_forward"])
    def test_simple_commands(self, surface, send, method):
        getattr(surface, method)(9)

        assert send.call_args.args[0]["command"] == method
        assert send.call_args.args[0]["navigation_id"] == 9

    def test_zoom_message(self, surface, send):
        surface.set_zoom(0.7)

        assert surface.zoom_factor == pytest.approx(0.7)
        assert send.call_args.args[0] == {
            "type": "surface_command",
            "surface_id": "s-test",
            "command": "zoom",
            "factor": 0.7,
        }

    def test_release_once(self, surface, send):
        surface.release()
        surface.release()
        surface.navigate("https://a.com")

        commands = [call.args[0]["command"] for call in send.call_args_list]
        assert commands == ["release"]


class TestReports:
    def test_receive_mirrors_capabilities(self, surface):
        listener = MagicMock()
        surface.set_listener(listener)
        event = NavigationEvent.surface(
            "finished",
            url="https://a.com",
            requested_url="https://a.com",
            can_go_back=True,
            can_go_forward=False,
        )

        assert surface.receive(event) is True

        assert surface.url == "https://a.com"
        assert surface.can_go_back
        assert not surface.can_go_forward
        listener.assert_called_once_with(event)

    def test_failed_keeps_url(self, surface):
        surface.receive(NavigationEvent.surface("finished", url="https://a.com"))
        surface.receive(NavigationEvent.surface("failed", requested_url="https://b.com"))

        assert surface.url == "https://a.com"

    def test_unknown_event_type(self, surface):
        listener = MagicMock()
        surface.set_listener(listener)

        assert surface.receive(NavigationEvent.surface("exploded")) is False
        listener.assert_not_called()

    def test_receive_without_listener(self, surface):
        assert surface.receive(NavigationEvent.surface("finished", url="https://a.com")) is False
        assert surface.url == "https://a.com"

    def test_clear_resets_mirror(self, surface, send):
        surface.receive(
            NavigationEvent.surface("finished", url="https://a.com", can_go_back=True)
        )

        surface.clear()

        assert surface.url is None
        assert not surface.can_go_back
        assert send.call_args.args[0]["command"] == "clear"
