"""Tests for session callback dispatch."""

import pytest

from resilient_ws.dispatcher import EventDispatcher
from resilient_ws.types import Direction, Message, SessionConfig


class TestDispatch:
    def test_missing_callbacks_are_skipped(self):
        d = EventDispatcher("ws://a", SessionConfig())
        d.dispatch_open()
        d.dispatch_message(Message(direction=Direction.RECEIVED, payload="x"))
        d.dispatch_close(1000, "")
        d.dispatch_error(RuntimeError("x"))

    def test_callbacks_receive_arguments(self):
        calls = []
        d = EventDispatcher(
            "ws://a",
            SessionConfig(
                on_open=lambda: calls.append("open"),
                on_message=lambda m: calls.append(m.payload),
                on_close=lambda code, reason: calls.append((code, reason)),
                on_error=lambda e: calls.append(str(e)),
            ),
        )
        d.dispatch_open()
        d.dispatch_message(Message(direction=Direction.RECEIVED, payload="hi"))
        d.dispatch_close(1006, "gone")
        d.dispatch_error(RuntimeError("boom"))
        assert calls == ["open", "hi", (1006, "gone"), "boom"]

    def test_callback_exceptions_propagate(self):
        def explode():
            raise RuntimeError("user bug")

        d = EventDispatcher("ws://a", SessionConfig(on_open=explode))
        with pytest.raises(RuntimeError, match="user bug"):
            d.dispatch_open()

    def test_exposes_session_options(self):
        d = EventDispatcher(
            "ws://a",
            SessionConfig(auto_reconnect=True, reconnect_delay_base_ms=250, parse_json=True),
        )
        assert d.address == "ws://a"
        assert d.auto_reconnect is True
        assert d.reconnect_delay_base_ms == 250
        assert d.parse_json is True

    def test_defaults(self):
        config = SessionConfig()
        assert config.auto_reconnect is False
        assert config.reconnect_delay_base_ms == 3000
