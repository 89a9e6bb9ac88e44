"""Resilient WebSocket connection manager.

Usage (inside a running asyncio loop)::

    from resilient_ws import ConnectionManager, SessionConfig

    manager = ConnectionManager()
    manager.connect(
        "ws://localhost:8765",
        SessionConfig(
            on_message=lambda msg: print(msg.payload),
            auto_reconnect=True,
            reconnect_delay_base_ms=1000,
        ),
    )
    ...
    manager.send({"type": "ping"})
    manager.disconnect()

The manager keeps one live transport, reconnects after abnormal closes with
exponential backoff (``base * 1.5 ** attempt``, five attempts by default)
and records the last 100 sent/received messages.
"""

from ._version import __version__
from .dispatcher import EventDispatcher
from .errors import (
    PayloadEncodeError,
    ReconnectExhaustedError,
    SendError,
    WSConnectionError,
    WSError,
)
from .manager import ConnectionManager
from .message_log import MessageLog
from .reconnect import ReconnectPolicy
from .transport import Transport, TransportListener, WebSocketTransport
from .types import (
    ConnectionState,
    Direction,
    Message,
    ReconnectContext,
    SessionConfig,
)

__all__ = [
    "__version__",
    "ConnectionManager",
    "ConnectionState",
    "Direction",
    "EventDispatcher",
    "Message",
    "MessageLog",
    "ReconnectContext",
    "ReconnectPolicy",
    "SessionConfig",
    "Transport",
    "TransportListener",
    "WebSocketTransport",
    "WSError",
    "WSConnectionError",
    "SendError",
    "PayloadEncodeError",
    "ReconnectExhaustedError",
]
