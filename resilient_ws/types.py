# =============================================================================
# resilient_ws -- Type Definitions
# =============================================================================

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any, Callable
from uuid import uuid4

from .constants import (
    RECONNECT_BASE_DELAY_MS,
    RECONNECT_FACTOR,
    RECONNECT_MAX_ATTEMPTS,
)


class ConnectionState(str, Enum):
    """Connection lifecycle state.

    Typical flow: DISCONNECTED -> CONNECTING -> CONNECTED -> DISCONNECTED.
    RECONNECTING is transient. ERROR is terminal until the next explicit
    ``connect()``.
    """

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    RECONNECTING = "reconnecting"
    ERROR = "error"


class Direction(str, Enum):
    """Which side produced a logged message."""

    SENT = "sent"
    RECEIVED = "received"


@dataclass(frozen=True, slots=True)
class Message:
    """One entry of the message history.

    Attributes:
        id: Unique id (uuid4 hex).
        direction: :class:`Direction` of the message.
        payload: The value handed to ``send()``, or the (optionally
            JSON-decoded) incoming frame.
        raw: Text as it travelled on the wire, ``None`` for binary frames.
        timestamp: UTC time the entry was recorded.
    """

    direction: Direction
    payload: Any
    raw: str | None = None
    id: str = field(default_factory=lambda: uuid4().hex)
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))


@dataclass
class SessionConfig:
    """Options captured by one ``connect()`` call.

    The same instance is reused by every reconnect the session spawns.

    Attributes:
        on_open: Called with no arguments once the transport is open.
        on_message: Called with the received :class:`Message`.
        on_close: Called with ``(code, reason)`` when the transport closes.
        on_error: Called with the classified exception.
        auto_reconnect: Reconnect after an abnormal close.
        reconnect_delay_base_ms: Delay before the first reconnect attempt.
        parse_json: Decode incoming text frames as JSON where possible.
    """

    on_open: Callable[[], Any] | None = None
    on_message: Callable[[Message], Any] | None = None
    on_close: Callable[[int, str], Any] | None = None
    on_error: Callable[[Exception], Any] | None = None
    auto_reconnect: bool = False
    reconnect_delay_base_ms: float = RECONNECT_BASE_DELAY_MS
    parse_json: bool = False


@dataclass
class ReconnectContext:
    """Mutable bookkeeping owned by :class:`ReconnectPolicy`."""

    attempts: int = 0
    max_attempts: int = RECONNECT_MAX_ATTEMPTS
    base_delay_ms: float = RECONNECT_BASE_DELAY_MS
    factor: float = RECONNECT_FACTOR
    pending: Any | None = None  # timer handle with .cancel()


@dataclass
class ConnectionStats:
    """Counters for a single manager."""

    messages_received: int = 0
    messages_sent: int = 0
    reconnect_count: int = 0
    connected_since: float | None = None
