# =============================================================================
# resilient_ws -- Connection Manager
# =============================================================================
#
# Owns one live transport, reconnects it with exponential backoff after an
# abnormal close, and keeps a bounded history of exchanged messages.
#
# Everything runs on one event loop: the public methods return immediately,
# transport events arrive later and run to completion.  Each event carries
# the handle that produced it so events from a replaced handle are dropped.
# =============================================================================

from __future__ import annotations

import time
from typing import Any, Callable

from ._logging import logger
from .codec import decode_payload, encode_payload
from .constants import (
    MESSAGE_HISTORY_SIZE,
    RECONNECT_MAX_ATTEMPTS,
    WS_CLOSE_NORMAL,
)
from .dispatcher import EventDispatcher
from .errors import (
    ReconnectExhaustedError,
    SendError,
    WSConnectionError,
)
from .message_log import MessageLog
from .reconnect import ReconnectPolicy, Scheduler
from .transport import Transport, WebSocketTransport
from .types import ConnectionState, ConnectionStats, Message, SessionConfig


class _Listener:
    """Binds transport events to the handle that emitted them."""

    __slots__ = ("_manager", "_transport")

    def __init__(self, manager: ConnectionManager, transport: Transport) -> None:
        self._manager = manager
        self._transport = transport

    def on_open(self) -> None:
        self._manager._handle_open(self._transport)

    def on_message(self, data: str | bytes) -> None:
        self._manager._handle_message(self._transport, data)

    def on_close(self, code: int, reason: str) -> None:
        self._manager._handle_close(self._transport, code, reason)

    def on_error(self, error: Exception) -> None:
        self._manager._handle_error(self._transport, error)


class ConnectionManager:
    """Resilient single-connection manager.

    Args:
        transport_factory: Zero-argument callable returning a fresh
            :class:`~resilient_ws.transport.Transport` for every attempt.
        scheduler: ``call_later(seconds, fn)`` for reconnect timers.
            Defaults to the running asyncio loop.
        max_reconnect_attempts: Consecutive reconnects before giving up.
        history_size: Number of messages kept by :meth:`get_messages`.
        on_state_change: Called with the new state on every transition.

    Example::

        manager = ConnectionManager()
        manager.connect(
            "ws://localhost:8765",
            SessionConfig(on_message=print, auto_reconnect=True),
        )
        manager.send({"type": "ping"})
    """

    def __init__(
        self,
        *,
        transport_factory: Callable[[], Transport] = WebSocketTransport,
        scheduler: Scheduler | None = None,
        max_reconnect_attempts: int = RECONNECT_MAX_ATTEMPTS,
        history_size: int = MESSAGE_HISTORY_SIZE,
        on_state_change: Callable[[ConnectionState], Any] | None = None,
    ) -> None:
        self._transport_factory = transport_factory
        self._on_state_change = on_state_change

        self._policy = ReconnectPolicy(
            max_attempts=max_reconnect_attempts, scheduler=scheduler
        )
        self._log = MessageLog(history_size)
        self._stats = ConnectionStats()

        self._state = ConnectionState.DISCONNECTED
        self._error: str | None = None
        self._transport: Transport | None = None
        self._session: EventDispatcher | None = None
        # Bumped by every connect()/disconnect(); work started under an
        # older epoch is abandoned.
        self._epoch = 0
        # Handle released by disconnect() whose close event is still owed
        # to its session's on_close.
        self._released: tuple[Transport, EventDispatcher] | None = None

    # -- Properties -----------------------------------------------------------

    @property
    def state(self) -> ConnectionState:
        return self._state

    def get_state(self) -> ConnectionState:
        return self._state

    @property
    def is_connected(self) -> bool:
        return self._state == ConnectionState.CONNECTED

    @property
    def is_connecting(self) -> bool:
        return self._state == ConnectionState.CONNECTING

    @property
    def is_reconnecting(self) -> bool:
        return self._state == ConnectionState.RECONNECTING

    @property
    def ready_state(self) -> bool:
        """True when the owned transport can accept writes."""
        return self._transport is not None and self._transport.is_ready

    @property
    def last_error(self) -> str | None:
        return self._error

    def set_error(self, error: str | None) -> None:
        self._error = error

    @property
    def address(self) -> str | None:
        return self._session.address if self._session else None

    @property
    def reconnect_attempts(self) -> int:
        return self._policy.attempts

    @property
    def max_reconnect_attempts(self) -> int:
        return self._policy.max_attempts

    @property
    def reconnect_pending(self) -> bool:
        return self._policy.pending

    @property
    def messages(self) -> tuple[Message, ...]:
        return self._log.snapshot()

    def get_messages(self) -> tuple[Message, ...]:
        return self._log.snapshot()

    def clear_messages(self) -> None:
        self._log.clear()

    def get_stats(self) -> dict[str, Any]:
        return {
            "state": self._state.value,
            "messages_sent": self._stats.messages_sent,
            "messages_received": self._stats.messages_received,
            "reconnect_count": self._stats.reconnect_count,
            "reconnect_attempts": self._policy.attempts,
            "connected_since": self._stats.connected_since,
            "history_size": len(self._log),
        }

    # -- Connect / Disconnect -------------------------------------------------

    def connect(self, address: str, config: SessionConfig | None = None) -> None:
        """Start a new session against *address*.

        Replaces any existing transport and cancels a pending reconnect.
        Returns immediately; the outcome is reported through callbacks.

        Raises:
            ValueError: If *address* is empty.
        """
        if not address:
            raise ValueError("address must be a non-empty string")

        session = EventDispatcher(address, config or SessionConfig())
        self._epoch += 1
        self._policy.cancel()
        self._policy.reset()
        self._policy.configure(session.reconnect_delay_base_ms)
        self._released = None
        self._session = session
        self._error = None
        logger.info("Connecting to %s", address)
        self._open(session)

    def disconnect(self, code: int = WS_CLOSE_NORMAL, reason: str = "") -> None:
        """Close the transport and stop reconnecting.  Always safe to call."""
        self._epoch += 1
        self._policy.cancel()
        self._policy.reset()

        transport = self._transport
        self._transport = None
        if transport is not None and self._session is not None:
            self._released = (transport, self._session)
            transport.close(code, reason)
            logger.info("Disconnected (code=%d)", code)
        self._stats.connected_since = None
        self._set_state(ConnectionState.DISCONNECTED)

    # -- Send -----------------------------------------------------------------

    def send(self, payload: Any) -> bool:
        """Send text or a JSON-serializable value.  Returns True on success."""
        transport = self._transport
        if (
            self._state != ConnectionState.CONNECTED
            or transport is None
            or not transport.is_ready
        ):
            logger.warning("Send rejected: not connected (state=%s)", self._state.value)
            self._error = "Not connected"
            return False

        try:
            raw = encode_payload(payload)
        except SendError as exc:
            logger.warning("Send failed: %s", exc)
            self._error = str(exc)
            return False

        try:
            transport.write(raw)
        except Exception as exc:
            logger.warning("Send failed: %s", exc)
            self._error = f"Failed to send message: {exc}"
            return False

        self._log.record_sent(payload, raw)
        self._stats.messages_sent += 1
        return True

    # -- Internal: transport lifecycle ----------------------------------------

    def _open(self, session: EventDispatcher) -> None:
        epoch = self._epoch
        old = self._transport
        self._transport = None
        if old is not None:
            old.close()

        self._set_state(ConnectionState.CONNECTING)
        if self._epoch != epoch:
            return  # superseded from a state-change callback

        try:
            transport = self._transport_factory()
            self._transport = transport
            transport.open(session.address, _Listener(self, transport))
        except Exception as exc:
            logger.warning(
                "Failed to create transport for %s: %s", session.address, exc
            )
            self._transport = None
            self._fail(session, WSConnectionError(f"Failed to create transport: {exc}"))

    def _reconnect(self, session: EventDispatcher, epoch: int) -> None:
        """Timer target: reopen *session* unless it has been superseded."""
        if self._epoch != epoch or self._state != ConnectionState.RECONNECTING:
            logger.debug("Dropping stale reconnect for %s", session.address)
            return
        self._stats.reconnect_count += 1
        logger.info(
            "Reconnect attempt %d/%d to %s",
            self._policy.attempts,
            self._policy.max_attempts,
            session.address,
        )
        self._open(session)

    def _schedule_reconnect(self, session: EventDispatcher) -> None:
        # The timer is armed before the RECONNECTING transition; a
        # disconnect() from on_state_change cancels it again.
        epoch = self._epoch
        try:
            self._policy.schedule(lambda: self._reconnect(session, epoch))
        except ReconnectExhaustedError as exc:
            logger.error(
                "Max reconnect attempts (%d) reached", self._policy.max_attempts
            )
            self._error = str(exc)
            self._set_state(ConnectionState.ERROR)
            return
        self._set_state(ConnectionState.RECONNECTING)

    def _fail(self, session: EventDispatcher, error: Exception) -> None:
        self._error = str(error)
        self._set_state(ConnectionState.ERROR)
        session.dispatch_error(error)

    # -- Internal: transport events -------------------------------------------

    def _is_current(self, transport: Transport, event: str) -> bool:
        if transport is self._transport and self._session is not None:
            return True
        logger.debug("Ignoring %s from superseded transport", event)
        return False

    def _handle_open(self, transport: Transport) -> None:
        if not self._is_current(transport, "open"):
            return
        session = self._session
        assert session is not None
        logger.info("Connected to %s", session.address)
        self._policy.reset()
        self._error = None
        self._stats.connected_since = time.monotonic()
        self._set_state(ConnectionState.CONNECTED)
        session.dispatch_open()

    def _handle_message(self, transport: Transport, data: str | bytes) -> None:
        if not self._is_current(transport, "message"):
            return
        session = self._session
        assert session is not None
        raw = data if isinstance(data, str) else None
        payload = decode_payload(data) if session.parse_json else data
        record = self._log.record_received(payload, raw)
        self._stats.messages_received += 1
        session.dispatch_message(record)

    def _handle_close(self, transport: Transport, code: int, reason: str) -> None:
        released = self._released
        if released is not None and released[0] is transport:
            self._released = None
            logger.debug("Closed after disconnect (code=%d)", code)
            released[1].dispatch_close(code, reason)
            return
        if not self._is_current(transport, "close"):
            return

        session = self._session
        assert session is not None
        epoch = self._epoch
        self._transport = None
        self._stats.connected_since = None
        logger.info("Connection closed: code=%d reason=%s", code, reason)
        session.dispatch_close(code, reason)

        if self._epoch != epoch:
            return  # on_close called connect() or disconnect()
        if code != WS_CLOSE_NORMAL and session.auto_reconnect:
            self._schedule_reconnect(session)
        else:
            self._set_state(ConnectionState.DISCONNECTED)

    def _handle_error(self, transport: Transport, error: Exception) -> None:
        if not self._is_current(transport, "error"):
            return
        session = self._session
        assert session is not None
        logger.warning("Connection error on %s: %s", session.address, error)
        self._fail(session, error)

    # -- State management -----------------------------------------------------

    def _set_state(self, new_state: ConnectionState) -> None:
        if new_state == self._state:
            return
        old = self._state
        self._state = new_state
        logger.debug("State: %s -> %s", old.value, new_state.value)
        if self._on_state_change:
            self._on_state_change(new_state)
