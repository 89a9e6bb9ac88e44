# =============================================================================
# resilient_ws -- Transport
# =============================================================================
#
# The manager talks to the network through a small event-driven interface:
# open/write/close are requests, their outcomes come back later as listener
# events.  WebSocketTransport implements it on top of ``websockets``.
# =============================================================================

from __future__ import annotations

import asyncio
from typing import Any, Protocol

from websockets.asyncio.client import ClientConnection, connect
from websockets.exceptions import ConnectionClosedError
from websockets.protocol import State

from ._logging import logger
from .constants import (
    CONNECTION_TIMEOUT,
    MAX_MESSAGE_SIZE,
    WS_CLOSE_ABNORMAL,
    WS_CLOSE_NORMAL,
    WS_CLOSE_SERVER_ERROR,
)
from .errors import WSConnectionError


class TransportListener(Protocol):
    def on_open(self) -> None: ...

    def on_message(self, data: str | bytes) -> None: ...

    def on_close(self, code: int, reason: str) -> None: ...

    def on_error(self, error: Exception) -> None: ...


class Transport(Protocol):
    """A single bidirectional message connection.

    ``open`` may be called once.  After it, the transport reports to the
    listener: at most one ``on_open``, any number of ``on_message``, and
    exactly one final ``on_close``.  ``on_error`` may precede the close.
    """

    @property
    def is_ready(self) -> bool: ...

    def open(self, address: str, listener: TransportListener) -> None: ...

    def write(self, data: str) -> None: ...

    def close(self, code: int = WS_CLOSE_NORMAL, reason: str = "") -> None: ...


class WebSocketTransport:
    """:class:`Transport` backed by a ``websockets`` client connection.

    Must be opened from inside a running asyncio event loop.

    Args:
        open_timeout: Seconds allowed for the opening handshake; on expiry
            the listener sees ``on_error`` then ``on_close(1006)``.
        max_size: Maximum incoming frame size in bytes.
        extra_headers: Additional HTTP headers for the handshake.
    """

    def __init__(
        self,
        *,
        open_timeout: float | None = CONNECTION_TIMEOUT,
        max_size: int | None = MAX_MESSAGE_SIZE,
        extra_headers: dict[str, str] | None = None,
    ) -> None:
        self._open_timeout = open_timeout
        self._max_size = max_size
        self._extra_headers = extra_headers or {}

        self._loop: asyncio.AbstractEventLoop | None = None
        self._listener: TransportListener | None = None
        self._ws: ClientConnection | None = None
        self._task: asyncio.Task[None] | None = None
        self._close_requested: tuple[int, str] | None = None
        self._closed = False
        self._background_tasks: set[asyncio.Task[Any]] = set()

    def _fire_task(self, coro: Any) -> None:
        """Schedule a coroutine with a strong reference to prevent GC."""
        assert self._loop is not None
        task = self._loop.create_task(coro)
        self._background_tasks.add(task)
        task.add_done_callback(self._on_background_done)

    def _on_background_done(self, task: asyncio.Task[Any]) -> None:
        self._background_tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.debug("Transport operation failed: %s", task.exception())

    # -- Transport interface --------------------------------------------------

    @property
    def is_ready(self) -> bool:
        return (
            not self._closed
            and self._close_requested is None
            and self._ws is not None
            and self._ws.state is State.OPEN
        )

    def open(self, address: str, listener: TransportListener) -> None:
        if self._task is not None:
            raise WSConnectionError("Transport has already been opened")
        self._loop = asyncio.get_running_loop()
        self._listener = listener
        self._task = self._loop.create_task(
            self._run(address), name=f"resilient-ws:{address}"
        )
        self._task.add_done_callback(self._on_run_done)

    def write(self, data: str) -> None:
        if not self.is_ready:
            raise WSConnectionError("Transport is not open")
        assert self._ws is not None
        self._fire_task(self._ws.send(data))

    def close(self, code: int = WS_CLOSE_NORMAL, reason: str = "") -> None:
        if self._task is None or self._closed or self._close_requested:
            return
        self._close_requested = (code, reason)
        if self._ws is None:
            # Still in the opening handshake
            self._task.cancel()
        else:
            self._fire_task(self._ws.close(code, reason))

    # -- Internal -------------------------------------------------------------

    async def _run(self, address: str) -> None:
        try:
            ws = await connect(
                address,
                additional_headers=self._extra_headers,
                max_size=self._max_size,
                open_timeout=self._open_timeout,
            )
        except Exception as exc:
            logger.warning("Failed to connect to %s: %s", address, exc)
            self._emit_error(WSConnectionError(f"Failed to connect: {exc}"))
            self._emit_close(WS_CLOSE_ABNORMAL, str(exc))
            return

        self._ws = ws
        assert self._listener is not None

        lost: ConnectionClosedError | None = None
        try:
            self._listener.on_open()
            async for message in ws:
                self._listener.on_message(message)
        except ConnectionClosedError as exc:
            lost = exc
        except Exception:
            # The listener failed: drop the socket, report the close, and
            # leave the original exception on the task.
            logger.warning("Listener failed, closing connection to %s", address)
            await ws.close(WS_CLOSE_SERVER_ERROR, "listener failure")
            self._emit_close(WS_CLOSE_SERVER_ERROR, "listener failure")
            raise

        await ws.wait_closed()
        code = ws.close_code if ws.close_code is not None else WS_CLOSE_ABNORMAL
        reason = ws.close_reason or ""
        if lost is not None and lost.rcvd is None:
            self._emit_error(WSConnectionError(f"Connection lost: {lost}"))
        self._emit_close(code, reason)

    def _on_run_done(self, task: asyncio.Task[None]) -> None:
        # Cancelled while connecting (possibly before the task ever ran).
        # Failures raised by the listener are left on the task for asyncio
        # to report.
        if task.cancelled():
            code, reason = self._close_requested or (WS_CLOSE_ABNORMAL, "")
            self._emit_close(code, reason)

    def _emit_error(self, error: Exception) -> None:
        if self._closed or self._listener is None:
            return
        self._listener.on_error(error)

    def _emit_close(self, code: int, reason: str) -> None:
        if self._closed or self._listener is None:
            return
        self._closed = True
        self._ws = None
        self._listener.on_close(code, reason)
