# =============================================================================
# resilient_ws -- Event Dispatcher
# =============================================================================

from __future__ import annotations

from .types import Message, SessionConfig


class EventDispatcher:
    """User callbacks and options for one session.

    A new dispatcher is created by every explicit ``connect()``; reconnects
    reuse it unchanged, so its identity doubles as the session identity.
    Callbacks run synchronously and their exceptions are not caught.
    """

    def __init__(self, address: str, config: SessionConfig) -> None:
        self.address = address
        self.config = config

    @property
    def auto_reconnect(self) -> bool:
        return self.config.auto_reconnect

    @property
    def reconnect_delay_base_ms(self) -> float:
        return self.config.reconnect_delay_base_ms

    @property
    def parse_json(self) -> bool:
        return self.config.parse_json

    def dispatch_open(self) -> None:
        if self.config.on_open:
            self.config.on_open()

    def dispatch_message(self, message: Message) -> None:
        if self.config.on_message:
            self.config.on_message(message)

    def dispatch_close(self, code: int, reason: str) -> None:
        if self.config.on_close:
            self.config.on_close(code, reason)

    def dispatch_error(self, error: Exception) -> None:
        if self.config.on_error:
            self.config.on_error(error)

    def __repr__(self) -> str:
        return f"EventDispatcher(address={self.address!r})"
