"""Shared fixtures: an in-memory transport and a manual timer scheduler."""

from __future__ import annotations

from typing import Any, Callable

import pytest

from resilient_ws.errors import WSConnectionError
from resilient_ws.manager import ConnectionManager


class FakeTimer:
    def __init__(self, delay: float, callback: Callable[[], Any]) -> None:
        self.delay = delay
        self.callback = callback
        self.cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeScheduler:
    """Records ``call_later`` requests; tests fire them by hand."""

    def __init__(self) -> None:
        self.timers: list[FakeTimer] = []

    def __call__(self, delay: float, callback: Callable[[], Any]) -> FakeTimer:
        timer = FakeTimer(delay, callback)
        self.timers.append(timer)
        return timer

    @property
    def pending(self) -> list[FakeTimer]:
        return [t for t in self.timers if not t.cancelled and not t.fired]

    @property
    def delays_ms(self) -> list[float]:
        return [t.delay * 1000 for t in self.timers]

    def fire(self) -> None:
        timer = self.pending[-1]
        timer.fired = True
        timer.callback()


class FakeTransport:
    def __init__(self) -> None:
        self.address: str | None = None
        self.listener: Any = None
        self.ready = False
        self.closed = False
        self.written: list[str] = []
        self.close_calls: list[tuple[int, str]] = []
        self.write_error: Exception | None = None

    @property
    def is_ready(self) -> bool:
        return self.ready

    @property
    def live(self) -> bool:
        return self.listener is not None and not self.closed and not self.close_calls

    def open(self, address: str, listener: Any) -> None:
        self.address = address
        self.listener = listener

    def write(self, data: str) -> None:
        if self.write_error is not None:
            raise self.write_error
        self.written.append(data)

    def close(self, code: int = 1000, reason: str = "") -> None:
        self.close_calls.append((code, reason))
        self.ready = False

    # -- Simulated network events ----------------------------------------------

    def simulate_open(self) -> None:
        self.ready = True
        self.listener.on_open()

    def simulate_message(self, data: str | bytes) -> None:
        self.listener.on_message(data)

    def simulate_close(self, code: int = 1006, reason: str = "") -> None:
        self.ready = False
        self.closed = True
        self.listener.on_close(code, reason)

    def simulate_error(self, error: Exception | None = None) -> None:
        self.listener.on_error(error or WSConnectionError("connection refused"))


class FakeTransportFactory:
    def __init__(self) -> None:
        self.created: list[FakeTransport] = []

    def __call__(self) -> FakeTransport:
        transport = FakeTransport()
        self.created.append(transport)
        return transport

    @property
    def last(self) -> FakeTransport:
        return self.created[-1]

    @property
    def live(self) -> list[FakeTransport]:
        return [t for t in self.created if t.live]


@pytest.fixture
def scheduler():
    return FakeScheduler()


@pytest.fixture
def transports():
    return FakeTransportFactory()


@pytest.fixture
def states():
    return []


@pytest.fixture
def manager(transports, scheduler, states):
    return ConnectionManager(
        transport_factory=transports,
        scheduler=scheduler,
        on_state_change=states.append,
    )
