# =============================================================================
# resilient_ws -- Message Log
# =============================================================================
#
# Bounded in-memory history of sent and received messages.  Oldest entries
# are evicted first; nothing is persisted.
# =============================================================================

from __future__ import annotations

from collections import deque
from typing import Any, Iterator

from .constants import MESSAGE_HISTORY_SIZE
from .types import Direction, Message


class MessageLog:
    """Order-preserving FIFO buffer of :class:`Message` records.

    Args:
        capacity: Maximum number of retained records. Default 100.
    """

    def __init__(self, capacity: int = MESSAGE_HISTORY_SIZE) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}")
        self._records: deque[Message] = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._records.maxlen  # type: ignore[return-value]

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[Message]:
        return iter(self.snapshot())

    def append(self, record: Message) -> None:
        """Add *record*, evicting the oldest entry when full."""
        self._records.append(record)

    def record_sent(self, payload: Any, raw: str | None) -> Message:
        record = Message(direction=Direction.SENT, payload=payload, raw=raw)
        self.append(record)
        return record

    def record_received(self, payload: Any, raw: str | None) -> Message:
        record = Message(direction=Direction.RECEIVED, payload=payload, raw=raw)
        self.append(record)
        return record

    def clear(self) -> None:
        self._records.clear()

    def snapshot(self) -> tuple[Message, ...]:
        """Immutable copy of the current records, oldest first."""
        return tuple(self._records)
