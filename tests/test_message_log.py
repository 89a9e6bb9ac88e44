"""Tests for the bounded message history."""

import dataclasses

import pytest

from resilient_ws.message_log import MessageLog
from resilient_ws.types import Direction, Message


def _msg(n: int) -> Message:
    return Message(direction=Direction.RECEIVED, payload=n, raw=str(n))


class TestAppend:
    def test_starts_empty(self):
        log = MessageLog()
        assert len(log) == 0
        assert log.capacity == 100
        assert log.snapshot() == ()

    def test_preserves_insertion_order(self):
        log = MessageLog()
        for i in range(5):
            log.append(_msg(i))
        assert [m.payload for m in log] == [0, 1, 2, 3, 4]

    def test_evicts_oldest_beyond_capacity(self):
        log = MessageLog()
        for i in range(250):
            log.append(_msg(i))
        assert len(log) == 100
        assert [m.payload for m in log.snapshot()] == list(range(150, 250))

    def test_custom_capacity(self):
        log = MessageLog(capacity=3)
        for i in range(4):
            log.append(_msg(i))
        assert [m.payload for m in log] == [1, 2, 3]

    def test_invalid_capacity(self):
        with pytest.raises(ValueError):
            MessageLog(capacity=0)


class TestRecordHelpers:
    def test_record_sent(self):
        log = MessageLog()
        record = log.record_sent({"type": "ping"}, '{"type":"ping"}')
        assert record.direction == Direction.SENT
        assert record.payload == {"type": "ping"}
        assert record.raw == '{"type":"ping"}'
        assert log.snapshot() == (record,)

    def test_record_received(self):
        log = MessageLog()
        record = log.record_received("hello", "hello")
        assert record.direction == Direction.RECEIVED
        assert record.timestamp.tzinfo is not None

    def test_ids_are_unique(self):
        log = MessageLog()
        ids = {log.record_sent(i, str(i)).id for i in range(50)}
        assert len(ids) == 50


class TestSnapshot:
    def test_snapshot_is_a_copy(self):
        log = MessageLog()
        log.append(_msg(1))
        snap = log.snapshot()
        log.append(_msg(2))
        assert len(snap) == 1
        assert len(log) == 2

    def test_records_are_immutable(self):
        record = _msg(1)
        with pytest.raises(dataclasses.FrozenInstanceError):
            record.payload = 2  # type: ignore[misc]

    def test_clear(self):
        log = MessageLog()
        log.append(_msg(1))
        log.clear()
        assert len(log) == 0
