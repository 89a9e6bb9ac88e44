"""Tests for payload encoding."""

import pytest

from resilient_ws.codec import decode_payload, encode_payload
from resilient_ws.errors import PayloadEncodeError, SendError


class TestEncode:
    def test_text_passes_through(self):
        assert encode_payload("hello") == "hello"

    def test_structured_value_is_compact_json(self):
        assert encode_payload({"type": "ping"}) == '{"type":"ping"}'

    def test_keys_are_sorted(self):
        assert encode_payload({"b": 1, "a": [1, 2]}) == '{"a":[1,2],"b":1}'

    def test_unserializable_raises_send_error(self):
        with pytest.raises(PayloadEncodeError):
            encode_payload({"obj": object()})
        assert issubclass(PayloadEncodeError, SendError)


class TestDecode:
    def test_json_text(self):
        assert decode_payload('{"type":"pong"}') == {"type": "pong"}

    def test_plain_text_returned_as_is(self):
        assert decode_payload("not json") == "not json"

    def test_bytes_untouched(self):
        assert decode_payload(b"\x00\x01") == b"\x00\x01"
