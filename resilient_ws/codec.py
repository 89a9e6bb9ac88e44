# =============================================================================
# resilient_ws -- Payload Codec
# =============================================================================
#
# Text passes through untouched; structured values are encoded as canonical
# JSON (sorted keys, no whitespace).  Payloads are otherwise opaque.
# =============================================================================

from __future__ import annotations

from typing import Any

import orjson

from .errors import PayloadEncodeError


def encode_payload(payload: Any) -> str:
    """Return the wire text for *payload*.

    Raises:
        PayloadEncodeError: If *payload* is not JSON-serializable.
    """
    if isinstance(payload, str):
        return payload
    try:
        return orjson.dumps(payload, option=orjson.OPT_SORT_KEYS).decode()
    except TypeError as exc:
        raise PayloadEncodeError(f"Cannot encode payload: {exc}") from exc


def decode_payload(raw: str | bytes) -> Any:
    """Decode a text frame as JSON, returning it unchanged if it is not JSON."""
    if isinstance(raw, bytes):
        return raw
    try:
        return orjson.loads(raw)
    except orjson.JSONDecodeError:
        return raw
