# =============================================================================
# resilient_ws -- Error Types
# =============================================================================
#
# These classify failures for callbacks and ``last_error``.  None of them is
# raised across the public ConnectionManager API.
# =============================================================================

from .constants import RECONNECT_EXHAUSTED_MESSAGE


class WSError(Exception):
    """Base exception for all resilient_ws errors."""


class WSConnectionError(WSError):
    """Transport failed to establish or failed at runtime."""


class SendError(WSError):
    """Outgoing message could not be encoded or written."""


class PayloadEncodeError(SendError):
    """Structured payload could not be serialized to text."""


class ReconnectExhaustedError(WSError):
    """Reconnect attempt limit reached."""

    def __init__(self, attempts: int) -> None:
        self.attempts = attempts
        super().__init__(RECONNECT_EXHAUSTED_MESSAGE)
