# =============================================================================
# resilient_ws -- Constants
# =============================================================================

# -- Message history -----------------------------------------------------------

MESSAGE_HISTORY_SIZE = 100

# -- Reconnection -------------------------------------------------------------

RECONNECT_BASE_DELAY_MS = 3000.0
RECONNECT_FACTOR = 1.5
RECONNECT_MAX_ATTEMPTS = 5
RECONNECT_EXHAUSTED_MESSAGE = "max reconnection attempts reached"

# -- Transport ----------------------------------------------------------------

CONNECTION_TIMEOUT = 10.0  # seconds, enforced by the transport only
MAX_MESSAGE_SIZE = 1_048_576  # 1 MB

# -- WebSocket close codes -----------------------------------------------------

WS_CLOSE_NORMAL = 1000
WS_CLOSE_ABNORMAL = 1006
WS_CLOSE_SERVER_ERROR = 1011
