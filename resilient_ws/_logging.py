import logging

logger = logging.getLogger("resilient_ws")
