"""
Logging utility for recognizer sessions.

Recognizers run inside host callbacks, often long after the test step that
created them moved on. Every session therefore gets a short id, and log
records emitted on its behalf are bound to it so a stuck or misfiring
recognizer can be followed through the log:

    log = session_logger(session_id)
    log.debug("batch of {} records", len(batch))

Debug output is controlled by ANAGNORISIS_DEBUG.
"""

import os
import secrets
import time

from loguru import logger as loguru_logger

from anagnorisis.constants import ENV_DEBUG, TRUTHY_VALUES


def generate_session_id() -> str:
    """
    Generate a unique recognizer session ID.

    Format: ses_<timestamp_base36>_<random_hex>
    """
    timestamp = int(time.time() * 1000)
    random_part = secrets.token_hex(4)
    return f"ses_{base36_encode(timestamp)}_{random_part}"


def base36_encode(number: int) -> str:
    """Encode an integer to base36 string."""
    if number == 0:
        return "0"

    chars = "0123456789abcdefghijklmnopqrstuvwxyz"
    result = []
    while number:
        result.append(chars[number % 36])
        number //= 36
    return "".join(reversed(result))


def is_debug_enabled() -> bool:
    """Check if debug mode is enabled."""
    return os.environ.get(ENV_DEBUG, "").lower() in TRUTHY_VALUES


def session_logger(session_id: str):
    """Return the shared logger bound to a recognizer session."""
    return loguru_logger.bind(session=session_id)


# Export loguru logger for direct use
logger = loguru_logger
