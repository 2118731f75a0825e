"""
Anagnorisis utility modules.

This package provides shared utilities used across the Anagnorisis codebase:
- Logging (session-bound loguru logger)
- Serialization for diagnostic descriptions
"""

# Logger
from .logger import (
    base36_encode,
    generate_session_id,
    is_debug_enabled,
    logger,
    session_logger,
)

# Serialization
from .serialization import describe_node, serialize_to_primitives

__all__ = [
    # Logger
    "base36_encode",
    "generate_session_id",
    "is_debug_enabled",
    "logger",
    "session_logger",
    # Serialization
    "describe_node",
    "serialize_to_primitives",
]
