"""
Anagnorisis type definitions.

This module exports the value types, change records and error types shared
by the matcher, the recognizer and host adapters.
"""

# Core types
from .core import AttributeHandle, MatchResult, NodeType

# Change records
from .records import (
    AttributeChange,
    ChangeBatch,
    ChangeKind,
    ChangeRecord,
    ChildListChange,
    TextChange,
)

# Error types
from .errors import (
    AnagnorisisError,
    ConfigurationError,
    ErrorCode,
    ErrorContext,
    ErrorSeverity,
    RecoveryAction,
    SubscriptionError,
    ValidationError,
)

__all__ = [
    # Core types
    "AttributeHandle",
    "MatchResult",
    "NodeType",
    # Change records
    "AttributeChange",
    "ChangeBatch",
    "ChangeKind",
    "ChangeRecord",
    "ChildListChange",
    "TextChange",
    # Error types
    "ErrorCode",
    "ErrorSeverity",
    "RecoveryAction",
    "ErrorContext",
    "AnagnorisisError",
    "ConfigurationError",
    "ValidationError",
    "SubscriptionError",
]
