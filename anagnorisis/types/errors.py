"""
Structured error handling for Anagnorisis.

Matching never raises: an under-specified pattern simply never matches.
The errors below cover the caller-facing edges only - declarative pattern
loading, settings, delivery arguments and host subscription failures.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, IntEnum
from typing import Any

from anagnorisis.constants import utcnow


class ErrorCode(IntEnum):
    """Internal error codes for categorization."""

    # Pattern Errors (1000-1999)
    INVALID_PATTERN = 1001
    CONFLICTING_SHAPES = 1002
    INVALID_SHAPE = 1003

    # Subscription Errors (2000-2999)
    SUBSCRIBE_FAILED = 2001

    # Configuration Errors (3000-3999)
    INVALID_CONFIG = 3001

    # User Input Errors (4000-4999)
    INVALID_ARGS = 4001
    INVALID_TRACE = 4002


class ErrorSeverity(str, Enum):
    """Error severity levels."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


@dataclass
class RecoveryAction:
    """Suggested action to recover from an error."""

    description: str
    command: str | None = None
    automated: bool = False


@dataclass
class ErrorContext:
    """Context information for an error."""

    operation: str | None = None
    component: str | None = None
    pattern: str | None = None
    timestamp: datetime = field(default_factory=utcnow)
    stack: str | None = None
    additional_info: dict[str, Any] = field(default_factory=dict)


class AnagnorisisError(Exception):
    """Base error class for Anagnorisis."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        user_message: str,
        severity: str = ErrorSeverity.MEDIUM,
        context: ErrorContext | None = None,
        recovery_actions: list[RecoveryAction] | None = None,
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.severity = severity
        self.user_message = user_message
        self.context = context or ErrorContext()
        self.recovery_actions = recovery_actions or []
        self.original_error = original_error

        self.context.timestamp = utcnow()
        if original_error:
            self.context.stack = str(original_error.__traceback__)

    def get_formatted_message(self) -> str:
        """Get a formatted error message for display to users."""
        parts = [
            f"[Error] {self.user_message}",
            f"   Code: {self.code.value}",
        ]

        if self.context.operation:
            parts.append(f"   Operation: {self.context.operation}")
        if self.context.component:
            parts.append(f"   Component: {self.context.component}")
        if self.context.pattern:
            parts.append(f"   Pattern: {self.context.pattern}")

        if self.recovery_actions:
            parts.append("")
            parts.append("Suggested actions:")
            for i, action in enumerate(self.recovery_actions, 1):
                parts.append(f"   {i}. {action.description}")
                if action.command:
                    parts.append(f"      Run: {action.command}")

        return "\n".join(parts)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        return {
            "name": self.__class__.__name__,
            "code": self.code.value,
            "message": str(self),
            "user_message": self.user_message,
            "severity": self.severity,
            "context": {
                "operation": self.context.operation,
                "component": self.context.component,
                "pattern": self.context.pattern,
                "timestamp": self.context.timestamp.isoformat(),
                "additional_info": self.context.additional_info,
            },
            "recovery_actions": [
                {"description": a.description, "command": a.command, "automated": a.automated}
                for a in self.recovery_actions
            ],
            "original_error": str(self.original_error) if self.original_error else None,
        }


class ConfigurationError(AnagnorisisError):
    """Error related to settings values."""

    def __init__(
        self,
        message: str,
        user_message: str | None = None,
        context: ErrorContext | None = None,
        recovery_actions: list[RecoveryAction] | None = None,
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.INVALID_CONFIG,
            message=message,
            user_message=user_message or "Configuration error occurred.",
            severity=ErrorSeverity.HIGH,
            context=context,
            recovery_actions=recovery_actions,
            original_error=original_error,
        )


class ValidationError(AnagnorisisError):
    """Error related to malformed patterns, traces or arguments."""

    def __init__(
        self,
        message: str,
        user_message: str | None = None,
        code: ErrorCode = ErrorCode.INVALID_PATTERN,
        context: ErrorContext | None = None,
        recovery_actions: list[RecoveryAction] | None = None,
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(
            code=code,
            message=message,
            user_message=user_message or "Validation failed.",
            severity=ErrorSeverity.MEDIUM,
            context=context,
            recovery_actions=recovery_actions,
            original_error=original_error,
        )


class SubscriptionError(AnagnorisisError):
    """Error raised when the host refuses a change subscription."""

    def __init__(
        self,
        message: str,
        user_message: str | None = None,
        context: ErrorContext | None = None,
        recovery_actions: list[RecoveryAction] | None = None,
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.SUBSCRIBE_FAILED,
            message=message,
            user_message=user_message or "Could not subscribe to tree changes.",
            severity=ErrorSeverity.HIGH,
            context=context,
            recovery_actions=recovery_actions,
            original_error=original_error,
        )
