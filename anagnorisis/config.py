"""
Settings for recognizers and the command line.

Settings are read from the environment once and passed around as an
immutable value:

    ANAGNORISIS_DELAY_MS   delay before delayed delivery (default 10)
    ANAGNORISIS_STRICT     reject patterns naming both an added and a
                           removed shape instead of dropping the latter
    ANAGNORISIS_DEBUG      verbose session logging
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

from anagnorisis.constants import (
    DEFAULT_DELAY_MS,
    ENV_DEBUG,
    ENV_DELAY_MS,
    ENV_STRICT,
    TRUTHY_VALUES,
)
from anagnorisis.types.errors import ConfigurationError, ErrorContext, RecoveryAction


def _parse_bool(value: str | None) -> bool:
    return (value or "").strip().lower() in TRUTHY_VALUES


def _parse_delay(value: str | None) -> int:
    if value is None or not value.strip():
        return DEFAULT_DELAY_MS
    try:
        delay = int(value)
    except ValueError as e:
        raise ConfigurationError(
            f"{ENV_DELAY_MS} must be an integer, got {value!r}",
            user_message=f"Invalid {ENV_DELAY_MS} value.",
            context=ErrorContext(operation="load_settings", component="config"),
            recovery_actions=[
                RecoveryAction(
                    description="Set a whole number of milliseconds",
                    command=f"export {ENV_DELAY_MS}={DEFAULT_DELAY_MS}",
                )
            ],
            original_error=e,
        ) from e
    if delay < 0:
        raise ConfigurationError(
            f"{ENV_DELAY_MS} must be non-negative, got {delay}",
            user_message=f"Invalid {ENV_DELAY_MS} value.",
            context=ErrorContext(operation="load_settings", component="config"),
        )
    return delay


@dataclass(frozen=True)
class RecognizerSettings:
    """Immutable recognizer settings."""

    default_delay_ms: int = DEFAULT_DELAY_MS
    strict_patterns: bool = False
    debug: bool = False

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> RecognizerSettings:
        """Load settings from environment variables.

        Args:
            environ: Mapping to read instead of ``os.environ``.

        Returns:
            RecognizerSettings with defaults for unset variables.

        Raises:
            ConfigurationError: If a variable holds an invalid value.
        """
        env = os.environ if environ is None else environ
        return cls(
            default_delay_ms=_parse_delay(env.get(ENV_DELAY_MS)),
            strict_patterns=_parse_bool(env.get(ENV_STRICT)),
            debug=_parse_bool(env.get(ENV_DEBUG)),
        )
