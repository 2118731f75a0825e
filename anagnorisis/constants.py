"""Shared constants for Anagnorisis.

Centralizes delivery defaults, tag wildcards and the environment variable
names read by the settings loader.
"""

from datetime import datetime, timezone


def utcnow() -> datetime:
    """Return the current UTC time as a timezone-aware datetime."""
    return datetime.now(timezone.utc)


# Delay before a delayed recognizer hands its match to the handler.
DEFAULT_DELAY_MS: int = 10

# Shape names that match any element tag.
WILDCARD_TAGS: frozenset[str] = frozenset({"*", ""})

# Attribute compared by class-token containment instead of string equality.
CLASS_ATTRIBUTE: str = "class"

# Environment variables read by RecognizerSettings.from_env()
ENV_DELAY_MS: str = "ANAGNORISIS_DELAY_MS"
ENV_STRICT: str = "ANAGNORISIS_STRICT"
ENV_DEBUG: str = "ANAGNORISIS_DEBUG"

# Values accepted as "true" for boolean environment variables.
TRUTHY_VALUES: frozenset[str] = frozenset({"1", "true", "yes", "on"})
