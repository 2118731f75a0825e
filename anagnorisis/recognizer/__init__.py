"""Recognizers: subscribe, match once, unsubscribe, deliver.

Components:
- SubscriptionConfig / derive_subscription_config: minimal host subscription
- RecognizerSession: one activation with cancellation
- MutationRecognizer: raw, one-shot and delayed observation
- AsyncioTimer: timer facility on an asyncio loop
"""

from .config import EMPTY_SUBSCRIPTION, SubscriptionConfig, derive_subscription_config
from .recognizer import MutationRecognizer
from .session import DeliveryMode, MatchHandler, RecognizerSession, SessionState
from .timers import AsyncioTimer

__all__ = [
    "EMPTY_SUBSCRIPTION",
    "AsyncioTimer",
    "DeliveryMode",
    "MatchHandler",
    "MutationRecognizer",
    "RecognizerSession",
    "SessionState",
    "SubscriptionConfig",
    "derive_subscription_config",
]
