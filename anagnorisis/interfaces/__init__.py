"""Protocols for the host environment a recognizer runs in."""

from .host import (
    BatchCallback,
    ChangeNotifier,
    SubscriptionHandle,
    Timer,
    TimerHandle,
    TreeNode,
)

__all__ = [
    "BatchCallback",
    "ChangeNotifier",
    "SubscriptionHandle",
    "Timer",
    "TimerHandle",
    "TreeNode",
]
