"""In-memory reference host: document tree, change hub and manual clock."""

from .clock import ManualClock, ScheduledCall
from .hub import HubSubscription, MutationHub
from .tree import Document, Element, Node, Text

__all__ = [
    "Document",
    "Element",
    "HubSubscription",
    "ManualClock",
    "MutationHub",
    "Node",
    "ScheduledCall",
    "Text",
]
