"""Change-notification hub for the in-memory tree.

Plays the role of the host's MutationObserver machinery: mutations are
queued per subscription (filtered by the subscription config and the
observed subtree) and handed over as batches when the hub is flushed.
With an event loop the hub flushes itself on the next loop iteration,
like microtask delivery; without one the owner calls ``flush()``.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from loguru import logger

from anagnorisis.interfaces.host import BatchCallback
from anagnorisis.recognizer.config import SubscriptionConfig
from anagnorisis.types.records import ChangeKind, ChangeRecord

if TYPE_CHECKING:
    from .tree import Node


class HubSubscription:
    """A live subscription; ``cancel()`` drops queued records too."""

    def __init__(
        self,
        hub: MutationHub,
        target: Node,
        config: SubscriptionConfig,
        callback: BatchCallback,
    ) -> None:
        self.hub = hub
        self.target = target
        self.config = config
        self.callback = callback
        self.active = True
        self.queue: list[ChangeRecord] = []

    def wants(self, record: ChangeRecord) -> bool:
        """Check whether the record falls under this subscription."""
        config = self.config
        if record.kind is ChangeKind.CHILD_LIST:
            wanted = config.child_list
        elif record.kind is ChangeKind.ATTRIBUTES:
            wanted = config.attributes and (
                config.attribute_filter is None
                or record.attribute_name in config.attribute_filter
            )
        else:
            wanted = config.character_data

        return wanted and self._in_scope(record.target)

    def _in_scope(self, node: Node | None) -> bool:
        if node is self.target:
            return True
        if not self.config.subtree:
            return False
        contains = getattr(self.target, "contains", None)
        return bool(contains and contains(node))

    def cancel(self) -> None:
        if not self.active:
            return
        self.active = False
        self.queue.clear()
        self.hub._remove(self)


class MutationHub:
    """Queue tree changes and deliver them in batches to subscribers."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop
        self._subscriptions: list[HubSubscription] = []
        self._flush_scheduled = False

    @property
    def subscription_count(self) -> int:
        return len(self._subscriptions)

    @property
    def pending(self) -> int:
        """Records queued but not yet delivered."""
        return sum(len(sub.queue) for sub in self._subscriptions)

    def subscribe(
        self,
        target: Node,
        config: SubscriptionConfig,
        callback: BatchCallback,
    ) -> HubSubscription:
        subscription = HubSubscription(self, target, config, callback)
        self._subscriptions.append(subscription)
        return subscription

    def record(self, record: ChangeRecord) -> None:
        """Queue a change for every subscription that observes it."""
        queued = False
        for subscription in self._subscriptions:
            if subscription.wants(record):
                subscription.queue.append(record)
                queued = True

        if queued and self._loop is not None and not self._flush_scheduled:
            self._flush_scheduled = True
            self._loop.call_soon(self.flush)

    def flush(self) -> int:
        """Deliver every queued batch once.

        Records produced by callbacks during the flush are queued for the
        next flush.

        Returns:
            Number of batches delivered.
        """
        self._flush_scheduled = False
        delivered = 0
        for subscription in list(self._subscriptions):
            if not subscription.active or not subscription.queue:
                continue
            batch = tuple(subscription.queue)
            subscription.queue.clear()
            delivered += 1
            subscription.callback(batch)

        if delivered:
            logger.trace("Hub delivered {} batches", delivered)
        return delivered

    def _remove(self, subscription: HubSubscription) -> None:
        if subscription in self._subscriptions:
            self._subscriptions.remove(subscription)
