"""Subscription configuration derived from a pattern.

The host is asked for the smallest set of change kinds the pattern can
possibly match:

- a shape needs child-list changes anywhere below the anchor
- otherwise a watched attribute needs attribute changes, filtered by name
- otherwise watched text needs character-data changes of text nodes below
  the anchor

Exactly one branch applies. A pattern with no criterion yields the empty
config, which subscribes to nothing.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from anagnorisis.patterns.pattern import Pattern


@dataclass(frozen=True)
class SubscriptionConfig:
    """Change kinds a ChangeNotifier must report (MutationObserverInit analogue)."""

    child_list: bool = False
    subtree: bool = False
    attributes: bool = False
    attribute_filter: tuple[str, ...] | None = None
    character_data: bool = False

    @property
    def is_empty(self) -> bool:
        """True if no change kind is requested."""
        return not (self.child_list or self.attributes or self.character_data)

    def to_dict(self) -> dict[str, Any]:
        """Observer-init style dict with only the requested keys."""
        data: dict[str, Any] = {}
        if self.child_list:
            data["childList"] = True
        if self.subtree:
            data["subtree"] = True
        if self.attributes:
            data["attributes"] = True
        if self.attribute_filter is not None:
            data["attributeFilter"] = list(self.attribute_filter)
        if self.character_data:
            data["characterData"] = True
        return data


EMPTY_SUBSCRIPTION = SubscriptionConfig()


def derive_subscription_config(pattern: Pattern) -> SubscriptionConfig:
    """Derive the minimal subscription a pattern requires."""
    if pattern.added_shape is not None or pattern.removed_shape is not None:
        return SubscriptionConfig(child_list=True, subtree=True)
    if pattern.watched_attribute is not None:
        return SubscriptionConfig(
            attributes=True,
            attribute_filter=(pattern.watched_attribute,),
        )
    if pattern.watched_text is not None:
        return SubscriptionConfig(character_data=True, subtree=True)
    return EMPTY_SUBSCRIPTION
