"""Pattern matching over tree change records.

Record kinds are handled with the following rules:

- childList: the added shape is searched in added nodes and their subtrees;
  without an added shape, the removed shape is searched in the removed
  nodes themselves (their subtrees are detached snapshots and are not
  searched).
- attributes: the record must target the anchor itself and name the watched
  attribute.
- characterData: the text node must now read exactly the watched text.

A record kind the pattern has no criterion for is skipped.
"""

from __future__ import annotations

import json

from loguru import logger

from anagnorisis.types.core import AttributeHandle, MatchResult
from anagnorisis.types.records import (
    AttributeChange,
    ChangeBatch,
    ChangeKind,
    ChangeRecord,
    ChildListChange,
    TextChange,
)
from anagnorisis.utils.serialization import describe_node, serialize_to_primitives

from .matcher import ChangeMatcher
from .pattern import Pattern
from .search import find_matching_node


class MutationMatcher(ChangeMatcher):
    """Match batches of change records against a single Pattern.

    Usage:
        matcher = MutationMatcher(Pattern(
            anchor=root,
            added_shape=Shape("div", {"class": "panel"}),
        ))
        node = matcher.match(batch)
    """

    def __init__(self, pattern: Pattern):
        self.pattern = pattern

    @property
    def anchor(self):
        return self.pattern.anchor

    def match(self, batch: ChangeBatch) -> MatchResult | None:
        """Return the result of the first matching record in ``batch``."""
        if not batch:
            return None

        for record in batch:
            result = self._match_record(record)
            if result is not None:
                return result

        return None

    def _match_record(self, record: ChangeRecord) -> MatchResult | None:
        kind = getattr(record, "kind", None)
        if kind is ChangeKind.CHILD_LIST:
            return self._match_child_list(record)
        if kind is ChangeKind.ATTRIBUTES:
            return self._match_attribute(record)
        if kind is ChangeKind.CHARACTER_DATA:
            return self._match_text(record)

        logger.debug("Skipping unknown change record {!r}", record)
        return None

    def _match_child_list(self, record: ChildListChange) -> MatchResult | None:
        pattern = self.pattern
        if pattern.added_shape is not None:
            if not record.added_nodes:
                return None
            return find_matching_node(
                record.added_nodes,
                pattern.added_shape,
                text=pattern.watched_text,
                deep=True,
            )

        if pattern.removed_shape is not None and record.removed_nodes:
            return find_matching_node(
                record.removed_nodes,
                pattern.removed_shape,
                deep=False,
            )

        return None

    def _match_attribute(self, record: AttributeChange) -> MatchResult | None:
        watched = self.pattern.watched_attribute
        if watched is None:
            return None

        if record.target is self.pattern.anchor and record.attribute_name == watched:
            return AttributeHandle(owner=record.target, name=record.attribute_name)
        return None

    def _match_text(self, record: TextChange) -> MatchResult | None:
        watched = self.pattern.watched_text
        if watched is None:
            return None

        if getattr(record.target, "text_content", None) == watched:
            return record.target
        return None

    def describe(self) -> str:
        """JSON summary of the pattern: anchor label plus configured criteria.

        Used for logging stuck recognizers; never raises.
        """
        try:
            pattern = self.pattern
            summary = {
                "target": describe_node(getattr(pattern, "anchor", None)),
                "addedChildTag": getattr(pattern, "added_shape", None),
                "removedChildTag": getattr(pattern, "removed_shape", None),
                "changedAttribute": getattr(pattern, "watched_attribute", None),
                "text": getattr(pattern, "watched_text", None),
            }
            summary = {key: value for key, value in summary.items() if value is not None}
            return json.dumps(serialize_to_primitives(summary), sort_keys=True)
        except Exception as e:
            return json.dumps({"error": f"undescribable pattern: {type(e).__name__}"})
