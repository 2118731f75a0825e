"""Recorded traces: an anchor, a pattern and the batches the host delivered.

Trace files are JSON:

    {
      "anchor": {"tag": "section", "attributes": {"id": "panel"}},
      "pattern": {"addedChildTag": {"name": "div", "attributes": {"class": "row"}}},
      "batches": [
        [{"type": "childList", "addedNodes": [{"tag": "span"}, {"tag": "div", "attributes": {"class": "row open"}}]}],
        [{"type": "attributes", "target": "anchor", "attributeName": "hidden"}]
      ]
    }

Node specs follow Element.from_dict(); a record ``target`` of ``"anchor"``
refers to the anchor node itself.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from anagnorisis.host.tree import Element, Node
from anagnorisis.interfaces.host import BatchCallback
from anagnorisis.patterns.pattern import Pattern
from anagnorisis.recognizer.config import SubscriptionConfig
from anagnorisis.types.errors import ErrorCode, ErrorContext, ValidationError
from anagnorisis.types.records import (
    AttributeChange,
    ChangeKind,
    ChangeRecord,
    ChildListChange,
    TextChange,
)

ANCHOR_REF = "anchor"


def _invalid(message: str) -> ValidationError:
    return ValidationError(
        message,
        user_message="Invalid trace file.",
        code=ErrorCode.INVALID_TRACE,
        context=ErrorContext(operation="load_trace", component="cli"),
    )


@dataclass
class Trace:
    """A parsed trace."""

    anchor: Element
    pattern: Pattern
    batches: list[tuple[ChangeRecord, ...]]


def _node(spec: Any, anchor: Element) -> Node:
    if spec == ANCHOR_REF:
        return anchor
    return Element.from_dict(spec)


def parse_record(spec: Mapping[str, Any], anchor: Element) -> ChangeRecord:
    """Build a change record from its JSON form."""
    if not isinstance(spec, Mapping):
        raise _invalid(f"record must be an object, got {spec!r}")

    kind = spec.get("type")
    if kind == ChangeKind.CHILD_LIST.value:
        return ChildListChange(
            target=_node(spec.get("target", ANCHOR_REF), anchor),
            added_nodes=tuple(_node(n, anchor) for n in spec.get("addedNodes") or ()),
            removed_nodes=tuple(_node(n, anchor) for n in spec.get("removedNodes") or ()),
        )
    if kind == ChangeKind.ATTRIBUTES.value:
        name = spec.get("attributeName")
        if not isinstance(name, str):
            raise _invalid("attributes record needs an attributeName")
        return AttributeChange(
            target=_node(spec.get("target", ANCHOR_REF), anchor),
            attribute_name=name,
        )
    if kind == ChangeKind.CHARACTER_DATA.value:
        if "target" not in spec:
            raise _invalid("characterData record needs a target")
        return TextChange(target=_node(spec["target"], anchor))

    raise _invalid(f"unknown record type {kind!r}")


def load_trace(data: Mapping[str, Any], strict: bool = False) -> Trace:
    """Parse a trace document.

    Raises:
        ValidationError: If the anchor, pattern or a record is malformed.
    """
    if not isinstance(data, Mapping):
        raise _invalid("trace must be an object")

    anchor = Element.from_dict(data.get("anchor") or {"tag": "body"})
    if not isinstance(anchor, Element):
        raise _invalid("anchor must be an element")

    pattern = Pattern.from_dict(data.get("pattern") or {}, anchor=anchor, strict=strict)

    batches_spec = data.get("batches") or []
    if not isinstance(batches_spec, list):
        raise _invalid("batches must be a list")
    batches = []
    for batch in batches_spec:
        if not isinstance(batch, list):
            raise _invalid("each batch must be a list of records")
        batches.append(tuple(parse_record(record, anchor) for record in batch))

    return Trace(anchor=anchor, pattern=pattern, batches=batches)


class TracePlayer:
    """ChangeNotifier that replays recorded batches to its subscriber."""

    def __init__(self, batches: list[tuple[ChangeRecord, ...]]):
        self.batches = batches
        self.config: SubscriptionConfig | None = None
        self.delivered = 0
        self._callback: BatchCallback | None = None

    def subscribe(self, target, config: SubscriptionConfig, callback: BatchCallback) -> TracePlayer:
        self.config = config
        self._callback = callback
        return self

    def cancel(self) -> None:
        self._callback = None

    def play(self) -> int:
        """Deliver batches in order until the subscriber lets go.

        Returns:
            Number of batches delivered.
        """
        for batch in self.batches[self.delivered :]:
            if self._callback is None:
                break
            self.delivered += 1
            self._callback(batch)
        return self.delivered
