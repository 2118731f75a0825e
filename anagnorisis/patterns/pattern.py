"""Declarative patterns describing the change a recognizer waits for.

A Pattern is scoped to an anchor node and names at most one shape (an
element added or removed somewhere below the anchor), an attribute of the
anchor whose change is of interest, and/or a text the change must carry.

Patterns are usually built from the declarative form test drivers write:

    pattern = Pattern.from_dict({
        "target": panel,
        "addedChildTag": {"name": "div", "attributes": {"class": "row"}},
        "text": "Loaded",
    })
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from loguru import logger

from anagnorisis.constants import WILDCARD_TAGS
from anagnorisis.interfaces.host import TreeNode
from anagnorisis.types.errors import ErrorCode, ErrorContext, ValidationError
from anagnorisis.utils.serialization import describe_node

# Keys of the declarative form.
KEY_TARGET = "target"
KEY_ADDED = "addedChildTag"
KEY_REMOVED = "removedChildTag"
KEY_ATTRIBUTE = "changedAttribute"
KEY_TEXT = "text"


@dataclass(frozen=True)
class Shape:
    """Tag name plus attribute constraints an element must satisfy.

    An empty or ``"*"`` name matches any tag; empty attributes constrain
    nothing.
    """

    name: str = ""
    attributes: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "name", self.name or "")
        object.__setattr__(self, "attributes", MappingProxyType(dict(self.attributes or {})))

    def __hash__(self) -> int:
        return hash((self.name, tuple(sorted(self.attributes.items()))))

    @property
    def is_wildcard(self) -> bool:
        """True if the shape accepts any tag name."""
        return self.name in WILDCARD_TAGS

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "attributes": dict(self.attributes)}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], key: str = "shape") -> Shape:
        """Build a shape from ``{"name": ..., "attributes": {...}}``.

        Raises:
            ValidationError: If name or attributes have the wrong type.
        """
        if not isinstance(data, Mapping):
            raise _invalid(f"{key} must be an object, got {type(data).__name__}", key)

        name = data.get("name") or ""
        if not isinstance(name, str):
            raise _invalid(f"{key}.name must be a string", key)

        attributes = data.get("attributes") or {}
        if not isinstance(attributes, Mapping):
            raise _invalid(f"{key}.attributes must be an object", key)
        for attr_name, value in attributes.items():
            if not isinstance(attr_name, str) or not isinstance(value, str):
                raise _invalid(f"{key}.attributes must map strings to strings", key)

        return cls(name=name, attributes=attributes)


def _invalid(message: str, key: str, code: ErrorCode = ErrorCode.INVALID_SHAPE) -> ValidationError:
    return ValidationError(
        message,
        user_message=f"Invalid pattern field '{key}'.",
        code=code,
        context=ErrorContext(operation="load_pattern", component="patterns", pattern=key),
    )


@dataclass(frozen=True, eq=False)
class Pattern:
    """The single change a recognizer is looking for.

    ``added_shape`` and ``removed_shape`` are mutually exclusive. When both
    are given the added shape wins and the removed shape is dropped.
    """

    anchor: TreeNode
    added_shape: Shape | None = None
    removed_shape: Shape | None = None
    watched_attribute: str | None = None
    watched_text: str | None = None

    def __post_init__(self) -> None:
        if self.added_shape is not None and self.removed_shape is not None:
            logger.warning(
                "Pattern on {} names both an added and a removed shape; ignoring removed <{}>",
                describe_node(self.anchor),
                self.removed_shape.name or "*",
            )
            object.__setattr__(self, "removed_shape", None)

        # Empty strings never match anything, same as leaving the field out.
        object.__setattr__(self, "watched_attribute", self.watched_attribute or None)
        object.__setattr__(self, "watched_text", self.watched_text or None)

    @property
    def shape(self) -> Shape | None:
        """Whichever of the added/removed shapes is set."""
        return self.added_shape or self.removed_shape

    @property
    def is_empty(self) -> bool:
        """True if the pattern names no criterion and can never match."""
        return (
            self.added_shape is None
            and self.removed_shape is None
            and self.watched_attribute is None
            and self.watched_text is None
        )

    def to_dict(self) -> dict[str, Any]:
        """Declarative form with the anchor replaced by its label."""
        data: dict[str, Any] = {KEY_TARGET: describe_node(self.anchor)}
        if self.added_shape is not None:
            data[KEY_ADDED] = self.added_shape.to_dict()
        if self.removed_shape is not None:
            data[KEY_REMOVED] = self.removed_shape.to_dict()
        if self.watched_attribute is not None:
            data[KEY_ATTRIBUTE] = self.watched_attribute
        if self.watched_text is not None:
            data[KEY_TEXT] = self.watched_text
        return data

    @classmethod
    def from_dict(
        cls,
        data: Mapping[str, Any],
        anchor: TreeNode | None = None,
        strict: bool = False,
    ) -> Pattern:
        """Build a pattern from its declarative form.

        Args:
            data: Mapping with ``target``, ``addedChildTag``,
                ``removedChildTag``, ``changedAttribute`` and ``text`` keys.
            anchor: Anchor node; overrides ``data["target"]`` when given.
            strict: Reject simultaneous added and removed shapes instead of
                dropping the removed one.

        Returns:
            The immutable Pattern.

        Raises:
            ValidationError: If the anchor is missing or a field is malformed.
        """
        if not isinstance(data, Mapping):
            raise _invalid("pattern must be an object", "pattern", ErrorCode.INVALID_PATTERN)

        target = anchor if anchor is not None else data.get(KEY_TARGET)
        if target is None:
            raise _invalid("pattern has no target node", KEY_TARGET, ErrorCode.INVALID_PATTERN)

        added = data.get(KEY_ADDED)
        removed = data.get(KEY_REMOVED)
        if strict and added is not None and removed is not None:
            raise _invalid(
                f"{KEY_ADDED} and {KEY_REMOVED} are mutually exclusive",
                KEY_REMOVED,
                ErrorCode.CONFLICTING_SHAPES,
            )

        watched_attribute = data.get(KEY_ATTRIBUTE)
        if watched_attribute is not None and not isinstance(watched_attribute, str):
            raise _invalid(f"{KEY_ATTRIBUTE} must be a string", KEY_ATTRIBUTE, ErrorCode.INVALID_PATTERN)
        watched_text = data.get(KEY_TEXT)
        if watched_text is not None and not isinstance(watched_text, str):
            raise _invalid(f"{KEY_TEXT} must be a string", KEY_TEXT, ErrorCode.INVALID_PATTERN)

        return cls(
            anchor=target,
            added_shape=Shape.from_dict(added, KEY_ADDED) if added is not None else None,
            removed_shape=Shape.from_dict(removed, KEY_REMOVED) if removed is not None else None,
            watched_attribute=watched_attribute,
            watched_text=watched_text,
        )
