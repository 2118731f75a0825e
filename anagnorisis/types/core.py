"""
Core value types for change recognition.

These are the small, immutable values that flow between the host tree,
the pattern matcher and recognizer handlers.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import TYPE_CHECKING, Union

if TYPE_CHECKING:
    from anagnorisis.interfaces.host import TreeNode


class NodeType(IntEnum):
    """Node kinds the matcher distinguishes (values follow the DOM)."""

    ELEMENT = 1
    TEXT = 3


@dataclass(frozen=True, eq=False)
class AttributeHandle:
    """An attribute of an element, resolved against its owner on access.

    Returned for attribute-change matches. The owner keeps changing after the
    record was produced, so ``value`` always reads the current state.
    """

    owner: TreeNode
    name: str

    @property
    def value(self) -> str | None:
        """Current attribute value, or None once the attribute is removed."""
        return self.owner.get_attribute(self.name)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AttributeHandle):
            return NotImplemented
        return self.owner is other.owner and self.name == other.name

    def __hash__(self) -> int:
        return hash((id(self.owner), self.name))

    def __repr__(self) -> str:
        return f"AttributeHandle(name={self.name!r}, value={self.value!r})"


# What a matcher hands back: an element, a text node or an attribute handle.
MatchResult = Union["TreeNode", AttributeHandle]
