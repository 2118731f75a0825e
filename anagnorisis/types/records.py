"""
Tree change records.

A batch delivered by the host is a sequence of these records. Each record is
a frozen snapshot of one mutation; the union is discriminated by ``kind`` so
consumers can switch exhaustively instead of probing attributes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, ClassVar, Sequence, Union

if TYPE_CHECKING:
    from anagnorisis.interfaces.host import TreeNode


class ChangeKind(str, Enum):
    """Discriminant for the change record union."""

    CHILD_LIST = "childList"
    ATTRIBUTES = "attributes"
    CHARACTER_DATA = "characterData"


@dataclass(frozen=True, eq=False)
class ChildListChange:
    """Children were inserted into or removed from ``target``."""

    kind: ClassVar[ChangeKind] = ChangeKind.CHILD_LIST

    target: TreeNode | None = None
    added_nodes: tuple[TreeNode, ...] = field(default_factory=tuple)
    removed_nodes: tuple[TreeNode, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        # Hosts often hand over lists; keep the snapshot immutable.
        object.__setattr__(self, "added_nodes", tuple(self.added_nodes))
        object.__setattr__(self, "removed_nodes", tuple(self.removed_nodes))


@dataclass(frozen=True, eq=False)
class AttributeChange:
    """Attribute ``attribute_name`` of ``target`` was set or removed."""

    kind: ClassVar[ChangeKind] = ChangeKind.ATTRIBUTES

    target: TreeNode
    attribute_name: str


@dataclass(frozen=True, eq=False)
class TextChange:
    """The character data of text node ``target`` changed."""

    kind: ClassVar[ChangeKind] = ChangeKind.CHARACTER_DATA

    target: TreeNode


ChangeRecord = Union[ChildListChange, AttributeChange, TextChange]

# One delivery from the host, in the order the host observed the mutations.
ChangeBatch = Sequence[ChangeRecord]
