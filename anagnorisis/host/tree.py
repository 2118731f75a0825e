"""In-memory document tree.

A deliberately small element/text tree with DOM-like mutation methods.
Every mutation of a node owned by a Document is reported to the
document's MutationHub as a change record, which makes the tree a complete
host for recognizers in tests, replays and headless harnesses.

    doc = Document()
    panel = doc.create_element("section", {"id": "panel"})
    doc.root.append_child(panel)
    panel.append_child(doc.create_element("div", {"class": "row open"}))
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import Any

from anagnorisis.constants import CLASS_ATTRIBUTE
from anagnorisis.types.core import NodeType
from anagnorisis.types.errors import ErrorCode, ValidationError
from anagnorisis.types.records import AttributeChange, ChangeRecord, ChildListChange, TextChange

from .hub import MutationHub


class Node:
    """Base class for tree nodes."""

    node_type: NodeType

    def __init__(self) -> None:
        self.parent: Element | None = None
        self.owner_document: Document | None = None

    @property
    def local_name(self) -> str | None:
        return None

    @property
    def child_nodes(self) -> tuple[Node, ...]:
        return ()

    @property
    def text_content(self) -> str:
        return ""

    @property
    def class_list(self) -> frozenset[str]:
        return frozenset()

    def get_attribute(self, name: str) -> str | None:
        return None

    def _notify(self, record: ChangeRecord) -> None:
        if self.owner_document is not None:
            self.owner_document.hub.record(record)

    def _adopt(self, document: Document | None) -> None:
        self.owner_document = document


class Text(Node):
    """A text node."""

    node_type = NodeType.TEXT

    def __init__(self, data: str = "") -> None:
        super().__init__()
        self._data = data

    @property
    def data(self) -> str:
        return self._data

    @data.setter
    def data(self, value: str) -> None:
        self._data = value
        self._notify(TextChange(target=self))

    @property
    def text_content(self) -> str:
        return self._data

    def __repr__(self) -> str:
        return f"Text({self._data!r})"


class Element(Node):
    """An element with attributes and ordered children."""

    node_type = NodeType.ELEMENT

    def __init__(
        self,
        local_name: str,
        attributes: Mapping[str, str] | None = None,
        children: tuple[Node, ...] | list[Node] = (),
    ) -> None:
        super().__init__()
        self._local_name = local_name
        self._attributes: dict[str, str] = dict(attributes or {})
        self._children: list[Node] = []
        for child in children:
            self._attach(child)

    # -- Read access ---------------------------------------------------

    @property
    def local_name(self) -> str:
        return self._local_name

    @property
    def attributes(self) -> Mapping[str, str]:
        return dict(self._attributes)

    @property
    def id(self) -> str | None:
        return self._attributes.get("id")

    @property
    def class_list(self) -> frozenset[str]:
        return frozenset(self._attributes.get(CLASS_ATTRIBUTE, "").split())

    @property
    def child_nodes(self) -> tuple[Node, ...]:
        return tuple(self._children)

    @property
    def text_content(self) -> str:
        return "".join(node.data for node in self.iter_descendants() if isinstance(node, Text))

    def get_attribute(self, name: str) -> str | None:
        return self._attributes.get(name)

    def iter_descendants(self) -> Iterator[Node]:
        """All descendants in document order (pre-order), excluding self."""
        stack = list(reversed(self._children))
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.child_nodes))

    def contains(self, node: Node | None) -> bool:
        """True if ``node`` is this element or one of its descendants."""
        while node is not None:
            if node is self:
                return True
            node = node.parent
        return False

    # -- Mutation ------------------------------------------------------

    def set_attribute(self, name: str, value: str) -> None:
        self._attributes[name] = value
        self._notify(AttributeChange(target=self, attribute_name=name))

    def remove_attribute(self, name: str) -> None:
        if name in self._attributes:
            del self._attributes[name]
            self._notify(AttributeChange(target=self, attribute_name=name))

    def append_child(self, node: Node) -> Node:
        return self.insert_before(node, None)

    def insert_before(self, node: Node, reference: Node | None) -> Node:
        """Insert ``node`` before ``reference`` (append when None)."""
        if isinstance(node, Element) and node.contains(self):
            raise ValueError("cannot insert an ancestor into its own subtree")
        if reference is not None and reference.parent is not self:
            raise ValueError("reference node is not a child of this element")
        if reference is node:
            index = self._children.index(node) + 1
            reference = self._children[index] if index < len(self._children) else None
        if node.parent is not None:
            node.parent.remove_child(node)

        self._attach(node, reference)
        self._notify(ChildListChange(target=self, added_nodes=(node,)))
        return node

    def remove_child(self, node: Node) -> Node:
        if node.parent is not self:
            raise ValueError("node is not a child of this element")

        self._children.remove(node)
        node.parent = None
        self._notify(ChildListChange(target=self, removed_nodes=(node,)))
        return node

    def remove(self) -> None:
        """Detach this element from its parent, if any."""
        if self.parent is not None:
            self.parent.remove_child(self)

    def _attach(self, node: Node, reference: Node | None = None) -> None:
        index = len(self._children) if reference is None else self._children.index(reference)
        self._children.insert(index, node)
        node.parent = self
        node._adopt(self.owner_document)

    def _adopt(self, document: Document | None) -> None:
        self.owner_document = document
        for node in self.iter_descendants():
            node.owner_document = document

    # -- Declarative form ----------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"tag": self._local_name}
        if self._attributes:
            data["attributes"] = dict(self._attributes)
        if self._children:
            data["children"] = [
                child.to_dict() if isinstance(child, Element) else child.text_content
                for child in self._children
            ]
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | str) -> Node:
        """Build a detached node from ``{"tag", "attributes", "children", "text"}``.

        A plain string builds a text node.

        Raises:
            ValidationError: If the node spec is malformed.
        """
        if isinstance(data, str):
            return Text(data)
        if not isinstance(data, Mapping) or not isinstance(data.get("tag"), str):
            raise ValidationError(
                f"node spec must be a string or an object with a 'tag', got {data!r}",
                user_message="Invalid node in trace.",
                code=ErrorCode.INVALID_TRACE,
            )

        children = [cls.from_dict(child) for child in data.get("children") or ()]
        if data.get("text"):
            children.append(Text(data["text"]))
        return cls(data["tag"], data.get("attributes") or {}, children)

    def __repr__(self) -> str:
        return f"Element({self._local_name!r}, {self._attributes!r})"


class Document:
    """Owner of a tree; routes mutations of owned nodes to its hub."""

    def __init__(self, hub: MutationHub | None = None, root_tag: str = "html") -> None:
        self.hub = hub or MutationHub()
        self.root = self.adopt(Element(root_tag))

    def create_element(
        self,
        local_name: str,
        attributes: Mapping[str, str] | None = None,
        *children: Node | str,
    ) -> Element:
        """Create an owned element; string children become text nodes."""
        nodes = [Text(child) if isinstance(child, str) else child for child in children]
        return self.adopt(Element(local_name, attributes, nodes))

    def create_text(self, data: str) -> Text:
        return self.adopt(Text(data))

    def adopt(self, node):
        """Make ``node`` (and its subtree) report mutations to this document."""
        node._adopt(self)
        return node
