"""Shape search over added and removed nodes.

Candidates are tested in list order. For added nodes the whole subtree of
each node is searched pre-order (a node before its descendants, siblings in
document order) with an explicit stack, so deep trees cannot exhaust the
interpreter stack. Nodes are read in their current state and never mutated.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence

from anagnorisis.constants import CLASS_ATTRIBUTE
from anagnorisis.interfaces.host import TreeNode
from anagnorisis.types.core import NodeType

from .pattern import Shape


def _is_element(node: TreeNode) -> bool:
    return getattr(node, "node_type", None) == NodeType.ELEMENT


def attributes_satisfied(node: TreeNode, shape: Shape) -> bool:
    """Check every attribute constraint of ``shape`` against ``node``.

    ``class`` is satisfied when the node carries all required class tokens
    (containment, not string equality); every other attribute must be
    present with exactly the required value.
    """
    for name, required in shape.attributes.items():
        value = node.get_attribute(name)
        if value is None:
            return False

        if name == CLASS_ATTRIBUTE:
            tokens = required.split()
            if not set(tokens).issubset(node.class_list):
                return False
        elif value != required:
            return False

    return True


def shape_matches(node: TreeNode, shape: Shape, text: str | None = None) -> bool:
    """Check a single node: element, tag, attributes and optional text."""
    if not _is_element(node):
        return False
    if not shape.is_wildcard and node.local_name != shape.name:
        return False
    if not attributes_satisfied(node, shape):
        return False
    if text is not None and text not in (node.text_content or ""):
        return False
    return True


def iter_subtree(root: TreeNode) -> Iterator[TreeNode]:
    """Yield ``root`` and its element descendants in pre-order."""
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        # Snapshot children: the tree may keep changing under us.
        children = tuple(getattr(node, "child_nodes", None) or ())
        stack.extend(child for child in reversed(children) if _is_element(child))


def find_matching_node(
    nodes: Sequence[TreeNode],
    shape: Shape,
    text: str | None = None,
    deep: bool = True,
) -> TreeNode | None:
    """Return the first node in ``nodes`` (or their subtrees) matching ``shape``.

    Args:
        nodes: Added or removed nodes from a child-list change.
        shape: Tag and attribute constraints.
        text: Substring the candidate's text content must contain.
        deep: Also search each node's descendants.

    Returns:
        The first match in list order, pre-order within a subtree, or None.
    """
    if not nodes:
        return None

    for node in nodes:
        if not _is_element(node):
            continue

        candidates = iter_subtree(node) if deep else (node,)
        for candidate in candidates:
            if shape_matches(candidate, shape, text):
                return candidate

    return None
