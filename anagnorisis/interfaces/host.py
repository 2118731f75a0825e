"""Host interfaces consumed by the matcher and the recognizer.

The live document tree, its change-notification mechanism and the timer
facility belong to the host environment (a browser bridge, an in-memory
tree, a recorded trace). Anagnorisis only talks to them through these
protocols.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, AbstractSet, Callable, Protocol, Sequence, runtime_checkable

from anagnorisis.types.core import NodeType

if TYPE_CHECKING:
    from anagnorisis.recognizer.config import SubscriptionConfig
    from anagnorisis.types.records import ChangeBatch


@runtime_checkable
class TreeNode(Protocol):
    """A node of the observed document tree.

    Elements expose tag, attributes and children; text nodes expose
    ``text_content`` and an empty child list.
    """

    @property
    def node_type(self) -> NodeType:
        """ELEMENT or TEXT."""
        ...

    @property
    def local_name(self) -> str | None:
        """Tag name for elements, None for text nodes."""
        ...

    @property
    def child_nodes(self) -> Sequence[TreeNode]:
        """Current children in document order."""
        ...

    @property
    def text_content(self) -> str:
        """Concatenated text of the node and its descendants."""
        ...

    @property
    def class_list(self) -> AbstractSet[str]:
        """Class tokens of an element (empty for text nodes)."""
        ...

    def get_attribute(self, name: str) -> str | None:
        """Current value of an attribute, or None when it is absent."""
        ...


@runtime_checkable
class SubscriptionHandle(Protocol):
    """Handle returned by ChangeNotifier.subscribe()."""

    def cancel(self) -> None:
        """Stop delivery. Must be idempotent."""
        ...


BatchCallback = Callable[["ChangeBatch"], None]


@runtime_checkable
class ChangeNotifier(Protocol):
    """The host's change-notification mechanism (a MutationObserver analogue)."""

    def subscribe(
        self,
        target: TreeNode,
        config: SubscriptionConfig,
        callback: BatchCallback,
    ) -> SubscriptionHandle:
        """Start delivering batches of changes on ``target`` to ``callback``."""
        ...


class TimerHandle(Protocol):
    """Handle for a scheduled callback. ``cancel`` is best-effort."""

    def cancel(self) -> None:
        ...


@runtime_checkable
class Timer(Protocol):
    """The host timer facility."""

    def schedule_after(self, delay_ms: int, callback: Callable[[], None]) -> TimerHandle:
        """Run ``callback`` once, no earlier than ``delay_ms`` from now."""
        ...
