"""Change matcher base class.

A matcher turns one batch of change records into at most one result: the
first record that satisfies the pattern wins and the rest of the batch is
not examined.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable

from anagnorisis.types.core import MatchResult
from anagnorisis.types.records import ChangeBatch


class ChangeMatcher(ABC):
    """Abstract base class for change matchers.

    Implementations must provide:
    - match(): First match in a batch, or None
    - describe(): Diagnostic summary for logs
    """

    @abstractmethod
    def match(self, batch: ChangeBatch) -> MatchResult | None:
        """Find the first match in a batch of change records.

        Args:
            batch: Records in the order the host observed them.

        Returns:
            The matched node or attribute handle, or None.
        """
        pass

    @abstractmethod
    def describe(self) -> str:
        """Describe the pattern for diagnostics. Must never raise."""
        pass

    def first_match(
        self,
        batches: Iterable[ChangeBatch],
    ) -> tuple[int, MatchResult] | None:
        """Match successive batches until one yields a result.

        Args:
            batches: Batches in delivery order.

        Returns:
            (batch index, result) for the first matching batch, or None.
        """
        for index, batch in enumerate(batches):
            result = self.match(batch)
            if result is not None:
                return index, result
        return None
