"""Recognizer sessions.

A session is one activation of a recognizer: it holds the host
subscription, runs the matcher on every delivered batch and hands the match
to the handler. One-shot sessions release the subscription on the first
match; delayed sessions additionally defer the handler through the host
timer.

State machine:

    IDLE -> SUBSCRIBED -> MATCHED      (one-shot / delayed match)
                       -> CANCELLED    (cancel before a match)
            MATCHED (delivery pending) -> CANCELLED

The subscription is released on every transition out of SUBSCRIBED.
Cancellation of a pending delayed delivery does not rely on the host
timer: the timer callback re-checks the session's live flag.
"""

from __future__ import annotations

from enum import Enum
from typing import Callable

from anagnorisis.interfaces.host import ChangeNotifier, SubscriptionHandle, Timer, TimerHandle
from anagnorisis.patterns.matcher import ChangeMatcher
from anagnorisis.types.core import MatchResult
from anagnorisis.types.errors import ErrorContext, SubscriptionError
from anagnorisis.types.records import ChangeBatch
from anagnorisis.utils.logger import generate_session_id, session_logger
from anagnorisis.utils.serialization import describe_node

from .config import SubscriptionConfig

MatchHandler = Callable[[MatchResult], None]


class SessionState(str, Enum):
    """Lifecycle states of a recognizer session."""

    IDLE = "idle"
    SUBSCRIBED = "subscribed"
    MATCHED = "matched"
    CANCELLED = "cancelled"


class DeliveryMode(str, Enum):
    """How a session hands matches to its handler."""

    RAW = "raw"  # every matching batch, stays subscribed
    ONCE = "once"  # first match, synchronously
    DELAYED = "delayed"  # first match, after a timer delay


class RecognizerSession:
    """One subscribe-to-match (or cancel) activation of a recognizer."""

    def __init__(
        self,
        matcher: ChangeMatcher,
        handler: MatchHandler,
        mode: DeliveryMode = DeliveryMode.ONCE,
        timer: Timer | None = None,
        delay_ms: int = 0,
    ):
        if mode is DeliveryMode.DELAYED and timer is None:
            raise ValueError("delayed delivery needs a timer")

        self.session_id = generate_session_id()
        self.matcher = matcher
        self.handler = handler
        self.mode = mode
        self.delay_ms = delay_ms

        self._timer = timer
        self._state = SessionState.IDLE
        self._live = False
        self._pending = False
        self._result: MatchResult | None = None
        self._deliveries = 0
        self._subscription: SubscriptionHandle | None = None
        self._timer_handle: TimerHandle | None = None
        self._log = session_logger(self.session_id)

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def result(self) -> MatchResult | None:
        """The (last) match, once one was found."""
        return self._result

    @property
    def deliveries(self) -> int:
        """Number of times the handler was invoked."""
        return self._deliveries

    @property
    def is_subscribed(self) -> bool:
        """True while the host subscription is held."""
        return self._subscription is not None

    @property
    def is_pending(self) -> bool:
        """True between match detection and a delayed handler call."""
        return self._pending

    @property
    def is_active(self) -> bool:
        """True while the handler can still be invoked."""
        return self._live and (self._state is SessionState.SUBSCRIBED or self._pending)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self, notifier: ChangeNotifier, target, config: SubscriptionConfig) -> RecognizerSession:
        """Subscribe to ``target`` and wait for batches.

        Raises:
            SubscriptionError: If the host rejects the subscription.
        """
        if self._state is not SessionState.IDLE:
            raise RuntimeError(f"session {self.session_id} already started")

        if config.is_empty:
            self._log.warning(
                "Pattern {} requests no change kinds; session will never match",
                self.matcher.describe(),
            )

        self._state = SessionState.SUBSCRIBED
        self._live = True
        try:
            subscription = notifier.subscribe(target, config, self._on_batch)
        except Exception as e:
            self._state = SessionState.CANCELLED
            self._live = False
            raise SubscriptionError(
                f"subscribe on {describe_node(target)} failed: {e}",
                context=ErrorContext(
                    operation="subscribe",
                    component="recognizer",
                    pattern=self.matcher.describe(),
                    additional_info={"config": config.to_dict()},
                ),
                original_error=e,
            ) from e

        # The host may have delivered (and we may have matched) during subscribe().
        if self._state is SessionState.SUBSCRIBED:
            self._subscription = subscription
        else:
            subscription.cancel()

        self._log.debug(
            "Subscribed on {} with {} ({})",
            describe_node(target),
            config.to_dict(),
            self.mode.value,
        )
        return self

    def cancel(self) -> None:
        """Stop watching and suppress any pending delivery. Idempotent."""
        if not self._live:
            return

        self._live = False
        self._release()

        if self._pending:
            self._pending = False
            if self._timer_handle is not None:
                cancel = getattr(self._timer_handle, "cancel", None)
                if callable(cancel):
                    cancel()
            self._state = SessionState.CANCELLED
            self._log.debug("Cancelled with delayed delivery pending")
        elif self._state in (SessionState.IDLE, SessionState.SUBSCRIBED):
            self._state = SessionState.CANCELLED
            self._log.debug("Cancelled before a match")

    # ------------------------------------------------------------------
    # Delivery
    # ------------------------------------------------------------------

    def _release(self) -> None:
        subscription, self._subscription = self._subscription, None
        if subscription is not None:
            subscription.cancel()

    def _on_batch(self, batch: ChangeBatch) -> None:
        if not self._live or self._state is not SessionState.SUBSCRIBED:
            return

        result = self.matcher.match(batch)
        if result is None:
            self._log.debug("No match in batch of {} records", len(batch))
            return

        self._result = result
        self._log.debug("Matched {}", describe_node(result))

        if self.mode is DeliveryMode.RAW:
            self._invoke(result)
            return

        self._state = SessionState.MATCHED
        self._release()

        if self.mode is DeliveryMode.ONCE:
            self._live = False
            self._invoke(result)
            return

        self._pending = True
        self._timer_handle = self._timer.schedule_after(self.delay_ms, self._deliver_delayed)

    def _deliver_delayed(self) -> None:
        if not self._live or not self._pending:
            self._log.debug("Delayed delivery suppressed")
            return

        self._pending = False
        self._live = False
        self._log.debug("Delivering after {} ms", self.delay_ms)
        self._invoke(self._result)

    def _invoke(self, result: MatchResult) -> None:
        self._deliveries += 1
        self.handler(result)
