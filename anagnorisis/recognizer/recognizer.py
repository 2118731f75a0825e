"""Mutation recognizer: pattern matching wired to a subscription lifecycle.

Test drivers use a recognizer when they expect a specific change (e.g. an
element being created) and want to wait for it:

    recognizer = MutationRecognizer.from_dict(
        {"target": panel, "addedChildTag": {"name": "div", "attributes": {"class": "row"}}},
        notifier=hub,
    )
    recognizer.observe_until_match(lambda node: check_row(node))
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from anagnorisis.config import RecognizerSettings
from anagnorisis.interfaces.host import ChangeNotifier, Timer
from anagnorisis.patterns.mutation_matcher import MutationMatcher
from anagnorisis.patterns.pattern import Pattern
from anagnorisis.types.errors import ErrorCode, ErrorContext, ValidationError

from .config import SubscriptionConfig, derive_subscription_config
from .session import DeliveryMode, MatchHandler, RecognizerSession
from .timers import AsyncioTimer


class MutationRecognizer:
    """Recognize one declared change below an anchor node.

    Each ``observe*`` call starts an independent RecognizerSession; the
    returned session is the handle used to cancel it.
    """

    def __init__(
        self,
        pattern: Pattern,
        notifier: ChangeNotifier,
        timer: Timer | None = None,
        settings: RecognizerSettings | None = None,
    ):
        self.target = pattern.anchor
        self.matcher = MutationMatcher(pattern)
        self.notifier = notifier
        self.settings = settings or RecognizerSettings.from_env()
        self._timer = timer

    @classmethod
    def from_dict(
        cls,
        config: Mapping[str, Any],
        notifier: ChangeNotifier,
        timer: Timer | None = None,
        settings: RecognizerSettings | None = None,
    ) -> MutationRecognizer:
        """Build a recognizer from the declarative pattern form."""
        settings = settings or RecognizerSettings.from_env()
        pattern = Pattern.from_dict(config, strict=settings.strict_patterns)
        return cls(pattern, notifier, timer=timer, settings=settings)

    @property
    def pattern(self) -> Pattern:
        return self.matcher.pattern

    @property
    def timer(self) -> Timer:
        if self._timer is None:
            self._timer = AsyncioTimer()
        return self._timer

    def describe(self) -> str:
        """Pattern description for logs."""
        return self.matcher.describe()

    def subscription_config(self) -> SubscriptionConfig:
        """Minimal change kinds the host must report for this pattern."""
        return derive_subscription_config(self.pattern)

    def observe(self, handler: MatchHandler) -> RecognizerSession:
        """Call ``handler`` for every batch that matches, until cancelled."""
        return self._start(handler, DeliveryMode.RAW)

    def observe_until_match(self, handler: MatchHandler) -> RecognizerSession:
        """Call ``handler`` once, synchronously, with the first match.

        The subscription is released before the handler runs.
        """
        return self._start(handler, DeliveryMode.ONCE)

    def observe_until_match_delayed(
        self,
        handler: MatchHandler,
        delay_ms: int | None = None,
    ) -> RecognizerSession:
        """Call ``handler`` once, ``delay_ms`` after the first match.

        The subscription is released as soon as the match is found. A falsy
        delay falls back to the configured default (10 ms unless overridden).

        Raises:
            ValidationError: If ``delay_ms`` is negative.
        """
        if not delay_ms:
            delay_ms = self.settings.default_delay_ms
        if delay_ms < 0:
            raise ValidationError(
                f"delay_ms must be non-negative, got {delay_ms}",
                user_message="Invalid recognizer delay.",
                code=ErrorCode.INVALID_ARGS,
                context=ErrorContext(
                    operation="observe_until_match_delayed",
                    component="recognizer",
                    pattern=self.describe(),
                ),
            )
        return self._start(handler, DeliveryMode.DELAYED, delay_ms)

    def _start(self, handler: MatchHandler, mode: DeliveryMode, delay_ms: int = 0) -> RecognizerSession:
        session = RecognizerSession(
            self.matcher,
            handler,
            mode=mode,
            timer=self.timer if mode is DeliveryMode.DELAYED else None,
            delay_ms=delay_ms,
        )
        return session.start(self.notifier, self.target, self.subscription_config())
