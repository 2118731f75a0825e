"""
MutationRecognizer tests.

These tests drive recognizers through the in-memory host:
- One-shot delivery and subscription release
- Delayed delivery on a manual clock, with cancellation
- Raw delivery of every matching batch
- Subscription failures and argument validation
"""

import pytest

from anagnorisis.config import RecognizerSettings
from anagnorisis.host import Element, Text
from anagnorisis.patterns import Pattern, Shape
from anagnorisis.recognizer import MutationRecognizer, SessionState
from anagnorisis.types import AttributeHandle, ChildListChange, ErrorCode, SubscriptionError, ValidationError


@pytest.fixture
def make_recognizer(hub, clock, settings):
    def factory(anchor, **criteria):
        return MutationRecognizer(Pattern(anchor=anchor, **criteria), hub, timer=clock, settings=settings)

    return factory


class TestObserveUntilMatch:
    """One-shot delivery."""

    def test_delivers_first_match_once(self, hub, anchor, make_recognizer):
        recognizer = make_recognizer(anchor, added_shape=Shape("div", {"class": "panel"}))
        seen = []
        session = recognizer.observe_until_match(seen.append)

        anchor.append_child(Element("span"))
        hub.flush()
        assert seen == []
        assert session.state is SessionState.SUBSCRIBED

        panel = Element("div", {"class": "panel open"})
        anchor.append_child(panel)
        hub.flush()

        assert seen == [panel]
        assert session.state is SessionState.MATCHED
        assert session.result is panel

        anchor.append_child(Element("div", {"class": "panel"}))
        hub.flush()
        assert seen == [panel]
        assert session.deliveries == 1

    def test_unsubscribes_before_handler_runs(self, hub, anchor, make_recognizer):
        recognizer = make_recognizer(anchor, added_shape=Shape("div"))
        counts = []
        recognizer.observe_until_match(lambda node: counts.append(hub.subscription_count))
        assert hub.subscription_count == 1

        anchor.append_child(Element("div"))
        hub.flush()

        assert counts == [0]
        assert hub.subscription_count == 0

    def test_mutation_inside_handler_does_not_redeliver(self, hub, anchor, make_recognizer):
        recognizer = make_recognizer(anchor, added_shape=Shape("div"))
        seen = []

        def handler(node):
            seen.append(node)
            anchor.append_child(Element("div"))

        recognizer.observe_until_match(handler)
        anchor.append_child(Element("div"))
        hub.flush()
        hub.flush()

        assert len(seen) == 1

    def test_first_record_in_batch_wins(self, hub, anchor, make_recognizer):
        recognizer = make_recognizer(anchor, added_shape=Shape("li"))
        seen = []
        recognizer.observe_until_match(seen.append)

        first, second = Element("li"), Element("li")
        anchor.append_child(first)
        anchor.append_child(second)
        hub.flush()

        assert seen == [first]

    def test_cancel_before_batch(self, hub, anchor, make_recognizer):
        recognizer = make_recognizer(anchor, added_shape=Shape("div"))
        seen = []
        session = recognizer.observe_until_match(seen.append)

        anchor.append_child(Element("div"))
        session.cancel()
        hub.flush()

        assert seen == []
        assert session.state is SessionState.CANCELLED
        assert hub.subscription_count == 0

    def test_is_active_until_match(self, hub, anchor, make_recognizer):
        session = make_recognizer(anchor, added_shape=Shape("div")).observe_until_match(lambda n: None)
        assert session.is_active is True

        anchor.append_child(Element("div"))
        hub.flush()

        assert session.is_active is False

    def test_cancel_is_idempotent(self, hub, anchor, make_recognizer):
        session = make_recognizer(anchor, added_shape=Shape("div")).observe_until_match(lambda n: None)

        session.cancel()
        session.cancel()

        assert session.state is SessionState.CANCELLED

    def test_cancel_after_match_keeps_state(self, hub, anchor, make_recognizer):
        session = make_recognizer(anchor, added_shape=Shape("div")).observe_until_match(lambda n: None)
        anchor.append_child(Element("div"))
        hub.flush()

        session.cancel()

        assert session.state is SessionState.MATCHED

    def test_changes_outside_anchor_ignored(self, document, hub, anchor, make_recognizer):
        seen = []
        make_recognizer(anchor, added_shape=Shape("div")).observe_until_match(seen.append)

        document.root.append_child(Element("div"))
        hub.flush()

        assert seen == []

    def test_removed_shape(self, hub, anchor, make_recognizer):
        spinner = Element("div", {"class": "spinner"})
        anchor.append_child(spinner)
        hub.flush()
        seen = []
        make_recognizer(anchor, removed_shape=Shape("div", {"class": "spinner"})).observe_until_match(seen.append)

        spinner.remove()
        hub.flush()

        assert seen == [spinner]

    def test_watched_attribute(self, hub, anchor, make_recognizer):
        seen = []
        make_recognizer(anchor, watched_attribute="aria-busy").observe_until_match(seen.append)

        anchor.set_attribute("class", "loading")
        anchor.set_attribute("aria-busy", "false")
        hub.flush()

        assert seen == [AttributeHandle(anchor, "aria-busy")]
        assert seen[0].value == "false"

    def test_watched_text_below_anchor(self, hub, anchor, make_recognizer):
        label = Text("Loading")
        anchor.append_child(Element("p", children=[label]))
        hub.flush()
        seen = []
        make_recognizer(anchor, watched_text="Done").observe_until_match(seen.append)

        label.data = "Almost"
        hub.flush()
        label.data = "Done"
        hub.flush()

        assert seen == [label]

    def test_independent_sessions(self, hub, anchor, make_recognizer):
        recognizer = make_recognizer(anchor, added_shape=Shape("div"))
        first, second = [], []
        cancelled = recognizer.observe_until_match(first.append)
        recognizer.observe_until_match(second.append)
        cancelled.cancel()

        anchor.append_child(Element("div"))
        hub.flush()

        assert first == []
        assert len(second) == 1


class TestObserveUntilMatchDelayed:
    """Delayed delivery on a manual clock."""

    def test_fires_after_default_delay(self, hub, clock, anchor, make_recognizer):
        seen = []
        session = make_recognizer(anchor, added_shape=Shape("div")).observe_until_match_delayed(seen.append)

        div = Element("div")
        anchor.append_child(div)
        hub.flush()

        assert seen == []
        assert session.is_pending is True
        assert hub.subscription_count == 0
        assert session.is_active is True

        clock.advance(9)
        assert seen == []
        clock.advance(1)
        assert seen == [div]
        assert session.is_pending is False
        assert session.is_active is False

        clock.advance(100)
        assert seen == [div]

    def test_explicit_delay(self, hub, clock, anchor, make_recognizer):
        seen = []
        make_recognizer(anchor, added_shape=Shape("div")).observe_until_match_delayed(seen.append, delay_ms=50)

        anchor.append_child(Element("div"))
        hub.flush()
        clock.advance(49)
        assert seen == []
        clock.advance(1)
        assert len(seen) == 1

    def test_zero_delay_uses_default(self, hub, clock, anchor, make_recognizer):
        session = make_recognizer(anchor, added_shape=Shape("div")).observe_until_match_delayed(
            lambda n: None, delay_ms=0
        )
        assert session.delay_ms == 10

    def test_default_from_settings(self, hub, clock, anchor):
        recognizer = MutationRecognizer(
            Pattern(anchor=anchor, added_shape=Shape("div")),
            hub,
            timer=clock,
            settings=RecognizerSettings(default_delay_ms=25),
        )
        assert recognizer.observe_until_match_delayed(lambda n: None).delay_ms == 25

    def test_negative_delay_rejected(self, anchor, make_recognizer):
        with pytest.raises(ValidationError) as exc_info:
            make_recognizer(anchor, added_shape=Shape("div")).observe_until_match_delayed(lambda n: None, -1)
        assert exc_info.value.code == ErrorCode.INVALID_ARGS

    def test_cancel_while_pending_suppresses_delivery(self, hub, clock, anchor, make_recognizer):
        seen = []
        session = make_recognizer(anchor, added_shape=Shape("div")).observe_until_match_delayed(seen.append)

        anchor.append_child(Element("div"))
        hub.flush()
        session.cancel()

        assert session.is_active is False
        assert clock.pending == 0
        assert clock.advance(10) == 0
        assert seen == []
        assert session.state is SessionState.CANCELLED

    def test_cancel_after_delivery_is_noop(self, hub, clock, anchor, make_recognizer):
        seen = []
        session = make_recognizer(anchor, added_shape=Shape("div")).observe_until_match_delayed(seen.append)
        anchor.append_child(Element("div"))
        hub.flush()
        clock.advance(10)

        session.cancel()

        assert len(seen) == 1
        assert session.state is SessionState.MATCHED

    def test_later_batches_ignored_while_pending(self, hub, clock, anchor, make_recognizer):
        seen = []
        make_recognizer(anchor, added_shape=Shape("div")).observe_until_match_delayed(seen.append)
        first = Element("div")
        anchor.append_child(first)
        hub.flush()
        anchor.append_child(Element("div"))
        hub.flush()

        clock.advance(10)

        assert seen == [first]

    def test_timer_without_cancel_still_suppressed(self, hub, anchor, settings):
        """A host timer whose handles cannot be cancelled is still safe."""
        scheduled = []

        class FireAndForget:
            def schedule_after(self, delay_ms, callback):
                scheduled.append(callback)
                return None

        seen = []
        recognizer = MutationRecognizer(
            Pattern(anchor=anchor, added_shape=Shape("div")), hub, timer=FireAndForget(), settings=settings
        )
        session = recognizer.observe_until_match_delayed(seen.append)
        anchor.append_child(Element("div"))
        hub.flush()
        session.cancel()

        scheduled[0]()

        assert seen == []


class TestObserve:
    """Raw delivery."""

    def test_every_matching_batch_delivered(self, hub, anchor, make_recognizer):
        seen = []
        session = make_recognizer(anchor, added_shape=Shape("div")).observe(seen.append)

        anchor.append_child(Element("div"))
        hub.flush()
        anchor.append_child(Element("p"))
        hub.flush()
        anchor.append_child(Element("div"))
        hub.flush()

        assert len(seen) == 2
        assert session.is_subscribed is True
        assert session.state is SessionState.SUBSCRIBED

        session.cancel()
        assert hub.subscription_count == 0


class TestSubscription:
    """Subscription derivation and host failures."""

    def test_empty_pattern_subscribes_but_never_matches(self, hub, anchor, make_recognizer):
        seen = []
        session = make_recognizer(anchor).observe_until_match(seen.append)

        anchor.append_child(Element("div"))
        anchor.set_attribute("open", "")
        hub.flush()

        assert session.is_subscribed is True
        assert seen == []

    def test_subscribe_failure_raises(self, anchor, settings):
        class BrokenNotifier:
            def subscribe(self, target, config, callback):
                raise RuntimeError("detached target")

        recognizer = MutationRecognizer(
            Pattern(anchor=anchor, added_shape=Shape("div")), BrokenNotifier(), settings=settings
        )

        with pytest.raises(SubscriptionError) as exc_info:
            recognizer.observe_until_match(lambda n: None)

        error = exc_info.value
        assert error.code == ErrorCode.SUBSCRIBE_FAILED
        assert isinstance(error.original_error, RuntimeError)
        assert error.context.additional_info["config"] == {"childList": True, "subtree": True}

    def test_match_during_subscribe_releases_handle(self, anchor, settings):
        """Hosts may deliver synchronously from subscribe()."""
        released = []
        div = Element("div")

        class EagerNotifier:
            def subscribe(self, target, config, callback):
                callback([ChildListChange(added_nodes=[div])])

                class Handle:
                    def cancel(self):
                        released.append(True)

                return Handle()

        seen = []
        recognizer = MutationRecognizer(
            Pattern(anchor=anchor, added_shape=Shape("div")), EagerNotifier(), settings=settings
        )
        session = recognizer.observe_until_match(seen.append)

        assert seen == [div]
        assert released == [True]
        assert session.is_subscribed is False

    def test_from_dict(self, hub, anchor, settings):
        recognizer = MutationRecognizer.from_dict(
            {"target": anchor, "changedAttribute": "open"}, hub, settings=settings
        )

        assert recognizer.target is anchor
        assert recognizer.subscription_config().to_dict() == {
            "attributes": True,
            "attributeFilter": ["open"],
        }

    def test_from_dict_strict_settings(self, hub, anchor):
        with pytest.raises(ValidationError):
            MutationRecognizer.from_dict(
                {"target": anchor, "addedChildTag": {"name": "p"}, "removedChildTag": {"name": "div"}},
                hub,
                settings=RecognizerSettings(strict_patterns=True),
            )
