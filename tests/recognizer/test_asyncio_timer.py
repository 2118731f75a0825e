"""
Recognizers on a live asyncio loop.

The hub flushes itself on the next loop iteration and delayed delivery
goes through AsyncioTimer.
"""

import asyncio

import pytest

from anagnorisis.config import RecognizerSettings
from anagnorisis.host import Document, Element, MutationHub
from anagnorisis.patterns import Pattern, Shape
from anagnorisis.recognizer import AsyncioTimer, MutationRecognizer


@pytest.fixture
def settings():
    return RecognizerSettings(default_delay_ms=5)


async def _attached_anchor():
    document = Document(hub=MutationHub(loop=asyncio.get_running_loop()))
    anchor = document.create_element("section", {"id": "root"})
    document.root.append_child(anchor)
    return document, anchor


class TestAsyncioTimer:
    """Tests for the loop-backed timer."""

    @pytest.mark.asyncio
    async def test_runs_callback_after_delay(self):
        timer = AsyncioTimer()
        fired = asyncio.get_running_loop().create_future()

        timer.schedule_after(1, lambda: fired.set_result(True))

        assert await asyncio.wait_for(fired, timeout=1.0) is True

    @pytest.mark.asyncio
    async def test_handle_cancels(self):
        calls = []
        handle = AsyncioTimer().schedule_after(1, lambda: calls.append(1))

        handle.cancel()
        await asyncio.sleep(0.02)

        assert calls == []

    @pytest.mark.asyncio
    async def test_injected_loop_is_used(self):
        loop = asyncio.get_running_loop()
        assert AsyncioTimer(loop=loop).loop is loop

    def test_reused_across_event_loops(self):
        timer = AsyncioTimer()

        async def fire():
            fired = asyncio.get_running_loop().create_future()
            timer.schedule_after(1, lambda: fired.set_result(True))
            return await asyncio.wait_for(fired, timeout=1.0)

        assert asyncio.run(fire()) is True
        assert asyncio.run(fire()) is True


class TestRecognizerOnLoop:
    """End-to-end delivery without manual flushing."""

    @pytest.mark.asyncio
    async def test_one_shot_auto_flush(self, settings):
        document, anchor = await _attached_anchor()
        recognizer = MutationRecognizer(
            Pattern(anchor=anchor, added_shape=Shape("div")), document.hub, settings=settings
        )
        matched = asyncio.get_running_loop().create_future()
        recognizer.observe_until_match(matched.set_result)

        div = document.create_element("div")
        anchor.append_child(div)

        assert await asyncio.wait_for(matched, timeout=1.0) is div
        assert document.hub.subscription_count == 0

    @pytest.mark.asyncio
    async def test_delayed_delivery(self, settings):
        document, anchor = await _attached_anchor()
        recognizer = MutationRecognizer(
            Pattern(anchor=anchor, watched_attribute="open"), document.hub, settings=settings
        )
        matched = asyncio.get_running_loop().create_future()
        session = recognizer.observe_until_match_delayed(matched.set_result)

        anchor.set_attribute("open", "")
        await asyncio.sleep(0)
        assert session.is_pending is True

        handle = await asyncio.wait_for(matched, timeout=1.0)
        assert handle.owner is anchor
        assert handle.name == "open"

    @pytest.mark.asyncio
    async def test_cancel_pending_delivery(self, settings):
        document, anchor = await _attached_anchor()
        recognizer = MutationRecognizer(
            Pattern(anchor=anchor, added_shape=Shape("div")), document.hub, settings=settings
        )
        seen = []
        session = recognizer.observe_until_match_delayed(seen.append)

        anchor.append_child(Element("div"))
        await asyncio.sleep(0)
        assert session.is_pending is True
        session.cancel()

        await asyncio.sleep(0.03)
        assert seen == []
