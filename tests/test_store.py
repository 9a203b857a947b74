"""
Tests for the SessionHost implementation.

These tests verify the session host end to end: actions, persistence after
transitions, the next-verse debounce and streaming of session views.
"""

import asyncio
import random
from datetime import date

from moodverse.corpus import Corpus
from moodverse.models import Mode, QuoteRecord
from moodverse.preferences import MemoryBackend, PreferenceStore
from moodverse.store import SessionHost


def make_record(mood: str, text: str) -> QuoteRecord:
    return QuoteRecord(
        mood=mood,
        primary_text=text,
        translation_a="en",
        translation_b="bn",
        citation=f"ref {text}",
    )


CORPUS = Corpus(
    [
        make_record("Anxious", "a1"),
        make_record("Anxious", "a2"),
        make_record("anger", "g1"),
    ]
)


class TestSessionHost:
    """Test suite for SessionHost functionality."""

    def setup_method(self):
        """Set up a fresh host with in-memory preferences for each test."""
        self.backend = MemoryBackend()
        self.host = SessionHost(
            CORPUS,
            PreferenceStore(self.backend),
            rng=random.Random(5),
            transition_delay=0.05,
            today=lambda: date(2026, 3, 1),
        )

    async def test_initial_state(self):
        """A new session starts in the picker with default preferences."""
        view = await self.host.read()
        assert view.mode is Mode.PICKER
        assert view.current_quote is None
        assert view.favorites == []
        assert view.streak == 0
        assert view.dark_mode is False

    async def test_start_records_visit_once(self):
        """Starting the session counts today's visit exactly once."""
        self.backend.data["streak"] = "2"
        self.backend.data["lastVisit"] = '"2026-02-28"'

        view = await self.host.start()
        assert view.streak == 3

        view = await self.host.start()
        assert view.streak == 3

    async def test_select_and_back(self):
        """Selecting a mood shows a quote; back returns to the picker."""
        assert await self.host.select_mood("anger") is True
        view = await self.host.read()
        assert view.mode is Mode.QUOTE_VIEW
        assert view.active_mood.key == "anger"
        assert view.current_quote.primary_text == "g1"

        assert await self.host.back() is True
        view = await self.host.read()
        assert view.mode is Mode.PICKER
        assert view.active_mood is None

    async def test_select_without_quotes_is_refused(self):
        assert await self.host.select_mood("comfort") is False
        assert (await self.host.read()).mode is Mode.PICKER

    async def test_request_next_debounce(self):
        """A second request while the first is pending is ignored."""
        await self.host.select_mood("Anxious")

        first = asyncio.create_task(self.host.request_next())
        await asyncio.sleep(0.01)
        assert self.host.state.is_transitioning is True
        pending = self.host.state

        # Issue a second request mid-transition
        assert await self.host.request_next() is False
        assert self.host.state is pending

        assert await first is True
        view = await self.host.read()
        assert view.is_transitioning is False
        assert view.current_quote == pending.pending_quote

    async def test_toggle_favorite(self):
        """Toggling updates the favorite flag immediately."""
        assert await self.host.toggle_favorite() is None

        await self.host.select_mood("anger")
        assert await self.host.toggle_favorite() is True
        view = await self.host.read()
        assert view.is_favorite is True
        assert [fav.primary_text for fav in view.favorites] == ["g1"]

        assert await self.host.toggle_favorite() is False
        view = await self.host.read()
        assert view.is_favorite is False
        assert view.favorites == []

    async def test_favorites_view(self):
        """Favorites can be opened from a quote and closed to the picker."""
        await self.host.select_mood("anger")
        await self.host.toggle_favorite()

        assert await self.host.open_favorites() is True
        view = await self.host.read()
        assert view.mode is Mode.FAVORITES
        assert len(view.favorites) == 1
        # Toggling is only offered while a quote is displayed
        assert await self.host.toggle_favorite() is None

        assert await self.host.close_favorites() is True
        assert (await self.host.read()).mode is Mode.PICKER

    async def test_dark_mode(self):
        await self.host.set_dark_mode(True)
        assert (await self.host.read()).dark_mode is True
        assert self.backend.data["darkMode"] == "true"

    async def test_streaming(self):
        """Test that two consumers receive streaming session views."""
        consumer1_modes = []
        consumer2_modes = []

        async def consumer(received):
            async with self.host.stream() as view_stream:
                async for view in view_stream:
                    received.append(view.mode)
                    if len(received) >= 3:  # picker + 2 updates
                        break

        # Start both consumers
        task1 = asyncio.create_task(consumer(consumer1_modes))
        task2 = asyncio.create_task(consumer(consumer2_modes))

        # Let them set up
        await asyncio.sleep(0.01)

        await self.host.select_mood("anger")
        await asyncio.sleep(0.01)  # Small delay between updates
        await self.host.open_favorites()

        try:
            await asyncio.wait_for(asyncio.gather(task1, task2), timeout=2.0)
        except TimeoutError:
            task1.cancel()
            task2.cancel()
            await asyncio.gather(task1, task2, return_exceptions=True)
            assert False, (
                f"Test timed out. Consumer1 got: {consumer1_modes}, "
                f"Consumer2 got: {consumer2_modes}"
            )

        expected = [Mode.PICKER, Mode.QUOTE_VIEW, Mode.FAVORITES]
        assert consumer1_modes == expected
        assert consumer2_modes == expected

    async def test_ignored_actions_do_not_notify(self):
        """Refused actions produce no stream event."""
        received = []

        async def consumer():
            async with self.host.stream() as view_stream:
                async for view in view_stream:
                    received.append(view.mode)
                    if len(received) >= 2:
                        break

        task = asyncio.create_task(consumer())
        await asyncio.sleep(0.01)

        await self.host.back()  # no-op in picker
        await self.host.select_mood("comfort")  # no quotes
        await self.host.select_mood("Anxious")

        await asyncio.wait_for(task, timeout=2.0)
        assert received == [Mode.PICKER, Mode.QUOTE_VIEW]

    async def test_favorites_opened_during_transition(self):
        """The pending quote is never shown once favorites are open."""
        await self.host.select_mood("Anxious")
        shown = self.host.state.current_quote

        task = asyncio.create_task(self.host.request_next())
        await asyncio.sleep(0.01)
        await self.host.open_favorites()
        await task

        view = await self.host.read()
        assert view.mode is Mode.FAVORITES
        assert view.current_quote == shown
        assert view.is_transitioning is False
