"""
Session host for the moodverse service.

This module owns the single mutable reference to the session state. It runs
actions through the pure transition function, persists favorites, streak and
theme through the preference store after the transitions that touch them, and
streams state snapshots to any number of subscribers.
"""

import asyncio
import logging
import random
from collections.abc import AsyncGenerator, Callable, Sequence
from contextlib import asynccontextmanager
from datetime import date

from .models import Mode, QuoteRecord, SessionState, SessionView
from .preferences import PreferenceStore
from .session import (
    Action,
    Back,
    CloseFavorites,
    CommitNext,
    OpenFavorites,
    RequestNext,
    SelectMood,
    transition,
)

logger = logging.getLogger(__name__)


class SessionHost:
    """
    Holds one user session and notifies subscribers of every change.

    Actions run one at a time under an asyncio condition. The only action that
    yields control mid-way is ``request_next``, which waits ``transition_delay``
    seconds between drawing a quote and showing it; further ``request_next``
    calls during that window are ignored.
    """

    def __init__(
        self,
        corpus: Sequence[QuoteRecord],
        preferences: PreferenceStore,
        *,
        rng: random.Random | None = None,
        transition_delay: float = 0.3,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.corpus = corpus
        self.preferences = preferences
        self._rng = rng or random.Random()
        self._transition_delay = transition_delay
        self._today = today
        self._state = SessionState()
        self._condition = asyncio.Condition()
        self._update_counter = 0  # Simple counter to detect updates
        self._started = False

    @property
    def state(self) -> SessionState:
        return self._state

    async def start(self) -> SessionView:
        """
        Record today's visit. Only the first call per session has an effect.

        Returns:
            The current session view
        """
        async with self._condition:
            if not self._started:
                self._started = True
                self.preferences.record_visit(self._today())
                self._notify()
            return self._view()

    async def select_mood(self, key: str) -> bool:
        """
        Pick a mood and show a quote for it.

        Returns:
            False if the selection was refused (no quote for that mood)
        """
        async with self._condition:
            return self._apply(SelectMood(key=key))

    async def request_next(self) -> bool:
        """
        Replace the current quote with a new draw for the same mood.

        Returns:
            False if the request was ignored
        """
        async with self._condition:
            if not self._apply(RequestNext()):
                return False

        await asyncio.sleep(self._transition_delay)

        async with self._condition:
            self._apply(CommitNext())
        return True

    async def back(self) -> bool:
        async with self._condition:
            return self._apply(Back())

    async def open_favorites(self) -> bool:
        async with self._condition:
            return self._apply(OpenFavorites())

    async def close_favorites(self) -> bool:
        async with self._condition:
            return self._apply(CloseFavorites())

    async def toggle_favorite(self) -> bool | None:
        """
        Add or remove the displayed quote from favorites.

        Returns:
            The new favorite flag, or None when no quote is displayed
        """
        async with self._condition:
            quote = self._state.current_quote
            if self._state.mode is not Mode.QUOTE_VIEW or quote is None:
                return None
            favorites = self.preferences.toggle_favorite(quote)
            self._notify()
            return any(fav.identity == quote.identity for fav in favorites)

    async def set_dark_mode(self, enabled: bool) -> None:
        async with self._condition:
            self.preferences.set_dark_mode(enabled)
            self._notify()

    async def read(self) -> SessionView:
        """Get the current session view."""
        async with self._condition:
            return self._view()

    @asynccontextmanager
    async def stream(self) -> AsyncGenerator[AsyncGenerator[SessionView, None], None]:
        """
        Stream session views to a subscriber.

        Yields:
            An async generator producing the current view, then one view per
            change
        """

        async def view_generator() -> AsyncGenerator[SessionView, None]:
            async with self._condition:
                last_seen_counter = self._update_counter
                yield self._view()

            try:
                while True:
                    async with self._condition:
                        await self._condition.wait_for(
                            lambda: self._update_counter > last_seen_counter
                        )
                        last_seen_counter = self._update_counter
                        yield self._view()

            except (asyncio.CancelledError, GeneratorExit):
                # Client disconnected or generator closed, clean exit
                return

        yield view_generator()

    # MARK: - Private Helpers

    def _apply(self, action: Action) -> bool:
        """Run one transition; must be called with the condition held."""
        new_state = transition(self._state, action, self.corpus, self._rng)
        if new_state is self._state:
            logger.debug("Ignored %s in mode %s", type(action).__name__, new_state.mode)
            return False

        self._state = new_state
        self._notify()
        return True

    def _notify(self) -> None:
        self._update_counter += 1
        self._condition.notify_all()

    def _view(self) -> SessionView:
        prefs = self.preferences.load()
        quote = self._state.current_quote
        is_favorite = quote is not None and any(
            fav.identity == quote.identity for fav in prefs.favorites
        )
        return SessionView(
            mode=self._state.mode,
            active_mood=self._state.active_mood,
            current_quote=quote,
            is_transitioning=self._state.is_transitioning,
            is_favorite=is_favorite,
            favorites=prefs.favorites,
            streak=prefs.streak,
            dark_mode=prefs.dark_mode,
        )
