"""
Session state transitions.

``transition`` is a pure function of the current state and an action. It
never reads or writes preferences; the caller decides what to persist after
a transition.
"""

import random
from collections.abc import Sequence

from pydantic import BaseModel, ConfigDict

from .models import Mode, QuoteRecord, SessionState
from .moods import resolve
from .selector import NoMatchingQuote, select


# MARK: - Actions


class SelectMood(BaseModel):
    model_config = ConfigDict(frozen=True)

    key: str


class RequestNext(BaseModel):
    model_config = ConfigDict(frozen=True)


class CommitNext(BaseModel):
    model_config = ConfigDict(frozen=True)


class Back(BaseModel):
    model_config = ConfigDict(frozen=True)


class OpenFavorites(BaseModel):
    model_config = ConfigDict(frozen=True)


class CloseFavorites(BaseModel):
    model_config = ConfigDict(frozen=True)


Action = SelectMood | RequestNext | CommitNext | Back | OpenFavorites | CloseFavorites


# MARK: - Transitions


def transition(
    state: SessionState,
    action: Action,
    corpus: Sequence[QuoteRecord],
    rng: random.Random | None = None,
) -> SessionState:
    """
    Apply ``action`` to ``state``.

    Actions that do not apply in the current mode return ``state`` unchanged,
    as does a mood selection with no matching quote.

    Returns:
        The next state (the same object when nothing changed)
    """
    match action:
        case SelectMood(key=key) if state.mode is Mode.PICKER:
            mood = resolve(key)
            try:
                quote = select(mood, corpus, rng)
            except NoMatchingQuote:
                return state
            return SessionState(
                mode=Mode.QUOTE_VIEW, active_mood=mood, current_quote=quote
            )

        case RequestNext() if (
            state.mode is Mode.QUOTE_VIEW and not state.is_transitioning
        ):
            try:
                quote = select(state.active_mood, corpus, rng)
            except NoMatchingQuote:
                return state
            return state.model_copy(
                update={"pending_quote": quote, "is_transitioning": True}
            )

        case CommitNext() if (
            state.mode is Mode.QUOTE_VIEW and state.is_transitioning
        ):
            return state.model_copy(
                update={
                    "current_quote": state.pending_quote,
                    "pending_quote": None,
                    "is_transitioning": False,
                }
            )

        case Back() if state.mode is Mode.QUOTE_VIEW:
            return SessionState()

        case OpenFavorites() if state.mode in (Mode.PICKER, Mode.QUOTE_VIEW):
            return state.model_copy(
                update={
                    "mode": Mode.FAVORITES,
                    "pending_quote": None,
                    "is_transitioning": False,
                }
            )

        case CloseFavorites() if state.mode is Mode.FAVORITES:
            return SessionState()

    return state
