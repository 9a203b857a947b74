"""
Shared data models for the moodverse service.

This module defines the core domain models used across multiple layers
of the application (selection logic, session state, persistence, API, CLI).
"""

from datetime import date
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class QuoteRecord(BaseModel):
    """A single scripture record from the corpus."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    mood: str = Field(..., description="Raw mood label as written in the corpus")
    primary_text: str = Field(..., alias="arabic", description="Original passage")
    translation_a: str = Field(..., alias="english", description="English text")
    translation_b: str = Field(..., alias="bangla", description="Bangla text")
    citation: str = Field(..., alias="reference", description="Surah/hadith ref")
    source: str = Field("", description="Quran, Hadith, ...")

    @property
    def identity(self) -> tuple[str, str]:
        """Key used to deduplicate and locate favorites."""
        return (self.primary_text, self.citation)


class MoodTheme(BaseModel):
    """Colour classes for one appearance of a mood."""

    model_config = ConfigDict(frozen=True)

    color: str
    gradient: str


class CanonicalMood(BaseModel):
    """One of the fixed mood categories offered in the picker."""

    model_config = ConfigDict(frozen=True)

    key: str = Field(..., description="Canonical key matched against the corpus")
    label: str = Field(..., description="Short display label")
    icon: str = Field(..., description="Emoji shown on the mood button")
    light: MoodTheme
    dark: MoodTheme


class Mode(str, Enum):
    PICKER = "picker"
    QUOTE_VIEW = "quote_view"
    FAVORITES = "favorites"


class SessionState(BaseModel):
    """Transient per-session state, replaced on every transition."""

    model_config = ConfigDict(frozen=True)

    mode: Mode = Mode.PICKER
    active_mood: CanonicalMood | None = None
    current_quote: QuoteRecord | None = None
    pending_quote: QuoteRecord | None = None
    is_transitioning: bool = False


class Preferences(BaseModel):
    """Values that survive process restarts."""

    favorites: list[QuoteRecord] = Field(default_factory=list)
    streak: int = Field(0, ge=0)
    last_visit: date | None = None
    dark_mode: bool = False


class SessionView(BaseModel):
    """Everything the presentation layer needs to render the session."""

    mode: Mode
    active_mood: CanonicalMood | None = None
    current_quote: QuoteRecord | None = None
    is_transitioning: bool = False
    is_favorite: bool = False
    favorites: list[QuoteRecord] = Field(default_factory=list)
    streak: int = 0
    dark_mode: bool = False
