"""
Durable user preferences: favorites, visit streak and theme.

Each preference lives under its own key and is read and written on its own,
so a corrupt or missing value only resets that one preference. Storage
failures never leave this module; they are logged and the affected value
falls back to its default (reads) or is dropped (writes).
"""

import json
import logging
from collections.abc import Callable
from datetime import date
from pathlib import Path
from typing import Any, Protocol, TypeVar

from pydantic import TypeAdapter, ValidationError

from .models import Preferences, QuoteRecord
from .streak import advance

logger = logging.getLogger(__name__)

FAVORITES_KEY = "favorites"
STREAK_KEY = "streak"
LAST_VISIT_KEY = "lastVisit"
DARK_MODE_KEY = "darkMode"

T = TypeVar("T")


class PreferenceReadError(Exception):
    """The backend could not be read."""


class PreferenceWriteError(Exception):
    """The backend could not be written."""


class InvalidDateState(ValueError):
    """A stored visit date does not parse."""


# MARK: - Backends


class PreferenceBackend(Protocol):
    """Raw string key-value storage. Each call is a single access."""

    def read(self, key: str) -> str | None: ...

    def write(self, key: str, raw: str) -> None: ...


class MemoryBackend:
    """Dict-backed storage that lasts as long as the process."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.data: dict[str, str] = dict(initial or {})

    def read(self, key: str) -> str | None:
        return self.data.get(key)

    def write(self, key: str, raw: str) -> None:
        self.data[key] = raw


class FileBackend:
    """One JSON document per key inside ``directory``."""

    def __init__(self, directory: Path | str) -> None:
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def read(self, key: str) -> str | None:
        path = self._path(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            raise PreferenceReadError(f"Could not read {path}: {e}") from e

    def write(self, key: str, raw: str) -> None:
        path = self._path(key)
        tmp = path.with_suffix(".tmp")
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            tmp.write_text(raw, encoding="utf-8")
            tmp.replace(path)
        except OSError as e:
            raise PreferenceWriteError(f"Could not write {path}: {e}") from e


# MARK: - Store

_favorites_adapter = TypeAdapter(list[QuoteRecord])


def _parse_favorites(value: Any) -> list[QuoteRecord]:
    favorites = _favorites_adapter.validate_python(value)
    # Stored lists written by older clients may contain duplicates.
    seen: set[tuple[str, str]] = set()
    unique = []
    for record in favorites:
        if record.identity not in seen:
            seen.add(record.identity)
            unique.append(record)
    return unique


def _parse_streak(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(f"Invalid streak value: {value!r}")
    return value


def _parse_last_visit(value: Any) -> date:
    if not isinstance(value, str):
        raise InvalidDateState(f"Invalid visit date: {value!r}")
    try:
        return date.fromisoformat(value)
    except ValueError as e:
        raise InvalidDateState(f"Invalid visit date: {value!r}") from e


def _parse_dark_mode(value: Any) -> bool:
    if not isinstance(value, bool):
        raise ValueError(f"Invalid darkMode value: {value!r}")
    return value


class PreferenceStore:
    """
    Fail-soft access to persisted preferences.

    The store keeps no cache: every read and write goes to the backend, so
    two sessions sharing a backend see each other's writes (last writer wins).
    """

    def __init__(self, backend: PreferenceBackend) -> None:
        self.backend = backend

    def _read(self, key: str, parse: Callable[[Any], T], default: T) -> T:
        try:
            raw = self.backend.read(key)
        except PreferenceReadError as e:
            logger.warning("Preference %r unavailable, using default: %s", key, e)
            return default

        if raw is None:
            return default

        try:
            return parse(json.loads(raw))
        except InvalidDateState as e:
            logger.warning("Ignoring stored %r: %s", key, e)
            return default
        except (json.JSONDecodeError, ValidationError, ValueError) as e:
            logger.warning("Preference %r is corrupt, using default: %s", key, e)
            return default

    def load(self) -> Preferences:
        """
        Read every preference, substituting defaults key by key.

        Returns:
            The stored preferences; never raises
        """
        return Preferences(
            favorites=self._read(FAVORITES_KEY, _parse_favorites, []),
            streak=self._read(STREAK_KEY, _parse_streak, 0),
            last_visit=self._read(LAST_VISIT_KEY, _parse_last_visit, None),
            dark_mode=self._read(DARK_MODE_KEY, _parse_dark_mode, False),
        )

    def save(self, key: str, value: Any) -> bool:
        """
        Serialise ``value`` as JSON and store it under ``key``.

        Returns:
            Whether the write succeeded. Failures are logged, not raised.
        """
        try:
            raw = json.dumps(value, ensure_ascii=False)
            self.backend.write(key, raw)
        except (PreferenceWriteError, TypeError, ValueError) as e:
            logger.warning("Could not save preference %r: %s", key, e)
            return False
        return True

    # MARK: Favorites

    def favorites(self) -> list[QuoteRecord]:
        return self._read(FAVORITES_KEY, _parse_favorites, [])

    def is_favorite(self, record: QuoteRecord) -> bool:
        return any(fav.identity == record.identity for fav in self.favorites())

    def toggle_favorite(self, record: QuoteRecord) -> list[QuoteRecord]:
        """
        Remove ``record`` from favorites if present, otherwise append it.

        Returns:
            The updated favorites list (returned even if the write failed)
        """
        favorites = self.favorites()
        remaining = [fav for fav in favorites if fav.identity != record.identity]
        if len(remaining) == len(favorites):
            remaining.append(record)

        self.save(
            FAVORITES_KEY,
            [fav.model_dump(mode="json", by_alias=True) for fav in remaining],
        )
        return remaining

    # MARK: Theme

    def set_dark_mode(self, enabled: bool) -> None:
        self.save(DARK_MODE_KEY, enabled)

    # MARK: Streak

    def record_visit(self, today: date) -> Preferences:
        """
        Update the visit streak for a visit on ``today``.

        Returns:
            Preferences reflecting the new streak
        """
        prefs = self.load()
        update = advance(prefs.last_visit, today, prefs.streak)
        if update.last_visit is not None and update.streak < 1:
            # A recorded visit counts as at least a one-day streak.
            update = update._replace(streak=1)
        if (update.streak, update.last_visit) == (prefs.streak, prefs.last_visit):
            return prefs

        logger.debug(
            "Visit on %s: streak %d -> %d", today, prefs.streak, update.streak
        )
        self.save(STREAK_KEY, update.streak)
        if update.last_visit != prefs.last_visit:
            self.save(LAST_VISIT_KEY, update.last_visit.isoformat())

        return prefs.model_copy(
            update={"streak": update.streak, "last_visit": update.last_visit}
        )
