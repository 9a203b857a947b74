"""
Canonical mood catalog and the resolver that maps corpus labels onto it.

Corpus labels are not perfectly normalised ("Feeling Sad", "anger" and
longer variants of both appear), so a raw label is matched against the
canonical keys by exact equality first and then by substring containment in
either direction. Containment is checked in declaration order and the first
hit wins, which makes the order of ``MOODS`` part of the matching contract.
"""

from collections.abc import Callable

from .models import CanonicalMood, MoodTheme


def _mood(
    key: str, label: str, icon: str, hue: str, light_to: str = "100"
) -> CanonicalMood:
    light_from = "50" if light_to == "100" else "100"
    return CanonicalMood(
        key=key,
        label=label,
        icon=icon,
        light=MoodTheme(
            color=f"text-{hue}-600",
            gradient=f"from-{hue}-{light_from} to-{hue}-{light_to}",
        ),
        dark=MoodTheme(
            color=f"text-{hue}-300",
            gradient=f"from-{hue}-950 to-{hue}-900",
        ),
    )


# Keys are spelled exactly as they appear in the corpus.
MOODS: tuple[CanonicalMood, ...] = (
    _mood("Anxious", "Anxious", "😰", "blue"),
    _mood("Happyness", "Happy", "😊", "yellow"),
    _mood("Gurding From Evil", "Protection", "🛡️", "purple"),
    _mood("Feeling Sad", "Sad", "😢", "indigo"),
    _mood("Pursuing Forgiveness", "Forgiveness", "🤲", "emerald"),
    _mood("Seeking Health", "Health", "🤒", "teal"),
    _mood("Depression", "Depressed", "🌧️", "slate", light_to="200"),
    _mood("intense desire or temptation", "Temptation", "🔥", "red"),
    _mood("comfort", "Need Comfort", "🛋️", "orange"),
    _mood(
        "confusion and uncertainty about the future",
        "Confused",
        "😕",
        "gray",
        light_to="200",
    ),
    _mood("anger", "Angry", "😠", "rose"),
)

DEFAULT_MOOD = MOODS[0]

_BY_KEY: dict[str, CanonicalMood] = {mood.key: mood for mood in MOODS}


def _contains_either_way(key: str) -> Callable[[str], bool]:
    return lambda raw: key in raw or raw in key


_PARTIAL_MATCHERS: tuple[tuple[CanonicalMood, Callable[[str], bool]], ...] = tuple(
    (mood, _contains_either_way(mood.key)) for mood in MOODS
)


def get_mood(key: str) -> CanonicalMood:
    """Exact lookup of a canonical mood. Raises KeyError for unknown keys."""
    return _BY_KEY[key]


def resolve(raw_key: str) -> CanonicalMood:
    """
    Map a possibly inexact mood label to a canonical mood.

    Args:
        raw_key: Mood label from the corpus or from a client

    Returns:
        The exact match, else the first partial match in declaration order,
        else ``DEFAULT_MOOD``
    """
    exact = _BY_KEY.get(raw_key)
    if exact is not None:
        return exact

    for mood, matches in _PARTIAL_MATCHERS:
        if matches(raw_key):
            return mood

    return DEFAULT_MOOD
