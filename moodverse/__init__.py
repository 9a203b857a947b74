"""
moodverse - Scripture for the way you feel.

This package maps a chosen mood to a random matching verse from a static
corpus, and keeps favorites, a daily visit streak and the theme preference
across visits. The session is served over HTTP with a Server-Sent Events
stream of state snapshots.
"""

__version__ = "0.1.0"
