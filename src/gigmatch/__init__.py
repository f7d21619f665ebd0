"""gigmatch - Match live events to a listener's music taste.

Infers a taste profile from listening history (artists and genre "vibes"),
searches ticketing sources near the listener and ranks the events that fit.
"""

from .cli import main

__all__ = ["main"]
