"""
Duel Engine - Turn-based card game engine

An in-memory engine for two-seat card duels against a bot opponent.
It provides:
- Match state with per-player zones and a fixed phase cycle
- Validated, tagged player actions
- Deck import from text or deck-building sites
- Bot policies that play out their own turns
"""

__version__ = "0.1.0"
