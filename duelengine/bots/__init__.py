"""
Bots module - Decision components for non-human seats.

Provides:
- BotPolicy: Interface consulted once per bot turn
- PassPolicy: Passes the turn straight through
- HeuristicBot: Plays a land and a spell, then passes
- RandomPolicy: Seeded random plays
"""

from .policy import BotPolicy, HeuristicBot, PassPolicy, RandomPolicy

__all__ = [
    "BotPolicy",
    "HeuristicBot",
    "PassPolicy",
    "RandomPolicy",
]
