"""
Session Module - Live matches and the registry that owns them.

A match lives in memory from creation until it is ended or evicted for
idleness. There is no persistence.
"""

from .game_loop import GameLoop, TurnResult
from .manager import MatchRegistry
from .match import Match

__all__ = [
    "GameLoop",
    "TurnResult",
    "MatchRegistry",
    "Match",
]
