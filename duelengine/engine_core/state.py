"""
Match State - Player zones, counters and the match-level cursors.

Design principles:
- Mutable in place: the dispatcher mutates state under the match lock
- Zones are plain ordered lists; the library's tail is the top of the deck
- The public projection never includes library or hand contents
"""

from __future__ import annotations
from copy import deepcopy
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .cards import Card, Permanent


class Phase(Enum):
    """Turn phases, in cyclic order."""
    UNTAP = "untap"
    UPKEEP = "upkeep"
    DRAW = "draw"
    MAIN1 = "main1"
    COMBAT = "combat"
    MAIN2 = "main2"
    END = "end"


PHASE_ORDER: list[Phase] = list(Phase)
MAIN_PHASES = frozenset({Phase.MAIN1, Phase.MAIN2})

STARTING_LIFE = 20
OPENING_HAND_SIZE = 7
LANDS_PER_TURN = 1


@dataclass
class ManaPool:
    """
    Floating mana.

    Nothing fills or spends it yet; kept so a rules layer has a place
    to put mana without changing the player shape.
    """
    total: int = 0
    colors: dict[str, int] = field(
        default_factory=lambda: {"white": 0, "blue": 0, "black": 0, "red": 0, "green": 0}
    )

    def to_dict(self) -> dict[str, Any]:
        return {"total": self.total, "colors": dict(self.colors)}


@dataclass
class PlayerState:
    """
    All zones and counters belonging to one seat.

    session_id is None for bot seats and for disconnected humans.
    """
    player_id: str
    name: str
    is_human: bool = True
    session_id: str | None = None
    life: int = STARTING_LIFE

    library: list[Card] = field(default_factory=list)
    hand: list[Card] = field(default_factory=list)
    battlefield: list[Permanent] = field(default_factory=list)
    graveyard: list[Card] = field(default_factory=list)
    command_zone: list[Card] = field(default_factory=list)

    # Tracked but not consumed by any rule yet
    commander_tax: int = 0
    mana_pool: ManaPool = field(default_factory=ManaPool)

    lands_played_this_turn: int = 0

    def find_in_hand(self, card_id: str) -> int:
        """Index of card_id in hand, or -1."""
        for i, card in enumerate(self.hand):
            if card.card_id == card_id:
                return i
        return -1

    def draw(self, count: int = 1) -> list[Card]:
        """
        Move up to count cards from the top of the library to hand.

        A short library yields fewer cards; this is not a loss.
        """
        drawn = []
        for _ in range(count):
            if not self.library:
                break
            card = self.library.pop()
            self.hand.append(card)
            drawn.append(card)
        return drawn

    @property
    def card_count(self) -> int:
        """Cards across every zone owned by this seat."""
        return (
            len(self.library)
            + len(self.hand)
            + len(self.battlefield)
            + len(self.graveyard)
            + len(self.command_zone)
        )

    def to_public_dict(self) -> dict[str, Any]:
        """Projection safe to show opponents: no library, no hand contents."""
        return {
            "id": self.player_id,
            "name": self.name,
            "life": self.life,
            "handCount": len(self.hand),
            "battlefield": [p.to_dict() for p in self.battlefield],
            "graveyard": [c.to_dict() for c in self.graveyard],
            "commandZone": [c.to_dict() for c in self.command_zone],
        }


@dataclass
class MatchState:
    """
    The mutable state of one match.

    stack is declared for a future priority system and is never filled.
    """
    match_id: str
    players: list[PlayerState] = field(default_factory=list)
    active_player_idx: int = 0
    phase: Phase = Phase.UNTAP
    turn: int = 1
    stack: list[Any] = field(default_factory=list)

    @property
    def active_player(self) -> PlayerState | None:
        if not self.players:
            return None
        return self.players[self.active_player_idx]

    @property
    def num_players(self) -> int:
        return len(self.players)

    def get_player(self, player_id: str) -> PlayerState | None:
        """Get player by ID."""
        for p in self.players:
            if p.player_id == player_id:
                return p
        return None

    def find_player_by_session(self, session_id: str | None) -> PlayerState | None:
        """Resolve a transport session to its seat. None never matches."""
        if session_id is None:
            return None
        for p in self.players:
            if p.session_id is not None and p.session_id == session_id:
                return p
        return None

    def clone(self) -> MatchState:
        """Deep copy the state."""
        return deepcopy(self)

    def to_public_dict(self) -> dict[str, Any]:
        return {
            "id": self.match_id,
            "phase": self.phase.value,
            "turn": self.turn,
            "players": [p.to_public_dict() for p in self.players],
            "stack": list(self.stack),
        }
