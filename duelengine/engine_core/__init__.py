"""
Engine Core - In-memory turn/zone state machine.

The engine:
1. Holds per-match state (players, zones, phase cursor, turn counter)
2. Validates and applies tagged actions via the reducer
3. Advances phases and handles turn boundaries
4. Projects a public view that never leaks hidden zones
"""

from .action import Action, ActionPayload, ActionResult, ActionType
from .cards import (
    BOT_DECK_LIST,
    CATALOG,
    Card,
    CardTemplate,
    Permanent,
    create_deck_from_names,
    placeholder_card,
    shuffle_cards,
    starter_deck,
)
from .errors import (
    BotDecisionTimeout,
    CardNotInHand,
    DeckImportFailed,
    EngineError,
    LandLimitReached,
    MalformedMessage,
    MatchNotFound,
    NotALand,
    PlayerNotFound,
    UnknownActionType,
    WrongPhase,
)
from .phases import advance_phase
from .reducer import Reducer
from .state import ManaPool, MatchState, Phase, PlayerState, PHASE_ORDER

__all__ = [
    "Action",
    "ActionPayload",
    "ActionResult",
    "ActionType",
    "BOT_DECK_LIST",
    "CATALOG",
    "Card",
    "CardTemplate",
    "Permanent",
    "create_deck_from_names",
    "placeholder_card",
    "shuffle_cards",
    "starter_deck",
    "BotDecisionTimeout",
    "CardNotInHand",
    "DeckImportFailed",
    "EngineError",
    "LandLimitReached",
    "MalformedMessage",
    "MatchNotFound",
    "NotALand",
    "PlayerNotFound",
    "UnknownActionType",
    "WrongPhase",
    "advance_phase",
    "Reducer",
    "ManaPool",
    "MatchState",
    "Phase",
    "PlayerState",
    "PHASE_ORDER",
]
