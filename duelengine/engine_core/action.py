"""
Action System - Actions, payloads, and results.

The set of action types is closed. The only place an unknown tag can
appear is a malformed wire message, and Action.from_wire rejects it
before it reaches the dispatcher.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .errors import MalformedMessage, UnknownActionType


class ActionType(Enum):
    """Types of actions a seat can take."""
    SHUFFLE = "shuffle"
    DRAW = "draw"
    PLAY_LAND = "play-land"
    CAST = "cast"
    PASS = "pass"
    IMPORT_DECK = "import-deck"


@dataclass
class ActionPayload:
    """
    Parameters for an action.

    Different action types read different fields; the reducer
    validates what it needs.
    """
    card_id: str | None = None
    count: int = 1

    # For deck import
    deck_text: str | None = None
    deck_url: str | None = None


@dataclass
class Action:
    """A single tagged action to apply to a match."""
    action_type: ActionType
    payload: ActionPayload = field(default_factory=ActionPayload)

    @classmethod
    def shuffle(cls) -> Action:
        return cls(action_type=ActionType.SHUFFLE)

    @classmethod
    def draw(cls, count: int = 1) -> Action:
        return cls(action_type=ActionType.DRAW, payload=ActionPayload(count=count))

    @classmethod
    def play_land(cls, card_id: str) -> Action:
        return cls(action_type=ActionType.PLAY_LAND, payload=ActionPayload(card_id=card_id))

    @classmethod
    def cast(cls, card_id: str) -> Action:
        return cls(action_type=ActionType.CAST, payload=ActionPayload(card_id=card_id))

    @classmethod
    def pass_priority(cls) -> Action:
        return cls(action_type=ActionType.PASS)

    @classmethod
    def import_deck(cls, deck_text: str | None = None, deck_url: str | None = None) -> Action:
        return cls(
            action_type=ActionType.IMPORT_DECK,
            payload=ActionPayload(deck_text=deck_text, deck_url=deck_url),
        )

    @classmethod
    def from_wire(cls, data: dict[str, Any]) -> Action:
        """
        Parse a wire message like {"type": "draw", "count": 2}.

        Raises MalformedMessage if data is not an object and
        UnknownActionType for any tag outside ActionType.
        """
        if not isinstance(data, dict):
            raise MalformedMessage("Action must be a JSON object")
        tag = data.get("type")
        try:
            action_type = ActionType(tag)
        except ValueError:
            raise UnknownActionType(f"Unknown action type: {tag}")

        count = data.get("count") or 1
        try:
            count = int(count)
        except (TypeError, ValueError):
            count = 1

        return cls(
            action_type=action_type,
            payload=ActionPayload(
                card_id=data.get("cardId"),
                count=count,
                deck_text=data.get("deckText"),
                deck_url=data.get("deckUrl"),
            ),
        )

    def to_wire(self) -> dict[str, Any]:
        data: dict[str, Any] = {"type": self.action_type.value}
        if self.payload.card_id is not None:
            data["cardId"] = self.payload.card_id
        if self.action_type == ActionType.DRAW:
            data["count"] = self.payload.count
        if self.payload.deck_text is not None:
            data["deckText"] = self.payload.deck_text
        if self.payload.deck_url is not None:
            data["deckUrl"] = self.payload.deck_url
        return data


@dataclass
class ActionResult:
    """
    Outcome of a successfully applied action.

    Failures are raised as EngineError subclasses instead.
    """
    action: Action
    player_id: str
    state_changes: list[str] = field(default_factory=list)
