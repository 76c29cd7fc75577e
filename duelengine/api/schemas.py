"""
Pydantic Schemas for API - Request/response models for OpenAPI.

Game state travels in the camelCase shape the clients already consume
(handCount, commandZone, manaCost...), so the state models declare
aliases and are emitted by alias.

Error Codes:
- PLAYER_NOT_FOUND: Session token does not own a seat in the match
- MATCH_NOT_FOUND: Match does not exist or was evicted
- UNKNOWN_ACTION_TYPE: Action tag outside the supported set
- CARD_NOT_IN_HAND / LAND_LIMIT_REACHED / WRONG_PHASE / NOT_A_LAND:
  Rule violations, nothing was changed
- DECK_IMPORT_FAILED: Deck could not be resolved
- BOT_DECISION_TIMEOUT: The bot took too long to decide
"""

from enum import Enum
from typing import Optional, Any
from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Enums
# =============================================================================

class ErrorCode(str, Enum):
    """Structured error codes."""
    PLAYER_NOT_FOUND = "PLAYER_NOT_FOUND"
    MATCH_NOT_FOUND = "MATCH_NOT_FOUND"
    UNKNOWN_ACTION_TYPE = "UNKNOWN_ACTION_TYPE"
    CARD_NOT_IN_HAND = "CARD_NOT_IN_HAND"
    LAND_LIMIT_REACHED = "LAND_LIMIT_REACHED"
    WRONG_PHASE = "WRONG_PHASE"
    NOT_A_LAND = "NOT_A_LAND"
    DECK_IMPORT_FAILED = "DECK_IMPORT_FAILED"
    BOT_DECISION_TIMEOUT = "BOT_DECISION_TIMEOUT"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class Starter(str, Enum):
    """Starter decks a human can sit down with."""
    A = "A"
    B = "B"


# =============================================================================
# State Models
# =============================================================================

class CardInfo(BaseModel):
    """A visible card (battlefield, graveyard, command zone or own hand)."""
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    type: str = ""
    mana_cost: str | int = Field(0, alias="manaCost")
    power: int | str = 0
    toughness: int | str = 0
    colors: list[str] = Field(default_factory=list)
    image: Optional[str] = None
    is_commander: bool = Field(False, alias="isCommander")
    tapped: Optional[bool] = None


class PublicPlayer(BaseModel):
    """A seat as every client sees it: hand is a count only."""
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    life: int
    hand_count: int = Field(alias="handCount")
    battlefield: list[CardInfo] = Field(default_factory=list)
    graveyard: list[CardInfo] = Field(default_factory=list)
    command_zone: list[CardInfo] = Field(default_factory=list, alias="commandZone")


class PublicState(BaseModel):
    """The sanitized match projection broadcast to every client."""
    id: str
    phase: str
    turn: int
    players: list[PublicPlayer] = Field(default_factory=list)
    stack: list[Any] = Field(default_factory=list)


class PrivateView(BaseModel):
    """What only the owning session may see."""
    model_config = ConfigDict(populate_by_name=True)

    player_id: str = Field(alias="playerId")
    hand: list[CardInfo] = Field(default_factory=list)
    library_count: int = Field(alias="libraryCount")
    lands_played_this_turn: int = Field(0, alias="landsPlayedThisTurn")
    is_active: bool = Field(False, alias="isActive")


# =============================================================================
# Request Models
# =============================================================================

class CreateMatchRequest(BaseModel):
    """Request to create a match against the bot."""
    player_name: str = Field("Player", min_length=1, max_length=64)


class JoinMatchRequest(BaseModel):
    """Request to take a human seat in an existing match."""
    player_name: str = Field("Player", min_length=1, max_length=64)
    starter: Starter = Starter.A


class ActionRequest(BaseModel):
    """
    A player action in wire form.

    Example:
        {"type": "play-land", "cardId": "forest_3f2a9c01b2d4"}
    """
    model_config = ConfigDict(populate_by_name=True)

    type: str = Field(description="shuffle, draw, play-land, cast, pass, import-deck")
    card_id: Optional[str] = Field(None, alias="cardId")
    count: int = Field(1, ge=1)
    deck_text: Optional[str] = Field(None, alias="deckText")
    deck_url: Optional[str] = Field(None, alias="deckUrl")

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class DeckPreviewRequest(BaseModel):
    """Resolve a decklist without touching any match."""
    model_config = ConfigDict(populate_by_name=True)

    deck_text: Optional[str] = Field(None, alias="deckText")
    deck_url: Optional[str] = Field(None, alias="deckUrl")


# =============================================================================
# Response Models
# =============================================================================

class MatchResponse(BaseModel):
    """Returned when a seat is created (new match or join)."""
    match_id: str
    player_id: str
    session_token: str = Field(description="Send as X-Session-Token on actions")
    state: PublicState
    you: PrivateView


class ActionResponse(BaseModel):
    """Outcome of one player action plus any bot turns it triggered."""
    match_id: str
    success: bool = True
    state_changes: list[str] = Field(default_factory=list)
    bot_actions: list[dict[str, Any]] = Field(default_factory=list)
    state: PublicState
    you: Optional[PrivateView] = None


class MatchListResponse(BaseModel):
    """List of live matches."""
    matches: list[str]
    count: int


class EndMatchResponse(BaseModel):
    """Response when ending a match."""
    success: bool
    match_id: str


class DeckPreviewResponse(BaseModel):
    """First cards of an imported deck, plus analysis."""
    name: Optional[str] = None
    source: str
    total_cards: int
    sideboard_count: int = 0
    commander: Optional[CardInfo] = None
    cards: list[CardInfo] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    validation_errors: list[str] = Field(default_factory=list)


class ErrorResponse(BaseModel):
    """Standard error response."""
    success: bool = False
    error: str
    error_code: ErrorCode
    details: Optional[dict[str, Any]] = None


class HealthResponse(BaseModel):
    """Health check response."""
    status: str = "healthy"
    service: str = "duelengine"
    version: str
    matches: int = 0
