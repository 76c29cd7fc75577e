"""
Engine Errors - Validation failures raised while applying actions.

None of these are fatal. The transport layer reports them to the acting
client only; other players never see them and the match carries on.
"""

from __future__ import annotations


class EngineError(Exception):
    """Base class. error_code is stable and safe to send over the wire."""
    error_code = "ENGINE_ERROR"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message())

    def default_message(self) -> str:
        return self.error_code.replace("_", " ").capitalize()


class PlayerNotFound(EngineError):
    error_code = "PLAYER_NOT_FOUND"

    def default_message(self) -> str:
        return "Player not found"


class UnknownActionType(EngineError):
    error_code = "UNKNOWN_ACTION_TYPE"


class CardNotInHand(EngineError):
    """Also raised when a racing action already moved the card."""
    error_code = "CARD_NOT_IN_HAND"

    def default_message(self) -> str:
        return "Card not in hand"


class LandLimitReached(EngineError):
    error_code = "LAND_LIMIT_REACHED"

    def default_message(self) -> str:
        return "Already played a land this turn"


class WrongPhase(EngineError):
    error_code = "WRONG_PHASE"

    def default_message(self) -> str:
        return "Can only play lands during main phase"


class NotALand(EngineError):
    error_code = "NOT_A_LAND"

    def default_message(self) -> str:
        return "Card is not a land"


class DeckImportFailed(EngineError):
    error_code = "DECK_IMPORT_FAILED"


class MatchNotFound(EngineError):
    error_code = "MATCH_NOT_FOUND"

    def default_message(self) -> str:
        return "Match not found"


class BotDecisionTimeout(EngineError):
    error_code = "BOT_DECISION_TIMEOUT"


class MalformedMessage(EngineError):
    """A wire message or action that is not shaped like one."""
    error_code = "VALIDATION_ERROR"

    def default_message(self) -> str:
        return "Malformed message"
