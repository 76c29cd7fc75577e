"""
API Module - Browser client interface.

Exposes the engine over REST and a WebSocket. A client:
1. Creates a match (or joins one) and keeps its session token
2. Sends actions; the bot's turn is played out automatically
3. Receives public state updates broadcast to the whole match

All state is in memory and match-scoped. No persistent user accounts.
"""

from .schemas import (
    # Requests
    ActionRequest,
    CreateMatchRequest,
    DeckPreviewRequest,
    JoinMatchRequest,
    # Responses
    ActionResponse,
    DeckPreviewResponse,
    EndMatchResponse,
    ErrorResponse,
    HealthResponse,
    MatchListResponse,
    MatchResponse,
    # Shared
    CardInfo,
    ErrorCode,
    PrivateView,
    PublicPlayer,
    PublicState,
)
from .service import MatchService
from .app import create_app

__all__ = [
    # Requests
    "ActionRequest",
    "CreateMatchRequest",
    "DeckPreviewRequest",
    "JoinMatchRequest",
    # Responses
    "ActionResponse",
    "DeckPreviewResponse",
    "EndMatchResponse",
    "ErrorResponse",
    "HealthResponse",
    "MatchListResponse",
    "MatchResponse",
    # Shared
    "CardInfo",
    "ErrorCode",
    "PrivateView",
    "PublicPlayer",
    "PublicState",
    # Service
    "MatchService",
    "create_app",
]
