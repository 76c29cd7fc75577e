"""
API Service - Business logic layer between the transports and the engine.

The service:
1. Creates and joins matches, minting session tokens for human seats
2. Parses wire actions and drives them through the game loop
3. Previews decklists without touching any match
4. Evicts idle matches

This layer is framework-agnostic: the REST routes and the WebSocket
handler in app.py both call into it. Engine failures arrive either as a
raised EngineError (missing match, bad deck) or as a failed TurnResult.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any
import logging
import uuid

from ..config import Settings, get_settings
from ..deck_import import DeckImportError, DeckImportService, ImportedDeck
from ..engine_core.action import Action
from ..engine_core.errors import DeckImportFailed, EngineError, MatchNotFound
from ..engine_core.state import PlayerState
from ..session import GameLoop, Match, MatchRegistry, TurnResult

logger = logging.getLogger(__name__)

PREVIEW_SIZE = 20


def new_session_token() -> str:
    return uuid.uuid4().hex


@dataclass
class MatchService:
    """
    Main service behind the HTTP and WebSocket gateway.

    Usage:
        service = MatchService.from_settings()
        match, seat, token = service.create_match("Alice")
        result = await service.submit_action(match.match_id, token, {"type": "draw"})
    """
    registry: MatchRegistry
    deck_importer: DeckImportService
    settings: Settings = field(default_factory=get_settings)

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> MatchService:
        settings = settings or get_settings()
        importer = DeckImportService(settings=settings)
        registry = MatchRegistry(
            deck_importer=importer,
            bot_decision_timeout=settings.bot_decision_timeout_seconds,
        )
        return cls(registry=registry, deck_importer=importer, settings=settings)

    # =========================================================================
    # Matches
    # =========================================================================

    def get_match(self, match_id: str) -> Match:
        match = self.registry.get_match(match_id) if isinstance(match_id, str) else None
        if match is None:
            raise MatchNotFound(f"Match {match_id} not found")
        return match

    def create_match(
        self,
        player_name: str,
        session_id: str | None = None,
    ) -> tuple[Match, PlayerState, str]:
        """New match with the caller in seat 0 and the bot in seat 1."""
        token = session_id or new_session_token()
        match = self.registry.create_match(player_name, token)
        return match, match.find_player_by_session(token), token

    async def join_match(
        self,
        match_id: str,
        player_name: str,
        starter: str = "A",
        session_id: str | None = None,
    ) -> tuple[Match, PlayerState, str]:
        """Seat another human; the seat is added under the match lock."""
        match = self.get_match(match_id)
        token = session_id or new_session_token()
        async with match.lock:
            seat = match.add_player(
                name=player_name, session_id=token, is_human=True, starter=starter,
            )
        return match, seat, token

    def end_match(self, match_id: str) -> bool:
        return self.registry.end_match(match_id)

    def list_matches(self) -> list[str]:
        return self.registry.list_matches()

    def cleanup_idle(self) -> list[str]:
        return self.registry.cleanup_idle_matches(self.settings.match_idle_timeout_seconds)

    # =========================================================================
    # Actions
    # =========================================================================

    async def submit_action(
        self,
        match_id: str,
        session_id: str | None,
        wire_action: dict[str, Any],
    ) -> TurnResult:
        """
        Apply one wire action for session_id, then let the bot play out.

        Raises MatchNotFound; every other engine error comes back as a
        failed TurnResult for the caller to report to the actor only.
        """
        match = self.get_match(match_id)
        try:
            action = Action.from_wire(wire_action)
        except EngineError as e:
            return TurnResult.failure(e)
        return await GameLoop(match).process_action(action, session_id)

    # =========================================================================
    # Decks
    # =========================================================================

    async def preview_deck(
        self,
        deck_text: str | None = None,
        deck_url: str | None = None,
    ) -> ImportedDeck:
        try:
            return await self.deck_importer.import_deck(deck_text=deck_text, deck_url=deck_url)
        except DeckImportError as e:
            raise DeckImportFailed(str(e))

    async def aclose(self) -> None:
        await self.deck_importer.aclose()
