"""
Reducer - Applies actions to match state.

The reducer is the single point of state mutation.
All zone transfers go through apply().

Design principles:
- Every handler checks all of its preconditions before mutating anything
- Failures are raised as EngineError subclasses, never returned
- The acting player is resolved by the caller; the reducer does not
  look up identities
- import-deck is the only handler that suspends (network round trip),
  and it does so before touching the player
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import TYPE_CHECKING
import inspect
import logging
import random

from .action import Action, ActionResult, ActionType
from .cards import Permanent, shuffle_cards
from .errors import (
    CardNotInHand,
    DeckImportFailed,
    LandLimitReached,
    NotALand,
    UnknownActionType,
    WrongPhase,
)
from .phases import advance_phase
from .state import LANDS_PER_TURN, MAIN_PHASES, OPENING_HAND_SIZE, MatchState, PlayerState

if TYPE_CHECKING:
    from ..deck_import import DeckImporter

logger = logging.getLogger(__name__)


@dataclass
class Reducer:
    """
    Applies actions to a match.

    Stateless apart from its collaborators: the shuffle rng and the
    deck importer used by import-deck.
    """
    deck_importer: DeckImporter | None = None
    rng: random.Random = field(default_factory=random.Random)

    async def apply(self, state: MatchState, player: PlayerState, action: Action) -> ActionResult:
        """
        Apply an action on behalf of an already-resolved player.

        Returns ActionResult on success, raises EngineError otherwise.
        """
        handler = self._get_handler(action.action_type)
        if handler is None:
            raise UnknownActionType(f"Unknown action type: {action.action_type}")

        changes = handler(state, player, action)
        if inspect.isawaitable(changes):
            changes = await changes

        logger.debug(
            "Applied %s for %s",
            action.action_type.value,
            player.name,
            extra={
                "match_id": state.match_id,
                "player_id": player.player_id,
                "action_type": action.action_type.value,
            },
        )
        return ActionResult(action=action, player_id=player.player_id, state_changes=changes)

    def _get_handler(self, action_type: ActionType):
        """Get the handler function for an action type."""
        handlers = {
            ActionType.SHUFFLE: self._handle_shuffle,
            ActionType.DRAW: self._handle_draw,
            ActionType.PLAY_LAND: self._handle_play_land,
            ActionType.CAST: self._handle_cast,
            ActionType.PASS: self._handle_pass,
            ActionType.IMPORT_DECK: self._handle_import_deck,
        }
        return handlers.get(action_type)

    def _handle_shuffle(self, state: MatchState, player: PlayerState, action: Action) -> list[str]:
        player.library[:] = shuffle_cards(player.library, self.rng)
        return [f"{player.name} shuffled their library"]

    def _handle_draw(self, state: MatchState, player: PlayerState, action: Action) -> list[str]:
        """Draw up to count cards; a short library just yields fewer."""
        count = max(action.payload.count or 1, 0)
        drawn = player.draw(count)
        return [f"{player.name} drew {len(drawn)} card(s)"]

    def _handle_play_land(self, state: MatchState, player: PlayerState, action: Action) -> list[str]:
        idx = player.find_in_hand(action.payload.card_id)
        if idx == -1:
            raise CardNotInHand()
        if player.lands_played_this_turn >= LANDS_PER_TURN:
            raise LandLimitReached()
        if state.phase not in MAIN_PHASES:
            raise WrongPhase()

        card = player.hand[idx]
        if not card.is_land:
            raise NotALand()

        player.hand.pop(idx)
        player.battlefield.append(Permanent(card=card, tapped=False))
        player.lands_played_this_turn += 1
        return [f"{player.name} played {card.name}"]

    def _handle_cast(self, state: MatchState, player: PlayerState, action: Action) -> list[str]:
        """
        Simplified casting: no mana, no stack.

        Creatures, artifacts and enchantments enter the battlefield;
        everything else resolves straight to the graveyard.
        """
        idx = player.find_in_hand(action.payload.card_id)
        if idx == -1:
            raise CardNotInHand()

        card = player.hand.pop(idx)
        if card.is_permanent_spell:
            player.battlefield.append(Permanent(card=card, tapped=False))
            return [f"{player.name} cast {card.name}"]

        player.graveyard.append(card)
        return [f"{player.name} cast {card.name} (resolved to graveyard)"]

    def _handle_pass(self, state: MatchState, player: PlayerState, action: Action) -> list[str]:
        return advance_phase(state)

    async def _handle_import_deck(
        self, state: MatchState, player: PlayerState, action: Action
    ) -> list[str]:
        """
        Replace the player's library with an imported deck.

        The import is awaited before any mutation; on success the hand is
        redrawn and the commander replaced if the import names one.
        """
        if self.deck_importer is None:
            raise DeckImportFailed("Failed to import deck: no deck importer configured")

        payload = action.payload
        try:
            deck = await self.deck_importer.import_deck(
                deck_text=payload.deck_text,
                deck_url=payload.deck_url,
            )
        except Exception as e:
            logger.warning(
                "Deck import failed: %s", e,
                extra={"match_id": state.match_id, "player_id": player.player_id},
            )
            raise DeckImportFailed(f"Failed to import deck: {e}") from e

        if not deck.cards:
            raise DeckImportFailed("Failed to import deck: No cards imported")

        player.library = shuffle_cards(deck.cards, self.rng)
        player.hand = []
        player.draw(OPENING_HAND_SIZE)

        commander = next((c for c in deck.cards if c.is_commander), None)
        if commander is not None:
            player.command_zone = [commander]

        return [f"{player.name} imported a deck of {len(deck.cards)} cards"]
