"""
Match - One running game: seats, phase cursor, turn counter and the
single entry points that mutate them.

Two call paths reach the reducer:
- apply_action(action, session_id): the seat is resolved from an
  authenticated transport session. Unknown (or None) sessions fail.
- run_bot_turn(): the seat is the already-resolved active bot seat.
  Nothing on the wire can select this path.

Every mutation runs inside the match's asyncio.Lock, so the network
suspension in import-deck cannot interleave with another action on the
same match.
"""

from __future__ import annotations
from typing import TYPE_CHECKING, Any
import asyncio
import logging
import random
import time
import uuid

from ..engine_core.action import Action, ActionResult
from ..engine_core.cards import (
    BOT_DECK_LIST,
    Card,
    create_deck_from_names,
    shuffle_cards,
    starter_deck,
)
from ..engine_core.errors import BotDecisionTimeout, EngineError, PlayerNotFound
from ..engine_core.phases import advance_phase
from ..engine_core.reducer import Reducer
from ..engine_core.state import OPENING_HAND_SIZE, MatchState, PlayerState

if TYPE_CHECKING:
    from ..bots import BotPolicy
    from ..deck_import import DeckImporter

logger = logging.getLogger(__name__)

BOT_NAME = "BOT"
CUSTOM_STARTER = "CUSTOM"


class Match:
    """
    The Game aggregate.

    Usage:
        match = Match(match_id, bot_policy=HeuristicBot())
        match.add_player(name="Alice", session_id="sock-1", is_human=True, starter="A")
        await match.apply_action(Action.draw(), "sock-1")
        if match.should_bot_act():
            await match.run_bot_turn()
    """

    def __init__(
        self,
        match_id: str,
        bot_policy: BotPolicy | None = None,
        deck_importer: DeckImporter | None = None,
        rng: random.Random | None = None,
        bot_decision_timeout: float | None = None,
    ):
        if bot_policy is None:
            from ..bots import HeuristicBot
            bot_policy = HeuristicBot()

        self.state = MatchState(match_id=match_id)
        self.bot_policy = bot_policy
        self.rng = rng or random.Random()
        self.reducer = Reducer(deck_importer=deck_importer, rng=self.rng)
        self.bot_decision_timeout = bot_decision_timeout
        self.lock = asyncio.Lock()
        self.created_at = time.time()
        self.last_activity = self.created_at

    @property
    def match_id(self) -> str:
        return self.state.match_id

    @property
    def players(self) -> list[PlayerState]:
        return self.state.players

    @property
    def active_player(self) -> PlayerState | None:
        return self.state.active_player

    def touch(self):
        self.last_activity = time.time()

    # =========================================================================
    # Seats
    # =========================================================================

    def add_player(
        self,
        name: str,
        session_id: str | None = None,
        is_human: bool = True,
        starter: str = "A",
        custom_deck_names: list[str] | None = None,
    ) -> PlayerState:
        """
        Seat a new player with a freshly shuffled deck and opening hand.

        starter is "A", "B", or "CUSTOM" (with custom_deck_names). The
        commander is the first card flagged as one, else the first card of
        the shuffled library; a short deck just yields a short hand.
        """
        if starter.upper() == CUSTOM_STARTER and custom_deck_names is not None:
            base = create_deck_from_names(custom_deck_names)
        else:
            base = starter_deck(starter if starter.upper() in ("A", "B") else "A")

        return self._seat(name, session_id, is_human, base)

    def _seat(
        self,
        name: str,
        session_id: str | None,
        is_human: bool,
        base: list[Card],
    ) -> PlayerState:
        library = shuffle_cards(base, self.rng)
        commander = next((c for c in library if c.is_commander), library[0] if library else None)

        player = PlayerState(
            player_id=str(uuid.uuid4()),
            name=name,
            is_human=is_human,
            session_id=session_id,
            library=library,
            command_zone=[commander] if commander else [],
        )
        player.draw(OPENING_HAND_SIZE)
        self.state.players.append(player)
        self.touch()

        logger.info(
            "Seated %s (%s) with %d cards",
            name, "human" if is_human else "bot", len(base),
            extra={"match_id": self.match_id, "player_id": player.player_id},
        )
        return player

    def add_bot(self, name: str = BOT_NAME, deck_names: list[str] | None = None) -> PlayerState:
        return self.add_player(
            name=name,
            session_id=None,
            is_human=False,
            starter=CUSTOM_STARTER,
            custom_deck_names=deck_names if deck_names is not None else BOT_DECK_LIST,
        )

    def find_player_by_session(self, session_id: str | None) -> PlayerState | None:
        return self.state.find_player_by_session(session_id)

    # =========================================================================
    # Actions
    # =========================================================================

    async def apply_action(self, action: Action, session_id: str | None) -> ActionResult:
        """
        Apply an action for the seat owning session_id.

        Raises PlayerNotFound if no seat matches; a None session never
        stands in for the bot.
        """
        async with self.lock:
            player = self.find_player_by_session(session_id)
            if player is None:
                raise PlayerNotFound()
            return await self._apply_as(player, action)

    async def _apply_as(self, player: PlayerState, action: Action) -> ActionResult:
        """Trusted path: caller has already established who is acting."""
        try:
            result = await self.reducer.apply(self.state, player, action)
        except EngineError as e:
            logger.info(
                "Rejected %s: %s", action.action_type.value, e,
                extra={
                    "match_id": self.match_id,
                    "player_id": player.player_id,
                    "action_type": action.action_type.value,
                    "error_code": e.error_code,
                },
            )
            raise
        self.touch()
        return result

    def advance_phase(self) -> list[str]:
        """Phase controller entry point; callers must hold the lock."""
        return advance_phase(self.state)

    # =========================================================================
    # Bot turns
    # =========================================================================

    def should_bot_act(self) -> bool:
        """True iff the active seat is not human."""
        player = self.active_player
        return player is not None and not player.is_human

    async def run_bot_turn(self) -> list[Action]:
        """
        Ask the bot policy for its turn and apply each action in order.

        Returns the actions that were applied. A rejected bot action is
        logged and skipped so a bad decision cannot stall the match.
        """
        async with self.lock:
            player = self.active_player
            if player is None or player.is_human:
                return []

            actions = await self._decide(player)
            applied = []
            for action in actions:
                if self.active_player is not player:
                    break
                try:
                    await self._apply_as(player, action)
                except EngineError as e:
                    logger.warning(
                        "Bot action %s skipped: %s", action.action_type.value, e,
                        extra={"match_id": self.match_id, "player_id": player.player_id},
                    )
                    continue
                applied.append(action)
            return applied

    async def _decide(self, player: PlayerState) -> list[Action]:
        snapshot = self.state.clone()
        seat = snapshot.get_player(player.player_id)
        decision = asyncio.to_thread(self.bot_policy.decide_turn, seat, snapshot)
        try:
            return await asyncio.wait_for(decision, timeout=self.bot_decision_timeout)
        except asyncio.TimeoutError:
            raise BotDecisionTimeout(
                f"{self.bot_policy.get_name()} did not decide within {self.bot_decision_timeout}s"
            )

    # =========================================================================
    # Views
    # =========================================================================

    def get_public_state(self) -> dict[str, Any]:
        """Safe for every client: hands and libraries are counts only."""
        return self.state.to_public_dict()

    def get_private_view(self, session_id: str) -> dict[str, Any]:
        """The acting seat's own hand, on top of the public state."""
        player = self.find_player_by_session(session_id)
        if player is None:
            raise PlayerNotFound()
        return {
            "playerId": player.player_id,
            "hand": [c.to_dict() for c in player.hand],
            "libraryCount": len(player.library),
            "landsPlayedThisTurn": player.lands_played_this_turn,
            "isActive": player is self.active_player,
        }
