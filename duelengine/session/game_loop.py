"""
Game Loop - One inbound player action, followed by any bot turns it unlocks.

The loop:
1. Apply the player's action (session-keyed path)
2. While the active seat is a bot, run its turn (trusted path)
3. Report the public state to broadcast, or the error for the actor only

Engine errors are turned into a failed TurnResult here; the match is
untouched for everyone else.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, TYPE_CHECKING
import logging

from ..engine_core.errors import EngineError

if TYPE_CHECKING:
    from ..engine_core.action import Action
    from .match import Match

logger = logging.getLogger(__name__)


@dataclass
class TurnResult:
    """
    Result of processing one inbound action.

    public_state is what gets broadcast; error/error_code go only to the
    acting client.
    """
    success: bool
    public_state: dict[str, Any] | None = None
    state_changes: list[str] = field(default_factory=list)
    bot_actions: list[dict[str, Any]] = field(default_factory=list)
    error: str | None = None
    error_code: str | None = None

    @classmethod
    def failure(cls, error: EngineError) -> TurnResult:
        return cls(success=False, error=str(error), error_code=error.error_code)


class GameLoop:
    """
    Drives a match for the transport layer.

    Usage:
        loop = GameLoop(match)
        result = await loop.process_action(Action.pass_priority(), session_id)
        if result.success:
            broadcast(result.public_state)
        else:
            reply_to_actor(result.error)
    """

    def __init__(self, match: Match):
        self.match = match

    async def process_action(self, action: Action, session_id: str | None) -> TurnResult:
        try:
            applied = await self.match.apply_action(action, session_id)
        except EngineError as e:
            return TurnResult.failure(e)

        result = TurnResult(success=True, state_changes=list(applied.state_changes))
        try:
            result.bot_actions = await self.run_bot_turns()
        except EngineError as e:
            logger.warning(
                "Bot turn aborted: %s", e,
                extra={"match_id": self.match.match_id, "error_code": e.error_code},
            )
            result.state_changes.append(f"Bot turn aborted: {e}")

        result.public_state = self.match.get_public_state()
        return result

    async def run_bot_turns(self) -> list[dict[str, Any]]:
        """
        Run bot turns until a human is active.

        Capped at one turn per seat so a policy that never passes cannot
        spin forever.
        """
        applied: list[dict[str, Any]] = []
        for _ in range(max(len(self.match.players), 1)):
            if not self.match.should_bot_act():
                break
            actions = await self.match.run_bot_turn()
            applied.extend(a.to_wire() for a in actions)
        return applied
