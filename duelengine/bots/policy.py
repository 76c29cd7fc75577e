"""
Bot Policy - Interface for bot decision-making.

A BotPolicy is consulted once per bot turn. It receives a snapshot of the
match and the bot's seat, and returns the ordered actions it wants to take.
The match applies them through its trusted bot path.

Policies must treat the snapshot as read-only; it is a copy, so changes
would be lost anyway.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING
import random

from ..engine_core.action import Action
from ..engine_core.phases import passes_between, passes_to_end_turn
from ..engine_core.state import MAIN_PHASES, PHASE_ORDER, Phase

if TYPE_CHECKING:
    from ..engine_core.state import MatchState, PlayerState


class BotPolicy(ABC):
    """
    Abstract base class for bot policies.

    Implementations range from "just pass" to heuristics; a real rules
    engine would plug a search-based policy in here.
    """

    @abstractmethod
    def decide_turn(self, player: PlayerState, state: MatchState) -> list[Action]:
        """
        Decide the bot's actions for the rest of its turn.

        Args:
            player: The bot's seat (inside the snapshot)
            state: Snapshot of the match

        Returns:
            Ordered actions; should end by passing the turn
        """
        pass

    def get_name(self) -> str:
        """Get the bot's name/identifier."""
        return self.__class__.__name__


class PassPolicy(BotPolicy):
    """
    Passes straight through to the next seat.

    Used for:
    - Deterministic testing
    - Baseline behaviour
    """

    def decide_turn(self, player: PlayerState, state: MatchState) -> list[Action]:
        return [Action.pass_priority() for _ in range(passes_to_end_turn(state.phase))]


class HeuristicBot(BotPolicy):
    """
    Plays a land and a spell in the first main phase it reaches, then passes.

    Preference order for spells: creatures, then other permanents, then
    instants and sorceries. There is no mana system, so max_casts caps how
    much it dumps per turn.
    """

    def __init__(self, max_casts: int = 1):
        self.max_casts = max_casts

    def decide_turn(self, player: PlayerState, state: MatchState) -> list[Action]:
        actions: list[Action] = []
        phase = state.phase

        if phase not in MAIN_PHASES:
            to_main = passes_between(phase, Phase.MAIN1)
            if to_main < 0:
                to_main = passes_between(phase, Phase.MAIN2)
            if to_main > 0:
                actions.extend(Action.pass_priority() for _ in range(to_main))
                phase = PHASE_ORDER[PHASE_ORDER.index(phase) + to_main]

        if phase in MAIN_PHASES:
            actions.extend(self._main_phase_plays(player))

        actions.extend(Action.pass_priority() for _ in range(passes_to_end_turn(phase)))
        return actions

    def _main_phase_plays(self, player: PlayerState) -> list[Action]:
        plays = []
        if player.lands_played_this_turn == 0:
            land = next((c for c in player.hand if c.is_land), None)
            if land is not None:
                plays.append(Action.play_land(land.card_id))

        spells = [c for c in player.hand if not c.is_land and c.type_line != "Unknown"]
        spells.sort(key=lambda c: (
            0 if c.has_type("creature") else 1 if c.is_permanent_spell else 2
        ))
        plays.extend(Action.cast(c.card_id) for c in spells[:self.max_casts])
        return plays


class RandomPolicy(BotPolicy):
    """
    Plays a random land and casts a random number of random spells.

    Used for:
    - Testing
    - Baseline comparison
    """

    def __init__(self, seed: int | None = None):
        self.rng = random.Random(seed)

    def decide_turn(self, player: PlayerState, state: MatchState) -> list[Action]:
        actions: list[Action] = []
        phase = state.phase
        to_main = passes_between(phase, Phase.MAIN1)
        if to_main >= 0:
            actions.extend(Action.pass_priority() for _ in range(to_main))
            phase = Phase.MAIN1

            lands = [c for c in player.hand if c.is_land]
            if lands and player.lands_played_this_turn == 0:
                actions.append(Action.play_land(self.rng.choice(lands).card_id))

            spells = [c for c in player.hand if not c.is_land]
            count = self.rng.randint(0, min(2, len(spells)))
            actions.extend(Action.cast(c.card_id) for c in self.rng.sample(spells, count))

        actions.extend(Action.pass_priority() for _ in range(passes_to_end_turn(phase)))
        return actions
