"""
Phase Controller - Advances the phase cursor and handles turn boundaries.

untap -> upkeep -> draw -> main1 -> combat -> main2 -> end -> untap ...

There is no terminal state. Leaving "end" starts the next turn: the turn
counter increments, the active seat rotates, and the new active seat's
land counter resets.
"""

from __future__ import annotations

from .state import MatchState, Phase, PHASE_ORDER


def next_phase(phase: Phase) -> Phase:
    idx = PHASE_ORDER.index(phase)
    return PHASE_ORDER[(idx + 1) % len(PHASE_ORDER)]


def advance_phase(state: MatchState) -> list[str]:
    """
    Move the match to the next phase.

    Returns human-readable changes.
    """
    if state.phase != PHASE_ORDER[-1]:
        state.phase = next_phase(state.phase)
        return [f"Phase: {state.phase.value}"]

    state.phase = PHASE_ORDER[0]
    state.turn += 1
    if state.num_players:
        state.active_player_idx = (state.active_player_idx + 1) % state.num_players
        state.active_player.lands_played_this_turn = 0
        return [f"Turn {state.turn} started for {state.active_player.name}"]
    return [f"Turn {state.turn} started"]


def passes_between(start: Phase, target: Phase) -> int:
    """Passes needed to go from start to target in the same turn, or -1 if past it."""
    diff = PHASE_ORDER.index(target) - PHASE_ORDER.index(start)
    return diff if diff >= 0 else -1


def passes_to_end_turn(phase: Phase) -> int:
    """Number of passes that hand the turn to the next seat."""
    return len(PHASE_ORDER) - PHASE_ORDER.index(phase)
