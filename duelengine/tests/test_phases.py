"""
Tests for the phase controller.
"""

from ..engine_core.phases import advance_phase, next_phase, passes_between, passes_to_end_turn
from ..engine_core.state import MatchState, Phase, PHASE_ORDER, PlayerState


def test_phase_order():
    assert [p.value for p in PHASE_ORDER] == [
        "untap", "upkeep", "draw", "main1", "combat", "main2", "end",
    ]


def test_next_phase_wraps():
    assert next_phase(Phase.UNTAP) == Phase.UPKEEP
    assert next_phase(Phase.END) == Phase.UNTAP


def test_seven_passes_complete_a_turn(two_player_state):
    state = two_player_state
    state.phase = Phase.UNTAP

    for _ in range(7):
        advance_phase(state)

    assert state.phase == Phase.UNTAP
    assert state.turn == 2
    assert state.active_player_idx == 1


def test_fourteen_passes_alternate_seats(two_player_state):
    state = two_player_state
    state.phase = Phase.UNTAP
    seen = []

    for _ in range(14):
        advance_phase(state)
        if state.phase == Phase.UNTAP:
            seen.append(state.active_player.player_id)

    assert seen == ["bob", "alice"]
    assert state.turn == 3


def test_turn_change_resets_only_new_active_land_counter(two_player_state, alice, bob):
    state = two_player_state
    state.phase = Phase.END
    alice.lands_played_this_turn = 1
    bob.lands_played_this_turn = 1

    changes = advance_phase(state)

    assert bob.lands_played_this_turn == 0
    assert alice.lands_played_this_turn == 1
    assert changes == ["Turn 2 started for Bob"]


def test_mid_turn_pass_keeps_active_seat(two_player_state):
    state = two_player_state
    changes = advance_phase(state)
    assert state.active_player_idx == 0
    assert state.turn == 1
    assert changes == ["Phase: combat"]


def test_advance_with_no_players():
    state = MatchState(match_id="empty", phase=Phase.END)
    assert advance_phase(state) == ["Turn 2 started"]
    assert state.active_player is None


def test_single_seat_keeps_turn():
    solo = PlayerState(player_id="solo", name="Solo")
    state = MatchState(match_id="solo", players=[solo], phase=Phase.END)
    advance_phase(state)
    assert state.active_player is solo
    assert state.turn == 2


def test_passes_between():
    assert passes_between(Phase.UNTAP, Phase.MAIN1) == 3
    assert passes_between(Phase.MAIN1, Phase.MAIN1) == 0
    assert passes_between(Phase.COMBAT, Phase.MAIN1) == -1


def test_passes_to_end_turn():
    assert passes_to_end_turn(Phase.UNTAP) == 7
    assert passes_to_end_turn(Phase.MAIN2) == 2
    assert passes_to_end_turn(Phase.END) == 1
