"""
Tests for the Match aggregate and the game loop.

Tests:
- Seating and opening hands
- Session-keyed vs bot action paths
- Public/private projections
- Bot turns, rejected bot actions, decision timeout
- Per-match lock around import-deck
"""

import asyncio
import random
import time

import pytest

from ..bots import BotPolicy, HeuristicBot, PassPolicy
from ..deck_import import ImportedDeck
from ..engine_core.action import Action, ActionType
from ..engine_core.cards import BOT_DECK_LIST, STARTER_A, STARTER_B
from ..engine_core.errors import BotDecisionTimeout, PlayerNotFound
from ..engine_core.state import Phase
from ..session import GameLoop, Match
from .conftest import make_library


class TestSeating:

    def test_opening_hand(self, human_vs_bot):
        human, bot = human_vs_bot.players

        assert len(human.hand) == 7
        assert len(bot.hand) == 7
        assert len(human.hand) + len(human.library) == len(STARTER_A)
        assert len(bot.hand) + len(bot.library) == len(BOT_DECK_LIST)

    def test_commander_is_flagged_card(self, human_vs_bot):
        human, bot = human_vs_bot.players
        assert [c.name for c in human.command_zone] == ["Slimefoot and Squee"]
        assert [c.name for c in bot.command_zone] == ["Slimefoot and Squee"]

    def test_bot_seat(self, human_vs_bot):
        bot = human_vs_bot.players[1]
        assert not bot.is_human
        assert bot.session_id is None
        assert bot.name == "BOT"

    def test_starter_b(self):
        match = Match("m")
        seat = match.add_player("Bea", session_id="s", starter="B")
        assert len(seat.hand) + len(seat.library) == len(STARTER_B)
        assert seat.command_zone[0].name == "Kess, Dissident Mage"

    def test_unknown_starter_falls_back_to_a(self):
        match = Match("m")
        seat = match.add_player("Zed", session_id="s", starter="Z")
        assert len(seat.hand) + len(seat.library) == len(STARTER_A)

    def test_custom_deck_without_commander_uses_first_library_card(self):
        match = Match("m", rng=random.Random(3))
        seat = match.add_player(
            "Cus", session_id="s", starter="CUSTOM",
            custom_deck_names=["Forest"] * 5 + ["Totally Unknown Card"] * 5,
        )
        assert len(seat.hand) == 7
        assert len(seat.library) == 3
        assert seat.command_zone[0].card_id in {c.card_id for c in seat.hand + seat.library}
        assert any(c.type_line == "Unknown" for c in seat.hand + seat.library)

    def test_short_custom_deck_short_hand(self):
        match = Match("m")
        seat = match.add_player("Tiny", session_id="s", starter="CUSTOM", custom_deck_names=["Forest"] * 3)
        assert len(seat.hand) == 3
        assert seat.library == []

    def test_card_ids_unique_across_seats(self, human_vs_bot):
        ids = [
            c.card_id
            for p in human_vs_bot.players
            for c in p.hand + p.library
        ]
        assert len(ids) == len(set(ids))


class TestApplyAction:

    def test_session_resolves_seat(self, human_vs_bot):
        result = asyncio.run(human_vs_bot.apply_action(Action.draw(), "sess-human"))

        human = human_vs_bot.players[0]
        assert result.player_id == human.player_id
        assert len(human.hand) == 8

    def test_none_session_is_not_the_bot(self, human_vs_bot):
        bot = human_vs_bot.players[1]
        with pytest.raises(PlayerNotFound):
            asyncio.run(human_vs_bot.apply_action(Action.draw(), None))
        assert len(bot.hand) == 7

    def test_unknown_session(self, human_vs_bot):
        with pytest.raises(PlayerNotFound):
            asyncio.run(human_vs_bot.apply_action(Action.draw(), "someone-else"))

    def test_action_refreshes_activity(self, human_vs_bot):
        human_vs_bot.last_activity = 0
        asyncio.run(human_vs_bot.apply_action(Action.shuffle(), "sess-human"))
        assert human_vs_bot.last_activity > 0

    def test_any_seat_may_act_out_of_turn(self, human_vs_bot):
        """Turn ownership is not enforced; only the land limit and phase are."""
        second = human_vs_bot.add_player("Second", session_id="sess-2")
        asyncio.run(human_vs_bot.apply_action(Action.draw(), "sess-2"))
        assert len(second.hand) == 8


class TestProjections:

    def test_public_state_hides_hidden_zones(self, human_vs_bot):
        state = human_vs_bot.get_public_state()

        assert set(state) == {"id", "phase", "turn", "players", "stack"}
        assert state["phase"] == "untap"
        assert state["turn"] == 1
        for player in state["players"]:
            assert set(player) == {
                "id", "name", "life", "handCount", "battlefield", "graveyard", "commandZone",
            }
            assert player["handCount"] == 7
            assert player["life"] == 20

    def test_public_state_has_no_hand_only_ids(self, human_vs_bot):
        human = human_vs_bot.players[0]
        visible = {c.card_id for c in human.command_zone}
        hidden = {c.card_id for c in human.hand + human.library} - visible

        text = str(human_vs_bot.get_public_state())
        assert not any(card_id in text for card_id in hidden)

    def test_private_view(self, human_vs_bot):
        view = human_vs_bot.get_private_view("sess-human")
        assert len(view["hand"]) == 7
        assert view["libraryCount"] == len(STARTER_A) - 7
        assert view["isActive"] is True

    def test_private_view_unknown_session(self, human_vs_bot):
        with pytest.raises(PlayerNotFound):
            human_vs_bot.get_private_view("nobody")


class TestBotTurn:

    def test_should_bot_act(self, human_vs_bot):
        assert not human_vs_bot.should_bot_act()
        human_vs_bot.state.active_player_idx = 1
        assert human_vs_bot.should_bot_act()

    def test_run_bot_turn_on_human_turn_is_noop(self, human_vs_bot):
        assert asyncio.run(human_vs_bot.run_bot_turn()) == []
        assert human_vs_bot.state.phase == Phase.UNTAP

    def test_pass_policy_hands_turn_back(self, human_vs_bot):
        human_vs_bot.state.active_player_idx = 1

        applied = asyncio.run(human_vs_bot.run_bot_turn())

        assert [a.action_type for a in applied] == [ActionType.PASS] * 7
        assert human_vs_bot.state.active_player_idx == 0
        assert human_vs_bot.state.turn == 2

    def test_heuristic_bot_plays_land_and_creature(self, forest, bears, bolt):
        match = Match("m", bot_policy=HeuristicBot(), rng=random.Random(1))
        match.add_player("Human", session_id="sess-human")
        bot = match.add_bot()
        bot.hand = [bolt, forest, bears]
        match.state.active_player_idx = 1

        asyncio.run(match.run_bot_turn())

        assert [p.card.name for p in bot.battlefield] == ["Forest", "Grizzly Bears"]
        assert bot.hand == [bolt]
        assert match.active_player.is_human

    def test_rejected_bot_action_is_skipped(self, human_vs_bot):
        class Clumsy(BotPolicy):
            def decide_turn(self, player, state):
                return [Action.cast("not-a-card")] + [Action.pass_priority()] * 7

        human_vs_bot.bot_policy = Clumsy()
        human_vs_bot.state.active_player_idx = 1

        applied = asyncio.run(human_vs_bot.run_bot_turn())

        assert len(applied) == 7
        assert human_vs_bot.state.active_player_idx == 0

    def test_actions_after_turn_ends_are_dropped(self, human_vs_bot):
        class Eager(BotPolicy):
            def decide_turn(self, player, state):
                return [Action.pass_priority()] * 7 + [Action.draw()]

        human_vs_bot.bot_policy = Eager()
        human_vs_bot.state.active_player_idx = 1
        bot = human_vs_bot.players[1]

        applied = asyncio.run(human_vs_bot.run_bot_turn())

        assert len(applied) == 7
        assert len(bot.hand) == 7

    def test_policy_sees_a_copy(self, human_vs_bot):
        class Vandal(BotPolicy):
            def decide_turn(self, player, state):
                player.hand.clear()
                state.turn = 99
                return []

        human_vs_bot.bot_policy = Vandal()
        human_vs_bot.state.active_player_idx = 1

        asyncio.run(human_vs_bot.run_bot_turn())

        assert len(human_vs_bot.players[1].hand) == 7
        assert human_vs_bot.state.turn == 1

    def test_decision_timeout(self):
        class Slow(BotPolicy):
            def decide_turn(self, player, state):
                time.sleep(0.3)
                return [Action.pass_priority()]

        match = Match("m", bot_policy=Slow(), bot_decision_timeout=0.05)
        match.add_player("Human", session_id="sess-human")
        match.add_bot()
        match.state.active_player_idx = 1

        with pytest.raises(BotDecisionTimeout):
            asyncio.run(match.run_bot_turn())

        assert match.state.phase == Phase.UNTAP
        assert match.state.active_player_idx == 1


class SlowImporter:
    def __init__(self, deck: ImportedDeck):
        self.deck = deck

    async def import_deck(self, deck_text=None, deck_url=None):
        await asyncio.sleep(0.05)
        return self.deck


class TestLocking:

    def test_import_deck_is_not_interleaved(self):
        """A draw issued during the import runs after it, against the new deck."""
        imported = make_library(30, "imported")
        match = Match("m", bot_policy=PassPolicy(), deck_importer=SlowImporter(ImportedDeck(cards=imported)))
        human = match.add_player("Human", session_id="sess-human")

        async def scenario():
            await asyncio.gather(
                match.apply_action(Action.import_deck(deck_text="30 Filler"), "sess-human"),
                match.apply_action(Action.draw(), "sess-human"),
            )

        asyncio.run(scenario())

        imported_ids = {c.card_id for c in imported}
        assert len(human.hand) == 8
        assert len(human.library) == 22
        assert {c.card_id for c in human.hand} <= imported_ids


class TestGameLoop:

    def test_bot_plays_after_human_ends_turn(self, human_vs_bot):
        loop = GameLoop(human_vs_bot)

        async def play_turn():
            results = []
            for _ in range(7):
                results.append(await loop.process_action(Action.pass_priority(), "sess-human"))
            return results

        results = asyncio.run(play_turn())

        assert all(r.success for r in results)
        assert all(r.bot_actions == [] for r in results[:-1])
        assert results[-1].bot_actions == [{"type": "pass"}] * 7
        assert human_vs_bot.state.active_player_idx == 0
        assert human_vs_bot.state.turn == 3
        assert results[-1].public_state["turn"] == 3

    def test_error_goes_to_result(self, human_vs_bot):
        result = asyncio.run(GameLoop(human_vs_bot).process_action(Action.draw(), "intruder"))

        assert not result.success
        assert result.error_code == "PLAYER_NOT_FOUND"
        assert result.public_state is None

    def test_rule_violation_reported(self, human_vs_bot):
        human = human_vs_bot.players[0]
        card_id = human.hand[0].card_id

        result = asyncio.run(
            GameLoop(human_vs_bot).process_action(Action.play_land(card_id), "sess-human")
        )

        assert not result.success
        assert result.error_code == "WRONG_PHASE"
        assert len(human.hand) == 7

    def test_bot_turns_capped(self):
        """Two bots back to back stop once every seat had a go."""
        match = Match("m", bot_policy=PassPolicy())
        match.add_bot("BOT 1")
        match.add_bot("BOT 2")

        applied = asyncio.run(GameLoop(match).run_bot_turns())

        assert len(applied) == 14
        assert match.state.turn == 3
