"""
Tests for the match registry.
"""

import asyncio

from ..bots import HeuristicBot, PassPolicy
from ..session import MatchRegistry


class TestMatchRegistry:

    def test_create_match_seats_human_and_bot(self, registry):
        match = registry.create_match("Alice", "sess-alice")

        human, bot = match.players
        assert human.name == "Alice"
        assert human.is_human
        assert human.session_id == "sess-alice"
        assert bot.name == "BOT"
        assert not bot.is_human
        assert match.active_player is human

    def test_lookup(self, registry):
        match = registry.create_match("Alice", "sess-alice")

        assert registry.get_match(match.match_id) is match
        assert registry.get_match("missing") is None
        assert match.match_id in registry
        assert len(registry) == 1

    def test_match_ids_unique(self, registry):
        ids = {registry.create_match(f"P{i}", f"s{i}").match_id for i in range(5)}
        assert len(ids) == 5
        assert sorted(registry.list_matches()) == sorted(ids)

    def test_end_match(self, registry):
        match = registry.create_match("Alice", "sess-alice")

        assert registry.end_match(match.match_id)
        assert registry.get_match(match.match_id) is None
        assert not registry.end_match(match.match_id)

    def test_policy_factory(self, registry):
        match = registry.create_match("Alice", "sess-alice")
        assert isinstance(match.bot_policy, PassPolicy)

    def test_default_policy(self):
        match = MatchRegistry().create_match("Alice", "sess-alice")
        assert isinstance(match.bot_policy, HeuristicBot)

    def test_matches_do_not_share_importer_state(self, registry):
        a = registry.create_match("A", "s1")
        b = registry.create_match("B", "s2")
        assert a.reducer is not b.reducer
        assert a.lock is not b.lock


class TestIdleEviction:

    def test_idle_match_evicted(self, registry):
        stale = registry.create_match("Stale", "s1")
        fresh = registry.create_match("Fresh", "s2")
        stale.last_activity = 0.0
        fresh.last_activity = 950.0

        evicted = registry.cleanup_idle_matches(max_idle_seconds=100, now=1000.0)

        assert evicted == [stale.match_id]
        assert stale.match_id not in registry
        assert fresh.match_id in registry

    def test_busy_match_not_evicted(self, registry):
        match = registry.create_match("Busy", "s1")
        match.last_activity = 0.0

        async def cleanup_while_locked():
            async with match.lock:
                return registry.cleanup_idle_matches(max_idle_seconds=100, now=1000.0)

        assert asyncio.run(cleanup_while_locked()) == []
        assert match.match_id in registry
