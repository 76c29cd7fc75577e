"""
Match Registry - Creates and tracks live matches.

LIFECYCLE:
1. A client asks for a game -> create_match seats the human and a bot
2. Other humans may join by match id
3. Every applied action refreshes the match's last_activity
4. Matches idle longer than the configured timeout are evicted by
   cleanup_idle_matches (or ended explicitly with end_match)

Matches are in-memory only. The registry is an explicit object handed to
the service layer, not module state.
"""

from __future__ import annotations
from typing import TYPE_CHECKING, Callable
import logging
import random
import time
import uuid

from .match import Match

if TYPE_CHECKING:
    from ..bots import BotPolicy
    from ..deck_import import DeckImporter

logger = logging.getLogger(__name__)


class MatchRegistry:
    """
    Lookup from match id to Match.

    Responsibilities:
    - Create matches with the default human + bot seating
    - Look matches up by id
    - Evict idle matches
    """

    def __init__(
        self,
        bot_policy_factory: Callable[[], BotPolicy] | None = None,
        deck_importer: DeckImporter | None = None,
        bot_decision_timeout: float | None = None,
        rng: random.Random | None = None,
    ):
        self._matches: dict[str, Match] = {}
        self.bot_policy_factory = bot_policy_factory
        self.deck_importer = deck_importer
        self.bot_decision_timeout = bot_decision_timeout
        self.rng = rng

    def __len__(self) -> int:
        return len(self._matches)

    def __contains__(self, match_id: str) -> bool:
        return match_id in self._matches

    def new_match(self) -> Match:
        """Allocate and register an empty match."""
        match_id = str(uuid.uuid4())
        match = Match(
            match_id,
            bot_policy=self.bot_policy_factory() if self.bot_policy_factory else None,
            deck_importer=self.deck_importer,
            rng=random.Random(self.rng.random()) if self.rng else None,
            bot_decision_timeout=self.bot_decision_timeout,
        )
        self._matches[match_id] = match
        return match

    def create_match(self, player_name: str, session_id: str | None) -> Match:
        """
        Create a match with the human in seat 0 (starter A) and the bot
        in seat 1 (fixed bot deck).
        """
        match = self.new_match()
        match.add_player(name=player_name, session_id=session_id, is_human=True, starter="A")
        match.add_bot()

        logger.info("Created match for %s", player_name, extra={"match_id": match.match_id})
        return match

    def get_match(self, match_id: str) -> Match | None:
        """Get a match by ID."""
        return self._matches.get(match_id)

    def end_match(self, match_id: str) -> bool:
        """Remove a match. Returns False if it was not registered."""
        match = self._matches.pop(match_id, None)
        if match is None:
            return False
        logger.info("Ended match", extra={"match_id": match_id})
        return True

    def list_matches(self) -> list[str]:
        return list(self._matches.keys())

    def cleanup_idle_matches(self, max_idle_seconds: float, now: float | None = None) -> list[str]:
        """
        Evict matches with no activity for max_idle_seconds.

        A match whose lock is held (an action in flight) is never evicted.
        """
        now = time.time() if now is None else now
        stale = [
            match_id for match_id, match in self._matches.items()
            if now - match.last_activity > max_idle_seconds and not match.lock.locked()
        ]
        for match_id in stale:
            self.end_match(match_id)
        if stale:
            logger.info("Evicted %d idle match(es)", len(stale))
        return stale
