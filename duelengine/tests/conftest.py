"""
Pytest fixtures for Duel Engine tests.
"""

import random

import httpx
import pytest

from ..bots import PassPolicy
from ..config import Settings
from ..engine_core.cards import Card
from ..engine_core.reducer import Reducer
from ..engine_core.state import MatchState, Phase, PlayerState
from ..session import Match, MatchRegistry


# =============================================================================
# Cards
# =============================================================================

@pytest.fixture
def forest() -> Card:
    return Card(card_id="forest_1", name="Forest", type_line="Basic Land — Forest")


@pytest.fixture
def mountain() -> Card:
    return Card(card_id="mountain_1", name="Mountain", type_line="Basic Land — Mountain")


@pytest.fixture
def bolt() -> Card:
    return Card(
        card_id="bolt_1", name="Lightning Bolt", type_line="Instant",
        mana_cost="{R}", colors=("red",),
    )


@pytest.fixture
def bears() -> Card:
    return Card(
        card_id="bears_1", name="Grizzly Bears", type_line="Creature — Bear",
        mana_cost="{1}{G}", power=2, toughness=2, colors=("green",),
    )


def make_library(count: int, prefix: str = "lib") -> list[Card]:
    """Plain filler cards with predictable ids."""
    return [
        Card(card_id=f"{prefix}_{i}", name=f"Filler {i}", type_line="Sorcery")
        for i in range(count)
    ]


# =============================================================================
# Bare state (reducer-level)
# =============================================================================

@pytest.fixture
def alice(forest, mountain, bolt, bears) -> PlayerState:
    return PlayerState(
        player_id="alice",
        name="Alice",
        session_id="sess-alice",
        library=make_library(10, "alice"),
        hand=[forest, mountain, bolt, bears],
    )


@pytest.fixture
def bob() -> PlayerState:
    return PlayerState(
        player_id="bob",
        name="Bob",
        session_id="sess-bob",
        library=make_library(10, "bob"),
        hand=make_library(7, "bob_hand"),
    )


@pytest.fixture
def two_player_state(alice, bob) -> MatchState:
    """Alice active, first main phase, turn 1."""
    return MatchState(match_id="test_match", players=[alice, bob], phase=Phase.MAIN1)


@pytest.fixture
def reducer() -> Reducer:
    return Reducer(rng=random.Random(1234))


# =============================================================================
# Matches
# =============================================================================

@pytest.fixture
def human_vs_bot() -> Match:
    """A human (session 'sess-human') in seat 0 and a passing bot in seat 1."""
    match = Match("test_match", bot_policy=PassPolicy(), rng=random.Random(42), bot_decision_timeout=2.0)
    match.add_player(name="Human", session_id="sess-human", is_human=True, starter="A")
    match.add_bot()
    return match


@pytest.fixture
def registry() -> MatchRegistry:
    return MatchRegistry(bot_policy_factory=PassPolicy, rng=random.Random(7), bot_decision_timeout=2.0)


# =============================================================================
# Fake Scryfall
# =============================================================================

SCRYFALL_CARDS = {
    "lightning bolt": {
        "name": "Lightning Bolt",
        "type_line": "Instant",
        "mana_cost": "{R}",
        "colors": ["R"],
        "image_uris": {"normal": "https://img.example/bolt.jpg"},
        "oracle_text": "Lightning Bolt deals 3 damage to any target.",
    },
    "forest": {
        "name": "Forest",
        "type_line": "Basic Land — Forest",
        "mana_cost": "",
        "colors": [],
        "image_uris": {"normal": "https://img.example/forest.jpg"},
    },
    "grizzly bears": {
        "name": "Grizzly Bears",
        "type_line": "Creature — Bear",
        "mana_cost": "{1}{G}",
        "power": "2",
        "toughness": "2",
        "colors": ["G"],
        "image_uris": {"normal": "https://img.example/bears.jpg"},
    },
    "counterspell": {
        "name": "Counterspell",
        "type_line": "Instant",
        "mana_cost": "{U}{U}",
        "colors": ["U"],
        "image_uris": {"normal": "https://img.example/counterspell.jpg"},
    },
    "atraxa, grand unifier": {
        "name": "Atraxa, Grand Unifier",
        "type_line": "Legendary Creature — Phyrexian Angel",
        "mana_cost": "{3}{G}{W}{U}{B}",
        "power": "7",
        "toughness": "7",
        "colors": ["G", "W", "U", "B"],
        "card_faces": [{"image_uris": {"normal": "https://img.example/atraxa.jpg"}}],
    },
}

MOXFIELD_DECK = {
    "name": "Moxfield Test Deck",
    "commanders": {
        "Atraxa, Grand Unifier": {"quantity": 1, "card": {"name": "Atraxa, Grand Unifier"}},
    },
    "mainboard": {
        "Forest": {"quantity": 3, "card": {"name": "Forest"}},
        "Grizzly Bears": {"quantity": 2, "card": {"name": "Grizzly Bears"}},
    },
    "sideboard": {
        "Counterspell": {"quantity": 1, "card": {"name": "Counterspell"}},
    },
}

ARCHIDEKT_DECK = {
    "name": "Archidekt Test Deck",
    "cards": [
        {"quantity": 1, "categories": ["Commander"],
         "card": {"oracleCard": {"name": "Atraxa, Grand Unifier"}}},
        {"quantity": 4, "categories": ["Land"], "card": {"oracleCard": {"name": "Forest"}}},
        {"quantity": 2, "categories": ["Sideboard"], "card": {"oracleCard": {"name": "Counterspell"}}},
    ],
}


TAPPEDOUT_DECK = {
    "name": "TappedOut Test Deck",
    "board": "4 Lightning Bolt\n2 Grizzly Bears\n\n10 Forest",
    "sideboard": "2 Counterspell",
}

DECKSTATS_PAGE = """
<html><body>
<h1>Deckstats Test Deck</h1>
<div class="deckList main">
  <span class="qty">4</span> <a href="/c/bolt">Lightning Bolt</a><br>
  <span class="qty">3</span> <a href="/c/forest">Forest</a><br/>
</div>
<div class="footer">4 Counterspell</div>
</body></html>
"""


class FakeScryfall:
    """httpx.MockTransport handler standing in for Scryfall and the deck sites."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.status_override: int | None = None

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.status_override is not None:
            return httpx.Response(self.status_override, json={"object": "error"})

        host, path = request.url.host, request.url.path
        if host == "api.scryfall.com" and path == "/cards/named":
            name = request.url.params.get("exact") or request.url.params.get("fuzzy") or ""
            data = SCRYFALL_CARDS.get(name.lower())
            if data is None:
                return httpx.Response(404, json={"object": "error", "code": "not_found"})
            return httpx.Response(200, json=data)
        if host == "api.moxfield.com" and path == "/v2/decks/all/abc123":
            return httpx.Response(200, json=MOXFIELD_DECK)
        if host == "api.moxfield.com" and path == "/v2/decks/all/broken":
            return httpx.Response(200, json={"mainboard": {"x": {"quantity": 1}}})
        if host == "archidekt.com" and path == "/api/decks/42/":
            return httpx.Response(200, json=ARCHIDEKT_DECK)
        if host == "tappedout.net" and path == "/api/deck/get/test-deck/":
            return httpx.Response(200, json=TAPPEDOUT_DECK)
        if host == "deckstats.net" and path == "/decks/1/2-test-deck/en":
            return httpx.Response(200, text=DECKSTATS_PAGE)
        if host == "deckstats.net":
            return httpx.Response(200, text="<html><body>No list here</body></html>")
        return httpx.Response(404, json={"object": "error"})

    def named_lookups(self) -> int:
        return sum(1 for r in self.requests if r.url.path == "/cards/named")


@pytest.fixture
def fake_scryfall() -> FakeScryfall:
    return FakeScryfall()


@pytest.fixture
def import_settings() -> Settings:
    return Settings(request_min_delay_ms=0, card_cache_ttl_seconds=300.0)
