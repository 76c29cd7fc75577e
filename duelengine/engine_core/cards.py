"""
Cards - Card records, the built-in catalog and starter decks.

A Card is a value: once created it never changes. Zone-specific state
(e.g. tapped on the battlefield) lives on a Permanent wrapper so the
card keeps its identity while it sits in play.

Deck construction:
- Starter decks "A" and "B" are fixed name lists resolved against CATALOG
- Custom decks are resolved by name, unknown names become placeholders
- Every build produces fresh card ids, so two players never share an id
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any
import random
import re
import uuid


@dataclass(frozen=True)
class Card:
    """
    An immutable card record.

    card_id is unique per physical copy; name is shared between copies.
    """
    card_id: str
    name: str
    type_line: str = ""
    mana_cost: str | int = 0
    power: int | str = 0
    toughness: int | str = 0
    colors: tuple[str, ...] = ()
    image: str | None = None
    is_commander: bool = False
    text: str = ""
    is_sideboard: bool = False

    def has_type(self, fragment: str) -> bool:
        """Case-insensitive check against the type line."""
        return fragment.lower() in self.type_line.lower()

    @property
    def is_land(self) -> bool:
        return self.has_type("land")

    @property
    def is_permanent_spell(self) -> bool:
        """Creatures, artifacts and enchantments stay on the battlefield."""
        return any(self.has_type(t) for t in ("creature", "artifact", "enchantment"))

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.card_id,
            "name": self.name,
            "type": self.type_line,
            "manaCost": self.mana_cost,
            "power": self.power,
            "toughness": self.toughness,
            "colors": list(self.colors),
            "image": self.image,
            "isCommander": self.is_commander,
        }


@dataclass
class Permanent:
    """A card on the battlefield."""
    card: Card
    tapped: bool = False

    @property
    def card_id(self) -> str:
        return self.card.card_id

    @property
    def name(self) -> str:
        return self.card.name

    def to_dict(self) -> dict[str, Any]:
        data = self.card.to_dict()
        data["tapped"] = self.tapped
        return data


@dataclass(frozen=True)
class CardTemplate:
    """Catalog entry: everything about a card except its per-copy id."""
    name: str
    type_line: str
    mana_cost: str = ""
    power: int | str = 0
    toughness: int | str = 0
    colors: tuple[str, ...] = ()
    is_commander: bool = False
    text: str = ""

    def instantiate(self, card_id: str | None = None) -> Card:
        return Card(
            card_id=card_id or new_card_id(self.name),
            name=self.name,
            type_line=self.type_line,
            mana_cost=self.mana_cost,
            power=self.power,
            toughness=self.toughness,
            colors=self.colors,
            is_commander=self.is_commander,
            text=self.text,
        )


def slugify(name: str) -> str:
    return re.sub(r"[^a-z0-9]+", "_", name.lower()).strip("_")


def new_card_id(name: str) -> str:
    """Unique id for one copy of a card."""
    return f"{slugify(name)}_{uuid.uuid4().hex[:12]}"


def placeholder_card(name: str, card_id: str | None = None) -> Card:
    """Stand-in for a card name that could not be resolved."""
    return Card(
        card_id=card_id or new_card_id(name),
        name=name,
        type_line="Unknown",
        image=None,
    )


# ============================================================================
# Built-in catalog
# ============================================================================

_TEMPLATES = [
    # Basic lands
    CardTemplate("Forest", "Basic Land — Forest"),
    CardTemplate("Mountain", "Basic Land — Mountain"),
    CardTemplate("Island", "Basic Land — Island"),
    CardTemplate("Swamp", "Basic Land — Swamp"),
    CardTemplate("Plains", "Basic Land — Plains"),
    # Non-basic lands
    CardTemplate("Command Tower", "Land"),
    CardTemplate("Bayou", "Land — Swamp Forest"),
    CardTemplate("Badlands", "Land — Swamp Mountain"),
    CardTemplate("Taiga", "Land — Mountain Forest"),
    CardTemplate("Overgrown Tomb", "Land — Swamp Forest"),
    CardTemplate("Blood Crypt", "Land — Swamp Mountain"),
    CardTemplate("Stomping Ground", "Land — Mountain Forest"),
    CardTemplate("Mana Confluence", "Land"),
    CardTemplate("Pendelhaven", "Legendary Land"),
    # Creatures
    CardTemplate("Llanowar Elves", "Creature — Elf Druid", "{G}", 1, 1, ("green",)),
    CardTemplate("Elvish Mystic", "Creature — Elf Druid", "{G}", 1, 1, ("green",)),
    CardTemplate("Fyndhorn Elves", "Creature — Elf Druid", "{G}", 1, 1, ("green",)),
    CardTemplate("Birds of Paradise", "Creature — Bird", "{G}", 0, 1, ("green",)),
    CardTemplate("Tarmogoyf", "Creature — Lhurgoyf", "{1}{G}", "*", "1+*", ("green",)),
    CardTemplate("Grizzly Bears", "Creature — Bear", "{1}{G}", 2, 2, ("green",)),
    CardTemplate("Goblin Guide", "Creature — Goblin Scout", "{R}", 2, 2, ("red",)),
    CardTemplate("Magus of the Moon", "Creature — Human Wizard", "{2}{R}", 2, 2, ("red",)),
    CardTemplate("Orcish Bowmasters", "Creature — Orc Archer", "{1}{B}", 1, 1, ("black",)),
    CardTemplate("Deathrite Shaman", "Creature — Elf Shaman", "{B/G}", 1, 2, ("black", "green")),
    CardTemplate("Opposition Agent", "Creature — Human Rogue", "{2}{B}", 3, 2, ("black",)),
    CardTemplate("Snapcaster Mage", "Creature — Human Wizard", "{1}{U}", 2, 1, ("blue",)),
    CardTemplate("Delver of Secrets", "Creature — Human Wizard", "{U}", 1, 1, ("blue",)),
    CardTemplate("Gravecrawler", "Creature — Zombie", "{B}", 2, 1, ("black",)),
    CardTemplate(
        "Slimefoot and Squee", "Legendary Creature — Fungus Goblin", "{B}{R}{G}",
        3, 3, ("black", "red", "green"), is_commander=True,
    ),
    CardTemplate(
        "Atraxa, Grand Unifier", "Legendary Creature — Phyrexian Angel", "{3}{G}{W}{U}{B}",
        7, 7, ("green", "white", "blue", "black"), is_commander=True,
    ),
    CardTemplate(
        "Kess, Dissident Mage", "Legendary Creature — Human Wizard", "{1}{U}{B}{R}",
        3, 4, ("blue", "black", "red"), is_commander=True,
    ),
    # Artifacts / enchantments
    CardTemplate("Skullclamp", "Artifact — Equipment", "{1}"),
    CardTemplate("Sol Ring", "Artifact", "{1}"),
    CardTemplate("Wild Growth", "Enchantment — Aura", "{G}", colors=("green",)),
    CardTemplate("Utopia Sprawl", "Enchantment — Aura", "{G}", colors=("green",)),
    CardTemplate("Animate Dead", "Enchantment — Aura", "{1}{B}", colors=("black",)),
    CardTemplate("Rhystic Study", "Enchantment", "{2}{U}", colors=("blue",)),
    # Instants / sorceries
    CardTemplate("Lightning Bolt", "Instant", "{R}", colors=("red",)),
    CardTemplate("Fatal Push", "Instant", "{B}", colors=("black",)),
    CardTemplate("Abrupt Decay", "Instant", "{B}{G}", colors=("black", "green")),
    CardTemplate("Counterspell", "Instant", "{U}{U}", colors=("blue",)),
    CardTemplate("Brainstorm", "Instant", "{U}", colors=("blue",)),
    CardTemplate("Thoughtseize", "Sorcery", "{B}", colors=("black",)),
    CardTemplate("Demonic Tutor", "Sorcery", "{1}{B}", colors=("black",)),
    CardTemplate("Worldly Tutor", "Instant", "{G}", colors=("green",)),
    CardTemplate("Unearth", "Sorcery", "{B}", colors=("black",)),
    CardTemplate("Ponder", "Sorcery", "{U}", colors=("blue",)),
]

CATALOG: dict[str, CardTemplate] = {t.name.lower(): t for t in _TEMPLATES}


def get_template(name: str) -> CardTemplate | None:
    """Look up a catalog entry by (case-insensitive) name."""
    return CATALOG.get(name.strip().lower())


# ============================================================================
# Deck lists
# ============================================================================

STARTER_A: list[str] = (
    ["Slimefoot and Squee"]
    + ["Forest"] * 8
    + ["Mountain"] * 6
    + ["Swamp"] * 4
    + ["Bayou", "Badlands", "Taiga", "Command Tower"]
    + [
        "Llanowar Elves", "Elvish Mystic", "Fyndhorn Elves", "Birds of Paradise",
        "Tarmogoyf", "Grizzly Bears", "Goblin Guide", "Magus of the Moon",
        "Orcish Bowmasters", "Deathrite Shaman", "Skullclamp", "Wild Growth",
        "Lightning Bolt", "Fatal Push", "Abrupt Decay", "Thoughtseize",
        "Demonic Tutor",
    ]
)

STARTER_B: list[str] = (
    ["Kess, Dissident Mage"]
    + ["Island"] * 8
    + ["Swamp"] * 6
    + ["Mountain"] * 4
    + ["Command Tower", "Mana Confluence", "Blood Crypt"]
    + [
        "Snapcaster Mage", "Delver of Secrets", "Gravecrawler", "Opposition Agent",
        "Orcish Bowmasters", "Goblin Guide", "Sol Ring", "Rhystic Study",
        "Animate Dead", "Counterspell", "Brainstorm", "Ponder",
        "Lightning Bolt", "Fatal Push", "Thoughtseize", "Unearth",
    ]
)

BOT_DECK_LIST: list[str] = (
    ["Forest"] * 7
    + ["Swamp"] * 5
    + ["Mountain"] * 4
    + [
        "Bayou", "Badlands", "Taiga", "Overgrown Tomb", "Blood Crypt",
        "Stomping Ground", "Mana Confluence", "Pendelhaven", "Command Tower",
        "Llanowar Elves", "Elvish Mystic", "Fyndhorn Elves", "Birds of Paradise",
        "Tarmogoyf", "Deathrite Shaman", "Orcish Bowmasters", "Magus of the Moon",
        "Opposition Agent", "Skullclamp", "Wild Growth", "Utopia Sprawl",
        "Animate Dead", "Abrupt Decay", "Fatal Push", "Lightning Bolt",
        "Thoughtseize", "Demonic Tutor", "Worldly Tutor", "Unearth",
        "Slimefoot and Squee",
    ]
)

STARTER_DECKS: dict[str, list[str]] = {"A": STARTER_A, "B": STARTER_B}


def create_deck_from_names(names: list[str]) -> list[Card]:
    """
    Build fresh card instances from a list of names.

    Names missing from the catalog become placeholder cards rather than
    failing the whole deck.
    """
    deck = []
    for name in names:
        template = get_template(name)
        deck.append(template.instantiate() if template else placeholder_card(name))
    return deck


def starter_deck(choice: str) -> list[Card]:
    """Build one of the fixed starter decks ("A" or "B")."""
    try:
        names = STARTER_DECKS[choice.upper()]
    except KeyError:
        raise ValueError(f"Unknown starter deck: {choice}")
    return create_deck_from_names(names)


def shuffle_cards(cards: list[Any], rng: random.Random | None = None) -> list[Any]:
    """
    Return a uniformly shuffled copy (Fisher-Yates).

    The input list is left untouched.
    """
    rng = rng or random.Random()
    result = list(cards)
    for i in range(len(result) - 1, 0, -1):
        j = rng.randint(0, i)
        result[i], result[j] = result[j], result[i]
    return result

