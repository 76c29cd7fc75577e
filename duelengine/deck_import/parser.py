"""
Decklist Parsing - Turns free-text decklists into (quantity, name) entries
and analyses finished decks.

Accepted line shapes:
    4 Lightning Bolt
    4x Lightning Bolt
    // comments are ignored

Section headers switch where following cards go:
    Sideboard        -> sideboard
    Commander        -> main deck, flagged as commander
"""

from __future__ import annotations
from collections import Counter
from dataclasses import dataclass
from enum import Enum
import re

from ..engine_core.cards import Card

CARD_LINE = re.compile(r"^(\d+)\s*x?\s*(.+)$", re.IGNORECASE)
BASIC_LANDS = frozenset({"plains", "island", "swamp", "mountain", "forest"})
MIN_DECK_SIZE = 60
MAX_COPIES = 4


class Section(Enum):
    MAIN = "main"
    SIDEBOARD = "sideboard"
    COMMANDER = "commander"


@dataclass
class DeckLine:
    quantity: int
    name: str
    section: Section = Section.MAIN


def _header(line: str) -> Section | None:
    """Recognise a bare section header such as 'Sideboard:' or '// Commander'."""
    text = line.lstrip("/").strip().rstrip(":").strip().lower()
    if text.startswith("sideboard"):
        return Section.SIDEBOARD
    if text in {"commander", "commanders"}:
        return Section.COMMANDER
    if text in {"deck", "main", "mainboard", "main deck"}:
        return Section.MAIN
    return None


def parse_card_line(line: str) -> DeckLine:
    """Parse a single card line. A line without a quantity counts as one copy."""
    match = CARD_LINE.match(line.strip())
    if match:
        return DeckLine(quantity=int(match.group(1)), name=match.group(2).strip())
    return DeckLine(quantity=1, name=line.strip())


def parse_deck_text(text: str) -> list[DeckLine]:
    """Parse a whole decklist into entries, in order."""
    entries = []
    section = Section.MAIN
    for raw in text.splitlines():
        line = raw.strip()
        if not line:
            continue

        header = _header(line)
        if header is not None:
            section = header
            continue

        if line.startswith("//") or not line[0].isdigit():
            continue

        entry = parse_card_line(line)
        entry.section = section
        entries.append(entry)
    return entries


def validate_deck(cards: list[Card]) -> list[str]:
    """Basic constructed-format checks. Returns a list of errors."""
    errors = []
    if len(cards) < MIN_DECK_SIZE:
        errors.append(f"Deck must have at least {MIN_DECK_SIZE} cards (has {len(cards)})")

    counts = Counter(card.name.lower() for card in cards)
    for name, count in counts.items():
        if count > MAX_COPIES and name not in BASIC_LANDS:
            errors.append(f"Too many copies of {name} ({count}, max {MAX_COPIES})")
    return errors


def mana_value(card: Card) -> int:
    """Rough mana value from a cost like '{2}{G}{G}' or a plain number."""
    cost = card.mana_cost
    if isinstance(cost, (int, float)):
        return int(cost)
    total = 0
    for symbol in re.findall(r"\{([^}]+)\}", cost or ""):
        if symbol.isdigit():
            total += int(symbol)
        elif symbol.upper() != "X":
            total += 1
    return total


def analyze_deck(cards: list[Card]) -> list[str]:
    """Composition warnings: land count, creature count, curve, colours."""
    warnings = []
    lands = sum(1 for c in cards if c.is_land)
    creatures = sum(1 for c in cards if c.has_type("creature"))
    colors = {color for c in cards for color in c.colors}
    avg = sum(mana_value(c) for c in cards) / len(cards) if cards else 0.0

    if lands < 15:
        warnings.append(f"Low land count ({lands}). Consider adding more lands for consistent mana.")
    if lands > 28:
        warnings.append(f"High land count ({lands}). Consider adding more spells.")
    if creatures < 10:
        warnings.append(f"Low creature count ({creatures}). May struggle with board presence.")
    if avg > 4:
        warnings.append(f"High average mana cost ({avg:.1f}). Deck may be slow.")
    if cards and avg < 2:
        warnings.append(f"Low average mana cost ({avg:.1f}). May run out of gas in long games.")
    if len(colors) > 3:
        warnings.append(f"Many colors ({len(colors)}). Mana base may be inconsistent.")
    return warnings
