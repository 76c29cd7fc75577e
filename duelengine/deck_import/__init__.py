"""
Deck Import - Resolves decklists (text or URL) into card records.

The engine only depends on the DeckImporter protocol; DeckImportService
is the Scryfall-backed implementation.
"""

from typing import Protocol

from .parser import DeckLine, Section, analyze_deck, parse_deck_text, validate_deck
from .service import (
    DeckImportError,
    DeckImportService,
    ImportedDeck,
    card_from_scryfall,
    html_to_text,
)


class DeckImporter(Protocol):
    """Anything that can turn a decklist into an ImportedDeck."""

    async def import_deck(
        self,
        deck_text: str | None = None,
        deck_url: str | None = None,
    ) -> ImportedDeck:
        ...


__all__ = [
    "DeckImporter",
    "DeckImportError",
    "DeckImportService",
    "ImportedDeck",
    "card_from_scryfall",
    "html_to_text",
    "DeckLine",
    "Section",
    "analyze_deck",
    "parse_deck_text",
    "validate_deck",
]
