"""
Deck Import Service - Resolves decklists into concrete card records.

Sources:
- Free text ("4 Lightning Bolt" lines)
- Moxfield, Archidekt and TappedOut deck URLs (their public JSON APIs)
- Deckstats deck pages (the list is scraped from the HTML)
- A single Scryfall card URL

Card data comes from Scryfall's /cards/named endpoint. Lookups are cached
for a short TTL and spaced by a minimum delay to respect the API's rate
limit. A name that fails to resolve becomes a placeholder card instead of
failing the import.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import unquote
import asyncio
import html
import logging
import re
import time

import httpx

from ..config import Settings, get_settings
from ..engine_core.cards import Card, new_card_id, placeholder_card
from .parser import DeckLine, Section, analyze_deck, parse_deck_text, validate_deck

logger = logging.getLogger(__name__)

SUPPORTED_SITES = {
    "moxfield": "moxfield.com",
    "tappedout": "tappedout.net",
    "deckstats": "deckstats.net",
    "archidekt": "archidekt.com",
    "scryfall": "scryfall.com",
}

DECKSTATS_LIST = re.compile(
    r'<div[^>]*class="[^"]*deckList[^"]*"[^>]*>(.*?)</div>', re.DOTALL | re.IGNORECASE
)


class DeckImportError(Exception):
    """Raised when a deck source cannot be read at all."""


@dataclass
class ImportedDeck:
    """Result of an import."""
    cards: list[Card] = field(default_factory=list)
    sideboard: list[Card] = field(default_factory=list)
    name: str | None = None
    source: str = "text"
    warnings: list[str] = field(default_factory=list)
    validation_errors: list[str] = field(default_factory=list)

    @property
    def total_cards(self) -> int:
        return len(self.cards)

    @property
    def commander(self) -> Card | None:
        return next((c for c in self.cards if c.is_commander), None)


@dataclass
class _CacheEntry:
    data: dict[str, Any]
    timestamp: float


def card_from_scryfall(
    data: dict[str, Any],
    is_commander: bool = False,
    is_sideboard: bool = False,
) -> Card:
    """Build one card copy from a Scryfall card object."""
    image = (data.get("image_uris") or {}).get("normal")
    if image is None and data.get("card_faces"):
        image = (data["card_faces"][0].get("image_uris") or {}).get("normal")

    return Card(
        card_id=new_card_id(data.get("name", "card")),
        name=data.get("name", ""),
        type_line=data.get("type_line") or data.get("type") or "",
        mana_cost=data.get("mana_cost") or data.get("cmc") or 0,
        power=data.get("power") or 0,
        toughness=data.get("toughness") or 0,
        colors=tuple(data.get("colors") or ()),
        image=image,
        is_commander=is_commander,
        text=data.get("oracle_text") or "",
        is_sideboard=is_sideboard,
    )


def html_to_text(fragment: str) -> str:
    """Flatten an HTML fragment into one line per block or <br>."""
    text = re.sub(r"<br\s*/?>|</(?:li|p|div|tr)>", "\n", fragment, flags=re.IGNORECASE)
    text = html.unescape(re.sub(r"<[^>]*>", " ", text))
    lines = (" ".join(line.split()) for line in text.splitlines())
    return "\n".join(line for line in lines if line)


class DeckImportService:
    """
    Imports decks from text or supported deck-building sites.

    Usage:
        async with DeckImportService() as service:
            deck = await service.import_deck(deck_text="4 Forest\\n4 Llanowar Elves")
    """

    def __init__(
        self,
        settings: Settings | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        self.settings = settings or get_settings()
        self._client = client
        self._owns_client = client is None
        self._cache: dict[str, _CacheEntry] = {}
        self._last_request = 0.0
        self._rate_lock = asyncio.Lock()

    async def __aenter__(self) -> DeckImportService:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.settings.http_timeout_seconds,
                headers={
                    "User-Agent": self.settings.user_agent,
                    "Accept": "application/json, text/plain, */*",
                },
            )
        return self._client

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    # =========================================================================
    # Entry points
    # =========================================================================

    async def import_deck(
        self,
        deck_text: str | None = None,
        deck_url: str | None = None,
    ) -> ImportedDeck:
        """Import from text if given, else from a URL."""
        if deck_text:
            return await self.import_from_text(deck_text)
        if deck_url:
            return await self.import_from_url(deck_url)
        raise DeckImportError("No deck text or URL provided")

    async def import_from_text(self, deck_text: str) -> ImportedDeck:
        return await self._build_deck(parse_deck_text(deck_text), source="text")

    async def import_from_url(self, url: str) -> ImportedDeck:
        site = self.identify_site(url)
        if site == "moxfield":
            return await self._import_moxfield(url)
        if site == "tappedout":
            return await self._import_tappedout(url)
        if site == "deckstats":
            return await self._import_deckstats(url)
        if site == "archidekt":
            return await self._import_archidekt(url)
        if site == "scryfall":
            return await self._import_scryfall(url)
        raise DeckImportError(f"Unsupported deck site: {url}")

    @staticmethod
    def identify_site(url: str) -> str:
        for site, domain in SUPPORTED_SITES.items():
            if domain in url:
                return site
        return "unknown"

    # =========================================================================
    # Site importers
    # =========================================================================

    async def _import_moxfield(self, url: str) -> ImportedDeck:
        match = re.search(r"moxfield\.com/decks/([a-zA-Z0-9_-]+)", url)
        if not match:
            raise DeckImportError("Invalid Moxfield URL format")

        deck = await self._get_json(f"https://api.moxfield.com/v2/decks/all/{match.group(1)}")
        entries = []
        try:
            for board, section in (
                ("commanders", Section.COMMANDER),
                ("mainboard", Section.MAIN),
                ("sideboard", Section.SIDEBOARD),
            ):
                for entry in (deck.get(board) or {}).values():
                    entries.append(DeckLine(
                        quantity=int(entry.get("quantity", 1)),
                        name=entry["card"]["name"],
                        section=section,
                    ))
        except (AttributeError, KeyError, TypeError, ValueError):
            raise DeckImportError("Unexpected Moxfield response format")
        return await self._build_deck(entries, source="moxfield", name=deck.get("name"))

    async def _import_tappedout(self, url: str) -> ImportedDeck:
        match = re.search(r"tappedout\.net/mtg-decks/([a-zA-Z0-9_-]+)", url)
        if not match:
            raise DeckImportError("Invalid TappedOut URL format")

        deck = await self._get_json(
            f"https://tappedout.net/api/deck/get/{match.group(1)}/",
            params={"fmt": "json"},
        )
        try:
            entries = parse_deck_text(deck.get("board") or "")
            for entry in parse_deck_text(deck.get("sideboard") or ""):
                entry.section = Section.SIDEBOARD
                entries.append(entry)
        except (AttributeError, TypeError):
            raise DeckImportError("Unexpected TappedOut response format")
        return await self._build_deck(entries, source="tappedout", name=deck.get("name"))

    async def _import_deckstats(self, url: str) -> ImportedDeck:
        """Deckstats has no public API; the list is scraped from the deck page."""
        page = await self._get_text(url)
        match = DECKSTATS_LIST.search(page)
        if not match:
            raise DeckImportError("Could not extract deck list from DeckStats")

        deck = await self.import_from_text(html_to_text(match.group(1)))
        deck.source = "deckstats"
        return deck

    async def _import_archidekt(self, url: str) -> ImportedDeck:
        match = re.search(r"archidekt\.com/decks/(\d+)", url)
        if not match:
            raise DeckImportError("Invalid Archidekt URL format")

        deck = await self._get_json(f"https://archidekt.com/api/decks/{match.group(1)}/")
        entries = []
        try:
            for entry in deck.get("cards") or []:
                categories = {c.lower() for c in entry.get("categories") or []}
                if "commander" in categories:
                    section = Section.COMMANDER
                elif "sideboard" in categories or "maybeboard" in categories:
                    section = Section.SIDEBOARD
                else:
                    section = Section.MAIN
                entries.append(DeckLine(
                    quantity=int(entry.get("quantity", 1)),
                    name=entry["card"]["oracleCard"]["name"],
                    section=section,
                ))
        except (AttributeError, KeyError, TypeError, ValueError):
            raise DeckImportError("Unexpected Archidekt response format")
        return await self._build_deck(entries, source="archidekt", name=deck.get("name"))

    async def _import_scryfall(self, url: str) -> ImportedDeck:
        match = re.search(r"scryfall\.com/card/[^/]+/[^/]+/([^/?#]+)", url)
        if not match:
            raise DeckImportError("Invalid Scryfall URL format")

        name = unquote(match.group(1)).replace("-", " ")
        data = await self._lookup(name, fuzzy=True)
        cards = [card_from_scryfall(data) if data else placeholder_card(name)]
        return ImportedDeck(
            cards=cards,
            name=cards[0].name,
            source="scryfall",
            warnings=analyze_deck(cards),
            validation_errors=validate_deck(cards),
        )

    # =========================================================================
    # Card resolution
    # =========================================================================

    async def _build_deck(
        self,
        entries: list[DeckLine],
        source: str,
        name: str | None = None,
    ) -> ImportedDeck:
        cards: list[Card] = []
        sideboard: list[Card] = []
        for entry in entries:
            data = await self._lookup(entry.name)
            for _ in range(entry.quantity):
                if data is None:
                    card = placeholder_card(entry.name)
                else:
                    card = card_from_scryfall(
                        data,
                        is_commander=entry.section == Section.COMMANDER,
                        is_sideboard=entry.section == Section.SIDEBOARD,
                    )
                if entry.section == Section.SIDEBOARD:
                    sideboard.append(card)
                else:
                    cards.append(card)

        logger.info("Imported %d cards (%d sideboard) from %s", len(cards), len(sideboard), source)
        return ImportedDeck(
            cards=cards,
            sideboard=sideboard,
            name=name,
            source=source,
            warnings=analyze_deck(cards),
            validation_errors=validate_deck(cards),
        )

    async def _lookup(self, name: str, fuzzy: bool = False) -> dict[str, Any] | None:
        """Scryfall lookup with TTL cache. Returns None on any failure."""
        self._prune_cache()
        key = f"card_{name.lower()}"
        cached = self._cache.get(key)
        if cached:
            return cached.data

        param = "fuzzy" if fuzzy else "exact"
        try:
            data = await self._get_json(
                f"{self.settings.scryfall_base_url}/cards/named",
                params={param: name},
            )
        except DeckImportError as e:
            logger.warning("Failed to fetch card data for %r: %s", name, e)
            return None

        self._cache[key] = _CacheEntry(data=data, timestamp=time.monotonic())
        return data

    def _prune_cache(self) -> None:
        now = time.monotonic()
        ttl = self.settings.card_cache_ttl_seconds
        for key in [k for k, v in self._cache.items() if now - v.timestamp >= ttl]:
            del self._cache[key]

    async def _wait_for_rate_limit(self) -> None:
        async with self._rate_lock:
            min_delay = self.settings.request_min_delay_ms / 1000
            elapsed = time.monotonic() - self._last_request
            if elapsed < min_delay:
                await asyncio.sleep(min_delay - elapsed)
            self._last_request = time.monotonic()

    async def _get(self, url: str, params: dict[str, str] | None = None) -> httpx.Response:
        await self._wait_for_rate_limit()
        try:
            response = await self.client.get(url, params=params)
            response.raise_for_status()
            return response
        except httpx.TimeoutException:
            raise DeckImportError("Request timeout")
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            if status == 404:
                raise DeckImportError("Deck or card not found")
            if status == 429:
                raise DeckImportError("Rate limit exceeded")
            raise DeckImportError(f"Network error: HTTP {status}")
        except httpx.HTTPError as e:
            raise DeckImportError(f"Network error: {e}")

    async def _get_json(self, url: str, params: dict[str, str] | None = None) -> dict[str, Any]:
        response = await self._get(url, params=params)
        try:
            data = response.json()
        except ValueError as e:
            raise DeckImportError(f"Network error: {e}")
        if not isinstance(data, dict):
            raise DeckImportError("Unexpected response format")
        return data

    async def _get_text(self, url: str) -> str:
        return (await self._get(url)).text

    # =========================================================================
    # Cache management
    # =========================================================================

    def clear_cache(self) -> None:
        self._cache.clear()

    def cache_stats(self) -> dict[str, Any]:
        return {"size": len(self._cache), "keys": list(self._cache.keys())}
