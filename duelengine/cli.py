"""
Duel Engine CLI - Command-line interface for the engine.

Usage:
    duelengine serve [--host H] [--port P]     Run the HTTP/WebSocket gateway
    duelengine demo [--turns N] [--seed S]     Play a scripted match vs the bot
    duelengine import-deck <deck_file>         Resolve a decklist and summarize it
"""

import argparse
import asyncio
import json
import random
import sys

from .config import get_settings
from .observability import setup_logging


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Duel Engine - Turn-based card duels against a bot",
        prog="duelengine",
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Run the API gateway")
    serve_parser.add_argument("--host", help="Bind address (default from DUEL_HOST)")
    serve_parser.add_argument("--port", type=int, help="Port (default from DUEL_PORT)")
    serve_parser.add_argument("--reload", action="store_true", help="Auto-reload on code changes")

    # Demo command
    demo_parser = subparsers.add_parser("demo", help="Play a scripted local match vs the bot")
    demo_parser.add_argument("--turns", type=int, default=2, help="Number of your turns to play")
    demo_parser.add_argument("--seed", type=int, help="Seed for shuffles")

    # Import command
    import_parser = subparsers.add_parser("import-deck", help="Resolve a decklist file")
    import_parser.add_argument("deck_file", help="Path to a decklist text file")

    args = parser.parse_args()
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)

    if args.command == "serve":
        cmd_serve(args)
    elif args.command == "demo":
        asyncio.run(cmd_demo(args))
    elif args.command == "import-deck":
        asyncio.run(cmd_import_deck(args))
    else:
        parser.print_help()
        sys.exit(1)


def cmd_serve(args):
    """Run the gateway with uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "duelengine.api.app:app",
        host=args.host or settings.host,
        port=args.port or settings.port,
        reload=args.reload,
        log_config=None,
    )


async def cmd_demo(args):
    """Play a few turns against the bot and print the final public state."""
    from .engine_core.action import Action
    from .engine_core.phases import passes_between, passes_to_end_turn
    from .engine_core.state import Phase
    from .session import GameLoop, MatchRegistry

    rng = random.Random(args.seed) if args.seed is not None else None
    registry = MatchRegistry(rng=rng)
    session_id = "demo"
    match = registry.create_match("You", session_id)
    loop = GameLoop(match)
    me = match.find_player_by_session(session_id)

    print(f"Match created: {match.match_id}")
    for _ in range(args.turns):
        for _ in range(passes_between(match.state.phase, Phase.MAIN1)):
            await loop.process_action(Action.pass_priority(), session_id)

        land = next((c for c in me.hand if c.is_land), None)
        if land is not None:
            result = await loop.process_action(Action.play_land(land.card_id), session_id)
            print(f"Turn {match.state.turn}: " + "; ".join(result.state_changes))

        spell = next((c for c in me.hand if c.has_type("creature")), None)
        if spell is not None:
            result = await loop.process_action(Action.cast(spell.card_id), session_id)
            print(f"Turn {match.state.turn}: " + "; ".join(result.state_changes))

        for _ in range(passes_to_end_turn(match.state.phase)):
            result = await loop.process_action(Action.pass_priority(), session_id)
        if result.bot_actions:
            print(f"Bot took {len(result.bot_actions)} action(s)")

    print(json.dumps(match.get_public_state(), indent=2))


async def cmd_import_deck(args):
    """Resolve a decklist file against Scryfall and summarize it."""
    from .deck_import import DeckImportError, DeckImportService

    try:
        with open(args.deck_file, "r", encoding="utf-8") as f:
            deck_text = f.read()
    except FileNotFoundError:
        print(f"Error: File not found: {args.deck_file}")
        sys.exit(1)

    async with DeckImportService() as service:
        try:
            deck = await service.import_deck(deck_text=deck_text)
        except DeckImportError as e:
            print(f"Error: {e}")
            sys.exit(1)

    print(f"Cards: {deck.total_cards}")
    print(f"Sideboard: {len(deck.sideboard)}")
    if deck.commander:
        print(f"Commander: {deck.commander.name}")

    if deck.warnings:
        print("\nAnalysis:")
        for w in deck.warnings:
            print(f"  - {w}")

    if deck.validation_errors:
        print("\nValidation:")
        for e in deck.validation_errors:
            print(f"  - {e}")


if __name__ == "__main__":
    main()
