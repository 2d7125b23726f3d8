"""
Sleuth CLI - Command-line interface for the engine.

Usage:
    sleuth cards [--catalog NAME]          List the cards of a catalog
    sleuth simulate [--players N] ...      Play one simulated game
    sleuth stats [--games N] ...           Round statistics over many games
    sleuth serve [--host H] [--port P]     Run the HTTP API
"""

import argparse
import logging
import sys

PLAYER_NAMES = ["Anna", "Ben", "Chris", "Daniel", "Emil", "Frida"]


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Sleuth - Deduction Engine for Cluedo-style Games",
        prog="sleuth",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level",
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Cards command
    cards_parser = subparsers.add_parser("cards", help="List the cards of a catalog")
    cards_parser.add_argument("--catalog", default="standard", help="Built-in catalog name or file path")
    cards_parser.add_argument("--locale", default="en", help="Display name locale")

    # Simulate command
    simulate_parser = subparsers.add_parser("simulate", help="Play one simulated game")
    _add_game_arguments(simulate_parser)
    simulate_parser.add_argument("--seed", type=int, help="Random seed")
    simulate_parser.add_argument("--show-matrix", action="store_true", help="Print the final matrix")
    simulate_parser.add_argument("--trace", action="store_true", help="Log every viewpoint turn and matrix")

    # Stats command
    stats_parser = subparsers.add_parser("stats", help="Round statistics over many simulated games")
    _add_game_arguments(stats_parser)
    stats_parser.add_argument("--games", type=int, default=100, help="Number of games per strategy")
    stats_parser.add_argument("--workers", type=int, default=1, help="Worker threads")
    stats_parser.add_argument("--seed", type=int, default=0, help="Seed of the first game")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "cards":
        return cmd_cards(args)
    elif args.command == "simulate":
        return cmd_simulate(args)
    elif args.command == "stats":
        return cmd_stats(args)
    elif args.command == "serve":
        return cmd_serve(args)
    else:
        parser.print_help()
        sys.exit(1)


def _add_game_arguments(subparser):
    subparser.add_argument("--catalog", default="standard", help="Built-in catalog name or file path")
    subparser.add_argument(
        "--players", type=int, default=5,
        help=f"Number of players (2-{len(PLAYER_NAMES)})",
    )
    subparser.add_argument(
        "--strategy",
        choices=["basic", "evaluation_based", "both"],
        default="evaluation_based",
        help="Question strategy of the viewpoint player",
    )
    subparser.add_argument("--max-rounds", type=int, default=100, help="Round cap per game")


def _load_cards(catalog: str):
    from .catalog import CatalogError, resolve_catalog

    try:
        return resolve_catalog(catalog)
    except CatalogError as e:
        print(f"Error: {e}")
        sys.exit(1)


def _build_players(count: int):
    from .engine_core import Player

    if not 2 <= count <= len(PLAYER_NAMES):
        print(f"Error: --players must be between 2 and {len(PLAYER_NAMES)}")
        sys.exit(1)
    return [
        Player(position=idx, name=name, is_viewpoint=idx == 0)
        for idx, name in enumerate(PLAYER_NAMES[:count])
    ]


def _strategies(name: str):
    from .simulator import QuestionStrategy

    if name == "both":
        return [QuestionStrategy.BASIC, QuestionStrategy.EVALUATION_BASED]
    return [QuestionStrategy(name)]


def cmd_cards(args):
    """List the cards of a catalog, grouped by category."""
    from .engine_core import cards_by_category, sort_cards

    cards = _load_cards(args.catalog)
    print(f"Catalog: {args.catalog} ({len(cards)} cards)")
    for category, members in cards_by_category(cards).items():
        print(f"\n[{category.label}]")
        for card in sort_cards(members):
            print(f"  {card.id:<16} {card.display_name(args.locale)}")


def cmd_simulate(args):
    """Play one simulated game per strategy and print the outcome."""
    from .engine_core import DataSetError, render_matrix, sort_cards
    from .session import run_simulated_game

    cards = _load_cards(args.catalog)
    players = _build_players(args.players)
    diagnostics = logging.getLogger("sleuth.trace") if args.trace else None
    if diagnostics is not None:
        diagnostics.setLevel(logging.DEBUG)

    for strategy in _strategies(args.strategy):
        try:
            outcome = run_simulated_game(
                cards,
                players,
                strategy=strategy,
                max_rounds=args.max_rounds,
                seed=args.seed,
                diagnostics=diagnostics,
            )
        except DataSetError as e:
            print(f"Error: {e}")
            sys.exit(1)

        print(f"Strategy: {strategy.value}")
        expected = ", ".join(card.id for card in sort_cards(outcome.expected_solution or []))
        print(f"  Hidden solution: {expected}")
        if outcome.found:
            found = ", ".join(card.id for card in sort_cards(outcome.solution_cards))
            print(f"  Solution found in turn({outcome.rounds}): {found}")
            if not outcome.correct:
                print("  WARNING: deduced solution does not match the hidden one")
        else:
            print(f"  No solution after {outcome.rounds} rounds "
                  f"({outcome.result.not_clear_count} cells open)")
        if args.show_matrix:
            print(render_matrix(outcome.result.matrix, caption=strategy.value))


def cmd_stats(args):
    """Run many games per strategy and print round statistics."""
    from .engine_core import DataSetError
    from .session import run_batch

    cards = _load_cards(args.catalog)
    players = _build_players(args.players)

    failed = False
    for strategy in _strategies(args.strategy):
        try:
            stats = run_batch(
                cards,
                players,
                games=args.games,
                strategy=strategy,
                max_rounds=args.max_rounds,
                seed=args.seed,
                workers=args.workers,
            )
        except DataSetError as e:
            print(f"Error: {e}")
            sys.exit(1)
        print(stats.summary())
        failed = failed or stats.mismatches > 0

    if failed:
        print("Error: some deduced solutions did not match the hidden ones")
        sys.exit(2)


def cmd_serve(args):
    """Run the HTTP API with uvicorn."""
    try:
        import uvicorn
    except ImportError:
        print("Error: uvicorn not installed. Install with: pip install sleuth[server]")
        sys.exit(1)

    uvicorn.run("sleuth.api.app:app", host=args.host, port=args.port)


if __name__ == "__main__":
    main()
