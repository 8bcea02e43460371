#!/usr/bin/env python3
"""
Ramp Simulator - Command Line Runner

Point to a Commander deck list and simulate its early game.

Usage:
    rampsim --deck-list deck.txt [--games 1000] [--turns 10] [--verbose]

Example:
    rampsim --deck-list decks/golgari.txt --commander "Meren of Clan Nel Toth" \\
        --games 5000 --mulligan three-lands --workers 4 --seed 7
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from .cards.database import DEFAULT_CACHE_DIR, load_catalog
from .cards.parser import DecklistParser
from .engine.game import Game, Settings
from .engine.simulation import run_simulation
from .engine.types import InvariantViolation, MulliganType, SimulationError
from .report import print_statistics, summarize


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Simulate the early game of a Commander deck')
    parser.add_argument('--deck-list', required=True, help='Path to the deck list file')
    parser.add_argument('--commander', action='append', default=[],
                        help='Commander card name (repeat for partners)')
    parser.add_argument('--games', type=int, default=1000, help='Number of games (default: 1000)')
    parser.add_argument('--turns', type=int, default=10, help='Turns per game (default: 10)')
    parser.add_argument('--draw-on-turn-one', action='store_true',
                        help='Draw a card on the first turn')
    parser.add_argument('--mulligan', choices=[m.value for m in MulliganType],
                        default=MulliganType.NONE.value, help='Mulligan policy (default: none)')
    parser.add_argument('--seed', type=int, default=None, help='Master random seed')
    parser.add_argument('--workers', type=int, default=1,
                        help='Worker processes (default: 1, in-process)')
    parser.add_argument('--cache-dir', default=DEFAULT_CACHE_DIR,
                        help=f'Card data cache directory (default: {DEFAULT_CACHE_DIR})')
    parser.add_argument('--overrides', default=None, help='Ability overrides JSON file')
    parser.add_argument('--offline', action='store_true', help='Never download card data')
    parser.add_argument('--verbose', action='store_true', help='Show detailed game output')
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Run the simulation; exit code 0 on success, 1 for bad input, 2 for an engine fault."""
    args = build_parser().parse_args(argv)

    if not Path(args.deck_list).exists():
        print(f"Error: Deck file not found: {args.deck_list}")
        return 1

    try:
        decklist = DecklistParser().parse_file(args.deck_list)
        for name in args.commander:
            decklist.with_commander(name)

        catalog = load_catalog(decklist.names(), cache_dir=args.cache_dir,
                               overrides=args.overrides, offline=args.offline,
                               verbose=args.verbose)
        settings = Settings(
            turn_count=args.turns,
            draw_card_on_turn_one=args.draw_on_turn_one,
            mulligan=MulliganType(args.mulligan),
            verbose=args.verbose,
        )
        template = Game.from_deck(decklist.cards(), catalog, decklist.commanders)

        print("=" * 60)
        print(f"RAMP SIMULATOR - {decklist.name}")
        print("=" * 60)
        print(f"\nDeck: {decklist.total_count} cards, commander: "
              f"{', '.join(decklist.commanders) or 'none'}")
        print(f"Simulating {args.games} games of {args.turns} turns...")

        stats = run_simulation(template, settings, games=args.games,
                               seed=args.seed, workers=args.workers)
    except InvariantViolation as e:
        print(f"Internal error (simulator bug, not a deck problem): {e}")
        return 2
    except (SimulationError, FileNotFoundError) as e:
        print(f"Error: {e}")
        return 1

    print_statistics(summarize(stats))
    return 0


if __name__ == "__main__":
    sys.exit(main())
