"""Ramp Simulator - Simulation Runner

Runs many independent games of the same deck and collects their GameStats.
Every run starts from a clone of a template Game and owns its own
random.Random, seeded from a master generator, so a whole batch is
reproducible from a single seed whether it runs in-process or across a
process pool.
"""
import random
from concurrent.futures import ProcessPoolExecutor
from typing import List, Optional

from .game import Game, GameStats, Settings


# =============================================================================
# SIMULATION RUNNER CLASS
# =============================================================================

class SimulationRunner:
    """
    Runs a number of independent games of one deck.

    Attributes:
        template: The game every run is cloned from
        settings: Settings shared by all runs
        games: Number of games to simulate
        seed: Master seed, None for a random batch
    """

    def __init__(
        self,
        template: Game,
        settings: Settings = None,
        games: int = 1000,
        seed: Optional[int] = None
    ):
        """
        Initialize the runner.

        Args:
            template: Game built with Game.from_deck
            settings: Simulation settings, defaults if not provided
            games: Number of games to run
            seed: Master seed for the per-run random sources
        """
        if games < 1:
            raise ValueError(f"games must be at least 1, got {games}")
        self.template = template
        self.settings = settings or Settings()
        self.games = games
        self.seed = seed

    def run_seeds(self) -> List[int]:
        """One seed per run, drawn from the master generator."""
        master = random.Random(self.seed)
        return [master.getrandbits(64) for _ in range(self.games)]

    def run(self) -> List[GameStats]:
        """
        Run all games sequentially.

        Returns:
            GameStats of every run, in run order
        """
        results: List[GameStats] = []
        for i, seed in enumerate(self.run_seeds()):
            if self.settings.verbose:
                print(f"\n=== Game {i + 1}/{self.games} ===")
            results.append(_run_single_game(self.template, self.settings, seed))
        return results

    def run_parallel(self, num_workers: int = 4) -> List[GameStats]:
        """
        Run games in parallel using multiple processes.

        Each game runs in a separate process with a quiet copy of the
        settings; results come back in run order, so a seeded batch gives
        the same statistics as run().

        Args:
            num_workers: Number of parallel worker processes

        Returns:
            GameStats of every run, in run order
        """
        if num_workers <= 1:
            return self.run()

        settings = Settings(
            turn_count=self.settings.turn_count,
            draw_card_on_turn_one=self.settings.draw_card_on_turn_one,
            mulligan=self.settings.mulligan,
            starting_hand_size=self.settings.starting_hand_size,
            verbose=False,
        )
        template = self.template.clone()
        template.verbose = False

        with ProcessPoolExecutor(max_workers=num_workers) as executor:
            futures = [
                executor.submit(_run_single_game, template, settings, seed)
                for seed in self.run_seeds()
            ]
            return [future.result() for future in futures]


def _run_single_game(template: Game, settings: Settings, seed: int) -> GameStats:
    """
    Helper function for game execution.

    This function runs in a separate process when using run_parallel.
    """
    game = template.clone(rng=random.Random(seed))
    return game.play(settings)


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================

def run_simulation(
    template: Game,
    settings: Settings = None,
    games: int = 1000,
    seed: Optional[int] = None,
    workers: int = 1
) -> List[GameStats]:
    """
    Simulate `games` independent runs of a deck.

    Args:
        template: Game built with Game.from_deck
        settings: Simulation settings
        games: Number of runs (default 1000)
        seed: Master seed, None for a random batch
        workers: Worker processes; 1 runs in-process

    Returns:
        One GameStats per run

    Example:
        catalog = CardCatalog(cache_dir="cards.db")
        decklist = DecklistParser().parse_file("decks/golgari.txt")
        template = Game.from_deck(decklist.cards(), catalog.load_all(decklist.names()),
                                  decklist.commanders)
        stats = run_simulation(template, Settings(turn_count=8), games=500, seed=1)
    """
    runner = SimulationRunner(template, settings=settings, games=games, seed=seed)
    if workers > 1:
        return runner.run_parallel(num_workers=workers)
    return runner.run()
