"""Ramp Simulator - Game Session

A Game owns the five zones of one goldfish run, the random source driving
it, and the statistics it accumulates. A template Game is built once from a
deck list and a card catalog, then cloned for every independent run:
clones share the read-only CardDefinitions but nothing mutable.
"""
import random
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence, Tuple

from .objects import Card, CardDefinition
from .turns import TurnStats, run_turn
from .types import CardType, InvariantViolation, MulliganType, SetupError
from .zones import Zone

__all__ = ['Settings', 'TurnStats', 'GameStats', 'Game']


# =============================================================================
# CONFIGURATION AND RESULT DATACLASSES
# =============================================================================

@dataclass
class Settings:
    """
    Configuration of a simulation run.

    Attributes:
        turn_count: Number of turns played per game (default 10)
        draw_card_on_turn_one: Draw for the turn on turn one (default False)
        mulligan: Opening hand policy (default MulliganType.NONE)
        starting_hand_size: Cards in the opening hand (default 7)
        verbose: Narrate every game to stdout (default False)
    """
    turn_count: int = 10
    draw_card_on_turn_one: bool = False
    mulligan: MulliganType = MulliganType.NONE
    starting_hand_size: int = 7
    verbose: bool = False

    def __post_init__(self):
        if self.turn_count < 1:
            raise SetupError(f"turn_count must be at least 1, got {self.turn_count}")
        if self.starting_hand_size < 0:
            raise SetupError(f"starting_hand_size cannot be negative, got {self.starting_hand_size}")


@dataclass
class GameStats:
    """
    Result of one simulated game.

    Attributes:
        mulligan_count: Number of reshuffles done for the opening hand
        turn_commander_played: Turn the commander entered play, 0 if never
        turns_stats: One TurnStats per turn played
    """
    mulligan_count: int = 0
    turn_commander_played: int = 0
    turns_stats: List[TurnStats] = field(default_factory=list)


# =============================================================================
# MAIN GAME CLASS
# =============================================================================

class Game:
    """
    One run of the simulator.

    Attributes:
        library: Draw pile; the top is the end of the list
        hand: Cards in hand
        command: The commander(s) waiting to be cast
        battlefield: Permanents in play
        graveyard: Resolved spells and sacrificed permanents
        rng: Random source for shuffles and availability rolls
        verbose: Narrate the game to stdout
        stats: Statistics accumulated by play()
        turn_number: Turn in progress, 0 before the first turn
    """

    def __init__(self, rng: Optional[random.Random] = None, verbose: bool = False):
        self.library = Zone("Library")
        self.hand = Zone("Hand")
        self.command = Zone("Command")
        self.battlefield = Zone("Battlefield")
        self.graveyard = Zone("Graveyard")

        self.rng = rng if rng is not None else random.Random()
        self.verbose = verbose
        self.stats = GameStats()
        self.turn_number = 0

    # =========================================================================
    # SETUP
    # =========================================================================

    @classmethod
    def from_deck(cls, cards: Iterable[Tuple[int, str]], catalog,
                  commanders: Sequence[str] = (),
                  rng: Optional[random.Random] = None,
                  verbose: bool = False) -> 'Game':
        """
        Build a template game from a deck list.

        One copy of each commander is taken out of the deck list and put in
        the command zone; everything else goes into the library.

        Args:
            cards: (count, card name) pairs, commanders included
            catalog: Anything with a `get(name) -> CardDefinition` lookup
            commanders: Names of the commander cards
            rng: Random source for the game
            verbose: Narrate the game

        Returns:
            A game ready for clone() and play()

        Raises:
            SetupError: If a card is missing from the catalog, a commander
                is not in the deck list, or a commander has no mana cost.
        """
        counts: List[List] = []
        for count, name in cards:
            counts.append([count, name])

        game = cls(rng=rng, verbose=verbose)

        for commander_name in commanders:
            entry = next((e for e in counts
                          if e[0] > 0 and e[1].lower() == commander_name.lower()), None)
            if entry is None:
                raise SetupError(f"commander '{commander_name}' not found in deck list")
            entry[0] -= 1
            definition = _lookup(catalog, entry[1])
            if definition.mana_cost is None:
                raise SetupError(f"commander '{definition.name}' has no mana cost")
            game.command.add(Card(id=0, definition=definition))

        for count, name in counts:
            if count <= 0:
                continue
            definition = _lookup(catalog, name)
            for _ in range(count):
                game.library.add(Card(id=0, definition=definition))

        next_id = game.command.assign_ids(1)
        game.library.assign_ids(next_id)
        return game

    def clone(self, rng: Optional[random.Random] = None) -> 'Game':
        """
        Independent copy of this game for a new run.

        Zones are copied card by card; CardDefinitions are shared. Stats
        start fresh.
        """
        game = Game(rng=rng if rng is not None else random.Random(), verbose=self.verbose)
        game.library = self.library.copy()
        game.hand = self.hand.copy()
        game.command = self.command.copy()
        game.battlefield = self.battlefield.copy()
        game.graveyard = self.graveyard.copy()
        return game

    # =========================================================================
    # CARD DRAWING
    # =========================================================================

    def draw_cards(self, count: int) -> int:
        """
        Draw cards from the top of the library into the hand.

        Returns:
            Number of cards drawn (always `count`)

        Raises:
            InvariantViolation: If the library runs out.
        """
        for _ in range(count):
            card = self.library.draw()
            if card is None:
                raise InvariantViolation("library is out of cards")
            self.log(f"draw card: {card}")
            self.hand.add(card)
        return count

    def draw_opening_hand(self, settings: Settings) -> None:
        """
        Shuffle and draw the opening hand, applying the mulligan policy.

        With MulliganType.THREE_LANDS the library is restored to its
        pre-shuffle order and reshuffled until the hand holds at least three
        lands; every reshuffle counts as one mulligan.

        Raises:
            SetupError: If the library is smaller than a hand, or the policy
                can never be satisfied.
        """
        size = settings.starting_hand_size
        if len(self.library) < size:
            raise SetupError(f"library has {len(self.library)} cards, cannot draw {size}")

        if settings.mulligan is MulliganType.THREE_LANDS:
            if size < 3 or len(self.library.query(CardType.LAND)) < 3:
                raise SetupError("three-lands mulligan needs at least three lands and a hand of three")

            original_library = self.library.copy()
            self.library.shuffle(self.rng)
            self.draw_cards(size)
            while len(self.hand.query(CardType.LAND)) < 3:
                self.log("Not enough lands in hand, doing a mulligan...")
                self.library = original_library.copy()
                self.library.shuffle(self.rng)
                self.hand.clear()
                self.draw_cards(size)
                self.stats.mulligan_count += 1
        else:
            self.library.shuffle(self.rng)
            self.draw_cards(size)

    # =========================================================================
    # MAIN GAME LOOP
    # =========================================================================

    def play(self, settings: Settings) -> GameStats:
        """
        Play a complete game of `settings.turn_count` turns.

        Returns:
            The GameStats of this run
        """
        if not self.library:
            raise SetupError("cannot play a game with an empty library")
        if self.hand or self.battlefield or self.graveyard:
            raise InvariantViolation("game has already been played")
        if settings.verbose:
            self.verbose = True

        self.command.sort_by_mana_value()
        next_id = self.command.assign_ids(1)
        self.library.assign_ids(next_id)

        self.draw_opening_hand(settings)

        for turn_number in range(1, settings.turn_count + 1):
            self.stats.turns_stats.append(run_turn(self, turn_number, settings))

        return self.stats

    # =========================================================================
    # LOGGING METHODS
    # =========================================================================

    def log(self, message: str, level: str = "info"):
        """
        Log a message if verbose mode is enabled.

        Args:
            message: The message to log
            level: Log level ("info", "debug", "warning")
        """
        if self.verbose:
            prefix = {
                "info": "[INFO]",
                "debug": "[DEBUG]",
                "warning": "[WARN]",
            }.get(level, "[INFO]")
            print(f"{prefix} Turn {self.turn_number}: {message}")

    def dump(self):
        self.library.dump()
        self.hand.dump()
        self.command.dump()


def _lookup(catalog, name: str) -> CardDefinition:
    definition = catalog.get(name)
    if definition is None:
        raise SetupError(f"card '{name}' not found in catalog")
    return definition
