"""Ramp Simulator - Core Types and Enumerations

This module defines the fundamental types, enumerations, and error classes
used throughout the simulator. Colors and card types are flags so that
multicolored mana and multi-typed cards combine with a bitwise OR.
"""
from enum import Enum, Flag, auto


# =============================================================================
# Type Aliases
# =============================================================================

CardId = int


# =============================================================================
# Color Types
# =============================================================================

class Color(Flag):
    """
    The five colors of Magic.

    An empty flag is colorless. The member ordering (black, blue, green,
    red, white) is also the order counters are stored in a ManaPool.
    """
    COLORLESS = 0
    BLACK = auto()
    BLUE = auto()
    GREEN = auto()
    RED = auto()
    WHITE = auto()

    @classmethod
    def all_colors(cls) -> "Color":
        """Returns a Color flag with all five colors set."""
        return cls.BLACK | cls.BLUE | cls.GREEN | cls.RED | cls.WHITE

    @classmethod
    def from_symbol(cls, symbol: str) -> "Color":
        """Map a single mana letter (B, U, G, R, W, C) to a Color."""
        try:
            return _SYMBOL_TO_COLOR[symbol.upper()]
        except KeyError:
            raise SetupError(f"unknown color symbol: {symbol!r}") from None

    @property
    def symbol(self) -> str:
        return _COLOR_TO_SYMBOL.get(self, "C")


# Iteration order for counters and reports
COLORS = (Color.BLACK, Color.BLUE, Color.GREEN, Color.RED, Color.WHITE)

_SYMBOL_TO_COLOR = {
    'B': Color.BLACK,
    'U': Color.BLUE,
    'G': Color.GREEN,
    'R': Color.RED,
    'W': Color.WHITE,
    'C': Color.COLORLESS,
}

_COLOR_TO_SYMBOL = {
    Color.BLACK: 'B',
    Color.BLUE: 'U',
    Color.GREEN: 'G',
    Color.RED: 'R',
    Color.WHITE: 'W',
}


# =============================================================================
# Card Types
# =============================================================================

class CardType(Flag):
    """
    Card types tracked by the simulator.

    A card can be several of these at once (artifact creature, land
    creature), so this is a Flag rather than an Enum.
    """
    NONE = 0
    LAND = auto()
    CREATURE = auto()
    PLANESWALKER = auto()
    ARTIFACT = auto()
    ENCHANTMENT = auto()
    SORCERY = auto()
    INSTANT = auto()

    @property
    def is_permanent_type(self) -> bool:
        """Instants and sorceries go to the graveyard, everything else stays."""
        return not (self & (CardType.INSTANT | CardType.SORCERY))


def parse_types(type_line: str) -> CardType:
    """
    Parse a type line such as "Legendary Enchantment Creature - God".

    Matching is a case-insensitive substring search, so subtypes and
    supertypes are simply ignored.
    """
    lowered = type_line.lower()
    flags = CardType.NONE
    for card_type in CardType:
        if card_type is CardType.NONE:
            continue
        if card_type.name.lower() in lowered:
            flags |= card_type
    return flags


# =============================================================================
# Ability Triggers
# =============================================================================

class Trigger(Enum):
    """When an ability does its thing."""
    CAST = 'cast'            # on resolution when the card is played
    ACTIVATED = 'activated'  # on demand, by paying its cost
    UPKEEP = 'upkeep'        # at the beginning of each turn


# =============================================================================
# Mulligan Policy
# =============================================================================

class MulliganType(Enum):
    """
    Opening hand policy.

    NONE keeps the first seven cards. THREE_LANDS reshuffles the original
    library and redraws seven until the hand holds at least three lands.
    """
    NONE = 'none'
    THREE_LANDS = 'three-lands'


# =============================================================================
# Errors
# =============================================================================

class SimulationError(Exception):
    """Base class for everything the simulator raises on purpose."""
    pass


class SetupError(SimulationError, ValueError):
    """
    Bad input data: malformed mana costs, unknown cards, missing commander.

    These abort the run before the first turn is played.
    """
    pass


class InvariantViolation(SimulationError, RuntimeError):
    """
    The engine disagrees with itself.

    Raised when an approved payment fails, more mana is removed than is
    present, or a card is drawn from an empty library. Never caught by the
    engine.
    """
    pass
