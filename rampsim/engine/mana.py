"""Ramp Simulator - Mana System Implementation

This module implements the resource algebra the turn engine is built on:
single units of mana, pools of mana (used both for costs and for what is
available), the payment solver answering "can this pool pay that cost?",
and the pip histograms used to pick which land to play.

Mana units come in four shapes:
    - colorless:  no color bits, pays only generic requirements
    - monocolor:  exactly one bit
    - wildcard:   all five bits, "one mana of any color"
    - hybrid:     2-4 bits, one mana of any color from that subset
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from itertools import product
from typing import Dict, Iterator, List, Optional

from .types import COLORS, Color, InvariantViolation, SetupError


# =============================================================================
# Mana Unit
# =============================================================================

@dataclass(frozen=True)
class Mana:
    """A single unit of mana (or of a mana requirement).

    Attributes:
        colors: The colors this unit can be spent as. Empty means colorless.
    """
    colors: Color = Color.COLORLESS

    @classmethod
    def mono(cls, color: Color) -> 'Mana':
        return cls(colors=color)

    @classmethod
    def hybrid(cls, *colors: Color) -> 'Mana':
        """Build a unit payable by any one of the given colors."""
        combined = Color.COLORLESS
        for color in colors:
            combined |= color
        return cls(colors=combined)

    @classmethod
    def parse(cls, symbol: str) -> 'Mana':
        """Parse the inside of a single brace symbol: "C", "G", "B/G", ...

        Raises:
            SetupError: If any part of the symbol is not a color letter.
        """
        combined = Color.COLORLESS
        for part in symbol.split('/'):
            part = part.strip()
            if len(part) != 1:
                raise SetupError(f"bad mana symbol: {{{symbol}}}")
            combined |= Color.from_symbol(part)
        return cls(colors=combined)

    @property
    def color_count(self) -> int:
        return bin(self.colors.value).count('1')

    def is_colorless(self) -> bool:
        return self.colors == Color.COLORLESS

    def is_monocolor(self) -> bool:
        return self.color_count == 1

    def is_wildcard(self) -> bool:
        return self.colors == Color.all_colors()

    def is_hybrid(self) -> bool:
        """Irregular units that do not fit a single pool counter."""
        return 2 <= self.color_count < 5

    def contains(self, color: Color) -> bool:
        return bool(color) and (self.colors & color) == color

    def choices(self) -> List[Color]:
        """The single colors this unit can be spent as, in counter order."""
        return [color for color in COLORS if self.colors & color]

    def can_pay_for(self, other: 'Mana') -> bool:
        """Check if this unit covers another unit's requirement.

        Anything pays for colorless; otherwise the two units must share
        at least one color.
        """
        return other.is_colorless() or bool(self.colors & other.colors)

    def can_pay_for_exactly(self, other: 'Mana') -> bool:
        """Strict match: both units carry the same set of colors."""
        return self.colors == other.colors

    def __str__(self) -> str:
        choices = self.choices()
        if not choices:
            return '{1}'
        return '{' + '/'.join(color.symbol for color in choices) + '}'


COLORLESS = Mana()
BLACK = Mana.mono(Color.BLACK)
BLUE = Mana.mono(Color.BLUE)
GREEN = Mana.mono(Color.GREEN)
RED = Mana.mono(Color.RED)
WHITE = Mana.mono(Color.WHITE)
ALL = Mana(Color.all_colors())

_COLOR_INDEX: Dict[Color, int] = {color: i for i, color in enumerate(COLORS)}


# =============================================================================
# Mana Pool
# =============================================================================

_SYMBOL_PATTERN = re.compile(r'\{([^}]*)\}')


@dataclass(eq=False)
class ManaPool:
    """A multiset of Mana units: either a cost or an available supply.

    Regular units live in counters; only hybrid units (2-4 colors) are kept
    in the `hybrid` list since they cannot be folded into a single counter.
    The pool's value is the sum of all counters plus the hybrid count.
    """
    black: int = 0
    blue: int = 0
    green: int = 0
    red: int = 0
    white: int = 0
    colorless: int = 0
    wildcard: int = 0
    hybrid: List[Mana] = field(default_factory=list)

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    @classmethod
    def of(cls, *units: Mana) -> 'ManaPool':
        pool = cls()
        for unit in units:
            pool.add(unit)
        return pool

    @classmethod
    def parse(cls, cost_str: str) -> 'ManaPool':
        """Parse a mana cost string into a pool.

        Examples:
            "{2}{G}"       -> 2 colorless, 1 green
            "{B/G}{B/G}"   -> 2 hybrid black-or-green
            "{C}{C}{C}"    -> 3 colorless
            "{X}{R}"       -> 1 red (X counts as zero)

        Raises:
            SetupError: On an empty string or an unknown symbol.
        """
        symbols = _SYMBOL_PATTERN.findall(cost_str or '')
        if not symbols:
            raise SetupError(f"invalid mana cost: {cost_str!r}")

        pool = cls()
        for symbol in symbols:
            symbol = symbol.strip().upper()
            if symbol.isdigit():
                pool.colorless += int(symbol)
            elif symbol == 'X':
                continue
            else:
                pool.add(Mana.parse(symbol))
        return pool

    # -------------------------------------------------------------------------
    # Mutation
    # -------------------------------------------------------------------------

    def add(self, mana: Mana, amount: int = 1) -> None:
        """Add one (or `amount`) units of the given mana."""
        if mana.is_colorless():
            self.colorless += amount
        elif mana.is_wildcard():
            self.wildcard += amount
        elif mana.is_monocolor():
            name = _COUNTER_NAMES[mana.colors]
            setattr(self, name, getattr(self, name) + amount)
        else:
            self.hybrid.extend([mana] * amount)

    def add_pool(self, other: 'ManaPool') -> None:
        self.black += other.black
        self.blue += other.blue
        self.green += other.green
        self.red += other.red
        self.white += other.white
        self.colorless += other.colorless
        self.wildcard += other.wildcard
        self.hybrid.extend(other.hybrid)

    def remove_exact_pool(self, other: 'ManaPool') -> None:
        """Take back mana previously added with add_pool.

        Raises:
            InvariantViolation: If `other` holds any unit this pool lacks.
                The pool is left untouched in that case.
        """
        remaining = list(self.hybrid)
        for unit in other.hybrid:
            try:
                remaining.remove(unit)
            except ValueError:
                raise InvariantViolation(
                    f"cannot remove {other} from {self}: missing {unit}") from None

        for name in _ALL_COUNTERS:
            if getattr(other, name) > getattr(self, name):
                raise InvariantViolation(
                    f"cannot remove {other} from {self}: not enough {name}")

        for name in _ALL_COUNTERS:
            setattr(self, name, getattr(self, name) - getattr(other, name))
        self.hybrid = remaining

    def copy(self) -> 'ManaPool':
        clone = ManaPool(self.black, self.blue, self.green, self.red,
                         self.white, self.colorless, self.wildcard)
        clone.hybrid = list(self.hybrid)
        return clone

    def __add__(self, other: 'ManaPool') -> 'ManaPool':
        combined = self.copy()
        combined.add_pool(other)
        return combined

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def total(self) -> int:
        """Total value (converted cost) of the pool."""
        return (self.black + self.blue + self.green + self.red + self.white
                + self.colorless + self.wildcard + len(self.hybrid))

    @property
    def mana_value(self) -> int:
        """Alias for total()."""
        return self.total()

    def count(self, mana: Mana) -> int:
        """Number of units exactly equal to `mana`."""
        if mana.is_colorless():
            return self.colorless
        if mana.is_wildcard():
            return self.wildcard
        if mana.is_monocolor():
            return getattr(self, _COUNTER_NAMES[mana.colors])
        return sum(1 for unit in self.hybrid if unit == mana)

    def union_of_all_colors(self) -> Mana:
        """A single unit carrying every color this pool can provide."""
        colors = Color.COLORLESS
        for unit in self:
            colors |= unit.colors
        return Mana(colors)

    def _color_counts(self) -> List[int]:
        return [self.black, self.blue, self.green, self.red, self.white]

    def _hybrid_assignments(self) -> Iterator[List[int]]:
        """Yield per-color counts for every way of fixing the hybrid units.

        Each hybrid unit picks one of its colors; the cartesian product of
        those picks is enumerated. With no hybrid units this yields the
        plain counters once.
        """
        base = self._color_counts()
        for picks in product(*(unit.choices() for unit in self.hybrid)):
            counts = list(base)
            for color in picks:
                counts[_COLOR_INDEX[color]] += 1
            yield counts

    # -------------------------------------------------------------------------
    # Payment Solver
    # -------------------------------------------------------------------------

    def can_pay_for(self, cost: 'ManaPool') -> bool:
        """Check if this pool can cover every unit of `cost`.

        Each unit of this pool is used at most once. Same-color units are
        matched first, wildcards cover whatever colored requirement is left,
        and everything unused (including leftover wildcards) goes towards the
        generic part of the cost. A wildcard in the cost is generic.

        Args:
            cost: The cost to pay.

        Returns:
            True if some assignment of this pool's units pays the cost.
        """
        if cost.total() > self.total():
            return False

        generic = cost.colorless + cost.wildcard

        if not self.hybrid and not cost.hybrid:
            return _settle(self._color_counts(), self.colorless, self.wildcard,
                           cost._color_counts(), generic)

        # Identical hybrid lists pair off unit for unit; only a success is conclusive.
        if len(self.hybrid) == len(cost.hybrid) and all(
                mine.can_pay_for_exactly(theirs)
                for mine, theirs in zip(self.hybrid, cost.hybrid)):
            if _settle(self._color_counts(), self.colorless, self.wildcard,
                       cost._color_counts(), generic):
                return True

        # Exponential in the number of hybrid units, which stays tiny.
        for available in self._hybrid_assignments():
            for needed in cost._hybrid_assignments():
                if _settle(available, self.colorless, self.wildcard, needed, generic):
                    return True
        return False

    def can_also_pay_for(self, already_spent: 'ManaPool',
                         additional_cost: 'ManaPool') -> Optional['ManaPool']:
        """Check if both `already_spent` and `additional_cost` fit in this pool.

        Returns:
            The new committed total (already_spent + additional_cost) if this
            pool pays for it, otherwise None. Neither argument is modified.
        """
        if already_spent.total() + additional_cost.total() > self.total():
            return None
        committed = already_spent + additional_cost
        if not self.can_pay_for(committed):
            return None
        return committed

    # -------------------------------------------------------------------------
    # Dunder
    # -------------------------------------------------------------------------

    def __iter__(self) -> Iterator[Mana]:
        for name, mana in _COUNTER_UNITS:
            for _ in range(getattr(self, name)):
                yield mana
        yield from self.hybrid

    def __len__(self) -> int:
        return self.total()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ManaPool):
            return NotImplemented
        return (all(getattr(self, name) == getattr(other, name) for name in _ALL_COUNTERS)
                and sorted(u.colors.value for u in self.hybrid)
                == sorted(u.colors.value for u in other.hybrid))

    def __str__(self) -> str:
        if self.total() == 0:
            return 'n/a'
        text = f'{{{self.colorless}}}' if self.colorless else ''
        return text + ''.join(str(unit) for unit in self if not unit.is_colorless())

    def __repr__(self) -> str:
        return f'ManaPool({self})'


_COUNTER_NAMES: Dict[Color, str] = {
    Color.BLACK: 'black',
    Color.BLUE: 'blue',
    Color.GREEN: 'green',
    Color.RED: 'red',
    Color.WHITE: 'white',
}

_ALL_COUNTERS = ('black', 'blue', 'green', 'red', 'white', 'colorless', 'wildcard')

_COUNTER_UNITS = (
    ('colorless', COLORLESS),
    ('black', BLACK),
    ('blue', BLUE),
    ('green', GREEN),
    ('red', RED),
    ('white', WHITE),
    ('wildcard', ALL),
)


def _settle(available: List[int], colorless: int, wildcard: int,
            needed: List[int], generic: int) -> bool:
    """Resolve a hybrid-free payment by counter arithmetic.

    Same-color units are subtracted first; the summed per-color deficit must
    fit in the wildcard count; whatever remains must cover the generic part.
    """
    deficit = 0
    leftover = colorless
    for have, want in zip(available, needed):
        if want > have:
            deficit += want - have
        else:
            leftover += have - want
    if deficit > wildcard:
        return False
    leftover += wildcard - deficit
    return leftover >= generic


# =============================================================================
# Pip Histograms
# =============================================================================

@dataclass
class PipCounts:
    """Per-color histogram of mana symbols, used to choose which land to play.

    A hybrid or wildcard unit counts once towards each of its colors.
    """
    counts: Dict[Color, float] = field(
        default_factory=lambda: {color: 0.0 for color in COLORS})

    def add_mana(self, mana: Mana, amount: int = 1) -> None:
        for color in mana.choices():
            self.counts[color] += amount

    def count_in_pool(self, pool: ManaPool) -> None:
        for unit in pool:
            self.add_mana(unit)

    def normalize(self) -> bool:
        """Scale the histogram to sum to one.

        Returns:
            False if there was nothing to normalize (no colored pips).
        """
        total = sum(self.counts.values())
        if total <= 0:
            return False
        for color in COLORS:
            self.counts[color] /= total
        return True

    def prioritized_delta(self, other: 'PipCounts') -> List[Color]:
        """Colors where this histogram exceeds `other`, largest excess first.

        Ties keep the black, blue, green, red, white order.
        """
        deltas = [(self.counts[color] - other.counts[color], color) for color in COLORS]
        wanted = [(delta, color) for delta, color in deltas if delta > 0]
        wanted.sort(key=lambda item: item[0], reverse=True)
        return [color for _, color in wanted]

    def __getitem__(self, color: Color) -> float:
        return self.counts[color]
