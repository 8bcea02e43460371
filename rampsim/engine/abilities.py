"""Ramp Simulator - Ability Data Model

An ability is Trigger x Cost x Effect x Availability: a declarative
description of what a card does and when. Abilities carry no behaviour of
their own beyond a few predicates; the turn engine matches on the effect
type at every place it consumes one.

Examples:
    Sol Ring           ACTIVATED, {T}                    -> add {C}{C}
    Commander's Sphere ACTIVATED, Sacrifice              -> draw 1
    Cultivate          CAST, free                        -> basic to hand + basic to battlefield
    Black Market       UPKEEP, free, availability 0.5    -> add {B}...
    Elemental Bond     UPKEEP, free                      -> draw one of [0, 0, 1, 1, 2, ...]
"""
from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Optional, Tuple

from .mana import ManaPool
from .types import Trigger


# =============================================================================
# Cost
# =============================================================================

@dataclass(frozen=True)
class Cost:
    """The price of an ability.

    The seven shapes a cost can take (none, tap, sacrifice, mana, tap+mana,
    tap+sacrifice, tap+mana+sacrifice) are all combinations of these three
    components.

    Attributes:
        mana_cost: Mana that must be paid, if any.
        tap_cost: Whether the source must tap.
        sacrifice_cost: Whether the source is sacrificed.
    """
    mana_cost: Optional[ManaPool] = None
    tap_cost: bool = False
    sacrifice_cost: bool = False

    @classmethod
    def none(cls) -> 'Cost':
        return cls()

    @classmethod
    def tap(cls) -> 'Cost':
        return cls(tap_cost=True)

    @classmethod
    def sacrifice(cls) -> 'Cost':
        return cls(sacrifice_cost=True)

    @classmethod
    def mana(cls, pool: ManaPool) -> 'Cost':
        return cls(mana_cost=pool)

    @classmethod
    def tap_mana(cls, pool: ManaPool) -> 'Cost':
        return cls(mana_cost=pool, tap_cost=True)

    @classmethod
    def tap_sacrifice(cls) -> 'Cost':
        return cls(tap_cost=True, sacrifice_cost=True)

    @classmethod
    def tap_mana_sacrifice(cls, pool: ManaPool) -> 'Cost':
        return cls(mana_cost=pool, tap_cost=True, sacrifice_cost=True)

    def is_tap(self) -> bool:
        return self.tap_cost

    def is_sacrifice(self) -> bool:
        return self.sacrifice_cost

    def is_mana(self) -> Optional[ManaPool]:
        """The mana component, or None if there is none."""
        return self.mana_cost

    @property
    def mana_value(self) -> int:
        return self.mana_cost.total() if self.mana_cost is not None else 0

    @property
    def is_free(self) -> bool:
        return self.mana_value == 0 and not self.tap_cost and not self.sacrifice_cost

    def __str__(self) -> str:
        parts = []
        if self.mana_cost is not None and self.mana_cost.total() > 0:
            parts.append(str(self.mana_cost))
        if self.tap_cost:
            parts.append("{T}")
        if self.sacrifice_cost:
            parts.append("Sacrifice")
        return ", ".join(parts) if parts else "Free"


# =============================================================================
# Effects
# =============================================================================

@dataclass(frozen=True)
class Effect:
    """Base class of the closed set of effects below."""


@dataclass(frozen=True)
class ProduceMana(Effect):
    """Add mana to the pool (lands, rocks, dorks, rituals)."""
    pool: ManaPool = field(default_factory=ManaPool)

    def __str__(self) -> str:
        return f"Add {self.pool}"


@dataclass(frozen=True)
class FetchLand(Effect):
    """Search the library for lands by type-line substring (Cultivate, Evolving Wilds).

    Each entry in to_hand / to_battlefield fetches one land.
    """
    to_hand: Tuple[str, ...] = ()
    to_battlefield: Tuple[str, ...] = ()

    def __str__(self) -> str:
        return f"Fetch {list(self.to_hand)} -> hand, {list(self.to_battlefield)} -> battlefield"


@dataclass(frozen=True)
class Draw(Effect):
    """Draw cards. The count is drawn uniformly from `distribution`."""
    distribution: Tuple[int, ...] = (1,)

    def roll(self, rng: random.Random) -> int:
        if len(self.distribution) == 1:
            return self.distribution[0]
        return rng.choice(self.distribution)

    @property
    def expected(self) -> float:
        return sum(self.distribution) / len(self.distribution)

    def __str__(self) -> str:
        if len(self.distribution) == 1:
            return f"Draw {self.distribution[0]}"
        return f"Draw one of {list(self.distribution)}"


@dataclass(frozen=True)
class LandLimitIncrease(Effect):
    """Play additional lands this turn (Explore, Exploration)."""
    amount: int = 1

    def __str__(self) -> str:
        return f"Land limit +{self.amount}"


# =============================================================================
# Ability
# =============================================================================

@dataclass(frozen=True)
class Ability:
    """
    A single ability of a card.

    Attributes:
        trigger: When the ability applies.
        cost: What it costs to use.
        effect: What it does.
        availability: Probability in [0, 1] that the ability fires each time
            it is evaluated (cards whose trigger only sometimes happens).
    """
    trigger: Trigger
    cost: Cost = field(default_factory=Cost)
    effect: Effect = field(default_factory=Effect)
    availability: float = 1.0

    def __post_init__(self):
        if not 0.0 <= self.availability <= 1.0:
            raise ValueError(f"availability must be within [0, 1], got {self.availability}")

    def is_available(self, rng: random.Random) -> bool:
        """Bernoulli trial against `availability`."""
        if self.availability >= 1.0:
            return True
        return rng.random() < self.availability

    def produces_mana(self) -> bool:
        return isinstance(self.effect, ProduceMana)

    def fetches_lands(self) -> bool:
        return isinstance(self.effect, FetchLand)

    def draws_cards(self) -> bool:
        return isinstance(self.effect, Draw)

    def increases_land_limit(self) -> bool:
        return isinstance(self.effect, LandLimitIncrease)

    def is_tap_mana_ability(self) -> bool:
        """A permanent's "{T}: Add ..." (or free "Add ...") activated ability."""
        return (self.trigger is Trigger.ACTIVATED
                and self.produces_mana()
                and self.cost.mana_cost is None
                and not self.cost.sacrifice_cost)

    def __str__(self) -> str:
        text = f"{self.trigger.value}: [{self.cost}] {self.effect}"
        if self.availability < 1.0:
            text += f" ({self.availability:.0%})"
        return text
