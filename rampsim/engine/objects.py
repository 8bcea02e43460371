"""Ramp Simulator - Card Objects

Cards are split in two:
- CardDefinition: the immutable data shared by every copy of a named card,
  owned by the catalog and outliving every game it is used in.
- Card: one physical copy inside a game, with a game-unique id, a plain
  reference to its definition, and a tapped flag.
"""
from dataclasses import dataclass, field
from typing import Optional, Tuple

from .abilities import Ability, FetchLand, LandLimitIncrease, ProduceMana
from .mana import Mana, ManaPool
from .types import CardId, CardType, Color, parse_types


# =============================================================================
# Card Definition
# =============================================================================

@dataclass(frozen=True, eq=False)
class CardDefinition:
    """
    Immutable card data shared by all copies of a card.

    Attributes:
        name: Card name
        mana_value: Converted mana cost
        mana_cost: Casting cost, None for lands
        type_line: The printed type line, used for land searches
        types: Parsed card type flags
        produced_mana: Union of the colors the card can produce (quick land
            preference queries), None if it produces nothing
        enters_tapped: Whether the permanent enters the battlefield tapped
        returns_land_to_hand: Whether it returns a land to hand on entering
            (bounce lands)
        abilities: The card's abilities
    """
    name: str
    mana_value: int = 0
    mana_cost: Optional[ManaPool] = None
    type_line: str = ""
    types: CardType = CardType.NONE
    produced_mana: Optional[Mana] = None
    enters_tapped: bool = False
    returns_land_to_hand: bool = False
    abilities: Tuple[Ability, ...] = field(default_factory=tuple)

    @classmethod
    def build(cls, name: str, type_line: str, mana_cost: Optional[ManaPool] = None,
              abilities: Tuple[Ability, ...] = (), enters_tapped: bool = False,
              mana_value: Optional[int] = None,
              returns_land_to_hand: bool = False) -> 'CardDefinition':
        """Create a definition, deriving types, mana value and produced mana."""
        abilities = tuple(abilities)
        if mana_value is None:
            mana_value = mana_cost.total() if mana_cost is not None else 0
        return cls(
            name=name,
            mana_value=mana_value,
            mana_cost=mana_cost,
            type_line=type_line,
            types=parse_types(type_line),
            produced_mana=calculate_produced_mana(abilities),
            enters_tapped=enters_tapped,
            returns_land_to_hand=returns_land_to_hand,
            abilities=abilities,
        )

    def is_type(self, card_type: CardType) -> bool:
        return bool(self.types & card_type)

    @property
    def is_land(self) -> bool:
        return self.is_type(CardType.LAND)

    @property
    def is_permanent(self) -> bool:
        return self.types.is_permanent_type

    @property
    def is_ramp(self) -> bool:
        """Nonland mana producers, land fetchers, and extra land drops."""
        for ability in self.abilities:
            if isinstance(ability.effect, ProduceMana) and not self.is_land:
                return True
            if isinstance(ability.effect, (FetchLand, LandLimitIncrease)):
                return True
        return False

    def tap_mana_pool(self) -> Optional[ManaPool]:
        """The mana the permanent adds when tapped for mana, if any."""
        for ability in self.abilities:
            if ability.is_tap_mana_ability():
                return ability.effect.pool
        return None

    def color_count(self) -> int:
        return self.produced_mana.color_count if self.produced_mana else 0

    def __str__(self) -> str:
        return self.name


def calculate_produced_mana(abilities: Tuple[Ability, ...]) -> Optional[Mana]:
    """Union of colors across the first mana-producing ability."""
    for ability in abilities:
        if isinstance(ability.effect, ProduceMana):
            return ability.effect.pool.union_of_all_colors()
    return None


# =============================================================================
# Card (per-copy instance)
# =============================================================================

@dataclass
class Card:
    """
    A physical copy of a card within one game.

    Attributes:
        id: Game-unique identifier
        definition: Shared, read-only card data
        tapped: Whether the permanent is tapped
    """
    id: CardId
    definition: CardDefinition
    tapped: bool = False

    @property
    def name(self) -> str:
        return self.definition.name

    @property
    def mana_value(self) -> int:
        return self.definition.mana_value

    @property
    def abilities(self) -> Tuple[Ability, ...]:
        return self.definition.abilities

    def is_type(self, card_type: CardType) -> bool:
        return self.definition.is_type(card_type)

    def produces(self, color: Color) -> bool:
        produced = self.definition.produced_mana
        return produced is not None and produced.contains(color)

    def produced_mana(self) -> Optional[ManaPool]:
        return self.definition.tap_mana_pool()

    def copy(self) -> 'Card':
        """Copy the per-game state; the definition is shared, never copied."""
        return Card(id=self.id, definition=self.definition, tapped=self.tapped)

    def __str__(self) -> str:
        text = f"{self.name} #{self.id}"
        if self.tapped:
            text += " *TAPPED*"
        if self.definition.mana_cost is not None:
            text += f" - {self.definition.mana_cost} ({self.mana_value})"
        return text
