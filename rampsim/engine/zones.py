"""Ramp Simulator - Zone System

A zone is an ordered list of Card instances plus a name. The game owns five
of them:
- Library: ordered; the "top" is the last element in the list (what gets drawn)
- Hand
- Command: holds the commander until it is cast
- Battlefield
- Graveyard

Cards move between zones through take/add pairs and are never duplicated
or silently dropped.
"""
import random
from typing import Callable, Iterator, List, Optional

from .mana import PipCounts
from .objects import Card
from .types import CardId, CardType


class Zone:
    """An ordered, mutable collection of cards."""

    def __init__(self, name: str, cards: Optional[List[Card]] = None):
        self.name = name
        self.cards: List[Card] = list(cards) if cards else []

    # -------------------------------------------------------------------------
    # Movement
    # -------------------------------------------------------------------------

    def add(self, card: Card) -> None:
        """Add card to the end (top) of the zone."""
        self.cards.append(card)

    def take(self, card_id: CardId) -> Optional[Card]:
        """Remove card by ID, preserving the order of the rest.

        Returns:
            The removed card, or None if not found
        """
        for index, card in enumerate(self.cards):
            if card.id == card_id:
                return self.cards.pop(index)
        return None

    def draw(self) -> Optional[Card]:
        """Remove and return the top card, or None if the zone is empty."""
        if self.cards:
            return self.cards.pop()
        return None

    def take_land(self, type_name: str) -> Optional[Card]:
        """Remove the first land whose type line contains `type_name`.

        Matching is case-insensitive, so "basic land" finds "Basic Land - Forest"
        and "forest" finds both basic Forests and "Land - Forest Island" duals.

        Returns:
            The removed land, or None if no land matches
        """
        wanted = type_name.lower()
        for index, card in enumerate(self.cards):
            if not card.is_type(CardType.LAND):
                continue
            if wanted in card.definition.type_line.lower():
                return self.cards.pop(index)
        return None

    def clear(self) -> List[Card]:
        """Remove and return all cards."""
        removed = self.cards
        self.cards = []
        return removed

    # -------------------------------------------------------------------------
    # Ordering
    # -------------------------------------------------------------------------

    def shuffle(self, rng: random.Random) -> None:
        """Uniform random permutation using the game's random source."""
        rng.shuffle(self.cards)

    def sort_by_mana_value(self) -> None:
        self.cards.sort(key=lambda card: card.mana_value)

    def assign_ids(self, first_id: CardId) -> CardId:
        """Number the cards sequentially from `first_id`.

        Returns:
            The next unused ID
        """
        next_id = first_id
        for card in self.cards:
            card.id = next_id
            next_id += 1
        return next_id

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def query(self, card_type: CardType) -> List[Card]:
        """All cards of the given type, without removing them."""
        return [card for card in self.cards if card.is_type(card_type)]

    def filter(self, predicate: Callable[[Card], bool]) -> List[Card]:
        return [card for card in self.cards if predicate(card)]

    def get(self, card_id: CardId) -> Optional[Card]:
        for card in self.cards:
            if card.id == card_id:
                return card
        return None

    def untap_all(self) -> None:
        for card in self.cards:
            card.tapped = False

    def count_pips_in_mana_costs(self) -> PipCounts:
        """Sum, per color, of the pips in the casting costs of the cards here."""
        pips = PipCounts()
        for card in self.cards:
            if card.definition.mana_cost is not None:
                pips.count_in_pool(card.definition.mana_cost)
        return pips

    def copy(self) -> 'Zone':
        """Independent copy: new Card instances sharing the same definitions."""
        return Zone(self.name, [card.copy() for card in self.cards])

    def dump(self) -> None:
        print(f"Zone: {self.name}, {len(self.cards)} cards")
        for card in self.cards:
            print(f"   {card}")

    # -------------------------------------------------------------------------
    # Dunder
    # -------------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self.cards)

    def __iter__(self) -> Iterator[Card]:
        return iter(self.cards)

    def __bool__(self) -> bool:
        return len(self.cards) > 0

    def __contains__(self, card: Card) -> bool:
        return any(c.id == card.id for c in self.cards)

    def __repr__(self) -> str:
        return f"Zone({self.name!r}, {len(self.cards)} cards)"
