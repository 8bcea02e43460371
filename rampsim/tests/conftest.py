"""
Shared pytest fixtures for the Ramp Simulator tests.

This module provides reusable fixtures for:
- Card definitions of well-known ramp staples (Sol Ring, Command Tower, ...)
- A factory numbering Card instances
- Empty games with a seeded random source
"""

import random
from itertools import count

import pytest

from rampsim.cards.database import CardCatalog
from rampsim.engine.abilities import (
    Ability, Cost, Draw, FetchLand, LandLimitIncrease, ProduceMana
)
from rampsim.engine.game import Game
from rampsim.engine.mana import ALL, BLACK, GREEN, Mana, ManaPool
from rampsim.engine.objects import Card, CardDefinition
from rampsim.engine.types import Color, Trigger


def tap_for(pool: ManaPool) -> Ability:
    return Ability(Trigger.ACTIVATED, Cost.tap(), ProduceMana(pool))


# =============================================================================
# Land Fixtures
# =============================================================================

@pytest.fixture
def swamp():
    return CardDefinition.build("Swamp", "Basic Land - Swamp",
                                abilities=(tap_for(ManaPool.of(BLACK)),))


@pytest.fixture
def forest():
    return CardDefinition.build("Forest", "Basic Land - Forest",
                                abilities=(tap_for(ManaPool.of(GREEN)),))


@pytest.fixture
def plains():
    return CardDefinition.build("Plains", "Basic Land - Plains",
                                abilities=(tap_for(ManaPool.parse("{W}")),))


@pytest.fixture
def command_tower():
    """{T}: Add one mana of any color in your commander's color identity."""
    return CardDefinition.build("Command Tower", "Land",
                                abilities=(tap_for(ManaPool.of(ALL)),))


@pytest.fixture
def jungle_hollow():
    """Enters tapped; {T}: Add {B} or {G}."""
    return CardDefinition.build(
        "Jungle Hollow", "Land",
        abilities=(tap_for(ManaPool.of(Mana.hybrid(Color.BLACK, Color.GREEN))),),
        enters_tapped=True,
    )


@pytest.fixture
def golgari_rot_farm():
    """Enters tapped, returns a land you control to hand; {T}: Add {B}{G}."""
    return CardDefinition.build(
        "Golgari Rot Farm", "Land",
        abilities=(tap_for(ManaPool.parse("{B}{G}")),),
        enters_tapped=True,
        returns_land_to_hand=True,
    )


@pytest.fixture
def evolving_wilds():
    return CardDefinition.build(
        "Evolving Wilds", "Land",
        abilities=(Ability(Trigger.ACTIVATED, Cost.tap_sacrifice(),
                           FetchLand(to_battlefield=("basic land",))),),
    )


# =============================================================================
# Spell Fixtures
# =============================================================================

@pytest.fixture
def sol_ring():
    return CardDefinition.build("Sol Ring", "Artifact", ManaPool.parse("{1}"),
                                abilities=(tap_for(ManaPool.parse("{C}{C}")),))


@pytest.fixture
def commanders_sphere():
    """{T}: Add one mana of any color ...; Sacrifice Commander's Sphere: Draw a card."""
    return CardDefinition.build(
        "Commander's Sphere", "Artifact", ManaPool.parse("{3}"),
        abilities=(
            tap_for(ManaPool.of(ALL)),
            Ability(Trigger.ACTIVATED, Cost.sacrifice(), Draw((1,))),
        ),
    )


@pytest.fixture
def elk():
    """A vanilla {2}{G} creature."""
    return CardDefinition.build("Just an Elk", "Creature - Elk", ManaPool.parse("{2}{G}"))


@pytest.fixture
def cultivate():
    return CardDefinition.build(
        "Cultivate", "Sorcery", ManaPool.parse("{2}{G}"),
        abilities=(Ability(Trigger.CAST, Cost.none(),
                           FetchLand(to_hand=("basic land",), to_battlefield=("basic land",))),),
    )


@pytest.fixture
def divination():
    return CardDefinition.build("Divination", "Sorcery", ManaPool.parse("{2}{U}"),
                                abilities=(Ability(Trigger.CAST, Cost.none(), Draw((2,))),))


@pytest.fixture
def dark_ritual():
    return CardDefinition.build("Dark Ritual", "Instant", ManaPool.parse("{B}"),
                                abilities=(Ability(Trigger.CAST, Cost.none(),
                                                   ProduceMana(ManaPool.parse("{B}{B}{B}"))),))


@pytest.fixture
def explore():
    return CardDefinition.build(
        "Explore", "Sorcery", ManaPool.parse("{1}{G}"),
        abilities=(
            Ability(Trigger.CAST, Cost.none(), LandLimitIncrease(1)),
            Ability(Trigger.CAST, Cost.none(), Draw((1,))),
        ),
    )


@pytest.fixture
def meren():
    return CardDefinition.build("Meren of Clan Nel Toth", "Legendary Creature - Human Shaman",
                                ManaPool.parse("{2}{B}{G}"))


# =============================================================================
# Game Fixtures
# =============================================================================

@pytest.fixture
def make_card():
    """
    Factory creating Card instances with increasing ids.

    Usage:
        def test_something(make_card, swamp):
            card = make_card(swamp)
    """
    ids = count(1)

    def _make(definition: CardDefinition, tapped: bool = False) -> Card:
        return Card(id=next(ids), definition=definition, tapped=tapped)

    return _make


@pytest.fixture
def game():
    """An empty game with a seeded random source."""
    return Game(rng=random.Random(1234))


@pytest.fixture
def catalog(tmp_path, forest, swamp, command_tower, elk, meren, sol_ring, cultivate):
    """An offline catalog preloaded with the card fixtures above."""
    catalog = CardCatalog(cache_dir=tmp_path, offline=True)
    for definition in (forest, swamp, command_tower, elk, meren, sol_ring, cultivate):
        catalog.add(definition)
    return catalog
