"""
Tests for card objects and zones.

Tests cover:
- CardDefinition derived fields (types, mana value, produced mana)
- Card copies sharing their definition
- Zone movement, ordering and queries
"""
import random

from rampsim.engine.mana import ManaPool
from rampsim.engine.objects import Card, CardDefinition
from rampsim.engine.types import CardType, Color
from rampsim.engine.zones import Zone


# =============================================================================
# CARD DEFINITION TESTS
# =============================================================================

class TestCardDefinition:
    """Tests for derived definition data."""

    def test_land_has_no_mana_value(self, forest):
        """Lands have no cost and a mana value of zero."""
        assert forest.is_land
        assert forest.mana_value == 0
        assert forest.mana_cost is None
        assert forest.is_permanent

    def test_types_from_type_line(self, meren, cultivate):
        """Card types come from the type line."""
        assert meren.is_type(CardType.CREATURE)
        assert not meren.is_type(CardType.LAND)
        assert not cultivate.is_permanent

    def test_mana_value_from_cost(self, meren, sol_ring):
        """Mana value is derived from the casting cost."""
        assert meren.mana_value == 4
        assert sol_ring.mana_value == 1

    def test_produced_mana(self, jungle_hollow, command_tower, elk):
        """Test the union of colors a card produces."""
        assert jungle_hollow.color_count() == 2
        assert command_tower.color_count() == 5
        assert elk.produced_mana is None
        assert elk.color_count() == 0

    def test_tap_mana_pool(self, sol_ring, commanders_sphere, cultivate):
        """Test the mana added by tapping, if any."""
        assert sol_ring.tap_mana_pool() == ManaPool.parse("{C}{C}")
        assert commanders_sphere.tap_mana_pool().wildcard == 1
        assert cultivate.tap_mana_pool() is None

    def test_is_ramp(self, sol_ring, cultivate, explore, forest, elk):
        """Rocks, fetchers and extra land drops are ramp; lands and vanilla creatures are not."""
        assert sol_ring.is_ramp
        assert cultivate.is_ramp
        assert explore.is_ramp
        assert not forest.is_ramp
        assert not elk.is_ramp


class TestCard:
    """Tests for per-game card copies."""

    def test_produces(self, make_card, jungle_hollow):
        """Test color queries on a dual land."""
        card = make_card(jungle_hollow)
        assert card.produces(Color.BLACK)
        assert card.produces(Color.GREEN)
        assert not card.produces(Color.RED)

    def test_copy_shares_definition(self, make_card, sol_ring):
        """Copies share the definition but not the tapped flag."""
        card = make_card(sol_ring, tapped=True)
        clone = card.copy()
        clone.tapped = False
        assert card.tapped
        assert clone.definition is card.definition
        assert clone.id == card.id

    def test_str(self, make_card, sol_ring):
        """Test the zone-dump rendering of a card."""
        card = make_card(sol_ring, tapped=True)
        assert str(card) == "Sol Ring #1 *TAPPED* - {1} (1)"


# =============================================================================
# ZONE TESTS
# =============================================================================

class TestZoneMovement:
    """Tests for moving cards in and out of zones."""

    def test_take_preserves_order(self, make_card, forest, swamp, elk):
        """Taking a card keeps the rest in order."""
        cards = [make_card(forest), make_card(swamp), make_card(elk)]
        zone = Zone("Hand", cards)
        taken = zone.take(2)
        assert taken.name == "Swamp"
        assert [c.id for c in zone] == [1, 3]

    def test_take_unknown_id(self, make_card, forest):
        """Taking a missing id returns None."""
        zone = Zone("Hand", [make_card(forest)])
        assert zone.take(42) is None
        assert len(zone) == 1

    def test_draw_takes_from_the_end(self, make_card, forest, swamp):
        """The end of the list is the top of the library."""
        zone = Zone("Library", [make_card(forest), make_card(swamp)])
        assert zone.draw().name == "Swamp"
        assert zone.draw().name == "Forest"
        assert zone.draw() is None
        assert not zone

    def test_take_land_is_case_insensitive(self, make_card, forest, swamp, elk):
        """Land searches match the type line regardless of case."""
        zone = Zone("Library", [make_card(elk), make_card(swamp), make_card(forest)])
        land = zone.take_land("FOREST")
        assert land.name == "Forest"
        assert zone.take_land("basic land").name == "Swamp"
        assert zone.take_land("basic land") is None
        assert len(zone) == 1

    def test_take_land_ignores_nonlands(self, make_card):
        """A nonland with a land subtype is never fetched."""
        dryad = CardDefinition.build("Dryad Arbor Impostor", "Creature - Forest Dryad",
                                     ManaPool.parse("{G}"))
        zone = Zone("Library", [make_card(dryad)])
        assert zone.take_land("forest") is None

    def test_clear(self, make_card, forest, swamp):
        """Test clearing returns every card."""
        zone = Zone("Library", [make_card(forest), make_card(swamp)])
        removed = zone.clear()
        assert len(removed) == 2
        assert len(zone) == 0


class TestZoneOrdering:
    """Tests for shuffling, sorting and numbering."""

    def test_shuffle_uses_given_rng(self, forest, swamp, elk, meren):
        """Equal seeds give equal shuffles."""
        defs = [forest, swamp, elk, meren] * 5
        first = Zone("Library", [Card(i, d) for i, d in enumerate(defs)])
        second = first.copy()
        first.shuffle(random.Random(7))
        second.shuffle(random.Random(7))
        assert [c.id for c in first] == [c.id for c in second]

    def test_sort_by_mana_value(self, make_card, meren, forest, sol_ring):
        """Test sorting cheapest first."""
        zone = Zone("Command", [make_card(meren), make_card(forest), make_card(sol_ring)])
        zone.sort_by_mana_value()
        assert [c.name for c in zone] == ["Forest", "Sol Ring", "Meren of Clan Nel Toth"]

    def test_assign_ids(self, make_card, forest, swamp):
        """Test numbering cards from a starting id."""
        zone = Zone("Library", [make_card(forest), make_card(swamp)])
        next_id = zone.assign_ids(10)
        assert [c.id for c in zone] == [10, 11]
        assert next_id == 12


class TestZoneQueries:
    """Tests for read-only zone queries."""

    def test_query_by_type(self, make_card, forest, elk, sol_ring):
        """Test filtering by type flags."""
        zone = Zone("Battlefield", [make_card(forest), make_card(elk), make_card(sol_ring)])
        assert [c.name for c in zone.query(CardType.LAND)] == ["Forest"]
        assert len(zone.query(CardType.CREATURE | CardType.ARTIFACT)) == 2

    def test_filter(self, make_card, forest, swamp):
        """Test filtering by predicate keeps zone order."""
        zone = Zone("Battlefield", [make_card(forest), make_card(swamp, tapped=True),
                                    make_card(forest, tapped=True)])
        assert [c.id for c in zone.filter(lambda card: card.tapped)] == [2, 3]
        assert zone.filter(lambda card: False) == []

    def test_get_and_contains(self, make_card, forest, elk):
        """Test lookup by id and membership."""
        land = make_card(forest)
        zone = Zone("Battlefield", [land])
        assert zone.get(land.id) is land
        assert zone.get(99) is None
        assert land in zone
        assert make_card(elk) not in zone

    def test_untap_all(self, make_card, forest, sol_ring):
        """Test untapping every permanent."""
        zone = Zone("Battlefield", [make_card(forest, tapped=True), make_card(sol_ring, tapped=True)])
        zone.untap_all()
        assert not any(card.tapped for card in zone)

    def test_copy_is_independent(self, make_card, forest):
        """Changing a copied zone leaves the original untouched."""
        zone = Zone("Battlefield", [make_card(forest)])
        clone = zone.copy()
        clone.cards[0].tapped = True
        clone.add(make_card(forest))
        assert not zone.cards[0].tapped
        assert len(zone) == 1

    def test_count_pips_in_mana_costs(self, make_card, meren, elk, forest):
        """Pips are summed across every casting cost in the zone."""
        zone = Zone("Hand", [make_card(meren), make_card(elk), make_card(forest)])
        pips = zone.count_pips_in_mana_costs()
        assert pips[Color.BLACK] == 1
        assert pips[Color.GREEN] == 2
        assert pips[Color.RED] == 0
