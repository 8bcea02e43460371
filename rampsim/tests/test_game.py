"""
Tests for game setup, opening hands and full games.

Tests cover:
- Building a template game from a deck list and a catalog
- Cloning templates for independent runs
- Opening hands and the three-lands mulligan
- Playing whole games and recording the commander turn
- Verbose logging
"""
import random

import pytest

from rampsim.engine.game import Game, GameStats, Settings
from rampsim.engine.types import CardType, InvariantViolation, MulliganType, SetupError


class ScriptedShuffle(random.Random):
    """Random source whose first shuffle buries the lands and later ones put them on top."""

    def __init__(self):
        super().__init__(0)
        self.shuffles = 0

    def shuffle(self, x):
        self.shuffles += 1
        lands_on_top = self.shuffles > 1
        x.sort(key=lambda card: card.is_type(CardType.LAND) == lands_on_top)


@pytest.fixture
def tower_deck(catalog):
    """Meren in the command zone and forty Command Towers."""
    return Game.from_deck([(1, "Meren of Clan Nel Toth"), (40, "Command Tower")],
                          catalog, commanders=["meren of clan nel toth"])


# =============================================================================
# SETUP TESTS
# =============================================================================

class TestSettings:
    """Tests for settings validation."""

    def test_defaults(self):
        """Test default settings."""
        settings = Settings()
        assert settings.turn_count == 10
        assert settings.starting_hand_size == 7
        assert settings.mulligan is MulliganType.NONE
        assert not settings.draw_card_on_turn_one

    def test_invalid_values(self):
        """Non-positive turn counts and hand sizes are rejected."""
        with pytest.raises(SetupError):
            Settings(turn_count=0)
        with pytest.raises(SetupError):
            Settings(starting_hand_size=-1)


class TestFromDeck:
    """Tests for building template games."""

    def test_commander_goes_to_command_zone(self, tower_deck):
        """The commander starts in the command zone, the rest in the library."""
        assert [c.name for c in tower_deck.command] == ["Meren of Clan Nel Toth"]
        assert len(tower_deck.library) == 40

    def test_ids_are_unique_and_commander_first(self, tower_deck):
        """Ids run from one with the commander numbered first."""
        ids = [c.id for c in tower_deck.command] + [c.id for c in tower_deck.library]
        assert ids == list(range(1, 42))

    def test_copies_share_definitions(self, tower_deck):
        """Every copy of a card points at one definition."""
        definitions = {id(c.definition) for c in tower_deck.library}
        assert len(definitions) == 1

    def test_missing_commander(self, catalog):
        """A commander absent from the catalog is a setup error."""
        with pytest.raises(SetupError):
            Game.from_deck([(40, "Forest")], catalog, commanders=["Meren of Clan Nel Toth"])

    def test_commander_needs_mana_cost(self, catalog):
        """A commander without a casting cost is a setup error."""
        with pytest.raises(SetupError):
            Game.from_deck([(40, "Forest")], catalog, commanders=["Forest"])

    def test_unknown_card(self, catalog):
        """A deck card absent from the catalog is a setup error."""
        with pytest.raises(SetupError):
            Game.from_deck([(1, "Black Lotus")], catalog)


class TestClone:
    """Tests for cloning a template game."""

    def test_clone_is_independent(self, tower_deck):
        """Playing a clone leaves the template untouched."""
        clone = tower_deck.clone(rng=random.Random(3))
        clone.play(Settings(turn_count=3))

        assert len(tower_deck.library) == 40
        assert len(tower_deck.command) == 1
        assert not tower_deck.hand
        assert not tower_deck.battlefield
        assert tower_deck.stats == GameStats()

    def test_clone_shares_definitions(self, tower_deck):
        """Clones copy cards but share definitions."""
        clone = tower_deck.clone()
        assert clone.library.cards[0] is not tower_deck.library.cards[0]
        assert clone.library.cards[0].definition is tower_deck.library.cards[0].definition


# =============================================================================
# OPENING HAND TESTS
# =============================================================================

class TestOpeningHand:
    """Tests for drawing the opening hand."""

    def test_draws_seven(self, tower_deck):
        """Test drawing a seven-card opening hand."""
        tower_deck.draw_opening_hand(Settings())
        assert len(tower_deck.hand) == 7
        assert len(tower_deck.library) == 33
        assert tower_deck.stats.mulligan_count == 0

    def test_library_too_small(self, game, make_card, forest):
        """A library smaller than the hand is a setup error."""
        for _ in range(3):
            game.library.add(make_card(forest))
        with pytest.raises(SetupError):
            game.draw_opening_hand(Settings())

    def test_three_lands_mulligan(self, make_card, forest, elk):
        """Each redraw is counted and the kept hand holds three lands."""
        game = Game(rng=ScriptedShuffle())
        for definition in [forest] * 10 + [elk] * 10:
            game.library.add(make_card(definition))

        game.draw_opening_hand(Settings(mulligan=MulliganType.THREE_LANDS))

        assert game.stats.mulligan_count == 1
        assert len(game.hand) == 7
        assert len(game.hand.query(CardType.LAND)) >= 3
        assert len(game.library) == 13

    def test_three_lands_keeps_good_hand(self, tower_deck):
        """A hand with three lands is kept without a mulligan."""
        tower_deck.draw_opening_hand(Settings(mulligan=MulliganType.THREE_LANDS))
        assert tower_deck.stats.mulligan_count == 0

    def test_three_lands_impossible(self, game, make_card, forest, elk):
        """A deck with fewer than three lands cannot use the three-lands policy."""
        for definition in [forest] * 2 + [elk] * 20:
            game.library.add(make_card(definition))
        with pytest.raises(SetupError):
            game.draw_opening_hand(Settings(mulligan=MulliganType.THREE_LANDS))

    def test_draw_from_empty_library(self, game):
        """Drawing from an empty library is fatal."""
        with pytest.raises(InvariantViolation):
            game.draw_cards(1)


# =============================================================================
# FULL GAME TESTS
# =============================================================================

class TestPlay:
    """Tests for playing complete games."""

    def test_commander_turn_recorded(self, tower_deck):
        """Test one land per turn and the commander cast on turn four."""
        stats = tower_deck.clone(rng=random.Random(11)).play(Settings(turn_count=5))

        assert stats.turn_commander_played == 4
        assert len(stats.turns_stats) == 5
        assert [t.lands_played for t in stats.turns_stats] == [1] * 5
        assert [t.mana_available for t in stats.turns_stats] == [1, 2, 3, 4, 5]
        assert stats.turns_stats[3].cards_played == 1
        assert stats.turns_stats[3].mana_spent == 4

    def test_same_seed_same_game(self, catalog):
        """Equal seeds give equal statistics."""
        template = Game.from_deck([(1, "Meren of Clan Nel Toth"), (18, "Forest"),
                                   (12, "Command Tower"), (20, "Just an Elk")],
                                  catalog, commanders=["Meren of Clan Nel Toth"])
        first = template.clone(rng=random.Random(99)).play(Settings(turn_count=8))
        second = template.clone(rng=random.Random(99)).play(Settings(turn_count=8))
        assert first == second

    def test_empty_library(self):
        """Playing without a library is a setup error."""
        with pytest.raises(SetupError):
            Game().play(Settings())

    def test_cannot_play_twice(self, tower_deck):
        """A game can only be played once."""
        game = tower_deck.clone()
        game.play(Settings(turn_count=2))
        with pytest.raises(InvariantViolation):
            game.play(Settings(turn_count=2))

    def test_running_out_of_cards_is_fatal(self, catalog):
        """Running out of cards mid-game raises."""
        template = Game.from_deck([(9, "Forest")], catalog)
        with pytest.raises(InvariantViolation):
            template.clone().play(Settings(turn_count=5))


class TestLogging:
    """Tests for verbose narration."""

    def test_quiet_by_default(self, game, capsys):
        """Nothing is printed unless verbose."""
        game.log("hello")
        assert capsys.readouterr().out == ""

    def test_verbose_prefixes(self, capsys):
        """Test the level prefixes in verbose output."""
        game = Game(verbose=True)
        game.log("hello", "warning")
        game.log("details", "debug")
        out = capsys.readouterr().out
        assert "[WARN] Turn 0: hello" in out
        assert "[DEBUG] Turn 0: details" in out
