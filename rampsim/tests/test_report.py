"""
Tests for the statistics report.
"""
import pytest

from rampsim.engine.game import GameStats, TurnStats
from rampsim.report import print_statistics, summarize


def turn(number, drawn, played, in_hand, lands, cheated, available, spent):
    return TurnStats(turn_number=number, cards_drawn=drawn, cards_played=played,
                     cards_in_hand=in_hand, lands_played=lands, lands_cheated=cheated,
                     mana_available=available, mana_spent=spent)


@pytest.fixture
def batch():
    """Two games of two turns; the commander arrives on turn 2 in the first one only."""
    return [
        GameStats(mulligan_count=1, turn_commander_played=2, turns_stats=[
            turn(1, 0, 0, 6, 1, 0, 1, 0),
            turn(2, 1, 1, 6, 1, 1, 3, 3),
        ]),
        GameStats(mulligan_count=0, turn_commander_played=0, turns_stats=[
            turn(1, 0, 0, 6, 1, 0, 1, 1),
            turn(2, 1, 0, 7, 1, 0, 2, 0),
        ]),
    ]


class TestSummarize:
    """Tests for reducing GameStats into averages."""

    def test_per_turn_averages(self, batch):
        """Per-turn figures are averaged over games."""
        summary = summarize(batch)

        assert summary.games == 2
        assert summary.turn_count == 2
        first, second = summary.turns
        assert first.mana_available == 1.0
        assert first.mana_spent == 0.5
        assert second.mana_available == 2.5
        assert second.lands_cheated == 0.5
        assert second.cards_in_hand == 6.5
        assert second.spent_ratio == pytest.approx(0.6)

    def test_commander_figures(self, batch):
        """Test the arrival turn and the never-arrived share."""
        summary = summarize(batch)
        assert summary.turns[0].commander_played == 0
        assert summary.turns[1].commander_played == 1
        assert summary.turns[1].commander_played_pct == 50.0
        assert summary.commander_average_turn == 2.0
        assert summary.commander_missed == 1
        assert summary.commander_missed_pct == 50.0

    def test_deck_figures(self, batch):
        """Test cards per turn, ramp and mulligans."""
        summary = summarize(batch)
        assert summary.cards_per_turn == 0.5
        assert summary.ramp_per_turn == 1.25
        assert summary.average_mulligans == 0.5

    def test_commander_never_arrives(self, batch):
        """No arrival turn is reported when the commander never lands."""
        batch[0].turn_commander_played = 0
        summary = summarize(batch)
        assert summary.commander_average_turn is None
        assert summary.commander_missed_pct == 100.0

    def test_zero_mana_ratio(self):
        """A turn without mana has a spent ratio of zero."""
        summary = summarize([GameStats(turns_stats=[turn(1, 0, 0, 7, 0, 0, 0, 0)])])
        assert summary.turns[0].spent_ratio == 0.0

    def test_empty_batch(self):
        """Summarizing no games is an error."""
        with pytest.raises(ValueError):
            summarize([])

    def test_mismatched_turn_counts(self, batch):
        """Games of different lengths cannot be summarized together."""
        batch[1].turns_stats.pop()
        with pytest.raises(ValueError):
            summarize(batch)


class TestPrintStatistics:
    """Tests for the printed table."""

    def test_table(self, batch, capsys):
        """Test the printed table and its totals."""
        print_statistics(summarize(batch))
        out = capsys.readouterr().out
        assert "Turn breakdown / Deck Performance" in out
        assert "#1:" in out and "#2:" in out
        assert "Commander arrives on turn ........: 2.0 (avg)" in out
        assert "games Commander didn't arrive ....: 50.00% (1)" in out
        assert "games simulated ..................: 2" in out

    def test_never(self, batch, capsys):
        """Test the "never" line when the commander never arrives."""
        for stats in batch:
            stats.turn_commander_played = 0
        print_statistics(summarize(batch))
        assert "Commander arrives on turn ........: never" in capsys.readouterr().out
