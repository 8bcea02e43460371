"""Ramp Simulator - Statistics Report

Reduces the GameStats of many independent runs into per-turn averages and
deck-level figures, and prints them as a table.
"""
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from .engine.game import GameStats


# =============================================================================
# SUMMARY DATACLASSES
# =============================================================================

@dataclass
class TurnSummary:
    """
    Averages over all games for one turn.

    Attributes:
        turn_number: 1-based turn number
        cards_drawn: Average cards drawn
        cards_played: Average nonland cards played
        cards_in_hand: Average hand size at end of turn
        lands_played: Average land drops used
        lands_cheated: Average lands put onto the battlefield by effects
        mana_available: Average mana available
        mana_spent: Average mana spent
        commander_played: Games where the commander arrived this turn
        commander_played_pct: Same, as a percentage of all games
    """
    turn_number: int
    cards_drawn: float = 0.0
    cards_played: float = 0.0
    cards_in_hand: float = 0.0
    lands_played: float = 0.0
    lands_cheated: float = 0.0
    mana_available: float = 0.0
    mana_spent: float = 0.0
    commander_played: int = 0
    commander_played_pct: float = 0.0

    @property
    def spent_ratio(self) -> float:
        if self.mana_available == 0:
            return 0.0
        return self.mana_spent / self.mana_available


@dataclass
class SimulationSummary:
    """
    Aggregated result of a batch of games.

    Attributes:
        games: Number of games simulated
        turn_count: Turns per game
        turns: One TurnSummary per turn
        commander_average_turn: Average arrival turn over games where the
            commander arrived, None if it never did
        commander_missed: Games where the commander never arrived
        cards_per_turn: Average cards drawn per turn
        ramp_per_turn: Final-turn mana available divided by turn count
        average_mulligans: Average reshuffles per game
    """
    games: int
    turn_count: int
    turns: List[TurnSummary] = field(default_factory=list)
    commander_average_turn: Optional[float] = None
    commander_missed: int = 0
    cards_per_turn: float = 0.0
    ramp_per_turn: float = 0.0
    average_mulligans: float = 0.0

    @property
    def commander_missed_pct(self) -> float:
        return 100.0 * self.commander_missed / self.games


def _average(values: Sequence[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def summarize(stats: Sequence[GameStats]) -> SimulationSummary:
    """
    Aggregate the GameStats of a batch.

    Args:
        stats: One GameStats per game, all with the same number of turns

    Returns:
        The SimulationSummary

    Raises:
        ValueError: If `stats` is empty or the games differ in length
    """
    if not stats:
        raise ValueError("no games to summarize")
    turn_count = len(stats[0].turns_stats)
    if any(len(s.turns_stats) != turn_count for s in stats):
        raise ValueError("all games must have the same number of turns")

    games = len(stats)
    arrivals = [0] * (turn_count + 1)
    for s in stats:
        arrivals[s.turn_commander_played] += 1

    turns = []
    for index in range(turn_count):
        rows = [s.turns_stats[index] for s in stats]
        turns.append(TurnSummary(
            turn_number=index + 1,
            cards_drawn=_average([t.cards_drawn for t in rows]),
            cards_played=_average([t.cards_played for t in rows]),
            cards_in_hand=_average([t.cards_in_hand for t in rows]),
            lands_played=_average([t.lands_played for t in rows]),
            lands_cheated=_average([t.lands_cheated for t in rows]),
            mana_available=_average([t.mana_available for t in rows]),
            mana_spent=_average([t.mana_spent for t in rows]),
            commander_played=arrivals[index + 1],
            commander_played_pct=100.0 * arrivals[index + 1] / games,
        ))

    played = [s.turn_commander_played for s in stats if s.turn_commander_played > 0]
    all_turns = [t for s in stats for t in s.turns_stats]

    return SimulationSummary(
        games=games,
        turn_count=turn_count,
        turns=turns,
        commander_average_turn=_average(played) if played else None,
        commander_missed=arrivals[0],
        cards_per_turn=_average([t.cards_drawn for t in all_turns]),
        ramp_per_turn=_average([s.turns_stats[-1].mana_available for s in stats]) / turn_count
        if turn_count else 0.0,
        average_mulligans=_average([s.mulligan_count for s in stats]),
    )


# =============================================================================
# PRINTING
# =============================================================================

def print_statistics(summary: SimulationSummary) -> None:
    """
    Pretty print a SimulationSummary.

    Example output:
                                      Turn breakdown / Deck Performance

                 --------- cards ---------   ----- lands -----   ---------- mana ---------   --- commander ---
          Turn    drawn   played  in-hand     played  cheated     total    spent    ratio     %-played  (abs)
          #1:      0.00     0.85     6.15       1.00     0.00      1.00     0.62     0.62        0.0%      0
          ...
    """
    print()
    print("                                      Turn breakdown / Deck Performance")
    print()
    print("           --------- cards ---------   ----- lands -----   ---------- mana ---------   --- commander ---")
    print("  Turn      drawn   played  in-hand     played  cheated     total    spent    ratio     %-played  (abs)")
    for turn in summary.turns:
        label = f"#{turn.turn_number}:"
        print(f"  {label:<5}    {turn.cards_drawn:5.2f}    {turn.cards_played:5.2f}    {turn.cards_in_hand:5.2f}"
              f"      {turn.lands_played:5.2f}    {turn.lands_cheated:5.2f}"
              f"      {turn.mana_available:5.2f}    {turn.mana_spent:5.2f}    {turn.spent_ratio:5.2f}"
              f"      {turn.commander_played_pct:5.1f}%   {turn.commander_played:>4}")

    print()
    if summary.commander_average_turn is not None:
        print(f"Commander arrives on turn ........: {summary.commander_average_turn:.1f} (avg)")
    else:
        print("Commander arrives on turn ........: never")
    print(f"games Commander didn't arrive ....: {summary.commander_missed_pct:.2f}% ({summary.commander_missed})")
    print(f"cards/round average ..............: {summary.cards_per_turn:.2f}")
    print(f"mana increase / turn (ramp) ......: {summary.ramp_per_turn:.2f} mana / turn")
    print(f"mulligans / game .................: {summary.average_mulligans:.2f}")

    print()
    print(f"games simulated ..................: {summary.games}")
    print(f"turns per game ...................: {summary.turn_count}")
