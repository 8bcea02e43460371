"""Ramp Simulator - Turn Engine

One turn of the goldfish game, strictly sequential:
1. Untap every permanent
2. Gather the passive mana pool and resolve upkeep triggers
3. Draw for the turn
4. Action loop: keep taking the first applicable action, in priority order,
   until none applies
5. Record TurnStats

Every decision in the action loop is an affordability query against the
turn's ManaPool: `mana_pool` holds what is available this turn, `mana_spent`
what has already been committed, and a cost C is affordable when
`mana_pool.can_also_pay_for(mana_spent, C)` succeeds.

The turn-scratch state is a plain TurnState value threaded through the
functions below; nothing here holds on to a Game after run_turn returns.
"""
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, Dict, List, Optional, Tuple

from .abilities import Ability, Cost, Draw, Effect, FetchLand, LandLimitIncrease, ProduceMana
from .mana import ManaPool, PipCounts
from .objects import Card
from .types import COLORS, CardId, CardType, InvariantViolation, Trigger
from .zones import Zone

if TYPE_CHECKING:
    from .game import Game, Settings


# =============================================================================
# Turn State and Statistics
# =============================================================================

@dataclass
class TurnStats:
    """
    What happened during one turn.

    Attributes:
        turn_number: 1-based turn number
        cards_drawn: Cards drawn this turn (draw step, upkeep and spell draws)
        cards_played: Nonland cards played, commander included
        cards_in_hand: Hand size at the end of the turn
        lands_played: Land drops used
        lands_cheated: Lands put onto the battlefield by fetch effects
        mana_available: Value of the mana pool at the end of the turn
        mana_spent: Value of the mana committed to costs this turn
    """
    turn_number: int
    cards_drawn: int = 0
    cards_played: int = 0
    cards_in_hand: int = 0
    lands_played: int = 0
    lands_cheated: int = 0
    mana_available: int = 0
    mana_spent: int = 0


@dataclass
class TurnState:
    """
    Transient bookkeeping for the turn in progress.

    Attributes:
        turn_number: 1-based turn number
        mana_pool: Everything made available this turn
        mana_spent: The part of mana_pool already committed to costs
        lands_played: Land drops used so far
        land_limit: Land drops allowed this turn (ramp can raise it)
        tapped_for_mana: Permanents whose production is folded into
            mana_pool, with the mana each one added
        actions_taken: Successful iterations of the action loop
        turn_stats: Statistics being recorded for this turn
    """
    turn_number: int
    mana_pool: ManaPool = field(default_factory=ManaPool)
    mana_spent: ManaPool = field(default_factory=ManaPool)
    lands_played: int = 0
    land_limit: int = 1
    tapped_for_mana: Dict[CardId, ManaPool] = field(default_factory=dict)
    actions_taken: int = 0
    turn_stats: Optional[TurnStats] = None

    def __post_init__(self):
        if self.turn_stats is None:
            self.turn_stats = TurnStats(turn_number=self.turn_number)

    def can_afford(self, cost: Optional[ManaPool]) -> Optional[ManaPool]:
        """New committed total if `cost` fits on top of what is already spent."""
        return self.mana_pool.can_also_pay_for(self.mana_spent, cost or ManaPool())


# =============================================================================
# Turn Driver
# =============================================================================

def run_turn(game: 'Game', turn_number: int, settings: 'Settings') -> TurnStats:
    """
    Play one full turn.

    Args:
        game: The game being simulated; its zones are mutated in place
        turn_number: 1-based turn number
        settings: Simulation settings (draw-on-turn-one)

    Returns:
        The statistics recorded for this turn
    """
    state = TurnState(turn_number=turn_number)
    game.turn_number = turn_number

    game.battlefield.untap_all()
    gather_mana_pool(game, state)

    if game.verbose:
        print(f"\n***** Turn #{turn_number} *****")
        print(f" - available mana: {state.mana_pool} ({state.mana_pool.total()})")

    if turn_number > 1 or settings.draw_card_on_turn_one:
        draw(game, state, 1)

    state.actions_taken = run_action_loop(game, state)

    if game.verbose:
        print(" - nothing more to do...")
        print(f" - available mana: {state.mana_pool} ({state.mana_pool.total()})")
        print(f" - spent mana: {state.mana_spent} ({state.mana_spent.total()})")
        game.hand.dump()
        game.battlefield.dump()

    stats = state.turn_stats
    stats.cards_in_hand = len(game.hand)
    stats.mana_available = state.mana_pool.total()
    stats.mana_spent = state.mana_spent.total()
    return stats


def run_action_loop(game: 'Game', state: TurnState) -> int:
    """
    Take actions until none applies.

    Each successful action removes a card from hand or the command zone,
    uses up a land drop, taps or sacrifices a permanent, or commits mana,
    so the loop always reaches a fixed point.

    Returns:
        Number of actions taken
    """
    actions = 0
    while (try_to_play_land(game, state)
           or try_to_play_commander(game, state)
           or try_to_activate_ramp_ability(game, state)
           or try_to_play_ramp_spell(game, state)
           or try_to_activate_draw_ability(game, state)
           or try_to_play_draw_spell(game, state)
           or try_to_play_other_spell(game, state)):
        actions += 1
    return actions


# =============================================================================
# Passive Gathering
# =============================================================================

def gather_mana_pool(game: 'Game', state: TurnState) -> None:
    """
    Fold every untapped permanent's mana into the pool and resolve upkeeps.

    Only the first tap-for-mana ability of a permanent counts; the mana it
    adds is remembered in `state.tapped_for_mana`. Upkeep abilities with no
    mana or sacrifice cost resolve immediately. Every ability is gated by
    its availability.
    """
    for card in list(game.battlefield):
        counted = False
        for ability in card.abilities:
            if ability.trigger is Trigger.ACTIVATED:
                if counted or card.tapped or not ability.is_tap_mana_ability():
                    continue
                if not ability.is_available(game.rng):
                    continue
                produced = ability.effect.pool
                state.mana_pool.add_pool(produced)
                state.tapped_for_mana[card.id] = produced.copy()
                counted = True
            elif ability.trigger is Trigger.UPKEEP:
                if ability.cost.mana_cost is not None or ability.cost.sacrifice_cost:
                    continue
                if not ability.is_available(game.rng):
                    continue
                game.log(f"upkeep trigger of {card}: {ability.effect}")
                resolve_effect(game, state, ability.effect)


# =============================================================================
# Effect Resolution
# =============================================================================

def resolve_effect(game: 'Game', state: TurnState, effect: Effect) -> None:
    """Apply an effect to the turn state and zones."""
    if isinstance(effect, ProduceMana):
        state.mana_pool.add_pool(effect.pool)
    elif isinstance(effect, FetchLand):
        fetch_lands(game, state, effect)
    elif isinstance(effect, Draw):
        draw(game, state, effect.roll(game.rng))
    elif isinstance(effect, LandLimitIncrease):
        state.land_limit += effect.amount
    else:
        raise InvariantViolation(f"no handler for effect {effect!r}")


def draw(game: 'Game', state: TurnState, count: int) -> None:
    state.turn_stats.cards_drawn += game.draw_cards(count)


def fetch_lands(game: 'Game', state: TurnState, effect: FetchLand) -> None:
    """
    Search the library for lands, then shuffle it.

    Lands put onto the battlefield enter tapped and are counted as cheated.
    A search that finds nothing fails to find, as it would at the table.
    """
    for type_name in effect.to_hand:
        card = game.library.take_land(type_name)
        if card is None:
            game.log(f"no '{type_name}' left in library", "warning")
            continue
        game.log(f"#--> fetch {card} to hand")
        game.hand.add(card)

    for type_name in effect.to_battlefield:
        card = game.library.take_land(type_name)
        if card is None:
            game.log(f"no '{type_name}' left in library", "warning")
            continue
        card.tapped = True
        game.log(f"#--> fetch {card} to battlefield")
        game.battlefield.add(card)
        state.turn_stats.lands_cheated += 1

    game.library.shuffle(game.rng)


# =============================================================================
# Playing Cards
# =============================================================================

def play_card(game: 'Game', state: TurnState, card_id: CardId,
              source: Optional[Zone] = None) -> Card:
    """
    Pay for and resolve a card from hand (or from `source`).

    The casting cost is committed before any ability resolves. A permanent
    that enters untapped with a tap-for-mana ability adds its mana right
    away; cast triggers resolve; the card ends up on the battlefield or,
    for instants and sorceries, in the graveyard.

    Raises:
        InvariantViolation: If the card is missing, cannot be paid for, or
            is a land beyond this turn's land limit.
    """
    source = source if source is not None else game.hand
    card = source.get(card_id)
    if card is None:
        raise InvariantViolation(f"card #{card_id} missing from {source.name}")

    spent = state.can_afford(card.definition.mana_cost)
    if spent is None:
        raise InvariantViolation(f"cannot pay for {card}")

    if card.is_type(CardType.LAND):
        if state.lands_played >= state.land_limit:
            raise InvariantViolation(
                f"land limit exceeded: {state.lands_played} of {state.land_limit}")
        state.lands_played += 1
        state.turn_stats.lands_played += 1
    else:
        state.turn_stats.cards_played += 1

    source.take(card_id)
    state.mana_spent = spent
    if card.definition.enters_tapped:
        card.tapped = True
    game.log(f"playing: {card}")

    permanent = card.definition.is_permanent
    counted = False
    for ability in card.abilities:
        effect = ability.effect
        if ability.trigger is Trigger.ACTIVATED:
            if (permanent and not counted and not card.tapped
                    and ability.is_tap_mana_ability()):
                game.log("permanent's mana ability added to pool...")
                state.mana_pool.add_pool(effect.pool)
                state.tapped_for_mana[card.id] = effect.pool.copy()
                counted = True
        elif ability.trigger is Trigger.CAST:
            if ability.cost.is_free:
                resolve_effect(game, state, effect)
        elif isinstance(effect, LandLimitIncrease):
            state.land_limit += effect.amount

    if permanent:
        game.log(f"{card} ---> battlefield")
        game.battlefield.add(card)
        if card.definition.returns_land_to_hand:
            return_land_to_hand(game, state, card)
    else:
        game.log(f"{card} ---> graveyard")
        game.graveyard.add(card)
    return card


def return_land_to_hand(game: 'Game', state: TurnState, source: Card) -> Card:
    """
    Resolve a bounce land's enter trigger by returning a land to hand.

    Lands that are tapped or already folded into this turn's pool go first;
    their mana stays in the pool, as if tapped in response. Among those, the
    land producing the colors the hand wants least is chosen. The bounce
    land only returns itself when it is the only land on the battlefield.

    Returns:
        The land moved to hand
    """
    lands = game.battlefield.filter(
        lambda land: land.is_type(CardType.LAND) and land.id != source.id)
    if not lands:
        lands = [source]

    demand = game.hand.count_pips_in_mana_costs()
    demand.normalize()

    def usefulness(land: Card) -> Tuple[bool, float, int]:
        harvested = land.tapped or land.id in state.tapped_for_mana
        wanted = sum(demand[color] for color in COLORS if land.produces(color))
        return (not harvested, wanted, land.definition.color_count())

    land = min(lands, key=usefulness)
    game.battlefield.take(land.id)
    state.tapped_for_mana.pop(land.id, None)
    land.tapped = False
    game.hand.add(land)
    game.log(f"{source} returns {land} to hand")
    return land


def try_to_play_land(game: 'Game', state: TurnState) -> bool:
    """
    Play the land that best fixes the colors the hand is asking for.

    Lands are ranked by how many colors they produce. When the hand has
    colored pips, colors are tried in order of how far hand demand exceeds
    what the pool already supplies, and the first land producing the
    wanted color is played. Otherwise the most flexible land is played.
    """
    if state.lands_played >= state.land_limit:
        return False

    lands = game.hand.query(CardType.LAND)
    if not lands:
        return False
    game.log(f"trying to play lands, {len(lands)} in hand")

    sort_lands_on_colors_produced(lands)

    pips_in_hand = game.hand.count_pips_in_mana_costs()
    if pips_in_hand.normalize():
        pips_in_pool = PipCounts()
        pips_in_pool.count_in_pool(state.mana_pool)
        if not pips_in_pool.normalize():
            pips_in_pool = PipCounts()

        wanted = pips_in_hand.prioritized_delta(pips_in_pool)
        if wanted:
            game.log(f"land preference: {wanted[0].name.lower()}")
        for color in wanted:
            for land in lands:
                if land.produces(color):
                    play_card(game, state, land.id)
                    return True

    game.log("no match for preference...", "debug")
    play_card(game, state, lands[0].id)
    return True


def sort_lands_on_colors_produced(lands: List[Card]) -> None:
    """Most colors first; the sort is stable, so ties keep hand order."""
    lands.sort(key=lambda land: land.definition.color_count(), reverse=True)


def try_to_play_commander(game: 'Game', state: TurnState) -> bool:
    if not game.command:
        return False
    commander = game.command.cards[0]
    if state.can_afford(commander.definition.mana_cost) is None:
        return False

    game.log(f"playing commander, {commander}")
    play_card(game, state, commander.id, source=game.command)
    game.stats.turn_commander_played = state.turn_number
    return True


def find_spells_in_hand(game: 'Game', state: TurnState,
                        selector: Callable[[Ability], bool]) -> List[Card]:
    """Affordable nonland cards in hand with at least one selected ability."""
    result = []
    for card in game.hand:
        if card.is_type(CardType.LAND):
            continue
        if not any(selector(ability) for ability in card.abilities):
            continue
        if state.can_afford(card.definition.mana_cost) is None:
            continue
        result.append(card)
    return result


def try_to_play_ramp_spell(game: 'Game', state: TurnState) -> bool:
    """Cast the cheapest affordable spell that produces mana or lands."""
    land_in_hand = bool(game.hand.query(CardType.LAND))

    def is_ramp(ability: Ability) -> bool:
        if ability.produces_mana() or ability.fetches_lands():
            return True
        return ability.increases_land_limit() and land_in_hand

    candidates = find_spells_in_hand(game, state, is_ramp)
    if not candidates:
        return False
    candidates.sort(key=lambda card: card.mana_value)
    for card in candidates:
        game.log(f"ramp spell candidate: {card}", "debug")

    play_card(game, state, candidates[0].id)
    return True


def try_to_play_draw_spell(game: 'Game', state: TurnState) -> bool:
    candidates = find_spells_in_hand(game, state, Ability.draws_cards)
    if not candidates:
        return False
    candidates.sort(key=lambda card: card.mana_value)
    play_card(game, state, candidates[0].id)
    return True


def try_to_play_other_spell(game: 'Game', state: TurnState) -> bool:
    """Play whatever is left, most expensive first."""
    candidates = [card for card in game.hand
                  if not card.is_type(CardType.LAND)
                  and state.can_afford(card.definition.mana_cost) is not None]
    if not candidates:
        return False
    candidates.sort(key=lambda card: card.mana_value, reverse=True)
    play_card(game, state, candidates[0].id)
    return True


# =============================================================================
# Activated Abilities
# =============================================================================

def activation_payment(state: TurnState, card: Card,
                       cost: Cost) -> Optional[Tuple[ManaPool, ManaPool]]:
    """
    Work out the pools after paying `cost` with `card` as the source.

    A permanent whose mana is already in the pool cannot both keep that
    mana and be tapped or sacrificed again, so its contribution is taken
    back out before the affordability check.

    Returns:
        (mana_pool, mana_spent) after payment, or None if unaffordable
    """
    pool = state.mana_pool
    contribution = state.tapped_for_mana.get(card.id)
    if contribution is not None and (cost.tap_cost or cost.sacrifice_cost):
        pool = pool.copy()
        pool.remove_exact_pool(contribution)

    spent = pool.can_also_pay_for(state.mana_spent, cost.mana_cost or ManaPool())
    if spent is None:
        return None
    return pool, spent


def find_abilities_on_battlefield(game: 'Game', state: TurnState,
                                  selector: Callable[[Ability], bool]
                                  ) -> List[Tuple[Card, Ability]]:
    """Activated abilities on the battlefield that are selected and payable.

    Abilities with no cost at all are never candidates, they could be
    activated forever.
    """
    result = []
    for card in game.battlefield:
        for ability in card.abilities:
            if ability.trigger is not Trigger.ACTIVATED or not selector(ability):
                continue
            if ability.cost.is_free:
                continue
            if ability.cost.tap_cost and card.tapped:
                continue
            if activation_payment(state, card, ability.cost) is None:
                continue
            if not ability.is_available(game.rng):
                continue
            result.append((card, ability))
    return result


def pay_activation_cost(game: 'Game', state: TurnState, card: Card, cost: Cost) -> None:
    """
    Tap, sacrifice and commit mana for an activation.

    Raises:
        InvariantViolation: If the cost was approved but cannot be paid.
    """
    payment = activation_payment(state, card, cost)
    if payment is None:
        raise InvariantViolation(f"cannot pay {cost} for {card}")
    state.mana_pool, state.mana_spent = payment
    if cost.tap_cost or cost.sacrifice_cost:
        state.tapped_for_mana.pop(card.id, None)

    if cost.tap_cost:
        if card.tapped:
            raise InvariantViolation(f"{card} is already tapped")
        card.tapped = True
    if cost.sacrifice_cost:
        game.battlefield.take(card.id)
        game.log(f"{card} sacrificed ---> graveyard")
        game.graveyard.add(card)


def activate_ability(game: 'Game', state: TurnState, card: Card, ability: Ability) -> None:
    game.log(f"activating {card} :: {ability}")
    pay_activation_cost(game, state, card, ability.cost)
    resolve_effect(game, state, ability.effect)


def try_to_activate_ramp_ability(game: 'Game', state: TurnState) -> bool:
    """Activate the cheapest land-fetching ability on the battlefield."""
    candidates = find_abilities_on_battlefield(game, state, Ability.fetches_lands)
    if not candidates:
        return False
    candidates.sort(key=lambda pair: pair[1].cost.mana_value)
    for card, ability in candidates:
        game.log(f"activated ramp candidate: {card} :: {ability}", "debug")

    card, ability = candidates[0]
    activate_ability(game, state, card, ability)
    return True


def try_to_activate_draw_ability(game: 'Game', state: TurnState) -> bool:
    """
    Activate the cheapest draw ability on the battlefield.

    Abilities that sacrifice their source are only used before the land
    drop of the turn has been made.
    """
    candidates = find_abilities_on_battlefield(game, state, Ability.draws_cards)
    if state.lands_played > 0:
        candidates = [(card, ability) for card, ability in candidates
                      if not ability.cost.sacrifice_cost]
    if not candidates:
        return False
    candidates.sort(key=lambda pair: pair[1].cost.mana_value)

    card, ability = candidates[0]
    activate_ability(game, state, card, ability)
    return True
