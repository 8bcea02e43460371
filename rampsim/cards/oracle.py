"""Ramp Simulator - Oracle Text Parser

Turns a card's oracle text into the declarative Ability list the engine
runs on. Only the shapes that matter for mana development are recognised:

    {T}: Add {C}{C}.                                  mana rock
    {T}: Add {R} or {W}.                              hybrid producer
    {T}: Add one mana of any color ...                wildcard producer
    {1}, {T}: Add {R}{W}.                             signet
    {2}, {T}, Sacrifice Hedron Archive: Draw two cards.
    Sacrifice Commander's Sphere: Draw a card.
    {T}, Sacrifice Evolving Wilds: Search your library for a basic land card, ...
    Search your library for up to two basic land cards, ...   (Cultivate)
    Add {B}{B}{B}.                                    ritual
    You may play an additional land this turn.        (Explore)
    When Simic Growth Chamber enters, return a land you control to its owner's hand.
                                                      (bounce land, see returns_land_to_hand)

Everything else is ignored.
"""
import re
from dataclasses import replace
from typing import List, Optional

from ..engine.abilities import (
    Ability, Cost, Draw, Effect, FetchLand, LandLimitIncrease, ProduceMana
)
from ..engine.mana import ALL, Mana, ManaPool
from ..engine.types import CardType, Trigger, parse_types


_SYMBOL = r'\{(?:\d+|[WUBRGCX](?:/[WUBRG])*)\}'
_SYMBOLS = rf'((?:{_SYMBOL})+)'

_NUMBERS = {'a': 1, 'an': 1, 'one': 1, 'up to one': 1, 'two': 2, 'up to two': 2,
            'three': 3, 'up to three': 3}


class OracleParser:
    """Parse oracle text into engine abilities."""

    # Cost side of "COST: EFFECT"
    TAP = re.compile(r'^\{T\}$')
    SACRIFICE = re.compile(r'^Sacrifice (.+)$')
    TAP_SACRIFICE = re.compile(r'^\{T\}, Sacrifice (.+)$')
    MANA = re.compile(rf'^{_SYMBOLS}$')
    TAP_MANA = re.compile(rf'^{_SYMBOLS}, \{{T\}}$')
    MANA_SACRIFICE = re.compile(rf'^{_SYMBOLS}, Sacrifice (.+)$')
    TAP_MANA_SACRIFICE = re.compile(rf'^{_SYMBOLS}, \{{T\}}, Sacrifice (.+)$')

    # Effect side
    ADD_MANA = re.compile(rf'^Add {_SYMBOLS}\.?')
    ADD_MANA_X_OR_Y = re.compile(r'^Add \{(\w)\} or \{(\w)\}')
    ADD_MANA_X_Y_OR_Z = re.compile(r'^Add \{(\w)\}, \{(\w)\}, or \{(\w)\}')
    ADD_MANA_ANY = re.compile(r'^Add one mana of any color')
    DRAW = re.compile(r'^Draw (a|one|two|three) cards?\b', re.IGNORECASE)
    SEARCH = re.compile(
        r'^Search your library for (a|an|one|up to one|two|up to two|three|up to three) '
        r'(basic land|Plains|Island|Swamp|Mountain|Forest) cards?(.*)$',
        re.IGNORECASE)
    EXTRA_LAND = re.compile(
        r'^You may play (an|one|two) additional lands? (this turn|on each of your turns)',
        re.IGNORECASE)

    ENTERS_TAPPED = re.compile(r'enters(?: the battlefield)? tapped(?! unless)', re.IGNORECASE)
    RETURN_LAND = re.compile(
        r"^When (.+?) enters(?: the battlefield)?, return a land you control to its owner's hand\.?$",
        re.IGNORECASE)

    SAC_FOR_CARDS_AVAILABILITY = 0.2

    def parse(self, oracle_text: str, card_name: str = "", type_line: str = "") -> List[Ability]:
        """
        Parse oracle text into abilities.

        Lines of the form "COST: EFFECT" become activated abilities. Other
        lines become cast triggers on instants and sorceries, and upkeep
        triggers on permanents. A card that both makes mana and can be
        sacrificed to draw is usually kept for its mana, so its draw
        abilities only fire 20% of the time.

        Args:
            oracle_text: The oracle text, lines separated by newlines
            card_name: Card name, to recognise "Sacrifice CARDNAME"
            type_line: Type line, to tell spells from permanents

        Returns:
            List of Ability objects, possibly empty

        Raises:
            SetupError: If a recognised cost or effect holds a bad mana symbol
        """
        is_spell = is_spell_type(type_line)
        abilities: List[Ability] = []
        is_mana_producer = False
        is_sac_for_cards = False

        for line in self._lines(oracle_text):
            if ':' in line and not line.lower().startswith(('when', 'at the beginning')):
                lhs, rhs = (part.strip() for part in line.split(':', 1))
                cost = self.parse_cost(lhs, card_name)
                effect = self.parse_effect(rhs)
                if cost is None or effect is None:
                    continue
                is_mana_producer |= isinstance(effect, ProduceMana)
                is_sac_for_cards |= isinstance(effect, Draw) and cost.sacrifice_cost
                abilities.append(Ability(Trigger.ACTIVATED, cost, effect))
                continue

            for sentence in self._sentences(line):
                effect = self.parse_effect(sentence)
                if effect is None:
                    continue
                if is_spell:
                    abilities.append(Ability(Trigger.CAST, Cost.none(), effect))
                elif isinstance(effect, LandLimitIncrease):
                    abilities.append(Ability(Trigger.UPKEEP, Cost.none(), effect))

        if is_mana_producer and is_sac_for_cards:
            abilities = [
                replace(ability, availability=self.SAC_FOR_CARDS_AVAILABILITY)
                if isinstance(ability.effect, Draw) else ability
                for ability in abilities
            ]
        return abilities

    def parse_cost(self, text: str, card_name: str = "") -> Optional[Cost]:
        """Parse the left side of an activated ability, None if unsupported."""
        if self.TAP.match(text):
            return Cost.tap()

        match = self.TAP_SACRIFICE.match(text)
        if match:
            return Cost.tap_sacrifice() if _is_self(match.group(1), card_name) else None

        match = self.SACRIFICE.match(text)
        if match:
            return Cost.sacrifice() if _is_self(match.group(1), card_name) else None

        match = self.TAP_MANA_SACRIFICE.match(text)
        if match:
            if not _is_self(match.group(2), card_name):
                return None
            return Cost.tap_mana_sacrifice(ManaPool.parse(match.group(1)))

        match = self.MANA_SACRIFICE.match(text)
        if match:
            if not _is_self(match.group(2), card_name):
                return None
            return Cost(mana_cost=ManaPool.parse(match.group(1)), sacrifice_cost=True)

        match = self.TAP_MANA.match(text)
        if match:
            return Cost.tap_mana(ManaPool.parse(match.group(1)))

        match = self.MANA.match(text)
        if match:
            return Cost.mana(ManaPool.parse(match.group(1)))

        return None

    def parse_effect(self, text: str) -> Optional[Effect]:
        """Parse the right side of an activated ability (or a spell sentence)."""
        match = self.ADD_MANA_X_Y_OR_Z.match(text)
        if match:
            return ProduceMana(ManaPool.of(Mana.parse('/'.join(match.groups()))))

        match = self.ADD_MANA_X_OR_Y.match(text)
        if match:
            return ProduceMana(ManaPool.of(Mana.parse('/'.join(match.groups()))))

        if self.ADD_MANA_ANY.match(text):
            return ProduceMana(ManaPool.of(ALL))

        match = self.ADD_MANA.match(text)
        if match:
            return ProduceMana(ManaPool.parse(match.group(1)))

        match = self.DRAW.match(text)
        if match:
            return Draw((_NUMBERS[match.group(1).lower()],))

        match = self.SEARCH.match(text)
        if match:
            return self._parse_search(match)

        match = self.EXTRA_LAND.match(text)
        if match:
            return LandLimitIncrease(_NUMBERS[match.group(1).lower()])

        return None

    def enters_tapped(self, oracle_text: str) -> bool:
        """True for permanents that always enter tapped (not "tapped unless")."""
        return any(self.ENTERS_TAPPED.search(line) for line in self._lines(oracle_text))

    def returns_land_to_hand(self, oracle_text: str, card_name: str = "") -> bool:
        """True for bounce lands: "When CARDNAME enters, return a land you control ..."."""
        for line in self._lines(oracle_text):
            match = self.RETURN_LAND.match(line)
            if match and _is_self(match.group(1), card_name):
                return True
        return False

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _parse_search(self, match) -> Optional[FetchLand]:
        count = _NUMBERS[match.group(1).lower()]
        land_type = match.group(2).lower()
        rest = match.group(3).lower()

        if 'onto the battlefield' in rest and 'into your hand' in rest:
            # "put one onto the battlefield tapped and the other into your hand"
            return FetchLand(to_hand=(land_type,) * (count - 1), to_battlefield=(land_type,))
        if 'onto the battlefield' in rest:
            return FetchLand(to_battlefield=(land_type,) * count)
        if 'into your hand' in rest:
            return FetchLand(to_hand=(land_type,) * count)
        return None

    @staticmethod
    def _lines(oracle_text: str) -> List[str]:
        """Split into lines, unwrapping "(...)" lines and dropping inline reminder text."""
        lines = []
        for line in (oracle_text or '').split('\n'):
            line = line.strip()
            if line.startswith('(') and line.endswith(')'):
                line = line[1:-1].strip()
            else:
                line = re.sub(r'\s*\([^)]*\)', '', line).strip()
            if line:
                lines.append(line)
        return lines

    @staticmethod
    def _sentences(line: str) -> List[str]:
        return [s.strip() for s in re.split(r'(?<=\.)\s+', line) if s.strip()]


def _is_self(reference: str, card_name: str) -> bool:
    """Does "Sacrifice <reference>" name the card itself?"""
    reference = reference.strip().rstrip('.')
    if not card_name:
        return reference.lower().startswith('this ')
    short_name = card_name.split(',')[0]
    return (reference in (card_name, short_name)
            or reference.lower().startswith('this '))


def parse_oracle(oracle_text: str, card_name: str = "", type_line: str = "") -> List[Ability]:
    """Convenience wrapper around OracleParser().parse."""
    return OracleParser().parse(oracle_text, card_name, type_line)


def is_spell_type(type_line: str) -> bool:
    return bool(parse_types(type_line) & (CardType.INSTANT | CardType.SORCERY))
