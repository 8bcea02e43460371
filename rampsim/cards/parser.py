"""Ramp Simulator - Deck List Parser

Reads plain-text Commander deck lists:

    // Golgari lands
    Commander
    1 Meren of Clan Nel Toth

    Deck
    1x Sol Ring
    1 Cultivate
    36 Forest
    1 Jarad, Golgari Lich Lord *CMDR*

    Sideboard
    1 Beast Within

Counts may be written "N Name" or "Nx Name". Cards under a "Commander"
heading, or marked with a trailing *CMDR*, are commanders. Sideboard and
maybeboard sections are kept in the Decklist but never played. Set codes
in exports such as "1 Sol Ring (C21) 263" are dropped.
"""
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from ..engine.types import SetupError


BASIC_LANDS = {
    "Plains", "Island", "Swamp", "Mountain", "Forest", "Wastes",
    "Snow-Covered Plains", "Snow-Covered Island", "Snow-Covered Swamp",
    "Snow-Covered Mountain", "Snow-Covered Forest",
}


# =============================================================================
# Data Classes
# =============================================================================

@dataclass
class DecklistEntry:
    """
    A single entry in a decklist representing a card and its count.

    Attributes:
        count: Number of copies of this card
        card_name: The name of the card
        is_commander: True if this entry is a commander
        is_sideboard: True if this entry is outside the played deck
    """
    count: int
    card_name: str
    is_commander: bool = False
    is_sideboard: bool = False

    def __post_init__(self):
        if self.count < 1:
            raise ValueError(f"Card count must be at least 1, got {self.count}")
        if not self.card_name or not self.card_name.strip():
            raise ValueError("Card name cannot be empty")
        self.card_name = self.card_name.strip()

    def __repr__(self) -> str:
        marker = " (CMDR)" if self.is_commander else " (SB)" if self.is_sideboard else ""
        return f"DecklistEntry({self.count}x {self.card_name}{marker})"


@dataclass
class Decklist:
    """
    A parsed deck list.

    Attributes:
        name: The name of the deck
        entries: Every DecklistEntry, commanders and sideboard included
    """
    name: str
    entries: List[DecklistEntry] = field(default_factory=list)

    @property
    def deck(self) -> List[DecklistEntry]:
        """Entries that are played, commanders included."""
        return [e for e in self.entries if not e.is_sideboard]

    @property
    def commanders(self) -> List[str]:
        """Names of the commanders, one per copy."""
        names: List[str] = []
        for entry in self.deck:
            if entry.is_commander:
                names.extend([entry.card_name] * entry.count)
        return names

    @property
    def total_count(self) -> int:
        return sum(e.count for e in self.deck)

    def cards(self) -> List[Tuple[int, str]]:
        """(count, name) pairs of the played deck, in list order."""
        return [(e.count, e.card_name) for e in self.deck]

    def names(self) -> List[str]:
        """Distinct card names of the played deck."""
        seen: Dict[str, str] = {}
        for entry in self.deck:
            seen.setdefault(entry.card_name.lower(), entry.card_name)
        return list(seen.values())

    def get_card_counts(self) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for entry in self.deck:
            counts[entry.card_name] = counts.get(entry.card_name, 0) + entry.count
        return counts

    def with_commander(self, name: str) -> 'Decklist':
        """
        Mark a card already in the list as the commander.

        Raises:
            SetupError: If the card is not in the deck
        """
        for entry in self.deck:
            if entry.card_name.lower() == name.lower():
                entry.is_commander = True
                return self
        raise SetupError(f"commander '{name}' not found in deck list {self.name}")

    def validate(self) -> Tuple[bool, List[str]]:
        """
        Check the list against Commander deck construction.

        Returns:
            Tuple of (is_valid, list_of_errors)
        """
        errors: List[str] = []

        if self.total_count != 100:
            errors.append(f"Deck has {self.total_count} cards, Commander decks have 100")

        if not self.commanders:
            errors.append("Deck has no commander")

        for card_name, count in self.get_card_counts().items():
            if card_name not in BASIC_LANDS and count > 1:
                errors.append(f"{card_name} has {count} copies, maximum is 1")

        return (len(errors) == 0, errors)

    def __repr__(self) -> str:
        return f"Decklist({self.name}: {self.total_count} cards, commanders={self.commanders})"


# =============================================================================
# Decklist Parser
# =============================================================================

class DecklistParser:
    """
    Parser for plain-text Commander deck lists.

    Rules:
        - Lines starting with // or # are comments (ignored)
        - Empty lines are ignored
        - "Commander" starts the commander section, "Deck"/"Mainboard"
          returns to the deck, "Sideboard"/"Maybeboard" starts cards that
          are not played
        - Card entries are "N Card Name" or "Nx Card Name"
        - A trailing "*CMDR*" marks a commander anywhere in the list
    """

    CARD_PATTERN = re.compile(r'^(\d+)x?\s+(.+)$', re.IGNORECASE)
    SET_CODE_PATTERN = re.compile(r'\s+\([A-Za-z0-9]{2,6}\)(\s+\S+)?\s*$')
    COMMANDER_TAG = '*CMDR*'
    COMMANDER_MARKERS = {'commander', 'commanders', 'commander:'}
    DECK_MARKERS = {'deck', 'mainboard', 'main', 'deck:', 'mainboard:'}
    SIDEBOARD_MARKERS = {'sideboard', 'sb:', 'sideboard:', 'maybeboard', 'maybeboard:'}
    COMMENT_PREFIXES = ('//', '#')

    def parse(self, text: str, deck_name: Optional[str] = None) -> Decklist:
        """
        Parse a deck list from text.

        Args:
            text: The deck list
            deck_name: Name for the deck (default "Unnamed Deck")

        Returns:
            Parsed Decklist object

        Raises:
            SetupError: On a line that is neither a card, a section marker
                nor a comment
        """
        entries: List[DecklistEntry] = []
        section = 'deck'

        for number, line in enumerate(text.split('\n'), start=1):
            line = line.strip()
            if not line or line.startswith(self.COMMENT_PREFIXES):
                continue

            marker = line.lower()
            if marker in self.COMMANDER_MARKERS:
                section = 'commander'
                continue
            if marker in self.DECK_MARKERS:
                section = 'deck'
                continue
            if marker in self.SIDEBOARD_MARKERS:
                section = 'sideboard'
                continue

            match = self.CARD_PATTERN.match(line)
            if not match:
                raise SetupError(f"line {number}: cannot parse deck list entry {line!r}")

            card_name = match.group(2).strip()
            is_commander = section == 'commander'
            if card_name.upper().endswith(self.COMMANDER_TAG):
                card_name = card_name[:-len(self.COMMANDER_TAG)].strip()
                is_commander = True
            card_name = self.SET_CODE_PATTERN.sub('', card_name)

            try:
                entries.append(DecklistEntry(
                    count=int(match.group(1)),
                    card_name=card_name,
                    is_commander=is_commander,
                    is_sideboard=section == 'sideboard' and not is_commander,
                ))
            except ValueError as e:
                raise SetupError(f"line {number}: {e}") from e

        return Decklist(name=deck_name or "Unnamed Deck", entries=entries)

    def parse_file(self, path: str) -> Decklist:
        """
        Parse a deck list from a file, named after the file.

        Raises:
            FileNotFoundError: If the file doesn't exist
        """
        filepath = Path(path)
        if not filepath.exists():
            raise FileNotFoundError(f"Decklist file not found: {path}")

        name = filepath.stem.replace('_', ' ')
        with open(filepath, 'r', encoding='utf-8') as f:
            text = f.read()

        return self.parse(text, deck_name=name)


def parse_decklist(text: str, name: Optional[str] = None) -> Decklist:
    return DecklistParser().parse(text, deck_name=name)


def load_deck_file(filepath: str) -> Decklist:
    """Convenience function to load a deck list file."""
    return DecklistParser().parse_file(filepath)
