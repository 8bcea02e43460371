"""Ramp Simulator - Card Catalog

This module owns every CardDefinition a simulation uses:
- Card data is Scryfall-shaped JSON (name, cmc, mana_cost, type_line,
  oracle_text, card_faces), cached one file per card in a directory
- Cards missing from the cache are downloaded from the Scryfall API
  (unless the catalog is offline) and written to the cache
- Abilities come from the oracle parser, or from an overrides JSON file
  for cards whose text the parser cannot express
- Lookups are case-insensitive
"""
import json
import re
import time
import urllib.error
import urllib.parse
import urllib.request
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, Optional, Tuple, Union

from ..engine.abilities import (
    Ability, Cost, Draw, Effect, FetchLand, LandLimitIncrease, ProduceMana
)
from ..engine.mana import ManaPool
from ..engine.objects import CardDefinition
from ..engine.types import SetupError, Trigger
from .oracle import OracleParser


SCRYFALL_API = "https://api.scryfall.com"
DEFAULT_CACHE_DIR = "cards.db"


# =============================================================================
# Card Catalog
# =============================================================================

class CardCatalog:
    """
    Name -> CardDefinition catalog backed by a per-card JSON cache.

    Attributes:
        cache_dir: Directory holding one <name>.json per card
        offline: Never touch the network; uncached cards are errors
        verbose: Print each card as it is loaded
    """

    def __init__(self, cache_dir: Union[str, Path] = DEFAULT_CACHE_DIR,
                 overrides: Union[str, Path, Dict[str, Any], None] = None,
                 offline: bool = False, verbose: bool = False,
                 request_delay_s: float = 0.1, max_retries: int = 3):
        """
        Initialize the catalog.

        Args:
            cache_dir: Card cache directory, created on first download
            overrides: Path to an overrides JSON file, or its parsed content
            offline: Disable downloads
            verbose: Print progress
            request_delay_s: Pause between API requests
            max_retries: Attempts per download before giving up
        """
        self.cache_dir = Path(cache_dir)
        self.offline = offline
        self.verbose = verbose
        self.request_delay_s = request_delay_s
        self.max_retries = max_retries

        self.parser = OracleParser()
        self.cards: Dict[str, CardDefinition] = {}
        self._name_index: Dict[str, str] = {}  # lowercase -> actual name
        self.overrides: Dict[str, Dict[str, Any]] = {}
        if overrides is not None:
            self.load_overrides(overrides)

    # -------------------------------------------------------------------------
    # Lookup
    # -------------------------------------------------------------------------

    def get(self, name: str) -> Optional[CardDefinition]:
        """
        Get a loaded card by name (case-insensitive).

        Returns:
            CardDefinition if loaded, None otherwise
        """
        if name in self.cards:
            return self.cards[name]
        actual_name = self._name_index.get(name.lower())
        if actual_name is not None:
            return self.cards.get(actual_name)
        return None

    def add(self, definition: CardDefinition) -> None:
        self.cards[definition.name] = definition
        self._name_index[definition.name.lower()] = definition.name

    def __getitem__(self, name: str) -> CardDefinition:
        definition = self.get(name)
        if definition is None:
            raise KeyError(name)
        return definition

    def __len__(self) -> int:
        return len(self.cards)

    def __contains__(self, name: str) -> bool:
        return self.get(name) is not None

    def __iter__(self) -> Iterator[CardDefinition]:
        return iter(self.cards.values())

    # -------------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------------

    def load(self, name: str) -> CardDefinition:
        """
        Load a card from the cache, downloading it first if needed.

        Raises:
            SetupError: If the card cannot be found or its data is malformed
        """
        definition = self.get(name)
        if definition is not None:
            return definition

        if self.verbose:
            print(f"loading: {name}")

        path = self.cache_path(name)
        if path.exists():
            try:
                data = json.loads(path.read_text(encoding="utf-8"))
            except json.JSONDecodeError as e:
                raise SetupError(f"corrupt cache file {path}: {e}") from e
        elif self.offline:
            raise SetupError(f"card '{name}' is not cached in {self.cache_dir} and the catalog is offline")
        else:
            data = self.download(name)
            self.cache_dir.mkdir(parents=True, exist_ok=True)
            path.write_text(json.dumps(data), encoding="utf-8")

        definition = self.definition_from_json(data)
        self.add(definition)
        if definition.name.lower() != name.lower():
            self._name_index[name.lower()] = definition.name
        return definition

    def load_all(self, names: Iterable[str]) -> 'CardCatalog':
        """Load every named card; returns the catalog for chaining."""
        for name in names:
            self.load(name)
        return self

    def load_from_json(self, path: Union[str, Path]) -> None:
        """
        Load card objects from a JSON file (a list, or a dict keyed by name).

        Raises:
            FileNotFoundError: If the file doesn't exist
        """
        path_obj = Path(path)
        if not path_obj.exists():
            raise FileNotFoundError(f"JSON file not found: {path}")

        with open(path_obj, 'r', encoding='utf-8') as f:
            data = json.load(f)

        if isinstance(data, dict):
            entries = []
            for name, card_dict in data.items():
                card_dict.setdefault("name", name)
                entries.append(card_dict)
        else:
            entries = data
        for card_dict in entries:
            self.add(self.definition_from_json(card_dict))

    def cache_path(self, name: str) -> Path:
        safe = re.sub(r'[\\/:*?"<>|]', '_', name.strip().lower())
        return self.cache_dir / f"{safe}.json"

    # -------------------------------------------------------------------------
    # Download
    # -------------------------------------------------------------------------

    def download(self, name: str) -> Dict[str, Any]:
        """
        Fetch a card object by exact name from the Scryfall API.

        Raises:
            SetupError: If the card does not exist or the API is unreachable
        """
        url = f"{SCRYFALL_API}/cards/named?{urllib.parse.urlencode({'exact': name})}"

        last_err: Optional[Exception] = None
        for attempt in range(self.max_retries):
            if self.request_delay_s > 0:
                time.sleep(self.request_delay_s)
            try:
                req = urllib.request.Request(url, headers={"User-Agent": "rampsim/1.0",
                                                           "Accept": "application/json"})
                with urllib.request.urlopen(req, timeout=30) as resp:
                    return json.loads(resp.read().decode("utf-8"))
            except urllib.error.HTTPError as e:
                last_err = e
                if e.code == 404:
                    raise SetupError(f"card '{name}' not found on Scryfall") from e
                if e.code == 429:
                    time.sleep(self.request_delay_s * (attempt + 1) * 2)
            except (urllib.error.URLError, OSError) as e:
                last_err = e

        raise SetupError(f"download failed: url={url}, error={last_err}")

    # -------------------------------------------------------------------------
    # Conversion
    # -------------------------------------------------------------------------

    def definition_from_json(self, data: Dict[str, Any]) -> CardDefinition:
        """
        Build a CardDefinition from a Scryfall card object.

        Double-faced cards use their front face. Overrides, when present
        for the card, replace the parsed abilities.

        Raises:
            SetupError: If the name is missing or a field is malformed
        """
        if not isinstance(data, dict) or not data.get("name"):
            raise SetupError(f"card data has no name: {data!r}")
        if data.get("object") == "error":
            raise SetupError(f"card data is an error response: {data.get('details', '')}")

        front = (data.get("card_faces") or [{}])[0]
        name = data["name"]
        face_name = front.get("name", name)
        type_line = data.get("type_line") or front.get("type_line", "")
        oracle_text = data.get("oracle_text") or front.get("oracle_text", "")
        cost_text = data.get("mana_cost") or front.get("mana_cost", "")

        mana_cost = ManaPool.parse(cost_text) if cost_text else None
        try:
            mana_value = int(float(data.get("cmc", mana_cost.total() if mana_cost else 0)))
        except (TypeError, ValueError) as e:
            raise SetupError(f"bad cmc for '{name}': {data.get('cmc')!r}") from e

        override = self.overrides.get(name.lower())
        if override is not None and "abilities" in override:
            abilities = [parse_ability_override(entry, name, self.parser)
                         for entry in override["abilities"]]
        else:
            abilities = self.parser.parse(oracle_text, face_name, type_line)

        enters_tapped = self.parser.enters_tapped(oracle_text)
        if override is not None and "enters_tapped" in override:
            enters_tapped = bool(override["enters_tapped"])

        returns_land = self.parser.returns_land_to_hand(oracle_text, face_name)
        if override is not None and "returns_land_to_hand" in override:
            returns_land = bool(override["returns_land_to_hand"])

        return CardDefinition.build(
            name=name,
            type_line=type_line,
            mana_cost=mana_cost,
            abilities=tuple(abilities),
            enters_tapped=enters_tapped,
            mana_value=mana_value,
            returns_land_to_hand=returns_land,
        )

    # -------------------------------------------------------------------------
    # Overrides
    # -------------------------------------------------------------------------

    def load_overrides(self, source: Union[str, Path, Dict[str, Any]]) -> None:
        """
        Register ability overrides.

        The source maps card names to either a list of ability objects or an
        object with any of "abilities", "enters_tapped" and
        "returns_land_to_hand". An ability object looks like:

            {"trigger": "upkeep", "cost": "none",
             "effect": {"produce_mana": "{B}"}, "availability": 0.5}

        Raises:
            FileNotFoundError: If the overrides file doesn't exist
            SetupError: If the JSON is malformed
        """
        if isinstance(source, dict):
            data = source
        else:
            path_obj = Path(source)
            if not path_obj.exists():
                raise FileNotFoundError(f"overrides file not found: {source}")
            try:
                data = json.loads(path_obj.read_text(encoding="utf-8"))
            except json.JSONDecodeError as e:
                raise SetupError(f"malformed overrides file {source}: {e}") from e

        if not isinstance(data, dict):
            raise SetupError("overrides must be a JSON object keyed by card name")

        for name, value in data.items():
            if isinstance(value, list):
                value = {"abilities": value}
            if not isinstance(value, dict):
                raise SetupError(f"override for '{name}' must be a list or an object")
            # validate eagerly so a bad file fails before any card loads
            for entry in value.get("abilities", []):
                parse_ability_override(entry, name, self.parser)
            self.overrides[name.lower()] = value


_TRIGGERS = {trigger.value: trigger for trigger in Trigger}


def parse_ability_override(entry: Dict[str, Any], card_name: str,
                           parser: Optional[OracleParser] = None) -> Ability:
    """
    Build an Ability from its declarative JSON form.

    Args:
        entry: {"trigger", "cost", "effect", "availability"}
        card_name: The card the ability belongs to
        parser: Oracle parser used for textual costs and effects

    Raises:
        SetupError: On an unknown trigger, cost or effect
    """
    parser = parser or OracleParser()
    if not isinstance(entry, dict):
        raise SetupError(f"ability override for '{card_name}' must be an object")

    trigger = _TRIGGERS.get(str(entry.get("trigger", "activated")).lower())
    if trigger is None:
        raise SetupError(f"unknown trigger {entry.get('trigger')!r} for '{card_name}'")

    cost = _parse_cost_override(entry.get("cost", "none"), card_name, parser)
    effect = _parse_effect_override(entry.get("effect"), card_name, parser)

    try:
        return Ability(trigger, cost, effect, float(entry.get("availability", 1.0)))
    except (TypeError, ValueError) as e:
        raise SetupError(f"bad ability override for '{card_name}': {e}") from e


def _parse_cost_override(value: Any, card_name: str, parser: OracleParser) -> Cost:
    if value is None or (isinstance(value, str) and value.strip().lower() in ("", "none", "free")):
        return Cost.none()
    if isinstance(value, str):
        cost = parser.parse_cost(value.strip(), card_name)
        if cost is None:
            raise SetupError(f"unsupported cost {value!r} for '{card_name}'")
        return cost
    if isinstance(value, dict):
        mana = value.get("mana")
        if mana is not None and not isinstance(mana, str):
            raise SetupError(f"cost.mana for '{card_name}' must be a mana string, got {mana!r}")
        return Cost(
            mana_cost=ManaPool.parse(mana) if mana else None,
            tap_cost=bool(value.get("tap", False)),
            sacrifice_cost=bool(value.get("sacrifice", False)),
        )
    raise SetupError(f"unsupported cost {value!r} for '{card_name}'")


def _parse_effect_override(value: Any, card_name: str, parser: OracleParser) -> Effect:
    if isinstance(value, str):
        effect = parser.parse_effect(value.strip())
        if effect is None:
            raise SetupError(f"unsupported effect {value!r} for '{card_name}'")
        return effect

    if not isinstance(value, dict) or len(value) != 1:
        raise SetupError(f"effect for '{card_name}' must be a string or a one-key object")

    kind, arg = next(iter(value.items()))
    if kind == "produce_mana":
        if not isinstance(arg, str):
            raise SetupError(f"produce_mana for '{card_name}' must be a mana string, got {arg!r}")
        return ProduceMana(ManaPool.parse(arg))
    if kind == "fetch_land":
        if not isinstance(arg, dict):
            raise SetupError(f"fetch_land for '{card_name}' must be an object, got {arg!r}")
        return FetchLand(to_hand=_land_types(arg, "to_hand", card_name),
                         to_battlefield=_land_types(arg, "to_battlefield", card_name))
    if kind == "draw":
        distribution = arg if isinstance(arg, list) else [arg]
        if not distribution:
            raise SetupError(f"empty draw distribution for '{card_name}'")
        return Draw(tuple(_count(n, "draw", card_name) for n in distribution))
    if kind == "land_limit":
        return LandLimitIncrease(_count(arg, "land_limit", card_name))
    raise SetupError(f"unknown effect {kind!r} for '{card_name}'")


def _land_types(arg: Dict[str, Any], key: str, card_name: str) -> Tuple[str, ...]:
    types = arg.get(key, [])
    if not isinstance(types, list) or not all(isinstance(t, str) for t in types):
        raise SetupError(f"fetch_land.{key} for '{card_name}' must be a list of land types")
    return tuple(types)


def _count(value: Any, field_name: str, card_name: str) -> int:
    if isinstance(value, bool):
        raise SetupError(f"{field_name} for '{card_name}' must be an integer, got {value!r}")
    try:
        count = int(value)
    except (TypeError, ValueError) as e:
        raise SetupError(f"{field_name} for '{card_name}' must be an integer, got {value!r}") from e
    if count < 0:
        raise SetupError(f"{field_name} for '{card_name}' must not be negative, got {value!r}")
    return count


def load_catalog(names: Iterable[str], cache_dir: Union[str, Path] = DEFAULT_CACHE_DIR,
                 overrides: Union[str, Path, None] = None, offline: bool = False,
                 verbose: bool = False) -> CardCatalog:
    """
    Build a catalog holding every named card.

    Raises:
        SetupError: If any card fails to load
    """
    catalog = CardCatalog(cache_dir=cache_dir, overrides=overrides,
                          offline=offline, verbose=verbose)
    return catalog.load_all(names)
