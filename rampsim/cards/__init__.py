"""Card catalog, oracle parsing and deck lists"""
from .database import CardCatalog, load_catalog
from .oracle import OracleParser, parse_oracle
from .parser import Decklist, DecklistEntry, DecklistParser
