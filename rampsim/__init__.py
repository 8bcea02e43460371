"""Ramp Simulator - Monte-Carlo analysis of a Commander deck's early game"""

__version__ = "0.1.0"

from .engine.game import Game, GameStats, Settings
from .engine.simulation import SimulationRunner, run_simulation
from .engine.types import MulliganType, SetupError, SimulationError, InvariantViolation
from .cards.database import CardCatalog
from .cards.parser import Decklist, DecklistParser
from .report import SimulationSummary, print_statistics, summarize
