"""Simulation engine components - lazy imports for the heavier modules"""

# Core types can be imported directly
from .types import (
    Color, CardType, Trigger, MulliganType,
    SimulationError, SetupError, InvariantViolation
)


# Other imports are lazy so importing a leaf module stays cheap
def __getattr__(name):
    """Lazy import for engine components."""
    if name in ('Mana', 'ManaPool', 'PipCounts'):
        from . import mana
        return getattr(mana, name)
    elif name in ('Ability', 'Cost', 'ProduceMana', 'FetchLand', 'Draw', 'LandLimitIncrease'):
        from . import abilities
        return getattr(abilities, name)
    elif name in ('Card', 'CardDefinition'):
        from . import objects
        return getattr(objects, name)
    elif name == 'Zone':
        from .zones import Zone
        return Zone
    elif name in ('TurnState', 'TurnStats', 'run_turn'):
        from . import turns
        return getattr(turns, name)
    elif name in ('Game', 'GameStats', 'Settings'):
        from . import game
        return getattr(game, name)
    elif name in ('SimulationRunner', 'run_simulation'):
        from . import simulation
        return getattr(simulation, name)
    raise AttributeError(f"module 'rampsim.engine' has no attribute {name!r}")
