from .grid import TileGrid
from .loader import load_world, parse_map
from .state import Chest, EventKind, GameEvent, Outcome, TurnPhase, TurnSummary, WorldState
from .tiles import TileType

__all__ = [
    "Chest",
    "EventKind",
    "GameEvent",
    "Outcome",
    "TileGrid",
    "TileType",
    "TurnPhase",
    "TurnSummary",
    "WorldState",
    "load_world",
    "parse_map",
]
