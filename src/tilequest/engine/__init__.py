from .actions import Action
from .turn_engine import TurnEngine, new_game

__all__ = ["Action", "TurnEngine", "new_game"]
