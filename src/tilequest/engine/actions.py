from __future__ import annotations

from enum import Enum
from typing import Dict, Optional

from ..core.geometry import Direction


class Action(str, Enum):
    MOVE_NORTH = "move_north"
    MOVE_SOUTH = "move_south"
    MOVE_EAST = "move_east"
    MOVE_WEST = "move_west"
    ATTACK = "attack"
    USE_ITEM = "use_item"
    EQUIP = "equip"
    OPEN_INVENTORY = "open_inventory"
    INTERACT = "interact"
    WAIT = "wait"
    QUIT = "quit"

    @property
    def direction(self) -> Optional[Direction]:
        """The movement direction for MOVE_* actions, else None."""
        return _DIRECTIONS.get(self)

    @property
    def is_free(self) -> bool:
        """Free actions do not consume a turn."""
        return self is Action.OPEN_INVENTORY


_DIRECTIONS: Dict[Action, Direction] = {
    Action.MOVE_NORTH: Direction.NORTH,
    Action.MOVE_SOUTH: Direction.SOUTH,
    Action.MOVE_EAST: Direction.EAST,
    Action.MOVE_WEST: Direction.WEST,
}
