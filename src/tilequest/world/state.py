from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple

from ..adversary import AdversaryState
from ..character import CharacterStats
from ..core.geometry import Position
from ..inventory import Inventory
from .grid import TileGrid

logger = logging.getLogger(__name__)


class TurnPhase(Enum):
    AWAITING_INPUT = "awaiting_input"
    RESOLVING_PLAYER_ACTION = "resolving_player_action"
    RESOLVING_ADVERSARIES = "resolving_adversaries"
    APPLYING_WORLD_EFFECTS = "applying_world_effects"
    GAME_OVER = "game_over"


class Outcome(Enum):
    DEFEAT = "defeat"
    VICTORY = "victory"
    QUIT = "quit"


class EventKind(str, Enum):
    MOVED = "moved"
    BLOCKED = "blocked"
    WAITED = "waited"
    ATTACK = "attack"
    NO_TARGET = "no_target"
    ATTACK_UNAVAILABLE = "attack_unavailable"
    ADVERSARY_DEFEATED = "adversary_defeated"
    LEVEL_UP = "level_up"
    ADVERSARY_MOVED = "adversary_moved"
    ADVERSARY_ATTACK = "adversary_attack"
    ITEM_USED = "item_used"
    EQUIPPED = "equipped"
    ITEM_NOT_FOUND = "item_not_found"
    ITEM_NOT_USABLE = "item_not_usable"
    INVENTORY = "inventory"
    INVENTORY_FULL = "inventory_full"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    PURCHASED = "purchased"
    CHEST_OPENED = "chest_opened"
    SHOP = "shop"
    NPC = "npc"
    DUNGEON = "dungeon"
    NOTHING_HERE = "nothing_here"
    CHARACTER_DEFEATED = "character_defeated"
    VICTORY = "victory"
    QUIT = "quit"
    REJECTED = "rejected"

    @property
    def recoverable(self) -> bool:
        """Rejected actions the front end should answer by prompting again."""
        return self in RECOVERABLE_EVENTS


RECOVERABLE_EVENTS = frozenset(
    {
        EventKind.BLOCKED,
        EventKind.NO_TARGET,
        EventKind.ATTACK_UNAVAILABLE,
        EventKind.ITEM_NOT_FOUND,
        EventKind.ITEM_NOT_USABLE,
        EventKind.INVENTORY_FULL,
        EventKind.INSUFFICIENT_FUNDS,
    }
)


@dataclass(frozen=True)
class GameEvent:
    """One structured sub-event of a turn."""

    kind: EventKind
    message: str
    data: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Chest:
    gold: int = 0
    item_id: Optional[str] = None


@dataclass(frozen=True)
class TurnSummary:
    """What a submitted action produced, plus snapshots of the resulting state."""

    turn: int
    action: str
    events: Tuple[GameEvent, ...]
    character: CharacterStats
    position: Position
    inventory: Inventory
    adversaries: Tuple[AdversaryState, ...]
    phase: TurnPhase
    game_over: bool
    outcome: Optional[Outcome] = None

    def kinds(self) -> List[EventKind]:
        return [e.kind for e in self.events]

    def has(self, kind: EventKind) -> bool:
        return any(e.kind == kind for e in self.events)


@dataclass
class WorldState:
    """Complete mutable game state. Only the turn engine writes to it."""

    grid: TileGrid
    position: Position
    stats: CharacterStats
    inventory: Inventory
    adversaries: Tuple[AdversaryState, ...] = ()
    chests: Dict[Position, Chest] = field(default_factory=dict)
    dungeon_links: Dict[Position, Position] = field(default_factory=dict)
    shop_stock: Tuple[str, ...] = ()
    npc_hints: Tuple[str, ...] = ()
    areas: Tuple[Tuple[str, Position, Position], ...] = ()
    turn: int = 0
    event_log: List[TurnSummary] = field(default_factory=list)
    phase: TurnPhase = TurnPhase.AWAITING_INPUT
    outcome: Optional[Outcome] = None

    @property
    def game_over(self) -> bool:
        return self.phase is TurnPhase.GAME_OVER

    def area_name(self, pos: Optional[Position] = None) -> str:
        pos = pos or self.position
        for name, lo, hi in self.areas:
            if lo.x <= pos.x <= hi.x and lo.y <= pos.y <= hi.y:
                return name
        return "Unknown Lands"
