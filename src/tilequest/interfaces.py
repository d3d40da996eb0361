"""Module boundaries used by the turn engine.

The engine only talks to the four rule sets through these protocols, so any of
them can be replaced in tests. The ``character`` and ``inventory`` modules
satisfy their protocols directly; combat and AI are configured objects.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional, Protocol, Tuple

from . import character as _character
from . import inventory as _inventory
from .adversary import AdversaryAI, AdversaryState, Behavior
from .character import CharacterStats
from .combat import AttackType, Combatant, CombatResolver, CombatResult
from .core.geometry import Position
from .core.rng import RNG
from .inventory import Inventory
from .items.models import InventoryItem
from .settings import Settings


class CharacterRules(Protocol):
    def apply_damage(self, stats: CharacterStats, amount: int) -> CharacterStats:  # pragma: no cover - Protocol
        ...

    def gain_experience(self, stats: CharacterStats, exp: int) -> CharacterStats:  # pragma: no cover - Protocol
        ...

    def is_defeated(self, stats: CharacterStats) -> bool:  # pragma: no cover - Protocol
        ...


class InventoryRules(Protocol):
    def add_item(self, inv: Inventory, item: InventoryItem) -> Inventory:  # pragma: no cover - Protocol
        ...

    def equip(self, inv: Inventory, item_id: str) -> Inventory:  # pragma: no cover - Protocol
        ...

    def use_consumable(
        self, inv: Inventory, item_id: str, stats: CharacterStats
    ) -> Tuple[Inventory, CharacterStats]:  # pragma: no cover - Protocol
        ...

    def add_gold(self, inv: Inventory, amount: int) -> Inventory:  # pragma: no cover - Protocol
        ...

    def spend_gold(self, inv: Inventory, amount: int) -> Inventory:  # pragma: no cover - Protocol
        ...

    def attack_bonus(self, inv: Inventory) -> int:  # pragma: no cover - Protocol
        ...

    def defense_bonus(self, inv: Inventory) -> int:  # pragma: no cover - Protocol
        ...


class CombatRules(Protocol):
    def can_use(self, attack_type: AttackType, attacker: Combatant) -> bool:  # pragma: no cover - Protocol
        ...

    def player_attack(
        self, attack_type: AttackType, player: Combatant, enemy: Combatant, exp_reward: int, rng: RNG
    ) -> CombatResult:  # pragma: no cover - Protocol
        ...

    def enemy_attack(
        self, enemy: Combatant, player: Combatant, rng: RNG, attack_type: AttackType = AttackType.SWORD_SLASH
    ) -> CombatResult:  # pragma: no cover - Protocol
        ...


class AdversaryRules(Protocol):
    def update_behavior(self, adversary: AdversaryState, player_position: Position) -> Behavior:  # pragma: no cover
        ...

    def should_attack(self, adversary: AdversaryState, player_position: Position, turn: int = 0) -> bool:  # pragma: no cover
        ...

    def attack_type_for(self, adversary: AdversaryState, turn: int = 0) -> AttackType:  # pragma: no cover
        ...

    def calculate_move(
        self,
        adversary: AdversaryState,
        player_position: Position,
        *,
        turn: int = 0,
        rng: Optional[RNG] = None,
        is_open: Any = None,
    ) -> Position:  # pragma: no cover - Protocol
        ...


@dataclass
class Rules:
    """The rule sets a turn engine is wired with."""

    character: CharacterRules = field(default_factory=lambda: _character)  # type: ignore[assignment]
    inventory: InventoryRules = field(default_factory=lambda: _inventory)  # type: ignore[assignment]
    combat: CombatRules = field(default_factory=CombatResolver)
    ai: AdversaryRules = field(default_factory=AdversaryAI)

    @classmethod
    def from_settings(cls, settings: Settings) -> "Rules":
        return cls(
            combat=CombatResolver(
                crit_chance=settings.combat.crit_chance,
                crit_multiplier=settings.combat.crit_multiplier,
                mitigation_factor=settings.combat.mitigation_factor,
            ),
            ai=AdversaryAI(
                flee_threshold=settings.ai.flee_threshold,
                chase_distance=settings.ai.chase_distance,
                ranged_range=settings.ai.ranged_range,
                boss_phase_length=settings.ai.boss_phase_length,
            ),
        )
