"""Adversary records, the spawn table, and the AI decision functions.

Behavior is never stored as history: :meth:`AdversaryAI.update_behavior`
re-classifies it each turn from health ratio and distance to the player.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, Dict, List, Optional

from .combat import AttackType, Combatant
from .core.geometry import Position, manhattan
from .core.rng import RNG

logger = logging.getLogger(__name__)

MELEE_RANGE = 1

OpenPredicate = Callable[[Position], bool]


class AdversaryKind(str, Enum):
    SLIME = "slime"
    SKELETON = "skeleton"
    BAT = "bat"
    GOBLIN = "goblin"
    DARK_KNIGHT = "dark_knight"
    BOSS = "boss"

    @property
    def display_name(self) -> str:
        return self.value.replace("_", " ").title()

    @property
    def is_boss(self) -> bool:
        return self is AdversaryKind.BOSS


class Behavior(str, Enum):
    WANDER = "wander"
    CHASE = "chase"
    GUARD = "guard"
    FLEE = "flee"
    BOSS_PATTERN = "boss_pattern"


@dataclass(frozen=True)
class SpawnEntry:
    health: int
    attack: int
    defense: int
    exp_reward: int
    behavior: Behavior
    ranged: bool = False
    flying: bool = False


SPAWN_TABLE: Dict[AdversaryKind, SpawnEntry] = {
    AdversaryKind.SLIME: SpawnEntry(30, 5, 2, 10, Behavior.WANDER),
    AdversaryKind.SKELETON: SpawnEntry(50, 12, 5, 25, Behavior.GUARD, ranged=True),
    AdversaryKind.BAT: SpawnEntry(20, 8, 1, 15, Behavior.CHASE, flying=True),
    AdversaryKind.GOBLIN: SpawnEntry(40, 10, 4, 20, Behavior.CHASE),
    AdversaryKind.DARK_KNIGHT: SpawnEntry(80, 20, 15, 50, Behavior.GUARD),
    AdversaryKind.BOSS: SpawnEntry(200, 30, 20, 100, Behavior.BOSS_PATTERN, ranged=True),
}


@dataclass(frozen=True)
class AdversaryState:
    uid: int
    kind: AdversaryKind
    health: int
    max_health: int
    attack: int
    defense: int
    exp_reward: int
    behavior: Behavior
    position: Position

    @property
    def name(self) -> str:
        return self.kind.display_name

    @property
    def flying(self) -> bool:
        return SPAWN_TABLE[self.kind].flying

    def as_combatant(self) -> Combatant:
        return Combatant(
            attack=self.attack,
            defense=self.defense,
            health=self.health,
            max_health=self.max_health,
        )


def spawn(kind: AdversaryKind, position: Position, uid: int = 0) -> AdversaryState:
    if kind.is_boss:
        return spawn_boss(position, uid=uid)
    entry = SPAWN_TABLE[kind]
    return AdversaryState(
        uid=uid,
        kind=kind,
        health=entry.health,
        max_health=entry.health,
        attack=entry.attack,
        defense=entry.defense,
        exp_reward=entry.exp_reward,
        behavior=entry.behavior,
        position=position,
    )


def spawn_boss(position: Position, uid: int = 0) -> AdversaryState:
    entry = SPAWN_TABLE[AdversaryKind.BOSS]
    return AdversaryState(
        uid=uid,
        kind=AdversaryKind.BOSS,
        health=entry.health,
        max_health=entry.health,
        attack=entry.attack,
        defense=entry.defense,
        exp_reward=entry.exp_reward,
        behavior=Behavior.BOSS_PATTERN,
        position=position,
    )


def exp_reward(kind: AdversaryKind) -> int:
    return SPAWN_TABLE[kind].exp_reward


def apply_damage(adversary: AdversaryState, amount: int) -> AdversaryState:
    return replace(adversary, health=max(0, adversary.health - max(0, amount)))


def is_defeated(adversary: AdversaryState) -> bool:
    return adversary.health == 0


def _step_sign(delta: int) -> int:
    return (delta > 0) - (delta < 0)


class AdversaryAI:
    """Stateless decision policy for adversaries.

    Args:
        flee_threshold: Health ratio below which non-boss adversaries flee.
        chase_distance: Wandering adversaries switch to chase within this distance.
        ranged_range: Attack range for ranged kinds and the boss ranged phase.
        boss_phase_length: Turns per boss phase; phases alternate chase/ranged.
    """

    def __init__(
        self,
        flee_threshold: float = 0.2,
        chase_distance: int = 5,
        ranged_range: int = 3,
        boss_phase_length: int = 3,
    ) -> None:
        if boss_phase_length < 1:
            raise ValueError("boss_phase_length must be at least 1")
        self.flee_threshold = flee_threshold
        self.chase_distance = chase_distance
        self.ranged_range = ranged_range
        self.boss_phase_length = boss_phase_length

    # ---- Classification --------------------------------------------------
    def update_behavior(self, adversary: AdversaryState, player_position: Position) -> Behavior:
        if adversary.kind.is_boss:
            return Behavior.BOSS_PATTERN
        if adversary.max_health > 0 and adversary.health / adversary.max_health < self.flee_threshold:
            return Behavior.FLEE
        default = SPAWN_TABLE[adversary.kind].behavior
        if default is Behavior.WANDER and manhattan(adversary.position, player_position) <= self.chase_distance:
            return Behavior.CHASE
        return default

    def boss_phase(self, turn: int) -> str:
        return "chase" if (turn // self.boss_phase_length) % 2 == 0 else "ranged"

    def attack_range(self, adversary: AdversaryState, turn: int = 0) -> int:
        if adversary.kind.is_boss:
            return MELEE_RANGE if self.boss_phase(turn) == "chase" else self.ranged_range
        if SPAWN_TABLE[adversary.kind].ranged:
            return self.ranged_range
        return MELEE_RANGE

    def attack_type_for(self, adversary: AdversaryState, turn: int = 0) -> AttackType:
        if self.attack_range(adversary, turn) > MELEE_RANGE:
            return AttackType.BOW_SHOT
        return AttackType.SWORD_SLASH

    def should_attack(self, adversary: AdversaryState, player_position: Position, turn: int = 0) -> bool:
        return manhattan(adversary.position, player_position) <= self.attack_range(adversary, turn)

    # ---- Movement --------------------------------------------------------
    def calculate_move(
        self,
        adversary: AdversaryState,
        player_position: Position,
        *,
        turn: int = 0,
        rng: Optional[RNG] = None,
        is_open: Optional[OpenPredicate] = None,
    ) -> Position:
        """Return where ``adversary`` wants to stand next.

        The result is either the current position or an orthogonal neighbour for
        which ``is_open`` holds (every neighbour is open when it is omitted).

        Raises:
            ValueError: A wandering adversary was given no ``rng``.
        """
        is_open = is_open or (lambda _p: True)
        behavior = adversary.behavior
        if behavior is Behavior.BOSS_PATTERN:
            behavior = Behavior.CHASE if self.boss_phase(turn) == "chase" else Behavior.GUARD

        if behavior is Behavior.CHASE:
            return self._chase(adversary.position, player_position, is_open)
        if behavior is Behavior.FLEE:
            return self._flee(adversary.position, player_position, is_open)
        if behavior is Behavior.WANDER:
            if rng is None:
                raise ValueError(f"{adversary.kind.value} wanders and needs an rng")
            return self._wander(adversary.position, rng, is_open)
        return adversary.position

    def _chase(self, pos: Position, target: Position, is_open: OpenPredicate) -> Position:
        dx = target.x - pos.x
        dy = target.y - pos.y
        x_step = Position(pos.x + _step_sign(dx), pos.y)
        y_step = Position(pos.x, pos.y + _step_sign(dy))
        # Greedy: close the larger gap first, ties favour the x axis
        if abs(dx) >= abs(dy):
            steps: List[Position] = [x_step, y_step]
        else:
            steps = [y_step, x_step]
        for candidate in steps:
            if candidate != pos and is_open(candidate):
                return candidate
        return pos

    def _flee(self, pos: Position, threat: Position, is_open: OpenPredicate) -> Position:
        current = manhattan(pos, threat)
        best = pos
        best_distance = current
        for candidate in pos.neighbors_4():
            distance = manhattan(candidate, threat)
            if distance > best_distance and is_open(candidate):
                best, best_distance = candidate, distance
        return best

    def _wander(self, pos: Position, rng: RNG, is_open: OpenPredicate) -> Position:
        options = [p for p in pos.neighbors_4() if is_open(p)]
        if not options:
            return pos
        return rng.choice(options)
