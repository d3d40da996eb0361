"""Character stats and the pure transitions applied to them.

Every function takes a frozen :class:`CharacterStats` (or position) and
returns a new value. Out-of-range inputs are clamped, never rejected.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from typing import List

from .core.geometry import Direction, Position

logger = logging.getLogger(__name__)

STARTING_HEALTH = 100
STARTING_ATTACK = 10
STARTING_DEFENSE = 5

BASE_EXP_REQUIREMENT = 100
EXP_MULTIPLIER = 1.5

HEALTH_PER_LEVEL = 20
ATTACK_PER_LEVEL = 3
DEFENSE_PER_LEVEL = 2

MAX_LEVEL = 99


@dataclass(frozen=True)
class CharacterStats:
    """Player stat record.

    Attributes:
        health: Current hit points, 0 <= health <= max_health.
        max_health: Maximum hit points.
        attack: Base attack before equipment.
        defense: Base defense before equipment.
        experience: Progress toward the next level; level-ups consume it.
        level: Current level, starting at 1.
    """

    health: int
    max_health: int
    attack: int
    defense: int
    experience: int = 0
    level: int = 1


def clamp(value: int, min_value: int, max_value: int) -> int:
    """Clamp an integer between min_value and max_value inclusive."""
    return max(min_value, min(value, max_value))


def create_default() -> CharacterStats:
    return CharacterStats(
        health=STARTING_HEALTH,
        max_health=STARTING_HEALTH,
        attack=STARTING_ATTACK,
        defense=STARTING_DEFENSE,
        experience=0,
        level=1,
    )


def move(position: Position, direction: Direction) -> Position:
    """Return the adjacent position in ``direction``. Bounds are the caller's concern."""
    return position.step(direction)


def mitigate(raw: int, defense: int) -> int:
    return max(1, max(0, raw) - max(0, defense))


def apply_damage(stats: CharacterStats, amount: int) -> CharacterStats:
    """Subtract already-mitigated damage, flooring health at zero."""
    new_health = clamp(stats.health - max(0, amount), 0, stats.max_health)
    return replace(stats, health=new_health)


def take_damage(stats: CharacterStats, raw: int) -> CharacterStats:
    """Apply raw incoming damage reduced by the character's defense.

    Mitigated damage is ``max(1, raw - defense)``; health never drops below 0.
    """
    effective = mitigate(raw, stats.defense)
    updated = apply_damage(stats, effective)
    logger.debug("Character takes %d (raw %d) HP %d -> %d", effective, raw, stats.health, updated.health)
    return updated


def heal(stats: CharacterStats, amount: int) -> CharacterStats:
    new_health = clamp(stats.health + max(0, amount), 0, stats.max_health)
    return replace(stats, health=new_health)


def exp_to_next_level(level: int) -> int:
    """Experience needed to advance from ``level`` to ``level + 1``."""
    level = max(1, level)
    return int(math.floor(BASE_EXP_REQUIREMENT * EXP_MULTIPLIER ** (level - 1)))


def _level_up(stats: CharacterStats) -> CharacterStats:
    new_max = stats.max_health + HEALTH_PER_LEVEL
    return replace(
        stats,
        health=new_max,
        max_health=new_max,
        attack=stats.attack + ATTACK_PER_LEVEL,
        defense=stats.defense + DEFENSE_PER_LEVEL,
        experience=stats.experience - exp_to_next_level(stats.level),
        level=stats.level + 1,
    )


def gain_experience(stats: CharacterStats, exp: int) -> CharacterStats:
    """Add experience and apply every level-up it pays for.

    Each level-up spends its threshold, so leftover experience carries toward
    the next one and a single large gain can raise several levels at once.
    At the level cap experience keeps accumulating without further level-ups.
    """
    updated = replace(stats, experience=stats.experience + max(0, exp))
    while updated.level < MAX_LEVEL and updated.experience >= exp_to_next_level(updated.level):
        updated = _level_up(updated)
        logger.debug("Level up to %d (max_health=%d)", updated.level, updated.max_health)
    return updated


def levels_gained(before: CharacterStats, after: CharacterStats) -> List[int]:
    """The levels reached between two snapshots, in order."""
    return list(range(before.level + 1, after.level + 1))


def is_defeated(stats: CharacterStats) -> bool:
    return stats.health == 0


def with_bonuses(stats: CharacterStats, attack: int = 0, defense: int = 0) -> CharacterStats:
    """Effective stats with equipment bonuses folded in."""
    return replace(stats, attack=stats.attack + attack, defense=stats.defense + defense)


def boost(stats: CharacterStats, attack: int = 0, defense: int = 0) -> CharacterStats:
    """Permanently raise base attack/defense. Negative boosts clamp to 0."""
    return replace(stats, attack=stats.attack + max(0, attack), defense=stats.defense + max(0, defense))
