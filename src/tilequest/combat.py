from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Dict

from .core.rng import RNG

logger = logging.getLogger(__name__)

MINIMUM_DAMAGE = 1


class AttackType(str, Enum):
    SWORD_SLASH = "sword_slash"
    SPIN_ATTACK = "spin_attack"
    BOW_SHOT = "bow_shot"
    MAGIC_ATTACK = "magic_attack"
    SHIELD_BASH = "shield_bash"

    @property
    def profile(self) -> "AttackProfile":
        return ATTACK_PROFILES[self]


@dataclass(frozen=True)
class AttackProfile:
    """Fixed damage and cost profile for an attack type.

    Attributes:
        multiplier: Applied to the attacker's attack stat.
        reach: Maximum Manhattan distance to a target.
        area: If True, every adversary in reach is hit.
        min_health_ratio: Fraction of max health the attacker must still have
            to perform this attack (its cost).
    """

    multiplier: float
    reach: int = 1
    area: bool = False
    min_health_ratio: float = 0.0


ATTACK_PROFILES: Dict[AttackType, AttackProfile] = {
    AttackType.SWORD_SLASH: AttackProfile(multiplier=1.0),
    AttackType.SPIN_ATTACK: AttackProfile(multiplier=2.0, area=True, min_health_ratio=0.5),
    AttackType.BOW_SHOT: AttackProfile(multiplier=0.8, reach=3),
    AttackType.MAGIC_ATTACK: AttackProfile(multiplier=1.5, reach=2, min_health_ratio=0.25),
    AttackType.SHIELD_BASH: AttackProfile(multiplier=0.5),
}


@dataclass(frozen=True)
class Combatant:
    """Stat snapshot handed to the resolver; never mutated by it."""

    attack: int
    defense: int
    health: int
    max_health: int
    equipment_bonus: int = 0


@dataclass(frozen=True)
class DamageBreakdown:
    """Details of a computed damage roll.

    Attributes:
        base: floor((attack + equipment_bonus) * multiplier).
        mitigated: base minus the defender's mitigation, floored at 1.
        critical: Whether the critical-hit roll succeeded.
        final: The damage applied (mitigated, doubled on a critical).
    """

    base: int
    mitigated: int
    critical: bool
    final: int


@dataclass(frozen=True)
class CombatResult:
    damage: int
    critical: bool
    target_defeated: bool
    experience: int
    message: str


class CombatResolver:
    """Compute attack outcomes from stat snapshots.

    The formula is:
      base = floor((atk + equipment_bonus) * attack_type.multiplier)
      mitigated = max(1, base - floor(df * mitigation_factor))
      final = mitigated * crit_multiplier on a critical roll, else mitigated

    The critical roll draws from the rng passed in, which is the only source of
    non-determinism.
    """

    def __init__(
        self,
        crit_chance: float = 0.1,
        crit_multiplier: int = 2,
        mitigation_factor: float = 0.5,
    ) -> None:
        if not (0.0 <= crit_chance <= 1.0):
            raise ValueError("crit_chance must be between 0.0 and 1.0")
        if crit_multiplier < 1:
            raise ValueError("crit_multiplier must be at least 1")
        if mitigation_factor < 0:
            raise ValueError("mitigation_factor must be non-negative")
        self.crit_chance = float(crit_chance)
        self.crit_multiplier = int(crit_multiplier)
        self.mitigation_factor = float(mitigation_factor)

    def calculate_base_damage(self, attack_type: AttackType, attacker: Combatant) -> int:
        power = max(0, attacker.attack) + max(0, attacker.equipment_bonus)
        return int(math.floor(power * attack_type.profile.multiplier))

    def apply_defense(self, raw: int, defense: int) -> int:
        reduction = int(math.floor(max(0, defense) * self.mitigation_factor))
        return max(MINIMUM_DAMAGE, raw - reduction)

    def roll_critical(self, rng: RNG) -> bool:
        return rng.chance(self.crit_chance)

    def roll_damage(
        self, attack_type: AttackType, attacker: Combatant, defender: Combatant, rng: RNG
    ) -> DamageBreakdown:
        base = self.calculate_base_damage(attack_type, attacker)
        mitigated = self.apply_defense(base, defender.defense)
        critical = self.roll_critical(rng)
        final = mitigated * self.crit_multiplier if critical else mitigated
        return DamageBreakdown(base=base, mitigated=mitigated, critical=critical, final=final)

    def calculate_final_damage(
        self, attack_type: AttackType, attacker: Combatant, defender: Combatant, rng: RNG
    ) -> int:
        return self.roll_damage(attack_type, attacker, defender, rng).final

    def can_use(self, attack_type: AttackType, attacker: Combatant) -> bool:
        """Whether the attacker can pay the attack's health-ratio cost."""
        ratio = attack_type.profile.min_health_ratio
        if ratio <= 0:
            return True
        return attacker.health >= attacker.max_health * ratio

    def player_attack(
        self,
        attack_type: AttackType,
        player: Combatant,
        enemy: Combatant,
        exp_reward: int,
        rng: RNG,
    ) -> CombatResult:
        """Resolve a player attack.

        ``exp_reward`` is the defeated kind's entry in the spawn table, carried
        on the adversary record as ``AdversaryState.exp_reward`` (see
        :func:`tilequest.adversary.exp_reward`). It is awarded only on defeat.
        """
        roll = self.roll_damage(attack_type, player, enemy, rng)
        defeated = roll.final >= enemy.health
        result = CombatResult(
            damage=roll.final,
            critical=roll.critical,
            target_defeated=defeated,
            experience=exp_reward if defeated else 0,
            message=_message(roll),
        )
        logger.debug("Player %s: %s", attack_type.value, result)
        return result

    def enemy_attack(
        self,
        enemy: Combatant,
        player: Combatant,
        rng: RNG,
        attack_type: AttackType = AttackType.SWORD_SLASH,
    ) -> CombatResult:
        roll = self.roll_damage(attack_type, enemy, player, rng)
        result = CombatResult(
            damage=roll.final,
            critical=roll.critical,
            target_defeated=roll.final >= player.health,
            experience=0,
            message=_message(roll),
        )
        logger.debug("Enemy %s: %s", attack_type.value, result)
        return result


def _message(roll: DamageBreakdown) -> str:
    if roll.critical:
        return f"Critical hit! {roll.final} damage!"
    return f"Hit for {roll.final} damage!"
