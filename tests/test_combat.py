import pytest

from tilequest import character
from tilequest.character import CharacterStats
from tilequest.combat import ATTACK_PROFILES, AttackType, Combatant, CombatResolver
from tilequest.core.rng import RNG


def _c(attack=10, defense=5, health=100, max_health=100, bonus=0):
    return Combatant(attack=attack, defense=defense, health=health, max_health=max_health, equipment_bonus=bonus)


def test_base_damage_uses_multiplier_and_equipment():
    resolver = CombatResolver()
    attacker = _c(attack=10, bonus=5)
    assert resolver.calculate_base_damage(AttackType.SWORD_SLASH, attacker) == 15
    assert resolver.calculate_base_damage(AttackType.SPIN_ATTACK, attacker) == 30
    assert resolver.calculate_base_damage(AttackType.BOW_SHOT, attacker) == 12
    assert resolver.calculate_base_damage(AttackType.MAGIC_ATTACK, attacker) == 22
    assert resolver.calculate_base_damage(AttackType.SHIELD_BASH, attacker) == 7


def test_final_damage_bounds_over_many_profiles():
    resolver = CombatResolver(crit_chance=0.5)
    rng = RNG(99)
    for attack in (0, 1, 5, 12, 40):
        for defense in (0, 3, 20, 100):
            for attack_type in AttackType:
                roll = resolver.roll_damage(attack_type, _c(attack=attack), _c(defense=defense), rng)
                assert roll.final >= 1
                assert roll.final <= max(1, roll.base) * resolver.crit_multiplier


def test_defense_reduces_by_mitigation_factor_with_floor():
    resolver = CombatResolver(mitigation_factor=0.5)
    assert resolver.apply_defense(10, 5) == 8
    assert resolver.apply_defense(10, 100) == 1


def test_twenty_health_five_defense_takes_seven_from_twelve():
    resolver = CombatResolver(crit_chance=0.0, mitigation_factor=1.0)
    defender_stats = CharacterStats(health=20, max_health=20, attack=1, defense=5)
    defender = _c(defense=5, health=20, max_health=20)
    result = resolver.enemy_attack(_c(attack=12), defender, RNG(1))
    assert result.damage == 7
    assert character.apply_damage(defender_stats, result.damage).health == 13
    assert character.take_damage(defender_stats, 12).health == 13


def test_critical_doubles_damage():
    resolver = CombatResolver(crit_chance=1.0)
    roll = resolver.roll_damage(AttackType.SWORD_SLASH, _c(attack=10), _c(defense=4), RNG(3))
    assert roll.critical
    assert roll.mitigated == 8
    assert roll.final == 16


def test_crit_rate_converges_with_seeded_rng():
    resolver = CombatResolver(crit_chance=0.25)
    rng = RNG(2024)
    trials = 20000
    crits = sum(resolver.roll_critical(rng) for _ in range(trials))
    assert abs(crits / trials - 0.25) < 0.02


def test_same_seed_same_results():
    resolver = CombatResolver()
    a, b = RNG(5), RNG(5)
    first = [resolver.calculate_final_damage(AttackType.SWORD_SLASH, _c(), _c(), a) for _ in range(50)]
    second = [resolver.calculate_final_damage(AttackType.SWORD_SLASH, _c(), _c(), b) for _ in range(50)]
    assert first == second


def test_player_attack_awards_experience_only_on_defeat():
    resolver = CombatResolver(crit_chance=0.0)
    player = _c(attack=10, bonus=5)
    kill = resolver.player_attack(AttackType.SWORD_SLASH, player, _c(defense=2, health=10, max_health=30), 25, RNG(1))
    assert kill.target_defeated
    assert kill.experience == 25
    assert kill.message == "Hit for 14 damage!"

    miss = resolver.player_attack(AttackType.SWORD_SLASH, player, _c(defense=2, health=30, max_health=30), 25, RNG(1))
    assert not miss.target_defeated
    assert miss.experience == 0


def test_inputs_are_not_mutated():
    resolver = CombatResolver(crit_chance=0.0)
    player, enemy = _c(), _c(health=5)
    resolver.player_attack(AttackType.SWORD_SLASH, player, enemy, 10, RNG(1))
    assert enemy.health == 5
    assert player == _c()


@pytest.mark.parametrize(
    "attack_type,health,usable",
    [
        (AttackType.SPIN_ATTACK, 50, True),
        (AttackType.SPIN_ATTACK, 49, False),
        (AttackType.MAGIC_ATTACK, 25, True),
        (AttackType.MAGIC_ATTACK, 24, False),
        (AttackType.SWORD_SLASH, 1, True),
    ],
)
def test_attack_costs(attack_type, health, usable):
    assert CombatResolver().can_use(attack_type, _c(health=health, max_health=100)) is usable


def test_profiles():
    assert ATTACK_PROFILES[AttackType.BOW_SHOT].reach == 3
    assert ATTACK_PROFILES[AttackType.SPIN_ATTACK].area
    assert not ATTACK_PROFILES[AttackType.SWORD_SLASH].area


def test_invalid_resolver_settings():
    with pytest.raises(ValueError):
        CombatResolver(crit_chance=1.5)
    with pytest.raises(ValueError):
        CombatResolver(crit_multiplier=0)
