from dataclasses import replace

import pytest

from tilequest import character
from tilequest.character import CharacterStats
from tilequest.core.geometry import Direction, Position


def test_default_character():
    stats = character.create_default()
    assert (stats.health, stats.max_health) == (100, 100)
    assert (stats.attack, stats.defense) == (10, 5)
    assert (stats.experience, stats.level) == (0, 1)


def test_move_returns_adjacent_position_without_bounds_check():
    assert character.move(Position(0, 0), Direction.EAST) == Position(1, 0)
    assert character.move(Position(0, 0), Direction.NORTH) == Position(0, -1)


def test_take_damage_subtracts_defense_and_floors_health():
    stats = CharacterStats(health=20, max_health=20, attack=10, defense=5)
    assert character.take_damage(stats, 12).health == 13
    assert character.take_damage(stats, 500).health == 0


@pytest.mark.parametrize("raw", [-10, 0, 1, 3, 5])
def test_take_damage_always_deals_at_least_one(raw):
    stats = CharacterStats(health=20, max_health=20, attack=10, defense=5)
    assert character.take_damage(stats, raw).health == 19


def test_health_stays_within_bounds_for_any_sequence():
    stats = character.create_default()
    for raw, amount in [(30, 0), (7, 200), (1000, 5), (-4, -9), (0, 1)]:
        stats = character.take_damage(stats, raw)
        assert 0 <= stats.health <= stats.max_health
        stats = character.heal(stats, amount)
        assert 0 <= stats.health <= stats.max_health


def test_heal_is_monotonic_and_capped():
    stats = CharacterStats(health=40, max_health=100, attack=10, defense=5)
    previous = stats.health
    for amount in [0, 5, -3, 30, 1000]:
        stats = character.heal(stats, amount)
        assert stats.health >= previous
        previous = stats.health
    assert stats.health == 100


def test_apply_damage_is_unmitigated():
    stats = CharacterStats(health=20, max_health=20, attack=10, defense=5)
    assert character.apply_damage(stats, 7).health == 13
    assert character.apply_damage(stats, -2).health == 20


def test_exp_requirement_table():
    assert character.exp_to_next_level(1) == 100
    assert character.exp_to_next_level(2) == 150
    assert character.exp_to_next_level(3) == 225
    assert character.exp_to_next_level(4) == 337


def test_single_level_up_grants_stats_and_full_heal():
    stats = replace(character.create_default(), health=10)
    after = character.gain_experience(stats, 100)
    assert after.level == 2
    assert after.max_health == 120
    assert after.health == 120
    assert after.attack == 13
    assert after.defense == 7
    assert after.experience == 0


def test_multiple_level_ups_in_one_call_carry_excess():
    stats = character.create_default()
    after = character.gain_experience(stats, 100 + 150 + 40)
    assert after.level == 3
    assert after.experience == 40
    assert after.max_health == 140
    assert character.levels_gained(stats, after) == [2, 3]


def test_level_and_experience_never_decrease():
    stats = character.create_default()
    for exp in [5, -50, 0, 95, 200, -1, 1000]:
        after = character.gain_experience(stats, exp)
        assert after.level >= stats.level
        if after.level == stats.level:
            assert after.experience >= stats.experience
        stats = after


def test_level_cap():
    stats = replace(character.create_default(), level=character.MAX_LEVEL)
    after = character.gain_experience(stats, 10**12)
    assert after.level == character.MAX_LEVEL
    assert after.experience == 10**12


def test_is_defeated_and_bonuses():
    stats = character.create_default()
    assert not character.is_defeated(stats)
    assert character.is_defeated(character.apply_damage(stats, 100))
    boosted = character.with_bonuses(stats, attack=5, defense=2)
    assert (boosted.attack, boosted.defense) == (15, 7)
    assert stats.attack == 10


def test_boost_raises_base_stats_and_ignores_negatives():
    stats = character.create_default()
    boosted = character.boost(stats, attack=5)
    assert isinstance(boosted, CharacterStats)
    assert (boosted.attack, boosted.defense) == (15, 5)
    assert character.boost(stats, attack=-3, defense=-1) == stats
