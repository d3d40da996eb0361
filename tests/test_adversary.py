from dataclasses import replace

import pytest

from tilequest import adversary
from tilequest.adversary import AdversaryAI, AdversaryKind, Behavior
from tilequest.combat import AttackType
from tilequest.core.geometry import Position, manhattan
from tilequest.core.rng import RNG


@pytest.mark.parametrize(
    "kind,hp,atk,df,exp,behavior",
    [
        (AdversaryKind.SLIME, 30, 5, 2, 10, Behavior.WANDER),
        (AdversaryKind.SKELETON, 50, 12, 5, 25, Behavior.GUARD),
        (AdversaryKind.BAT, 20, 8, 1, 15, Behavior.CHASE),
        (AdversaryKind.GOBLIN, 40, 10, 4, 20, Behavior.CHASE),
        (AdversaryKind.DARK_KNIGHT, 80, 20, 15, 50, Behavior.GUARD),
        (AdversaryKind.BOSS, 200, 30, 20, 100, Behavior.BOSS_PATTERN),
    ],
)
def test_spawn_table(kind, hp, atk, df, exp, behavior):
    adv = adversary.spawn(kind, Position(1, 2), uid=3)
    assert (adv.health, adv.max_health, adv.attack, adv.defense, adv.exp_reward) == (hp, hp, atk, df, exp)
    assert adv.behavior is behavior
    assert adv.position == Position(1, 2)
    assert adv.uid == 3
    assert adversary.exp_reward(kind) == exp


def test_damage_clamps_and_defeat():
    slime = adversary.spawn(AdversaryKind.SLIME, Position(0, 0))
    hurt = adversary.apply_damage(slime, 12)
    assert hurt.health == 18
    assert slime.health == 30
    dead = adversary.apply_damage(hurt, 999)
    assert dead.health == 0
    assert adversary.is_defeated(dead)


def test_update_behavior_flee_below_threshold():
    ai = AdversaryAI()
    goblin = adversary.spawn(AdversaryKind.GOBLIN, Position(0, 0))
    assert ai.update_behavior(replace(goblin, health=7), Position(9, 9)) is Behavior.FLEE
    assert ai.update_behavior(replace(goblin, health=8), Position(9, 9)) is Behavior.CHASE


def test_update_behavior_wander_becomes_chase_when_close():
    ai = AdversaryAI()
    slime = adversary.spawn(AdversaryKind.SLIME, Position(0, 0))
    assert ai.update_behavior(slime, Position(3, 2)) is Behavior.CHASE
    assert ai.update_behavior(slime, Position(3, 3)) is Behavior.WANDER


def test_boss_never_flees():
    ai = AdversaryAI()
    boss = replace(adversary.spawn_boss(Position(0, 0)), health=1)
    assert ai.update_behavior(boss, Position(1, 0)) is Behavior.BOSS_PATTERN


def test_boss_phases_alternate():
    ai = AdversaryAI(boss_phase_length=3)
    boss = adversary.spawn_boss(Position(0, 0))
    assert [ai.boss_phase(t) for t in range(7)] == ["chase"] * 3 + ["ranged"] * 3 + ["chase"]
    assert ai.attack_range(boss, turn=0) == 1
    assert ai.attack_range(boss, turn=3) == 3
    assert ai.attack_type_for(boss, turn=3) is AttackType.BOW_SHOT
    assert ai.should_attack(boss, Position(0, 3), turn=4)
    assert not ai.should_attack(boss, Position(0, 3), turn=0)


def test_ranged_and_melee_ranges():
    ai = AdversaryAI()
    skeleton = adversary.spawn(AdversaryKind.SKELETON, Position(0, 0))
    goblin = adversary.spawn(AdversaryKind.GOBLIN, Position(0, 0))
    assert ai.should_attack(skeleton, Position(2, 1))
    assert not ai.should_attack(skeleton, Position(2, 2))
    assert ai.attack_type_for(skeleton) is AttackType.BOW_SHOT
    assert ai.should_attack(goblin, Position(1, 0))
    assert not ai.should_attack(goblin, Position(1, 1))
    assert ai.attack_type_for(goblin) is AttackType.SWORD_SLASH


def test_chase_prefers_larger_gap_and_falls_back():
    ai = AdversaryAI()
    goblin = adversary.spawn(AdversaryKind.GOBLIN, Position(5, 5))
    assert ai.calculate_move(goblin, Position(1, 4)) == Position(4, 5)
    assert ai.calculate_move(goblin, Position(4, 1)) == Position(5, 4)
    blocked_x = lambda p: p != Position(4, 5)
    assert ai.calculate_move(goblin, Position(1, 4), is_open=blocked_x) == Position(5, 4)
    assert ai.calculate_move(goblin, Position(1, 4), is_open=lambda p: False) == Position(5, 5)


def test_flee_increases_distance():
    ai = AdversaryAI()
    goblin = replace(adversary.spawn(AdversaryKind.GOBLIN, Position(5, 5)), behavior=Behavior.FLEE)
    player = Position(4, 5)
    step = ai.calculate_move(goblin, player)
    assert manhattan(step, player) > manhattan(goblin.position, player)


def test_guard_stays_put():
    ai = AdversaryAI()
    knight = adversary.spawn(AdversaryKind.DARK_KNIGHT, Position(5, 5))
    assert ai.calculate_move(knight, Position(0, 0)) == Position(5, 5)


def test_wander_never_returns_closed_tile():
    ai = AdversaryAI()
    slime = adversary.spawn(AdversaryKind.SLIME, Position(5, 5))
    only = Position(5, 6)
    rng = RNG(11)
    for _ in range(25):
        assert ai.calculate_move(slime, Position(20, 20), rng=rng, is_open=lambda p: p == only) == only
    assert ai.calculate_move(slime, Position(20, 20), rng=rng, is_open=lambda p: False) == Position(5, 5)


def test_wander_is_deterministic_with_seed():
    ai = AdversaryAI()
    slime = adversary.spawn(AdversaryKind.SLIME, Position(5, 5))
    a = [ai.calculate_move(slime, Position(20, 20), rng=RNG(8)) for _ in range(5)]
    b = [ai.calculate_move(slime, Position(20, 20), rng=RNG(8)) for _ in range(5)]
    assert a == b


def test_boss_ranged_phase_holds_position():
    ai = AdversaryAI()
    boss = adversary.spawn_boss(Position(5, 5))
    assert ai.calculate_move(boss, Position(5, 0), turn=3) == Position(5, 5)
    assert ai.calculate_move(boss, Position(5, 0), turn=0) == Position(5, 4)


def test_wander_without_rng_is_an_error():
    ai = AdversaryAI()
    slime = adversary.spawn(AdversaryKind.SLIME, Position(5, 5))
    with pytest.raises(ValueError):
        ai.calculate_move(slime, Position(20, 20))
