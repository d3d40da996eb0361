from dataclasses import replace

import pytest

from tilequest import character, inventory
from tilequest.errors import InsufficientFundsError, InventoryFullError, ItemNotFoundError, ItemNotUsableError
from tilequest.items import EquipmentSlot, get_item


def _inv(*item_ids, gold=0, capacity=20):
    return inventory.create_inventory(capacity=capacity, gold=gold, items=[get_item(i) for i in item_ids])


def test_add_and_remove_items():
    inv = _inv("health_potion", "health_potion")
    assert inv.count("health_potion") == 2
    inv = inventory.remove_item(inv, "health_potion")
    assert inv.count("health_potion") == 1
    with pytest.raises(ItemNotFoundError):
        inventory.remove_item(inv, "bow")


def test_capacity_is_enforced():
    inv = _inv("bow", capacity=1)
    with pytest.raises(InventoryFullError):
        inventory.add_item(inv, get_item("shield"))


def test_equip_swap_keeps_previous_item_held_and_unchanged():
    inv = _inv("wooden_sword", "steel_sword")
    inv = inventory.equip(inv, "wooden_sword")
    before = inv.find("wooden_sword")
    inv = inventory.equip(inv, "steel_sword")
    assert inv.weapon == "steel_sword"
    assert inv.find("wooden_sword") == before
    assert inventory.attack_bonus(inv) == 10

    inv = inventory.equip(inv, "wooden_sword")
    assert inv.weapon == "wooden_sword"
    assert inventory.attack_bonus(inv) == 5
    assert len(inv.items) == 2


def test_equip_errors():
    inv = _inv("health_potion")
    with pytest.raises(ItemNotFoundError):
        inventory.equip(inv, "steel_sword")
    with pytest.raises(ItemNotUsableError):
        inventory.equip(inv, "health_potion")


def test_armor_slot_and_unequip():
    inv = inventory.equip(_inv("leather_armor"), "leather_armor")
    assert inventory.defense_bonus(inv) == 5
    assert inv.equipped(EquipmentSlot.ARMOR).id == "leather_armor"
    inv = inventory.unequip(inv, EquipmentSlot.ARMOR)
    assert inventory.defense_bonus(inv) == 0
    assert inv.count("leather_armor") == 1


def test_removing_equipped_item_clears_slot():
    inv = inventory.equip(_inv("bow"), "bow")
    inv = inventory.remove_item(inv, "bow")
    assert inv.weapon is None


def test_use_health_potion_heals_and_consumes():
    stats = replace(character.create_default(), health=30)
    inv, stats = inventory.use_consumable(_inv("health_potion"), "health_potion", stats)
    assert stats.health == 80
    assert inv.count("health_potion") == 0


def test_full_heal_and_boosts():
    stats = replace(character.create_default(), health=1)
    inv = _inv("full_health_potion", "attack_boost", "defense_boost")
    inv, stats = inventory.use_consumable(inv, "full_health_potion", stats)
    inv, stats = inventory.use_consumable(inv, "attack_boost", stats)
    inv, stats = inventory.use_consumable(inv, "defense_boost", stats)
    assert stats.health == 100
    assert (stats.attack, stats.defense) == (15, 10)
    assert inv.items == ()


def test_use_errors_leave_inventory_unchanged():
    inv = _inv("steel_sword")
    stats = character.create_default()
    with pytest.raises(ItemNotFoundError, match="Item not found"):
        inventory.use_consumable(inv, "health_potion", stats)
    with pytest.raises(ItemNotUsableError, match="Item not usable"):
        inventory.use_consumable(inv, "steel_sword", stats)
    assert inv.count("steel_sword") == 1


def test_spending_more_than_held_fails():
    inv = _inv(gold=30)
    with pytest.raises(InsufficientFundsError, match="Insufficient funds"):
        inventory.spend_gold(inv, 50)
    assert inv.gold == 30
    assert inventory.spend_gold(inv, 30).gold == 0


def test_gold_never_negative():
    inv = inventory.add_gold(_inv(gold=5), -20)
    assert inv.gold == 5
    assert inventory.add_gold(inv, 10).gold == 15
