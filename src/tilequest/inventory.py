"""Held items, equipment references and currency.

An :class:`Inventory` is a frozen value; every operation returns a new one.
Equipped weapon/armor are references by item id into ``items``: equipping
never removes an item from the held collection, so swapping equipment leaves
the previously equipped item held and unchanged.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Iterable, Optional, Tuple

from . import character
from .character import CharacterStats
from .errors import InsufficientFundsError, InventoryFullError, ItemNotFoundError, ItemNotUsableError
from .items.models import EquipmentSlot, InventoryItem, ItemEffect

logger = logging.getLogger(__name__)

DEFAULT_MAX_CAPACITY = 20


@dataclass(frozen=True)
class Inventory:
    items: Tuple[InventoryItem, ...] = ()
    weapon: Optional[str] = None
    armor: Optional[str] = None
    gold: int = 0
    capacity: int = DEFAULT_MAX_CAPACITY

    def find(self, item_id: str) -> Optional[InventoryItem]:
        for item in self.items:
            if item.id == item_id:
                return item
        return None

    def count(self, item_id: str) -> int:
        return sum(1 for item in self.items if item.id == item_id)

    def equipped(self, slot: EquipmentSlot) -> Optional[InventoryItem]:
        item_id = self.weapon if slot == EquipmentSlot.WEAPON else self.armor
        return self.find(item_id) if item_id else None

    @property
    def is_full(self) -> bool:
        return len(self.items) >= self.capacity


def create_inventory(
    capacity: int = DEFAULT_MAX_CAPACITY, gold: int = 0, items: Iterable[InventoryItem] = ()
) -> Inventory:
    inv = Inventory(capacity=max(0, capacity), gold=max(0, gold))
    for item in items:
        inv = add_item(inv, item)
    return inv


def add_item(inv: Inventory, item: InventoryItem) -> Inventory:
    if inv.is_full:
        raise InventoryFullError(f"Inventory is full ({inv.capacity} items); cannot add {item.name}.")
    logger.debug("Added %s (%d/%d)", item.id, len(inv.items) + 1, inv.capacity)
    return replace(inv, items=inv.items + (item,))


def remove_item(inv: Inventory, item_id: str) -> Inventory:
    """Remove the first held copy of ``item_id``.

    If that was the last copy of an equipped item, its slot is cleared.
    """
    for index, item in enumerate(inv.items):
        if item.id == item_id:
            items = inv.items[:index] + inv.items[index + 1:]
            updated = replace(inv, items=items)
            if item_id not in {i.id for i in items}:
                if updated.weapon == item_id:
                    updated = replace(updated, weapon=None)
                if updated.armor == item_id:
                    updated = replace(updated, armor=None)
            return updated
    raise ItemNotFoundError(f"Item not found: {item_id}")


def equip(inv: Inventory, item_id: str) -> Inventory:
    """
    Equip a held weapon or armor into its slot.

    Any item previously equipped in that slot simply stops being referenced;
    it is still held. Raises ItemNotFoundError / ItemNotUsableError.
    """
    item = inv.find(item_id)
    if item is None:
        raise ItemNotFoundError(f"Item not found: {item_id}")
    slot = item.slot
    if slot is None:
        raise ItemNotUsableError(f"Item not usable as equipment: {item_id}")
    if slot == EquipmentSlot.WEAPON:
        previous, updated = inv.weapon, replace(inv, weapon=item_id)
    else:
        previous, updated = inv.armor, replace(inv, armor=item_id)
    logger.debug("Equipped %s to %s (was %s)", item_id, slot.value, previous)
    return updated


def unequip(inv: Inventory, slot: EquipmentSlot) -> Inventory:
    if slot == EquipmentSlot.WEAPON:
        return replace(inv, weapon=None)
    return replace(inv, armor=None)


def use_consumable(inv: Inventory, item_id: str, stats: CharacterStats) -> Tuple[Inventory, CharacterStats]:
    """
    Consume one held copy of a consumable, applying its effect to ``stats``.

    Raises:
        ItemNotFoundError: the id is not held.
        ItemNotUsableError: the item is not a consumable.
    """
    item = inv.find(item_id)
    if item is None:
        raise ItemNotFoundError(f"Item not found: {item_id}")
    if not item.consumable:
        raise ItemNotUsableError(f"Item not usable: {item_id}")

    if item.effect == ItemEffect.HEAL:
        stats = character.heal(stats, item.amount)
    elif item.effect == ItemEffect.FULL_HEAL:
        stats = character.heal(stats, stats.max_health)
    elif item.effect == ItemEffect.ATTACK_BOOST:
        stats = character.boost(stats, attack=item.amount)
    elif item.effect == ItemEffect.DEFENSE_BOOST:
        stats = character.boost(stats, defense=item.amount)
    logger.debug("Consumed %s (%s)", item_id, item.effect)
    return remove_item(inv, item_id), stats


def add_gold(inv: Inventory, amount: int) -> Inventory:
    return replace(inv, gold=inv.gold + max(0, amount))


def spend_gold(inv: Inventory, amount: int) -> Inventory:
    amount = max(0, amount)
    if amount > inv.gold:
        raise InsufficientFundsError(f"Insufficient funds: cannot spend {amount} gold; only {inv.gold} available.")
    return replace(inv, gold=inv.gold - amount)


def attack_bonus(inv: Inventory) -> int:
    weapon = inv.equipped(EquipmentSlot.WEAPON)
    return weapon.attack_bonus if weapon else 0


def defense_bonus(inv: Inventory) -> int:
    armor = inv.equipped(EquipmentSlot.ARMOR)
    return armor.defense_bonus if armor else 0
