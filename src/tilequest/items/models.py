from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from .schema import validate_item_dict


class ItemKind(str, Enum):
    WEAPON = "weapon"
    ARMOR = "armor"
    CONSUMABLE = "consumable"


class EquipmentSlot(str, Enum):
    WEAPON = "weapon"
    ARMOR = "armor"


class ItemEffect(str, Enum):
    HEAL = "heal"
    FULL_HEAL = "full_heal"
    ATTACK_BOOST = "attack_boost"
    DEFENSE_BOOST = "defense_boost"


@dataclass(frozen=True)
class InventoryItem:
    """Immutable item definition; inventories hold these by value.

    Equipment carries attack/defense bonuses, consumables an effect and amount.
    """

    id: str
    name: str
    kind: ItemKind
    attack_bonus: int = 0
    defense_bonus: int = 0
    effect: Optional[ItemEffect] = None
    amount: int = 0
    price: int = 0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "InventoryItem":
        """Create an item from a dict, validating with the JSON schema."""
        validate_item_dict(data)
        effect = data.get("effect")
        return cls(
            id=data["id"],
            name=data["name"],
            kind=ItemKind(data["kind"]),
            attack_bonus=int(data.get("attack_bonus", 0)),
            defense_bonus=int(data.get("defense_bonus", 0)),
            effect=ItemEffect(effect) if effect else None,
            amount=int(data.get("amount", 0)),
            price=int(data["price"]),
        )

    @property
    def consumable(self) -> bool:
        return self.kind == ItemKind.CONSUMABLE

    @property
    def slot(self) -> Optional[EquipmentSlot]:
        if self.kind == ItemKind.WEAPON:
            return EquipmentSlot.WEAPON
        if self.kind == ItemKind.ARMOR:
            return EquipmentSlot.ARMOR
        return None

    def describe(self) -> str:
        if self.kind == ItemKind.WEAPON:
            return f"{self.name} (+{self.attack_bonus} atk)"
        if self.kind == ItemKind.ARMOR:
            return f"{self.name} (+{self.defense_bonus} def)"
        return self.name
