from .catalog import ItemCatalog, default_catalog, get_item
from .models import EquipmentSlot, InventoryItem, ItemEffect, ItemKind

__all__ = [
    "EquipmentSlot",
    "InventoryItem",
    "ItemCatalog",
    "ItemEffect",
    "ItemKind",
    "default_catalog",
    "get_item",
]
