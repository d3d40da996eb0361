from __future__ import annotations

import logging
from functools import lru_cache
from importlib import resources
from typing import Dict, Iterator, List

import yaml

from ..errors import ItemNotFoundError
from .models import InventoryItem

logger = logging.getLogger(__name__)


class ItemCatalog:
    """
    Read-only registry of item definitions keyed by id.

    The default catalog is loaded from the packaged ``catalog.yaml``; every
    entry is schema-validated on the way in.
    """

    def __init__(self, items: List[InventoryItem]) -> None:
        self._items: Dict[str, InventoryItem] = {}
        for item in items:
            if item.id in self._items:
                raise ValueError(f"Duplicate item id in catalog: {item.id}")
            self._items[item.id] = item

    @classmethod
    def from_yaml_text(cls, text: str) -> "ItemCatalog":
        raw = yaml.safe_load(text) or {}
        entries = raw.get("items", [])
        catalog = cls([InventoryItem.from_dict(entry) for entry in entries])
        logger.debug("Loaded %d catalog items", len(catalog))
        return catalog

    def get(self, item_id: str) -> InventoryItem:
        try:
            return self._items[item_id]
        except KeyError as exc:
            raise ItemNotFoundError(f"Unknown item id: {item_id}") from exc

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._items

    def __iter__(self) -> Iterator[InventoryItem]:
        return iter(self._items.values())

    def __len__(self) -> int:
        return len(self._items)


@lru_cache(maxsize=1)
def default_catalog() -> ItemCatalog:
    text = resources.files("tilequest.items").joinpath("catalog.yaml").read_text(encoding="utf-8")
    return ItemCatalog.from_yaml_text(text)


def get_item(item_id: str) -> InventoryItem:
    """Look up an item in the default catalog; raises ItemNotFoundError if unknown."""
    return default_catalog().get(item_id)
