from __future__ import annotations

import logging
from importlib import resources
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

from .. import adversary, character, inventory
from ..adversary import AdversaryKind
from ..core.geometry import Position
from ..errors import MapDataError, TileQuestError
from ..items.catalog import ItemCatalog, default_catalog
from ..settings import Settings
from .grid import TileGrid
from .state import Chest, WorldState
from .tiles import TileType

logger = logging.getLogger(__name__)


def _read_map_text(name: str) -> str:
    """Read a map by packaged resource name, falling back to a filesystem path."""
    resource = resources.files("tilequest.world.maps").joinpath(name)
    if resource.is_file():
        logger.debug("Loading packaged map %s", name)
        return resource.read_text(encoding="utf-8")
    path = Path(name)
    if path.exists():
        logger.debug("Loading map from path %s", path)
        return path.read_text(encoding="utf-8")
    raise MapDataError(f"Map not found: {name}")


def _pos(raw: Any, what: str) -> Position:
    try:
        x, y = raw
        return Position(int(x), int(y))
    except (TypeError, ValueError) as exc:
        raise MapDataError(f"Invalid position for {what}: {raw!r}") from exc


def parse_map(data: Dict[str, Any], settings: Settings, catalog: Optional[ItemCatalog] = None) -> WorldState:
    """Build a fresh WorldState from parsed map data and settings."""
    catalog = catalog or default_catalog()
    rows = data.get("rows")
    if not isinstance(rows, list) or not rows:
        raise MapDataError("Map must define a non-empty 'rows' list")
    try:
        grid = TileGrid.from_rows([str(r) for r in rows])
    except ValueError as exc:
        raise MapDataError(str(exc)) from exc

    start = _pos(data.get("start"), "start")
    if not grid.is_walkable(start):
        raise MapDataError(f"Start position {start} is not walkable")

    adversaries: List[adversary.AdversaryState] = []
    for uid, entry in enumerate(data.get("adversaries", []) or [], start=1):
        try:
            kind = AdversaryKind(entry["kind"])
        except (KeyError, ValueError) as exc:
            raise MapDataError(f"Invalid adversary entry: {entry!r}") from exc
        at = _pos(entry.get("at"), f"adversary {kind.value}")
        spawned = adversary.spawn(kind, at, uid=uid)
        if not grid.is_walkable(at, flying=spawned.flying):
            raise MapDataError(f"Adversary {kind.value} placed on impassable tile at {at}")
        if at == start or any(a.position == at for a in adversaries):
            raise MapDataError(f"Adversary {kind.value} placed on an occupied tile at {at}")
        adversaries.append(spawned)

    chests: Dict[Position, Chest] = {}
    for entry in data.get("chests", []) or []:
        at = _pos(entry.get("at"), "chest")
        if not grid.in_bounds(at) or grid.tile_at(at) is not TileType.CHEST:
            raise MapDataError(f"Chest entry at {at} is not on a chest tile")
        item_id = entry.get("item")
        if item_id is not None and item_id not in catalog:
            raise MapDataError(f"Chest at {at} references unknown item {item_id!r}")
        chests[at] = Chest(gold=int(entry.get("gold", 0)), item_id=item_id)

    links: Dict[Position, Position] = {}
    for pair in data.get("dungeon_links", []) or []:
        try:
            a, b = pair
        except (TypeError, ValueError) as exc:
            raise MapDataError(f"Invalid dungeon link: {pair!r}") from exc
        pa, pb = _pos(a, "dungeon link"), _pos(b, "dungeon link")
        for end in (pa, pb):
            if not grid.in_bounds(end) or grid.tile_at(end) is not TileType.DUNGEON_ENTRANCE:
                raise MapDataError(f"Dungeon link end {end} is not a dungeon entrance")
        links[pa] = pb
        links[pb] = pa

    areas: List[Tuple[str, Position, Position]] = []
    for entry in data.get("areas", []) or []:
        areas.append((str(entry["name"]), _pos(entry["from"], "area"), _pos(entry["to"], "area")))

    player = settings.player
    try:
        inv = inventory.create_inventory(
            capacity=player.inventory_capacity,
            gold=player.starting_gold,
            items=[catalog.get(item_id) for item_id in player.starting_items],
        )
        if player.starting_weapon:
            inv = inventory.equip(inv, player.starting_weapon)
        if player.starting_armor:
            inv = inventory.equip(inv, player.starting_armor)
    except TileQuestError as exc:
        raise MapDataError(f"Invalid starting equipment: {exc}") from exc

    shop_stock = tuple(item_id for item_id in settings.world.shop_stock if item_id in catalog)

    world = WorldState(
        grid=grid,
        position=start,
        stats=character.create_default(),
        inventory=inv,
        adversaries=tuple(adversaries),
        chests=chests,
        dungeon_links=links,
        shop_stock=shop_stock,
        npc_hints=tuple(str(h) for h in data.get("npc_hints", []) or []),
        areas=tuple(areas),
    )
    logger.info(
        "Loaded map %r (%dx%d) with %d adversaries and %d chests",
        data.get("name", "unnamed"),
        grid.width,
        grid.height,
        len(adversaries),
        len(chests),
    )
    return world


def load_world(settings: Optional[Settings] = None, catalog: Optional[ItemCatalog] = None) -> WorldState:
    settings = settings or Settings()
    raw = yaml.safe_load(_read_map_text(settings.world.map)) or {}
    if not isinstance(raw, dict):
        raise MapDataError("Map file must contain a mapping at top level")
    return parse_map(raw, settings, catalog)
