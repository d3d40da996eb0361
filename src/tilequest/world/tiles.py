from enum import Enum
from typing import Dict


class TileType(Enum):
    """Overworld tile types.

    - WALL, WATER: block movement on foot (flyers may cross water)
    - SHOP, NPC, CHEST, DUNGEON_ENTRANCE: walkable tiles that trigger effects
    """

    OPEN = "open"
    FOREST = "forest"
    WATER = "water"
    WALL = "wall"
    SHOP = "shop"
    NPC = "npc"
    CHEST = "chest"
    DUNGEON_ENTRANCE = "dungeon_entrance"

    @property
    def is_walkable(self) -> bool:
        return self not in {TileType.WALL, TileType.WATER}

    def passable_for(self, flying: bool) -> bool:
        if flying and self is TileType.WATER:
            return True
        return self.is_walkable

    @property
    def glyph(self) -> str:
        """A single-character visualization used by map files and the text renderer."""
        return _GLYPHS[self]

    @classmethod
    def from_glyph(cls, glyph: str) -> "TileType":
        try:
            return _BY_GLYPH[glyph]
        except KeyError as exc:
            raise ValueError(f"Unknown tile glyph: {glyph!r}") from exc


_GLYPHS: Dict[TileType, str] = {
    TileType.OPEN: ".",
    TileType.FOREST: "T",
    TileType.WATER: "~",
    TileType.WALL: "#",
    TileType.SHOP: "$",
    TileType.NPC: "N",
    TileType.CHEST: "C",
    TileType.DUNGEON_ENTRANCE: "D",
}
_BY_GLYPH: Dict[str, TileType] = {g: t for t, g in _GLYPHS.items()}
