from __future__ import annotations

import logging
from typing import List, Sequence

from ..core.geometry import Position
from .tiles import TileType

logger = logging.getLogger(__name__)


class TileGrid:
    """
    Rectangular tile map. All tile access is bounds-checked; out-of-bounds
    positions are never walkable.
    """

    def __init__(self, tiles: Sequence[Sequence[TileType]]) -> None:
        if not tiles or not tiles[0]:
            raise ValueError("Grid must have at least one row and one column")
        width = len(tiles[0])
        if any(len(row) != width for row in tiles):
            raise ValueError("All grid rows must have the same width")
        self.width = width
        self.height = len(tiles)
        self._tiles: List[List[TileType]] = [list(row) for row in tiles]

    @classmethod
    def from_rows(cls, rows: Sequence[str]) -> "TileGrid":
        return cls([[TileType.from_glyph(ch) for ch in row] for row in rows])

    # ---- Bounds / query --------------------------------------------------
    def in_bounds(self, pos: Position) -> bool:
        return 0 <= pos.x < self.width and 0 <= pos.y < self.height

    def tile_at(self, pos: Position) -> TileType:
        if not self.in_bounds(pos):
            raise IndexError(f"Tile out of bounds: {pos} not in [0,{self.width})x[0,{self.height})")
        return self._tiles[pos.y][pos.x]

    def is_walkable(self, pos: Position, flying: bool = False) -> bool:
        if not self.in_bounds(pos):
            return False
        return self._tiles[pos.y][pos.x].passable_for(flying)

    def set_tile(self, pos: Position, tile: TileType) -> None:
        if not self.in_bounds(pos):
            logger.error("Attempt to write out-of-bounds tile at %s", pos)
            return
        self._tiles[pos.y][pos.x] = tile

    # ---- Export ----------------------------------------------------------
    def render_lines(self) -> List[str]:
        return ["".join(tile.glyph for tile in row) for row in self._tiles]
