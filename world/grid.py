# world/grid.py

"""
Battle map grid model.

A map is described by a list of layout strings, one character per cell:

    "."  ground (walkable, targetable)
    "X"  obstacle (never walkable, never targetable)
    " "  hole (no tile at all)

Rows may have different lengths, so ragged and holed maps are valid.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Literal, NamedTuple, Tuple

TileType = Literal["ground", "obstacle"]

HOLE_CHAR = " "
OBSTACLE_CHAR = "X"


class TileCoord(NamedTuple):
    """Grid coordinate in tile space. Hashable, so it doubles as a set/dict key."""
    col: int
    row: int


class TilePosition(NamedTuple):
    """World-space position of a tile centre (y is up, so only x/z)."""
    x: float
    z: float


@dataclass(frozen=True)
class TileData:
    coord: TileCoord
    type: TileType
    index: int


@dataclass(frozen=True)
class MapDefinition:
    name: str
    layout: Tuple[str, ...]
    tile_size: float = 1.2
    tile_gap: float = 0.06

    @property
    def width(self) -> int:
        return max((len(row) for row in self.layout), default=0)

    @property
    def height(self) -> int:
        return len(self.layout)


@dataclass(frozen=True)
class GridConfig:
    width: int
    height: int
    tile_size: float
    tile_gap: float


def map_to_grid_config(map_def: MapDefinition) -> GridConfig:
    return GridConfig(
        width=map_def.width,
        height=map_def.height,
        tile_size=map_def.tile_size,
        tile_gap=map_def.tile_gap,
    )


def parse_layout(map_def: MapDefinition) -> List[TileData]:
    """
    Scan the layout row by row, left to right, and build tile data.

    Holes are skipped and do not consume an index, so indices are
    sequential over emitted tiles only. A layout made only of holes
    yields an empty list.
    """
    tiles: List[TileData] = []
    index = 0

    for row, line in enumerate(map_def.layout):
        for col, char in enumerate(line):
            if char == HOLE_CHAR:
                continue
            tile_type: TileType = "obstacle" if char == OBSTACLE_CHAR else "ground"
            tiles.append(TileData(coord=TileCoord(col, row), type=tile_type, index=index))
            index += 1

    return tiles


def grid_to_world(coord: TileCoord, config: GridConfig) -> TilePosition:
    """
    Convert a grid coordinate to a world position.

    The grid is centred on the world origin for both odd and even
    width/height.
    """
    step = config.tile_size + config.tile_gap
    offset_x = (config.width - 1) * step / 2
    offset_z = (config.height - 1) * step / 2
    return TilePosition(
        x=coord.col * step - offset_x,
        z=coord.row * step - offset_z,
    )


def is_walkable_tile(tile: TileData) -> bool:
    """Only ground can be walked on; obstacles never."""
    return tile.type == "ground"
