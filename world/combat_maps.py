# world/combat_maps.py

"""Built-in battle maps. "." = ground, "X" = obstacle, " " = no tile."""

from typing import Dict, List

from .grid import MapDefinition


# 8x8 all-ground map
DEFAULT_MAP = MapDefinition(
    name="Default",
    layout=(
        "........",
        "........",
        "........",
        "........",
        "........",
        "........",
        "........",
        "........",
    ),
)

# 8x8 arena with obstacle clusters in each corner
ARENA_SMALL = MapDefinition(
    name="Arena Small",
    layout=(
        "XX....XX",
        "X......X",
        "........",
        "........",
        "........",
        "........",
        "X......X",
        "XX....XX",
    ),
)

# L-shaped corridor using spaces for missing tiles
L_CORRIDOR = MapDefinition(
    name="L Corridor",
    layout=(
        "...     ",
        "...     ",
        "...     ",
        "........",
        "........",
        "........",
    ),
)

# Cross-shaped map using spaces for empty corners
CROSS_MAP = MapDefinition(
    name="Cross",
    layout=(
        "  ...  ",
        "  ...  ",
        ".......",
        ".......",
        ".......",
        "  ...  ",
        "  ...  ",
    ),
)


_MAPS: Dict[str, MapDefinition] = {
    m.name: m for m in (DEFAULT_MAP, ARENA_SMALL, L_CORRIDOR, CROSS_MAP)
}


def get_map(name: str) -> MapDefinition:
    return _MAPS[name]


def all_maps() -> List[MapDefinition]:
    return list(_MAPS.values())
