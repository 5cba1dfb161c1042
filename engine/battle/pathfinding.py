"""
Battle pathfinding module.

Breadth-first reachability and path reconstruction for battle movement.

Movement is 4-directional and every step costs 1 MP, so the first time
BFS discovers a tile is its shortest distance. The BFS result doubles as a
spanning tree: each node keeps its parent for path reconstruction.
"""

from collections import deque
from typing import Dict, Iterable, List, NamedTuple, Optional, Set

from world.grid import TileCoord, TileData, is_walkable_tile

# Neighbour visit order: up, down, left, right. Among equal-length paths the
# one found first wins; callers should not rely on which that is.
DIRECTIONS = (
    TileCoord(0, -1),
    TileCoord(0, 1),
    TileCoord(-1, 0),
    TileCoord(1, 0),
)


class BfsNode(NamedTuple):
    distance: int
    parent: Optional[TileCoord]


ReachableMap = Dict[TileCoord, BfsNode]


def build_walkable_set(tiles: Iterable[TileData], occupied: Iterable[TileCoord]) -> Set[TileCoord]:
    """
    Ground tiles minus occupied coordinates.

    Obstacles are never walkable, occupied or not.
    """
    blocked = set(occupied)
    return {
        tile.coord
        for tile in tiles
        if is_walkable_tile(tile) and tile.coord not in blocked
    }


def bfs_reachable(origin: TileCoord, max_steps: int, walkable: Set[TileCoord]) -> ReachableMap:
    """
    Get every tile reachable from origin within max_steps.

    The origin is always in the result (distance 0) but its neighbours are
    only expanded through `walkable`; the caller adds the origin itself
    when the moving unit's own tile was excluded as occupied.
    """
    result: ReachableMap = {origin: BfsNode(distance=0, parent=None)}
    queue = deque([origin])

    while queue:
        current = queue.popleft()
        node = result[current]
        if node.distance >= max_steps:
            continue

        for d in DIRECTIONS:
            neighbor = TileCoord(current.col + d.col, current.row + d.row)
            if neighbor in result or neighbor not in walkable:
                continue
            result[neighbor] = BfsNode(distance=node.distance + 1, parent=current)
            queue.append(neighbor)

    return result


def get_reachable_coords(reachable: ReachableMap, origin: TileCoord) -> List[TileCoord]:
    """All discovered tiles except the origin, in discovery order."""
    return [coord for coord in reachable if coord != origin]


def reconstruct_path(reachable: ReachableMap, target: TileCoord) -> List[TileCoord]:
    """
    Walk parent pointers back from target.

    Returns [origin, ..., target], or [] if target was never discovered.
    """
    if target not in reachable:
        return []

    path: List[TileCoord] = []
    current: Optional[TileCoord] = target
    while current is not None:
        path.append(current)
        current = reachable[current].parent
    path.reverse()
    return path
