"""
Battle type definitions.

Contains dataclasses and type aliases used throughout the battle system.
"""

from dataclasses import dataclass
from typing import List, Literal, Tuple

from world.entities import Player
from world.grid import MapDefinition, TileCoord


# Type aliases
CombatStatus = Literal["active", "victory", "defeat"]
Team = Literal["player", "enemy"]
TurnPhase = Literal["movement", "action", "end"]
InteractionMode = Literal["movement", "spell"]
Path = List[TileCoord]


@dataclass
class CombatUnit:
    """
    A player profile placed on the battle grid.

    The wrapped Player is never edited by combat; this object carries the
    live resources. AP/MP are refilled from the profile at the start of the
    unit's turn. Once defeated a unit stays out of turn order and targeting.
    """
    player: Player
    position: TileCoord
    current_ap: int
    current_mp: int
    current_hp: int
    max_hp: int
    team: Team
    defeated: bool = False

    @property
    def name(self) -> str:
        return self.player.name

    @property
    def is_alive(self) -> bool:
        return not self.defeated

    def reset_resources(self) -> None:
        self.current_ap = self.player.base_ap
        self.current_mp = self.player.base_mp


@dataclass(frozen=True)
class EnemySpawn:
    id: str
    name: str
    position: TileCoord


@dataclass(frozen=True)
class CombatSetup:
    """Declarative description of an encounter."""
    map: MapDefinition
    player_start_positions: Tuple[TileCoord, ...]
    enemies: Tuple[EnemySpawn, ...] = ()
