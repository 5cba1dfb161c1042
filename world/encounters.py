# world/encounters.py

"""Built-in combat encounters."""

from engine.battle.types import CombatSetup, EnemySpawn
from world.combat_maps import ARENA_SMALL
from world.grid import TileCoord


# Encounter triggered by the portal in normal mode
PORTAL_COMBAT_SETUP = CombatSetup(
    map=ARENA_SMALL,
    player_start_positions=(TileCoord(3, 6),),
    enemies=(
        EnemySpawn(id="enemy1", name="Dummy A", position=TileCoord(3, 1)),
        EnemySpawn(id="enemy2", name="Dummy B", position=TileCoord(5, 3)),
    ),
)
