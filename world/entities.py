# world/entities.py

from dataclasses import dataclass, field
from typing import Dict, List, Literal, Optional, Tuple

from settings import BASE_AP, BASE_MP
from systems.inventory import InventorySlot, Item, empty_equipment
from systems.progression import LevelProgress
from systems.stats import BonusStats

PlayerClass = Literal["bomberman", "archer", "knight", "mage"]
PLAYER_CLASSES: Tuple[str, ...] = ("bomberman", "archer", "knight", "mage")


@dataclass
class Player:
    """
    Persistent player profile.

    Combat never edits this directly: a CombatUnit wraps it and keeps its
    own live AP/MP/HP. Equipment and inventory are changed through
    systems.inventory.
    """
    id: str
    name: str
    player_class: str = "knight"
    level_progress: LevelProgress = field(default_factory=LevelProgress)
    base_ap: int = BASE_AP
    base_mp: int = BASE_MP
    bonus_stats: BonusStats = field(default_factory=BonusStats)
    equipment: Dict[str, Optional[Item]] = field(default_factory=empty_equipment)
    inventory: List[InventorySlot] = field(default_factory=list)


def create_player(player_id: str, name: str, player_class: str) -> Player:
    """Fresh level-1 profile with empty gear."""
    if player_class not in PLAYER_CLASSES:
        raise ValueError(f"Unknown player class: {player_class}")
    return Player(id=player_id, name=name, player_class=player_class)


def create_enemy(enemy_id: str, name: str) -> Player:
    """Minimal profile backing a dummy enemy unit."""
    return Player(id=enemy_id, name=name, player_class="knight")
