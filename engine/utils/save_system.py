"""
Save/Load system for player profiles.

Handles serialization and deserialization of a Player to/from JSON files.
Items are stored by id and looked up again in the item table on load.
"""

import json
from pathlib import Path
from typing import Optional, Dict, Any, List

from engine.error_handler import SaveError, log_error, logger
from systems.inventory import InventorySlot, empty_equipment, get_item_def
from systems.progression import LevelProgress
from systems.stats import BonusStats
from world.entities import Player


# Save directory (in project root / saves); created on first save
SAVE_DIR = Path(__file__).resolve().parent.parent.parent / "saves"

SAVE_FORMAT_VERSION = "1.0"


def get_save_path(player_id: str, save_dir: Path = SAVE_DIR) -> Path:
    """Get the file path for a player's save."""
    return save_dir / f"player_{player_id}.json"


def save_player(player: Player, save_dir: Path = SAVE_DIR) -> bool:
    """
    Save a player profile to disk.

    Returns:
        True if save was successful, False otherwise
    """
    try:
        save_data = player_to_dict(player)
        save_dir.mkdir(parents=True, exist_ok=True)
        save_path = get_save_path(player.id, save_dir)

        # Write to a temporary file first, then rename (atomic write)
        temp_path = save_path.with_suffix(".tmp")
        with temp_path.open("w", encoding="utf-8") as f:
            json.dump(save_data, f, indent=2, ensure_ascii=False)

        temp_path.replace(save_path)
        logger.info(f"Saved player {player.id} to {save_path}")
        return True
    except (OSError, TypeError, ValueError) as e:
        log_error(e, "save_player")
        return False


def load_player(player_id: str, save_dir: Path = SAVE_DIR) -> Optional[Player]:
    """
    Load a player profile from disk.

    Returns:
        Player if load was successful, None if missing or unreadable
    """
    save_path = get_save_path(player_id, save_dir)
    if not save_path.exists():
        return None

    try:
        with save_path.open("r", encoding="utf-8") as f:
            save_data = json.load(f)
        return player_from_dict(save_data)
    except (OSError, ValueError, SaveError) as e:
        log_error(e, "load_player")
        return None


# -----------------------------------------------------------------------------
# Serialization helpers
# -----------------------------------------------------------------------------

def player_to_dict(player: Player) -> Dict[str, Any]:
    """Convert a Player to a JSON-serializable dict."""
    return {
        "version": SAVE_FORMAT_VERSION,
        "id": player.id,
        "name": player.name,
        "player_class": player.player_class,
        "level_progress": {
            "level": player.level_progress.level,
            "current_xp": player.level_progress.current_xp,
            "xp_to_next_level": player.level_progress.xp_to_next_level,
        },
        "base_ap": player.base_ap,
        "base_mp": player.base_mp,
        "bonus_stats": player.bonus_stats.to_dict(),
        "equipment": {
            slot: (item.id if item is not None else None)
            for slot, item in player.equipment.items()
        },
        "inventory": [
            {"item_id": slot.item.id, "quantity": slot.quantity}
            for slot in player.inventory
        ],
    }


def _deserialize_inventory(entries: List[Dict[str, Any]]) -> List[InventorySlot]:
    slots: List[InventorySlot] = []
    for entry in entries:
        item = get_item_def(entry["item_id"])
        if item is None:
            raise SaveError(
                f"Unknown item id in save: {entry['item_id']}",
                user_message="Save file references an item that no longer exists.",
            )
        slots.append(InventorySlot(item=item, quantity=int(entry.get("quantity", 1))))
    return slots


def player_from_dict(data: Dict[str, Any]) -> Player:
    """
    Reconstruct a Player from saved data.

    Raises SaveError if required fields are missing or an item id is unknown.
    """
    try:
        player = Player(id=data["id"], name=data["name"])
    except KeyError as e:
        raise SaveError(f"Save data missing field {e}") from e

    player.player_class = data.get("player_class", player.player_class)
    progress = data.get("level_progress", {})
    player.level_progress = LevelProgress(
        level=int(progress.get("level", 1)),
        current_xp=int(progress.get("current_xp", 0)),
        xp_to_next_level=int(progress.get("xp_to_next_level", LevelProgress().xp_to_next_level)),
    )
    player.base_ap = int(data.get("base_ap", player.base_ap))
    player.base_mp = int(data.get("base_mp", player.base_mp))
    player.bonus_stats = BonusStats.from_dict(data.get("bonus_stats", {}))

    equipment = empty_equipment()
    for slot, item_id in data.get("equipment", {}).items():
        if slot not in equipment:
            logger.warning(f"Ignoring unknown equipment slot in save: {slot}")
            continue
        if item_id is None:
            continue
        item = get_item_def(item_id)
        if item is None:
            raise SaveError(f"Unknown item id in save: {item_id}")
        equipment[slot] = item
    player.equipment = equipment

    player.inventory = _deserialize_inventory(data.get("inventory", []))
    return player
