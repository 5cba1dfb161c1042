# systems/inventory.py

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Dict, List, Literal, Optional, Tuple

from engine.error_handler import ValidationError, logger
from .stats import STAT_KEYS

if TYPE_CHECKING:
    from world.entities import Player


ItemCategory = Literal["equipment", "consumable", "resource", "key"]
EquipmentSlot = Literal["head", "cape", "belt", "boots", "ring1", "ring2"]

ITEM_CATEGORIES: Tuple[str, ...] = ("equipment", "consumable", "resource", "key")
EQUIPMENT_SLOTS: Tuple[str, ...] = ("head", "cape", "belt", "boots", "ring1", "ring2")
RING_SLOTS: Tuple[str, ...] = ("ring1", "ring2")


# ---------- Item definitions ----------

@dataclass(frozen=True)
class Item:
    id: str
    name: str
    description: str
    category: str                       # one of ITEM_CATEGORIES
    subcategory: Optional[str] = None   # "head", "ring", "potion", ...
    equipment_slot: Optional[str] = None
    bonus_stats: Dict[str, int] = field(default_factory=dict)  # partial, e.g. {"agility": 2}
    stackable: bool = False
    icon: str = ""

    @property
    def is_equipment(self) -> bool:
        return self.category == "equipment" and self.equipment_slot is not None


@dataclass
class InventorySlot:
    item: Item
    quantity: int = 1


def empty_equipment() -> Dict[str, Optional[Item]]:
    return {slot: None for slot in EQUIPMENT_SLOTS}


_ITEM_DEFS: Dict[str, Item] = {}
_ITEMS_LOADED: bool = False


def _items_path() -> Path:
    # systems/ -> project root / data / items.json
    here = Path(__file__).resolve()
    data_dir = here.parent.parent / "data"
    return data_dir / "items.json"


def parse_item(entry: dict) -> Item:
    """Build an Item from a raw JSON entry, validating enums and stat keys."""
    if "id" not in entry:
        raise ValidationError(f"Item entry without id: {entry!r}")

    item_id = entry["id"]
    category = entry.get("category", "resource")
    if category not in ITEM_CATEGORIES:
        raise ValidationError(f"Item {item_id}: unknown category {category!r}")

    slot = entry.get("equipment_slot")
    if slot is not None and slot not in EQUIPMENT_SLOTS:
        raise ValidationError(f"Item {item_id}: unknown equipment slot {slot!r}")

    bonus = {}
    for key, value in entry.get("bonus_stats", {}).items():
        if key not in STAT_KEYS:
            raise ValidationError(f"Item {item_id}: unknown stat {key!r}")
        bonus[key] = int(value)

    return Item(
        id=item_id,
        name=entry.get("name", item_id),
        description=entry.get("description", ""),
        category=category,
        subcategory=entry.get("subcategory"),
        equipment_slot=slot,
        bonus_stats=bonus,
        stackable=bool(entry.get("stackable", False)),
        icon=entry.get("icon", ""),
    )


def _load_item_definitions() -> None:
    global _ITEM_DEFS, _ITEMS_LOADED
    if _ITEMS_LOADED:
        return

    path = _items_path()
    if not path.exists():
        # Quiet fail: project can still run without items, but nothing to load.
        logger.warning(f"Item table not found at {path}")
        _ITEM_DEFS = {}
        _ITEMS_LOADED = True
        return

    with path.open("r", encoding="utf-8") as f:
        raw_list = json.load(f)

    defs: Dict[str, Item] = {}
    for entry in raw_list:
        item = parse_item(entry)
        if item.id in defs:
            raise ValidationError(f"Duplicate item id: {item.id}")
        defs[item.id] = item

    _ITEM_DEFS = defs
    _ITEMS_LOADED = True
    logger.debug(f"Loaded {len(defs)} item definitions from {path}")


def all_items() -> List[Item]:
    _load_item_definitions()
    return list(_ITEM_DEFS.values())


def get_item_def(item_id: str) -> Optional[Item]:
    _load_item_definitions()
    return _ITEM_DEFS.get(item_id)


# Starting bag for a fresh profile: (item id, quantity)
DEFAULT_INVENTORY_IDS: Tuple[Tuple[str, int], ...] = (
    ("iron-helm", 1),
    ("travelers-cape", 1),
    ("leather-belt", 1),
    ("swift-boots", 1),
    ("ruby-ring", 1),
    ("emerald-ring", 1),
    ("health-potion", 3),
    ("teleport-potion", 1),
    ("pebble", 5),
    ("key-chain", 1),
)


def default_inventory() -> List[InventorySlot]:
    slots: List[InventorySlot] = []
    for item_id, quantity in DEFAULT_INVENTORY_IDS:
        item = get_item_def(item_id)
        if item is not None:
            slots.append(InventorySlot(item=item, quantity=quantity))
    return slots


# ---------- Inventory & equipment operations ----------

def _find_slot(player: "Player", item_id: str) -> Optional[InventorySlot]:
    for slot in player.inventory:
        if slot.item.id == item_id:
            return slot
    return None


def add_item_to_inventory(player: "Player", item: Item, quantity: int = 1) -> None:
    """
    Add items to the bag.

    Stackable items merge into their existing slot, so a stackable id never
    appears twice. Non-stackable items take one slot per copy.
    """
    if quantity < 1:
        return

    if item.stackable:
        existing = _find_slot(player, item.id)
        if existing is not None:
            existing.quantity += quantity
        else:
            player.inventory.append(InventorySlot(item=item, quantity=quantity))
        return

    for _ in range(quantity):
        player.inventory.append(InventorySlot(item=item, quantity=1))


def remove_item_from_inventory(player: "Player", item_id: str, quantity: int = 1) -> bool:
    """
    Remove `quantity` copies of an item. The slot disappears at 0.

    Returns False (and changes nothing) if the item isn't in the bag.
    """
    slot = _find_slot(player, item_id)
    if slot is None or quantity < 1:
        return False

    if slot.item.stackable:
        slot.quantity -= quantity
        if slot.quantity <= 0:
            player.inventory.remove(slot)
        return True

    # Non-stackable copies live in separate slots.
    removed = 0
    for candidate in list(player.inventory):
        if removed >= quantity:
            break
        if candidate.item.id == item_id:
            player.inventory.remove(candidate)
            removed += 1
    return True


def _target_slot(player: "Player", item: Item) -> str:
    # Rings fill ring1 first, then ring2; with both full, ring1 is swapped.
    if item.subcategory == "ring" or item.equipment_slot in RING_SLOTS:
        for ring_slot in RING_SLOTS:
            if player.equipment.get(ring_slot) is None:
                return ring_slot
        return RING_SLOTS[0]
    return item.equipment_slot  # type: ignore[return-value]


def equip_item(player: "Player", item_id: str) -> str:
    """
    Equip an item from the bag. Returns a human-readable message.

    Non-equipment and unknown items do nothing. If the slot is occupied the
    previous item goes back into the bag.
    """
    slot = _find_slot(player, item_id)
    if slot is None:
        return "You don't have that."

    item = slot.item
    if not item.is_equipment:
        return f"You can't equip {item.name}."

    target = _target_slot(player, item)
    previous = player.equipment.get(target)

    remove_item_from_inventory(player, item_id)
    player.equipment[target] = item
    if previous is not None:
        add_item_to_inventory(player, previous)
        return f"You swap {previous.name} for {item.name}."
    return f"You equip {item.name}."


def unequip_item(player: "Player", slot: str) -> str:
    if slot not in player.equipment:
        return "Nothing to unequip."
    item = player.equipment[slot]
    if item is None:
        return "Nothing is equipped there."
    player.equipment[slot] = None
    add_item_to_inventory(player, item)
    return f"You remove your {item.name}."


def total_stat_modifiers(equipment: Dict[str, Optional[Item]]) -> Dict[str, int]:
    """
    Sum up all stat bonuses from currently equipped items.
    Returns a dict like {"agility": 6, "power": 3}.
    """
    totals: Dict[str, int] = {}
    for item in equipment.values():
        if item is None:
            continue
        for stat_name, value in item.bonus_stats.items():
            totals[stat_name] = totals.get(stat_name, 0) + value
    return totals
