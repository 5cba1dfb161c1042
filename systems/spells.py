# systems/spells.py

from dataclasses import dataclass
from typing import Dict, List, Literal, Tuple


DamageElement = Literal["earth", "fire", "air", "water"]

# Each element is boosted by exactly one bonus stat.
ELEMENT_STAT_MAP: Dict[str, str] = {
    "earth": "power",
    "fire": "intelligence",
    "air": "agility",
    "water": "luck",
}


@dataclass(frozen=True)
class SpellDamage:
    element: DamageElement
    min_damage: int
    max_damage: int


@dataclass(frozen=True)
class SpellDefinition:
    """
    Static spell definition.

    - ap_cost:   action points spent on cast
    - min_range / max_range: inclusive Manhattan band; min_range 0 allows
      targeting the caster's own tile
    - damages:   one component per element, each rolled separately
    """
    id: str
    name: str
    description: str
    ap_cost: int
    min_range: int
    max_range: int
    damages: Tuple[SpellDamage, ...]
    icon: str = ""


SPELLS: Dict[str, SpellDefinition] = {}


def register(spell: SpellDefinition) -> SpellDefinition:
    """
    Register a spell in the global registry and return it.
    """
    SPELLS[spell.id] = spell
    return spell


def get_spell(spell_id: str) -> SpellDefinition:
    return SPELLS[spell_id]


# --- Core spell definitions -------------------------------------------------

# Close-range blow, cheap, earth only
SPELL_MELEE_STRIKE = register(
    SpellDefinition(
        id="melee-strike",
        name="Strike",
        description="A powerful close-range blow.",
        ap_cost=3,
        min_range=1,
        max_range=1,
        damages=(SpellDamage(element="earth", min_damage=8, max_damage=12),),
        icon="Sword",
    )
)

# Ranged, pricier, fire + a little earth
SPELL_FIREBALL = register(
    SpellDefinition(
        id="fireball",
        name="Fireball",
        description="Hurl a ball of fire at a distant foe.",
        ap_cost=4,
        min_range=1,
        max_range=3,
        damages=(
            SpellDamage(element="fire", min_damage=5, max_damage=10),
            SpellDamage(element="earth", min_damage=1, max_damage=3),
        ),
        icon="Flame",
    )
)

# Same loadout for every class for now.
DEFAULT_SPELLS: List[SpellDefinition] = [
    SPELL_MELEE_STRIKE,
    SPELL_FIREBALL,
]
