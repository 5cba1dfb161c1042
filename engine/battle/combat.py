"""
Battle combat calculations module.

Spell range and damage maths. Everything here is pure except
roll_spell_damage, which draws from the given random source.
"""

from dataclasses import dataclass
from typing import Iterable, List, Optional
import random

from systems.spells import ELEMENT_STAT_MAP, SpellDefinition
from systems.stats import BonusStats
from world.grid import TileCoord, TileData, is_walkable_tile


@dataclass(frozen=True)
class DamagePreview:
    element: str
    min_damage: int
    max_damage: int


@dataclass(frozen=True)
class SpellDamagePreview:
    spell_name: str
    damages: List[DamagePreview]
    total_min_damage: int
    total_max_damage: int


def manhattan_distance(a: TileCoord, b: TileCoord) -> int:
    return abs(a.col - b.col) + abs(a.row - b.row)


def is_tile_in_spell_range(spell: SpellDefinition, caster_pos: TileCoord, target: TileCoord) -> bool:
    dist = manhattan_distance(caster_pos, target)
    return spell.min_range <= dist <= spell.max_range


def get_spell_range_tiles(
    spell: SpellDefinition,
    caster_pos: TileCoord,
    tiles: Iterable[TileData],
) -> List[TileCoord]:
    """
    Ground tiles whose distance from the caster lies in [min_range, max_range].

    The caster's own tile only qualifies when min_range is 0.
    """
    return [
        tile.coord
        for tile in tiles
        if is_walkable_tile(tile) and is_tile_in_spell_range(spell, caster_pos, tile.coord)
    ]


def _stat_bonus(element: str, stats: BonusStats) -> int:
    return stats.get(ELEMENT_STAT_MAP[element])


def compute_damage_preview(spell: SpellDefinition, stats: BonusStats) -> SpellDamagePreview:
    """
    Damage bounds per component, shifted by the caster's scaling stat.

    Used for tooltips before committing a cast.
    """
    damages = [
        DamagePreview(
            element=dmg.element,
            min_damage=dmg.min_damage + _stat_bonus(dmg.element, stats),
            max_damage=dmg.max_damage + _stat_bonus(dmg.element, stats),
        )
        for dmg in spell.damages
    ]
    return SpellDamagePreview(
        spell_name=spell.name,
        damages=damages,
        total_min_damage=sum(d.min_damage for d in damages),
        total_max_damage=sum(d.max_damage for d in damages),
    )


def roll_spell_damage(
    spell: SpellDefinition,
    stats: BonusStats,
    rng: Optional[random.Random] = None,
) -> int:
    """Roll each component uniformly within its shifted bounds and sum them."""
    rng = rng or random.Random()
    total = 0
    for dmg in spell.damages:
        bonus = _stat_bonus(dmg.element, stats)
        total += rng.randint(dmg.min_damage + bonus, dmg.max_damage + bonus)
    return total
