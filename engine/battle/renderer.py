"""
Battle renderer module.

Draws a CombatSession in 2D: tiles, highlights, units, HUD and floating
numbers. Read-only; it never calls session commands.
"""

from typing import Dict, Optional, Tuple

import pygame

from settings import (
    BATTLE_CELL_SIZE,
    COLOR_ENEMY,
    COLOR_GROUND,
    COLOR_OBSTACLE,
    COLOR_PATH,
    COLOR_PLAYER,
    COLOR_REACHABLE,
    COLOR_SPELL_RANGE,
    COLOR_SPELL_TARGET,
)
from engine.battle.session import CombatSession
from engine.battle.types import CombatUnit
from systems.spells import DEFAULT_SPELLS
from world.grid import GridConfig, TileCoord, grid_to_world, is_walkable_tile, map_to_grid_config

FLOAT_COLORS = {
    "damage": (255, 90, 90),
    "ap": (90, 170, 255),
    "mp": (110, 220, 120),
}


class BattleRenderer:
    """
    Handles all rendering for a combat session.

    Tile placement goes through grid_to_world, so the map is centred on the
    given screen point whatever its size.
    """

    def __init__(self, session: CombatSession, font: pygame.font.Font, center: Tuple[int, int]) -> None:
        self.session = session
        self.font = font
        self.center = center
        # Create a larger font for damage numbers
        self.damage_font = pygame.font.Font(None, int(font.get_height() * 1.5))

    # ------------ Coordinate helpers ------------

    def _grid_config(self) -> Optional[GridConfig]:
        if self.session.map_def is None:
            return None
        return map_to_grid_config(self.session.map_def)

    @staticmethod
    def _pixels_per_unit(config: GridConfig) -> float:
        # One tile step (tile + gap) spans one screen cell.
        return BATTLE_CELL_SIZE / (config.tile_size + config.tile_gap)

    def tile_center(self, coord: TileCoord) -> Tuple[int, int]:
        config = self._grid_config()
        if config is None:
            return self.center
        pos = grid_to_world(coord, config)
        ppu = self._pixels_per_unit(config)
        return (
            round(self.center[0] + pos.x * ppu),
            round(self.center[1] + pos.z * ppu),
        )

    def tile_at(self, screen_pos: Tuple[int, int]) -> Optional[TileCoord]:
        """Tile under a screen position, or None if there is no tile there."""
        config = self._grid_config()
        if config is None:
            return None
        offset_x = (config.width - 1) / 2
        offset_z = (config.height - 1) / 2
        col = round((screen_pos[0] - self.center[0]) / BATTLE_CELL_SIZE + offset_x)
        row = round((screen_pos[1] - self.center[1]) / BATTLE_CELL_SIZE + offset_z)
        coord = TileCoord(col, row)
        if any(t.coord == coord for t in self.session.tiles):
            return coord
        return None

    def _tile_rect(self, coord: TileCoord, inset: int = 2) -> pygame.Rect:
        cx, cy = self.tile_center(coord)
        half = BATTLE_CELL_SIZE // 2 - inset
        return pygame.Rect(cx - half, cy - half, half * 2, half * 2)

    # ------------ Drawing ------------

    def draw(
        self,
        surface: pygame.Surface,
        display_positions: Optional[Dict[int, Tuple[float, float]]] = None,
    ) -> None:
        """
        Draw the whole battle.

        display_positions maps a unit index to a screen position override,
        used while a move animation is playing.
        """
        self._draw_tiles(surface)
        self._draw_highlights(surface)
        self._draw_units(surface, display_positions or {})
        self._draw_floating_numbers(surface)
        self._draw_hud(surface)

    def _draw_tiles(self, surface: pygame.Surface) -> None:
        for tile in self.session.tiles:
            color = COLOR_GROUND if is_walkable_tile(tile) else COLOR_OBSTACLE
            pygame.draw.rect(surface, color, self._tile_rect(tile.coord))

    def _draw_highlights(self, surface: pygame.Surface) -> None:
        s = self.session
        if s.interaction_mode == "spell":
            for coord in s.spell_range_tiles:
                pygame.draw.rect(surface, COLOR_SPELL_RANGE, self._tile_rect(coord, inset=6), width=3)
            if s.spell_hovered_target is not None:
                pygame.draw.rect(surface, COLOR_SPELL_TARGET, self._tile_rect(s.spell_hovered_target, inset=4))
            return

        if s.hovered_tile is not None:
            for coord in s.reachable_tiles:
                pygame.draw.rect(surface, COLOR_REACHABLE, self._tile_rect(coord, inset=6), width=3)
        for coord in s.preview_path[1:]:
            pygame.draw.rect(surface, COLOR_PATH, self._tile_rect(coord, inset=14))

    def _draw_units(self, surface: pygame.Surface, display_positions: Dict[int, Tuple[float, float]]) -> None:
        s = self.session
        for index, unit in enumerate(s.units):
            if not unit.is_alive:
                continue
            if index in display_positions:
                cx, cy = (int(v) for v in display_positions[index])
            else:
                cx, cy = self.tile_center(unit.position)

            color = COLOR_PLAYER if unit.team == "player" else COLOR_ENEMY
            radius = BATTLE_CELL_SIZE // 3
            pygame.draw.circle(surface, color, (cx, cy), radius)
            if index == s.active_unit_index and s.combat_status == "active":
                pygame.draw.circle(surface, (255, 255, 255), (cx, cy), radius + 3, width=2)

            self._draw_hp_bar(surface, unit, cx, cy - radius - 8)

    def _draw_hp_bar(self, surface: pygame.Surface, unit: CombatUnit, cx: int, y: int) -> None:
        width = BATTLE_CELL_SIZE - 16
        ratio = unit.current_hp / unit.max_hp if unit.max_hp > 0 else 0.0
        back = pygame.Rect(cx - width // 2, y, width, 5)
        pygame.draw.rect(surface, (40, 20, 20), back)
        pygame.draw.rect(surface, (90, 200, 90), pygame.Rect(back.x, y, int(width * ratio), 5))

    def _draw_floating_numbers(self, surface: pygame.Surface) -> None:
        s = self.session
        duration = s.feedback.duration or 1.0
        for number in s.feedback.numbers:
            age = max(0.0, s.clock.now - number.created_at)
            t = min(1.0, age / duration)
            cx, cy = self.tile_center(number.tile)
            if number.kind == "damage":
                label = f"-{number.value}"
            else:
                label = f"-{number.value} {number.kind.upper()}"
            text = self.damage_font.render(label, True, FLOAT_COLORS[number.kind])
            text.set_alpha(int(255 * (1.0 - t)))
            surface.blit(text, (cx - text.get_width() // 2, cy - 30 - int(40 * t)))

    def _draw_hud(self, surface: pygame.Surface) -> None:
        s = self.session
        unit = s.active_unit
        lines = [f"Turn {s.turn_number}"]
        if unit is not None:
            role = "Party" if unit.team == "player" else "Enemy"
            lines.append(f"{unit.name} ({role})  HP {unit.current_hp}/{unit.max_hp}")
            lines.append(f"AP {unit.current_ap}   MP {unit.current_mp}")
            if unit.team == "player":
                lines.append(f"Time left: {s.turn_time_remaining}s")

        for i, spell in enumerate(DEFAULT_SPELLS, start=1):
            marker = ">" if s.selected_spell is spell else " "
            lines.append(f"{marker}[{i}] {spell.name} ({spell.ap_cost} AP, {spell.min_range}-{spell.max_range})")
        lines.append("[Space] pass turn   [Esc] cancel spell")

        preview = s.hovered_damage_preview()
        if preview is not None:
            lines.append(f"{preview.spell_name}: {preview.total_min_damage}-{preview.total_max_damage} dmg")

        y = 16
        for line in lines:
            surf = self.font.render(line, True, (230, 230, 230))
            surface.blit(surf, (16, y))
            y += surf.get_height() + 2

        if s.combat_status != "active" and s.units:
            banner = "Victory!" if s.combat_status == "victory" else "Defeat..."
            text = self.damage_font.render(f"{banner}  (press any key)", True, (255, 230, 140))
            surface.blit(text, (self.center[0] - text.get_width() // 2, 40))
