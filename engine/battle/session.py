"""
Combat session: the turn-based battle state machine.

One CombatSession owns one battle: the unit roster, turn order, turn timer,
action economy and the derived highlight caches the UI reads. Everything
outside (renderer, input, HUD) reads the attributes below and calls the
command methods; nothing else mutates the state.

Illegal commands (wrong turn, not enough AP/MP, bad target, wrong mode,
battle already over) are silent no-ops. Queries are safe before
init_combat() and just return empty values.
"""

from __future__ import annotations

from typing import List, Optional, Sequence, Set
import random

from settings import (
    DEFAULT_UNIT_HP,
    ENEMY_AUTO_PASS_DELAY,
    TURN_TIMER_DURATION,
    TURN_TIMER_TICK,
)
from engine.error_handler import logger
from engine.battle.combat import (
    SpellDamagePreview,
    compute_damage_preview,
    get_spell_range_tiles,
    roll_spell_damage,
)
from engine.battle.feedback import FloatingNumberLog
from engine.battle.pathfinding import (
    ReachableMap,
    bfs_reachable,
    build_walkable_set,
    get_reachable_coords,
    reconstruct_path,
)
from engine.battle.timers import BattleClock, TimerHandle
from engine.battle.types import (
    CombatSetup,
    CombatStatus,
    CombatUnit,
    InteractionMode,
    Path,
    Team,
    TurnPhase,
)
from systems.spells import SpellDefinition
from telemetry.logger import telemetry
from world.entities import Player, create_enemy
from world.grid import MapDefinition, TileCoord, TileData, parse_layout


class CombatSession:
    """
    Turn-based battle on a tile grid.

    - Units act in a fixed order: player units first, then enemies.
    - Player turns run on a countdown; running out ends the turn.
    - Enemy turns pass automatically after a short delay.
    - Moving costs 1 MP per tile, casting costs the spell's AP.
    """

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        clock: Optional[BattleClock] = None,
        feedback: Optional[FloatingNumberLog] = None,
        turn_timer_duration: int = TURN_TIMER_DURATION,
        enemy_pass_delay: float = ENEMY_AUTO_PASS_DELAY,
        default_hp: int = DEFAULT_UNIT_HP,
    ) -> None:
        self.rng = rng or random.Random()
        self.clock = clock or BattleClock()
        self.feedback = feedback or FloatingNumberLog()
        self.turn_timer_duration = turn_timer_duration
        self.enemy_pass_delay = enemy_pass_delay
        self.default_hp = default_hp

        # --- Roster & turn tracking ---
        self.units: List[CombatUnit] = []
        self.map_def: Optional[MapDefinition] = None
        self.tiles: List[TileData] = []
        self.active_unit_index: int = 0
        self.turn_phase: TurnPhase = "movement"
        self.turn_number: int = 1
        self.combat_status: CombatStatus = "active"

        # --- Turn timer ---
        self.turn_time_remaining: int = turn_timer_duration
        self._timer: Optional[TimerHandle] = None
        self._auto_pass: Optional[TimerHandle] = None
        # Bumped on every init so callbacks from an older battle stay inert
        self._generation: int = 0

        # --- Movement highlights (derived) ---
        self.reachable_tiles: List[TileCoord] = []
        self.reachable_tile_keys: Set[TileCoord] = set()
        self.hovered_tile: Optional[TileCoord] = None
        self.preview_path: Path = []
        self.preview_path_keys: Set[TileCoord] = set()

        # --- Movement animation ---
        self.movement_path: Path = []
        self.is_moving: bool = False

        # --- Spell targeting ---
        self.selected_spell: Optional[SpellDefinition] = None
        self.spell_range_tiles: List[TileCoord] = []
        self.spell_range_tile_keys: Set[TileCoord] = set()
        self.spell_hovered_target: Optional[TileCoord] = None
        self.interaction_mode: InteractionMode = "movement"

    @classmethod
    def from_config(cls, config, **kwargs) -> "CombatSession":
        """Build a session using pacing and seed from a GameConfig."""
        rng = kwargs.pop("rng", None)
        if rng is None and config.rng_seed is not None:
            rng = random.Random(config.rng_seed)
        return cls(
            rng=rng,
            turn_timer_duration=config.turn_timer_duration,
            enemy_pass_delay=config.enemy_pass_delay,
            **kwargs,
        )

    # ------------ Queries ------------

    @property
    def active_unit(self) -> Optional[CombatUnit]:
        if 0 <= self.active_unit_index < len(self.units):
            return self.units[self.active_unit_index]
        return None

    def is_player_turn(self) -> bool:
        unit = self.active_unit
        return unit is not None and unit.team == "player"

    def unit_at(self, coord: Sequence[int]) -> Optional[CombatUnit]:
        """Living unit standing on coord, if any."""
        coord = TileCoord(*coord)
        for unit in self.units:
            if unit.is_alive and unit.position == coord:
                return unit
        return None

    def living_units(self, team: Optional[Team] = None) -> List[CombatUnit]:
        return [u for u in self.units if u.is_alive and (team is None or u.team == team)]

    def hovered_damage_preview(self) -> Optional[SpellDamagePreview]:
        """Damage tooltip for the selected spell while a legal target is hovered."""
        unit = self.active_unit
        if self.selected_spell is None or self.spell_hovered_target is None or unit is None:
            return None
        return compute_damage_preview(self.selected_spell, unit.player.bonus_stats)

    def check_combat_end(self) -> CombatStatus:
        """Recomputed on demand: no enemies left wins, no players left loses."""
        if not self.living_units("enemy"):
            return "victory"
        if not self.living_units("player"):
            return "defeat"
        return "active"

    # ------------ Setup ------------

    def init_combat(self, setup: CombatSetup, players: Sequence[Player]) -> None:
        """
        Start a fresh battle, superseding any previous one on this session.

        Players are placed 1:1 on the setup's start positions; enemies get a
        generated dummy profile. All units start with the same HP.
        """
        self.clear_turn_timer()
        self.clock.cancel_all()
        self._auto_pass = None
        self._generation += 1

        if len(players) > len(setup.player_start_positions):
            logger.warning(
                f"{len(players)} players but only {len(setup.player_start_positions)} "
                f"start positions on {setup.map.name}; extra players sit this one out"
            )

        player_units = [
            CombatUnit(
                player=player,
                position=TileCoord(*position),
                current_ap=player.base_ap,
                current_mp=player.base_mp,
                current_hp=self.default_hp,
                max_hp=self.default_hp,
                team="player",
            )
            for player, position in zip(players, setup.player_start_positions)
        ]

        enemy_units = []
        for spawn in setup.enemies:
            enemy = create_enemy(spawn.id, spawn.name)
            enemy_units.append(
                CombatUnit(
                    player=enemy,
                    position=TileCoord(*spawn.position),
                    current_ap=enemy.base_ap,
                    current_mp=enemy.base_mp,
                    current_hp=self.default_hp,
                    max_hp=self.default_hp,
                    team="enemy",
                )
            )

        # Players first, then enemies: this is the turn order for the battle.
        self.units = player_units + enemy_units
        self.map_def = setup.map
        self.tiles = parse_layout(setup.map)

        self.active_unit_index = 0
        self.turn_number = 1
        self.turn_phase = "movement"
        self.combat_status = "active"
        self.turn_time_remaining = self.turn_timer_duration
        self.movement_path = []
        self.is_moving = False
        self._clear_spell_state()
        self._clear_hover()
        self.reachable_tiles = []
        self.reachable_tile_keys = set()
        self.feedback.clear_all()

        logger.info(
            f"Combat started on {setup.map.name}: "
            f"{len(player_units)} player unit(s) vs {len(enemy_units)} enemy unit(s)"
        )
        telemetry.set_context(battle=self._generation, map=setup.map.name)
        telemetry.log(
            "combat_init",
            players=len(player_units),
            enemies=len(enemy_units),
        )

        self.compute_reachable()
        if self.units:
            self._process_active_unit()

    # ------------ Movement ------------

    def _bfs_for_active(self) -> Optional[ReachableMap]:
        unit = self.active_unit
        if unit is None:
            return None
        occupied = [
            u.position
            for i, u in enumerate(self.units)
            if i != self.active_unit_index and u.is_alive
        ]
        walkable = build_walkable_set(self.tiles, occupied)
        # The unit's own tile is the BFS origin.
        walkable.add(unit.position)
        return bfs_reachable(unit.position, unit.current_mp, walkable)

    def _clear_hover(self) -> None:
        self.hovered_tile = None
        self.preview_path = []
        self.preview_path_keys = set()

    def compute_reachable(self) -> None:
        """Refresh the active unit's reachable tiles; also drops hover/preview."""
        if self.combat_status != "active":
            return
        unit = self.active_unit
        if unit is None or not unit.is_alive:
            return

        reachable = self._bfs_for_active()
        self.reachable_tiles = get_reachable_coords(reachable, unit.position)
        self.reachable_tile_keys = set(self.reachable_tiles)
        self._clear_hover()

    def set_hovered_tile(self, coord: Optional[Sequence[int]]) -> None:
        if self.is_moving or self.combat_status != "active":
            return
        if not self.is_player_turn():
            return

        if self.interaction_mode == "spell":
            self.set_spell_hovered_target(coord)
            return

        if coord is None:
            self._clear_hover()
            return

        coord = TileCoord(*coord)
        unit = self.active_unit

        # Hovering the unit itself shows the zone without a path.
        if coord == unit.position:
            self._clear_hover()
            self.hovered_tile = coord
            return

        if coord not in self.reachable_tile_keys:
            self._clear_hover()
            return

        path = reconstruct_path(self._bfs_for_active(), coord)
        self.hovered_tile = coord
        self.preview_path = path
        self.preview_path_keys = set(path)

    def execute_move(self, target: Sequence[int]) -> None:
        """
        Move the active player unit to target along the shortest path.

        Position and MP change right away; the presentation layer animates
        movement_path and calls set_is_moving(False) when done.
        """
        if self.is_moving or self.combat_status != "active":
            return
        if self.interaction_mode == "spell":
            return
        if not self.is_player_turn():
            return

        target = TileCoord(*target)
        unit = self.active_unit
        path = reconstruct_path(self._bfs_for_active(), target)
        if len(path) < 2:
            logger.debug(f"{unit.name} cannot move to {target}")
            return

        steps_used = len(path) - 1
        origin = unit.position
        unit.position = target
        unit.current_mp -= steps_used

        self.movement_path = path
        self.is_moving = True
        self._clear_hover()
        self.reachable_tiles = []
        self.reachable_tile_keys = set()

        self.feedback.add_floating_number(steps_used, "mp", target, now=self.clock.now)
        logger.debug(f"{unit.name} moves {origin} -> {target} ({steps_used} MP)")
        telemetry.log(
            "unit_move",
            unit=unit.player.id,
            frm=list(origin),
            to=list(target),
            mp_spent=steps_used,
        )

    def set_is_moving(self, moving: bool) -> None:
        """Animation edge from the presentation layer; False refreshes reachability."""
        self.is_moving = moving
        if not moving:
            self.compute_reachable()

    # ------------ Turn flow ------------

    def _find_next_alive_unit(self) -> int:
        count = len(self.units)
        for step in range(1, count + 1):
            idx = (self.active_unit_index + step) % count
            if self.units[idx].is_alive:
                return idx
        return self.active_unit_index

    def end_turn(self) -> None:
        if self.combat_status != "active" or not self.units:
            return

        self.clear_turn_timer()
        previous = self.active_unit

        next_index = self._find_next_alive_unit()
        next_unit = self.units[next_index]
        next_unit.reset_resources()

        self.active_unit_index = next_index
        self.turn_phase = "movement"
        self.turn_number += 1
        self.turn_time_remaining = self.turn_timer_duration
        self.movement_path = []
        self._clear_hover()
        self._clear_spell_state()

        logger.debug(f"Turn {self.turn_number}: {next_unit.name} ({next_unit.team})")
        telemetry.log(
            "turn_end",
            ended=previous.player.id if previous else None,
            next=next_unit.player.id,
            turn=self.turn_number,
        )

        self.compute_reachable()
        self._process_active_unit()

    def pass_turn(self) -> None:
        if self.combat_status != "active":
            return
        self.end_turn()

    def _process_active_unit(self) -> None:
        """Enemies pass after a short delay; players get the countdown."""
        if self.combat_status != "active":
            return
        unit = self.active_unit
        if unit is None:
            return

        if unit.team == "enemy":
            generation = self._generation
            turn = self.turn_number

            def _enemy_pass() -> None:
                if generation != self._generation or turn != self.turn_number:
                    return
                if self.combat_status != "active":
                    return
                self.end_turn()

            self._auto_pass = self.clock.schedule(self.enemy_pass_delay, _enemy_pass)
        else:
            self.start_turn_timer()

    def start_turn_timer(self) -> None:
        self.clear_turn_timer()
        self.turn_time_remaining = self.turn_timer_duration
        self._timer = self.clock.schedule_interval(TURN_TIMER_TICK, self.tick_timer)

    def clear_turn_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    @property
    def timer_running(self) -> bool:
        return self._timer is not None and self._timer.active

    def tick_timer(self) -> None:
        if self.combat_status != "active":
            self.clear_turn_timer()
            return

        remaining = self.turn_time_remaining - 1
        if remaining <= 0:
            unit = self.active_unit
            logger.debug(f"Turn timer expired for {unit.name if unit else '?'}")
            self.end_turn()
        else:
            self.turn_time_remaining = remaining

    def update(self, dt: float) -> None:
        """Advance battle time by dt seconds (called once per frame)."""
        self.clock.advance(dt)
        self.feedback.expire(self.clock.now)

    # ------------ Spells ------------

    def _clear_spell_state(self) -> None:
        self.selected_spell = None
        self.spell_range_tiles = []
        self.spell_range_tile_keys = set()
        self.spell_hovered_target = None
        self.interaction_mode = "movement"

    def select_spell(self, spell: SpellDefinition) -> None:
        if self.combat_status != "active" or not self.is_player_turn():
            return
        unit = self.active_unit
        if unit.current_ap < spell.ap_cost:
            logger.debug(f"{unit.name} lacks AP for {spell.name} ({unit.current_ap}/{spell.ap_cost})")
            return

        self.selected_spell = spell
        self.spell_range_tiles = get_spell_range_tiles(spell, unit.position, self.tiles)
        self.spell_range_tile_keys = set(self.spell_range_tiles)
        self.spell_hovered_target = None
        self.interaction_mode = "spell"
        self._clear_hover()

    def cancel_spell(self) -> None:
        self._clear_spell_state()
        # Bring the movement highlight back.
        self.compute_reachable()

    def set_spell_hovered_target(self, coord: Optional[Sequence[int]]) -> None:
        if self.interaction_mode != "spell" or self.selected_spell is None:
            return
        if coord is None:
            self.spell_hovered_target = None
            return
        coord = TileCoord(*coord)
        self.spell_hovered_target = coord if coord in self.spell_range_tile_keys else None

    def cast_spell(self, target: Sequence[int]) -> None:
        """
        Cast the selected spell on a tile in range.

        AP is spent even if nobody stands there. A living unit on the tile
        takes rolled damage; HP is floored at 0 and 0 HP means defeated.
        """
        spell = self.selected_spell
        if spell is None or self.interaction_mode != "spell":
            return
        if self.combat_status != "active" or not self.is_player_turn():
            return

        target = TileCoord(*target)
        if target not in self.spell_range_tile_keys:
            return

        caster = self.active_unit
        if caster.current_ap < spell.ap_cost:
            return

        caster.current_ap -= spell.ap_cost
        self.feedback.add_floating_number(spell.ap_cost, "ap", caster.position, now=self.clock.now)

        victim = self.unit_at(target)
        damage = 0
        if victim is not None:
            damage = roll_spell_damage(spell, caster.player.bonus_stats, self.rng)
            victim.current_hp = max(0, victim.current_hp - damage)
            victim.defeated = victim.current_hp == 0
            self.feedback.add_floating_number(damage, "damage", target, now=self.clock.now)
            logger.debug(
                f"{caster.name} casts {spell.name} on {victim.name} for {damage} "
                f"({victim.current_hp}/{victim.max_hp} HP left)"
            )
        else:
            logger.debug(f"{caster.name} casts {spell.name} on empty tile {target}")

        telemetry.log(
            "spell_cast",
            caster=caster.player.id,
            spell=spell.id,
            target=list(target),
            victim=victim.player.id if victim else None,
            damage=damage,
        )

        self._clear_spell_state()

        result = self.check_combat_end()
        if result != "active":
            self.combat_status = result
            self.clear_turn_timer()
            logger.info(f"Combat over: {result} on turn {self.turn_number}")
            telemetry.log("combat_end", result=result, turn=self.turn_number)

        self.compute_reachable()

    # ------------ Teardown ------------

    def shutdown(self) -> None:
        """Cancel every outstanding timer; the session stays readable."""
        self.clear_turn_timer()
        self.clock.cancel_all()
        self._auto_pass = None
        self._generation += 1
