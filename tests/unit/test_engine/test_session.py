"""
Unit tests for the combat session state machine.
"""

import random

import pytest
from engine.battle.session import CombatSession
from engine.battle.types import CombatSetup, EnemySpawn
from engine.config import GameConfig
from systems.inventory import add_item_to_inventory, equip_item, get_item_def
from systems.spells import SPELL_FIREBALL, SPELL_MELEE_STRIKE, SpellDamage, SpellDefinition
from world.entities import create_player
from world.grid import MapDefinition, TileCoord


OPEN_5X5 = MapDefinition(name="Open 5x5", layout=(".....",) * 5)

FIXED_EARTH_HIT = SpellDefinition(
    id="fixed-earth-hit",
    name="Fixed Hit",
    description="",
    ap_cost=3,
    min_range=1,
    max_range=1,
    damages=(SpellDamage(element="earth", min_damage=5, max_damage=5),),
)


def _setup(*enemy_positions, player_positions=((2, 2),), map_def=OPEN_5X5):
    return CombatSetup(
        map=map_def,
        player_start_positions=tuple(TileCoord(*p) for p in player_positions),
        enemies=tuple(
            EnemySpawn(id=f"e{i}", name=f"Dummy {i}", position=TileCoord(*pos))
            for i, pos in enumerate(enemy_positions, start=1)
        ),
    )


def _start(session, setup, players=None):
    session.init_combat(setup, players if players is not None else [create_player("p1", "Hero", "knight")])
    return session


class TestInit:
    """Tests for starting a battle."""

    def test_fresh_session_queries_are_safe(self, session):
        """Test that a session with no battle ignores every call."""
        assert session.active_unit is None
        assert not session.is_player_turn()
        assert session.hovered_damage_preview() is None
        session.compute_reachable()
        session.end_turn()
        session.execute_move((0, 0))
        assert session.units == []

    def test_roster_and_initial_state(self, started_session):
        """Test the roster and state right after init."""
        s = started_session
        assert [u.team for u in s.units] == ["player", "enemy"]
        assert s.active_unit_index == 0
        assert s.turn_number == 1
        assert s.combat_status == "active"
        assert s.interaction_mode == "movement"
        assert s.turn_time_remaining == 30
        assert s.timer_running

    def test_units_start_full(self, started_session):
        """Test that every unit starts with full HP, AP and MP."""
        for unit in started_session.units:
            assert unit.current_hp == unit.max_hp == 50
            assert unit.current_ap == 6
            assert unit.current_mp == 3
            assert not unit.defeated

    def test_reachable_computed_on_init(self, started_session):
        """3 MP from the centre of an open 5x5: 4 + 8 + 8 tiles."""
        s = started_session
        assert len(s.reachable_tiles) == 20
        assert TileCoord(2, 2) not in s.reachable_tile_keys
        assert TileCoord(2, 0) in s.reachable_tile_keys

    def test_extra_players_are_left_out(self, session, open_setup):
        """Test that players beyond the start tiles are not spawned."""
        players = [create_player("p1", "A", "knight"), create_player("p2", "B", "mage")]
        session.init_combat(open_setup, players)
        assert [u.player.id for u in session.units] == ["p1", "e1"]

    def test_from_config_uses_pacing_and_seed(self):
        """Test that config pacing and seed reach the session."""
        config = GameConfig()
        config.turn_timer_duration = 10
        config.enemy_pass_delay = 1.0
        config.rng_seed = 5
        s = CombatSession.from_config(config)
        assert s.turn_timer_duration == 10
        assert s.enemy_pass_delay == 1.0
        assert s.rng.random() == random.Random(5).random()


class TestMovement:
    """Tests for moving the active unit."""

    def test_move_spends_mp(self, started_session):
        """Test that a two-step move spends 2 MP and starts walking."""
        s = started_session
        s.execute_move((2, 0))
        unit = s.units[0]
        assert unit.position == TileCoord(2, 0)
        assert unit.current_mp == 1
        assert s.is_moving
        assert s.movement_path == [TileCoord(2, 2), TileCoord(2, 1), TileCoord(2, 0)]
        assert s.reachable_tiles == []

    def test_move_reports_mp_feedback(self, started_session):
        """Test that a move shows the MP spent on the target tile."""
        s = started_session
        s.execute_move((2, 0))
        numbers = s.feedback.of_kind("mp")
        assert len(numbers) == 1
        assert numbers[0].value == 2
        assert numbers[0].tile == TileCoord(2, 0)

    def test_second_move_while_moving_is_ignored(self, started_session):
        """Test that a move during the walk animation is ignored."""
        s = started_session
        s.execute_move((2, 0))
        s.execute_move((2, 1))
        assert s.units[0].position == TileCoord(2, 0)
        assert s.units[0].current_mp == 1

    def test_move_end_recomputes_reachable(self, started_session):
        """Test that ending the walk recomputes the reachable tiles."""
        s = started_session
        s.execute_move((2, 0))
        s.set_is_moving(False)
        assert not s.is_moving
        assert set(s.reachable_tiles) == {TileCoord(2, 1), TileCoord(1, 0), TileCoord(3, 0)}

    def test_spending_all_mp_stops_movement(self, started_session):
        """Three single steps use up all 3 MP; a fourth move does nothing."""
        s = started_session
        for step in ((2, 1), (2, 0), (1, 0)):
            s.execute_move(step)
            s.set_is_moving(False)

        unit = s.units[0]
        assert unit.position == TileCoord(1, 0)
        assert unit.current_mp == 0
        assert s.reachable_tiles == []

        s.execute_move((0, 0))
        assert unit.position == TileCoord(1, 0)
        assert unit.current_mp == 0
        assert not s.is_moving

    def test_move_out_of_reach_is_ignored(self, started_session):
        """Test that a move beyond the MP budget is ignored."""
        s = started_session
        s.execute_move((0, 0))
        assert s.units[0].position == TileCoord(2, 2)
        assert s.units[0].current_mp == 3
        assert not s.is_moving

    def test_move_to_own_tile_is_ignored(self, started_session):
        """Test that moving onto the unit's own tile is ignored."""
        s = started_session
        s.execute_move((2, 2))
        assert not s.is_moving
        assert s.units[0].current_mp == 3

    def test_units_block_movement(self, session):
        """Test that a living unit's tile cannot be entered."""
        s = _start(session, _setup((2, 1)))
        assert TileCoord(2, 1) not in s.reachable_tile_keys
        s.execute_move((2, 1))
        assert s.units[0].position == TileCoord(2, 2)

    def test_defeated_units_do_not_block(self, session):
        """Test that a defeated unit's tile can be entered."""
        s = _start(session, _setup((2, 1), (4, 4)))
        s.units[1].defeated = True
        s.compute_reachable()
        assert TileCoord(2, 1) in s.reachable_tile_keys

    def test_defeated_unit_is_not_alive(self, session):
        """is_alive drops the unit from occupancy and the living roster."""
        s = _start(session, _setup((2, 1), (4, 4)))
        enemy = s.units[1]
        assert enemy.is_alive
        enemy.defeated = True
        assert not enemy.is_alive
        assert s.unit_at((2, 1)) is None
        assert enemy not in s.living_units("enemy")

    def test_obstacles_block_movement(self, session):
        """Test that a row of obstacles cuts the grid in two."""
        walled = MapDefinition(name="Walled", layout=("...", "XXX", "..."))
        s = _start(session, _setup((2, 2), player_positions=((0, 0),), map_def=walled))
        assert TileCoord(0, 2) not in s.reachable_tile_keys


class TestHover:
    """Tests for hovering tiles in movement mode."""

    def test_hover_reachable_tile_builds_preview(self, started_session):
        """Test that hovering a reachable tile builds the path preview."""
        s = started_session
        s.set_hovered_tile((2, 0))
        assert s.hovered_tile == TileCoord(2, 0)
        assert s.preview_path == [TileCoord(2, 2), TileCoord(2, 1), TileCoord(2, 0)]
        assert s.preview_path_keys == set(s.preview_path)

    def test_hover_own_tile_shows_zone_without_path(self, started_session):
        """Test that hovering the unit's own tile gives no path."""
        s = started_session
        s.set_hovered_tile((2, 2))
        assert s.hovered_tile == TileCoord(2, 2)
        assert s.preview_path == []

    def test_hover_unreachable_clears(self, started_session):
        """Test that hovering an unreachable tile clears the preview."""
        s = started_session
        s.set_hovered_tile((2, 0))
        s.set_hovered_tile((0, 0))
        assert s.hovered_tile is None
        assert s.preview_path == []

    def test_hover_none_clears(self, started_session):
        """Test that leaving the grid clears the hover."""
        s = started_session
        s.set_hovered_tile((2, 0))
        s.set_hovered_tile(None)
        assert s.hovered_tile is None

    def test_hover_ignored_while_moving(self, started_session):
        """Test that hover is ignored during the walk animation."""
        s = started_session
        s.execute_move((2, 0))
        s.set_hovered_tile((2, 1))
        assert s.hovered_tile is None


class TestSpells:
    """Tests for selecting and casting spells."""

    def test_select_spell_enters_spell_mode(self, started_session):
        """Test that selecting a spell shows its range."""
        s = started_session
        s.select_spell(SPELL_FIREBALL)
        assert s.interaction_mode == "spell"
        assert s.selected_spell is SPELL_FIREBALL
        assert TileCoord(2, 2) not in s.spell_range_tile_keys
        assert TileCoord(2, 0) in s.spell_range_tile_keys

    def test_select_without_ap_is_rejected(self, started_session):
        """Test that a spell costing more than the AP left is refused."""
        s = started_session
        s.units[0].current_ap = 2
        s.select_spell(SPELL_MELEE_STRIKE)
        assert s.selected_spell is None
        assert s.interaction_mode == "movement"

    def test_cancel_spell_restores_movement(self, started_session):
        """Test that cancelling restores the movement zone."""
        s = started_session
        s.select_spell(SPELL_MELEE_STRIKE)
        s.cancel_spell()
        assert s.interaction_mode == "movement"
        assert s.selected_spell is None
        assert s.spell_range_tiles == []
        assert len(s.reachable_tiles) == 20

    def test_move_blocked_in_spell_mode(self, started_session):
        """Test that moves are ignored while a spell is selected."""
        s = started_session
        s.select_spell(SPELL_MELEE_STRIKE)
        s.execute_move((2, 0))
        assert s.units[0].position == TileCoord(2, 2)

    def test_spell_hover_and_preview(self, started_session):
        """Test the damage preview on a hovered target."""
        s = started_session
        s.select_spell(SPELL_MELEE_STRIKE)
        s.set_hovered_tile((2, 1))
        assert s.spell_hovered_target == TileCoord(2, 1)
        preview = s.hovered_damage_preview()
        assert preview.total_min_damage == 8
        assert preview.total_max_damage == 12

    def test_spell_hover_out_of_range(self, started_session):
        """Test that an out-of-range hover gives no preview."""
        s = started_session
        s.select_spell(SPELL_MELEE_STRIKE)
        s.set_hovered_tile((0, 0))
        assert s.spell_hovered_target is None
        assert s.hovered_damage_preview() is None

    def test_cast_on_empty_tile_spends_ap(self, started_session):
        """Test that a cast on an empty tile still costs AP."""
        s = started_session
        s.select_spell(SPELL_MELEE_STRIKE)
        s.cast_spell((2, 1))
        assert s.units[0].current_ap == 3
        assert s.interaction_mode == "movement"
        assert s.selected_spell is None
        assert s.feedback.of_kind("damage") == []
        assert [n.value for n in s.feedback.of_kind("ap")] == [3]
        assert s.combat_status == "active"

    def test_cast_out_of_range_is_ignored(self, started_session):
        """Test that a cast out of range is ignored."""
        s = started_session
        s.select_spell(SPELL_MELEE_STRIKE)
        s.cast_spell((0, 0))
        assert s.units[0].current_ap == 6
        assert s.interaction_mode == "spell"

    def test_cast_without_selection_is_ignored(self, started_session):
        """Test that a cast with no spell selected is ignored."""
        s = started_session
        s.cast_spell((2, 1))
        assert s.units[0].current_ap == 6

    def test_cast_damages_enemy(self, session):
        """Test that Strike deals 8-12 damage and shows it."""
        s = _start(session, _setup((2, 1)))
        s.select_spell(SPELL_MELEE_STRIKE)
        s.cast_spell((2, 1))
        enemy = s.units[1]
        lost = 50 - enemy.current_hp
        assert 8 <= lost <= 12
        assert [n.value for n in s.feedback.of_kind("damage")] == [lost]
        assert s.feedback.of_kind("damage")[0].tile == TileCoord(2, 1)
        assert not enemy.defeated

    def test_bonus_stats_add_to_damage(self, session):
        """+20 power lifts an 8-12 earth strike to at least 28."""
        player = create_player("p1", "Hero", "knight")
        player.bonus_stats.power = 20
        s = _start(session, _setup((2, 1)), [player])
        s.select_spell(SPELL_MELEE_STRIKE)
        s.cast_spell((2, 1))
        assert 50 - s.units[1].current_hp >= 28

    def test_equipped_gear_does_not_change_damage(self, session):
        """A fixed 5-5 earth hit deals exactly 5 with a +3 power belt worn."""
        player = create_player("p1", "Hero", "knight")
        add_item_to_inventory(player, get_item_def("leather-belt"))
        equip_item(player, "leather-belt")
        assert player.bonus_stats.power == 0

        s = _start(session, _setup((2, 1)), [player])
        s.select_spell(FIXED_EARTH_HIT)
        s.set_hovered_tile((2, 1))
        preview = s.hovered_damage_preview()
        assert (preview.total_min_damage, preview.total_max_damage) == (5, 5)

        s.cast_spell((2, 1))
        assert s.units[1].current_hp == 45

    def test_killing_last_enemy_wins(self, session):
        """Test that killing the last enemy ends the battle in victory."""
        s = _start(session, _setup((2, 1)))
        s.units[1].current_hp = 1
        s.select_spell(SPELL_MELEE_STRIKE)
        s.cast_spell((2, 1))
        assert s.units[1].current_hp == 0
        assert s.units[1].defeated
        assert s.combat_status == "victory"
        assert not s.timer_running

    def test_terminal_state_ignores_commands(self, session):
        """Test that commands after victory are ignored."""
        s = _start(session, _setup((2, 1)))
        s.units[1].current_hp = 1
        s.select_spell(SPELL_MELEE_STRIKE)
        s.cast_spell((2, 1))

        turn = s.turn_number
        s.pass_turn()
        s.execute_move((2, 0))
        s.select_spell(SPELL_MELEE_STRIKE)
        s.update(60.0)
        assert s.turn_number == turn
        assert s.units[0].position == TileCoord(2, 2)
        assert s.selected_spell is None
        assert s.combat_status == "victory"

    def test_defeated_unit_is_not_a_target(self, session):
        """Test that a defeated unit takes no damage."""
        s = _start(session, _setup((2, 1), (4, 4)))
        s.units[1].current_hp = 0
        s.units[1].defeated = True
        s.select_spell(SPELL_MELEE_STRIKE)
        s.cast_spell((2, 1))
        assert s.feedback.of_kind("damage") == []
        assert s.units[1].current_hp == 0

    def test_check_combat_end(self, started_session):
        """Test the combat status when a whole side is down."""
        s = started_session
        assert s.check_combat_end() == "active"
        s.units[0].defeated = True
        assert s.check_combat_end() == "defeat"


class TestTurns:
    """Tests for turn order and the turn timer."""

    def test_pass_turn_goes_to_enemy(self, started_session):
        """Test that passing hands the turn to the enemy."""
        s = started_session
        s.pass_turn()
        assert s.active_unit_index == 1
        assert s.turn_number == 2
        assert not s.is_player_turn()
        assert not s.timer_running

    def test_player_commands_ignored_on_enemy_turn(self, started_session):
        """Test that player commands are ignored on an enemy turn."""
        s = started_session
        s.pass_turn()
        s.execute_move((2, 0))
        s.select_spell(SPELL_MELEE_STRIKE)
        assert s.units[0].position == TileCoord(2, 2)
        assert s.selected_spell is None

    def test_enemy_auto_passes_after_delay(self, started_session):
        """Test that an enemy passes once the delay runs out."""
        s = started_session
        s.pass_turn()
        s.update(0.4)
        assert s.active_unit_index == 1
        s.update(0.1)
        assert s.active_unit_index == 0
        assert s.turn_number == 3
        assert s.timer_running

    def test_resources_refill_at_turn_start(self, started_session):
        """Test that AP and MP refill at the start of a turn."""
        s = started_session
        s.execute_move((2, 0))
        s.set_is_moving(False)
        s.select_spell(SPELL_MELEE_STRIKE)
        s.cast_spell((2, 1))
        s.pass_turn()
        s.update(0.5)
        assert s.units[0].current_mp == 3
        assert s.units[0].current_ap == 6

    def test_turn_order_skips_defeated(self, session):
        """Test that defeated units are skipped in turn order."""
        s = _start(session, _setup((0, 0), (4, 4)))
        s.units[1].defeated = True
        s.pass_turn()
        assert s.active_unit_index == 2

    def test_turn_resets_interaction_state(self, started_session):
        """Test that a new turn clears the selected spell and hover."""
        s = started_session
        s.select_spell(SPELL_FIREBALL)
        s.pass_turn()
        assert s.interaction_mode == "movement"
        assert s.selected_spell is None
        assert s.hovered_tile is None

    def test_timer_counts_down(self, started_session):
        """Test that the turn timer counts down whole seconds."""
        s = started_session
        s.update(3.0)
        assert s.turn_time_remaining == 27

    def test_timer_expiry_ends_turn(self, started_session):
        """Test that the turn ends when the timer hits zero."""
        s = started_session
        s.update(29.0)
        assert s.is_player_turn()
        assert s.turn_time_remaining == 1
        s.update(1.0)
        assert s.active_unit_index == 1
        assert s.turn_number == 2

    def test_timer_resets_for_next_player_turn(self, started_session):
        """Test that the timer restarts for the next player turn."""
        s = started_session
        s.update(10.0)
        s.pass_turn()
        s.update(0.5)
        assert s.is_player_turn()
        assert s.turn_time_remaining == 30

    def test_manual_pass_during_enemy_turn_is_not_doubled(self, started_session):
        """Test that a pending auto-pass does not fire after a manual pass."""
        s = started_session
        s.pass_turn()
        s.pass_turn()
        assert s.turn_number == 3
        s.update(0.5)
        assert s.turn_number == 3
        assert s.is_player_turn()

    def test_reinit_makes_old_auto_pass_inert(self, started_session, open_setup):
        """Test that a new battle ignores the old battle's auto-pass."""
        s = started_session
        s.pass_turn()
        s.init_combat(open_setup, [create_player("p1", "Hero", "knight")])
        s.update(0.5)
        assert s.turn_number == 1
        assert s.active_unit_index == 0

    def test_enemy_first_roster_auto_passes(self, session, open_setup):
        """Test that a battle opening on an enemy turn auto-passes."""
        session.init_combat(open_setup, [])
        assert not session.is_player_turn()
        session.update(0.5)
        assert session.turn_number == 2

    def test_shutdown_stops_timers(self, started_session):
        """Test that shutdown stops every battle timer."""
        s = started_session
        s.shutdown()
        s.update(60.0)
        assert s.turn_number == 1
        assert s.turn_time_remaining == 30


class TestFeedbackExpiry:
    """Tests for floating numbers inside a battle."""

    def test_numbers_expire_with_battle_time(self, started_session):
        """Test that numbers expire after 1.5 seconds of battle time."""
        s = started_session
        s.execute_move((2, 0))
        s.update(1.0)
        assert len(s.feedback.numbers) == 1
        s.update(0.5)
        assert s.feedback.numbers == []

    def test_init_clears_numbers(self, started_session, open_setup):
        """Test that a new battle starts with no numbers."""
        s = started_session
        s.execute_move((2, 0))
        s.init_combat(open_setup, [create_player("p1", "Hero", "knight")])
        assert s.feedback.numbers == []
