from typing import Dict, List, Optional, Tuple

import pygame

from settings import MOVE_STEP_DURATION
from engine.battle.renderer import BattleRenderer
from engine.battle.session import CombatSession
from systems.spells import DEFAULT_SPELLS

SPELL_KEYS = {
    pygame.K_1: 0,
    pygame.K_2: 1,
}


class BattleScene:
    """
    pygame front-end for a CombatSession.

    - Mouse hover previews paths / spell targets
    - Left click moves, or casts when a spell is selected
    - 1/2 select a spell, Esc or right click cancels it
    - Space passes the turn

    Moves are played back by sliding the unit along session.movement_path;
    when the slide ends the scene tells the session the animation is over.
    """

    def __init__(self, session: CombatSession, font: pygame.font.Font, center: Tuple[int, int]) -> None:
        self.session = session
        self.renderer = BattleRenderer(session, font, center)
        self.finished = False

        # --- Move animation ---
        self._anim_unit: Optional[int] = None
        self._anim_path: List[Tuple[int, int]] = []
        self._anim_t: float = 0.0

    # ------------ Input ------------

    def handle_event(self, event: pygame.event.Event) -> None:
        s = self.session

        if s.combat_status != "active":
            if event.type in (pygame.KEYDOWN, pygame.MOUSEBUTTONDOWN):
                self.finished = True
            return

        if event.type == pygame.MOUSEMOTION:
            s.set_hovered_tile(self.renderer.tile_at(event.pos))
            return

        if event.type == pygame.MOUSEBUTTONDOWN:
            if event.button == 3:
                s.cancel_spell()
                return
            if event.button != 1:
                return
            coord = self.renderer.tile_at(event.pos)
            if coord is None:
                return
            if s.interaction_mode == "spell":
                s.cast_spell(coord)
            else:
                s.execute_move(coord)
                if s.is_moving:
                    self._start_move_animation()
            return

        if event.type != pygame.KEYDOWN:
            return

        if event.key == pygame.K_SPACE:
            s.pass_turn()
        elif event.key == pygame.K_ESCAPE:
            s.cancel_spell()
        elif event.key in SPELL_KEYS:
            index = SPELL_KEYS[event.key]
            if index < len(DEFAULT_SPELLS):
                s.select_spell(DEFAULT_SPELLS[index])

    # ------------ Move animation ------------

    def _start_move_animation(self) -> None:
        self._anim_unit = self.session.active_unit_index
        self._anim_path = [self.renderer.tile_center(c) for c in self.session.movement_path]
        self._anim_t = 0.0

    def _animated_position(self) -> Optional[Tuple[float, float]]:
        if self._anim_unit is None or len(self._anim_path) < 2:
            return None
        progress = self._anim_t / MOVE_STEP_DURATION
        step = min(int(progress), len(self._anim_path) - 2)
        frac = min(1.0, progress - step)
        (x0, y0), (x1, y1) = self._anim_path[step], self._anim_path[step + 1]
        return (x0 + (x1 - x0) * frac, y0 + (y1 - y0) * frac)

    def _update_move_animation(self, dt: float) -> None:
        if self._anim_unit is None:
            return
        self._anim_t += dt
        if self._anim_t >= MOVE_STEP_DURATION * (len(self._anim_path) - 1):
            self._anim_unit = None
            self._anim_path = []
            self.session.set_is_moving(False)

    # ------------ Loop hooks ------------

    def update(self, dt: float) -> None:
        self._update_move_animation(dt)
        self.session.update(dt)

    def draw(self, surface: pygame.Surface) -> None:
        overrides: Dict[int, Tuple[float, float]] = {}
        pos = self._animated_position()
        if pos is not None and self._anim_unit is not None:
            overrides[self._anim_unit] = pos
        self.renderer.draw(surface, overrides)
