# engine/game.py

from pathlib import Path
from typing import Optional

from engine.battle.session import CombatSession
from engine.battle.types import CombatSetup
from engine.config import GameConfig, get_config
from engine.error_handler import logger
from engine.utils.save_system import SAVE_DIR, load_player, save_player
from systems import inventory as inventory_system
from systems.inventory import Item, default_inventory
from telemetry.logger import telemetry
from world.entities import Player, create_player


DEFAULT_PLAYER_ID = "player1"


class GameMode:
    NORMAL = "normal"
    COMBAT = "combat"


class Game:
    """
    Core game object.

    Modes:
    - "normal": out of combat; the profile's gear and bag can change
    - "combat": a CombatSession is running for the active setup

    The player profile lives here and is handed to each new battle. It is
    loaded from save_dir when a save exists and written back after every
    battle.
    """

    def __init__(
        self,
        player: Optional[Player] = None,
        config: Optional[GameConfig] = None,
        save_dir: Path = SAVE_DIR,
    ) -> None:
        self.config = config or get_config()
        self.mode = GameMode.NORMAL
        self.save_dir = save_dir

        if player is None:
            player = load_player(DEFAULT_PLAYER_ID, save_dir)
        if player is None:
            player = create_player(DEFAULT_PLAYER_ID, "xAlban", "bomberman")
            player.inventory = default_inventory()
        self.player = player

        self.active_combat_setup: Optional[CombatSetup] = None
        self.session: Optional[CombatSession] = None
        self.last_combat_result: Optional[str] = None

    # ------------------------------------------------------------------
    # Mode helpers
    # ------------------------------------------------------------------

    def enter_combat(self, setup: CombatSetup) -> CombatSession:
        """Switch into combat mode and start a battle for `setup`."""
        prev = self.mode
        if self.session is None:
            self.session = CombatSession.from_config(self.config)
        self.session.init_combat(setup, [self.player])

        self.mode = GameMode.COMBAT
        self.active_combat_setup = setup
        self.last_combat_result = None
        telemetry.log("mode_change", frm=prev, to=self.mode, map=setup.map.name)
        return self.session

    def exit_combat(self) -> None:
        """Leave combat; outstanding timers of the battle are cancelled."""
        if self.mode != GameMode.COMBAT:
            return
        prev = self.mode
        if self.session is not None:
            self.last_combat_result = self.session.combat_status
            self.session.shutdown()
        self.mode = GameMode.NORMAL
        self.active_combat_setup = None
        logger.info(f"Left combat ({self.last_combat_result})")
        telemetry.log("mode_change", frm=prev, to=self.mode, result=self.last_combat_result)
        telemetry.set_context()

        self.save()

    def update(self, dt: float) -> None:
        if self.mode == GameMode.COMBAT and self.session is not None:
            self.session.update(dt)

    # ------------------------------------------------------------------
    # Profile: bag & gear (out of combat only)
    # ------------------------------------------------------------------

    def _gear_locked(self) -> bool:
        return self.mode == GameMode.COMBAT

    def add_item(self, item: Item, quantity: int = 1) -> None:
        inventory_system.add_item_to_inventory(self.player, item, quantity)

    def remove_item(self, item_id: str, quantity: int = 1) -> bool:
        return inventory_system.remove_item_from_inventory(self.player, item_id, quantity)

    def equip(self, item_id: str) -> str:
        if self._gear_locked():
            return "You can't change gear in the middle of a fight."
        return inventory_system.equip_item(self.player, item_id)

    def unequip(self, slot: str) -> str:
        if self._gear_locked():
            return "You can't change gear in the middle of a fight."
        return inventory_system.unequip_item(self.player, slot)

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def save(self) -> bool:
        """Write the player profile to save_dir. False if the write failed."""
        return save_player(self.player, self.save_dir)
