"""
Battle engine module.

This module contains all battle-related engine code, split into logical components:
- session.py: CombatSession, the turn / action / timer state machine
- pathfinding.py: BFS reachability and path reconstruction
- combat.py: Spell range and damage calculations
- timers.py: BattleClock, dt-driven one-shot and repeating timers
- feedback.py: Floating number log (damage / AP / MP popups)
- types.py: Battle dataclasses (CombatUnit, CombatSetup, EnemySpawn)
- renderer.py: pygame drawing (imported separately so the core stays headless)
"""

from .session import CombatSession
from .types import CombatSetup, CombatUnit, EnemySpawn

__all__ = ["CombatSession", "CombatSetup", "CombatUnit", "EnemySpawn"]
