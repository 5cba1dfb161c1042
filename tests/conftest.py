"""
Pytest configuration and shared fixtures.

This file is automatically discovered by pytest and provides fixtures
available to all test files.
"""

import os
import random

# No window needed for rendering tests
os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

import pytest
import pygame
from typing import Generator

from engine.battle.session import CombatSession
from engine.battle.types import CombatSetup, EnemySpawn
from world.entities import create_player
from world.grid import MapDefinition, TileCoord


OPEN_5X5 = MapDefinition(
    name="Open 5x5",
    layout=(
        ".....",
        ".....",
        ".....",
        ".....",
        ".....",
    ),
)


@pytest.fixture
def pygame_init() -> Generator[None, None, None]:
    """
    Initialize pygame for tests that draw.
    """
    pygame.init()
    pygame.display.set_mode((800, 600))
    yield
    pygame.quit()


@pytest.fixture
def sample_screen(pygame_init) -> pygame.Surface:
    """
    Create a sample pygame surface for tests that need a screen.
    """
    return pygame.Surface((800, 600))


@pytest.fixture
def sample_player():
    """
    A fresh knight profile with default AP 6 / MP 3.
    """
    return create_player("p1", "Hero", "knight")


@pytest.fixture
def open_setup() -> CombatSetup:
    """
    One player at (2,2) and one enemy at (4,4) on an open 5x5 map.
    """
    return CombatSetup(
        map=OPEN_5X5,
        player_start_positions=(TileCoord(2, 2),),
        enemies=(EnemySpawn(id="e1", name="Dummy", position=TileCoord(4, 4)),),
    )


@pytest.fixture
def session() -> CombatSession:
    """
    A combat session with a seeded RNG, not yet initialised.
    """
    return CombatSession(rng=random.Random(1234))


@pytest.fixture
def started_session(session, open_setup, sample_player) -> CombatSession:
    """
    Session already running on the open 5x5 setup, player to act.
    """
    session.init_combat(open_setup, [sample_player])
    return session
