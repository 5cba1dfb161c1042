import sys
from pathlib import Path

import pygame

from settings import TITLE, FPS, COLOR_BG
from engine.battle_scene import BattleScene
from engine.config import load_config
from engine.error_handler import enable_file_logging, logger
from engine.game import Game
from telemetry.logger import telemetry
from world.encounters import PORTAL_COMBAT_SETUP

TELEMETRY_FILE = Path(__file__).resolve().parent / "logs" / "telemetry.jsonl"


def main() -> None:
    config = load_config()
    enable_file_logging()
    telemetry.init(TELEMETRY_FILE)

    pygame.init()
    pygame.display.set_caption(TITLE)

    flags = pygame.FULLSCREEN if config.fullscreen else 0
    screen = pygame.display.set_mode(config.get_resolution(), flags)
    clock = pygame.time.Clock()
    font = pygame.font.Font(None, 24)

    game = Game(config=config)
    session = game.enter_combat(PORTAL_COMBAT_SETUP)
    width, height = config.get_resolution()
    scene = BattleScene(session, font, (width // 2, height // 2 + 40))

    # --- Main loop ---
    running = True
    while running:
        dt = clock.tick(FPS) / 1000.0

        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
                continue
            scene.handle_event(event)

        scene.update(dt)

        if scene.finished:
            game.exit_combat()
            logger.info(f"Battle finished: {game.last_combat_result}")
            # Straight into the next fight with a fresh roster.
            session = game.enter_combat(PORTAL_COMBAT_SETUP)
            scene = BattleScene(session, font, (width // 2, height // 2 + 40))

        screen.fill(COLOR_BG)
        scene.draw(screen)
        pygame.display.flip()

    game.exit_combat()
    pygame.quit()
    sys.exit()


if __name__ == "__main__":
    main()
