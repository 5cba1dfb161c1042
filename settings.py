# settings.py

# Window / display
WINDOW_WIDTH = 1280
WINDOW_HEIGHT = 720
FPS = 60
TITLE = "Tactics Arena"

# Colors
COLOR_BG = (15, 15, 20)
COLOR_PLAYER = (220, 210, 90)
COLOR_ENEMY = (200, 80, 80)
COLOR_GROUND = (58, 62, 78)
COLOR_OBSTACLE = (30, 30, 38)
COLOR_REACHABLE = (70, 120, 200)
COLOR_PATH = (120, 200, 255)
COLOR_SPELL_RANGE = (200, 110, 60)
COLOR_SPELL_TARGET = (255, 170, 90)

# Battle grid (screen space, pixels)
BATTLE_CELL_SIZE = 64
MOVE_STEP_DURATION = 0.15  # seconds per tile of the move animation

# Combat rules
TURN_TIMER_DURATION = 30      # seconds per player turn
DEFAULT_UNIT_HP = 50          # health stat is not wired into HP yet
ENEMY_AUTO_PASS_DELAY = 0.5   # seconds before an enemy passes
TURN_TIMER_TICK = 1.0

# Player defaults
BASE_AP = 6
BASE_MP = 3

# Feedback
FLOATING_NUMBER_DURATION = 1.5
