"""
Game configuration system for saving/loading user preferences.
"""

import json
from pathlib import Path
from typing import Optional, Dict, Any, Tuple

from settings import (
    WINDOW_WIDTH,
    WINDOW_HEIGHT,
    TURN_TIMER_DURATION,
    ENEMY_AUTO_PASS_DELAY,
)
from engine.error_handler import logger

# Config file location
CONFIG_DIR = Path(__file__).resolve().parent.parent / "config"
CONFIG_FILE = CONFIG_DIR / "settings.json"


class GameConfig:
    """Manages game configuration/settings."""

    def __init__(self) -> None:
        self.width: int = WINDOW_WIDTH
        self.height: int = WINDOW_HEIGHT
        self.fullscreen: bool = False

        # Combat pacing
        self.turn_timer_duration: int = TURN_TIMER_DURATION
        self.enemy_pass_delay: float = ENEMY_AUTO_PASS_DELAY
        # None = seed damage rolls from system entropy
        self.rng_seed: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary for saving."""
        return {
            "width": self.width,
            "height": self.height,
            "fullscreen": self.fullscreen,
            "turn_timer_duration": self.turn_timer_duration,
            "enemy_pass_delay": self.enemy_pass_delay,
            "rng_seed": self.rng_seed,
        }

    def from_dict(self, data: Dict[str, Any]) -> None:
        """Load config from dictionary."""
        self.width = int(data.get("width", WINDOW_WIDTH))
        self.height = int(data.get("height", WINDOW_HEIGHT))
        self.fullscreen = bool(data.get("fullscreen", False))
        self.turn_timer_duration = max(1, int(data.get("turn_timer_duration", TURN_TIMER_DURATION)))
        self.enemy_pass_delay = max(0.0, float(data.get("enemy_pass_delay", ENEMY_AUTO_PASS_DELAY)))
        seed = data.get("rng_seed")
        self.rng_seed = int(seed) if seed is not None else None

    def get_resolution(self) -> Tuple[int, int]:
        return (self.width, self.height)

    def save(self, path: Path = CONFIG_FILE) -> bool:
        """Save config to file."""
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with path.open("w", encoding="utf-8") as f:
                json.dump(self.to_dict(), f, indent=2)
            return True
        except OSError as e:
            logger.error(f"Error saving config: {e}")
            return False

    def load(self, path: Path = CONFIG_FILE) -> bool:
        """Load config from file."""
        if not path.exists():
            return False

        try:
            with path.open("r", encoding="utf-8") as f:
                data = json.load(f)
            self.from_dict(data)
            return True
        except (OSError, ValueError, TypeError) as e:
            logger.error(f"Error loading config: {e}")
            return False


# Global config instance
_config = GameConfig()


def get_config() -> GameConfig:
    """Get the global config instance."""
    return _config


def load_config() -> GameConfig:
    """Load and return the config."""
    _config.load()
    return _config


def save_config() -> bool:
    """Save the global config."""
    return _config.save()
