"""
Centralized error handling and logging system.

This module provides:
- The "tactics" logger (file + console handlers)
- Custom exception types for data and save errors
- log_error() for recording exceptions with their traceback

Player input never raises: illegal combat commands are silent no-ops.
Exceptions here are reserved for bad static data and persistence failures.
"""
import logging
import traceback
from pathlib import Path
from typing import Optional
from datetime import datetime

# Setup logging directory
LOG_DIR = Path(__file__).resolve().parent.parent / "logs"

# Configure logger
logger = logging.getLogger("tactics")
logger.setLevel(logging.DEBUG)

# Prevent duplicate handlers
if not logger.handlers:
    # Console handler for warnings/errors
    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.WARNING)
    console_handler.setFormatter(
        logging.Formatter('%(levelname)s: %(message)s')
    )
    logger.addHandler(console_handler)


def enable_file_logging(log_dir: Path = LOG_DIR) -> Path:
    """
    Attach a DEBUG-level file handler writing to log_dir/game_YYYYMMDD.log.

    Called by main() at startup; tests and library users get console
    warnings only unless they opt in.
    """
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / f"game_{datetime.now().strftime('%Y%m%d')}.log"
    for handler in logger.handlers:
        if isinstance(handler, logging.FileHandler) and Path(handler.baseFilename) == log_file.resolve():
            return log_file

    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(
        logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    )
    logger.addHandler(file_handler)
    return log_file


class GameError(Exception):
    """Base exception for game-specific errors."""
    def __init__(self, message: str, user_message: Optional[str] = None):
        super().__init__(message)
        self.user_message = user_message or message


class SaveError(GameError):
    """Error during save/load operations."""
    pass


class ValidationError(GameError):
    """Error when static definition data fails validation."""
    pass


def log_error(
    error: Exception,
    context: str = "",
) -> None:
    """
    Log an error with context information.

    Args:
        error: The exception that occurred
        context: Where the error occurred (e.g., "save_player", "load_items")
    """
    error_type = type(error).__name__
    error_msg = str(error)
    trace = "".join(traceback.format_exception(type(error), error, error.__traceback__))

    logger.error(f"Error in {context}: {error_type}: {error_msg}\n{trace}")
