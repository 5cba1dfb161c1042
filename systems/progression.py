# systems/progression.py

from dataclasses import dataclass


def xp_for_level(level: int) -> int:
    """XP required to go from `level` to `level + 1`. Linear for now."""
    return level * 100


@dataclass
class LevelProgress:
    """
    XP and level tracking for a player profile.

    - level:            current level (starts at 1)
    - current_xp:       XP gathered towards the next level
    - xp_to_next_level: threshold for the next level-up
    """
    level: int = 1
    current_xp: int = 0
    xp_to_next_level: int = xp_for_level(1)


def add_xp(progress: LevelProgress, amount: int) -> LevelProgress:
    """
    Add XP and return the new progress.

    Overflow carries over, so a big reward can grant several levels at once.
    The input is left untouched.
    """
    level = progress.level
    current_xp = progress.current_xp + amount
    xp_to_next = progress.xp_to_next_level

    while current_xp >= xp_to_next:
        current_xp -= xp_to_next
        level += 1
        xp_to_next = xp_for_level(level)

    return LevelProgress(level=level, current_xp=current_xp, xp_to_next_level=xp_to_next)
