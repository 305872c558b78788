"""
Leveling curve - XP thresholds for student progression levels.

Levels 1-10 use a hand-tuned table; beyond that the curve is
floor(100 * (level - 1) ** 1.5). The raw curve dips below the table at
levels 11 and 12 (3162 and 3648 < 4100), so every threshold is clamped to
at least one XP above the previous level to keep the curve strictly
increasing.
"""

import math

# XP required to reach levels 1..10 (index = level - 1)
LEVEL_THRESHOLDS = (0, 100, 250, 500, 850, 1300, 1850, 2500, 3250, 4100)


def _curve(level: int) -> int:
    return math.floor(100 * math.pow(level - 1, 1.5))


def get_xp_for_level(level: int) -> int:
    """Total XP needed to reach `level` (level >= 1)."""
    if level < 1:
        raise ValueError("level must be >= 1")
    if level <= len(LEVEL_THRESHOLDS):
        return LEVEL_THRESHOLDS[level - 1]

    threshold = LEVEL_THRESHOLDS[-1]
    for lvl in range(len(LEVEL_THRESHOLDS) + 1, level + 1):
        threshold = max(_curve(lvl), threshold + 1)
    return threshold


def calculate_level(xp: int) -> int:
    """Largest level L >= 1 whose threshold is <= xp."""
    level = 1
    while get_xp_for_level(level + 1) <= xp:
        level += 1
    return level


def get_xp_for_next_level(current_level: int) -> int:
    """XP threshold of the level after `current_level`."""
    return get_xp_for_level(current_level + 1)
