"""Level thresholds and computation.

Levels past the end of LEVEL_TITLES share the terminal title.
"""

from __future__ import annotations

LEVEL_TITLES: tuple[str, ...] = (
    "Void Initiate",
    "Curious Coder",
    "Rust Apprentice",
    "Contract Tinkerer",
    "Builder",
    "Deployer",
    "Architect",
    "Protocol Engineer",
    "Void Commander",
    "Void Master",
    "Mythic",
)

# Cumulative XP required to reach each level, level 1 first.
_CUMULATIVE_XP: tuple[int, ...] = (
    0,
    100,
    250,
    500,
    1000,
    1750,
    2750,
    4000,
    5500,
    7500,
    10000,
    13000,
    16500,
    20500,
    25000,
)

MAX_LEVEL = len(_CUMULATIVE_XP)


def title_for_level(level: int) -> str:
    """Title for a 1-based level."""
    index = min(max(level, 1), len(LEVEL_TITLES)) - 1
    return LEVEL_TITLES[index]


LEVEL_THRESHOLDS: list[dict] = [
    {
        "level": i + 1,
        "title": title_for_level(i + 1),
        "xp_required": cumulative - (_CUMULATIVE_XP[i - 1] if i else 0),
        "cumulative": cumulative,
    }
    for i, cumulative in enumerate(_CUMULATIVE_XP)
]


def get_level(total_xp: int) -> dict:
    """Compute level info from total XP.

    ``progress`` is a percentage in [0, 100]. At the max level the step size
    is held at the last defined gap and progress saturates at 100.
    """
    total_xp = max(total_xp, 0)

    index = 0
    for i, cumulative in enumerate(_CUMULATIVE_XP):
        if total_xp >= cumulative:
            index = i

    level = index + 1
    current_xp = total_xp - _CUMULATIVE_XP[index]

    if level < MAX_LEVEL:
        next_level_xp = _CUMULATIVE_XP[index + 1] - _CUMULATIVE_XP[index]
        progress = min(max(100.0 * current_xp / next_level_xp, 0.0), 100.0)
    else:
        next_level_xp = _CUMULATIVE_XP[-1] - _CUMULATIVE_XP[-2]
        progress = 100.0

    return {
        "level": level,
        "current_xp": current_xp,
        "next_level_xp": next_level_xp,
        "progress": progress,
        "title": title_for_level(level),
        "next_title": title_for_level(min(level + 1, MAX_LEVEL)),
    }


def all_levels() -> list[dict]:
    """Every defined level, for presentation."""
    return [dict(t) for t in LEVEL_THRESHOLDS]
