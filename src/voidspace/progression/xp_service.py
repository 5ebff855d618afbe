"""Activity XP calculation.

The per-action weights below are applied live to historical counters, so
changing one re-prices every account's existing activity. Treat any edit as
a migration.
"""

from __future__ import annotations

from collections.abc import Iterable

from voidspace.progression.catalog import ACHIEVEMENTS, Achievement
from voidspace.progression.counters import ActivityCounters
from voidspace.progression.ledger import achievement_xp

XP_MESSAGE = 5
XP_CODE_GENERATION = 25
XP_CONTRACT_DEPLOYED = 100
XP_CONCEPT = 15
XP_QUIZ_STREAK = 20


def calculate_activity_xp(
    sanctum_messages: int,
    code_generations: int,
    contracts_deployed: int,
    concepts_learned: int,
    max_quiz_streak: int,
) -> int:
    """Weighted sum of raw activity counts. Inputs are not clamped."""
    return (
        sanctum_messages * XP_MESSAGE
        + code_generations * XP_CODE_GENERATION
        + contracts_deployed * XP_CONTRACT_DEPLOYED
        + concepts_learned * XP_CONCEPT
        + max_quiz_streak * XP_QUIZ_STREAK
    )


def activity_xp(counters: ActivityCounters) -> int:
    """Activity XP for a counters record."""
    return calculate_activity_xp(
        counters.sanctum_messages,
        counters.code_generations,
        counters.contracts_deployed,
        counters.concepts_learned,
        counters.max_quiz_streak,
    )


def total_xp(
    counters: ActivityCounters,
    unlocked: Iterable[str],
    catalog: Iterable[Achievement] = ACHIEVEMENTS,
) -> int:
    """Activity XP plus achievement XP. There are no other XP sources."""
    return activity_xp(counters) + achievement_xp(unlocked, catalog)
