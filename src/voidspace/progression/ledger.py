"""Unlocked-achievement ledger.

The ledger is a plain set of achievement ids. It only ever grows, and its XP
value is always recomputed from the current catalog: correcting an
achievement's reward in the catalog re-prices every account that holds it,
while tightening a predicate never revokes an unlock.
"""

from __future__ import annotations

from collections.abc import Iterable

from voidspace.progression.catalog import ACHIEVEMENTS, RARITIES, Achievement


def merge(unlocked: Iterable[str], ids: Iterable[str]) -> frozenset[str]:
    """Set union. Never removes an id."""
    return frozenset(unlocked) | frozenset(ids)


def achievement_xp(unlocked: Iterable[str], catalog: Iterable[Achievement] = ACHIEVEMENTS) -> int:
    """Sum of catalog rewards for unlocked ids. Ids missing from the catalog are worth 0."""
    held = frozenset(unlocked)
    return sum(a.xp for a in catalog if a.id in held)


def count_by_rarity(
    unlocked: Iterable[str],
    catalog: Iterable[Achievement] = ACHIEVEMENTS,
) -> dict[str, dict[str, int]]:
    """Total and unlocked counts per rarity."""
    held = frozenset(unlocked)
    result = {rarity: {"total": 0, "unlocked": 0} for rarity in RARITIES}
    for a in catalog:
        bucket = result.setdefault(a.rarity, {"total": 0, "unlocked": 0})
        bucket["total"] += 1
        if a.id in held:
            bucket["unlocked"] += 1
    return result


def displayable(unlocked: Iterable[str], catalog: Iterable[Achievement] = ACHIEVEMENTS) -> list[Achievement]:
    """Visible achievements plus any secrets already unlocked."""
    held = frozenset(unlocked)
    return [a for a in catalog if not a.secret or a.id in held]
