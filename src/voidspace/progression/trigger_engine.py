"""Achievement trigger engine: evaluates activity counters against catalog predicates."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from voidspace.progression.catalog import ACHIEVEMENTS, Achievement
from voidspace.progression.counters import ActivityCounters

logger = logging.getLogger(__name__)


def evaluate(
    counters: ActivityCounters,
    unlocked: Iterable[str],
    catalog: Iterable[Achievement] = ACHIEVEMENTS,
) -> list[Achievement]:
    """Return catalog entries newly satisfied by ``counters``.

    Entries already in ``unlocked`` and custom-trigger entries are skipped.
    Passes repeat until nothing new qualifies, so achievements that depend on
    other unlocks resolve within a single call and a second call with the
    merged set returns nothing.
    """
    entries = list(catalog)
    held = frozenset(unlocked)
    awarded: list[Achievement] = []

    while True:
        found = [
            a for a in entries
            if a.id not in held and a.is_satisfied(counters, held)
        ]
        if not found:
            break
        awarded += found
        held = held | {a.id for a in found}

    if awarded:
        logger.debug("Evaluation unlocked %s", [a.id for a in awarded])
    return awarded


def find_custom(
    custom_id: str,
    unlocked: Iterable[str],
    catalog: Iterable[Achievement] = ACHIEVEMENTS,
) -> Achievement | None:
    """First not-yet-unlocked entry bound to ``custom_id``, or None."""
    held = frozenset(unlocked)
    for a in catalog:
        if a.custom_trigger == custom_id and a.id not in held:
            return a
    return None
