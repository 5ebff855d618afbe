"""Activity counters and the monotonic update rules applied to them."""

from __future__ import annotations

import logging
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)


class ActivityKind(str, Enum):
    """Activity reported by content and chat collaborators."""

    MESSAGE = "message"
    CODE_GENERATION = "code_generation"
    CONTRACT_DEPLOYED = "contract_deployed"
    CONCEPT_LEARNED = "concept_learned"
    QUIZ_STREAK = "quiz_streak"
    TOKENS_USED = "tokens_used"
    MODULE_COMPLETED = "module_completed"
    EXPLORER_MODULE = "explorer_module"
    BUILDER_MODULE = "builder_module"
    HACKER_MODULE = "hacker_module"
    FOUNDER_MODULE = "founder_module"


class ActivityCounters(BaseModel):
    """Cumulative per-account activity counts. No field ever decreases."""

    # camelCase keys are accepted so blobs written by the browser client load as-is.
    model_config = ConfigDict(extra="ignore", frozen=True, alias_generator=to_camel, populate_by_name=True)

    sanctum_messages: int = Field(default=0, ge=0)
    code_generations: int = Field(default=0, ge=0)
    contracts_deployed: int = Field(default=0, ge=0)
    concepts_learned: int = Field(default=0, ge=0)
    max_quiz_streak: int = Field(default=0, ge=0)
    tokens_used: int = Field(default=0, ge=0)
    modules_completed: int = Field(default=0, ge=0)
    explorer_modules: int = Field(default=0, ge=0)
    builder_modules: int = Field(default=0, ge=0)
    hacker_modules: int = Field(default=0, ge=0)
    founder_modules: int = Field(default=0, ge=0)


# kind -> (counter field, True when the counter keeps a running maximum)
_COUNTER_FIELDS: dict[ActivityKind, tuple[str, bool]] = {
    ActivityKind.MESSAGE: ("sanctum_messages", False),
    ActivityKind.CODE_GENERATION: ("code_generations", False),
    ActivityKind.CONTRACT_DEPLOYED: ("contracts_deployed", False),
    ActivityKind.CONCEPT_LEARNED: ("concepts_learned", False),
    ActivityKind.QUIZ_STREAK: ("max_quiz_streak", True),
    ActivityKind.TOKENS_USED: ("tokens_used", False),
    ActivityKind.MODULE_COMPLETED: ("modules_completed", False),
    ActivityKind.EXPLORER_MODULE: ("explorer_modules", False),
    ActivityKind.BUILDER_MODULE: ("builder_modules", False),
    ActivityKind.HACKER_MODULE: ("hacker_modules", False),
    ActivityKind.FOUNDER_MODULE: ("founder_modules", False),
}

COUNTER_FIELDS: tuple[str, ...] = tuple(ActivityCounters.model_fields)


def parse_kind(kind: str | ActivityKind) -> ActivityKind | None:
    """Resolve a reported kind, returning None for kinds this engine does not know."""
    if isinstance(kind, ActivityKind):
        return kind
    try:
        return ActivityKind(kind)
    except ValueError:
        return None


def apply_activity(counters: ActivityCounters, kind: ActivityKind, delta: int = 1) -> ActivityCounters:
    """Return counters with one activity applied.

    Incremental counters add ``delta``; the quiz streak keeps
    ``max(old, delta)``. Negative deltas are ignored so the result is always
    field-wise >= the input.
    """
    field, keeps_max = _COUNTER_FIELDS[kind]
    old = getattr(counters, field)

    if keeps_max:
        new = max(old, delta)
    elif delta < 0:
        logger.warning("Ignoring negative delta %d for %s", delta, kind.value)
        new = old
    else:
        new = old + delta

    if new == old:
        return counters
    return counters.model_copy(update={field: new})


def merge_counters(local: ActivityCounters, remote: ActivityCounters) -> ActivityCounters:
    """Field-wise maximum of two counter snapshots."""
    return ActivityCounters(
        **{name: max(getattr(local, name), getattr(remote, name)) for name in COUNTER_FIELDS}
    )
