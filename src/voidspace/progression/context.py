"""Progression context: the stateful coordinator for one account.

The context hydrates counters and the unlocked ledger from the key-value
store, applies activity, re-runs the trigger engine, merges new unlocks and
writes everything back as a single blob. Derived values (XP, level) are
always recomputed from the in-memory state and never stored.

One context serves one account on one thread. Two contexts writing the same
namespace are last-writer-wins.
"""

from __future__ import annotations

import json
import time
from collections.abc import Callable, Iterable, Mapping
from enum import Enum

import structlog
from pydantic import ValidationError

from voidspace.exceptions import (
    HydrationError,
    ProgressionError,
    ProgressionNotLoadedError,
    StorageError,
)
from voidspace.progression.catalog import ACHIEVEMENTS, Achievement, sort_by_rarity
from voidspace.progression.counters import (
    ActivityCounters,
    ActivityKind,
    apply_activity,
    merge_counters,
    parse_kind,
)
from voidspace.progression.ledger import achievement_xp, merge
from voidspace.progression.level_thresholds import get_level
from voidspace.progression.modules import TRACK_ACTIVITY, ModuleCompletionStore
from voidspace.progression.schemas import MAX_FEATURED, PersistedProgress, TimelineEntry
from voidspace.progression.storage import KeyValueStore, achievements_namespace
from voidspace.progression.trigger_engine import evaluate, find_custom
from voidspace.progression.xp_service import activity_xp

logger = structlog.get_logger()


class ContextState(str, Enum):
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


def _now_ms() -> int:
    return int(time.time() * 1000)


def _dedupe(items: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(items))


def parse_blob(raw: str) -> PersistedProgress:
    """Decode an achievement namespace blob.

    Raises HydrationError for malformed or pathologically nested JSON, or a
    blob of the wrong shape.
    Duplicate unlocked ids and timeline entries are collapsed, and featured
    pins that are not unlocked are dropped.
    """
    try:
        blob = PersistedProgress.model_validate(json.loads(raw))
    except (json.JSONDecodeError, ValidationError, RecursionError) as exc:
        raise HydrationError(str(exc) or type(exc).__name__) from exc

    unlocked = _dedupe(blob.unlocked)
    seen: set[str] = set()
    timeline: list[TimelineEntry] = []
    for entry in blob.timeline:
        if entry.id not in seen:
            seen.add(entry.id)
            timeline.append(entry)
    held = set(unlocked)
    featured = [i for i in _dedupe(blob.featured) if i in held][:MAX_FEATURED]
    return blob.model_copy(update={"unlocked": unlocked, "timeline": timeline, "featured": featured})


class ProgressionContext:
    """Counters, ledger and derived level for a single account.

    A context without an account id is disconnected: it loads an empty state
    and every mutation is a no-op. Mutations and derived reads before
    :meth:`load` raise ProgressionNotLoadedError.

    ``ContextState.ERROR`` only lasts for the duration of :meth:`load`: an
    unreadable blob is replaced by a fresh state and the context ends up
    READY. After loading, :attr:`recovered` and :attr:`hydration_error`
    report whether that fallback happened.
    """

    def __init__(
        self,
        store: KeyValueStore,
        account_id: str | None,
        *,
        prefix: str = "voidspace",
        catalog: Iterable[Achievement] = ACHIEVEMENTS,
        clock: Callable[[], int] = _now_ms,
    ) -> None:
        self.store = store
        self.account_id = account_id or None
        self.prefix = prefix
        self.catalog: tuple[Achievement, ...] = tuple(catalog)
        self._catalog_map = {a.id: a for a in self.catalog}
        self._clock = clock

        self.state = ContextState.LOADING
        self.hydration_error: str | None = None
        self.level_up: int | None = None
        self._pending: list[Achievement] = []
        self._reset_state()

    def _reset_state(self) -> None:
        self._counters = ActivityCounters()
        self._unlocked: frozenset[str] = frozenset()
        self._timeline: list[TimelineEntry] = []
        self._featured: list[str] = []

    # --- Flags ---

    @property
    def is_connected(self) -> bool:
        return self.account_id is not None

    @property
    def is_loaded(self) -> bool:
        return self.state is ContextState.READY

    @property
    def recovered(self) -> bool:
        """True when the last load discarded unreadable stored progress."""
        return self.hydration_error is not None

    @property
    def namespace(self) -> str:
        if self.account_id is None:
            msg = "Disconnected context has no namespace"
            raise ProgressionError(msg)
        return achievements_namespace(self.prefix, self.account_id)

    @property
    def modules(self) -> ModuleCompletionStore:
        if self.account_id is None:
            msg = "Disconnected context has no module store"
            raise ProgressionError(msg)
        return ModuleCompletionStore(self.store, self.account_id, self.prefix)

    # --- Lifecycle ---

    def load(self) -> None:
        """Hydrate from the store. Never raises; unreadable state starts over."""
        self.state = ContextState.LOADING
        self.hydration_error = None
        self._reset_state()

        if not self.is_connected:
            self.state = ContextState.READY
            return

        try:
            raw = self.store.get(self.namespace)
            blob = parse_blob(raw) if raw is not None else None
        except (StorageError, HydrationError) as exc:
            self.state = ContextState.ERROR
            self.hydration_error = str(exc)
            logger.warning(
                "progression_hydration_failed",
                account_id=self.account_id,
                error=str(exc),
            )
            blob = None

        if blob is not None:
            self._counters = blob.counters
            self._unlocked = frozenset(blob.unlocked)
            self._timeline = list(blob.timeline)
            self._featured = list(blob.featured)

        self.state = ContextState.READY
        logger.debug(
            "progression_loaded",
            account_id=self.account_id,
            unlocked=len(self._unlocked),
            recovered=self.recovered,
        )

    def reset(self) -> None:
        """Clear persisted and in-memory progress for the account."""
        if not self.is_connected:
            return
        self._require_loaded()
        try:
            self.store.delete(self.namespace)
        except StorageError:
            logger.error("progression_reset_failed", account_id=self.account_id, exc_info=True)
        self._reset_state()
        self._pending.clear()
        self.level_up = None
        logger.info("progression_reset", account_id=self.account_id)

    def _require_loaded(self) -> None:
        if not self.is_loaded:
            msg = "Progression state has not been loaded"
            raise ProgressionNotLoadedError(msg)

    # --- Reads ---

    @property
    def counters(self) -> ActivityCounters:
        return self._counters

    @property
    def unlocked(self) -> frozenset[str]:
        return self._unlocked

    @property
    def timeline(self) -> list[TimelineEntry]:
        return list(self._timeline)

    @property
    def featured(self) -> list[str]:
        return list(self._featured)

    def activity_xp(self) -> int:
        self._require_loaded()
        return activity_xp(self._counters)

    def achievement_xp(self) -> int:
        self._require_loaded()
        return achievement_xp(self._unlocked, self.catalog)

    def total_xp(self) -> int:
        return self.activity_xp() + self.achievement_xp()

    def level(self) -> dict:
        return get_level(self.total_xp())

    def snapshot(self) -> dict:
        """Everything a presentation layer needs, recomputed now."""
        self._require_loaded()
        return {
            "account_id": self.account_id or "",
            "is_loaded": self.is_loaded,
            "is_connected": self.is_connected,
            "recovered": self.recovered,
            "hydration_error": self.hydration_error,
            "level": self.level(),
            "xp": {
                "activity_xp": self.activity_xp(),
                "achievement_xp": self.achievement_xp(),
                "total_xp": self.total_xp(),
            },
            "counters": self._counters.model_dump(),
            "unlocked": sorted(self._unlocked),
            "timeline": [e.model_dump() for e in self._timeline],
            "featured": list(self._featured),
        }

    # --- Notifications ---

    @property
    def pending_unlocks(self) -> list[Achievement]:
        """Unlocks not yet shown to the user, legendary first."""
        return sort_by_rarity(self._pending)

    def dismiss_unlock(self) -> Achievement | None:
        pending = self.pending_unlocks
        if not pending:
            return None
        shown = pending[0]
        self._pending.remove(shown)
        return shown

    def dismiss_level_up(self) -> None:
        self.level_up = None

    # --- Mutations ---

    def record_activity(self, kind: str | ActivityKind, delta: int = 1) -> list[Achievement]:
        """Apply one activity event and return the achievements it unlocked."""
        if not self.is_connected:
            return []
        self._require_loaded()

        parsed = parse_kind(kind)
        if parsed is None:
            logger.warning("unknown_activity_kind", account_id=self.account_id, kind=str(kind))
            return []

        counters = apply_activity(self._counters, parsed, delta)
        if counters is self._counters:
            return []
        return self._commit(counters, [])

    def trigger(self, custom_id: str) -> Achievement | None:
        """Unlock the achievement bound to a custom trigger id, if any is still locked."""
        if not self.is_connected:
            return None
        self._require_loaded()

        achievement = find_custom(custom_id, self._unlocked, self.catalog)
        if achievement is None:
            logger.debug("custom_trigger_ignored", account_id=self.account_id, trigger=custom_id)
            return None
        self._commit(self._counters, [achievement.id])
        return achievement

    def unlock(self, achievement_id: str) -> Achievement | None:
        """Grant a catalog achievement directly. Unknown or held ids are ignored."""
        if not self.is_connected:
            return None
        self._require_loaded()

        achievement = self._catalog_map.get(achievement_id)
        if achievement is None:
            logger.warning("unknown_achievement", account_id=self.account_id, achievement_id=achievement_id)
            return None
        if achievement_id in self._unlocked:
            return None
        self._commit(self._counters, [achievement_id])
        return achievement

    def reevaluate(self) -> list[Achievement]:
        """Re-run the trigger engine against the current counters."""
        if not self.is_connected:
            return []
        self._require_loaded()
        if not evaluate(self._counters, self._unlocked, self.catalog):
            return []
        return self._commit(self._counters, [])

    def reconcile(
        self,
        counters: ActivityCounters | Mapping[str, int],
        unlocked: Iterable[str] = (),
    ) -> list[Achievement]:
        """Merge a snapshot from another writer: per-counter max, union of unlocks.

        Remote ids unknown to the catalog are kept in the ledger and are
        worth no XP.
        """
        if not self.is_connected:
            return []
        self._require_loaded()

        if not isinstance(counters, ActivityCounters):
            counters = ActivityCounters.model_validate(dict(counters))
        merged = merge_counters(self._counters, counters)
        return self._commit(merged, unlocked)

    def set_featured(self, ids: Iterable[str]) -> list[str]:
        """Pin up to three unlocked achievements. Ids that are not unlocked are dropped."""
        if not self.is_connected:
            return []
        self._require_loaded()

        self._featured = [i for i in _dedupe(ids) if i in self._unlocked][:MAX_FEATURED]
        self._persist()
        return list(self._featured)

    def mark_module_complete(self, track: str, slug: str) -> bool:
        """Record a module completion. Returns True only on the first completion.

        This grants no XP and touches no counter; ``complete_module`` is the
        variant that also counts the completion as progress.
        """
        if not self.is_connected:
            return False
        self._require_loaded()
        try:
            return self.modules.mark_complete(track, slug)
        except StorageError:
            logger.error(
                "module_completion_persist_failed",
                account_id=self.account_id,
                track=track,
                slug=slug,
                exc_info=True,
            )
            return False

    def complete_module(self, track: str, slug: str) -> tuple[bool, list[Achievement]]:
        """Mark a module complete and count a first completion as progress.

        A first completion bumps ``modules_completed``, the track's own module
        counter and ``concepts_learned`` in one commit. Returns whether this
        was the first completion and what it unlocked.
        """
        if not self.mark_module_complete(track, slug):
            return False, []

        counters = self._counters
        for kind in (ActivityKind.MODULE_COMPLETED, TRACK_ACTIVITY[track], ActivityKind.CONCEPT_LEARNED):
            counters = apply_activity(counters, kind, 1)
        return True, self._commit(counters, [])

    def _commit(self, counters: ActivityCounters, granted: Iterable[str]) -> list[Achievement]:
        """Merge counters and granted ids, evaluate, persist once."""
        level_before = self.level()["level"]

        self._counters = counters
        ids = [i for i in _dedupe(granted) if i not in self._unlocked]
        held = merge(self._unlocked, ids)
        ids += [a.id for a in evaluate(counters, held, self.catalog)]

        now = self._clock()
        self._unlocked = merge(self._unlocked, ids)
        self._timeline.extend(TimelineEntry(id=i, unlocked_at=now) for i in ids)

        new = [self._catalog_map[i] for i in ids if i in self._catalog_map]
        self._pending.extend(new)
        for a in new:
            logger.info(
                "achievement_unlocked",
                account_id=self.account_id,
                achievement_id=a.id,
                rarity=a.rarity,
                xp=a.xp,
            )

        level_after = self.level()["level"]
        if level_after > level_before:
            self.level_up = level_after
            logger.info("level_up", account_id=self.account_id, level=level_after)

        self._persist()
        return new

    def _persist(self) -> None:
        blob = PersistedProgress(
            counters=self._counters,
            unlocked=sorted(self._unlocked),
            timeline=self._timeline,
            featured=self._featured,
        )
        try:
            self.store.set(self.namespace, blob.model_dump_json())
        except StorageError:
            logger.error("progression_persist_failed", account_id=self.account_id, exc_info=True)
