"""Per-track module completion maps.

Each curriculum track is its own namespace, so completing a module in one
track never touches another track's blob. Completion grants no XP here; the
caller decides whether a first completion also counts as a learned concept.
"""

from __future__ import annotations

import json

import structlog
from pydantic import TypeAdapter, ValidationError

from voidspace.exceptions import HydrationError, UnknownTrackError
from voidspace.progression.counters import ActivityKind
from voidspace.progression.storage import KeyValueStore, track_namespace

logger = structlog.get_logger()

TRACKS: tuple[str, ...] = ("explorer", "builder", "hacker", "founder")

# Activity reported for a first completion in each track.
TRACK_ACTIVITY: dict[str, ActivityKind] = {
    "explorer": ActivityKind.EXPLORER_MODULE,
    "builder": ActivityKind.BUILDER_MODULE,
    "hacker": ActivityKind.HACKER_MODULE,
    "founder": ActivityKind.FOUNDER_MODULE,
}

_TRACK_MAP = TypeAdapter(dict[str, bool])


class ModuleCompletionStore:
    """Reads and writes the completion maps of one account."""

    def __init__(self, store: KeyValueStore, account_id: str, prefix: str = "voidspace") -> None:
        self.store = store
        self.account_id = account_id
        self.prefix = prefix

    def _namespace(self, track: str) -> str:
        if track not in TRACKS:
            raise UnknownTrackError(track)
        return track_namespace(self.prefix, self.account_id, track)

    def get_track(self, track: str) -> dict[str, bool]:
        """Completion map for a track. A corrupted blob reads as empty."""
        namespace = self._namespace(track)
        try:
            raw = self.store.get(namespace)
            if raw is None:
                return {}
            return _TRACK_MAP.validate_python(json.loads(raw), strict=True)
        except (HydrationError, json.JSONDecodeError, ValidationError, RecursionError) as exc:
            logger.warning("module_track_corrupted", namespace=namespace, error=str(exc))
            return {}

    def is_complete(self, track: str, slug: str) -> bool:
        return self.get_track(track).get(slug, False)

    def mark_complete(self, track: str, slug: str) -> bool:
        """Mark ``slug`` complete. Returns True only on the first completion."""
        modules = self.get_track(track)
        if modules.get(slug):
            return False
        modules[slug] = True
        self.store.set(self._namespace(track), json.dumps(modules, sort_keys=True))
        logger.info("module_completed", account_id=self.account_id, track=track, slug=slug)
        return True

    def completed_count(self, track: str) -> int:
        return sum(1 for done in self.get_track(track).values() if done)
