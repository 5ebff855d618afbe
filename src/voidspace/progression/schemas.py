"""Pydantic models for the persisted progression blob and the HTTP endpoints."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from voidspace.progression.counters import ActivityCounters

MAX_FEATURED = 3


# --- Persisted ---


class TimelineEntry(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    unlocked_at: int = Field(ge=0)  # epoch milliseconds


class PersistedProgress(BaseModel):
    """Achievement namespace blob. Missing keys default, unknown keys are dropped."""

    model_config = ConfigDict(extra="ignore")

    counters: ActivityCounters = Field(default_factory=ActivityCounters)
    unlocked: list[str] = []
    timeline: list[TimelineEntry] = []
    featured: list[str] = []


# --- Requests ---


class ActivityRequest(BaseModel):
    kind: str
    delta: int = 1


class FeaturedRequest(BaseModel):
    ids: list[str] = Field(default_factory=list, max_length=MAX_FEATURED)


class ReconcileRequest(BaseModel):
    counters: ActivityCounters = Field(default_factory=ActivityCounters)
    unlocked: list[str] = []


# --- Responses ---


class LevelResponse(BaseModel):
    level: int
    current_xp: int
    next_level_xp: int
    progress: float
    title: str
    next_title: str


class LevelThresholdResponse(BaseModel):
    level: int
    title: str
    xp_required: int
    cumulative: int


class AchievementResponse(BaseModel):
    id: str
    name: str
    description: str
    category: str
    rarity: str
    xp: int
    custom_trigger: str | None = None
    hint: str | None = None


class AllAchievementsResponse(BaseModel):
    achievements: list[AchievementResponse]
    by_rarity: dict[str, int]


class XPBreakdown(BaseModel):
    activity_xp: int
    achievement_xp: int
    total_xp: int


class ProgressionResponse(BaseModel):
    account_id: str
    is_loaded: bool
    is_connected: bool
    recovered: bool = False
    hydration_error: str | None = None
    level: LevelResponse
    xp: XPBreakdown
    counters: dict[str, int]
    unlocked: list[str]
    timeline: list[TimelineEntry]
    featured: list[str]


class UnlockResult(BaseModel):
    """Outcome of a mutating call: what was unlocked and whether the level changed."""

    unlocked: list[AchievementResponse] = []
    level_up: int | None = None
    progression: ProgressionResponse


class ModuleTrackResponse(BaseModel):
    track: str
    modules: dict[str, bool]
    completed: int


class ModuleCompleteResponse(BaseModel):
    track: str
    slug: str
    first_completion: bool
    result: UnlockResult | None = None
