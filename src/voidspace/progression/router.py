"""Progression API endpoints for content, chat and profile collaborators."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from voidspace.dependencies import get_context
from voidspace.progression.catalog import ACHIEVEMENTS, Achievement, visible
from voidspace.progression.context import ProgressionContext
from voidspace.progression.ledger import count_by_rarity
from voidspace.progression.level_thresholds import all_levels
from voidspace.progression.modules import TRACKS
from voidspace.progression.schemas import (
    AchievementResponse,
    ActivityRequest,
    AllAchievementsResponse,
    FeaturedRequest,
    LevelThresholdResponse,
    ModuleCompleteResponse,
    ModuleTrackResponse,
    ProgressionResponse,
    ReconcileRequest,
    UnlockResult,
)

router = APIRouter(prefix="/api/v1", tags=["Progression"])


def _achievement(a: Achievement) -> AchievementResponse:
    return AchievementResponse(
        id=a.id,
        name=a.name,
        description=a.description,
        category=a.category,
        rarity=a.rarity,
        xp=a.xp,
        custom_trigger=a.custom_trigger,
        hint=a.hint,
    )


def _result(ctx: ProgressionContext, unlocked: list[Achievement]) -> UnlockResult:
    return UnlockResult(
        unlocked=[_achievement(a) for a in unlocked],
        level_up=ctx.level_up,
        progression=ProgressionResponse(**ctx.snapshot()),
    )


# ── Catalog ──


@router.get("/levels", response_model=list[LevelThresholdResponse])
def list_levels():
    """Full level table."""
    return all_levels()


@router.get("/achievements", response_model=AllAchievementsResponse)
def list_achievements():
    """Non-secret achievements and per-rarity totals."""
    totals = count_by_rarity((), ACHIEVEMENTS)
    return AllAchievementsResponse(
        achievements=[_achievement(a) for a in visible()],
        by_rarity={rarity: bucket["total"] for rarity, bucket in totals.items()},
    )


# ── Account progression ──


@router.get("/accounts/{account_id}/progression", response_model=ProgressionResponse)
def get_progression(ctx: ProgressionContext = Depends(get_context)):  # noqa: B008
    return ctx.snapshot()


@router.delete("/accounts/{account_id}/progression", response_model=ProgressionResponse)
def reset_progression(ctx: ProgressionContext = Depends(get_context)):  # noqa: B008
    """Clear all achievement progress for the account. Module tracks are kept."""
    ctx.reset()
    return ctx.snapshot()


@router.post("/accounts/{account_id}/activity", response_model=UnlockResult)
def record_activity(
    body: ActivityRequest,
    ctx: ProgressionContext = Depends(get_context),  # noqa: B008
):
    """Report activity. Unknown kinds are accepted and ignored."""
    unlocked = ctx.record_activity(body.kind, body.delta)
    return _result(ctx, unlocked)


@router.post("/accounts/{account_id}/triggers/{custom_id}", response_model=UnlockResult)
def fire_trigger(
    custom_id: str,
    ctx: ProgressionContext = Depends(get_context),  # noqa: B008
):
    """Fire a custom trigger such as ``speed_deploy`` or ``warden_audit``."""
    achievement = ctx.trigger(custom_id)
    unlocked = list(ctx.pending_unlocks) if achievement else []
    return _result(ctx, unlocked)


@router.put("/accounts/{account_id}/featured", response_model=ProgressionResponse)
def set_featured(
    body: FeaturedRequest,
    ctx: ProgressionContext = Depends(get_context),  # noqa: B008
):
    ctx.set_featured(body.ids)
    return ctx.snapshot()


@router.post("/accounts/{account_id}/reconcile", response_model=UnlockResult)
def reconcile(
    body: ReconcileRequest,
    ctx: ProgressionContext = Depends(get_context),  # noqa: B008
):
    """Merge a snapshot held by another client into the stored progress."""
    unlocked = ctx.reconcile(body.counters, body.unlocked)
    return _result(ctx, unlocked)


# ── Module tracks ──


@router.get("/accounts/{account_id}/modules/{track}", response_model=ModuleTrackResponse)
def get_track(
    track: str,
    ctx: ProgressionContext = Depends(get_context),  # noqa: B008
):
    modules = ctx.modules.get_track(track)
    return ModuleTrackResponse(
        track=track,
        modules=modules,
        completed=sum(1 for done in modules.values() if done),
    )


@router.post(
    "/accounts/{account_id}/modules/{track}/{slug}/complete",
    response_model=ModuleCompleteResponse,
)
def complete_module(
    track: str,
    slug: str,
    ctx: ProgressionContext = Depends(get_context),  # noqa: B008
):
    """Mark a module complete; the first completion also counts as a learned concept."""
    first, unlocked = ctx.complete_module(track, slug)
    result = _result(ctx, unlocked) if first else None
    return ModuleCompleteResponse(track=track, slug=slug, first_completion=first, result=result)


@router.get("/tracks", response_model=list[str])
def list_tracks():
    return list(TRACKS)
