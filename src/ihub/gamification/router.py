"""Gamification API endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from ihub.auth.dependencies import get_current_user
from ihub.db.models import Achievement, User, UserBadge
from ihub.dependencies import get_gamification_service
from ihub.gamification.enums import LeaderboardPeriod
from ihub.gamification.schemas import (
    AchievementResponse,
    AchievementsResponse,
    AvailableBadgesResponse,
    BadgeResponse,
    EarnedBadgeResponse,
    GamificationResult,
    GamificationStats,
    GamificationStatsResponse,
    LeaderboardEntry,
    LeaderboardResponse,
    ProgressResponse,
    ProgressUpdateRequest,
    ProgressUpdateResponse,
    UserBadgesResponse,
    UserProgressResponse,
)
from ihub.gamification.service import GamificationService, ProgressUpdate

router = APIRouter(prefix="/api/v1/gamification", tags=["Gamification"])


def _achievement_response(a: Achievement) -> AchievementResponse:
    return AchievementResponse(
        id=a.id,
        type=a.type,
        category=a.category,
        description=a.description,
        points=a.points,
        achieved_at=a.achieved_at,
        metadata=a.achievement_metadata or {},
    )


def _earned_badge_response(ub: UserBadge) -> EarnedBadgeResponse:
    return EarnedBadgeResponse(
        badge=BadgeResponse.model_validate(ub.badge),
        earned_at=ub.earned_at,
        metadata=ub.badge_metadata or {},
    )


@router.get("/progress", response_model=UserProgressResponse)
async def get_progress(
    user: User = Depends(get_current_user),
    service: GamificationService = Depends(get_gamification_service),
):
    """Get the current user's progress snapshot."""
    progress = await service.get_user_progress(user.id)
    if progress is None:
        raise HTTPException(status_code=404, detail="User progress not found")
    return UserProgressResponse(progress=ProgressResponse(**progress))


@router.post("/progress/update", response_model=ProgressUpdateResponse)
async def update_progress(
    body: ProgressUpdateRequest,
    user: User = Depends(get_current_user),
    service: GamificationService = Depends(get_gamification_service),
):
    """Record an action for the current user and return what it earned."""
    # Read before the service commits or rolls back and expires the instance.
    user_id = user.id
    result = await service.update_progress(ProgressUpdate(
        user_id=user_id,
        industry=body.industry,
        action_type=body.action_type,
        metadata=body.metadata,
    ))
    progress = await service.get_user_progress(user_id)

    return ProgressUpdateResponse(
        gamification=GamificationResult(
            achievements=[_achievement_response(a) for a in result.achievements],
            badges=result.badges,
        ),
        progress=ProgressResponse(**progress) if progress else None,
    )


@router.get("/badges", response_model=UserBadgesResponse)
async def get_my_badges(
    user: User = Depends(get_current_user),
    service: GamificationService = Depends(get_gamification_service),
):
    """Get the current user's earned badges."""
    earned = await service.get_user_badges(user.id)
    return UserBadgesResponse(badges=[_earned_badge_response(ub) for ub in earned])


@router.get("/badges/available", response_model=AvailableBadgesResponse)
async def get_available_badges(
    industry: str = Query(..., min_length=1),
    _user: User = Depends(get_current_user),
    service: GamificationService = Depends(get_gamification_service),
):
    """Badge catalog for an industry, including universal badges."""
    badges = await service.get_available_badges(industry)
    return AvailableBadgesResponse(badges=[BadgeResponse.model_validate(b) for b in badges])


@router.get("/leaderboard", response_model=LeaderboardResponse)
async def get_leaderboard(
    industry: str = Query(..., min_length=1),
    period: LeaderboardPeriod = Query(LeaderboardPeriod.MONTHLY),
    limit: int = Query(10, ge=1, le=100),
    _user: User = Depends(get_current_user),
    service: GamificationService = Depends(get_gamification_service),
):
    """Ranked users of an industry for a period."""
    entries = await service.get_leaderboard(industry, period, limit)
    return LeaderboardResponse(
        leaderboard=[LeaderboardEntry(**e) for e in entries],
        industry=industry,
        period=period,
        limit=limit,
    )


@router.get("/achievements", response_model=AchievementsResponse)
async def get_achievements(
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
    user: User = Depends(get_current_user),
    service: GamificationService = Depends(get_gamification_service),
):
    """Get the current user's achievement log."""
    achievements = await service.get_achievements(user.id, limit=limit, offset=offset)
    return AchievementsResponse(achievements=[_achievement_response(a) for a in achievements])


@router.get("/stats", response_model=GamificationStatsResponse)
async def get_stats(
    user: User = Depends(get_current_user),
    service: GamificationService = Depends(get_gamification_service),
):
    """Gamification totals overview."""
    stats = await service.get_stats(user.id)
    return GamificationStatsResponse(stats=GamificationStats(**stats))
