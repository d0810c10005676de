"""Gamification service: progress updates and read models.

``update_progress`` is the single write path, invoked by the industry route
handlers after a domain action has been persisted. It is best-effort: a
storage failure is logged and yields an empty result so the domain action
itself never fails because of gamification.

There is no transaction spanning the point increment, the badge evaluation
and the achievement query; each step commits on its own.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any

from redis.asyncio import Redis
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ihub.config import Settings, get_settings
from ihub.db.models import Achievement, Badge, UserBadge, UserProgress
from ihub.gamification.activity import get_user, load_snapshot
from ihub.gamification.badge_service import BadgeEvaluator, get_available_badges
from ihub.gamification.enums import (
    LOGISTICS_SHIPPING,
    TOUR_MANAGEMENT,
    TRAVEL_SERVICES,
    AchievementType,
    ActionType,
    BadgeCategory,
    LeaderboardPeriod,
)
from ihub.gamification.leaderboard_service import get_leaderboard
from ihub.gamification.level_thresholds import compute_level
from ihub.gamification.progress import calculate_progress
from ihub.gamification.seed import seed_badges

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ProgressUpdate:
    user_id: str
    industry: str
    action_type: ActionType
    metadata: Mapping[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class ProgressUpdateResult:
    achievements: list[Achievement] = field(default_factory=list)
    badges: list[str] = field(default_factory=list)


class GamificationService:
    """Per-request service bound to one database session."""

    def __init__(
        self,
        db: AsyncSession,
        redis: Redis | None = None,
        settings: Settings | None = None,
    ) -> None:
        self.db = db
        self.redis = redis
        self.settings = settings or get_settings()
        self.evaluator = BadgeEvaluator(db)

    # ── Write path ──

    async def update_progress(self, update: ProgressUpdate) -> ProgressUpdateResult:
        """Credit points for an action, award badges, report recent achievements."""
        try:
            if await get_user(self.db, update.user_id) is None:
                logger.warning("Progress update for unknown user %s", update.user_id)
                return ProgressUpdateResult()

            await self._credit_action(update)
            badges = await self.evaluator.check_and_award_badges(
                update.user_id, update.action_type, update.industry, update.metadata
            )
            achievements = await self._recent_achievements(update.user_id)
        except SQLAlchemyError:
            logger.error(
                "Progress update failed for user %s (%s)",
                update.user_id,
                update.action_type.value,
                exc_info=True,
            )
            await self.db.rollback()
            return ProgressUpdateResult()

        logger.info(
            "Progress updated for user %s: %s, %d new badge(s)",
            update.user_id,
            update.action_type.value,
            len(badges),
        )
        return ProgressUpdateResult(achievements=achievements, badges=badges)

    async def _credit_action(self, update: ProgressUpdate, *, retried: bool = False) -> UserProgress:
        """Upsert the progress row: +base points, level recomputed."""
        now = datetime.now(timezone.utc)
        points = self.settings.action_base_points

        result = await self.db.execute(
            select(UserProgress).where(UserProgress.user_id == update.user_id)
        )
        progress = result.scalar_one_or_none()

        if progress is None:
            progress = UserProgress(
                user_id=update.user_id,
                total_points=points,
                current_level=1,
                updated_at=now,
            )
            self.db.add(progress)
            self.db.add(Achievement(
                user_id=update.user_id,
                type=AchievementType.FIRST_ACTION,
                category=BadgeCategory.MILESTONE.value,
                description=f"First action: {update.action_type.value}",
                points=points,
                achievement_metadata={"action_type": update.action_type.value, "industry": update.industry},
                achieved_at=now,
            ))
        else:
            progress.total_points += points
            progress.updated_at = now

        progress.current_level = compute_level(progress.total_points)["level"]

        try:
            await self.db.commit()
        except IntegrityError:
            # A concurrent first action created the row; add to it instead.
            await self.db.rollback()
            if retried:
                raise
            return await self._credit_action(update, retried=True)
        return progress

    async def _recent_achievements(self, user_id: str) -> list[Achievement]:
        since = datetime.now(timezone.utc) - timedelta(hours=self.settings.recent_achievement_window_hours)
        result = await self.db.execute(
            select(Achievement)
            .where(Achievement.user_id == user_id, Achievement.achieved_at >= since)
            .order_by(Achievement.achieved_at.desc())
            .limit(self.settings.recent_achievement_limit)
        )
        return list(result.scalars())

    async def initialize_badges(self) -> int:
        """Seed the badge catalog (idempotent)."""
        return await seed_badges(self.db)

    # ── Read paths ──

    async def calculate_progress(self, user_id: str, industry: str | None) -> int:
        """Live completion percentage; 0 for unknown users or storage errors."""
        try:
            user = await get_user(self.db, user_id)
            if user is None:
                return 0
            snapshot = await load_snapshot(self.db, user)
        except SQLAlchemyError:
            logger.error("Error calculating progress for user %s", user_id, exc_info=True)
            return 0
        return calculate_progress(snapshot, industry)

    async def get_user_progress(self, user_id: str) -> dict | None:
        """Progress snapshot for dashboards, or None if the user is unknown.

        ``completion_rate`` is recomputed from current entity counts, while
        ``total_points`` is the stored running counter. The two are tracked
        independently.
        """
        try:
            user = await get_user(self.db, user_id)
            if user is None:
                return None

            industry_name = user.industry.name if user.industry else ""
            snapshot = await load_snapshot(self.db, user)
            result = await self.db.execute(
                select(UserProgress).where(UserProgress.user_id == user_id)
            )
            progress = result.scalar_one_or_none()
        except SQLAlchemyError:
            logger.error("Error getting progress for user %s", user_id, exc_info=True)
            return None

        completion = calculate_progress(snapshot, industry_name)
        total_points = progress.total_points if progress else 0
        level_info = compute_level(total_points)

        return {
            "user_id": user_id,
            "total_points": total_points,
            "current_level": progress.current_level if progress else 1,
            "level_title": level_info["title"],
            "points_into_level": level_info["points_into_level"],
            "points_for_level": level_info["points_for_level"],
            "completion_rate": completion,
            "tour_progress": completion if industry_name == TOUR_MANAGEMENT else 0,
            "travel_progress": completion if industry_name == TRAVEL_SERVICES else 0,
            "logistics_progress": completion if industry_name == LOGISTICS_SHIPPING else 0,
            "user": {
                "first_name": user.first_name,
                "last_name": user.last_name,
                "email": user.email,
                "industry": industry_name or None,
            },
        }

    async def get_user_badges(self, user_id: str) -> list[UserBadge]:
        """Earned badges, newest first."""
        try:
            result = await self.db.execute(
                select(UserBadge)
                .where(UserBadge.user_id == user_id)
                .order_by(UserBadge.earned_at.desc())
            )
            return list(result.scalars())
        except SQLAlchemyError:
            logger.error("Error getting badges for user %s", user_id, exc_info=True)
            return []

    async def get_available_badges(self, industry: str) -> list[Badge]:
        """Active badge catalog for ``industry`` plus universal badges."""
        try:
            return await get_available_badges(self.db, industry)
        except SQLAlchemyError:
            logger.error("Error getting available badges for %s", industry, exc_info=True)
            return []

    async def get_leaderboard(
        self,
        industry: str,
        period: LeaderboardPeriod = LeaderboardPeriod.MONTHLY,
        limit: int = 10,
    ) -> list[dict]:
        """Ranked users of ``industry`` for ``period``."""
        try:
            return await get_leaderboard(
                self.db,
                self.redis,
                industry,
                period,
                limit,
                cache_ttl=self.settings.leaderboard_cache_ttl_seconds,
            )
        except SQLAlchemyError:
            logger.error("Error computing leaderboard for %s/%s", industry, period.value, exc_info=True)
            return []

    async def get_achievements(self, user_id: str, limit: int = 50, offset: int = 0) -> list[Achievement]:
        """Achievement log, newest first."""
        try:
            result = await self.db.execute(
                select(Achievement)
                .where(Achievement.user_id == user_id)
                .order_by(Achievement.achieved_at.desc())
                .offset(offset)
                .limit(limit)
            )
            return list(result.scalars())
        except SQLAlchemyError:
            logger.error("Error getting achievements for user %s", user_id, exc_info=True)
            return []

    async def get_stats(self, user_id: str) -> dict:
        """Totals overview for the dashboard header."""
        progress = await self.get_user_progress(user_id)
        try:
            badges_earned = (await self.db.execute(
                select(func.count()).select_from(UserBadge).where(UserBadge.user_id == user_id)
            )).scalar_one()
            achievements_count = (await self.db.execute(
                select(func.count()).select_from(Achievement).where(Achievement.user_id == user_id)
            )).scalar_one()
        except SQLAlchemyError:
            logger.error("Error getting stats for user %s", user_id, exc_info=True)
            badges_earned = achievements_count = 0

        return {
            "total_points": progress["total_points"] if progress else 0,
            "current_level": progress["current_level"] if progress else 1,
            "completion_rate": progress["completion_rate"] if progress else 0,
            "badges_earned": badges_earned,
            "achievements_count": achievements_count,
        }
