"""Badge evaluation and award with duplicate prevention."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ihub.db.models import Achievement, Badge, UserBadge
from ihub.gamification.activity import activity_days, count_entities
from ihub.gamification.criteria import (
    Criterion,
    CriterionContext,
    InvalidCriterion,
    StreakCriterion,
    consecutive_days,
    is_satisfied,
    parse_criterion,
)
from ihub.gamification.enums import AchievementType, ActionType

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class _Candidate:
    """Detached copy of a badge row, safe to use after a rollback."""

    badge_id: str
    name: str
    category: str
    points: int
    criterion: Criterion


async def get_available_badges(db: AsyncSession, industry: str | None) -> list[Badge]:
    """Active badges for ``industry`` plus universal ones, cheapest first."""
    scope = Badge.industry.is_(None)
    if industry:
        scope = or_(scope, func.lower(Badge.industry) == industry.strip().lower())

    result = await db.execute(
        select(Badge)
        .where(Badge.is_active.is_(True), scope)
        .order_by(Badge.points.asc(), Badge.name.asc())
    )
    return list(result.scalars())


async def has_badge(db: AsyncSession, user_id: str, badge_id: str) -> bool:
    """Check if user already has a specific badge."""
    result = await db.execute(
        select(UserBadge.id).where(
            UserBadge.user_id == user_id,
            UserBadge.badge_id == badge_id,
        )
    )
    return result.scalar_one_or_none() is not None


class BadgeEvaluator:
    """Finds newly earned badges for an action and persists the awards."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def check_and_award_badges(
        self,
        user_id: str,
        action_type: ActionType,
        industry: str | None,
        metadata: Mapping[str, Any] | None = None,
    ) -> list[str]:
        """Award every badge the user now qualifies for.

        Returns the ids of newly awarded badges (may be empty). A storage
        error stops the evaluation and returns an empty list; awards
        committed before the error stay in place.
        """
        try:
            return await self._evaluate(user_id, action_type, industry, metadata or {})
        except SQLAlchemyError:
            logger.error(
                "Badge evaluation failed for user %s (%s)", user_id, action_type.value, exc_info=True
            )
            await self.db.rollback()
            return []

    async def _load_candidates(self, action_type: ActionType, industry: str | None) -> list[_Candidate]:
        candidates = []
        for badge in await get_available_badges(self.db, industry):
            try:
                criterion = parse_criterion(badge.criteria)
            except InvalidCriterion:
                logger.warning("Skipping badge %r with invalid criteria %r", badge.name, badge.criteria)
                continue
            if criterion.action_type is not action_type:
                continue
            candidates.append(_Candidate(
                badge_id=badge.id,
                name=badge.name,
                category=badge.category.value,
                points=badge.points,
                criterion=criterion,
            ))
        return candidates

    async def _evaluate(
        self,
        user_id: str,
        action_type: ActionType,
        industry: str | None,
        metadata: Mapping[str, Any],
    ) -> list[str]:
        candidates = await self._load_candidates(action_type, industry)
        if not candidates:
            return []

        ctx: CriterionContext | None = None
        awarded: list[str] = []

        for candidate in candidates:
            if await has_badge(self.db, user_id, candidate.badge_id):
                continue

            # Counts reflect state after the caller persisted the action.
            if ctx is None:
                ctx = await self._build_context(user_id, action_type, metadata, candidates)

            if not is_satisfied(candidate.criterion, ctx):
                continue

            if await self._award(user_id, candidate, action_type, ctx.count, metadata):
                awarded.append(candidate.badge_id)

        return awarded

    async def _build_context(
        self,
        user_id: str,
        action_type: ActionType,
        metadata: Mapping[str, Any],
        candidates: list[_Candidate],
    ) -> CriterionContext:
        count = await count_entities(self.db, user_id, action_type)
        streak = 0
        if any(isinstance(c.criterion, StreakCriterion) for c in candidates):
            days = await activity_days(self.db, user_id, action_type)
            streak = consecutive_days(days, datetime.now(timezone.utc).date())
        return CriterionContext(count=count, streak_days=streak, metadata=metadata)

    async def _award(
        self,
        user_id: str,
        candidate: _Candidate,
        action_type: ActionType,
        count: int,
        metadata: Mapping[str, Any],
    ) -> bool:
        """Insert the user badge and its achievement row, then commit.

        Returns False when a concurrent request already awarded the badge.
        """
        now = datetime.now(timezone.utc)

        self.db.add(UserBadge(
            user_id=user_id,
            badge_id=candidate.badge_id,
            earned_at=now,
            badge_metadata={**dict(metadata), "action_type": action_type.value, "count": count},
        ))
        try:
            await self.db.flush()
        except IntegrityError:
            await self.db.rollback()
            logger.info("Badge %s already awarded to user %s", candidate.name, user_id)
            return False

        self.db.add(Achievement(
            user_id=user_id,
            type=AchievementType.MILESTONE_REACHED,
            category=candidate.category,
            description=f"Earned badge: {candidate.name}",
            points=candidate.points,
            achievement_metadata={
                "badge_id": candidate.badge_id,
                "action_type": action_type.value,
                "count": count,
            },
            achieved_at=now,
        ))
        await self.db.commit()

        logger.info("Awarded badge %s to user %s", candidate.name, user_id)
        return True
