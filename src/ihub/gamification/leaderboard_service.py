"""Industry leaderboard computed from stored progress and achievements.

Score = lifetime points + achievement points earned inside the period
window. Only users active (progress updated) inside the window rank.
Results are cached in Redis when a client is available.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timedelta, timezone

from redis.asyncio import Redis
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ihub.db.models import Achievement, Industry, User, UserProgress
from ihub.gamification.activity import load_snapshots
from ihub.gamification.enums import LeaderboardPeriod
from ihub.gamification.progress import calculate_progress

logger = logging.getLogger(__name__)

PERIOD_WINDOWS: dict[LeaderboardPeriod, timedelta] = {
    LeaderboardPeriod.WEEKLY: timedelta(days=7),
    LeaderboardPeriod.MONTHLY: timedelta(days=30),
    LeaderboardPeriod.QUARTERLY: timedelta(days=90),
    LeaderboardPeriod.YEARLY: timedelta(days=365),
}

LEADERBOARD_CACHE_TTL = 60


def build_leaderboard_key(industry: str, period: LeaderboardPeriod, limit: int) -> str:
    """Build the Redis cache key for a leaderboard query."""
    return f"leaderboard:{industry.strip().lower()}:{period.value.lower()}:{limit}"


async def compute_leaderboard(
    db: AsyncSession,
    industry: str,
    period: LeaderboardPeriod,
    limit: int = 10,
    now: datetime | None = None,
) -> list[dict]:
    """Rank users of ``industry`` for ``period`` straight from the database."""
    if now is None:
        now = datetime.now(timezone.utc)
    since = now - PERIOD_WINDOWS[period]

    window_points = (
        select(
            Achievement.user_id.label("user_id"),
            func.sum(Achievement.points).label("points"),
        )
        .where(Achievement.achieved_at >= since)
        .group_by(Achievement.user_id)
        .subquery()
    )
    score = UserProgress.total_points + func.coalesce(window_points.c.points, 0)

    result = await db.execute(
        select(User, UserProgress.total_points, score.label("score"))
        .join(UserProgress, UserProgress.user_id == User.id)
        .join(Industry, Industry.id == User.industry_id)
        .outerjoin(window_points, window_points.c.user_id == User.id)
        .where(
            func.lower(Industry.name) == industry.strip().lower(),
            UserProgress.updated_at >= since,
        )
        .order_by(score.desc(), UserProgress.updated_at.asc(), User.id.asc())
        .limit(limit)
    )
    rows = result.all()
    snapshots = await load_snapshots(db, [row.User for row in rows])

    entries = []
    for rank, row in enumerate(rows, start=1):
        user: User = row.User
        snapshot = snapshots[user.id]
        entries.append({
            "rank": rank,
            "user_id": user.id,
            "score": float(row.score),
            "user": {
                "first_name": user.first_name,
                "last_name": user.last_name,
                "email": user.email,
            },
            "metadata": {
                "completion_rate": calculate_progress(snapshot, industry),
                "total_points": row.total_points,
            },
        })
    return entries


async def get_leaderboard(
    db: AsyncSession,
    redis: Redis | None,
    industry: str,
    period: LeaderboardPeriod,
    limit: int = 10,
    cache_ttl: int = LEADERBOARD_CACHE_TTL,
) -> list[dict]:
    """Leaderboard with a Redis read-through cache; Redis errors fall back to the DB."""
    cache_key = build_leaderboard_key(industry, period, limit)

    if redis is not None:
        try:
            cached = await redis.get(cache_key)
            if cached:
                return json.loads(cached)
        except Exception:
            logger.warning("Leaderboard cache read failed for %s", cache_key, exc_info=True)

    entries = await compute_leaderboard(db, industry, period, limit)

    if redis is not None:
        try:
            await redis.setex(cache_key, cache_ttl, json.dumps(entries))
        except Exception:
            logger.warning("Leaderboard cache write failed for %s", cache_key, exc_info=True)

    return entries
