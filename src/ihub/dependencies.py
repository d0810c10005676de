"""Shared FastAPI dependencies."""

from collections.abc import AsyncGenerator

from fastapi import Depends
from redis.asyncio import Redis
from sqlalchemy.ext.asyncio import AsyncSession

from ihub.database import get_session
from ihub.gamification.service import GamificationService
from ihub.redis_client import get_redis_or_none

get_db = get_session


async def get_redis_dep() -> AsyncGenerator[Redis | None, None]:
    """Yield the Redis client (None when Redis is not configured)."""
    yield get_redis_or_none()


async def get_gamification_service(
    db: AsyncSession = Depends(get_db),
    redis: Redis | None = Depends(get_redis_dep),
) -> GamificationService:
    """Build a request-scoped gamification service."""
    return GamificationService(db, redis)
