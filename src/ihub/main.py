"""FastAPI application factory."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from sqlalchemy.exc import SQLAlchemyError

from ihub.config import get_settings
from ihub.database import close_db, get_session, init_db
from ihub.gamification.router import router as gamification_router
from ihub.gamification.seed import seed_badges, seed_industries
from ihub.health.router import router as health_router
from ihub.industries.router import router as industries_router
from ihub.middleware import setup_middleware
from ihub.redis_client import close_redis, init_redis

logger = logging.getLogger(__name__)


async def _seed_reference_data() -> None:
    """Seed industries and badge definitions (idempotent)."""
    try:
        async for db in get_session():
            await seed_industries(db)
            await seed_badges(db)
            break
    except SQLAlchemyError:
        logger.warning("Seeding failed (tables may not exist yet)", exc_info=True)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup and shutdown lifecycle."""
    settings = get_settings()
    await init_db(settings.database_url)
    await init_redis(settings.redis_url)

    if settings.seed_on_startup:
        await _seed_reference_data()

    yield

    await close_db()
    await close_redis()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Industry Hub API",
        description="Progress tracking, badges and achievements for the Industry Hub dashboards",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    setup_middleware(app, settings)
    app.include_router(health_router, tags=["Health"])
    app.include_router(industries_router)
    app.include_router(gamification_router)

    return app


app = create_app()
