"""Reference data seeding tests."""

import pytest
from sqlalchemy import func, select

from ihub.db.models import Badge, Industry
from ihub.gamification.criteria import parse_criterion
from ihub.gamification.seed import BADGE_SEED_DATA, DEFAULT_INDUSTRIES, seed_badges, seed_industries


class TestSeedIndustries:
    @pytest.mark.asyncio
    async def test_creates_defaults(self, db_session):
        assert await seed_industries(db_session) is True
        names = set((await db_session.execute(select(Industry.name))).scalars())
        assert names == {i["name"] for i in DEFAULT_INDUSTRIES}

    @pytest.mark.asyncio
    async def test_leaves_existing_industries_alone(self, db_session):
        db_session.add(Industry(id="custom", name="Custom Industry"))
        await db_session.commit()

        assert await seed_industries(db_session) is True
        count = (await db_session.execute(select(func.count()).select_from(Industry))).scalar_one()
        assert count == 1


class TestSeedBadges:
    @pytest.mark.asyncio
    async def test_seed_idempotent(self, db_session):
        assert await seed_badges(db_session) == len(BADGE_SEED_DATA)
        assert await seed_badges(db_session) == 0
        count = (await db_session.execute(select(func.count()).select_from(Badge))).scalar_one()
        assert count == len(BADGE_SEED_DATA)

    @pytest.mark.asyncio
    async def test_stored_criteria_parse(self, db_session):
        await seed_badges(db_session)
        for badge in (await db_session.execute(select(Badge))).scalars():
            parse_criterion(badge.criteria)

    @pytest.mark.asyncio
    async def test_reseed_restores_definition(self, db_session):
        await seed_badges(db_session)
        badge = (await db_session.execute(select(Badge).where(Badge.name == "Explorer"))).scalar_one()
        badge.points = 1
        await db_session.commit()

        await seed_badges(db_session)
        await db_session.refresh(badge)
        assert badge.points == 100

    def test_names_unique(self):
        names = [b["name"] for b in BADGE_SEED_DATA]
        assert len(names) == len(set(names))
