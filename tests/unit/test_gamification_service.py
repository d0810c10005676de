"""Gamification service tests: the progress update pipeline and read models."""

from __future__ import annotations

import uuid

import pytest
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from ihub.db.models import Achievement, UserProgress
from ihub.gamification.enums import AchievementType, ActionType, LeaderboardPeriod
from ihub.gamification.service import GamificationService, ProgressUpdate
from tests.conftest import add_bookings, add_packages, make_user


def _update(user_id: str, industry: str = "Tour Management", action=ActionType.TOUR_CREATED, **metadata):
    return ProgressUpdate(user_id=user_id, industry=industry, action_type=action, metadata=metadata)


class TestUpdateProgress:
    @pytest.mark.asyncio
    async def test_first_action_creates_progress(self, seeded_db):
        db = seeded_db
        user_id = (await make_user(db)).id
        await add_packages(db, user_id, 1)

        result = await GamificationService(db).update_progress(_update(user_id))

        progress = (await db.execute(
            select(UserProgress).where(UserProgress.user_id == user_id)
        )).scalar_one()
        assert progress.total_points == 10
        assert progress.current_level == 1
        assert len(result.badges) == 1
        types = {a.type for a in result.achievements}
        assert types == {AchievementType.FIRST_ACTION, AchievementType.MILESTONE_REACHED}

    @pytest.mark.asyncio
    async def test_repeat_actions_accumulate_points(self, seeded_db):
        db = seeded_db
        user_id = (await make_user(db)).id
        service = GamificationService(db)

        for _ in range(6):
            await service.update_progress(_update(user_id))

        progress = (await db.execute(
            select(UserProgress).where(UserProgress.user_id == user_id)
        )).scalar_one()
        assert progress.total_points == 60
        assert progress.current_level == 2

    @pytest.mark.asyncio
    async def test_first_action_achievement_logged_once(self, seeded_db):
        db = seeded_db
        user_id = (await make_user(db)).id
        service = GamificationService(db)

        await service.update_progress(_update(user_id))
        await service.update_progress(_update(user_id))

        firsts = (await db.execute(
            select(Achievement).where(
                Achievement.user_id == user_id,
                Achievement.type == AchievementType.FIRST_ACTION,
            )
        )).scalars().all()
        assert len(firsts) == 1
        assert firsts[0].points == 10

    @pytest.mark.asyncio
    async def test_badge_points_not_added_to_total(self, seeded_db):
        db = seeded_db
        user_id = (await make_user(db)).id
        await add_packages(db, user_id, 5)

        result = await GamificationService(db).update_progress(_update(user_id))

        assert len(result.badges) == 3
        progress = (await db.execute(
            select(UserProgress).where(UserProgress.user_id == user_id)
        )).scalar_one()
        assert progress.total_points == 10

    @pytest.mark.asyncio
    async def test_recent_achievements_capped_and_newest_first(self, seeded_db):
        db = seeded_db
        user_id = (await make_user(db)).id
        await add_packages(db, user_id, 5)

        result = await GamificationService(db).update_progress(
            _update(user_id, averageRating=5.0, reviewCount=40)
        )

        # FIRST_ACTION + four badges earned, limited to five.
        assert len(result.badges) == 4
        assert len(result.achievements) == 5
        times = [a.achieved_at for a in result.achievements]
        assert times == sorted(times, reverse=True)

    @pytest.mark.asyncio
    async def test_unknown_user_gets_empty_result(self, seeded_db):
        result = await GamificationService(seeded_db).update_progress(_update(str(uuid.uuid4())))
        assert result.achievements == []
        assert result.badges == []

    @pytest.mark.asyncio
    async def test_storage_failure_degrades_to_empty(self, seeded_db, monkeypatch):
        db = seeded_db
        user_id = (await make_user(db)).id

        async def broken(self, update, *, retried=False):
            raise SQLAlchemyError("database is down")

        monkeypatch.setattr(GamificationService, "_credit_action", broken)
        result = await GamificationService(db).update_progress(_update(user_id))

        assert result.achievements == []
        assert result.badges == []


class TestReadModels:
    @pytest.mark.asyncio
    async def test_calculate_progress(self, seeded_db):
        db = seeded_db
        user_id = (await make_user(db, "Travel Services")).id
        await add_bookings(db, user_id, 1)
        service = GamificationService(db)

        assert await service.calculate_progress(user_id, "Travel Services") == 55
        assert await service.calculate_progress(user_id, "Other Industries") == 10
        assert await service.calculate_progress(str(uuid.uuid4()), "Travel Services") == 0

    @pytest.mark.asyncio
    async def test_user_progress_without_actions(self, seeded_db):
        db = seeded_db
        user_id = (await make_user(db, "Tour Management")).id

        progress = await GamificationService(db).get_user_progress(user_id)

        assert progress["total_points"] == 0
        assert progress["current_level"] == 1
        assert progress["level_title"] == "Newcomer"
        assert progress["completion_rate"] == 15
        assert progress["tour_progress"] == 15
        assert progress["travel_progress"] == 0
        assert progress["user"]["industry"] == "Tour Management"

    @pytest.mark.asyncio
    async def test_completion_and_points_tracked_independently(self, seeded_db):
        """Points only move with reported actions; completion reflects stored entities."""
        db = seeded_db
        user_id = (await make_user(db, "Tour Management")).id
        service = GamificationService(db)
        await service.update_progress(_update(user_id))
        await add_packages(db, user_id, 5)

        progress = await service.get_user_progress(user_id)

        assert progress["total_points"] == 10
        assert progress["completion_rate"] == 100

    @pytest.mark.asyncio
    async def test_unknown_user_progress(self, seeded_db):
        assert await GamificationService(seeded_db).get_user_progress(str(uuid.uuid4())) is None

    @pytest.mark.asyncio
    async def test_achievements_paginated_newest_first(self, seeded_db):
        db = seeded_db
        user_id = (await make_user(db)).id
        await add_packages(db, user_id, 5)
        service = GamificationService(db)
        await service.update_progress(_update(user_id))

        everything = await service.get_achievements(user_id)
        page = await service.get_achievements(user_id, limit=2, offset=1)

        assert len(everything) == 4
        assert [a.id for a in page] == [a.id for a in everything[1:3]]

    @pytest.mark.asyncio
    async def test_user_badges(self, seeded_db):
        db = seeded_db
        user_id = (await make_user(db)).id
        await add_packages(db, user_id, 3)
        service = GamificationService(db)
        await service.update_progress(_update(user_id))

        earned = await service.get_user_badges(user_id)
        assert {ub.badge.name for ub in earned} == {"Tour Guide Rookie", "Tour Builder"}

    @pytest.mark.asyncio
    async def test_stats(self, seeded_db):
        db = seeded_db
        user_id = (await make_user(db)).id
        await add_packages(db, user_id, 1)
        service = GamificationService(db)
        await service.update_progress(_update(user_id))

        stats = await service.get_stats(user_id)

        assert stats == {
            "total_points": 10,
            "current_level": 1,
            "completion_rate": 45,
            "badges_earned": 1,
            "achievements_count": 2,
        }

    @pytest.mark.asyncio
    async def test_leaderboard_without_redis(self, seeded_db):
        db = seeded_db
        user_id = (await make_user(db)).id
        service = GamificationService(db, redis=None)
        await service.update_progress(_update(user_id))

        entries = await service.get_leaderboard("Tour Management", LeaderboardPeriod.WEEKLY)
        assert [e["user_id"] for e in entries] == [user_id]

    @pytest.mark.asyncio
    async def test_initialize_badges_idempotent(self, seeded_db):
        assert await GamificationService(seeded_db).initialize_badges() == 0
