"""Read-side queries over users and their industry entities."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date, datetime, timezone

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ihub.db.models import Shipment, TourPackage, TravelBooking, User
from ihub.gamification.enums import ActionType
from ihub.gamification.progress import ProgressSnapshot, is_profile_complete

# Entity table counted for each action type. PROFILE_COMPLETED has no table.
ACTION_ENTITIES = {
    ActionType.TOUR_CREATED: TourPackage,
    ActionType.BOOKING_CREATED: TravelBooking,
    ActionType.SHIPMENT_CREATED: Shipment,
}


def as_utc(dt: datetime) -> datetime:
    """Attach UTC to naive datetimes (SQLite drops the offset)."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


async def get_user(db: AsyncSession, user_id: str) -> User | None:
    """Fetch a user with their industry loaded."""
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def count_entities(db: AsyncSession, user_id: str, action_type: ActionType) -> int:
    """Cumulative count backing ``action_type`` for a user."""
    if action_type is ActionType.PROFILE_COMPLETED:
        user = await get_user(db, user_id)
        if user is None:
            return 0
        return 1 if is_profile_complete(user.first_name, user.last_name, user.phone) else 0

    model = ACTION_ENTITIES[action_type]
    result = await db.execute(
        select(func.count()).select_from(model).where(model.user_id == user_id)
    )
    return result.scalar_one()


async def activity_days(db: AsyncSession, user_id: str, action_type: ActionType) -> set[date]:
    """UTC calendar days on which the user created an entity for ``action_type``."""
    model = ACTION_ENTITIES.get(action_type)
    if model is None:
        return set()
    result = await db.execute(select(model.created_at).where(model.user_id == user_id))
    return {as_utc(created_at).date() for created_at in result.scalars()}


async def load_snapshots(db: AsyncSession, users: Sequence[User]) -> dict[str, ProgressSnapshot]:
    """Progress snapshots keyed by user id, one grouped count per entity table."""
    if not users:
        return {}
    user_ids = [u.id for u in users]

    counts: dict[ActionType, dict[str, int]] = {}
    for action_type, model in ACTION_ENTITIES.items():
        result = await db.execute(
            select(model.user_id, func.count())
            .where(model.user_id.in_(user_ids))
            .group_by(model.user_id)
        )
        counts[action_type] = {user_id: n for user_id, n in result.all()}

    return {
        u.id: ProgressSnapshot(
            profile_complete=is_profile_complete(u.first_name, u.last_name, u.phone),
            package_count=counts[ActionType.TOUR_CREATED].get(u.id, 0),
            booking_count=counts[ActionType.BOOKING_CREATED].get(u.id, 0),
            shipment_count=counts[ActionType.SHIPMENT_CREATED].get(u.id, 0),
        )
        for u in users
    }


async def load_snapshot(db: AsyncSession, user: User) -> ProgressSnapshot:
    """Build the progress snapshot for a loaded user."""
    return (await load_snapshots(db, [user]))[user.id]
