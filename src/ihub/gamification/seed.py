"""Seed data: default industries and the badge catalog."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ihub.db.models import Badge, Industry
from ihub.gamification.criteria import CountCriterion, RatingCriterion, StreakCriterion
from ihub.gamification.enums import (
    LOGISTICS_SHIPPING,
    OTHER_INDUSTRIES,
    TOUR_MANAGEMENT,
    TRAVEL_SERVICES,
    ActionType,
    BadgeCategory,
)

logger = logging.getLogger(__name__)

DEFAULT_INDUSTRIES: list[dict] = [
    {
        "id": "tour-management",
        "name": TOUR_MANAGEMENT,
        "description": "Tourism and tour operations management",
    },
    {
        "id": "travel-services",
        "name": TRAVEL_SERVICES,
        "description": "Travel booking and related services",
    },
    {
        "id": "logistics-shipping",
        "name": LOGISTICS_SHIPPING,
        "description": "Logistics and shipping operations",
    },
    {
        "id": "other-industries",
        "name": OTHER_INDUSTRIES,
        "description": "Other business sectors and industries",
    },
]

BADGE_SEED_DATA: list[dict] = [
    # Universal
    {
        "name": "Profile Complete",
        "description": "Fill in your first name, last name and phone number",
        "category": BadgeCategory.COMPLETION,
        "industry": None,
        "criteria": CountCriterion(ActionType.PROFILE_COMPLETED, 1),
        "icon_url": "/badges/profile-complete.svg",
        "points": 25,
    },
    # Tour Management
    {
        "name": "Tour Guide Rookie",
        "description": "Create your first tour package",
        "category": BadgeCategory.ACHIEVEMENT,
        "industry": TOUR_MANAGEMENT,
        "criteria": CountCriterion(ActionType.TOUR_CREATED, 1),
        "icon_url": "/badges/tour-rookie.svg",
        "points": 50,
    },
    {
        "name": "Tour Builder",
        "description": "Create 3 tour packages",
        "category": BadgeCategory.MILESTONE,
        "industry": TOUR_MANAGEMENT,
        "criteria": CountCriterion(ActionType.TOUR_CREATED, 3),
        "icon_url": "/badges/tour-builder.svg",
        "points": 75,
    },
    {
        "name": "Explorer",
        "description": "Create 5 tour packages",
        "category": BadgeCategory.ACHIEVEMENT,
        "industry": TOUR_MANAGEMENT,
        "criteria": CountCriterion(ActionType.TOUR_CREATED, 5),
        "icon_url": "/badges/explorer.svg",
        "points": 100,
    },
    {
        "name": "Adventure Master",
        "description": "Create 25 tour packages",
        "category": BadgeCategory.ACHIEVEMENT,
        "industry": TOUR_MANAGEMENT,
        "criteria": CountCriterion(ActionType.TOUR_CREATED, 25),
        "icon_url": "/badges/adventure-master.svg",
        "points": 250,
    },
    {
        "name": "30-Day Tour Streak",
        "description": "Create tour packages on 30 consecutive days",
        "category": BadgeCategory.SPECIAL,
        "industry": TOUR_MANAGEMENT,
        "criteria": StreakCriterion(ActionType.TOUR_CREATED, 30),
        "icon_url": "/badges/streak-30.svg",
        "points": 200,
    },
    {
        "name": "Customer Champion Tour",
        "description": "Achieve a 4.8+ average rating over at least 10 reviews",
        "category": BadgeCategory.SPECIAL,
        "industry": TOUR_MANAGEMENT,
        "criteria": RatingCriterion(ActionType.TOUR_CREATED, 4.8, 10),
        "icon_url": "/badges/champion.svg",
        "points": 150,
    },
    # Travel Services
    {
        "name": "Travel Planner",
        "description": "Create your first travel booking",
        "category": BadgeCategory.ACHIEVEMENT,
        "industry": TRAVEL_SERVICES,
        "criteria": CountCriterion(ActionType.BOOKING_CREATED, 1),
        "icon_url": "/badges/travel-planner.svg",
        "points": 50,
    },
    {
        "name": "Quick Booker",
        "description": "Create 5 travel bookings",
        "category": BadgeCategory.SPECIAL,
        "industry": TRAVEL_SERVICES,
        "criteria": CountCriterion(ActionType.BOOKING_CREATED, 5),
        "icon_url": "/badges/quick-booker.svg",
        "points": 100,
    },
    {
        "name": "Jet Setter",
        "description": "Create 10 travel bookings",
        "category": BadgeCategory.MILESTONE,
        "industry": TRAVEL_SERVICES,
        "criteria": CountCriterion(ActionType.BOOKING_CREATED, 10),
        "icon_url": "/badges/jet-setter.svg",
        "points": 150,
    },
    {
        "name": "Globe Trotter",
        "description": "Create 25 travel bookings",
        "category": BadgeCategory.MILESTONE,
        "industry": TRAVEL_SERVICES,
        "criteria": CountCriterion(ActionType.BOOKING_CREATED, 25),
        "icon_url": "/badges/globe-trotter.svg",
        "points": 300,
    },
    {
        "name": "VIP Agent",
        "description": "Keep a 4.9+ average rating over at least 20 reviews",
        "category": BadgeCategory.REVENUE,
        "industry": TRAVEL_SERVICES,
        "criteria": RatingCriterion(ActionType.BOOKING_CREATED, 4.9, 20),
        "icon_url": "/badges/vip-agent.svg",
        "points": 250,
    },
    # Logistics & Shipping
    {
        "name": "Delivery Rookie",
        "description": "Create your first shipment",
        "category": BadgeCategory.ACHIEVEMENT,
        "industry": LOGISTICS_SHIPPING,
        "criteria": CountCriterion(ActionType.SHIPMENT_CREATED, 1),
        "icon_url": "/badges/delivery-rookie.svg",
        "points": 50,
    },
    {
        "name": "Long Haul Champion",
        "description": "Create 10 shipments",
        "category": BadgeCategory.MILESTONE,
        "industry": LOGISTICS_SHIPPING,
        "criteria": CountCriterion(ActionType.SHIPMENT_CREATED, 10),
        "icon_url": "/badges/long-haul.svg",
        "points": 160,
    },
    {
        "name": "Speed Demon",
        "description": "Create 20 shipments",
        "category": BadgeCategory.SPECIAL,
        "industry": LOGISTICS_SHIPPING,
        "criteria": CountCriterion(ActionType.SHIPMENT_CREATED, 20),
        "icon_url": "/badges/speed-demon.svg",
        "points": 120,
    },
    {
        "name": "On-Time Hero",
        "description": "Ship every day for 14 consecutive days",
        "category": BadgeCategory.SPECIAL,
        "industry": LOGISTICS_SHIPPING,
        "criteria": StreakCriterion(ActionType.SHIPMENT_CREATED, 14),
        "icon_url": "/badges/on-time-hero.svg",
        "points": 180,
    },
    {
        "name": "Cargo Master",
        "description": "Create 100 shipments",
        "category": BadgeCategory.MILESTONE,
        "industry": LOGISTICS_SHIPPING,
        "criteria": CountCriterion(ActionType.SHIPMENT_CREATED, 100),
        "icon_url": "/badges/cargo-master.svg",
        "points": 200,
    },
]


async def seed_industries(db: AsyncSession) -> bool:
    """Insert the default industries when the table is empty.

    Returns False if the storage layer fails.
    """
    try:
        existing = (await db.execute(select(func.count()).select_from(Industry))).scalar_one()
        if existing > 0:
            logger.info("Industries already exist (%d found)", existing)
            return True

        for data in DEFAULT_INDUSTRIES:
            db.add(Industry(**data, is_active=True))
        await db.commit()
    except SQLAlchemyError:
        logger.error("Failed to initialize industries", exc_info=True)
        await db.rollback()
        return False

    logger.info("Created %d default industries", len(DEFAULT_INDUSTRIES))
    return True


async def seed_badges(db: AsyncSession) -> int:
    """Upsert the badge catalog by name (idempotent). Returns rows created."""
    result = await db.execute(select(Badge))
    existing = {b.name: b for b in result.scalars()}

    now = datetime.now(timezone.utc)
    created = 0
    for data in BADGE_SEED_DATA:
        values = {**data, "criteria": data["criteria"].to_dict()}
        badge = existing.get(data["name"])
        if badge is None:
            db.add(Badge(**values, is_active=True, created_at=now))
            created += 1
        else:
            # Definitions are immutable at runtime except is_active.
            for key, value in values.items():
                setattr(badge, key, value)

    await db.commit()
    logger.info("Seeded %d badge definitions (%d new)", len(BADGE_SEED_DATA), created)
    return created
