"""Closed enumerations for gamification records and inputs."""

from __future__ import annotations

from enum import Enum


class BadgeCategory(str, Enum):
    MILESTONE = "MILESTONE"
    ACHIEVEMENT = "ACHIEVEMENT"
    COMPLETION = "COMPLETION"
    REVENUE = "REVENUE"
    SPECIAL = "SPECIAL"


class AchievementType(str, Enum):
    FIRST_ACTION = "FIRST_ACTION"
    MILESTONE_REACHED = "MILESTONE_REACHED"
    STREAK_ACHIEVED = "STREAK_ACHIEVED"
    TARGET_MET = "TARGET_MET"
    SPECIAL_EVENT = "SPECIAL_EVENT"


class LeaderboardPeriod(str, Enum):
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"
    QUARTERLY = "QUARTERLY"
    YEARLY = "YEARLY"


class ActionType(str, Enum):
    """Domain actions reported by the industry route handlers."""

    TOUR_CREATED = "TOUR_CREATED"
    BOOKING_CREATED = "BOOKING_CREATED"
    SHIPMENT_CREATED = "SHIPMENT_CREATED"
    PROFILE_COMPLETED = "PROFILE_COMPLETED"


class CriterionKind(str, Enum):
    COUNT = "count"
    RATING = "rating"
    STREAK = "streak"


# Industry names as seeded in the ``industries`` table.
TOUR_MANAGEMENT = "Tour Management"
TRAVEL_SERVICES = "Travel Services"
LOGISTICS_SHIPPING = "Logistics & Shipping"
OTHER_INDUSTRIES = "Other Industries"
