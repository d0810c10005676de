"""Pydantic request/response models for gamification endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from ihub.gamification.enums import AchievementType, ActionType, BadgeCategory, LeaderboardPeriod


# --- Badges ---


class BadgeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: str
    category: BadgeCategory
    industry: str | None = None
    criteria: dict[str, Any] = {}
    icon_url: str | None = None
    points: int


class EarnedBadgeResponse(BaseModel):
    badge: BadgeResponse
    earned_at: datetime
    metadata: dict[str, Any] = {}


class UserBadgesResponse(BaseModel):
    success: bool = True
    badges: list[EarnedBadgeResponse]


class AvailableBadgesResponse(BaseModel):
    success: bool = True
    badges: list[BadgeResponse]


# --- Achievements ---


class AchievementResponse(BaseModel):
    id: str
    type: AchievementType
    category: str
    description: str
    points: int
    achieved_at: datetime
    metadata: dict[str, Any] = {}


class AchievementsResponse(BaseModel):
    success: bool = True
    achievements: list[AchievementResponse]


# --- Progress ---


class ProgressUserInfo(BaseModel):
    first_name: str | None = None
    last_name: str | None = None
    email: str
    industry: str | None = None


class ProgressResponse(BaseModel):
    user_id: str
    total_points: int
    current_level: int
    level_title: str
    points_into_level: int
    points_for_level: int
    completion_rate: int
    tour_progress: int = 0
    travel_progress: int = 0
    logistics_progress: int = 0
    user: ProgressUserInfo


class UserProgressResponse(BaseModel):
    success: bool = True
    progress: ProgressResponse


class ProgressUpdateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    industry: str = Field(min_length=1)
    action_type: ActionType = Field(alias="actionType")
    metadata: dict[str, Any] = {}


class GamificationResult(BaseModel):
    achievements: list[AchievementResponse]
    badges: list[str]


class ProgressUpdateResponse(BaseModel):
    success: bool = True
    message: str = "Progress updated successfully"
    gamification: GamificationResult
    progress: ProgressResponse | None = None


# --- Leaderboard ---


class LeaderboardUser(BaseModel):
    first_name: str | None = None
    last_name: str | None = None
    email: str


class LeaderboardEntry(BaseModel):
    rank: int
    user_id: str
    score: float
    user: LeaderboardUser
    metadata: dict[str, Any] = {}


class LeaderboardResponse(BaseModel):
    success: bool = True
    leaderboard: list[LeaderboardEntry]
    industry: str
    period: LeaderboardPeriod
    limit: int


# --- Stats ---


class GamificationStats(BaseModel):
    total_points: int
    current_level: int
    completion_rate: int
    badges_earned: int
    achievements_count: int


class GamificationStatsResponse(BaseModel):
    success: bool = True
    stats: GamificationStats
