"""Badge criteria: typed variants parsed from the ``badges.criteria`` JSON.

Each variant names the action type it reacts to. ``is_satisfied`` dispatches
on the variant and is pure: callers gather the user's counts first and pass
them in a :class:`CriterionContext`.

JSON shapes::

    {"kind": "count",  "actionType": "TOUR_CREATED", "requiredCount": 5}
    {"kind": "rating", "actionType": "TOUR_CREATED", "minRating": 4.8, "minReviews": 10}
    {"kind": "streak", "actionType": "TOUR_CREATED", "consecutiveDays": 30}

``kind`` defaults to ``count`` so plain ``{actionType, requiredCount}``
objects keep working.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any

from ihub.gamification.enums import ActionType, CriterionKind


class InvalidCriterion(ValueError):
    """Raised when a badge criterion object cannot be parsed."""


@dataclass(frozen=True, slots=True)
class CountCriterion:
    action_type: ActionType
    required_count: int

    kind = CriterionKind.COUNT

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind.value, "actionType": self.action_type.value, "requiredCount": self.required_count}


@dataclass(frozen=True, slots=True)
class RatingCriterion:
    action_type: ActionType
    min_rating: float
    min_reviews: int = 1

    kind = CriterionKind.RATING

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "actionType": self.action_type.value,
            "minRating": self.min_rating,
            "minReviews": self.min_reviews,
        }


@dataclass(frozen=True, slots=True)
class StreakCriterion:
    action_type: ActionType
    consecutive_days: int

    kind = CriterionKind.STREAK

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "actionType": self.action_type.value,
            "consecutiveDays": self.consecutive_days,
        }


Criterion = CountCriterion | RatingCriterion | StreakCriterion


@dataclass(frozen=True, slots=True)
class CriterionContext:
    """User state after the triggering action.

    Parameters
    ----------
    count : Cumulative number of entities for the criterion's action type.
    streak_days : Consecutive days (ending today) with at least one such entity.
    metadata : Metadata supplied with the triggering action.
    """

    count: int = 0
    streak_days: int = 0
    metadata: Mapping[str, Any] = field(default_factory=dict)


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def _positive_int(raw: Mapping[str, Any], key: str) -> int:
    value = raw.get(key)
    if isinstance(value, bool) or not isinstance(value, int | float) or int(value) != value:
        raise InvalidCriterion(f"{key} must be an integer, got {value!r}")
    if value < 1:
        raise InvalidCriterion(f"{key} must be positive, got {value!r}")
    return int(value)


def _action_type(raw: Mapping[str, Any]) -> ActionType:
    try:
        return ActionType(raw.get("actionType"))
    except ValueError as exc:
        raise InvalidCriterion(f"Unknown actionType: {raw.get('actionType')!r}") from exc


def parse_criterion(raw: Mapping[str, Any]) -> Criterion:
    """Parse a criterion JSON object into its typed variant."""
    if not isinstance(raw, Mapping):
        raise InvalidCriterion(f"Criterion must be an object, got {type(raw).__name__}")

    try:
        kind = CriterionKind(raw.get("kind", CriterionKind.COUNT.value))
    except ValueError as exc:
        raise InvalidCriterion(f"Unknown criterion kind: {raw.get('kind')!r}") from exc

    action_type = _action_type(raw)

    if kind is CriterionKind.COUNT:
        return CountCriterion(action_type, _positive_int(raw, "requiredCount"))

    if kind is CriterionKind.RATING:
        min_rating = raw.get("minRating")
        if isinstance(min_rating, bool) or not isinstance(min_rating, int | float) or min_rating <= 0:
            raise InvalidCriterion(f"minRating must be a positive number, got {min_rating!r}")
        min_reviews = _positive_int(raw, "minReviews") if "minReviews" in raw else 1
        return RatingCriterion(action_type, float(min_rating), min_reviews)

    return StreakCriterion(action_type, _positive_int(raw, "consecutiveDays"))


# ---------------------------------------------------------------------------
# Evaluation: pure functions (criterion, ctx) -> bool
# ---------------------------------------------------------------------------


def _check_count(criterion: CountCriterion, ctx: CriterionContext) -> bool:
    return ctx.count >= criterion.required_count


def _check_rating(criterion: RatingCriterion, ctx: CriterionContext) -> bool:
    """Rating comes from the action metadata: {"averageRating": 4.9, "reviewCount": 12}.

    The rated entity must exist in storage; metadata alone never qualifies.
    """
    if ctx.count < 1:
        return False
    rating = ctx.metadata.get("averageRating")
    reviews = ctx.metadata.get("reviewCount", 0)
    try:
        rating = float(rating)
        reviews = int(reviews)
    except (TypeError, ValueError):
        return False
    return rating >= criterion.min_rating and reviews >= criterion.min_reviews


def _check_streak(criterion: StreakCriterion, ctx: CriterionContext) -> bool:
    return ctx.streak_days >= criterion.consecutive_days


_HANDLERS: dict[CriterionKind, Callable[[Any, CriterionContext], bool]] = {
    CriterionKind.COUNT: _check_count,
    CriterionKind.RATING: _check_rating,
    CriterionKind.STREAK: _check_streak,
}


def is_satisfied(criterion: Criterion, ctx: CriterionContext) -> bool:
    """Evaluate a criterion against the user's current state."""
    return _HANDLERS[criterion.kind](criterion, ctx)


def consecutive_days(days: set[date], today: date) -> int:
    """Count consecutive days with activity, ending at ``today``.

    A day without activity today still counts yesterday's run, so a streak
    does not reset until a full day is missed.
    """
    cursor = today if today in days else today - timedelta(days=1)
    streak = 0
    while cursor in days:
        streak += 1
        cursor -= timedelta(days=1)
    return streak
