"""Badge criteria tests: parsing, evaluation, streak counting."""

from datetime import date, timedelta

import pytest

from ihub.gamification.criteria import (
    CountCriterion,
    CriterionContext,
    InvalidCriterion,
    RatingCriterion,
    StreakCriterion,
    consecutive_days,
    is_satisfied,
    parse_criterion,
)
from ihub.gamification.enums import ActionType


class TestParseCriterion:
    def test_count_without_kind(self):
        criterion = parse_criterion({"actionType": "TOUR_CREATED", "requiredCount": 5})
        assert criterion == CountCriterion(ActionType.TOUR_CREATED, 5)

    def test_rating(self):
        criterion = parse_criterion(
            {"kind": "rating", "actionType": "BOOKING_CREATED", "minRating": 4.9, "minReviews": 20}
        )
        assert criterion == RatingCriterion(ActionType.BOOKING_CREATED, 4.9, 20)

    def test_rating_default_reviews(self):
        criterion = parse_criterion({"kind": "rating", "actionType": "TOUR_CREATED", "minRating": 4})
        assert criterion.min_reviews == 1
        assert criterion.min_rating == 4.0

    def test_streak(self):
        criterion = parse_criterion({"kind": "streak", "actionType": "SHIPMENT_CREATED", "consecutiveDays": 14})
        assert criterion == StreakCriterion(ActionType.SHIPMENT_CREATED, 14)

    def test_to_dict_parses_back(self):
        original = StreakCriterion(ActionType.TOUR_CREATED, 30)
        assert parse_criterion(original.to_dict()) == original

    @pytest.mark.parametrize(
        "raw",
        [
            {"actionType": "TOUR_DELETED", "requiredCount": 1},
            {"requiredCount": 1},
            {"actionType": "TOUR_CREATED"},
            {"actionType": "TOUR_CREATED", "requiredCount": 0},
            {"actionType": "TOUR_CREATED", "requiredCount": -3},
            {"actionType": "TOUR_CREATED", "requiredCount": 2.5},
            {"actionType": "TOUR_CREATED", "requiredCount": "5"},
            {"actionType": "TOUR_CREATED", "requiredCount": True},
            {"kind": "sparkle", "actionType": "TOUR_CREATED", "requiredCount": 1},
            {"kind": "rating", "actionType": "TOUR_CREATED", "minRating": 0},
            {"kind": "streak", "actionType": "TOUR_CREATED"},
        ],
    )
    def test_invalid(self, raw):
        with pytest.raises(InvalidCriterion):
            parse_criterion(raw)

    def test_non_object(self):
        with pytest.raises(InvalidCriterion):
            parse_criterion(["TOUR_CREATED", 1])  # type: ignore[arg-type]


class TestIsSatisfied:
    def test_count_threshold(self):
        criterion = CountCriterion(ActionType.TOUR_CREATED, 3)
        assert is_satisfied(criterion, CriterionContext(count=2)) is False
        assert is_satisfied(criterion, CriterionContext(count=3)) is True
        assert is_satisfied(criterion, CriterionContext(count=30)) is True

    def test_rating_needs_both_rating_and_reviews(self):
        criterion = RatingCriterion(ActionType.TOUR_CREATED, 4.8, 10)
        ok = CriterionContext(count=1, metadata={"averageRating": 4.85, "reviewCount": 10})
        low_rating = CriterionContext(count=1, metadata={"averageRating": 4.7, "reviewCount": 50})
        few_reviews = CriterionContext(count=1, metadata={"averageRating": 5.0, "reviewCount": 9})
        assert is_satisfied(criterion, ok) is True
        assert is_satisfied(criterion, low_rating) is False
        assert is_satisfied(criterion, few_reviews) is False

    def test_rating_missing_or_malformed_metadata(self):
        criterion = RatingCriterion(ActionType.TOUR_CREATED, 4.0)
        assert is_satisfied(criterion, CriterionContext()) is False
        assert is_satisfied(criterion, CriterionContext(count=1, metadata={"averageRating": "great"})) is False

    def test_rating_requires_stored_entity(self):
        criterion = RatingCriterion(ActionType.TOUR_CREATED, 4.8, 10)
        ctx = CriterionContext(count=0, metadata={"averageRating": 5.0, "reviewCount": 1000})
        assert is_satisfied(criterion, ctx) is False

    def test_rating_numeric_strings_accepted(self):
        criterion = RatingCriterion(ActionType.TOUR_CREATED, 4.0)
        ctx = CriterionContext(count=1, metadata={"averageRating": "4.5", "reviewCount": "3"})
        assert is_satisfied(criterion, ctx) is True

    def test_streak(self):
        criterion = StreakCriterion(ActionType.SHIPMENT_CREATED, 14)
        assert is_satisfied(criterion, CriterionContext(streak_days=13)) is False
        assert is_satisfied(criterion, CriterionContext(streak_days=14)) is True


class TestConsecutiveDays:
    TODAY = date(2026, 10, 18)

    def _days(self, *offsets: int) -> set[date]:
        return {self.TODAY - timedelta(days=o) for o in offsets}

    def test_empty(self):
        assert consecutive_days(set(), self.TODAY) == 0

    def test_run_ending_today(self):
        assert consecutive_days(self._days(0, 1, 2), self.TODAY) == 3

    def test_run_ending_yesterday_still_counts(self):
        assert consecutive_days(self._days(1, 2, 3, 4), self.TODAY) == 4

    def test_gap_breaks_run(self):
        assert consecutive_days(self._days(0, 1, 3, 4, 5), self.TODAY) == 2

    def test_missed_two_days(self):
        assert consecutive_days(self._days(2, 3, 4), self.TODAY) == 0
