"""Industry completion percentage: pure calculation, no I/O."""

from __future__ import annotations

from dataclasses import dataclass

from ihub.gamification.enums import LOGISTICS_SHIPPING, TOUR_MANAGEMENT, TRAVEL_SERVICES

BASELINE_PROGRESS = 10


@dataclass(frozen=True, slots=True)
class ProgressSnapshot:
    """Profile completeness and entity counts for one user."""

    profile_complete: bool = False
    package_count: int = 0
    booking_count: int = 0
    shipment_count: int = 0


def is_profile_complete(first_name: str | None, last_name: str | None, phone: str | None) -> bool:
    """First name, last name and phone must all be present."""
    return bool(first_name) and bool(last_name) and bool(phone)


def _tour_progress(s: ProgressSnapshot) -> int:
    progress = 0
    if s.profile_complete:
        progress += 15
    if s.package_count >= 1:
        progress += 30
    if s.package_count >= 3:
        progress += 20
    if s.package_count >= 5:
        progress += 35
    return progress


def _travel_progress(s: ProgressSnapshot) -> int:
    progress = 0
    if s.profile_complete:
        progress += 20
    if s.booking_count >= 1:
        progress += 35
    if s.booking_count >= 3:
        progress += 45
    return progress


def _logistics_progress(s: ProgressSnapshot) -> int:
    progress = 0
    if s.profile_complete:
        progress += 20
    if s.shipment_count >= 1:
        progress += 40
    if s.shipment_count >= 5:
        progress += 40
    return progress


_CALCULATORS = {
    TOUR_MANAGEMENT.lower(): _tour_progress,
    TRAVEL_SERVICES.lower(): _travel_progress,
    LOGISTICS_SHIPPING.lower(): _logistics_progress,
}


def calculate_progress(snapshot: ProgressSnapshot, industry: str | None) -> int:
    """Completion percentage (0-100) for ``industry``.

    Industry names match case-insensitively. Unknown or missing industries
    get a flat baseline for having a profile at all.
    """
    calculator = _CALCULATORS.get((industry or "").strip().lower())
    if calculator is None:
        return BASELINE_PROGRESS
    return min(calculator(snapshot), 100)
