"""Level thresholds and computation.

Titles are shown on every industry dashboard, so they stay industry-neutral.
"""

from __future__ import annotations

LEVEL_THRESHOLDS: list[dict] = [
    {"level": 1, "title": "Newcomer", "points_required": 0, "cumulative": 0},
    {"level": 2, "title": "Getting Started", "points_required": 50, "cumulative": 50},
    {"level": 3, "title": "Apprentice", "points_required": 100, "cumulative": 150},
    {"level": 4, "title": "Operator", "points_required": 200, "cumulative": 350},
    {"level": 5, "title": "Specialist", "points_required": 400, "cumulative": 750},
    {"level": 6, "title": "Expert", "points_required": 750, "cumulative": 1500},
    {"level": 7, "title": "Veteran", "points_required": 1500, "cumulative": 3000},
    {"level": 8, "title": "Master", "points_required": 3000, "cumulative": 6000},
    {"level": 9, "title": "Industry Leader", "points_required": 6000, "cumulative": 12000},
    {"level": 10, "title": "Legend", "points_required": 12000, "cumulative": 24000},
]


def compute_level(total_points: int) -> dict:
    """Compute level info from total points."""
    current = LEVEL_THRESHOLDS[0]
    next_level = LEVEL_THRESHOLDS[1]

    for i in range(len(LEVEL_THRESHOLDS) - 1):
        if total_points >= LEVEL_THRESHOLDS[i]["cumulative"]:
            current = LEVEL_THRESHOLDS[i]
            next_level = LEVEL_THRESHOLDS[i + 1]

    # Points beyond max level
    if total_points >= LEVEL_THRESHOLDS[-1]["cumulative"]:
        current = LEVEL_THRESHOLDS[-1]
        next_level = LEVEL_THRESHOLDS[-1]

    points_into_level = total_points - current["cumulative"]
    points_for_level = next_level["cumulative"] - current["cumulative"]

    # At max level, avoid division by zero
    if points_for_level == 0:
        points_for_level = 1

    return {
        "level": current["level"],
        "title": current["title"],
        "points_into_level": points_into_level,
        "points_for_level": points_for_level,
        "next_level": next_level["level"],
        "next_title": next_level["title"],
    }
