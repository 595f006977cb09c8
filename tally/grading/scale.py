"""Percentage to letter grade tables.

Each scale is a descending table of inclusive lower bounds. Lookups are total:
any float, including negatives and NaN, lands in some band.
"""

from __future__ import annotations

import dataclasses
import math
import typing as t

NotApplicable: t.Final = "N/A"


@dataclasses.dataclass(frozen=True)
class Band:
    lower: float
    letter: str
    grade_point: float | None = None


# (lower bound, description), shared by every scale
Descriptions: t.Final[tuple[tuple[float, str], ...]] = (
    (90.0, "Outstanding"),
    (80.0, "Excellent"),
    (70.0, "Very Good"),
    (60.0, "Good"),
    (50.0, "Satisfactory"),
    (40.0, "Acceptable"),
    (35.0, "Basic"),
    (-math.inf, "Fail"),
)


def performance_description(percentage: float) -> str:
    if math.isnan(percentage):
        return Descriptions[-1][1]
    for lower, description in Descriptions:
        if percentage >= lower:
            return description
    return Descriptions[-1][1]


class GradeScale(object):
    def __init__(self, name: str, bands: t.Iterable[Band]):
        self.name = name
        self.bands = tuple(sorted(bands, key=lambda b: b.lower, reverse=True))
        if not self.bands or self.bands[-1].lower != -math.inf:
            raise ValueError(f"{name}: the lowest band must be unbounded below")

    def band(self, percentage: float) -> Band:
        if math.isnan(percentage):
            return self.bands[-1]
        for band in self.bands:
            if percentage >= band.lower:
                return band
        return self.bands[-1]

    def letter(self, percentage: float) -> str:
        return self.band(percentage).letter

    def grade_point(self, percentage: float) -> float:
        gp = self.band(percentage).grade_point
        if gp is None:
            raise ValueError(f"{self.name} does not carry grade points")
        return gp

    def description(self, percentage: float) -> str:
        return performance_description(percentage)

    def display_letter(self, percentage: float, total_points: float) -> str:
        """Letter for display; nothing to grade yet shows as N/A rather than F."""
        if total_points <= 0:
            return NotApplicable
        return self.letter(percentage)

    def __repr__(self) -> str:
        return f"<GradeScale {self.name}>"


ASSIGNMENT_SCALE = GradeScale(
    "assignment",
    [
        Band(93.0, "A"),
        Band(90.0, "A-"),
        Band(87.0, "B+"),
        Band(83.0, "B"),
        Band(80.0, "B-"),
        Band(77.0, "C+"),
        Band(73.0, "C"),
        Band(70.0, "C-"),
        Band(67.0, "D+"),
        Band(63.0, "D"),
        Band(60.0, "D-"),
        Band(-math.inf, "F"),
    ],
)

# used when an assignment is graded from points earned
ASSIGNMENT_POINTS_SCALE = GradeScale(
    "assignment-points",
    [
        Band(90.0, "A+"),
        Band(80.0, "A"),
        Band(70.0, "B+"),
        Band(60.0, "B"),
        Band(50.0, "C+"),
        Band(40.0, "C"),
        Band(35.0, "D+"),
        Band(-math.inf, "F"),
    ],
)

QUIZ_SCALE = GradeScale(
    "quiz",
    [
        Band(90.0, "A+"),
        Band(80.0, "A"),
        Band(70.0, "B+"),
        Band(60.0, "B"),
        Band(50.0, "C+"),
        Band(40.0, "C"),
        Band(35.0, "D+"),
        Band(-math.inf, "F"),
    ],
)

COURSE_SCALE = GradeScale(
    "course",
    [
        Band(90.0, "A+", 4.0),
        Band(80.0, "A", 3.6),
        Band(70.0, "B+", 3.2),
        Band(60.0, "B", 2.8),
        Band(50.0, "C+", 2.4),
        Band(40.0, "C", 2.0),
        Band(35.0, "D+", 1.6),
        Band(-math.inf, "F", 0.0),
    ],
)
