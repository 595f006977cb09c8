from __future__ import annotations

import math

import pytest

from tally.grading import ASSIGNMENT_POINTS_SCALE, ASSIGNMENT_SCALE, Band, COURSE_SCALE, GradeScale, \
    performance_description, QUIZ_SCALE


class TestQuizScale(object):
    """Quiz letters use inclusive lower bounds."""

    @pytest.mark.parametrize(
        "pct,letter",
        [
            (100.0, "A+"),
            (90.0, "A+"),
            (89.99, "A"),
            (80.0, "A"),
            (70.0, "B+"),
            (60.0, "B"),
            (50.0, "C+"),
            (49.9, "C"),
            (40.0, "C"),
            (35.0, "D+"),
            (34.99, "F"),
            (0.0, "F"),
        ],
    )
    def test_letter(self, pct: float, letter: str) -> None:
        assert QUIZ_SCALE.letter(pct) == letter

    def test_total_over_odd_inputs(self) -> None:
        """Negative, NaN and above-100 percentages still map to a band."""
        assert QUIZ_SCALE.letter(-12.5) == "F"
        assert QUIZ_SCALE.letter(math.nan) == "F"
        assert QUIZ_SCALE.letter(150.0) == "A+"

    def test_display_letter_without_points(self) -> None:
        assert QUIZ_SCALE.display_letter(0.0, 0) == "N/A"
        assert QUIZ_SCALE.display_letter(0.0, 10) == "F"


class TestAssignmentScales(object):
    """The two assignment tables stay distinct."""

    @pytest.mark.parametrize(
        "pct,letter",
        [
            (93.0, "A"),
            (92.9, "A-"),
            (87.0, "B+"),
            (83.0, "B"),
            (80.0, "B-"),
            (77.0, "C+"),
            (73.0, "C"),
            (70.0, "C-"),
            (67.0, "D+"),
            (63.0, "D"),
            (60.0, "D-"),
            (59.9, "F"),
        ],
    )
    def test_assignment_letter(self, pct: float, letter: str) -> None:
        assert ASSIGNMENT_SCALE.letter(pct) == letter

    def test_points_scale_differs(self) -> None:
        assert ASSIGNMENT_POINTS_SCALE.letter(92.0) == "A+"
        assert ASSIGNMENT_SCALE.letter(92.0) == "A-"

    def test_assignment_scale_has_no_grade_points(self) -> None:
        with pytest.raises(ValueError):
            ASSIGNMENT_SCALE.grade_point(95.0)


class TestCourseScale(object):
    def test_grade_points(self) -> None:
        assert COURSE_SCALE.grade_point(72.0) == 3.2
        assert COURSE_SCALE.letter(72.0) == "B+"
        assert COURSE_SCALE.grade_point(95.0) == 4.0
        assert COURSE_SCALE.grade_point(10.0) == 0.0


class TestPerformanceDescription(object):
    @pytest.mark.parametrize(
        "pct,description",
        [
            (90.0, "Outstanding"),
            (80.0, "Excellent"),
            (70.0, "Very Good"),
            (60.0, "Good"),
            (50.0, "Satisfactory"),
            (40.0, "Acceptable"),
            (35.0, "Basic"),
            (34.9, "Fail"),
            (math.nan, "Fail"),
        ],
    )
    def test_description(self, pct: float, description: str) -> None:
        assert performance_description(pct) == description


def test_scale_requires_unbounded_lowest_band() -> None:
    with pytest.raises(ValueError):
        GradeScale("broken", [Band(50.0, "P"), Band(0.0, "F")])
