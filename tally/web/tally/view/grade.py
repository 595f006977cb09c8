from __future__ import annotations

import datetime

from tally.model import CourseGradeID, CourseID, UserID

from .base import View


class CourseGradeResponse(View):
    course_grade_id: CourseGradeID
    course_id: CourseID
    student_id: UserID

    assignment_points_earned: float
    assignment_total_points: float
    assignment_percentage: float
    assignment_count: int
    graded_assignment_count: int

    quiz_points_earned: float
    quiz_total_points: float
    quiz_percentage: float
    quiz_count: int
    attempted_quiz_count: int

    assignment_weight: float
    quiz_weight: float

    final_percentage: float
    letter_grade: str | None = None
    grade_point: float | None = None
    performance_description: str | None = None
    update_time: datetime.datetime


class GPAResponse(View):
    student_id: UserID
    gpa: float
