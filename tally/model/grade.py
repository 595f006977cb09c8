from .base import BaseModel, WithTimestamps
from .id import CourseGradeID, CourseID, UserID


class CourseGrade(WithTimestamps):
    """Materialized course result for one student; rebuilt on demand, never a source of truth."""

    course_grade_id: CourseGradeID
    course_id: CourseID
    student_id: UserID

    assignment_points_earned: float = 0.0
    assignment_total_points: float = 0.0
    assignment_percentage: float = 0.0
    assignment_count: int = 0
    graded_assignment_count: int = 0

    quiz_points_earned: float = 0.0
    quiz_total_points: float = 0.0
    quiz_percentage: float = 0.0
    quiz_count: int = 0
    attempted_quiz_count: int = 0

    assignment_weight: float = 60.0
    quiz_weight: float = 40.0

    final_percentage: float = 0.0
    letter_grade: str | None = None
    grade_point: float | None = None
    performance_description: str | None = None
