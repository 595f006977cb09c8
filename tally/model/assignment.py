import enum

from .base import BaseModel, UTCDatetime, WithTimestamps
from .enum import PublishStatus
from .id import AssignmentID, CourseID, SubmissionID, UserID


class SubmissionStatus(enum.Enum):
    Submitted = "submitted"
    LateSubmitted = "late_submitted"
    Graded = "graded"
    LateGraded = "late_graded"

    @property
    def is_graded(self) -> bool:
        return self in (SubmissionStatus.Graded, SubmissionStatus.LateGraded)


class Assignment(WithTimestamps):
    assignment_id: AssignmentID
    course_id: CourseID
    instructor_id: UserID | None = None
    name: str
    description: str | None = None
    due_date: UTCDatetime
    total_points: int = 100
    status: PublishStatus = PublishStatus.Active


class AssignmentSubmission(WithTimestamps):
    submission_id: SubmissionID
    assignment_id: AssignmentID
    student_id: UserID

    submission_number: int
    submitted_at: UTCDatetime
    is_late: bool
    status: SubmissionStatus
    content: str | None = None

    points_earned: float | None = None
    grade: float | None = None
    letter_grade: str | None = None
    feedback: str | None = None
    graded_at: UTCDatetime | None = None
