import enum

from .base import BaseModel, UTCDatetime, WithTimestamps
from .id import AttemptID, QuizID, UserID


class AttemptStatus(enum.Enum):
    InProgress = "in_progress"
    Submitted = "submitted"


class QuizAttempt(WithTimestamps):
    attempt_id: AttemptID
    quiz_id: QuizID
    student_id: UserID

    status: AttemptStatus = AttemptStatus.InProgress
    started_at: UTCDatetime
    submitted_at: UTCDatetime | None = None
    auto_submitted: bool = False

    # question_id -> answer; option ids for multiple choice questions
    student_answers: dict[str, str] = {}

    points_earned: int | None = None
    total_points: int | None = None
    percentage: float | None = None
    letter_grade: str | None = None
    performance_description: str | None = None

    @property
    def is_submitted(self) -> bool:
        return self.status is AttemptStatus.Submitted
