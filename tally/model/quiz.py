import datetime
import enum

from .base import BaseModel, UTCDatetime, WithTimestamps
from .enum import PublishStatus
from .id import CourseID, OptionID, QuestionID, QuizID, UserID


class QuestionType(enum.Enum):
    MultipleChoice = "multiple_choice"
    TrueFalse = "true_false"
    ShortAnswer = "short_answer"


class QuizWindow(enum.Enum):
    """Where the quiz-wide clock stands, independent of any one attempt."""

    NotStarted = "not_started"
    Active = "active"
    Ended = "ended"


class QuestionOption(BaseModel):
    option_id: OptionID
    question_id: QuestionID
    text: str
    is_correct: bool = False
    position: int = 0


class Question(BaseModel):
    question_id: QuestionID
    quiz_id: QuizID
    type: QuestionType
    text: str
    points: int
    correct_answer: str | None = None
    position: int = 0
    options: list[QuestionOption] = []


class Quiz(WithTimestamps):
    quiz_id: QuizID
    course_id: CourseID
    instructor_id: UserID | None = None
    name: str
    description: str | None = None
    start_date_time: UTCDatetime
    duration_minutes: int
    status: PublishStatus = PublishStatus.Active

    @property
    def duration(self) -> datetime.timedelta:
        return datetime.timedelta(minutes=self.duration_minutes)

    @property
    def end_date_time(self) -> datetime.datetime:
        return self.start_date_time + self.duration


class QuizWithQuestions(Quiz):
    questions: list[Question] = []

    @property
    def total_points(self) -> int:
        return sum(q.points for q in self.questions)


class OptionDraft(BaseModel):
    text: str
    is_correct: bool = False


class QuestionDraft(BaseModel):
    """A question as authored, before it has been assigned ids."""

    type: QuestionType
    text: str
    points: int
    correct_answer: str | None = None
    options: list[OptionDraft] = []
