"""View models for quizzes.

Faculty see questions with their answers; students get the same quiz with
``correct_answer`` and ``is_correct`` left out.
"""

from __future__ import annotations

import datetime
import typing as t

import pydantic as p
from pydantic.alias_generators import to_camel

from tally.model import CourseID, OptionID, PublishStatus, QuestionID, QuestionType, QuizID, QuizWindow, UserID

from .base import View


class OptionRequest(View):
    text: str
    is_correct: bool = False


class QuestionRequest(View):
    type: QuestionType
    text: str
    points: int = p.Field(gt=0)
    correct_answer: str | None = None
    options: list[OptionRequest] = []


class QuizCreateRequest(View):
    course_id: CourseID
    instructor_id: UserID | None = None
    name: str = p.Field(min_length=1)
    description: str | None = None
    start_date_time: datetime.datetime
    duration_minutes: int
    status: PublishStatus = PublishStatus.Active
    questions: list[QuestionRequest]


class QuizUpdateRequest(View):
    """Fields left out of the body keep their value; only ``description`` may be cleared with null."""

    name: str | None = p.Field(default=None, min_length=1)
    description: str | None = None
    start_date_time: datetime.datetime | None = None
    duration_minutes: int | None = None
    status: PublishStatus | None = None

    @p.model_validator(mode="after")
    def check_not_null(self) -> t.Self:
        for field in self.model_fields_set - {"description"}:
            if getattr(self, field) is None:
                raise ValueError(f"{to_camel(field)} cannot be null")
        return self


class QuizStatusRequest(View):
    status: PublishStatus


class StudentOptionResponse(View):
    option_id: OptionID
    text: str


class OptionResponse(StudentOptionResponse):
    is_correct: bool


class StudentQuestionResponse(View):
    question_id: QuestionID
    type: QuestionType
    text: str
    points: int


class QuestionResponse(StudentQuestionResponse):
    correct_answer: str | None = None
    options: list[OptionResponse] = []


class StudentQuestionWithOptionsResponse(StudentQuestionResponse):
    options: list[StudentOptionResponse] = []


class QuizSummaryResponse(View):
    quiz_id: QuizID
    course_id: CourseID
    instructor_id: UserID | None = None
    name: str
    description: str | None = None
    start_date_time: datetime.datetime
    end_date_time: datetime.datetime
    duration_minutes: int
    total_points: int
    status: PublishStatus
    window: QuizWindow


class QuizResponse(QuizSummaryResponse):
    questions: list[QuestionResponse]


class StudentQuizResponse(QuizSummaryResponse):
    questions: list[StudentQuestionWithOptionsResponse]
