"""View models for quiz attempts."""

from __future__ import annotations

import datetime

import pydantic as p

from tally.model import AttemptID, AttemptStatus, QuizID, UserID

from .base import View


class AttemptStartRequest(View):
    quiz_id: QuizID
    student_id: UserID


class AttemptAnswersRequest(View):
    """Answers to record, keyed by question id; omitted questions keep their answers."""

    student_answers: dict[str, str]


class AttemptSubmitRequest(View):
    attempt_id: AttemptID = p.Field(alias="id")
    student_id: UserID
    student_answers: dict[str, str] = {}


class AttemptResponse(View):
    attempt_id: AttemptID = p.Field(alias="id")
    quiz_id: QuizID
    student_id: UserID
    status: AttemptStatus
    started_at: datetime.datetime
    submitted_at: datetime.datetime | None = None
    auto_submitted: bool = False
    student_answers: dict[str, str] = {}
    points_earned: int | None = None
    total_points: int | None = None
    percentage: float | None = None
    letter_grade: str | None = None
    performance_description: str | None = None


class TimeRemainingResponse(View):
    """Countdown for an attempt; ``time_remaining`` is in whole minutes, rounded down."""

    attempt_id: AttemptID
    status: AttemptStatus
    time_remaining: int
    seconds_remaining: int
    started_at: datetime.datetime
    personal_end_time: datetime.datetime
    quiz_end_time: datetime.datetime
