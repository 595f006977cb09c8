"""View models for assignments and their submissions."""

from __future__ import annotations

import datetime
import typing as t

import pydantic as p
from pydantic.alias_generators import to_camel

from tally.model import AssignmentID, CourseID, PublishStatus, SubmissionID, SubmissionStatus, UserID

from .base import View


class AssignmentCreateRequest(View):
    course_id: CourseID
    instructor_id: UserID | None = None
    name: str = p.Field(min_length=1)
    description: str | None = None
    due_date: datetime.datetime
    total_points: int = 100
    status: PublishStatus = PublishStatus.Active


class AssignmentUpdateRequest(View):
    """Fields left out of the body keep their value; only ``description`` may be cleared with null."""

    name: str | None = p.Field(default=None, min_length=1)
    description: str | None = None
    due_date: datetime.datetime | None = None
    total_points: int | None = None
    status: PublishStatus | None = None

    @p.model_validator(mode="after")
    def check_not_null(self) -> t.Self:
        for field in self.model_fields_set - {"description"}:
            if getattr(self, field) is None:
                raise ValueError(f"{to_camel(field)} cannot be null")
        return self


class AssignmentResponse(View):
    assignment_id: AssignmentID
    course_id: CourseID
    instructor_id: UserID | None = None
    name: str
    description: str | None = None
    due_date: datetime.datetime
    total_points: int
    status: PublishStatus


class SubmissionCreateRequest(View):
    assignment_id: AssignmentID
    student_id: UserID
    content: str | None = None


class SubmissionGradeRequest(View):
    """Either ``points_earned``, or a percentage ``grade`` with an optional letter."""

    points_earned: float | None = None
    grade: float | None = None
    letter_grade: str | None = None
    feedback: str | None = None

    @p.model_validator(mode="after")
    def check_exclusive(self) -> t.Self:
        if (self.points_earned is None) == (self.grade is None):
            raise ValueError("exactly one of pointsEarned and grade is required")
        if self.letter_grade is not None and self.grade is None:
            raise ValueError("letterGrade is only accepted with grade")
        return self


class SubmissionResponse(View):
    submission_id: SubmissionID
    assignment_id: AssignmentID
    student_id: UserID
    submission_number: int
    submitted_at: datetime.datetime
    is_late: bool
    status: SubmissionStatus
    content: str | None = None
    points_earned: float | None = None
    grade: float | None = None
    letter_grade: str | None = None
    feedback: str | None = None
    graded_at: datetime.datetime | None = None
