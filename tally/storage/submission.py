from __future__ import annotations

import datetime

import sqlalchemy as sqla

from tally.core import di
from tally.model import AssignmentID, AssignmentSubmission, SubmissionID, SubmissionStatus, UserID

from . import Session
from .table import assignment_submissions


def get(
    submission_id: SubmissionID,
    *,
    session: Session = di.Provide["storage.persistent.session"],
) -> AssignmentSubmission | None:
    stmt = sqla.select(assignment_submissions.__table__).where(assignment_submissions.submission_id == submission_id)
    row = session.execute(stmt).mappings().one_or_none()
    return AssignmentSubmission(**row) if row else None


def get_latest(
    assignment_id: AssignmentID,
    student_id: UserID,
    *,
    session: Session = di.Provide["storage.persistent.session"],
) -> AssignmentSubmission | None:
    """The student's highest-numbered submission for the assignment."""
    stmt = (
        sqla
        .select(assignment_submissions.__table__)
        .where(
            assignment_submissions.assignment_id == assignment_id,
            assignment_submissions.student_id == student_id,
        )
        .order_by(assignment_submissions.submission_number.desc())
        .limit(1)
    )
    row = session.execute(stmt).mappings().one_or_none()
    return AssignmentSubmission(**row) if row else None


def find(
    *,
    assignment_id: AssignmentID | None = None,
    student_id: UserID | None = None,
    graded: bool | None = None,
    late: bool | None = None,
    session: Session = di.Provide["storage.persistent.session"],
) -> tuple[AssignmentSubmission, ...]:
    """Find submissions, most recent first.

    ``graded`` and ``late`` filter on the grading branch and on the lateness
    frozen at submission; None leaves either unfiltered.
    """
    stmt = sqla.select(assignment_submissions.__table__).order_by(
        assignment_submissions.submitted_at.desc(), assignment_submissions.submission_number.desc()
    )
    if assignment_id is not None:
        stmt = stmt.where(assignment_submissions.assignment_id == assignment_id)
    if student_id is not None:
        stmt = stmt.where(assignment_submissions.student_id == student_id)
    if graded is not None:
        graded_statuses = [s.value for s in SubmissionStatus if s.is_graded]
        column = assignment_submissions.status
        stmt = stmt.where(column.in_(graded_statuses) if graded else column.not_in(graded_statuses))
    if late is not None:
        stmt = stmt.where(assignment_submissions.is_late == late)
    rows = session.execute(stmt).mappings().all()
    return tuple(AssignmentSubmission(**row) for row in rows)


def create(
    *,
    assignment_id: AssignmentID,
    student_id: UserID,
    submission_number: int,
    submitted_at: datetime.datetime,
    is_late: bool,
    status: SubmissionStatus,
    content: str | None = None,
    session: Session = di.Provide["storage.persistent.session"],
) -> AssignmentSubmission:
    submission_id = SubmissionID()
    stmt = sqla.insert(assignment_submissions).values(
        submission_id=submission_id,
        assignment_id=assignment_id,
        student_id=student_id,
        submission_number=submission_number,
        submitted_at=submitted_at,
        is_late=is_late,
        status=status.value,
        content=content,
    )
    session.execute(stmt)
    session.flush()
    result = get(submission_id, session=session)
    assert result is not None
    return result


def grade(
    submission_id: SubmissionID,
    *,
    status: SubmissionStatus,
    graded_at: datetime.datetime,
    grade: float | None,
    letter_grade: str | None,
    points_earned: float | None = None,
    feedback: str | None = None,
    session: Session = di.Provide["storage.persistent.session"],
) -> None:
    """Write grading results to a submission.

    Raises:
        KeyError: If submission_id does not correspond to a submission
    """
    stmt = (
        sqla
        .update(assignment_submissions)
        .where(assignment_submissions.submission_id == submission_id)
        .values(
            status=status.value,
            graded_at=graded_at,
            grade=grade,
            letter_grade=letter_grade,
            points_earned=points_earned,
            feedback=feedback,
        )
    )
    result = session.execute(stmt)
    if result.rowcount == 0:  # pyright: ignore[reportAttributeAccessIssue]
        raise KeyError(f"Submission {submission_id} not found")
    session.flush()
