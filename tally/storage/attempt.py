from __future__ import annotations

import datetime
import typing as t

import sqlalchemy as sqla

from tally.core import di
from tally.model import AttemptID, AttemptStatus, QuizAttempt, QuizID, UserID

from . import Session
from .table import quiz_attempts, quizzes


def get(
    attempt_id: AttemptID,
    *,
    for_update: bool = False,
    session: Session = di.Provide["storage.persistent.session"],
) -> QuizAttempt | None:
    stmt = sqla.select(quiz_attempts.__table__).where(quiz_attempts.attempt_id == attempt_id)
    if for_update:
        stmt = stmt.with_for_update()
    row = session.execute(stmt).mappings().one_or_none()
    return QuizAttempt(**row) if row else None


def get_for_student(
    quiz_id: QuizID,
    student_id: UserID,
    *,
    session: Session = di.Provide["storage.persistent.session"],
) -> QuizAttempt | None:
    """The student's attempt at the quiz, if there is one; there is never more than one."""
    stmt = sqla.select(quiz_attempts.__table__).where(
        quiz_attempts.quiz_id == quiz_id, quiz_attempts.student_id == student_id
    )
    row = session.execute(stmt).mappings().one_or_none()
    return QuizAttempt(**row) if row else None


def find(
    *,
    quiz_id: QuizID | None = None,
    student_id: UserID | None = None,
    status: AttemptStatus | None = None,
    session: Session = di.Provide["storage.persistent.session"],
) -> tuple[QuizAttempt, ...]:
    stmt = sqla.select(quiz_attempts.__table__).order_by(quiz_attempts.started_at.desc())
    if quiz_id is not None:
        stmt = stmt.where(quiz_attempts.quiz_id == quiz_id)
    if student_id is not None:
        stmt = stmt.where(quiz_attempts.student_id == student_id)
    if status is not None:
        stmt = stmt.where(quiz_attempts.status == status.value)
    rows = session.execute(stmt).mappings().all()
    return tuple(QuizAttempt(**row) for row in rows)


def find_overdue(
    now: datetime.datetime,
    *,
    session: Session = di.Provide["storage.persistent.session"],
) -> tuple[QuizAttempt, ...]:
    """In-progress attempts whose quiz duration has elapsed as of ``now``.

    The deadline arithmetic differs per backend, so candidates are narrowed by
    the longest possible deadline in SQL and checked exactly here.
    """
    stmt = (
        sqla
        .select(quiz_attempts.__table__, quizzes.duration_minutes)
        .join(quizzes, quizzes.quiz_id == quiz_attempts.quiz_id)
        .where(quiz_attempts.status == AttemptStatus.InProgress.value, quiz_attempts.started_at <= now)
        .order_by(quiz_attempts.started_at)
    )
    overdue: list[QuizAttempt] = []
    for row in session.execute(stmt).mappings().all():
        values = dict(row)
        duration = datetime.timedelta(minutes=values.pop("duration_minutes"))
        attempt = QuizAttempt(**values)
        if attempt.started_at + duration <= now:
            overdue.append(attempt)
    return tuple(overdue)


def create(
    *,
    quiz_id: QuizID,
    student_id: UserID,
    started_at: datetime.datetime,
    session: Session = di.Provide["storage.persistent.session"],
) -> QuizAttempt:
    """Create an in-progress attempt.

    Raises:
        sqlalchemy.exc.IntegrityError: If the student already has an attempt at the quiz
    """
    attempt_id = AttemptID()
    stmt = sqla.insert(quiz_attempts).values(
        attempt_id=attempt_id,
        quiz_id=quiz_id,
        student_id=student_id,
        status=AttemptStatus.InProgress.value,
        started_at=started_at,
        student_answers={},
    )
    session.execute(stmt)
    session.flush()
    result = get(attempt_id, session=session)
    assert result is not None
    return result


def record_answers(
    attempt_id: AttemptID,
    answers: t.Mapping[str, str],
    *,
    session: Session = di.Provide["storage.persistent.session"],
) -> bool:
    """Replace the recorded answers of an in-progress attempt.

    Returns:
        False if the attempt does not exist or is no longer in progress
    """
    stmt = (
        sqla
        .update(quiz_attempts)
        .where(
            quiz_attempts.attempt_id == attempt_id,
            quiz_attempts.status == AttemptStatus.InProgress.value,
        )
        .values(student_answers=dict(answers))
    )
    result = session.execute(stmt)
    session.flush()
    return bool(result.rowcount)  # pyright: ignore[reportUnknownArgumentType, reportAttributeAccessIssue]


def submit(
    attempt_id: AttemptID,
    *,
    submitted_at: datetime.datetime,
    answers: t.Mapping[str, str],
    points_earned: int,
    total_points: int,
    percentage: float,
    letter_grade: str,
    performance_description: str,
    auto_submitted: bool = False,
    session: Session = di.Provide["storage.persistent.session"],
) -> bool:
    """Move an attempt from in progress to submitted, writing its results.

    The status guard makes this a compare-and-set: of two concurrent
    submissions only one updates a row.

    Returns:
        True if this call submitted the attempt, False if it was already submitted
    """
    stmt = (
        sqla
        .update(quiz_attempts)
        .where(
            quiz_attempts.attempt_id == attempt_id,
            quiz_attempts.status == AttemptStatus.InProgress.value,
        )
        .values(
            status=AttemptStatus.Submitted.value,
            submitted_at=submitted_at,
            auto_submitted=auto_submitted,
            student_answers=dict(answers),
            points_earned=points_earned,
            total_points=total_points,
            percentage=percentage,
            letter_grade=letter_grade,
            performance_description=performance_description,
        )
    )
    result = session.execute(stmt)
    session.flush()
    return result.rowcount == 1  # pyright: ignore[reportAttributeAccessIssue]
