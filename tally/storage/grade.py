from __future__ import annotations

import typing as t

import sqlalchemy as sqla

from tally.core import di
from tally.model import CourseGrade, CourseGradeID, CourseID, UserID

from . import Session
from .table import course_grades


class CourseGradeParams(t.TypedDict, total=False):
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
    letter_grade: str | None
    grade_point: float | None
    performance_description: str | None


def get(
    course_id: CourseID,
    student_id: UserID,
    *,
    session: Session = di.Provide["storage.persistent.session"],
) -> CourseGrade | None:
    stmt = sqla.select(course_grades.__table__).where(
        course_grades.course_id == course_id, course_grades.student_id == student_id
    )
    row = session.execute(stmt).mappings().one_or_none()
    return CourseGrade(**row) if row else None


def find(
    *,
    course_id: CourseID | None = None,
    student_id: UserID | None = None,
    session: Session = di.Provide["storage.persistent.session"],
) -> tuple[CourseGrade, ...]:
    stmt = sqla.select(course_grades.__table__).order_by(course_grades.create_time)
    if course_id is not None:
        stmt = stmt.where(course_grades.course_id == course_id)
    if student_id is not None:
        stmt = stmt.where(course_grades.student_id == student_id)
    rows = session.execute(stmt).mappings().all()
    return tuple(CourseGrade(**row) for row in rows)


def save(
    course_id: CourseID,
    student_id: UserID,
    params: CourseGradeParams,
    *,
    session: Session = di.Provide["storage.persistent.session"],
) -> CourseGrade:
    """Insert or update the course grade of a student."""
    stmt = (
        sqla
        .update(course_grades)
        .where(course_grades.course_id == course_id, course_grades.student_id == student_id)
        .values(**params)
    )
    result = session.execute(stmt)
    if result.rowcount == 0:  # pyright: ignore[reportAttributeAccessIssue]
        session.execute(
            sqla.insert(course_grades).values(
                course_grade_id=CourseGradeID(), course_id=course_id, student_id=student_id, **params
            )
        )
    session.flush()
    saved = get(course_id, student_id, session=session)
    assert saved is not None
    return saved
