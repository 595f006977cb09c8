from __future__ import annotations

import sqlalchemy as sqla

from tally.core import di
from tally.model import Course, CourseID, UserID

from . import Session
from .table import courses


def get(course_id: CourseID, *, session: Session = di.Provide["storage.persistent.session"]) -> Course | None:
    stmt = sqla.select(courses.__table__).where(courses.course_id == course_id)
    row = session.execute(stmt).mappings().one_or_none()
    return Course(**row) if row else None


def find(
    *,
    course_ids: tuple[CourseID, ...] | None = None,
    session: Session = di.Provide["storage.persistent.session"],
) -> tuple[Course, ...]:
    stmt = sqla.select(courses.__table__).order_by(courses.code)
    if course_ids is not None:
        stmt = stmt.where(courses.course_id.in_(course_ids))
    rows = session.execute(stmt).mappings().all()
    return tuple(Course(**row) for row in rows)


def create(
    *,
    name: str,
    code: str,
    credits: int = 3,
    instructor_id: UserID | None = None,
    session: Session = di.Provide["storage.persistent.session"],
) -> Course:
    course_id = CourseID()
    stmt = sqla.insert(courses).values(
        course_id=course_id, name=name, code=code, credits=credits, instructor_id=instructor_id
    )
    session.execute(stmt)
    session.flush()
    result = get(course_id, session=session)
    assert result is not None
    return result
