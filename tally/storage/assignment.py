from __future__ import annotations

import datetime
import typing as t

import sqlalchemy as sqla

from tally.core import di
from tally.lib import NotSet
from tally.model import Assignment, AssignmentID, CourseID, PublishStatus, UserID

from . import Session
from .table import assignments


def get(
    assignment_id: AssignmentID,
    *,
    session: Session = di.Provide["storage.persistent.session"],
) -> Assignment | None:
    """Get an assignment by ID."""
    stmt = sqla.select(assignments.__table__).where(assignments.assignment_id == assignment_id)
    row = session.execute(stmt).mappings().one_or_none()
    return Assignment(**row) if row else None


def find(
    *,
    course_id: CourseID | None = None,
    status: PublishStatus | None = None,
    session: Session = di.Provide["storage.persistent.session"],
) -> tuple[Assignment, ...]:
    """Find assignments matching criteria, soonest due first."""
    stmt = sqla.select(assignments.__table__).order_by(assignments.due_date)
    if course_id is not None:
        stmt = stmt.where(assignments.course_id == course_id)
    if status is not None:
        stmt = stmt.where(assignments.status == status.value)
    rows = session.execute(stmt).mappings().all()
    return tuple(Assignment(**row) for row in rows)


def create(
    *,
    course_id: CourseID,
    name: str,
    due_date: datetime.datetime,
    total_points: int = 100,
    instructor_id: UserID | None = None,
    description: str | None = None,
    status: PublishStatus = PublishStatus.Active,
    session: Session = di.Provide["storage.persistent.session"],
) -> Assignment:
    """Create a new assignment."""
    assignment_id = AssignmentID()
    stmt = sqla.insert(assignments).values(
        assignment_id=assignment_id,
        course_id=course_id,
        instructor_id=instructor_id,
        name=name,
        description=description,
        due_date=due_date,
        total_points=total_points,
        status=status.value,
    )
    session.execute(stmt)
    session.flush()
    result = get(assignment_id, session=session)
    assert result is not None
    return result


def update(
    assignment_id: AssignmentID,
    *,
    name: str | NotSet = NotSet(),
    description: str | None | NotSet = NotSet(),
    due_date: datetime.datetime | NotSet = NotSet(),
    total_points: int | NotSet = NotSet(),
    status: PublishStatus | NotSet = NotSet(),
    session: Session = di.Provide["storage.persistent.session"],
) -> None:
    """Update an assignment.

    Existing submissions keep the lateness they were given when submitted.
    Call get() after if you need the updated entity.

    Raises:
        KeyError: If assignment_id does not correspond to an assignment
    """
    values: dict[str, t.Any] = {}
    if not isinstance(name, NotSet):
        values["name"] = name
    if not isinstance(description, NotSet):
        values["description"] = description
    if not isinstance(due_date, NotSet):
        values["due_date"] = due_date
    if not isinstance(total_points, NotSet):
        values["total_points"] = total_points
    if not isinstance(status, NotSet):
        values["status"] = status.value

    if values:
        stmt = sqla.update(assignments).where(assignments.assignment_id == assignment_id).values(**values)
    else:
        # No-op update to verify assignment exists
        stmt = (
            sqla
            .update(assignments)
            .where(assignments.assignment_id == assignment_id)
            .values(assignment_id=assignment_id)
        )

    result = session.execute(stmt)
    if result.rowcount == 0:  # pyright: ignore[reportAttributeAccessIssue]
        raise KeyError(f"Assignment {assignment_id} not found")

    session.flush()
