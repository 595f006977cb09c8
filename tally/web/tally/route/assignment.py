"""Assignment routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from tally.core import di
from tally.grading import submission as submission_service
from tally.model import Assignment, AssignmentID, CourseID
from tally.storage import assignment as assignment_storage

from ..view.assignment import AssignmentCreateRequest, AssignmentResponse, AssignmentUpdateRequest
from .error import grading_errors

router = APIRouter(prefix="/api/assignments", tags=["assignments"])


def _build_assignment_response(assignment: Assignment) -> AssignmentResponse:
    return AssignmentResponse(
        assignment_id=assignment.assignment_id,
        course_id=assignment.course_id,
        instructor_id=assignment.instructor_id,
        name=assignment.name,
        description=assignment.description,
        due_date=assignment.due_date,
        total_points=assignment.total_points,
        status=assignment.status,
    )


@router.post("", operation_id="create_assignment", status_code=status.HTTP_201_CREATED)
@di.inject
def create_assignment(
    request: AssignmentCreateRequest,
    session: Session = Depends(di.Manage["storage.persistent.session"]),
) -> AssignmentResponse:
    with session.begin(), grading_errors():
        assignment = submission_service.create_assignment(
            course_id=request.course_id,
            instructor_id=request.instructor_id,
            name=request.name,
            description=request.description,
            due_date=request.due_date,
            total_points=request.total_points,
            status=request.status,
            session=session,
        )
        return _build_assignment_response(assignment)


@router.get("", operation_id="list_assignments")
@di.inject
def list_assignments(
    course_id: CourseID | None = Query(default=None, alias="courseId"),
    session: Session = Depends(di.Manage["storage.persistent.session"]),
) -> list[AssignmentResponse]:
    with session.begin():
        assignments = assignment_storage.find(course_id=course_id, session=session)
        return [_build_assignment_response(a) for a in assignments]


@router.get("/{assignment_id}", operation_id="get_assignment")
@di.inject
def get_assignment(
    assignment_id: AssignmentID,
    session: Session = Depends(di.Manage["storage.persistent.session"]),
) -> AssignmentResponse:
    with session.begin():
        assignment = assignment_storage.get(assignment_id, session=session)
        if assignment is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Assignment not found",
            )
        return _build_assignment_response(assignment)


@router.put("/{assignment_id}", operation_id="update_assignment")
@di.inject
def update_assignment(
    assignment_id: AssignmentID,
    request: AssignmentUpdateRequest,
    session: Session = Depends(di.Manage["storage.persistent.session"]),
) -> AssignmentResponse:
    """Edit an assignment; submissions already made keep their lateness."""
    with session.begin(), grading_errors():
        assignment = submission_service.update_assignment(
            assignment_id,
            **request.model_dump(by_alias=False, exclude_unset=True),
            session=session,
        )
        return _build_assignment_response(assignment)
