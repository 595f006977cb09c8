"""Assignment submission and grading routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from tally.core import di
from tally.grading import submission as submission_service
from tally.model import AssignmentID, AssignmentSubmission, SubmissionID, UserID

from ..view.assignment import SubmissionCreateRequest, SubmissionGradeRequest, SubmissionResponse
from .error import grading_errors

router = APIRouter(prefix="/api/assignment-submissions", tags=["assignment-submissions"])


def _build_submission_response(submission: AssignmentSubmission) -> SubmissionResponse:
    return SubmissionResponse(
        submission_id=submission.submission_id,
        assignment_id=submission.assignment_id,
        student_id=submission.student_id,
        submission_number=submission.submission_number,
        submitted_at=submission.submitted_at,
        is_late=submission.is_late,
        status=submission.status,
        content=submission.content,
        points_earned=submission.points_earned,
        grade=submission.grade,
        letter_grade=submission.letter_grade,
        feedback=submission.feedback,
        graded_at=submission.graded_at,
    )


@router.post("", operation_id="create_submission", status_code=status.HTTP_201_CREATED)
@di.inject
def create_submission(
    request: SubmissionCreateRequest,
    session: Session = Depends(di.Manage["storage.persistent.session"]),
) -> SubmissionResponse:
    """Submit an assignment; resubmissions are numbered after the previous ones."""
    with session.begin(), grading_errors():
        submission = submission_service.submit(
            request.assignment_id, request.student_id, request.content, session=session
        )
        return _build_submission_response(submission)


@router.get(
    "/assignment/{assignment_id}/student/{student_id}/latest",
    operation_id="get_latest_submission",
)
@di.inject
def get_latest_submission(
    assignment_id: AssignmentID,
    student_id: UserID,
    session: Session = Depends(di.Manage["storage.persistent.session"]),
) -> SubmissionResponse:
    """The student's latest submission.

    Answers 404 when the student has not submitted; clients treat that as
    "not submitted yet", not as an error.
    """
    with session.begin():
        submission = submission_service.latest(assignment_id, student_id, session=session)
        if submission is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="No submission found",
            )
        return _build_submission_response(submission)


@router.get("/assignment/{assignment_id}", operation_id="list_assignment_submissions")
@di.inject
def list_assignment_submissions(
    assignment_id: AssignmentID,
    session: Session = Depends(di.Manage["storage.persistent.session"]),
) -> list[SubmissionResponse]:
    """Every submission of an assignment, most recent first."""
    with session.begin(), grading_errors():
        submissions = submission_service.find(assignment_id=assignment_id, session=session)
        return [_build_submission_response(s) for s in submissions]


@router.get("/assignment/{assignment_id}/graded", operation_id="list_graded_submissions")
@di.inject
def list_graded_submissions(
    assignment_id: AssignmentID,
    session: Session = Depends(di.Manage["storage.persistent.session"]),
) -> list[SubmissionResponse]:
    """Submissions of an assignment that have been graded, on time or late."""
    with session.begin(), grading_errors():
        submissions = submission_service.find(assignment_id=assignment_id, graded=True, session=session)
        return [_build_submission_response(s) for s in submissions]


@router.get("/assignment/{assignment_id}/late", operation_id="list_late_submissions")
@di.inject
def list_late_submissions(
    assignment_id: AssignmentID,
    session: Session = Depends(di.Manage["storage.persistent.session"]),
) -> list[SubmissionResponse]:
    """Submissions of an assignment made after its due date, graded or not."""
    with session.begin(), grading_errors():
        submissions = submission_service.find(assignment_id=assignment_id, late=True, session=session)
        return [_build_submission_response(s) for s in submissions]


@router.get("/student/{student_id}", operation_id="list_student_submissions")
@di.inject
def list_student_submissions(
    student_id: UserID,
    session: Session = Depends(di.Manage["storage.persistent.session"]),
) -> list[SubmissionResponse]:
    """Every submission a student has made, across assignments."""
    with session.begin(), grading_errors():
        submissions = submission_service.find(student_id=student_id, session=session)
        return [_build_submission_response(s) for s in submissions]


@router.get("/{submission_id}", operation_id="get_submission")
@di.inject
def get_submission(
    submission_id: SubmissionID,
    session: Session = Depends(di.Manage["storage.persistent.session"]),
) -> SubmissionResponse:
    with session.begin():
        submission = submission_service.get(submission_id, session=session)
        if submission is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Submission not found",
            )
        return _build_submission_response(submission)


@router.put("/{submission_id}/grade", operation_id="grade_submission")
@di.inject
def grade_submission(
    submission_id: SubmissionID,
    request: SubmissionGradeRequest,
    session: Session = Depends(di.Manage["storage.persistent.session"]),
) -> SubmissionResponse:
    """Grade a submission by points earned, or by percentage and letter."""
    with session.begin(), grading_errors():
        if request.grade is not None:
            submission = submission_service.grade_by_percentage(
                submission_id, request.grade, request.letter_grade, request.feedback, session=session
            )
        else:
            # check_exclusive guarantees points_earned when grade is absent
            submission = submission_service.grade_by_points(
                submission_id, request.points_earned, request.feedback, session=session
            )
        return _build_submission_response(submission)
