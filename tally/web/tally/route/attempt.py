"""Quiz attempt routes: start, answer, submit and the countdown."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from tally.core import di
from tally.grading import attempt as attempt_service
from tally.model import AttemptID, QuizAttempt, QuizID, UserID

from ..view.attempt import AttemptAnswersRequest, AttemptResponse, AttemptStartRequest, AttemptSubmitRequest, \
    TimeRemainingResponse
from .error import grading_errors

router = APIRouter(prefix="/api/quiz-attempts", tags=["quiz-attempts"])


def _build_attempt_response(attempt: QuizAttempt) -> AttemptResponse:
    return AttemptResponse(
        attempt_id=attempt.attempt_id,
        quiz_id=attempt.quiz_id,
        student_id=attempt.student_id,
        status=attempt.status,
        started_at=attempt.started_at,
        submitted_at=attempt.submitted_at,
        auto_submitted=attempt.auto_submitted,
        student_answers=attempt.student_answers,
        points_earned=attempt.points_earned,
        total_points=attempt.total_points,
        percentage=attempt.percentage,
        letter_grade=attempt.letter_grade,
        performance_description=attempt.performance_description,
    )


@router.post("/start", operation_id="start_attempt")
@di.inject
def start_attempt(
    request: AttemptStartRequest,
    session: Session = Depends(di.Manage["storage.persistent.session"]),
) -> AttemptResponse:
    """Start an attempt, or resume the student's attempt in progress."""
    with session.begin(), grading_errors():
        attempt = attempt_service.start(request.quiz_id, request.student_id, session=session)
        return _build_attempt_response(attempt)


@router.post("/submit", operation_id="submit_attempt")
@di.inject
def submit_attempt(
    request: AttemptSubmitRequest,
    session: Session = Depends(di.Manage["storage.persistent.session"]),
) -> AttemptResponse:
    """Submit an attempt and return it graded."""
    with session.begin(), grading_errors():
        attempt = attempt_service.submit(
            request.attempt_id,
            request.student_answers,
            student_id=request.student_id,
            session=session,
        )
        return _build_attempt_response(attempt)


@router.get("/quiz/{quiz_id}/time-remaining/{student_id}", operation_id="get_time_remaining")
@di.inject
def get_time_remaining(
    quiz_id: QuizID,
    student_id: UserID,
    session: Session = Depends(di.Manage["storage.persistent.session"]),
) -> TimeRemainingResponse:
    """Time left on the student's attempt, as measured by the server."""
    with session.begin(), grading_errors():
        remaining = attempt_service.time_remaining(quiz_id, student_id, session=session)
        return TimeRemainingResponse(
            attempt_id=remaining.attempt.attempt_id,
            status=remaining.attempt.status,
            time_remaining=remaining.minutes,
            seconds_remaining=remaining.seconds,
            started_at=remaining.attempt.started_at,
            personal_end_time=remaining.personal_end_time,
            quiz_end_time=remaining.quiz_end_time,
        )


@router.get("/quiz/{quiz_id}/student/{student_id}", operation_id="get_student_attempt")
@di.inject
def get_student_attempt(
    quiz_id: QuizID,
    student_id: UserID,
    session: Session = Depends(di.Manage["storage.persistent.session"]),
) -> AttemptResponse:
    """The student's attempt at the quiz.

    Answers 404 when the student has not started the quiz; clients treat that
    as "no attempt yet", not as an error.
    """
    with session.begin(), grading_errors():
        attempt = attempt_service.current(quiz_id, student_id, session=session)
        if attempt is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="No attempt found",
            )
        return _build_attempt_response(attempt)


@router.get("/quiz/{quiz_id}", operation_id="list_quiz_attempts")
@di.inject
def list_quiz_attempts(
    quiz_id: QuizID,
    session: Session = Depends(di.Manage["storage.persistent.session"]),
) -> list[AttemptResponse]:
    with session.begin(), grading_errors():
        return [_build_attempt_response(a) for a in attempt_service.find(quiz_id=quiz_id, session=session)]


@router.get("/student/{student_id}", operation_id="list_student_attempts")
@di.inject
def list_student_attempts(
    student_id: UserID,
    session: Session = Depends(di.Manage["storage.persistent.session"]),
) -> list[AttemptResponse]:
    with session.begin(), grading_errors():
        return [_build_attempt_response(a) for a in attempt_service.find(student_id=student_id, session=session)]


@router.get("/{attempt_id}", operation_id="get_attempt")
@di.inject
def get_attempt(
    attempt_id: AttemptID,
    session: Session = Depends(di.Manage["storage.persistent.session"]),
) -> AttemptResponse:
    with session.begin(), grading_errors():
        attempt = attempt_service.get(attempt_id, session=session)
        if attempt is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Attempt not found",
            )
        return _build_attempt_response(attempt)


@router.put("/{attempt_id}", operation_id="record_answers")
@di.inject
def record_answers(
    attempt_id: AttemptID,
    request: AttemptAnswersRequest,
    session: Session = Depends(di.Manage["storage.persistent.session"]),
) -> AttemptResponse:
    """Record answers on an attempt in progress."""
    with session.begin(), grading_errors():
        attempt = attempt_service.record_answers(attempt_id, request.student_answers, session=session)
        return _build_attempt_response(attempt)
