"""Quiz authoring routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from tally.core import di, TimestampProvider
from tally.grading import quiz as quiz_service
from tally.grading import quiz_window
from tally.model import CourseID, OptionDraft, PublishStatus, QuestionDraft, QuizID, QuizWithQuestions
from tally.storage import quiz as quiz_storage

from ..view.quiz import OptionResponse, QuestionResponse, QuizCreateRequest, QuizResponse, QuizStatusRequest, \
    QuizSummaryResponse, QuizUpdateRequest, StudentOptionResponse, StudentQuestionWithOptionsResponse, \
    StudentQuizResponse
from .error import grading_errors

router = APIRouter(prefix="/api/quizzes", tags=["quizzes"])


def _build_quiz_response(quiz: QuizWithQuestions, utcnow: TimestampProvider) -> QuizResponse:
    return QuizResponse(
        quiz_id=quiz.quiz_id,
        course_id=quiz.course_id,
        instructor_id=quiz.instructor_id,
        name=quiz.name,
        description=quiz.description,
        start_date_time=quiz.start_date_time,
        end_date_time=quiz.end_date_time,
        duration_minutes=quiz.duration_minutes,
        total_points=quiz.total_points,
        status=quiz.status,
        window=quiz_window(quiz, utcnow()),
        questions=[
            QuestionResponse(
                question_id=q.question_id,
                type=q.type,
                text=q.text,
                points=q.points,
                correct_answer=q.correct_answer,
                options=[
                    OptionResponse(option_id=o.option_id, text=o.text, is_correct=o.is_correct) for o in q.options
                ],
            )
            for q in quiz.questions
        ],
    )


def _build_student_quiz_response(quiz: QuizWithQuestions, utcnow: TimestampProvider) -> StudentQuizResponse:
    return StudentQuizResponse(
        quiz_id=quiz.quiz_id,
        course_id=quiz.course_id,
        instructor_id=quiz.instructor_id,
        name=quiz.name,
        description=quiz.description,
        start_date_time=quiz.start_date_time,
        end_date_time=quiz.end_date_time,
        duration_minutes=quiz.duration_minutes,
        total_points=quiz.total_points,
        status=quiz.status,
        window=quiz_window(quiz, utcnow()),
        questions=[
            StudentQuestionWithOptionsResponse(
                question_id=q.question_id,
                type=q.type,
                text=q.text,
                points=q.points,
                options=[StudentOptionResponse(option_id=o.option_id, text=o.text) for o in q.options],
            )
            for q in quiz.questions
        ],
    )


@router.post("", operation_id="create_quiz", status_code=status.HTTP_201_CREATED)
@di.inject
def create_quiz(
    request: QuizCreateRequest,
    session: Session = Depends(di.Manage["storage.persistent.session"]),
    utcnow: TimestampProvider = Depends(di.Provide["utcnow"]),
) -> QuizResponse:
    """Create a quiz with its questions."""
    with session.begin(), grading_errors():
        quiz = quiz_service.create(
            course_id=request.course_id,
            instructor_id=request.instructor_id,
            name=request.name,
            description=request.description,
            start_date_time=request.start_date_time,
            duration_minutes=request.duration_minutes,
            status=request.status,
            questions=[
                QuestionDraft(
                    type=q.type,
                    text=q.text,
                    points=q.points,
                    correct_answer=q.correct_answer,
                    options=[OptionDraft(text=o.text, is_correct=o.is_correct) for o in q.options],
                )
                for q in request.questions
            ],
            session=session,
        )
        return _build_quiz_response(quiz, utcnow)


@router.get("", operation_id="list_quizzes")
@di.inject
def list_quizzes(
    course_id: CourseID | None = Query(default=None, alias="courseId"),
    quiz_status: PublishStatus | None = Query(default=None, alias="status"),
    session: Session = Depends(di.Manage["storage.persistent.session"]),
    utcnow: TimestampProvider = Depends(di.Provide["utcnow"]),
) -> list[QuizSummaryResponse]:
    with session.begin():
        now = utcnow()
        summaries: list[QuizSummaryResponse] = []
        for q in quiz_storage.find(course_id=course_id, status=quiz_status, session=session):
            quiz = quiz_storage.get_with_questions(q.quiz_id, session=session)
            assert quiz is not None
            summaries.append(
                QuizSummaryResponse(
                    quiz_id=quiz.quiz_id,
                    course_id=quiz.course_id,
                    instructor_id=quiz.instructor_id,
                    name=quiz.name,
                    description=quiz.description,
                    start_date_time=quiz.start_date_time,
                    end_date_time=quiz.end_date_time,
                    duration_minutes=quiz.duration_minutes,
                    total_points=quiz.total_points,
                    status=quiz.status,
                    window=quiz_window(quiz, now),
                )
            )
        return summaries


@router.get("/{quiz_id}", operation_id="get_quiz")
@di.inject
def get_quiz(
    quiz_id: QuizID,
    session: Session = Depends(di.Manage["storage.persistent.session"]),
    utcnow: TimestampProvider = Depends(di.Provide["utcnow"]),
) -> QuizResponse:
    """Get a quiz with its answers, for faculty."""
    with session.begin(), grading_errors():
        return _build_quiz_response(quiz_service.get(quiz_id, session=session), utcnow)


@router.get("/{quiz_id}/student", operation_id="get_student_quiz")
@di.inject
def get_student_quiz(
    quiz_id: QuizID,
    session: Session = Depends(di.Manage["storage.persistent.session"]),
    utcnow: TimestampProvider = Depends(di.Provide["utcnow"]),
) -> StudentQuizResponse:
    """Get a quiz as a student sees it, without answers."""
    with session.begin(), grading_errors():
        return _build_student_quiz_response(quiz_service.get(quiz_id, session=session), utcnow)


@router.put("/{quiz_id}/status", operation_id="set_quiz_status")
@di.inject
def set_quiz_status(
    quiz_id: QuizID,
    request: QuizStatusRequest,
    session: Session = Depends(di.Manage["storage.persistent.session"]),
    utcnow: TimestampProvider = Depends(di.Provide["utcnow"]),
) -> QuizResponse:
    with session.begin(), grading_errors():
        quiz = quiz_service.set_status(quiz_id, request.status, session=session)
        return _build_quiz_response(quiz, utcnow)


@router.put("/{quiz_id}", operation_id="update_quiz")
@di.inject
def update_quiz(
    quiz_id: QuizID,
    request: QuizUpdateRequest,
    session: Session = Depends(di.Manage["storage.persistent.session"]),
    utcnow: TimestampProvider = Depends(di.Provide["utcnow"]),
) -> QuizResponse:
    """Edit a quiz's settings."""
    with session.begin(), grading_errors():
        quiz = quiz_service.update(quiz_id, **request.model_dump(by_alias=False, exclude_unset=True), session=session)
        return _build_quiz_response(quiz, utcnow)
