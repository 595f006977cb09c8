from __future__ import annotations

import datetime
import typing as t

from tally.core import di, LoggingProvider
from tally.lib import NotSet
from tally.model import (
    CourseID,
    OptionID,
    PublishStatus,
    Question,
    QuestionDraft,
    QuestionID,
    QuestionOption,
    QuestionType,
    QuizID,
    QuizWithQuestions,
    UserID,
)
from tally.storage import course as course_storage
from tally.storage import quiz as quiz_storage
from tally.storage import Session

from .errors import NotFound, ValidationError
from .scoring import validate_quiz


def build_questions(quiz_id: QuizID, drafts: t.Sequence[QuestionDraft]) -> list[Question]:
    """Assign ids and positions to authored questions."""
    questions: list[Question] = []
    for position, draft in enumerate(drafts):
        question_id = QuestionID()
        options = (
            [
                QuestionOption(
                    option_id=OptionID(),
                    question_id=question_id,
                    text=o.text,
                    is_correct=o.is_correct,
                    position=i,
                )
                for i, o in enumerate(draft.options)
            ]
            if draft.type is QuestionType.MultipleChoice
            else []
        )
        questions.append(
            Question(
                question_id=question_id,
                quiz_id=quiz_id,
                type=draft.type,
                text=draft.text,
                points=draft.points,
                correct_answer=None if draft.type is QuestionType.MultipleChoice else draft.correct_answer,
                position=position,
                options=options,
            )
        )
    return questions


@di.inject
def create(
    *,
    course_id: CourseID,
    name: str,
    start_date_time: datetime.datetime,
    duration_minutes: int,
    questions: t.Sequence[QuestionDraft],
    instructor_id: UserID | None = None,
    description: str | None = None,
    status: PublishStatus = PublishStatus.Active,
    session: Session = di.Provide["storage.persistent.session"],
    logging: LoggingProvider = di.Provide["logging"],
) -> QuizWithQuestions:
    """Create a quiz whose questions can all be graded.

    Raises:
        NotFound: If the course does not exist
        ValidationError: If the duration is not positive, there are no
            questions, or a question is malformed
    """
    logger = logging.get_logger()
    if course_storage.get(course_id, session=session) is None:
        raise NotFound(f"course {course_id} not found")

    if start_date_time.tzinfo is None:
        raise ValidationError("start_date_time must be timezone-aware")

    quiz_id = QuizID()
    built = build_questions(quiz_id, questions)
    validate_quiz(
        QuizWithQuestions(
            quiz_id=quiz_id,
            course_id=course_id,
            instructor_id=instructor_id,
            name=name,
            description=description,
            start_date_time=start_date_time,
            duration_minutes=duration_minutes,
            status=status,
            questions=built,
        )
    )

    quiz = quiz_storage.create(
        quiz_id=quiz_id,
        course_id=course_id,
        instructor_id=instructor_id,
        name=name,
        description=description,
        start_date_time=start_date_time,
        duration_minutes=duration_minutes,
        status=status,
        questions=built,
        session=session,
    )
    logger.info(
        "quiz created",
        extra={
            "quiz_id": quiz.quiz_id,
            "course_id": course_id,
            "questions": len(quiz.questions),
            "total_points": quiz.total_points,
        },
    )
    return quiz


@di.inject
def get(
    quiz_id: QuizID,
    *,
    session: Session = di.Provide["storage.persistent.session"],
) -> QuizWithQuestions:
    quiz = quiz_storage.get_with_questions(quiz_id, session=session)
    if quiz is None:
        raise NotFound(f"quiz {quiz_id} not found")
    return quiz


@di.inject
def update(
    quiz_id: QuizID,
    *,
    name: str | NotSet = NotSet(),
    description: str | None | NotSet = NotSet(),
    start_date_time: datetime.datetime | NotSet = NotSet(),
    duration_minutes: int | NotSet = NotSet(),
    status: PublishStatus | NotSet = NotSet(),
    session: Session = di.Provide["storage.persistent.session"],
    logging: LoggingProvider = di.Provide["logging"],
) -> QuizWithQuestions:
    """Edit a quiz's settings; parameters left unset keep their value.

    An attempt's deadline is its ``started_at`` plus the quiz duration, so a new
    duration also moves the deadline of attempts still in progress. Moving the
    start only changes who may start from now on.

    Raises:
        NotFound: If the quiz does not exist
        ValidationError: If the duration is not positive or the start is naive
    """
    if not isinstance(duration_minutes, NotSet) and duration_minutes <= 0:
        raise ValidationError("duration_minutes must be positive")
    if not isinstance(start_date_time, NotSet) and start_date_time.tzinfo is None:
        raise ValidationError("start_date_time must be timezone-aware")

    try:
        quiz_storage.update(
            quiz_id,
            name=name,
            description=description,
            start_date_time=start_date_time,
            duration_minutes=duration_minutes,
            status=status,
            session=session,
        )
    except KeyError as e:
        raise NotFound(f"quiz {quiz_id} not found") from e

    quiz = get(quiz_id, session=session)
    logging.get_logger().info(
        "quiz updated",
        extra={
            "quiz_id": quiz_id,
            "start_date_time": quiz.start_date_time,
            "duration_minutes": quiz.duration_minutes,
            "status": quiz.status,
        },
    )
    return quiz


@di.inject
def set_status(
    quiz_id: QuizID,
    status: PublishStatus,
    *,
    session: Session = di.Provide["storage.persistent.session"],
    logging: LoggingProvider = di.Provide["logging"],
) -> QuizWithQuestions:
    """Publish, unpublish or draft a quiz; attempts already started are unaffected."""
    try:
        quiz_storage.update(quiz_id, status=status, session=session)
    except KeyError as e:
        raise NotFound(f"quiz {quiz_id} not found") from e

    logging.get_logger().info("quiz status changed", extra={"quiz_id": quiz_id, "status": status})
    return get(quiz_id, session=session)
