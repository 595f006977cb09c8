from __future__ import annotations

import datetime
import typing as t

import sqlalchemy as sqla

from tally.core import di
from tally.lib import NotSet
from tally.model import CourseID, PublishStatus, Question, QuestionOption, Quiz, QuizID, QuizWithQuestions, UserID

from . import Session
from .table import question_options, quizzes
from .table import questions as quiz_questions


def get(quiz_id: QuizID, *, session: Session = di.Provide["storage.persistent.session"]) -> Quiz | None:
    stmt = sqla.select(quizzes.__table__).where(quizzes.quiz_id == quiz_id)
    row = session.execute(stmt).mappings().one_or_none()
    return Quiz(**row) if row else None


def get_with_questions(
    quiz_id: QuizID, *, session: Session = di.Provide["storage.persistent.session"]
) -> QuizWithQuestions | None:
    """Get a quiz along with its questions and options, each in display order."""
    quiz = get(quiz_id, session=session)
    if quiz is None:
        return None

    qstmt = (
        sqla
        .select(quiz_questions.__table__)
        .where(quiz_questions.quiz_id == quiz_id)
        .order_by(quiz_questions.position)
    )
    qrows = session.execute(qstmt).mappings().all()

    ostmt = (
        sqla
        .select(question_options.__table__)
        .join(quiz_questions, quiz_questions.question_id == question_options.question_id)
        .where(quiz_questions.quiz_id == quiz_id)
        .order_by(question_options.position)
    )
    options: dict[str, list[QuestionOption]] = {}
    for row in session.execute(ostmt).mappings().all():
        options.setdefault(str(row["question_id"]), []).append(QuestionOption(**row))

    return QuizWithQuestions(
        **quiz.model_dump(by_alias=False),
        questions=[Question(**row, options=options.get(str(row["question_id"]), [])) for row in qrows],
    )


def find(
    *,
    course_id: CourseID | None = None,
    status: PublishStatus | None = None,
    session: Session = di.Provide["storage.persistent.session"],
) -> tuple[Quiz, ...]:
    stmt = sqla.select(quizzes.__table__).order_by(quizzes.start_date_time)
    if course_id is not None:
        stmt = stmt.where(quizzes.course_id == course_id)
    if status is not None:
        stmt = stmt.where(quizzes.status == status.value)
    rows = session.execute(stmt).mappings().all()
    return tuple(Quiz(**row) for row in rows)


def create(
    *,
    quiz_id: QuizID | None = None,
    course_id: CourseID,
    name: str,
    start_date_time: datetime.datetime,
    duration_minutes: int,
    questions: t.Sequence[Question] = (),
    instructor_id: UserID | None = None,
    description: str | None = None,
    status: PublishStatus = PublishStatus.Active,
    session: Session = di.Provide["storage.persistent.session"],
) -> QuizWithQuestions:
    """Create a quiz and its questions; question and option ids are taken as given."""
    quiz_id = quiz_id or QuizID()
    stmt = sqla.insert(quizzes).values(
        quiz_id=quiz_id,
        course_id=course_id,
        instructor_id=instructor_id,
        name=name,
        description=description,
        start_date_time=start_date_time,
        duration_minutes=duration_minutes,
        status=status.value,
    )
    session.execute(stmt)

    for position, question in enumerate(questions):
        session.execute(
            sqla.insert(quiz_questions).values(
                question_id=question.question_id,
                quiz_id=quiz_id,
                type=question.type.value,
                text=question.text,
                points=question.points,
                correct_answer=question.correct_answer,
                position=position,
            )
        )
        for opt_position, option in enumerate(question.options):
            session.execute(
                sqla.insert(question_options).values(
                    option_id=option.option_id,
                    question_id=question.question_id,
                    text=option.text,
                    is_correct=option.is_correct,
                    position=opt_position,
                )
            )

    session.flush()
    result = get_with_questions(quiz_id, session=session)
    assert result is not None
    return result


def update(
    quiz_id: QuizID,
    *,
    name: str | NotSet = NotSet(),
    description: str | None | NotSet = NotSet(),
    start_date_time: datetime.datetime | NotSet = NotSet(),
    duration_minutes: int | NotSet = NotSet(),
    status: PublishStatus | NotSet = NotSet(),
    session: Session = di.Provide["storage.persistent.session"],
) -> None:
    """Update a quiz.

    Uses NotSet sentinel for parameters where None may be a valid value.
    Call get() after if you need the updated entity.

    Raises:
        KeyError: If quiz_id does not correspond to a quiz
    """
    values: dict[str, t.Any] = {}
    if not isinstance(name, NotSet):
        values["name"] = name
    if not isinstance(description, NotSet):
        values["description"] = description
    if not isinstance(start_date_time, NotSet):
        values["start_date_time"] = start_date_time
    if not isinstance(duration_minutes, NotSet):
        values["duration_minutes"] = duration_minutes
    if not isinstance(status, NotSet):
        values["status"] = status.value

    # a no-op update still verifies the quiz exists
    stmt = sqla.update(quizzes).where(quizzes.quiz_id == quiz_id).values(**(values or {"quiz_id": quiz_id}))
    result = session.execute(stmt)
    if result.rowcount == 0:  # pyright: ignore[reportAttributeAccessIssue]
        raise KeyError(f"Quiz {quiz_id} not found")
    session.flush()


def total_points(
    *,
    course_id: CourseID,
    session: Session = di.Provide["storage.persistent.session"],
) -> dict[QuizID, int]:
    """Points available on each quiz of the course, whatever its status; 0 for a quiz without questions."""
    stmt = (
        sqla
        .select(quizzes.quiz_id, sqla.func.coalesce(sqla.func.sum(quiz_questions.points), 0).label("total_points"))
        .select_from(quizzes)
        .outerjoin(quiz_questions, quiz_questions.quiz_id == quizzes.quiz_id)
        .where(quizzes.course_id == course_id)
        .group_by(quizzes.quiz_id)
    )
    return {row.quiz_id: int(row.total_points) for row in session.execute(stmt)}
