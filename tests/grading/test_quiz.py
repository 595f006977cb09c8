from __future__ import annotations

import datetime
import typing as t

import pytest
from sqlalchemy.orm import Session

from tally.grading import NotFound, ValidationError
from tally.grading import quiz as quiz_service
from tally.model import Course, CourseID, PublishStatus, QuestionType, QuizID, QuizWithQuestions, User

from ..conftest import multiple_choice, short_answer, T0, true_false

QuizFactory = t.Callable[..., QuizWithQuestions]


class TestCreate(object):
    def test_create(self, db_session: Session, course: Course, faculty: User) -> None:
        with db_session.begin():
            quiz = quiz_service.create(
                course_id=course.course_id,
                name="Midterm",
                start_date_time=T0,
                duration_minutes=45,
                instructor_id=faculty.user_id,
                questions=[
                    multiple_choice("2 + 2?", 4, ["3", "4"], correct=1),
                    true_false("The sky is blue", 2, True),
                    short_answer("Capital of France?", 3, "Paris"),
                ],
                session=db_session,
            )

        assert quiz.total_points == 9
        assert quiz.end_date_time == T0 + datetime.timedelta(minutes=45)
        assert [q.type for q in quiz.questions] == [
            QuestionType.MultipleChoice,
            QuestionType.TrueFalse,
            QuestionType.ShortAnswer,
        ]
        mc, tf, _ = quiz.questions
        assert [o.is_correct for o in mc.options] == [False, True]
        assert mc.correct_answer is None
        assert tf.correct_answer == "true"

        with db_session.begin():
            assert quiz_service.get(quiz.quiz_id, session=db_session) == quiz

    def test_malformed_question_writes_nothing(self, db_session: Session, course: Course) -> None:
        with pytest.raises(ValidationError), db_session.begin():
            quiz_service.create(
                course_id=course.course_id,
                name="Broken",
                start_date_time=T0,
                duration_minutes=10,
                questions=[multiple_choice("No answer", 1, ["a", "b"], correct=5)],
                session=db_session,
            )

    def test_naive_start(self, db_session: Session, course: Course) -> None:
        with pytest.raises(ValidationError), db_session.begin():
            quiz_service.create(
                course_id=course.course_id,
                name="Naive",
                start_date_time=T0.replace(tzinfo=None),
                duration_minutes=10,
                questions=[true_false("?", 1, False)],
                session=db_session,
            )

    def test_unknown_course(self, db_session: Session) -> None:
        with pytest.raises(NotFound), db_session.begin():
            quiz_service.create(
                course_id=CourseID(),
                name="Orphan",
                start_date_time=T0,
                duration_minutes=10,
                questions=[true_false("?", 1, False)],
                session=db_session,
            )


class TestStatusAndUpdate(object):
    def test_set_status(self, db_session: Session, quiz_factory: QuizFactory) -> None:
        quiz = quiz_factory()

        with db_session.begin():
            updated = quiz_service.set_status(quiz.quiz_id, PublishStatus.Inactive, session=db_session)

        assert updated.status is PublishStatus.Inactive
        assert updated.questions == quiz.questions

    def test_set_status_unknown(self, db_session: Session) -> None:
        with pytest.raises(NotFound), db_session.begin():
            quiz_service.set_status(QuizID(), PublishStatus.Active, session=db_session)

    def test_update(self, db_session: Session, quiz_factory: QuizFactory) -> None:
        quiz = quiz_factory(duration_minutes=30)
        new_start = T0 + datetime.timedelta(days=1)

        with db_session.begin():
            updated = quiz_service.update(
                quiz.quiz_id,
                name="Quiz 1 (moved)",
                start_date_time=new_start,
                duration_minutes=45,
                session=db_session,
            )

        assert updated.name == "Quiz 1 (moved)"
        assert updated.end_date_time == new_start + datetime.timedelta(minutes=45)
        assert updated.status is PublishStatus.Active
        assert updated.questions == quiz.questions

    @pytest.mark.parametrize("duration_minutes", [0, -15])
    def test_duration_must_be_positive(
        self, db_session: Session, quiz_factory: QuizFactory, duration_minutes: int
    ) -> None:
        quiz = quiz_factory()

        with pytest.raises(ValidationError), db_session.begin():
            quiz_service.update(quiz.quiz_id, duration_minutes=duration_minutes, session=db_session)

    def test_start_needs_timezone(self, db_session: Session, quiz_factory: QuizFactory) -> None:
        quiz = quiz_factory()

        with pytest.raises(ValidationError), db_session.begin():
            quiz_service.update(quiz.quiz_id, start_date_time=T0.replace(tzinfo=None), session=db_session)

    def test_update_unknown(self, db_session: Session) -> None:
        with pytest.raises(NotFound), db_session.begin():
            quiz_service.update(QuizID(), name="Ghost", session=db_session)
