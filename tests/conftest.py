"""Pytest fixtures for Tally tests.

The container is booted once, in the Test environment, against an in-memory
SQLite database whose tables are created from the table metadata. Each test
runs inside a transaction that is rolled back afterwards; code under test
calling ``session.begin()`` gets a savepoint instead.

Time is frozen: the ``clock`` fixture replaces the container's ``utcnow``
provider, and tests move it forward explicitly.

Usage:
    def test_submit(db_session: Session, clock: FrozenClock, quiz_factory):
        quiz = quiz_factory(start=clock.now)
        clock.advance(minutes=5)
"""

from __future__ import annotations

import datetime
import os
import typing as t
from pathlib import Path

import pydantic as p
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

import tally
from tally.core import TallyContainer
from tally.core.config.web import TallyWebSettings
from tally.grading.quiz import build_questions
from tally.model import (
    Assignment,
    Course,
    CourseID,
    DeploymentEnvironment,
    OptionDraft,
    PublishStatus,
    QuestionDraft,
    QuestionType,
    QuizID,
    QuizWithQuestions,
    User,
    UserID,
    UserRole,
)
from tally.storage import assignment as assignment_storage
from tally.storage import course as course_storage
from tally.storage import quiz as quiz_storage
from tally.storage import user as user_storage
from tally.storage.table import metadata

T0 = datetime.datetime(2026, 3, 2, 9, 0, tzinfo=datetime.UTC)


class FrozenClock(object):
    """A ``utcnow`` that only moves when told to."""

    def __init__(self, now: datetime.datetime):
        self.now = now

    def __call__(self) -> datetime.datetime:
        return self.now

    def advance(self, **kwargs: float) -> datetime.datetime:
        self.now += datetime.timedelta(**kwargs)
        return self.now


@pytest.fixture(scope="session")
def container() -> t.Generator[TallyContainer]:
    """Boot the DI container for the test session."""
    ct = TallyContainer()
    root = Path(os.path.dirname(tally.__file__)).parent

    TallyContainer.boot(
        ct,
        debug=True,
        env=DeploymentEnvironment.Test,
        config_root=p.FileUrl(f"file://{root}/config"),
        override=(),
    )
    metadata.create_all(ct.storage().persistent().engine())

    yield ct

    ct.shutdown_resources()


@pytest.fixture(scope="session")
def app(container: TallyContainer) -> FastAPI:
    from tally.web.tally.main import _create_app  # pyright: ignore[reportPrivateUsage]

    return _create_app(
        config=TallyWebSettings(**container.config.web.tally()),
        env=DeploymentEnvironment.Test,
    )


@pytest.fixture
def db_session(container: TallyContainer) -> t.Generator[Session]:
    """Provide a database session wrapped in a transaction that is rolled back after the test.

    join_transaction_mode="create_savepoint" makes ``session.begin()`` in the
    code under test open a savepoint inside the outer transaction.
    """
    engine = container.storage().persistent().engine()

    connection = engine.connect()
    transaction = connection.begin()

    session = Session(
        bind=connection,
        autobegin=False,
        join_transaction_mode="create_savepoint",
    )

    yield session

    session.close()
    transaction.rollback()
    connection.close()


@pytest.fixture
def clock(container: TallyContainer) -> t.Generator[FrozenClock]:
    """Freeze the container's clock at ``T0``."""
    frozen = FrozenClock(T0)
    container.utcnow.override(frozen)

    yield frozen

    container.utcnow.reset_override()


@pytest.fixture
def client(
    app: FastAPI, container: TallyContainer, db_session: Session, clock: FrozenClock
) -> t.Generator[TestClient]:
    """Provide a TestClient whose requests share the test's transactional session."""
    container.storage().persistent().session.override(db_session)

    with TestClient(app) as test_client:
        yield test_client

    container.storage().persistent().session.reset_override()


@pytest.fixture
def user_factory(db_session: Session) -> t.Callable[..., User]:
    """Factory fixture for creating users; emails are made unique when not given."""

    def create_user(
        email: str | None = None,
        name: str = "Test Student",
        role: UserRole = UserRole.Student,
    ) -> User:
        if email is None:
            email = f"user-{UserID().key[:8].lower()}@example.com"
        with db_session.begin():
            return user_storage.create(email=email, name=name, role=role, session=db_session)

    return create_user


@pytest.fixture
def student(user_factory: t.Callable[..., User]) -> User:
    return user_factory(name="Sam Student")


@pytest.fixture
def faculty(user_factory: t.Callable[..., User]) -> User:
    return user_factory(name="Fran Faculty", role=UserRole.Faculty)


@pytest.fixture
def course_factory(db_session: Session, faculty: User) -> t.Callable[..., Course]:
    def create_course(name: str = "Algorithms", code: str | None = None, credits: int = 3) -> Course:
        if code is None:
            code = f"CS-{UserID().key[:6]}"
        with db_session.begin():
            return course_storage.create(
                name=name, code=code, credits=credits, instructor_id=faculty.user_id, session=db_session
            )

    return create_course


@pytest.fixture
def course(course_factory: t.Callable[..., Course]) -> Course:
    return course_factory()


def multiple_choice(text: str, points: int, options: t.Sequence[str], correct: int) -> QuestionDraft:
    return QuestionDraft(
        type=QuestionType.MultipleChoice,
        text=text,
        points=points,
        options=[OptionDraft(text=o, is_correct=(i == correct)) for i, o in enumerate(options)],
    )


def true_false(text: str, points: int, answer: bool) -> QuestionDraft:
    return QuestionDraft(type=QuestionType.TrueFalse, text=text, points=points, correct_answer=str(answer).lower())


def short_answer(text: str, points: int, answer: str) -> QuestionDraft:
    return QuestionDraft(type=QuestionType.ShortAnswer, text=text, points=points, correct_answer=answer)


@pytest.fixture
def quiz_factory(db_session: Session, course: Course, faculty: User) -> t.Callable[..., QuizWithQuestions]:
    """Factory fixture for quizzes.

    Defaults to two 5-point multiple choice questions whose first option is
    correct, open from ``T0`` for an hour.
    """

    def create_quiz(
        questions: t.Sequence[QuestionDraft] | None = None,
        start: datetime.datetime = T0,
        duration_minutes: int = 60,
        status: PublishStatus = PublishStatus.Active,
        name: str = "Quiz 1",
    ) -> QuizWithQuestions:
        if questions is None:
            questions = [
                multiple_choice("2 + 2?", 5, ["4", "5", "22"], correct=0),
                multiple_choice("Capital of France?", 5, ["Paris", "Lyon"], correct=0),
            ]
        quiz_id = QuizID()
        with db_session.begin():
            return quiz_storage.create(
                quiz_id=quiz_id,
                course_id=course.course_id,
                instructor_id=faculty.user_id,
                name=name,
                start_date_time=start,
                duration_minutes=duration_minutes,
                status=status,
                questions=build_questions(quiz_id, questions),
                session=db_session,
            )

    return create_quiz


@pytest.fixture
def assignment_factory(db_session: Session, course: Course, faculty: User) -> t.Callable[..., Assignment]:
    def create_assignment(
        due_date: datetime.datetime = T0 + datetime.timedelta(days=7),
        total_points: int = 100,
        name: str = "Homework 1",
        status: PublishStatus = PublishStatus.Active,
        course_id: CourseID | None = None,
    ) -> Assignment:
        with db_session.begin():
            return assignment_storage.create(
                course_id=course_id or course.course_id,
                instructor_id=faculty.user_id,
                name=name,
                due_date=due_date,
                total_points=total_points,
                status=status,
                session=db_session,
            )

    return create_assignment


def option_id(quiz: QuizWithQuestions, question: int, option: int) -> str:
    return str(quiz.questions[question].options[option].option_id)


def question_id(quiz: QuizWithQuestions, question: int) -> str:
    return str(quiz.questions[question].question_id)
