"""Course grades computed from graded submissions and submitted attempts."""

from __future__ import annotations

import typing as t

import pytest
from sqlalchemy.orm import Session

from tally.grading import attempt as attempt_service
from tally.grading import course as course_service
from tally.grading import NotFound, ValidationError
from tally.grading import quiz as quiz_service
from tally.grading import submission as submission_service
from tally.model import Assignment, Course, PublishStatus, QuizWithQuestions, User, UserID

from ..conftest import FrozenClock, multiple_choice, option_id, question_id

AssignmentFactory = t.Callable[..., Assignment]
QuizFactory = t.Callable[..., QuizWithQuestions]


@pytest.fixture
def graded_assignment(
    db_session: Session, clock: FrozenClock, assignment_factory: AssignmentFactory, student: User
) -> t.Callable[..., Assignment]:
    """Create an assignment and grade the student's submission to it."""

    def create(points: float, total_points: int = 100, **kwargs: t.Any) -> Assignment:
        assignment = assignment_factory(total_points=total_points, **kwargs)
        with db_session.begin():
            submission = submission_service.submit(assignment.assignment_id, student.user_id, session=db_session)
            submission_service.grade_by_points(submission.submission_id, points, session=db_session)
        return assignment

    return create


@pytest.fixture
def six_of_ten_quiz(
    db_session: Session, clock: FrozenClock, quiz_factory: QuizFactory, student: User
) -> QuizWithQuestions:
    """A 10 point quiz on which the student scored 6."""
    quiz = quiz_factory(
        questions=[
            multiple_choice("First", 6, ["right", "wrong"], correct=0),
            multiple_choice("Second", 4, ["right", "wrong"], correct=0),
        ]
    )
    with db_session.begin():
        attempt = attempt_service.start(quiz.quiz_id, student.user_id, session=db_session)
        attempt_service.submit(
            attempt.attempt_id,
            {question_id(quiz, 0): option_id(quiz, 0, 0), question_id(quiz, 1): option_id(quiz, 1, 1)},
            session=db_session,
        )
    return quiz


class TestCalculate(object):
    def test_weighted_final(
        self,
        db_session: Session,
        course: Course,
        student: User,
        graded_assignment: t.Callable[..., Assignment],
        six_of_ten_quiz: QuizWithQuestions,
    ) -> None:
        """80% on assignments at 60 and 60% on quizzes at 40 gives 72."""
        graded_assignment(80)

        with db_session.begin():
            grade = course_service.calculate(course.course_id, student.user_id, session=db_session)

        assert grade.assignment_percentage == 80.0
        assert grade.quiz_percentage == 60.0
        assert grade.assignment_weight == 60.0
        assert grade.quiz_weight == 40.0
        assert grade.final_percentage == 72.0
        assert grade.letter_grade == "B+"
        assert grade.grade_point == 3.2
        assert grade.performance_description == "Very Good"
        assert (grade.assignment_count, grade.graded_assignment_count) == (1, 1)
        assert (grade.quiz_count, grade.attempted_quiz_count) == (1, 1)

    def test_nothing_graded(self, db_session: Session, clock: FrozenClock, course: Course, student: User) -> None:
        with db_session.begin():
            grade = course_service.calculate(course.course_id, student.user_id, session=db_session)

        assert grade.final_percentage == 0.0
        assert grade.letter_grade == "N/A"
        assert grade.grade_point is None
        assert grade.performance_description is None

    def test_ungraded_and_in_progress_do_not_count(
        self,
        db_session: Session,
        clock: FrozenClock,
        course: Course,
        student: User,
        assignment_factory: AssignmentFactory,
        quiz_factory: QuizFactory,
    ) -> None:
        assignment = assignment_factory()
        quiz = quiz_factory()
        with db_session.begin():
            submission_service.submit(assignment.assignment_id, student.user_id, session=db_session)
            attempt_service.start(quiz.quiz_id, student.user_id, session=db_session)
            grade = course_service.calculate(course.course_id, student.user_id, session=db_session)

        assert grade.assignment_count == 1
        assert grade.graded_assignment_count == 0
        assert grade.quiz_count == 1
        assert grade.attempted_quiz_count == 0
        assert grade.letter_grade == "N/A"

    def test_expired_attempt_counts(
        self,
        db_session: Session,
        clock: FrozenClock,
        course: Course,
        student: User,
        quiz_factory: QuizFactory,
    ) -> None:
        quiz = quiz_factory(duration_minutes=10)
        with db_session.begin():
            attempt = attempt_service.start(quiz.quiz_id, student.user_id, session=db_session)
            attempt_service.record_answers(
                attempt.attempt_id, {question_id(quiz, 0): option_id(quiz, 0, 0)}, session=db_session
            )

        clock.advance(minutes=15)
        with db_session.begin():
            grade = course_service.calculate(course.course_id, student.user_id, session=db_session)

        assert grade.attempted_quiz_count == 1
        assert grade.quiz_percentage == 50.0
        assert grade.final_percentage == 20.0

    def test_skipped_quiz_counts_as_zero(
        self,
        db_session: Session,
        course: Course,
        student: User,
        quiz_factory: QuizFactory,
        graded_assignment: t.Callable[..., Assignment],
        six_of_ten_quiz: QuizWithQuestions,
    ) -> None:
        """6 of 10 taken plus a 10 point quiz never started is 6 of 20."""
        graded_assignment(80)
        quiz_factory(name="Quiz 2")

        with db_session.begin():
            grade = course_service.calculate(course.course_id, student.user_id, session=db_session)

        assert grade.quiz_percentage == 30.0
        assert grade.final_percentage == 60.0
        assert (grade.quiz_count, grade.attempted_quiz_count) == (2, 1)

    def test_unsubmitted_assignment_counts_as_zero(
        self,
        db_session: Session,
        clock: FrozenClock,
        course: Course,
        student: User,
        assignment_factory: AssignmentFactory,
        graded_assignment: t.Callable[..., Assignment],
    ) -> None:
        graded_assignment(80)
        assignment_factory(name="Homework 2")

        with db_session.begin():
            grade = course_service.calculate(
                course.course_id, student.user_id, assignment_weight=100, quiz_weight=0, session=db_session
            )

        assert grade.assignment_percentage == 40.0
        assert grade.final_percentage == 40.0
        assert (grade.assignment_count, grade.graded_assignment_count) == (2, 1)

    @pytest.mark.parametrize("status", [PublishStatus.Inactive, PublishStatus.Draft])
    def test_unpublishing_a_taken_quiz_keeps_the_grade(
        self,
        db_session: Session,
        course: Course,
        student: User,
        graded_assignment: t.Callable[..., Assignment],
        six_of_ten_quiz: QuizWithQuestions,
        status: PublishStatus,
    ) -> None:
        graded_assignment(80)
        with db_session.begin():
            before = course_service.calculate(course.course_id, student.user_id, session=db_session)
            quiz_service.set_status(six_of_ten_quiz.quiz_id, status, session=db_session)
            after = course_service.calculate(course.course_id, student.user_id, session=db_session)

        assert before.final_percentage == after.final_percentage == 72.0
        assert after.quiz_percentage == 60.0
        assert (after.quiz_count, after.attempted_quiz_count) == (1, 1)

    def test_unpublishing_an_assignment_keeps_the_grade(
        self,
        db_session: Session,
        course: Course,
        student: User,
        graded_assignment: t.Callable[..., Assignment],
        six_of_ten_quiz: QuizWithQuestions,
    ) -> None:
        assignment = graded_assignment(80)
        with db_session.begin():
            submission_service.update_assignment(
                assignment.assignment_id, status=PublishStatus.Inactive, session=db_session
            )
            grade = course_service.calculate(course.course_id, student.user_id, session=db_session)

        assert grade.assignment_percentage == 80.0
        assert grade.final_percentage == 72.0

    def test_weights_persist(
        self,
        db_session: Session,
        course: Course,
        student: User,
        graded_assignment: t.Callable[..., Assignment],
        six_of_ten_quiz: QuizWithQuestions,
    ) -> None:
        graded_assignment(80)
        with db_session.begin():
            course_service.calculate(
                course.course_id, student.user_id, assignment_weight=50, quiz_weight=50, session=db_session
            )
            again = course_service.calculate(course.course_id, student.user_id, session=db_session)

        assert again.assignment_weight == 50.0
        assert again.final_percentage == 70.0

    def test_unknown_student(self, db_session: Session, clock: FrozenClock, course: Course) -> None:
        with pytest.raises(NotFound), db_session.begin():
            course_service.calculate(course.course_id, UserID(), session=db_session)


class TestUpdateWeights(object):
    def test_rejects_bad_weights(self, db_session: Session, course: Course, student: User) -> None:
        with pytest.raises(ValidationError), db_session.begin():
            course_service.update_weights(course.course_id, 70, 40, student_id=student.user_id, session=db_session)

    def test_applies_to_every_grade(
        self,
        db_session: Session,
        clock: FrozenClock,
        course: Course,
        student: User,
        user_factory: t.Callable[..., User],
        graded_assignment: t.Callable[..., Assignment],
    ) -> None:
        graded_assignment(90)
        other = user_factory()
        with db_session.begin():
            course_service.calculate(course.course_id, student.user_id, session=db_session)
            course_service.calculate(course.course_id, other.user_id, session=db_session)
            grades = course_service.update_weights(course.course_id, 100, 0, session=db_session)

        by_student = {g.student_id: g for g in grades}
        assert set(by_student) == {student.user_id, other.user_id}
        assert all(g.assignment_weight == 100.0 for g in grades)
        assert by_student[student.user_id].final_percentage == 90.0
        assert by_student[other.user_id].final_percentage == 0.0

    def test_recalculate_course(
        self,
        db_session: Session,
        clock: FrozenClock,
        course: Course,
        student: User,
        graded_assignment: t.Callable[..., Assignment],
    ) -> None:
        with db_session.begin():
            course_service.calculate(course.course_id, student.user_id, session=db_session)
        graded_assignment(45)

        with db_session.begin():
            (grade,) = course_service.recalculate_course(course.course_id, session=db_session)

        assert grade.assignment_percentage == 45.0
        assert grade.final_percentage == 27.0
        assert grade.letter_grade == "F"


class TestGPA(object):
    def test_credit_weighted(
        self,
        db_session: Session,
        clock: FrozenClock,
        course: Course,
        student: User,
        course_factory: t.Callable[..., Course],
        graded_assignment: t.Callable[..., Assignment],
    ) -> None:
        """A+ (4.0) over 3 credits and C (2.0) over 1 credit average to 3.5."""
        small = course_factory(name="Seminar", credits=1)
        graded_assignment(95)
        graded_assignment(45, course_id=small.course_id)
        with db_session.begin():
            for c in (course, small):
                course_service.calculate(
                    c.course_id, student.user_id, assignment_weight=100, quiz_weight=0, session=db_session
                )
            gpa = course_service.overall_gpa(student.user_id, session=db_session)

        assert gpa == 3.5

    def test_no_grades(self, db_session: Session, student: User) -> None:
        with db_session.begin():
            assert course_service.overall_gpa(student.user_id, session=db_session) == 0.0

    def test_ungraded_course_is_ignored(
        self,
        db_session: Session,
        clock: FrozenClock,
        course: Course,
        student: User,
        course_factory: t.Callable[..., Course],
        graded_assignment: t.Callable[..., Assignment],
    ) -> None:
        empty = course_factory(name="Empty")
        graded_assignment(85)
        with db_session.begin():
            course_service.calculate(
                course.course_id, student.user_id, assignment_weight=100, quiz_weight=0, session=db_session
            )
            course_service.calculate(empty.course_id, student.user_id, session=db_session)
            gpa = course_service.overall_gpa(student.user_id, session=db_session)

        assert gpa == 3.6
