from __future__ import annotations

import datetime
import typing as t

import pytest
from sqlalchemy.orm import Session

from tally.grading import InvalidState, NotFound, ValidationError
from tally.grading import submission as submission_service
from tally.model import (
    Assignment,
    AssignmentID,
    Course,
    CourseID,
    PublishStatus,
    SubmissionID,
    SubmissionStatus,
    User,
    UserID,
)

from ..conftest import FrozenClock, T0

AssignmentFactory = t.Callable[..., Assignment]


class TestCreateAssignment(object):
    def test_create(self, db_session: Session, course: Course, faculty: User) -> None:
        with db_session.begin():
            assignment = submission_service.create_assignment(
                course_id=course.course_id,
                name="Essay",
                due_date=T0,
                total_points=20,
                instructor_id=faculty.user_id,
                session=db_session,
            )

        assert assignment.total_points == 20
        assert assignment.due_date == T0
        assert assignment.status is PublishStatus.Active

    @pytest.mark.parametrize("total_points", [0, -5])
    def test_points_must_be_positive(self, db_session: Session, course: Course, total_points: int) -> None:
        with pytest.raises(ValidationError), db_session.begin():
            submission_service.create_assignment(
                course_id=course.course_id, name="Essay", due_date=T0, total_points=total_points, session=db_session
            )

    def test_due_date_needs_timezone(self, db_session: Session, course: Course) -> None:
        with pytest.raises(ValidationError), db_session.begin():
            submission_service.create_assignment(
                course_id=course.course_id, name="Essay", due_date=T0.replace(tzinfo=None), session=db_session
            )

    def test_unknown_course(self, db_session: Session) -> None:
        with pytest.raises(NotFound), db_session.begin():
            submission_service.create_assignment(course_id=CourseID(), name="Essay", due_date=T0, session=db_session)


class TestUpdateAssignment(object):
    def test_update(self, db_session: Session, assignment_factory: AssignmentFactory) -> None:
        assignment = assignment_factory(total_points=50)
        new_due = T0 + datetime.timedelta(days=14)

        with db_session.begin():
            updated = submission_service.update_assignment(
                assignment.assignment_id,
                name="Homework 1 (revised)",
                due_date=new_due,
                total_points=60,
                session=db_session,
            )

        assert updated.name == "Homework 1 (revised)"
        assert updated.due_date == new_due
        assert updated.total_points == 60
        assert updated.status is PublishStatus.Active
        assert updated.description == assignment.description

    def test_clear_description(self, db_session: Session, assignment_factory: AssignmentFactory) -> None:
        assignment = assignment_factory()
        with db_session.begin():
            submission_service.update_assignment(assignment.assignment_id, description="read ch. 3", session=db_session)
            cleared = submission_service.update_assignment(
                assignment.assignment_id, description=None, session=db_session
            )

        assert cleared.description is None

    @pytest.mark.parametrize("total_points", [0, -10])
    def test_points_must_be_positive(
        self, db_session: Session, assignment_factory: AssignmentFactory, total_points: int
    ) -> None:
        assignment = assignment_factory()

        with pytest.raises(ValidationError), db_session.begin():
            submission_service.update_assignment(
                assignment.assignment_id, total_points=total_points, session=db_session
            )

    def test_due_date_needs_timezone(self, db_session: Session, assignment_factory: AssignmentFactory) -> None:
        assignment = assignment_factory()

        with pytest.raises(ValidationError), db_session.begin():
            submission_service.update_assignment(
                assignment.assignment_id, due_date=T0.replace(tzinfo=None), session=db_session
            )

    def test_unknown_assignment(self, db_session: Session) -> None:
        with pytest.raises(NotFound), db_session.begin():
            submission_service.update_assignment(AssignmentID(), name="Ghost", session=db_session)


class TestSubmit(object):
    def test_on_time(
        self, db_session: Session, clock: FrozenClock, assignment_factory: AssignmentFactory, student: User
    ) -> None:
        assignment = assignment_factory(due_date=T0 + datetime.timedelta(days=1))

        with db_session.begin():
            submission = submission_service.submit(
                assignment.assignment_id, student.user_id, "my essay", session=db_session
            )

        assert submission.submission_number == 1
        assert submission.submitted_at == T0
        assert not submission.is_late
        assert submission.status is SubmissionStatus.Submitted
        assert submission.content == "my essay"

    def test_resubmission_numbering_and_lateness(
        self, db_session: Session, clock: FrozenClock, assignment_factory: AssignmentFactory, student: User
    ) -> None:
        assignment = assignment_factory(due_date=T0 + datetime.timedelta(hours=1))
        with db_session.begin():
            first = submission_service.submit(assignment.assignment_id, student.user_id, session=db_session)

        clock.advance(hours=1, seconds=1)
        with db_session.begin():
            second = submission_service.submit(assignment.assignment_id, student.user_id, session=db_session)
            latest = submission_service.latest(assignment.assignment_id, student.user_id, session=db_session)

        assert (first.submission_number, second.submission_number) == (1, 2)
        assert not first.is_late
        assert second.is_late
        assert second.status is SubmissionStatus.LateSubmitted
        assert latest == second

    def test_lateness_is_frozen(
        self, db_session: Session, clock: FrozenClock, assignment_factory: AssignmentFactory, student: User
    ) -> None:
        """Moving the due date later does not turn a late submission into an on-time one."""
        assignment = assignment_factory(due_date=T0 - datetime.timedelta(days=1))
        with db_session.begin():
            submission = submission_service.submit(assignment.assignment_id, student.user_id, session=db_session)
            submission_service.update_assignment(
                assignment.assignment_id, due_date=T0 + datetime.timedelta(days=30), session=db_session
            )
            graded = submission_service.grade_by_points(submission.submission_id, 70, session=db_session)

        assert graded.is_late
        assert graded.status is SubmissionStatus.LateGraded

    def test_inactive_assignment(
        self, db_session: Session, clock: FrozenClock, assignment_factory: AssignmentFactory, student: User
    ) -> None:
        assignment = assignment_factory(status=PublishStatus.Inactive)

        with pytest.raises(InvalidState), db_session.begin():
            submission_service.submit(assignment.assignment_id, student.user_id, session=db_session)

    def test_unknown_student(
        self, db_session: Session, clock: FrozenClock, assignment_factory: AssignmentFactory
    ) -> None:
        assignment = assignment_factory()

        with pytest.raises(NotFound), db_session.begin():
            submission_service.submit(assignment.assignment_id, UserID(), session=db_session)

    def test_latest_without_submission(
        self, db_session: Session, assignment_factory: AssignmentFactory, student: User
    ) -> None:
        assignment = assignment_factory()

        with db_session.begin():
            assert submission_service.latest(assignment.assignment_id, student.user_id, session=db_session) is None


class TestGrade(object):
    def test_by_points(
        self, db_session: Session, clock: FrozenClock, assignment_factory: AssignmentFactory, student: User
    ) -> None:
        assignment = assignment_factory(total_points=50)
        with db_session.begin():
            submission = submission_service.submit(assignment.assignment_id, student.user_id, session=db_session)

        clock.advance(days=2)
        with db_session.begin():
            graded = submission_service.grade_by_points(
                submission.submission_id, 40, "good work", session=db_session
            )

        assert graded.status is SubmissionStatus.Graded
        assert graded.points_earned == 40
        assert graded.grade == 80.0
        assert graded.letter_grade == "A"
        assert graded.feedback == "good work"
        assert graded.graded_at == T0 + datetime.timedelta(days=2)

    @pytest.mark.parametrize("points", [-1, 50.5])
    def test_points_out_of_range(
        self,
        db_session: Session,
        clock: FrozenClock,
        assignment_factory: AssignmentFactory,
        student: User,
        points: float,
    ) -> None:
        assignment = assignment_factory(total_points=50)
        with db_session.begin():
            submission = submission_service.submit(assignment.assignment_id, student.user_id, session=db_session)

        with pytest.raises(ValidationError), db_session.begin():
            submission_service.grade_by_points(submission.submission_id, points, session=db_session)

    def test_by_percentage(
        self, db_session: Session, clock: FrozenClock, assignment_factory: AssignmentFactory, student: User
    ) -> None:
        assignment = assignment_factory(total_points=40)
        with db_session.begin():
            submission = submission_service.submit(assignment.assignment_id, student.user_id, session=db_session)
            graded = submission_service.grade_by_percentage(submission.submission_id, 92, session=db_session)

        assert graded.grade == 92
        assert graded.letter_grade == "A-"
        assert graded.points_earned == 36.8
        assert graded.status is SubmissionStatus.Graded

    def test_by_percentage_with_letter(
        self, db_session: Session, clock: FrozenClock, assignment_factory: AssignmentFactory, student: User
    ) -> None:
        assignment = assignment_factory()
        with db_session.begin():
            submission = submission_service.submit(assignment.assignment_id, student.user_id, session=db_session)
            graded = submission_service.grade_by_percentage(
                submission.submission_id, 92, letter_grade="A", feedback="rounded up", session=db_session
            )

        assert graded.letter_grade == "A"
        assert graded.feedback == "rounded up"

    @pytest.mark.parametrize("grade", [-0.1, 100.1])
    def test_percentage_out_of_range(
        self,
        db_session: Session,
        clock: FrozenClock,
        assignment_factory: AssignmentFactory,
        student: User,
        grade: float,
    ) -> None:
        assignment = assignment_factory()
        with db_session.begin():
            submission = submission_service.submit(assignment.assignment_id, student.user_id, session=db_session)

        with pytest.raises(ValidationError), db_session.begin():
            submission_service.grade_by_percentage(submission.submission_id, grade, session=db_session)

    def test_regrade(
        self, db_session: Session, clock: FrozenClock, assignment_factory: AssignmentFactory, student: User
    ) -> None:
        assignment = assignment_factory()
        with db_session.begin():
            submission = submission_service.submit(assignment.assignment_id, student.user_id, session=db_session)
            submission_service.grade_by_points(submission.submission_id, 55, session=db_session)
            regraded = submission_service.grade_by_points(submission.submission_id, 65, session=db_session)

        assert regraded.points_earned == 65
        assert regraded.letter_grade == "B"
        assert regraded.status is SubmissionStatus.Graded

    def test_unknown_submission(self, db_session: Session, clock: FrozenClock) -> None:
        with pytest.raises(NotFound), db_session.begin():
            submission_service.grade_by_points(SubmissionID(), 10, session=db_session)


class TestFind(object):
    @pytest.fixture
    def submissions(
        self,
        db_session: Session,
        clock: FrozenClock,
        assignment_factory: AssignmentFactory,
        user_factory: t.Callable[..., User],
        student: User,
    ) -> dict[str, t.Any]:
        """Three submissions to one assignment due an hour after T0: on time, late, and late then graded."""
        assignment = assignment_factory(due_date=T0 + datetime.timedelta(hours=1))
        other = assignment_factory(name="Homework 2")
        classmate = user_factory(name="Cal Classmate")
        with db_session.begin():
            on_time = submission_service.submit(assignment.assignment_id, student.user_id, session=db_session)
            elsewhere = submission_service.submit(other.assignment_id, student.user_id, session=db_session)
        clock.advance(hours=2)
        with db_session.begin():
            late = submission_service.submit(assignment.assignment_id, classmate.user_id, session=db_session)
        clock.advance(minutes=5)
        with db_session.begin():
            resubmitted = submission_service.submit(assignment.assignment_id, student.user_id, session=db_session)
            graded = submission_service.grade_by_points(resubmitted.submission_id, 90, session=db_session)
        return {
            "assignment": assignment,
            "on_time": on_time,
            "elsewhere": elsewhere,
            "late": late,
            "graded": graded,
        }

    def test_by_assignment(self, db_session: Session, submissions: dict[str, t.Any]) -> None:
        assignment_id = submissions["assignment"].assignment_id
        with db_session.begin():
            found = submission_service.find(assignment_id=assignment_id, session=db_session)

        assert [s.submission_id for s in found] == [
            submissions["graded"].submission_id,
            submissions["late"].submission_id,
            submissions["on_time"].submission_id,
        ]

    def test_by_student(self, db_session: Session, submissions: dict[str, t.Any], student: User) -> None:
        with db_session.begin():
            found = submission_service.find(student_id=student.user_id, session=db_session)

        assert {s.submission_id for s in found} == {
            submissions["graded"].submission_id,
            submissions["on_time"].submission_id,
            submissions["elsewhere"].submission_id,
        }
        assert found[0].submission_id == submissions["graded"].submission_id

    def test_graded_and_late(self, db_session: Session, submissions: dict[str, t.Any]) -> None:
        assignment_id = submissions["assignment"].assignment_id
        with db_session.begin():
            graded = submission_service.find(assignment_id=assignment_id, graded=True, session=db_session)
            late = submission_service.find(assignment_id=assignment_id, late=True, session=db_session)
            ungraded = submission_service.find(assignment_id=assignment_id, graded=False, session=db_session)

        assert [s.status for s in graded] == [SubmissionStatus.LateGraded]
        assert [s.submission_id for s in late] == [
            submissions["graded"].submission_id,
            submissions["late"].submission_id,
        ]
        assert [s.status for s in ungraded] == [SubmissionStatus.LateSubmitted, SubmissionStatus.Submitted]

    def test_unknown_assignment(self, db_session: Session) -> None:
        with pytest.raises(NotFound), db_session.begin():
            submission_service.find(assignment_id=AssignmentID(), session=db_session)

    def test_unknown_student(self, db_session: Session) -> None:
        with pytest.raises(NotFound), db_session.begin():
            submission_service.find(student_id=UserID(), session=db_session)
