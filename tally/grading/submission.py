"""Assignment submissions: lateness, status labels and grading.

Lateness is decided once, when a submission is created, as ``submitted_at >
due_date``; editing the assignment's due date later does not move existing
submissions between the on-time and late branches. Grading then only moves a
submission along its branch: SUBMITTED to GRADED, LATE_SUBMITTED to
LATE_GRADED.
"""

from __future__ import annotations

import datetime

from tally.core import di, LoggingProvider, TimestampProvider
from tally.lib import NotSet
from tally.model import (
    Assignment,
    AssignmentID,
    AssignmentSubmission,
    CourseID,
    PublishStatus,
    SubmissionID,
    SubmissionStatus,
    UserID,
)
from tally.storage import assignment as assignment_storage
from tally.storage import course as course_storage
from tally.storage import Session
from tally.storage import submission as submission_storage
from tally.storage import user as user_storage

from .aggregate import percentage, round_half_up
from .errors import InvalidState, NotFound, ValidationError
from .scale import ASSIGNMENT_POINTS_SCALE, ASSIGNMENT_SCALE


def is_late(due: datetime.datetime, submitted_at: datetime.datetime) -> bool:
    return submitted_at > due


def status_for(late: bool, graded: bool) -> SubmissionStatus:
    if graded:
        return SubmissionStatus.LateGraded if late else SubmissionStatus.Graded
    return SubmissionStatus.LateSubmitted if late else SubmissionStatus.Submitted


def classify(
    due: datetime.datetime,
    submitted_at: datetime.datetime,
    graded_at: datetime.datetime | None = None,
) -> SubmissionStatus:
    """Status label of a submission made at ``submitted_at`` against ``due``."""
    return status_for(is_late(due, submitted_at), graded_at is not None)


def _require_assignment(assignment_id: AssignmentID, session: Session) -> Assignment:
    assignment = assignment_storage.get(assignment_id, session=session)
    if assignment is None:
        raise NotFound(f"assignment {assignment_id} not found")
    return assignment


def _require_submission(submission_id: SubmissionID, session: Session) -> AssignmentSubmission:
    submission = submission_storage.get(submission_id, session=session)
    if submission is None:
        raise NotFound(f"submission {submission_id} not found")
    return submission


@di.inject
def create_assignment(
    *,
    course_id: CourseID,
    name: str,
    due_date: datetime.datetime,
    total_points: int = 100,
    instructor_id: UserID | None = None,
    description: str | None = None,
    status: PublishStatus = PublishStatus.Active,
    session: Session = di.Provide["storage.persistent.session"],
    logging: LoggingProvider = di.Provide["logging"],
) -> Assignment:
    if course_storage.get(course_id, session=session) is None:
        raise NotFound(f"course {course_id} not found")
    if total_points <= 0:
        raise ValidationError("total_points must be positive")
    if due_date.tzinfo is None:
        raise ValidationError("due_date must be timezone-aware")

    assignment = assignment_storage.create(
        course_id=course_id,
        name=name,
        due_date=due_date,
        total_points=total_points,
        instructor_id=instructor_id,
        description=description,
        status=status,
        session=session,
    )
    logging.get_logger().info(
        "assignment created",
        extra={"assignment_id": assignment.assignment_id, "course_id": course_id, "due_date": due_date},
    )
    return assignment


@di.inject
def update_assignment(
    assignment_id: AssignmentID,
    *,
    name: str | NotSet = NotSet(),
    description: str | None | NotSet = NotSet(),
    due_date: datetime.datetime | NotSet = NotSet(),
    total_points: int | NotSet = NotSet(),
    status: PublishStatus | NotSet = NotSet(),
    session: Session = di.Provide["storage.persistent.session"],
    logging: LoggingProvider = di.Provide["logging"],
) -> Assignment:
    """Edit an assignment; parameters left unset keep their value.

    Submissions already made keep the lateness they were given. A new
    ``total_points`` changes the percentage that points already awarded are
    worth the next time a course grade is calculated.

    Raises:
        NotFound: If the assignment does not exist
        ValidationError: If ``total_points`` is not positive or ``due_date`` is naive
    """
    if not isinstance(total_points, NotSet) and total_points <= 0:
        raise ValidationError("total_points must be positive")
    if not isinstance(due_date, NotSet) and due_date.tzinfo is None:
        raise ValidationError("due_date must be timezone-aware")

    try:
        assignment_storage.update(
            assignment_id,
            name=name,
            description=description,
            due_date=due_date,
            total_points=total_points,
            status=status,
            session=session,
        )
    except KeyError as e:
        raise NotFound(f"assignment {assignment_id} not found") from e

    assignment = _require_assignment(assignment_id, session)
    logging.get_logger().info(
        "assignment updated",
        extra={
            "assignment_id": assignment_id,
            "due_date": assignment.due_date,
            "total_points": assignment.total_points,
            "status": assignment.status,
        },
    )
    return assignment


@di.inject
def submit(
    assignment_id: AssignmentID,
    student_id: UserID,
    content: str | None = None,
    *,
    session: Session = di.Provide["storage.persistent.session"],
    utcnow: TimestampProvider = di.Provide["utcnow"],
    logging: LoggingProvider = di.Provide["logging"],
) -> AssignmentSubmission:
    """Record a new submission, numbered after the student's previous ones.

    Raises:
        NotFound: If the assignment or the student does not exist
        InvalidState: If the assignment is not accepting submissions
    """
    logger = logging.get_logger()
    assignment = _require_assignment(assignment_id, session)
    if user_storage.get(student_id, session=session) is None:
        raise NotFound(f"student {student_id} not found")
    if assignment.status is not PublishStatus.Active:
        raise InvalidState(f"assignment {assignment_id} is not accepting submissions")

    now = utcnow()
    previous = submission_storage.get_latest(assignment_id, student_id, session=session)
    late = is_late(assignment.due_date, now)
    submission = submission_storage.create(
        assignment_id=assignment_id,
        student_id=student_id,
        submission_number=(previous.submission_number + 1) if previous else 1,
        submitted_at=now,
        is_late=late,
        status=status_for(late, graded=False),
        content=content,
        session=session,
    )
    logger.info(
        "assignment submitted",
        extra={
            "submission_id": submission.submission_id,
            "assignment_id": assignment_id,
            "student_id": student_id,
            "submission_number": submission.submission_number,
            "is_late": late,
        },
    )
    return submission


@di.inject
def get(
    submission_id: SubmissionID,
    *,
    session: Session = di.Provide["storage.persistent.session"],
) -> AssignmentSubmission | None:
    return submission_storage.get(submission_id, session=session)


@di.inject
def latest(
    assignment_id: AssignmentID,
    student_id: UserID,
    *,
    session: Session = di.Provide["storage.persistent.session"],
) -> AssignmentSubmission | None:
    """The student's latest submission; None when they have not submitted."""
    return submission_storage.get_latest(assignment_id, student_id, session=session)


@di.inject
def find(
    *,
    assignment_id: AssignmentID | None = None,
    student_id: UserID | None = None,
    graded: bool | None = None,
    late: bool | None = None,
    session: Session = di.Provide["storage.persistent.session"],
) -> tuple[AssignmentSubmission, ...]:
    """Submissions of an assignment or by a student, most recent first.

    Raises:
        NotFound: If the assignment or the student does not exist
    """
    if assignment_id is not None:
        _require_assignment(assignment_id, session)
    if student_id is not None and user_storage.get(student_id, session=session) is None:
        raise NotFound(f"student {student_id} not found")
    return submission_storage.find(
        assignment_id=assignment_id, student_id=student_id, graded=graded, late=late, session=session
    )


def _grade(
    submission: AssignmentSubmission,
    *,
    points_earned: float,
    grade: float,
    letter_grade: str,
    feedback: str | None,
    graded_at: datetime.datetime,
    session: Session,
    logging: LoggingProvider,
) -> AssignmentSubmission:
    status = status_for(submission.is_late, graded=True)
    submission_storage.grade(
        submission.submission_id,
        status=status,
        graded_at=graded_at,
        grade=grade,
        letter_grade=letter_grade,
        points_earned=points_earned,
        feedback=feedback,
        session=session,
    )
    logging.get_logger().info(
        "submission graded",
        extra={
            "submission_id": submission.submission_id,
            "status": status,
            "points_earned": points_earned,
            "grade": grade,
            "letter_grade": letter_grade,
            "regrade": submission.status.is_graded,
        },
    )
    return _require_submission(submission.submission_id, session)


@di.inject
def grade_by_points(
    submission_id: SubmissionID,
    points_earned: float,
    feedback: str | None = None,
    *,
    session: Session = di.Provide["storage.persistent.session"],
    utcnow: TimestampProvider = di.Provide["utcnow"],
    logging: LoggingProvider = di.Provide["logging"],
) -> AssignmentSubmission:
    """Grade a submission from the points it earned out of the assignment's total.

    Raises:
        NotFound: If the submission does not exist
        ValidationError: If ``points_earned`` is outside ``[0, total_points]``
    """
    submission = _require_submission(submission_id, session)
    assignment = _require_assignment(submission.assignment_id, session)
    if not 0 <= points_earned <= assignment.total_points:
        raise ValidationError(f"points_earned must be between 0 and {assignment.total_points}, got {points_earned}")

    grade = percentage(points_earned, assignment.total_points)
    return _grade(
        submission,
        points_earned=points_earned,
        grade=grade,
        letter_grade=ASSIGNMENT_POINTS_SCALE.letter(grade),
        feedback=feedback,
        graded_at=utcnow(),
        session=session,
        logging=logging,
    )


@di.inject
def grade_by_percentage(
    submission_id: SubmissionID,
    grade: float,
    letter_grade: str | None = None,
    feedback: str | None = None,
    *,
    session: Session = di.Provide["storage.persistent.session"],
    utcnow: TimestampProvider = di.Provide["utcnow"],
    logging: LoggingProvider = di.Provide["logging"],
) -> AssignmentSubmission:
    """Grade a submission with a percentage, and optionally a letter chosen by faculty.

    Raises:
        NotFound: If the submission does not exist
        ValidationError: If ``grade`` is outside ``[0, 100]``
    """
    submission = _require_submission(submission_id, session)
    assignment = _require_assignment(submission.assignment_id, session)
    if not 0 <= grade <= 100:
        raise ValidationError(f"grade must be between 0 and 100, got {grade}")

    return _grade(
        submission,
        points_earned=round_half_up(grade * assignment.total_points / 100.0, 2),
        grade=grade,
        letter_grade=letter_grade or ASSIGNMENT_SCALE.letter(grade),
        feedback=feedback,
        graded_at=utcnow(),
        session=session,
        logging=logging,
    )
