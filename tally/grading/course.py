"""Course grades: weighted assignment and quiz results per student, and GPA.

A CourseGrade row is a cache of this computation, rebuilt whenever it is read
through ``calculate`` or its weights change; the submissions and attempts it
is computed from are the source of truth.
"""

from __future__ import annotations

from tally.core import di, LoggingProvider
from tally.model import CourseGrade, CourseID, UserID
from tally.storage import assignment as assignment_storage
from tally.storage import course as course_storage
from tally.storage import grade as grade_storage
from tally.storage import quiz as quiz_storage
from tally.storage import Session
from tally.storage import submission as submission_storage
from tally.storage import user as user_storage
from tally.storage.grade import CourseGradeParams

from . import attempt as attempt_service
from .aggregate import aggregate, AggregateResult, round_half_up, validate_weights
from .errors import NotFound
from .scale import COURSE_SCALE


def _grade_params(
    result: AggregateResult,
    *,
    assignment_count: int,
    graded_assignment_count: int,
    quiz_count: int,
    attempted_quiz_count: int,
) -> CourseGradeParams:
    # nothing graded yet reads "N/A", not a failing grade
    empty = result.is_empty or (graded_assignment_count == 0 and attempted_quiz_count == 0)
    return CourseGradeParams(
        assignment_points_earned=result.assignment_earned,
        assignment_total_points=result.assignment_total,
        assignment_percentage=result.assignment_percentage,
        assignment_count=assignment_count,
        graded_assignment_count=graded_assignment_count,
        quiz_points_earned=result.quiz_earned,
        quiz_total_points=result.quiz_total,
        quiz_percentage=result.quiz_percentage,
        quiz_count=quiz_count,
        attempted_quiz_count=attempted_quiz_count,
        assignment_weight=result.assignment_weight,
        quiz_weight=result.quiz_weight,
        final_percentage=result.final_percentage,
        letter_grade="N/A" if empty else COURSE_SCALE.letter(result.final_percentage),
        grade_point=None if empty else COURSE_SCALE.grade_point(result.final_percentage),
        performance_description=None if empty else COURSE_SCALE.description(result.final_percentage),
    )


@di.inject
def calculate(
    course_id: CourseID,
    student_id: UserID,
    *,
    assignment_weight: float | None = None,
    quiz_weight: float | None = None,
    default_assignment_weight: float = di.Provide["config.grading.assignment_weight"],
    default_quiz_weight: float = di.Provide["config.grading.quiz_weight"],
    session: Session = di.Provide["storage.persistent.session"],
    logging: LoggingProvider = di.Provide["logging"],
) -> CourseGrade:
    """Recompute and store a student's grade in a course.

    Every assignment and quiz of the course adds its points to the category
    total, so work the student skipped counts as zero, and unpublishing an
    assignment or quiz does not remove it from grades. Points earned are those
    of the student's latest graded submission and of their submitted attempt.
    Weights, unless given, are those already stored for the student, else the
    configured defaults.

    Raises:
        NotFound: If the course or the student does not exist
        ValidationError: If the weights are negative or do not sum to 100
    """
    logger = logging.get_logger()
    if course_storage.get(course_id, session=session) is None:
        raise NotFound(f"course {course_id} not found")
    if user_storage.get(student_id, session=session) is None:
        raise NotFound(f"student {student_id} not found")

    existing = grade_storage.get(course_id, student_id, session=session)
    if assignment_weight is None or quiz_weight is None:
        if existing is not None:
            assignment_weight, quiz_weight = existing.assignment_weight, existing.quiz_weight
        else:
            assignment_weight, quiz_weight = default_assignment_weight, default_quiz_weight
    validate_weights(assignment_weight, quiz_weight)

    # every assignment and quiz of the course counts towards its category
    # total, whatever its status and whether or not the student took part
    assignments = assignment_storage.find(course_id=course_id, session=session)
    a_earned = a_total = 0.0
    graded = 0
    for assignment in assignments:
        a_total += assignment.total_points
        submission = submission_storage.get_latest(assignment.assignment_id, student_id, session=session)
        if submission is None or not submission.status.is_graded:
            continue
        if submission.points_earned is not None:
            a_earned += submission.points_earned
        elif submission.grade is not None:
            a_earned += submission.grade * assignment.total_points / 100.0
        graded += 1

    quiz_totals = quiz_storage.total_points(course_id=course_id, session=session)
    q_earned = 0.0
    q_total = float(sum(quiz_totals.values()))
    attempted = 0
    for attempt in attempt_service.find(student_id=student_id, session=session):
        if attempt.quiz_id not in quiz_totals or not attempt.is_submitted:
            continue
        q_earned += attempt.points_earned or 0
        attempted += 1

    result = aggregate(
        a_earned,
        a_total,
        q_earned,
        q_total,
        assignment_weight=assignment_weight,
        quiz_weight=quiz_weight,
    )
    params = _grade_params(
        result,
        assignment_count=len(assignments),
        graded_assignment_count=graded,
        quiz_count=len(quiz_totals),
        attempted_quiz_count=attempted,
    )
    grade = grade_storage.save(course_id, student_id, params, session=session)
    logger.info(
        "course grade calculated",
        extra={
            "course_id": course_id,
            "student_id": student_id,
            "final_percentage": grade.final_percentage,
            "letter_grade": grade.letter_grade,
        },
    )
    return grade


@di.inject
def update_weights(
    course_id: CourseID,
    assignment_weight: float,
    quiz_weight: float,
    *,
    student_id: UserID | None = None,
    session: Session = di.Provide["storage.persistent.session"],
) -> tuple[CourseGrade, ...]:
    """Change the category weights of one student's grade, or of every grade in the course.

    Raises:
        ValidationError: If the weights are negative or do not sum to 100
    """
    validate_weights(assignment_weight, quiz_weight)
    if student_id is not None:
        student_ids = [student_id]
    else:
        student_ids = [g.student_id for g in grade_storage.find(course_id=course_id, session=session)]
    return tuple(
        calculate(course_id, s, assignment_weight=assignment_weight, quiz_weight=quiz_weight, session=session)
        for s in student_ids
    )


@di.inject
def recalculate_course(
    course_id: CourseID,
    *,
    session: Session = di.Provide["storage.persistent.session"],
) -> tuple[CourseGrade, ...]:
    """Recompute every stored grade of the course with its own weights."""
    if course_storage.get(course_id, session=session) is None:
        raise NotFound(f"course {course_id} not found")
    return tuple(
        calculate(course_id, g.student_id, session=session)
        for g in grade_storage.find(course_id=course_id, session=session)
    )


@di.inject
def overall_gpa(
    student_id: UserID,
    *,
    session: Session = di.Provide["storage.persistent.session"],
) -> float:
    """Credit-weighted mean grade point over the student's graded courses; 0 without credits."""
    grades = [g for g in grade_storage.find(student_id=student_id, session=session) if g.grade_point is not None]
    if not grades:
        return 0.0

    course_ids = tuple(g.course_id for g in grades)
    courses = {c.course_id: c for c in course_storage.find(course_ids=course_ids, session=session)}
    points = credits = 0.0
    for grade in grades:
        course = courses.get(grade.course_id)
        if course is None or grade.grade_point is None:
            continue
        points += grade.grade_point * course.credits
        credits += course.credits

    if credits <= 0:
        return 0.0
    return round_half_up(points / credits, 2)
