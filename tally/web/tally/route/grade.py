"""Course grade routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from tally.core import di
from tally.grading import course as course_service
from tally.model import CourseGrade, CourseID, UserID
from tally.storage import grade as grade_storage

from ..view.grade import CourseGradeResponse, GPAResponse
from .error import grading_errors

router = APIRouter(prefix="/api/grades", tags=["grades"])


def _build_grade_response(grade: CourseGrade) -> CourseGradeResponse:
    return CourseGradeResponse(
        course_grade_id=grade.course_grade_id,
        course_id=grade.course_id,
        student_id=grade.student_id,
        assignment_points_earned=grade.assignment_points_earned,
        assignment_total_points=grade.assignment_total_points,
        assignment_percentage=grade.assignment_percentage,
        assignment_count=grade.assignment_count,
        graded_assignment_count=grade.graded_assignment_count,
        quiz_points_earned=grade.quiz_points_earned,
        quiz_total_points=grade.quiz_total_points,
        quiz_percentage=grade.quiz_percentage,
        quiz_count=grade.quiz_count,
        attempted_quiz_count=grade.attempted_quiz_count,
        assignment_weight=grade.assignment_weight,
        quiz_weight=grade.quiz_weight,
        final_percentage=grade.final_percentage,
        letter_grade=grade.letter_grade,
        grade_point=grade.grade_point,
        performance_description=grade.performance_description,
        update_time=grade.update_time,
    )


@router.get("/course/{course_id}/student/{student_id}", operation_id="get_course_grade")
@di.inject
def get_course_grade(
    course_id: CourseID,
    student_id: UserID,
    session: Session = Depends(di.Manage["storage.persistent.session"]),
) -> CourseGradeResponse:
    """The student's grade in the course, recomputed from current results."""
    with session.begin(), grading_errors():
        return _build_grade_response(course_service.calculate(course_id, student_id, session=session))


@router.get("/course/{course_id}", operation_id="list_course_grades")
@di.inject
def list_course_grades(
    course_id: CourseID,
    session: Session = Depends(di.Manage["storage.persistent.session"]),
) -> list[CourseGradeResponse]:
    with session.begin():
        return [_build_grade_response(g) for g in grade_storage.find(course_id=course_id, session=session)]


@router.get("/student/{student_id}/gpa", operation_id="get_student_gpa")
@di.inject
def get_student_gpa(
    student_id: UserID,
    session: Session = Depends(di.Manage["storage.persistent.session"]),
) -> GPAResponse:
    with session.begin():
        return GPAResponse(student_id=student_id, gpa=course_service.overall_gpa(student_id, session=session))


@router.get("/student/{student_id}", operation_id="list_student_grades")
@di.inject
def list_student_grades(
    student_id: UserID,
    session: Session = Depends(di.Manage["storage.persistent.session"]),
) -> list[CourseGradeResponse]:
    with session.begin():
        return [_build_grade_response(g) for g in grade_storage.find(student_id=student_id, session=session)]


@router.put("/course/{course_id}/weights", operation_id="update_grade_weights")
@di.inject
def update_grade_weights(
    course_id: CourseID,
    assignment_weight: float = Query(alias="assignmentWeight"),
    quiz_weight: float = Query(alias="quizWeight"),
    student_id: UserID | None = Query(default=None, alias="studentId"),
    session: Session = Depends(di.Manage["storage.persistent.session"]),
) -> list[CourseGradeResponse]:
    """Set category weights for one student, or for every graded student when none is given."""
    with session.begin(), grading_errors():
        grades = course_service.update_weights(
            course_id, assignment_weight, quiz_weight, student_id=student_id, session=session
        )
        return [_build_grade_response(g) for g in grades]


@router.post("/course/{course_id}/recalculate", operation_id="recalculate_course_grades")
@di.inject
def recalculate_course_grades(
    course_id: CourseID,
    session: Session = Depends(di.Manage["storage.persistent.session"]),
) -> list[CourseGradeResponse]:
    with session.begin(), grading_errors():
        return [_build_grade_response(g) for g in course_service.recalculate_course(course_id, session=session)]
