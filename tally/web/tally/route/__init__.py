"""Route aggregation for the Tally web application."""

from fastapi import APIRouter

from . import assignment, attempt, course, grade, quiz, submission

router = APIRouter()
router.include_router(course.router)
router.include_router(quiz.router)
router.include_router(attempt.router)
router.include_router(assignment.router)
router.include_router(submission.router)
router.include_router(grade.router)
