"""Course and user routes, the minimum needed to set up quizzes and grades."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from tally.core import di
from tally.model import Course, CourseID, User, UserID
from tally.storage import course as course_storage
from tally.storage import user as user_storage

from ..view.course import CourseCreateRequest, CourseResponse, UserCreateRequest, UserResponse

router = APIRouter(prefix="/api", tags=["courses"])


def _build_course_response(course: Course) -> CourseResponse:
    return CourseResponse(
        course_id=course.course_id,
        name=course.name,
        code=course.code,
        credits=course.credits,
        instructor_id=course.instructor_id,
    )


def _build_user_response(user: User) -> UserResponse:
    return UserResponse(user_id=user.user_id, email=user.email, name=user.name, role=user.role)


@router.post("/courses", operation_id="create_course", status_code=status.HTTP_201_CREATED)
@di.inject
def create_course(
    request: CourseCreateRequest,
    session: Session = Depends(di.Manage["storage.persistent.session"]),
) -> CourseResponse:
    with session.begin():
        if request.instructor_id is not None and user_storage.get(request.instructor_id, session=session) is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Instructor not found",
            )
        course = course_storage.create(
            name=request.name,
            code=request.code,
            credits=request.credits,
            instructor_id=request.instructor_id,
            session=session,
        )
        return _build_course_response(course)


@router.get("/courses/{course_id}", operation_id="get_course")
@di.inject
def get_course(
    course_id: CourseID,
    session: Session = Depends(di.Manage["storage.persistent.session"]),
) -> CourseResponse:
    with session.begin():
        course = course_storage.get(course_id, session=session)
        if course is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Course not found",
            )
        return _build_course_response(course)


@router.post("/users", operation_id="create_user", status_code=status.HTTP_201_CREATED)
@di.inject
def create_user(
    request: UserCreateRequest,
    session: Session = Depends(di.Manage["storage.persistent.session"]),
) -> UserResponse:
    with session.begin():
        if user_storage.get_by_email(request.email, session=session) is not None:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Email already registered",
            )
        user = user_storage.create(email=request.email, name=request.name, role=request.role, session=session)
        return _build_user_response(user)


@router.get("/users/{user_id}", operation_id="get_user")
@di.inject
def get_user(
    user_id: UserID,
    session: Session = Depends(di.Manage["storage.persistent.session"]),
) -> UserResponse:
    with session.begin():
        user = user_storage.get(user_id, session=session)
        if user is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="User not found",
            )
        return _build_user_response(user)
