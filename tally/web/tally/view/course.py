from __future__ import annotations

import pydantic as p

from tally.model import CourseID, UserID, UserRole

from .base import View


class CourseCreateRequest(View):
    name: str = p.Field(min_length=1)
    code: str = p.Field(min_length=1)
    credits: int = p.Field(default=3, ge=0)
    instructor_id: UserID | None = None


class CourseResponse(View):
    course_id: CourseID
    name: str
    code: str
    credits: int
    instructor_id: UserID | None = None


class UserCreateRequest(View):
    email: p.EmailStr
    name: str = p.Field(min_length=1)
    role: UserRole = UserRole.Student


class UserResponse(View):
    user_id: UserID
    email: str
    name: str
    role: UserRole
