import enum

from pydantic import EmailStr

from .base import BaseModel, WithTimestamps
from .id import UserID


class UserRole(enum.Enum):
    Student = "student"
    Faculty = "faculty"
    Admin = "admin"


class User(WithTimestamps):
    user_id: UserID
    email: EmailStr
    name: str
    role: UserRole = UserRole.Student
