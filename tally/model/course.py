from .base import BaseModel, WithTimestamps
from .id import CourseID, UserID


class Course(WithTimestamps):
    course_id: CourseID
    name: str
    code: str
    credits: int = 3
    instructor_id: UserID | None = None
