__all__ = [
    # Base
    "BaseModel",
    "UTCDatetime",
    "WithCtime",
    "WithMtime",
    "WithTimestamps",
    # Enums
    "DeploymentEnvironment",
    "PublishStatus",
    # ID Types
    "AssignmentID",
    "AttemptID",
    "CourseGradeID",
    "CourseID",
    "OptionID",
    "QuestionID",
    "QuizID",
    "SubmissionID",
    "UserID",
    # Users & Courses
    "Course",
    "User",
    "UserRole",
    # Quizzes
    "OptionDraft",
    "Question",
    "QuestionDraft",
    "QuestionOption",
    "QuestionType",
    "Quiz",
    "QuizWindow",
    "QuizWithQuestions",
    # Attempts
    "AttemptStatus",
    "QuizAttempt",
    # Assignments
    "Assignment",
    "AssignmentSubmission",
    "SubmissionStatus",
    # Grades
    "CourseGrade",
]

from .assignment import Assignment, AssignmentSubmission, SubmissionStatus
from .attempt import AttemptStatus, QuizAttempt
from .base import BaseModel, UTCDatetime, WithCtime, WithMtime, WithTimestamps
from .course import Course
from .enum import DeploymentEnvironment, PublishStatus
from .grade import CourseGrade
from .id import AssignmentID, AttemptID, CourseGradeID, CourseID, OptionID, QuestionID, QuizID, SubmissionID, UserID
from .quiz import (
    OptionDraft,
    Question,
    QuestionDraft,
    QuestionOption,
    QuestionType,
    Quiz,
    QuizWindow,
    QuizWithQuestions,
)
from .user import User, UserRole
