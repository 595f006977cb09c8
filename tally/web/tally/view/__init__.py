"""View models for the Tally web application."""

__all__ = [
    # Attempt views
    "AttemptAnswersRequest",
    "AttemptResponse",
    "AttemptStartRequest",
    "AttemptSubmitRequest",
    "TimeRemainingResponse",
    # Quiz views
    "OptionRequest",
    "OptionResponse",
    "QuestionRequest",
    "QuestionResponse",
    "QuizCreateRequest",
    "QuizResponse",
    "QuizStatusRequest",
    "QuizSummaryResponse",
    "StudentOptionResponse",
    "StudentQuestionResponse",
    "StudentQuestionWithOptionsResponse",
    "StudentQuizResponse",
    # Assignment views
    "AssignmentCreateRequest",
    "AssignmentResponse",
    "SubmissionCreateRequest",
    "SubmissionGradeRequest",
    "SubmissionResponse",
    # Grade views
    "CourseGradeResponse",
    "GPAResponse",
    # Course and user views
    "CourseCreateRequest",
    "CourseResponse",
    "UserCreateRequest",
    "UserResponse",
    "View",
]

from .assignment import AssignmentCreateRequest, AssignmentResponse, SubmissionCreateRequest, SubmissionGradeRequest, \
    SubmissionResponse
from .attempt import AttemptAnswersRequest, AttemptResponse, AttemptStartRequest, AttemptSubmitRequest, \
    TimeRemainingResponse
from .base import View
from .course import CourseCreateRequest, CourseResponse, UserCreateRequest, UserResponse
from .grade import CourseGradeResponse, GPAResponse
from .quiz import OptionRequest, OptionResponse, QuestionRequest, QuestionResponse, QuizCreateRequest, QuizResponse, \
    QuizStatusRequest, QuizSummaryResponse, StudentOptionResponse, StudentQuestionResponse, \
    StudentQuestionWithOptionsResponse, StudentQuizResponse
