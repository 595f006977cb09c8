__all__ = [
    # Errors
    "AlreadyAttempted",
    "AlreadySubmitted",
    "GradingError",
    "InvalidState",
    "NotFound",
    "ValidationError",
    # Scales
    "ASSIGNMENT_POINTS_SCALE",
    "ASSIGNMENT_SCALE",
    "COURSE_SCALE",
    "QUIZ_SCALE",
    "Band",
    "GradeScale",
    "performance_description",
    # Aggregation
    "AggregateResult",
    "aggregate",
    "percentage",
    "validate_weights",
    # Clock
    "AttemptClock",
    "quiz_window",
    # Scoring
    "QuizScore",
    "score_quiz",
    # Submissions
    "classify",
]

from .aggregate import aggregate, AggregateResult, percentage, validate_weights
from .clock import AttemptClock, quiz_window
from .errors import AlreadyAttempted, AlreadySubmitted, GradingError, InvalidState, NotFound, ValidationError
from .scale import (
    ASSIGNMENT_POINTS_SCALE,
    ASSIGNMENT_SCALE,
    Band,
    COURSE_SCALE,
    GradeScale,
    performance_description,
    QUIZ_SCALE,
)
from .scoring import QuizScore, score_quiz
from .submission import classify
