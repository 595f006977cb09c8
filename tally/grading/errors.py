"""Exceptions raised by grading operations."""


class GradingError(Exception):
    """Error during a grading operation."""

    pass


class NotFound(GradingError):
    """A quiz, attempt, assignment, submission or grade does not exist."""

    pass


class InvalidState(GradingError):
    """The operation is not allowed in the entity's current state."""

    pass


class AlreadySubmitted(InvalidState):
    """The attempt was already submitted; its results are frozen."""

    pass


class AlreadyAttempted(InvalidState):
    """The student already has a submitted attempt at this quiz."""

    pass


class ValidationError(GradingError):
    """Input that can never be valid: bad weights, points out of range, malformed quizzes."""

    pass
