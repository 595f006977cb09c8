"""Server-side countdown for quiz attempts.

An attempt's deadline is its own ``started_at`` plus the quiz duration. It is
a separate clock from the quiz-wide window: an attempt started just before the
window closes still runs for the full duration.
"""

from __future__ import annotations

import datetime
import math

from tally.core import TimestampProvider
from tally.model import Quiz, QuizAttempt, QuizWindow

ZERO = datetime.timedelta(0)


class AttemptClock(object):
    def __init__(self, now: TimestampProvider):
        self.now = now

    @staticmethod
    def deadline(attempt: QuizAttempt, quiz: Quiz) -> datetime.datetime:
        return attempt.started_at + quiz.duration

    def remaining(self, attempt: QuizAttempt, quiz: Quiz) -> datetime.timedelta:
        return max(ZERO, self.deadline(attempt, quiz) - self.now())

    def remaining_minutes(self, attempt: QuizAttempt, quiz: Quiz) -> int:
        return math.floor(self.remaining(attempt, quiz).total_seconds() / 60)

    def is_expired(self, attempt: QuizAttempt, quiz: Quiz) -> bool:
        return self.remaining(attempt, quiz) <= ZERO

    def window(self, quiz: Quiz) -> QuizWindow:
        return quiz_window(quiz, self.now())


def quiz_window(quiz: Quiz, now: datetime.datetime) -> QuizWindow:
    """Position of ``now`` relative to ``[start, start + duration)``."""
    if now < quiz.start_date_time:
        return QuizWindow.NotStarted
    if now < quiz.end_date_time:
        return QuizWindow.Active
    return QuizWindow.Ended
