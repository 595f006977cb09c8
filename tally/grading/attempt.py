"""Quiz attempt lifecycle: start, record answers, submit, auto-submit.

An attempt is ``in_progress`` until it is submitted, explicitly or by its
timer running out, and ``submitted`` forever after; its score fields are
written once, by the transition, and never recomputed. Expiry is applied
lazily: every operation that loads an attempt first auto-submits it if its
deadline has passed, so the server's clock decides regardless of whether a
client is still polling. ``expire_overdue`` sweeps the attempts nobody is
looking at.
"""

from __future__ import annotations

import dataclasses
import datetime
import typing as t

import sqlalchemy as sqla

from tally.core import di, LoggingProvider, TimestampProvider
from tally.core.logging import TraceLogLevelLogger
from tally.model import AttemptID, PublishStatus, QuestionID, QuizAttempt, QuizID, QuizWindow, QuizWithQuestions, UserID
from tally.storage import attempt as attempt_storage
from tally.storage import quiz as quiz_storage
from tally.storage import Session
from tally.storage import user as user_storage

from .clock import AttemptClock
from .errors import AlreadyAttempted, AlreadySubmitted, InvalidState, NotFound, ValidationError
from .scoring import score_quiz


@dataclasses.dataclass(frozen=True)
class TimeRemaining:
    attempt: QuizAttempt
    remaining: datetime.timedelta
    personal_end_time: datetime.datetime
    quiz_end_time: datetime.datetime

    @property
    def minutes(self) -> int:
        return int(self.remaining.total_seconds() // 60)

    @property
    def seconds(self) -> int:
        return int(self.remaining.total_seconds())


def _require_quiz(quiz_id: QuizID, session: Session) -> QuizWithQuestions:
    quiz = quiz_storage.get_with_questions(quiz_id, session=session)
    if quiz is None:
        raise NotFound(f"quiz {quiz_id} not found")
    return quiz


def _require_attempt(attempt_id: AttemptID, session: Session, *, for_update: bool = False) -> QuizAttempt:
    attempt = attempt_storage.get(attempt_id, for_update=for_update, session=session)
    if attempt is None:
        raise NotFound(f"attempt {attempt_id} not found")
    return attempt


def _check_answers(quiz: QuizWithQuestions, answers: t.Mapping[str, str]) -> None:
    known = {str(q.question_id) for q in quiz.questions}
    if unknown := sorted(set(answers) - known):
        raise ValidationError(f"questions not in quiz {quiz.quiz_id}: {', '.join(unknown)}")


def _finalize(
    attempt: QuizAttempt,
    quiz: QuizWithQuestions,
    answers: t.Mapping[str, str],
    *,
    submitted_at: datetime.datetime,
    auto_submitted: bool,
    session: Session,
    logger: TraceLogLevelLogger,
) -> QuizAttempt:
    score = score_quiz(quiz, answers)
    submitted = attempt_storage.submit(
        attempt.attempt_id,
        submitted_at=submitted_at,
        answers=answers,
        points_earned=score.points_earned,
        total_points=score.total_points,
        percentage=score.percentage,
        letter_grade=score.letter_grade,
        performance_description=score.performance_description,
        auto_submitted=auto_submitted,
        session=session,
    )
    if not submitted:
        raise AlreadySubmitted(f"attempt {attempt.attempt_id} has already been submitted")

    logger.info(
        "attempt auto-submitted" if auto_submitted else "attempt submitted",
        extra={
            "attempt_id": attempt.attempt_id,
            "quiz_id": attempt.quiz_id,
            "student_id": attempt.student_id,
            "submitted_at": submitted_at,
            "points_earned": score.points_earned,
            "total_points": score.total_points,
            "letter_grade": score.letter_grade,
        },
    )
    return _require_attempt(attempt.attempt_id, session)


def _settle(
    attempt: QuizAttempt,
    quiz: QuizWithQuestions,
    *,
    clock: AttemptClock,
    session: Session,
    logger: TraceLogLevelLogger,
) -> QuizAttempt:
    """Auto-submit ``attempt`` if its deadline has passed; otherwise return it unchanged."""
    if attempt.is_submitted:
        return attempt
    if not clock.is_expired(attempt, quiz):
        logger.trace(
            "attempt within deadline",
            extra={"attempt_id": attempt.attempt_id, "deadline": clock.deadline(attempt, quiz)},
        )
        return attempt
    try:
        return _finalize(
            attempt,
            quiz,
            attempt.student_answers,
            submitted_at=clock.deadline(attempt, quiz),
            auto_submitted=True,
            session=session,
            logger=logger,
        )
    except AlreadySubmitted:
        # a concurrent submission got there first
        return _require_attempt(attempt.attempt_id, session)


@di.inject
def start(
    quiz_id: QuizID,
    student_id: UserID,
    *,
    session: Session = di.Provide["storage.persistent.session"],
    utcnow: TimestampProvider = di.Provide["utcnow"],
    logging: LoggingProvider = di.Provide["logging"],
) -> QuizAttempt:
    """Start the student's attempt at a quiz, or resume the one in progress.

    Raises:
        NotFound: If the quiz or the student does not exist
        AlreadyAttempted: If the student's attempt has been submitted, including
            by its timer having run out
        InvalidState: If the quiz is not active or outside its window
    """
    logger = logging.get_logger()
    clock = AttemptClock(utcnow)

    quiz = _require_quiz(quiz_id, session)
    if user_storage.get(student_id, session=session) is None:
        raise NotFound(f"student {student_id} not found")

    def resume(existing: QuizAttempt) -> QuizAttempt:
        existing = _settle(existing, quiz, clock=clock, session=session, logger=logger)
        if existing.is_submitted:
            raise AlreadyAttempted(f"student {student_id} has already attempted quiz {quiz_id}")
        logger.debug("resuming attempt", extra={"attempt_id": existing.attempt_id})
        return existing

    if existing := attempt_storage.get_for_student(quiz_id, student_id, session=session):
        return resume(existing)

    if quiz.status is not PublishStatus.Active:
        raise InvalidState(f"quiz {quiz_id} is not open to students")
    match clock.window(quiz):
        case QuizWindow.NotStarted:
            raise InvalidState(f"quiz {quiz_id} has not started")
        case QuizWindow.Ended:
            raise InvalidState(f"quiz {quiz_id} has ended")
        case QuizWindow.Active:
            pass

    try:
        with session.begin_nested():
            attempt = attempt_storage.create(
                quiz_id=quiz_id, student_id=student_id, started_at=utcnow(), session=session
            )
    except sqla.exc.IntegrityError:
        # a concurrent start created the attempt first
        existing = attempt_storage.get_for_student(quiz_id, student_id, session=session)
        if existing is None:
            raise
        return resume(existing)

    logger.info(
        "attempt started",
        extra={
            "attempt_id": attempt.attempt_id,
            "quiz_id": quiz_id,
            "student_id": student_id,
            "deadline": clock.deadline(attempt, quiz),
        },
    )
    return attempt


@di.inject
def get(
    attempt_id: AttemptID,
    *,
    session: Session = di.Provide["storage.persistent.session"],
    utcnow: TimestampProvider = di.Provide["utcnow"],
    logging: LoggingProvider = di.Provide["logging"],
) -> QuizAttempt | None:
    attempt = attempt_storage.get(attempt_id, session=session)
    if attempt is None:
        return None
    quiz = _require_quiz(attempt.quiz_id, session)
    return _settle(attempt, quiz, clock=AttemptClock(utcnow), session=session, logger=logging.get_logger())


@di.inject
def current(
    quiz_id: QuizID,
    student_id: UserID,
    *,
    session: Session = di.Provide["storage.persistent.session"],
    utcnow: TimestampProvider = di.Provide["utcnow"],
    logging: LoggingProvider = di.Provide["logging"],
) -> QuizAttempt | None:
    """The student's attempt at the quiz, in progress or submitted; None if never started."""
    attempt = attempt_storage.get_for_student(quiz_id, student_id, session=session)
    if attempt is None:
        return None
    quiz = _require_quiz(quiz_id, session)
    return _settle(attempt, quiz, clock=AttemptClock(utcnow), session=session, logger=logging.get_logger())


@di.inject
def find(
    *,
    quiz_id: QuizID | None = None,
    student_id: UserID | None = None,
    session: Session = di.Provide["storage.persistent.session"],
    utcnow: TimestampProvider = di.Provide["utcnow"],
    logging: LoggingProvider = di.Provide["logging"],
) -> tuple[QuizAttempt, ...]:
    logger = logging.get_logger()
    clock = AttemptClock(utcnow)
    quizzes: dict[QuizID, QuizWithQuestions] = {}

    settled: list[QuizAttempt] = []
    for attempt in attempt_storage.find(quiz_id=quiz_id, student_id=student_id, session=session):
        if attempt.quiz_id not in quizzes:
            quizzes[attempt.quiz_id] = _require_quiz(attempt.quiz_id, session)
        settled.append(_settle(attempt, quizzes[attempt.quiz_id], clock=clock, session=session, logger=logger))
    return tuple(settled)


@di.inject
def time_remaining(
    quiz_id: QuizID,
    student_id: UserID,
    *,
    session: Session = di.Provide["storage.persistent.session"],
    utcnow: TimestampProvider = di.Provide["utcnow"],
    logging: LoggingProvider = di.Provide["logging"],
) -> TimeRemaining:
    """Time left on the student's attempt; zero once it is submitted.

    Raises:
        NotFound: If the quiz does not exist or the student has not started it
    """
    clock = AttemptClock(utcnow)
    quiz = _require_quiz(quiz_id, session)
    attempt = attempt_storage.get_for_student(quiz_id, student_id, session=session)
    if attempt is None:
        raise NotFound(f"student {student_id} has not started quiz {quiz_id}")

    attempt = _settle(attempt, quiz, clock=clock, session=session, logger=logging.get_logger())
    remaining = datetime.timedelta(0) if attempt.is_submitted else clock.remaining(attempt, quiz)
    return TimeRemaining(
        attempt=attempt,
        remaining=remaining,
        personal_end_time=clock.deadline(attempt, quiz),
        quiz_end_time=quiz.end_date_time,
    )


@di.inject
def record_answers(
    attempt_id: AttemptID,
    answers: t.Mapping[str, str],
    *,
    session: Session = di.Provide["storage.persistent.session"],
    utcnow: TimestampProvider = di.Provide["utcnow"],
    logging: LoggingProvider = di.Provide["logging"],
) -> QuizAttempt:
    """Record answers on an in-progress attempt; the latest answer to a question wins.

    Raises:
        NotFound: If the attempt does not exist
        ValidationError: If an answer is for a question outside the quiz
        InvalidState: If the attempt is submitted, or its time ran out
    """
    logger = logging.get_logger()
    clock = AttemptClock(utcnow)

    attempt = _require_attempt(attempt_id, session, for_update=True)
    quiz = _require_quiz(attempt.quiz_id, session)
    if attempt.is_submitted:
        raise InvalidState(f"attempt {attempt_id} has already been submitted")

    attempt = _settle(attempt, quiz, clock=clock, session=session, logger=logger)
    if attempt.is_submitted:
        raise InvalidState(f"time is up on attempt {attempt_id}")

    _check_answers(quiz, answers)
    merged = {**attempt.student_answers, **answers}
    if not attempt_storage.record_answers(attempt_id, merged, session=session):
        raise InvalidState(f"attempt {attempt_id} has already been submitted")

    logger.debug(
        "answers recorded",
        extra={
            "attempt_id": attempt_id,
            "questions": sorted(answers),
        },
    )
    return _require_attempt(attempt_id, session)


def record_answer(
    attempt_id: AttemptID,
    question_id: QuestionID,
    answer: str,
    **kwargs: t.Any,
) -> QuizAttempt:
    return record_answers(attempt_id, {str(question_id): answer}, **kwargs)


@di.inject
def submit(
    attempt_id: AttemptID,
    answers: t.Mapping[str, str] | None = None,
    *,
    student_id: UserID | None = None,
    session: Session = di.Provide["storage.persistent.session"],
    utcnow: TimestampProvider = di.Provide["utcnow"],
    logging: LoggingProvider = di.Provide["logging"],
) -> QuizAttempt:
    """Submit and grade an attempt.

    ``answers`` are merged over the answers already recorded.

    Raises:
        NotFound: If the attempt does not exist, or belongs to a different student
        ValidationError: If an answer is for a question outside the quiz
        AlreadySubmitted: If the attempt was already submitted, including by
            its timer having run out
    """
    logger = logging.get_logger()
    clock = AttemptClock(utcnow)

    attempt = _require_attempt(attempt_id, session, for_update=True)
    if student_id is not None and attempt.student_id != student_id:
        raise NotFound(f"attempt {attempt_id} not found for student {student_id}")
    if attempt.is_submitted:
        raise AlreadySubmitted(f"attempt {attempt_id} has already been submitted")

    quiz = _require_quiz(attempt.quiz_id, session)
    if _settle(attempt, quiz, clock=clock, session=session, logger=logger).is_submitted:
        raise AlreadySubmitted(f"time is up on attempt {attempt_id}; it was submitted automatically")

    answers = answers or {}
    _check_answers(quiz, answers)
    return _finalize(
        attempt,
        quiz,
        {**attempt.student_answers, **answers},
        submitted_at=utcnow(),
        auto_submitted=False,
        session=session,
        logger=logger,
    )


@di.inject
def auto_submit(
    attempt_id: AttemptID,
    *,
    session: Session = di.Provide["storage.persistent.session"],
    utcnow: TimestampProvider = di.Provide["utcnow"],
    logging: LoggingProvider = di.Provide["logging"],
) -> QuizAttempt:
    """Submit an expired attempt as of its deadline, with the answers recorded so far.

    Raises:
        NotFound: If the attempt does not exist
        AlreadySubmitted: If the attempt was already submitted
        InvalidState: If the attempt still has time remaining
    """
    clock = AttemptClock(utcnow)
    attempt = _require_attempt(attempt_id, session, for_update=True)
    if attempt.is_submitted:
        raise AlreadySubmitted(f"attempt {attempt_id} has already been submitted")

    quiz = _require_quiz(attempt.quiz_id, session)
    if not clock.is_expired(attempt, quiz):
        raise InvalidState(f"attempt {attempt_id} still has time remaining")
    return _finalize(
        attempt,
        quiz,
        attempt.student_answers,
        submitted_at=clock.deadline(attempt, quiz),
        auto_submitted=True,
        session=session,
        logger=logging.get_logger(),
    )


@di.inject
def expire_overdue(
    *,
    session: Session = di.Provide["storage.persistent.session"],
    utcnow: TimestampProvider = di.Provide["utcnow"],
    logging: LoggingProvider = di.Provide["logging"],
) -> tuple[QuizAttempt, ...]:
    """Auto-submit every in-progress attempt whose deadline has passed."""
    logger = logging.get_logger()
    clock = AttemptClock(utcnow)
    quizzes: dict[QuizID, QuizWithQuestions] = {}

    expired: list[QuizAttempt] = []
    for attempt in attempt_storage.find_overdue(utcnow(), session=session):
        if attempt.quiz_id not in quizzes:
            quizzes[attempt.quiz_id] = _require_quiz(attempt.quiz_id, session)
        quiz = quizzes[attempt.quiz_id]
        try:
            expired.append(
                _finalize(
                    attempt,
                    quiz,
                    attempt.student_answers,
                    submitted_at=clock.deadline(attempt, quiz),
                    auto_submitted=True,
                    session=session,
                    logger=logger,
                )
            )
        except AlreadySubmitted:
            logger.debug("attempt submitted concurrently", extra={"attempt_id": attempt.attempt_id})

    logger.info("expired overdue attempts", extra={"count": len(expired)})
    return tuple(expired)
