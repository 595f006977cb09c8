"""Per-question grading for quiz attempts.

Every question type is graded by exact comparison: multiple choice by the id
of the selected option, true/false and short answer against the stored
``correct_answer``, case-sensitively and without trimming. Missing and blank
answers are wrong.
"""

from __future__ import annotations

import dataclasses
import typing as t

from tally.model import Question, QuestionType, QuizWithQuestions

from .aggregate import percentage
from .errors import ValidationError
from .scale import QUIZ_SCALE

TrueFalseAnswers: t.Final = frozenset({"true", "false"})


@dataclasses.dataclass(frozen=True)
class QuestionResult:
    question_id: str
    points: int
    correct: bool

    @property
    def earned(self) -> int:
        return self.points if self.correct else 0


@dataclasses.dataclass(frozen=True)
class QuizScore:
    points_earned: int
    total_points: int
    percentage: float
    letter_grade: str
    performance_description: str
    results: tuple[QuestionResult, ...]


def correct_option_id(question: Question) -> str | None:
    correct = [o for o in question.options if o.is_correct]
    return str(correct[0].option_id) if len(correct) == 1 else None


def is_correct(question: Question, answer: str | None) -> bool:
    if answer is None or answer == "":
        return False

    match question.type:
        case QuestionType.MultipleChoice:
            return answer == correct_option_id(question)
        case QuestionType.TrueFalse | QuestionType.ShortAnswer:
            return question.correct_answer is not None and answer == question.correct_answer


def score_quiz(quiz: QuizWithQuestions, answers: t.Mapping[str, str]) -> QuizScore:
    results = tuple(
        QuestionResult(
            question_id=str(q.question_id),
            points=q.points,
            correct=is_correct(q, answers.get(str(q.question_id))),
        )
        for q in quiz.questions
    )
    earned = sum(r.earned for r in results)
    total = quiz.total_points
    pct = percentage(earned, total)
    return QuizScore(
        points_earned=earned,
        total_points=total,
        percentage=pct,
        letter_grade=QUIZ_SCALE.display_letter(pct, total),
        performance_description=QUIZ_SCALE.description(pct),
        results=results,
    )


def validate_question(question: Question) -> None:
    """Raise ``ValidationError`` unless ``question`` can be graded."""
    if question.points <= 0:
        raise ValidationError(f"question {question.position + 1}: points must be positive")

    match question.type:
        case QuestionType.MultipleChoice:
            if len(question.options) < 2:
                raise ValidationError(f"question {question.position + 1}: at least two options are required")
            if sum(1 for o in question.options if o.is_correct) != 1:
                raise ValidationError(f"question {question.position + 1}: exactly one option must be correct")
        case QuestionType.TrueFalse:
            if question.correct_answer not in TrueFalseAnswers:
                raise ValidationError(f"question {question.position + 1}: correct answer must be 'true' or 'false'")
        case QuestionType.ShortAnswer:
            if not question.correct_answer:
                raise ValidationError(f"question {question.position + 1}: correct answer is required")


def validate_quiz(quiz: QuizWithQuestions) -> None:
    if quiz.duration_minutes <= 0:
        raise ValidationError("duration_minutes must be positive")
    if not quiz.questions:
        raise ValidationError("a quiz needs at least one question")
    for question in quiz.questions:
        validate_question(question)
