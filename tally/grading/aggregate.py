"""Weighted combination of assignment and quiz results into a course percentage."""

from __future__ import annotations

import dataclasses
import decimal
import math

from .errors import ValidationError

WeightTolerance = 1e-6


def round_half_up(value: float, places: int = 1) -> float:
    q = decimal.Decimal(1).scaleb(-places)
    return float(decimal.Decimal(repr(value)).quantize(q, rounding=decimal.ROUND_HALF_UP))


def percentage(earned: float, total: float) -> float:
    """Percentage of ``total`` earned, to one decimal place; 0 when there is nothing to earn."""
    if total <= 0:
        return 0.0
    return round_half_up(earned / total * 100.0, 1)


def validate_weights(assignment_weight: float, quiz_weight: float) -> None:
    for name, weight in (("assignment_weight", assignment_weight), ("quiz_weight", quiz_weight)):
        if math.isnan(weight) or weight < 0:
            raise ValidationError(f"{name} must be a non-negative number, got {weight}")
    if abs(assignment_weight + quiz_weight - 100.0) > WeightTolerance:
        raise ValidationError(f"weights must sum to 100, got {assignment_weight} + {quiz_weight}")


@dataclasses.dataclass(frozen=True)
class AggregateResult:
    assignment_earned: float
    assignment_total: float
    assignment_percentage: float
    quiz_earned: float
    quiz_total: float
    quiz_percentage: float
    assignment_weight: float
    quiz_weight: float
    final_percentage: float

    @property
    def is_empty(self) -> bool:
        """Nothing has been graded; callers show N/A instead of a failing grade."""
        return self.assignment_total <= 0 and self.quiz_total <= 0


def aggregate(
    assignment_earned: float,
    assignment_total: float,
    quiz_earned: float,
    quiz_total: float,
    *,
    assignment_weight: float = 60.0,
    quiz_weight: float = 40.0,
) -> AggregateResult:
    validate_weights(assignment_weight, quiz_weight)

    a_pct = percentage(assignment_earned, assignment_total)
    q_pct = percentage(quiz_earned, quiz_total)
    final = a_pct * assignment_weight / 100.0 + q_pct * quiz_weight / 100.0
    return AggregateResult(
        assignment_earned=assignment_earned,
        assignment_total=assignment_total,
        assignment_percentage=a_pct,
        quiz_earned=quiz_earned,
        quiz_total=quiz_total,
        quiz_percentage=q_pct,
        assignment_weight=assignment_weight,
        quiz_weight=quiz_weight,
        final_percentage=final,
    )
