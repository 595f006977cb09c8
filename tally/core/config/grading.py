import typing as t

import annotated_types as ant
import pydantic as p

from .base import BaseSettings

Weight = t.Annotated[float, ant.Ge(0), ant.Le(100)]


class GradingSettings(BaseSettings):
    """Course-wide grading defaults, applied to a CourseGrade when it is first computed."""

    assignment_weight: Weight = 60.0
    quiz_weight: Weight = 40.0

    @p.model_validator(mode="after")
    def check_weights(self) -> t.Self:
        if abs(self.assignment_weight + self.quiz_weight - 100) > 1e-6:
            raise ValueError("assignment_weight and quiz_weight must sum to 100")
        return self
