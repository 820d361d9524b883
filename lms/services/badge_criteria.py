"""
Badge criteria as a tagged union.

Criteria are stored on `Badge.criteria` as JSON such as
`{"type": "courses_completed", "value": 5}` and decoded once into one of the
variants below. Each variant knows whether a learner satisfies it and how far
along they are.
"""
import math
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from lms.core.exceptions import InvalidCriteria


class LearnerStats(BaseModel):
    """Snapshot of the numbers badge criteria are evaluated against."""

    coins_earned: int = 0
    learning_hours: float = 0.0
    courses_completed: int = 0
    average_final_score: float = 0.0
    perfect_quizzes: int = 0
    streak_days: int = 0


def _percent(current: float, target: float) -> int:
    if target <= 0:
        return 100
    return min(100, int(math.floor(current * 100 / target)))


class CoursesCompleted(BaseModel):
    type: Literal["courses_completed"]
    value: int = Field(gt=0)
    avg_score: Optional[float] = Field(default=None, ge=0, le=100)

    def is_satisfied(self, stats: LearnerStats) -> bool:
        if stats.courses_completed < self.value:
            return False
        return self.avg_score is None or stats.average_final_score >= self.avg_score

    def progress(self, stats: LearnerStats) -> int:
        percent = _percent(stats.courses_completed, self.value)
        if percent == 100 and not self.is_satisfied(stats):
            # Enough courses, average score still short
            return 99
        return percent


class LearningHours(BaseModel):
    type: Literal["learning_hours"]
    hours: float = Field(gt=0)

    def is_satisfied(self, stats: LearnerStats) -> bool:
        return stats.learning_hours >= self.hours

    def progress(self, stats: LearnerStats) -> int:
        return _percent(stats.learning_hours, self.hours)


class PerfectQuizzes(BaseModel):
    type: Literal["perfect_quizzes"]
    value: int = Field(gt=0)

    def is_satisfied(self, stats: LearnerStats) -> bool:
        return stats.perfect_quizzes >= self.value

    def progress(self, stats: LearnerStats) -> int:
        return _percent(stats.perfect_quizzes, self.value)


class StreakDays(BaseModel):
    # "learning_streak" is the legacy spelling found in older badge rows
    type: Literal["streak_days", "learning_streak"]
    days: int = Field(gt=0)

    def is_satisfied(self, stats: LearnerStats) -> bool:
        return stats.streak_days >= self.days

    def progress(self, stats: LearnerStats) -> int:
        return _percent(stats.streak_days, self.days)


class CoinsEarned(BaseModel):
    type: Literal["coins_earned"]
    value: int = Field(gt=0)

    def is_satisfied(self, stats: LearnerStats) -> bool:
        return stats.coins_earned >= self.value

    def progress(self, stats: LearnerStats) -> int:
        return _percent(stats.coins_earned, self.value)


BadgeCriteria = Annotated[
    Union[CoursesCompleted, LearningHours, PerfectQuizzes, StreakDays, CoinsEarned],
    Field(discriminator="type"),
]

_criteria_adapter = TypeAdapter(BadgeCriteria)


def parse_criteria(raw: Any) -> BadgeCriteria:
    """
    Decode stored criteria into its variant.

    Args:
        raw: dict or JSON string

    Returns:
        One of the criteria variants

    Raises:
        InvalidCriteria: If the payload has an unknown type or bad fields
    """
    try:
        if isinstance(raw, (str, bytes)):
            return _criteria_adapter.validate_json(raw)
        return _criteria_adapter.validate_python(raw)
    except ValidationError as exc:
        raise InvalidCriteria(f"Invalid badge criteria: {exc.errors()[0]['msg']}") from exc
