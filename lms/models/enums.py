"""
Enumerations stored as plain strings in the database.
"""
from enum import Enum


class UserRole(str, Enum):
    LEARNER = "learner"
    INSTRUCTOR = "instructor"
    ADMIN = "admin"
    HR_PERSONNEL = "hr_personnel"


class EnrollmentStatus(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class QuestionType(str, Enum):
    MCQ = "mcq"
    TRUE_FALSE = "true_false"
    SHORT_ANSWER = "short_answer"
    FILL_BLANK = "fill_blank"


class TransactionType(str, Enum):
    EARNED = "earned"
    SPENT = "spent"
    REDEEMED = "redeemed"
    ADMIN_ADJUSTMENT = "admin_adjustment"


class BadgeLevel(str, Enum):
    """Badge levels in ascending order."""

    BRONZE = "bronze"
    SILVER = "silver"
    GOLD = "gold"
    PLATINUM = "platinum"
    DIAMOND = "diamond"

    @property
    def rank(self) -> int:
        return _BADGE_ORDER.index(self)

    @classmethod
    def parse(cls, value: str) -> "BadgeLevel":
        return cls(str(value).strip().lower())


_BADGE_ORDER = list(BadgeLevel)
