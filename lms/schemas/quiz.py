"""
Pydantic schemas for quizzes and attempts.
"""
from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class QuestionOption(BaseModel):
    """Option as shown to the learner; correctness is never exposed."""

    id: str
    option_text: str
    order_number: int

    class Config:
        """Pydantic config."""

        from_attributes = True


class Question(BaseModel):
    id: str
    question_text: str
    question_type: str  # mcq, true_false, short_answer, fill_blank
    order_number: int
    options: List[QuestionOption] = []

    class Config:
        """Pydantic config."""

        from_attributes = True


class Quiz(BaseModel):
    """Schema for quiz response."""

    id: str
    course_id: str
    lesson_id: Optional[str] = None
    title: str
    description: Optional[str] = None
    passing_score: int
    max_attempts: int
    time_limit_minutes: Optional[int] = None
    questions: List[Question] = []

    class Config:
        """Pydantic config."""

        from_attributes = True


class QuizSubmit(BaseModel):
    """Schema for submitting an attempt."""

    answers: Dict[str, str] = Field(default_factory=dict)  # question id -> option id or text
    time_spent_seconds: int = Field(0, ge=0)


class QuizAttempt(BaseModel):
    """Schema for quiz attempt response."""

    id: str
    quiz_id: str
    user_id: str
    attempt_number: int
    score: int
    max_score: int
    percentage: int
    is_passed: bool
    started_at: datetime
    submitted_at: Optional[datetime] = None
    time_spent_seconds: int

    class Config:
        """Pydantic config."""

        from_attributes = True
