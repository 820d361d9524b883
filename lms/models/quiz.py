"""
Quiz definitions and user attempts.
"""
from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, JSON, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from lms.core.timeutils import utcnow
from lms.db.base import Base
from lms.models.enums import QuestionType
from lms.models.mixins import EntityMixin


class Quiz(EntityMixin, Base):
    """Quiz model for course assessments."""

    __tablename__ = "quizzes"

    course_id = Column(String(36), ForeignKey("courses.id"), nullable=False, index=True)
    lesson_id = Column(String(36), ForeignKey("lessons.id"), nullable=True, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    passing_score = Column(Integer, default=70, nullable=False)
    max_attempts = Column(Integer, default=3, nullable=False)  # 0 = unlimited
    coins_reward = Column(Integer, nullable=True)  # None = QUIZ_PASS_COINS_REWARD
    time_limit_minutes = Column(Integer, default=0)  # 0 = no limit
    is_published = Column(Boolean, default=False)

    # Relationships
    course = relationship("Course", back_populates="quizzes")
    questions = relationship(
        "Question",
        back_populates="quiz",
        order_by="Question.order_number",
        cascade="all, delete-orphan",
    )


class Question(EntityMixin, Base):
    """A single question in a quiz."""

    __tablename__ = "questions"

    quiz_id = Column(String(36), ForeignKey("quizzes.id"), nullable=False, index=True)
    question_text = Column(Text, nullable=False)
    question_type = Column(String, default=QuestionType.MCQ.value, nullable=False)  # mcq, true_false, short_answer, fill_blank
    order_number = Column(Integer, nullable=False)
    accepted_answers = Column(JSON, nullable=True)  # Only read by the text-answer grader

    # Relationships
    quiz = relationship("Quiz", back_populates="questions")
    options = relationship(
        "QuestionOption",
        back_populates="question",
        order_by="QuestionOption.order_number",
        cascade="all, delete-orphan",
    )


class QuestionOption(EntityMixin, Base):
    """Option for MCQ or true/false questions."""

    __tablename__ = "question_options"

    question_id = Column(String(36), ForeignKey("questions.id"), nullable=False, index=True)
    option_text = Column(Text, nullable=False)
    is_correct = Column(Boolean, default=False, nullable=False)
    order_number = Column(Integer, nullable=False)

    # Relationships
    question = relationship("Question", back_populates="options")


class QuizAttempt(EntityMixin, Base):
    """A user's numbered attempt at a quiz."""

    __tablename__ = "quiz_attempts"
    __table_args__ = (
        UniqueConstraint("user_id", "quiz_id", "attempt_number", name="uq_quiz_attempts_user_quiz_number"),
    )

    quiz_id = Column(String(36), ForeignKey("quizzes.id"), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    attempt_number = Column(Integer, nullable=False)
    started_at = Column(DateTime, default=utcnow, nullable=False)
    submitted_at = Column(DateTime, nullable=True)
    score = Column(Integer, default=0, nullable=False)
    max_score = Column(Integer, default=0, nullable=False)
    percentage = Column(Integer, default=0, nullable=False)
    is_passed = Column(Boolean, default=False, nullable=False)
    time_spent_seconds = Column(Integer, default=0, nullable=False)

    # Relationships
    quiz = relationship("Quiz")
    answers = relationship("QuizAnswerEntry", back_populates="attempt", cascade="all, delete-orphan")

    @property
    def is_submitted(self) -> bool:
        return self.submitted_at is not None


class QuizAnswerEntry(EntityMixin, Base):
    """A user's answer to one question within an attempt."""

    __tablename__ = "quiz_answer_entries"

    attempt_id = Column(String(36), ForeignKey("quiz_attempts.id"), nullable=False, index=True)
    question_id = Column(String(36), ForeignKey("questions.id"), nullable=False)
    user_answer = Column(Text, nullable=True)  # Option id or free text
    is_correct = Column(Boolean, default=False, nullable=False)
    points_earned = Column(Integer, default=0, nullable=False)

    # Relationships
    attempt = relationship("QuizAttempt", back_populates="answers")
