"""
Pydantic schemas for the course catalog.
"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class CourseBase(BaseModel):
    """Base course schema."""

    description: Optional[str] = None
    category: Optional[str] = None
    duration_minutes: int = Field(0, ge=0)
    difficulty_level: str = "beginner"  # beginner, intermediate, advanced
    passing_score: int = Field(70, ge=0, le=100)
    coins_reward: int = Field(100, ge=0)
    is_mandatory: bool = False
    mandatory_due_date: Optional[datetime] = None
    max_enrollments: int = Field(0, ge=0)  # 0 = unlimited


class CourseCreate(CourseBase):
    """Schema for course creation."""

    title: str = Field(..., min_length=1, max_length=255)


class CourseUpdate(BaseModel):
    """Schema for course update; only the fields sent are changed."""

    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    category: Optional[str] = None
    duration_minutes: Optional[int] = Field(None, ge=0)
    difficulty_level: Optional[str] = None
    passing_score: Optional[int] = Field(None, ge=0, le=100)
    coins_reward: Optional[int] = Field(None, ge=0)
    is_mandatory: Optional[bool] = None
    mandatory_due_date: Optional[datetime] = None
    max_enrollments: Optional[int] = Field(None, ge=0)


class Course(CourseBase):
    """Schema for course response."""

    id: str
    title: str
    instructor_id: Optional[str] = None
    is_published: bool
    enrollment_count: int
    completion_count: int
    average_rating: float
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        """Pydantic config."""

        from_attributes = True


class LessonCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    content_type: str = "video"  # video, document, interactive
    video_url: Optional[str] = None
    duration_seconds: int = Field(0, ge=0)
    order_number: Optional[int] = Field(None, ge=1)  # appended when omitted


class Lesson(BaseModel):
    """Schema for lesson response."""

    id: str
    course_id: str
    title: str
    description: Optional[str] = None
    content_type: str
    video_url: Optional[str] = None
    duration_seconds: int
    order_number: int

    class Config:
        """Pydantic config."""

        from_attributes = True


class QuestionOptionCreate(BaseModel):
    option_text: str = Field(..., min_length=1)
    is_correct: bool = False


class QuestionCreate(BaseModel):
    """Schema for one authored question."""

    question_text: str = Field(..., min_length=1)
    question_type: str = "mcq"  # mcq, true_false, short_answer, fill_blank
    options: List[QuestionOptionCreate] = []
    accepted_answers: Optional[List[str]] = None


class QuizCreate(BaseModel):
    """Schema for quiz creation with its questions."""

    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    lesson_id: Optional[str] = None
    passing_score: int = Field(70, ge=0, le=100)
    max_attempts: int = Field(3, ge=0)  # 0 = unlimited
    coins_reward: Optional[int] = Field(None, ge=0)  # server default when omitted
    time_limit_minutes: int = Field(0, ge=0)  # 0 = no limit
    questions: List[QuestionCreate] = Field(..., min_length=1)
