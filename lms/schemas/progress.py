"""
Pydantic schemas for lesson progress.
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class TrackProgressRequest(BaseModel):
    """Schema for watch-time telemetry."""

    course_id: str
    lesson_id: str
    watched_seconds: int = Field(..., ge=0)
    total_seconds: int = Field(..., ge=0)


class LessonProgress(BaseModel):
    """Schema for lesson progress response."""

    id: str
    user_id: str
    course_id: str
    lesson_id: str
    watched_seconds: int
    total_seconds: int
    progress_percentage: int
    is_completed: bool
    completed_at: Optional[datetime] = None
    last_accessed_at: Optional[datetime] = None

    class Config:
        """Pydantic config."""

        from_attributes = True


class TrackProgressResponse(BaseModel):
    """Lesson progress plus the recomputed course progress."""

    lesson_progress: LessonProgress
    overall_progress: int


class CourseProgress(BaseModel):
    course_id: str
    overall_progress: int
