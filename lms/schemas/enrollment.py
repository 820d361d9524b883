"""
Pydantic schemas for enrollments and certificates.
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class EnrollmentCreate(BaseModel):
    """Schema for enrolling in a course."""

    course_id: str


class EnrollmentProgressUpdate(BaseModel):
    """Schema for setting overall progress."""

    progress: int = Field(..., ge=0, le=100)


class CourseCompleteRequest(BaseModel):
    """Schema for completing a learner's course (instructor, HR or admin)."""

    user_id: str
    final_score: int = Field(..., ge=0, le=100)


class Enrollment(BaseModel):
    """Schema for enrollment response."""

    id: str
    user_id: str
    course_id: str
    completion_status: str  # not_started, in_progress, completed
    overall_progress: int
    final_score: Optional[int] = None
    is_passed: bool
    enrolled_at: datetime
    last_accessed_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    class Config:
        """Pydantic config."""

        from_attributes = True


class Certificate(BaseModel):
    """Schema for certificate response."""

    id: str
    user_id: str
    course_id: str
    certificate_number: str
    score: int
    issued_at: datetime

    class Config:
        """Pydantic config."""

        from_attributes = True
