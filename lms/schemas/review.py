"""
Pydantic schemas for course reviews.
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class ReviewCreate(BaseModel):
    rating: int = Field(..., ge=1, le=5)
    review_text: Optional[str] = Field(None, max_length=2000)


class Review(BaseModel):
    """Schema for review response."""

    id: str
    user_id: str
    course_id: str
    rating: int
    review_text: Optional[str] = None
    created_at: datetime

    class Config:
        """Pydantic config."""

        from_attributes = True
