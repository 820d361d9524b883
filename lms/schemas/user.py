"""
Pydantic schemas for users and the leaderboard.
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field


class UserBase(BaseModel):
    """Base user schema."""

    email: EmailStr
    full_name: Optional[str] = None
    department: Optional[str] = None


class UserCreate(UserBase):
    """Schema for self-registration; new accounts are always learners."""

    password: str = Field(..., min_length=8)


class User(UserBase):
    """Schema for user response."""

    id: str
    role: str
    is_active: bool
    coin_balance: int
    current_badge_level: str
    current_streak: int
    total_learning_hours: float
    created_at: datetime

    class Config:
        """Pydantic config."""

        from_attributes = True


class LeaderboardEntry(BaseModel):
    rank: int
    user_id: str
    full_name: Optional[str] = None
    department: Optional[str] = None
    total_learning_hours: float
    coin_balance: int
    current_badge_level: str
