"""
Pydantic schema for the learner dashboard.
"""
from typing import List, Optional

from pydantic import BaseModel

from lms.schemas.enrollment import Enrollment
from lms.schemas.gamification import CoinTransaction


class DashboardResponse(BaseModel):
    """Schema for dashboard response."""

    user_id: str
    full_name: Optional[str] = None
    mandatory_courses: List[Enrollment]
    in_progress_courses: List[Enrollment]
    completed_courses_count: int
    certificates_count: int
    coin_balance: int
    current_badge_level: str
    badges_earned: int
    total_learning_hours: float
    current_streak: int
    leaderboard_rank: int
    recent_transactions: List[CoinTransaction]
