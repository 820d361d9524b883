"""
Read-only learner dashboard.
"""
from typing import Any, Dict, List

from lms.core.config import Settings, settings as default_settings
from lms.core.exceptions import NotFound
from lms.models.enums import EnrollmentStatus
from lms.repositories import Repositories


class DashboardAggregator:
    """Composes the learner dashboard from repository reads."""

    def __init__(self, repos: Repositories, settings: Settings = default_settings):
        self.repos = repos
        self.settings = settings

    def leaderboard_rank(self, total_learning_hours: float) -> int:
        """1 + number of users with strictly more learning hours."""
        return self.repos.users.count_ahead_in_hours(total_learning_hours) + 1

    def leaderboard(self, order_by: str = "hours", limit: int = 100) -> List[Dict[str, Any]]:
        """
        Top users by learning hours (default) or coin balance.

        Ties share a rank and the next rank skips, so an entry's rank is 1 +
        the number of users strictly ahead of it, as on the dashboard.
        """
        field = "coin_balance" if order_by == "coins" else "total_learning_hours"
        entries = []
        rank, previous = 0, None
        for position, user in enumerate(self.repos.users.leaderboard(order_by, limit), start=1):
            value = getattr(user, field)
            if value != previous:
                rank, previous = position, value
            entries.append(
                {
                    "rank": rank,
                    "user_id": user.id,
                    "full_name": user.full_name,
                    "department": user.department,
                    "total_learning_hours": user.total_learning_hours or 0.0,
                    "coin_balance": user.coin_balance,
                    "current_badge_level": user.current_badge_level,
                }
            )
        return entries

    def get_dashboard(self, user_id: str) -> Dict[str, Any]:
        """
        Build the dashboard for one user.

        Returns:
            Dict matching the DashboardResponse schema

        Raises:
            NotFound: If the user does not exist
        """
        user = self.repos.users.get(user_id)
        if not user:
            raise NotFound("User not found", user_id=user_id)

        hours = user.total_learning_hours or 0.0
        return {
            "user_id": user.id,
            "full_name": user.full_name,
            "mandatory_courses": self.repos.enrollments.list_mandatory(user.id, incomplete_only=True),
            "in_progress_courses": self.repos.enrollments.list_for_user(
                user.id, EnrollmentStatus.IN_PROGRESS.value
            ),
            "completed_courses_count": self.repos.enrollments.count_completed(user.id),
            "certificates_count": self.repos.certificates.count(user_id=user.id),
            "coin_balance": user.coin_balance,
            "current_badge_level": user.current_badge_level,
            "badges_earned": self.repos.badge_progress.count_earned(user.id),
            "total_learning_hours": round(hours, 2),
            "current_streak": user.current_streak,
            "leaderboard_rank": self.leaderboard_rank(hours),
            "recent_transactions": self.repos.transactions.list_for_user(
                user.id, limit=self.settings.DASHBOARD_RECENT_TRANSACTIONS
            ),
        }
