from typing import List, Optional

from lms.models.user import User
from lms.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    model = User

    def get_by_email(self, email: str) -> Optional[User]:
        return self.query().filter(User.email == email).first()

    def count_ahead_in_hours(self, hours: float) -> int:
        """Number of live users with strictly more learning hours."""
        return self.query().filter(User.total_learning_hours > hours).count()

    def leaderboard(self, order_by: str = "hours", limit: int = 100) -> List[User]:
        """Live users, best first by learning hours or coin balance."""
        column = User.coin_balance if order_by == "coins" else User.total_learning_hours
        return self.query().order_by(column.desc(), User.created_at).limit(limit).all()
