from typing import List, Optional

from sqlalchemy import func

from lms.models.enums import TransactionType
from lms.models.gamification import Badge, BadgeProgress, CoinTransaction
from lms.repositories.base import BaseRepository


class CoinTransactionRepository(BaseRepository[CoinTransaction]):
    model = CoinTransaction

    def _sum(self, *criteria) -> int:
        value = self.db.query(func.coalesce(func.sum(CoinTransaction.amount), 0)).filter(
            CoinTransaction.deleted_at.is_(None), *criteria
        ).scalar()
        return int(value or 0)

    def sum_for_user(self, user_id: str) -> int:
        return self._sum(CoinTransaction.user_id == user_id)

    def sum_earned(self, user_id: str) -> int:
        """Total credited by rewards and positive admin adjustments."""
        return self._sum(
            CoinTransaction.user_id == user_id,
            CoinTransaction.amount > 0,
            CoinTransaction.transaction_type.in_(
                [TransactionType.EARNED.value, TransactionType.ADMIN_ADJUSTMENT.value]
            ),
        )

    def list_for_user(self, user_id: str, limit: int = 50, offset: int = 0) -> List[CoinTransaction]:
        return (
            self.query()
            .filter(CoinTransaction.user_id == user_id)
            .order_by(CoinTransaction.created_at.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )


class BadgeRepository(BaseRepository[Badge]):
    model = Badge

    def get_by_name(self, name: str) -> Optional[Badge]:
        return self.query().filter(Badge.name == name).first()


class BadgeProgressRepository(BaseRepository[BadgeProgress]):
    model = BadgeProgress

    def get_for(self, user_id: str, badge_id: str) -> Optional[BadgeProgress]:
        return self.get_by_key(user_id=user_id, badge_id=badge_id)

    def list_for_user(self, user_id: str, earned_only: bool = False) -> List[BadgeProgress]:
        query = self.query().filter(BadgeProgress.user_id == user_id)
        if earned_only:
            query = query.filter(BadgeProgress.is_earned.is_(True))
        return query.order_by(BadgeProgress.created_at).all()

    def count_earned(self, user_id: str) -> int:
        return self.query().filter(
            BadgeProgress.user_id == user_id,
            BadgeProgress.is_earned.is_(True),
        ).count()
