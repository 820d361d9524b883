"""
Coin ledger, badge catalogue and per-user badge progress.
"""
from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, JSON, String, Text, UniqueConstraint, CheckConstraint
from sqlalchemy.orm import relationship

from lms.db.base import Base
from lms.models.enums import BadgeLevel
from lms.models.mixins import EntityMixin


class CoinTransaction(EntityMixin, Base):
    """Immutable ledger row. Positive amounts credit, negative amounts debit."""

    __tablename__ = "coin_transactions"

    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    amount = Column(Integer, nullable=False)
    transaction_type = Column(String, nullable=False, index=True)  # earned, spent, redeemed, admin_adjustment
    reason = Column(String, nullable=False)
    reference_type = Column(String, nullable=True)  # course, quiz
    reference_id = Column(String(36), nullable=True)

    # Relationships
    user = relationship("User", back_populates="coin_transactions")


class Badge(EntityMixin, Base):
    """Badge definition. `criteria` is validated before it is stored."""

    __tablename__ = "badges"

    name = Column(String, unique=True, nullable=False, index=True)
    description = Column(Text, nullable=True)
    level = Column(String, default=BadgeLevel.BRONZE.value, nullable=False)
    icon_url = Column(String, nullable=True)
    criteria = Column(JSON, nullable=False)


class BadgeProgress(EntityMixin, Base):
    """How far a user is towards one badge."""

    __tablename__ = "badge_progresses"
    __table_args__ = (
        UniqueConstraint("user_id", "badge_id", name="uq_badge_progresses_user_badge"),
        CheckConstraint("progress BETWEEN 0 AND 100", name="ck_badge_progresses_progress"),
    )

    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    badge_id = Column(String(36), ForeignKey("badges.id"), nullable=False, index=True)
    progress = Column(Integer, default=0, nullable=False)
    is_earned = Column(Boolean, default=False, nullable=False)
    earned_at = Column(DateTime, nullable=True)

    # Relationships
    user = relationship("User", back_populates="badge_progresses")
    badge = relationship("Badge")
