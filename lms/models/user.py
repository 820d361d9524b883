"""
User model for authentication, roles and gamification state.
"""
from sqlalchemy import Boolean, Column, Date, DateTime, Float, Integer, String, CheckConstraint
from sqlalchemy.orm import relationship

from lms.db.base import Base
from lms.models.enums import BadgeLevel, UserRole
from lms.models.mixins import EntityMixin


class User(EntityMixin, Base):
    """User model."""

    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("coin_balance >= 0", name="ck_users_coin_balance_nonneg"),
        CheckConstraint("current_streak >= 0", name="ck_users_streak_nonneg"),
    )

    email = Column(String, unique=True, index=True, nullable=False)
    full_name = Column(String, nullable=True)
    department = Column(String, nullable=True)
    hashed_password = Column(String, nullable=True)
    role = Column(String, default=UserRole.LEARNER.value, nullable=False)  # learner, instructor, admin, hr_personnel
    is_active = Column(Boolean, default=True)
    last_login = Column(DateTime, nullable=True)

    # Denormalized cache of SUM(coin_transactions.amount)
    coin_balance = Column(Integer, default=0, nullable=False)
    current_badge_level = Column(String, default=BadgeLevel.BRONZE.value, nullable=False)
    current_streak = Column(Integer, default=0, nullable=False)
    last_activity_on = Column(Date, nullable=True)
    total_learning_hours = Column(Float, default=0.0, nullable=False, index=True)

    # Relationships
    enrollments = relationship("Enrollment", back_populates="user")
    coin_transactions = relationship("CoinTransaction", back_populates="user")
    badge_progresses = relationship("BadgeProgress", back_populates="user")
    certificates = relationship("Certificate", back_populates="user")
