"""
Database initialization and seeding.
"""
import logging

from sqlalchemy.orm import Session

from lms.core.config import settings
from lms.core.security import get_password_hash
from lms.models.enums import BadgeLevel, UserRole
from lms.models.user import User
from lms.repositories import Repositories
from lms.services.gamification import GamificationEngine

logger = logging.getLogger(__name__)

DEFAULT_BADGES = [
    {
        "name": "Bronze Learner",
        "description": "Complete your first course",
        "level": BadgeLevel.BRONZE,
        "criteria": {"type": "courses_completed", "value": 1},
    },
    {
        "name": "Silver Learner",
        "description": "Complete 5 courses",
        "level": BadgeLevel.SILVER,
        "criteria": {"type": "courses_completed", "value": 5},
    },
    {
        "name": "Gold Learner",
        "description": "Complete 10 courses",
        "level": BadgeLevel.GOLD,
        "criteria": {"type": "courses_completed", "value": 10},
    },
    {
        "name": "Platinum Expert",
        "description": "Complete 20 courses and maintain 90% average",
        "level": BadgeLevel.PLATINUM,
        "criteria": {"type": "courses_completed", "value": 20, "avg_score": 90},
    },
    {
        "name": "Quiz Master",
        "description": "Pass 5 quizzes with perfect score",
        "level": BadgeLevel.GOLD,
        "criteria": {"type": "perfect_quizzes", "value": 5},
    },
    {
        "name": "Consistent Learner",
        "description": "Maintain 30 day learning streak",
        "level": BadgeLevel.SILVER,
        "criteria": {"type": "streak_days", "days": 30},
    },
    {
        "name": "Coin Collector",
        "description": "Earn 1000 coins",
        "level": BadgeLevel.SILVER,
        "criteria": {"type": "coins_earned", "value": 1000},
    },
]


def init_db(db: Session) -> None:
    """
    Initialize database with default data.

    Args:
        db: Database session
    """
    repos = Repositories(db)

    # Check if admin user exists
    admin = repos.users.get_by_email(settings.ADMIN_EMAIL)
    if not admin:
        with repos.atomic():
            repos.users.create(
                User(
                    email=settings.ADMIN_EMAIL,
                    full_name="System Administrator",
                    hashed_password=get_password_hash(settings.ADMIN_PASSWORD),
                    role=UserRole.ADMIN.value,
                    is_active=True,
                )
            )
        logger.info("Admin user created successfully")

    gamification = GamificationEngine(repos, settings)
    for badge in DEFAULT_BADGES:
        if repos.badges.get_by_name(badge["name"]):
            continue
        gamification.define_badge(
            badge["name"],
            badge["level"].value,
            badge["criteria"],
            description=badge["description"],
        )
    logger.info(f"Badge catalogue has {repos.badges.count()} badges")
