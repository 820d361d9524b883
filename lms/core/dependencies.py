"""
Dependency injection for FastAPI endpoints.
"""
from dataclasses import dataclass
from typing import Callable, Generator

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from lms.core.config import settings
from lms.core.exceptions import PermissionDenied
from lms.core.permissions import has_role
from lms.core.security import decode_token
from lms.db.base import SessionLocal
from lms.models.enums import UserRole
from lms.repositories import Repositories
from lms.services.audit import AuditLogger
from lms.services.catalog import CatalogService
from lms.services.dashboard import DashboardAggregator
from lms.services.enrollment_manager import EnrollmentManager
from lms.services.gamification import GamificationEngine
from lms.services.progress_tracker import ProgressTracker
from lms.services.quiz_engine import QuizEngine
from lms.services.reviews import ReviewService

oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_V1_PREFIX}/auth/token")


@dataclass(frozen=True)
class Principal:
    """Authenticated caller as asserted by the bearer token."""

    user_id: str
    role: str


def get_db() -> Generator:
    """
    Dependency for database session.

    Yields:
        Database session
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_current_principal(token: str = Depends(oauth2_scheme)) -> Principal:
    """
    Decode the bearer token into a Principal.

    Raises:
        HTTPException: If the token is invalid or lacks a subject
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    payload = decode_token(token)
    if not payload or payload.get("type") != "access":
        raise credentials_exception
    user_id = payload.get("sub")
    if not user_id:
        raise credentials_exception

    return Principal(user_id=str(user_id), role=payload.get("role") or UserRole.LEARNER.value)


def require_roles(*roles: UserRole) -> Callable[[Principal], Principal]:
    """Dependency factory rejecting principals without one of `roles`."""

    def checker(principal: Principal = Depends(get_current_principal)) -> Principal:
        if not has_role(principal.role, roles):
            raise PermissionDenied(role=principal.role)
        return principal

    return checker


class Services:
    """Request-scoped wiring of the services around one session."""

    def __init__(self, db: Session):
        self.repos = Repositories(db)
        self.catalog = CatalogService(self.repos)
        self.gamification = GamificationEngine(self.repos, settings)
        self.progress = ProgressTracker(self.repos, self.gamification, settings)
        self.enrollments = EnrollmentManager(self.repos, self.gamification, settings)
        self.quizzes = QuizEngine(self.repos, self.gamification, settings)
        self.dashboard = DashboardAggregator(self.repos, settings)
        self.reviews = ReviewService(self.repos)
        self.audit = AuditLogger(self.repos)


def get_services(db: Session = Depends(get_db)) -> Services:
    return Services(db)
