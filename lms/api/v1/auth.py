"""
Authentication endpoints.
"""
import logging
from datetime import timedelta
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm

from lms.core.config import settings
from lms.core.dependencies import Principal, Services, get_current_principal, get_services
from lms.core.security import create_access_token, get_password_hash, verify_password
from lms.core.timeutils import utcnow
from lms.models.enums import UserRole
from lms.models.user import User
from lms.schemas.auth import LoginRequest, Token
from lms.schemas.user import User as UserSchema, UserCreate

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/register", response_model=UserSchema, status_code=status.HTTP_201_CREATED)
def register(user_in: UserCreate, services: Services = Depends(get_services)) -> Any:
    """
    Register a new learner account.

    Raises:
        HTTPException: If the email is already registered
    """
    email = user_in.email
    if services.repos.users.get_by_email(email):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already registered",
        )

    with services.repos.atomic():
        user = services.repos.users.create(
            User(
                email=email,
                full_name=user_in.full_name,
                department=user_in.department,
                hashed_password=get_password_hash(user_in.password),
                role=UserRole.LEARNER.value,
                is_active=True,
            )
        )
        services.audit.record("user_register", "user", user.id, user.id)

    logger.info(f"Registered user {user.id}")
    return user


def _issue_token(services: Services, email: str, password: str) -> dict:
    user = services.repos.users.get_by_email(email)
    if not user or not user.hashed_password or not verify_password(password, user.hashed_password):
        logger.warning(f"Failed login for {email}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Inactive user",
        )

    with services.repos.atomic():
        user.last_login = utcnow()
        services.repos.users.update(user)

    expires = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    access_token = create_access_token(subject=user.id, role=user.role, expires_delta=expires)
    return {
        "access_token": access_token,
        "expires_in": int(expires.total_seconds()),
        "token_type": "bearer",
    }


@router.post("/login", response_model=Token)
def login(login_in: LoginRequest, services: Services = Depends(get_services)) -> Any:
    """
    Login with a JSON body and return a JWT token.

    Raises:
        HTTPException: If credentials are invalid
    """
    return _issue_token(services, login_in.email, login_in.password)


@router.post("/token", response_model=Token)
def login_form(
    form_data: OAuth2PasswordRequestForm = Depends(), services: Services = Depends(get_services)
) -> Any:
    """OAuth2 password flow used by the interactive docs."""
    return _issue_token(services, form_data.username, form_data.password)


@router.get("/me", response_model=UserSchema)
def read_current_user(
    principal: Principal = Depends(get_current_principal),
    services: Services = Depends(get_services),
) -> Any:
    """Get the account behind the bearer token."""
    user = services.repos.users.get(principal.user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user
