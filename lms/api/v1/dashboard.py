"""
Learner dashboard endpoints.
"""
from typing import Any

from fastapi import APIRouter, Depends

from lms.core.dependencies import Principal, Services, get_current_principal, get_services
from lms.core.permissions import ensure_self_or_roles
from lms.models.enums import UserRole
from lms.schemas.dashboard import DashboardResponse
from lms.schemas.enrollment import Enrollment
from lms.schemas.gamification import CoinTransaction

router = APIRouter()


def _render(data: dict) -> DashboardResponse:
    return DashboardResponse(
        **{
            **data,
            "mandatory_courses": [Enrollment.model_validate(e) for e in data["mandatory_courses"]],
            "in_progress_courses": [Enrollment.model_validate(e) for e in data["in_progress_courses"]],
            "recent_transactions": [CoinTransaction.model_validate(t) for t in data["recent_transactions"]],
        }
    )


@router.get("", response_model=DashboardResponse)
def get_my_dashboard(
    principal: Principal = Depends(get_current_principal),
    services: Services = Depends(get_services),
) -> Any:
    return _render(services.dashboard.get_dashboard(principal.user_id))


@router.get("/users/{user_id}", response_model=DashboardResponse)
def get_user_dashboard(
    user_id: str,
    principal: Principal = Depends(get_current_principal),
    services: Services = Depends(get_services),
) -> Any:
    """Another user's dashboard, for HR and admins."""
    ensure_self_or_roles(principal.user_id, principal.role, user_id, UserRole.HR_PERSONNEL)
    return _render(services.dashboard.get_dashboard(user_id))
