"""
API endpoints for coins and badges.
"""
from typing import Any, List

from fastapi import APIRouter, Depends, Query, status

from lms.core.dependencies import Principal, Services, get_current_principal, get_services, require_roles
from lms.models.enums import UserRole
from lms.schemas.gamification import (
    Badge,
    BadgeCheckResult,
    BadgeCreate,
    BadgeProgress,
    CoinAdjustmentRequest,
    CoinAmountRequest,
    CoinBalance,
    CoinTransaction,
)
from lms.schemas.user import LeaderboardEntry

router = APIRouter()


@router.get("/coins", response_model=CoinBalance)
def get_balance(
    principal: Principal = Depends(get_current_principal),
    services: Services = Depends(get_services),
) -> Any:
    return {"user_id": principal.user_id, "coin_balance": services.gamification.get_balance(principal.user_id)}


@router.get("/coins/transactions", response_model=List[CoinTransaction])
def list_transactions(
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    principal: Principal = Depends(get_current_principal),
    services: Services = Depends(get_services),
) -> Any:
    return services.gamification.list_transactions(principal.user_id, limit=limit, offset=offset)


@router.post("/coins/spend", response_model=CoinTransaction)
def spend_coins(
    spend_in: CoinAmountRequest,
    principal: Principal = Depends(get_current_principal),
    services: Services = Depends(get_services),
) -> Any:
    with services.repos.atomic():
        transaction = services.gamification.spend_coins(principal.user_id, spend_in.amount, spend_in.reason)
        services.audit.record(
            "coins_spend", "coin_transaction", transaction.id, principal.user_id, {"amount": spend_in.amount}
        )
    return transaction


@router.post("/coins/redeem", response_model=CoinTransaction)
def redeem_coins(
    redeem_in: CoinAmountRequest,
    principal: Principal = Depends(get_current_principal),
    services: Services = Depends(get_services),
) -> Any:
    with services.repos.atomic():
        transaction = services.gamification.redeem_coins(principal.user_id, redeem_in.amount, redeem_in.reason)
        services.audit.record(
            "coins_redeem", "coin_transaction", transaction.id, principal.user_id, {"amount": redeem_in.amount}
        )
    return transaction


@router.post("/coins/adjust", response_model=CoinTransaction)
def adjust_coins(
    adjust_in: CoinAdjustmentRequest,
    principal: Principal = Depends(require_roles(UserRole.ADMIN)),
    services: Services = Depends(get_services),
) -> Any:
    """Signed balance correction (admin only)."""
    with services.repos.atomic():
        transaction = services.gamification.adjust_coins(adjust_in.user_id, adjust_in.amount, adjust_in.reason)
        services.audit.record(
            "coins_adjust", "coin_transaction", transaction.id, principal.user_id,
            {"target_user_id": adjust_in.user_id, "amount": adjust_in.amount},
        )
    return transaction


@router.get("/leaderboard", response_model=List[LeaderboardEntry])
def get_leaderboard(
    order_by: str = Query("hours", pattern="^(hours|coins)$"),
    limit: int = Query(100, ge=1, le=500),
    principal: Principal = Depends(get_current_principal),
    services: Services = Depends(get_services),
) -> Any:
    """Top learners by learning hours or coin balance."""
    return services.dashboard.leaderboard(order_by=order_by, limit=limit)


@router.get("/badges", response_model=List[BadgeProgress])
def list_badges(
    earned_only: bool = False,
    principal: Principal = Depends(get_current_principal),
    services: Services = Depends(get_services),
) -> Any:
    return services.gamification.list_badges(principal.user_id, earned_only=earned_only)


@router.post("/badges/check", response_model=BadgeCheckResult)
def check_badges(
    principal: Principal = Depends(get_current_principal),
    services: Services = Depends(get_services),
) -> Any:
    newly_earned = services.gamification.check_and_award_badges(principal.user_id)
    user = services.repos.users.get(principal.user_id)
    return {"newly_earned": newly_earned, "current_badge_level": user.current_badge_level}


@router.post("/badges", response_model=Badge, status_code=status.HTTP_201_CREATED)
def define_badge(
    badge_in: BadgeCreate,
    principal: Principal = Depends(require_roles(UserRole.ADMIN)),
    services: Services = Depends(get_services),
) -> Any:
    return services.gamification.define_badge(
        badge_in.name,
        badge_in.level,
        badge_in.criteria,
        description=badge_in.description,
        icon_url=badge_in.icon_url,
    )
