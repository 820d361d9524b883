"""
Pydantic schemas for coins and badges.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator


class CoinAmountRequest(BaseModel):
    """Schema for spending or redeeming coins."""

    amount: int = Field(..., gt=0)
    reason: str = Field(..., min_length=1, max_length=255)


class CoinAdjustmentRequest(BaseModel):
    """Schema for an admin balance correction."""

    user_id: str
    amount: int
    reason: str = Field(..., min_length=1, max_length=255)

    @field_validator("amount")
    @classmethod
    def validate_amount(cls, v: int) -> int:
        if v == 0:
            raise ValueError("amount must be non-zero")
        return v


class CoinTransaction(BaseModel):
    """Schema for ledger row response."""

    id: str
    user_id: str
    amount: int
    transaction_type: str  # earned, spent, redeemed, admin_adjustment
    reason: str
    reference_type: Optional[str] = None
    reference_id: Optional[str] = None
    created_at: datetime

    class Config:
        """Pydantic config."""

        from_attributes = True


class CoinBalance(BaseModel):
    user_id: str
    coin_balance: int


class BadgeCreate(BaseModel):
    """Schema for defining a badge."""

    name: str = Field(..., min_length=1)
    level: str
    criteria: Dict[str, Any]
    description: Optional[str] = None
    icon_url: Optional[str] = None


class Badge(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    level: str
    icon_url: Optional[str] = None
    criteria: Dict[str, Any]

    class Config:
        """Pydantic config."""

        from_attributes = True


class BadgeProgress(BaseModel):
    """Schema for badge progress response."""

    id: str
    badge_id: str
    progress: int
    is_earned: bool
    earned_at: Optional[datetime] = None
    badge: Badge

    class Config:
        """Pydantic config."""

        from_attributes = True


class BadgeCheckResult(BaseModel):
    newly_earned: List[BadgeProgress]
    current_badge_level: str
