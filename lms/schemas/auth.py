"""
Pydantic schemas for authentication.
"""
from pydantic import BaseModel, EmailStr


class LoginRequest(BaseModel):
    """Schema for JSON login."""

    email: EmailStr
    password: str


class Token(BaseModel):
    """Schema for JWT token."""

    access_token: str
    expires_in: int
    token_type: str
