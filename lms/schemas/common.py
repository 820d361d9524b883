"""
Common schemas for API responses.
"""
from typing import Any, Dict, Optional

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Error response schema."""

    detail: str
    error: Optional[str] = None
    context: Optional[Dict[str, Any]] = None
