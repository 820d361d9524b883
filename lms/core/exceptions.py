"""
Domain errors raised by the learning services.

Every error carries the HTTP status the API layer answers with, so handlers
never have to translate individual kinds.
"""
from typing import Any, Dict, Optional

from fastapi import status


class LMSError(Exception):
    """Base class for all domain errors."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    default_message: str = "Operation rejected"

    def __init__(self, message: Optional[str] = None, **context: Any):
        self.message = message or self.default_message
        self.context: Dict[str, Any] = context
        super().__init__(self.message)

    @property
    def kind(self) -> str:
        return type(self).__name__

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"detail": self.message, "error": self.kind}
        if self.context:
            payload["context"] = self.context
        return payload


class NotFound(LMSError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found"


class PermissionDenied(LMSError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "You are not allowed to perform this action"


# Uniqueness / idempotency violations

class AlreadyEnrolled(LMSError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "User is already enrolled in this course"


class AlreadySubmitted(LMSError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Quiz attempt has already been submitted"


class AlreadyCompleted(LMSError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Course has already been completed"


class DuplicateReview(LMSError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "User has already reviewed this course"


# Capacity / policy limits

class CourseFull(LMSError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Course is full, cannot enroll"


class AttemptLimitExceeded(LMSError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Maximum quiz attempts exceeded"


class TimeLimitExceeded(LMSError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Quiz time limit has passed"


# Out-of-domain input

class InvalidRange(LMSError):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_message = "Value out of range"


class InvalidAmount(LMSError):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_message = "Coin amount must be positive"


class InvalidCriteria(LMSError):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_message = "Badge criteria could not be decoded"


class InvalidQuestion(LMSError):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_message = "Question definition is not valid"


class InsufficientBalance(LMSError):
    status_code = status.HTTP_402_PAYMENT_REQUIRED
    default_message = "Insufficient coins"


# Storage

class StorageError(LMSError):
    """Opaque failure from the persistence layer. Never retried by the core."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_message = "Storage backend failure"


class ConflictError(StorageError):
    """A write violated a uniqueness constraint."""

    status_code = status.HTTP_409_CONFLICT
    default_message = "Conflicting write"
