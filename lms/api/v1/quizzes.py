"""
API endpoints for quizzes and attempts.
"""
from typing import Any, List

from fastapi import APIRouter, Depends, status

from lms.core.dependencies import Principal, Services, get_current_principal, get_services
from lms.schemas.quiz import Quiz, QuizAttempt, QuizSubmit

router = APIRouter()


@router.get("/{quiz_id}", response_model=Quiz)
def get_quiz(
    quiz_id: str,
    principal: Principal = Depends(get_current_principal),
    services: Services = Depends(get_services),
) -> Any:
    return services.quizzes.get_quiz(quiz_id)


@router.post("/{quiz_id}/attempts", response_model=QuizAttempt, status_code=status.HTTP_201_CREATED)
def start_attempt(
    quiz_id: str,
    principal: Principal = Depends(get_current_principal),
    services: Services = Depends(get_services),
) -> Any:
    with services.repos.atomic():
        attempt = services.quizzes.start_attempt(principal.user_id, quiz_id)
        services.audit.record(
            "quiz_start", "quiz_attempt", attempt.id, principal.user_id,
            {"quiz_id": quiz_id, "attempt_number": attempt.attempt_number},
        )
    return attempt


@router.post("/{quiz_id}/attempts/{attempt_id}/submit", response_model=QuizAttempt)
def submit_attempt(
    quiz_id: str,
    attempt_id: str,
    submit_in: QuizSubmit,
    principal: Principal = Depends(get_current_principal),
    services: Services = Depends(get_services),
) -> Any:
    """Grade an attempt; a pass awards the quiz coins."""
    with services.repos.atomic():
        attempt = services.quizzes.submit_attempt(
            principal.user_id, quiz_id, attempt_id, submit_in.answers, submit_in.time_spent_seconds
        )
        services.audit.record(
            "quiz_submit", "quiz_attempt", attempt.id, principal.user_id,
            {"quiz_id": quiz_id, "percentage": attempt.percentage, "is_passed": attempt.is_passed},
        )
    return attempt


@router.get("/{quiz_id}/attempts", response_model=List[QuizAttempt])
def list_attempts(
    quiz_id: str,
    principal: Principal = Depends(get_current_principal),
    services: Services = Depends(get_services),
) -> Any:
    return services.quizzes.list_attempts(principal.user_id, quiz_id)
