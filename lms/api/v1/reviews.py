"""
Course review endpoints.
"""
from typing import Any, List

from fastapi import APIRouter, Depends, Query, status

from lms.core.dependencies import Principal, Services, get_current_principal, get_services
from lms.schemas.review import Review, ReviewCreate

router = APIRouter()


@router.post("/{course_id}", response_model=Review, status_code=status.HTTP_201_CREATED)
def add_review(
    course_id: str,
    review_in: ReviewCreate,
    principal: Principal = Depends(get_current_principal),
    services: Services = Depends(get_services),
) -> Any:
    with services.repos.atomic():
        review = services.reviews.add_review(principal.user_id, course_id, review_in.rating, review_in.review_text)
        services.audit.record(
            "course_review", "course", course_id, principal.user_id, {"rating": review_in.rating}
        )
    return review


@router.get("/{course_id}", response_model=List[Review])
def list_reviews(
    course_id: str,
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    services: Services = Depends(get_services),
) -> Any:
    return services.reviews.list_reviews(course_id, limit=limit, offset=offset)
