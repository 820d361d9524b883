"""
API endpoints for lesson watch-time progress.
"""
from typing import Any, List

from fastapi import APIRouter, Depends

from lms.core.dependencies import Principal, Services, get_current_principal, get_services
from lms.schemas.progress import CourseProgress, LessonProgress, TrackProgressRequest, TrackProgressResponse

router = APIRouter()


@router.post("/track", response_model=TrackProgressResponse)
def track_progress(
    track_in: TrackProgressRequest,
    principal: Principal = Depends(get_current_principal),
    services: Services = Depends(get_services),
) -> Any:
    """
    Record lesson watch time.

    The enrollment, when there is one, is started and its overall progress
    refreshed from the lesson averages.
    """
    with services.repos.atomic():
        lesson_progress = services.progress.track_progress(
            principal.user_id,
            track_in.course_id,
            track_in.lesson_id,
            track_in.watched_seconds,
            track_in.total_seconds,
        )
        overall = services.progress.calculate_course_progress(principal.user_id, track_in.course_id)
        if services.repos.enrollments.get_for(principal.user_id, track_in.course_id):
            services.enrollments.mark_started(principal.user_id, track_in.course_id)
            services.enrollments.update_progress(principal.user_id, track_in.course_id, overall)
        services.audit.record(
            "lesson_progress", "lesson", track_in.lesson_id, principal.user_id,
            {"course_id": track_in.course_id, "percentage": lesson_progress.progress_percentage},
        )

    return {"lesson_progress": lesson_progress, "overall_progress": overall}


@router.get("/courses/{course_id}", response_model=CourseProgress)
def get_course_progress(
    course_id: str,
    principal: Principal = Depends(get_current_principal),
    services: Services = Depends(get_services),
) -> Any:
    return {
        "course_id": course_id,
        "overall_progress": services.progress.calculate_course_progress(principal.user_id, course_id),
    }


@router.get("/courses/{course_id}/lessons", response_model=List[LessonProgress])
def list_lesson_progress(
    course_id: str,
    principal: Principal = Depends(get_current_principal),
    services: Services = Depends(get_services),
) -> Any:
    return services.progress.list_course_progress(principal.user_id, course_id)


@router.get("/courses/{course_id}/lessons/{lesson_id}", response_model=LessonProgress)
def get_lesson_progress(
    course_id: str,
    lesson_id: str,
    principal: Principal = Depends(get_current_principal),
    services: Services = Depends(get_services),
) -> Any:
    return services.progress.get_lesson_progress(principal.user_id, course_id, lesson_id)
