"""
API endpoints for enrollments and course completion.
"""
from typing import Any, List, Optional

from fastapi import APIRouter, Depends, status

from lms.core.dependencies import Principal, Services, get_current_principal, get_services, require_roles
from lms.core.permissions import ensure_course_manager
from lms.models.enums import EnrollmentStatus, UserRole
from lms.schemas.enrollment import (
    Certificate,
    CourseCompleteRequest,
    Enrollment,
    EnrollmentCreate,
    EnrollmentProgressUpdate,
)

router = APIRouter()


@router.post("", response_model=Enrollment, status_code=status.HTTP_201_CREATED)
def enroll(
    enrollment_in: EnrollmentCreate,
    principal: Principal = Depends(get_current_principal),
    services: Services = Depends(get_services),
) -> Any:
    """Enroll the caller in a course."""
    with services.repos.atomic():
        enrollment = services.enrollments.enroll_user(principal.user_id, enrollment_in.course_id)
        services.audit.record(
            "course_enroll", "enrollment", enrollment.id, principal.user_id,
            {"course_id": enrollment_in.course_id},
        )
    return enrollment


@router.get("", response_model=List[Enrollment])
def list_my_enrollments(
    completion_status: Optional[EnrollmentStatus] = None,
    principal: Principal = Depends(get_current_principal),
    services: Services = Depends(get_services),
) -> Any:
    return services.enrollments.list_enrollments(
        principal.user_id, completion_status.value if completion_status else None
    )


@router.get("/mandatory", response_model=List[Enrollment])
def list_my_mandatory(
    incomplete_only: bool = False,
    principal: Principal = Depends(get_current_principal),
    services: Services = Depends(get_services),
) -> Any:
    return services.enrollments.list_mandatory(principal.user_id, incomplete_only=incomplete_only)


@router.get("/overdue", response_model=List[Enrollment])
def list_overdue(
    principal: Principal = Depends(require_roles(UserRole.ADMIN, UserRole.HR_PERSONNEL)),
    services: Services = Depends(get_services),
) -> Any:
    """Mandatory enrollments past their due date, across all users."""
    return services.enrollments.list_overdue_mandatory()


@router.get("/certificates", response_model=List[Certificate])
def list_my_certificates(
    principal: Principal = Depends(get_current_principal),
    services: Services = Depends(get_services),
) -> Any:
    return services.repos.certificates.list_for_user(principal.user_id)


@router.get("/{course_id}", response_model=Enrollment)
def get_my_enrollment(
    course_id: str,
    principal: Principal = Depends(get_current_principal),
    services: Services = Depends(get_services),
) -> Any:
    return services.enrollments.get_enrollment(principal.user_id, course_id)


@router.post("/{course_id}/start", response_model=Enrollment)
def start_course(
    course_id: str,
    principal: Principal = Depends(get_current_principal),
    services: Services = Depends(get_services),
) -> Any:
    with services.repos.atomic():
        enrollment = services.enrollments.mark_started(principal.user_id, course_id)
        services.audit.record("course_start", "enrollment", enrollment.id, principal.user_id)
    return enrollment


@router.put("/{course_id}/progress", response_model=Enrollment)
def update_course_progress(
    course_id: str,
    progress_in: EnrollmentProgressUpdate,
    principal: Principal = Depends(get_current_principal),
    services: Services = Depends(get_services),
) -> Any:
    return services.enrollments.update_progress(principal.user_id, course_id, progress_in.progress)


@router.post("/{course_id}/complete", response_model=Enrollment)
def complete_course(
    course_id: str,
    complete_in: CourseCompleteRequest,
    principal: Principal = Depends(
        require_roles(UserRole.INSTRUCTOR, UserRole.HR_PERSONNEL, UserRole.ADMIN)
    ),
    services: Services = Depends(get_services),
) -> Any:
    """
    Record a learner's final score for a course.

    Learners cannot complete their own enrollment; instructors only complete
    enrollments in courses they teach. A passing score awards the
    course coins and issues a certificate.
    """
    with services.repos.atomic():
        course = services.catalog.get_course(course_id)
        ensure_course_manager(principal.user_id, principal.role, course, UserRole.HR_PERSONNEL)
        enrollment = services.enrollments.complete_course(complete_in.user_id, course_id, complete_in.final_score)
        services.audit.record(
            "course_complete", "enrollment", enrollment.id, principal.user_id,
            {
                "learner_id": complete_in.user_id,
                "final_score": complete_in.final_score,
                "is_passed": enrollment.is_passed,
            },
        )
    return enrollment
