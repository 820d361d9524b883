"""
Course catalog endpoints: browsing for everyone, authoring for instructors.
"""
from typing import Any, List, Optional

from fastapi import APIRouter, Depends, Query, Response, status

from lms.core.dependencies import Principal, Services, get_current_principal, get_services, require_roles
from lms.core.permissions import ensure_course_manager, has_role
from lms.models.enums import UserRole
from lms.schemas.course import Course, CourseCreate, CourseUpdate, Lesson, LessonCreate, QuizCreate
from lms.schemas.quiz import Quiz

router = APIRouter()

STAFF_ROLES = (UserRole.INSTRUCTOR, UserRole.HR_PERSONNEL, UserRole.ADMIN)


def _is_staff(principal: Principal) -> bool:
    return has_role(principal.role, STAFF_ROLES)


def _managed_course(services: Services, principal: Principal, course_id: str):
    course = services.catalog.get_course(course_id)
    ensure_course_manager(principal.user_id, principal.role, course)
    return course


@router.get("", response_model=List[Course])
def list_courses(
    search: Optional[str] = None,
    category: Optional[str] = None,
    is_mandatory: Optional[bool] = None,
    include_unpublished: bool = False,
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    principal: Principal = Depends(get_current_principal),
    services: Services = Depends(get_services),
) -> Any:
    """
    Browse the catalog.

    Drafts are listed only for staff asking for them.
    """
    return services.catalog.list_courses(
        keyword=search,
        category=category,
        is_mandatory=is_mandatory,
        published_only=not (include_unpublished and _is_staff(principal)),
        limit=limit,
        offset=offset,
    )


@router.post("", response_model=Course, status_code=status.HTTP_201_CREATED)
def create_course(
    course_in: CourseCreate,
    principal: Principal = Depends(require_roles(UserRole.INSTRUCTOR, UserRole.ADMIN)),
    services: Services = Depends(get_services),
) -> Any:
    """Create a draft course taught by the caller."""
    with services.repos.atomic():
        course = services.catalog.create_course(principal.user_id, **course_in.model_dump())
        services.audit.record("course_create", "course", course.id, principal.user_id, {"title": course.title})
    return course


@router.get("/{course_id}", response_model=Course)
def get_course(
    course_id: str,
    principal: Principal = Depends(get_current_principal),
    services: Services = Depends(get_services),
) -> Any:
    return services.catalog.get_course(course_id, published_only=not _is_staff(principal))


@router.put("/{course_id}", response_model=Course)
def update_course(
    course_id: str,
    course_in: CourseUpdate,
    principal: Principal = Depends(require_roles(UserRole.INSTRUCTOR, UserRole.ADMIN)),
    services: Services = Depends(get_services),
) -> Any:
    changes = course_in.model_dump(exclude_unset=True)
    with services.repos.atomic():
        _managed_course(services, principal, course_id)
        course = services.catalog.update_course(course_id, changes)
        services.audit.record("course_update", "course", course_id, principal.user_id, {"fields": sorted(changes)})
    return course


@router.post("/{course_id}/publish", response_model=Course)
def publish_course(
    course_id: str,
    principal: Principal = Depends(require_roles(UserRole.INSTRUCTOR, UserRole.ADMIN)),
    services: Services = Depends(get_services),
) -> Any:
    with services.repos.atomic():
        _managed_course(services, principal, course_id)
        course = services.catalog.publish_course(course_id)
        services.audit.record("course_publish", "course", course_id, principal.user_id)
    return course


@router.delete("/{course_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_course(
    course_id: str,
    principal: Principal = Depends(require_roles(UserRole.INSTRUCTOR, UserRole.ADMIN)),
    services: Services = Depends(get_services),
) -> Response:
    with services.repos.atomic():
        _managed_course(services, principal, course_id)
        services.catalog.delete_course(course_id)
        services.audit.record("course_delete", "course", course_id, principal.user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{course_id}/lessons", response_model=List[Lesson])
def list_lessons(
    course_id: str,
    principal: Principal = Depends(get_current_principal),
    services: Services = Depends(get_services),
) -> Any:
    services.catalog.get_course(course_id, published_only=not _is_staff(principal))
    return services.catalog.list_lessons(course_id)


@router.post("/{course_id}/lessons", response_model=Lesson, status_code=status.HTTP_201_CREATED)
def add_lesson(
    course_id: str,
    lesson_in: LessonCreate,
    principal: Principal = Depends(require_roles(UserRole.INSTRUCTOR, UserRole.ADMIN)),
    services: Services = Depends(get_services),
) -> Any:
    with services.repos.atomic():
        _managed_course(services, principal, course_id)
        lesson = services.catalog.add_lesson(course_id, **lesson_in.model_dump())
        services.audit.record(
            "lesson_create", "lesson", lesson.id, principal.user_id, {"course_id": course_id}
        )
    return lesson


@router.get("/{course_id}/quizzes", response_model=List[Quiz])
def list_quizzes(
    course_id: str,
    principal: Principal = Depends(get_current_principal),
    services: Services = Depends(get_services),
) -> Any:
    staff = _is_staff(principal)
    services.catalog.get_course(course_id, published_only=not staff)
    return services.catalog.list_quizzes(course_id, published_only=not staff)


@router.post("/{course_id}/quizzes", response_model=Quiz, status_code=status.HTTP_201_CREATED)
def create_quiz(
    course_id: str,
    quiz_in: QuizCreate,
    principal: Principal = Depends(require_roles(UserRole.INSTRUCTOR, UserRole.ADMIN)),
    services: Services = Depends(get_services),
) -> Any:
    """Create a draft quiz with its questions; correct options are never echoed back."""
    values = quiz_in.model_dump()
    with services.repos.atomic():
        _managed_course(services, principal, course_id)
        quiz = services.catalog.create_quiz(course_id, **values)
        services.audit.record(
            "quiz_create", "quiz", quiz.id, principal.user_id,
            {"course_id": course_id, "questions": len(quiz_in.questions)},
        )
    return quiz


@router.post("/{course_id}/quizzes/{quiz_id}/publish", response_model=Quiz)
def publish_quiz(
    course_id: str,
    quiz_id: str,
    principal: Principal = Depends(require_roles(UserRole.INSTRUCTOR, UserRole.ADMIN)),
    services: Services = Depends(get_services),
) -> Any:
    with services.repos.atomic():
        _managed_course(services, principal, course_id)
        quiz = services.catalog.publish_quiz(course_id, quiz_id)
        services.audit.record("quiz_publish", "quiz", quiz_id, principal.user_id, {"course_id": course_id})
    return quiz
