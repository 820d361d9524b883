"""
Role based access control.

Roles are flat; an admin passes every role check.
"""
from typing import Iterable

from lms.core.exceptions import PermissionDenied
from lms.models.enums import UserRole


def has_role(role: str, allowed: Iterable[UserRole]) -> bool:
    if role == UserRole.ADMIN.value:
        return True
    return role in {UserRole(r).value for r in allowed}


def ensure_self_or_roles(principal_user_id: str, principal_role: str, target_user_id: str, *roles: UserRole) -> None:
    """
    Allow acting on one's own records, or on anyone's with a privileged role.

    Raises:
        PermissionDenied: If neither condition holds
    """
    if principal_user_id == target_user_id:
        return
    if roles and has_role(principal_role, roles):
        return
    if principal_role == UserRole.ADMIN.value:
        return
    raise PermissionDenied(user_id=target_user_id)


def ensure_course_manager(principal_user_id: str, principal_role: str, course, *roles: UserRole) -> None:
    """
    Instructors manage the courses they teach; `roles` (and admins) manage any.

    Raises:
        PermissionDenied: If the caller may not manage this course
    """
    if has_role(principal_role, roles):
        return
    if principal_role == UserRole.INSTRUCTOR.value and course.instructor_id == principal_user_id:
        return
    raise PermissionDenied(course_id=course.id)
