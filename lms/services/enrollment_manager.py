"""
Enrollment lifecycle: not_started -> in_progress -> completed.

Transitions only move forward. Completing a course with a passing score
awards the course coins, issues a certificate and re-evaluates badges in the
same transaction as the status change.
"""
import hashlib
import logging
import time
import uuid
from datetime import datetime
from typing import List, Optional

from lms.core.config import Settings, settings as default_settings
from lms.core.exceptions import AlreadyCompleted, AlreadyEnrolled, ConflictError, CourseFull, InvalidRange, NotFound
from lms.core.timeutils import utcnow
from lms.models.course import Course
from lms.models.enrollment import Certificate, Enrollment
from lms.models.enums import EnrollmentStatus
from lms.repositories import Repositories
from lms.services.gamification import GamificationEngine

logger = logging.getLogger(__name__)

# Enrollment progress is capped here until the course is completed
MAX_PROGRESS_BEFORE_COMPLETION = 99


def generate_certificate_number(user_id: str, course_id: str, issued_at: Optional[datetime] = None) -> str:
    """CERT-<YYYYMMDD>-<12 hex chars of a SHA-256 digest>."""
    issued_at = issued_at or utcnow()
    seed = f"{user_id}:{course_id}:{time.time_ns()}:{uuid.uuid4()}"
    digest = hashlib.sha256(seed.encode("utf-8")).hexdigest()[:12].upper()
    return f"CERT-{issued_at:%Y%m%d}-{digest}"


class EnrollmentManager:
    """Enrollment state machine over the repository layer."""

    def __init__(
        self,
        repos: Repositories,
        gamification: GamificationEngine,
        settings: Settings = default_settings,
    ):
        self.repos = repos
        self.gamification = gamification
        self.settings = settings

    def _get_course(self, course_id: str) -> Course:
        course = self.repos.courses.get(course_id)
        if not course:
            raise NotFound("Course not found", course_id=course_id)
        return course

    def _get_enrollment(self, user_id: str, course_id: str) -> Enrollment:
        enrollment = self.repos.enrollments.get_for(user_id, course_id)
        if not enrollment:
            raise NotFound("Enrollment not found", user_id=user_id, course_id=course_id)
        return enrollment

    def enroll_user(self, user_id: str, course_id: str) -> Enrollment:
        """
        Enroll a user in a course.

        Raises:
            NotFound: If the user or course does not exist
            AlreadyEnrolled: If the user already has an enrollment for the course
            CourseFull: If the course reached max_enrollments
        """
        with self.repos.atomic():
            if not self.repos.users.get(user_id):
                raise NotFound("User not found", user_id=user_id)
            course = self.repos.courses.lock(course_id)
            if not course:
                raise NotFound("Course not found", course_id=course_id)

            if self.repos.enrollments.get_for(user_id, course_id):
                logger.warning(f"User {user_id} already enrolled in course {course_id}")
                raise AlreadyEnrolled(user_id=user_id, course_id=course_id)

            if course.max_enrollments > 0 and course.enrollment_count >= course.max_enrollments:
                logger.warning(f"Course {course_id} is full ({course.enrollment_count}/{course.max_enrollments})")
                raise CourseFull(course_id=course_id, max_enrollments=course.max_enrollments)

            try:
                enrollment = self.repos.enrollments.create(
                    Enrollment(
                        user_id=user_id,
                        course_id=course_id,
                        status=EnrollmentStatus.NOT_STARTED.value,
                        overall_progress=0,
                        is_passed=False,
                        enrolled_at=utcnow(),
                    )
                )
            except ConflictError as exc:
                # A concurrent request won the unique (user, course) insert
                raise AlreadyEnrolled(user_id=user_id, course_id=course_id) from exc

            self.repos.courses.increment_counter(course_id, "enrollment_count", 1)

        logger.info(f"User {user_id} enrolled in course {course_id}")
        return enrollment

    def mark_started(self, user_id: str, course_id: str) -> Enrollment:
        """Move not_started -> in_progress; repeat calls only refresh last_accessed_at."""
        with self.repos.atomic():
            enrollment = self._get_enrollment(user_id, course_id)
            if enrollment.status == EnrollmentStatus.NOT_STARTED.value:
                enrollment.status = EnrollmentStatus.IN_PROGRESS.value
                logger.info(f"User {user_id} started course {course_id}")
            enrollment.last_accessed_at = utcnow()
            self.repos.enrollments.update(enrollment)
        return enrollment

    def update_progress(self, user_id: str, course_id: str, progress: int) -> Enrollment:
        """
        Store overall course progress.

        Completed enrollments are left as they are. Otherwise the value is
        capped at 99 and a positive value starts a not-started enrollment.

        Raises:
            InvalidRange: If progress is outside 0..100
            NotFound: If the user is not enrolled
        """
        if progress < 0 or progress > 100:
            raise InvalidRange("Progress must be between 0 and 100", progress=progress)

        with self.repos.atomic():
            enrollment = self._get_enrollment(user_id, course_id)
            if enrollment.is_completed:
                return enrollment
            enrollment.overall_progress = min(progress, MAX_PROGRESS_BEFORE_COMPLETION)
            if progress > 0 and enrollment.status == EnrollmentStatus.NOT_STARTED.value:
                enrollment.status = EnrollmentStatus.IN_PROGRESS.value
            enrollment.last_accessed_at = utcnow()
            self.repos.enrollments.update(enrollment)
        return enrollment

    def complete_course(self, user_id: str, course_id: str, final_score: int) -> Enrollment:
        """
        Complete an enrollment with a final score.

        A passing score awards `course.coins_reward` coins and issues a
        certificate. Badges are re-evaluated either way.

        Raises:
            InvalidRange: If final_score is outside 0..100
            NotFound: If the user is not enrolled
            AlreadyCompleted: If the enrollment is already completed
        """
        if final_score < 0 or final_score > 100:
            raise InvalidRange("Final score must be between 0 and 100", final_score=final_score)

        with self.repos.atomic():
            course = self._get_course(course_id)
            enrollment = self._get_enrollment(user_id, course_id)
            if enrollment.is_completed:
                logger.warning(f"User {user_id} already completed course {course_id}")
                raise AlreadyCompleted(user_id=user_id, course_id=course_id)

            now = utcnow()
            enrollment.status = EnrollmentStatus.COMPLETED.value
            enrollment.completed_at = now
            enrollment.final_score = final_score
            enrollment.is_passed = final_score >= course.passing_score
            enrollment.overall_progress = 100
            enrollment.last_accessed_at = now
            self.repos.enrollments.update(enrollment)
            self.repos.courses.increment_counter(course_id, "completion_count", 1)

            if enrollment.is_passed:
                if course.coins_reward > 0:
                    self.gamification.award_coins(
                        user_id,
                        course.coins_reward,
                        f"Course Completion: {course.title}",
                        reference=("course", course_id),
                    )
                self.repos.certificates.create(
                    Certificate(
                        user_id=user_id,
                        course_id=course_id,
                        certificate_number=generate_certificate_number(user_id, course_id, now),
                        score=final_score,
                        issued_at=now,
                    )
                )

            self.gamification.check_and_award_badges(user_id)

        logger.info(
            f"User {user_id} completed course {course_id} with score {final_score} "
            f"({'passed' if enrollment.is_passed else 'failed'})"
        )
        return enrollment

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_enrollment(self, user_id: str, course_id: str) -> Enrollment:
        return self._get_enrollment(user_id, course_id)

    def list_enrollments(self, user_id: str, status: Optional[str] = None) -> List[Enrollment]:
        if status is not None:
            status = EnrollmentStatus(status).value
        return self.repos.enrollments.list_for_user(user_id, status)

    def list_in_progress(self, user_id: str) -> List[Enrollment]:
        return self.repos.enrollments.list_for_user(user_id, EnrollmentStatus.IN_PROGRESS.value)

    def list_completed(self, user_id: str) -> List[Enrollment]:
        return self.repos.enrollments.list_for_user(user_id, EnrollmentStatus.COMPLETED.value)

    def list_mandatory(self, user_id: str, incomplete_only: bool = False) -> List[Enrollment]:
        return self.repos.enrollments.list_mandatory(user_id, incomplete_only=incomplete_only)

    def list_overdue_mandatory(self, now: Optional[datetime] = None) -> List[Enrollment]:
        return self.repos.enrollments.list_overdue_mandatory(now or utcnow())
