from datetime import datetime
from typing import List, Optional

from sqlalchemy import func

from lms.models.course import Course
from lms.models.enrollment import Certificate, Enrollment, LessonProgress
from lms.models.enums import EnrollmentStatus
from lms.repositories.base import BaseRepository


class EnrollmentRepository(BaseRepository[Enrollment]):
    model = Enrollment

    def get_for(self, user_id: str, course_id: str) -> Optional[Enrollment]:
        return self.get_by_key(user_id=user_id, course_id=course_id)

    def list_for_user(self, user_id: str, status: Optional[str] = None) -> List[Enrollment]:
        query = self.query().filter(Enrollment.user_id == user_id)
        if status:
            query = query.filter(Enrollment.status == status)
        return query.order_by(Enrollment.enrolled_at.desc()).all()

    def count_completed(self, user_id: str) -> int:
        return self.query().filter(
            Enrollment.user_id == user_id,
            Enrollment.status == EnrollmentStatus.COMPLETED.value,
        ).count()

    def average_final_score(self, user_id: str) -> float:
        """Mean final score across the user's completed enrollments."""
        value = self.db.query(func.avg(Enrollment.final_score)).filter(
            Enrollment.user_id == user_id,
            Enrollment.status == EnrollmentStatus.COMPLETED.value,
            Enrollment.deleted_at.is_(None),
        ).scalar()
        return float(value or 0.0)

    def list_mandatory(self, user_id: str, incomplete_only: bool = False) -> List[Enrollment]:
        query = self.query().join(Course, Course.id == Enrollment.course_id).filter(
            Enrollment.user_id == user_id,
            Course.is_mandatory.is_(True),
            Course.deleted_at.is_(None),
        )
        if incomplete_only:
            query = query.filter(Enrollment.status != EnrollmentStatus.COMPLETED.value)
        # Courses without a due date sort last
        return query.order_by(Course.mandatory_due_date.is_(None), Course.mandatory_due_date).all()

    def list_overdue_mandatory(self, now: datetime) -> List[Enrollment]:
        return (
            self.query()
            .join(Course, Course.id == Enrollment.course_id)
            .filter(
                Course.is_mandatory.is_(True),
                Course.deleted_at.is_(None),
                Course.mandatory_due_date.isnot(None),
                Course.mandatory_due_date < now,
                Enrollment.status != EnrollmentStatus.COMPLETED.value,
            )
            .order_by(Course.mandatory_due_date)
            .all()
        )


class LessonProgressRepository(BaseRepository[LessonProgress]):
    model = LessonProgress

    def get_for(self, user_id: str, course_id: str, lesson_id: str) -> Optional[LessonProgress]:
        return self.get_by_key(user_id=user_id, course_id=course_id, lesson_id=lesson_id)

    def list_for_course(self, user_id: str, course_id: str) -> List[LessonProgress]:
        return self.query().filter(
            LessonProgress.user_id == user_id,
            LessonProgress.course_id == course_id,
        ).all()


class CertificateRepository(BaseRepository[Certificate]):
    model = Certificate

    def list_for_user(self, user_id: str) -> List[Certificate]:
        return (
            self.query()
            .filter(Certificate.user_id == user_id)
            .order_by(Certificate.issued_at.desc())
            .all()
        )
