"""
Enrollment, per-lesson progress and certificates.
"""
from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, UniqueConstraint, CheckConstraint
from sqlalchemy.orm import relationship

from lms.core.timeutils import utcnow
from lms.db.base import Base
from lms.models.enums import EnrollmentStatus
from lms.models.mixins import EntityMixin


class Enrollment(EntityMixin, Base):
    """A user's enrollment in a course."""

    __tablename__ = "enrollments"
    __table_args__ = (
        UniqueConstraint("user_id", "course_id", name="uq_enrollments_user_course"),
        CheckConstraint("overall_progress BETWEEN 0 AND 100", name="ck_enrollments_progress"),
    )

    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    course_id = Column(String(36), ForeignKey("courses.id"), nullable=False, index=True)
    status = Column(String, default=EnrollmentStatus.NOT_STARTED.value, nullable=False, index=True)
    overall_progress = Column(Integer, default=0, nullable=False)  # 0-100
    final_score = Column(Integer, nullable=True)
    is_passed = Column(Boolean, default=False, nullable=False)
    enrolled_at = Column(DateTime, default=utcnow, nullable=False)
    last_accessed_at = Column(DateTime, nullable=True)
    completed_at = Column(DateTime, nullable=True)

    # Relationships
    user = relationship("User", back_populates="enrollments")
    course = relationship("Course")

    @property
    def is_completed(self) -> bool:
        return self.status == EnrollmentStatus.COMPLETED.value

    @property
    def completion_status(self) -> str:
        return self.status


class LessonProgress(EntityMixin, Base):
    """Watch-time progress of a user on one lesson."""

    __tablename__ = "lesson_progress"
    __table_args__ = (
        UniqueConstraint("user_id", "course_id", "lesson_id", name="uq_lesson_progress_user_course_lesson"),
    )

    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    course_id = Column(String(36), ForeignKey("courses.id"), nullable=False, index=True)
    lesson_id = Column(String(36), ForeignKey("lessons.id"), nullable=False, index=True)
    watched_seconds = Column(Integer, default=0, nullable=False)
    total_seconds = Column(Integer, default=0, nullable=False)
    progress_percentage = Column(Integer, default=0, nullable=False)
    is_completed = Column(Boolean, default=False, nullable=False, index=True)
    completed_at = Column(DateTime, nullable=True)
    last_accessed_at = Column(DateTime, nullable=True)

    # Relationships
    lesson = relationship("Lesson")


class Certificate(EntityMixin, Base):
    """Certificate issued on a passing course completion."""

    __tablename__ = "certificates"
    __table_args__ = (
        UniqueConstraint("user_id", "course_id", name="uq_certificates_user_course"),
    )

    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    course_id = Column(String(36), ForeignKey("courses.id"), nullable=False, index=True)
    certificate_number = Column(String(64), unique=True, nullable=False, index=True)
    score = Column(Integer, nullable=False)
    issued_at = Column(DateTime, default=utcnow, nullable=False)

    # Relationships
    user = relationship("User", back_populates="certificates")
    course = relationship("Course")
