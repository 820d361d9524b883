from sqlalchemy import Boolean, Column, DateTime, Float, ForeignKey, Integer, String, Text, CheckConstraint
from sqlalchemy.orm import relationship

from lms.db.base import Base
from lms.models.mixins import EntityMixin


class Course(EntityMixin, Base):
    """Course catalog entry."""

    __tablename__ = "courses"
    __table_args__ = (
        CheckConstraint("passing_score BETWEEN 0 AND 100", name="ck_courses_passing_score"),
        CheckConstraint("max_enrollments >= 0", name="ck_courses_max_enrollments"),
    )

    title = Column(String, nullable=False, index=True)
    description = Column(Text, nullable=True)
    category = Column(String, nullable=True, index=True)
    instructor_id = Column(String(36), ForeignKey("users.id"), nullable=True)
    duration_minutes = Column(Integer, default=0)
    difficulty_level = Column(String, default="beginner")  # beginner, intermediate, advanced

    passing_score = Column(Integer, default=70, nullable=False)
    coins_reward = Column(Integer, default=100, nullable=False)  # Coins earned on passing completion
    is_mandatory = Column(Boolean, default=False, index=True)
    mandatory_due_date = Column(DateTime, nullable=True)
    max_enrollments = Column(Integer, default=0, nullable=False)  # 0 = unlimited
    is_published = Column(Boolean, default=False, index=True)

    # Aggregates maintained by the enrollment manager / review service
    enrollment_count = Column(Integer, default=0, nullable=False)
    completion_count = Column(Integer, default=0, nullable=False)
    average_rating = Column(Float, default=0.0, nullable=False)

    # Relationships
    instructor = relationship("User", foreign_keys=[instructor_id])
    lessons = relationship("Lesson", back_populates="course", order_by="Lesson.order_number")
    quizzes = relationship("Quiz", back_populates="course")


class Lesson(EntityMixin, Base):
    """Ordered lesson within a course."""

    __tablename__ = "lessons"

    course_id = Column(String(36), ForeignKey("courses.id"), nullable=False, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    content_type = Column(String, default="video")  # video, document, interactive
    video_url = Column(String, nullable=True)
    duration_seconds = Column(Integer, default=0, nullable=False)
    order_number = Column(Integer, nullable=False)
    is_published = Column(Boolean, default=True)

    # Relationships
    course = relationship("Course", back_populates="lessons")
