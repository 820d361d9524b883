from sqlalchemy import Column, ForeignKey, Integer, String, Text, UniqueConstraint, CheckConstraint
from sqlalchemy.orm import relationship

from lms.db.base import Base
from lms.models.mixins import EntityMixin


class CourseReview(EntityMixin, Base):
    """One rating per user per course."""

    __tablename__ = "course_reviews"
    __table_args__ = (
        UniqueConstraint("user_id", "course_id", name="uq_course_reviews_user_course"),
        CheckConstraint("rating BETWEEN 1 AND 5", name="ck_course_reviews_rating"),
    )

    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    course_id = Column(String(36), ForeignKey("courses.id"), nullable=False, index=True)
    rating = Column(Integer, nullable=False)
    review_text = Column(Text, nullable=True)

    # Relationships
    user = relationship("User")
