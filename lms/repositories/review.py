from typing import List

from sqlalchemy import func

from lms.models.review import CourseReview
from lms.repositories.base import BaseRepository


class CourseReviewRepository(BaseRepository[CourseReview]):
    model = CourseReview

    def list_for_course(self, course_id: str, limit: int = 20, offset: int = 0) -> List[CourseReview]:
        return (
            self.query()
            .filter(CourseReview.course_id == course_id)
            .order_by(CourseReview.created_at.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )

    def average_rating(self, course_id: str) -> float:
        value = self.db.query(func.avg(CourseReview.rating)).filter(
            CourseReview.course_id == course_id,
            CourseReview.deleted_at.is_(None),
        ).scalar()
        return round(float(value or 0.0), 2)
