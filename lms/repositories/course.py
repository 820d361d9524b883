from typing import List, Optional

from sqlalchemy import func, or_

from lms.models.course import Course, Lesson
from lms.repositories.base import BaseRepository


class CourseRepository(BaseRepository[Course]):
    model = Course

    def search(
        self,
        keyword: Optional[str] = None,
        category: Optional[str] = None,
        is_mandatory: Optional[bool] = None,
        published_only: bool = True,
        limit: int = 20,
        offset: int = 0,
    ) -> List[Course]:
        """Catalog listing; `keyword` matches title or description, case-insensitively."""
        query = self.query()
        if published_only:
            query = query.filter(Course.is_published.is_(True))
        if keyword:
            pattern = f"%{keyword.strip()}%"
            query = query.filter(or_(Course.title.ilike(pattern), Course.description.ilike(pattern)))
        if category:
            query = query.filter(Course.category == category)
        if is_mandatory is not None:
            query = query.filter(Course.is_mandatory.is_(is_mandatory))
        return query.order_by(Course.created_at.desc()).offset(offset).limit(limit).all()


class LessonRepository(BaseRepository[Lesson]):
    model = Lesson

    def list_for_course(self, course_id: str) -> List[Lesson]:
        return (
            self.query()
            .filter(Lesson.course_id == course_id)
            .order_by(Lesson.order_number)
            .all()
        )

    def next_order_number(self, course_id: str) -> int:
        highest = self.db.query(func.max(Lesson.order_number)).filter(
            Lesson.course_id == course_id,
            Lesson.deleted_at.is_(None),
        ).scalar()
        return (highest or 0) + 1

