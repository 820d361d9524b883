"""
Course reviews and the course average rating.
"""
import logging
from typing import List, Optional

from lms.core.exceptions import ConflictError, DuplicateReview, InvalidRange, NotFound
from lms.models.review import CourseReview
from lms.repositories import Repositories

logger = logging.getLogger(__name__)


class ReviewService:
    def __init__(self, repos: Repositories):
        self.repos = repos

    def add_review(self, user_id: str, course_id: str, rating: int, review_text: Optional[str] = None) -> CourseReview:
        """
        Rate a course once and refresh its average rating.

        Raises:
            InvalidRange: If rating is outside 1..5
            NotFound: If the course does not exist
            DuplicateReview: If the user already reviewed the course
        """
        if rating < 1 or rating > 5:
            raise InvalidRange("Rating must be between 1 and 5", rating=rating)

        with self.repos.atomic():
            course = self.repos.courses.lock(course_id)
            if not course:
                raise NotFound("Course not found", course_id=course_id)
            if self.repos.reviews.get_by_key(user_id=user_id, course_id=course_id):
                raise DuplicateReview(user_id=user_id, course_id=course_id)
            try:
                review = self.repos.reviews.create(
                    CourseReview(user_id=user_id, course_id=course_id, rating=rating, review_text=review_text)
                )
            except ConflictError as exc:
                raise DuplicateReview(user_id=user_id, course_id=course_id) from exc

            course.average_rating = self.repos.reviews.average_rating(course_id)
            self.repos.courses.update(course)

        logger.info(f"User {user_id} rated course {course_id} {rating}/5")
        return review

    def list_reviews(self, course_id: str, limit: int = 20, offset: int = 0) -> List[CourseReview]:
        if not self.repos.courses.get(course_id):
            raise NotFound("Course not found", course_id=course_id)
        return self.repos.reviews.list_for_course(course_id, limit=limit, offset=offset)
