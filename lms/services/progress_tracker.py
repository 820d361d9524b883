"""
Lesson watch-time tracking.
"""
import logging
from typing import List

from lms.core.config import Settings, settings as default_settings
from lms.core.exceptions import InvalidRange, NotFound
from lms.core.timeutils import utcnow
from lms.models.enrollment import LessonProgress
from lms.repositories import Repositories
from lms.services.gamification import GamificationEngine

logger = logging.getLogger(__name__)


def watch_percentage(watched_seconds: int, total_seconds: int) -> int:
    """floor(watched * 100 / total) capped at 100; 0 for an empty lesson."""
    if total_seconds <= 0:
        return 0
    return min(100, watched_seconds * 100 // total_seconds)


class ProgressTracker:
    """Turns watch-time telemetry into lesson completion state."""

    def __init__(
        self,
        repos: Repositories,
        gamification: GamificationEngine,
        settings: Settings = default_settings,
    ):
        self.repos = repos
        self.gamification = gamification
        self.settings = settings

    def track_progress(
        self,
        user_id: str,
        course_id: str,
        lesson_id: str,
        watched_seconds: int,
        total_seconds: int,
    ) -> LessonProgress:
        """
        Record watch time for a lesson.

        Completion is sticky and `completed_at` keeps the first completion
        time. The first completion adds the lesson length to the user's
        learning hours. Enrollment progress is not recomputed here.

        Args:
            user_id: User ID
            course_id: Course ID
            lesson_id: Lesson ID (must belong to the course)
            watched_seconds: Seconds watched so far
            total_seconds: Lesson length in seconds

        Returns:
            The upserted LessonProgress

        Raises:
            InvalidRange: If either duration is negative
            NotFound: If the user, course or lesson does not exist
        """
        if watched_seconds < 0 or total_seconds < 0:
            raise InvalidRange(
                "Watched and total seconds must be non-negative",
                watched_seconds=watched_seconds,
                total_seconds=total_seconds,
            )

        with self.repos.atomic():
            user = self.repos.users.get(user_id)
            if not user:
                raise NotFound("User not found", user_id=user_id)
            if not self.repos.courses.get(course_id):
                raise NotFound("Course not found", course_id=course_id)
            lesson = self.repos.lessons.get(lesson_id)
            if not lesson or lesson.course_id != course_id:
                raise NotFound("Lesson not found in course", course_id=course_id, lesson_id=lesson_id)

            now = utcnow()
            progress = self.repos.lesson_progress.get_for(user_id, course_id, lesson_id)
            if progress is None:
                progress = self.repos.lesson_progress.create(
                    LessonProgress(
                        user_id=user_id,
                        course_id=course_id,
                        lesson_id=lesson_id,
                        watched_seconds=0,
                        total_seconds=0,
                        progress_percentage=0,
                        is_completed=False,
                    )
                )

            progress.watched_seconds = watched_seconds
            progress.total_seconds = total_seconds
            progress.progress_percentage = watch_percentage(watched_seconds, total_seconds)
            progress.last_accessed_at = now

            first_completion = (
                not progress.is_completed
                and progress.progress_percentage >= self.settings.LESSON_COMPLETION_THRESHOLD
            )
            if first_completion:
                progress.is_completed = True
                progress.completed_at = now
                user.total_learning_hours = (user.total_learning_hours or 0.0) + total_seconds / 3600
                self.repos.users.update(user)
                logger.info(f"User {user_id} completed lesson {lesson_id} of course {course_id}")

            self.repos.lesson_progress.update(progress)
            self.gamification.record_activity(user_id, on=now.date())

        return progress

    def calculate_course_progress(self, user_id: str, course_id: str) -> int:
        """
        Integer average of lesson percentages the user has touched.

        Lessons never opened do not count; 0 when there are none.
        """
        rows = self.repos.lesson_progress.list_for_course(user_id, course_id)
        if not rows:
            return 0
        return sum(row.progress_percentage for row in rows) // len(rows)

    def get_lesson_progress(self, user_id: str, course_id: str, lesson_id: str) -> LessonProgress:
        progress = self.repos.lesson_progress.get_for(user_id, course_id, lesson_id)
        if not progress:
            raise NotFound("Lesson progress not found", lesson_id=lesson_id)
        return progress

    def list_course_progress(self, user_id: str, course_id: str) -> List[LessonProgress]:
        return self.repos.lesson_progress.list_for_course(user_id, course_id)
