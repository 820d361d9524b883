"""
Course catalog authoring: courses, lessons and quizzes.

New courses and quizzes start as drafts and only show up in learner listings
once published.
"""
import logging
from typing import Any, Dict, List, Optional, Sequence

from lms.core.exceptions import InvalidQuestion, InvalidRange, NotFound
from lms.core.timeutils import as_naive_utc
from lms.models.course import Course, Lesson
from lms.models.enums import QuestionType
from lms.models.quiz import Question, QuestionOption, Quiz
from lms.repositories import Repositories

logger = logging.getLogger(__name__)

COURSE_FIELDS = (
    "title",
    "description",
    "category",
    "duration_minutes",
    "difficulty_level",
    "passing_score",
    "coins_reward",
    "is_mandatory",
    "mandatory_due_date",
    "max_enrollments",
)

CHOICE_TYPES = {QuestionType.MCQ.value, QuestionType.TRUE_FALSE.value}


def _clean_course_fields(fields: Dict[str, Any]) -> None:
    if "title" in fields and not (fields["title"] or "").strip():
        raise InvalidRange("Course title is required")
    passing_score = fields.get("passing_score")
    if passing_score is not None and not 0 <= passing_score <= 100:
        raise InvalidRange("Passing score must be between 0 and 100", passing_score=passing_score)
    for name in ("coins_reward", "max_enrollments", "duration_minutes"):
        value = fields.get(name)
        if value is not None and value < 0:
            raise InvalidRange(f"{name} must be non-negative", **{name: value})
    if fields.get("mandatory_due_date") is not None:
        fields["mandatory_due_date"] = as_naive_utc(fields["mandatory_due_date"])


def build_question(definition: Dict[str, Any], order_number: int) -> Question:
    """
    Build a question with its options from a plain mapping.

    Choice questions need at least two options and at least one correct one.

    Raises:
        InvalidQuestion: If the question cannot be graded as defined
    """
    text = (definition.get("question_text") or "").strip()
    if not text:
        raise InvalidQuestion("Question text is required", order_number=order_number)
    try:
        question_type = QuestionType(definition.get("question_type") or QuestionType.MCQ.value).value
    except ValueError as exc:
        raise InvalidQuestion(
            f"Unknown question type: {definition.get('question_type')}", order_number=order_number
        ) from exc

    options = definition.get("options") or []
    if question_type in CHOICE_TYPES:
        if len(options) < 2:
            raise InvalidQuestion("Choice questions need at least two options", order_number=order_number)
        if not any(option.get("is_correct") for option in options):
            raise InvalidQuestion("Choice questions need a correct option", order_number=order_number)
    elif options:
        raise InvalidQuestion("Text questions take accepted answers, not options", order_number=order_number)

    question = Question(
        question_text=text,
        question_type=question_type,
        order_number=order_number,
        accepted_answers=definition.get("accepted_answers") or None,
    )
    for index, option in enumerate(options, start=1):
        question.options.append(
            QuestionOption(
                option_text=option["option_text"],
                is_correct=bool(option.get("is_correct")),
                order_number=index,
            )
        )
    return question


class CatalogService:
    """Instructor-facing course, lesson and quiz management."""

    def __init__(self, repos: Repositories):
        self.repos = repos

    def get_course(self, course_id: str, published_only: bool = False) -> Course:
        course = self.repos.courses.get(course_id)
        if not course or (published_only and not course.is_published):
            raise NotFound("Course not found", course_id=course_id)
        return course

    def list_courses(
        self,
        keyword: Optional[str] = None,
        category: Optional[str] = None,
        is_mandatory: Optional[bool] = None,
        published_only: bool = True,
        limit: int = 20,
        offset: int = 0,
    ) -> List[Course]:
        return self.repos.courses.search(
            keyword=keyword,
            category=category,
            is_mandatory=is_mandatory,
            published_only=published_only,
            limit=limit,
            offset=offset,
        )

    def create_course(self, instructor_id: Optional[str], **fields: Any) -> Course:
        """
        Create a draft course.

        Raises:
            InvalidRange: If the title is blank or a numeric field is out of range
        """
        values = {name: value for name, value in fields.items() if name in COURSE_FIELDS and value is not None}
        if "title" not in values:
            raise InvalidRange("Course title is required")
        _clean_course_fields(values)

        with self.repos.atomic():
            course = self.repos.courses.create(
                Course(instructor_id=instructor_id, is_published=False, **values)
            )
        logger.info(f"Created course {course.id} ({course.title!r})")
        return course

    def update_course(self, course_id: str, changes: Dict[str, Any]) -> Course:
        """Apply a partial update; unknown keys are ignored."""
        values = {name: value for name, value in changes.items() if name in COURSE_FIELDS}
        _clean_course_fields(values)

        with self.repos.atomic():
            course = self.get_course(course_id)
            for name, value in values.items():
                setattr(course, name, value)
            self.repos.courses.update(course)
        logger.info(f"Updated course {course_id}: {sorted(values)}")
        return course

    def publish_course(self, course_id: str) -> Course:
        with self.repos.atomic():
            course = self.get_course(course_id)
            course.is_published = True
            self.repos.courses.update(course)
        logger.info(f"Published course {course_id}")
        return course

    def delete_course(self, course_id: str) -> Course:
        """Tombstone a course; existing enrollments and certificates are kept."""
        with self.repos.atomic():
            course = self.get_course(course_id)
            self.repos.courses.soft_delete(course)
        logger.info(f"Deleted course {course_id}")
        return course

    # ------------------------------------------------------------------
    # Lessons
    # ------------------------------------------------------------------

    def list_lessons(self, course_id: str) -> List[Lesson]:
        self.get_course(course_id)
        return self.repos.lessons.list_for_course(course_id)

    def add_lesson(
        self,
        course_id: str,
        title: str,
        duration_seconds: int = 0,
        order_number: Optional[int] = None,
        **fields: Any,
    ) -> Lesson:
        """
        Append a lesson to a course.

        Raises:
            NotFound: If the course does not exist
            InvalidRange: If the title is blank or the duration is negative
        """
        if not (title or "").strip():
            raise InvalidRange("Lesson title is required")
        if duration_seconds < 0:
            raise InvalidRange("Duration must be non-negative", duration_seconds=duration_seconds)

        with self.repos.atomic():
            self.get_course(course_id)
            lesson = self.repos.lessons.create(
                Lesson(
                    course_id=course_id,
                    title=title.strip(),
                    duration_seconds=duration_seconds,
                    order_number=order_number or self.repos.lessons.next_order_number(course_id),
                    description=fields.get("description"),
                    content_type=fields.get("content_type") or "video",
                    video_url=fields.get("video_url"),
                )
            )
        logger.info(f"Added lesson {lesson.order_number} to course {course_id}")
        return lesson

    # ------------------------------------------------------------------
    # Quizzes
    # ------------------------------------------------------------------

    def list_quizzes(self, course_id: str, published_only: bool = True) -> List[Quiz]:
        self.get_course(course_id)
        return self.repos.quizzes.list_for_course(course_id, published_only=published_only)

    def create_quiz(
        self,
        course_id: str,
        title: str,
        questions: Sequence[Dict[str, Any]],
        lesson_id: Optional[str] = None,
        description: Optional[str] = None,
        passing_score: int = 70,
        max_attempts: int = 3,
        coins_reward: Optional[int] = None,
        time_limit_minutes: int = 0,
    ) -> Quiz:
        """
        Create a draft quiz with its questions and options.

        Raises:
            NotFound: If the course, or the lesson within it, does not exist
            InvalidRange: If a numeric setting is out of range
            InvalidQuestion: If a question is malformed
        """
        if not (title or "").strip():
            raise InvalidRange("Quiz title is required")
        if not 0 <= passing_score <= 100:
            raise InvalidRange("Passing score must be between 0 and 100", passing_score=passing_score)
        if max_attempts < 0 or time_limit_minutes < 0 or (coins_reward is not None and coins_reward < 0):
            raise InvalidRange(
                "Quiz limits must be non-negative",
                max_attempts=max_attempts,
                time_limit_minutes=time_limit_minutes,
                coins_reward=coins_reward,
            )
        if not questions:
            raise InvalidQuestion("A quiz needs at least one question")
        built = [build_question(definition, number) for number, definition in enumerate(questions, start=1)]

        with self.repos.atomic():
            self.get_course(course_id)
            if lesson_id:
                lesson = self.repos.lessons.get(lesson_id)
                if not lesson or lesson.course_id != course_id:
                    raise NotFound("Lesson not found", lesson_id=lesson_id)
            quiz = Quiz(
                course_id=course_id,
                lesson_id=lesson_id,
                title=title.strip(),
                description=description,
                passing_score=passing_score,
                max_attempts=max_attempts,
                coins_reward=coins_reward,
                time_limit_minutes=time_limit_minutes,
                is_published=False,
            )
            quiz.questions.extend(built)
            self.repos.quizzes.create(quiz)
        logger.info(f"Created quiz {quiz.id} with {len(built)} questions for course {course_id}")
        return quiz

    def publish_quiz(self, course_id: str, quiz_id: str) -> Quiz:
        with self.repos.atomic():
            quiz = self.repos.quizzes.get(quiz_id)
            if not quiz or quiz.course_id != course_id:
                raise NotFound("Quiz not found", quiz_id=quiz_id)
            quiz.is_published = True
            self.repos.quizzes.update(quiz)
        logger.info(f"Published quiz {quiz_id}")
        return quiz
