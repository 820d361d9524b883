"""Models module - Import all models here so metadata.create_all sees every table."""
from lms.db.base import Base
from lms.models.user import User
from lms.models.course import Course, Lesson
from lms.models.enrollment import Enrollment, LessonProgress, Certificate
from lms.models.quiz import Quiz, Question, QuestionOption, QuizAttempt, QuizAnswerEntry
from lms.models.gamification import CoinTransaction, Badge, BadgeProgress
from lms.models.review import CourseReview
from lms.models.audit import SystemAuditLog

__all__ = ["Base", "User", "Course", "Lesson", "Enrollment", "LessonProgress", "Certificate", "Quiz", "Question", "QuestionOption", "QuizAttempt", "QuizAnswerEntry", "CoinTransaction", "Badge", "BadgeProgress", "CourseReview", "SystemAuditLog"]
