"""Schemas module - Import all schemas."""
from lms.schemas.auth import LoginRequest, Token
from lms.schemas.common import ErrorResponse
from lms.schemas.course import (
    Course,
    CourseCreate,
    CourseUpdate,
    Lesson,
    LessonCreate,
    QuestionCreate,
    QuestionOptionCreate,
    QuizCreate,
)
from lms.schemas.enrollment import (
    Certificate,
    CourseCompleteRequest,
    Enrollment,
    EnrollmentCreate,
    EnrollmentProgressUpdate,
)
from lms.schemas.progress import CourseProgress, LessonProgress, TrackProgressRequest, TrackProgressResponse
from lms.schemas.quiz import Question, QuestionOption, Quiz, QuizAttempt, QuizSubmit
from lms.schemas.gamification import (
    Badge,
    BadgeCheckResult,
    BadgeCreate,
    BadgeProgress,
    CoinAdjustmentRequest,
    CoinAmountRequest,
    CoinBalance,
    CoinTransaction,
)
from lms.schemas.dashboard import DashboardResponse
from lms.schemas.review import Review, ReviewCreate
from lms.schemas.user import LeaderboardEntry, User, UserCreate

__all__ = [
    "LoginRequest",
    "Token",
    "ErrorResponse",
    "Course",
    "CourseCreate",
    "CourseUpdate",
    "Lesson",
    "LessonCreate",
    "QuestionCreate",
    "QuestionOptionCreate",
    "QuizCreate",
    "Certificate",
    "CourseCompleteRequest",
    "Enrollment",
    "EnrollmentCreate",
    "EnrollmentProgressUpdate",
    "CourseProgress",
    "LessonProgress",
    "TrackProgressRequest",
    "TrackProgressResponse",
    "Question",
    "QuestionOption",
    "Quiz",
    "QuizAttempt",
    "QuizSubmit",
    "Badge",
    "BadgeCheckResult",
    "BadgeCreate",
    "BadgeProgress",
    "CoinAdjustmentRequest",
    "CoinAmountRequest",
    "CoinBalance",
    "CoinTransaction",
    "DashboardResponse",
    "Review",
    "ReviewCreate",
    "LeaderboardEntry",
    "User",
    "UserCreate",
]
