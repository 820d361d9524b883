"""
Repository layer and unit of work.

`Repositories` bundles one repository per entity around a single session and
owns the transaction boundary through `atomic()`.
"""
import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from lms.core.exceptions import ConflictError, StorageError
from lms.repositories.audit import AuditLogRepository
from lms.repositories.course import CourseRepository, LessonRepository
from lms.repositories.enrollment import CertificateRepository, EnrollmentRepository, LessonProgressRepository
from lms.repositories.gamification import BadgeProgressRepository, BadgeRepository, CoinTransactionRepository
from lms.repositories.quiz import QuestionRepository, QuizAnswerEntryRepository, QuizAttemptRepository, QuizRepository
from lms.repositories.review import CourseReviewRepository
from lms.repositories.user import UserRepository

logger = logging.getLogger(__name__)


class Repositories:
    """All repositories sharing one session."""

    def __init__(self, db: Session):
        self.db = db
        self.users = UserRepository(db)
        self.courses = CourseRepository(db)
        self.lessons = LessonRepository(db)
        self.enrollments = EnrollmentRepository(db)
        self.lesson_progress = LessonProgressRepository(db)
        self.certificates = CertificateRepository(db)
        self.quizzes = QuizRepository(db)
        self.questions = QuestionRepository(db)
        self.attempts = QuizAttemptRepository(db)
        self.answers = QuizAnswerEntryRepository(db)
        self.transactions = CoinTransactionRepository(db)
        self.badges = BadgeRepository(db)
        self.badge_progress = BadgeProgressRepository(db)
        self.reviews = CourseReviewRepository(db)
        self.audit_logs = AuditLogRepository(db)
        self._depth = 0

    @contextmanager
    def atomic(self) -> Iterator["Repositories"]:
        """
        Run a block as one unit of work.

        Nested blocks join the outermost one, which commits on success and
        rolls back on any error. Storage errors are translated:
        IntegrityError -> ConflictError, other SQLAlchemyError -> StorageError.

        Raises:
            ConflictError: On a uniqueness violation
            StorageError: On any other database failure
        """
        outermost = self._depth == 0
        self._depth += 1
        try:
            yield self
            if outermost:
                self.db.commit()
        except IntegrityError as exc:
            if outermost:
                self.db.rollback()
            logger.warning(f"Transaction rolled back on constraint violation: {exc.orig}")
            raise ConflictError("Conflicting write") from exc
        except SQLAlchemyError as exc:
            if outermost:
                self.db.rollback()
            logger.error(f"Transaction rolled back on storage failure: {exc}")
            raise StorageError() from exc
        except Exception:
            if outermost:
                self.db.rollback()
            raise
        finally:
            self._depth -= 1


__all__ = [
    "Repositories",
    "UserRepository",
    "CourseRepository",
    "LessonRepository",
    "EnrollmentRepository",
    "LessonProgressRepository",
    "CertificateRepository",
    "QuizRepository",
    "QuestionRepository",
    "QuizAttemptRepository",
    "QuizAnswerEntryRepository",
    "CoinTransactionRepository",
    "BadgeRepository",
    "BadgeProgressRepository",
    "CourseReviewRepository",
    "AuditLogRepository",
]
