from typing import List

from sqlalchemy import distinct, func

from lms.models.quiz import Question, Quiz, QuizAnswerEntry, QuizAttempt
from lms.repositories.base import BaseRepository


class QuizRepository(BaseRepository[Quiz]):
    model = Quiz

    def list_for_course(self, course_id: str, published_only: bool = True) -> List[Quiz]:
        query = self.query().filter(Quiz.course_id == course_id)
        if published_only:
            query = query.filter(Quiz.is_published.is_(True))
        return query.order_by(Quiz.created_at).all()


class QuestionRepository(BaseRepository[Question]):
    model = Question

    def list_for_quiz(self, quiz_id: str) -> List[Question]:
        return (
            self.query()
            .filter(Question.quiz_id == quiz_id)
            .order_by(Question.order_number)
            .all()
        )


class QuizAttemptRepository(BaseRepository[QuizAttempt]):
    model = QuizAttempt

    def count_for(self, user_id: str, quiz_id: str) -> int:
        return self.query().filter(
            QuizAttempt.user_id == user_id,
            QuizAttempt.quiz_id == quiz_id,
        ).count()

    def list_for(self, user_id: str, quiz_id: str) -> List[QuizAttempt]:
        return (
            self.query()
            .filter(QuizAttempt.user_id == user_id, QuizAttempt.quiz_id == quiz_id)
            .order_by(QuizAttempt.attempt_number)
            .all()
        )

    def count_perfect_quizzes(self, user_id: str) -> int:
        """Distinct quizzes with at least one submitted 100% attempt."""
        value = self.db.query(func.count(distinct(QuizAttempt.quiz_id))).filter(
            QuizAttempt.user_id == user_id,
            QuizAttempt.submitted_at.isnot(None),
            QuizAttempt.percentage == 100,
            QuizAttempt.deleted_at.is_(None),
        ).scalar()
        return int(value or 0)


class QuizAnswerEntryRepository(BaseRepository[QuizAnswerEntry]):
    model = QuizAnswerEntry

    def list_for_attempt(self, attempt_id: str) -> List[QuizAnswerEntry]:
        return self.query().filter(QuizAnswerEntry.attempt_id == attempt_id).all()
