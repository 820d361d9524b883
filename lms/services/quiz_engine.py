"""
Quiz attempt lifecycle: start, then submit exactly once.
"""
import logging
from datetime import timedelta
from typing import Dict, List, Optional

from lms.core.config import Settings, settings as default_settings
from lms.core.exceptions import AlreadySubmitted, AttemptLimitExceeded, InvalidRange, NotFound, TimeLimitExceeded
from lms.core.timeutils import utcnow
from lms.models.quiz import Quiz, QuizAnswerEntry, QuizAttempt
from lms.repositories import Repositories
from lms.services.gamification import GamificationEngine
from lms.services.grading import GraderRegistry, default_registry

logger = logging.getLogger(__name__)


def score_percentage(score: int, max_score: int) -> int:
    if max_score <= 0:
        return 0
    return score * 100 // max_score


class QuizEngine:
    """Starts, grades and rewards quiz attempts."""

    def __init__(
        self,
        repos: Repositories,
        gamification: GamificationEngine,
        settings: Settings = default_settings,
        graders: Optional[GraderRegistry] = None,
    ):
        self.repos = repos
        self.gamification = gamification
        self.settings = settings
        self.graders = graders or default_registry(settings.ENABLE_TEXT_ANSWER_GRADING)

    def get_quiz(self, quiz_id: str) -> Quiz:
        quiz = self.repos.quizzes.get(quiz_id)
        if not quiz:
            raise NotFound("Quiz not found", quiz_id=quiz_id)
        return quiz

    def pass_reward(self, quiz: Quiz) -> int:
        if quiz.coins_reward is None:
            return self.settings.QUIZ_PASS_COINS_REWARD
        return quiz.coins_reward

    def start_attempt(self, user_id: str, quiz_id: str) -> QuizAttempt:
        """
        Open the next numbered attempt.

        The user row is locked while the attempt is numbered, so concurrent
        starts get consecutive numbers.

        Raises:
            NotFound: If the user or quiz does not exist
            AttemptLimitExceeded: If max_attempts attempts already exist
        """
        with self.repos.atomic():
            quiz = self.get_quiz(quiz_id)
            if not self.repos.users.lock(user_id):
                raise NotFound("User not found", user_id=user_id)

            prior = self.repos.attempts.count_for(user_id, quiz_id)
            if quiz.max_attempts > 0 and prior >= quiz.max_attempts:
                logger.warning(f"User {user_id} reached the attempt limit ({quiz.max_attempts}) for quiz {quiz_id}")
                raise AttemptLimitExceeded(quiz_id=quiz_id, max_attempts=quiz.max_attempts)

            attempt = self.repos.attempts.create(
                QuizAttempt(
                    user_id=user_id,
                    quiz_id=quiz_id,
                    attempt_number=prior + 1,
                    started_at=utcnow(),
                    score=0,
                    max_score=0,
                    percentage=0,
                    is_passed=False,
                    time_spent_seconds=0,
                )
            )

        logger.info(f"User {user_id} started attempt {attempt.attempt_number} of quiz {quiz_id}")
        return attempt

    def submit_attempt(
        self,
        user_id: str,
        quiz_id: str,
        attempt_id: str,
        answers: Dict[str, str],
        time_spent_seconds: int = 0,
    ) -> QuizAttempt:
        """
        Grade and close an attempt.

        Args:
            user_id: User ID
            quiz_id: Quiz ID
            attempt_id: Attempt to submit
            answers: question id -> submitted answer (option id for choice questions)
            time_spent_seconds: Time reported by the client

        Returns:
            The graded attempt

        Raises:
            NotFound: If the attempt does not belong to this user and quiz
            AlreadySubmitted: If the attempt was already submitted
            TimeLimitExceeded: If the quiz has a time limit and it ran out since started_at
            InvalidRange: If time_spent_seconds is negative
        """
        if time_spent_seconds < 0:
            raise InvalidRange("Time spent must be non-negative", time_spent_seconds=time_spent_seconds)

        with self.repos.atomic():
            quiz = self.get_quiz(quiz_id)
            attempt = self.repos.attempts.lock(attempt_id)
            if not attempt or attempt.user_id != user_id or attempt.quiz_id != quiz_id:
                raise NotFound("Quiz attempt not found", attempt_id=attempt_id)
            if attempt.is_submitted:
                logger.warning(f"Attempt {attempt_id} was already submitted")
                raise AlreadySubmitted(attempt_id=attempt_id)
            if quiz.time_limit_minutes:
                deadline = attempt.started_at + timedelta(minutes=quiz.time_limit_minutes)
                if utcnow() > deadline:
                    logger.warning(f"Attempt {attempt_id} submitted after its deadline {deadline}")
                    raise TimeLimitExceeded(attempt_id=attempt_id, time_limit_minutes=quiz.time_limit_minutes)

            questions = self.repos.questions.list_for_quiz(quiz_id)
            score = 0
            for question in questions:
                answer = answers.get(question.id)
                is_correct = self.graders.grade(question, answer)
                if is_correct:
                    score += 1
                self.repos.answers.create(
                    QuizAnswerEntry(
                        attempt_id=attempt.id,
                        question_id=question.id,
                        user_answer=answer,
                        is_correct=is_correct,
                        points_earned=1 if is_correct else 0,
                    )
                )

            attempt.score = score
            attempt.max_score = len(questions)
            attempt.percentage = score_percentage(score, len(questions))
            attempt.is_passed = attempt.percentage >= quiz.passing_score
            attempt.time_spent_seconds = time_spent_seconds
            attempt.submitted_at = utcnow()
            self.repos.attempts.update(attempt)

            reward = self.pass_reward(quiz)
            if attempt.is_passed and reward > 0:
                self.gamification.award_coins(
                    user_id,
                    reward,
                    f"Quiz Passed: {quiz.title}",
                    reference=("quiz", quiz_id),
                )
                self.gamification.check_and_award_badges(user_id)

        logger.info(
            f"User {user_id} submitted attempt {attempt.attempt_number} of quiz {quiz_id}: "
            f"{attempt.score}/{attempt.max_score} ({attempt.percentage}%)"
        )
        return attempt

    def list_attempts(self, user_id: str, quiz_id: str) -> List[QuizAttempt]:
        self.get_quiz(quiz_id)
        return self.repos.attempts.list_for(user_id, quiz_id)

    def attempt_count(self, user_id: str, quiz_id: str) -> int:
        return self.repos.attempts.count_for(user_id, quiz_id)
