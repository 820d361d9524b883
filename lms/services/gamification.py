"""
Gamification engine: coin ledger, badge evaluation and learning streaks.

Every balance change appends a `CoinTransaction` and moves the cached
`User.coin_balance` by the same amount inside one transaction, so the cached
balance always equals the ledger sum.
"""
import logging
from datetime import date, timedelta
from typing import Any, Dict, List, Optional, Tuple

from lms.core.config import Settings, settings as default_settings
from lms.core.exceptions import InsufficientBalance, InvalidAmount, InvalidCriteria, NotFound
from lms.core.timeutils import utcnow
from lms.models.enums import BadgeLevel, TransactionType
from lms.models.gamification import Badge, BadgeProgress, CoinTransaction
from lms.models.user import User
from lms.repositories import Repositories
from lms.services.badge_criteria import BadgeCriteria, LearnerStats, parse_criteria

logger = logging.getLogger(__name__)

Reference = Tuple[str, str]

# badge id -> (updated_at, decoded criteria); an edit replaces the entry
_criteria_cache: Dict[str, Tuple[Any, BadgeCriteria]] = {}


class GamificationEngine:
    """Coins, badges and streaks for one unit of work."""

    def __init__(self, repos: Repositories, settings: Settings = default_settings):
        self.repos = repos
        self.settings = settings

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _get_user(self, user_id: str) -> User:
        user = self.repos.users.get(user_id)
        if not user:
            raise NotFound("User not found", user_id=user_id)
        return user

    def _lock_user(self, user_id: str) -> User:
        user = self.repos.users.lock(user_id)
        if not user:
            raise NotFound("User not found", user_id=user_id)
        return user

    def _append(
        self,
        user: User,
        amount: int,
        transaction_type: TransactionType,
        reason: str,
        reference: Optional[Reference] = None,
    ) -> CoinTransaction:
        reference_type, reference_id = reference if reference else (None, None)
        transaction = self.repos.transactions.create(
            CoinTransaction(
                user_id=user.id,
                amount=amount,
                transaction_type=transaction_type.value,
                reason=reason,
                reference_type=reference_type,
                reference_id=reference_id,
            )
        )
        self.repos.users.increment_counter(user.id, "coin_balance", amount)
        logger.info(
            f"Ledger {transaction_type.value} {amount:+d} for user {user.id}: {reason} "
            f"(balance {user.coin_balance})"
        )
        return transaction

    def _debit(self, user_id: str, amount: int, reason: str, transaction_type: TransactionType) -> CoinTransaction:
        if amount <= 0:
            raise InvalidAmount(amount=amount)
        with self.repos.atomic():
            user = self._lock_user(user_id)
            if user.coin_balance < amount:
                logger.warning(
                    f"Rejected {transaction_type.value} of {amount} coins for user {user_id}: "
                    f"balance is {user.coin_balance}"
                )
                raise InsufficientBalance(balance=user.coin_balance, requested=amount)
            return self._append(user, -amount, transaction_type, reason)

    # ------------------------------------------------------------------
    # Coin ledger
    # ------------------------------------------------------------------

    def award_coins(
        self,
        user_id: str,
        amount: int,
        reason: str,
        reference: Optional[Reference] = None,
    ) -> CoinTransaction:
        """
        Credit coins to a user.

        Args:
            user_id: User ID
            amount: Positive number of coins
            reason: Human readable reason stored on the ledger row
            reference: Optional (reference_type, reference_id) pair

        Returns:
            The appended ledger row

        Raises:
            InvalidAmount: If amount is not positive
            NotFound: If the user does not exist
        """
        if amount <= 0:
            raise InvalidAmount(amount=amount)
        with self.repos.atomic():
            user = self._lock_user(user_id)
            return self._append(user, amount, TransactionType.EARNED, reason, reference)

    def spend_coins(self, user_id: str, amount: int, reason: str) -> CoinTransaction:
        """Debit coins; nothing is written when the balance is too low."""
        return self._debit(user_id, amount, reason, TransactionType.SPENT)

    def redeem_coins(self, user_id: str, amount: int, reason: str) -> CoinTransaction:
        """Debit coins exchanged for a reward."""
        return self._debit(user_id, amount, reason, TransactionType.REDEEMED)

    def adjust_coins(self, user_id: str, amount: int, reason: str) -> CoinTransaction:
        """
        Signed administrative correction.

        Raises:
            InvalidAmount: If amount is zero
            InsufficientBalance: If a negative adjustment would overdraw the user
        """
        if amount == 0:
            raise InvalidAmount("Adjustment amount must be non-zero", amount=amount)
        with self.repos.atomic():
            user = self._lock_user(user_id)
            if user.coin_balance + amount < 0:
                logger.warning(f"Rejected adjustment of {amount} coins for user {user_id}: balance is {user.coin_balance}")
                raise InsufficientBalance(balance=user.coin_balance, requested=-amount)
            return self._append(user, amount, TransactionType.ADMIN_ADJUSTMENT, reason)

    def get_balance(self, user_id: str) -> int:
        return self._get_user(user_id).coin_balance

    def ledger_balance(self, user_id: str) -> int:
        """Balance recomputed from the ledger rows."""
        self._get_user(user_id)
        return self.repos.transactions.sum_for_user(user_id)

    def list_transactions(self, user_id: str, limit: int = 50, offset: int = 0) -> List[CoinTransaction]:
        self._get_user(user_id)
        return self.repos.transactions.list_for_user(user_id, limit=limit, offset=offset)

    # ------------------------------------------------------------------
    # Streaks
    # ------------------------------------------------------------------

    def record_activity(self, user_id: str, on: Optional[date] = None) -> int:
        """
        Record a learning activity and return the current streak.

        Same day keeps the streak, the following day extends it, anything
        else starts over at 1.
        """
        today = on or utcnow().date()
        with self.repos.atomic():
            user = self._lock_user(user_id)
            last = user.last_activity_on
            if last is not None and last >= today:
                return user.current_streak
            if last is not None and last == today - timedelta(days=1):
                user.current_streak = (user.current_streak or 0) + 1
            else:
                user.current_streak = 1
            user.last_activity_on = today
            self.repos.users.update(user)
            logger.info(f"User {user_id} streak is now {user.current_streak} day(s)")
            return user.current_streak

    # ------------------------------------------------------------------
    # Badges
    # ------------------------------------------------------------------

    def define_badge(
        self,
        name: str,
        level: str,
        criteria: Any,
        description: Optional[str] = None,
        icon_url: Optional[str] = None,
    ) -> Badge:
        """
        Create a badge after validating its criteria.

        Raises:
            InvalidCriteria: If the criteria or level cannot be decoded
            ConflictError: If a badge with this name exists
        """
        decoded = parse_criteria(criteria)
        try:
            badge_level = BadgeLevel.parse(level)
        except ValueError as exc:
            raise InvalidCriteria(f"Unknown badge level: {level}") from exc

        with self.repos.atomic():
            badge = self.repos.badges.create(
                Badge(
                    name=name,
                    description=description,
                    level=badge_level.value,
                    icon_url=icon_url,
                    criteria=decoded.model_dump(exclude_none=True),
                )
            )
        logger.info(f"Defined badge {name!r} ({badge_level.value})")
        return badge

    def criteria_for(self, badge: Badge) -> BadgeCriteria:
        cached = _criteria_cache.get(badge.id)
        if cached is not None and cached[0] == badge.updated_at:
            return cached[1]
        decoded = parse_criteria(badge.criteria)
        _criteria_cache[badge.id] = (badge.updated_at, decoded)
        return decoded

    def learner_stats(self, user: User) -> LearnerStats:
        return LearnerStats(
            coins_earned=self.repos.transactions.sum_earned(user.id),
            learning_hours=user.total_learning_hours or 0.0,
            courses_completed=self.repos.enrollments.count_completed(user.id),
            average_final_score=self.repos.enrollments.average_final_score(user.id),
            perfect_quizzes=self.repos.attempts.count_perfect_quizzes(user.id),
            streak_days=user.current_streak or 0,
        )

    def check_and_award_badges(self, user_id: str) -> List[BadgeProgress]:
        """
        Evaluate every badge the user has not earned yet.

        Satisfied badges are marked earned and may raise the user's badge
        level, never lower it. Unsatisfied badges get their progress
        percentage refreshed.

        Returns:
            BadgeProgress rows earned by this call
        """
        newly_earned: List[BadgeProgress] = []
        with self.repos.atomic():
            user = self._lock_user(user_id)
            stats = self.learner_stats(user)
            current_level = BadgeLevel.parse(user.current_badge_level)

            for badge in self.repos.badges.list():
                progress = self.repos.badge_progress.get_for(user.id, badge.id)
                if progress is not None and progress.is_earned:
                    continue
                try:
                    criteria = self.criteria_for(badge)
                except InvalidCriteria as exc:
                    logger.error(f"Skipping badge {badge.name!r} with unreadable criteria: {exc}")
                    continue

                if progress is None:
                    progress = self.repos.badge_progress.create(
                        BadgeProgress(user_id=user.id, badge_id=badge.id, progress=0, is_earned=False)
                    )

                if criteria.is_satisfied(stats):
                    progress.is_earned = True
                    progress.earned_at = utcnow()
                    progress.progress = 100
                    newly_earned.append(progress)
                    badge_level = BadgeLevel.parse(badge.level)
                    if badge_level.rank > current_level.rank:
                        current_level = badge_level
                    logger.info(f"User {user.id} earned badge {badge.name!r}")
                else:
                    progress.progress = criteria.progress(stats)
                self.repos.badge_progress.update(progress)

            if current_level.value != user.current_badge_level:
                logger.info(f"User {user.id} badge level {user.current_badge_level} -> {current_level.value}")
                user.current_badge_level = current_level.value
                self.repos.users.update(user)

        return newly_earned

    def list_badges(self, user_id: str, earned_only: bool = False) -> List[BadgeProgress]:
        self._get_user(user_id)
        return self.repos.badge_progress.list_for_user(user_id, earned_only=earned_only)
