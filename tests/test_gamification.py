from datetime import date, timedelta

import pytest

from lms.core.exceptions import InsufficientBalance, InvalidAmount, InvalidCriteria, NotFound
from lms.models import CoinTransaction
from lms.models.enums import BadgeLevel, EnrollmentStatus, TransactionType
from lms.services.gamification import _criteria_cache


def test_award_coins_appends_ledger_row_and_updates_balance(services, make_user):
    user = make_user()

    transaction = services.gamification.award_coins(user.id, 120, "Welcome bonus", reference=("course", "c-1"))

    assert transaction.amount == 120
    assert transaction.transaction_type == TransactionType.EARNED.value
    assert transaction.reference_type == "course"
    assert services.gamification.get_balance(user.id) == 120
    assert services.gamification.ledger_balance(user.id) == 120


@pytest.mark.parametrize("amount", [0, -5])
def test_award_coins_rejects_non_positive_amounts(services, make_user, amount):
    user = make_user()

    with pytest.raises(InvalidAmount):
        services.gamification.award_coins(user.id, amount, "Nope")

    assert services.gamification.list_transactions(user.id) == []


def test_spend_more_than_balance_writes_nothing(services, repos, make_user):
    user = make_user()
    services.gamification.award_coins(user.id, 50, "Seed")

    with pytest.raises(InsufficientBalance):
        services.gamification.spend_coins(user.id, 100, "Gift card")

    assert services.gamification.get_balance(user.id) == 50
    assert repos.transactions.count(user_id=user.id) == 1


def test_spend_and_redeem_debit_the_ledger(services, make_user):
    user = make_user()
    services.gamification.award_coins(user.id, 200, "Seed")

    spent = services.gamification.spend_coins(user.id, 30, "Avatar")
    redeemed = services.gamification.redeem_coins(user.id, 70, "Voucher")

    assert spent.amount == -30
    assert spent.transaction_type == TransactionType.SPENT.value
    assert redeemed.amount == -70
    assert redeemed.transaction_type == TransactionType.REDEEMED.value
    assert services.gamification.get_balance(user.id) == 100


def test_ledger_sum_matches_balance_after_mixed_operations(services, db, make_user):
    user = make_user()
    gamification = services.gamification

    gamification.award_coins(user.id, 100, "A")
    gamification.award_coins(user.id, 25, "B")
    gamification.spend_coins(user.id, 40, "C")
    with pytest.raises(InsufficientBalance):
        gamification.spend_coins(user.id, 1000, "D")
    gamification.adjust_coins(user.id, -10, "Correction")
    gamification.adjust_coins(user.id, 5, "Correction")

    rows = db.query(CoinTransaction).filter(CoinTransaction.user_id == user.id).all()
    assert sum(row.amount for row in rows) == gamification.get_balance(user.id) == 80
    assert gamification.ledger_balance(user.id) == 80


def test_adjust_coins_rules(services, make_user):
    user = make_user()
    services.gamification.award_coins(user.id, 10, "Seed")

    with pytest.raises(InvalidAmount):
        services.gamification.adjust_coins(user.id, 0, "Zero")
    with pytest.raises(InsufficientBalance):
        services.gamification.adjust_coins(user.id, -11, "Too much")

    adjustment = services.gamification.adjust_coins(user.id, -10, "Reset")
    assert adjustment.transaction_type == TransactionType.ADMIN_ADJUSTMENT.value
    assert services.gamification.get_balance(user.id) == 0


def test_unknown_user_is_not_found(services):
    with pytest.raises(NotFound):
        services.gamification.award_coins("missing", 10, "Nope")
    with pytest.raises(NotFound):
        services.gamification.get_balance("missing")


def test_list_transactions_newest_first(services, make_user):
    user = make_user()
    for amount in (1, 2, 3):
        services.gamification.award_coins(user.id, amount, f"Reward {amount}")

    transactions = services.gamification.list_transactions(user.id, limit=2)

    assert len(transactions) == 2
    assert {t.amount for t in transactions} <= {1, 2, 3}


def test_record_activity_streak_rules(services, db, make_user):
    user = make_user()
    gamification = services.gamification

    assert gamification.record_activity(user.id, on=date(2024, 3, 1)) == 1
    assert gamification.record_activity(user.id, on=date(2024, 3, 1)) == 1
    assert gamification.record_activity(user.id, on=date(2024, 3, 2)) == 2
    assert gamification.record_activity(user.id, on=date(2024, 3, 3)) == 3
    # Missed a day
    assert gamification.record_activity(user.id, on=date(2024, 3, 5)) == 1

    db.refresh(user)
    assert user.current_streak == 1
    assert user.last_activity_on == date(2024, 3, 5)


def test_define_badge_validates_criteria(services):
    with pytest.raises(InvalidCriteria):
        services.gamification.define_badge("Broken", "gold", {"type": "unknown", "value": 1})
    with pytest.raises(InvalidCriteria):
        services.gamification.define_badge("Negative", "gold", {"type": "courses_completed", "value": -1})
    with pytest.raises(InvalidCriteria):
        services.gamification.define_badge("Bad level", "obsidian", {"type": "courses_completed", "value": 1})

    badge = services.gamification.define_badge("Hoarder", "silver", '{"type": "coins_earned", "value": 500}')
    assert badge.criteria == {"type": "coins_earned", "value": 500}
    assert badge.level == BadgeLevel.SILVER.value


def _complete_course(repos, user, course, score):
    from lms.models import Enrollment
    repos.enrollments.create(
        Enrollment(
            user_id=user.id,
            course_id=course.id,
            status=EnrollmentStatus.COMPLETED.value,
            overall_progress=100,
            final_score=score,
            is_passed=True,
        )
    )
    repos.db.commit()


def test_check_and_award_badges_earns_and_upgrades_level(services, repos, db, make_user, make_course):
    user = make_user()
    services.gamification.define_badge("First Course", "silver", {"type": "courses_completed", "value": 1})
    services.gamification.define_badge("Rich", "gold", {"type": "coins_earned", "value": 1000})
    _complete_course(repos, user, make_course(), 90)

    earned = services.gamification.check_and_award_badges(user.id)

    assert [p.badge.name for p in earned] == ["First Course"]
    db.refresh(user)
    assert user.current_badge_level == BadgeLevel.SILVER.value

    progresses = {p.badge.name: p for p in services.gamification.list_badges(user.id)}
    assert progresses["First Course"].is_earned
    assert progresses["First Course"].progress == 100
    assert progresses["First Course"].earned_at is not None
    assert not progresses["Rich"].is_earned
    assert progresses["Rich"].progress == 0


def test_badge_level_never_downgrades(services, db, make_user):
    user = make_user(current_badge_level=BadgeLevel.GOLD.value)
    services.gamification.define_badge("Pocket Money", "bronze", {"type": "coins_earned", "value": 10})

    services.gamification.award_coins(user.id, 10, "Seed")
    earned = services.gamification.check_and_award_badges(user.id)

    assert len(earned) == 1
    db.refresh(user)
    assert user.current_badge_level == BadgeLevel.GOLD.value


def test_earned_badges_are_not_awarded_twice(services, make_user):
    user = make_user()
    services.gamification.define_badge("Pocket Money", "bronze", {"type": "coins_earned", "value": 10})
    services.gamification.award_coins(user.id, 10, "Seed")

    assert len(services.gamification.check_and_award_badges(user.id)) == 1
    assert services.gamification.check_and_award_badges(user.id) == []
    assert len(services.gamification.list_badges(user.id, earned_only=True)) == 1


def test_unearned_badge_progress_is_partial(services, make_user):
    user = make_user()
    services.gamification.define_badge("Saver", "silver", {"type": "coins_earned", "value": 300})
    services.gamification.award_coins(user.id, 100, "Seed")

    services.gamification.check_and_award_badges(user.id)

    [progress] = services.gamification.list_badges(user.id)
    assert progress.progress == 33
    assert not progress.is_earned


def test_spent_coins_still_count_as_earned(services, make_user):
    user = make_user()
    services.gamification.define_badge("Saver", "silver", {"type": "coins_earned", "value": 100})
    services.gamification.award_coins(user.id, 100, "Seed")
    services.gamification.spend_coins(user.id, 100, "Shop")

    earned = services.gamification.check_and_award_badges(user.id)

    assert len(earned) == 1


def test_criteria_cache_holds_one_entry_per_badge(services, db):
    badge = services.gamification.define_badge("Saver", "silver", {"type": "coins_earned", "value": 100})
    assert services.gamification.criteria_for(badge).value == 100
    entries = len(_criteria_cache)

    for value in (200, 300, 400):
        badge.criteria = {"type": "coins_earned", "value": value}
        badge.updated_at = badge.updated_at + timedelta(seconds=1)
        db.commit()
        assert services.gamification.criteria_for(badge).value == value

    assert len(_criteria_cache) == entries
    assert _criteria_cache[badge.id][0] == badge.updated_at
