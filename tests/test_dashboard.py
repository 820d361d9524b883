from datetime import timedelta

import pytest

from lms.core.config import settings
from lms.core.exceptions import NotFound
from lms.core.timeutils import utcnow


def test_dashboard_aggregates_learner_state(services, make_user, make_course):
    user = make_user(full_name="Ada")
    due = utcnow() + timedelta(days=3)
    mandatory = make_course(title="Compliance", is_mandatory=True, mandatory_due_date=due, lessons=1, lesson_seconds=3600)
    finished = make_course(title="Onboarding", coins_reward=100)
    for course in (mandatory, finished):
        services.enrollments.enroll_user(user.id, course.id)
    services.enrollments.mark_started(user.id, mandatory.id)
    services.progress.track_progress(user.id, mandatory.id, mandatory.lessons[0].id, 3600, 3600)
    services.enrollments.complete_course(user.id, finished.id, 90)
    services.gamification.spend_coins(user.id, 20, "Sticker")

    dashboard = services.dashboard.get_dashboard(user.id)

    assert dashboard["full_name"] == "Ada"
    assert [e.course_id for e in dashboard["mandatory_courses"]] == [mandatory.id]
    assert [e.course_id for e in dashboard["in_progress_courses"]] == [mandatory.id]
    assert dashboard["completed_courses_count"] == 1
    assert dashboard["certificates_count"] == 1
    assert dashboard["coin_balance"] == 80
    assert dashboard["total_learning_hours"] == pytest.approx(1.0)
    assert dashboard["current_streak"] == 1
    assert dashboard["leaderboard_rank"] == 1
    assert sorted(t.amount for t in dashboard["recent_transactions"]) == [-20, 100]


def test_leaderboard_rank_counts_users_strictly_ahead(services, make_user):
    leader = make_user(total_learning_hours=10.0)
    tied_a = make_user(total_learning_hours=5.0)
    tied_b = make_user(total_learning_hours=5.0)
    newcomer = make_user(total_learning_hours=0.0)

    assert services.dashboard.get_dashboard(leader.id)["leaderboard_rank"] == 1
    assert services.dashboard.get_dashboard(tied_a.id)["leaderboard_rank"] == 2
    assert services.dashboard.get_dashboard(tied_b.id)["leaderboard_rank"] == 2
    assert services.dashboard.get_dashboard(newcomer.id)["leaderboard_rank"] == 4


def test_soft_deleted_users_do_not_rank(services, repos, db, make_user):
    ghost = make_user(total_learning_hours=50.0)
    user = make_user(total_learning_hours=1.0)
    repos.users.soft_delete(ghost)
    db.commit()

    assert services.dashboard.get_dashboard(user.id)["leaderboard_rank"] == 1
    with pytest.raises(NotFound):
        services.dashboard.get_dashboard(ghost.id)


def test_leaderboard_listing_matches_dashboard_rank(services, repos, db, make_user):
    users = [make_user(total_learning_hours=hours) for hours in (10.0, 5.0, 5.0, 0.0)]
    ghost = make_user(total_learning_hours=99.0)
    repos.users.soft_delete(ghost)
    db.commit()

    board = services.dashboard.leaderboard()

    assert [entry["rank"] for entry in board] == [1, 2, 2, 4]
    assert ghost.id not in {entry["user_id"] for entry in board}
    for entry in board:
        assert entry["rank"] == services.dashboard.get_dashboard(entry["user_id"])["leaderboard_rank"]
    assert [entry["user_id"] for entry in services.dashboard.leaderboard(limit=1)] == [users[0].id]


def test_leaderboard_by_coins(services, make_user):
    poor = make_user(coin_balance=5)
    rich = make_user(coin_balance=500)

    board = services.dashboard.leaderboard(order_by="coins")

    assert [(entry["user_id"], entry["rank"]) for entry in board] == [(rich.id, 1), (poor.id, 2)]


def test_recent_transactions_are_limited(services, make_user):
    user = make_user()
    for amount in range(1, 9):
        services.gamification.award_coins(user.id, amount, "Tick")

    dashboard = services.dashboard.get_dashboard(user.id)

    assert len(dashboard["recent_transactions"]) == settings.DASHBOARD_RECENT_TRANSACTIONS


def test_dashboard_unknown_user(services):
    with pytest.raises(NotFound):
        services.dashboard.get_dashboard("missing")
