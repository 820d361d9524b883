import pytest

from lms.core.exceptions import ConflictError, NotFound
from lms.models import Enrollment, User


def test_create_duplicate_raises_conflict(repos, make_user, make_course):
    user = make_user()
    course = make_course()
    with repos.atomic():
        repos.enrollments.create(Enrollment(user_id=user.id, course_id=course.id))

    with pytest.raises(ConflictError):
        with repos.atomic():
            repos.enrollments.create(Enrollment(user_id=user.id, course_id=course.id))

    assert repos.enrollments.count(user_id=user.id) == 1


def test_atomic_rolls_back_everything_on_error(repos, make_course):
    course = make_course()

    with pytest.raises(NotFound):
        with repos.atomic():
            repos.users.create(User(email="temp@example.com"))
            repos.courses.increment_counter(course.id, "enrollment_count", 5)
            raise NotFound()

    assert repos.users.get_by_email("temp@example.com") is None
    repos.db.refresh(course)
    assert course.enrollment_count == 0


def test_nested_atomic_commits_once(repos, db):
    with repos.atomic():
        with repos.atomic():
            repos.users.create(User(email="inner@example.com"))
        # still inside the outer unit of work
        assert db.in_transaction()
    db.rollback()

    assert repos.users.get_by_email("inner@example.com") is not None


def test_increment_counter_is_relative(repos, make_course):
    course = make_course()
    with repos.atomic():
        repos.courses.increment_counter(course.id, "completion_count", 2)
        repos.courses.increment_counter(course.id, "completion_count", -1)

    repos.db.refresh(course)
    assert course.completion_count == 1


def test_soft_deleted_rows_are_hidden(repos, make_user):
    user = make_user()
    with repos.atomic():
        repos.users.soft_delete(user)

    assert repos.users.get(user.id) is None
    assert repos.users.get(user.id, include_deleted=True).is_deleted
    assert repos.users.list() == []


def test_list_paginates(repos, make_user):
    for _ in range(5):
        make_user()

    assert len(repos.users.list(limit=2)) == 2
    assert len(repos.users.list(limit=10, offset=3)) == 2
    assert len(repos.users.list(filters={"role": "learner"})) == 5
