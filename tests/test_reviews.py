import pytest

from lms.core.exceptions import DuplicateReview, InvalidRange, NotFound


def test_reviews_update_average_rating(services, db, make_user, make_course):
    course = make_course()
    first, second = make_user(), make_user()

    services.reviews.add_review(first.id, course.id, 5, "Great")
    services.reviews.add_review(second.id, course.id, 2)

    db.refresh(course)
    assert course.average_rating == pytest.approx(3.5)
    assert len(services.reviews.list_reviews(course.id)) == 2


def test_one_review_per_user(services, make_user, make_course):
    course = make_course()
    user = make_user()
    services.reviews.add_review(user.id, course.id, 4)

    with pytest.raises(DuplicateReview):
        services.reviews.add_review(user.id, course.id, 5)


@pytest.mark.parametrize("rating", [0, 6])
def test_rating_range(services, make_user, make_course, rating):
    with pytest.raises(InvalidRange):
        services.reviews.add_review(make_user().id, make_course().id, rating)


def test_review_unknown_course(services, make_user):
    with pytest.raises(NotFound):
        services.reviews.add_review(make_user().id, "missing", 3)
    with pytest.raises(NotFound):
        services.reviews.list_reviews("missing")
