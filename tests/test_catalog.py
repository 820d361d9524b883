from datetime import datetime, timedelta, timezone

import pytest

from lms.core.exceptions import InvalidQuestion, InvalidRange, NotFound
from lms.models.enums import QuestionType


def _mcq(text="Which sign means stop?", correct="Red octagon"):
    return {
        "question_text": text,
        "question_type": QuestionType.MCQ.value,
        "options": [
            {"option_text": correct, "is_correct": True},
            {"option_text": "Green circle", "is_correct": False},
        ],
    }


def test_create_course_starts_as_draft(services, make_user):
    instructor = make_user(role="instructor")

    course = services.catalog.create_course(
        instructor.id, title="Fire Safety", passing_score=80, coins_reward=150, category="safety"
    )

    assert course.instructor_id == instructor.id
    assert course.is_published is False
    assert course.passing_score == 80
    assert course.coins_reward == 150
    assert course.enrollment_count == 0
    assert services.catalog.list_courses() == []
    assert services.catalog.list_courses(published_only=False) == [course]


@pytest.mark.parametrize(
    "fields",
    [
        {"title": "  "},
        {"title": "Ok", "passing_score": 101},
        {"title": "Ok", "coins_reward": -1},
        {"title": "Ok", "max_enrollments": -5},
    ],
)
def test_create_course_rejects_bad_fields(services, fields):
    with pytest.raises(InvalidRange):
        services.catalog.create_course(None, **fields)


def test_update_and_publish_course(services):
    course = services.catalog.create_course(None, title="Draft")
    due = datetime(2030, 1, 31, 12, 0, tzinfo=timezone(timedelta(hours=2)))

    services.catalog.update_course(
        course.id, {"title": "First Aid", "is_mandatory": True, "mandatory_due_date": due, "unknown": 1}
    )
    services.catalog.publish_course(course.id)

    listed = services.catalog.list_courses(keyword="first")
    assert [c.id for c in listed] == [course.id]
    assert listed[0].is_mandatory is True
    assert listed[0].mandatory_due_date == datetime(2030, 1, 31, 10, 0)
    assert services.catalog.list_courses(is_mandatory=False) == []


def test_search_filters_by_keyword_and_category(services):
    first = services.catalog.create_course(None, title="Forklift Basics", category="operations")
    second = services.catalog.create_course(None, title="Data Privacy", description="GDPR for forklift drivers")
    services.catalog.create_course(None, title="Unpublished Forklift")
    services.catalog.publish_course(first.id)
    services.catalog.publish_course(second.id)

    assert {c.id for c in services.catalog.list_courses(keyword="FORKLIFT")} == {first.id, second.id}
    assert [c.id for c in services.catalog.list_courses(category="operations")] == [first.id]


def test_deleted_course_is_hidden(services):
    course = services.catalog.create_course(None, title="Retired")
    services.catalog.publish_course(course.id)

    services.catalog.delete_course(course.id)

    assert services.catalog.list_courses() == []
    with pytest.raises(NotFound):
        services.catalog.get_course(course.id)


def test_get_course_published_only(services):
    course = services.catalog.create_course(None, title="Draft")

    assert services.catalog.get_course(course.id).id == course.id
    with pytest.raises(NotFound):
        services.catalog.get_course(course.id, published_only=True)


def test_lessons_are_appended_in_order(services):
    course = services.catalog.create_course(None, title="Ergonomics")

    first = services.catalog.add_lesson(course.id, "Posture", duration_seconds=300)
    second = services.catalog.add_lesson(course.id, "Breaks", duration_seconds=240, video_url="https://cdn/2.mp4")

    assert (first.order_number, second.order_number) == (1, 2)
    assert [lesson.title for lesson in services.catalog.list_lessons(course.id)] == ["Posture", "Breaks"]
    with pytest.raises(InvalidRange):
        services.catalog.add_lesson(course.id, "Negative", duration_seconds=-1)
    with pytest.raises(NotFound):
        services.catalog.add_lesson("missing", "Orphan")


def test_created_quiz_can_be_taken(services, make_user):
    user = make_user()
    course = services.catalog.create_course(None, title="Road Signs")
    quiz = services.catalog.create_quiz(
        course.id,
        "Signs Check",
        [_mcq(), {"question_text": "Colour of a yield sign?", "question_type": "short_answer",
                  "accepted_answers": ["red and white"]}],
        passing_score=50,
        max_attempts=2,
    )

    assert quiz.is_published is False
    assert [q.order_number for q in quiz.questions] == [1, 2]
    assert [o.is_correct for o in quiz.questions[0].options] == [True, False]
    assert quiz.questions[1].accepted_answers == ["red and white"]
    assert services.catalog.list_quizzes(course.id) == []

    services.catalog.publish_quiz(course.id, quiz.id)
    assert [q.id for q in services.catalog.list_quizzes(course.id)] == [quiz.id]

    attempt = services.quizzes.start_attempt(user.id, quiz.id)
    right = quiz.questions[0].options[0].id
    graded = services.quizzes.submit_attempt(user.id, quiz.id, attempt.id, {quiz.questions[0].id: right})
    assert graded.percentage == 50
    assert graded.is_passed


@pytest.mark.parametrize(
    "question",
    [
        {"question_text": "No correct option", "options": [{"option_text": "a"}, {"option_text": "b"}]},
        {"question_text": "One option", "options": [{"option_text": "a", "is_correct": True}]},
        {"question_text": "Essay", "question_type": "essay"},
        {"question_text": "Short", "question_type": "short_answer", "options": [{"option_text": "a"}]},
        {"question_text": "   ", "options": [{"option_text": "a", "is_correct": True}, {"option_text": "b"}]},
    ],
)
def test_create_quiz_rejects_ungradable_questions(services, question):
    course = services.catalog.create_course(None, title="Course")

    with pytest.raises(InvalidQuestion):
        services.catalog.create_quiz(course.id, "Quiz", [question])


def test_create_quiz_checks_lesson_and_limits(services):
    course = services.catalog.create_course(None, title="Course")
    other = services.catalog.create_course(None, title="Other")
    foreign_lesson = services.catalog.add_lesson(other.id, "Elsewhere")

    with pytest.raises(NotFound):
        services.catalog.create_quiz(course.id, "Quiz", [_mcq()], lesson_id=foreign_lesson.id)
    with pytest.raises(InvalidRange):
        services.catalog.create_quiz(course.id, "Quiz", [_mcq()], passing_score=120)
    with pytest.raises(InvalidRange):
        services.catalog.create_quiz(course.id, "Quiz", [_mcq()], max_attempts=-1)
    with pytest.raises(InvalidQuestion):
        services.catalog.create_quiz(course.id, "Quiz", [])
    with pytest.raises(NotFound):
        services.catalog.publish_quiz(other.id, "missing")
