from datetime import timedelta

import pytest

from lms.core.exceptions import AlreadySubmitted, AttemptLimitExceeded, InvalidRange, NotFound, TimeLimitExceeded
from lms.core.timeutils import utcnow
from lms.models import Certificate, CoinTransaction, Question
from lms.models.enums import QuestionType
from lms.services.grading import default_registry
from lms.services.quiz_engine import QuizEngine, score_percentage


def test_attempts_are_numbered_consecutively(services, make_user, make_course, make_quiz):
    user = make_user()
    quiz = make_quiz(make_course(), max_attempts=0)

    numbers = [services.quizzes.start_attempt(user.id, quiz.id).attempt_number for _ in range(4)]

    assert numbers == [1, 2, 3, 4]
    assert services.quizzes.attempt_count(user.id, quiz.id) == 4


def test_attempt_limit(services, make_user, make_course, make_quiz):
    user = make_user()
    quiz = make_quiz(make_course(), max_attempts=3)

    for _ in range(3):
        services.quizzes.start_attempt(user.id, quiz.id)
    with pytest.raises(AttemptLimitExceeded):
        services.quizzes.start_attempt(user.id, quiz.id)

    assert services.quizzes.attempt_count(user.id, quiz.id) == 3


def test_attempt_counts_are_per_user(services, make_user, make_course, make_quiz):
    quiz = make_quiz(make_course(), max_attempts=1)
    first, second = make_user(), make_user()

    services.quizzes.start_attempt(first.id, quiz.id)

    assert services.quizzes.start_attempt(second.id, quiz.id).attempt_number == 1


def test_start_attempt_unknown_quiz_or_user(services, make_user, make_course, make_quiz):
    with pytest.raises(NotFound):
        services.quizzes.start_attempt(make_user().id, "missing")
    with pytest.raises(NotFound):
        services.quizzes.start_attempt("missing", make_quiz(make_course()).id)


def test_submit_grades_and_rewards_pass(services, db, make_user, make_course, make_quiz, answer_sheet):
    user = make_user()
    quiz = make_quiz(make_course(), questions=5, passing_score=70, title="Hazards")
    attempt = services.quizzes.start_attempt(user.id, quiz.id)

    graded = services.quizzes.submit_attempt(user.id, quiz.id, attempt.id, answer_sheet(quiz, 4), 95)

    assert graded.score == 4
    assert graded.max_score == 5
    assert graded.percentage == 80
    assert graded.is_passed
    assert graded.submitted_at is not None
    assert graded.time_spent_seconds == 95

    [reward] = db.query(CoinTransaction).filter_by(user_id=user.id).all()
    assert reward.amount == 50
    assert reward.reason == "Quiz Passed: Hazards"
    assert (reward.reference_type, reward.reference_id) == ("quiz", quiz.id)

    entries = services.repos.answers.list_for_attempt(attempt.id)
    assert len(entries) == 5
    assert sum(entry.points_earned for entry in entries) == 4


def test_failed_attempt_earns_nothing(services, make_user, make_course, make_quiz, answer_sheet):
    user = make_user()
    quiz = make_quiz(make_course(), questions=4, passing_score=70)
    attempt = services.quizzes.start_attempt(user.id, quiz.id)

    graded = services.quizzes.submit_attempt(user.id, quiz.id, attempt.id, answer_sheet(quiz, 2))

    assert graded.percentage == 50
    assert not graded.is_passed
    assert services.gamification.get_balance(user.id) == 0


def test_quiz_reward_can_be_configured_or_disabled(services, make_user, make_course, make_quiz, answer_sheet):
    user = make_user()
    generous = make_quiz(make_course(), questions=1, coins_reward=75)
    stingy = make_quiz(make_course(title="Other"), questions=1, coins_reward=0)

    for quiz in (generous, stingy):
        attempt = services.quizzes.start_attempt(user.id, quiz.id)
        services.quizzes.submit_attempt(user.id, quiz.id, attempt.id, answer_sheet(quiz, 1))

    assert services.gamification.get_balance(user.id) == 75


def test_every_passing_attempt_is_rewarded(services, make_user, make_course, make_quiz, answer_sheet):
    user = make_user()
    quiz = make_quiz(make_course(), questions=1)

    for _ in range(2):
        attempt = services.quizzes.start_attempt(user.id, quiz.id)
        services.quizzes.submit_attempt(user.id, quiz.id, attempt.id, answer_sheet(quiz, 1))

    assert services.gamification.get_balance(user.id) == 100


def test_submit_twice_is_rejected(services, make_user, make_course, make_quiz, answer_sheet):
    user = make_user()
    quiz = make_quiz(make_course())
    attempt = services.quizzes.start_attempt(user.id, quiz.id)
    services.quizzes.submit_attempt(user.id, quiz.id, attempt.id, answer_sheet(quiz, 5))

    with pytest.raises(AlreadySubmitted):
        services.quizzes.submit_attempt(user.id, quiz.id, attempt.id, answer_sheet(quiz, 5))

    assert services.gamification.get_balance(user.id) == 50


def test_submit_someone_elses_attempt(services, make_user, make_course, make_quiz):
    owner, intruder = make_user(), make_user()
    quiz = make_quiz(make_course())
    attempt = services.quizzes.start_attempt(owner.id, quiz.id)

    with pytest.raises(NotFound):
        services.quizzes.submit_attempt(intruder.id, quiz.id, attempt.id, {})
    with pytest.raises(NotFound):
        services.quizzes.submit_attempt(owner.id, quiz.id, "missing", {})


def test_negative_time_spent(services, make_user, make_course, make_quiz):
    user = make_user()
    quiz = make_quiz(make_course())
    attempt = services.quizzes.start_attempt(user.id, quiz.id)

    with pytest.raises(InvalidRange):
        services.quizzes.submit_attempt(user.id, quiz.id, attempt.id, {}, -1)


def test_quiz_without_questions_scores_zero(services, make_user, make_course, make_quiz):
    user = make_user()
    quiz = make_quiz(make_course(), questions=0)
    attempt = services.quizzes.start_attempt(user.id, quiz.id)

    graded = services.quizzes.submit_attempt(user.id, quiz.id, attempt.id, {})

    assert (graded.score, graded.max_score, graded.percentage) == (0, 0, 0)
    assert not graded.is_passed


@pytest.mark.parametrize("score, max_score, expected", [(0, 0, 0), (2, 3, 66), (3, 3, 100), (1, 7, 14)])
def test_score_percentage_bounds(score, max_score, expected):
    assert score_percentage(score, max_score) == expected
    assert 0 <= score_percentage(score, max_score) <= 100


def _add_text_question(db, quiz, accepted):
    question = Question(
        quiz_id=quiz.id,
        question_text="Name the assembly point",
        question_type=QuestionType.SHORT_ANSWER.value,
        order_number=99,
        accepted_answers=accepted,
    )
    db.add(question)
    db.commit()
    return question


def test_text_answers_count_as_incorrect_by_default(services, db, make_user, make_course, make_quiz):
    user = make_user()
    quiz = make_quiz(make_course(), questions=0)
    question = _add_text_question(db, quiz, ["Car Park B"])
    attempt = services.quizzes.start_attempt(user.id, quiz.id)

    graded = services.quizzes.submit_attempt(user.id, quiz.id, attempt.id, {question.id: "car park b"})

    assert graded.score == 0
    assert graded.max_score == 1


def test_text_answer_grader_when_enabled(services, db, make_user, make_course, make_quiz):
    user = make_user()
    quiz = make_quiz(make_course(), questions=0)
    question = _add_text_question(db, quiz, ["Car Park B"])
    engine = QuizEngine(services.repos, services.gamification, graders=default_registry(enable_text_grading=True))
    attempt = engine.start_attempt(user.id, quiz.id)

    graded = engine.submit_attempt(user.id, quiz.id, attempt.id, {question.id: "  car park b "})

    assert graded.score == 1
    assert graded.percentage == 100


def test_perfect_quiz_counts_towards_badge(services, db, make_user, make_course, make_quiz, answer_sheet):
    services.gamification.define_badge("Perfectionist", "gold", {"type": "perfect_quizzes", "value": 1})
    user = make_user()
    quiz = make_quiz(make_course(), questions=2)
    attempt = services.quizzes.start_attempt(user.id, quiz.id)

    services.quizzes.submit_attempt(user.id, quiz.id, attempt.id, answer_sheet(quiz, 2))

    db.refresh(user)
    assert user.current_badge_level == "gold"


def test_quiz_then_course_completion_scenario(services, db, make_user, make_course, make_quiz, answer_sheet):
    user = make_user()
    course = make_course(coins_reward=150, passing_score=70, title="Ergonomics")
    quiz = make_quiz(course, questions=10, passing_score=70)
    services.enrollments.enroll_user(user.id, course.id)

    attempt = services.quizzes.start_attempt(user.id, quiz.id)
    graded = services.quizzes.submit_attempt(user.id, quiz.id, attempt.id, answer_sheet(quiz, 8))
    assert graded.percentage == 80
    assert graded.is_passed
    enrollment = services.enrollments.complete_course(user.id, course.id, 85)

    assert enrollment.completion_status == "completed"
    completion_reward = db.query(CoinTransaction).filter_by(reason="Course Completion: Ergonomics").one()
    assert completion_reward.amount == 150
    # 150 for the course plus the default quiz pass reward
    assert services.gamification.get_balance(user.id) == 200
    assert services.gamification.ledger_balance(user.id) == 200
    assert db.query(Certificate).filter_by(user_id=user.id, course_id=course.id).count() == 1


def test_submit_after_time_limit_is_rejected(services, db, make_user, make_course, make_quiz, answer_sheet):
    user = make_user()
    quiz = make_quiz(make_course(), questions=2, time_limit_minutes=10)
    late = services.quizzes.start_attempt(user.id, quiz.id)
    late.started_at = utcnow() - timedelta(minutes=11)
    db.commit()

    with pytest.raises(TimeLimitExceeded):
        services.quizzes.submit_attempt(user.id, quiz.id, late.id, answer_sheet(quiz, 2))

    db.refresh(late)
    assert not late.is_submitted
    assert db.query(CoinTransaction).filter_by(user_id=user.id).count() == 0

    on_time = services.quizzes.start_attempt(user.id, quiz.id)
    on_time.started_at = utcnow() - timedelta(minutes=9)
    db.commit()

    assert services.quizzes.submit_attempt(user.id, quiz.id, on_time.id, answer_sheet(quiz, 2)).is_passed
