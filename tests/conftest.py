import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENV"] = "test"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from lms.core.dependencies import Services, get_db
from lms.core.security import create_access_token, get_password_hash
from lms.models import Base, Course, Lesson, Question, QuestionOption, Quiz, User
from lms.models.enums import QuestionType, UserRole
from lms.repositories import Repositories


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def repos(db):
    return Repositories(db)


@pytest.fixture
def services(db):
    return Services(db)


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def factory(**kwargs) -> User:
        counter["n"] += 1
        values = {
            "email": f"user{counter['n']}@example.com",
            "full_name": f"User {counter['n']}",
            "role": UserRole.LEARNER.value,
            "is_active": True,
            "hashed_password": None,
        }
        values.update(kwargs)
        if "password" in values:
            values["hashed_password"] = get_password_hash(values.pop("password"))
        user = User(**values)
        db.add(user)
        db.commit()
        return user

    return factory


@pytest.fixture
def make_course(db):
    def factory(lessons: int = 0, lesson_seconds: int = 600, **kwargs) -> Course:
        values = {
            "title": "Workplace Safety",
            "passing_score": 70,
            "coins_reward": 100,
            "max_enrollments": 0,
            "is_published": True,
        }
        values.update(kwargs)
        course = Course(**values)
        db.add(course)
        db.flush()
        for number in range(1, lessons + 1):
            db.add(
                Lesson(
                    course_id=course.id,
                    title=f"Lesson {number}",
                    order_number=number,
                    duration_seconds=lesson_seconds,
                )
            )
        db.commit()
        return course

    return factory


@pytest.fixture
def make_quiz(db):
    """Build a quiz of `questions` MCQs whose first option is the correct one."""

    def factory(course: Course, questions: int = 5, **kwargs) -> Quiz:
        values = {
            "course_id": course.id,
            "title": "Safety Check",
            "passing_score": 70,
            "max_attempts": 3,
            "is_published": True,
        }
        values.update(kwargs)
        quiz = Quiz(**values)
        db.add(quiz)
        db.flush()
        for number in range(1, questions + 1):
            question = Question(
                quiz_id=quiz.id,
                question_text=f"Question {number}?",
                question_type=QuestionType.MCQ.value,
                order_number=number,
            )
            db.add(question)
            db.flush()
            db.add(QuestionOption(question_id=question.id, option_text="Right", is_correct=True, order_number=1))
            db.add(QuestionOption(question_id=question.id, option_text="Wrong", is_correct=False, order_number=2))
        db.commit()
        return quiz

    return factory


@pytest.fixture
def answer_sheet():
    def factory(quiz: Quiz, correct: int) -> dict:
        """Answers with the first `correct` questions right and the rest wrong."""
        answers = {}
        for index, question in enumerate(sorted(quiz.questions, key=lambda q: q.order_number)):
            options = sorted(question.options, key=lambda o: o.order_number)
            answers[question.id] = options[0].id if index < correct else options[1].id
        return answers

    return factory


@pytest.fixture
def client(db):
    from lms.main import app

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    def factory(user: User) -> dict:
        token = create_access_token(subject=user.id, role=user.role)
        return {"Authorization": f"Bearer {token}"}

    return factory
