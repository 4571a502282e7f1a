import pytest

from app import create_app
from models import db, User, Course, Chapter
from classes.quiz_manager import QuizManager
from utils.tokens import get_jwt_token


@pytest.fixture
def app(tmp_path):
    app = create_app("testing")
    app.config["UPLOAD_FOLDER"] = str(tmp_path / "uploads")

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


def make_user(username, role="student"):
    user = User(username=username, email=f"{username}@example.com", full_name=username.title(), role=role)
    user.set_password("password123")
    db.session.add(user)
    db.session.commit()
    return user


def auth_header(user):
    token = get_jwt_token({"user_id": user.id, "username_or_email": user.username, "role": user.role})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def instructor(app):
    return make_user("prof", role="instructor")


@pytest.fixture
def other_instructor(app):
    return make_user("rival", role="instructor")


@pytest.fixture
def admin(app):
    return make_user("root", role="admin")


@pytest.fixture
def student(app):
    return make_user("learner")


@pytest.fixture
def chapter(instructor):
    course = Course(title="Python Basics", description="Intro course", instructor_id=instructor.id)
    db.session.add(course)
    db.session.flush()
    chapter = Chapter(course_id=course.id, title="Variables", order=1)
    db.session.add(chapter)
    db.session.commit()
    return chapter


@pytest.fixture
def quiz(chapter):
    """Three questions worth 2 + 1 + 1 points."""
    quiz = QuizManager.create_quiz(chapter, {"title": "Variables check", "passing_marks": 60})
    QuizManager.add_question(quiz, {
        "question": "Which keyword defines a function?",
        "type": "single_correct",
        "marks": 2,
        "options": ["def", "func", "lambda"],
        "correct_answer": "def",
    })
    QuizManager.add_question(quiz, {
        "question": "Which of these are mutable?",
        "type": "multiple_correct",
        "marks": 1,
        "options": ["list", "tuple", "dict"],
        "correct_answer": ["list", "dict"],
    })
    QuizManager.add_question(quiz, {
        "question": "Strings are immutable.",
        "type": "true_false",
        "marks": 1,
        "correct_answer": "true",
    })
    return quiz


@pytest.fixture
def assignment(chapter):
    return QuizManager.create_quiz(chapter, {"title": "Write a script", "type": "assignment", "total_marks": 20})


def perfect_answers(quiz):
    answers = {}
    for question in quiz.questions:
        correct = [option.option_text for option in question.correct_options]
        answers[str(question.id)] = correct if question.question_type == "multiple_correct" else correct[0]
    return answers
