from flask import Blueprint, jsonify, g, request, current_app

from utils.utils import login_required, roles_required
from utils.email import notify_submission_graded
from utils.helpers import clean_text
from classes.quiz_manager import QuizManager
from classes.attempt_manager import AttemptManager
from classes.validators import validate_required, validate_int

from models import db
from models.courses import Course
from models.chapters import Chapter
from models.quizzes import Quiz
from models.quiz_questions import QuizQuestion
from models.quiz_attempts import QuizAttempt

# Instructors' blueprint
instructor_bp = Blueprint("instructor", __name__)


@instructor_bp.errorhandler(ValueError)
def handle_validation_error(error):
    return jsonify({"error": str(error)}), 400


def load_owned_quiz(quiz_id):
    """(quiz, None) for the caller's own quiz, else (None, error response)."""
    quiz = db.session.get(Quiz, quiz_id)
    if not quiz:
        return None, (jsonify({"error": "Quiz not found"}), 404)
    if not QuizManager.is_owner(g.user, quiz):
        return None, (jsonify({"error": "Unauthorized"}), 403)
    return quiz, None


#                                                         COURSES
#_____________________________________________________________________________________________________________
@instructor_bp.route("/courses", methods=["GET"])
@login_required
@roles_required("instructor", "admin")
def get_my_courses():
    query = Course.query
    if g.user.get("role") != "admin":
        query = query.filter_by(instructor_id=g.user.get("user_id"))
    courses = query.order_by(Course.created_at.desc()).all()

    return jsonify([
        {**course.to_dict(), "chapters": [chapter.to_dict() for chapter in course.chapters]}
        for course in courses
    ]), 200


@instructor_bp.route("/courses", methods=["POST"])
@login_required
@roles_required("instructor", "admin")
def create_course():
    data = request.get_json(silent=True) or {}
    validate_required("Title", data.get("title"))

    course = Course(
        title=clean_text(data["title"]),
        description=clean_text(data.get("description")),
        instructor_id=g.user.get("user_id"),
    )
    db.session.add(course)
    db.session.commit()

    return jsonify({"message": "Course created successfully", "course": course.to_dict()}), 201


@instructor_bp.route("/courses/<int:course_id>/chapters", methods=["POST"])
@login_required
@roles_required("instructor", "admin")
def add_chapter(course_id):
    course = db.session.get(Course, course_id)
    if not course:
        return jsonify({"error": "Course not found"}), 404
    if not QuizManager.is_owner(g.user, course):
        return jsonify({"error": "Unauthorized"}), 403

    data = request.get_json(silent=True) or {}
    validate_required("Title", data.get("title"))

    chapter = Chapter(
        course_id=course.id,
        title=clean_text(data["title"]),
        description=clean_text(data.get("description")),
        order=data.get("order") or Chapter.get_next_order(course.id),
    )
    db.session.add(chapter)
    db.session.commit()

    return jsonify({"message": "Chapter created successfully", "chapter": chapter.to_dict()}), 201


#                                                         QUIZZES
#_____________________________________________________________________________________________________________
#CREATE a New Quiz
# --------------------------------------------------------------------------------
@instructor_bp.route("/quizzes", methods=["POST"])
@login_required
@roles_required("instructor", "admin")
def create_quiz():
    data = request.get_json(silent=True) or {}

    chapter_id = data.get("chapter_id")
    if not chapter_id:
        return jsonify({"error": "chapter_id is required"}), 400

    chapter = db.session.get(Chapter, chapter_id)
    if not chapter:
        return jsonify({"error": "Chapter not found"}), 404
    if not QuizManager.is_owner(g.user, chapter.course):
        return jsonify({"error": "Unauthorized"}), 403

    quiz = QuizManager.create_quiz(chapter, data)

    return jsonify({"message": "Quiz created successfully", "quiz": quiz.to_dict()}), 201


#Fetch one quiz for editing (answers included)
@instructor_bp.route("/quizzes/<int:quiz_id>", methods=["GET"])
@login_required
@roles_required("instructor", "admin")
def get_quiz_details(quiz_id):
    quiz, error = load_owned_quiz(quiz_id)
    if error:
        return error

    return jsonify({"quiz": QuizManager.serialize_quiz(quiz, include_answers=True)}), 200


# EDIT a Quiz
# --------------------------------------------------------------------------------
@instructor_bp.route("/quizzes/<int:quiz_id>", methods=["PUT"])
@login_required
@roles_required("instructor", "admin")
def update_quiz(quiz_id):
    quiz, error = load_owned_quiz(quiz_id)
    if error:
        return error

    data = request.get_json(silent=True) or {}
    quiz = QuizManager.update_quiz(quiz, data)

    return jsonify({
        "message": "Quiz updated and is now available to students",
        "quiz": quiz.to_dict()
    }), 200


# DEACTIVATE a Quiz
# --------------------------------------------------------------------------------
@instructor_bp.route("/quizzes/<int:quiz_id>/deactivate", methods=["PUT"])
@login_required
@roles_required("instructor", "admin")
def deactivate_quiz(quiz_id):
    quiz, error = load_owned_quiz(quiz_id)
    if error:
        return error

    quiz = QuizManager.deactivate_quiz(quiz)

    return jsonify({"message": "Quiz hidden from students", "quiz": quiz.to_dict()}), 200


# DELETE a Quiz
# --------------------------------------------------------------------------------
@instructor_bp.route("/quizzes/<int:quiz_id>", methods=["DELETE"])
@login_required
@roles_required("instructor", "admin")
def delete_quiz(quiz_id):
    quiz, error = load_owned_quiz(quiz_id)
    if error:
        return error

    QuizManager.delete_quiz(quiz)
    current_app.logger.info("Quiz %s deleted by user %s", quiz_id, g.user.get("user_id"))

    return jsonify({"message": "Quiz deleted successfully"}), 200


# CREATE a Question
# --------------------------------------------------------------------------------
@instructor_bp.route("/quizzes/<int:quiz_id>/questions", methods=["POST"])
@login_required
@roles_required("instructor", "admin")
def add_question(quiz_id):
    quiz, error = load_owned_quiz(quiz_id)
    if error:
        return error

    data = request.get_json(silent=True) or {}
    question = QuizManager.add_question(quiz, data)

    return jsonify({
        "message": "Question added",
        "question": QuizManager.serialize_question(question),
        "total_marks": quiz.total_marks
    }), 201


#Edit a Question
# --------------------------------------------------------------------------------
@instructor_bp.route("/quizzes/<int:quiz_id>/questions/<int:question_id>", methods=["PUT"])
@login_required
@roles_required("instructor", "admin")
def edit_question(quiz_id, question_id):
    quiz, error = load_owned_quiz(quiz_id)
    if error:
        return error

    question = QuizQuestion.query.filter_by(id=question_id, quiz_id=quiz.id).first()
    if not question:
        return jsonify({"error": "Question not found"}), 404

    data = request.get_json(silent=True) or {}
    question = QuizManager.update_question(question, data)

    return jsonify({
        "message": "Question updated successfully",
        "question": QuizManager.serialize_question(question),
        "total_marks": quiz.total_marks
    }), 200


# DELETE a Question
# --------------------------------------------------------------------------------
@instructor_bp.route("/quizzes/<int:quiz_id>/questions/<int:question_id>", methods=["DELETE"])
@login_required
@roles_required("instructor", "admin")
def delete_question(quiz_id, question_id):
    quiz, error = load_owned_quiz(quiz_id)
    if error:
        return error

    question = QuizQuestion.query.filter_by(id=question_id, quiz_id=quiz.id).first()
    if not question:
        return jsonify({"error": "Question not found"}), 404

    QuizManager.delete_question(question)

    return jsonify({"message": "Question deleted", "total_marks": quiz.total_marks}), 200


#                                                       SUBMISSIONS
#_____________________________________________________________________________________________________________
@instructor_bp.route("/quizzes/<int:quiz_id>/submissions", methods=["GET"])
@login_required
@roles_required("instructor", "admin")
def get_quiz_submissions(quiz_id):
    quiz, error = load_owned_quiz(quiz_id)
    if error:
        return error

    submissions = [
        {
            **attempt.to_dict(),
            "total_marks": attempt.total_points or quiz.total_marks,
            "user": {
                "full_name": attempt.user.full_name,
                "email": attempt.user.email,
            } if attempt.user else None,
        }
        for attempt in AttemptManager.list_submissions(quiz)
    ]

    return jsonify({"submissions": submissions}), 200


#Grade a submission by hand
@instructor_bp.route("/submissions/<int:submission_id>/grade", methods=["PUT"])
@login_required
@roles_required("instructor", "admin")
def grade_submission(submission_id):
    attempt = db.session.get(QuizAttempt, submission_id)
    if not attempt:
        return jsonify({"error": "Submission not found"}), 404
    if not QuizManager.is_owner(g.user, attempt.quiz):
        return jsonify({"error": "Unauthorized"}), 403
    if attempt.completed_at is None:
        return jsonify({"error": "Submission is still in progress"}), 400

    data = request.get_json(silent=True) or {}
    maximum = attempt.total_points or attempt.quiz.total_marks
    if not maximum:
        return jsonify({"error": "Submission has no total marks to grade against"}), 400
    score = validate_int("Score", data.get("score"), minimum=0, maximum=maximum)

    attempt = AttemptManager.grade_submission(attempt, score, clean_text(data.get("feedback")))
    notified = notify_submission_graded(attempt)

    return jsonify({"submission": attempt.to_dict(), "notified": notified}), 200
