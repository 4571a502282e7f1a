from flask import Blueprint, jsonify, g, request, current_app

from utils.utils import login_required
from utils.helpers import allowed_file, save_upload
from utils.badge_service import record_quiz_pass, get_user_badges, get_user_xp
from classes.quiz_manager import QuizManager
from classes.attempt_manager import (
    AttemptManager, QuizNotFound, QuizUnavailable, AttemptLimitReached, AttemptConflict
)
from classes.validators import validate_int

from models import db
from models.chapters import Chapter

# Students' blueprint
student_bp = Blueprint("student", __name__)


@student_bp.errorhandler(QuizNotFound)
def handle_quiz_not_found(error):
    return jsonify({"error": "Quiz not found"}), 404


@student_bp.errorhandler(QuizUnavailable)
def handle_quiz_unavailable(error):
    return jsonify({"error": str(error)}), 403


@student_bp.errorhandler(AttemptLimitReached)
def handle_attempt_limit(error):
    return jsonify({"error": str(error)}), 403


@student_bp.errorhandler(AttemptConflict)
def handle_attempt_conflict(error):
    return jsonify({"error": str(error)}), 409


@student_bp.errorhandler(ValueError)
def handle_validation_error(error):
    return jsonify({"error": str(error)}), 400


#                                                         QUIZZES
#_____________________________________________________________________________________________________________
#Fetch a quiz with its questions
@student_bp.route("/quizzes/<int:quiz_id>", methods=["GET"])
@login_required
def get_quiz(quiz_id):
    quiz = AttemptManager.get_quiz(quiz_id, with_questions=True)
    if not quiz.is_active:
        raise QuizUnavailable("Quiz is not available")
    include_answers = current_app.config["EXPOSE_CORRECT_ANSWERS"]

    return jsonify({"quiz": QuizManager.serialize_quiz(quiz, include_answers)}), 200


#Fetch all quizzes of a chapter
@student_bp.route("/chapters/<int:chapter_id>/quizzes", methods=["GET"])
@login_required
def get_chapter_quizzes(chapter_id):
    if not db.session.get(Chapter, chapter_id):
        return jsonify({"error": "Chapter not found"}), 404

    include_answers = current_app.config["EXPOSE_CORRECT_ANSWERS"]
    return jsonify({"quizzes": QuizManager.list_chapter_quizzes(chapter_id, include_answers)}), 200


#Latest attempt and retake eligibility
@student_bp.route("/quizzes/<int:quiz_id>/attempt-status", methods=["GET"])
@login_required
def get_attempt_status(quiz_id):
    status = AttemptManager.get_attempt_status(quiz_id, g.user.get("user_id"))
    return jsonify(status), 200


# Start a Quiz Attempt
@student_bp.route("/quizzes/<int:quiz_id>/start", methods=["POST"])
@login_required
def start_quiz(quiz_id):
    quiz, attempt = AttemptManager.start_attempt(quiz_id, g.user.get("user_id"))
    include_answers = current_app.config["EXPOSE_CORRECT_ANSWERS"]

    return jsonify({
        "attempt_id": attempt.id,
        "attempt": attempt.to_dict(),
        "quiz": QuizManager.serialize_quiz(quiz, include_answers),
    }), 200


@student_bp.route("/quizzes/<int:quiz_id>/submit", methods=["POST"])
@login_required
def submit_quiz(quiz_id):
    """Grades the quiz and records XP and badges on a pass."""
    data = request.get_json(silent=True) or {}
    student_id = g.user.get("user_id")
    answers = data.get("answers")
    time_taken = validate_int("Time taken", data.get("time_taken") or 0, minimum=0)

    if not answers:
        current_app.logger.info("User %s submitted quiz %s without answers", student_id, quiz_id)

    attempt, result = AttemptManager.submit_attempt(quiz_id, student_id, answers, time_taken)

    new_badges = []
    xp = None
    # only the first pass of a quiz counts towards XP and badges
    if result["passed"] and not AttemptManager.passed_before(quiz_id, student_id, attempt.id):
        user_xp, new_badges = record_quiz_pass(student_id, perfect_score=result["percentage"] == 100)
        xp = user_xp.to_dict()

    return jsonify({
        "score": result["score"],
        "total_points": result["total_points"],
        "percentage": result["percentage"],
        "passed": result["passed"],
        "attempt": attempt.to_dict(),
        "new_badges": new_badges,
        "xp": xp,
    }), 200


#Attempt history of the current learner
@student_bp.route("/quizzes/<int:quiz_id>/attempts", methods=["GET"])
@login_required
def get_my_attempts(quiz_id):
    attempts = AttemptManager.list_user_attempts(quiz_id, g.user.get("user_id"))
    return jsonify({"attempts": [attempt.to_dict() for attempt in attempts]}), 200


#                                                       ASSIGNMENTS
#_____________________________________________________________________________________________________________
@student_bp.route("/quizzes/<int:quiz_id>/assignment", methods=["POST"])
@login_required
def submit_assignment(quiz_id):
    file = request.files.get("assignment")
    if not file or not file.filename:
        return jsonify({"error": "No file uploaded"}), 400
    if not allowed_file(file.filename):
        return jsonify({"error": "Only PDF, DOC, DOCX, TXT, ZIP, and RAR files are allowed"}), 400

    # check the quiz before writing anything to disk
    quiz = AttemptManager.get_quiz(quiz_id)
    if quiz.type != "assignment":
        return jsonify({"error": "Only assignments accept file submissions"}), 400

    file_url = save_upload(file, "assignments")
    attempt = AttemptManager.submit_assignment(quiz.id, g.user.get("user_id"), file_url)

    return jsonify({"submission": attempt.to_dict()}), 201


#                                                       GAMIFICATION
#_____________________________________________________________________________________________________________
#Fetch user badges
@student_bp.route("/badges", methods=["GET"])
@login_required
def get_my_badges():
    return jsonify(get_user_badges(g.user.get("user_id"))), 200


@student_bp.route("/xp", methods=["GET"])
@login_required
def get_my_xp():
    user_xp = get_user_xp(g.user.get("user_id"))
    db.session.commit()
    return jsonify(user_xp.to_dict()), 200
