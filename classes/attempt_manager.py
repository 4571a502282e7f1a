import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import selectinload

from models import db
from models.quizzes import Quiz
from models.quiz_questions import QuizQuestion
from models.quiz_attempts import QuizAttempt
from models.quiz_attempts_answers import QuizAttemptAnswer
from classes.quiz_grader import QuizGrader
from utils.helpers import utcnow

logger = logging.getLogger(__name__)


class QuizNotFound(LookupError):
    pass


class QuizUnavailable(Exception):
    pass


class AttemptLimitReached(Exception):
    pass


class AttemptConflict(Exception):
    pass


class AttemptManager:
    """
    Attempt lifecycle for one (quiz, learner) pair.

    A learner may open a new attempt while their finished attempts are below
    quiz.max_attempts (null means unlimited). Editing a quiz after the
    learner's latest attempt grants one more, once per edit. The same rule
    applies to every entry point that creates an attempt.
    """

    @staticmethod
    def get_quiz(quiz_id, with_questions=False):
        query = Quiz.query
        if with_questions:
            query = query.options(selectinload(Quiz.questions).selectinload(QuizQuestion.options))
        quiz = query.filter_by(id=quiz_id).first()
        if not quiz:
            raise QuizNotFound(f"Quiz {quiz_id} not found")
        return quiz

    @staticmethod
    def latest_attempt(quiz_id, user_id):
        return (
            QuizAttempt.query
            .filter_by(quiz_id=quiz_id, user_id=user_id)
            .order_by(QuizAttempt.created_at.desc(), QuizAttempt.id.desc())
            .first()
        )

    @staticmethod
    def open_attempt(quiz_id, user_id):
        return (
            QuizAttempt.query
            .filter_by(quiz_id=quiz_id, user_id=user_id, status="in_progress")
            .order_by(QuizAttempt.created_at.desc(), QuizAttempt.id.desc())
            .first()
        )

    @staticmethod
    def finished_attempts(quiz_id, user_id):
        return (
            QuizAttempt.query
            .filter(QuizAttempt.quiz_id == quiz_id, QuizAttempt.user_id == user_id)
            .filter(QuizAttempt.status != "in_progress")
            .count()
        )

    @staticmethod
    def passed_before(quiz_id, user_id, attempt_id=None):
        """Whether the learner already passed this quiz in another attempt."""
        query = QuizAttempt.query.filter_by(quiz_id=quiz_id, user_id=user_id, is_passed=True)
        if attempt_id is not None:
            query = query.filter(QuizAttempt.id != attempt_id)
        return bool(db.session.query(query.exists()).scalar())

    @staticmethod
    def can_retake(quiz, latest_attempt):
        """True when the quiz content changed after the learner's latest attempt.

        Measured from the latest attempt's completion, not its creation, so an
        edit made while that attempt was still open does not unlock a retake
        once it has been submitted.
        """
        if latest_attempt is None or not quiz.is_retakeable or quiz.updated_at is None:
            return False
        return quiz.updated_at > latest_attempt.last_activity_at

    @staticmethod
    def attempts_left(quiz, user_id):
        if quiz.max_attempts is None:
            return None
        return max(0, quiz.max_attempts - AttemptManager.finished_attempts(quiz.id, user_id))

    @staticmethod
    def ensure_can_attempt(quiz, user_id):
        if quiz.max_attempts is None:
            return
        if AttemptManager.finished_attempts(quiz.id, user_id) < quiz.max_attempts:
            return
        if AttemptManager.can_retake(quiz, AttemptManager.latest_attempt(quiz.id, user_id)):
            logger.info("User %s granted a retake of edited quiz %s", user_id, quiz.id)
            return
        raise AttemptLimitReached("Maximum attempts exceeded")

    @staticmethod
    def _create_attempt(quiz, user_id, **fields):
        """Insert the next numbered attempt; the unique constraint catches double submits."""
        number = QuizAttempt.query.filter_by(quiz_id=quiz.id, user_id=user_id).count() + 1
        attempt = QuizAttempt(quiz_id=quiz.id, user_id=user_id, attempt_number=number, **fields)
        db.session.add(attempt)
        try:
            db.session.flush()
        except IntegrityError:
            db.session.rollback()
            logger.warning("Concurrent attempt #%s on quiz %s by user %s", number, quiz.id, user_id)
            raise AttemptConflict("Another attempt was recorded at the same time, please retry")
        return attempt

    @staticmethod
    def get_attempt_status(quiz_id, user_id):
        quiz = AttemptManager.get_quiz(quiz_id)
        latest = AttemptManager.latest_attempt(quiz_id, user_id)

        return {
            "attempt": latest.to_dict() if latest else None,
            "has_attempted": latest is not None,
            "can_retake": AttemptManager.can_retake(quiz, latest),
            "quiz_version": quiz.updated_at.isoformat() if quiz.updated_at else None,
            "attempts_left": AttemptManager.attempts_left(quiz, user_id),
        }

    @staticmethod
    def start_attempt(quiz_id, user_id):
        """Open an attempt, or hand back the learner's attempt that is still open."""
        quiz = AttemptManager.get_quiz(quiz_id, with_questions=True)
        if not quiz.is_active:
            raise QuizUnavailable("Quiz is not available")

        attempt = AttemptManager.open_attempt(quiz.id, user_id)
        if attempt:
            return quiz, attempt

        AttemptManager.ensure_can_attempt(quiz, user_id)
        attempt = AttemptManager._create_attempt(quiz, user_id, status="in_progress", started_at=utcnow())
        db.session.commit()
        logger.info("User %s started attempt #%s of quiz %s", user_id, attempt.attempt_number, quiz.id)
        return quiz, attempt

    @staticmethod
    def submit_attempt(quiz_id, user_id, answers, time_taken=0):
        """
        Grade and store a submission.

        Completes the learner's open attempt; a submission without a prior
        start opens one under the same attempt limit. Returns
        (attempt, result) where result also carries the percentage.
        """
        quiz = AttemptManager.get_quiz(quiz_id, with_questions=True)
        if quiz.type != "quiz":
            raise ValueError("Assignments are submitted as files")

        attempt = AttemptManager.open_attempt(quiz.id, user_id)
        if attempt is None:
            AttemptManager.ensure_can_attempt(quiz, user_id)
            attempt = AttemptManager._create_attempt(quiz, user_id, started_at=utcnow())

        result = QuizGrader.evaluate(quiz.questions, answers, quiz.passing_marks)

        attempt.answers = answers if isinstance(answers, dict) else {}
        attempt.score = result["score"]
        attempt.total_points = result["total_points"]
        attempt.time_taken = time_taken or 0
        attempt.is_passed = result["passed"]
        attempt.status = "completed"
        attempt.completed_at = utcnow()

        attempt.responses = [
            QuizAttemptAnswer(
                question_id=response["question_id"],
                answer=response["answer"],
                is_correct=response["is_correct"],
                marks_awarded=response["marks_awarded"],
            )
            for response in result["responses"]
        ]

        db.session.commit()
        logger.info("User %s scored %s/%s on quiz %s (attempt #%s)",
                    user_id, result["score"], result["total_points"], quiz.id, attempt.attempt_number)
        return attempt, result

    @staticmethod
    def submit_assignment(quiz_id, user_id, file_url):
        quiz = AttemptManager.get_quiz(quiz_id)
        if quiz.type != "assignment":
            raise ValueError("Only assignments accept file submissions")

        AttemptManager.ensure_can_attempt(quiz, user_id)
        now = utcnow()
        attempt = AttemptManager._create_attempt(
            quiz, user_id,
            status="completed",
            file_url=file_url,
            total_points=quiz.total_marks,
            started_at=now,
            completed_at=now,
        )
        db.session.commit()
        return attempt

    @staticmethod
    def list_user_attempts(quiz_id, user_id):
        AttemptManager.get_quiz(quiz_id)
        return (
            QuizAttempt.query
            .filter_by(quiz_id=quiz_id, user_id=user_id)
            .order_by(QuizAttempt.started_at.desc(), QuizAttempt.id.desc())
            .all()
        )

    @staticmethod
    def list_submissions(quiz):
        return (
            QuizAttempt.query
            .filter(QuizAttempt.quiz_id == quiz.id, QuizAttempt.completed_at.isnot(None))
            .order_by(QuizAttempt.created_at.desc(), QuizAttempt.id.desc())
            .all()
        )

    @staticmethod
    def grade_submission(attempt, score, feedback=None):
        quiz = attempt.quiz
        total = attempt.total_points or quiz.total_marks
        if not total:
            raise ValueError("Submission has no total marks to grade against")
        if score > total:
            raise ValueError(f"Score must be at most {total}.")

        attempt.score = score
        attempt.feedback = feedback or None
        attempt.status = "graded"
        attempt.graded_at = utcnow()
        attempt.total_points = total
        attempt.is_passed = QuizGrader.percentage(score, total) >= quiz.passing_marks

        db.session.commit()
        return attempt
