import logging

from flask_mail import Message
from extensions import mail

logger = logging.getLogger(__name__)


def send_email(to, subject, body):
    """Sends an email using Flask-Mail."""
    msg = Message(subject=subject, recipients=[to], body=body)
    try:
        mail.send(msg)
        return True
    except Exception as e:
        logger.warning("Failed to send email to %s: %s", to, e)
        return False


def notify_submission_graded(attempt):
    """Let the learner know a manually graded submission has a mark."""
    user = attempt.user
    quiz = attempt.quiz
    if not user or not user.email:
        return False

    lines = [
        f"Hi {user.full_name},",
        "",
        f"Your submission for \"{quiz.title}\" has been graded.",
        f"Score: {attempt.score}/{attempt.total_points or quiz.total_marks}",
    ]
    if attempt.feedback:
        lines += ["", "Feedback:", attempt.feedback]

    return send_email(user.email, f"Graded: {quiz.title}", "\n".join(lines))
