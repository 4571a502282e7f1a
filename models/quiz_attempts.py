from models import db
from utils.helpers import utcnow, format_datetime


class QuizAttempt(db.Model):
    __tablename__ = "quiz_attempts"

    id = db.Column(db.Integer, primary_key=True)
    quiz_id = db.Column(db.Integer, db.ForeignKey("quizzes.id"), nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    attempt_number = db.Column(db.Integer, nullable=False, default=1)
    status = db.Column(db.String(20), nullable=False, default="in_progress")
    answers = db.Column(db.JSON, nullable=True)
    score = db.Column(db.Integer, nullable=True)
    total_points = db.Column(db.Integer, nullable=True)
    time_taken = db.Column(db.Integer, nullable=False, default=0)
    is_passed = db.Column(db.Boolean, nullable=True)
    feedback = db.Column(db.Text, nullable=True)
    file_url = db.Column(db.String(255), nullable=True)
    started_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    completed_at = db.Column(db.DateTime, nullable=True)
    graded_at = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    __table_args__ = (
        db.UniqueConstraint("quiz_id", "user_id", "attempt_number", name="unique_attempt_number"),
    )

    quiz = db.relationship("Quiz", back_populates="attempts")
    user = db.relationship("User", backref=db.backref("quiz_attempts", lazy=True, cascade="all, delete-orphan"))
    responses = db.relationship("QuizAttemptAnswer", back_populates="attempt", lazy=True, cascade="all, delete-orphan")

    @property
    def last_activity_at(self):
        """When the learner last touched this attempt: completion, or creation while still open."""
        return self.completed_at or self.created_at

    @property
    def percentage(self):
        if not self.total_points:
            return 0
        from classes.quiz_grader import QuizGrader
        return QuizGrader.percentage(self.score or 0, self.total_points)

    def __repr__(self):
        return f"<QuizAttempt quiz={self.quiz_id} user={self.user_id} #{self.attempt_number}>"

    def to_dict(self):
        return {
            "id": self.id,
            "quiz_id": self.quiz_id,
            "user_id": self.user_id,
            "attempt_number": self.attempt_number,
            "status": self.status,
            "answers": self.answers,
            "score": self.score,
            "total_points": self.total_points,
            "percentage": self.percentage,
            "time_taken": self.time_taken,
            "is_passed": self.is_passed,
            "feedback": self.feedback,
            "file_url": self.file_url,
            "started_at": format_datetime(self.started_at),
            "completed_at": format_datetime(self.completed_at),
            "graded_at": format_datetime(self.graded_at),
            "created_at": format_datetime(self.created_at),
        }
