from models import db

class QuizAttemptAnswer(db.Model):
    __tablename__ = "quiz_attempt_answers"

    id = db.Column(db.Integer, primary_key=True)
    attempt_id = db.Column(db.Integer, db.ForeignKey("quiz_attempts.id"), nullable=False)
    question_id = db.Column(db.Integer, db.ForeignKey("quiz_questions.id", ondelete="SET NULL"), nullable=True)
    answer = db.Column(db.JSON, nullable=True)
    is_correct = db.Column(db.Boolean, nullable=False, default=False)
    marks_awarded = db.Column(db.Integer, nullable=False, default=0)

    attempt = db.relationship("QuizAttempt", back_populates="responses")

    def to_dict(self):
        return {
            "id": self.id,
            "attempt_id": self.attempt_id,
            "question_id": self.question_id,
            "answer": self.answer,
            "is_correct": self.is_correct,
            "marks_awarded": self.marks_awarded,
        }
