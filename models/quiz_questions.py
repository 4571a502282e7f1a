from models import db

QUESTION_TYPES = ("single_correct", "multiple_correct", "true_false")


class QuizQuestion(db.Model):
    __tablename__ = "quiz_questions"

    id = db.Column(db.Integer, primary_key=True)
    quiz_id = db.Column(db.Integer, db.ForeignKey("quizzes.id"), nullable=False)
    question_text = db.Column(db.Text, nullable=False)
    question_type = db.Column(db.String(20), nullable=False, default="single_correct")
    points = db.Column(db.Integer, nullable=False, default=1)
    order_index = db.Column(db.Integer, nullable=False, default=0)

    quiz = db.relationship("Quiz", back_populates="questions")
    options = db.relationship("QuizOption", back_populates="question", cascade="all, delete-orphan",
                              order_by="QuizOption.order_index")

    @property
    def correct_options(self):
        return [option for option in self.options if option.is_correct]

    def __repr__(self):
        return f"<QuizQuestion {self.id} ({self.question_type})>"

    def to_dict(self):
        return {
            "id": self.id,
            "quiz_id": self.quiz_id,
            "question_text": self.question_text,
            "question_type": self.question_type,
            "points": self.points,
            "order_index": self.order_index,
            "options": [option.to_dict() for option in self.options],
        }
