from models import db
from sqlalchemy.orm import relationship
from utils.helpers import utcnow, format_datetime

QUIZ_TYPES = ("quiz", "assignment")
QUIZ_POSITIONS = ("after_video", "end_of_chapter")


class Quiz(db.Model):
    __tablename__ = "quizzes"

    id = db.Column(db.Integer, primary_key=True)
    course_id = db.Column(db.Integer, db.ForeignKey("courses.id"), nullable=False)
    chapter_id = db.Column(db.Integer, db.ForeignKey("chapters.id"), nullable=False)
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    type = db.Column(db.String(20), nullable=False, default="quiz")
    position = db.Column(db.String(20), nullable=False, default="end_of_chapter")
    time_limit = db.Column(db.Integer, nullable=True)
    total_marks = db.Column(db.Integer, nullable=False, default=0)
    passing_marks = db.Column(db.Integer, nullable=False, default=60)
    max_attempts = db.Column(db.Integer, nullable=True, default=3)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    order = db.Column(db.Integer, nullable=False, default=1)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    # bumped explicitly by touch() on content edits; drives retake eligibility
    updated_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    course = relationship("Course")
    chapter = relationship("Chapter", back_populates="quizzes")
    questions = relationship("QuizQuestion", back_populates="quiz", cascade="all, delete-orphan",
                             order_by="QuizQuestion.order_index")
    attempts = relationship("QuizAttempt", back_populates="quiz", cascade="all, delete-orphan")

    @property
    def is_retakeable(self):
        """Only auto-graded quizzes unlock a retake when edited; assignments never do."""
        return self.type == "quiz"

    @property
    def question_count(self):
        return len(self.questions)

    def touch(self):
        """Mark the quiz content as edited."""
        self.updated_at = utcnow()

    def __repr__(self):
        return f"<Quiz {self.title}>"

    def to_dict(self):
        return {
            "id": self.id,
            "course_id": self.course_id,
            "chapter_id": self.chapter_id,
            "title": self.title,
            "description": self.description,
            "type": self.type,
            "position": self.position,
            "time_limit": self.time_limit,
            "total_marks": self.total_marks,
            "passing_marks": self.passing_marks,
            "max_attempts": self.max_attempts,
            "is_active": self.is_active,
            "order": self.order,
            "created_at": format_datetime(self.created_at),
            "updated_at": format_datetime(self.updated_at),
        }
