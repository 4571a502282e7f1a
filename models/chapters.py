from sqlalchemy.orm import relationship
from models import db

class Chapter(db.Model):
    __tablename__ = "chapters"

    id = db.Column(db.Integer, primary_key=True)
    course_id = db.Column(db.Integer, db.ForeignKey("courses.id"), nullable=False)
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    order = db.Column(db.Integer, nullable=False, default=1)
    created_at = db.Column(db.DateTime, default=db.func.now(), nullable=False)

    course = relationship("Course", back_populates="chapters")
    quizzes = relationship("Quiz", back_populates="chapter", cascade="all, delete-orphan")

    @staticmethod
    def get_next_order(course_id):
        last_chapter = Chapter.query.filter_by(course_id=course_id).order_by(Chapter.order.desc()).first()
        return (last_chapter.order + 1) if last_chapter else 1

    def __repr__(self):
        return f"<Chapter {self.title} (Course ID {self.course_id})>"

    def to_dict(self):
        return {
            "id": self.id,
            "course_id": self.course_id,
            "title": self.title,
            "description": self.description if self.description is not None else "",
            "order": self.order,
            "created_at": self.created_at.isoformat() if self.created_at else None
        }
