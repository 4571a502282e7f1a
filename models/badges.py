from models import db
from sqlalchemy.orm import relationship
from utils.helpers import utcnow, format_datetime

class Badge(db.Model):
    __tablename__ = "badges"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False, unique=True)
    description = db.Column(db.String(255), nullable=True)
    icon = db.Column(db.String(255), nullable=True)
    category = db.Column(db.String(20), nullable=False, default="achievement")
    # e.g. ("quizzes_passed", 10) or ("perfect_score", 1)
    requirement_type = db.Column(db.String(50), nullable=False)
    requirement_value = db.Column(db.Integer, nullable=False, default=1)
    xp_reward = db.Column(db.Integer, nullable=False, default=50)
    sort_order = db.Column(db.Integer, nullable=False, default=0)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "icon": self.icon,
            "category": self.category,
            "xp_reward": self.xp_reward,
        }

class UserBadge(db.Model):
    __tablename__ = "user_badges"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    badge_id = db.Column(db.Integer, db.ForeignKey("badges.id"), nullable=False)
    awarded_at = db.Column(db.DateTime, default=utcnow)

    __table_args__ = (
        db.UniqueConstraint("user_id", "badge_id", name="unique_user_badge"),
    )

    badge = relationship("Badge")

    def to_dict(self):
        return {
            **self.badge.to_dict(),
            "awarded_at": format_datetime(self.awarded_at),
        }
