from models import db


class UserXP(db.Model):
    __tablename__ = "user_xp"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, unique=True)
    total_xp = db.Column(db.Integer, nullable=False, default=0)
    level = db.Column(db.Integer, nullable=False, default=1)
    quizzes_passed = db.Column(db.Integer, nullable=False, default=0)

    @staticmethod
    def level_threshold(level):
        """XP needed to reach a level: 0, 100, 300, 600, 1000, ..."""
        if level <= 1:
            return 0
        return (level - 1) * 100 + UserXP.level_threshold(level - 1)

    @staticmethod
    def calculate_level(total_xp):
        level = 1
        while UserXP.level_threshold(level + 1) <= total_xp:
            level += 1
        return level

    def add_xp(self, amount):
        self.total_xp = (self.total_xp or 0) + amount
        self.level = UserXP.calculate_level(self.total_xp)

    def to_dict(self):
        return {
            "user_id": self.user_id,
            "total_xp": self.total_xp,
            "level": self.level,
            "next_level_xp": UserXP.level_threshold(self.level + 1),
            "quizzes_passed": self.quizzes_passed,
        }
