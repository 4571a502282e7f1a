import logging

from flask import current_app

from models import db, Badge, UserBadge, UserXP
from utils.helpers import utcnow

logger = logging.getLogger(__name__)

DEFAULT_BADGES = [
    {"name": "Quiz Starter", "description": "Pass your first quiz", "icon": "✅",
     "requirement_type": "quizzes_passed", "requirement_value": 1, "xp_reward": 15, "sort_order": 1},
    {"name": "Quiz Master", "description": "Pass 10 quizzes", "icon": "🏆",
     "requirement_type": "quizzes_passed", "requirement_value": 10, "xp_reward": 50, "sort_order": 2},
    {"name": "Perfect Score", "description": "Score 100% on a quiz", "icon": "💯",
     "requirement_type": "perfect_score", "requirement_value": 1, "xp_reward": 25, "sort_order": 3},
]


def seed_badges():
    """Insert any default badge that is missing. Returns the number added."""
    added = 0
    for definition in DEFAULT_BADGES:
        if not Badge.query.filter_by(name=definition["name"]).first():
            db.session.add(Badge(**definition))
            added += 1
    db.session.commit()
    return added


def get_user_xp(user_id):
    user_xp = UserXP.query.filter_by(user_id=user_id).first()
    if not user_xp:
        user_xp = UserXP(user_id=user_id, total_xp=0, level=1, quizzes_passed=0)
        db.session.add(user_xp)
        db.session.flush()
    return user_xp


def award_badge(user_id, badge):
    already_awarded = UserBadge.query.filter_by(user_id=user_id, badge_id=badge.id).first()
    if already_awarded:
        return None

    db.session.add(UserBadge(user_id=user_id, badge_id=badge.id, awarded_at=utcnow()))
    get_user_xp(user_id).add_xp(badge.xp_reward or 0)
    db.session.flush()
    logger.info("User %s earned badge %r", user_id, badge.name)
    return badge.to_dict()


def evaluate_quiz_badges(user_id, user_xp, perfect_score=False):
    badges = []
    candidates = (
        Badge.query
        .filter_by(is_active=True)
        .filter(Badge.requirement_type.in_(["quizzes_passed", "perfect_score"]))
        .order_by(Badge.sort_order)
        .all()
    )

    for badge in candidates:
        if badge.requirement_type == "quizzes_passed":
            earned = user_xp.quizzes_passed >= badge.requirement_value
        else:
            earned = perfect_score

        if earned:
            b = award_badge(user_id, badge)
            if b: badges.append(b)

    return badges


def record_quiz_pass(user_id, perfect_score=False):
    """XP and badges for a passed quiz. Returns (user_xp, new_badges)."""
    user_xp = get_user_xp(user_id)
    user_xp.quizzes_passed = (user_xp.quizzes_passed or 0) + 1
    user_xp.add_xp(current_app.config["QUIZ_PASS_XP"])

    new_badges = evaluate_quiz_badges(user_id, user_xp, perfect_score=perfect_score)

    db.session.commit()
    return user_xp, new_badges


def get_user_badges(user_id):
    user_badges = (
        UserBadge.query
        .filter_by(user_id=user_id)
        .join(Badge)
        .order_by(UserBadge.awarded_at)
        .all()
    )
    return [ub.to_dict() for ub in user_badges]
