from models import db, Badge, UserBadge, UserXP
from utils.badge_service import seed_badges, get_user_xp, record_quiz_pass, get_user_badges


def test_seed_badges_is_idempotent(app):
    assert seed_badges() == 3
    assert seed_badges() == 0
    assert Badge.query.count() == 3


def test_level_thresholds():
    assert [UserXP.level_threshold(level) for level in range(1, 6)] == [0, 100, 300, 600, 1000]
    assert UserXP.calculate_level(0) == 1
    assert UserXP.calculate_level(99) == 1
    assert UserXP.calculate_level(100) == 2
    assert UserXP.calculate_level(650) == 4


def test_get_user_xp_creates_row(student):
    user_xp = get_user_xp(student.id)
    db.session.commit()

    assert user_xp.total_xp == 0
    assert user_xp.level == 1
    assert get_user_xp(student.id).id == user_xp.id


def test_first_pass_awards_xp_and_starter_badge(student):
    seed_badges()
    user_xp, new_badges = record_quiz_pass(student.id)

    assert [badge["name"] for badge in new_badges] == ["Quiz Starter"]
    assert user_xp.quizzes_passed == 1
    # 25 for the pass, 15 for the badge
    assert user_xp.total_xp == 40


def test_badges_are_awarded_once(student):
    seed_badges()
    record_quiz_pass(student.id)
    _, new_badges = record_quiz_pass(student.id)

    assert new_badges == []
    assert UserBadge.query.filter_by(user_id=student.id).count() == 1


def test_perfect_score_badge(student):
    seed_badges()
    user_xp, new_badges = record_quiz_pass(student.id, perfect_score=True)

    assert {badge["name"] for badge in new_badges} == {"Quiz Starter", "Perfect Score"}
    assert user_xp.total_xp == 25 + 15 + 25
    assert len(get_user_badges(student.id)) == 2


def test_quiz_master_after_ten_passes(student):
    seed_badges()
    for _ in range(9):
        record_quiz_pass(student.id)
    user_xp, new_badges = record_quiz_pass(student.id)

    assert [badge["name"] for badge in new_badges] == ["Quiz Master"]
    assert user_xp.quizzes_passed == 10
    assert user_xp.total_xp == 10 * 25 + 15 + 50
    assert user_xp.level == 3


def test_inactive_badges_are_skipped(student):
    seed_badges()
    Badge.query.filter_by(name="Quiz Starter").first().is_active = False
    db.session.commit()

    _, new_badges = record_quiz_pass(student.id)
    assert new_badges == []
