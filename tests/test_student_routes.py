import io
import os

from models import db, Quiz
from utils.badge_service import seed_badges
from conftest import auth_header, perfect_answers


def test_get_quiz_exposes_answers_by_default(client, student, quiz):
    response = client.get(f"/api/student/quizzes/{quiz.id}", headers=auth_header(student))

    assert response.status_code == 200
    questions = response.get_json()["quiz"]["questions"]
    assert len(questions) == 3
    assert questions[0] == {
        "id": quiz.questions[0].id,
        "question": "Which keyword defines a function?",
        "type": "single_correct",
        "marks": 2,
        "options": ["def", "func", "lambda"],
        "correct_answer": "def",
    }


def test_answers_hidden_when_disabled(app, client, student, quiz):
    app.config["EXPOSE_CORRECT_ANSWERS"] = False
    response = client.post(f"/api/student/quizzes/{quiz.id}/start", headers=auth_header(student))

    assert all("correct_answer" not in q for q in response.get_json()["quiz"]["questions"])


def test_unknown_quiz(client, student):
    assert client.get("/api/student/quizzes/404", headers=auth_header(student)).status_code == 404


def test_chapter_quizzes_listing(client, student, chapter, quiz, assignment):
    response = client.get(f"/api/student/chapters/{chapter.id}/quizzes", headers=auth_header(student))

    listing = response.get_json()["quizzes"]
    by_title = {item["title"]: item for item in listing}
    assert by_title["Variables check"]["is_ready"] is True
    assert by_title["Variables check"]["question_count"] == 3
    assert by_title["Write a script"]["questions"] == []
    assert client.get("/api/student/chapters/999/quizzes", headers=auth_header(student)).status_code == 404


def test_start_then_submit(client, student, quiz):
    headers = auth_header(student)

    started = client.post(f"/api/student/quizzes/{quiz.id}/start", headers=headers)
    assert started.status_code == 200
    attempt_id = started.get_json()["attempt_id"]
    assert started.get_json()["attempt"]["status"] == "in_progress"

    again = client.post(f"/api/student/quizzes/{quiz.id}/start", headers=headers)
    assert again.get_json()["attempt_id"] == attempt_id

    submitted = client.post(f"/api/student/quizzes/{quiz.id}/submit",
                            json={"answers": perfect_answers(quiz), "time_taken": 90}, headers=headers)
    body = submitted.get_json()
    assert submitted.status_code == 200
    assert body["score"] == 4
    assert body["total_points"] == 4
    assert body["percentage"] == 100
    assert body["passed"] is True
    assert body["attempt"]["id"] == attempt_id
    assert body["attempt"]["time_taken"] == 90


def test_passing_submission_earns_xp_and_badges(client, student, quiz):
    seed_badges()
    response = client.post(f"/api/student/quizzes/{quiz.id}/submit",
                           json={"answers": perfect_answers(quiz)}, headers=auth_header(student))

    body = response.get_json()
    assert {badge["name"] for badge in body["new_badges"]} == {"Quiz Starter", "Perfect Score"}
    assert body["xp"]["quizzes_passed"] == 1

    badges = client.get("/api/student/badges", headers=auth_header(student)).get_json()
    assert len(badges) == 2
    xp = client.get("/api/student/xp", headers=auth_header(student)).get_json()
    assert xp["total_xp"] == 25 + 15 + 25


def test_failing_submission_earns_nothing(client, student, quiz):
    response = client.post(f"/api/student/quizzes/{quiz.id}/submit",
                           json={"answers": {}}, headers=auth_header(student))

    body = response.get_json()
    assert body["score"] == 0
    assert body["passed"] is False
    assert body["new_badges"] == []
    assert body["xp"] is None


def test_malformed_answers_are_not_rejected(client, student, quiz):
    multiple = quiz.questions[1]
    response = client.post(f"/api/student/quizzes/{quiz.id}/submit",
                           json={"answers": {str(multiple.id): "list"}}, headers=auth_header(student))

    assert response.status_code == 200
    assert response.get_json()["score"] == 0


def test_negative_time_taken(client, student, quiz):
    response = client.post(f"/api/student/quizzes/{quiz.id}/submit",
                           json={"answers": {}, "time_taken": -5}, headers=auth_header(student))
    assert response.status_code == 400


def test_attempt_limit_over_http(client, student, quiz):
    quiz.max_attempts = 1
    db.session.commit()
    headers = auth_header(student)

    client.post(f"/api/student/quizzes/{quiz.id}/submit", json={"answers": {}}, headers=headers)
    blocked = client.post(f"/api/student/quizzes/{quiz.id}/start", headers=headers)
    assert blocked.status_code == 403

    status = client.get(f"/api/student/quizzes/{quiz.id}/attempt-status", headers=headers).get_json()
    assert status["has_attempted"] is True
    assert status["can_retake"] is False
    assert status["attempts_left"] == 0


def test_edit_unlocks_retake(client, instructor, student, quiz):
    quiz.max_attempts = 1
    db.session.commit()
    headers = auth_header(student)
    client.post(f"/api/student/quizzes/{quiz.id}/submit", json={"answers": {}}, headers=headers)

    client.put(f"/api/instructor/quizzes/{quiz.id}", json={"title": "Variables check v2"},
               headers=auth_header(instructor))

    status = client.get(f"/api/student/quizzes/{quiz.id}/attempt-status", headers=headers).get_json()
    assert status["can_retake"] is True
    assert client.post(f"/api/student/quizzes/{quiz.id}/start", headers=headers).status_code == 200


def test_inactive_quiz_cannot_start(client, student, quiz):
    db.session.get(Quiz, quiz.id).is_active = False
    db.session.commit()

    response = client.post(f"/api/student/quizzes/{quiz.id}/start", headers=auth_header(student))
    assert response.status_code == 403


def test_attempt_history(client, student, quiz):
    headers = auth_header(student)
    client.post(f"/api/student/quizzes/{quiz.id}/submit", json={"answers": {}}, headers=headers)
    client.post(f"/api/student/quizzes/{quiz.id}/submit", json={"answers": perfect_answers(quiz)}, headers=headers)

    attempts = client.get(f"/api/student/quizzes/{quiz.id}/attempts", headers=headers).get_json()["attempts"]
    assert sorted(attempt["attempt_number"] for attempt in attempts) == [1, 2]


def test_assignment_upload(app, client, student, assignment):
    data = {"assignment": (io.BytesIO(b"print('hi')"), "solution.txt")}
    response = client.post(f"/api/student/quizzes/{assignment.id}/assignment", data=data,
                           content_type="multipart/form-data", headers=auth_header(student))

    assert response.status_code == 201
    submission = response.get_json()["submission"]
    assert submission["status"] == "completed"
    assert submission["file_url"].startswith("/uploads/assignments/")
    stored = os.path.join(app.config["UPLOAD_FOLDER"], "assignments", os.path.basename(submission["file_url"]))
    assert os.path.exists(stored)
    assert client.get(submission["file_url"]).data == b"print('hi')"


def test_assignment_upload_rejects_extension(client, student, assignment):
    data = {"assignment": (io.BytesIO(b"MZ"), "virus.exe")}
    response = client.post(f"/api/student/quizzes/{assignment.id}/assignment", data=data,
                           content_type="multipart/form-data", headers=auth_header(student))
    assert response.status_code == 400


def test_assignment_upload_to_quiz(client, student, quiz):
    data = {"assignment": (io.BytesIO(b"text"), "notes.txt")}
    response = client.post(f"/api/student/quizzes/{quiz.id}/assignment", data=data,
                           content_type="multipart/form-data", headers=auth_header(student))
    assert response.status_code == 400


def test_quiz_submit_to_assignment(client, student, assignment):
    response = client.post(f"/api/student/quizzes/{assignment.id}/submit",
                           json={"answers": {}}, headers=auth_header(student))
    assert response.status_code == 400


def test_repeat_pass_is_not_rewarded_again(client, student, quiz):
    seed_badges()
    quiz.max_attempts = None
    db.session.commit()
    headers = auth_header(student)

    first = client.post(f"/api/student/quizzes/{quiz.id}/submit",
                        json={"answers": perfect_answers(quiz)}, headers=headers).get_json()
    second = client.post(f"/api/student/quizzes/{quiz.id}/submit",
                         json={"answers": perfect_answers(quiz)}, headers=headers).get_json()

    assert first["xp"]["quizzes_passed"] == 1
    assert second["passed"] is True
    assert second["new_badges"] == []
    assert second["xp"] is None

    xp = client.get("/api/student/xp", headers=headers).get_json()
    assert xp["quizzes_passed"] == 1
    assert xp["total_xp"] == 25 + 15 + 25


def test_first_pass_after_failures_is_rewarded(client, student, quiz):
    headers = auth_header(student)
    client.post(f"/api/student/quizzes/{quiz.id}/submit", json={"answers": {}}, headers=headers)
    passed = client.post(f"/api/student/quizzes/{quiz.id}/submit",
                         json={"answers": perfect_answers(quiz)}, headers=headers).get_json()

    assert passed["xp"]["quizzes_passed"] == 1


def test_inactive_quiz_is_not_served(client, student, quiz):
    db.session.get(Quiz, quiz.id).is_active = False
    db.session.commit()

    response = client.get(f"/api/student/quizzes/{quiz.id}", headers=auth_header(student))
    assert response.status_code == 403
