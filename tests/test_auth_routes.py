from conftest import make_user, auth_header


def register(client, **overrides):
    payload = {
        "username": "newbie",
        "email": "newbie@example.com",
        "password": "secret123",
        "full_name": "New Learner",
    }
    payload.update(overrides)
    return client.post("/api/auth/register", json=payload)


def test_register_student(client):
    response = register(client)

    assert response.status_code == 201
    assert response.get_json()["user"]["role"] == "student"


def test_register_rejects_admin_role(client):
    assert register(client, role="admin").status_code == 400


def test_register_requires_all_fields(client):
    assert register(client, email="").status_code == 400


def test_register_duplicate(client):
    register(client)
    assert register(client).status_code == 409


def test_login_sets_cookie_and_returns_token(client, student):
    response = client.post("/api/auth/login", json={"username_or_email": student.email, "password": "password123"})

    assert response.status_code == 200
    body = response.get_json()
    assert body["token"]
    assert body["user"]["username"] == student.username
    assert "access_token=" in response.headers["Set-Cookie"]


def test_login_wrong_password(client, student):
    response = client.post("/api/auth/login", json={"username_or_email": student.username, "password": "nope"})
    assert response.status_code == 401


def test_check_auth_with_bearer_token(client, student):
    response = client.get("/api/auth/check-auth", headers=auth_header(student))

    assert response.status_code == 200
    assert response.get_json()["user"]["id"] == student.id


def test_check_auth_rejects_garbage(client):
    assert client.get("/api/auth/check-auth").status_code == 401
    response = client.get("/api/auth/check-auth", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401


def test_protected_route_requires_token(client, app):
    make_user("someone")
    assert client.get("/api/student/xp").status_code == 401


def test_logout_clears_cookie(client):
    response = client.post("/api/auth/logout")
    assert response.status_code == 200
    assert "access_token=;" in response.headers["Set-Cookie"]
