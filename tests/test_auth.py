from tests.conftest import make_user


def test_signup_with_profile_onboards_immediately(client, db):
    response = client.post("/api/auth/signup", json={
        "email": "aina@example.com",
        "password": "secret123",
        "role": "student",
        "profile": {"full_name": "Aina", "subjects": ["Physics"], "goals": "Pass finals"},
    })
    assert response.status_code == 201
    body = response.json()
    assert body["role"] == "student"
    assert body["access_token"]
    assert body["needs_email_confirm"] is False

    assert db.rows("user_roles")[0]["role_id"] == "student"
    assert db.rows("student_profiles")[0]["full_name"] == "Aina"
    assert "pending_profile" not in db.auth.users["aina@example.com"].user_metadata


def test_signup_waiting_for_confirmation_parks_profile(client, db):
    db.auth.confirm_email = True
    response = client.post("/api/auth/signup", json={
        "email": "ravi@example.com",
        "password": "secret123",
        "role": "volunteer",
        "profile": {"full_name": "Ravi", "skills": ["Linear Algebra"]},
    })
    assert response.status_code == 201
    assert response.json()["needs_email_confirm"] is True
    assert db.rows("user_roles") == []

    # first sign-in writes the parked profile
    signin = client.post("/api/auth/signin", json={"email": "ravi@example.com", "password": "secret123"})
    assert signin.status_code == 200
    assert db.rows("user_roles")[0]["role_id"] == "volunteer"
    assert db.rows("volunteer_profiles")[0]["skills"] == ["Linear Algebra"]
    assert "pending_profile" not in db.auth.users["ravi@example.com"].user_metadata


def test_duplicate_signup_is_rejected(client, db):
    db.auth.add_user("taken@example.com")
    response = client.post("/api/auth/signup", json={"email": "taken@example.com", "password": "secret123"})
    assert response.status_code == 400
    assert response.json()["detail"] == "User already exists"


def test_signin_with_wrong_password(client, db):
    db.auth.add_user("lee@example.com", password="right-one")
    response = client.post("/api/auth/signin", json={"email": "lee@example.com", "password": "wrong-one"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid email or password"


def test_me_returns_role_permissions_and_context(client, db, student):
    user_id, headers = student
    db.seed("user_preferences", {"user_id": user_id, "preferences": {"language": "Bahasa Melayu"}})

    response = client.get("/api/auth/me", headers=headers)
    assert response.status_code == 200
    body = response.json()
    assert body["id"] == user_id
    assert body["role"] == "student"
    assert "help_requests:create" in body["permissions"]
    assert "tutoring:match" not in body["permissions"]
    assert body["profile"]["name"] == "Siti"
    assert body["preferences"]["language"] == "Bahasa Melayu"
    assert body["recent_messages"] == []


def test_tutor_context_messages_oldest_first(client, db, student):
    user_id, headers = student
    db.seed(
        "messages",
        {"user_id": user_id, "role": "user", "content": "first", "ts": "2025-01-01T00:00:00", "idx": 0},
        {"user_id": user_id, "role": "assistant", "content": "second", "ts": "2025-01-01T00:00:01", "idx": 1},
    )
    body = client.get("/api/auth/tutor-context", headers=headers).json()
    assert [m["content"] for m in body["recent_messages"]] == ["first", "second"]


def test_user_without_role_has_no_permissions(client, db):
    _, headers = make_user(db, "new@example.com")
    body = client.get("/api/auth/me", headers=headers).json()
    assert body["role"] is None
    assert body["permissions"] == []
    assert body["profile"] is None


def test_invalid_token_is_unauthorized(client):
    response = client.get("/api/auth/me", headers={"Authorization": "Bearer nope"})
    assert response.status_code == 401


def test_missing_token_is_rejected(client):
    assert client.get("/api/auth/me").status_code in (401, 403)


def test_signout_drops_cached_user(client, db, student):
    _, headers = student
    assert client.get("/api/auth/me", headers=headers).status_code == 200
    response = client.post("/api/auth/signout", headers=headers)
    assert response.json() == {"message": "Signed out successfully"}
    assert db.auth.signed_out == 1
