from tests.conftest import make_user


def test_onboard_as_teacher(client, db):
    user_id, headers = make_user(db, "farah@example.com")
    response = client.post("/api/profiles/teacher", headers=headers, json={
        "full_name": "  Farah  ",
        "school": "SMK Damansara",
        "subjects": ["Chemistry", " Biology "],
    })
    assert response.status_code == 201
    body = response.json()
    assert body["role"] == "teacher"
    assert body["name"] == "Farah"
    assert body["extras"]["subjects"] == ["Chemistry", "Biology"]
    assert db.rows("teacher_profiles")[0]["user_id"] == user_id


def test_blank_subject_is_rejected(client, db):
    _, headers = make_user(db, "blank@example.com")
    response = client.post("/api/profiles/student", headers=headers, json={
        "full_name": "Blank", "subjects": ["Math", "  "],
    })
    assert response.status_code == 422
    assert db.rows("user_roles") == []


def test_second_role_conflicts(client, db, student):
    _, headers = student
    response = client.post("/api/profiles/volunteer", headers=headers, json={"full_name": "Siti"})
    assert response.status_code == 409
    assert response.json()["detail"] == "User already registered as student"


def test_same_role_again_updates_profile(client, db, student):
    _, headers = student
    response = client.post("/api/profiles/student", headers=headers, json={
        "full_name": "Siti Aminah", "subjects": ["Statistics"],
    })
    assert response.status_code == 201
    assert len(db.rows("user_roles")) == 1
    assert db.rows("student_profiles")[0]["subjects"] == ["Statistics"]


def test_volunteer_profile_exposes_skills_as_subjects(client, volunteer):
    _, headers = volunteer
    body = client.get("/api/profiles/me", headers=headers).json()
    assert body["role"] == "volunteer"
    assert body["extras"]["subjects"] == ["Calculus"]
    assert body["bio"] == "Tutor"


def test_update_profile_only_touches_role_columns(client, db, student):
    user_id, headers = student
    response = client.put("/api/profiles/me", headers=headers, json={
        "name": "Siti A.", "age": 21, "mbti": "ENFP",
        "extras": {"goals": "Dean's list", "skills": ["ignored"]},
    })
    assert response.status_code == 200
    body = response.json()
    assert body["name"] == "Siti A."
    assert body["extras"]["age"] == 21
    assert body["extras"]["mbti"] == "ENFP"
    assert body["bio"] == "Dean's list"
    assert "skills" not in db.rows("student_profiles")[0]


def test_profile_missing_before_onboarding(client, db):
    _, headers = make_user(db, "fresh@example.com")
    assert client.get("/api/profiles/me", headers=headers).status_code == 404
    assert client.get("/api/profiles/me/role", headers=headers).json()["role"] is None


def test_volunteer_subjects_update_skills(client, db, volunteer):
    _, headers = volunteer
    response = client.put("/api/profiles/me", headers=headers, json={"extras": {"subjects": ["Calculus", "Statistics"]}})
    assert response.status_code == 200
    assert response.json()["extras"]["subjects"] == ["Calculus", "Statistics"]
    row = db.rows("volunteer_profiles")[0]
    assert row["skills"] == ["Calculus", "Statistics"]
    assert "subjects" not in row

    assert client.get("/api/profiles/me", headers=headers).json()["extras"]["subjects"] == ["Calculus", "Statistics"]
