import json
from datetime import date, timedelta


def test_project_crud(client, db, student):
    _, headers = student
    created = client.post("/api/academic/projects", headers=headers, json={
        "title": "Compiler assignment",
        "subject": "Compilers",
        "due_date": (date.today() + timedelta(days=5)).isoformat(),
        "priority": "high",
        "estimated_hours": 12,
    })
    assert created.status_code == 201
    project = created.json()
    assert project["actual_hours"] == 0
    assert project["status"] == "not_started"

    updated = client.put(f"/api/academic/projects/{project['id']}", headers=headers, json={"status": "in_progress"})
    assert updated.json()["status"] == "in_progress"

    in_progress = client.get("/api/academic/projects?status=in_progress", headers=headers).json()
    assert [p["id"] for p in in_progress] == [project["id"]]
    assert client.get("/api/academic/projects?status=completed", headers=headers).json() == []

    assert client.delete(f"/api/academic/projects/{project['id']}", headers=headers).status_code == 204
    assert db.rows("academic_projects") == []


def test_projects_belong_to_owner(client, student, volunteer):
    _, student_headers = student
    _, volunteer_headers = volunteer
    project_id = client.post("/api/academic/projects", headers=student_headers, json={"title": "Essay"}).json()["id"]

    response = client.put(f"/api/academic/projects/{project_id}", headers=volunteer_headers, json={"title": "Mine"})
    assert response.status_code == 404
    assert client.delete(f"/api/academic/projects/{project_id}", headers=volunteer_headers).status_code == 404


def test_user_without_role_cannot_write(client, db):
    from tests.conftest import make_user
    _, headers = make_user(db, "norole@example.com")
    response = client.post("/api/academic/projects", headers=headers, json={"title": "Essay"})
    assert response.status_code == 403
    assert response.json()["detail"] == "Insufficient permissions. Required: academic:write"


def test_study_plans_window(client, student):
    _, headers = student
    for offset, task in ((1, "Read chapter 3"), (3, "Past year paper"), (20, "Final revision")):
        response = client.post("/api/academic/study-plans", headers=headers, json={
            "planned_date": (date.today() + timedelta(days=offset)).isoformat(),
            "duration_minutes": 60,
            "task_description": task,
        })
        assert response.status_code == 201

    week = client.get("/api/academic/study-plans", headers=headers).json()
    assert [p["task_description"] for p in week] == ["Read chapter 3", "Past year paper"]

    month = client.get("/api/academic/study-plans?days=30", headers=headers).json()
    assert len(month) == 3

    plan_id = week[0]["id"]
    done = client.put(f"/api/academic/study-plans/{plan_id}", headers=headers, json={
        "completed": True, "actual_duration": 75, "productivity_score": 8,
    })
    assert done.json()["completed"] is True
    assert done.json()["productivity_score"] == 8


def test_context_combines_projects_and_plans(client, student):
    _, headers = student
    client.post("/api/academic/projects", headers=headers, json={"title": "Thesis"})
    client.post("/api/academic/study-plans", headers=headers, json={
        "planned_date": date.today().isoformat(), "duration_minutes": 30, "task_description": "Outline",
    })
    body = client.get("/api/academic/context", headers=headers).json()
    assert [p["title"] for p in body["projects"]] == ["Thesis"]
    assert [p["task_description"] for p in body["upcoming_plans"]] == ["Outline"]


def test_quick_check_url_heuristics_only(client, student, openrouter):
    _, headers = student
    response = client.post("/api/academic/quick-check-url", headers=headers, json={"url": "https://www.bbc.com/news/x"})
    assert response.json() == {"score": 75, "category": "news", "reasoning": "Established news organization"}
    assert openrouter.requests == []


def test_analyze_resource_scores_intended_use(client, student, openrouter):
    _, headers = student
    openrouter.reply = json.dumps({
        "credibility": "high",
        "reasoning": "Vendor release notes",
        "breakdown": {"officialness": 0.9, "evidence_rigor": 0.3, "independence": 0.2, "verifiability": 0.8},
    })
    response = client.post("/api/academic/analyze-resource", headers=headers, json={
        "content": "We are launching version 2.0 today",
        "source_url": "https://example.com/blog/v2",
        "use_case": "academic_evidence",
    })
    body = response.json()
    assert body["credibility"] == "low"
    assert body["credibility_by_use"]["vendor_announcement"] == "high"
    assert body["credibility_by_use"]["technical_doc"] == "high"


def test_generate_study_plan_route_falls_back_to_baseline(client, student, openrouter):
    _, headers = student
    openrouter.status_code = 503
    due = (date.today() + timedelta(days=4)).isoformat()
    response = client.post("/api/academic/generate-study-plan", headers=headers, json={
        "project_title": "Networking lab", "due_date": due, "estimated_hours": 5,
    })
    assert response.status_code == 200
    body = response.json()
    assert body["daily_tasks"][0]["task"] == "Planning & outline: Networking lab"
    assert len(openrouter.requests) == 3
