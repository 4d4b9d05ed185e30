import pytest
from fastapi.testclient import TestClient

from lumos.database.supabase_client import get_supabase
from lumos.main import app

from lumos.modules.resources.service import format_duration, parse_clock, sanitize_query
from tests.conftest import make_user
from tests.fakes import FakeSupabase


@pytest.mark.parametrize("seconds,label", [(0, "0:00"), (75, "1:15"), (3725, "1:02:05"), (-4, "0:00")])
def test_format_duration(seconds, label):
    assert format_duration(seconds) == label


def test_parse_clock_and_sanitize():
    assert parse_clock("1:02:03") == 3723
    assert parse_clock("12:34") == 754
    assert parse_clock(90) == 90
    assert sanitize_query("  limits,  derivatives ") == "limits derivatives"


@pytest.fixture
def catalog(client, teacher):
    _, headers = teacher
    subject = client.post("/api/resources/subjects", headers=headers, json={
        "name": " Mathematics ", "icon": "calculator", "description": "Numbers and calculus",
    }).json()
    limits = client.post("/api/resources/topics", headers=headers, json={
        "subject_id": subject["id"], "name": "Limits", "description": "Approaching values",
    }).json()
    derivatives = client.post("/api/resources/topics", headers=headers, json={
        "subject_id": subject["id"], "name": "Derivatives", "difficulty_level": "intermediate",
    }).json()
    return {"subject": subject, "limits": limits, "derivatives": derivatives, "headers": headers}


def add_video(client, catalog, topic="limits", **fields):
    body = {"topic_id": catalog[topic]["id"], "title": "Video", "duration": 600}
    body.update(fields)
    return client.post("/api/resources/videos", headers=catalog["headers"], json=body)


def test_catalog_reads_are_public(client, catalog):
    subjects = client.get("/api/resources/subjects").json()
    assert [s["name"] for s in subjects] == ["Mathematics"]

    subject = client.get(f"/api/resources/subjects/{catalog['subject']['id']}").json()
    assert subject["topic_count"] == 2

    topics = client.get(f"/api/resources/subjects/{catalog['subject']['id']}/topics").json()
    assert [t["name"] for t in topics] == ["Derivatives", "Limits"]
    assert topics[0]["difficulty_level"] == "intermediate"


def test_create_video_from_url(client, catalog):
    response = add_video(client, catalog, url="https://youtu.be/riXcZT2ICjA", title="Limits intro", duration=75)
    assert response.status_code == 201
    video = response.json()
    assert video["youtube_id"] == "riXcZT2ICjA"
    assert video["duration_label"] == "1:15"
    assert video["embed_url"] == "https://www.youtube.com/embed/riXcZT2ICjA"
    assert video["thumbnail_url"] == "https://img.youtube.com/vi/riXcZT2ICjA/maxresdefault.jpg"

    topic = client.get(f"/api/resources/topics/{catalog['limits']['id']}").json()
    assert topic["video_count"] == 1
    assert client.get(f"/api/resources/videos/{video['id']}").json()["title"] == "Limits intro"


def test_create_video_validation(client, catalog):
    assert add_video(client, catalog, url="https://example.com/v/1").status_code == 400
    assert add_video(client, catalog).status_code == 422
    missing_topic = client.post("/api/resources/videos", headers=catalog["headers"], json={
        "topic_id": "nope", "youtube_id": "abc", "title": "Video",
    })
    assert missing_topic.status_code == 404


def test_topic_videos_difficulty_filter(client, catalog):
    add_video(client, catalog, youtube_id="a1", title="B basics", difficulty="beginner")
    add_video(client, catalog, youtube_id="a2", title="A advanced", difficulty="advanced")
    url = f"/api/resources/topics/{catalog['limits']['id']}/videos"

    assert [v["title"] for v in client.get(url).json()] == ["A advanced", "B basics"]
    assert [v["title"] for v in client.get(url, params={"difficulty": "beginner"}).json()] == ["B basics"]
    assert client.get(url, params={"difficulty": "expert"}).status_code == 422


def test_paginated_videos(client, db, catalog):
    topic_id = catalog["limits"]["id"]
    db.seed("videos", *[
        {"topic_id": topic_id, "youtube_id": f"v{i}", "title": f"Video {i}", "duration": 60,
         "created_at": f"2025-01-0{i + 1}T00:00:00"}
        for i in range(5)
    ])
    url = f"/api/resources/topics/{topic_id}/videos/page"

    first = client.get(url, params={"page": 1, "page_size": 2}).json()
    assert first["total"] == 5
    assert first["has_more"] is True
    assert [v["title"] for v in first["videos"]] == ["Video 4", "Video 3"]

    last = client.get(url, params={"page": 3, "page_size": 2}).json()
    assert [v["title"] for v in last["videos"]] == ["Video 0"]
    assert last["has_more"] is False


def test_search(client, catalog):
    add_video(client, catalog, youtube_id="x1", title="Epsilon-delta limits", description="Formal definition")
    add_video(client, catalog, topic="derivatives", youtube_id="x2", title="Chain rule")

    results = client.get("/api/resources/search", params={"q": "LIMIT"}).json()
    assert [t["name"] for t in results["topics"]] == ["Limits"]
    assert [v["youtube_id"] for v in results["videos"]] == ["x1"]
    assert results["subjects"] == []

    scoped = client.get("/api/resources/search", params={
        "q": "rule", "topic_id": catalog["limits"]["id"],
    }).json()
    assert scoped["videos"] == []

    assert client.get("/api/resources/search", params={"q": " , "}).json() == {
        "query": "", "subjects": [], "topics": [], "videos": [],
    }


def test_management_needs_teacher(client, student):
    _, headers = student
    response = client.post("/api/resources/subjects", headers=headers, json={"name": "Biology"})
    assert response.status_code == 403
    assert response.json()["detail"] == "Insufficient permissions. Required: resources:manage"


def test_subject_validation(client, teacher):
    _, headers = teacher
    assert client.post("/api/resources/subjects", headers=headers, json={"name": "   "}).status_code == 422


def test_duplicate_subject():
    db = FakeSupabase(unique={"user_roles": ["user_id"], "subjects": ["name"]})
    _, headers = make_user(db, "cikgu@example.com", role="teacher", name="Cikgu")
    app.dependency_overrides[get_supabase] = lambda: db
    client = TestClient(app)

    assert client.post("/api/resources/subjects", headers=headers, json={"name": "Chemistry"}).status_code == 201
    response = client.post("/api/resources/subjects", headers=headers, json={"name": "Chemistry"})
    assert response.status_code == 409
    assert response.json()["detail"] == "Subject already exists"


def test_missing_subject(client):
    assert client.get("/api/resources/subjects/unknown").status_code == 404
