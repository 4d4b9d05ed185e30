from lumos.scripts import cleanup_sessions, seed_catalog
from tests.fakes import FakeSupabase


def test_bundled_catalog_seeds():
    db = FakeSupabase()
    counts = seed_catalog.seed_catalog(db, seed_catalog.load_catalog())
    assert counts == {"subjects": 2, "topics": 4, "videos": 5}

    essence = next(v for v in db.rows("videos") if v["youtube_id"] == "WUvTyaaNkzM")
    assert essence["duration"] == 17 * 60 + 5
    calculus = next(t for t in db.rows("topics") if t["name"] == "Calculus")
    assert essence["topic_id"] == calculus["id"]


def test_seeding_twice_updates_in_place():
    db = FakeSupabase()
    catalog = {"subjects": {"maths": {
        "name": "Mathematics", "description": "v1",
        "topics": {"limits": {"name": "Limits", "videos": [
            {"title": "Limits", "youtube_id": "abc", "duration": "1:15"},
            {"title": "No id", "url": "https://example.com/x"},
        ]}},
    }}}
    assert seed_catalog.seed_catalog(db, catalog) == {"subjects": 1, "topics": 1, "videos": 1}

    catalog["subjects"]["maths"]["description"] = "v2"
    seed_catalog.seed_catalog(db, catalog)
    assert len(db.rows("subjects")) == 1
    assert db.rows("subjects")[0]["description"] == "v2"
    assert len(db.rows("videos")) == 1
    assert db.rows("videos")[0]["duration"] == 75


def test_cleanup_sessions_cli(monkeypatch):
    db = FakeSupabase()
    db.seed("sessions",
            {"user_id": "u1", "started_at": "2020-01-01T00:00:00"},
            {"user_id": "u1", "started_at": "2999-01-01T00:00:00"})
    monkeypatch.setattr(cleanup_sessions, "get_service_supabase", lambda: db)

    cleanup_sessions.main(["--days", "7"])
    assert [s["started_at"] for s in db.rows("sessions")] == ["2999-01-01T00:00:00"]
