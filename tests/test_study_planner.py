from datetime import date, timedelta

from lumos.modules.academic.study_planner import build_deterministic_plan, validate_study_plan_structure

MONDAY = date(2025, 1, 6)


def test_tight_deadline_plan_is_all_high_priority():
    plan = build_deterministic_plan("Lab report", MONDAY + timedelta(days=3), 6, today=MONDAY)

    assert [t["priority"] for t in plan["daily_tasks"]] == ["high", "high", "high"]
    assert all(30 <= t["duration"] <= 180 for t in plan["daily_tasks"])
    assert plan["daily_tasks"][0]["task"] == "Planning & outline: Lab report"
    assert plan["daily_tasks"][0]["date"] == MONDAY.isoformat()
    assert plan["tips"][0] == "This is a tight timeline - focus on core requirements first"
    assert len(plan["milestones"]) == 2


def test_long_plan_skips_sundays_and_caps_tips():
    plan = build_deterministic_plan("Thesis", MONDAY + timedelta(days=28), 40, today=MONDAY)

    dates = [date.fromisoformat(t["date"]) for t in plan["daily_tasks"]]
    assert dates
    assert all(d.weekday() != 6 for d in dates)
    assert plan["daily_tasks"][0]["priority"] == "low"
    assert plan["tips"][0] == "Break large tasks into smaller 2-3 hour chunks"
    assert len(plan["tips"]) == 6
    assert len(plan["milestones"]) == 6


def test_short_plan_keeps_sundays():
    saturday = date(2025, 1, 11)
    plan = build_deterministic_plan("Quiz prep", saturday + timedelta(days=5), 3, today=saturday)
    assert any(date.fromisoformat(t["date"]).weekday() == 6 for t in plan["daily_tasks"])


def test_past_due_date_still_yields_one_day():
    plan = build_deterministic_plan("Late essay", MONDAY - timedelta(days=2), 2, today=MONDAY)
    assert len(plan["daily_tasks"]) == 1
    assert plan["daily_tasks"][0]["priority"] == "high"


def test_baseline_passes_validation():
    plan = build_deterministic_plan("Thesis", MONDAY + timedelta(days=10), 12, today=MONDAY)
    assert validate_study_plan_structure(plan)


def test_validation_rejects_malformed_plans():
    task = {"date": "2025-01-06", "task": "Read", "duration": 60, "priority": "high"}
    good = {"daily_tasks": [task], "milestones": [], "tips": []}
    assert validate_study_plan_structure(good)

    assert not validate_study_plan_structure(None)
    assert not validate_study_plan_structure({"daily_tasks": [], "milestones": [], "tips": []})
    assert not validate_study_plan_structure({"daily_tasks": [task], "tips": []})
    assert not validate_study_plan_structure({**good, "daily_tasks": [{**task, "priority": "urgent"}]})
    assert not validate_study_plan_structure({**good, "daily_tasks": [{**task, "duration": 0}]})
    assert not validate_study_plan_structure({**good, "daily_tasks": [{**task, "duration": True}]})
    assert not validate_study_plan_structure({**good, "daily_tasks": [{**task, "task": ""}]})
