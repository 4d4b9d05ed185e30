"""Deterministic study plan; the baseline the AI planner refines, and the answer when it can't."""
import math
from datetime import date, timedelta
from typing import Any, Dict, List, Optional

PHASES = [
    ("Planning & outline", 0.12),
    ("Research & literature review", 0.28),
    ("Method development", 0.18),
    ("Implementation & analysis", 0.28),
    ("Writing & revision", 0.12),
    ("Final review & buffer", 0.02),
]

MILESTONES = [
    "Project scope and outline completed",
    "Literature review and sources gathered",
    "Methodology/approach finalized",
    "Core implementation/analysis finished",
    "First complete draft written",
    "Final review and submission ready",
]

BASE_TIPS = [
    "Block dedicated time slots in your calendar for deep work",
    "Use a reference manager (Zotero, Mendeley) to organize sources",
    "Write rough drafts first, perfect later - momentum beats perfection",
    "Back up your work to cloud storage regularly",
    "Take breaks every 45-90 minutes to maintain focus",
    "Start each session by reviewing what you accomplished last time",
]

MIN_SESSION_MINUTES = 30
MAX_SESSION_MINUTES = 180
URGENT_DAYS = 3
SUNDAY = 6


def build_deterministic_plan(
    project_title: str,
    due_date: date,
    estimated_hours: float,
    today: Optional[date] = None,
) -> Dict[str, List[Any]]:
    today = today or date.today()
    days = max(1, (due_date - today).days)
    work_days_per_week = min(6, days)
    total_work_days = math.ceil(days / 7 * work_days_per_week)
    base_minutes = math.floor(estimated_hours * 60 / total_work_days)
    remaining = estimated_hours * 60

    daily_tasks = []
    for i in range(days):
        current = today + timedelta(days=i)
        # lighter schedule: Sundays off unless the deadline is within a week
        if current.weekday() == SUNDAY and days > 7:
            continue

        phase_index = min(math.floor(i / days * len(PHASES)), len(PHASES) - 1)
        phase_name, weight = PHASES[phase_index]
        minutes = math.floor(base_minutes * weight * len(PHASES))
        urgent = days - i <= URGENT_DAYS
        if urgent:
            minutes = math.floor(minutes * 1.3)
        minutes = int(max(MIN_SESSION_MINUTES, min(minutes, remaining, MAX_SESSION_MINUTES)))
        remaining -= minutes

        if urgent or phase_index >= 4:
            priority = "high"
        elif phase_index <= 1:
            priority = "low"
        else:
            priority = "medium"

        daily_tasks.append({
            "date": current.isoformat(),
            "task": f"{phase_name}: {project_title}",
            "duration": minutes,
            "priority": priority,
        })
        if remaining <= 0:
            break

    extra_tips = []
    if estimated_hours > 20:
        extra_tips.append("Break large tasks into smaller 2-3 hour chunks")
        extra_tips.append("Consider working with a study partner or accountability buddy")
    if days <= 7:
        extra_tips.append("This is a tight timeline - focus on core requirements first")
        extra_tips.append("Prepare an outline before diving into detailed work")
    # situation-specific tips survive the cap of six
    tips = extra_tips + BASE_TIPS

    milestone_count = min(6, math.ceil(len(PHASES) * days / 14))
    return {
        "daily_tasks": daily_tasks,
        "milestones": MILESTONES[:milestone_count],
        "tips": tips[:6],
    }


def validate_study_plan_structure(plan: Any) -> bool:
    """True when a (model-produced) plan has the baseline's shape"""
    if not isinstance(plan, dict):
        return False
    tasks = plan.get("daily_tasks")
    if not isinstance(tasks, list) or not tasks:
        return False
    if not isinstance(plan.get("milestones"), list) or not isinstance(plan.get("tips"), list):
        return False
    for task in tasks:
        if not isinstance(task, dict) or not task.get("date") or not task.get("task"):
            return False
        duration = task.get("duration")
        if isinstance(duration, bool) or not isinstance(duration, (int, float)) or duration <= 0:
            return False
        if task.get("priority") not in ("high", "medium", "low"):
            return False
    return True
