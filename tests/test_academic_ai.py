import asyncio
import json
from datetime import date, timedelta

import pytest

from lumos.modules.academic.ai_service import (
    AcademicAIService, apply_use_case, credibility_level, quick_url_heuristics, to_resource_analysis
)
from lumos.modules.academic.schemas import ResourceAnalysis


@pytest.mark.parametrize("url,score,category", [
    ("https://www.cdc.gov/flu/index.html", 90, "government"),
    ("https://www.mohe.gov.my/en/", 90, "government"),
    ("https://fsktm.um.edu.my/research", 85, "academic"),
    ("https://arxiv.org/abs/1706.03762", 85, "academic"),
    ("https://doi.org/10.1145/3368089", 90, "academic"),
    ("https://www.bbc.com/news/technology", 75, "news"),
    ("https://en.wikipedia.org/wiki/Recursion", 70, "unknown"),
    ("https://medium.com/@someone/post", 45, "blog"),
    ("https://example.com/docs/setup/", 60, "commercial"),
    ("https://example.com/blog/launch", 55, "commercial"),
    ("https://example.org/page", 50, "unknown"),
    ("not a url", 30, "unknown"),
])
def test_quick_url_heuristics(url, score, category):
    check = quick_url_heuristics(url)
    assert (check.score, check.category) == (score, category)


def test_credibility_levels():
    assert credibility_level(0.8) == "high"
    assert credibility_level(0.55) == "medium"
    assert credibility_level(0.54) == "low"


def test_model_output_is_normalized():
    analysis = to_resource_analysis({
        "credibility": "very high",
        "key_points": ["peer reviewed", 3],
        "confidence": "0.9",
        "breakdown": {"officialness": 1, "evidence_rigor": "x"},
    })
    assert analysis.credibility == "medium"
    assert analysis.key_points == ["peer reviewed"]
    assert analysis.confidence == 0.6
    assert analysis.breakdown.officialness == 1.0
    assert analysis.breakdown.evidence_rigor == 0.4

    assert to_resource_analysis("garbage").reasoning == "Resource analyzed but formatting failed"


def test_official_vendor_blog_is_credible_for_announcements():
    url = "https://example.com/blog/new-release"
    result = apply_use_case(ResourceAnalysis(), url, quick_url_heuristics(url), "vendor_announcement")
    assert result.credibility == "high"
    assert result.credibility_by_use["academic_evidence"] == "low"
    assert result.credibility_by_use["technical_doc"] == "medium"
    assert result.reasoning.endswith("(Official vendor blog: high credibility for announcements.)")


def test_analyze_resource_uses_model_json(openrouter):
    openrouter.reply = "```json\n" + json.dumps({
        "credibility": "high",
        "reasoning": "Peer-reviewed survey",
        "key_points": ["Transformers"],
        "confidence": 0.9,
        "breakdown": {"officialness": 0.7, "evidence_rigor": 0.9, "independence": 0.8, "verifiability": 0.9},
    }) + "\n```"
    service = AcademicAIService(openrouter.client())

    result = asyncio.run(service.analyze_resource("Attention is all you need ..."))
    assert result.credibility == "high"
    assert result.key_points == ["Transformers"]
    assert openrouter.requests[0]["temperature"] == 0.3
    assert "=== DATA BEGIN ===" in openrouter.requests[0]["messages"][1]["content"]


def test_analyze_resource_falls_back_after_retries(openrouter):
    openrouter.status_code = 500
    service = AcademicAIService(openrouter.client())

    result = asyncio.run(service.analyze_resource("some text", retries=1))
    assert result.reasoning == "Analysis temporarily unavailable"
    assert result.confidence == 0.3
    assert len(openrouter.requests) == 2


def test_generate_study_plan_rejects_malformed_model_plan(openrouter):
    openrouter.reply = '{"daily_tasks": [], "milestones": [], "tips": []}'
    service = AcademicAIService(openrouter.client())
    today = date(2025, 1, 6)

    plan = asyncio.run(service.generate_study_plan("Thesis", today + timedelta(days=10), 12, retries=0, today=today))
    assert plan.daily_tasks
    assert plan.daily_tasks[0].task == "Planning & outline: Thesis"


def test_generate_study_plan_accepts_valid_model_plan(openrouter):
    openrouter.reply = json.dumps({
        "daily_tasks": [{"date": "2025-01-06", "task": "Outline chapters", "duration": 90, "priority": "medium"}],
        "milestones": ["Outline done"],
        "tips": ["Start early"],
    })
    service = AcademicAIService(openrouter.client())
    today = date(2025, 1, 6)

    plan = asyncio.run(service.generate_study_plan("Thesis", today + timedelta(days=10), 12, today=today))
    assert [t.task for t in plan.daily_tasks] == ["Outline chapters"]
    assert plan.milestones == ["Outline done"]


def test_learning_analysis_defaults_when_model_is_unreadable(openrouter):
    openrouter.reply = "I cannot answer that"
    service = AcademicAIService(openrouter.client())

    analysis = asyncio.run(service.analyze_learning_needs(["What is Big-O?"], retries=0))
    assert analysis.knowledge_gaps == ["General study skills"]
    assert analysis.suggested_resources[0].title == "Khan Academy"


def test_quick_check_prefers_model_score(openrouter):
    openrouter.reply = '{"score": 120, "category": "academic", "reasoning": "University press"}'
    service = AcademicAIService(openrouter.client())

    check = asyncio.run(service.quick_credibility_check("https://example.org/page", analyze_content=True))
    assert (check.score, check.category) == (100, "academic")

    plain = asyncio.run(service.quick_credibility_check("https://example.org/page"))
    assert plain.score == 50
    assert len(openrouter.requests) == 1
