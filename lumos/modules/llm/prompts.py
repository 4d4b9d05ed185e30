"""Tutor prompt construction and the cheap text heuristics that steer each turn."""
import math
import re
from datetime import datetime
from typing import Any, Dict, List, Optional

from lumos.modules.preferences.schemas import TutorPreferences

SYSTEM_PROMPT = """You are Lumos, an AI tutor for university students in Malaysia. You help with coursework and university-level subjects. Keep answers structured, educational and focused on learning outcomes.

CRITICAL
- Always answer in the student's language.
- Stay on university-level academic topics: Computer Science, Engineering, Mathematics, Sciences, Business, Humanities.
- Technical material (Linux, programming, systems administration) is coursework for CS/IT students.
- When a document is shared, work from its actual content and build a learning path from it.
- No chit-chat and no therapy. Stay in tutoring mode.

GOALS
- Build mastery through clear explanations and practice.
- Tie concepts to real-world use and career relevance.
- Find and correct misconceptions.
- Encourage critical thinking.

DEFAULT OUTPUT FORMAT (use exactly these sections)
1) Diagnose
-- One line on what the student is stuck on or what the question asks.
2) Teach
-- 3 to 6 short bullets or numbered steps, each saying why it is done.
3) Example
-- One small, fully worked example (math, code or text).
4) Check
-- One quick question that confirms understanding.
5) Next
-- One tiny practice task or the next concept to learn.

DOCUMENT ANALYSIS FORMAT (when a document is shared)
1) Content Overview
2) Learning Topics, ordered from beginner to advanced
3) Learning Path with prerequisites and difficulty per topic
4) Practice Questions, 2 or 3 per topic at different difficulty levels
5) Next Steps

METHOD
- Start simple, add detail only when needed.
- Prefer concrete numbers and snippets over abstraction.
- Define terms the first time they appear.
- If still unclear, give another explanation in the same format.

WRONG ANSWERS
- State the exact mistake and the correct idea.
- Say in one or two lines why it matters.
- Give a micro-prompt to test the fix and verify it in "Check".

STYLE
- Short, specific, structured. No long paragraphs.
- Headings and bullets; light LaTeX or code when it helps.
- End every answer with "Check" and "Next".
- Ask at most one clarifying question, only when you cannot proceed otherwise.

BOUNDARIES
- Do not invent facts. If unsure, say so and state your assumption.
- Keep to the student's academic goal."""

DIRECTNESS_NOTES = {
    1: "Be very gentle and supportive. Avoid confrontation.",
    2: "Be gentle but occasionally offer mild challenges.",
    3: "Be balanced - mix support with appropriate challenges.",
    4: "Be candid but kind. Don't shy away from direct feedback.",
    5: "Be very direct and honest. Call out excuses respectfully.",
}

RESPONSE_STYLE_DIRECTNESS = {
    "direct": 5,
    "academic": 4,
    "encouraging": 2,
}

CHALLENGE_TRIGGERS = [
    # self-limiting beliefs
    re.compile(r"\b(i can't|i'm just bad at|i'll never|i'm not good at)\b", re.I),
    re.compile(r"\b(i'm\s+\w*\s*lazy|lazy)\b", re.I),
    re.compile(r"\b(it's\s+\w*\s*difficult|difficult)\b", re.I),
    re.compile(r"\b(i don't understand|i can't understand)\b", re.I),
    # procrastination
    re.compile(r"\b(i'll do it later|i don't have time|it's too hard|i'm too busy|i'll start tomorrow|i'll study later)\b", re.I),
    # blame-shifting
    re.compile(r"\b(whoever\s+\w+)\b", re.I),
    re.compile(r"\b(the teacher|the professor|the textbook|the material)\b", re.I),
    re.compile(r"\b(it's the fault of|it's because of)\b", re.I),
    re.compile(r"\b(is the wrong|is bad|is terrible)\b", re.I),
    # negative self-talk
    re.compile(r"\b(i'm hopeless|i'm useless|i'm stupid|i'm dumb|i'm not smart enough|i'm not good enough)\b", re.I),
    # perfectionism
    re.compile(r"\b(it has to be perfect|i must|it needs to be)\b", re.I),
    # comparison
    re.compile(r"\b(everyone else is better|i'm not as good as|others are smarter)\b", re.I),
    # absolutes
    re.compile(r"\b(always|never|everyone|nobody|everything|nothing)\b", re.I),
]

HIGH_CONFIDENCE = [
    re.compile(r"\b(fact|proven|research shows|studies show|evidence)\b", re.I),
    re.compile(r"\b(i know|i'm certain|definitely|absolutely)\b", re.I),
]

LOW_CONFIDENCE = [
    re.compile(r"\b(maybe|perhaps|i think|i guess|possibly)\b", re.I),
    re.compile(r"\b(i'm not sure|i don't know|uncertain)\b", re.I),
]

EMOTION_KEYWORDS = [
    ("stressed", ("stressed", "anxious", "worried")),
    ("sad", ("sad", "depressed", "lonely")),
    ("happy", ("happy", "excited", "good")),
    ("angry", ("angry", "frustrated", "mad")),
]


def resolve_directness(prefs: Optional[TutorPreferences]) -> int:
    if prefs is None:
        return 3
    if prefs.directness:
        return prefs.directness
    return RESPONSE_STYLE_DIRECTNESS.get(prefs.response_style, 3)


def detect_challenge_triggers(message: str) -> bool:
    return any(trigger.search(message) for trigger in CHALLENGE_TRIGGERS)


def estimate_confidence(message: str) -> float:
    if any(indicator.search(message) for indicator in HIGH_CONFIDENCE):
        return 0.8
    if any(indicator.search(message) for indicator in LOW_CONFIDENCE):
        return 0.3
    return 0.6


def analyze_emotional_state(history: List[Dict[str, str]]) -> str:
    """Keyword read of the last three user turns"""
    recent = [m["content"].lower() for m in history if m.get("role") == "user"][-3:]
    text = " ".join(recent)
    for emotion, keywords in EMOTION_KEYWORDS:
        if any(keyword in text for keyword in keywords):
            return emotion
    return "neutral"


def days_until(due_date: Any, now: Optional[datetime] = None) -> Optional[int]:
    if not due_date:
        return None
    now = now or datetime.utcnow()
    due = due_date if isinstance(due_date, datetime) else datetime.fromisoformat(str(due_date))
    if due.tzinfo is not None:
        due = due.replace(tzinfo=None)
    return math.ceil((due - now).total_seconds() / 86400)


def build_academic_context(academic_context: Optional[Dict[str, Any]], now: Optional[datetime] = None) -> str:
    if not academic_context or not academic_context.get("projects"):
        return ""
    active = [p for p in academic_context["projects"] if p.get("status") != "completed"]
    details = []
    urgent = []
    for project in active:
        line = f"\"{project['title']}\" ({project.get('subject') or 'No subject'}, {project.get('priority', 'medium')} priority)"
        if project.get("description"):
            line += f" - {project['description']}"
        remaining = days_until(project.get("due_date"), now)
        if remaining is not None:
            line += f" [Due in {remaining} days]"
            if remaining <= 7:
                urgent.append(f"\"{project['title']}\" due {str(project['due_date'])[:10]}")
        details.append(f"• {line}")

    parts = ["", "ACADEMIC CONTEXT:", "Current Projects:", *details]
    if urgent:
        parts.append(f"Urgent Deadlines: {', '.join(urgent)}")
    plans = academic_context.get("upcoming_plans") or []
    if plans:
        parts.append(f"Study Plans: {len(plans)} planned tasks")
    parts.append("You know their projects and can help plan, solve problems or break tasks down.")
    return "\n".join(parts)


def _yes_no(flag: bool) -> str:
    return "Yes" if flag else "No"


def build_preferences_context(prefs: Optional[TutorPreferences]) -> str:
    if prefs is None:
        return ""
    return f"""
STUDENT PREFERENCES:
- Academic Level: {prefs.year} in {prefs.major} at {prefs.university}
- Study Goals: {prefs.study_goals or 'General learning'}
- Subjects: {', '.join(prefs.subjects) or 'Not specified'}
- Learning Style: {prefs.explanation_style}
- Difficulty Level: {prefs.difficulty_start}
- Response Style: {prefs.response_style}
- Language: {prefs.language}
- Confidence Level: {prefs.confidence_level}
- Needs Encouragement: {_yes_no(prefs.need_encouragement)}
- Prefers Step-by-step: {_yes_no(prefs.prefer_step_by_step)}
- Likes Examples: {_yes_no(prefs.like_examples)}

ADAPT YOUR RESPONSE TO:
- Use {prefs.explanation_style} explanations
- Start at {prefs.difficulty_start} level
- Be {prefs.response_style} in tone
- {'Provide extra encouragement and motivation' if prefs.need_encouragement else 'Be direct and efficient'}
- {'Break down complex topics into clear steps' if prefs.prefer_step_by_step else 'Focus on conceptual understanding'}
- {'Include practical examples and analogies' if prefs.like_examples else 'Keep explanations concise and theoretical'}
- Respond in {prefs.language} language
"""


def build_tutor_prompt(
    profile: Optional[Dict[str, Any]] = None,
    prefs: Optional[TutorPreferences] = None,
    academic_context: Optional[Dict[str, Any]] = None,
    language: Optional[str] = None,
) -> str:
    directness = resolve_directness(prefs)
    language = language or (prefs.language if prefs else None) or "auto"
    profile_context = ""
    if profile:
        mbti = (profile.get("extras") or {}).get("mbti") or "Unknown MBTI"
        profile_context = f"\nUser Profile: {profile.get('name') or 'User'} ({mbti})\n"
    return f"""{SYSTEM_PROMPT}

CURRENT SESSION CONTEXT:
Directness Level: {directness}/5 - {DIRECTNESS_NOTES[directness]}
Language: {language}
{profile_context}{build_academic_context(academic_context)}{build_preferences_context(prefs)}

Match the user's preferences, answer in their language, and help with their academic projects when relevant."""


def build_turn_instruction(should_challenge: bool, confidence: float, directness: int) -> str:
    if should_challenge and directness >= 4:
        action = "Action: deliver a candid but kind challenge and a concrete next step."
    elif should_challenge:
        action = "Action: validate briefly, then ask 1 targeted question or give a soft counterexample."
    else:
        action = "Action: be supportive and practical; no challenge this turn."
    return "\n".join([
        "Turn config:",
        f"- Directness: {directness} (1-5)",
        f"- Should challenge: {'yes' if should_challenge else 'no'}",
        f"- Confidence in user claim: {round(confidence * 100)}%",
        action,
        "Always reply in the user's language.",
    ])
