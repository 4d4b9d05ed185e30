import json
from typing import Dict, List, Optional

import httpx
import pytest
from fastapi.testclient import TestClient

from lumos.core.rate_limit import limiter
from lumos.database.supabase_client import get_supabase, get_service_supabase
from lumos.main import app
from lumos.modules.auth.service import clear_auth_cache
from lumos.modules.llm.openrouter_client import OpenRouterClient
from lumos.modules.llm.routes import get_openrouter_client
from lumos.modules.voice import session_registry
from tests.fakes import FakeSupabase


class ScriptedOpenRouter:
    """MockTransport handler: answers chat completions with a canned reply"""

    def __init__(self):
        self.reply = "Hello from Lumos."
        self.status_code = 200
        self.error_body = '{"error": "boom"}'
        self.requests: List[Dict] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        payload = json.loads(request.content.decode("utf-8"))
        self.requests.append(payload)
        if self.status_code != 200:
            return httpx.Response(self.status_code, text=self.error_body)
        if payload.get("stream"):
            words = self.reply.split(" ")
            lines = []
            for i, word in enumerate(words):
                token = word if i == len(words) - 1 else word + " "
                lines.append("data: " + json.dumps({"choices": [{"delta": {"content": token}}]}))
            lines.append("data: [DONE]")
            return httpx.Response(200, text="\n\n".join(lines) + "\n\n", headers={"content-type": "text/event-stream"})
        return httpx.Response(200, json={
            "id": "gen-1",
            "model": payload.get("model"),
            "choices": [{"message": {"role": "assistant", "content": self.reply}}],
        })

    def client(self, api_key: Optional[str] = "test-key") -> OpenRouterClient:
        return OpenRouterClient(api_key=api_key, transport=httpx.MockTransport(self))


@pytest.fixture(autouse=True)
def _reset_state():
    limiter.enabled = False
    clear_auth_cache()
    session_registry.clear()
    yield
    app.dependency_overrides.clear()
    clear_auth_cache()
    session_registry.clear()


@pytest.fixture
def db() -> FakeSupabase:
    return FakeSupabase()


@pytest.fixture
def openrouter() -> ScriptedOpenRouter:
    return ScriptedOpenRouter()


@pytest.fixture
def client(db, openrouter):
    app.dependency_overrides[get_supabase] = lambda: db
    app.dependency_overrides[get_service_supabase] = lambda: db
    app.dependency_overrides[get_openrouter_client] = lambda: openrouter.client()
    return TestClient(app)


def make_user(db: FakeSupabase, email: str, role: Optional[str] = None, name: str = "Test User", **profile):
    """Create an auth user with a bearer token, optionally with a role and profile row"""
    token = f"token-{email}"
    user = db.auth.add_user(email, token=token)
    if role:
        db.seed("user_roles", {"user_id": user.id, "role_id": role})
        table = {"student": "student_profiles", "volunteer": "volunteer_profiles", "teacher": "teacher_profiles"}[role]
        db.seed(table, {"user_id": user.id, "full_name": name, **profile})
    return user.id, {"Authorization": f"Bearer {token}"}


@pytest.fixture
def student(db):
    return make_user(db, "siti@example.com", "student", name="Siti", subjects=["Calculus"], goals="Pass SPM")


@pytest.fixture
def volunteer(db):
    return make_user(db, "arif@example.com", "volunteer", name="Arif", skills=["Calculus"], experience="Tutor")


@pytest.fixture
def teacher(db):
    return make_user(db, "mei@example.com", "teacher", name="Mei Ling", subjects=["Physics"])
