# tests/conftest.py
import os, sys
# put the project root (the folder holding "shopflow") first on sys.path
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel

from shopflow.server.db.session import init_db, make_engine
from shopflow.server.schemas.inspection import InspectionSection
from shopflow.server.settings.config import settings
from shopflow.services.session_cache import InspectionSessionCache


class FakeAIClient:
    """Stands in for AIClient: fixed answers, records what it was asked."""

    def __init__(self, hours=None, sections=None, raises=None):
        self.hours = hours
        self.sections = sections or []
        self.raises = raises
        self.labor_calls = []
        self.prompts = []

    def estimate_labor_hours(self, complaint, job_type):
        self.labor_calls.append((complaint, job_type))
        if self.raises is not None:
            raise self.raises
        if callable(self.hours):
            return self.hours(complaint, job_type)
        return self.hours

    def generate_inspection_list(self, prompt):
        self.prompts.append(prompt)
        return [InspectionSection.model_validate(s) for s in self.sections]


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text=""):
        self.status_code = status_code
        self._payload = payload
        self.text = text

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


class FakeHttp:
    """requests-style post() returning a canned response (or raising)."""

    def __init__(self, response=None, raises=None):
        self.response = response
        self.raises = raises
        self.calls = []

    def post(self, url, headers=None, json=None, timeout=None):
        self.calls.append({"url": url, "headers": headers, "json": json, "timeout": timeout})
        if self.raises is not None:
            raise self.raises
        return self.response


def chat_response(content, status_code=200):
    return FakeResponse(status_code, {"choices": [{"message": {"content": content}}]})


@pytest.fixture
def engine():
    eng = make_engine("sqlite://", echo=False)
    init_db(eng)
    yield eng
    SQLModel.metadata.drop_all(eng)


@pytest.fixture
def session(engine):
    with Session(engine) as s:
        yield s


@pytest.fixture
def fake_ai():
    return FakeAIClient()


@pytest.fixture
def session_cache():
    return InspectionSessionCache(ttl_seconds=60, max_entries=10)


@pytest.fixture
def client(engine, fake_ai, session_cache):
    from shopflow.server.api.deps import get_ai_client, get_session_cache
    from shopflow.server.db.session import get_session
    from shopflow.server.main import app

    def _session():
        with Session(engine) as s:
            yield s

    app.dependency_overrides[get_session] = _session
    app.dependency_overrides[get_ai_client] = lambda: fake_ai
    app.dependency_overrides[get_session_cache] = lambda: session_cache

    c = TestClient(app)
    c.headers.update({"X-SHOPFLOW-API-KEY": settings.api_key})
    yield c
    app.dependency_overrides.clear()
