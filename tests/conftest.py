import os

# Must be set before the app modules read their settings
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")
os.environ.setdefault("GEMINI_API_KEY", "test-key")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.db import Base, get_db
from app.gemini_client import get_gemini_client
from app.main import app
from app.routers import personality as personality_router
from app.routers import quiz as quiz_router


class FakeLLM:
    """Stands in for GeminiClient; replays queued answers and records prompts."""

    def __init__(self):
        self.responses = []
        self.prompts = []

    def queue(self, *responses):
        self.responses.extend(responses)

    async def generate(self, prompt, *, json_output=False):
        self.prompts.append((prompt, json_output))
        if not self.responses:
            raise RuntimeError("no fake response queued")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    async def aclose(self):
        pass


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(engine):
    Session = sessionmaker(bind=engine, autocommit=False, autoflush=False, future=True)
    session = Session()
    yield session
    session.close()


@pytest.fixture
def fake_llm():
    return FakeLLM()


@pytest.fixture
def client(engine, fake_llm):
    Session = sessionmaker(bind=engine, autocommit=False, autoflush=False, future=True)

    def override_get_db():
        db = Session()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_gemini_client] = lambda: fake_llm
    yield TestClient(app)
    app.dependency_overrides.clear()
    personality_router._attempts.clear()
    quiz_router._quizzes.clear()


STUDENT = {
    "email": "asha@example.com",
    "password": "secret123",
    "name": "Asha Rao",
    "age": 15,
    "school_name": "Green Valley High",
    "school_board": "CBSE",
    "grade": "10",
}


def register_and_login(client, **overrides):
    data = {**STUDENT, **overrides}
    r = client.post("/auth/register", json=data)
    assert r.status_code == 201, r.text
    r = client.post("/auth/token", data={"username": data["email"], "password": data["password"]})
    assert r.status_code == 200, r.text
    return {"Authorization": f"Bearer {r.json()['access_token']}"}


@pytest.fixture
def auth_headers(client):
    return register_and_login(client)
