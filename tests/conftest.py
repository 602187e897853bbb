import os
import tempfile

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="medlearn-uploads-")
os.environ["SECRET_KEY"] = "test-secret-key"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from medlearn.core.agents import MedicalAIAgent, get_ai_agent
from medlearn.core.stats_cache import stats_cache
from medlearn.db.base import get_db
from medlearn.main import app
from medlearn.models import Base

API = "/api/v1"

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


class FakeChunk:
    def __init__(self, content):
        self.content = content


class FakeLLM:
    """Stands in for the chat model; replies with canned text."""

    def __init__(self, reply="ok"):
        self.reply = reply
        self.calls = []

    def invoke(self, messages):
        self.calls.append(messages)
        if isinstance(self.reply, Exception):
            raise self.reply
        return FakeChunk(self.reply)

    def stream(self, messages):
        self.calls.append(messages)
        if isinstance(self.reply, Exception):
            raise self.reply
        for word in str(self.reply).split(" "):
            yield FakeChunk(word + " ")


@pytest.fixture(autouse=True)
def database():
    Base.metadata.create_all(bind=engine)
    stats_cache.clear()
    yield
    Base.metadata.drop_all(bind=engine)
    stats_cache.clear()


@pytest.fixture
def db_session():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def fake_llm():
    return FakeLLM()


@pytest.fixture
def client(fake_llm):
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_ai_agent] = lambda: MedicalAIAgent(llm=fake_llm)
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def register_and_login(client, email="student@example.com", password="password123", name="Test Student"):
    r = client.post(f"{API}/auth/register", json={"name": name, "email": email, "password": password})
    assert r.status_code == 201, r.text
    r = client.post(f"{API}/auth/login", data={"username": email, "password": password})
    assert r.status_code == 200, r.text
    return {"Authorization": f"Bearer {r.json()['access_token']}"}


@pytest.fixture
def auth_headers(client):
    return register_and_login(client)


@pytest.fixture
def other_headers(client):
    return register_and_login(client, email="other@example.com", name="Other Student")
