import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from app.database import Base, get_db
from app.main import app
from app.models.user import User
from app.models.article import Article
from app.models.project import Project
from app.services.ai_client import AICompletion, ToolCall
from app.services.plan_proposer import ContentPlanProposer
from app.routers.content_hub import get_plan_proposer

TEST_DB_URL = "sqlite:///./test_content_hub.db"

engine = create_engine(TEST_DB_URL, connect_args={"check_same_thread": False})
TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSession()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db


class FakeAIClient:
    """complete() 호출을 기록하고 미리 준비한 응답(또는 예외)을 순서대로 돌려준다."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []
        self.model_name = "fake-model"

    def complete(self, messages, system_prompt=None, tools=None):
        self.calls.append({"messages": messages, "system_prompt": system_prompt, "tools": tools})
        item = self.responses.pop(0) if self.responses else AICompletion(text="")
        if isinstance(item, Exception):
            raise item
        return item


def plan_completion(plan: dict, text: str = "") -> AICompletion:
    import json

    return AICompletion(
        text=text,
        tool_calls=[ToolCall(name="content_plan", arguments=json.dumps(plan))],
        model="fake-model",
    )


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    db = TestingSession()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def fake_ai():
    fake = FakeAIClient()
    app.dependency_overrides[get_plan_proposer] = lambda: ContentPlanProposer(client=fake)
    yield fake
    app.dependency_overrides.pop(get_plan_proposer, None)


@pytest.fixture
def seed_users(db):
    users = {
        "admin": User(emp_id="admin001", name="Admin", role="admin"),
        "editor": User(emp_id="editor001", name="Editor", role="editor"),
    }
    for u in users.values():
        db.add(u)
    db.commit()
    for u in users.values():
        db.refresh(u)
    return users


@pytest.fixture
def admin(seed_users):
    return seed_users["admin"]


@pytest.fixture
def editor(seed_users):
    return seed_users["editor"]


@pytest.fixture
def seed_content(db):
    article = Article(id="a1", title="Draft essay", slug="draft-essay", category="philosophy", published=False)
    other = Article(id="a2", title="Old essay", slug="old-essay", category="narrative", published=True)
    project = Project(id="p1", title="Halftone", slug="halftone", status="in_progress", tech_stack=["ts"])
    db.add_all([article, other, project])
    db.commit()
    return {"article": article, "other": other, "project": project}


def get_token(client, emp_id: str) -> str:
    resp = client.post("/api/auth/login", json={"emp_id": emp_id})
    assert resp.status_code == 200, resp.text
    return resp.json()["access_token"]


def auth_headers(client, emp_id: str) -> dict:
    return {"Authorization": f"Bearer {get_token(client, emp_id)}"}
