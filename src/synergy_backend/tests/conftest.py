"""
Shared fixtures: an in-memory SQLite database seeded with a small project,
a token service with a fixed secret and a ``TestClient`` around the app.

Seed data:
    bob    owns project ``p-one``
    alice  is a member of ``p-one``
    carol  owns project ``p-two`` and is an outsider to ``p-one``
"""

from types import SimpleNamespace
from typing import List

import pytest
from fastapi.testclient import TestClient

from synergy_types.base import utc_now
from synergy_types.messages import ChatMessageCreate, ChatMessageGet
from synergy_types.password_utils import hash_password
from synergy_backend.database import create_db_engine, create_session_factory, session_scope
from synergy_backend.model import metadata
from synergy_backend.model.auth import User
from synergy_backend.model.project import Project, ProjectMember
from synergy_backend.server import create_app
from synergy_backend.utils.tokens import TokenService

TEST_PASSWORD = "correct-horse-battery"


class FakeWebSocket:
    """Records every frame sent to it; optionally fails on send."""

    def __init__(self, fail_on_send: bool = False):
        self.sent: List[dict] = []
        self.accepted = False
        self.closed_with = None
        self.fail_on_send = fail_on_send
        self.state = SimpleNamespace()

    async def accept(self):
        self.accepted = True

    async def send_json(self, data: dict):
        if self.fail_on_send:
            raise RuntimeError("peer went away")
        self.sent.append(data)

    async def close(self, code: int = 1000, reason: str = ""):
        self.closed_with = code

    async def receive(self) -> dict:
        return {"type": "websocket.disconnect", "code": 1000}

    def frames_of_type(self, event_type: str) -> List[dict]:
        return [frame for frame in self.sent if frame.get("type") == event_type]


class InMemoryMessageStore:

    def __init__(self):
        self.messages: List[ChatMessageGet] = []
        self._counter = 0

    async def append(self, draft: ChatMessageCreate) -> ChatMessageGet:
        self._counter += 1
        message = ChatMessageGet(
            id=f"m-{self._counter}",
            project_id=draft.project_id,
            user_id=draft.user_id,
            username=draft.username,
            content=draft.content,
            timestamp=utc_now(),
        )
        self.messages.append(message)
        return message

    async def list_by_project(self, project_id: str) -> List[ChatMessageGet]:
        return [m for m in self.messages if m.project_id == project_id]


@pytest.fixture(scope="session")
def password_hash() -> str:
    return hash_password(TEST_PASSWORD)


@pytest.fixture
def engine():
    engine = create_db_engine("sqlite://")
    metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture
def token_service() -> TokenService:
    return TokenService(secret="test-secret", algorithm="HS256", expire_minutes=60)


@pytest.fixture
def seeded(session_factory, password_hash):
    with session_scope(session_factory) as db:
        db.add_all([
            User(id="u-bob", name="Bob", email="bob@example.com", password=password_hash, skills=["python"]),
            User(id="u-alice", name="Alice", email="alice@example.com", password=password_hash, skills=["react"]),
            User(id="u-carol", name="Carol", email="carol@example.com", password=password_hash,
                 skills=["design"], college="TU Wien"),
        ])
        db.flush()
        db.add_all([
            Project(
                id="p-one", title="Chat App", description="Realtime chat", category="web",
                skills=["python"], max_members=5,
                creator_id="u-bob", creator="Bob", creator_email="bob@example.com",
                memberships=[ProjectMember(email="alice@example.com", position=0)],
            ),
            Project(
                id="p-two", title="Portfolio", description="Design portfolio", category="design",
                skills=["figma"], max_members=1,
                creator_id="u-carol", creator="Carol", creator_email="carol@example.com",
            ),
        ])

    return SimpleNamespace(
        bob="u-bob",
        alice="u-alice",
        carol="u-carol",
        project="p-one",
        other_project="p-two",
    )


@pytest.fixture
def tokens(seeded, token_service):
    return SimpleNamespace(
        bob=token_service.issue(seeded.bob),
        alice=token_service.issue(seeded.alice),
        carol=token_service.issue(seeded.carol),
    )


@pytest.fixture
def app(session_factory, token_service, seeded):
    return create_app(session_factory=session_factory, token_service=token_service)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


def auth_headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}
