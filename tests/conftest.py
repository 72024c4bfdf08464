"""Shared test fixtures for backend tests."""

from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from chatrelay.core.errors import AuthError
from chatrelay.models.conversation import ChatMessage, Conversation
from chatrelay.services.auth.base import BaseAuthVerifier
from chatrelay.services.llm.base import BaseLLMProvider, LLMResponse
from chatrelay.services.store import ConversationStore

# In-memory SQLite with StaticPool so all connections (including threads) share one DB
test_engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TOKENS = {"token-alice": "alice", "token-bob": "bob"}


def auth(user: str = "alice") -> dict[str, str]:
    return {"Authorization": f"Bearer token-{user}"}


class FakeLLM(BaseLLMProvider):
    """Records every prompt and answers with a numbered reply."""

    def __init__(self):
        self.prompts: list[str] = []

    async def generate(self, prompt: str) -> LLMResponse:
        self.prompts.append(prompt)
        return LLMResponse(content=f"reply {len(self.prompts)}", model="fake-model")


class FakeAuthVerifier(BaseAuthVerifier):
    async def verify(self, token: str) -> str:
        if token not in TOKENS:
            raise AuthError(error="Invalid authentication token")
        return TOKENS[token]


def seed_conversation(user_id="alice", title="Test Chat", messages=None) -> str:
    """Insert a conversation + messages directly into the test DB, one second apart."""
    with Session(test_engine) as session:
        conv = Conversation(user_id=user_id, title=title)
        session.add(conv)
        session.commit()
        session.refresh(conv)

        start = datetime.now(timezone.utc)
        for i, (role, content) in enumerate(messages or []):
            msg = ChatMessage(
                conversation_id=conv.id,
                role=role,
                content=content,
                created_at=start + timedelta(seconds=i),
            )
            session.add(msg)
        session.commit()
        return conv.id


@pytest.fixture(autouse=True)
def setup_test_db():
    """Create all tables before each test, drop after."""
    import chatrelay.models  # noqa: F401 - register models
    SQLModel.metadata.create_all(test_engine)
    yield
    SQLModel.metadata.drop_all(test_engine)


@pytest.fixture
def store():
    return ConversationStore(test_engine)


@pytest.fixture
def fake_llm():
    return FakeLLM()


@pytest.fixture
def client(fake_llm):
    """FastAPI TestClient with all external deps patched."""
    with (
        patch("chatrelay.core.database.engine", test_engine),
        patch("chatrelay.main.get_llm_provider", return_value=fake_llm),
        patch("chatrelay.main.get_auth_verifier", return_value=FakeAuthVerifier()),
    ):
        from chatrelay.main import app

        with TestClient(app) as c:
            yield c
