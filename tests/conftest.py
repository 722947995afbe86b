"""Shared pytest fixtures for wagerdesk tests."""
import os
import sys
from pathlib import Path
from typing import Callable, Generator, List, Optional

# Configure before any wagerdesk import reads settings
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["LOG_JSON"] = "false"
os.environ["LLM_API_KEY"] = "test-key"

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

# Add project root to Python path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

DEMO_EMAIL = "john@doe.com"
DEMO_PASSWORD = "johndoe123"


@pytest.fixture(scope="function")
def db_session() -> Generator[Session, None, None]:
    """Fresh in-memory database; StaticPool keeps one connection so every session sees the same data."""
    from wagerdesk.models.models import Base

    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)

    TestSessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = TestSessionLocal()

    yield session

    session.close()
    engine.dispose()


@pytest.fixture
def user(db_session: Session):
    """The demo account with the default $1000 bankroll."""
    from wagerdesk.services.auth_service import AuthService

    return AuthService(db_session).upsert_user(DEMO_EMAIL, DEMO_PASSWORD, name="John Doe", bankroll=1000.0)


@pytest.fixture
def other_user(db_session: Session):
    from wagerdesk.services.auth_service import AuthService

    return AuthService(db_session).upsert_user("jane@doe.com", "janedoe123", name="Jane Doe", bankroll=500.0)


@pytest.fixture
def principal(user):
    from wagerdesk.core.auth import Principal

    return Principal(user_id=user.id, email=user.email)


@pytest.fixture
def other_principal(other_user):
    from wagerdesk.core.auth import Principal

    return Principal(user_id=other_user.id, email=other_user.email)


class FakeLLM:
    """
    Scripted chat-completion endpoint for httpx.MockTransport.

    Queue replies with `reply(content)`, `fail(status)` or `drop()`; every
    request body is recorded in `requests`. With nothing queued the endpoint
    answers with empty content.
    """

    def __init__(self):
        self.replies: List[Callable[[httpx.Request], httpx.Response]] = []
        self.requests: List[dict] = []

    def reply(self, content: Optional[str]) -> "FakeLLM":
        body = {"choices": [{"message": {"role": "assistant", "content": content}}]}
        self.replies.append(lambda request: httpx.Response(200, json=body))
        return self

    def fail(self, status_code: int = 500, text: str = "upstream exploded") -> "FakeLLM":
        self.replies.append(lambda request: httpx.Response(status_code, text=text))
        return self

    def drop(self) -> "FakeLLM":
        def raise_connect_error(request):
            raise httpx.ConnectError("connection refused", request=request)
        self.replies.append(raise_connect_error)
        return self

    def handler(self, request: httpx.Request) -> httpx.Response:
        import json

        self.requests.append(json.loads(request.content))
        if self.replies:
            return self.replies.pop(0)(request)
        return httpx.Response(200, json={"choices": [{"message": {"content": ""}}]})

    def client(self, max_attempts: int = 1):
        from wagerdesk.services.llm.chat_client import ChatCompletionClient

        return ChatCompletionClient(
            api_key="test-key",
            api_url="https://llm.test/v1/chat/completions",
            model="test-model",
            timeout=5.0,
            max_attempts=max_attempts,
            backoff_multiplier=0,
            transport=httpx.MockTransport(self.handler),
        )


@pytest.fixture
def fake_llm() -> FakeLLM:
    return FakeLLM()


@pytest.fixture
def app_client(db_session: Session, fake_llm: FakeLLM) -> Generator[TestClient, None, None]:
    """Unauthenticated TestClient bound to the test database and the scripted LLM."""
    from wagerdesk.main import app
    from wagerdesk.core.database import get_db
    from wagerdesk.services.llm.chat_client import get_chat_client

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_chat_client] = lambda: fake_llm.client()

    yield TestClient(app)

    app.dependency_overrides.clear()


@pytest.fixture
def auth_token(db_session: Session, user) -> str:
    from wagerdesk.services.auth_service import AuthService

    token, _ = AuthService(db_session).login(DEMO_EMAIL, DEMO_PASSWORD)
    return token


@pytest.fixture
def test_client(app_client: TestClient, auth_token: str) -> TestClient:
    """TestClient that sends the demo user's bearer token."""
    app_client.headers.update({"Authorization": f"Bearer {auth_token}"})
    return app_client


@pytest.fixture
def other_headers(db_session: Session, other_user) -> dict:
    """Auth headers for a second user, to exercise ownership checks."""
    from wagerdesk.services.auth_service import AuthService

    token, _ = AuthService(db_session).login("jane@doe.com", "janedoe123")
    return {"Authorization": f"Bearer {token}"}
