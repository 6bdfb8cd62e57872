"""
NeuroNotes Backend: Test Configuration (conftest.py)
====================================================

What:  Shared pytest fixtures for the whole suite.
How:   Environment overrides are applied before any neuronotes import, so the
       settings singleton is built from test values.

Fixture Hierarchy:
    mock_db_session   AsyncMock session for service unit tests
    db_engine         fresh SQLite database per test, tables created
    session_factory   sessions bound to db_engine
    fake_llm          in-memory LLMService; set .text/.finish_reason/.error
    app               create_app() with DB and LLM dependencies overridden
    client            httpx AsyncClient over ASGITransport
    auth_headers      bearer headers for a freshly signed-up user
"""

import os
import tempfile

# Must run before any neuronotes import
_TEST_DIR = tempfile.mkdtemp(prefix="neuronotes_test_")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_DIR}/neuronotes.db"
os.environ["GEMINI_API_KEY"] = "test-key-not-real"
os.environ["SECRET_KEY"] = "test-secret-key-not-for-production"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["RATE_LIMIT_REQUESTS"] = "1000"
os.environ["AI_TRUNCATION_MODE"] = "finish_reason"

from typing import AsyncGenerator, Dict, List, Optional  # noqa: E402
from unittest.mock import AsyncMock, MagicMock  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker  # noqa: E402

from neuronotes.database import build_engine, get_db_session, init_models  # noqa: E402
from neuronotes.dependencies import get_llm_service  # noqa: E402
from neuronotes.services.llm_base import Generation, LLMService  # noqa: E402

TEST_PASSWORD = "correct-horse-battery"


class FakeLLMService(LLMService):
    """LLMService double that records prompts and returns canned output."""

    def __init__(self):
        self.text = "groceries, family, errands"
        self.finish_reason: Optional[str] = "STOP"
        self.error: Optional[Exception] = None
        self.healthy = True
        self.calls: List[Dict] = []

    async def generate(self, prompt: str, max_tokens: int, temperature: float) -> Generation:
        self.calls.append(
            {"prompt": prompt, "max_tokens": max_tokens, "temperature": temperature}
        )
        if self.error is not None:
            raise self.error
        return Generation(text=self.text, finish_reason=self.finish_reason)

    async def health_check(self) -> bool:
        return self.healthy


# ══════════════════════════════════════════════════════════════════════════
# Unit-test fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_db_session():
    """
    A mock AsyncSession.

    Usage:
        mock_db_session.execute.return_value.scalar_one_or_none.return_value = note
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.refresh = AsyncMock()
    session.delete = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def fake_llm() -> FakeLLMService:
    return FakeLLMService()


# ══════════════════════════════════════════════════════════════════════════
# Database fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def db_engine(tmp_path):
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path}/test.db")
    await init_models(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


# ══════════════════════════════════════════════════════════════════════════
# HTTP fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def app(session_factory, fake_llm):
    """A fresh application (and rate limiter) per test."""
    from neuronotes.main import create_app

    application = create_app()

    async def override_db_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    application.dependency_overrides[get_db_session] = override_db_session
    application.dependency_overrides[get_llm_service] = lambda: fake_llm
    return application


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as http_client:
        yield http_client


async def signup_and_login(
    client: AsyncClient,
    email: str,
    name: str = "Test User",
    password: str = TEST_PASSWORD,
) -> Dict[str, str]:
    """Creates an account through the API and returns bearer auth headers."""
    response = await client.post(
        "/api/signup", json={"name": name, "email": email, "password": password}
    )
    assert response.status_code == 201, response.text
    response = await client.post("/api/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest_asyncio.fixture
async def auth_headers(client) -> Dict[str, str]:
    return await signup_and_login(client, "alice@neuronotes.dev", name="Alice")


@pytest_asyncio.fixture
async def other_auth_headers(client) -> Dict[str, str]:
    return await signup_and_login(client, "bob@neuronotes.dev", name="Bob")
