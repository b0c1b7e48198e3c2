# ruff: noqa: E402
"""Pytest configuration and fixtures."""

import json
import os

os.environ.setdefault("SESSION_SECRET_KEY", "test-session-secret-key-0123456789abcdef")
os.environ.setdefault("ADMIN_USERNAME", "admin")
os.environ.setdefault("ADMIN_PASSWORD", "admin-pass")
os.environ.setdefault("OPENROUTER_API_KEY", "test-openrouter-key")
os.environ.setdefault("ANTHROPIC_API_KEY", "test-anthropic-key")
os.environ["DATABASE_URL"] = ""

from collections.abc import AsyncGenerator, AsyncIterator
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import fakeredis
import fakeredis.aioredis
import pytest
from httpx import ASGITransport, AsyncClient
from langchain_core.language_models import BaseChatModel
from langchain_core.messages import AIMessage, AIMessageChunk
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

import blogdesk.models  # noqa: F401
from blogdesk.core.database import Base
from blogdesk.services.completion_client import CompletionClient
from blogdesk.services.llm_providers import CompletionProvider
from blogdesk.services.model_catalogue import ProviderName
from blogdesk.services.persistence_gateway import PersistenceGateway
from blogdesk.services.token_service import MarkerScope, TokenService

# --- Test DB (SQLite in-memory) ---

test_engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
test_session_factory = async_sessionmaker(
    test_engine, class_=AsyncSession, expire_on_commit=False
)


@event.listens_for(test_engine.sync_engine, "connect")
def _enable_foreign_keys(dbapi_connection: Any, connection_record: Any) -> None:
    """SQLite only honours ON DELETE CASCADE with foreign keys switched on."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


@pytest.fixture(autouse=True)
async def setup_db() -> AsyncGenerator[None, None]:
    """Create all tables before each test, drop after."""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Provide a raw async session for repository tests."""
    async with test_session_factory() as session:
        yield session


# --- Test Redis (fakeredis) ---


@pytest.fixture
def fake_redis() -> fakeredis.aioredis.FakeRedis:
    """Create a fake Redis client on its own server, so no keys leak between tests."""
    return fakeredis.aioredis.FakeRedis(
        server=fakeredis.FakeServer(), decode_responses=True
    )


@pytest.fixture(autouse=True)
def patch_redis(
    fake_redis: fakeredis.aioredis.FakeRedis, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Patch the global redis_client read by the middleware and dependencies."""
    monkeypatch.setattr("blogdesk.core.redis.redis_client", fake_redis)


# --- Gateway ---


@pytest.fixture
def gateway(fake_redis: fakeredis.aioredis.FakeRedis) -> PersistenceGateway:
    """Gateway over the test DB and fake Redis."""
    return PersistenceGateway(test_session_factory, fake_redis, guest_prefix="guest")


# --- Token helpers ---


@pytest.fixture
def token_service(fake_redis: fakeredis.aioredis.FakeRedis) -> TokenService:
    """Create a TokenService backed by fake Redis."""
    return TokenService(fake_redis)


def make_session_headers(
    fake_redis: fakeredis.aioredis.FakeRedis,
    client_id: str = "admin-client",
    scope: MarkerScope = "tab",
) -> dict[str, str]:
    """Headers of a client holding a valid tab-scoped admin marker."""
    token, _ = TokenService(fake_redis).create_session_token("admin", scope)
    return {"Authorization": f"Bearer {token}", "X-Client-Id": client_id}


# --- Fake chat models ---


def make_stream_llm(
    fragments: list[str],
    error: Exception | None = None,
    reply: str = "Test response",
) -> MagicMock:
    """Mock chat model streaming ``fragments``, then raising ``error`` if given."""
    mock = MagicMock(spec=BaseChatModel)
    mock.ainvoke = AsyncMock(return_value=AIMessage(content=reply))

    async def fake_astream(
        messages: Any, *args: Any, **kwargs: Any
    ) -> AsyncIterator[AIMessageChunk]:
        for fragment in fragments:
            yield AIMessageChunk(content=fragment)
        if error is not None:
            raise error

    mock.astream = MagicMock(side_effect=fake_astream)
    return mock


class StubProvider(CompletionProvider):
    """Provider handing out a prepared chat model."""

    def __init__(
        self, name: ProviderName, llm: BaseChatModel, configured: bool = True
    ) -> None:
        self.name = name
        self.llm = llm
        self.configured = configured
        self.built: list[tuple[str, float, bool]] = []

    @property
    def is_configured(self) -> bool:
        return self.configured

    def build_model(
        self, model_name: str, temperature: float, streaming: bool
    ) -> BaseChatModel:
        self.built.append((model_name, temperature, streaming))
        return self.llm


def make_completion_client(
    llm: BaseChatModel, anthropic_configured: bool = True
) -> CompletionClient:
    return CompletionClient(
        {
            "openrouter": StubProvider("openrouter", llm),
            "anthropic": StubProvider("anthropic", llm, configured=anthropic_configured),
        }
    )


@pytest.fixture
def mock_llm() -> MagicMock:
    """Chat model streaming "Hello", " world"."""
    return make_stream_llm(["Hello", " world"])


@pytest.fixture
def completion_client(mock_llm: MagicMock) -> CompletionClient:
    return make_completion_client(mock_llm)


# --- App client fixtures ---


def _get_app(gateway: PersistenceGateway, completion: CompletionClient):  # type: ignore[no-untyped-def]
    """Import app lazily and install test services."""
    from blogdesk.dependencies import get_completion_client
    from blogdesk.main import app
    from blogdesk.services.chat_session_manager import ChatManagerRegistry

    app.state.gateway = gateway
    app.state.chat_registry = ChatManagerRegistry(gateway, completion)
    app.dependency_overrides[get_completion_client] = lambda: completion
    return app


@pytest.fixture
async def async_client(
    gateway: PersistenceGateway, completion_client: CompletionClient
) -> AsyncGenerator[AsyncClient, None]:
    """Guest client with a fixed client id."""
    application = _get_app(gateway, completion_client)
    transport = ASGITransport(app=application)
    async with AsyncClient(
        transport=transport,
        base_url="http://test",
        headers={"X-Client-Id": "guest-client"},
    ) as ac:
        yield ac
    application.dependency_overrides.clear()


@pytest.fixture
async def admin_client(
    gateway: PersistenceGateway,
    completion_client: CompletionClient,
    fake_redis: fakeredis.aioredis.FakeRedis,
) -> AsyncGenerator[AsyncClient, None]:
    """Client holding a tab-scoped admin marker."""
    application = _get_app(gateway, completion_client)
    transport = ASGITransport(app=application)
    async with AsyncClient(
        transport=transport,
        base_url="http://test",
        headers=make_session_headers(fake_redis),
    ) as ac:
        yield ac
    application.dependency_overrides.clear()


def parse_sse(body: str) -> list[dict[str, str]]:
    """Decode a Server-Sent Events body into its ``{"event", "data"}`` payloads."""
    events = []
    for block in body.split("\n\n"):
        if block.startswith("data: "):
            events.append(json.loads(block[len("data: ") :]))
    return events
