"""Persistence Gateway: entity CRUD over the remote store and guest storage.

Failure policy is soft-open. When the remote store is unconfigured or
unreachable, reads return an empty result and writes do nothing; the error
is logged and never reaches the caller. Every write invalidates the cached
collection it touched so the next read refetches.
"""

from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from typing import Protocol, TypeVar

import redis.asyncio as redis
import structlog
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from blogdesk.core.session_flag import AuthContext
from blogdesk.repositories.article_repo import ArticleRepository
from blogdesk.repositories.chat_repo import ChatRepository
from blogdesk.repositories.guest_chat_store import GuestChatHistory, guest_namespace
from blogdesk.repositories.project_repo import ProjectRepository
from blogdesk.repositories.setting_repo import SettingRepository
from blogdesk.schemas.article_schema import Article
from blogdesk.schemas.chat_schema import ChatMessage, ChatSession
from blogdesk.schemas.project_schema import Project
from blogdesk.services.entity_cache import EntityCache
from blogdesk.services.model_catalogue import (
    DEFAULT_GENERAL_MODEL,
    DEFAULT_SVG_MODEL,
    MODEL_CATALOGUE,
)

logger = structlog.get_logger()

T = TypeVar("T")

STORE_ERRORS = (SQLAlchemyError, OSError, ValidationError)

ARTICLES = "articles"
PROJECTS = "projects"
SETTINGS = "settings"

SETTING_GENERAL_AI = "general_ai_model"
SETTING_SVG_AI = "svg_ai_model"


class ChatHistory(Protocol):
    """Where one caller's chat sessions live."""

    async def list_sessions(self) -> list[ChatSession]: ...

    async def get_messages(self, session_id: str) -> list[ChatMessage]: ...

    async def save_session(
        self, session: ChatSession, messages: list[ChatMessage]
    ) -> None: ...

    async def delete_session(self, session_id: str) -> None: ...


class PersistenceGateway:
    """Entity-shaped access to articles, projects, settings and chat history."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession] | None,
        redis_client: redis.Redis | None = None,  # type: ignore[type-arg]
        guest_prefix: str = "guest",
        cache: EntityCache | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._redis = redis_client
        self._guest_prefix = guest_prefix
        self._cache = cache or EntityCache()

    @property
    def is_configured(self) -> bool:
        return self._session_factory is not None

    @property
    def cache(self) -> EntityCache:
        return self._cache

    # --- Plumbing ---

    @asynccontextmanager
    async def _transaction(self) -> AsyncIterator[AsyncSession]:
        """One session per call; nothing is held open across calls."""
        if self._session_factory is None:
            raise RuntimeError("Remote store not configured")
        async with self._session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def _run(self, query: Callable[[AsyncSession], Awaitable[T]]) -> T:
        async with self._transaction() as session:
            return await query(session)

    async def _read(
        self,
        operation: str,
        query: Callable[[AsyncSession], Awaitable[T]],
        default: T,
    ) -> T:
        if not self.is_configured:
            return default
        try:
            return await self._run(query)
        except STORE_ERRORS:
            logger.exception("Store read failed", operation=operation)
            return default

    async def _load_collection(
        self,
        collection: str,
        query: Callable[[AsyncSession], Awaitable[T]],
        default: T,
    ) -> T:
        if not self.is_configured:
            return default
        try:
            return await self._cache.get_or_load(collection, lambda: self._run(query))
        except STORE_ERRORS:
            logger.exception("Store read failed", operation=f"load_{collection}")
            return default

    async def _write(
        self,
        operation: str,
        action: Callable[[AsyncSession], Awaitable[None]],
        invalidates: str | None = None,
    ) -> bool:
        if not self.is_configured:
            logger.warning("Store not configured, write skipped", operation=operation)
            return False
        try:
            await self._run(action)
        except STORE_ERRORS:
            logger.exception("Store write failed", operation=operation)
            return False
        finally:
            if invalidates is not None:
                self._cache.invalidate(invalidates)
        return True

    # --- Articles ---

    async def get_articles(self, force_refresh: bool = False) -> list[Article]:
        """All articles, newest first."""
        if force_refresh:
            self._cache.invalidate(ARTICLES)
        return await self._load_collection(
            ARTICLES, lambda s: ArticleRepository(s).find_all(), []
        )

    async def get_article_by_id(self, article_id: str) -> Article | None:
        cached: list[Article] | None = self._cache.peek(ARTICLES)
        if cached is not None:
            for article in cached:
                if article.id == article_id:
                    return article
        return await self._read(
            "get_article",
            lambda s: ArticleRepository(s).find_by_id(article_id),
            None,
        )

    async def save_article(self, article: Article) -> bool:
        return await self._write(
            "save_article",
            lambda s: ArticleRepository(s).upsert(article),
            invalidates=ARTICLES,
        )

    async def delete_article(self, article_id: str) -> bool:
        return await self._write(
            "delete_article",
            lambda s: ArticleRepository(s).delete(article_id),
            invalidates=ARTICLES,
        )

    # --- Projects ---

    async def get_projects(self, force_refresh: bool = False) -> list[Project]:
        if force_refresh:
            self._cache.invalidate(PROJECTS)
        return await self._load_collection(
            PROJECTS, lambda s: ProjectRepository(s).find_all(), []
        )

    async def get_project_by_id(self, project_id: str) -> Project | None:
        for project in await self.get_projects():
            if project.id == project_id:
                return project
        return None

    async def save_project(self, project: Project) -> bool:
        return await self._write(
            "save_project",
            lambda s: ProjectRepository(s).upsert(project),
            invalidates=PROJECTS,
        )

    async def delete_project(self, project_id: str) -> bool:
        return await self._write(
            "delete_project",
            lambda s: ProjectRepository(s).delete(project_id),
            invalidates=PROJECTS,
        )

    # --- Settings ---

    async def get_setting(self, key: str, default: str) -> str:
        values: dict[str, str] = await self._load_collection(
            SETTINGS, lambda s: SettingRepository(s).find_all(), {}
        )
        return values.get(key, default)

    async def save_setting(self, key: str, value: str) -> bool:
        return await self._write(
            "save_setting",
            lambda s: SettingRepository(s).upsert(key, value),
            invalidates=SETTINGS,
        )

    async def get_general_model(self) -> str:
        value = await self.get_setting(SETTING_GENERAL_AI, DEFAULT_GENERAL_MODEL)
        return value if value in MODEL_CATALOGUE else DEFAULT_GENERAL_MODEL

    async def save_general_model(self, model_key: str) -> bool:
        return await self.save_setting(SETTING_GENERAL_AI, model_key)

    async def get_svg_model(self) -> str:
        value = await self.get_setting(SETTING_SVG_AI, DEFAULT_SVG_MODEL)
        return value if value in MODEL_CATALOGUE else DEFAULT_SVG_MODEL

    async def save_svg_model(self, model_key: str) -> bool:
        return await self.save_setting(SETTING_SVG_AI, model_key)

    # --- Chat (remote store) ---

    async def get_chat_sessions(self) -> list[ChatSession]:
        return await self._read(
            "get_chat_sessions", lambda s: ChatRepository(s).find_sessions(), []
        )

    async def get_chat_messages(self, session_id: str) -> list[ChatMessage]:
        return await self._read(
            "get_chat_messages",
            lambda s: ChatRepository(s).find_messages_by_session_id(session_id),
            [],
        )

    async def save_chat_session(
        self, session: ChatSession, messages: list[ChatMessage]
    ) -> bool:
        """Upsert the session and make its stored transcript equal ``messages``.

        Persisted messages whose id is missing from ``messages`` are deleted,
        which is how edits and rewinds reach the store.
        """

        async def action(db: AsyncSession) -> None:
            repo = ChatRepository(db)
            await repo.upsert_session(session)
            await repo.delete_messages_not_in(session.id, [m.id for m in messages])
            await repo.upsert_messages(session.id, messages)

        return await self._write("save_chat_session", action)

    async def delete_chat_session(self, session_id: str) -> bool:
        return await self._write(
            "delete_chat_session",
            lambda s: ChatRepository(s).delete_session(session_id),
        )

    def chat_history_for(self, auth: AuthContext) -> ChatHistory:
        """Admins use the remote store, guests their own Redis namespace."""
        if auth.is_authenticated:
            return RemoteChatHistory(self)
        return GuestChatHistory(
            self._redis, guest_namespace(self._guest_prefix, auth.client_id)
        )


class RemoteChatHistory:
    """ChatHistory adapter over the gateway's remote-store operations."""

    def __init__(self, gateway: PersistenceGateway) -> None:
        self._gateway = gateway

    async def list_sessions(self) -> list[ChatSession]:
        return await self._gateway.get_chat_sessions()

    async def get_messages(self, session_id: str) -> list[ChatMessage]:
        return await self._gateway.get_chat_messages(session_id)

    async def save_session(
        self, session: ChatSession, messages: list[ChatMessage]
    ) -> None:
        await self._gateway.save_chat_session(session, messages)

    async def delete_session(self, session_id: str) -> None:
        await self._gateway.delete_chat_session(session_id)
