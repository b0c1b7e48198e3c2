"""Redis-backed chat history for guests.

Each client gets its own namespace. Inside it the session list and every
session's message list are single JSON documents that are always read and
replaced whole.
"""

import redis.asyncio as redis
import structlog
from pydantic import TypeAdapter, ValidationError

from blogdesk.schemas.chat_schema import ChatMessage, ChatSession

logger = structlog.get_logger()

SESSIONS_KEY = "guest_chat_sessions"
MESSAGES_KEY_PREFIX = "guest_chat_messages_"

_sessions_adapter = TypeAdapter(list[ChatSession])
_messages_adapter = TypeAdapter(list[ChatMessage])


class GuestChatHistory:
    """Chat history of one guest client, kept outside the remote store."""

    def __init__(
        self,
        redis_client: redis.Redis | None,  # type: ignore[type-arg]
        namespace: str,
    ) -> None:
        self._redis = redis_client
        self._namespace = namespace

    def sessions_key(self) -> str:
        return f"{self._namespace}:{SESSIONS_KEY}"

    def messages_key(self, session_id: str) -> str:
        return f"{self._namespace}:{MESSAGES_KEY_PREFIX}{session_id}"

    async def list_sessions(self) -> list[ChatSession]:
        raw = await self._read(self.sessions_key())
        if raw is None:
            return []
        try:
            return _sessions_adapter.validate_json(raw)
        except ValidationError:
            logger.warning("Discarding corrupt guest session list", key=self.sessions_key())
            return []

    async def get_messages(self, session_id: str) -> list[ChatMessage]:
        raw = await self._read(self.messages_key(session_id))
        if raw is None:
            return []
        try:
            return _messages_adapter.validate_json(raw)
        except ValidationError:
            logger.warning(
                "Discarding corrupt guest transcript", key=self.messages_key(session_id)
            )
            return []

    async def save_session(
        self, session: ChatSession, messages: list[ChatMessage]
    ) -> None:
        """Replace the session entry (new ones go first) and its whole transcript."""
        sessions = await self.list_sessions()
        for index, existing in enumerate(sessions):
            if existing.id == session.id:
                sessions[index] = session
                break
        else:
            sessions.insert(0, session)

        await self._write(
            {
                self.sessions_key(): _sessions_adapter.dump_json(sessions).decode(),
                self.messages_key(session.id): _messages_adapter.dump_json(
                    messages
                ).decode(),
            }
        )

    async def delete_session(self, session_id: str) -> None:
        sessions = [s for s in await self.list_sessions() if s.id != session_id]
        if self._redis is None:
            return
        try:
            async with self._redis.pipeline(transaction=True) as pipe:
                pipe.set(self.sessions_key(), _sessions_adapter.dump_json(sessions).decode())
                pipe.delete(self.messages_key(session_id))
                await pipe.execute()
        except redis.RedisError:
            logger.exception("Guest session delete failed", session_id=session_id)

    async def _read(self, key: str) -> str | None:
        if self._redis is None:
            return None
        try:
            return await self._redis.get(key)
        except redis.RedisError:
            logger.exception("Guest store read failed", key=key)
            return None

    async def _write(self, values: dict[str, str]) -> None:
        if self._redis is None:
            logger.warning("Redis unavailable, guest history not saved")
            return
        try:
            await self._redis.mset(values)
        except redis.RedisError:
            logger.exception("Guest store write failed", keys=list(values))


def guest_namespace(prefix: str, client_id: str) -> str:
    return f"{prefix}:{client_id}"
