"""Chat repository for session and message database operations."""

from sqlalchemy import and_, delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from blogdesk.models.chat_message import ChatMessageRecord
from blogdesk.models.chat_session import ChatSessionRecord
from blogdesk.schemas.chat_schema import ChatMessage, ChatSession


def to_session(record: ChatSessionRecord) -> ChatSession:
    return ChatSession(
        id=record.id,
        title=record.title,
        system_prompt=record.system_prompt,
        article_context_id=record.article_context_id,
        created_at=record.created_at,
        updated_at=record.updated_at,
    )


def to_message(record: ChatMessageRecord) -> ChatMessage:
    return ChatMessage(
        id=record.id,
        session_id=record.session_id,
        role=record.role,  # type: ignore[arg-type]
        content=record.content,
        created_at=record.created_at,
    )


class ChatRepository:
    """Encapsulates chat session and message database queries."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def find_sessions(self) -> list[ChatSession]:
        """All sessions, most recently updated first."""
        result = await self._session.execute(
            select(ChatSessionRecord).order_by(ChatSessionRecord.updated_at.desc())
        )
        return [to_session(record) for record in result.scalars().all()]

    async def find_session_by_id(self, session_id: str) -> ChatSession | None:
        record = await self._session.get(ChatSessionRecord, session_id)
        return to_session(record) if record else None

    async def find_messages_by_session_id(self, session_id: str) -> list[ChatMessage]:
        """Retrieve all messages for a session in transcript order."""
        result = await self._session.execute(
            select(ChatMessageRecord)
            .where(ChatMessageRecord.session_id == session_id)
            .order_by(ChatMessageRecord.position.asc(), ChatMessageRecord.created_at.asc())
        )
        return [to_message(record) for record in result.scalars().all()]

    async def upsert_session(self, session: ChatSession) -> None:
        """Insert, or overwrite the mutable session fields."""
        record = await self._session.get(ChatSessionRecord, session.id)
        if record is None:
            self._session.add(
                ChatSessionRecord(
                    id=session.id,
                    title=session.title,
                    system_prompt=session.system_prompt,
                    article_context_id=session.article_context_id,
                    created_at=session.created_at,
                    updated_at=session.updated_at,
                )
            )
        else:
            record.title = session.title
            record.system_prompt = session.system_prompt
            record.article_context_id = session.article_context_id
            record.updated_at = session.updated_at
        await self._session.flush()

    async def delete_messages_not_in(self, session_id: str, keep_ids: list[str]) -> None:
        """Hard-delete persisted messages of a session absent from ``keep_ids``."""
        await self._session.execute(
            delete(ChatMessageRecord).where(
                and_(
                    ChatMessageRecord.session_id == session_id,
                    ChatMessageRecord.id.not_in(keep_ids),
                )
            )
        )

    async def upsert_messages(self, session_id: str, messages: list[ChatMessage]) -> None:
        """Insert new messages and refresh content/order of existing ones."""
        ids = [message.id for message in messages]
        existing: dict[str, ChatMessageRecord] = {}
        if ids:
            result = await self._session.execute(
                select(ChatMessageRecord).where(ChatMessageRecord.id.in_(ids))
            )
            existing = {record.id: record for record in result.scalars().all()}

        for position, message in enumerate(messages):
            record = existing.get(message.id)
            if record is None:
                self._session.add(
                    ChatMessageRecord(
                        id=message.id,
                        session_id=session_id,
                        role=message.role,
                        content=message.content,
                        created_at=message.created_at,
                        position=position,
                    )
                )
            else:
                record.content = message.content
                record.position = position
        await self._session.flush()

    async def delete_session(self, session_id: str) -> None:
        """Delete a session; its messages go with it through the FK cascade."""
        await self._session.execute(
            delete(ChatSessionRecord).where(ChatSessionRecord.id == session_id)
        )
