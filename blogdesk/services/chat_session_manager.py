"""Chat Session Manager: the per-client conversation state machine.

A manager starts ``UNBOUND``: messages live only in memory and no session
exists. The first send creates and binds a session, after which every
completed send persists the session together with its full transcript.

At most one completion stream is in flight per manager. Starting a new send
cancels the previous stream; a generation counter makes sure fragments of a
cancelled stream are never applied once the newer send has started.

Starting a new conversation or switching sessions does not cancel anything:
the running send is detached from the visible state, finishes on its own and
persists its transcript to the session it was started in.
"""

import asyncio
import uuid
from collections import OrderedDict
from dataclasses import dataclass
from enum import Enum

import structlog

from blogdesk.core.exceptions import (
    AppException,
    ArticleNotFoundError,
    EmptyMessageError,
    ModelNotAvailableError,
    SessionNotFoundError,
    UnknownModelError,
)
from blogdesk.core.session_flag import AuthContext
from blogdesk.schemas.article_schema import Article
from blogdesk.schemas.chat_schema import (
    AttachedArticle,
    ChatMessage,
    ChatSession,
    ChatStateResponse,
    Role,
)
from blogdesk.schemas.field_types import utc_now
from blogdesk.services.completion_client import (
    DEFAULT_CHAT_PROMPT,
    CompletionClient,
    TokenCallback,
)
from blogdesk.services.model_catalogue import (
    MODEL_CATALOGUE,
    PREFERRED_FREE_MODEL,
    ModelSpec,
)
from blogdesk.services.persistence_gateway import PersistenceGateway

logger = structlog.get_logger()

TITLE_LENGTH = 30
MAX_MANAGERS = 1000
ERROR_MARKER = "**Error:** {message}"

REFERENCE_BLOCK = (
    "\n\n---\n"
    "【引用】《{title}》\n"
    "摘要：{summary}\n"
    "内容：\n{content}\n"
    "---"
)

ARTICLE_CONTEXT = (
    "\n\n用户正在阅读下面这篇文章，请结合文章内容回答问题。\n"
    "标题：《{title}》\n"
    "内容：\n{content}"
)


class SessionState(str, Enum):
    UNBOUND = "unbound"
    BOUND = "bound"


@dataclass(frozen=True)
class SendResult:
    """Outcome of one send.

    ``superseded`` means a newer send cancelled this one before it finished;
    nothing was persisted on its behalf. ``error`` carries the provider
    failure shown in the assistant message, if any.
    """

    session_id: str
    user_message_id: str
    assistant_message_id: str
    content: str
    superseded: bool = False
    error: str | None = None


def derive_title(text: str) -> str:
    """First TITLE_LENGTH characters, with an ellipsis only when truncated."""
    if len(text) > TITLE_LENGTH:
        return text[:TITLE_LENGTH] + "..."
    return text


def reference_block(article: Article) -> str:
    return REFERENCE_BLOCK.format(
        title=article.title, summary=article.summary, content=article.content
    )


def visible_models(auth: AuthContext) -> list[ModelSpec]:
    """Full catalogue for admins, only free models for guests."""
    return [
        spec
        for spec in MODEL_CATALOGUE.values()
        if auth.is_authenticated or spec.is_free
    ]


def default_model_key(models: list[ModelSpec]) -> str | None:
    keys = [spec.key for spec in models]
    if PREFERRED_FREE_MODEL in keys:
        return PREFERRED_FREE_MODEL
    return keys[0] if keys else None


def _new_id() -> str:
    return str(uuid.uuid4())


class ChatSessionManager:
    """Conversation state of one client.

    The history backend is fixed at construction from the caller's auth
    flag, so guest and admin transcripts never share storage.
    """

    def __init__(
        self,
        auth: AuthContext,
        gateway: PersistenceGateway,
        completion: CompletionClient,
    ) -> None:
        self._auth = auth
        self._gateway = gateway
        self._history = gateway.chat_history_for(auth)
        self._completion = completion

        self._session: ChatSession | None = None
        self._messages: list[ChatMessage] = []
        self._attachments: list[Article] = []
        self._system_prompt = ""
        self._article_context_id: str | None = None
        self._selected_model = default_model_key(self.available_models())

        self._generation = 0
        self._task: asyncio.Task[str] | None = None
        self._placeholder: ChatMessage | None = None
        self._stream_session: ChatSession | None = None
        self._stream_transcript: list[ChatMessage] = []
        self._deleted_session_ids: set[str] = set()

    # --- State ---

    @property
    def auth(self) -> AuthContext:
        return self._auth

    @property
    def state(self) -> SessionState:
        return SessionState.UNBOUND if self._session is None else SessionState.BOUND

    @property
    def session(self) -> ChatSession | None:
        return self._session

    @property
    def messages(self) -> list[ChatMessage]:
        return list(self._messages)

    @property
    def attached_articles(self) -> list[AttachedArticle]:
        return [
            AttachedArticle(id=a.id, title=a.title, summary=a.summary)
            for a in self._attachments
        ]

    @property
    def selected_model(self) -> str | None:
        return self._selected_model

    @property
    def has_pending_reply(self) -> bool:
        """Whether any send, visible or detached, is still streaming."""
        return self._stream_running()

    @property
    def is_streaming(self) -> bool:
        """Whether a reply is streaming into the visible conversation."""
        return self._stream_running() and not self._is_detached(self._stream_session)

    def snapshot(self) -> ChatStateResponse:
        return ChatStateResponse(
            state=self.state.value,
            session=self._session,
            messages=self.messages,
            attached_articles=self.attached_articles,
            system_prompt=self._system_prompt,
            article_context_id=self._article_context_id,
            selected_model=self._selected_model,
            is_streaming=self.is_streaming,
        )

    # --- Models ---

    def available_models(self) -> list[ModelSpec]:
        return visible_models(self._auth)

    def select_model(self, model_key: str) -> None:
        if model_key not in MODEL_CATALOGUE:
            raise UnknownModelError(model_key)
        if model_key not in {spec.key for spec in self.available_models()}:
            raise ModelNotAvailableError(model_key)
        self._selected_model = model_key

    # --- Sessions ---

    async def list_sessions(self) -> list[ChatSession]:
        return await self._history.list_sessions()

    async def switch_session(self, session_id: str) -> None:
        """Replace in-memory state with the stored session and transcript."""
        streaming = self._stream_session if self._stream_running() else None
        if streaming is not None and streaming.id == session_id:
            # Reattach to the reply still streaming into this session.
            session, messages = streaming, self._stream_transcript
        else:
            sessions = await self._history.list_sessions()
            found = next((s for s in sessions if s.id == session_id), None)
            if found is None:
                raise SessionNotFoundError()
            session = found
            messages = await self._history.get_messages(session_id)

        self._session = session
        self._messages = messages
        self._attachments = []
        self._system_prompt = session.system_prompt
        self._article_context_id = session.article_context_id
        logger.info(
            "Chat session activated", session_id=session_id, messages=len(messages)
        )

    async def reset(self) -> None:
        """Start a new, unbound conversation; a running send finishes unseen."""
        self._session = None
        self._messages = []
        self._attachments = []
        self._system_prompt = ""
        self._article_context_id = None

    async def delete_session(self, session_id: str) -> None:
        """Remove a session; a send still streaming into it is cancelled unsaved."""
        self._deleted_session_ids.add(session_id)
        if self._stream_session is not None and self._stream_session.id == session_id:
            await self._abort_in_flight()
        if self._session is not None and self._session.id == session_id:
            await self.reset()
        await self._history.delete_session(session_id)
        logger.info("Chat session deleted", session_id=session_id)

    async def set_system_prompt(self, prompt: str) -> None:
        self._system_prompt = prompt.strip()
        if self._session is None:
            return
        self._session.system_prompt = self._system_prompt
        await self._persist_unless_streaming()

    # --- Article references ---

    async def _load_visible_article(self, article_id: str) -> Article:
        article = await self._gateway.get_article_by_id(article_id)
        if article is None or not (article.is_published or self._auth.is_authenticated):
            raise ArticleNotFoundError()
        return article

    async def attach_article(self, article_id: str) -> None:
        """Queue an article to be embedded in the next outgoing message."""
        article = await self._load_visible_article(article_id)
        if all(a.id != article.id for a in self._attachments):
            self._attachments.append(article)

    def detach_article(self, article_id: str) -> bool:
        before = len(self._attachments)
        self._attachments = [a for a in self._attachments if a.id != article_id]
        return len(self._attachments) != before

    async def bind_article_context(self, article_id: str | None) -> None:
        """Ground the conversation in an article; None removes the context."""
        if article_id is not None:
            await self._load_visible_article(article_id)
        self._article_context_id = article_id
        if self._session is None:
            return
        self._session.article_context_id = article_id
        await self._persist_unless_streaming()

    async def _system_instruction(self) -> str:
        instruction = self._system_prompt or DEFAULT_CHAT_PROMPT
        if self._article_context_id is None:
            return instruction
        article = await self._gateway.get_article_by_id(self._article_context_id)
        if article is None:
            logger.warning(
                "Article context missing", article_id=self._article_context_id
            )
            return instruction
        return instruction + ARTICLE_CONTEXT.format(
            title=article.title, content=article.content
        )

    # --- Sending ---

    def validate_outgoing(self, text: str, model_key: str | None = None) -> str:
        """Check a send is possible and return the model it will use.

        Selecting ``model_key`` sticks for later sends.
        """
        if not text.strip() and not self._attachments:
            raise EmptyMessageError()
        if model_key is not None:
            self.select_model(model_key)
        if self._selected_model is None:
            raise ModelNotAvailableError("default")
        return self._selected_model

    async def send(
        self,
        text: str,
        model_key: str | None = None,
        on_token: TokenCallback | None = None,
    ) -> SendResult:
        """Send a user message and stream the assistant reply into the transcript.

        The transcript is persisted once the stream has resolved, whether it
        succeeded or failed. A provider failure replaces the assistant
        message with a visible error marker.
        """
        text = text.strip()
        model = self.validate_outgoing(text, model_key)

        system_instruction = await self._system_instruction()
        await self._abort_in_flight()
        generation = self._generation

        session = self._session or self._bind_new_session(
            text or self._attachments[0].title
        )
        transcript = self._messages

        outgoing = text + "".join(reference_block(a) for a in self._attachments)
        self._attachments = []

        user_message = self._new_message(session.id, "user", outgoing)
        transcript.append(user_message)
        history = list(transcript)
        placeholder = self._new_message(session.id, "assistant", "")
        transcript.append(placeholder)

        fragments: list[str] = []

        def apply_fragment(fragment: str) -> None:
            if generation != self._generation:
                return
            fragments.append(fragment)
            placeholder.content = "".join(fragments)
            if on_token is not None:
                on_token(fragment)

        task = asyncio.create_task(
            self._completion.stream_reply(
                history, model, apply_fragment, system_prompt=system_instruction
            )
        )
        self._task = task
        self._placeholder = placeholder
        self._stream_session = session
        self._stream_transcript = transcript

        error: str | None = None
        try:
            await task
        except asyncio.CancelledError:
            if generation == self._generation:
                raise
            logger.info("Chat reply superseded", session_id=session.id)
            if self._is_detached(session):
                if not placeholder.content:
                    transcript.remove(placeholder)
                await self._save(session, transcript)
            return SendResult(
                session_id=session.id,
                user_message_id=user_message.id,
                assistant_message_id=placeholder.id,
                content=placeholder.content,
                superseded=True,
            )
        except AppException as exc:
            error = exc.message
            placeholder.content = ERROR_MARKER.format(message=exc.message)
            logger.warning(
                "Chat reply failed", session_id=session.id, model_key=model, error=error
            )
        finally:
            if self._task is task:
                self._clear_stream()

        if error is None:
            session.updated_at = utc_now()
        await self._save(session, transcript)
        logger.info(
            "Chat reply persisted",
            session_id=session.id,
            messages=len(transcript),
            failed=error is not None,
        )
        return SendResult(
            session_id=session.id,
            user_message_id=user_message.id,
            assistant_message_id=placeholder.id,
            content=placeholder.content,
            error=error,
        )

    def _bind_new_session(self, title_source: str) -> ChatSession:
        now = utc_now()
        session = ChatSession(
            id=_new_id(),
            title=derive_title(title_source),
            system_prompt=self._system_prompt,
            article_context_id=self._article_context_id,
            created_at=now,
            updated_at=now,
        )
        self._session = session
        logger.info(
            "Chat session created",
            session_id=session.id,
            guest=not self._auth.is_authenticated,
        )
        return session

    @staticmethod
    def _new_message(session_id: str, role: Role, content: str) -> ChatMessage:
        return ChatMessage(
            id=_new_id(),
            session_id=session_id,
            role=role,
            content=content,
            created_at=utc_now(),
        )

    # --- Stream bookkeeping ---

    def _stream_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def _is_detached(self, session: ChatSession | None) -> bool:
        """Whether ``session`` is no longer the one shown to the client."""
        return session is not None and session is not self._session

    def _clear_stream(self) -> None:
        self._task = None
        self._placeholder = None
        self._stream_session = None
        self._stream_transcript = []

    async def _save(self, session: ChatSession, transcript: list[ChatMessage]) -> None:
        if session.id in self._deleted_session_ids:
            logger.info("Skipping save of deleted chat session", session_id=session.id)
            return
        await self._history.save_session(session, list(transcript))

    async def _abort_in_flight(self) -> None:
        """Cancel the running stream, if any, and invalidate its fragments.

        An empty placeholder left in the visible transcript by the cancelled
        stream is dropped; a partial one is kept as it stood. A detached send
        cleans up and persists its own transcript.
        """
        self._generation += 1
        while self._task is not None and not self._task.done():
            task = self._task
            placeholder = self._placeholder
            detached = self._is_detached(self._stream_session)
            self._clear_stream()
            task.cancel()
            await asyncio.wait([task])
            if not detached and placeholder is not None and not placeholder.content:
                self._messages = [m for m in self._messages if m.id != placeholder.id]
            self._generation += 1

    async def _persist_unless_streaming(self) -> None:
        """Persist now, or leave it to the in-flight send which persists at the end."""
        if self._session is None or self.is_streaming:
            return
        await self._save(self._session, self._messages)


class ChatManagerRegistry:
    """One manager per (client id, auth flag), least recently used evicted first.

    At most ``max_managers`` are kept; a manager with a reply still streaming
    is never evicted, so the cap may be exceeded while many streams run.
    """

    def __init__(
        self,
        gateway: PersistenceGateway,
        completion: CompletionClient,
        max_managers: int = MAX_MANAGERS,
    ) -> None:
        self._gateway = gateway
        self._completion = completion
        self._max_managers = max_managers
        self._managers: OrderedDict[tuple[str, bool], ChatSessionManager] = (
            OrderedDict()
        )

    def get(self, auth: AuthContext) -> ChatSessionManager:
        key = (auth.client_id, auth.is_authenticated)
        manager = self._managers.get(key)
        if manager is None:
            manager = ChatSessionManager(auth, self._gateway, self._completion)
            self._managers[key] = manager
            self._evict(keep=key)
        else:
            self._managers.move_to_end(key)
        return manager

    def _evict(self, keep: tuple[str, bool]) -> None:
        overflow = len(self._managers) - self._max_managers
        if overflow <= 0:
            return
        idle = [
            key
            for key, manager in self._managers.items()
            if key != keep and not manager.has_pending_reply
        ]
        for key in idle[:overflow]:
            del self._managers[key]
            logger.debug("Chat manager evicted", client_id=key[0])

    def __len__(self) -> int:
        return len(self._managers)

    def __contains__(self, auth: AuthContext) -> bool:
        return (auth.client_id, auth.is_authenticated) in self._managers
