"""Chat request, response and entity schemas."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from blogdesk.schemas.field_types import UtcDatetime

Role = Literal["user", "assistant", "system"]
SessionStateName = Literal["unbound", "bound"]


class ChatSession(BaseModel):
    """One conversation thread with its own system prompt."""

    id: str = Field(min_length=1, max_length=64)
    title: str
    system_prompt: str = ""
    article_context_id: str | None = None
    created_at: UtcDatetime
    updated_at: UtcDatetime


class ChatMessage(BaseModel):
    """Individual chat message; ``content`` grows while a reply streams."""

    id: str = Field(min_length=1, max_length=64)
    session_id: str
    role: Role
    content: str = ""
    created_at: UtcDatetime


class AttachedArticle(BaseModel):
    """Article reference pending for the next outgoing message."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    summary: str


class ModelInfo(BaseModel):
    """Selectable completion model."""

    model_config = ConfigDict(frozen=True)

    key: str
    name: str
    short_name: str
    provider: str
    is_free: bool


class ModelListResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    models: list[ModelInfo]
    default_model: str | None


class ChatStateResponse(BaseModel):
    """Snapshot of a client's chat state machine."""

    model_config = ConfigDict(frozen=True)

    state: SessionStateName
    session: ChatSession | None
    messages: list[ChatMessage]
    attached_articles: list[AttachedArticle]
    system_prompt: str
    article_context_id: str | None
    selected_model: str | None
    is_streaming: bool


class SendMessageRequest(BaseModel):
    """Outgoing user message; attachments are taken from the manager state."""

    message: str = Field(default="", max_length=8000)
    model_key: str | None = None


class AttachArticleRequest(BaseModel):
    article_id: str = Field(min_length=1, max_length=64)
    bind_context: bool = Field(
        default=False,
        description="Also record the article as the conversation's context",
    )


class SystemPromptRequest(BaseModel):
    system_prompt: str = Field(max_length=8000)


class SelectModelRequest(BaseModel):
    model_key: str = Field(min_length=1)


class StreamEvent(BaseModel):
    """Server-Sent Event for streaming responses."""

    event: Literal["token", "done", "error"]
    data: str
