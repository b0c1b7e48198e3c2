"""Chat endpoints driving the caller's Chat Session Manager."""

import json
from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from blogdesk.api.streaming import sse_response
from blogdesk.dependencies import get_chat_manager
from blogdesk.schemas.chat_schema import (
    AttachArticleRequest,
    ChatSession,
    ChatStateResponse,
    ModelInfo,
    ModelListResponse,
    SelectModelRequest,
    SendMessageRequest,
    StreamEvent,
    SystemPromptRequest,
)
from blogdesk.schemas.response_schema import ApiResponse, success_response
from blogdesk.services.chat_session_manager import ChatSessionManager, default_model_key
from blogdesk.services.completion_client import TokenCallback

router = APIRouter(prefix="/api/v1/chat", tags=["chat"])

ManagerDep = Annotated[ChatSessionManager, Depends(get_chat_manager)]


@router.get("/models", response_model=ApiResponse[ModelListResponse])
async def list_models(manager: ManagerDep) -> dict:
    """Models the caller may select: everything for admins, free ones for guests."""
    models = manager.available_models()
    return success_response(
        ModelListResponse(
            models=[
                ModelInfo(
                    key=spec.key,
                    name=spec.name,
                    short_name=spec.short_name,
                    provider=spec.provider,
                    is_free=spec.is_free,
                )
                for spec in models
            ],
            default_model=default_model_key(models),
        )
    )


@router.get("/state", response_model=ApiResponse[ChatStateResponse])
async def get_state(manager: ManagerDep) -> dict:
    return success_response(manager.snapshot())


@router.get("/sessions", response_model=ApiResponse[list[ChatSession]])
async def list_sessions(manager: ManagerDep) -> dict:
    return success_response(await manager.list_sessions())


@router.post(
    "/sessions/{session_id}/activate", response_model=ApiResponse[ChatStateResponse]
)
async def activate_session(session_id: str, manager: ManagerDep) -> dict:
    """Load a stored session, replacing the in-memory conversation."""
    await manager.switch_session(session_id)
    return success_response(manager.snapshot())


@router.delete("/sessions/{session_id}", response_model=ApiResponse[ChatStateResponse])
async def delete_session(session_id: str, manager: ManagerDep) -> dict:
    await manager.delete_session(session_id)
    return success_response(manager.snapshot())


@router.post("/new", response_model=ApiResponse[ChatStateResponse])
async def new_conversation(manager: ManagerDep) -> dict:
    await manager.reset()
    return success_response(manager.snapshot())


@router.put("/system-prompt", response_model=ApiResponse[ChatStateResponse])
async def set_system_prompt(body: SystemPromptRequest, manager: ManagerDep) -> dict:
    await manager.set_system_prompt(body.system_prompt)
    return success_response(manager.snapshot())


@router.put("/model", response_model=ApiResponse[ChatStateResponse])
async def select_model(body: SelectModelRequest, manager: ManagerDep) -> dict:
    manager.select_model(body.model_key)
    return success_response(manager.snapshot())


@router.post("/attachments", response_model=ApiResponse[ChatStateResponse])
async def attach_article(body: AttachArticleRequest, manager: ManagerDep) -> dict:
    """Queue an article for the next message, optionally as conversation context."""
    await manager.attach_article(body.article_id)
    if body.bind_context:
        await manager.bind_article_context(body.article_id)
    return success_response(manager.snapshot())


@router.delete(
    "/attachments/{article_id}", response_model=ApiResponse[ChatStateResponse]
)
async def detach_article(article_id: str, manager: ManagerDep) -> dict:
    manager.detach_article(article_id)
    return success_response(manager.snapshot())


@router.delete("/article-context", response_model=ApiResponse[ChatStateResponse])
async def clear_article_context(manager: ManagerDep) -> dict:
    await manager.bind_article_context(None)
    return success_response(manager.snapshot())


@router.post("/stream")
async def stream_chat(body: SendMessageRequest, manager: ManagerDep) -> StreamingResponse:
    """Send a message and stream the reply as Server-Sent Events.

    Emits ``token`` events, then ``done`` with the session and message ids,
    or ``error`` when the provider failed.
    """
    manager.validate_outgoing(body.message, body.model_key)

    async def produce(on_token: TokenCallback) -> StreamEvent:
        result = await manager.send(body.message, body.model_key, on_token)
        payload = {
            "session_id": result.session_id,
            "user_message_id": result.user_message_id,
            "assistant_message_id": result.assistant_message_id,
            "superseded": result.superseded,
        }
        if result.error is not None:
            return StreamEvent(
                event="error",
                data=json.dumps({**payload, "message": result.error}, ensure_ascii=False),
            )
        return StreamEvent(event="done", data=json.dumps(payload))

    return sse_response(produce)
