"""Content-authoring assistance for the admin console."""

from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from blogdesk.api.streaming import sse_response
from blogdesk.dependencies import get_completion_client, get_gateway, require_admin
from blogdesk.schemas.assist_schema import (
    IconArtResponse,
    IconRequest,
    IconResponse,
    SummaryRequest,
    SummaryResponse,
    TagsRequest,
    TagsResponse,
)
from blogdesk.schemas.chat_schema import StreamEvent
from blogdesk.schemas.response_schema import ApiResponse, success_response
from blogdesk.services.completion_client import CompletionClient, TokenCallback
from blogdesk.services.persistence_gateway import PersistenceGateway

router = APIRouter(
    prefix="/api/v1/assist",
    tags=["assist"],
    dependencies=[Depends(require_admin)],
)

GatewayDep = Annotated[PersistenceGateway, Depends(get_gateway)]
CompletionDep = Annotated[CompletionClient, Depends(get_completion_client)]


@router.post("/summary", response_model=ApiResponse[SummaryResponse])
async def summarize(
    body: SummaryRequest, gateway: GatewayDep, completion: CompletionDep
) -> dict:
    model_key = body.model_key or await gateway.get_general_model()
    summary = await completion.summarize(body.content, model_key)
    return success_response(SummaryResponse(summary=summary))


@router.post("/summary/stream")
async def stream_summary(
    body: SummaryRequest, gateway: GatewayDep, completion: CompletionDep
) -> StreamingResponse:
    """Stream the summary as Server-Sent Events."""
    model_key = body.model_key or await gateway.get_general_model()

    async def produce(on_token: TokenCallback) -> StreamEvent:
        summary = await completion.stream_summary(body.content, model_key, on_token)
        return StreamEvent(event="done", data=summary)

    return sse_response(produce)


@router.post("/tags", response_model=ApiResponse[TagsResponse])
async def suggest_tags(
    body: TagsRequest, gateway: GatewayDep, completion: CompletionDep
) -> dict:
    model_key = body.model_key or await gateway.get_general_model()
    tags = await completion.suggest_tags(
        body.title, body.content, body.existing_tags, model_key
    )
    return success_response(TagsResponse(tags=tags))


@router.post("/icon", response_model=ApiResponse[IconResponse])
async def recommend_icon(
    body: IconRequest, gateway: GatewayDep, completion: CompletionDep
) -> dict:
    """Pick a preset icon name; ``icon`` is null when nothing valid came back."""
    model_key = body.model_key or await gateway.get_general_model()
    icon = await completion.recommend_icon(
        body.title, body.description, body.available_icons, model_key
    )
    return success_response(IconResponse(icon=icon))


@router.post("/icon-art", response_model=ApiResponse[IconArtResponse])
async def generate_icon_art(
    body: IconRequest, gateway: GatewayDep, completion: CompletionDep
) -> dict:
    model_key = body.model_key or await gateway.get_svg_model()
    svg = await completion.generate_icon_art(body.title, body.description, model_key)
    return success_response(IconArtResponse(svg=svg))
