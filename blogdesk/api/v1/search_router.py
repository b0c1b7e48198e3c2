"""Site search endpoint."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from blogdesk.core.session_flag import AuthContext
from blogdesk.dependencies import get_auth_context, get_search_service
from blogdesk.schemas.response_schema import ApiResponse, success_response
from blogdesk.schemas.search_schema import SearchResponse
from blogdesk.services.search_service import SearchService

router = APIRouter(prefix="/api/v1/search", tags=["search"])


@router.get("", response_model=ApiResponse[SearchResponse])
async def search(
    search_service: Annotated[SearchService, Depends(get_search_service)],
    auth: Annotated[AuthContext, Depends(get_auth_context)],
    q: str = Query(default="", max_length=200),
) -> dict:
    return success_response(await search_service.search(q, auth))
