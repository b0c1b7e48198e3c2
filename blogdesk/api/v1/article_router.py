"""Article endpoints; guests see published articles only."""

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from blogdesk.core.exceptions import ArticleNotFoundError
from blogdesk.core.session_flag import AuthContext
from blogdesk.dependencies import get_auth_context, get_gateway, require_admin
from blogdesk.schemas.article_schema import Article, ArticleSummary, ArticleUpsertRequest
from blogdesk.schemas.field_types import utc_now
from blogdesk.schemas.response_schema import (
    ApiResponse,
    success_response,
    write_response,
)
from blogdesk.services.persistence_gateway import PersistenceGateway

router = APIRouter(prefix="/api/v1/articles", tags=["articles"])

GatewayDep = Annotated[PersistenceGateway, Depends(get_gateway)]
AuthDep = Annotated[AuthContext, Depends(get_auth_context)]


@router.get("", response_model=ApiResponse[list[ArticleSummary]])
async def list_articles(
    gateway: GatewayDep,
    auth: AuthDep,
    force_refresh: bool = Query(default=False),
) -> dict:
    """Articles, newest first."""
    articles = await gateway.get_articles(force_refresh=force_refresh)
    visible = [
        ArticleSummary.model_validate(article.model_dump())
        for article in articles
        if article.is_published or auth.is_authenticated
    ]
    return success_response(visible)


@router.get("/{article_id}", response_model=ApiResponse[Article])
async def get_article(article_id: str, gateway: GatewayDep, auth: AuthDep) -> dict:
    article = await gateway.get_article_by_id(article_id)
    if article is None or not (article.is_published or auth.is_authenticated):
        raise ArticleNotFoundError
    return success_response(article)


@router.post(
    "",
    response_model=ApiResponse[Article],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
async def create_article(body: ArticleUpsertRequest, gateway: GatewayDep) -> dict:
    now = utc_now()
    article = Article(id=str(uuid.uuid4()), created_at=now, updated_at=now, **body.model_dump())
    saved = await gateway.save_article(article)
    return write_response(article, saved, status=201)


@router.put(
    "/{article_id}",
    response_model=ApiResponse[Article],
    dependencies=[Depends(require_admin)],
)
async def update_article(
    article_id: str, body: ArticleUpsertRequest, gateway: GatewayDep
) -> dict:
    existing = await gateway.get_article_by_id(article_id)
    if existing is None:
        raise ArticleNotFoundError
    article = existing.model_copy(update={**body.model_dump(), "updated_at": utc_now()})
    saved = await gateway.save_article(article)
    return write_response(article, saved)


@router.delete(
    "/{article_id}",
    response_model=ApiResponse[dict],
    dependencies=[Depends(require_admin)],
)
async def delete_article(article_id: str, gateway: GatewayDep) -> dict:
    deleted = await gateway.delete_article(article_id)
    return write_response({"id": article_id, "deleted": deleted}, deleted)
