"""Article repository for database operations."""

import json

import structlog
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from blogdesk.models.article import ArticleRecord
from blogdesk.schemas.article_schema import Article

logger = structlog.get_logger()


def parse_tags(raw: str | None) -> list[str]:
    """Decode the stored JSON tag list, tolerating legacy garbage."""
    if not raw:
        return []
    try:
        value = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("Unparseable tags column", raw=raw[:100])
        return []
    if not isinstance(value, list):
        return []
    return [str(tag) for tag in value]


def to_article(record: ArticleRecord) -> Article:
    return Article(
        id=record.id,
        title=record.title,
        summary=record.summary,
        content=record.content,
        created_at=record.created_at,
        updated_at=record.updated_at,
        is_published=record.is_published,
        tags=parse_tags(record.tags),
    )


class ArticleRepository:
    """Encapsulates article queries."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def find_all(self) -> list[Article]:
        """All articles, newest first."""
        result = await self._session.execute(
            select(ArticleRecord).order_by(ArticleRecord.created_at.desc())
        )
        return [to_article(record) for record in result.scalars().all()]

    async def find_by_id(self, article_id: str) -> Article | None:
        record = await self._session.get(ArticleRecord, article_id)
        return to_article(record) if record else None

    async def upsert(self, article: Article) -> None:
        """Insert, or overwrite every field except ``created_at``."""
        tags_json = json.dumps(article.tags, ensure_ascii=False)
        record = await self._session.get(ArticleRecord, article.id)
        if record is None:
            self._session.add(
                ArticleRecord(
                    id=article.id,
                    title=article.title,
                    summary=article.summary,
                    content=article.content,
                    created_at=article.created_at,
                    updated_at=article.updated_at,
                    is_published=article.is_published,
                    tags=tags_json,
                )
            )
        else:
            record.title = article.title
            record.summary = article.summary
            record.content = article.content
            record.updated_at = article.updated_at
            record.is_published = article.is_published
            record.tags = tags_json
        await self._session.flush()

    async def delete(self, article_id: str) -> None:
        await self._session.execute(
            delete(ArticleRecord).where(ArticleRecord.id == article_id)
        )
