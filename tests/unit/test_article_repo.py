"""Unit tests for ArticleRepository."""

from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from blogdesk.models.article import ArticleRecord
from blogdesk.repositories.article_repo import ArticleRepository, parse_tags
from blogdesk.schemas.article_schema import Article

BASE_TIME = datetime(2024, 5, 1, 12, 0, tzinfo=UTC)


@pytest.fixture
def article_repo(db_session: AsyncSession) -> ArticleRepository:
    """Create an ArticleRepository backed by the test DB session."""
    return ArticleRepository(db_session)


def _article(article_id: str, offset_minutes: int = 0, **overrides: object) -> Article:
    created = BASE_TIME + timedelta(minutes=offset_minutes)
    fields: dict[str, object] = {
        "id": article_id,
        "title": f"Title {article_id}",
        "summary": "summary",
        "content": "content",
        "created_at": created,
        "updated_at": created,
        "is_published": True,
        "tags": [],
    }
    fields.update(overrides)
    return Article(**fields)  # type: ignore[arg-type]


class TestParseTags:
    def test_json_array(self) -> None:
        assert parse_tags('["Python", "AI"]') == ["Python", "AI"]

    @pytest.mark.parametrize(
        "raw", [None, "", "not json", "Python, AI", '{"a": 1}']
    )
    def test_garbage_gives_empty_list(self, raw: str | None) -> None:
        assert parse_tags(raw) == []


class TestUpsert:
    """Tests for ArticleRepository.upsert."""

    @pytest.mark.asyncio
    async def test_insert_and_read_back(self, article_repo: ArticleRepository) -> None:
        await article_repo.upsert(_article("a1", tags=["Python", "AI", "FastAPI"]))

        found = await article_repo.find_by_id("a1")
        assert found is not None
        assert found.title == "Title a1"
        assert found.tags == ["Python", "AI", "FastAPI"]
        assert found.created_at == BASE_TIME

    @pytest.mark.asyncio
    async def test_overwrite_keeps_created_at(
        self, article_repo: ArticleRepository
    ) -> None:
        await article_repo.upsert(_article("a1"))
        later = BASE_TIME + timedelta(days=1)
        await article_repo.upsert(
            _article(
                "a1",
                title="Edited",
                created_at=later,
                updated_at=later,
                is_published=False,
            )
        )

        found = await article_repo.find_by_id("a1")
        assert found is not None
        assert found.title == "Edited"
        assert found.is_published is False
        assert found.created_at == BASE_TIME
        assert found.updated_at == later

    @pytest.mark.asyncio
    async def test_tags_keep_non_ascii(
        self, article_repo: ArticleRepository, db_session: AsyncSession
    ) -> None:
        await article_repo.upsert(_article("a1", tags=["人工智能"]))
        record = await db_session.get(ArticleRecord, "a1")
        assert record is not None
        assert record.tags == '["人工智能"]'


class TestFind:
    @pytest.mark.asyncio
    async def test_find_all_newest_first(self, article_repo: ArticleRepository) -> None:
        await article_repo.upsert(_article("old", 0))
        await article_repo.upsert(_article("new", 10))
        await article_repo.upsert(_article("mid", 5))

        articles = await article_repo.find_all()
        assert [a.id for a in articles] == ["new", "mid", "old"]

    @pytest.mark.asyncio
    async def test_find_missing(self, article_repo: ArticleRepository) -> None:
        assert await article_repo.find_by_id("nope") is None


class TestDelete:
    @pytest.mark.asyncio
    async def test_delete(self, article_repo: ArticleRepository) -> None:
        await article_repo.upsert(_article("a1"))
        await article_repo.delete("a1")
        assert await article_repo.find_by_id("a1") is None

    @pytest.mark.asyncio
    async def test_delete_missing_is_noop(self, article_repo: ArticleRepository) -> None:
        await article_repo.delete("nope")
        assert await article_repo.find_all() == []
