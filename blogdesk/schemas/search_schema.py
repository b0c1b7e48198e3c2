"""Search schemas."""

from pydantic import BaseModel, ConfigDict

from blogdesk.schemas.article_schema import ArticleSummary
from blogdesk.schemas.project_schema import Project


class SearchResponse(BaseModel):
    """Matching articles and projects."""

    model_config = ConfigDict(frozen=True)

    query: str
    articles: list[ArticleSummary]
    projects: list[Project]
