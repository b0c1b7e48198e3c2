"""Site search over articles and projects."""

from blogdesk.core.session_flag import AuthContext
from blogdesk.schemas.article_schema import Article, ArticleSummary
from blogdesk.schemas.project_schema import Project
from blogdesk.schemas.search_schema import SearchResponse
from blogdesk.services.persistence_gateway import PersistenceGateway


def _article_matches(article: Article, needle: str) -> bool:
    return (
        needle in article.title.lower()
        or needle in article.summary.lower()
        or any(needle in tag.lower() for tag in article.tags)
    )


def _project_matches(project: Project, needle: str) -> bool:
    return (
        needle in project.title.lower()
        or needle in project.description.lower()
        or needle in project.url.lower()
    )


class SearchService:
    """Case-insensitive substring search; guests never see drafts."""

    def __init__(self, gateway: PersistenceGateway) -> None:
        self._gateway = gateway

    async def search(self, query: str, auth: AuthContext) -> SearchResponse:
        needle = query.strip().lower()
        if not needle:
            return SearchResponse(query=query, articles=[], projects=[])

        articles = [
            ArticleSummary.model_validate(article.model_dump())
            for article in await self._gateway.get_articles()
            if (article.is_published or auth.is_authenticated)
            and _article_matches(article, needle)
        ]
        projects = [
            project
            for project in await self._gateway.get_projects()
            if _project_matches(project, needle)
        ]
        return SearchResponse(query=query, articles=articles, projects=projects)
