"""Integration tests for search router."""

from httpx import AsyncClient


class TestSearch:
    async def test_search(
        self, admin_client: AsyncClient, async_client: AsyncClient
    ) -> None:
        await admin_client.post(
            "/api/v1/articles",
            json={"title": "LangChain notes", "is_published": True, "tags": ["AI"]},
        )
        await admin_client.post(
            "/api/v1/articles", json={"title": "LangChain draft", "is_published": False}
        )

        guest = (await async_client.get("/api/v1/search", params={"q": "langchain"})).json()
        admin = (await admin_client.get("/api/v1/search", params={"q": "langchain"})).json()

        assert [a["title"] for a in guest["data"]["articles"]] == ["LangChain notes"]
        assert len(admin["data"]["articles"]) == 2

    async def test_empty_query(self, async_client: AsyncClient) -> None:
        response = await async_client.get("/api/v1/search")
        assert response.json()["data"] == {"query": "", "articles": [], "projects": []}
