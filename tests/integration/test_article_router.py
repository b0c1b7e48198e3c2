"""Integration tests for article router."""

from httpx import AsyncClient

from blogdesk.main import app
from blogdesk.services.persistence_gateway import PersistenceGateway

DRAFT = {
    "title": "Draft post",
    "summary": "Not yet",
    "content": "# WIP",
    "is_published": False,
    "tags": ["Python", " AI ", ""],
}


async def _create(client: AsyncClient, **overrides: object) -> dict:
    response = await client.post("/api/v1/articles", json={**DRAFT, **overrides})
    assert response.status_code == 201
    return response.json()["data"]


class TestCreate:
    async def test_admin_creates_article(self, admin_client: AsyncClient) -> None:
        data = await _create(admin_client)
        assert data["id"]
        assert data["tags"] == ["Python", "AI"]
        assert data["created_at"] == data["updated_at"]

    async def test_guest_cannot_create(self, async_client: AsyncClient) -> None:
        response = await async_client.post("/api/v1/articles", json=DRAFT)
        assert response.status_code == 401
        assert response.json()["error"]["message"] == "Admin session required"

    async def test_title_required(self, admin_client: AsyncClient) -> None:
        response = await admin_client.post("/api/v1/articles", json={**DRAFT, "title": ""})
        assert response.status_code == 422

    async def test_store_unavailable_is_reported(self, admin_client: AsyncClient) -> None:
        app.state.gateway = PersistenceGateway(None)
        response = await admin_client.post("/api/v1/articles", json=DRAFT)
        assert response.status_code == 201
        assert response.json()["message"] == "Store unavailable, change not saved"


class TestRead:
    async def test_guest_list_hides_drafts(
        self, admin_client: AsyncClient, async_client: AsyncClient
    ) -> None:
        await _create(admin_client)
        published = await _create(admin_client, title="Live", is_published=True)

        guest_list = (await async_client.get("/api/v1/articles")).json()["data"]
        admin_list = (await admin_client.get("/api/v1/articles")).json()["data"]

        assert [a["id"] for a in guest_list] == [published["id"]]
        assert len(admin_list) == 2
        assert "content" not in guest_list[0]

    async def test_guest_cannot_open_draft(
        self, admin_client: AsyncClient, async_client: AsyncClient
    ) -> None:
        draft = await _create(admin_client)

        response = await async_client.get(f"/api/v1/articles/{draft['id']}")
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "ARTICLE_NOT_FOUND"

        admin_view = await admin_client.get(f"/api/v1/articles/{draft['id']}")
        assert admin_view.json()["data"]["content"] == "# WIP"

    async def test_force_refresh(self, admin_client: AsyncClient) -> None:
        await _create(admin_client)
        response = await admin_client.get("/api/v1/articles", params={"force_refresh": True})
        assert len(response.json()["data"]) == 1


class TestUpdate:
    async def test_update_keeps_created_at(self, admin_client: AsyncClient) -> None:
        created = await _create(admin_client)

        response = await admin_client.put(
            f"/api/v1/articles/{created['id']}",
            json={**DRAFT, "title": "Published post", "is_published": True},
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["title"] == "Published post"
        assert data["created_at"] == created["created_at"]
        assert data["is_published"] is True

    async def test_update_missing(self, admin_client: AsyncClient) -> None:
        response = await admin_client.put("/api/v1/articles/missing", json=DRAFT)
        assert response.status_code == 404


class TestDelete:
    async def test_delete(self, admin_client: AsyncClient) -> None:
        created = await _create(admin_client)

        response = await admin_client.delete(f"/api/v1/articles/{created['id']}")
        assert response.json()["data"] == {"id": created["id"], "deleted": True}

        missing = await admin_client.get(f"/api/v1/articles/{created['id']}")
        assert missing.status_code == 404
