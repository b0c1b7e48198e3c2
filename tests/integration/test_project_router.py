"""Integration tests for project router."""

from httpx import AsyncClient

from blogdesk.api.v1.project_router import new_project_id

PROJECT = {
    "title": "Blog engine",
    "description": "This site",
    "url": "https://blog.example",
    "icon_type": "preset",
    "preset_icon": "Globe",
    "custom_svg": "<svg/>",
}


class TestNewProjectId:
    def test_ids_increase(self) -> None:
        ids = [int(new_project_id()) for _ in range(5)]
        assert ids == sorted(set(ids))


class TestProjects:
    async def test_create_drops_unselected_icons(self, admin_client: AsyncClient) -> None:
        response = await admin_client.post("/api/v1/projects", json=PROJECT)

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["preset_icon"] == "Globe"
        assert data["custom_svg"] is None
        assert data["id"].isdigit()

    async def test_list_newest_first(
        self, admin_client: AsyncClient, async_client: AsyncClient
    ) -> None:
        await admin_client.post("/api/v1/projects", json={**PROJECT, "title": "First"})
        await admin_client.post("/api/v1/projects", json={**PROJECT, "title": "Second"})

        response = await async_client.get("/api/v1/projects")
        assert [p["title"] for p in response.json()["data"]] == ["Second", "First"]

    async def test_preset_without_icon_rejected(self, admin_client: AsyncClient) -> None:
        response = await admin_client.post(
            "/api/v1/projects", json={**PROJECT, "preset_icon": None}
        )
        assert response.status_code == 422
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    async def test_guest_cannot_create(self, async_client: AsyncClient) -> None:
        response = await async_client.post("/api/v1/projects", json=PROJECT)
        assert response.status_code == 401

    async def test_update(self, admin_client: AsyncClient) -> None:
        created = (await admin_client.post("/api/v1/projects", json=PROJECT)).json()["data"]

        response = await admin_client.put(
            f"/api/v1/projects/{created['id']}",
            json={**PROJECT, "icon_type": "generated", "custom_svg": "<svg></svg>"},
        )

        data = response.json()["data"]
        assert data["id"] == created["id"]
        assert data["icon_type"] == "generated"
        assert data["preset_icon"] is None

    async def test_update_missing(self, admin_client: AsyncClient) -> None:
        response = await admin_client.put("/api/v1/projects/123", json=PROJECT)
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "PROJECT_NOT_FOUND"

    async def test_delete(self, admin_client: AsyncClient) -> None:
        created = (await admin_client.post("/api/v1/projects", json=PROJECT)).json()["data"]
        await admin_client.delete(f"/api/v1/projects/{created['id']}")
        assert (await admin_client.get("/api/v1/projects")).json()["data"] == []
