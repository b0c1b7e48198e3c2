"""Integration tests for settings router."""

from httpx import AsyncClient


class TestAIModelSettings:
    async def test_defaults(self, admin_client: AsyncClient) -> None:
        response = await admin_client.get("/api/v1/settings/ai-models")
        assert response.json()["data"] == {
            "general_model": "openrouter-v3",
            "svg_model": "anthropic-sonnet",
        }

    async def test_update(self, admin_client: AsyncClient) -> None:
        body = {"general_model": "anthropic-haiku", "svg_model": "openrouter-gpt-4o-mini"}
        response = await admin_client.put("/api/v1/settings/ai-models", json=body)
        assert response.status_code == 200

        stored = await admin_client.get("/api/v1/settings/ai-models")
        assert stored.json()["data"] == body

    async def test_unknown_model_rejected(self, admin_client: AsyncClient) -> None:
        response = await admin_client.put(
            "/api/v1/settings/ai-models",
            json={"general_model": "gpt-17", "svg_model": "anthropic-sonnet"},
        )
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "UNKNOWN_MODEL"

    async def test_guest_rejected(self, async_client: AsyncClient) -> None:
        response = await async_client.get("/api/v1/settings/ai-models")
        assert response.status_code == 401
