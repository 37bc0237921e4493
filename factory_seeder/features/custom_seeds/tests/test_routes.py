"""Route tests for custom seed pages and runs."""

import pytest
from httpx import AsyncClient


class TestPages:
    @pytest.mark.asyncio
    async def test_list_seeds(self, client: AsyncClient) -> None:
        """Index should list every registered seed."""
        response = await client.get("/custom_seeds")

        assert response.status_code == 200
        for name in ("greeting", "promote_users", "always_fails"):
            assert f'href="/custom_seeds/{name}"' in response.text

    @pytest.mark.asyncio
    async def test_search(self, client: AsyncClient) -> None:
        """Search should narrow the list."""
        response = await client.get("/custom_seeds", params={"q": "emails"})

        assert 'href="/custom_seeds/promote_users"' in response.text
        assert 'href="/custom_seeds/greeting"' not in response.text

    @pytest.mark.asyncio
    async def test_search_without_matches(self, client: AsyncClient) -> None:
        response = await client.get("/custom_seeds", params={"q": "zzz"})

        assert 'No custom seeds match "zzz"' in response.text

    @pytest.mark.asyncio
    async def test_seed_detail_form(self, client: AsyncClient) -> None:
        """Detail page should render one input per parameter."""
        response = await client.get("/custom_seeds/promote_users")

        assert response.status_code == 200
        assert 'name="role"' in response.text
        assert '<option value="admin"' in response.text
        assert 'name="emails"' in response.text

    @pytest.mark.asyncio
    async def test_unknown_seed(self, client: AsyncClient) -> None:
        response = await client.get("/custom_seeds/missing")

        assert response.status_code == 404
        assert response.json()["code"] == "SEED_NOT_FOUND"


class TestRun:
    @pytest.mark.asyncio
    async def test_run_with_form_strings(self, client: AsyncClient) -> None:
        """Raw strings should be coerced before validation."""
        response = await client.post(
            "/custom_seeds/greeting/generate",
            json={"arguments": {"name": "Ada", "count": "2", "shout": "true"}},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["result"] == ["HELLO, ADA!", "HELLO, ADA!"]
        assert data["error"] is None
        assert data["redirect_url"] == f"/custom_seeds/greeting?log_id={data['log_id']}"

        page = await client.get(data["redirect_url"])
        assert "Seed &#39;greeting&#39; executed successfully" in page.text
        assert "Execution log" in page.text

    @pytest.mark.asyncio
    async def test_blank_optional_arguments_use_defaults(self, client: AsyncClient) -> None:
        response = await client.post(
            "/custom_seeds/greeting/generate",
            json={"arguments": {"name": "Ada", "count": "", "shout": ""}},
        )

        assert response.json()["result"] == ["Hello, Ada!"]

    @pytest.mark.asyncio
    async def test_invalid_arguments(self, client: AsyncClient) -> None:
        """Validation failures should be reported with success=false."""
        response = await client.post(
            "/custom_seeds/greeting/generate",
            json={"arguments": {"count": "11"}},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is False
        assert data["result"] is None
        assert "Missing required parameters: name" in data["error"]
        assert "must be <= 10" in data["error"]

    @pytest.mark.asyncio
    async def test_symbol_and_array_arguments(self, client: AsyncClient) -> None:
        response = await client.post(
            "/custom_seeds/promote_users/generate",
            json={"arguments": {"role": "admin", "emails": "a@example.com, b@example.com"}},
        )

        data = response.json()
        assert data["success"] is True
        assert data["result"] == {"role": "admin", "emails": ["a@example.com", "b@example.com"]}

    @pytest.mark.asyncio
    async def test_disallowed_symbol(self, client: AsyncClient) -> None:
        response = await client.post(
            "/custom_seeds/promote_users/generate",
            json={"arguments": {"role": "owner"}},
        )

        data = response.json()
        assert data["success"] is False
        assert data["error"] == "Parameter 'role' must be one of: admin, member"

    @pytest.mark.asyncio
    async def test_seed_body_failure(self, client: AsyncClient) -> None:
        response = await client.post("/custom_seeds/always_fails/generate", json={})

        data = response.json()
        assert data["success"] is False
        assert data["error"] == "database is on fire"
        assert data["message"] == "Seed 'always_fails' failed: database is on fire"

    @pytest.mark.asyncio
    async def test_unknown_seed(self, client: AsyncClient) -> None:
        response = await client.post("/custom_seeds/missing/generate", json={})

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_forbidden_in_production(self, production_client: AsyncClient) -> None:
        response = await production_client.post(
            "/custom_seeds/greeting/generate",
            json={"arguments": {"name": "Ada"}},
        )

        assert response.status_code == 403
