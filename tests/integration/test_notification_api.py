"""API tests for owner notifications."""

from uuid import uuid4

import pytest


class TestNotifications:
    @pytest.mark.asyncio
    async def test_promotion_notifies_owner(self, async_client, approved_org, owner_headers, admin_headers):
        owner_view = (await async_client.get("/api/notifications", headers=owner_headers)).json()
        admin_view = (await async_client.get("/api/notifications", headers=admin_headers)).json()

        assert owner_view["total"] == 1
        assert owner_view["unread_count"] == 1
        item = owner_view["items"][0]
        assert item["notification_type"] == "organization_approved"
        assert item["link"] == f"/organizations/{approved_org['id']}"
        assert item["metadata"]["organization_id"] == approved_org["id"]
        assert admin_view["total"] == 0

    @pytest.mark.asyncio
    async def test_mark_read(self, async_client, approved_org, owner_headers):
        item = (await async_client.get("/api/notifications", headers=owner_headers)).json()["items"][0]

        response = await async_client.post(
            f"/api/notifications/{item['id']}/read", headers=owner_headers
        )

        assert response.status_code == 200
        assert response.json()["read_at"] is not None
        count = await async_client.get("/api/notifications/unread-count", headers=owner_headers)
        assert count.json() == {"unread_count": 0}

    @pytest.mark.asyncio
    async def test_mark_all_read(self, async_client, approved_org, owner_headers, admin_headers):
        await async_client.patch(
            f"/api/organizations/{approved_org['id']}/status",
            json={"status": "rejected"},
            headers=admin_headers,
        )

        response = await async_client.post("/api/notifications/read-all", headers=owner_headers)

        assert response.json() == {"unread_count": 0}
        unread = (await async_client.get(
            "/api/notifications", params={"unread_only": True}, headers=owner_headers
        )).json()
        assert unread["total"] == 0

    @pytest.mark.asyncio
    async def test_cannot_read_someone_elses(self, async_client, approved_org, owner_headers, other_headers):
        item = (await async_client.get("/api/notifications", headers=owner_headers)).json()["items"][0]

        response = await async_client.post(
            f"/api/notifications/{item['id']}/read", headers=other_headers
        )

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_unknown_notification(self, async_client, owner_headers):
        response = await async_client.post(
            f"/api/notifications/{uuid4()}/read", headers=owner_headers
        )

        assert response.status_code == 404
        assert response.json()["error"] == "not_found"

    @pytest.mark.asyncio
    async def test_reaffirming_a_status_is_silent(self, async_client, approved_org, owner_headers, admin_headers):
        await async_client.patch(
            f"/api/organizations/{approved_org['id']}/status",
            json={"status": "approved"},
            headers=admin_headers,
        )

        listing = (await async_client.get("/api/notifications", headers=owner_headers)).json()

        assert listing["total"] == 1


class TestHealth:
    @pytest.mark.asyncio
    async def test_health(self, async_client):
        response = await async_client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok", "service": "orgportal"}

    @pytest.mark.asyncio
    async def test_unknown_route_uses_error_envelope(self, async_client):
        response = await async_client.get("/api/nothing-here")

        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "Not Found", "error": "not_found"}

    @pytest.mark.asyncio
    async def test_request_id_is_echoed(self, async_client):
        response = await async_client.get("/health", headers={"X-Request-ID": "req-123"})

        assert response.headers["X-Request-ID"] == "req-123"
