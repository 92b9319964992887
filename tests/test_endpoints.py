"""Tests for the typed endpoint wrappers."""

import json

import pytest

from saaspe.api.auth import AuthApi
from saaspe.api.clients import ClientsApi, CreateClient, UpdateClient
from saaspe.api.health import HealthApi
from saaspe.services.errors import HttpStatusError

CLIENT_JSON = {
    "id": "c1",
    "companyName": "Acme Corp",
    "industry": "Manufacturing",
    "contactEmail": "jane@acme.test",
    "contactLinkedIn": "https://linkedin.com/in/jane",
    "currentTools": ["HubSpot"],
    "status": "prospect",
    "created": "2025-10-21T18:47:24.000Z",
    "updated": "2025-10-21T18:47:24.000Z",
    "proposals": [
        {"id": "p1", "title": "Q4 Outreach", "status": "draft", "created": "2025-10-22"}
    ],
}

USER_JSON = {
    "id": "u1",
    "email": "owner@agency.test",
    "firstName": "Sam",
    "lastName": "Lee",
    "role": "admin",
    "tenantId": "t1",
}

AUTH_JSON = {
    "tokens": {"accessToken": "a", "refreshToken": "r"},
    "user": USER_JSON,
    "tenant": {"id": "t1", "name": "Agency", "plan": "starter", "status": "active"},
}


class TestClientsApi:
    """Test suite for ClientsApi."""

    @pytest.mark.asyncio
    async def test_get_all(self, make_client, backend):
        """Test paginated listing with a status filter."""
        backend.script(
            "/api/v1/clients",
            (
                200,
                {
                    "data": [CLIENT_JSON],
                    "pagination": {"page": 2, "limit": 10, "total": 11, "totalPages": 2},
                },
            ),
        )
        api = ClientsApi(make_client())

        result = await api.get_all(page=2, limit=10, status="prospect")

        params = backend.requests[0].url.params
        assert params["page"] == "2"
        assert params["limit"] == "10"
        assert params["status"] == "prospect"
        assert result.pagination.total_pages == 2
        client = result.data[0]
        assert client.company_name == "Acme Corp"
        assert client.contact_linked_in == "https://linkedin.com/in/jane"
        assert client.proposals[0].title == "Q4 Outreach"

    @pytest.mark.asyncio
    async def test_get_all_without_status(self, make_client, backend):
        """Test the status filter is omitted when not given."""
        backend.script(
            "/api/v1/clients",
            (200, {"data": [], "pagination": {"page": 1, "limit": 20, "total": 0, "totalPages": 0}}),
        )
        api = ClientsApi(make_client())

        await api.get_all()

        assert "status" not in backend.requests[0].url.params

    @pytest.mark.asyncio
    async def test_create_sends_camel_case(self, make_client, backend):
        """Test payloads are serialized with backend field names."""
        backend.script("/api/v1/clients", (201, CLIENT_JSON))
        api = ClientsApi(make_client())

        created = await api.create(
            CreateClient(company_name="Acme Corp", contact_email="jane@acme.test")
        )

        body = json.loads(backend.requests[0].content)
        assert body == {"companyName": "Acme Corp", "contactEmail": "jane@acme.test"}
        assert created.id == "c1"

    @pytest.mark.asyncio
    async def test_update_sends_only_set_fields(self, make_client, backend):
        """Test PATCH carries only the fields the caller set."""
        backend.script("/api/v1/clients/c1", (200, {**CLIENT_JSON, "status": "won"}))
        api = ClientsApi(make_client())

        updated = await api.update("c1", UpdateClient(status="won"))

        request = backend.requests[0]
        assert request.method == "PATCH"
        assert json.loads(request.content) == {"status": "won"}
        assert updated.status == "won"

    @pytest.mark.asyncio
    async def test_get_one_not_found(self, make_client, backend):
        """Test backend errors propagate as HttpStatusError."""
        backend.script("/api/v1/clients/missing", (404, {"message": "Client not found"}))
        api = ClientsApi(make_client())

        with pytest.raises(HttpStatusError) as exc_info:
            await api.get_one("missing")
        assert exc_info.value.message == "Client not found"

    @pytest.mark.asyncio
    async def test_delete(self, make_client, backend):
        """Test delete issues a DELETE to the client path."""
        backend.script("/api/v1/clients/c1", 204)
        api = ClientsApi(make_client())

        await api.delete("c1")

        assert backend.requests[0].method == "DELETE"


class TestAuthApi:
    """Test suite for AuthApi."""

    @pytest.mark.asyncio
    async def test_login(self, make_client, backend):
        """Test login parses tokens, user and tenant."""
        backend.script("/api/v1/auth/login", (200, AUTH_JSON))
        api = AuthApi(make_client())

        result = await api.login("owner@agency.test", "secret")

        assert json.loads(backend.requests[0].content) == {
            "email": "owner@agency.test",
            "password": "secret",
        }
        assert result.user.tenant_id == "t1"
        assert result.tenant.plan == "starter"

    @pytest.mark.asyncio
    async def test_register_maps_agency_name(self, make_client, backend):
        """Test the tenant name is sent as agencyName."""
        backend.script("/api/v1/auth/register", (201, {**AUTH_JSON, "tenant": None}))
        api = AuthApi(make_client())

        result = await api.register("Agency", "owner@agency.test", "secret", "Sam", "Lee")

        body = json.loads(backend.requests[0].content)
        assert body["agencyName"] == "Agency"
        assert body["firstName"] == "Sam"
        assert "tenantName" not in body
        assert result.tenant is None

    @pytest.mark.asyncio
    async def test_logout_clears_cookies(self, make_client, backend):
        """Test logout drops the local session even if the call fails."""
        backend.script("/api/v1/auth/logout", (403, {}))
        client = make_client(cookies={"accessToken": "abc"})
        api = AuthApi(client)

        with pytest.raises(HttpStatusError):
            await api.logout()
        assert len(client.cookies) == 0

    @pytest.mark.asyncio
    async def test_get_me(self, make_client, backend):
        """Test the current user is parsed."""
        backend.script("/api/v1/users/me", (200, USER_JSON))
        api = AuthApi(make_client())

        user = await api.get_me()

        assert user.first_name == "Sam"


class TestHealthApi:
    """Test suite for HealthApi."""

    @pytest.mark.asyncio
    async def test_detailed_health(self, make_client, backend):
        """Test detailed health parsing."""
        backend.script(
            "/health/detailed",
            (
                200,
                {
                    "status": "degraded",
                    "timestamp": "2025-11-09T22:38:23Z",
                    "uptime": 3600.5,
                    "version": "1.4.0",
                    "environment": "staging",
                    "responseTime": 12,
                    "database": {
                        "connected": True,
                        "responseTime": 3,
                        "activeConnections": 4,
                    },
                    "providers": {"configured": {}, "activeConnections": {}},
                },
            ),
        )
        api = HealthApi(make_client())

        health = await api.get_detailed_health()

        assert health.status == "degraded"
        assert health.database.active_connections == 4

    @pytest.mark.asyncio
    async def test_probes(self, make_client, backend):
        """Test basic, readiness and liveness probes."""
        backend.script("/health", (200, {"status": "ok", "timestamp": "now"}))
        backend.script("/health/ready", (200, {"status": "ok", "ready": True}))
        backend.script("/health/live", (200, {"status": "ok", "alive": True}))
        api = HealthApi(make_client())

        assert (await api.get_basic_health()).status == "ok"
        assert (await api.get_readiness()).ready is True
        assert (await api.get_liveness()).alive is True
