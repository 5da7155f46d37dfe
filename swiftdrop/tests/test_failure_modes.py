"""
Failure Injection Tests.

Validates the error envelopes and behaviour when dependencies misbehave.
"""

import pytest
from httpx import AsyncClient, ASGITransport

import swiftdrop.app.core.redis_client as redis_client_module
from swiftdrop.app.core.exceptions import StorageError
from swiftdrop.app.db.session import get_db
from swiftdrop.app.main import app
from swiftdrop.app.services.parcel_service import ParcelService
from swiftdrop.tests.helpers import auth_headers, create_parcel


class BrokenRedis:
    """Redis double whose every call fails like a dropped connection."""

    async def set(self, *args, **kwargs):
        raise ConnectionError("Redis unavailable")

    async def exists(self, *args, **kwargs):
        raise ConnectionError("Redis unavailable")


@pytest.mark.asyncio
async def test_storage_error_hides_details(client, mocker):
    """Storage faults become a generic 500 in the error envelope."""
    mocker.patch.object(
        ParcelService,
        "get_by_tracking_id",
        side_effect=StorageError("connection refused by db-primary:5432"),
    )

    response = await client.get("/v1/parcels/track/SWD-20240101-ABCDEFGH")

    assert response.status_code == 500
    assert response.json() == {"status": "error", "message": "Server error"}


@pytest.mark.asyncio
async def test_unhandled_exception_envelope(session_factory, redis_mock, mocker):
    """Unexpected exceptions still answer with the error envelope."""
    mocker.patch.object(ParcelService, "get_by_tracking_id", side_effect=RuntimeError("boom"))

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    try:
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            response = await ac.get("/v1/parcels/track/SWD-20240101-ABCDEFGH")
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 500
    assert response.json() == {"status": "error", "message": "Server error"}


@pytest.mark.asyncio
async def test_unknown_route_envelope(client):
    response = await client.get("/v1/does-not-exist")
    assert response.status_code == 404
    assert response.json() == {"status": "fail", "message": "Not Found"}


@pytest.mark.asyncio
async def test_malformed_json_is_bad_request(client, sender):
    response = await client.post(
        "/v1/parcels",
        content="{not json",
        headers={**auth_headers(sender["token"]), "Content-Type": "application/json"},
    )
    assert response.status_code == 400
    assert response.json()["status"] == "fail"


@pytest.mark.asyncio
async def test_revocation_check_survives_redis_outage(client, sender, receiver, monkeypatch):
    """With Redis down, valid tokens keep working and logout still succeeds."""
    monkeypatch.setattr(redis_client_module, "redis_client", BrokenRedis())

    data = await create_parcel(client, sender["token"], receiver["user_id"])
    assert data["status"] == "Created"

    response = await client.post("/v1/auth/logout", headers=auth_headers(sender["token"]))
    assert response.status_code == 200

    response = await client.get("/health")
    assert response.json()["status"] == "healthy"
    assert response.json()["redis"] == "down"


@pytest.mark.asyncio
@pytest.mark.parametrize("origin", [
    "http://localhost:5173",
    "https://swiftdrop-client.netlify.app",
    "https://deploy-preview-12--swiftdrop.netlify.app",
])
async def test_cors_allows_known_origins(client, origin):
    response = await client.options(
        "/v1/parcels",
        headers={"Origin": origin, "Access-Control-Request-Method": "POST"},
    )
    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == origin
    assert response.headers["access-control-allow-credentials"] == "true"


@pytest.mark.asyncio
async def test_cors_blocks_unknown_origin(client):
    response = await client.options(
        "/v1/parcels",
        headers={"Origin": "https://evil.example.com", "Access-Control-Request-Method": "POST"},
    )
    assert response.status_code == 400
    assert "access-control-allow-origin" not in response.headers


@pytest.mark.asyncio
async def test_correlation_id_is_echoed(client):
    response = await client.get("/health", headers={"X-Correlation-ID": "req-42"})
    assert response.headers["X-Correlation-ID"] == "req-42"
    assert "X-Process-Time" in response.headers

    response = await client.get("/health")
    assert response.headers["X-Correlation-ID"]


@pytest.mark.asyncio
async def test_health_and_root(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert response.json()["redis"] == "up"

    response = await client.get("/")
    assert response.json()["message"] == "SwiftDrop API is running"


@pytest.mark.asyncio
async def test_seed_users_is_idempotent(session_factory):
    from swiftdrop.seed_users import seed_users

    assert await seed_users(session_factory) == ["admin", "sender", "receiver"]
    assert await seed_users(session_factory) == []


@pytest.mark.asyncio
async def test_openapi_documents_error_envelope(client):
    response = await client.get("/openapi.json")
    assert response.status_code == 200
    schema = response.json()

    envelope = schema["components"]["schemas"]["ErrorResponse"]
    assert set(envelope["properties"]) == {"status", "message"}

    cancel = schema["paths"]["/v1/parcels/{parcel_id}/cancel"]["patch"]["responses"]
    for code in ("400", "401", "403", "404", "500"):
        assert cancel[code]["content"]["application/json"]["schema"]["$ref"].endswith("/ErrorResponse")
