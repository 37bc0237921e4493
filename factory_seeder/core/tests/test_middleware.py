"""Tests for the request ID and access logging middleware."""

import uuid

import pytest
from structlog.testing import capture_logs

from factory_seeder.core.logging import request_id_ctx


def completed_events(logs):
    return [e for e in logs if e["event"] == "http.request_completed"]


@pytest.mark.asyncio
async def test_generates_uuid_request_id(client):
    """A request without X-Request-ID gets a fresh UUID4."""
    response = await client.get("/health")

    request_id = response.headers["X-Request-ID"]
    assert uuid.UUID(request_id).version == 4


@pytest.mark.asyncio
async def test_echoes_client_request_id(client):
    response = await client.get("/api/factories", headers={"X-Request-ID": "seed-run-42"})

    assert response.headers["X-Request-ID"] == "seed-run-42"


@pytest.mark.asyncio
async def test_ids_differ_between_requests(client):
    first = await client.get("/health")
    second = await client.get("/health")

    assert first.headers["X-Request-ID"] != second.headers["X-Request-ID"]


@pytest.mark.asyncio
async def test_successful_request_logged_at_info(client):
    with capture_logs() as logs:
        await client.get("/api/factories?page=1")

    (event,) = completed_events(logs)
    assert event["log_level"] == "info"
    assert event["method"] == "GET"
    assert event["path"] == "/api/factories"
    assert event["status_code"] == 200
    assert isinstance(event["duration_ms"], float)
    assert event["duration_ms"] >= 0


@pytest.mark.asyncio
async def test_client_error_logged_at_warning(client):
    """Responses with status >= 400 are logged as warnings."""
    with capture_logs() as logs:
        response = await client.get("/custom_seeds/missing")

    assert response.status_code == 404
    (event,) = completed_events(logs)
    assert event["log_level"] == "warning"
    assert event["status_code"] == 404


@pytest.mark.asyncio
async def test_request_id_reset_after_response(client):
    """The request ID does not leak into code running after the request."""
    await client.get("/health", headers={"X-Request-ID": "short-lived"})

    assert request_id_ctx.get() is None
