"""Shared test fixtures for all test modules."""

import json
from typing import Any

import httpx
import pytest

from gatewaymetrics.adapters.in_memory import InMemoryQueryFetcher
from gatewaymetrics.core.queries import ENRICHMENT_QUERIES
from tests.helpers import vector


# === Metrics Backend Fixtures ===


@pytest.fixture
def in_memory_fetcher() -> InMemoryQueryFetcher:
    """Fetcher answering the four listing queries with the fn1 example data."""
    count, count_2xx, count_non_2xx, latency = ENRICHMENT_QUERIES
    return InMemoryQueryFetcher(
        {
            count: vector(("fn1", "10")),
            count_2xx: vector(("fn1", "8")),
            count_non_2xx: vector(),
            latency: vector(("fn1", "0.25")),
        }
    )


# === ASGI Test Fixtures ===


@pytest.fixture
def listing_app():
    """Factory fixture for ASGI apps that answer with a fixed listing.

    Used in tests in place of the provider's function listing handler.
    """
    from gatewaymetrics.adapters.frameworks.asgi import Receive, Scope, Send

    def _app(
        body: Any = None,
        status: int = 200,
        content_type: bytes = b"application/json",
    ):
        if body is None:
            body = [{"name": "fn1"}]
        raw = body if isinstance(body, bytes) else json.dumps(body).encode()

        async def app(scope: Scope, receive: Receive, send: Send) -> None:
            await send(
                {
                    "type": "http.response.start",
                    "status": status,
                    "headers": [(b"content-type", content_type)],
                }
            )
            await send({"type": "http.response.body", "body": raw})

        return app

    return _app


@pytest.fixture
def asgi_scope():
    """Factory fixture for creating ASGI scope dicts."""
    from gatewaymetrics.adapters.frameworks.asgi import Scope

    def _scope(
        method: str = "GET", path: str = "/system/functions", type_: str = "http"
    ) -> Scope:
        return {
            "type": type_,
            "method": method,
            "path": path,
            "query_string": b"",
            "headers": [],
        }

    return _scope


@pytest.fixture
def asgi_receive():
    """Receive callable delivering an empty request body."""

    async def receive() -> dict[str, object]:
        return {"type": "http.request", "body": b"", "more_body": False}

    return receive


@pytest.fixture
def asgi_send_capture():
    """Fixture that returns a send callable and a responses list for capture."""

    responses: list[dict[str, object]] = []

    async def send(message: dict[str, object]) -> None:
        """Capture ASGI messages."""
        responses.append(message)

    return send, responses


@pytest.fixture
def asgi_test_client():
    """Factory fixture that creates an httpx.AsyncClient for ASGI testing.

    Usage:
        async def test_something(asgi_test_client):
            async with asgi_test_client(app) as client:
                response = await client.get("/system/functions")
    """

    def _get_client(app):
        """Return an AsyncClient context manager for the given app."""
        return httpx.AsyncClient(
            transport=httpx.ASGITransport(app=app), base_url="http://test"
        )

    return _get_client
