"""BDD step definitions for the enriched function listing."""

import asyncio
import json
from dataclasses import dataclass, field
from typing import Any

import httpx
import pytest
from pytest_bdd import given, parsers, then, when

from gatewaymetrics.adapters.frameworks.asgi import (
    MetricsEnrichmentMiddleware,
    Receive,
    Scope,
    Send,
)
from gatewaymetrics.adapters.in_memory import FailingQueryFetcher, InMemoryQueryFetcher
from gatewaymetrics.core.ports import MetricsQueryPort
from gatewaymetrics.core.queries import ENRICHMENT_QUERIES
from tests.helpers import vector

# Feature-file names of the four listing queries
QUERY_NAMES = dict(
    zip(
        ["invocations", "invocations_2xx", "invocations_non_2xx", "response_time"],
        ENRICHMENT_QUERIES,
        strict=True,
    )
)


@dataclass
class ListingScenarioContext:
    """Shared state between steps in a listing scenario."""

    provider_status: int = 200
    provider_body: bytes = b"[]"
    fetcher: MetricsQueryPort = field(default_factory=InMemoryQueryFetcher)
    response: httpx.Response | None = None


def _provider_app(ctx: ListingScenarioContext):
    async def app(scope: Scope, receive: Receive, send: Send) -> None:
        await send(
            {
                "type": "http.response.start",
                "status": ctx.provider_status,
                "headers": [(b"content-type", b"application/json")],
            }
        )
        await send({"type": "http.response.body", "body": ctx.provider_body})

    return app


async def _request(ctx: ListingScenarioContext) -> httpx.Response:
    app = MetricsEnrichmentMiddleware(_provider_app(ctx), ctx.fetcher)
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app), base_url="http://gateway"
    ) as client:
        return await client.get("/system/functions")


def _function(ctx: ListingScenarioContext, name: str) -> dict[str, Any]:
    assert ctx.response is not None
    matches = [f for f in ctx.response.json() if f["name"] == name]
    assert len(matches) == 1, f"expected one function named {name!r}"
    return matches[0]


@pytest.fixture
def ctx() -> ListingScenarioContext:
    """Fresh scenario context for each test."""
    return ListingScenarioContext()


# === Given ===


@given(parsers.parse('a provider listing the functions "{names}"'))
def step_provider_listing(ctx: ListingScenarioContext, names: str) -> None:
    functions = [{"name": name.strip()} for name in names.split(",")]
    ctx.provider_body = json.dumps(functions).encode()


@given("the metrics backend reports:")
def step_backend_reports(
    ctx: ListingScenarioContext, datatable: list[list[str]]
) -> None:
    header, *rows = datatable
    assert header == ["query", "function", "value"]
    samples: dict[str, list[tuple[str, str]]] = {q: [] for q in QUERY_NAMES}
    for query, function, value in rows:
        samples[query].append((function, value))
    ctx.fetcher = InMemoryQueryFetcher(
        {QUERY_NAMES[query]: vector(*pairs) for query, pairs in samples.items()}
    )


@given("the metrics backend is unreachable")
def step_backend_unreachable(ctx: ListingScenarioContext) -> None:
    ctx.fetcher = FailingQueryFetcher("connection refused")


@given(parsers.parse("the provider answers with status {status:d}"))
def step_provider_status(ctx: ListingScenarioContext, status: int) -> None:
    ctx.provider_status = status


@given(parsers.parse('the provider answers with body "{body}"'))
def step_provider_body(ctx: ListingScenarioContext, body: str) -> None:
    ctx.provider_body = body.encode()


# === When ===


@when("the function list is requested")
def step_request_listing(ctx: ListingScenarioContext) -> None:
    ctx.response = asyncio.run(_request(ctx))


# === Then ===


@then(parsers.parse("the response status is {status:d}"))
def step_response_status(ctx: ListingScenarioContext, status: int) -> None:
    assert ctx.response is not None
    assert ctx.response.status_code == status


@then(parsers.parse('the response content type is "{content_type}"'))
def step_response_content_type(ctx: ListingScenarioContext, content_type: str) -> None:
    assert ctx.response is not None
    assert ctx.response.headers["content-type"] == content_type


@then(parsers.parse('the response text contains "{text}"'))
def step_response_text(ctx: ListingScenarioContext, text: str) -> None:
    assert ctx.response is not None
    assert text in ctx.response.text


@then("the response body is the provider's listing")
def step_response_is_listing(ctx: ListingScenarioContext) -> None:
    assert ctx.response is not None
    assert ctx.response.content == ctx.provider_body


@then(
    parsers.parse(
        'function "{name}" has metrics {count:g}, {count_2xx:g}, '
        "{count_non_2xx:g} and {latency:g}"
    )
)
def step_function_metrics(
    ctx: ListingScenarioContext,
    name: str,
    count: float,
    count_2xx: float,
    count_non_2xx: float,
    latency: float,
) -> None:
    function = _function(ctx, name)
    assert function["InvocationCount"] == count
    assert function["InvocationCount2XX"] == count_2xx
    assert function["InvocationCountNon2XX"] == count_non_2xx
    assert function["AverageResponseTime"] == latency
