"""Transport-agnostic enrichment of a captured function listing.

Framework adapters capture the upstream listing response, hand it to
:func:`enrich_function_list`, and write back whatever it returns. All
decisions about fallback and error responses live here.
"""

import asyncio
import json
from collections.abc import Sequence
from dataclasses import dataclass, field

from gatewaymetrics.config import EnrichmentConfig
from gatewaymetrics.core.errors import (
    MetricsQueryError,
    MissingUpstreamBodyError,
    ResponseSerializationError,
    UpstreamMalformedError,
    UpstreamUnavailableError,
)
from gatewaymetrics.core.logs import get_logger, log_exception
from gatewaymetrics.core.merge import mix_in
from gatewaymetrics.core.models import FunctionRecord, QueryResult, parse_function_list
from gatewaymetrics.core.ports import MetricsQueryPort
from gatewaymetrics.core.queries import ENRICHMENT_QUERIES

logger = get_logger(__name__)

JSON_CONTENT_TYPE = "application/json"
TEXT_CONTENT_TYPE = "text/plain"

MISSING_BODY_MESSAGE = "Upstream call had empty body."
UPSTREAM_STATUS_MESSAGE = (
    "Error pulling metrics from provider/backend. Status code: {status}"
)
UPSTREAM_PARSE_MESSAGE = "Error parsing metrics from upstream provider/backend."
SERIALIZATION_MESSAGE = "Error serializing enriched function list."


@dataclass(frozen=True)
class UpstreamResponse:
    """Response captured from the wrapped listing handler.

    Attributes:
        status: HTTP status code, 0 if the handler never started a response.
        headers: Raw response headers.
        body: Complete body, or None if the handler sent no response.
    """

    status: int
    headers: list[tuple[bytes, bytes]] = field(default_factory=list)
    body: bytes | None = None


@dataclass(frozen=True)
class EnrichedResponse:
    """Response to send back to the client."""

    status: int
    content_type: str
    body: bytes

    @classmethod
    def json(cls, body: bytes) -> "EnrichedResponse":
        return cls(200, JSON_CONTENT_TYPE, body)

    @classmethod
    def error(cls, message: str) -> "EnrichedResponse":
        return cls(500, TEXT_CONTENT_TYPE, message.encode())


# @tra: Core.Enrich.SequentialStopsEarly
async def _fetch_sequentially(
    fetcher: MetricsQueryPort, expressions: Sequence[str]
) -> list[QueryResult]:
    results: list[QueryResult] = []
    for expression in expressions:
        results.append(await _fetch_one(fetcher, expression))
    return results


# @tra: Core.Enrich.ConcurrentCancels
async def _fetch_concurrently(
    fetcher: MetricsQueryPort, expressions: Sequence[str]
) -> list[QueryResult]:
    try:
        async with asyncio.TaskGroup() as group:
            tasks = [
                group.create_task(_fetch_one(fetcher, expression))
                for expression in expressions
            ]
    except ExceptionGroup as eg:
        # The first failure cancels the remaining queries
        raise eg.exceptions[0]
    return [task.result() for task in tasks]


async def _fetch_one(fetcher: MetricsQueryPort, expression: str) -> QueryResult:
    try:
        return await fetcher.fetch(expression)
    except MetricsQueryError:
        raise
    except Exception as e:
        raise MetricsQueryError(f"query {expression!r} failed: {e}") from e


# @tra: Core.Enrich.AllQueriesIssued
# @tra: Core.Enrich.ResultOrder
async def fetch_enrichment_results(
    fetcher: MetricsQueryPort,
    concurrent: bool = True,
    expressions: Sequence[str] = ENRICHMENT_QUERIES,
) -> list[QueryResult]:
    """Run the enrichment queries and return their results in order.

    Args:
        fetcher: Metrics backend to query.
        concurrent: Run the queries concurrently rather than in sequence.
        expressions: Encoded expressions, defaults to the four listing queries.

    Raises:
        MetricsQueryError: On the first failing query. Remaining queries are
            cancelled (concurrent) or not issued (sequential).
    """
    if concurrent:
        return await _fetch_concurrently(fetcher, expressions)
    return await _fetch_sequentially(fetcher, expressions)


def serialize_functions(functions: list[FunctionRecord] | None) -> bytes:
    """Encode function records as a JSON array, or ``null`` for None.

    Raises:
        ResponseSerializationError: If a record holds a value JSON cannot
            represent.
    """
    if functions is None:
        return b"null"
    try:
        return json.dumps(
            [function.to_dict() for function in functions], allow_nan=False
        ).encode()
    except (TypeError, ValueError) as e:
        raise ResponseSerializationError(str(e)) from e


def _check_upstream(upstream: UpstreamResponse) -> bytes:
    if upstream.body is None:
        raise MissingUpstreamBodyError(MISSING_BODY_MESSAGE)
    if upstream.status != 200:
        raise UpstreamUnavailableError(upstream.status)
    return upstream.body


# @tra: Core.Enrich.EndToEnd
# @tra: Core.Enrich.EmptyListing
async def enrich_function_list(
    upstream: UpstreamResponse,
    fetcher: MetricsQueryPort,
    config: EnrichmentConfig | None = None,
) -> EnrichedResponse:
    """Enrich a captured listing response with invocation metrics.

    Args:
        upstream: What the wrapped listing handler produced.
        fetcher: Metrics backend to query.
        config: Enrichment settings, defaults to ``EnrichmentConfig()``.

    Returns:
        The enriched listing (200), the original listing if the metrics
        backend failed (200), or a short plain-text error (500).
    """
    config = config or EnrichmentConfig()

    # @tra: Core.Enrich.MissingBody
    # @tra: Core.Enrich.UpstreamStatus
    try:
        body = _check_upstream(upstream)
    except MissingUpstreamBodyError:
        logger.error("Upstream call had empty body.")
        return EnrichedResponse.error(MISSING_BODY_MESSAGE)
    except UpstreamUnavailableError as e:
        logger.warning("Upstream listing returned status %d", e.status_code)
        return EnrichedResponse.error(
            UPSTREAM_STATUS_MESSAGE.format(status=e.status_code)
        )

    # @tra: Core.Enrich.UpstreamMalformed
    try:
        functions = parse_function_list(body)
    except UpstreamMalformedError:
        log_exception("Metrics upstream error")
        return EnrichedResponse.error(UPSTREAM_PARSE_MESSAGE)

    # @tra: Core.Enrich.Fallback
    try:
        results = await fetch_enrichment_results(
            fetcher, concurrent=config.concurrent_queries
        )
    except MetricsQueryError as e:
        logger.warning("Error querying Prometheus API: %s", e)
        return EnrichedResponse.json(body)

    mix_in(functions, *results)

    # @tra: Core.Enrich.SerializationFailure
    try:
        enriched = serialize_functions(functions)
    except ResponseSerializationError:
        log_exception("Error serializing enriched function list")
        return EnrichedResponse.error(SERIALIZATION_MESSAGE)

    return EnrichedResponse.json(enriched)
