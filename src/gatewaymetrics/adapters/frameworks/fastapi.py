"""FastAPI adapter for the enriched function-listing endpoint."""

from collections.abc import Awaitable, Callable

from fastapi import APIRouter, Response
from starlette.responses import StreamingResponse

from gatewaymetrics.config import EnrichmentConfig
from gatewaymetrics.core.enrich import UpstreamResponse, enrich_function_list
from gatewaymetrics.core.logs import log_exception
from gatewaymetrics.core.ports import MetricsQueryPort

ListFunctions = Callable[[], Awaitable[Response]]


async def _read_body(response: Response) -> bytes:
    if isinstance(response, StreamingResponse):
        chunks = []
        async for chunk in response.body_iterator:
            chunks.append(chunk if isinstance(chunk, bytes) else chunk.encode())
        return b"".join(chunks)
    return bytes(response.body)


async def _call_upstream(list_functions: ListFunctions) -> UpstreamResponse:
    try:
        response = await list_functions()
    except Exception:
        log_exception("Upstream listing handler raised")
        return UpstreamResponse(status=0, body=None)
    if response is None:
        return UpstreamResponse(status=0, body=None)
    return UpstreamResponse(
        status=response.status_code,
        headers=list(response.raw_headers),
        body=await _read_body(response),
    )


# @tra: Adapter.FastAPI.Router
def create_function_list_router(
    list_functions: ListFunctions,
    fetcher: MetricsQueryPort,
    path: str = "/system/functions",
    config: EnrichmentConfig | None = None,
) -> APIRouter:
    """Create a FastAPI router serving the enriched function list.

    Args:
        list_functions: Async callable producing the upstream listing
            response (a JSON array of functions on success).
        fetcher: Metrics backend implementing MetricsQueryPort.
        path: Route path of the listing endpoint.
        config: Optional enrichment settings.

    Returns:
        APIRouter with a GET route at ``path``.
    """
    router = APIRouter()

    @router.get(path)
    async def list_functions_with_metrics() -> Response:
        """Return the function list with invocation metrics."""
        upstream = await _call_upstream(list_functions)
        outcome = await enrich_function_list(upstream, fetcher, config)
        return Response(
            content=outcome.body,
            status_code=outcome.status,
            media_type=outcome.content_type,
        )

    return router
