"""ASGI adapter that enriches a function-listing app with metrics.

The middleware is framework-agnostic and works with any ASGI server
(uvicorn, hypercorn, daphne) and any ASGI listing app (FastAPI,
Starlette, or a bare callable).
"""

from collections.abc import Callable, Coroutine
from dataclasses import replace
from typing import Any

from gatewaymetrics.config import EnrichmentConfig
from gatewaymetrics.core.enrich import (
    EnrichedResponse,
    UpstreamResponse,
    enrich_function_list,
)
from gatewaymetrics.core.logs import log_exception
from gatewaymetrics.core.ports import MetricsQueryPort

# ASGI type aliases
Scope = dict[str, Any]
Receive = Callable[[], Coroutine[Any, Any, dict[str, Any]]]
Send = Callable[[dict[str, Any]], Coroutine[Any, Any, None]]
ASGIApp = Callable[[Scope, Receive, Send], Coroutine[Any, Any, None]]


# @tra: Adapter.ASGI.SendResponse
async def _send_response(
    send: Send, status: int, content_type: str, body: bytes
) -> None:
    """Send an HTTP response with headers and body.

    Args:
        send: ASGI send callable for writing response.
        status: HTTP status code.
        content_type: Content-Type header value.
        body: Response body bytes.
    """
    headers = [
        (b"content-type", content_type.encode()),
        (b"content-length", str(len(body)).encode()),
    ]
    await send({"type": "http.response.start", "status": status, "headers": headers})
    await send({"type": "http.response.body", "body": body})


# @tra: Adapter.ASGI.Capture
class ResponseCapture:
    """Buffers the messages an ASGI app sends instead of forwarding them."""

    def __init__(self) -> None:
        self.status = 0
        self.headers: list[tuple[bytes, bytes]] = []
        self.started = False
        self._chunks: list[bytes] = []

    async def send(self, message: dict[str, Any]) -> None:
        if message["type"] == "http.response.start":
            self.started = True
            self.status = message["status"]
            self.headers = list(message.get("headers", []))
        elif message["type"] == "http.response.body":
            self._chunks.append(message.get("body", b""))

    def to_upstream_response(self) -> UpstreamResponse:
        """Return what was captured; body is None unless a response started."""
        body = b"".join(self._chunks) if self.started else None
        return UpstreamResponse(status=self.status, headers=self.headers, body=body)


# @tra: Adapter.ASGI.Middleware.Init
# @tra: Adapter.ASGI.Middleware.Interface
# @tra: Adapter.ASGI.Middleware.Passthrough
class MetricsEnrichmentMiddleware:
    """ASGI middleware that adds invocation metrics to a function listing.

    The wrapped app is run against a buffering ``send``; its output is
    parsed, enriched from the metrics backend and written to the client.
    If the backend is down the original listing is returned unchanged.
    """

    def __init__(
        self,
        app: ASGIApp,
        fetcher: MetricsQueryPort,
        config: EnrichmentConfig | None = None,
    ) -> None:
        """Initialize the middleware with a wrapped app and metrics backend.

        Args:
            app: The ASGI listing application to wrap.
            fetcher: Metrics backend implementing MetricsQueryPort.
            config: Enrichment settings (default: ``EnrichmentConfig()``).
        """
        self.app = app
        self.fetcher = fetcher
        self.config = config or EnrichmentConfig()

    # @tra: Adapter.ASGI.Middleware.Config
    def set_concurrent_queries(self, enabled: bool) -> None:
        """Set whether the four metric queries run concurrently.

        Args:
            enabled: True to fan the queries out, False to issue them in
                sequence.
        """
        self.config = replace(self.config, concurrent_queries=enabled)

    async def _call_upstream(
        self, scope: Scope, receive: Receive
    ) -> UpstreamResponse:
        capture = ResponseCapture()
        # @tra: Adapter.ASGI.RequestForwarded
        # @tra: Adapter.ASGI.Middleware.UpstreamException
        try:
            await self.app(scope, receive, capture.send)
        except Exception:
            log_exception("Upstream listing handler raised")
            return UpstreamResponse(status=capture.status, body=None)
        return capture.to_upstream_response()

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI callable interface."""
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        # @tra: Adapter.ASGI.EndToEnd
        # @tra: Adapter.ASGI.EnrichedListing
        # @tra: Adapter.ASGI.Middleware.Fallback
        # @tra: Adapter.ASGI.Fallback
        # @tra: Adapter.ASGI.UpstreamStatus
        # @tra: Adapter.ASGI.UpstreamMalformed
        # @tra: Adapter.ASGI.MissingBody
        upstream = await self._call_upstream(scope, receive)
        outcome: EnrichedResponse = await enrich_function_list(
            upstream, self.fetcher, self.config
        )
        await _send_response(send, outcome.status, outcome.content_type, outcome.body)


def add_metrics_handler(
    app: ASGIApp,
    fetcher: MetricsQueryPort,
    config: EnrichmentConfig | None = None,
) -> ASGIApp:
    """Wrap a listing app so its response is enriched with metrics.

    Args:
        app: The ASGI listing application.
        fetcher: Metrics backend implementing MetricsQueryPort.
        config: Optional enrichment settings.

    Returns:
        ASGI application callable.
    """
    return MetricsEnrichmentMiddleware(app, fetcher, config)
