"""Prometheus query API adapter implementing MetricsQueryPort."""

import httpx

from gatewaymetrics.config import EnrichmentConfig
from gatewaymetrics.core.errors import MetricsQueryError
from gatewaymetrics.core.logs import get_logger
from gatewaymetrics.core.models import QueryResult

logger = get_logger(__name__)


class PrometheusQueryFetcher:
    """Runs instant queries against ``/api/v1/query`` using httpx.

    The fetcher owns connection and timeout policy. When no client is
    passed in, one is created lazily and closed by :meth:`aclose`.
    """

    def __init__(
        self,
        host: str,
        port: int,
        client: httpx.AsyncClient | None = None,
        timeout: float = 5.0,
    ) -> None:
        self.host = host
        self.port = port
        self.timeout = timeout
        self._client = client
        self._owns_client = client is None

    @classmethod
    def from_config(
        cls, config: EnrichmentConfig, client: httpx.AsyncClient | None = None
    ) -> "PrometheusQueryFetcher":
        """Create a fetcher for the backend described by ``config``."""
        return cls(
            config.prometheus_host,
            config.prometheus_port,
            client=client,
            timeout=config.query_timeout,
        )

    @property
    def base_url(self) -> str:
        return f"http://{self.host}:{self.port}"

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    def query_url(self, expression: str) -> str:
        """Return the query URL for an already percent-encoded expression."""
        return f"{self.base_url}/api/v1/query?query={expression}"

    # @tra: Adapter.Prometheus.Fetch
    async def fetch(self, expression: str) -> QueryResult:
        """Run one instant query.

        Args:
            expression: Percent-encoded PromQL expression.

        Returns:
            The decoded vector.

        Raises:
            MetricsQueryError: On transport errors, a non-200 status, or a
                body that is not a vector query response.
        """
        url = self.query_url(expression)
        try:
            response = await self._get_client().get(url)
        except httpx.HTTPError as e:
            raise MetricsQueryError(f"request to {self.base_url} failed: {e}") from e

        if response.status_code != 200:
            raise MetricsQueryError(
                "Unexpected status code from Prometheus want: 200, "
                f"got: {response.status_code}, body: {response.text}"
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise MetricsQueryError(f"invalid JSON from Prometheus: {e}") from e

        result = QueryResult.from_json(payload)
        logger.debug("Query returned %d samples", len(result))
        return result

    async def aclose(self) -> None:
        """Close the HTTP client if this fetcher created it."""
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "PrometheusQueryFetcher":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
