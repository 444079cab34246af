"""Port interfaces for metrics backends.

The core depends only on this protocol, never on a concrete query client.
"""

from typing import Protocol, runtime_checkable

from gatewaymetrics.core.models import QueryResult


@runtime_checkable
class MetricsQueryPort(Protocol):
    """Port for instant-vector queries against a metrics backend.

    Examples: PrometheusQueryFetcher, InMemoryQueryFetcher.
    """

    async def fetch(self, expression: str) -> QueryResult:
        """Run one query and return its vector.

        Args:
            expression: Percent-encoded query expression.

        Returns:
            The decoded QueryResult.

        Raises:
            MetricsQueryError: If the backend is unreachable or the
                response cannot be decoded.
        """
        ...
