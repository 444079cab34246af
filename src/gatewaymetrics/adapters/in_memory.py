"""In-memory metrics backends implementing MetricsQueryPort."""

from gatewaymetrics.core.errors import MetricsQueryError
from gatewaymetrics.core.models import QueryResult


class InMemoryQueryFetcher:
    """Returns canned results keyed by encoded expression.

    Suitable for testing and local demos where no Prometheus is running.
    Expressions without a canned result get ``default``.
    """

    def __init__(
        self,
        results: dict[str, QueryResult] | None = None,
        default: QueryResult | None = None,
    ) -> None:
        self._results = dict(results or {})
        self._default = default if default is not None else QueryResult()
        self.calls: list[str] = []

    def set_result(self, expression: str, result: QueryResult) -> None:
        """Register the result returned for ``expression``."""
        self._results[expression] = result

    async def fetch(self, expression: str) -> QueryResult:
        """Return the canned result for an expression."""
        self.calls.append(expression)
        return self._results.get(expression, self._default)


class FailingQueryFetcher:
    """Fails every query, simulating an unreachable backend."""

    def __init__(self, message: str = "metrics backend unavailable") -> None:
        self.message = message
        self.calls: list[str] = []

    async def fetch(self, expression: str) -> QueryResult:
        """Raise MetricsQueryError for any expression."""
        self.calls.append(expression)
        raise MetricsQueryError(self.message)
