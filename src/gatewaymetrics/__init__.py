"""Metrics enrichment for a gateway's function-listing endpoint."""

from gatewaymetrics.adapters.frameworks.asgi import (
    MetricsEnrichmentMiddleware,
    add_metrics_handler,
)
from gatewaymetrics.adapters.in_memory import FailingQueryFetcher, InMemoryQueryFetcher
from gatewaymetrics.adapters.prometheus import PrometheusQueryFetcher
from gatewaymetrics.config import EnrichmentConfig
from gatewaymetrics.core.enrich import (
    EnrichedResponse,
    UpstreamResponse,
    enrich_function_list,
)
from gatewaymetrics.core.errors import (
    GatewayMetricsError,
    MetricsQueryError,
    MetricValueParseError,
    MissingUpstreamBodyError,
    ResponseSerializationError,
    UpstreamMalformedError,
    UpstreamUnavailableError,
)
from gatewaymetrics.core.merge import mix_in
from gatewaymetrics.core.models import FunctionRecord, QueryResult, Sample
from gatewaymetrics.core.ports import MetricsQueryPort
from gatewaymetrics.core.values import parse_metric_value

__all__ = [
    "EnrichedResponse",
    "EnrichmentConfig",
    "FailingQueryFetcher",
    "FunctionRecord",
    "GatewayMetricsError",
    "InMemoryQueryFetcher",
    "MetricValueParseError",
    "MetricsEnrichmentMiddleware",
    "MetricsQueryError",
    "MetricsQueryPort",
    "MissingUpstreamBodyError",
    "PrometheusQueryFetcher",
    "QueryResult",
    "ResponseSerializationError",
    "Sample",
    "UpstreamMalformedError",
    "UpstreamResponse",
    "UpstreamUnavailableError",
    "add_metrics_handler",
    "enrich_function_list",
    "mix_in",
    "parse_metric_value",
]
