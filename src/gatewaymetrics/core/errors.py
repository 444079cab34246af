"""Error types raised while enriching a function listing."""


class GatewayMetricsError(Exception):
    """Base class for all gatewaymetrics errors."""


class MissingUpstreamBodyError(GatewayMetricsError):
    """The wrapped listing handler finished without producing a response."""


class UpstreamUnavailableError(GatewayMetricsError):
    """The wrapped listing handler answered with a non-OK status."""

    def __init__(self, status_code: int) -> None:
        super().__init__(f"upstream returned status {status_code}")
        self.status_code = status_code


class UpstreamMalformedError(GatewayMetricsError):
    """The upstream body could not be read as a list of functions."""


class MetricsQueryError(GatewayMetricsError):
    """A query against the metrics backend failed or returned bad data."""


class MetricValueParseError(GatewayMetricsError):
    """A single sample value could not be converted to a number."""


class ResponseSerializationError(GatewayMetricsError):
    """The enriched function list could not be encoded as JSON."""
