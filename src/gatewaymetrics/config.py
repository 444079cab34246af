"""Runtime configuration for metrics enrichment.

Values are read from the environment using the gateway's variable names:

- ``faas_prometheus_host``: metrics backend host (default ``prometheus``)
- ``faas_prometheus_port``: metrics backend port (default ``9090``)
- ``faas_prometheus_timeout``: per-query timeout in seconds (default ``5``)
- ``faas_metrics_concurrent_queries``: issue the four queries concurrently
  (default ``true``)
"""

import os
from collections.abc import Mapping
from dataclasses import dataclass

DEFAULT_PROMETHEUS_HOST = "prometheus"
DEFAULT_PROMETHEUS_PORT = 9090
DEFAULT_QUERY_TIMEOUT = 5.0

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class EnrichmentConfig:
    """Settings for the metrics backend and the enrichment step.

    Attributes:
        prometheus_host: Hostname of the Prometheus query API.
        prometheus_port: Port of the Prometheus query API.
        query_timeout: Timeout in seconds for a single query.
        concurrent_queries: Run the four queries concurrently instead of
            one after another.
    """

    prometheus_host: str = DEFAULT_PROMETHEUS_HOST
    prometheus_port: int = DEFAULT_PROMETHEUS_PORT
    query_timeout: float = DEFAULT_QUERY_TIMEOUT
    concurrent_queries: bool = True

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "EnrichmentConfig":
        """Build a config from environment variables.

        Args:
            environ: Mapping to read from. Defaults to ``os.environ``.

        Raises:
            ValueError: If a numeric or boolean variable cannot be parsed.
        """
        env = os.environ if environ is None else environ
        return cls(
            prometheus_host=env.get("faas_prometheus_host") or DEFAULT_PROMETHEUS_HOST,
            prometheus_port=_parse_port(env.get("faas_prometheus_port")),
            query_timeout=_parse_timeout(env.get("faas_prometheus_timeout")),
            concurrent_queries=_parse_bool(
                "faas_metrics_concurrent_queries",
                env.get("faas_metrics_concurrent_queries"),
                default=True,
            ),
        )

    @property
    def prometheus_url(self) -> str:
        return f"http://{self.prometheus_host}:{self.prometheus_port}"


def _parse_port(raw: str | None) -> int:
    if not raw:
        return DEFAULT_PROMETHEUS_PORT
    try:
        port = int(raw)
    except ValueError:
        raise ValueError(
            f"faas_prometheus_port must be an integer, got {raw!r}"
        ) from None
    if not 0 < port < 65536:
        raise ValueError(f"faas_prometheus_port out of range: {port}")
    return port


def _parse_timeout(raw: str | None) -> float:
    if not raw:
        return DEFAULT_QUERY_TIMEOUT
    try:
        timeout = float(raw)
    except ValueError:
        raise ValueError(
            f"faas_prometheus_timeout must be a number, got {raw!r}"
        ) from None
    # Reject negative, NaN, and infinite values
    if timeout <= 0 or timeout != timeout or timeout == float("inf"):
        raise ValueError(f"faas_prometheus_timeout must be positive, got {raw!r}")
    return timeout


def _parse_bool(name: str, raw: str | None, default: bool) -> bool:
    if raw is None or raw.strip() == "":
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be a boolean, got {raw!r}")
