"""Core domain models for function listings and metric query results."""

import json
from dataclasses import dataclass, field
from typing import Any

from gatewaymetrics.core.errors import MetricsQueryError, UpstreamMalformedError

# Wire keys of the derived metric fields in the listing JSON
INVOCATION_COUNT_KEY = "InvocationCount"
INVOCATION_COUNT_2XX_KEY = "InvocationCount2XX"
INVOCATION_COUNT_NON_2XX_KEY = "InvocationCountNon2XX"
AVERAGE_RESPONSE_TIME_KEY = "AverageResponseTime"

FUNCTION_NAME_LABEL = "function_name"

# Keys rebuilt from FunctionRecord fields rather than passed through,
# matched case-insensitively like the provider's JSON decoder does
_NAME_KEY = "name"
_OWNED_KEYS = frozenset(
    key.casefold()
    for key in (
        _NAME_KEY,
        INVOCATION_COUNT_KEY,
        INVOCATION_COUNT_2XX_KEY,
        INVOCATION_COUNT_NON_2XX_KEY,
        AVERAGE_RESPONSE_TIME_KEY,
    )
)


@dataclass
class FunctionRecord:
    """A deployed function as exposed by the listing endpoint.

    Attributes:
        name: Function name, the key used to match metric samples.
        invocation_count: Invocations across all status codes.
        invocation_count_2xx: Invocations answered with a 2xx status.
        invocation_count_non_2xx: Invocations answered with any other status.
        average_response_time: Mean response time in seconds.
        attributes: Remaining upstream fields (image, replicas, labels, ...),
            passed through untouched.
    """

    name: str
    invocation_count: float = 0.0
    invocation_count_2xx: float = 0.0
    invocation_count_non_2xx: float = 0.0
    average_response_time: float = 0.0
    attributes: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, obj: Any) -> "FunctionRecord":
        """Build a record from one element of the upstream JSON array.

        Keys are matched case-insensitively. A ``null`` element, or an
        object whose ``name`` is missing or ``null``, yields the empty name.

        Raises:
            UpstreamMalformedError: If ``obj`` is neither an object nor
                ``null``, or carries a ``name`` that is not a string.
        """
        # @tra: Core.Models.NullEntries
        if obj is None:
            return cls(name="")
        if not isinstance(obj, dict):
            raise UpstreamMalformedError(
                f"function entry must be an object, got {type(obj).__name__}"
            )
        # @tra: Core.Models.CaseInsensitiveKeys
        # @tra: Adapter.ASGI.KeepsMetadata
        name = ""
        attributes = {}
        for key, value in obj.items():
            folded = key.casefold()
            if folded == _NAME_KEY:
                if value is None:
                    continue
                if not isinstance(value, str):
                    raise UpstreamMalformedError(
                        f"function entry 'name' must be a string, "
                        f"got {type(value).__name__}"
                    )
                name = value
            elif folded not in _OWNED_KEYS:
                attributes[key] = value
        return cls(name=name, attributes=attributes)

    def reset_metrics(self) -> None:
        """Zero all four derived metric fields."""
        self.invocation_count = 0.0
        self.invocation_count_2xx = 0.0
        self.invocation_count_non_2xx = 0.0
        self.average_response_time = 0.0

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON-ready representation, derived fields included."""
        return {
            **self.attributes,
            "name": self.name,
            INVOCATION_COUNT_KEY: self.invocation_count,
            INVOCATION_COUNT_2XX_KEY: self.invocation_count_2xx,
            INVOCATION_COUNT_NON_2XX_KEY: self.invocation_count_non_2xx,
            AVERAGE_RESPONSE_TIME_KEY: self.average_response_time,
        }


def parse_function_list(body: bytes | str) -> list[FunctionRecord] | None:
    """Parse an upstream listing body into function records.

    Args:
        body: Raw response body, expected to be a JSON array of objects.

    Returns:
        One FunctionRecord per array element, in upstream order, or None
        when the body is the JSON literal ``null``.

    Raises:
        UpstreamMalformedError: If the body is not valid JSON, nests too
            deeply to decode, or is not an array of function objects.
    """
    # @tra: Core.Models.DeepNesting
    try:
        payload = json.loads(body)
    except (ValueError, UnicodeDecodeError, RecursionError) as e:
        raise UpstreamMalformedError(f"invalid JSON: {e}") from e
    # @tra: Core.Models.NullListing
    if payload is None:
        return None
    if not isinstance(payload, list):
        raise UpstreamMalformedError(
            f"expected a JSON array, got {type(payload).__name__}"
        )
    return [FunctionRecord.from_dict(item) for item in payload]


@dataclass(frozen=True)
class NumericString:
    """A sample value delivered as text, e.g. ``"10"`` or ``"0.25"``."""

    text: str


@dataclass(frozen=True)
class UnsupportedValue:
    """A sample value of a JSON type the parser does not handle."""

    raw: Any


SampleValue = NumericString | UnsupportedValue


def _to_sample_value(raw: Any) -> SampleValue:
    if isinstance(raw, str):
        return NumericString(raw)
    return UnsupportedValue(raw)


@dataclass(frozen=True)
class Sample:
    """One labeled scalar observation of an instant-vector query.

    Attributes:
        labels: Label set of the series.
        timestamp: Evaluation timestamp in seconds.
        value: The sample value as returned by the backend.
    """

    labels: dict[str, str]
    timestamp: float
    value: SampleValue

    @property
    def function_name(self) -> str:
        return self.labels.get(FUNCTION_NAME_LABEL, "")


@dataclass(frozen=True)
class QueryResult:
    """The vector returned by one metrics query."""

    samples: tuple[Sample, ...] = ()

    @classmethod
    def from_json(cls, payload: Any) -> "QueryResult":
        """Build a result from a decoded query API response.

        Expects ``{"data": {"result": [{"metric": {...}, "value": [ts, v]}]}}``.

        Raises:
            MetricsQueryError: If the payload reports an error or does not
                have the vector shape.
        """
        if not isinstance(payload, dict):
            raise MetricsQueryError("query response is not a JSON object")
        status = payload.get("status", "success")
        if status != "success":
            raise MetricsQueryError(
                f"query failed with status {status!r}: {payload.get('error', '')}"
            )
        data = payload.get("data")
        result = data.get("result") if isinstance(data, dict) else None
        if not isinstance(result, list):
            raise MetricsQueryError("query response has no data.result list")
        return cls(samples=tuple(_parse_sample(item) for item in result))

    def __len__(self) -> int:
        return len(self.samples)


def _parse_sample(item: Any) -> Sample:
    if not isinstance(item, dict):
        raise MetricsQueryError("vector sample is not an object")
    metric = item.get("metric", {})
    value = item.get("value")
    if not isinstance(metric, dict) or not isinstance(value, list) or len(value) != 2:
        raise MetricsQueryError("vector sample must have metric and [ts, value]")
    labels = {str(k): str(v) for k, v in metric.items()}
    try:
        timestamp = float(value[0])
    except (TypeError, ValueError) as e:
        raise MetricsQueryError(f"invalid sample timestamp {value[0]!r}") from e
    return Sample(labels=labels, timestamp=timestamp, value=_to_sample_value(value[1]))
