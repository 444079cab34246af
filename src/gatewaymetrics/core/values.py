"""Conversion of metric sample values to numbers."""

import math

from gatewaymetrics.core.errors import MetricValueParseError
from gatewaymetrics.core.logs import get_logger
from gatewaymetrics.core.models import NumericString, SampleValue, UnsupportedValue

logger = get_logger(__name__)


def parse_metric_value(value: SampleValue) -> float:
    """Convert a sample value into a float.

    Args:
        value: Value taken from a query sample.

    Returns:
        The parsed, finite number.

    Raises:
        MetricValueParseError: If the text is not a base-10 number, is not
            finite (Prometheus reports ``NaN`` for 0/0), or the value has an
            unsupported type. Callers treat this as "no value".
    """
    if isinstance(value, UnsupportedValue):
        raise MetricValueParseError(
            f"unsupported metric value type {type(value.raw).__name__}"
        )
    if not isinstance(value, NumericString):
        raise MetricValueParseError(
            f"unsupported metric value type {type(value).__name__}"
        )
    text = value.text
    # @tra: Core.Values.StrictText
    # float() also accepts surrounding whitespace and digit underscores
    if text != text.strip() or "_" in text:
        logger.warning("Unable to convert value for metric: %r", text)
        raise MetricValueParseError(f"invalid metric value {text!r}")
    try:
        parsed = float(text)
    except ValueError as e:
        logger.warning("Unable to convert value for metric: %r", text)
        raise MetricValueParseError(f"invalid metric value {text!r}") from e
    if not math.isfinite(parsed):
        logger.warning("Ignoring non-finite metric value: %r", text)
        raise MetricValueParseError(f"non-finite metric value {text!r}")
    return parsed
