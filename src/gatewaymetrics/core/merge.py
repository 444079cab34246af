"""Merge metric query results into function records."""

from collections import defaultdict

from gatewaymetrics.core.errors import MetricValueParseError
from gatewaymetrics.core.models import FunctionRecord, QueryResult
from gatewaymetrics.core.values import parse_metric_value


# @tra: Core.Merge.DuplicateSamples
# @tra: Core.Merge.ParseTolerance
# @tra: Core.Merge.NonNegative
def _sum_by_function(result: QueryResult) -> dict[str, float]:
    """Sum the parseable sample values of a result per function name.

    Samples whose value cannot be parsed contribute nothing.
    """
    totals: dict[str, float] = defaultdict(float)
    for sample in result.samples:
        try:
            totals[sample.function_name] += parse_metric_value(sample.value)
        except MetricValueParseError:
            continue
    return totals


# @tra: Core.Merge.Example
# @tra: Core.Merge.NoneFunctions
# @tra: Core.Merge.ReturnsSameList
# @tra: Core.Merge.Idempotent
# @tra: Core.Merge.ZeroSafe
# @tra: Core.Merge.NonMatching
# @tra: Core.Merge.ExactMatch
# @tra: Core.Merge.KeepsAttributes
def mix_in(
    functions: list[FunctionRecord] | None,
    invocation_count: QueryResult,
    invocation_count_2xx: QueryResult,
    invocation_count_non_2xx: QueryResult,
    average_response_time: QueryResult,
) -> list[FunctionRecord] | None:
    """Reset and recompute the derived metric fields of every function.

    All four fields are zeroed first, then every sample whose
    ``function_name`` label equals the record's name is added to the
    matching field. Running it twice with the same inputs gives the same
    result as running it once. Samples for unknown functions are ignored.

    Args:
        functions: Records to enrich in place. ``None`` is a no-op.
        invocation_count: Invocations per function, all status codes.
        invocation_count_2xx: Invocations per function with a 2xx status.
        invocation_count_non_2xx: Invocations per function, other statuses.
        average_response_time: Mean response time per function.

    Returns:
        The same list that was passed in, or None.
    """
    if functions is None:
        return None

    for function in functions:
        function.reset_metrics()

    counts = _sum_by_function(invocation_count)
    counts_2xx = _sum_by_function(invocation_count_2xx)
    counts_non_2xx = _sum_by_function(invocation_count_non_2xx)
    latencies = _sum_by_function(average_response_time)

    for function in functions:
        function.invocation_count += counts.get(function.name, 0.0)
        function.invocation_count_2xx += counts_2xx.get(function.name, 0.0)
        function.invocation_count_non_2xx += counts_non_2xx.get(function.name, 0.0)
        function.average_response_time += latencies.get(function.name, 0.0)

    return functions
