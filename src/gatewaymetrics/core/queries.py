"""PromQL expressions used to enrich the function listing.

These strings are part of the contract with the metrics backend. Any
drop-in replacement for Prometheus must understand them as-is.
"""

from urllib.parse import quote_plus

INVOCATION_COUNT_QUERY = (
    'sum(gateway_function_invocation_total{function_name=~".*", code=~".*"})'
    " by (function_name, code)"
)

INVOCATION_COUNT_2XX_QUERY = (
    'sum(gateway_function_invocation_total {function_name=~".*", code=~"2.*"})'
    " by (function_name)"
)

INVOCATION_COUNT_NON_2XX_QUERY = (
    'sum(gateway_function_invocation_total {function_name=~".*", code!~"2.*"})'
    " by (function_name)"
)

AVERAGE_RESPONSE_TIME_QUERY = (
    "avg(gateway_functions_seconds_sum/gateway_functions_seconds_count"
    ' {function_name=~".*"}) by (function_name)'
)


def encode_expression(expression: str) -> str:
    """Percent-encode a query expression for use as a URL query value.

    Spaces become ``+``, matching form encoding of query strings.
    """
    return quote_plus(expression)


# Order matches the positional arguments of core.merge.mix_in
ENRICHMENT_QUERIES: tuple[str, ...] = tuple(
    encode_expression(expr)
    for expr in (
        INVOCATION_COUNT_QUERY,
        INVOCATION_COUNT_2XX_QUERY,
        INVOCATION_COUNT_NON_2XX_QUERY,
        AVERAGE_RESPONSE_TIME_QUERY,
    )
)
