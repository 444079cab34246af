"""Builders shared by unit, integration and feature tests."""

from typing import Any

from gatewaymetrics.core.models import QueryResult


def vector(*samples: tuple[str, Any]) -> QueryResult:
    """Build a QueryResult from (function_name, value) pairs."""
    return QueryResult.from_json(vector_payload(*samples))


def vector_payload(*samples: tuple[str, Any]) -> dict[str, Any]:
    """Build a Prometheus instant-vector response body."""
    return {
        "status": "success",
        "data": {
            "resultType": "vector",
            "result": [
                {"metric": {"function_name": name}, "value": [1700000000.0, value]}
                for name, value in samples
            ],
        },
    }
