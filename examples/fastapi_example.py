"""Example gateway exposing an enriched function listing.

Run with:
    uvicorn examples.fastapi_example:app --reload

Endpoints:
    /system/functions     - function list with invocation metrics
    /system/functions/raw - the same list as the provider returns it

The metrics backend is read from ``faas_prometheus_host`` and
``faas_prometheus_port``. When Prometheus is not reachable the listing is
served without metrics.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from gatewaymetrics.adapters.frameworks.fastapi import create_function_list_router
from gatewaymetrics.adapters.prometheus import PrometheusQueryFetcher
from gatewaymetrics.config import EnrichmentConfig

FUNCTIONS = [
    {"name": "figlet", "image": "functions/figlet:latest", "replicas": 1},
    {"name": "nodeinfo", "image": "functions/nodeinfo:latest", "replicas": 2},
]

config = EnrichmentConfig.from_env()
fetcher = PrometheusQueryFetcher.from_config(config)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    yield
    await fetcher.aclose()


app = FastAPI(title="Gateway Metrics Example", lifespan=lifespan)


async def list_functions() -> JSONResponse:
    """Stand-in for the provider's function listing."""
    return JSONResponse(FUNCTIONS)


@app.get("/system/functions/raw")
async def raw_functions() -> JSONResponse:
    return await list_functions()


app.include_router(create_function_list_router(list_functions, fetcher, config=config))

