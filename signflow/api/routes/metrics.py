"""Prometheus scrape endpoint."""

from fastapi import APIRouter, Response

from signflow.infrastructure.monitoring.metrics import (
    METRICS_CONTENT_TYPE,
    generate_metrics,
)

router = APIRouter(prefix="/v1", tags=["metrics"])


@router.get(
    "/metrics",
    response_class=Response,
    responses={200: {"content": {"text/plain": {}}}},
)
async def get_metrics() -> Response:
    """HTTP, signing provider and document workflow metrics for Prometheus."""
    return Response(content=generate_metrics(), media_type=METRICS_CONTENT_TYPE)
