"""Health check and metrics endpoints."""

from datetime import UTC, datetime

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from policychat import __version__
from policychat.api.dependencies import ControllerDep

router = APIRouter()


@router.get("/health")
async def health_check(controller: ControllerDep) -> dict[str, str]:
    """Report liveness and the current session phase."""
    return {
        "status": "healthy",
        "version": __version__,
        "phase": controller.phase.value,
        "timestamp": datetime.now(UTC).isoformat(),
    }


async def get_metrics() -> Response:
    """Prometheus metrics in text exposition format."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
