r"""backend\app\api\v1\health.py

Health check endpoints.

These endpoints can be used by orchestrators and load balancers to verify
that the service is running.  A simple GET request to `/api/v1/health`
returns the service status and whether the prediction database answers.
"""

from fastapi import APIRouter, Depends

from ...services.container import ServiceContainer
from ..deps import get_services

router = APIRouter()


@router.get("/health")
def health_check(services: ServiceContainer = Depends(get_services)) -> dict[str, str]:
    """Return a basic health indicator."""
    database = "ok" if services.store.ping() else "unavailable"
    return {"status": "ok" if database == "ok" else "degraded", "database": database}
