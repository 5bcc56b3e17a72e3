from fastapi import APIRouter
from fastapi.responses import JSONResponse

from app.api.deps import ServicesDep
from app.core.health import liveness_check, readiness_check

router = APIRouter(prefix="/utils", tags=["utils"])


@router.get("/liveness/", response_model=None)
async def liveness() -> bool | JSONResponse:
    """
    Liveness probe — is the process alive and responsive?

    Lightweight: no DB I/O.  If this fails the container should be
    restarted by the orchestrator.
    """
    ok, failures = liveness_check()
    if not ok:
        return JSONResponse(
            status_code=503,
            content={"error": "Process unhealthy", "data": failures},
        )
    return True


@router.get("/health-check/", response_model=None)
async def health_check(services: ServicesDep) -> bool | JSONResponse:
    """
    Readiness probe — can the service handle traffic?

    Returns 200 with true if the store database answers; 503 otherwise.
    """
    ok, failures = readiness_check(services.engine)
    if not ok:
        return JSONResponse(
            status_code=503,
            content={"error": "Service Unavailable", "data": failures},
        )
    return True
