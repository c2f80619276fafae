"""Health check endpoints for monitoring and orchestration."""
from fastapi import APIRouter, Depends, Response, status

from missionhub.core.dependencies import get_health_service
from missionhub.schemas.health import HealthCheckResponse, LivenessResponse
from missionhub.schemas.response import ApiResponse
from missionhub.services.health import HealthCheckService

router = APIRouter()


@router.get(
    "/health",
    response_model=HealthCheckResponse,
    summary="Comprehensive Health Check",
)
async def health_check(service: HealthCheckService = Depends(get_health_service)):
    """Database connectivity, system resources and realtime connections."""
    return await service.get_comprehensive_health()


@router.get("/health/live", response_model=LivenessResponse, summary="Liveness Probe")
async def liveness_probe():
    return LivenessResponse(status="alive")


@router.get("/health/ready", response_model=ApiResponse, summary="Readiness Probe")
async def readiness_probe(response: Response, service: HealthCheckService = Depends(get_health_service)):
    """Returns 503 until the database answers."""
    is_ready, checks = await service.check_readiness()
    if not is_ready:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return ApiResponse(
        success=is_ready,
        message="ready" if is_ready else "not_ready",
        data=checks,
    )
