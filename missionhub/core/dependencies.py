"""Dependencies for FastAPI endpoints."""
import logging

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError

from missionhub.core.constants import ErrorCode, GeneralErrorDetails
from missionhub.core.exceptions import AppException
from missionhub.core.security import decode_token
from missionhub.services.badge_service import BadgeService
from missionhub.services.health import HealthCheckService
from missionhub.services.mission_service import MissionService
from missionhub.services.realtime_notifier import RealtimeNotifier

logger = logging.getLogger(__name__)

# HTTP Bearer token scheme
security = HTTPBearer(auto_error=False)


def _unauthorized() -> AppException:
    return AppException(
        message=GeneralErrorDetails.UNAUTHORIZED,
        status_code=401,
        code=ErrorCode.COMMON_UNAUTHORIZED,
    )


async def get_current_user_id(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> str:
    """
    Authenticate the request with its JWT bearer token.

    Returns:
        The user id from the token's ``sub`` claim

    Raises:
        AppException: 401 if the token is missing, invalid or has no subject
    """
    if credentials is None:
        raise _unauthorized()

    try:
        payload = decode_token(credentials.credentials)
    except JWTError as e:
        logger.debug(f"Rejected bearer token: {e}")
        raise _unauthorized()

    user_id = payload.get("sub")
    if not user_id:
        raise _unauthorized()
    return str(user_id)


def get_mission_service(request: Request) -> MissionService:
    return request.app.state.mission_service


def get_badge_service(request: Request) -> BadgeService:
    return request.app.state.badge_service


def get_notifier(request: Request) -> RealtimeNotifier:
    return request.app.state.notifier


def get_health_service(request: Request) -> HealthCheckService:
    return request.app.state.health_service
