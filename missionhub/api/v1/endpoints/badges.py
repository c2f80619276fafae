"""Badge endpoints."""
from fastapi import APIRouter, Depends

from missionhub.core.dependencies import get_badge_service, get_current_user_id
from missionhub.schemas.response import ApiResponse
from missionhub.services.badge_service import BadgeService

router = APIRouter()


@router.get("", response_model=ApiResponse)
async def list_badges(
    user_id: str = Depends(get_current_user_id),
    service: BadgeService = Depends(get_badge_service),
):
    """All active badges with the caller's earned flags."""
    badges = await service.list_badges(user_id)
    return ApiResponse(
        success=True,
        message="Badges retrieved",
        data=[badge.model_dump(mode="json") for badge in badges],
    )


@router.get("/me", response_model=ApiResponse)
async def list_my_badges(
    user_id: str = Depends(get_current_user_id),
    service: BadgeService = Depends(get_badge_service),
):
    user_badges = await service.list_user_badges(user_id)
    return ApiResponse(
        success=True,
        message="Earned badges retrieved",
        data=[user_badge.model_dump(mode="json") for user_badge in user_badges],
    )
