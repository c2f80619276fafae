"""Mission endpoints."""
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from missionhub.core.constants import MissionLevel, MissionStatus
from missionhub.core.dependencies import get_current_user_id, get_mission_service
from missionhub.schemas.mission import (
    LinkTransactionsRequest,
    Mission,
    MissionCreateRequest,
    MissionFilter,
    MissionResponse,
    MissionStatusUpdateRequest,
    MissionUpdateRequest,
)
from missionhub.schemas.response import ApiResponse
from missionhub.services.mission_service import MissionService

router = APIRouter()


def _to_response(mission: Mission) -> dict:
    return MissionResponse.from_mission(mission, date.today()).model_dump(mode="json")


@router.get("/categories", response_model=ApiResponse)
async def list_categories(
    user_id: str = Depends(get_current_user_id),
    service: MissionService = Depends(get_mission_service),
):
    categories = await service.list_categories()
    return ApiResponse(
        success=True,
        message="Categories retrieved",
        data=[category.model_dump(mode="json") for category in categories],
    )


@router.get("/templates", response_model=ApiResponse)
async def list_templates(
    category_id: Optional[str] = Query(default=None),
    user_id: str = Depends(get_current_user_id),
    service: MissionService = Depends(get_mission_service),
):
    templates = await service.list_templates(category_id)
    return ApiResponse(
        success=True,
        message="Templates retrieved",
        data=[template.model_dump(mode="json") for template in templates],
    )


@router.get("/summary", response_model=ApiResponse)
async def get_summary(
    user_id: str = Depends(get_current_user_id),
    service: MissionService = Depends(get_mission_service),
):
    summary = await service.get_summary(user_id)
    return ApiResponse(success=True, message="Mission summary retrieved", data=summary.model_dump(mode="json"))


@router.post("", response_model=ApiResponse, status_code=status.HTTP_201_CREATED)
async def create_mission(
    payload: MissionCreateRequest,
    user_id: str = Depends(get_current_user_id),
    service: MissionService = Depends(get_mission_service),
):
    mission = await service.create_mission(actor_id=user_id, **payload.model_dump())
    return ApiResponse(success=True, message="Mission created", data=_to_response(mission))


@router.get("", response_model=ApiResponse)
async def list_missions(
    status_filter: Optional[MissionStatus] = Query(default=None, alias="status"),
    category_id: Optional[str] = Query(default=None),
    mission_level: Optional[MissionLevel] = Query(default=None, alias="level"),
    parent_mission_id: Optional[str] = Query(default=None),
    top_level_only: bool = Query(default=False),
    include_family: bool = Query(default=True),
    user_id: str = Depends(get_current_user_id),
    service: MissionService = Depends(get_mission_service),
):
    filters = MissionFilter(
        status=status_filter,
        category_id=category_id,
        mission_level=mission_level,
        parent_mission_id=parent_mission_id,
        top_level_only=top_level_only,
        include_family=include_family,
    )
    missions = await service.list_missions(user_id, filters)
    return ApiResponse(
        success=True,
        message="Missions retrieved",
        data=[_to_response(mission) for mission in missions],
    )


@router.get("/{mission_id}", response_model=ApiResponse)
async def get_mission(
    mission_id: str,
    user_id: str = Depends(get_current_user_id),
    service: MissionService = Depends(get_mission_service),
):
    mission = await service.get_mission(user_id, mission_id)
    return ApiResponse(success=True, message="Mission retrieved", data=_to_response(mission))


@router.patch("/{mission_id}", response_model=ApiResponse)
async def update_mission(
    mission_id: str,
    payload: MissionUpdateRequest,
    user_id: str = Depends(get_current_user_id),
    service: MissionService = Depends(get_mission_service),
):
    mission = await service.update_mission(user_id, mission_id, payload.model_dump(exclude_unset=True))
    return ApiResponse(success=True, message="Mission updated", data=_to_response(mission))


@router.delete("/{mission_id}", response_model=ApiResponse)
async def delete_mission(
    mission_id: str,
    user_id: str = Depends(get_current_user_id),
    service: MissionService = Depends(get_mission_service),
):
    await service.delete_mission(user_id, mission_id)
    return ApiResponse(success=True, message="Mission deleted")


@router.patch("/{mission_id}/status", response_model=ApiResponse)
async def update_mission_status(
    mission_id: str,
    payload: MissionStatusUpdateRequest,
    user_id: str = Depends(get_current_user_id),
    service: MissionService = Depends(get_mission_service),
):
    mission = await service.transition_status(user_id, mission_id, payload.status)
    return ApiResponse(success=True, message="Mission status updated", data=_to_response(mission))


@router.post("/{mission_id}/transactions", response_model=ApiResponse)
async def link_transactions(
    mission_id: str,
    payload: LinkTransactionsRequest,
    user_id: str = Depends(get_current_user_id),
    service: MissionService = Depends(get_mission_service),
):
    mission = await service.link_transactions(user_id, mission_id, payload.transaction_ids)
    return ApiResponse(success=True, message="Transactions linked", data=_to_response(mission))
