"""Server-sent event stream of realtime updates."""
import logging
from typing import AsyncIterator, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse

from missionhub.core.dependencies import get_current_user_id, get_mission_service, get_notifier
from missionhub.schemas.realtime import RealtimeStatus
from missionhub.schemas.response import ApiResponse
from missionhub.services.mission_service import MissionService
from missionhub.services.realtime_notifier import RealtimeNotifier

logger = logging.getLogger(__name__)

router = APIRouter()


async def sse_frames(
    service: MissionService, user_id: str, household_id: Optional[str] = None
) -> AsyncIterator[str]:
    """
    SSE frames for one connection.

    The connection is registered on the first iteration, so a client that
    drops before the response starts leaves nothing behind. Closing the
    frames unsubscribes it.
    """
    stream = await service.subscribe_realtime(user_id, household_id)
    try:
        async for message in stream:
            yield message.to_sse()
    finally:
        await stream.aclose()


@router.get("/subscribe")
async def subscribe(
    household_id: Optional[str] = Query(default=None, alias="household"),
    user_id: str = Depends(get_current_user_id),
    service: MissionService = Depends(get_mission_service),
):
    return StreamingResponse(
        sse_frames(service, user_id, household_id),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )


@router.get("/status", response_model=ApiResponse)
async def realtime_status(notifier: RealtimeNotifier = Depends(get_notifier)):
    realtime = RealtimeStatus(
        connected_users=await notifier.connected_users_count(),
        heartbeat_seconds=notifier.heartbeat_seconds,
    )
    return ApiResponse(success=True, message="Realtime status", data=realtime.model_dump())
