"""Read-only HTTP views over the live room list."""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request, status

from ..schemas.streams import StreamDetail, StreamSummary
from ..services.signaling import STREAM_NOT_FOUND, SignalingCoordinator

router = APIRouter()


def get_coordinator(request: Request) -> SignalingCoordinator:
    return request.app.state.coordinator


@router.get("", response_model=list[StreamSummary])
async def list_streams(
    coordinator: SignalingCoordinator = Depends(get_coordinator),
) -> list[StreamSummary]:
    """Return the same snapshot Socket.IO clients receive for ``get-active-streams``."""

    return coordinator.rooms.list_summaries()


@router.get("/{stream_id}", response_model=StreamDetail)
async def get_stream(
    stream_id: str,
    coordinator: SignalingCoordinator = Depends(get_coordinator),
) -> StreamDetail:
    room = coordinator.get_stream(stream_id)
    if room is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=STREAM_NOT_FOUND)
    return room.detail()
