"""Socket.IO bindings for the stream signaling protocol.

Each inbound event is validated into its schema here; handlers only reach
the coordinator with a well-formed request.
"""
from __future__ import annotations

import logging
from typing import Any, Optional, TypeVar

import socketio
from pydantic import ValidationError

from ..schemas.streams import (
    AnswerSignal,
    CreateStreamRequest,
    EndStreamRequest,
    IceCandidateSignal,
    InboundEvent,
    JoinStreamRequest,
    OfferSignal,
)
from ..services.signaling import SignalingCoordinator

logger = logging.getLogger(__name__)

EventT = TypeVar("EventT", bound=InboundEvent)


def parse_event(model: type[EventT], sid: str, data: Any) -> Optional[EventT]:
    """Validate a raw payload, returning ``None`` when it is unusable."""

    if isinstance(data, str) and model is EndStreamRequest:
        # stream-ended carries the bare stream id
        data = {"streamId": data}
    if not isinstance(data, dict):
        logger.warning("Rejected %s from %s: payload is %s", model.event, sid, type(data).__name__)
        return None
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        logger.warning("Rejected %s from %s: %s", model.event, sid, exc.errors(include_url=False))
        return None


def invalid_payload_message(event: str) -> str:
    return f"Invalid {event} payload."


def register_signaling_handlers(sio: socketio.AsyncServer, coordinator: SignalingCoordinator) -> None:
    """Attach every signaling event handler to ``sio``."""

    async def connect(sid: str, environ: dict, auth: Any = None) -> None:
        await coordinator.connect(sid)

    async def disconnect(sid: str, reason: Any = None) -> None:
        logger.debug("Connection closed: %s (%s)", sid, reason)
        await coordinator.disconnect(sid)

    async def create_stream(sid: str, data: Any = None) -> None:
        request = parse_event(CreateStreamRequest, sid, data)
        if request is None:
            await coordinator.reject_creation(sid, invalid_payload_message(CreateStreamRequest.event))
            return
        await coordinator.create_stream(sid, request)

    async def join_stream(sid: str, data: Any = None) -> None:
        request = parse_event(JoinStreamRequest, sid, data)
        if request is None:
            await coordinator.send_error(sid, invalid_payload_message(JoinStreamRequest.event))
            return
        await coordinator.join_stream(sid, request)

    async def end_stream(sid: str, data: Any = None) -> None:
        request = parse_event(EndStreamRequest, sid, data)
        if request is None:
            await coordinator.send_error(sid, invalid_payload_message(EndStreamRequest.event))
            return
        await coordinator.end_stream(sid, request)

    def relay_handler(model: type[OfferSignal] | type[AnswerSignal] | type[IceCandidateSignal]):
        async def handler(sid: str, data: Any = None) -> None:
            signal = parse_event(model, sid, data)
            if signal is None:
                await coordinator.send_error(sid, invalid_payload_message(model.event))
                return
            await coordinator.relay(sid, signal)

        return handler

    async def get_active_streams(sid: str, *args: Any) -> list[dict[str, Any]]:
        # Return value becomes the client's acknowledgement callback argument.
        return coordinator.active_streams()

    sio.on("connect", connect)
    sio.on("disconnect", disconnect)
    sio.on(CreateStreamRequest.event, create_stream)
    sio.on(JoinStreamRequest.event, join_stream)
    sio.on(EndStreamRequest.event, end_stream)
    for model in (OfferSignal, AnswerSignal, IceCandidateSignal):
        sio.on(model.event, relay_handler(model))
    sio.on("get-active-streams", get_active_streams)
