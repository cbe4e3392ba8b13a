"""In-memory WebRTC signaling coordinator for broadcaster/viewer rooms."""
from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Optional

from ..schemas.streams import (
    CreateStreamRequest,
    EndStreamRequest,
    JoinStreamRequest,
    SignalRelay,
)
from .authorization import CreatorCheck
from .connections import ConnectionRegistry
from .rooms import Room, RoomStore, StreamNotFoundError
from .transport import Transport

logger = logging.getLogger(__name__)

STREAM_CREATED = "stream-created"
STREAM_CREATION_FAILED = "stream-creation-failed"
VIEWER_JOINED = "viewer-joined"
STREAM_STARTED = "stream-started"
STREAM_UPDATE = "stream-update"
STREAM_ENDED = "stream-ended"
ERROR = "error"

NOT_A_CREATOR = "Only approved creators can start a stream."
CREATOR_CHECK_FAILED = "Failed to verify creator status."
STREAM_NOT_FOUND = "Stream not found"
NOT_BROADCASTER = "Only the broadcaster can end this stream"

Snapshot = list[dict[str, Any]]


class SignalingCoordinator:
    """Validate room requests, mutate the room store and fan out signaling traffic.

    All store mutations happen under one lock together with the snapshot that
    describes them; sends happen after the lock is released. The creator
    lookup is the only await that precedes a mutation, and nothing is written
    until it succeeds.
    """

    def __init__(
        self,
        transport: Transport,
        rooms: RoomStore,
        connections: ConnectionRegistry,
        creator_check: CreatorCheck,
    ) -> None:
        self._transport = transport
        self._rooms = rooms
        self._connections = connections
        self._creator_check = creator_check
        self._lock = asyncio.Lock()

    @property
    def rooms(self) -> RoomStore:
        return self._rooms

    @property
    def connections(self) -> ConnectionRegistry:
        return self._connections

    async def connect(self, sid: str) -> None:
        async with self._lock:
            self._connections.register(sid)
        logger.debug("Connection opened: %s", sid)

    async def create_stream(self, sid: str, request: CreateStreamRequest) -> None:
        """Open a room with ``sid`` as broadcaster once the creator check passes."""

        try:
            allowed = await self._creator_check(request.user_id)
        except Exception:  # noqa: BLE001
            logger.exception("Error checking creator status for user %s", request.user_id)
            await self.reject_creation(sid, CREATOR_CHECK_FAILED)
            return

        if not allowed:
            logger.info("User %s attempted to create stream but is not a creator", request.user_id)
            await self.reject_creation(sid, NOT_A_CREATOR)
            return

        async with self._lock:
            if sid not in self._connections:
                # closed during lookup
                logger.info("Dropping create-stream %s from closed connection %s", request.stream_id, sid)
                return
            if request.stream_id in self._rooms:
                logger.warning("Stream %s already live, replacing it", request.stream_id)
            self._rooms.create(
                request.stream_id,
                sid,
                broadcaster_user_id=request.user_id,
                title=request.title,
                category=request.category,
            )
            self._connections.claim(sid, request.user_id)
            snapshot = self._snapshot()

        logger.info("Stream %s created by %s (%s)", request.stream_id, request.user_id, sid)
        await self._transport.enter_room(sid, request.stream_id)
        await self._transport.emit(STREAM_CREATED, {"streamId": request.stream_id}, to=sid)
        await self._broadcast_update(snapshot)

    async def join_stream(self, sid: str, request: JoinStreamRequest) -> None:
        """Add ``sid`` as a viewer and prompt the broadcaster to start negotiating."""

        snapshot: Optional[Snapshot] = None
        async with self._lock:
            try:
                self._rooms.add_viewer(request.stream_id, sid)
            except StreamNotFoundError:
                pass
            else:
                self._connections.claim(sid, request.user_id)
                snapshot = self._snapshot()

        if snapshot is None:
            logger.info("User %s tried to join missing stream %s", request.user_id, request.stream_id)
            await self.send_error(sid, STREAM_NOT_FOUND)
            return

        logger.info("User %s (%s) joined stream %s", request.user_id, sid, request.stream_id)
        await self._transport.enter_room(sid, request.stream_id)
        notice = {"userId": request.user_id, "streamId": request.stream_id}
        await self._transport.emit(VIEWER_JOINED, notice, room=request.stream_id, skip_sid=sid)
        await self._transport.emit(STREAM_STARTED, notice, room=request.stream_id, skip_sid=sid)
        await self._broadcast_update(snapshot)

    async def relay(self, sid: str, signal: SignalRelay) -> None:
        """Forward an offer, answer or ICE candidate to the rest of the room."""

        await self._transport.emit(
            signal.event,
            signal.envelope(sid),
            room=signal.stream_id,
            skip_sid=sid,
        )

    def active_streams(self) -> Snapshot:
        return self._snapshot()

    def get_stream(self, stream_id: str) -> Optional[Room]:
        return self._rooms.get(stream_id)

    async def end_stream(self, sid: str, request: EndStreamRequest) -> None:
        """Close a room on explicit request from its broadcaster."""

        snapshot: Optional[Snapshot] = None
        async with self._lock:
            room = self._rooms.get(request.stream_id)
            if room is not None and room.broadcaster == sid:
                self._rooms.remove(request.stream_id)
                snapshot = self._snapshot()

        if snapshot is None:
            reason = STREAM_NOT_FOUND if room is None else NOT_BROADCASTER
            await self.send_error(sid, reason)
            return

        logger.info("Stream %s ended by broadcaster %s", request.stream_id, sid)
        await self._transport.emit(STREAM_ENDED, request.stream_id, room=request.stream_id)
        await self._transport.close_room(request.stream_id)
        await self._broadcast_update(snapshot)

    async def disconnect(self, sid: str) -> None:
        """Tear down whatever ``sid`` owned or watched. Never raises for unknown ids."""

        snapshot: Optional[Snapshot] = None
        async with self._lock:
            connection = self._connections.unregister(sid)
            ended = self._rooms.remove_by_broadcaster(sid)
            left = self._rooms.remove_viewer_by_connection(sid)
            if ended or left is not None:
                snapshot = self._snapshot()

        if connection is not None:
            logger.debug("Connection %s closed after %.1fs", sid, time.time() - connection.connected_at)

        for room in ended:
            logger.info("Broadcaster %s disconnected, closing stream %s", sid, room.stream_id)
            await self._transport.emit(STREAM_ENDED, room.stream_id, room=room.stream_id, skip_sid=sid)
            await self._transport.close_room(room.stream_id)
        if left is not None:
            logger.info("Viewer %s left stream %s", sid, left.stream_id)

        if snapshot is not None:
            await self._broadcast_update(snapshot)

    async def send_error(self, sid: str, message: str) -> None:
        await self._transport.emit(ERROR, {"message": message}, to=sid)

    async def reject_creation(self, sid: str, message: str) -> None:
        await self._transport.emit(STREAM_CREATION_FAILED, {"error": message}, to=sid)

    async def _broadcast_update(self, snapshot: Snapshot) -> None:
        await self._transport.emit(STREAM_UPDATE, snapshot)

    def _snapshot(self) -> Snapshot:
        return [summary.to_wire() for summary in self._rooms.list_summaries()]
