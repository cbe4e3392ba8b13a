"""In-memory store of live broadcast rooms."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Optional

from ..schemas.streams import DEFAULT_CATEGORY, DEFAULT_TITLE, StreamDetail, StreamSummary


class StreamNotFoundError(LookupError):
    """Raised when an operation targets a stream that is not live."""

    def __init__(self, stream_id: str) -> None:
        super().__init__(f"Stream {stream_id!r} not found")
        self.stream_id = stream_id


@dataclass
class Room:
    """One live broadcast.

    ``broadcaster`` and ``viewers`` hold connection identifiers. The durable
    identity the broadcaster claimed is kept separately for display.
    """

    stream_id: str
    broadcaster: str
    broadcaster_user_id: Optional[str] = None
    viewers: list[str] = field(default_factory=list)
    title: Optional[str] = None
    category: Optional[str] = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def viewer_count(self) -> int:
        return len(self.viewers)

    def summary(self) -> StreamSummary:
        return StreamSummary(
            id=self.stream_id,
            title=self.title or DEFAULT_TITLE,
            viewers=self.viewer_count,
            category=self.category or DEFAULT_CATEGORY,
            streamer=self.broadcaster_user_id or self.broadcaster,
            is_live=True,
        )

    def detail(self) -> StreamDetail:
        return StreamDetail(**self.summary().model_dump(), created_at=self.created_at)


class RoomStore:
    """Authoritative map of stream identifier to :class:`Room`.

    Methods never await, so under a single event loop each call is atomic
    with respect to other handlers.
    """

    def __init__(self) -> None:
        self._rooms: Dict[str, Room] = {}

    def create(
        self,
        stream_id: str,
        broadcaster: str,
        *,
        broadcaster_user_id: Optional[str] = None,
        title: Optional[str] = None,
        category: Optional[str] = None,
    ) -> Room:
        """Insert a room, replacing any room already using ``stream_id``."""

        room = Room(
            stream_id=stream_id,
            broadcaster=broadcaster,
            broadcaster_user_id=broadcaster_user_id,
            title=title,
            category=category,
        )
        self._rooms[stream_id] = room
        return room

    def get(self, stream_id: str) -> Optional[Room]:
        return self._rooms.get(stream_id)

    def add_viewer(self, stream_id: str, viewer: str) -> Room:
        room = self._rooms.get(stream_id)
        if room is None:
            raise StreamNotFoundError(stream_id)
        room.viewers.append(viewer)
        return room

    def remove_viewer_by_connection(self, sid: str) -> Optional[Room]:
        """Drop one occurrence of ``sid`` from the first room listing it as a viewer."""

        for room in self._rooms.values():
            if sid in room.viewers:
                room.viewers.remove(sid)
                return room
        return None

    def remove_by_broadcaster(self, sid: str) -> list[Room]:
        removed = [room for room in self._rooms.values() if room.broadcaster == sid]
        for room in removed:
            del self._rooms[room.stream_id]
        return removed

    def remove(self, stream_id: str) -> Optional[Room]:
        return self._rooms.pop(stream_id, None)

    def list_summaries(self) -> list[StreamSummary]:
        return [room.summary() for room in self._rooms.values()]

    def __contains__(self, stream_id: object) -> bool:
        return stream_id in self._rooms

    def __len__(self) -> int:
        return len(self._rooms)
