"""Outbound side of the signaling channel."""
from __future__ import annotations

from typing import Any, Optional, Protocol


class Transport(Protocol):
    """Subset of ``socketio.AsyncServer`` the coordinator relies on.

    ``room`` names a broadcast group, ``to`` a single connection, and
    ``skip_sid`` excludes one connection from a group or global emit. With
    neither ``to`` nor ``room`` the event goes to every connected client.
    """

    async def emit(
        self,
        event: str,
        data: Any = None,
        to: Optional[str] = None,
        room: Optional[str] = None,
        skip_sid: Optional[str] = None,
    ) -> None: ...

    async def enter_room(self, sid: str, room: str) -> None: ...

    async def close_room(self, room: str) -> None: ...
