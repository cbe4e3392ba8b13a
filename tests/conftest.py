"""Shared fixtures: an in-memory transport and a scriptable creator check."""
from __future__ import annotations

import os
from collections import defaultdict
from typing import Any, Iterable

import pytest

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

from streamhub.services.connections import ConnectionRegistry  # noqa: E402
from streamhub.services.rooms import RoomStore  # noqa: E402
from streamhub.services.signaling import SignalingCoordinator  # noqa: E402


class FakeTransport:
    """Socket.IO stand-in that resolves emits into per-connection inboxes."""

    def __init__(self) -> None:
        self.connected: list[str] = []
        self.groups: dict[str, list[str]] = {}
        self.inbox: dict[str, list[tuple[str, Any]]] = defaultdict(list)
        self.emitted: list[dict[str, Any]] = []

    def open(self, sid: str) -> None:
        self.connected.append(sid)

    def close(self, sid: str) -> None:
        if sid in self.connected:
            self.connected.remove(sid)
        for members in self.groups.values():
            if sid in members:
                members.remove(sid)

    async def emit(self, event, data=None, to=None, room=None, skip_sid=None) -> None:
        self.emitted.append({"event": event, "data": data, "to": to, "room": room, "skip_sid": skip_sid})
        if to is not None:
            recipients = [to] if to in self.connected else []
        elif room is not None:
            recipients = list(self.groups.get(room, []))
        else:
            recipients = list(self.connected)
        for sid in recipients:
            if sid != skip_sid:
                self.inbox[sid].append((event, data))

    async def enter_room(self, sid: str, room: str) -> None:
        members = self.groups.setdefault(room, [])
        if sid not in members:
            members.append(sid)

    async def close_room(self, room: str) -> None:
        self.groups.pop(room, None)

    def received(self, sid: str, event: str) -> list[Any]:
        return [data for name, data in self.inbox[sid] if name == event]

    def clear(self) -> None:
        self.inbox.clear()
        self.emitted.clear()


class FakeCreatorCheck:
    def __init__(self, creators: Iterable[str] = (), error: Exception | None = None) -> None:
        self.creators = set(creators)
        self.error = error
        self.calls: list[str] = []

    async def __call__(self, user_id: str) -> bool:
        self.calls.append(user_id)
        if self.error is not None:
            raise self.error
        return user_id in self.creators


@pytest.fixture()
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture()
def creator_check() -> FakeCreatorCheck:
    return FakeCreatorCheck(creators={"A", "C"})


@pytest.fixture()
def coordinator(transport: FakeTransport, creator_check: FakeCreatorCheck) -> SignalingCoordinator:
    return SignalingCoordinator(transport, RoomStore(), ConnectionRegistry(), creator_check)


async def open_connection(coordinator: SignalingCoordinator, transport: FakeTransport, sid: str) -> None:
    transport.open(sid)
    await coordinator.connect(sid)


async def close_connection(coordinator: SignalingCoordinator, transport: FakeTransport, sid: str) -> None:
    # Socket.IO runs the disconnect handler before dropping the sid from its rooms.
    await coordinator.disconnect(sid)
    transport.close(sid)
