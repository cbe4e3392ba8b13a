"""Tests for the Socket.IO event bindings."""
from __future__ import annotations

import pytest

from conftest import close_connection
from streamhub.routers.signaling import parse_event, register_signaling_handlers
from streamhub.schemas.streams import CreateStreamRequest, EndStreamRequest, OfferSignal


class HandlerRecorder:
    """Captures ``sio.on`` registrations so handlers can be invoked directly."""

    def __init__(self) -> None:
        self.handlers: dict = {}

    def on(self, event, handler=None, namespace=None):
        self.handlers[event] = handler


@pytest.fixture()
def handlers(coordinator):
    recorder = HandlerRecorder()
    register_signaling_handlers(recorder, coordinator)
    return recorder.handlers


def test_every_protocol_event_is_bound(handlers):
    assert set(handlers) == {
        "connect",
        "disconnect",
        "create-stream",
        "join-stream",
        "stream-ended",
        "offer",
        "answer",
        "ice-candidate",
        "get-active-streams",
    }


def test_parse_event_accepts_camel_case_and_bare_stream_id():
    request = parse_event(CreateStreamRequest, "sid", {"streamId": "s1", "userId": "A", "title": "Hi"})
    assert (request.stream_id, request.user_id, request.title) == ("s1", "A", "Hi")

    ended = parse_event(EndStreamRequest, "sid", "s1")
    assert ended.stream_id == "s1"


@pytest.mark.parametrize("payload", [None, "s1", ["s1"], {"streamId": "s1"}, {"streamId": "", "userId": "A"}])
def test_parse_event_rejects_malformed_payloads(payload):
    assert parse_event(CreateStreamRequest, "sid", payload) is None


def test_offer_requires_payload_field():
    assert parse_event(OfferSignal, "sid", {"streamId": "s1", "userId": "A"}) is None


@pytest.mark.asyncio
async def test_socket_events_drive_coordinator(handlers, coordinator, transport):
    for sid in ("sid-a", "sid-b"):
        transport.open(sid)
        await handlers["connect"](sid, {}, None)

    await handlers["create-stream"]("sid-a", {"streamId": "s1", "userId": "A"})
    await handlers["join-stream"]("sid-b", {"streamId": "s1", "userId": "B"})
    await handlers["offer"]("sid-a", {"streamId": "s1", "offer": {"sdp": "x"}, "userId": "A"})

    assert transport.received("sid-b", "offer") == [{"streamId": "s1", "offer": {"sdp": "x"}, "userId": "A"}]

    snapshot = await handlers["get-active-streams"]("sid-b")
    assert snapshot == [
        {
            "id": "s1",
            "title": "Untitled Stream",
            "viewers": 1,
            "category": "Uncategorized",
            "streamer": "A",
            "isLive": True,
        }
    ]

    await handlers["disconnect"]("sid-a", "client disconnect")
    assert transport.received("sid-b", "stream-ended") == ["s1"]
    assert await handlers["get-active-streams"]("sid-b") == []


@pytest.mark.asyncio
async def test_malformed_payloads_are_rejected_without_state_change(handlers, coordinator, transport):
    transport.open("sid-a")
    await handlers["connect"]("sid-a", {})

    await handlers["create-stream"]("sid-a", {"userId": "A"})
    await handlers["join-stream"]("sid-a", None)
    await handlers["ice-candidate"]("sid-a", "candidate")
    await handlers["stream-ended"]("sid-a", 42)

    assert transport.received("sid-a", "stream-creation-failed") == [{"error": "Invalid create-stream payload."}]
    assert transport.received("sid-a", "error") == [
        {"message": "Invalid join-stream payload."},
        {"message": "Invalid ice-candidate payload."},
        {"message": "Invalid stream-ended payload."},
    ]
    assert len(coordinator.rooms) == 0

    await close_connection(coordinator, transport, "sid-a")
    assert len(coordinator.connections) == 0
