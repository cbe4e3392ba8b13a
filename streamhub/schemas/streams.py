"""Wire contracts for stream signaling events and room snapshots.

Inbound payloads arrive camelCased from browser clients. Each inbound event
has its own model so that missing or mistyped fields are rejected before the
coordinator sees them.
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_TITLE = "Untitled Stream"
DEFAULT_CATEGORY = "Uncategorized"


class InboundEvent(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True, extra="ignore")

    event: ClassVar[str]


class CreateStreamRequest(InboundEvent):
    event: ClassVar[str] = "create-stream"

    stream_id: str = Field(..., alias="streamId", min_length=1)
    user_id: str = Field(..., alias="userId", min_length=1)
    title: str | None = None
    category: str | None = None


class JoinStreamRequest(InboundEvent):
    event: ClassVar[str] = "join-stream"

    stream_id: str = Field(..., alias="streamId", min_length=1)
    user_id: str = Field(..., alias="userId", min_length=1)


class EndStreamRequest(InboundEvent):
    event: ClassVar[str] = "stream-ended"

    stream_id: str = Field(..., alias="streamId", min_length=1)


class _SignalRelay(InboundEvent):
    """Common shape of the three relayed negotiation messages."""

    payload_field: ClassVar[str]

    stream_id: str = Field(..., alias="streamId", min_length=1)
    user_id: str | None = Field(default=None, alias="userId")

    @property
    def payload(self) -> Any:
        return getattr(self, self.payload_field)

    def envelope(self, sender: str) -> dict[str, Any]:
        """Outbound form of the signal, attributed to ``user_id`` or the sender."""

        return {
            "streamId": self.stream_id,
            self.payload_field: self.payload,
            "userId": self.user_id or sender,
        }


class OfferSignal(_SignalRelay):
    event: ClassVar[str] = "offer"
    payload_field: ClassVar[str] = "offer"

    offer: Any


class AnswerSignal(_SignalRelay):
    event: ClassVar[str] = "answer"
    payload_field: ClassVar[str] = "answer"

    answer: Any


class IceCandidateSignal(_SignalRelay):
    event: ClassVar[str] = "ice-candidate"
    payload_field: ClassVar[str] = "candidate"

    candidate: Any


SignalRelay = OfferSignal | AnswerSignal | IceCandidateSignal


class StreamSummary(BaseModel):
    """One entry of the live room list pushed to clients."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str = DEFAULT_TITLE
    viewers: int = Field(default=0, ge=0)
    category: str = DEFAULT_CATEGORY
    streamer: str
    is_live: bool = Field(default=True, alias="isLive")

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class StreamDetail(StreamSummary):
    created_at: datetime = Field(..., alias="createdAt")
