"""Registry of open signaling connections."""
from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Dict, Optional


@dataclass(slots=True)
class Connection:
    """Transport-level session known to the signaling layer."""

    sid: str
    user_id: Optional[str] = None
    connected_at: float = field(default_factory=time.time)


class ConnectionRegistry:
    """Map connection identifiers to their process-wide state."""

    def __init__(self) -> None:
        self._connections: Dict[str, Connection] = {}

    def register(self, sid: str) -> Connection:
        connection = Connection(sid=sid)
        self._connections[sid] = connection
        return connection

    def unregister(self, sid: str) -> Optional[Connection]:
        return self._connections.pop(sid, None)

    def get(self, sid: str) -> Optional[Connection]:
        return self._connections.get(sid)

    def claim(self, sid: str, user_id: str) -> None:
        """Attach the identity a client claimed in a create or join request."""

        connection = self._connections.get(sid)
        if connection is not None:
            connection.user_id = user_id

    def __contains__(self, sid: object) -> bool:
        return sid in self._connections

    def __len__(self) -> int:
        return len(self._connections)
