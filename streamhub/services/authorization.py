"""Creator authorization lookups used before a stream may start."""
from __future__ import annotations

import logging
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..repositories import users as users_repo

logger = logging.getLogger(__name__)


class CreatorCheck(Protocol):
    """Answer whether an identity may broadcast.

    Implementations return ``False`` for unknown or unapproved users and raise
    when the lookup itself fails.
    """

    async def __call__(self, user_id: str) -> bool: ...


class DatabaseCreatorCheck:
    """Read the approved-creator flag from the user table."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def __call__(self, user_id: str) -> bool:
        async with self._session_factory() as session:
            allowed = await users_repo.is_approved_creator(session, user_id)
        logger.debug("Creator lookup for %s -> %s", user_id, allowed)
        return allowed
