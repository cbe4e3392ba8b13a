"""User repository helpers."""
from __future__ import annotations

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.user import User


async def is_approved_creator(session: AsyncSession, user_id: str) -> bool:
    """Return whether the user exists and carries the approved-creator flag."""

    stmt: Select[tuple[bool]] = select(User.is_creator).where(User.id == user_id)
    result = await session.execute(stmt)
    return bool(result.scalar_one_or_none())
