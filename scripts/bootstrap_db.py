"""Create database schema and seed demo users for development."""
from __future__ import annotations

import asyncio
from datetime import datetime, timezone

from streamhub.db.session import SessionLocal, engine
from streamhub.models.base import Base
from streamhub.models.user import User

USERS = [
	{
		"id": "user-ava",
		"username": "ava",
		"is_creator": True,
	},
	{
		"id": "user-daniel",
		"username": "daniel",
		"is_creator": False,
	},
	{
		"id": "user-sofia",
		"username": "sofia",
		"is_creator": True,
	},
]


async def create_schema() -> None:
	"""Create the database schema if it does not already exist."""

	async with engine.begin() as conn:
		await conn.run_sync(Base.metadata.create_all)


async def seed_users() -> None:
	"""Insert or update demo users, some of them approved creators."""

	async with SessionLocal() as session:
		async with session.begin():
			for user_data in USERS:
				user = await session.get(User, user_data["id"])
				if user is None:
					session.add(
						User(
							id=user_data["id"],
							username=user_data["username"],
							is_creator=user_data["is_creator"],
							created_at=datetime.now(timezone.utc),
						)
					)
				else:
					user.username = user_data["username"]
					user.is_creator = user_data["is_creator"]


async def main() -> None:
	await create_schema()
	await seed_users()
	print("Database schema ensured and demo users seeded.")


if __name__ == "__main__":
	asyncio.run(main())
