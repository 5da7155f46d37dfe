"""
Database seeding script for initial users.

Admins cannot register through the API, so the first admin account (plus a
demo sender and receiver) is created here.
Run this script after the database is reachable and before first use.
"""

import asyncio
import os
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from swiftdrop.app.db.session import AsyncSessionLocal, engine, Base
from swiftdrop.app.models.user import User
from swiftdrop.app.models.parcel import Parcel  # registers the parcel tables
from swiftdrop.app.models.enums import UserRole
from swiftdrop.app.core.security import get_password_hash
from sqlalchemy import select

SEED_USERS = [
    (UserRole.ADMIN, "admin", "admin@swiftdrop.com", os.getenv("SEED_ADMIN_PASSWORD", "admin123")),
    (UserRole.SENDER, "sender", "sender@swiftdrop.com", os.getenv("SEED_SENDER_PASSWORD", "sender123")),
    (UserRole.RECEIVER, "receiver", "receiver@swiftdrop.com", os.getenv("SEED_RECEIVER_PASSWORD", "receiver123")),
]


async def seed_users(session_factory=AsyncSessionLocal) -> list:
    """
    Seed initial users with different roles.

    Users whose username already exists are left untouched.

    Returns:
        Usernames created by this run
    """
    created = []
    async with session_factory() as db:
        print("🌱 Starting user seeding...")

        for role, username, email, password in SEED_USERS:
            result = await db.execute(select(User).where(User.username == username))
            if result.scalar_one_or_none():
                print(f"ℹ️  {role.value} user '{username}' already exists, skipping")
                continue

            db.add(User(
                email=email,
                username=username,
                hashed_password=get_password_hash(password),
                role=role,
                is_active=True,
            ))
            created.append(username)
            print(f"✅ Created {role.value} user (username: {username})")

        await db.commit()

    print(f"\n🎉 User seeding completed ({len(created)} created)")
    return created


async def main():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    await seed_users()
    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
