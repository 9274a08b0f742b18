"""
Database seeding script for development users.

Creates an ADMIN, a MANAGER and two STAFF field agents so geo-tracking
pings have a user to reference. Run this after the database is set up.
"""

import asyncio
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from backend.app.core.config import settings
from backend.app.db.session import Base, build_engine, build_session_factory
from backend.app.models.user import User
from backend.app.models.geo_tracking import GeoTracking  # noqa: F401
from backend.app.models.enums import UserRole
from sqlalchemy import select

SEED_USERS = [
    {"email": "admin@geotrack.dev", "first_name": "Admin", "role": UserRole.ADMIN},
    {"email": "manager@geotrack.dev", "first_name": "Meera", "last_name": "Shah", "role": UserRole.MANAGER},
    {"email": "agent1@geotrack.dev", "first_name": "Arjun", "role": UserRole.STAFF, "salesman_login_id": "SLS-001"},
    {"email": "agent2@geotrack.dev", "first_name": "Kavya", "role": UserRole.STAFF, "salesman_login_id": "SLS-002"},
]


async def seed_users():
    """
    Seed initial users with different roles.

    Skips any user whose email already exists.
    """
    engine = build_engine(settings)
    AsyncSessionLocal = build_session_factory(engine)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with AsyncSessionLocal() as db:
        print("🌱 Starting user seeding...")

        for fields in SEED_USERS:
            result = await db.execute(
                select(User).where(User.email == fields["email"])
            )
            if result.scalar_one_or_none():
                print(f"ℹ️  {fields['email']} already exists, skipping")
                continue

            db.add(User(**fields))
            print(f"✅ Created {fields['role'].value} user ({fields['email']})")

        await db.commit()

        result = await db.execute(select(User).order_by(User.id))
        print("\n🎉 User seeding completed. Use these ids as userId:")
        for user in result.scalars().all():
            print(f"  - {user.id:>3}  {user.role.value:<8} {user.email}")

    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(seed_users())
