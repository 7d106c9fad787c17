"""
Database seeding script for the first admin.

Admins cannot be created through the API: the first one is promoted here.
Run this script after the admin has signed in once (so the user record
exists) or pass --create to insert it directly.

Usage:
    python -m zapshift.seed_admin admin@example.com [--create]
"""

import argparse
import asyncio

from sqlalchemy import select

from zapshift.app.core.config import settings
from zapshift.app.db.session import Database
from zapshift.app.models.enums import UserRole
from zapshift.app.models.user import User


async def seed_admin(email: str, create: bool = False) -> int:
    """
    Promote `email` to admin.

    Returns:
        Process exit code
    """
    database = Database.from_settings(settings)
    await database.create_all()

    try:
        async with database.session_factory() as db:
            print(f"🌱 Seeding admin {email}...")

            result = await db.execute(select(User).where(User.email == email))
            user = result.scalar_one_or_none()

            if user is None and not create:
                print("❌ User not found. Sign in once first, or pass --create.")
                return 1

            if user is None:
                user = User(email=email, role=UserRole.ADMIN)
                db.add(user)
                print("✅ Created ADMIN user")
            elif user.role == UserRole.ADMIN:
                print("ℹ️  User is already an admin, skipping")
                return 0
            else:
                user.role = UserRole.ADMIN
                print("✅ Promoted user to ADMIN")

            await db.commit()
            return 0
    finally:
        await database.dispose()


def main() -> None:
    parser = argparse.ArgumentParser(description="Promote a user to admin")
    parser.add_argument("email")
    parser.add_argument("--create", action="store_true", help="Insert the user if missing")
    args = parser.parse_args()
    raise SystemExit(asyncio.run(seed_admin(args.email.lower(), create=args.create)))


if __name__ == "__main__":
    main()
