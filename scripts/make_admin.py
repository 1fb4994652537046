"""Promote a user to the ADMIN role by email or username.

Usage: python scripts/make_admin.py <email_or_username>
"""
import asyncio
import logging
import sys

from sqlalchemy import select

from unknown_items.core.logging import configure_logging
from unknown_items.db.session import async_session_maker, engine
from unknown_items.models.enums import UserRole
from unknown_items.models.user import User

logger = logging.getLogger("make_admin")


async def promote_user(identifier: str) -> bool:
    async with async_session_maker() as session:
        column = User.email if "@" in identifier else User.username
        result = await session.execute(select(User).where(column == identifier))
        user = result.scalar_one_or_none()
        if not user:
            logger.error("User '%s' not found", identifier)
            return False

        user.role = UserRole.ADMIN
        await session.commit()
        logger.info("User '%s' (%s) is now an admin", user.username, user.email)
        return True


async def main(identifier: str) -> int:
    try:
        return 0 if await promote_user(identifier) else 1
    finally:
        await engine.dispose()


if __name__ == "__main__":
    configure_logging()
    if len(sys.argv) < 2:
        print("Usage: python scripts/make_admin.py <email_or_username>")
        sys.exit(1)
    sys.exit(asyncio.run(main(sys.argv[1])))
