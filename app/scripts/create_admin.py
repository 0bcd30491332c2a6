import asyncio
import logging
import os

from sqlalchemy import select

from app.models.user_models import User
from app.core.db import AsyncSessionLocal, init_models
from app.core.security import hash_password

logger = logging.getLogger(__name__)


async def create_admin(username: str, password: str):
    await init_models()
    async with AsyncSessionLocal() as session:
        existing = await session.execute(select(User).where(User.username == username))
        if existing.scalars().first():
            logger.info("User '%s' already exists, nothing to do", username)
            return

        admin = User(
            username=username,
            password_hash=hash_password(password),
            role="admin",
            is_active=True
        )
        session.add(admin)
        await session.commit()
        logger.info("Admin user '%s' created", username)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(create_admin(
        os.getenv("ADMIN_USERNAME", "admin"),
        os.getenv("ADMIN_PASSWORD", "admin123"),
    ))
