"""Bootstrap the administrator account from ADMIN_EMAIL / ADMIN_PASSWORD.

Run with: python -m src.sf_gateway.user.seed

Idempotent: an existing account with that email is promoted to ADMIN if
needed and otherwise left alone (its password is not overwritten).
"""

import asyncio
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.sf_common.database import async_session_factory, engine
from src.sf_common.enums import UserRole
from src.sf_common.errors import PasswordTooLongError
from src.sf_gateway.auth.password import hash_password, password_fits
from src.sf_gateway.user.db_models import UserModel
from src.sf_gateway.user.service import UserService

logger = logging.getLogger("sf.seed")


async def seed_admin(email: str, password: str, db: AsyncSession) -> UserModel:
    """Create or promote the admin account. Caller manages the transaction."""
    if not password_fits(password):
        raise PasswordTooLongError()
    existing = await UserService().get_by_email(email, db)
    if existing is not None:
        if existing.role != UserRole.ADMIN.value:
            existing.role = UserRole.ADMIN.value
            await db.flush()
            logger.info("Promoted existing user %s to ADMIN", existing.id)
        else:
            logger.info("Admin user with email %s already exists", email)
        return existing

    admin = UserModel(
        email=email.strip().lower(),
        name="Administrator",
        password_hash=hash_password(password),
        role=UserRole.ADMIN.value,
        is_active=True,
    )
    db.add(admin)
    await db.flush()
    logger.info("Created admin user with id: %s", admin.id)
    return admin


async def main() -> None:
    if not settings.ADMIN_EMAIL or not settings.ADMIN_PASSWORD:
        logger.warning(
            "Skipping admin user creation: ADMIN_EMAIL and ADMIN_PASSWORD are not set."
        )
        return
    async with async_session_factory() as db, db.begin():
        await seed_admin(settings.ADMIN_EMAIL, settings.ADMIN_PASSWORD, db)
    await engine.dispose()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(main())
