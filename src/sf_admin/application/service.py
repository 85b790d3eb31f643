"""Admin application service: user directory and role management.

Role changes only touch the users table. Sessions pick up the new role on
their next token refresh, since tokens are never rewritten in place.
"""

import logging
import uuid
from typing import Any

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.sf_common.enums import UserRole
from src.sf_common.errors import SelfDemotionError, UserNotFoundError
from src.sf_gateway.user.db_models import UserModel
from src.sf_gateway.user.service import UserService

logger = logging.getLogger("sf.admin")


def _user_row(user: UserModel) -> dict[str, Any]:
    return {
        "id": str(user.id),
        "name": user.name,
        "email": user.email,
        "role": user.role,
        "is_active": user.is_active,
        "created_at": user.created_at.isoformat() if user.created_at else None,
    }


def _escape_like(term: str) -> str:
    """Make LIKE wildcards in a search term match literally."""
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _parse_user_id(user_id: str) -> uuid.UUID:
    try:
        return uuid.UUID(str(user_id))
    except ValueError:
        raise UserNotFoundError(user_id) from None


class AdminService:
    def __init__(self, users: UserService | None = None) -> None:
        self._users = users or UserService()

    async def list_users(
        self, page: int, limit: int, search: str, db: AsyncSession
    ) -> dict[str, Any]:
        """Newest-first page of users, optionally filtered by name/email substring."""
        conditions = []
        if search:
            pattern = f"%{_escape_like(search)}%"
            conditions.append(
                or_(
                    UserModel.name.ilike(pattern, escape="\\"),
                    UserModel.email.ilike(pattern, escape="\\"),
                )
            )

        total = (
            await db.execute(select(func.count()).select_from(UserModel).where(*conditions))
        ).scalar_one()
        rows = (
            await db.execute(
                select(UserModel)
                .where(*conditions)
                .order_by(UserModel.created_at.desc())
                .offset((page - 1) * limit)
                .limit(limit)
            )
        ).scalars().all()

        return {
            "users": [_user_row(u) for u in rows],
            "total": total,
            "page": page,
            "limit": limit,
            "total_pages": (total + limit - 1) // limit,
        }

    async def get_user(self, user_id: str, db: AsyncSession) -> dict[str, Any]:
        user = await self._users.get_by_id(_parse_user_id(user_id), db)
        if user is None:
            raise UserNotFoundError(user_id)
        return _user_row(user)

    async def set_role(
        self, acting_admin: UserModel, user_id: str, role: UserRole, db: AsyncSession
    ) -> dict[str, Any]:
        # Compare parsed UUIDs: "ABC..." and "{abc...}" name the same row
        target_id = _parse_user_id(user_id)
        if target_id == _parse_user_id(str(acting_admin.id)) and role != UserRole.ADMIN:
            raise SelfDemotionError()

        user = await self._users.get_by_id(target_id, db)
        if user is None:
            raise UserNotFoundError(user_id)

        previous = user.role
        user.role = role.value
        await db.flush()
        logger.info(
            "Admin %s changed role of user %s: %s -> %s",
            acting_admin.id, user.id, previous, role.value,
        )
        return _user_row(user)
