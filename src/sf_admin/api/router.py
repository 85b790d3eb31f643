"""Admin REST API. Every endpoint requires the ADMIN role on the user record."""
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from src.sf_admin.application.service import AdminService
from src.sf_common.database import get_db_session
from src.sf_common.enums import UserRole
from src.sf_common.response import ApiResponse, success_response
from src.sf_gateway.auth.dependencies import require_admin
from src.sf_gateway.user.db_models import UserModel

router = APIRouter(prefix="/admin", tags=["admin"])
_service = AdminService()


class RoleUpdateRequest(BaseModel):
    role: UserRole


@router.get("/users")
async def list_users(
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=100)] = 10,
    search: Annotated[str, Query(max_length=255)] = "",
) -> ApiResponse:
    result = await _service.list_users(page, limit, search.strip(), db)
    return success_response(result)


@router.get("/users/{user_id}")
async def get_user(
    user_id: str,
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    return success_response(await _service.get_user(user_id, db))


@router.patch("/users/{user_id}/role")
async def update_user_role(
    user_id: str,
    body: RoleUpdateRequest,
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    # require_admin already opened the session's transaction
    result = await _service.set_role(admin, user_id, body.role, db)
    await db.commit()
    return success_response(result, message="Role updated")
