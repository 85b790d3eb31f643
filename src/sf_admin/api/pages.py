"""Admin area entry points behind AdminGuardMiddleware.

Page rendering lives in the storefront frontend; these handlers only expose
what the guard decided so the frontend can route accordingly.
"""
from fastapi import APIRouter, Request

from config.settings import settings
from src.sf_common.response import ApiResponse, success_response

router = APIRouter(prefix=settings.ADMIN_PATH_PREFIX, tags=["admin-pages"])


@router.get("/signin")
async def admin_signin(request: Request) -> ApiResponse:
    """Public: tells the frontend where to post credentials and where to return."""
    return success_response({
        "login_url": "/api/v1/auth/login",
        "callback_url": request.query_params.get("callbackUrl", settings.ADMIN_PATH_PREFIX),
    })


@router.get("")
async def admin_home(request: Request) -> ApiResponse:
    claims = getattr(request.state, "session_claims", None)
    return success_response({
        "user_id": claims.user_id if claims else None,
        "email": claims.email if claims else None,
        "role": claims.role.value if claims else None,
    })
