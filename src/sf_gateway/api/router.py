"""Auth API router: register, login, refresh, logout, session, password reset.

All endpoints return ApiResponse. request_id is read from request.state
(injected by RequestLogMiddleware). Sensitive endpoints are rate limited per
client identifier before the body is validated or the database is touched.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.sf_common.database import get_db_session
from src.sf_common.errors import InvalidResetTokenError
from src.sf_common.response import ApiResponse, success_response
from src.sf_gateway.auth.dependencies import oauth2_scheme
from src.sf_gateway.auth.jwt_handler import verify_session
from src.sf_gateway.auth.session import build_session
from src.sf_gateway.middleware.rate_limit import (
    LOGIN_LIMIT,
    PASSWORD_RESET_LIMIT,
    PASSWORD_RESET_REQUEST_LIMIT,
    REGISTER_LIMIT,
    rate_limit,
)
from src.sf_gateway.user.schemas import (
    LoginRequest,
    LoginResponse,
    PasswordResetConfirm,
    PasswordResetRequest,
    RefreshRequest,
    RefreshResponse,
    RegisterRequest,
    RegisterResponse,
    UserInfo,
)
from src.sf_gateway.user.service import UserService

logger = logging.getLogger("sf.auth")

router = APIRouter(prefix="/auth", tags=["auth"])
_service = UserService()

RESET_REQUESTED_MESSAGE = (
    "If an account exists for this email, a password reset link has been sent."
)


def _get_request_id(request: Request) -> str:
    """Read request_id injected by RequestLogMiddleware, fallback if absent."""
    return getattr(request.state, "request_id", "req_unknown")


def _respond(request: Request, data: object, message: str) -> ApiResponse:
    resp = success_response(data, message=message)
    resp.request_id = _get_request_id(request)
    return resp


@router.post(
    "/register",
    status_code=status.HTTP_201_CREATED,
    response_model=ApiResponse,
    summary="User registration",
    dependencies=[Depends(rate_limit(*REGISTER_LIMIT))],
)
async def register(
    request: Request,
    body: RegisterRequest,
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse:
    async with db.begin():
        user = await _service.register(body.email, body.password, body.name, db)

    data = RegisterResponse(
        user_id=str(user.id),
        email=user.email,
        name=user.name,
        created_at=user.created_at.isoformat(),
    )
    return _respond(request, data.model_dump(), "User registered successfully")


@router.post(
    "/login",
    status_code=status.HTTP_200_OK,
    response_model=ApiResponse,
    summary="Credential sign-in",
    dependencies=[Depends(rate_limit(*LOGIN_LIMIT))],
)
async def login(
    request: Request,
    response: Response,
    body: LoginRequest,
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse:
    user, access_token, refresh_token = await _service.login(body.email, body.password, db)

    expires_in = settings.JWT_EXPIRE_MINUTES * 60
    # Browser sessions: the admin route guard reads this cookie
    response.set_cookie(
        settings.SESSION_COOKIE_NAME,
        access_token,
        max_age=expires_in,
        httponly=True,
        samesite="lax",
        secure=not settings.DEBUG,
    )
    data = LoginResponse(
        access_token=access_token,
        refresh_token=refresh_token,
        token_type="Bearer",
        expires_in=expires_in,
        user=UserInfo(
            user_id=str(user.id),
            email=user.email,
            name=user.name,
            role=user.role,
        ),
    )
    return _respond(request, data.model_dump(), "Login successful")


@router.post(
    "/refresh",
    status_code=status.HTTP_200_OK,
    response_model=ApiResponse,
    summary="Refresh access token",
)
async def refresh_token(
    request: Request,
    body: RefreshRequest,
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse:
    new_access_token = await _service.refresh(body.refresh_token, db)

    data = RefreshResponse(
        access_token=new_access_token,
        expires_in=settings.JWT_EXPIRE_MINUTES * 60,
    )
    return _respond(request, data.model_dump(), "Token refreshed")


@router.post(
    "/logout",
    status_code=status.HTTP_200_OK,
    response_model=ApiResponse,
    summary="Clear the browser session cookie",
)
async def logout(request: Request, response: Response) -> ApiResponse:
    response.delete_cookie(settings.SESSION_COOKIE_NAME)
    return _respond(request, None, "Signed out")


@router.get(
    "/session",
    status_code=status.HTTP_200_OK,
    response_model=ApiResponse,
    summary="Current session, enriched from the user record",
)
async def get_session(
    request: Request,
    token: str = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse:
    claims = verify_session(token)
    if claims is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    user = await _service.get_by_id(claims.user_id, db)
    return _respond(request, build_session(claims, user), "success")


@router.post(
    "/request-reset",
    status_code=status.HTTP_200_OK,
    response_model=ApiResponse,
    summary="Request a password reset link",
    dependencies=[Depends(rate_limit(*PASSWORD_RESET_REQUEST_LIMIT))],
)
async def request_password_reset(
    request: Request,
    body: PasswordResetRequest,
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse:
    async with db.begin():
        reset_url = await _service.request_password_reset(body.email, db)

    if reset_url is not None and settings.DEBUG:
        # No mail transport in this service; surface the link for local dev only
        logger.debug("Password reset link: %s", reset_url)
    return _respond(request, None, RESET_REQUESTED_MESSAGE)


@router.post(
    "/reset-password",
    status_code=status.HTTP_200_OK,
    response_model=ApiResponse,
    summary="Set a new password with a reset token",
    dependencies=[Depends(rate_limit(*PASSWORD_RESET_LIMIT))],
)
async def reset_password(
    request: Request,
    body: PasswordResetConfirm,
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse:
    async with db.begin():
        ok = await _service.reset_password(body.token, body.new_password, db)
    if not ok:
        raise InvalidResetTokenError()
    return _respond(request, None, "Password has been reset successfully.")
