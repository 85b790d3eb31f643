"""Admin area route guard.

Every request under ADMIN_PATH_PREFIX is checked against the session token
before it reaches a handler. The token is read from the session cookie or a
Bearer header and verified locally: no database query per request, the role
claim is trusted as issued.

Authorization rule:
    allowed  <=>  role == ADMIN
                  or (ADMIN_OVERRIDE_EMAIL is set and equals the token email,
                      compared case-insensitively)

The override is an explicit superuser escape hatch and is off unless
configured. The sign-in page itself is always reachable. Rejections are a
302 to the sign-in page with ``callbackUrl`` set to the original URL.

Decision table:
    outside prefix              -> PASS_THROUGH
    sign-in page                -> PUBLIC_ADMIN_PATH
    no / bad token              -> NO_TOKEN          (redirect)
    token, not admin, no match  -> TOKEN_WRONG_ROLE  (redirect)
    otherwise                   -> AUTHORIZED
"""

import logging
from urllib.parse import urlencode

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import RedirectResponse, Response
from starlette.types import ASGIApp

from config.settings import settings
from src.sf_common.enums import GuardDecision
from src.sf_gateway.auth.jwt_handler import SessionClaims, verify_session

logger = logging.getLogger("sf.guard")


def _under_prefix(path: str, prefix: str) -> bool:
    prefix = prefix.rstrip("/")
    return path == prefix or path.startswith(prefix + "/")


def evaluate_admin_access(
    path: str,
    claims: SessionClaims | None,
    *,
    prefix: str = "/admin",
    signin_path: str = "/admin/signin",
    override_email: str | None = None,
) -> GuardDecision:
    """Classify a request for *path* made with *claims* (None = no session)."""
    if not _under_prefix(path, prefix):
        return GuardDecision.PASS_THROUGH
    if path.rstrip("/") == signin_path.rstrip("/"):
        return GuardDecision.PUBLIC_ADMIN_PATH
    if claims is None:
        return GuardDecision.NO_TOKEN
    if claims.is_admin:
        return GuardDecision.AUTHORIZED
    if (
        override_email
        and claims.email
        and claims.email.strip().lower() == override_email.strip().lower()
    ):
        return GuardDecision.AUTHORIZED
    return GuardDecision.TOKEN_WRONG_ROLE


def session_token_from(request: Request, cookie_name: str) -> str | None:
    """Session cookie first, then ``Authorization: Bearer``."""
    token = request.cookies.get(cookie_name)
    if token:
        return token
    scheme, _, credentials = request.headers.get("authorization", "").partition(" ")
    if scheme.lower() == "bearer" and credentials:
        return credentials.strip()
    return None


class AdminGuardMiddleware(BaseHTTPMiddleware):
    def __init__(
        self,
        app: ASGIApp,
        prefix: str | None = None,
        signin_path: str | None = None,
        override_email: str | None = None,
        cookie_name: str | None = None,
    ) -> None:
        super().__init__(app)
        self.prefix = prefix or settings.ADMIN_PATH_PREFIX
        self.signin_path = signin_path or settings.ADMIN_SIGNIN_PATH
        self.override_email = override_email if override_email is not None else settings.ADMIN_OVERRIDE_EMAIL
        self.cookie_name = cookie_name or settings.SESSION_COOKIE_NAME

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        path = request.url.path
        if not _under_prefix(path, self.prefix):
            return await call_next(request)

        claims = verify_session(session_token_from(request, self.cookie_name))
        decision = evaluate_admin_access(
            path,
            claims,
            prefix=self.prefix,
            signin_path=self.signin_path,
            override_email=self.override_email,
        )
        if decision.allowed:
            request.state.session_claims = claims
            return await call_next(request)

        logger.info("%s: redirecting %s to %s", decision.value, path, self.signin_path)
        query = urlencode({"callbackUrl": str(request.url)})
        return RedirectResponse(f"{self.signin_path}?{query}", status_code=302)
