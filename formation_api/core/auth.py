"""
Authentication gate for protected routes.

Every request whose path starts with ``PROTECTED_PATH_PREFIX`` must carry a
session token, either in the ``Authorization`` header (``Bearer <token>`` or
the raw token) or in the ``jwtToken`` cookie. Other paths, and CORS preflight
requests, are public and pass straight through.

On success the gate stores an ``Identity`` on ``request.state.identity``;
handlers read it with the ``get_current_identity`` dependency.
"""

from typing import Callable, Mapping, Optional

import structlog
from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from formation_api.api.deps import get_token_service, get_user_store
from formation_api.config import settings
from formation_api.core.exceptions import AuthenticationFailed, ExpiredTokenError
from formation_api.core.identity import Identity, user_details
from formation_api.core.security import TokenService
from formation_api.schemas.common import ApiResponse
from formation_api.services.user_store import UserStore

logger = structlog.get_logger(__name__)

BEARER_PREFIX = "Bearer "

NO_TOKEN_MESSAGE = "No Authorization token or invalid format"
EXPIRED_TOKEN_MESSAGE = "Expired token"
INVALID_TOKEN_MESSAGE = "Invalid token"


def extract_token(
    headers: Mapping[str, str],
    cookies: Mapping[str, str],
    cookie_name: str = settings.AUTH_COOKIE_NAME,
) -> Optional[str]:
    """Header first (prefix stripped when present), then the cookie."""
    auth_header = headers.get("authorization")
    if auth_header is not None:
        if auth_header.startswith(BEARER_PREFIX):
            return auth_header[len(BEARER_PREFIX):]
        return auth_header
    return cookies.get(cookie_name)


async def authenticate_token(token: str, tokens: TokenService, users: UserStore) -> Identity:
    """
    Resolve a token to the identity of an existing user.

    Raises:
        ExpiredTokenError: token expired
        InvalidTokenError: token malformed or badly signed
        AuthenticationFailed: no such user, or token not valid for that user
    """
    subject = tokens.extract_subject(token)
    if not subject:
        raise AuthenticationFailed("Token has no subject")

    user = await users.find_by_email(subject)
    if user is None:
        raise AuthenticationFailed("Unknown token subject")

    details = user_details(user)
    if not tokens.validate(token, details.subject):
        raise AuthenticationFailed("Invalid token")

    return Identity(subject=details.subject, user_id=user.id, authorities=details.authorities)


def _reject(message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_401_UNAUTHORIZED,
        content=ApiResponse.failure(message).model_dump(mode="json"),
        headers={"WWW-Authenticate": "Bearer"},
    )


class AuthenticationGate(BaseHTTPMiddleware):
    """Rejects unauthenticated requests to protected paths with 401."""

    def __init__(
        self,
        app,
        protected_prefix: str = settings.PROTECTED_PATH_PREFIX,
        cookie_name: str = settings.AUTH_COOKIE_NAME,
        token_service: Optional[TokenService] = None,
        user_store_factory: Callable[[Request], UserStore] = get_user_store,
    ):
        super().__init__(app)
        self.protected_prefix = protected_prefix
        self.cookie_name = cookie_name
        self.token_service = token_service or get_token_service()
        self.user_store_factory = user_store_factory

    def is_protected(self, request: Request) -> bool:
        if request.method == "OPTIONS":
            return False
        return request.url.path.startswith(self.protected_prefix)

    async def dispatch(self, request: Request, call_next):
        if not self.is_protected(request):
            return await call_next(request)

        token = extract_token(request.headers, request.cookies, self.cookie_name)
        if token is None:
            logger.warning("auth_gate_rejected", path=request.url.path, reason="no_token")
            return _reject(NO_TOKEN_MESSAGE)

        try:
            identity = await authenticate_token(
                token, self.token_service, self.user_store_factory(request)
            )
        except ExpiredTokenError:
            logger.warning("auth_gate_rejected", path=request.url.path, reason="expired")
            return _reject(EXPIRED_TOKEN_MESSAGE)
        except Exception as e:
            logger.warning(
                "auth_gate_rejected",
                path=request.url.path,
                reason="invalid",
                error=type(e).__name__,
            )
            return _reject(INVALID_TOKEN_MESSAGE)

        request.state.identity = identity
        return await call_next(request)
