"""Domain errors and their HTTP mapping.

Services raise these typed errors; the exception handler registered in
``formation_api.main`` is the only place that turns them into responses,
through ``resolve_error``.
"""

from enum import Enum
from typing import Optional, Tuple

from fastapi import status


class ErrorKind(str, Enum):
    """Kinds of failure surfaced to API clients."""

    CONFLICT = "conflict"
    EXPIRED_TOKEN = "expired_token"
    INVALID_TOKEN = "invalid_token"
    INVALID_ROLE = "invalid_role"
    INVALID_CREDENTIALS = "invalid_credentials"
    NOT_FOUND = "not_found"
    UNAUTHENTICATED = "unauthenticated"


ERROR_STATUS = {
    ErrorKind.CONFLICT: (status.HTTP_409_CONFLICT, "Resource already exists"),
    # Service path only. The authentication gate answers 401 for the same kind.
    ErrorKind.EXPIRED_TOKEN: (status.HTTP_400_BAD_REQUEST, "JWT token has expired"),
    ErrorKind.INVALID_TOKEN: (status.HTTP_400_BAD_REQUEST, "Invalid JWT token"),
    ErrorKind.INVALID_ROLE: (status.HTTP_400_BAD_REQUEST, "Invalid role"),
    ErrorKind.INVALID_CREDENTIALS: (status.HTTP_400_BAD_REQUEST, "Invalid email or password"),
    ErrorKind.NOT_FOUND: (status.HTTP_404_NOT_FOUND, "Not found"),
    ErrorKind.UNAUTHENTICATED: (status.HTTP_401_UNAUTHORIZED, "Authentication required"),
}


def resolve_error(kind: ErrorKind) -> Tuple[int, str]:
    """Return ``(status_code, default_message)`` for an error kind."""
    return ERROR_STATUS[kind]


class AuthError(Exception):
    """Base class for errors raised by the account, token and user services."""

    kind: ErrorKind = ErrorKind.INVALID_TOKEN

    def __init__(self, message: Optional[str] = None):
        self.message = message or resolve_error(self.kind)[1]
        super().__init__(self.message)

    @property
    def status_code(self) -> int:
        return resolve_error(self.kind)[0]


class UserAlreadyExistsError(AuthError):
    kind = ErrorKind.CONFLICT


class ExpiredTokenError(AuthError):
    kind = ErrorKind.EXPIRED_TOKEN


class InvalidTokenError(AuthError):
    kind = ErrorKind.INVALID_TOKEN


class InvalidCredentialsError(AuthError):
    kind = ErrorKind.INVALID_CREDENTIALS


class UserNotFoundError(AuthError):
    kind = ErrorKind.NOT_FOUND


class FormationNotFoundError(AuthError):
    kind = ErrorKind.NOT_FOUND


class AuthenticationFailed(Exception):
    """
    Raised by the authentication gate when a decodable token does not
    authenticate a known user (unknown subject, subject mismatch).

    Not an ``AuthError``: the gate answers 401 itself, so this never reaches
    the API exception handler.
    """
