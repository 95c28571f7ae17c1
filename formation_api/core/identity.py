"""Authenticated identity carried through a request."""

from dataclasses import dataclass, field
from typing import Optional, Tuple

from formation_api.models.user import User

DEFAULT_AUTHORITIES = ("STUDENT",)


@dataclass(frozen=True)
class AuthDetails:
    """What the authentication gate needs to know about a user."""

    subject: str
    password_hash: Optional[str]
    authorities: Tuple[str, ...] = DEFAULT_AUTHORITIES


@dataclass(frozen=True)
class Identity:
    """
    Identity established by the authentication gate.

    Stored on ``request.state.identity`` for the rest of the request and read
    by route handlers through ``get_current_identity``.
    """

    subject: str
    user_id: Optional[str] = None
    authorities: Tuple[str, ...] = field(default=DEFAULT_AUTHORITIES)

    @property
    def email(self) -> str:
        return self.subject


def user_details(user: User) -> AuthDetails:
    """Map a stored user to its authentication capabilities."""
    return AuthDetails(
        subject=user.email,
        password_hash=user.password,
        authorities=DEFAULT_AUTHORITIES,
    )
