"""Document models."""

from formation_api.models.formation import Formation
from formation_api.models.user import Contact, User, UserStatus, VerificationDetails

__all__ = [
    "Formation",
    "Contact",
    "User",
    "UserStatus",
    "VerificationDetails",
]
