"""Security utilities: JWT session tokens and password hashing."""

import base64
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Optional

import bcrypt
from jose import JWTError, jwt

from formation_api.config import settings
from formation_api.core.exceptions import ExpiredTokenError, InvalidTokenError


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class TokenService:
    """
    Issues and validates signed session tokens.

    Tokens carry ``sub`` (the user e-mail), ``iat`` and ``exp``. The signing
    key is the base64-decoded ``secret_key``. Expiry is checked against
    ``clock`` rather than the system time so it can be simulated.
    """

    def __init__(
        self,
        secret_key: str,
        valid_for: timedelta,
        algorithm: str = "HS256",
        clock: Callable[[], datetime] = utc_now,
    ):
        self._key = base64.b64decode(secret_key)
        self.valid_for = valid_for
        self.algorithm = algorithm
        self.clock = clock

    def issue(self, subject: str, extra_claims: Optional[Dict[str, Any]] = None) -> str:
        """Create a token for ``subject`` valid for the configured duration."""
        now = self.clock()
        to_encode = dict(extra_claims or {})
        to_encode.update(
            {
                "sub": subject,
                "iat": int(now.timestamp()),
                "exp": int((now + self.valid_for).timestamp()),
            }
        )
        return jwt.encode(to_encode, self._key, algorithm=self.algorithm)

    def extract_subject(self, token: str) -> str:
        """
        Return the subject of a valid token.

        Raises:
            ExpiredTokenError: signature is fine but ``exp`` has passed
            InvalidTokenError: malformed token or bad signature
        """
        claims = self._decode(token)
        if self._expired(claims):
            raise ExpiredTokenError("JWT token has expired")
        return claims.get("sub")

    def extract_expiration(self, token: str) -> datetime:
        claims = self._decode(token)
        return datetime.fromtimestamp(claims["exp"], tz=timezone.utc)

    def extract_claim(self, token: str, name: str) -> Any:
        return self._decode(token).get(name)

    def is_expired(self, token: str) -> bool:
        return self._expired(self._decode(token))

    def validate(self, token: str, expected_subject: str) -> bool:
        """True when the token belongs to ``expected_subject`` and is unexpired."""
        claims = self._decode(token)
        return claims.get("sub") == expected_subject and not self._expired(claims)

    def _expired(self, claims: Dict[str, Any]) -> bool:
        exp = claims.get("exp")
        if exp is None:
            return True
        return self.clock().timestamp() >= exp

    def _decode(self, token: str) -> Dict[str, Any]:
        """Verify the signature; expiry is evaluated separately against the clock."""
        try:
            return jwt.decode(
                token,
                self._key,
                algorithms=[self.algorithm],
                options={"verify_exp": False},
            )
        except (JWTError, ValueError) as e:
            raise InvalidTokenError("Invalid JWT token") from e


def get_password_hash(password: str, rounds: Optional[int] = None) -> str:
    """Salted bcrypt hash of ``password``."""
    salt = bcrypt.gensalt(rounds=rounds or settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain_password: str, password_hash: Optional[str]) -> bool:
    """Re-hash and compare; a missing or corrupt hash never matches."""
    if not password_hash:
        return False
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False
