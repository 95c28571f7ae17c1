"""Account registration and login."""

import logging
from datetime import datetime, timezone
from typing import Optional

from starlette.concurrency import run_in_threadpool

from formation_api.core.exceptions import (
    InvalidCredentialsError,
    UserAlreadyExistsError,
    UserNotFoundError,
)
from formation_api.core.identity import user_details
from formation_api.core.security import TokenService, get_password_hash, verify_password
from formation_api.models.user import User, UserStatus
from formation_api.services.user_store import UserStore

logger = logging.getLogger(__name__)

DEFAULT_PROFILE_PICTURE_PATH = "/images/defaultProfilePicture.png"


class AuthenticationService:
    """
    Creates accounts and exchanges credentials for session tokens.

    bcrypt hashing and checking run in the thread pool, off the event loop.
    """

    def __init__(
        self,
        users: UserStore,
        tokens: TokenService,
        back_end_url: str,
        bcrypt_rounds: Optional[int] = None,
    ):
        self.users = users
        self.tokens = tokens
        self.back_end_url = back_end_url.rstrip("/")
        self.bcrypt_rounds = bcrypt_rounds

    async def register(self, email: str, password: str, name: str) -> str:
        """
        Create an account and return a session token for it.

        Raises:
            UserAlreadyExistsError: an account already uses this e-mail
        """
        if await self.users.exists_by_email(email):
            logger.warning(f"Registration refused, e-mail already in use: {email}")
            raise UserAlreadyExistsError("You already have an account")

        password_hash = await run_in_threadpool(get_password_hash, password, self.bcrypt_rounds)

        now = datetime.now(timezone.utc)
        user = User(
            email=email,
            password=password_hash,
            name=name,
            profile_picture=self.back_end_url + DEFAULT_PROFILE_PICTURE_PATH,
            user_status=UserStatus.OFFLINE,
            created_at=now,
            updated_at=now,
        )
        user = await self.users.insert(user)
        logger.info(f"Registered user {user.id}")

        return self.tokens.issue(user_details(user).subject)

    async def authenticate(self, email: str, password: str) -> str:
        """
        Check credentials and return a session token.

        Raises:
            UserNotFoundError: no account for this e-mail
            InvalidCredentialsError: password does not match
        """
        user = await self.users.find_by_email(email)
        if user is None:
            raise UserNotFoundError(f"User not found with Email: {email}")

        details = user_details(user)
        if not await run_in_threadpool(verify_password, password, details.password_hash):
            logger.warning(f"Failed login for {email}")
            raise InvalidCredentialsError("Invalid email or password")

        return self.tokens.issue(details.subject)
