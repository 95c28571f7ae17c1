"""Presence (online/offline) and profile lookups."""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from formation_api.core.exceptions import UserNotFoundError
from formation_api.models.user import User, UserStatus
from formation_api.services.user_store import UserStore

logger = logging.getLogger(__name__)


class UsersService:
    """
    Status toggles are read-modify-write of the whole user document with no
    concurrency control: two racing updates on one user end with either value.
    """

    def __init__(self, users: UserStore):
        self.users = users

    async def mark_online(self, user_id: str) -> User:
        user = await self.users.find_by_id(user_id)
        if user is None:
            raise UserNotFoundError("incorrect userid")
        return await self._set_status(user, UserStatus.ONLINE)

    async def mark_offline(self, user_email: str) -> Optional[User]:
        """Unknown e-mail is a no-op and returns ``None``."""
        user = await self.users.find_by_email(user_email)
        if user is None:
            logger.debug(f"Disconnect ignored for unknown user {user_email}")
            return None
        return await self._set_status(user, UserStatus.OFFLINE)

    async def list_connected(self) -> List[User]:
        return await self.users.find_all_by_status(UserStatus.ONLINE)

    async def get_user_info_by_email(self, user_email: str) -> Dict[str, Any]:
        user = await self.users.find_by_email(user_email)
        if user is None:
            raise UserNotFoundError("User not found, please create account")
        return user.profile()

    async def get_user_info_by_id(self, user_id: str) -> Dict[str, Any]:
        user = await self.users.find_by_id(user_id)
        if user is None:
            raise UserNotFoundError("User not found, please create account")
        return user.profile()

    async def _set_status(self, user: User, status: UserStatus) -> User:
        updated = user.model_copy(
            update={"user_status": status, "updated_at": datetime.now(timezone.utc)}
        )
        return await self.users.save(updated)
