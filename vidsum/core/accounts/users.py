"""Profile reads and updates for the authenticated user."""

import logging
from typing import Optional

from ..clock import Clock, utcnow
from ..errors import not_found_error, validation_error
from .auth import UserRepository
from .models import User

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, users: UserRepository, clock: Clock = utcnow) -> None:
        self._users = users
        self._clock = clock

    async def get_user(self, user_id: str) -> User:
        user = self._users.get_by_id(user_id)
        if user is None:
            raise not_found_error("User not found", "USER_NOT_FOUND")
        return user

    async def update_user(
        self,
        user_id: str,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
    ) -> User:
        """Change first and/or last name. At least one must be given."""
        if first_name is None and last_name is None:
            raise validation_error("At least one field must be provided for update")

        user = await self.get_user(user_id)
        user.update_profile(first_name=first_name, last_name=last_name, now=self._clock())
        self._users.save(user)

        logger.info(
            "User profile updated",
            extra={
                "user_id": user_id,
                "fields": [
                    name for name, value in (("first_name", first_name), ("last_name", last_name))
                    if value is not None
                ],
            }
        )
        return user
