"""
Business logic for users.

Users are registered by administrators.  The login chosen here is the
one that access tokens must carry in their ``sub`` claim for naps to be
attributed to the user.
"""

import logging
import sqlite3
from typing import Optional

from ..core.errors import ForbiddenError, InvalidRequestError
from ..core.pagination import Page, PageRequest
from ..core.security import Principal, require_principal
from ..repositories.user_repository import UserRepository
from ..schemas.user import AccountRead, UserCreate, UserRead


logger = logging.getLogger(__name__)


class UserService:
    """Registration and listing of users."""

    def __init__(self, users: Optional[UserRepository] = None) -> None:
        self.users = users or UserRepository()

    @staticmethod
    def _require_admin(principal: Optional[Principal]) -> Principal:
        principal = require_principal(principal)
        if not principal.is_admin:
            raise ForbiddenError("Insufficient permissions")
        return principal

    async def create_user(self, data: UserCreate, principal: Optional[Principal]) -> UserRead:
        """Register a new user.  Only administrators may do this.

        Raises ``InvalidRequestError`` if the login is already taken.
        """
        principal = self._require_admin(principal)
        if self.users.find_by_login(data.login) is not None:
            raise InvalidRequestError(f"Login '{data.login}' already in use")
        try:
            user = self.users.create(data)
        except sqlite3.IntegrityError as exc:
            # Lost a race with a concurrent registration of the same login.
            raise InvalidRequestError(f"Login '{data.login}' already in use") from exc
        logger.info("User %s registered user %s", principal.login, user.login)
        return user

    async def list_users(self, principal: Optional[Principal], page_request: PageRequest) -> Page[UserRead]:
        self._require_admin(principal)
        return self.users.find_all(page_request)

    async def get_account(self, principal: Optional[Principal]) -> AccountRead:
        """Describe the caller from the token alone."""
        principal = require_principal(principal)
        return AccountRead(
            login=principal.login,
            authorities=sorted(principal.roles, key=lambda role: role.value),
        )
