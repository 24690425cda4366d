from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from werkzeug.security import check_password_hash

from ..common.validators import require_non_empty
from ..core.enums import Role
from ..core.exceptions import AuthenticationError
from .model import User
from .repository import UserRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionUser:
    """What we store into Flask session after login."""

    user_id: str
    full_name: str
    role: Role

    def to_dict(self) -> dict:
        return {"id": self.user_id, "name": self.full_name, "role": self.role.value}


class AuthService:
    """Use case: authenticate a user and resolve the acting user per request."""

    def __init__(self, users: UserRepository):
        self._users = users

    def authenticate(self, username: str, password: str) -> SessionUser:
        username = require_non_empty(username, "Username")
        user = self._users.get_by_username(username)
        if not user or not user.is_active:
            raise AuthenticationError("Invalid username or password")

        try:
            ok = check_password_hash(user.password_hash, password or "")
        except Exception:
            # e.g. placeholder hashes like 'CHANGE_ME' or corrupted values
            ok = False

        if not ok:
            logger.info("Failed login for %s", username)
            raise AuthenticationError("Invalid username or password")

        return SessionUser(user_id=user.user_id, full_name=user.full_name, role=user.role)

    def resolve_actor(self, user_id: Optional[str]) -> User:
        if not user_id:
            raise AuthenticationError("Please log in to continue")
        user = self._users.get_by_id(str(user_id))
        if not user or not user.is_active:
            raise AuthenticationError("Session is no longer valid")
        return user
