from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from ..core.enums import Role
from ..core.exceptions import AuthenticationError
from ..users.model import User

SESSION_UID_KEY = "uid"


@dataclass(frozen=True)
class Actor:
    """The authenticated user performing an action."""

    uid: str
    role: Role
    department: str
    can_approve_students: bool = False
    full_name: str = ""

    @classmethod
    def from_user(cls, user: User) -> "Actor":
        return cls(
            uid=user.uid,
            role=user.role,
            department=user.department,
            can_approve_students=user.can_approve_students,
            full_name=user.full_name,
        )


@dataclass(frozen=True)
class SessionContext:
    """Who is signed in, as remembered by the Flask session cookie.

    Only the uid is kept in the cookie; role and department are re-read from
    the directory so permission changes apply immediately.
    """

    uid: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return bool(self.uid)

    def require_uid(self) -> str:
        if not self.uid:
            raise AuthenticationError("Please sign in to continue")
        return self.uid

    @classmethod
    def from_session(cls, session: Mapping[str, Any]) -> "SessionContext":
        return cls(uid=session.get(SESSION_UID_KEY) or None)

    def to_session(self) -> dict:
        return {SESSION_UID_KEY: self.uid} if self.uid else {}
