from __future__ import annotations

from typing import Any, Mapping, Optional, Protocol, Sequence

from ..core.constants import DEFAULT_LIST_LIMIT
from ..core.enums import CardState, Role
from .model import User, UserFilter

# Columns a caller may change through update_user. Role is fixed at creation.
UPDATABLE_FIELDS = frozenset(
    {"first_name", "last_name", "department", "state", "nfc_id", "image_url", "can_approve_students"}
)


class UserDirectory(Protocol):
    """Repository interface for card holders.

    Services depend on this interface, never on a concrete database.
    """

    def ping(self) -> None:
        """Raise BackendUnavailableError when the directory cannot be reached."""

        raise NotImplementedError

    def list_users(self, user_filter: Optional[UserFilter] = None, *, limit: int = DEFAULT_LIST_LIMIT) -> Sequence[User]:
        raise NotImplementedError

    def get_user(self, uid: str) -> Optional[User]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[User]:
        raise NotImplementedError

    def get_by_card_number(self, card_number: str) -> Optional[User]:
        raise NotImplementedError

    def create_user(
        self,
        *,
        email: str,
        first_name: str,
        last_name: str,
        card_number: str,
        password_hash: str,
        role: Role,
        department: str,
        state: CardState,
        image_url: Optional[str] = None,
    ) -> str:
        raise NotImplementedError

    def update_user(self, uid: str, fields: Mapping[str, Any]) -> bool:
        raise NotImplementedError

    def delete_user(self, uid: str) -> bool:
        raise NotImplementedError
