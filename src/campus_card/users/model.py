from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import CardState, Role


@dataclass(frozen=True)
class User:
    """Card holder as stored in the user directory.

    Plain data object; directory access lives in the repositories.
    """

    uid: str
    email: str
    first_name: str
    last_name: str
    card_number: str
    role: Role
    department: str
    state: CardState = CardState.PENDING
    password_hash: str = ""
    nfc_id: Optional[str] = None
    image_url: Optional[str] = None
    can_approve_students: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def is_approved(self) -> bool:
        return self.state in (CardState.APPROVED, CardState.ACTIVE)

    @property
    def is_active(self) -> bool:
        return self.state == CardState.ACTIVE

    def to_public_dict(self) -> dict:
        return {
            "uid": self.uid,
            "email": self.email,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "fullName": self.full_name,
            "cardNumber": self.card_number,
            "role": self.role.value,
            "department": self.department,
            "state": self.state.value,
            "isApproved": self.is_approved,
            "isActive": self.is_active,
            "nfcId": self.nfc_id,
            "imageUrl": self.image_url,
            "canApproveStudents": self.can_approve_students,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }


@dataclass(frozen=True)
class UserFilter:
    """Equality filter understood by every directory implementation."""

    role: Optional[Role] = None
    department: Optional[str] = None
    state: Optional[CardState] = None

    def matches(self, user: User) -> bool:
        if self.role is not None and user.role != self.role:
            return False
        if self.department is not None and user.department != self.department:
            return False
        if self.state is not None and user.state != self.state:
            return False
        return True
