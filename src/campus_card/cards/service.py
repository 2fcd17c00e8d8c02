from __future__ import annotations

from ..core.enums import CardState
from ..core.exceptions import NotFoundError
from ..users.model import User
from ..users.repository import UserDirectory
from .model import CardView

_STATUS_LABELS = {
    CardState.PENDING: "Pending approval",
    CardState.APPROVED: "Approved, awaiting activation",
    CardState.ACTIVE: "Active",
}


def build_card(user: User) -> CardView:
    # Before an NFC card is issued the account uid doubles as the credential.
    return CardView(
        full_name=user.full_name,
        email=user.email,
        card_number=user.card_number,
        role=user.role.value,
        department=user.department,
        credential_id=user.nfc_id or user.uid,
        has_physical_card=bool(user.nfc_id),
        access="ACTIVE" if user.is_active else "INACTIVE",
        status_label=_STATUS_LABELS.get(user.state, user.state.value),
        image_url=user.image_url,
        issued_on=user.created_at.date().isoformat() if user.created_at else None,
    )


class CardService:
    def __init__(self, users: UserDirectory):
        self._users = users

    def card_for(self, uid: str) -> CardView:
        user = self._users.get_user(uid)
        if not user:
            raise NotFoundError("User not found")
        return build_card(user)
