from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class CardView:
    """What the holder's digital card shows."""

    full_name: str
    email: str
    card_number: str
    role: str
    department: str
    credential_id: str
    has_physical_card: bool
    access: str
    status_label: str
    image_url: Optional[str] = None
    issued_on: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "fullName": self.full_name,
            "email": self.email,
            "cardNumber": self.card_number,
            "role": self.role,
            "department": self.department,
            "credentialId": self.credential_id,
            "hasPhysicalCard": self.has_physical_card,
            "access": self.access,
            "statusLabel": self.status_label,
            "imageUrl": self.image_url,
            "issuedOn": self.issued_on,
        }
