from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Account role; fixed at creation."""

    ADMIN = "admin"
    STAFF = "staff"
    STUDENT = "student"


class CardState(str, Enum):
    """Approval/activity state of a card holder.

    REJECTED is never persisted: a rejected registration is deleted.
    """

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    ACTIVE = "ACTIVE"
    REJECTED = "REJECTED"


class Transition(str, Enum):
    """Named state change an admin or staff member applies to a card holder."""

    APPROVE = "approve"
    REJECT = "reject"
    ACTIVATE = "activate"
    DEACTIVATE = "deactivate"
