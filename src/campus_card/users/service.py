from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Sequence

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.validators import require_email, require_min_length, require_non_empty
from ..core.constants import MIN_PASSWORD_LENGTH
from ..core.enums import CardState, Role
from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    NotFoundError,
    ValidationError,
)
from ..identity.model import Actor
from .model import User, UserFilter
from .repository import UserDirectory

logger = logging.getLogger(__name__)


def search_users(users: Iterable[User], query: str) -> List[User]:
    """Case-insensitive substring match on full name, email and card number."""
    needle = (query or "").strip().lower()
    if not needle:
        return list(users)
    return [
        u
        for u in users
        if needle in u.full_name.lower() or needle in u.email.lower() or needle in u.card_number.lower()
    ]


class _AccountFactory:
    def __init__(self, users: UserDirectory):
        self._users = users

    def _create(
        self,
        *,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
        card_number: str,
        role: Role,
        department: str,
        state: CardState,
        image_url: Optional[str] = None,
    ) -> User:
        email = require_email(email)
        first_name = require_non_empty(first_name, "First name")
        last_name = require_non_empty(last_name, "Last name")
        card_number = require_non_empty(card_number, "Card number")
        department = require_non_empty(department, "Department")
        require_min_length(password, "Password", MIN_PASSWORD_LENGTH)

        if role == Role.ADMIN:
            raise ValidationError("Admin accounts cannot be created here")
        if self._users.get_by_email(email):
            raise ValidationError("This email is already registered")
        if self._users.get_by_card_number(card_number):
            raise ValidationError("This card number is already registered")

        uid = self._users.create_user(
            email=email,
            first_name=first_name,
            last_name=last_name,
            card_number=card_number,
            password_hash=generate_password_hash(password),
            role=role,
            department=department,
            state=state,
            image_url=image_url,
        )
        user = self._users.get_user(uid)
        if not user:
            raise ValidationError("Account creation failed")
        return user


class AuthService(_AccountFactory):
    """Use case: self-registration and sign-in."""

    def register(
        self,
        *,
        email: str,
        password: str,
        confirm_password: str,
        first_name: str,
        last_name: str,
        card_number: str,
        role: Role,
        department: str,
        image_url: Optional[str] = None,
    ) -> User:
        if password != confirm_password:
            raise ValidationError("Passwords do not match")

        user = self._create(
            email=email,
            password=password,
            first_name=first_name,
            last_name=last_name,
            card_number=card_number,
            role=role,
            department=department,
            state=CardState.PENDING,
            image_url=image_url,
        )
        logger.info("Registered %s %s, pending approval", user.role.value, user.uid)
        return user

    def authenticate(self, email: str, password: str) -> User:
        """Check credentials. Pending and inactive accounts may still sign in
        so that they can see their approval status."""
        user = self._users.get_by_email((email or "").strip().lower())
        if not user:
            raise AuthenticationError("Invalid email or password")

        try:
            ok = check_password_hash(user.password_hash, password or "")
        except ValueError:
            # unknown hash method, e.g. a placeholder value
            ok = False

        if not ok:
            raise AuthenticationError("Invalid email or password")
        return user


class UserService(_AccountFactory):
    """Use case: directory listings and account administration."""

    def create_account(
        self,
        *,
        actor: Actor,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
        card_number: str,
        role: Role,
        department: str,
    ) -> User:
        if actor.role != Role.ADMIN:
            raise AuthorizationError("Only admins can add users")

        user = self._create(
            email=email,
            password=password,
            first_name=first_name,
            last_name=last_name,
            card_number=card_number,
            role=role,
            department=department,
            state=CardState.ACTIVE,
        )
        logger.info("Admin %s added %s %s", actor.uid, user.role.value, user.uid)
        return user

    def list_users(
        self,
        *,
        actor: Actor,
        role: Optional[Role] = None,
        department: Optional[str] = None,
        state: Optional[CardState] = None,
        query: str = "",
    ) -> Sequence[User]:
        if actor.role == Role.ADMIN:
            user_filter = UserFilter(role=role, department=department, state=state)
        elif actor.role == Role.STAFF:
            if role not in (None, Role.STUDENT) or department not in (None, actor.department):
                raise AuthorizationError("Staff can only list students of their own department")
            user_filter = UserFilter(role=Role.STUDENT, department=actor.department, state=state)
        else:
            raise AuthorizationError("You do not have permission")

        return search_users(self._users.list_users(user_filter), query)

    def get_user(self, uid: str) -> User:
        user = self._users.get_user(uid)
        if not user:
            raise NotFoundError("User not found")
        return user

    def assign_nfc_id(self, *, actor: Actor, uid: str, nfc_id: Optional[str]) -> User:
        if actor.role != Role.ADMIN:
            raise AuthorizationError("Only admins can assign NFC cards")

        user = self.get_user(uid)
        nfc_id = (nfc_id or "").strip() or None
        if nfc_id and not user.is_approved:
            raise ValidationError("NFC cards are assigned after approval")

        if not self._users.update_user(uid, {"nfc_id": nfc_id}):
            raise NotFoundError("User not found")
        return self.get_user(uid)

    def set_approval_permission(self, *, actor: Actor, uid: str, can_approve: bool) -> User:
        if actor.role != Role.ADMIN:
            raise AuthorizationError("Only admins can change approval rights")

        user = self.get_user(uid)
        if user.role != Role.STAFF:
            raise ValidationError("Approval rights apply to staff members only")

        if not self._users.update_user(uid, {"can_approve_students": bool(can_approve)}):
            raise NotFoundError("User not found")
        logger.info("Admin %s set can_approve_students=%s for %s", actor.uid, bool(can_approve), uid)
        return self.get_user(uid)
