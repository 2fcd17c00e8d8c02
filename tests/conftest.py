from __future__ import annotations

import uuid
from dataclasses import replace
from datetime import datetime
from typing import Any, Mapping, Optional

import pytest
from werkzeug.security import generate_password_hash

from campus_card.core.enums import CardState, Role
from campus_card.core.exceptions import BackendUnavailableError, DirectoryError, ValidationError
from campus_card.identity.model import Actor
from campus_card.users.model import User, UserFilter
from campus_card.users.repository import UPDATABLE_FIELDS

# every fixture user signs in with "secret123"
_PASSWORD_HASH = generate_password_hash("secret123", method="pbkdf2:sha256:1000")


class InMemoryUserDirectory:
    """Dict-backed UserDirectory with call counting and failure injection."""

    def __init__(self):
        self.users: dict[str, User] = {}
        self.calls: list[str] = []
        self.down = False
        self.fail_updates_for: set[str] = set()
        self.unavailable_for: set[str] = set()

    def _record(self, name: str) -> None:
        self.calls.append(name)
        if self.down:
            raise BackendUnavailableError("connection refused")

    def add(self, **overrides) -> User:
        n = len(self.users) + 1
        values = dict(
            uid=uuid.uuid4().hex,
            email=f"user{n}@campus.edu",
            first_name=f"First{n}",
            last_name=f"Last{n}",
            card_number=f"ST{n:03d}",
            role=Role.STUDENT,
            department="CS",
            state=CardState.PENDING,
            password_hash=_PASSWORD_HASH,
            created_at=datetime(2025, 10, 10, 9, 0, 0),
        )
        values.update(overrides)
        user = User(**values)
        self.users[user.uid] = user
        return user

    def ping(self) -> None:
        self._record("ping")

    def list_users(self, user_filter: Optional[UserFilter] = None, *, limit: int = 500):
        self._record("list_users")
        user_filter = user_filter or UserFilter()
        return [u for u in self.users.values() if user_filter.matches(u)][:limit]

    def get_user(self, uid: str) -> Optional[User]:
        self._record("get_user")
        if uid in self.unavailable_for:
            raise BackendUnavailableError("connection reset")
        return self.users.get(uid)

    def get_by_email(self, email: str) -> Optional[User]:
        self._record("get_by_email")
        email = (email or "").strip().lower()
        return next((u for u in self.users.values() if u.email.lower() == email), None)

    def get_by_card_number(self, card_number: str) -> Optional[User]:
        self._record("get_by_card_number")
        return next((u for u in self.users.values() if u.card_number == card_number), None)

    def create_user(self, *, email, first_name, last_name, card_number, password_hash, role, department, state, image_url=None) -> str:
        self._record("create_user")
        user = self.add(
            email=email.strip().lower(),
            first_name=first_name,
            last_name=last_name,
            card_number=card_number,
            password_hash=password_hash,
            role=role,
            department=department,
            state=state,
            image_url=image_url,
        )
        return user.uid

    def update_user(self, uid: str, fields: Mapping[str, Any]) -> bool:
        self._record("update_user")
        if set(fields) - UPDATABLE_FIELDS:
            raise ValidationError("Fields cannot be updated")
        if uid in self.fail_updates_for:
            raise DirectoryError("write rejected")
        user = self.users.get(uid)
        if not user:
            return False
        self.users[uid] = replace(user, **fields)
        return True

    def delete_user(self, uid: str) -> bool:
        self._record("delete_user")
        if uid in self.fail_updates_for:
            raise DirectoryError("write rejected")
        return self.users.pop(uid, None) is not None

    def writes(self) -> list[str]:
        return [c for c in self.calls if c in ("create_user", "update_user", "delete_user")]


@pytest.fixture
def directory() -> InMemoryUserDirectory:
    return InMemoryUserDirectory()


@pytest.fixture
def admin(directory) -> User:
    return directory.add(role=Role.ADMIN, department="Administration", state=CardState.ACTIVE, email="admin@campus.edu", card_number="AD001")


@pytest.fixture
def cs_staff(directory) -> User:
    return directory.add(
        role=Role.STAFF,
        department="CS",
        state=CardState.ACTIVE,
        can_approve_students=True,
        email="staff.cs@campus.edu",
        card_number="SF001",
    )


@pytest.fixture
def admin_actor(admin) -> Actor:
    return Actor.from_user(admin)


@pytest.fixture
def cs_staff_actor(cs_staff) -> Actor:
    return Actor.from_user(cs_staff)
