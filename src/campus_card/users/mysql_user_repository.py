from __future__ import annotations

import uuid
from typing import Any, Mapping, Optional, Sequence

import mysql.connector

from ..core.constants import DEFAULT_LIST_LIMIT
from ..core.enums import CardState, Role
from ..core.exceptions import BackendUnavailableError, DirectoryError, ValidationError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import User, UserFilter
from .repository import UPDATABLE_FIELDS, UserDirectory

_USER_COLUMNS = """
    uid, email, first_name, last_name, card_number, password_hash, role, department,
    state, nfc_id, image_url, can_approve_students, created_at, updated_at
"""


def _row_to_user(row: dict) -> User:
    return User(
        uid=row["uid"],
        email=row["email"],
        first_name=row["first_name"],
        last_name=row["last_name"],
        card_number=row["card_number"],
        role=Role(row["role"]),
        department=row.get("department") or "",
        state=CardState(row["state"]),
        password_hash=row.get("password_hash") or "",
        nfc_id=row.get("nfc_id"),
        image_url=row.get("image_url"),
        can_approve_students=bool(row.get("can_approve_students", 0)),
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
    )


def _column_value(field: str, value: Any) -> Any:
    if field == "state":
        state = CardState(value)
        if state == CardState.REJECTED:
            raise ValidationError("Rejected users are deleted, not stored")
        return state.value
    if field == "can_approve_students":
        return 1 if value else 0
    return value


class MySQLUserRepository(UserDirectory):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def ping(self) -> None:
        try:
            with db_cursor(self._conn_factory, dictionary=False) as (_, cur):
                cur.execute("SELECT 1")
                cur.fetchone()
        except BackendUnavailableError:
            raise
        except DirectoryError as exc:
            raise BackendUnavailableError(str(exc)) from exc

    def list_users(self, user_filter: Optional[UserFilter] = None, *, limit: int = DEFAULT_LIST_LIMIT) -> Sequence[User]:
        user_filter = user_filter or UserFilter()
        clauses: list[str] = []
        params: list[Any] = []
        if user_filter.role is not None:
            clauses.append("role=%s")
            params.append(user_filter.role.value)
        if user_filter.department is not None:
            clauses.append("department=%s")
            params.append(user_filter.department)
        if user_filter.state is not None:
            clauses.append("state=%s")
            params.append(user_filter.state.value)

        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        params.append(int(limit))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_USER_COLUMNS} FROM users {where} ORDER BY created_at DESC LIMIT %s",
                tuple(params),
            )
            return [_row_to_user(r) for r in fetchall(cur)]

    def get_user(self, uid: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_USER_COLUMNS} FROM users WHERE uid=%s", (uid,))
            row = fetchone(cur)
            return _row_to_user(row) if row else None

    def get_by_email(self, email: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_USER_COLUMNS} FROM users WHERE email=%s", ((email or "").strip().lower(),))
            row = fetchone(cur)
            return _row_to_user(row) if row else None

    def get_by_card_number(self, card_number: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_USER_COLUMNS} FROM users WHERE card_number=%s", ((card_number or "").strip(),))
            row = fetchone(cur)
            return _row_to_user(row) if row else None

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
        uid = uuid.uuid4().hex
        with db_cursor(self._conn_factory) as (_, cur):
            try:
                cur.execute(
                    """
                    INSERT INTO users(uid, email, first_name, last_name, card_number, password_hash,
                                      role, department, state, image_url)
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        uid,
                        email.strip().lower(),
                        first_name,
                        last_name,
                        card_number,
                        password_hash,
                        role.value,
                        department,
                        _column_value("state", state),
                        image_url,
                    ),
                )
            except mysql.connector.IntegrityError:
                raise ValidationError("Email or card number is already registered")
        return uid

    def update_user(self, uid: str, fields: Mapping[str, Any]) -> bool:
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise ValidationError(f"Fields cannot be updated: {', '.join(sorted(unknown))}")
        if not fields:
            return self.get_user(uid) is not None

        names = sorted(fields)
        assignments = ", ".join(f"{name}=%s" for name in names)
        params = [_column_value(name, fields[name]) for name in names]
        params.append(uid)

        with db_cursor(self._conn_factory) as (_, cur):
            try:
                cur.execute(f"UPDATE users SET {assignments} WHERE uid=%s", tuple(params))
            except mysql.connector.IntegrityError:
                raise ValidationError("Value is already assigned to another user")
            return cur.rowcount > 0

    def delete_user(self, uid: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM users WHERE uid=%s", (uid,))
            return cur.rowcount > 0
