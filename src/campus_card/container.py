from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .approvals.service import ApprovalWorkflow
from .cards.service import CardService
from .database.connection import DBConfig, DatabaseConnection
from .identity.service import IdentityService
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserDirectory
from .users.service import AuthService, UserService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    users_repo: UserDirectory

    auth_service: AuthService
    user_service: UserService
    identity_service: IdentityService
    approval_workflow: ApprovalWorkflow
    card_service: CardService


def build_services(users_repo: UserDirectory, *, conn: Optional[DatabaseConnection] = None) -> Container:
    return Container(
        conn=conn,
        users_repo=users_repo,
        auth_service=AuthService(users_repo),
        user_service=UserService(users_repo),
        identity_service=IdentityService(users_repo),
        approval_workflow=ApprovalWorkflow(users_repo),
        card_service=CardService(users_repo),
    )


def build_container(*, db_config: dict) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))
    return build_services(MySQLUserRepository(conn), conn=conn)
