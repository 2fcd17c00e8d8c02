from __future__ import annotations

from ..core.constants import (
    ROUTE_ADMIN_HOME,
    ROUTE_PENDING_APPROVAL,
    ROUTE_STAFF_HOME,
    ROUTE_STUDENT_HOME,
)
from ..core.enums import CardState, Role, Transition
from ..core.exceptions import AuthenticationError, AuthorizationError
from ..users.model import User
from ..users.repository import UserDirectory
from .model import Actor, SessionContext

_STAFF_APPROVAL_TRANSITIONS = frozenset({Transition.APPROVE, Transition.REJECT})


def is_in_scope(actor: Actor, target: User) -> bool:
    """Whether ``actor`` may act on ``target``.

    Admins reach every other account; staff reach students of their own
    department; students reach no one.
    """
    if target.uid == actor.uid:
        return False
    if actor.role == Role.ADMIN:
        return True
    if actor.role == Role.STAFF:
        return target.role == Role.STUDENT and target.department == actor.department
    return False


def may_issue(actor: Actor, transition: Transition) -> bool:
    """Whether ``actor`` may issue ``transition`` at all, regardless of target."""
    if actor.role == Role.ADMIN:
        return True
    if actor.role == Role.STAFF:
        if transition in _STAFF_APPROVAL_TRANSITIONS:
            return actor.can_approve_students
        return True
    return False


def landing_route(user: User) -> str:
    if not user.is_active:
        return ROUTE_PENDING_APPROVAL
    if user.role == Role.ADMIN:
        return ROUTE_ADMIN_HOME
    if user.role == Role.STAFF:
        return ROUTE_STAFF_HOME
    return ROUTE_STUDENT_HOME


class IdentityService:
    """Use case: resolve the signed-in user from the session."""

    def __init__(self, users: UserDirectory):
        self._users = users

    def current_user(self, ctx: SessionContext) -> User:
        user = self._users.get_user(ctx.require_uid())
        if not user:
            raise AuthenticationError("Your account no longer exists")
        return user

    def current_actor(self, ctx: SessionContext) -> Actor:
        """Like current_user, but only ACTIVE accounts may act."""
        user = self.current_user(ctx)
        if user.state != CardState.ACTIVE:
            raise AuthorizationError("Your account is pending approval or inactive")
        return Actor.from_user(user)
