from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from ..core.enums import CardState, Transition
from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    BackendUnavailableError,
    DirectoryError,
    InvalidTransitionError,
    NoSelectionError,
    NotFoundError,
    OutOfScopeError,
)
from ..identity.model import Actor
from ..identity.service import is_in_scope, may_issue
from ..users.model import UserFilter
from ..users.repository import UserDirectory
from .model import BulkResult, ItemFailure, Selection

logger = logging.getLogger(__name__)

# current state -> next state; a missing entry means the transition does not apply
_TRANSITIONS = {
    Transition.APPROVE: {
        CardState.PENDING: CardState.APPROVED,
        CardState.APPROVED: CardState.APPROVED,
        CardState.ACTIVE: CardState.ACTIVE,
    },
    Transition.REJECT: {
        CardState.PENDING: CardState.REJECTED,
    },
    Transition.ACTIVATE: {
        CardState.APPROVED: CardState.ACTIVE,
        CardState.ACTIVE: CardState.ACTIVE,
    },
    Transition.DEACTIVATE: {
        CardState.APPROVED: CardState.APPROVED,
        CardState.ACTIVE: CardState.APPROVED,
    },
}


def next_state(current: CardState, transition: Transition) -> CardState:
    try:
        return _TRANSITIONS[transition][current]
    except KeyError:
        raise InvalidTransitionError(f"Cannot {transition.value} a user in state {current.value}") from None


def _reason(exc: Exception) -> str:
    if isinstance(exc, NotFoundError):
        return "NotFound"
    if isinstance(exc, OutOfScopeError):
        return "OutOfScope"
    if isinstance(exc, InvalidTransitionError):
        return "InvalidTransition"
    if isinstance(exc, BackendUnavailableError):
        return "BackendUnavailable"
    return "BackendError"


class ApprovalWorkflow:
    """Use case: apply one transition to many users, isolating per-user failures."""

    def __init__(self, users: UserDirectory):
        self._users = users

    def apply_bulk_transition(
        self,
        actor: Optional[Actor],
        target_ids: Iterable[str],
        transition: Transition,
    ) -> BulkResult:
        if actor is None:
            raise AuthenticationError("Please sign in to continue")

        uids = list(dict.fromkeys(uid for uid in (target_ids or ()) if uid))
        if not uids:
            raise NoSelectionError("Select at least one user")

        transition = Transition(transition)
        if not may_issue(actor, transition):
            raise AuthorizationError(f"You are not allowed to {transition.value} users")

        self._users.ping()

        logger.info("%s %s: %s on %d user(s)", actor.role.value, actor.uid, transition.value, len(uids))

        success = 0
        failures: List[ItemFailure] = []
        unavailable = 0
        for uid in uids:
            try:
                self._apply_one(actor, uid, transition)
                success += 1
            except (NotFoundError, OutOfScopeError, InvalidTransitionError, DirectoryError) as exc:
                if isinstance(exc, BackendUnavailableError):
                    unavailable += 1
                failure = ItemFailure(uid=uid, reason=_reason(exc), message=str(exc))
                failures.append(failure)
                logger.warning("%s failed for %s: %s (%s)", transition.value, uid, failure.reason, failure.message)

        if unavailable == len(uids):
            raise BackendUnavailableError("User directory unreachable")

        return BulkResult(transition=transition, success=success, failed=len(failures), failures=failures)

    def _apply_one(self, actor: Actor, uid: str, transition: Transition) -> None:
        target = self._users.get_user(uid)
        if not target:
            raise NotFoundError("User not found")
        if not is_in_scope(actor, target):
            raise OutOfScopeError("User is outside your scope")

        new_state = next_state(target.state, transition)
        if new_state == target.state:
            return

        if new_state == CardState.REJECTED:
            ok = self._users.delete_user(uid)
        else:
            ok = self._users.update_user(uid, {"state": new_state})
        if not ok:
            raise NotFoundError("User not found")

    def reject_all_pending(self, actor: Optional[Actor]) -> BulkResult:
        """Reject every pending registration the actor may act on."""
        if actor is None:
            raise AuthenticationError("Please sign in to continue")
        if not may_issue(actor, Transition.REJECT):
            raise AuthorizationError("You are not allowed to reject users")

        pending = self._users.list_users(UserFilter(state=CardState.PENDING))
        selection = Selection(u.uid for u in pending if is_in_scope(actor, u))
        if not selection:
            raise NoSelectionError("No pending registrations to reject")
        return self.apply_bulk_transition(actor, selection, Transition.REJECT)
