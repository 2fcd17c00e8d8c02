from __future__ import annotations

import pytest

from campus_card.approvals.service import ApprovalWorkflow, next_state
from campus_card.core.enums import CardState, Role, Transition
from campus_card.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    BackendUnavailableError,
    InvalidTransitionError,
    NoSelectionError,
)
from campus_card.identity.model import Actor


def test_approve_all_in_scope_succeeds(directory, admin_actor):
    targets = [directory.add() for _ in range(4)]

    result = ApprovalWorkflow(directory).apply_bulk_transition(
        admin_actor, [t.uid for t in targets], Transition.APPROVE
    )

    assert (result.success, result.failed) == (4, 0)
    assert all(directory.users[t.uid].state == CardState.APPROVED for t in targets)
    assert result.summary() == "Approved 4 user(s)"


@pytest.mark.parametrize("transition", list(Transition))
def test_empty_selection_makes_no_directory_calls(directory, admin_actor, transition):
    with pytest.raises(NoSelectionError):
        ApprovalWorkflow(directory).apply_bulk_transition(admin_actor, [], transition)

    assert directory.calls == []


def test_unauthenticated_actor_is_refused(directory):
    target = directory.add()

    with pytest.raises(AuthenticationError):
        ApprovalWorkflow(directory).apply_bulk_transition(None, [target.uid], Transition.APPROVE)

    assert directory.calls == []


def test_staff_activate_counts_other_departments_as_failed(directory, cs_staff_actor):
    in_dept = [directory.add(department="CS", state=CardState.APPROVED) for _ in range(3)]
    other = [directory.add(department="EE", state=CardState.APPROVED) for _ in range(2)]

    result = ApprovalWorkflow(directory).apply_bulk_transition(
        cs_staff_actor, [u.uid for u in in_dept + other], Transition.ACTIVATE
    )

    assert (result.success, result.failed) == (3, 2)
    assert sorted(result.failed_ids) == sorted(u.uid for u in other)
    assert {f.reason for f in result.failures} == {"OutOfScope"}
    assert all(directory.users[u.uid].state == CardState.APPROVED for u in other)
    assert result.summary() == "3 succeeded, 2 failed"


def test_activate_twice_is_idempotent(directory, admin_actor):
    target = directory.add(state=CardState.APPROVED)
    workflow = ApprovalWorkflow(directory)

    first = workflow.apply_bulk_transition(admin_actor, [target.uid], Transition.ACTIVATE)
    after_first = directory.users[target.uid]
    writes_after_first = len(directory.writes())

    second = workflow.apply_bulk_transition(admin_actor, [target.uid], Transition.ACTIVATE)

    assert first.success == 1 and second.success == 1
    assert directory.users[target.uid] == after_first
    assert len(directory.writes()) == writes_after_first


def test_staff_approve_only_touches_own_department(directory, cs_staff_actor):
    a = directory.add(department="CS")
    b = directory.add(department="EE")

    result = ApprovalWorkflow(directory).apply_bulk_transition(
        cs_staff_actor, [a.uid, b.uid], Transition.APPROVE
    )

    assert (result.success, result.failed) == (1, 1)
    assert directory.users[a.uid].is_approved is True
    assert directory.users[b.uid] == b


def test_admin_deactivate_with_one_backend_failure(directory, admin_actor):
    targets = [directory.add(state=CardState.ACTIVE) for _ in range(5)]
    directory.fail_updates_for.add(targets[2].uid)

    result = ApprovalWorkflow(directory).apply_bulk_transition(
        admin_actor, [t.uid for t in targets], Transition.DEACTIVATE
    )

    assert (result.success, result.failed) == (4, 1)
    assert result.failures[0].uid == targets[2].uid
    assert result.failures[0].reason == "BackendError"
    assert directory.users[targets[2].uid].state == CardState.ACTIVE
    assert sum(directory.users[t.uid].state == CardState.APPROVED for t in targets) == 4


def test_reject_deletes_pending_registrations(directory, admin_actor):
    pending = directory.add()
    active = directory.add(state=CardState.ACTIVE)

    result = ApprovalWorkflow(directory).apply_bulk_transition(
        admin_actor, [pending.uid, active.uid], Transition.REJECT
    )

    assert (result.success, result.failed) == (1, 1)
    assert pending.uid not in directory.users
    assert result.failures[0].reason == "InvalidTransition"
    assert directory.users[active.uid].state == CardState.ACTIVE


def test_unknown_ids_are_counted_as_not_found(directory, admin_actor):
    target = directory.add()

    result = ApprovalWorkflow(directory).apply_bulk_transition(
        admin_actor, [target.uid, "missing"], Transition.APPROVE
    )

    assert (result.success, result.failed) == (1, 1)
    assert result.failures[0].reason == "NotFound"


def test_duplicate_ids_are_processed_once(directory, admin_actor):
    target = directory.add()

    result = ApprovalWorkflow(directory).apply_bulk_transition(
        admin_actor, [target.uid, target.uid, target.uid], Transition.APPROVE
    )

    assert (result.success, result.failed) == (1, 0)
    assert directory.writes() == ["update_user"]


def test_activate_pending_user_is_refused(directory, admin_actor):
    target = directory.add()

    result = ApprovalWorkflow(directory).apply_bulk_transition(admin_actor, [target.uid], Transition.ACTIVATE)

    assert (result.success, result.failed) == (0, 1)
    assert directory.users[target.uid].state == CardState.PENDING


def test_backend_down_raises_once_without_writes(directory, admin_actor):
    targets = [directory.add() for _ in range(3)]
    directory.down = True

    with pytest.raises(BackendUnavailableError):
        ApprovalWorkflow(directory).apply_bulk_transition(admin_actor, [t.uid for t in targets], Transition.APPROVE)

    assert directory.calls == ["ping"]


def test_unreachable_for_every_item_raises(directory, admin_actor):
    targets = [directory.add() for _ in range(2)]
    directory.unavailable_for.update(t.uid for t in targets)

    with pytest.raises(BackendUnavailableError):
        ApprovalWorkflow(directory).apply_bulk_transition(admin_actor, [t.uid for t in targets], Transition.APPROVE)


def test_staff_without_approval_rights_cannot_approve(directory, cs_staff):
    actor = Actor(uid=cs_staff.uid, role=Role.STAFF, department="CS", can_approve_students=False)
    target = directory.add(department="CS")

    with pytest.raises(AuthorizationError):
        ApprovalWorkflow(directory).apply_bulk_transition(actor, [target.uid], Transition.APPROVE)

    assert directory.calls == []


def test_student_cannot_issue_transitions(directory):
    student = directory.add(state=CardState.ACTIVE)
    other = directory.add(state=CardState.APPROVED)

    with pytest.raises(AuthorizationError):
        ApprovalWorkflow(directory).apply_bulk_transition(Actor.from_user(student), [other.uid], Transition.ACTIVATE)


def test_staff_cannot_act_on_other_staff(directory, cs_staff_actor):
    colleague = directory.add(role=Role.STAFF, department="CS", state=CardState.ACTIVE)

    result = ApprovalWorkflow(directory).apply_bulk_transition(cs_staff_actor, [colleague.uid], Transition.DEACTIVATE)

    assert result.failed == 1
    assert directory.users[colleague.uid].state == CardState.ACTIVE


def test_next_state_table():
    assert next_state(CardState.PENDING, Transition.APPROVE) == CardState.APPROVED
    assert next_state(CardState.ACTIVE, Transition.APPROVE) == CardState.ACTIVE
    assert next_state(CardState.ACTIVE, Transition.DEACTIVATE) == CardState.APPROVED
    assert next_state(CardState.PENDING, Transition.REJECT) == CardState.REJECTED

    with pytest.raises(InvalidTransitionError):
        next_state(CardState.PENDING, Transition.DEACTIVATE)


def test_refused_transition_does_not_chain_the_lookup_error():
    with pytest.raises(InvalidTransitionError) as excinfo:
        next_state(CardState.APPROVED, Transition.REJECT)

    assert excinfo.value.__cause__ is None
    assert excinfo.value.__suppress_context__ is True


def test_reject_all_pending_only_touches_pending_in_scope(directory, cs_staff_actor):
    own = [directory.add(department="CS") for _ in range(2)]
    other = directory.add(department="EE")
    approved = directory.add(department="CS", state=CardState.APPROVED)

    result = ApprovalWorkflow(directory).reject_all_pending(cs_staff_actor)

    assert (result.success, result.failed) == (2, 0)
    assert all(u.uid not in directory.users for u in own)
    assert other.uid in directory.users
    assert directory.users[approved.uid].state == CardState.APPROVED


def test_reject_all_pending_with_nothing_pending(directory, admin_actor):
    directory.add(state=CardState.ACTIVE)

    with pytest.raises(NoSelectionError):
        ApprovalWorkflow(directory).reject_all_pending(admin_actor)
    assert directory.writes() == []


def test_reject_all_pending_needs_approval_rights(directory):
    directory.add(department="CS")
    actor = Actor.from_user(directory.add(role=Role.STAFF, department="CS", state=CardState.ACTIVE))

    with pytest.raises(AuthorizationError):
        ApprovalWorkflow(directory).reject_all_pending(actor)
    assert "list_users" not in directory.calls
