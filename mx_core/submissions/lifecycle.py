# mx_core/submissions/lifecycle.py
"""
Submission state machine.

    (none) --create--> draft | pending_approval | submitted
    draft --update--> draft
    draft --submit--> pending_approval
    pending_approval --approve--> submitted
    pending_approval --reject--> rejected

submitted and rejected are terminal. Functions here only decide: they take
plain values, never touch the ORM or the clock, and return a Transition that
the caller persists together with exactly one audit entry.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from mx_core.common.errors import Forbidden, InvalidArgument, InvalidState
from mx_core.iam.constants import UserRole
from mx_core.submissions.constants import AuditEventType, SubmissionStatus

AUTHOR_ROLES = frozenset({UserRole.NURSE, UserRole.DOCTOR})


@dataclass(frozen=True)
class Actor:
    user_id: int
    role: UserRole
    clinic_id: UUID


@dataclass(frozen=True)
class SubmissionState:
    status: SubmissionStatus
    clinic_id: UUID
    created_by_id: int


@dataclass(frozen=True)
class Transition:
    status: SubmissionStatus
    event_type: AuditEventType
    changes: dict[str, Any] = field(default_factory=dict)
    audit_changes: dict[str, Any] = field(default_factory=dict)


def _route(actor: Actor, *, route_for_approval: bool, now: datetime) -> tuple[SubmissionStatus, dict[str, Any]]:
    # A nurse routing for approval waits for a doctor; everyone else submits directly
    if actor.role == UserRole.NURSE and route_for_approval:
        return SubmissionStatus.PENDING_APPROVAL, {}

    return SubmissionStatus.SUBMITTED, {
        "approved_by_id": actor.user_id,
        "approved_date": now,
        "submitted_date": now,
    }


def _is_owner_or_clinic_admin(submission: SubmissionState, actor: Actor) -> bool:
    if actor.user_id == submission.created_by_id:
        return True
    return actor.role == UserRole.ADMIN and actor.clinic_id == submission.clinic_id


def _assert_reviewer(submission: SubmissionState, actor: Actor) -> None:
    if actor.role != UserRole.DOCTOR:
        raise Forbidden("Only doctors can review submissions.")


def _assert_same_clinic(submission: SubmissionState, actor: Actor) -> None:
    if submission.clinic_id != actor.clinic_id:
        raise Forbidden("Submission belongs to another clinic.")


def _assert_pending(submission: SubmissionState) -> None:
    if submission.status != SubmissionStatus.PENDING_APPROVAL:
        raise InvalidState("Submission is not pending approval.")


def create(actor: Actor, *, route_for_approval: bool, as_draft: bool = False, now: datetime) -> Transition:
    if actor.role not in AUTHOR_ROLES:
        raise Forbidden("Only nurses and doctors can create submissions.")

    if as_draft:
        status, changes = SubmissionStatus.DRAFT, {}
    else:
        status, changes = _route(actor, route_for_approval=route_for_approval, now=now)

    return Transition(
        status=status,
        event_type=AuditEventType.CREATED,
        changes=changes,
        audit_changes={"status": status.value},
    )


def _check_update(submission: SubmissionState, actor: Actor) -> None:
    if submission.status == SubmissionStatus.SUBMITTED:
        raise InvalidState("cannot edit submitted submission")
    if submission.status != SubmissionStatus.DRAFT:
        raise InvalidState(f"Only drafts can be edited (current={submission.status}).")
    if not _is_owner_or_clinic_admin(submission, actor):
        raise Forbidden("Only the creator or a clinic admin can edit this submission.")


def update(submission: SubmissionState, actor: Actor, patch: dict[str, Any]) -> Transition:
    _check_update(submission, actor)
    return Transition(
        status=SubmissionStatus.DRAFT,
        event_type=AuditEventType.UPDATED,
        changes={},
        audit_changes=dict(patch),
    )


def can_update(submission: SubmissionState, actor: Actor) -> bool:
    try:
        _check_update(submission, actor)
    except (InvalidState, Forbidden):
        return False
    return True


def submit(submission: SubmissionState, actor: Actor, *, now: datetime) -> Transition:
    if submission.status != SubmissionStatus.DRAFT:
        raise InvalidState("Only drafts can be submitted.")
    if not _is_owner_or_clinic_admin(submission, actor):
        raise Forbidden("Only the creator or a clinic admin can submit this draft.")

    # Every submitted draft waits for a doctor's review
    return Transition(
        status=SubmissionStatus.PENDING_APPROVAL,
        event_type=AuditEventType.SUBMITTED,
        changes={"submitted_date": now},
        audit_changes={"status": SubmissionStatus.PENDING_APPROVAL.value},
    )


def approve(
    submission: SubmissionState,
    actor: Actor,
    *,
    now: datetime,
    notes: Optional[str] = None,
    agency: Optional[str] = None,
) -> Transition:
    _assert_reviewer(submission, actor)
    _assert_same_clinic(submission, actor)
    _assert_pending(submission)

    return Transition(
        status=SubmissionStatus.SUBMITTED,
        event_type=AuditEventType.APPROVED,
        changes={
            "approved_by_id": actor.user_id,
            "approved_date": now,
            "submitted_date": now,
        },
        audit_changes={"status": SubmissionStatus.SUBMITTED.value, "notes": notes, "agency": agency},
    )


def reject(submission: SubmissionState, actor: Actor, reason: Optional[str]) -> Transition:
    _assert_reviewer(submission, actor)
    if not reason or not reason.strip():
        raise InvalidArgument("A rejection reason is required.")
    _assert_same_clinic(submission, actor)
    _assert_pending(submission)

    return Transition(
        status=SubmissionStatus.REJECTED,
        event_type=AuditEventType.REJECTED,
        changes={"rejected_reason": reason},
        audit_changes={"status": SubmissionStatus.REJECTED.value, "reason": reason},
    )
