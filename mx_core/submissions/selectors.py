# mx_core/submissions/selectors.py
from __future__ import annotations

from uuid import UUID

from django.db.models import Q, QuerySet

from mx_core.iam.constants import UserRole
from mx_core.submissions.constants import AuditEventType, SubmissionStatus
from mx_core.submissions.lifecycle import Actor
from mx_core.submissions.models import MedicalSubmission


def _base() -> QuerySet[MedicalSubmission]:
    return MedicalSubmission.objects.select_related(
        "created_by__mx_profile",
        "approved_by__mx_profile",
        "assigned_doctor__mx_profile",
    )


def _visible_to(actor: Actor) -> QuerySet[MedicalSubmission]:
    """
    Admins see their whole clinic; everyone else sees rows they created,
    approved or were assigned to review inside the clinic.
    """
    qs = _base().filter(clinic_id=actor.clinic_id)
    if actor.role == UserRole.ADMIN:
        return qs
    return qs.filter(
        Q(created_by_id=actor.user_id) | Q(approved_by_id=actor.user_id) | Q(assigned_doctor_id=actor.user_id)
    )


def list_submissions(*, actor: Actor) -> QuerySet[MedicalSubmission]:
    """Non-draft submissions, newest first. Filtering happens in SubmissionFilter."""
    return _visible_to(actor).exclude(status=SubmissionStatus.DRAFT).order_by("-created_at")


def list_drafts(*, actor: Actor) -> QuerySet[MedicalSubmission]:
    qs = _base().filter(clinic_id=actor.clinic_id, status=SubmissionStatus.DRAFT)
    if actor.role != UserRole.ADMIN:
        qs = qs.filter(created_by_id=actor.user_id)
    return qs.order_by("-updated_at")


def list_rejected_for_creator(*, actor: Actor) -> QuerySet[MedicalSubmission]:
    return (
        _base()
        .filter(clinic_id=actor.clinic_id, status=SubmissionStatus.REJECTED, created_by_id=actor.user_id)
        .order_by("-created_at")
    )


def list_pending_approvals(*, actor: Actor) -> QuerySet[MedicalSubmission]:
    """
    Doctor's queue: pending rows assigned to them, plus unassigned ones any
    doctor of the clinic may pick up.
    """
    return (
        _base()
        .filter(clinic_id=actor.clinic_id, status=SubmissionStatus.PENDING_APPROVAL)
        .filter(Q(assigned_doctor_id=actor.user_id) | Q(assigned_doctor__isnull=True))
        .order_by("-created_at")
    )


def list_rejected_for_doctor(*, actor: Actor) -> QuerySet[MedicalSubmission]:
    """Rejected rows this doctor was assigned to or rejected."""
    return (
        _base()
        .filter(clinic_id=actor.clinic_id, status=SubmissionStatus.REJECTED)
        .filter(
            Q(assigned_doctor_id=actor.user_id)
            | Q(audit_logs__event_type=AuditEventType.REJECTED, audit_logs__user_id=actor.user_id)
        )
        .distinct()
        .order_by("-created_at")
    )


def get_submission(*, actor: Actor, submission_id: UUID) -> MedicalSubmission:
    """
    Detail lookup: drafts are visible to their creator (and clinic admins),
    everything else follows the list visibility rule. Raises DoesNotExist.
    """
    qs = _visible_to(actor)
    if actor.role == UserRole.DOCTOR:
        # Doctors can open anything waiting in their clinic's approval queue
        qs = qs | _base().filter(
            clinic_id=actor.clinic_id,
            status=SubmissionStatus.PENDING_APPROVAL,
            assigned_doctor__isnull=True,
        )
    return qs.distinct().get(id=submission_id)
