# mx_core/submissions/services.py

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Optional
from uuid import UUID

from django.conf import settings
from django.db import transaction
from django.utils.timezone import now

from mx_core.audit.services import AuditService
from mx_core.common import nric
from mx_core.common.errors import AuditWriteError, DomainError, InvalidArgument
from mx_core.iam.constants import UserRole, UserStatus
from mx_core.iam.models import UserProfile
from mx_core.submissions import lifecycle
from mx_core.submissions.constants import (
    DEFAULT_AGENCY,
    DEFAULT_AGENCY_BY_EXAM_TYPE,
    ExamType,
    SubmissionStatus,
)
from mx_core.submissions.lifecycle import Actor, SubmissionState, Transition
from mx_core.submissions.models import MedicalSubmission

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = (
    "exam_type",
    "patient_name",
    "patient_nric",
    "patient_dob",
    "examination_date",
    "form_data",
    "assigned_doctor_id",
)


@dataclass(frozen=True)
class SubmissionInput:
    exam_type: str
    patient_name: str
    patient_nric: str
    patient_dob: date
    examination_date: Optional[date] = None
    form_data: dict[str, Any] = field(default_factory=dict)
    assigned_doctor_id: Optional[int] = None


def agency_for(exam_type: str) -> str:
    """Government agency that receives a submitted exam of this type."""
    mapping = getattr(settings, "MX_AGENCY_BY_EXAM_TYPE", None) or DEFAULT_AGENCY_BY_EXAM_TYPE
    return mapping.get(exam_type, DEFAULT_AGENCY)


def _state(submission: MedicalSubmission) -> SubmissionState:
    return SubmissionState(
        status=submission.status,
        clinic_id=submission.clinic_id,
        created_by_id=submission.created_by_id,
    )


def _clean_nric(value: str) -> str:
    if not nric.validate(value):
        raise InvalidArgument("Invalid NRIC/FIN.")
    return nric.normalize(value)


def _clean_exam_type(value: str) -> str:
    if value not in ExamType.values:
        raise InvalidArgument(f"Unknown exam type: {value}.")
    return value


def _check_assigned_doctor(*, clinic_id: UUID, user_id: Optional[int]) -> None:
    if user_id is None:
        return
    ok = (
        UserProfile.objects.filter(
            user_id=user_id,
            role=UserRole.DOCTOR,
            status=UserStatus.ACTIVE,
            memberships__clinic_id=clinic_id,
            memberships__is_active=True,
        ).exists()
    )
    if not ok:
        raise InvalidArgument("Assigned doctor must be an active doctor of this clinic.")


def _default_doctor_for(actor: Actor) -> Optional[int]:
    profile = UserProfile.objects.select_related("default_doctor").filter(user_id=actor.user_id).first()
    if profile is None or profile.default_doctor is None:
        return None
    return profile.default_doctor.user_id


def _decide(op: str, actor: Actor, fn, *args, **kwargs) -> Transition:
    try:
        return fn(*args, **kwargs)
    except DomainError as exc:
        logger.warning("submission %s refused for user %s (%s): %s", op, actor.user_id, actor.role, exc.message)
        raise


class SubmissionService:
    """
    Submission write-model operations.

    Each method is one transaction: lock the row, ask the lifecycle for a
    Transition, persist it and append exactly one audit entry. If the audit
    append fails the whole transaction rolls back and AuditWriteError is raised.
    """

    @staticmethod
    def _lock(submission_id: UUID) -> MedicalSubmission:
        return MedicalSubmission.objects.select_for_update().get(id=submission_id)

    @staticmethod
    def _apply(
        submission: MedicalSubmission,
        transition: Transition,
        *,
        actor: Actor,
        extra: Optional[dict[str, Any]] = None,
    ) -> MedicalSubmission:
        previous = None if submission._state.adding else submission.status

        for attr, value in {**(extra or {}), **transition.changes}.items():
            setattr(submission, attr, value)
        submission.status = transition.status
        submission.save()

        try:
            AuditService.log(
                clinic_id=submission.clinic_id,
                submission_id=submission.id,
                user_id=actor.user_id,
                event_type=transition.event_type,
                changes=transition.audit_changes,
            )
        except Exception as exc:
            logger.exception(
                "audit append failed for submission %s (%s); rolling back",
                submission.id,
                transition.event_type,
            )
            raise AuditWriteError(f"Audit append failed for submission {submission.id}") from exc

        logger.info(
            "submission %s %s -> %s by user %s",
            submission.id,
            previous or "(new)",
            submission.status,
            actor.user_id,
        )
        return submission

    @staticmethod
    @transaction.atomic
    def create(
        *,
        actor: Actor,
        data: SubmissionInput,
        route_for_approval: bool,
        as_draft: bool = False,
    ) -> MedicalSubmission:
        ts = now()
        transition = _decide(
            "create",
            actor,
            lifecycle.create,
            actor,
            route_for_approval=route_for_approval,
            as_draft=as_draft,
            now=ts,
        )

        assigned_doctor_id = data.assigned_doctor_id
        if assigned_doctor_id is None and transition.status == SubmissionStatus.PENDING_APPROVAL:
            assigned_doctor_id = _default_doctor_for(actor)
        _check_assigned_doctor(clinic_id=actor.clinic_id, user_id=assigned_doctor_id)

        submission = MedicalSubmission(
            clinic_id=actor.clinic_id,
            exam_type=_clean_exam_type(data.exam_type),
            patient_name=data.patient_name.strip(),
            patient_nric=_clean_nric(data.patient_nric),
            patient_dob=data.patient_dob,
            examination_date=data.examination_date,
            form_data=data.form_data or {},
            created_by_id=actor.user_id,
            assigned_doctor_id=assigned_doctor_id,
        )

        transition = Transition(
            status=transition.status,
            event_type=transition.event_type,
            changes=transition.changes,
            audit_changes={**transition.audit_changes, "exam_type": submission.exam_type},
        )
        return SubmissionService._apply(submission, transition, actor=actor)

    @staticmethod
    @transaction.atomic
    def update(*, actor: Actor, submission_id: UUID, patch: dict[str, Any]) -> MedicalSubmission:
        submission = SubmissionService._lock(submission_id)

        transition = _decide("update", actor, lifecycle.update, _state(submission), actor, patch)

        unknown = set(patch) - set(EDITABLE_FIELDS)
        if unknown:
            raise InvalidArgument(f"Fields cannot be edited: {', '.join(sorted(unknown))}.")

        cleaned = dict(patch)
        if "patient_name" in cleaned:
            cleaned["patient_name"] = cleaned["patient_name"].strip()
        if "patient_nric" in cleaned:
            cleaned["patient_nric"] = _clean_nric(cleaned["patient_nric"])
        if "exam_type" in cleaned:
            cleaned["exam_type"] = _clean_exam_type(cleaned["exam_type"])
        if "assigned_doctor_id" in cleaned:
            _check_assigned_doctor(clinic_id=submission.clinic_id, user_id=cleaned["assigned_doctor_id"])
        if "form_data" in cleaned and cleaned["form_data"] is None:
            cleaned["form_data"] = {}

        return SubmissionService._apply(submission, transition, actor=actor, extra=cleaned)

    @staticmethod
    @transaction.atomic
    def submit(
        *,
        actor: Actor,
        submission_id: UUID,
        assigned_doctor_id: Optional[int] = None,
    ) -> MedicalSubmission:
        submission = SubmissionService._lock(submission_id)
        transition = _decide("submit", actor, lifecycle.submit, _state(submission), actor, now=now())

        doctor_id = assigned_doctor_id or submission.assigned_doctor_id or _default_doctor_for(actor)
        _check_assigned_doctor(clinic_id=submission.clinic_id, user_id=doctor_id)

        return SubmissionService._apply(submission, transition, actor=actor, extra={"assigned_doctor_id": doctor_id})

    @staticmethod
    @transaction.atomic
    def approve(*, actor: Actor, submission_id: UUID, notes: Optional[str] = None) -> MedicalSubmission:
        submission = SubmissionService._lock(submission_id)
        ts = now()
        transition = _decide(
            "approve",
            actor,
            lifecycle.approve,
            _state(submission),
            actor,
            now=ts,
            notes=notes,
            agency=agency_for(submission.exam_type),
        )
        return SubmissionService._apply(submission, transition, actor=actor)

    @staticmethod
    @transaction.atomic
    def reject(*, actor: Actor, submission_id: UUID, reason: Optional[str]) -> MedicalSubmission:
        submission = SubmissionService._lock(submission_id)
        transition = _decide("reject", actor, lifecycle.reject, _state(submission), actor, reason)
        return SubmissionService._apply(submission, transition, actor=actor)
