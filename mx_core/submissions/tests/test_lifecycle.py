import uuid
from datetime import datetime, timezone

import pytest

from mx_core.common.errors import Forbidden, InvalidArgument, InvalidState
from mx_core.iam.constants import UserRole
from mx_core.submissions import lifecycle
from mx_core.submissions.constants import TERMINAL_STATUSES, AuditEventType, SubmissionStatus
from mx_core.submissions.lifecycle import Actor, SubmissionState

NOW = datetime(2024, 3, 1, 9, 30, tzinfo=timezone.utc)
CLINIC = uuid.uuid4()
OTHER_CLINIC = uuid.uuid4()

NURSE = Actor(user_id=1, role=UserRole.NURSE, clinic_id=CLINIC)
DOCTOR = Actor(user_id=2, role=UserRole.DOCTOR, clinic_id=CLINIC)
ADMIN = Actor(user_id=3, role=UserRole.ADMIN, clinic_id=CLINIC)
OTHER_NURSE = Actor(user_id=4, role=UserRole.NURSE, clinic_id=CLINIC)
OTHER_DOCTOR = Actor(user_id=5, role=UserRole.DOCTOR, clinic_id=CLINIC)
FOREIGN_DOCTOR = Actor(user_id=6, role=UserRole.DOCTOR, clinic_id=OTHER_CLINIC)
FOREIGN_ADMIN = Actor(user_id=7, role=UserRole.ADMIN, clinic_id=OTHER_CLINIC)


def state(status, created_by=NURSE):
    return SubmissionState(status=status, clinic_id=CLINIC, created_by_id=created_by.user_id)


# ----------------------------
# create
# ----------------------------
def test_nurse_routing_for_approval_goes_pending():
    t = lifecycle.create(NURSE, route_for_approval=True, now=NOW)

    assert t.status == SubmissionStatus.PENDING_APPROVAL
    assert t.event_type == AuditEventType.CREATED
    assert "approved_by_id" not in t.changes
    assert "approved_date" not in t.changes


def test_nurse_without_routing_submits_directly():
    t = lifecycle.create(NURSE, route_for_approval=False, now=NOW)

    assert t.status == SubmissionStatus.SUBMITTED
    assert t.changes["approved_by_id"] == NURSE.user_id
    assert t.changes["approved_date"] == NOW
    assert t.changes["submitted_date"] == NOW


@pytest.mark.parametrize("route", [True, False])
def test_doctor_always_submits_directly(route):
    t = lifecycle.create(DOCTOR, route_for_approval=route, now=NOW)

    assert t.status == SubmissionStatus.SUBMITTED
    assert t.changes["approved_by_id"] == DOCTOR.user_id
    assert t.changes["approved_date"] == NOW


def test_create_as_draft():
    t = lifecycle.create(NURSE, route_for_approval=True, as_draft=True, now=NOW)

    assert t.status == SubmissionStatus.DRAFT
    assert t.changes == {}


def test_admin_cannot_create():
    with pytest.raises(Forbidden):
        lifecycle.create(ADMIN, route_for_approval=False, now=NOW)


# ----------------------------
# update
# ----------------------------
def test_creator_can_update_draft():
    t = lifecycle.update(state(SubmissionStatus.DRAFT), NURSE, {"patient_name": "New Name"})

    assert t.status == SubmissionStatus.DRAFT
    assert t.event_type == AuditEventType.UPDATED
    assert t.audit_changes == {"patient_name": "New Name"}


def test_clinic_admin_can_update_draft():
    assert lifecycle.can_update(state(SubmissionStatus.DRAFT), ADMIN)


def test_admin_of_another_clinic_cannot_update():
    with pytest.raises(Forbidden):
        lifecycle.update(state(SubmissionStatus.DRAFT), FOREIGN_ADMIN, {})


@pytest.mark.parametrize("other", [OTHER_NURSE, DOCTOR])
def test_non_creator_cannot_update(other):
    with pytest.raises(Forbidden):
        lifecycle.update(state(SubmissionStatus.DRAFT), other, {})
    assert lifecycle.can_update(state(SubmissionStatus.DRAFT), other) is False


@pytest.mark.parametrize("who", [NURSE, OTHER_NURSE, DOCTOR, ADMIN, FOREIGN_ADMIN])
def test_submitted_cannot_be_edited(who):
    with pytest.raises(InvalidState, match="cannot edit submitted submission"):
        lifecycle.update(state(SubmissionStatus.SUBMITTED), who, {})
    assert lifecycle.can_update(state(SubmissionStatus.SUBMITTED), who) is False


@pytest.mark.parametrize("status", [SubmissionStatus.PENDING_APPROVAL, SubmissionStatus.REJECTED])
def test_non_draft_cannot_be_edited(status):
    with pytest.raises(InvalidState):
        lifecycle.update(state(status), NURSE, {})


# ----------------------------
# submit (draft -> pending_approval)
# ----------------------------
def test_submit_draft_for_approval():
    t = lifecycle.submit(state(SubmissionStatus.DRAFT), NURSE, now=NOW)

    assert t.status == SubmissionStatus.PENDING_APPROVAL
    assert t.event_type == AuditEventType.SUBMITTED
    assert t.changes == {"submitted_date": NOW}
    assert t.audit_changes == {"status": "pending_approval"}


def test_nurse_cannot_self_approve_through_submit():
    t = lifecycle.submit(state(SubmissionStatus.DRAFT), NURSE, now=NOW)

    assert t.status != SubmissionStatus.SUBMITTED
    assert "approved_by_id" not in t.changes
    assert "approved_date" not in t.changes


def test_doctor_draft_still_goes_to_review():
    t = lifecycle.submit(state(SubmissionStatus.DRAFT, created_by=DOCTOR), DOCTOR, now=NOW)

    assert t.status == SubmissionStatus.PENDING_APPROVAL
    assert t.changes == {"submitted_date": NOW}


def test_admin_submission_waits_for_doctor():
    t = lifecycle.submit(state(SubmissionStatus.DRAFT), ADMIN, now=NOW)

    assert t.status == SubmissionStatus.PENDING_APPROVAL


def test_submit_requires_draft():
    with pytest.raises(InvalidState):
        lifecycle.submit(state(SubmissionStatus.PENDING_APPROVAL), NURSE, now=NOW)


def test_submit_by_other_nurse_is_forbidden():
    with pytest.raises(Forbidden):
        lifecycle.submit(state(SubmissionStatus.DRAFT), OTHER_NURSE, now=NOW)


# ----------------------------
# approve / reject
# ----------------------------
def test_approve_pending():
    t = lifecycle.approve(state(SubmissionStatus.PENDING_APPROVAL), DOCTOR, now=NOW, notes="ok", agency="MOM")

    assert t.status == SubmissionStatus.SUBMITTED
    assert t.event_type == AuditEventType.APPROVED
    assert t.changes == {"approved_by_id": DOCTOR.user_id, "approved_date": NOW, "submitted_date": NOW}
    assert t.audit_changes["notes"] == "ok"
    assert t.audit_changes["agency"] == "MOM"


@pytest.mark.parametrize("who", [NURSE, ADMIN])
def test_only_doctors_approve(who):
    with pytest.raises(Forbidden):
        lifecycle.approve(state(SubmissionStatus.PENDING_APPROVAL), who, now=NOW)


def test_doctor_of_another_clinic_cannot_approve():
    with pytest.raises(Forbidden):
        lifecycle.approve(state(SubmissionStatus.PENDING_APPROVAL), FOREIGN_DOCTOR, now=NOW)


@pytest.mark.parametrize(
    "status",
    [SubmissionStatus.DRAFT, SubmissionStatus.SUBMITTED, SubmissionStatus.REJECTED],
)
def test_approve_requires_pending(status):
    with pytest.raises(InvalidState):
        lifecycle.approve(state(status), DOCTOR, now=NOW)


def test_any_doctor_of_the_clinic_may_approve():
    t = lifecycle.approve(state(SubmissionStatus.PENDING_APPROVAL), OTHER_DOCTOR, now=NOW)
    assert t.changes["approved_by_id"] == OTHER_DOCTOR.user_id


def test_reject_pending():
    t = lifecycle.reject(state(SubmissionStatus.PENDING_APPROVAL), DOCTOR, "Chest X-ray missing")

    assert t.status == SubmissionStatus.REJECTED
    assert t.event_type == AuditEventType.REJECTED
    assert t.changes == {"rejected_reason": "Chest X-ray missing"}
    assert t.audit_changes["reason"] == "Chest X-ray missing"


@pytest.mark.parametrize("reason", [None, "", "   \t"])
def test_reject_requires_reason(reason):
    with pytest.raises(InvalidArgument):
        lifecycle.reject(state(SubmissionStatus.PENDING_APPROVAL), DOCTOR, reason)


def test_reject_role_is_checked_before_reason():
    with pytest.raises(Forbidden):
        lifecycle.reject(state(SubmissionStatus.PENDING_APPROVAL), NURSE, "")


def test_reject_requires_pending():
    with pytest.raises(InvalidState):
        lifecycle.reject(state(SubmissionStatus.SUBMITTED), DOCTOR, "late")


def test_doctor_of_another_clinic_cannot_reject():
    with pytest.raises(Forbidden):
        lifecycle.reject(state(SubmissionStatus.PENDING_APPROVAL), FOREIGN_DOCTOR, "no")


@pytest.mark.parametrize("status", sorted(TERMINAL_STATUSES))
def test_terminal_states_have_no_way_out(status):
    s = state(status)

    with pytest.raises(InvalidState):
        lifecycle.update(s, NURSE, {})
    with pytest.raises(InvalidState):
        lifecycle.submit(s, NURSE, now=NOW)
    with pytest.raises(InvalidState):
        lifecycle.approve(s, DOCTOR, now=NOW)
    with pytest.raises(InvalidState):
        lifecycle.reject(s, DOCTOR, "again")
