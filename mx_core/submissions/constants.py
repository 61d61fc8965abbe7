# mx_core/submissions/constants.py
from django.db import models


class SubmissionStatus(models.TextChoices):
    DRAFT = "draft", "Draft"
    PENDING_APPROVAL = "pending_approval", "Pending approval"
    SUBMITTED = "submitted", "Submitted"
    REJECTED = "rejected", "Rejected"


class ExamType(models.TextChoices):
    SIX_MONTHLY_MDW = "SIX_MONTHLY_MDW", "Six-monthly medical exam (MDW)"
    SIX_MONTHLY_FMW = "SIX_MONTHLY_FMW", "Six-monthly medical exam (FMW)"
    WORK_PERMIT = "WORK_PERMIT", "Full medical exam for work permit"
    AGED_DRIVERS = "AGED_DRIVERS", "Medical exam for aged drivers"
    PR_MEDICAL = "PR_MEDICAL", "Medical exam for PR application"
    STUDENT_PASS_MEDICAL = "STUDENT_PASS_MEDICAL", "Medical exam for student pass"
    LTVP_MEDICAL = "LTVP_MEDICAL", "Medical exam for long-term visit pass"
    DRIVING_LICENCE_TP = "DRIVING_LICENCE_TP", "Driving licence medical (Traffic Police)"
    DRIVING_VOCATIONAL_TP_LTA = "DRIVING_VOCATIONAL_TP_LTA", "Driving and vocational licence (TP and LTA)"
    VOCATIONAL_LICENCE_LTA = "VOCATIONAL_LICENCE_LTA", "Vocational licence medical (LTA)"


class AuditEventType(models.TextChoices):
    CREATED = "created", "Created"
    UPDATED = "updated", "Updated"
    SUBMITTED = "submitted", "Submitted"
    APPROVED = "approved", "Approved"
    REJECTED = "rejected", "Rejected"


TERMINAL_STATUSES = frozenset({SubmissionStatus.SUBMITTED, SubmissionStatus.REJECTED})

DEFAULT_AGENCY = "Ministry of Manpower"

DEFAULT_AGENCY_BY_EXAM_TYPE = {
    ExamType.AGED_DRIVERS: "Singapore Police Force",
}
