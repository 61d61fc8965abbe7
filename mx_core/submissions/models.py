# mx_core/submissions/models.py
from __future__ import annotations

from django.conf import settings
from django.core.serializers.json import DjangoJSONEncoder
from django.db import models

from mx_core.common.models import ClinicScopedModel
from mx_core.submissions.constants import ExamType, SubmissionStatus


class MedicalSubmission(ClinicScopedModel):
    """
    One medical examination record, owned by the clinic it was taken in.
    `status` only moves through mx_core.submissions.lifecycle.
    """

    exam_type = models.CharField(max_length=32, choices=ExamType.choices, db_index=True)

    patient_name = models.CharField(max_length=255)
    # Stored normalized (trimmed, uppercase) and checksum-validated
    patient_nric = models.CharField(max_length=9, db_index=True)
    patient_dob = models.DateField()
    examination_date = models.DateField(null=True, blank=True)

    status = models.CharField(
        max_length=24,
        choices=SubmissionStatus.choices,
        default=SubmissionStatus.DRAFT,
        db_index=True,
    )
    form_data = models.JSONField(default=dict, blank=True, encoder=DjangoJSONEncoder)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="created_submissions",
    )
    approved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="approved_submissions",
        null=True,
        blank=True,
    )
    assigned_doctor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name="assigned_submissions",
        null=True,
        blank=True,
    )

    approved_date = models.DateTimeField(null=True, blank=True)
    submitted_date = models.DateTimeField(null=True, blank=True)
    rejected_reason = models.TextField(null=True, blank=True)

    class Meta:
        db_table = "submissions_medical_submission"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["clinic", "status"]),
            models.Index(fields=["clinic", "patient_nric"]),
            models.Index(fields=["clinic", "status", "assigned_doctor"]),
            models.Index(fields=["created_by", "status"]),
        ]

    def __str__(self) -> str:
        return f"{self.exam_type} {self.patient_nric} ({self.status})"
