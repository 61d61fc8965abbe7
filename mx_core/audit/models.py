# mx_core/audit/models.py
import uuid

from django.conf import settings
from django.core.serializers.json import DjangoJSONEncoder
from django.db import models

from mx_core.submissions.constants import AuditEventType


class AuditLogQuerySet(models.QuerySet):
    def delete(self):
        raise TypeError("Audit log entries are append-only.")

    def update(self, **kwargs):
        raise TypeError("Audit log entries are append-only.")


class AuditLog(models.Model):
    """
    Immutable record of one state-changing event on a submission.
    Rows are only ever inserted; save() on an existing row and delete() raise.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    clinic = models.ForeignKey("clinics.Clinic", on_delete=models.PROTECT, related_name="+")
    submission = models.ForeignKey(
        "submissions.MedicalSubmission",
        on_delete=models.PROTECT,
        related_name="audit_logs",
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="submission_audit_logs",
    )

    event_type = models.CharField(max_length=16, choices=AuditEventType.choices, db_index=True)
    changes = models.JSONField(default=dict, encoder=DjangoJSONEncoder)
    timestamp = models.DateTimeField(auto_now_add=True, db_index=True)

    objects = AuditLogQuerySet.as_manager()

    class Meta:
        db_table = "audit_audit_log"
        ordering = ["-timestamp"]
        indexes = [
            models.Index(fields=["submission", "timestamp"]),
            models.Index(fields=["clinic", "timestamp"]),
            models.Index(fields=["clinic", "event_type"]),
        ]

    def __str__(self) -> str:
        return f"{self.event_type} {self.submission_id} by {self.user_id}"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise TypeError("Audit log entries are append-only.")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise TypeError("Audit log entries are append-only.")
