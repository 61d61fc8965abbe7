# mx_core/iam/models.py
import uuid

from django.conf import settings
from django.db import models

from mx_core.clinics.models import Clinic
from mx_core.common.models import TimeStampedModel
from mx_core.iam.constants import UserRole, UserStatus


class UserProfile(TimeStampedModel):
    """
    Clinic staff profile anchored to Django's AUTH_USER_MODEL.
    Carries the single role that gates the submission workflow.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="mx_profile")

    name = models.CharField(max_length=255)
    role = models.CharField(max_length=16, choices=UserRole.choices, db_index=True)
    status = models.CharField(max_length=16, choices=UserStatus.choices, default=UserStatus.ACTIVE)

    # Medical Council registration, doctors only
    mcr_number = models.CharField(max_length=16, unique=True, null=True, blank=True)

    # Home clinic; admins manage this one
    clinic = models.ForeignKey(Clinic, on_delete=models.PROTECT, related_name="user_profiles", null=True, blank=True)

    # Nurses: doctor pre-selected when routing a submission for approval
    default_doctor = models.ForeignKey(
        "self",
        on_delete=models.SET_NULL,
        related_name="+",
        null=True,
        blank=True,
    )

    class Meta:
        db_table = "iam_user_profile"
        indexes = [
            models.Index(fields=["clinic", "role"]),
            models.Index(fields=["role", "status"]),
        ]

    def __str__(self) -> str:
        return f"{self.name} ({self.role})"

    @property
    def is_active(self) -> bool:
        return self.status == UserStatus.ACTIVE


class ClinicMembership(models.Model):
    """
    Assigns a doctor or nurse to a clinic.
    This is the enforcement point for clinic scope.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    clinic = models.ForeignKey(Clinic, on_delete=models.PROTECT, related_name="memberships")
    profile = models.ForeignKey(UserProfile, on_delete=models.CASCADE, related_name="memberships")

    is_primary = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "iam_clinic_membership"
        constraints = [
            models.UniqueConstraint(fields=["clinic", "profile"], name="uq_clinic_profile_membership"),
        ]
        indexes = [
            models.Index(fields=["clinic", "is_active"]),
        ]

    def __str__(self) -> str:
        return f"{self.profile_id} @ {self.clinic_id}"
