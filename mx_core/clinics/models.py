# mx_core/clinics/models.py
from __future__ import annotations

import uuid

from django.core.validators import RegexValidator
from django.db import models

from mx_core.common.models import TimeStampedModel

hci_code_validator = RegexValidator(
    regex=r"^[A-Z0-9]{7}$",
    message="HCI code must be 7 uppercase letters or digits.",
)


class Clinic(TimeStampedModel):
    """
    A medical clinic. Every submission, membership and audit row hangs off one.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    name = models.CharField(max_length=255)

    # Healthcare institution code issued by MOH (optional until licensed)
    hci_code = models.CharField(
        max_length=7,
        unique=True,
        null=True,
        blank=True,
        validators=[hci_code_validator],
    )
    registration_number = models.CharField(max_length=64, unique=True, null=True, blank=True)

    address = models.CharField(max_length=255, blank=True, default="")
    phone = models.CharField(max_length=32, blank=True, default="")
    email = models.EmailField(blank=True, default="")

    class Meta:
        db_table = "clinics_clinic"
        ordering = ["name"]
        indexes = [
            models.Index(fields=["name"]),
        ]

    def __str__(self) -> str:
        return f"{self.name} ({self.hci_code})" if self.hci_code else self.name
