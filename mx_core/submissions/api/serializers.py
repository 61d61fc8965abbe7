# mx_core/submissions/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from mx_core.common import nric
from mx_core.submissions.constants import ExamType
from mx_core.submissions.models import MedicalSubmission


def display_name(user) -> str | None:
    if user is None:
        return None
    profile = getattr(user, "mx_profile", None)
    if profile is not None and profile.name:
        return profile.name
    return user.get_username()


class NricField(serializers.CharField):
    """Checksum-validated NRIC/FIN, returned trimmed and uppercased."""

    default_error_messages = {"invalid_nric": "Invalid NRIC/FIN."}

    def __init__(self, **kwargs):
        kwargs.setdefault("max_length", 16)
        super().__init__(**kwargs)

    def to_internal_value(self, data):
        value = super().to_internal_value(data)
        if not nric.validate(value):
            self.fail("invalid_nric")
        return nric.normalize(value)


class SubmissionSerializer(serializers.ModelSerializer):
    created_by_name = serializers.SerializerMethodField()
    approved_by_name = serializers.SerializerMethodField()
    assigned_doctor_name = serializers.SerializerMethodField()

    class Meta:
        model = MedicalSubmission
        fields = [
            "id",
            "clinic_id",
            "exam_type",
            "patient_name",
            "patient_nric",
            "patient_dob",
            "examination_date",
            "status",
            "form_data",
            "created_by_id",
            "created_by_name",
            "approved_by_id",
            "approved_by_name",
            "approved_date",
            "submitted_date",
            "assigned_doctor_id",
            "assigned_doctor_name",
            "rejected_reason",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_created_by_name(self, obj) -> str | None:
        return display_name(obj.created_by)

    def get_approved_by_name(self, obj) -> str | None:
        return display_name(obj.approved_by)

    def get_assigned_doctor_name(self, obj) -> str | None:
        return display_name(obj.assigned_doctor)


class SubmissionCreateSerializer(serializers.Serializer):
    exam_type = serializers.ChoiceField(choices=ExamType.choices)
    patient_name = serializers.CharField(max_length=255)
    patient_nric = NricField()
    patient_dob = serializers.DateField()
    examination_date = serializers.DateField(required=False, allow_null=True)
    form_data = serializers.JSONField(required=False, default=dict)
    assigned_doctor_id = serializers.IntegerField(required=False, allow_null=True)

    route_for_approval = serializers.BooleanField(required=False, default=False)
    as_draft = serializers.BooleanField(required=False, default=False)


class SubmissionUpdateSerializer(serializers.Serializer):
    exam_type = serializers.ChoiceField(choices=ExamType.choices, required=False)
    patient_name = serializers.CharField(max_length=255, required=False)
    patient_nric = NricField(required=False)
    patient_dob = serializers.DateField(required=False)
    examination_date = serializers.DateField(required=False, allow_null=True)
    form_data = serializers.JSONField(required=False)
    assigned_doctor_id = serializers.IntegerField(required=False, allow_null=True)


class SubmitSerializer(serializers.Serializer):
    assigned_doctor_id = serializers.IntegerField(required=False, allow_null=True)


class ApproveSerializer(serializers.Serializer):
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class RejectSerializer(serializers.Serializer):
    # Blank reasons are refused by the lifecycle, not here
    reason = serializers.CharField(required=False, allow_blank=True, trim_whitespace=False, default="")


class AuditEntrySerializer(serializers.Serializer):
    id = serializers.UUIDField()
    timestamp = serializers.DateTimeField()
    event_type = serializers.CharField()
    user_id = serializers.IntegerField()
    user_name = serializers.SerializerMethodField()
    changes = serializers.JSONField()

    def get_user_name(self, obj) -> str | None:
        return display_name(obj.user)
