# mx_core/clinics/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from mx_core.clinics.models import Clinic, hci_code_validator


class ClinicSerializer(serializers.ModelSerializer):
    class Meta:
        model = Clinic
        fields = [
            "id",
            "name",
            "hci_code",
            "registration_number",
            "address",
            "phone",
            "email",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class ClinicCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    hci_code = serializers.CharField(max_length=7, required=False, allow_blank=True, allow_null=True,
                                     validators=[hci_code_validator])
    registration_number = serializers.CharField(max_length=64, required=False, allow_blank=True, allow_null=True)
    address = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    phone = serializers.CharField(max_length=32, required=False, allow_blank=True, default="")
    email = serializers.EmailField(required=False, allow_blank=True, default="")


class ClinicUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255, required=False)
    hci_code = serializers.CharField(max_length=7, required=False, allow_blank=True, validators=[hci_code_validator])
    registration_number = serializers.CharField(max_length=64, required=False, allow_blank=True)
    address = serializers.CharField(max_length=255, required=False, allow_blank=True)
    phone = serializers.CharField(max_length=32, required=False, allow_blank=True)
    email = serializers.EmailField(required=False, allow_blank=True)


class ClinicMemberSerializer(serializers.Serializer):
    """A doctor or nurse as seen from one clinic."""
    id = serializers.UUIDField(source="profile.id")
    user_id = serializers.IntegerField(source="profile.user_id")
    name = serializers.CharField(source="profile.name")
    email = serializers.EmailField(source="profile.user.email")
    mcr_number = serializers.CharField(source="profile.mcr_number", allow_null=True)
    status = serializers.CharField(source="profile.status")
    is_primary = serializers.BooleanField()


class AssignDoctorSerializer(serializers.Serializer):
    doctor_id = serializers.UUIDField()
    is_primary = serializers.BooleanField(required=False, default=False)
