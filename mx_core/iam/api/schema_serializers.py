# mx_core/iam/api/schema_serializers.py
from __future__ import annotations

from rest_framework import serializers


class LoginRequestSerializer(serializers.Serializer):
    username = serializers.CharField(help_text="Login e-mail address.")
    password = serializers.CharField()


class DetailResponseSerializer(serializers.Serializer):
    detail = serializers.CharField()


class MeUserSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    profile_id = serializers.UUIDField(allow_null=True)
    email = serializers.EmailField(allow_null=True, required=False)
    name = serializers.CharField(allow_null=True)
    role = serializers.CharField(allow_null=True)
    mcr_number = serializers.CharField(allow_null=True, required=False)
    default_doctor_id = serializers.UUIDField(allow_null=True, required=False)
    is_superuser = serializers.BooleanField()


class MembershipSerializer(serializers.Serializer):
    clinic_id = serializers.UUIDField()
    clinic_name = serializers.CharField()
    hci_code = serializers.CharField(allow_null=True)
    is_primary = serializers.BooleanField()


class MeResponseSerializer(serializers.Serializer):
    user = MeUserSerializer()
    memberships = MembershipSerializer(many=True)
    active_clinic_id = serializers.UUIDField(allow_null=True)


class DefaultDoctorRequestSerializer(serializers.Serializer):
    doctor_id = serializers.UUIDField(allow_null=True)
