# mx_core/iam/api/me.py

from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from mx_core.common.permissions import user_role
from mx_core.iam.api.schema_serializers import DefaultDoctorRequestSerializer, MeResponseSerializer
from mx_core.iam.scope import assert_user_membership, require_clinic_from_headers, resolve_clinic_from_headers
from mx_core.iam.services.membership import get_profile, list_user_clinics
from mx_core.iam.services.users import UserService


def _me_payload(request, active_clinic_id) -> dict:
    user = request.user
    profile = get_profile(user)
    return {
        "user": {
            "id": user.id,
            "profile_id": str(profile.id) if profile else None,
            "email": getattr(user, "email", None),
            "name": profile.name if profile else user.get_username(),
            "role": user_role(user),
            "mcr_number": profile.mcr_number if profile else None,
            "default_doctor_id": str(profile.default_doctor_id) if profile and profile.default_doctor_id else None,
            "is_superuser": bool(getattr(user, "is_superuser", False)),
        },
        "memberships": list_user_clinics(user),
        "active_clinic_id": str(active_clinic_id) if active_clinic_id else None,
    }


class MeView(APIView):
    """
    Current user, role and clinic memberships.
    X-Clinic-Id is OPTIONAL here; when sent it must be valid and the user a member.
    """
    permission_classes = [IsAuthenticated]

    @extend_schema(responses={200: MeResponseSerializer}, tags=["IAM"])
    def get(self, request):
        clinic_id = resolve_clinic_from_headers(request)
        if clinic_id is not None:
            assert_user_membership(request.user, clinic_id)

        return Response(_me_payload(request, clinic_id), status=status.HTTP_200_OK)


class DefaultDoctorView(APIView):
    """
    A nurse's default reviewing doctor, pre-assigned when routing for approval.
    """
    permission_classes = [IsAuthenticated]

    @extend_schema(request=DefaultDoctorRequestSerializer, responses={200: MeResponseSerializer}, tags=["IAM"])
    def put(self, request):
        clinic_id = require_clinic_from_headers(request)
        assert_user_membership(request.user, clinic_id)

        s = DefaultDoctorRequestSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        UserService.set_default_doctor(
            user=request.user,
            clinic_id=clinic_id,
            doctor_profile_id=s.validated_data.get("doctor_id"),
        )
        return Response(_me_payload(request, clinic_id), status=status.HTTP_200_OK)
