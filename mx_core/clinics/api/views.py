# mx_core/clinics/api/views.py
from __future__ import annotations

from uuid import UUID

from drf_spectacular.utils import extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import NotFound, PermissionDenied
from rest_framework.response import Response

from mx_core.clinics.api.serializers import (
    AssignDoctorSerializer,
    ClinicCreateSerializer,
    ClinicMemberSerializer,
    ClinicSerializer,
    ClinicUpdateSerializer,
)
from mx_core.clinics.models import Clinic
from mx_core.clinics.selectors import all_clinics, clinic_by_id, clinic_doctors, clinic_nurses
from mx_core.clinics.services import ClinicService, ClinicUpdate
from mx_core.common.api.pagination import paginate
from mx_core.common.permissions import ROLE_ADMIN, ClinicPermission, user_role
from mx_core.iam.services.membership import is_user_member_of_clinic
from mx_core.iam.services.users import UserService


def _clinic_or_404(pk) -> Clinic:
    try:
        return clinic_by_id(clinic_id=UUID(str(pk)))
    except (ValueError, Clinic.DoesNotExist):
        raise NotFound("Clinic not found.")


class ClinicViewSet(viewsets.ViewSet):
    """
    Clinic administration. Not clinic-scoped: admins manage every clinic.
    """

    permission_classes = [ClinicPermission]
    serializer_class = ClinicSerializer

    @extend_schema(tags=["Clinics"], responses={200: ClinicSerializer(many=True)})
    def list(self, request):
        return paginate(request, all_clinics(), ClinicSerializer)

    @extend_schema(tags=["Clinics"], responses={200: ClinicSerializer})
    def retrieve(self, request, pk=None):
        clinic = _clinic_or_404(pk)
        return Response(ClinicSerializer(clinic).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["Clinics"], request=ClinicCreateSerializer, responses={201: ClinicSerializer})
    def create(self, request):
        s = ClinicCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        d = s.validated_data

        clinic = ClinicService.create(
            name=d["name"],
            hci_code=d.get("hci_code"),
            registration_number=d.get("registration_number"),
            address=d.get("address") or "",
            phone=d.get("phone") or "",
            email=d.get("email") or "",
        )
        return Response(ClinicSerializer(clinic).data, status=status.HTTP_201_CREATED)

    def _update(self, request, pk):
        clinic = _clinic_or_404(pk)

        s = ClinicUpdateSerializer(data=request.data, partial=True)
        s.is_valid(raise_exception=True)

        clinic = ClinicService.update(clinic_id=clinic.id, patch=ClinicUpdate(**s.validated_data))
        return Response(ClinicSerializer(clinic).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["Clinics"], request=ClinicUpdateSerializer, responses={200: ClinicSerializer})
    def update(self, request, pk=None):
        return self._update(request, pk)

    @extend_schema(tags=["Clinics"], request=ClinicUpdateSerializer, responses={200: ClinicSerializer})
    def partial_update(self, request, pk=None):
        return self._update(request, pk)

    @extend_schema(tags=["Clinics"], responses={204: None})
    def destroy(self, request, pk=None):
        clinic = _clinic_or_404(pk)
        ClinicService.remove(clinic_id=clinic.id)
        return Response(status=status.HTTP_204_NO_CONTENT)

    def _assert_can_view_members(self, request, clinic: Clinic) -> None:
        if user_role(request.user) == ROLE_ADMIN:
            return
        if not is_user_member_of_clinic(user=request.user, clinic_id=clinic.id):
            raise PermissionDenied("You do not have access to the selected clinic.")

    @extend_schema(tags=["Clinics"], responses={200: ClinicMemberSerializer(many=True)})
    @action(detail=True, methods=["get"])
    def doctors(self, request, pk=None):
        clinic = _clinic_or_404(pk)
        self._assert_can_view_members(request, clinic)
        return Response(ClinicMemberSerializer(clinic_doctors(clinic_id=clinic.id), many=True).data)

    @extend_schema(tags=["Clinics"], request=AssignDoctorSerializer, responses={201: ClinicMemberSerializer})
    @doctors.mapping.post
    def assign_doctor(self, request, pk=None):
        clinic = _clinic_or_404(pk)

        s = AssignDoctorSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        membership = UserService.assign_to_clinic(
            profile_id=s.validated_data["doctor_id"],
            clinic_id=clinic.id,
            is_primary=s.validated_data["is_primary"],
        )
        return Response(ClinicMemberSerializer(membership).data, status=status.HTTP_201_CREATED)

    @extend_schema(tags=["Clinics"], responses={200: ClinicMemberSerializer(many=True)})
    @action(detail=True, methods=["get"])
    def nurses(self, request, pk=None):
        clinic = _clinic_or_404(pk)
        return Response(ClinicMemberSerializer(clinic_nurses(clinic_id=clinic.id), many=True).data)
