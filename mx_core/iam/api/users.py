# mx_core/iam/api/users.py
from __future__ import annotations

from uuid import UUID

from drf_spectacular.utils import extend_schema
from rest_framework import serializers, status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import NotFound
from rest_framework.response import Response

from mx_core.clinics.api.serializers import ClinicMemberSerializer
from mx_core.clinics.selectors import clinic_doctors
from mx_core.common.api.pagination import paginate
from mx_core.common.permissions import UserPermission
from mx_core.common.scope import require_scope
from mx_core.iam.constants import UserRole, UserStatus
from mx_core.iam.models import UserProfile
from mx_core.iam.selectors import clinic_users
from mx_core.iam.services.membership import actor_for
from mx_core.iam.services.users import UserService, UserUpdate


class UserSerializer(serializers.ModelSerializer):
    email = serializers.EmailField(source="user.email", read_only=True)
    user_id = serializers.IntegerField(read_only=True)
    clinics = serializers.SerializerMethodField()

    class Meta:
        model = UserProfile
        fields = [
            "id",
            "user_id",
            "email",
            "name",
            "role",
            "status",
            "mcr_number",
            "clinic_id",
            "clinics",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_clinics(self, obj) -> list[dict]:
        return [
            {"clinic_id": str(m.clinic_id), "clinic_name": m.clinic.name, "is_primary": m.is_primary}
            for m in obj.memberships.all()
            if m.is_active
        ]


class UserCreateSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(min_length=8, write_only=True)
    name = serializers.CharField(max_length=255)
    role = serializers.ChoiceField(choices=UserRole.choices)
    mcr_number = serializers.CharField(max_length=16, required=False, allow_blank=True, allow_null=True)


class UserUpdateSerializer(serializers.Serializer):
    email = serializers.EmailField(required=False)
    password = serializers.CharField(min_length=8, required=False, write_only=True)
    name = serializers.CharField(max_length=255, required=False)
    role = serializers.ChoiceField(choices=UserRole.choices, required=False)
    status = serializers.ChoiceField(choices=UserStatus.choices, required=False)
    mcr_number = serializers.CharField(max_length=16, required=False, allow_blank=True)


def _parse_pk(pk) -> UUID:
    try:
        return UUID(str(pk))
    except (TypeError, ValueError):
        raise NotFound("User not found.")


class UserViewSet(viewsets.ViewSet):
    """
    Admin user management inside the active clinic.
    """

    permission_classes = [UserPermission]
    serializer_class = UserSerializer

    def _clinic_id(self, request) -> UUID:
        scope = require_scope(request)
        actor_for(request.user, scope.clinic_id)
        return scope.clinic_id

    def _get(self, clinic_id: UUID, pk) -> UserProfile:
        try:
            return clinic_users(clinic_id=clinic_id).get(id=_parse_pk(pk))
        except UserProfile.DoesNotExist:
            raise NotFound("User not found.")

    @extend_schema(tags=["Users"], responses={200: UserSerializer(many=True)})
    def list(self, request):
        clinic_id = self._clinic_id(request)
        return paginate(request, clinic_users(clinic_id=clinic_id), UserSerializer)

    @extend_schema(tags=["Users"], responses={200: UserSerializer})
    def retrieve(self, request, pk=None):
        clinic_id = self._clinic_id(request)
        return Response(UserSerializer(self._get(clinic_id, pk)).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["Users"], request=UserCreateSerializer, responses={201: UserSerializer})
    def create(self, request):
        clinic_id = self._clinic_id(request)

        s = UserCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        d = s.validated_data

        profile = UserService.create(
            clinic_id=clinic_id,
            email=d["email"],
            password=d["password"],
            name=d["name"],
            role=d["role"],
            mcr_number=d.get("mcr_number"),
        )
        return Response(UserSerializer(profile).data, status=status.HTTP_201_CREATED)

    def _update(self, request, pk):
        clinic_id = self._clinic_id(request)
        profile = self._get(clinic_id, pk)

        s = UserUpdateSerializer(data=request.data, partial=True)
        s.is_valid(raise_exception=True)

        profile = UserService.update(
            clinic_id=clinic_id,
            profile_id=profile.id,
            patch=UserUpdate(**s.validated_data),
        )
        return Response(UserSerializer(profile).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["Users"], request=UserUpdateSerializer, responses={200: UserSerializer})
    def update(self, request, pk=None):
        return self._update(request, pk)

    @extend_schema(tags=["Users"], request=UserUpdateSerializer, responses={200: UserSerializer})
    def partial_update(self, request, pk=None):
        return self._update(request, pk)

    @extend_schema(tags=["Users"], responses={204: None})
    def destroy(self, request, pk=None):
        clinic_id = self._clinic_id(request)
        profile = self._get(clinic_id, pk)
        UserService.remove(clinic_id=clinic_id, profile_id=profile.id)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(tags=["Users"], responses={200: ClinicMemberSerializer(many=True)})
    @action(detail=False, methods=["get"])
    def doctors(self, request):
        clinic_id = self._clinic_id(request)
        return Response(ClinicMemberSerializer(clinic_doctors(clinic_id=clinic_id), many=True).data)
