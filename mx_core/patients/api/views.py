# mx_core/patients/api/views.py
from __future__ import annotations

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import NotFound, ValidationError
from rest_framework.response import Response

from mx_core.common import nric
from mx_core.common.permissions import PatientPermission
from mx_core.common.scope import require_scope
from mx_core.iam.services.membership import actor_for
from mx_core.patients.api.serializers import PatientInfoSerializer
from mx_core.patients.selectors import lookup_by_nric


class PatientViewSet(viewsets.ViewSet):
    """
    Patients have no table of their own: details come from earlier submissions.
    """

    permission_classes = [PatientPermission]

    @extend_schema(
        tags=["Patients"],
        parameters=[
            OpenApiParameter("nric", OpenApiTypes.STR, OpenApiParameter.QUERY, required=True),
        ],
        responses={200: PatientInfoSerializer},
    )
    @action(detail=False, methods=["get"])
    def lookup(self, request):
        scope = require_scope(request)
        actor_for(request.user, scope.clinic_id)

        value = request.query_params.get("nric") or ""
        if not nric.validate(value):
            raise ValidationError({"nric": "Invalid NRIC/FIN."})

        info = lookup_by_nric(clinic_id=scope.clinic_id, value=value)
        if info is None:
            raise NotFound("No previous examination found for this NRIC/FIN.")

        return Response(PatientInfoSerializer(info).data, status=status.HTTP_200_OK)
