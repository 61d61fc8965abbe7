# mx_core/submissions/api/views.py
from __future__ import annotations

from uuid import UUID

from django.http import HttpResponse
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import NotFound, ValidationError
from rest_framework.response import Response

from mx_core.audit.selectors import audit_trail
from mx_core.common.api.pagination import WorklistPagination, paginate
from mx_core.common.permissions import ApprovalPermission, SubmissionPermission
from mx_core.common.scope import require_scope
from mx_core.iam.services.membership import actor_for
from mx_core.submissions import selectors
from mx_core.submissions.api.serializers import (
    ApproveSerializer,
    AuditEntrySerializer,
    RejectSerializer,
    SubmissionCreateSerializer,
    SubmissionSerializer,
    SubmissionUpdateSerializer,
    SubmitSerializer,
)
from mx_core.submissions.documents import render_pdf
from mx_core.submissions.filters import ExamTypeFilter, SubmissionFilter
from mx_core.submissions.models import MedicalSubmission
from mx_core.submissions.services import SubmissionInput, SubmissionService

LIST_PARAMS = [
    OpenApiParameter("status", OpenApiTypes.STR, OpenApiParameter.QUERY, required=False),
    OpenApiParameter("exam_type", OpenApiTypes.STR, OpenApiParameter.QUERY, required=False),
    OpenApiParameter("patient_name", OpenApiTypes.STR, OpenApiParameter.QUERY, required=False),
    OpenApiParameter("patient_nric", OpenApiTypes.STR, OpenApiParameter.QUERY, required=False),
    OpenApiParameter("from_date", OpenApiTypes.DATE, OpenApiParameter.QUERY, required=False),
    OpenApiParameter("to_date", OpenApiTypes.DATE, OpenApiParameter.QUERY, required=False),
    OpenApiParameter("page", OpenApiTypes.INT, OpenApiParameter.QUERY, required=False),
    OpenApiParameter("limit", OpenApiTypes.INT, OpenApiParameter.QUERY, required=False),
]

WORKLIST_PARAMS = [
    OpenApiParameter("exam_type", OpenApiTypes.STR, OpenApiParameter.QUERY, required=False),
    OpenApiParameter("page", OpenApiTypes.INT, OpenApiParameter.QUERY, required=False),
    OpenApiParameter("limit", OpenApiTypes.INT, OpenApiParameter.QUERY, required=False),
]


def _filtered(filterset_class, request, queryset):
    f = filterset_class(request.query_params, queryset=queryset)
    if not f.is_valid():
        raise ValidationError(f.errors)
    return f.qs


def _parse_pk(pk) -> UUID:
    try:
        return UUID(str(pk))
    except (TypeError, ValueError):
        raise NotFound("Submission not found.")


class _ActorMixin:
    def _actor(self, request):
        scope = require_scope(request)
        return actor_for(request.user, scope.clinic_id)

    def _get_visible(self, request, pk):
        actor = self._actor(request)
        try:
            return actor, selectors.get_submission(actor=actor, submission_id=_parse_pk(pk))
        except MedicalSubmission.DoesNotExist:
            raise NotFound("Submission not found.")


class SubmissionViewSet(_ActorMixin, viewsets.ViewSet):
    """
    Thin API layer:
    - scope + actor resolution
    - request validation
    - selectors for reads, SubmissionService for writes
    """

    permission_classes = [SubmissionPermission]
    serializer_class = SubmissionSerializer
    queryset = MedicalSubmission.objects.none()

    @extend_schema(tags=["Submissions"], parameters=LIST_PARAMS, responses={200: SubmissionSerializer(many=True)})
    def list(self, request):
        actor = self._actor(request)
        qs = _filtered(SubmissionFilter, request, selectors.list_submissions(actor=actor))
        return paginate(request, qs, SubmissionSerializer)

    @extend_schema(tags=["Submissions"], responses={200: SubmissionSerializer})
    def retrieve(self, request, pk=None):
        _, submission = self._get_visible(request, pk)
        return Response(SubmissionSerializer(submission).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["Submissions"], request=SubmissionCreateSerializer, responses={201: SubmissionSerializer})
    def create(self, request):
        actor = self._actor(request)

        s = SubmissionCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        d = s.validated_data

        submission = SubmissionService.create(
            actor=actor,
            data=SubmissionInput(
                exam_type=d["exam_type"],
                patient_name=d["patient_name"],
                patient_nric=d["patient_nric"],
                patient_dob=d["patient_dob"],
                examination_date=d.get("examination_date"),
                form_data=d.get("form_data") or {},
                assigned_doctor_id=d.get("assigned_doctor_id"),
            ),
            route_for_approval=d["route_for_approval"],
            as_draft=d["as_draft"],
        )
        return Response(SubmissionSerializer(submission).data, status=status.HTTP_201_CREATED)

    def _update(self, request, pk):
        actor = self._actor(request)

        s = SubmissionUpdateSerializer(data=request.data, partial=True)
        s.is_valid(raise_exception=True)

        submission = SubmissionService.update(actor=actor, submission_id=_parse_pk(pk), patch=dict(s.validated_data))
        return Response(SubmissionSerializer(submission).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["Submissions"], request=SubmissionUpdateSerializer, responses={200: SubmissionSerializer})
    def update(self, request, pk=None):
        return self._update(request, pk)

    @extend_schema(tags=["Submissions"], request=SubmissionUpdateSerializer, responses={200: SubmissionSerializer})
    def partial_update(self, request, pk=None):
        return self._update(request, pk)

    @extend_schema(tags=["Submissions"], parameters=WORKLIST_PARAMS, responses={200: SubmissionSerializer(many=True)})
    @action(detail=False, methods=["get"])
    def drafts(self, request):
        actor = self._actor(request)
        qs = _filtered(ExamTypeFilter, request, selectors.list_drafts(actor=actor))
        return paginate(request, qs, SubmissionSerializer)

    @extend_schema(tags=["Submissions"], parameters=WORKLIST_PARAMS, responses={200: SubmissionSerializer(many=True)})
    @action(detail=False, methods=["get"])
    def rejected(self, request):
        actor = self._actor(request)
        qs = _filtered(ExamTypeFilter, request, selectors.list_rejected_for_creator(actor=actor))
        return paginate(request, qs, SubmissionSerializer, paginator=WorklistPagination())

    @extend_schema(tags=["Submissions"], request=SubmitSerializer, responses={200: SubmissionSerializer})
    @action(detail=True, methods=["post"])
    def submit(self, request, pk=None):
        actor = self._actor(request)

        s = SubmitSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        d = s.validated_data

        submission = SubmissionService.submit(
            actor=actor,
            submission_id=_parse_pk(pk),
            assigned_doctor_id=d.get("assigned_doctor_id"),
        )
        return Response(SubmissionSerializer(submission).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["Submissions"], responses={200: AuditEntrySerializer(many=True)})
    @action(detail=True, methods=["get"])
    def history(self, request, pk=None):
        _, submission = self._get_visible(request, pk)
        events = audit_trail(submission_id=submission.id)
        return Response(
            {
                "submission_id": str(submission.id),
                "events": AuditEntrySerializer(events, many=True).data,
            },
            status=status.HTTP_200_OK,
        )

    @extend_schema(tags=["Submissions"], responses={(200, "application/pdf"): OpenApiTypes.BINARY})
    @action(detail=True, methods=["get"])
    def pdf(self, request, pk=None):
        _, submission = self._get_visible(request, pk)

        response = HttpResponse(render_pdf(submission), content_type="application/pdf")
        response["Content-Disposition"] = f'attachment; filename="submission-{submission.id}.pdf"'
        return response


class ApprovalViewSet(_ActorMixin, viewsets.ViewSet):
    """
    Doctor's review queue: pending list, rejected history, approve and reject.
    """

    permission_classes = [ApprovalPermission]
    serializer_class = SubmissionSerializer
    queryset = MedicalSubmission.objects.none()

    @extend_schema(tags=["Approvals"], parameters=WORKLIST_PARAMS, responses={200: SubmissionSerializer(many=True)})
    def list(self, request):
        actor = self._actor(request)
        qs = _filtered(ExamTypeFilter, request, selectors.list_pending_approvals(actor=actor))
        return paginate(request, qs, SubmissionSerializer, paginator=WorklistPagination())

    @extend_schema(tags=["Approvals"], parameters=WORKLIST_PARAMS, responses={200: SubmissionSerializer(many=True)})
    @action(detail=False, methods=["get"])
    def rejected(self, request):
        actor = self._actor(request)
        qs = _filtered(ExamTypeFilter, request, selectors.list_rejected_for_doctor(actor=actor))
        return paginate(request, qs, SubmissionSerializer, paginator=WorklistPagination())

    @extend_schema(tags=["Approvals"], request=ApproveSerializer, responses={200: SubmissionSerializer})
    @action(detail=True, methods=["post"])
    def approve(self, request, pk=None):
        actor = self._actor(request)

        s = ApproveSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        submission = SubmissionService.approve(
            actor=actor,
            submission_id=_parse_pk(pk),
            notes=s.validated_data.get("notes") or None,
        )
        return Response(SubmissionSerializer(submission).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["Approvals"], request=RejectSerializer, responses={200: SubmissionSerializer})
    @action(detail=True, methods=["post"])
    def reject(self, request, pk=None):
        actor = self._actor(request)

        s = RejectSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        submission = SubmissionService.reject(
            actor=actor,
            submission_id=_parse_pk(pk),
            reason=s.validated_data.get("reason"),
        )
        return Response(SubmissionSerializer(submission).data, status=status.HTTP_200_OK)
