# mx_core/api/urls.py
from __future__ import annotations

from django.urls import path
from rest_framework.routers import DefaultRouter

from mx_core.audit.api.views import AuditLogViewSet
from mx_core.clinics.api.views import ClinicViewSet
from mx_core.iam.api.auth import LoginView, LogoutView, RefreshView
from mx_core.iam.api.me import DefaultDoctorView, MeView
from mx_core.iam.api.users import UserViewSet
from mx_core.patients.api.views import PatientViewSet
from mx_core.submissions.api.views import ApprovalViewSet, SubmissionViewSet

router = DefaultRouter()

router.register(r"clinics", ClinicViewSet, basename="clinics")
router.register(r"users", UserViewSet, basename="users")
router.register(r"submissions", SubmissionViewSet, basename="submissions")
router.register(r"approvals", ApprovalViewSet, basename="approvals")
router.register(r"patients", PatientViewSet, basename="patients")
router.register(r"audit/logs", AuditLogViewSet, basename="audit-logs")

urlpatterns = [
    # Auth + /me
    path("auth/login/", LoginView.as_view(), name="login"),
    path("auth/refresh/", RefreshView.as_view(), name="refresh"),
    path("auth/logout/", LogoutView.as_view(), name="logout"),
    path("me/", MeView.as_view(), name="me"),
    path("me/default-doctor/", DefaultDoctorView.as_view(), name="me-default-doctor"),

    # Router URLs last (so explicit paths win if ever overlapping)
    *router.urls,
]
