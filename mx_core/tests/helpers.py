# mx_core/tests/helpers.py
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from mx_core.iam.constants import UserRole, UserStatus
from mx_core.iam.models import ClinicMembership, UserProfile
from mx_core.submissions.lifecycle import Actor

PASSWORD = "pass12345"

# checksum-valid identifiers
NRIC_S = "S1234567D"
NRIC_T = "T1234567J"
NRIC_M = "M0000000N"


def scoped(clinic):
    return {"HTTP_X_CLINIC_ID": str(clinic.id)}


def make_staff(*, email, name, role, clinic, mcr_number=None):
    """
    auth_user -> UserProfile -> ClinicMembership
    Admins only get a home clinic; doctors and nurses also a membership row.
    """
    User = get_user_model()
    user = User.objects.create_user(username=email, email=email, password=PASSWORD)
    profile = UserProfile.objects.create(
        user=user,
        name=name,
        role=role,
        status=UserStatus.ACTIVE,
        mcr_number=mcr_number,
        clinic=clinic,
    )
    if role != UserRole.ADMIN:
        ClinicMembership.objects.create(clinic=clinic, profile=profile, is_primary=True, is_active=True)
    return user


def actor_of(user, clinic):
    return Actor(user_id=user.id, role=UserRole(user.mx_profile.role), clinic_id=clinic.id)


def client_for(user):
    c = APIClient()
    c.force_authenticate(user=user)
    return c
