from io import StringIO

import pytest
from django.core.management import call_command

from mx_core.clinics.models import Clinic
from mx_core.iam.models import ClinicMembership, UserProfile

pytestmark = pytest.mark.django_db


def test_ensure_demo_clinic_is_idempotent():
    call_command("ensure_demo_clinic", stdout=StringIO())
    call_command("ensure_demo_clinic", stdout=StringIO())

    assert Clinic.objects.filter(hci_code="DEMO001").count() == 1
    assert UserProfile.objects.count() == 3
    # admins are not clinic members
    assert ClinicMembership.objects.count() == 2
