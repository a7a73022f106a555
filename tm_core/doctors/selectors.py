# tm_core/doctors/selectors.py
from __future__ import annotations

from uuid import UUID

from django.db.models import QuerySet

from tm_core.appointments.models import Appointment
from tm_core.appointments.selectors import list_doctor_upcoming
from tm_core.doctors.models import Specialization
from tm_core.iam.models import UserProfile
from tm_core.iam.selectors import list_doctors


def list_specializations() -> QuerySet[Specialization]:
    return Specialization.objects.all().order_by("name")


def list_directory(*, specialization_id: UUID | None = None) -> QuerySet[UserProfile]:
    return list_doctors(specialization_id=specialization_id)


def upcoming_for_doctor(*, doctor_id: UUID, limit: int = 10) -> QuerySet[Appointment]:
    """
    Dashboard widget: the doctor's open consultations with patient names.
    """
    return list_doctor_upcoming(doctor_id=doctor_id)[:limit]
