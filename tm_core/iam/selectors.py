# tm_core/iam/selectors.py
from __future__ import annotations

from uuid import UUID

from django.db.models import QuerySet

from tm_core.common.api.exceptions import DoctorNotFound, PatientNotFound
from tm_core.iam.models import UserProfile


def get_profile_by_external_id(*, external_id: str) -> UserProfile | None:
    return UserProfile.objects.select_related("user").filter(external_id=external_id).first()


def get_patient(*, patient_id: UUID) -> UserProfile:
    patient = UserProfile.objects.filter(id=patient_id, role=UserProfile.Role.PATIENT).first()
    if patient is None:
        raise PatientNotFound()
    return patient


def get_doctor(*, doctor_id: UUID) -> UserProfile:
    doctor = (
        UserProfile.objects.select_related("specialization")
        .filter(id=doctor_id, role=UserProfile.Role.DOCTOR)
        .first()
    )
    if doctor is None:
        raise DoctorNotFound()
    return doctor


def list_doctors(*, specialization_id: UUID | None = None) -> QuerySet[UserProfile]:
    qs = UserProfile.objects.select_related("specialization").filter(role=UserProfile.Role.DOCTOR)
    if specialization_id:
        qs = qs.filter(specialization_id=specialization_id)
    return qs.order_by("first_name", "last_name")
