# tm_core/clinical/selectors.py
from __future__ import annotations

from uuid import UUID

from django.db.models import QuerySet

from tm_core.appointments.models import Appointment
from tm_core.clinical.models import AiAnalysis, MedicalRecord, Prescription


def list_patient_records(*, patient_id: UUID) -> QuerySet[MedicalRecord]:
    return MedicalRecord.objects.select_related("doctor").filter(patient_id=patient_id).order_by("-record_date")


def list_patient_prescriptions(*, patient_id: UUID) -> QuerySet[Prescription]:
    # Prescriptions belong to the patient through their medical record.
    return (
        Prescription.objects.select_related("medical_record")
        .filter(medical_record__patient_id=patient_id)
        .order_by("-start_date")
    )


def list_patient_summaries_for_doctor(*, doctor_id: UUID) -> QuerySet[AiAnalysis]:
    """
    AI triage rows of every patient who has at least one appointment with the doctor.
    """
    patient_ids = Appointment.objects.filter(doctor_id=doctor_id).values("patient_id")
    return AiAnalysis.objects.select_related("patient").filter(patient_id__in=patient_ids).order_by("-created_at")
