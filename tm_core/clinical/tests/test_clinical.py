# tm_core/clinical/tests/test_clinical.py
from datetime import timedelta

import pytest
from django.utils import timezone

from tm_core.clinical.models import MedicalRecord, Prescription

pytestmark = pytest.mark.django_db


@pytest.fixture
def record(patient, doctor):
    return MedicalRecord.objects.create(
        patient=patient,
        doctor=doctor,
        diagnosis="Hypertension",
        treatment="Lifestyle changes",
        record_date=timezone.now() - timedelta(days=1),
    )


def test_records_show_doctor_name_latest_first(patient, doctor, patient_client, record):
    MedicalRecord.objects.create(
        patient=patient,
        doctor=doctor,
        diagnosis="Follow-up",
        treatment="Continue",
        record_date=timezone.now(),
    )

    body = patient_client.get("/api/v1/clinical/records/").json()

    assert [r["diagnosis"] for r in body] == ["Follow-up", "Hypertension"]
    assert body[0]["doctor_name"] == "Meera Iyer"


def test_records_are_owner_scoped(other_patient, client_for, record):
    assert client_for(other_patient).get("/api/v1/clinical/records/").json() == []


def test_prescriptions_join_through_record(patient_client, other_patient, doctor, record):
    now = timezone.now()
    Prescription.objects.create(
        medical_record=record,
        medication="Amlodipine",
        dosage="5mg",
        start_date=now - timedelta(days=10),
        end_date=now + timedelta(days=20),
    )
    Prescription.objects.create(
        medical_record=record,
        medication="Aspirin",
        dosage="75mg",
        start_date=now,
        end_date=now + timedelta(days=30),
    )
    foreign = MedicalRecord.objects.create(
        patient=other_patient,
        doctor=doctor,
        diagnosis="Other",
        treatment="Other",
        record_date=now,
    )
    Prescription.objects.create(medical_record=foreign, medication="X", dosage="1", start_date=now, end_date=now)

    body = patient_client.get("/api/v1/clinical/prescriptions/", {"limit": 10}).json()

    assert [p["medication"] for p in body] == ["Aspirin", "Amlodipine"]


def test_prescriptions_limit(patient_client, record):
    now = timezone.now()
    for i in range(12):
        Prescription.objects.create(
            medical_record=record,
            medication=f"M{i}",
            dosage="1",
            start_date=now - timedelta(days=i),
            end_date=now,
        )

    assert len(patient_client.get("/api/v1/clinical/prescriptions/").json()) == 10


def test_doctors_do_not_use_patient_record_endpoints(doctor_client):
    assert doctor_client.get("/api/v1/clinical/records/").status_code == 403
