# tm_core/doctors/tests/test_doctors.py
from datetime import timedelta

import pytest
from django.utils import timezone

from tm_core.appointments.models import Appointment, AppointmentStatus
from tm_core.appointments.services import AppointmentService, BookingService
from tm_core.audit.models import AuditEvent
from tm_core.clinical.models import AiAnalysis
from tm_core.common.api.exceptions import ConflictError
from tm_core.doctors.models import Specialization
from tm_core.doctors.selectors import upcoming_for_doctor
from tm_core.doctors.services import SpecializationService
from tm_core.iam.models import UserProfile

pytestmark = pytest.mark.django_db


def test_specializations_are_public_to_signed_in_users(patient_client, specialization):
    r = patient_client.get("/api/v1/specializations/")

    assert r.status_code == 200
    assert [s["name"] for s in r.json()] == ["Cardiology"]


def test_only_admin_adds_specializations(patient_client, admin_profile, client_for):
    r = patient_client.post("/api/v1/specializations/", {"name": "Dermatology"}, format="json")
    assert r.status_code == 403

    r = client_for(admin_profile).post(
        "/api/v1/specializations/",
        {"name": "Dermatology", "description": "Skin"},
        format="json",
    )
    assert r.status_code == 201, r.content
    specialization = Specialization.objects.get(name="Dermatology")
    assert AuditEvent.objects.filter(event_code="specialization.created", entity_id=specialization.id).exists()


def test_duplicate_specialization_is_conflict(specialization):
    with pytest.raises(ConflictError):
        SpecializationService.create(name="Cardiology")


def test_directory_filters_by_specialization(patient_client, doctor, make_profile):
    other_spec = Specialization.objects.create(name="Neurology")
    make_profile(UserProfile.Role.DOCTOR, first_name="Neha", specialization=other_spec)

    everyone = patient_client.get("/api/v1/doctors/").json()
    cardio = patient_client.get("/api/v1/doctors/", {"specialization": str(doctor.specialization_id)}).json()

    assert everyone["count"] == 2
    assert [d["id"] for d in cardio["results"]] == [str(doctor.id)]
    assert cardio["results"][0]["specialization_name"] == "Cardiology"


def test_directory_rejects_bad_specialization_id(patient_client):
    r = patient_client.get("/api/v1/doctors/", {"specialization": "nope"})

    assert r.status_code == 400


def test_retrieve_non_doctor_is_404(patient_client, patient):
    r = patient_client.get(f"/api/v1/doctors/{patient.id}/")

    assert r.status_code == 404
    assert r.json()["error"]["code"] == "doctor_not_found"


def test_dashboard_upcoming_lists_only_open_consultations(doctor, doctor_client, patient):
    now = timezone.now()
    Appointment.objects.create(patient=patient, doctor=doctor, date=now + timedelta(days=1), title="Checkup")
    Appointment.objects.create(
        patient=patient,
        doctor=doctor,
        date=now + timedelta(days=3),
        title="Moved",
        status=AppointmentStatus.RESCHEDULED,
    )
    Appointment.objects.create(patient=patient, doctor=doctor, date=now - timedelta(days=2), title="Missed")
    Appointment.objects.create(
        patient=patient,
        doctor=doctor,
        date=now + timedelta(days=2),
        title="Done",
        status=AppointmentStatus.COMPLETED,
    )

    r = doctor_client.get("/api/v1/doctors/me/upcoming/")

    assert r.status_code == 200, r.content
    body = r.json()
    assert [a["title"] for a in body] == ["Checkup", "Moved"]
    assert body[0]["patient_name"] == "Asha Rao"


def test_rescheduled_booking_stays_on_dashboard(doctor, patient, make_subscription):
    make_subscription(patient)
    appt = BookingService.book_appointment(
        patient_id=patient.id,
        doctor_id=doctor.id,
        date=timezone.now() + timedelta(days=1),
    )
    assert [a.id for a in upcoming_for_doctor(doctor_id=doctor.id)] == [appt.id]

    AppointmentService.update(
        appointment_id=appt.id,
        patient_id=patient.id,
        date=timezone.now() + timedelta(days=3),
    )

    listed = list(upcoming_for_doctor(doctor_id=doctor.id))
    assert [a.id for a in listed] == [appt.id]
    assert listed[0].status == AppointmentStatus.RESCHEDULED


def test_dashboard_is_doctor_only(patient_client):
    assert patient_client.get("/api/v1/doctors/me/upcoming/").status_code == 403


def test_patient_summaries_cover_only_own_patients(doctor, doctor_client, patient, other_patient):
    Appointment.objects.create(patient=patient, doctor=doctor, date=timezone.now())
    AiAnalysis.objects.create(
        patient=patient,
        symptoms="cough",
        severity_score=3,
        disease_summary="Common cold",
        suggested_medications="Rest, fluids",
    )
    AiAnalysis.objects.create(
        patient=other_patient,
        symptoms="rash",
        severity_score=2,
        disease_summary="Dermatitis",
        suggested_medications="Emollient",
    )

    body = doctor_client.get("/api/v1/doctors/me/patient-summaries/").json()

    assert [s["disease_summary"] for s in body] == ["Common cold"]
    assert body[0]["patient_name"] == "Asha Rao"


def test_patient_summaries_limit(doctor, doctor_client, patient):
    Appointment.objects.create(patient=patient, doctor=doctor, date=timezone.now())
    for i in range(7):
        AiAnalysis.objects.create(
            patient=patient,
            symptoms=f"s{i}",
            severity_score=1,
            disease_summary=f"d{i}",
            suggested_medications="-",
        )

    assert len(doctor_client.get("/api/v1/doctors/me/patient-summaries/").json()) == 5
    assert len(doctor_client.get("/api/v1/doctors/me/patient-summaries/", {"limit": 2}).json()) == 2
