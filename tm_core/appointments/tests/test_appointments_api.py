# tm_core/appointments/tests/test_appointments_api.py

from datetime import timedelta

import pytest
from django.utils import timezone

from tm_core.appointments.models import Appointment

pytestmark = pytest.mark.django_db

BASE = "/api/v1/appointments"


def _payload(doctor, **extra):
    return {
        "doctor_id": str(doctor.id),
        "date": (timezone.now() + timedelta(days=1)).isoformat(),
        "notes": "headache",
        **extra,
    }


def test_book_then_exhausted_envelope(patient, doctor, patient_client, make_single_payment):
    make_single_payment(patient, remaining=1)

    r = patient_client.post(f"{BASE}/", _payload(doctor, severity="high"), format="json")
    assert r.status_code == 201, r.content
    body = r.json()
    assert body["doctor_name"] == "Meera Iyer"
    assert body["specialization_name"] == "Cardiology"
    assert body["severity"] == "high"
    assert body["chat_room_id"]

    r = patient_client.post(f"{BASE}/", _payload(doctor), format="json")
    assert r.status_code == 402
    err = r.json()["error"]
    assert err["code"] == "entitlement_exhausted"
    assert err["details"] == {"reason": "credits_used"}


def test_no_payment_reason(doctor, patient_client):
    r = patient_client.post(f"{BASE}/", _payload(doctor), format="json")

    assert r.status_code == 402
    assert r.json()["error"]["details"]["reason"] == "no_payment"


def test_upcoming_and_past_split_on_start_of_today(patient, doctor, patient_client, make_subscription):
    make_subscription(patient)
    now = timezone.now()
    Appointment.objects.create(patient=patient, doctor=doctor, date=now + timedelta(days=3), title="Soon")
    Appointment.objects.create(patient=patient, doctor=doctor, date=now - timedelta(days=3), title="Before")

    upcoming = patient_client.get(f"{BASE}/upcoming/").json()
    past = patient_client.get(f"{BASE}/past/").json()

    assert [a["title"] for a in upcoming] == ["Soon"]
    assert [a["title"] for a in past] == ["Before"]


def test_list_is_paginated_and_owner_scoped(patient, other_patient, doctor, patient_client):
    Appointment.objects.create(patient=patient, doctor=doctor, date=timezone.now())
    Appointment.objects.create(patient=other_patient, doctor=doctor, date=timezone.now())

    body = patient_client.get(f"{BASE}/").json()

    assert body["count"] == 1
    assert body["results"][0]["patient_id"] == str(patient.id)


def test_patch_reschedules(patient, doctor, patient_client):
    appt = Appointment.objects.create(patient=patient, doctor=doctor, date=timezone.now() + timedelta(days=1))
    new_date = (appt.date + timedelta(days=2)).isoformat()

    r = patient_client.patch(f"{BASE}/{appt.id}/", {"date": new_date}, format="json")

    assert r.status_code == 200, r.content
    assert r.json()["status"] == "rescheduled"


def test_patch_terminal_is_conflict(patient, doctor, patient_client):
    appt = Appointment.objects.create(
        patient=patient,
        doctor=doctor,
        date=timezone.now() + timedelta(days=1),
        status="completed",
    )

    r = patient_client.patch(f"{BASE}/{appt.id}/", {"status": "rescheduled"}, format="json")

    assert r.status_code == 409
    assert r.json()["error"]["code"] == "invalid_status_transition"


def test_delete_someone_elses_appointment_is_404(other_patient, doctor, patient_client):
    appt = Appointment.objects.create(patient=other_patient, doctor=doctor, date=timezone.now())

    r = patient_client.delete(f"{BASE}/{appt.id}/")

    assert r.status_code == 404
    assert Appointment.objects.filter(id=appt.id).exists()


def test_delete_own_appointment(patient, doctor, patient_client):
    appt = Appointment.objects.create(patient=patient, doctor=doctor, date=timezone.now())

    r = patient_client.delete(f"{BASE}/{appt.id}/")

    assert r.status_code == 204
    assert not Appointment.objects.filter(id=appt.id).exists()


def test_doctor_cannot_book(doctor, doctor_client):
    r = doctor_client.post(f"{BASE}/", _payload(doctor), format="json")

    assert r.status_code == 403
