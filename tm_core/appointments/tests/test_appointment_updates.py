# tm_core/appointments/tests/test_appointment_updates.py

from datetime import timedelta

import pytest
from django.utils import timezone

from tm_core.appointments.models import Appointment, AppointmentStatus
from tm_core.appointments.rules import can_transition, is_terminal
from tm_core.appointments.services import AppointmentService, BookingService
from tm_core.chat.models import ChatMessage, ChatRoom
from tm_core.common.api.exceptions import AppointmentNotFound, InvalidStatusTransition

pytestmark = pytest.mark.django_db


@pytest.fixture
def appointment(patient, doctor, make_subscription):
    make_subscription(patient)
    return BookingService.book_appointment(
        patient_id=patient.id,
        doctor_id=doctor.id,
        date=timezone.now() + timedelta(days=2),
    )


def test_date_change_marks_rescheduled(patient, appointment):
    new_date = appointment.date + timedelta(days=3)

    updated = AppointmentService.update(appointment_id=appointment.id, patient_id=patient.id, date=new_date)

    assert updated.date == new_date
    assert updated.status == AppointmentStatus.RESCHEDULED


def test_notes_only_edit_keeps_status(patient, appointment):
    updated = AppointmentService.update(appointment_id=appointment.id, patient_id=patient.id, notes="fasting")

    assert updated.notes == "fasting"
    assert updated.status == AppointmentStatus.SCHEDULED


def test_explicit_status_wins_over_date_change(patient, appointment):
    updated = AppointmentService.update(
        appointment_id=appointment.id,
        patient_id=patient.id,
        date=appointment.date + timedelta(hours=1),
        status=AppointmentStatus.CANCELED,
    )

    assert updated.status == AppointmentStatus.CANCELED


@pytest.mark.parametrize("terminal", [AppointmentStatus.COMPLETED, AppointmentStatus.CANCELED])
def test_terminal_appointments_cannot_move(patient, appointment, terminal):
    AppointmentService.update(appointment_id=appointment.id, patient_id=patient.id, status=terminal)

    with pytest.raises(InvalidStatusTransition):
        AppointmentService.update(
            appointment_id=appointment.id,
            patient_id=patient.id,
            date=appointment.date + timedelta(days=1),
        )

    with pytest.raises(InvalidStatusTransition):
        AppointmentService.update(
            appointment_id=appointment.id,
            patient_id=patient.id,
            status=AppointmentStatus.SCHEDULED,
        )

    appointment.refresh_from_db()
    assert appointment.status == terminal


def test_terminal_appointment_still_accepts_notes(patient, appointment):
    AppointmentService.update(appointment_id=appointment.id, patient_id=patient.id, status=AppointmentStatus.COMPLETED)

    updated = AppointmentService.update(appointment_id=appointment.id, patient_id=patient.id, notes="follow up in 2w")

    assert updated.notes == "follow up in 2w"
    assert updated.status == AppointmentStatus.COMPLETED


def test_rescheduled_cannot_go_back_to_scheduled(patient, appointment):
    AppointmentService.update(
        appointment_id=appointment.id,
        patient_id=patient.id,
        date=appointment.date + timedelta(days=1),
    )

    with pytest.raises(InvalidStatusTransition):
        AppointmentService.update(appointment_id=appointment.id, patient_id=patient.id, status=AppointmentStatus.SCHEDULED)


def test_other_patient_sees_not_found(other_patient, appointment):
    with pytest.raises(AppointmentNotFound):
        AppointmentService.update(appointment_id=appointment.id, patient_id=other_patient.id, notes="mine now")

    with pytest.raises(AppointmentNotFound):
        AppointmentService.delete(appointment_id=appointment.id, patient_id=other_patient.id)

    assert Appointment.objects.filter(id=appointment.id).exists()


def test_delete_cascades_to_chat_and_keeps_credit_spent(patient, doctor, make_single_payment):
    payment = make_single_payment(patient, remaining=1)
    appt = BookingService.book_appointment(
        patient_id=patient.id,
        doctor_id=doctor.id,
        date=timezone.now() + timedelta(days=1),
    )
    room = ChatRoom.objects.get(appointment=appt)
    ChatMessage.objects.create(room=room, sender=patient, content="hello")

    AppointmentService.delete(appointment_id=appt.id, patient_id=patient.id)

    assert not Appointment.objects.filter(id=appt.id).exists()
    assert not ChatRoom.objects.filter(id=room.id).exists()
    assert ChatMessage.objects.count() == 0
    payment.refresh_from_db()
    assert payment.remaining_appointments == 0


def test_transition_table():
    assert can_transition(AppointmentStatus.SCHEDULED, AppointmentStatus.RESCHEDULED)
    assert can_transition(AppointmentStatus.RESCHEDULED, AppointmentStatus.COMPLETED)
    assert not can_transition(AppointmentStatus.COMPLETED, AppointmentStatus.CANCELED)
    assert not can_transition(AppointmentStatus.CANCELED, AppointmentStatus.SCHEDULED)
    assert is_terminal(AppointmentStatus.COMPLETED)
    assert is_terminal(AppointmentStatus.CANCELED)
    assert not is_terminal(AppointmentStatus.RESCHEDULED)
