# tm_core/appointments/selectors.py
from __future__ import annotations

from datetime import datetime, time
from uuid import UUID

from django.db.models import QuerySet
from django.utils import timezone

from tm_core.appointments.models import Appointment, AppointmentStatus
from tm_core.common.api.exceptions import AppointmentNotFound


def start_of_today(now: datetime | None = None) -> datetime:
    local_now = timezone.localtime(now or timezone.now())
    return timezone.make_aware(datetime.combine(local_now.date(), time.min), timezone.get_current_timezone())


def list_patient_appointments(
    *,
    patient_id: UUID,
    upcoming: bool | None = None,
    now: datetime | None = None,
) -> QuerySet[Appointment]:
    """
    upcoming=True  -> date >= start of today
    upcoming=False -> date <  start of today
    upcoming=None  -> everything
    """
    qs = Appointment.objects.select_related("doctor", "doctor__specialization", "chat_room").filter(patient_id=patient_id)

    if upcoming is not None:
        boundary = start_of_today(now)
        qs = qs.filter(date__gte=boundary) if upcoming else qs.filter(date__lt=boundary)

    return qs.order_by("-date")


def get_patient_appointment(*, patient_id: UUID, appointment_id: UUID) -> Appointment:
    appt = (
        Appointment.objects.select_related("doctor", "doctor__specialization", "chat_room")
        .filter(id=appointment_id, patient_id=patient_id)
        .first()
    )
    if appt is None:
        raise AppointmentNotFound()
    return appt


OPEN_STATUSES = (AppointmentStatus.SCHEDULED, AppointmentStatus.RESCHEDULED)


def list_doctor_upcoming(*, doctor_id: UUID, now: datetime | None = None) -> QuerySet[Appointment]:
    """
    Open consultations (scheduled or rescheduled) from the start of today on, soonest first.
    """
    return (
        Appointment.objects.select_related("patient")
        .filter(doctor_id=doctor_id, status__in=OPEN_STATUSES, date__gte=start_of_today(now))
        .order_by("date")
    )
