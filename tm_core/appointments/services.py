# tm_core/appointments/services.py
from __future__ import annotations

import logging
from datetime import datetime
from uuid import UUID

from django.db import transaction
from django.db.models import F
from django.utils import timezone

from tm_core.appointments.models import Appointment, AppointmentStatus, Severity
from tm_core.appointments.rules import assert_transition, is_terminal
from tm_core.audit.services import AuditService
from tm_core.billing.entitlements import EntitlementEvaluator, EntitlementKind
from tm_core.billing.models import Payment
from tm_core.billing.selectors import list_credit_payments
from tm_core.chat.models import ChatRoom
from tm_core.common.api.exceptions import (
    AppointmentNotFound,
    ConcurrentDecrementConflict,
    EntitlementExhausted,
    InvalidStatusTransition,
    PatientNotFound,
)
from tm_core.iam.models import UserProfile
from tm_core.iam.selectors import get_doctor

logger = logging.getLogger(__name__)


class BookingService:
    """
    Entitlement check + credit spend + appointment + chat room, all or nothing.

    Notes:
    - The patient row is locked for the whole attempt, so one patient's bookings serialize.
    - Credit is spent with a guarded UPDATE (remaining > 0); zero affected rows means
      another request got there first.
    - One conflict is retried with a fresh evaluation; a second one is reported as exhausted.
    """

    MAX_ATTEMPTS = 2

    @staticmethod
    def book_appointment(
        *,
        patient_id: UUID,
        doctor_id: UUID,
        date: datetime,
        notes: str | None = None,
        severity: str | None = None,
        funding_payment_id: UUID | None = None,
        title: str | None = None,
    ) -> Appointment:
        for attempt in range(1, BookingService.MAX_ATTEMPTS + 1):
            try:
                return BookingService._book_once(
                    patient_id=patient_id,
                    doctor_id=doctor_id,
                    date=date,
                    notes=notes,
                    severity=severity,
                    funding_payment_id=funding_payment_id,
                    title=title,
                )
            except ConcurrentDecrementConflict:
                logger.warning(
                    "Booking credit conflict patient_id=%s attempt=%s/%s",
                    patient_id,
                    attempt,
                    BookingService.MAX_ATTEMPTS,
                )

        raise EntitlementExhausted(reason=EntitlementExhausted.CREDITS_USED)

    @staticmethod
    @transaction.atomic
    def _book_once(
        *,
        patient_id: UUID,
        doctor_id: UUID,
        date: datetime,
        notes: str | None,
        severity: str | None,
        funding_payment_id: UUID | None,
        title: str | None,
    ) -> Appointment:
        patient = (
            UserProfile.objects.select_for_update()
            .filter(id=patient_id, role=UserProfile.Role.PATIENT)
            .first()
        )
        if patient is None:
            raise PatientNotFound()

        doctor = get_doctor(doctor_id=doctor_id)

        entitlement = EntitlementEvaluator.evaluate(patient_id=patient.id)
        if entitlement.kind == EntitlementKind.NONE:
            raise EntitlementExhausted(reason=entitlement.exhausted_reason)

        funding: Payment | None = None
        if entitlement.kind == EntitlementKind.SINGLE:
            funding = BookingService._pick_funding_payment(
                patient_id=patient.id,
                funding_payment_id=funding_payment_id,
            )
            if funding is None:
                raise ConcurrentDecrementConflict()
            BookingService._spend_credit(payment_id=funding.id)

        appointment = Appointment.objects.create(
            title=title or "Appointment",
            patient=patient,
            doctor=doctor,
            payment=funding,
            date=date,
            status=AppointmentStatus.SCHEDULED,
            severity=severity or Severity.LOW,
            notes=notes or "",
        )
        room = ChatRoom.objects.create(appointment=appointment, patient=patient, doctor=doctor)

        AuditService.log(
            event_code="appointment.booked",
            entity_type="Appointment",
            entity_id=appointment.id,
            actor_profile_id=patient.id,
            metadata={
                "doctor_id": str(doctor.id),
                "entitlement": entitlement.kind.value,
                "payment_id": str(funding.id) if funding else None,
                "chat_room_id": str(room.id),
            },
        )
        logger.info(
            "Appointment booked appointment_id=%s patient_id=%s entitlement=%s payment_id=%s",
            appointment.id,
            patient.id,
            entitlement.kind.value,
            funding.id if funding else None,
        )
        return appointment

    @staticmethod
    def _pick_funding_payment(*, patient_id: UUID, funding_payment_id: UUID | None) -> Payment | None:
        """
        Requested payment if it still carries credit, else the oldest one that does.
        """
        candidates = list_credit_payments(patient_id=patient_id)
        if funding_payment_id:
            requested = candidates.filter(id=funding_payment_id).first()
            if requested is not None:
                return requested
        return candidates.first()

    @staticmethod
    def _spend_credit(*, payment_id: UUID) -> None:
        updated = Payment.objects.filter(id=payment_id, remaining_appointments__gt=0).update(
            remaining_appointments=F("remaining_appointments") - 1,
            updated_at=timezone.now(),
        )
        if updated == 0:
            raise ConcurrentDecrementConflict()


class AppointmentService:
    """
    Patient-side edits. Every operation is scoped to the owning patient;
    someone else's appointment is indistinguishable from a missing one.
    """

    @staticmethod
    def _get_owned_for_update(*, appointment_id: UUID, patient_id: UUID) -> Appointment:
        appt = Appointment.objects.select_for_update().filter(id=appointment_id, patient_id=patient_id).first()
        if appt is None:
            raise AppointmentNotFound()
        return appt

    @staticmethod
    @transaction.atomic
    def update(
        *,
        appointment_id: UUID,
        patient_id: UUID,
        date: datetime | None = None,
        notes: str | None = None,
        status: str | None = None,
    ) -> Appointment:
        appt = AppointmentService._get_owned_for_update(appointment_id=appointment_id, patient_id=patient_id)

        date_changed = date is not None and date != appt.date
        target = status
        if date_changed and target is None:
            target = AppointmentStatus.RESCHEDULED

        if is_terminal(appt.status) and (date_changed or (target is not None and target != appt.status)):
            raise InvalidStatusTransition(detail=f"Appointment is {appt.status} and can no longer be changed.")

        if target is not None and target != appt.status:
            assert_transition(appt.status, target)

        previous_status = appt.status
        update_fields = ["updated_at"]
        if date_changed:
            appt.date = date
            update_fields.append("date")
        if notes is not None:
            appt.notes = notes
            update_fields.append("notes")
        if target is not None and target != appt.status:
            appt.status = target
            update_fields.append("status")

        appt.save(update_fields=update_fields)

        AuditService.log(
            event_code="appointment.updated",
            entity_type="Appointment",
            entity_id=appt.id,
            actor_profile_id=patient_id,
            metadata={
                "updated_fields": sorted(f for f in update_fields if f != "updated_at"),
                "from_status": previous_status,
                "to_status": appt.status,
            },
        )
        return appt

    @staticmethod
    @transaction.atomic
    def delete(*, appointment_id: UUID, patient_id: UUID) -> None:
        """
        Removes the appointment; its chat room and messages go with it.
        Spent credit is not returned.
        """
        appt = AppointmentService._get_owned_for_update(appointment_id=appointment_id, patient_id=patient_id)
        appt_id = appt.id
        appt.delete()

        AuditService.log(
            event_code="appointment.deleted",
            entity_type="Appointment",
            entity_id=appt_id,
            actor_profile_id=patient_id,
            metadata={},
        )
        logger.info("Appointment deleted appointment_id=%s patient_id=%s", appt_id, patient_id)
