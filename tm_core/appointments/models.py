# tm_core/appointments/models.py
from __future__ import annotations

from django.db import models

from tm_core.billing.models import Payment
from tm_core.common.models import UUIDModel
from tm_core.iam.models import UserProfile


class AppointmentStatus(models.TextChoices):
    SCHEDULED = "scheduled", "Scheduled"
    COMPLETED = "completed", "Completed"
    CANCELED = "canceled", "Canceled"
    RESCHEDULED = "rescheduled", "Rescheduled"


class Severity(models.TextChoices):
    LOW = "low", "Low"
    MEDIUM = "medium", "Medium"
    HIGH = "high", "High"
    CRITICAL = "critical", "Critical"


class Appointment(UUIDModel):
    """
    Booked consultation. Created only by the booking service, together with its chat room.
    `payment` is the single payment whose credit funded it (null under a subscription).
    """
    title = models.CharField(max_length=255, default="Appointment")

    patient = models.ForeignKey(UserProfile, on_delete=models.CASCADE, related_name="patient_appointments")
    doctor = models.ForeignKey(UserProfile, on_delete=models.CASCADE, related_name="doctor_appointments")
    payment = models.ForeignKey(
        Payment,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="appointments",
    )

    date = models.DateTimeField(db_index=True)
    status = models.CharField(
        max_length=16,
        choices=AppointmentStatus.choices,
        default=AppointmentStatus.SCHEDULED,
        db_index=True,
    )
    severity = models.CharField(max_length=16, choices=Severity.choices, default=Severity.LOW)

    notes = models.TextField(blank=True, default="")
    ai_summary = models.TextField(blank=True, default="")

    class Meta:
        db_table = "appointments_appointment"
        indexes = [
            models.Index(fields=["patient", "date"], name="appt_patient_date_idx"),
            models.Index(fields=["doctor", "status", "date"], name="appt_doctor_status_date_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.title} {self.date:%Y-%m-%d %H:%M} ({self.status})"
